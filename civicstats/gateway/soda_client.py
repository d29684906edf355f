from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import DEFAULT_GATEWAY_CONFIG, GatewayConfig
from .datasets import DatasetSpec

logger = logging.getLogger(__name__)

RawRecord = dict[str, str]


class UpstreamUnavailable(Exception):
    """The remote data service could not produce a usable response."""

    def __init__(self, dataset: str, reason: str) -> None:
        super().__init__(f"{dataset}: {reason}")
        self.dataset = dataset
        self.reason = reason


def _coerce_record(row: Any) -> RawRecord | None:
    """Flatten one JSON row into a string-keyed map of string values."""
    if not isinstance(row, dict):
        return None
    record: RawRecord = {}
    for key, value in row.items():
        if value is None or isinstance(value, (dict, list)):
            continue
        if isinstance(value, bool):
            record[str(key)] = "true" if value else "false"
        else:
            record[str(key)] = str(value)
    return record


class SodaClient:
    """
    Thin async client over the Socrata Open Data API.

    The client performs no retries. Any transport error, non-2xx status or
    unexpected body raises ``UpstreamUnavailable``; deciding whether that means
    "zero records" is the caller's job.
    """

    def __init__(
        self,
        config: GatewayConfig = DEFAULT_GATEWAY_CONFIG,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._http_client = http_client

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._config.app_token:
            headers["X-App-Token"] = self._config.app_token
        return headers

    def _params(self, dataset: DatasetSpec, limit: int | None) -> dict[str, str]:
        params = {"$limit": str(limit or dataset.limit or self._config.default_limit)}
        if dataset.order:
            params["$order"] = dataset.order
        if dataset.where:
            params["$where"] = dataset.where
        return params

    async def fetch(self, dataset: DatasetSpec, limit: int | None = None) -> list[RawRecord]:
        """Fetch up to ``limit`` rows of ``dataset``."""
        return await self.query(dataset.host, dataset.resource_id, self._params(dataset, limit), name=dataset.name)

    async def query(
        self,
        host: str,
        resource_id: str,
        params: dict[str, str],
        name: str | None = None,
    ) -> list[RawRecord]:
        """Run a raw SoQL query against ``resource_id`` on ``host``."""
        label = name or resource_id
        url = f"{self._config.host_url(host)}/{resource_id}"

        try:
            if self._http_client is not None:
                response = await self._http_client.get(url, params=params, headers=self._headers())
            else:
                async with httpx.AsyncClient(timeout=self._config.timeout) as client:
                    response = await client.get(url, params=params, headers=self._headers())
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(label, f"transport error: {exc}") from exc

        if not response.is_success:
            raise UpstreamUnavailable(label, f"SODA API error: {response.status_code} {response.reason_phrase}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamUnavailable(label, "response body is not JSON") from exc

        if not isinstance(payload, list):
            raise UpstreamUnavailable(label, "response body is not a list of records")

        records = [r for r in (_coerce_record(row) for row in payload) if r is not None]
        logger.info("Fetched %d records from %s", len(records), label)
        return records
