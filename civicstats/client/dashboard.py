from __future__ import annotations

import logging
from typing import Any

import httpx

from ..models import Category
from .cache import ClientCache

logger = logging.getLogger(__name__)


class DashboardError(Exception):
    """The dashboard API answered with an error body."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class DashboardClient:
    """
    Synchronous client for the overview and view endpoints.

    Responses are kept in a ``ClientCache`` keyed by request path. ``refresh``
    drops the cached copy and re-reads the overview with the client cache
    bypassed; server-side recomputation is the admin ``/cache/refresh`` route.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        http_client: httpx.Client | None = None,
        cache: ClientCache | None = None,
    ) -> None:
        if http_client is None and base_url is None:
            raise ValueError("DashboardClient needs a base_url or an http_client")
        self._http = http_client or httpx.Client(base_url=base_url)
        self.cache = cache if cache is not None else ClientCache()

    @staticmethod
    def overview_path(category: Category | str) -> str:
        slug = category.slug if isinstance(category, Category) else Category.parse(category).slug
        return f"/{slug}/overview"

    @staticmethod
    def view_path(name: str) -> str:
        domain, _, view = name.partition(":")
        return f"/{domain}/{view}"

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.reason_phrase
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return response.reason_phrase

    def _get(self, path: str, skip_cache: bool) -> dict[str, Any]:
        if not skip_cache:
            cached = self.cache.get(path)
            if cached is not None:
                return cached

        response = self._http.get(path)
        if not response.is_success:
            raise DashboardError(response.status_code, self._error_message(response))

        body = response.json()
        self.cache.set(path, body)
        return body

    def overview(self, category: Category | str, skip_cache: bool = False) -> dict[str, Any]:
        return self._get(self.overview_path(category), skip_cache)

    def view(self, name: str, skip_cache: bool = False) -> dict[str, Any]:
        """Fetch a derived view such as ``"business:boroughs"``."""
        return self._get(self.view_path(name), skip_cache)

    def refresh(self, category: Category | str) -> dict[str, Any]:
        path = self.overview_path(category)
        self.cache.clear(path)
        logger.info("Refreshing %s", path)
        return self.overview(category, skip_cache=True)

    def close(self) -> None:
        self._http.close()
