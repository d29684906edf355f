from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from ..cache.base import SnapshotBackend, ViewCache
from ..cache.snapshot_store import CategorySnapshot
from ..gateway.datasets import DatasetSpec
from ..gateway.soda_client import RawRecord, SodaClient, UpstreamUnavailable
from ..models import Category
from .domains import PIPELINES, VIEWS, DerivedView, DomainPipeline

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NoDataAvailable(Exception):
    """Every dataset behind a category or view came back empty."""

    def __init__(self, subject: str) -> None:
        super().__init__(f"No data available for {subject}")
        self.subject = subject


@dataclass
class ClearResult:
    cleared_keys: list[str] = field(default_factory=list)
    cleared_views: int = 0

    @property
    def cleared_count(self) -> int:
        return len(self.cleared_keys)


def snapshot_payload(snapshot: CategorySnapshot) -> dict[str, Any]:
    """Response body for an overview: the aggregate plus its ISO-8601 timestamp."""
    return {**snapshot.cached_data, "last_updated": snapshot.last_updated.isoformat()}


class Orchestrator:
    """
    Per-category read-through policy over the snapshot store.

    ``get_overview`` returns the stored snapshot when there is one. On a miss
    it fetches every dataset the category needs concurrently, treating a
    failed fetch as an empty dataset, aggregates, upserts and returns. Only
    when *every* dataset is empty does it raise ``NoDataAvailable``.

    Store access and aggregation run in worker threads so a slow category
    never stalls requests for another.

    Concurrent misses for the same category are not coalesced: each runs its
    own fetch and aggregation and the last upsert wins.
    """

    def __init__(
        self,
        gateway: SodaClient,
        snapshots: SnapshotBackend,
        memory_cache: ViewCache,
        *,
        pipelines: dict[Category, DomainPipeline] = PIPELINES,
        views: dict[str, DerivedView] = VIEWS,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._gateway = gateway
        self._snapshots = snapshots
        self._memory = memory_cache
        self._pipelines = pipelines
        self._views = views
        self._today = today
        self._now = now

    @property
    def pipelines(self) -> dict[Category, DomainPipeline]:
        return self._pipelines

    @property
    def views(self) -> dict[str, DerivedView]:
        return self._views

    # ── Fetch ────────────────────────────────────────────────────────────

    async def _fetch_one(self, spec: DatasetSpec) -> list[RawRecord]:
        try:
            return await self._gateway.fetch(spec)
        except UpstreamUnavailable:
            logger.warning("Dataset %s unavailable, continuing without it", spec.name, exc_info=True)
            return []

    async def _fetch_all(self, specs: Iterable[DatasetSpec]) -> dict[str, list[RawRecord]]:
        specs = list(specs)
        logger.info("Fetching %d datasets: %s", len(specs), ", ".join(s.name for s in specs))
        results = await asyncio.gather(*(self._fetch_one(spec) for spec in specs))
        return {spec.name: records for spec, records in zip(specs, results)}

    # ── Overviews ────────────────────────────────────────────────────────

    async def get_overview(self, category: Category) -> CategorySnapshot:
        cached = await asyncio.to_thread(self._snapshots.get, category)
        if cached is not None:
            logger.info("Snapshot hit category=%s", category.value)
            return cached
        logger.info("Snapshot miss category=%s", category.value)
        return await self._compute(category)

    async def refresh(self, category: Category) -> CategorySnapshot:
        """Drop the category's cached state and recompute it from source."""
        await asyncio.to_thread(self._snapshots.delete, category)
        self._memory.delete_prefix(f"{category.slug}:")
        return await self._compute(category)

    async def _compute(self, category: Category) -> CategorySnapshot:
        pipeline = self._pipelines[category]
        raw = await self._fetch_all(pipeline.datasets)
        if not any(raw.values()):
            raise NoDataAvailable(category.value)
        data = await asyncio.to_thread(pipeline.run, raw, self._today())
        return await asyncio.to_thread(self._snapshots.upsert, category, data)

    # ── Derived views ────────────────────────────────────────────────────

    async def get_view(self, name: str) -> dict[str, Any]:
        view = self._views[name]
        cached = self._memory.get(name)
        if cached is not None:
            logger.info("View hit %s", name)
            return cached

        logger.info("View miss %s", name)
        raw = await self._fetch_all(view.datasets)
        if not any(raw.values()):
            raise NoDataAvailable(name)
        built = await asyncio.to_thread(view.build, raw)
        payload = {**built, "last_updated": self._now().isoformat()}
        self._memory.set(name, payload)
        return payload

    # ── Administration ───────────────────────────────────────────────────

    def clear(self, category: Category | None = None) -> ClearResult:
        if category is not None:
            deleted = self._snapshots.delete(category)
            views = self._memory.delete_prefix(f"{category.slug}:")
            return ClearResult(cleared_keys=[category.value] if deleted else [], cleared_views=views)

        keys = [snapshot.category.value for snapshot in self._snapshots.list_all()]
        self._snapshots.delete_all()
        views = self._memory.clear()
        return ClearResult(cleared_keys=keys, cleared_views=views)

    def is_cached(self, category: Category) -> CategorySnapshot | None:
        return self._snapshots.get(category)

    def snapshots(self) -> list[CategorySnapshot]:
        return self._snapshots.list_all()

    def memory_stats(self) -> dict[str, Any]:
        return self._memory.stats()
