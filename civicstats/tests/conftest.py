from __future__ import annotations

import os

# Keep the module-level app off the on-disk database.
os.environ.setdefault("CIVICSTATS_DATABASE_URL", "sqlite:///:memory:")

from datetime import date  # noqa: E402

import pytest  # noqa: E402

from civicstats.cache.memory import MemoryCache  # noqa: E402
from civicstats.cache.snapshot_store import SnapshotStore, build_engine  # noqa: E402
from civicstats.gateway.soda_client import UpstreamUnavailable  # noqa: E402
from civicstats.pipeline.orchestrator import Orchestrator  # noqa: E402

TODAY = date(2024, 6, 15)


class FakeGateway:
    """Stands in for ``SodaClient``: canned rows per dataset name, optional failures."""

    def __init__(self, data: dict[str, list[dict[str, str]]] | None = None, failing: tuple[str, ...] = ()):
        self.data = data or {}
        self.failing = set(failing)
        self.calls: list[str] = []

    async def fetch(self, dataset, limit=None):
        self.calls.append(dataset.name)
        if dataset.name in self.failing:
            raise UpstreamUnavailable(dataset.name, "SODA API error: 503 Service Unavailable")
        return [dict(row) for row in self.data.get(dataset.name, [])]


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def snapshot_store() -> SnapshotStore:
    return SnapshotStore(build_engine("sqlite:///:memory:"))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def make_orchestrator(
    gateway: FakeGateway,
    store: SnapshotStore | None = None,
    memory: MemoryCache | None = None,
    **kwargs,
):
    kwargs.setdefault("today", lambda: TODAY)
    return Orchestrator(
        gateway,
        store or SnapshotStore(build_engine("sqlite:///:memory:")),
        memory or MemoryCache(),
        **kwargs,
    )
