from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Cache(Protocol):
    """get/set/clear shared by the snapshot store, the process cache and client caches."""

    def get(self, key: Any) -> Any | None: ...

    def set(self, key: Any, value: Any) -> None: ...

    def clear(self) -> int: ...


@runtime_checkable
class SnapshotBackend(Cache, Protocol):
    """Durable per-category snapshots, as the orchestrator reads and writes them."""

    def upsert(self, category: Any, data: dict[str, Any]) -> Any: ...

    def delete(self, category: Any) -> bool: ...

    def delete_all(self) -> int: ...

    def list_all(self) -> list[Any]: ...


@runtime_checkable
class ViewCache(Cache, Protocol):
    """Process-local store for derived views, namespaced ``<domain>:<view>``."""

    def delete_prefix(self, prefix: str) -> int: ...

    def stats(self) -> dict[str, Any]: ...
