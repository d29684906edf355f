"""
Durable per-category snapshots of the last computed aggregate.

One row per category, overwritten on every recomputation and removed only by
an explicit clear. There is no expiry and no optimistic locking: concurrent
upserts for the same category are last-write-wins.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import sqlalchemy as sa
from sqlalchemy import Engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..models import Category
from .config import DEFAULT_CACHE_CONFIG, CacheConfig

logger = logging.getLogger(__name__)

METADATA = sa.MetaData()

category_snapshots = sa.Table(
    "category_snapshots",
    METADATA,
    sa.Column("category", sa.String(32), primary_key=True),
    sa.Column("cached_data", sa.JSON(), nullable=False),
    sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back out.
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


@dataclass(frozen=True)
class CategorySnapshot:
    category: Category
    cached_data: dict[str, Any]
    last_updated: datetime


def build_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Engine for ``database_url``; in-memory SQLite shares one connection across threads."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return sa.create_engine(database_url, echo=echo, future=True, pool_pre_ping=True)

    connect_args: dict[str, Any] = {"check_same_thread": False}
    if url.database in (None, "", ":memory:"):
        return sa.create_engine(
            database_url, echo=echo, future=True, connect_args=connect_args, poolclass=StaticPool
        )
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return sa.create_engine(database_url, echo=echo, future=True, connect_args=connect_args)


class SnapshotStore:
    """CRUD helpers around the ``category_snapshots`` table."""

    def __init__(
        self,
        engine: Engine | None = None,
        *,
        config: CacheConfig = DEFAULT_CACHE_CONFIG,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._engine = engine or build_engine(config.database_url)
        METADATA.create_all(self._engine)
        self._session_factory = sessionmaker(bind=self._engine, autoflush=False, autocommit=False, future=True)
        self._clock = clock

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @staticmethod
    def _to_snapshot(row: Any) -> CategorySnapshot:
        return CategorySnapshot(
            category=Category(row.category),
            cached_data=row.cached_data,
            last_updated=_as_utc(row.last_updated),
        )

    def get(self, category: Category) -> CategorySnapshot | None:
        with self._session_scope() as session:
            row = session.execute(
                sa.select(category_snapshots).where(category_snapshots.c.category == category.value)
            ).first()
            return self._to_snapshot(row) if row else None

    def upsert(self, category: Category, data: dict[str, Any]) -> CategorySnapshot:
        """Insert or overwrite the snapshot for ``category``, stamped with the current time."""
        timestamp = self._clock()
        with self._session_scope() as session:
            existing = session.execute(
                sa.select(category_snapshots.c.category).where(category_snapshots.c.category == category.value)
            ).first()
            if existing:
                session.execute(
                    sa.update(category_snapshots)
                    .where(category_snapshots.c.category == category.value)
                    .values(cached_data=data, last_updated=timestamp)
                )
            else:
                session.execute(
                    sa.insert(category_snapshots).values(
                        category=category.value, cached_data=data, last_updated=timestamp
                    )
                )
        logger.info("Stored snapshot category=%s", category.value)
        return CategorySnapshot(category=category, cached_data=data, last_updated=timestamp)

    def delete(self, category: Category) -> bool:
        with self._session_scope() as session:
            result = session.execute(
                sa.delete(category_snapshots).where(category_snapshots.c.category == category.value)
            )
            deleted = result.rowcount > 0
        if deleted:
            logger.info("Deleted snapshot category=%s", category.value)
        return deleted

    def delete_all(self) -> int:
        with self._session_scope() as session:
            count = session.execute(sa.delete(category_snapshots)).rowcount
        logger.info("Deleted %d snapshots", count)
        return count

    def list_all(self) -> list[CategorySnapshot]:
        with self._session_scope() as session:
            rows = session.execute(
                sa.select(category_snapshots).order_by(category_snapshots.c.category.asc())
            ).all()
            return [self._to_snapshot(row) for row in rows]

    # Cache protocol

    def set(self, key: Category, value: dict[str, Any]) -> None:
        self.upsert(key, value)

    def clear(self) -> int:
        return self.delete_all()
