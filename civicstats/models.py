from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Category(str, Enum):
    BUSINESS = "BUSINESS"
    EDUCATION = "EDUCATION"
    HOUSING = "HOUSING"
    HEALTH = "HEALTH"
    PUBLIC_SAFETY = "PUBLIC_SAFETY"
    ENVIRONMENT = "ENVIRONMENT"
    TRANSPORTATION = "TRANSPORTATION"

    @property
    def slug(self) -> str:
        """URL segment and cache-key prefix, e.g. ``"safety"`` for PUBLIC_SAFETY."""
        return "safety" if self is Category.PUBLIC_SAFETY else self.value.lower()

    @classmethod
    def parse(cls, value: str) -> Category:
        """Accept either the enum value (``PUBLIC_SAFETY``) or its slug (``safety``)."""
        raw = value.strip()
        for category in cls:
            if raw.upper() == category.value or raw.lower() == category.slug:
                return category
        raise ValueError(f"Unknown category: {value!r}")


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class CategoryInfo(BaseModel):
    category: Category
    slug: str
    datasets: list[str]
    cached: bool
    last_updated: str | None = None


class ErrorResponse(BaseModel):
    error: str


class CacheClearResponse(BaseModel):
    status: str
    cleared_keys: list[str]
    cleared_count: int
    cleared_views: int = 0


class CacheStatsResponse(BaseModel):
    cache_size: int
    cached_keys: list[str]
    hits: int
    misses: int
    hit_rate: float
    snapshots: list[dict[str, Any]]
    timestamp: str
