from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Any

from ..aggregation import business, education, environment, health, housing, safety, transportation
from ..aggregation.common import Datasets
from ..gateway import datasets as ds
from ..gateway.datasets import DatasetSpec
from ..models import Category

Aggregator = Callable[..., dict[str, Any]]


@dataclass(frozen=True)
class DomainPipeline:
    """The datasets one category pulls and the engine that turns them into an aggregate."""

    category: Category
    datasets: tuple[DatasetSpec, ...]
    aggregate: Aggregator

    def run(self, raw: Datasets, today: date | None = None) -> dict[str, Any]:
        return self.aggregate(raw, today=today)


@dataclass(frozen=True)
class DerivedView:
    """A cheap projection kept only in the process cache under ``name``."""

    name: str
    category: Category
    datasets: tuple[DatasetSpec, ...]
    build: Callable[[Datasets], dict[str, Any]]


PIPELINES: dict[Category, DomainPipeline] = {
    p.category: p
    for p in (
        DomainPipeline(
            Category.BUSINESS,
            (ds.CERTIFIED_BUSINESSES, ds.BUSINESS_ESTABLISHMENTS),
            business.aggregate,
        ),
        DomainPipeline(Category.EDUCATION, (ds.SCHOOL_DEMOGRAPHICS,), education.aggregate),
        DomainPipeline(
            Category.HOUSING,
            (ds.DOB_PERMITS, ds.HOUSING_VIOLATIONS, ds.HOUSING_NEW_YORK),
            housing.aggregate,
        ),
        DomainPipeline(
            Category.HEALTH,
            (ds.RESTAURANT_INSPECTIONS, ds.LEADING_CAUSES_OF_DEATH, ds.SAFETY_EVENTS),
            health.aggregate,
        ),
        DomainPipeline(
            Category.PUBLIC_SAFETY,
            (ds.NYPD_COMPLAINTS, ds.VEHICLE_COLLISIONS),
            safety.aggregate,
        ),
        DomainPipeline(
            Category.ENVIRONMENT,
            (ds.AIR_QUALITY, ds.STREET_TREES, ds.GHG_EMISSIONS, ds.DSNY_TONNAGE),
            environment.aggregate,
        ),
        DomainPipeline(
            Category.TRANSPORTATION,
            (
                ds.FHV_ACTIVE,
                ds.YELLOW_TAXI_TRIPS,
                ds.MTA_PERFORMANCE_2013_2021,
                ds.MTA_PERFORMANCE_2023_2024,
                ds.MTA_PERFORMANCE_2025,
            ),
            transportation.aggregate,
        ),
    )
}

VIEWS: dict[str, DerivedView] = {
    v.name: v
    for v in (
        DerivedView(
            "business:boroughs",
            Category.BUSINESS,
            (ds.CERTIFIED_BUSINESSES,),
            lambda raw: business.borough_view(raw.get("certified", [])),
        ),
        DerivedView(
            "education:boroughs",
            Category.EDUCATION,
            (ds.SCHOOL_DEMOGRAPHICS,),
            lambda raw: education.borough_view(raw.get("demographics", [])),
        ),
    )
}
