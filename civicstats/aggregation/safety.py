from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import date
from typing import Any

from ..gateway.soda_client import RawRecord
from ..normalization.categories import Borough, Severity, normalize_borough, normalize_severity
from ..normalization.parsing import parse_date, parse_int, text
from .common import Datasets, breakdown, tally, yearly_counts

CRIME_TREND_YEARS = (2015, 2025)
TOP_N = 10

# Placeholder contributing factors that carry no information.
_UNSPECIFIED_CAUSES = frozenset({"", "UNKNOWN", "UNSPECIFIED"})

CASUALTY_FIELDS = {
    "total_injured": "number_of_persons_injured",
    "total_killed": "number_of_persons_killed",
    "pedestrians_injured": "number_of_pedestrians_injured",
    "pedestrians_killed": "number_of_pedestrians_killed",
    "cyclists_injured": "number_of_cyclist_injured",
    "cyclists_killed": "number_of_cyclist_killed",
    "motorists_injured": "number_of_motorist_injured",
    "motorists_killed": "number_of_motorist_killed",
}


def crime_stats(complaints: Sequence[RawRecord]) -> dict[str, Any]:
    severities = tally(complaints, lambda c: normalize_severity(c.get("law_cat_cd")))
    boroughs = tally(complaints, lambda c: normalize_borough(c.get("boro_nm")))
    offenses = tally(complaints, lambda c: text(c, "ofns_desc", "Unknown"))
    return {
        "total_crimes": len(complaints),
        "felonies": severities[Severity.FELONY.value],
        "misdemeanors": severities[Severity.MISDEMEANOR.value],
        "violations": severities[Severity.VIOLATION.value],
        "by_severity": breakdown(severities, "severity"),
        "by_borough": breakdown(boroughs, "borough", exclude=[Borough.UNKNOWN]),
        "top_crime_types": breakdown(offenses, "type", limit=TOP_N, total=len(complaints)),
    }


def collision_stats(collisions: Sequence[RawRecord]) -> dict[str, Any]:
    casualties: Counter[str] = Counter({name: 0 for name in CASUALTY_FIELDS})
    causes: Counter[str] = Counter()
    for collision in collisions:
        for name, field in CASUALTY_FIELDS.items():
            casualties[name] += parse_int(collision.get(field))
        cause = text(collision, "contributing_factor_vehicle_1")
        if cause.upper() not in _UNSPECIFIED_CAUSES:
            causes[cause] += 1

    boroughs = tally(collisions, lambda c: normalize_borough(c.get("borough")))
    return {
        "total_collisions": len(collisions),
        **casualties,
        "by_borough": breakdown(boroughs, "borough", exclude=[Borough.UNKNOWN]),
        "top_causes": breakdown(causes, "cause", limit=TOP_N, total=len(collisions)),
    }


def yearly_crime_trends(complaints: Sequence[RawRecord]) -> list[dict[str, Any]]:
    start, end = CRIME_TREND_YEARS
    counts: Counter[int] = Counter()
    for complaint in complaints:
        reported = parse_date(complaint.get("cmplnt_fr_dt"))
        if reported and start <= reported.year <= end:
            counts[reported.year] += 1
    return yearly_counts(counts, start, end, field="crimes")


def aggregate(datasets: Datasets, *, today: date | None = None) -> dict[str, Any]:
    complaints = datasets.get("complaints", [])
    collisions = datasets.get("collisions", [])
    return {
        "crime_stats": crime_stats(complaints),
        "collision_stats": collision_stats(collisions),
        "yearly_trends": yearly_crime_trends(complaints),
    }
