from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any

from ..gateway.soda_client import RawRecord
from ..normalization.categories import Borough, InspectionGrade, normalize_borough, normalize_grade
from ..normalization.parsing import extract_year, parse_date, parse_int, text
from .common import Datasets, breakdown, latest_by, percentage, tally

SAFETY_EVENTS_START_YEAR = 2014
INCOMPLETE_YEAR_THRESHOLD = 0.3
TOP_N = 10


# ---------------------------------------------------------------------------
# Restaurant inspections
# ---------------------------------------------------------------------------


def restaurant_stats(inspections: Sequence[RawRecord]) -> dict[str, Any]:
    """
    Inspection counts plus the current letter grade of each restaurant.

    A restaurant's grade is taken from its most recent *graded* inspection
    (by ``inspection_date``); ungraded rows never overwrite it.
    """
    graded = [i for i in inspections if text(i, "camis") and text(i, "grade")]
    latest = latest_by(
        graded,
        key=lambda i: text(i, "camis"),
        order=lambda i: parse_date(i.get("inspection_date")) or datetime.min,
    )
    grades = tally(latest, lambda i: normalize_grade(i.get("grade")))

    flags = Counter(text(i, "critical_flag").upper() for i in inspections)
    boroughs = tally(inspections, lambda i: normalize_borough(i.get("boro")))

    return {
        "total_inspections": len(inspections),
        "graded_restaurants": len(latest),
        "grade_a": grades[InspectionGrade.A.value],
        "grade_b": grades[InspectionGrade.B.value],
        "grade_c": grades[InspectionGrade.C.value],
        "critical_violations": flags["CRITICAL"],
        "non_critical_violations": flags["NOT CRITICAL"],
        "by_borough": breakdown(boroughs, "borough", exclude=[Borough.UNKNOWN]),
    }


# ---------------------------------------------------------------------------
# Leading causes of death
# ---------------------------------------------------------------------------


def mortality_stats(records: Sequence[RawRecord]) -> dict[str, Any]:
    causes: Counter[str] = Counter()
    years: Counter[int] = Counter()
    demographics: Counter[str] = Counter()
    total = 0

    for record in records:
        deaths = parse_int(record.get("deaths"))
        total += deaths
        causes[text(record, "leading_cause", "Unknown")] += deaths
        demographics[text(record, "race_ethnicity", "Unknown")] += deaths
        year = extract_year(record.get("year"))
        if year is not None:
            years[year] += deaths

    return {
        "total_deaths": total,
        "top_causes": breakdown(causes, "cause", limit=TOP_N, total=total, value_field="deaths"),
        "deaths_by_year": [{"year": y, "deaths": years[y]} for y in sorted(years)],
        "demographic_breakdown": breakdown(demographics, "demographic", value_field="deaths"),
    }


# ---------------------------------------------------------------------------
# Community safety outreach events
# ---------------------------------------------------------------------------


def _outreach_expansion(events_by_year: list[dict[str, Any]]) -> dict[str, Any]:
    """
    Latest year against the year before.

    A latest year with under 30% of the previous year's events is treated as
    still in progress, and the comparison shifts back one year.
    """
    current = events_by_year[-1] if events_by_year else None
    previous = events_by_year[-2] if len(events_by_year) >= 2 else None

    incomplete = (
        current is not None
        and current["total_events"] < (previous["total_events"] if previous else 0) * INCOMPLETE_YEAR_THRESHOLD
    )
    if incomplete:
        current = previous
        previous = events_by_year[-3] if len(events_by_year) >= 3 else None

    current_total = current["total_events"] if current else 0
    previous_total = previous["total_events"] if previous else 0
    return {
        "current_year": current["year"] if current else None,
        "current_year_events": current_total,
        "previous_year_events": previous_total,
        "growth_percent": percentage(current_total - previous_total, previous_total),
        "current_year_incomplete": bool(incomplete),
    }


def safety_events_stats(events: Sequence[RawRecord]) -> dict[str, Any]:
    per_year: dict[int, Counter[str]] = {}
    programs: Counter[str] = Counter()
    boroughs: Counter[str] = Counter()

    for event in events:
        held = parse_date(event.get("event_date"))
        if held is None or held.year < SAFETY_EVENTS_START_YEAR:
            continue
        program = text(event, "program", "Unknown")
        per_year.setdefault(held.year, Counter())[program] += 1
        programs[program] += 1
        boroughs[normalize_borough(event.get("borough")).value] += 1

    total = sum(programs.values())
    events_by_year = [
        {"year": year, "total_events": sum(per_year[year].values()), "programs": dict(per_year[year])}
        for year in sorted(per_year)
    ]
    programs_by_year = [
        {"year": year, "program": program, "count": count}
        for year in sorted(per_year)
        for program, count in per_year[year].items()
    ]
    return {
        "total_events": total,
        "events_by_year": events_by_year,
        "programs_by_year": programs_by_year,
        "top_programs": breakdown(programs, "program", limit=TOP_N, total=total),
        "by_borough": breakdown(boroughs, "borough", exclude=[Borough.UNKNOWN]),
        "outreach_expansion": _outreach_expansion(events_by_year),
    }


def aggregate(datasets: Datasets, *, today: date | None = None) -> dict[str, Any]:
    return {
        "restaurant_stats": restaurant_stats(datasets.get("inspections", [])),
        "mortality_stats": mortality_stats(datasets.get("deaths", [])),
        "safety_events_stats": safety_events_stats(datasets.get("safety_events", [])),
    }
