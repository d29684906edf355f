from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import date
from typing import Any

from ..gateway.soda_client import RawRecord
from ..normalization.categories import (
    Borough,
    JobType,
    ViolationClass,
    ViolationStatus,
    normalize_borough,
    normalize_job_type,
    normalize_violation_class,
    normalize_violation_status,
)
from ..normalization.parsing import parse_date, parse_int, text
from .common import Datasets, breakdown, safe_ratio, tally, yearly_counts

PERMIT_TREND_YEARS = (2015, 2025)
AFFORDABLE_START_YEAR = 2016

INCOME_BANDS = {
    "extremely_low": "extremely_low_income_units",
    "very_low": "very_low_income",
    "low": "low_income_units",
    "moderate": "moderate_income",
    "middle": "middle_income",
}


def _permit_borough(permit: RawRecord) -> Borough:
    return normalize_borough(permit.get("borough"))


def _violation_borough(violation: RawRecord) -> Borough:
    return normalize_borough(violation.get("boro"))


def permit_stats(permits: Sequence[RawRecord]) -> dict[str, Any]:
    job_types = tally(permits, lambda p: normalize_job_type(p.get("job_type")))
    return {
        "total_permits": len(permits),
        "new_building": job_types[JobType.NEW_BUILDING.value],
        "alteration": job_types[JobType.ALTERATION.value],
        "demolition": job_types[JobType.DEMOLITION.value],
        "by_job_type": breakdown(job_types, "job_type"),
        "by_borough": breakdown(tally(permits, _permit_borough), "borough", exclude=[Borough.UNKNOWN]),
    }


def violation_stats(violations: Sequence[RawRecord]) -> dict[str, Any]:
    statuses = tally(violations, lambda v: normalize_violation_status(v.get("violationstatus")))
    classes = tally(violations, lambda v: normalize_violation_class(v.get("class")))
    return {
        "total_violations": len(violations),
        "open_violations": statuses[ViolationStatus.OPEN.value],
        "closed_violations": statuses[ViolationStatus.CLOSED.value],
        "class_a": classes[ViolationClass.A.value],
        "class_b": classes[ViolationClass.B.value],
        "class_c": classes[ViolationClass.C.value],
        "by_class": breakdown(classes, "class"),
        "by_borough": breakdown(tally(violations, _violation_borough), "borough", exclude=[Borough.UNKNOWN]),
    }


def yearly_permit_trends(permits: Sequence[RawRecord]) -> list[dict[str, Any]]:
    start, end = PERMIT_TREND_YEARS
    counts: Counter[int] = Counter()
    for permit in permits:
        issued = parse_date(permit.get("issuance_date"))
        if issued and start <= issued.year <= end:
            counts[issued.year] += 1
    return yearly_counts(counts, start, end, field="permits")


def permit_violation_correlation(
    permits: Sequence[RawRecord], violations: Sequence[RawRecord]
) -> list[dict[str, Any]]:
    """Violations per permit for each borough present in either dataset."""
    permit_counts = tally(permits, _permit_borough)
    violation_counts = tally(violations, _violation_borough)

    boroughs = list(dict.fromkeys([*permit_counts, *violation_counts]))
    rows = [
        {
            "borough": borough,
            "permits": permit_counts[borough],
            "violations": violation_counts[borough],
            "ratio": safe_ratio(violation_counts[borough], permit_counts[borough]),
        }
        for borough in boroughs
        if borough != Borough.UNKNOWN.value
    ]
    rows.sort(key=lambda r: r["permits"], reverse=True)
    return rows


def affordable_housing_stats(records: Sequence[RawRecord]) -> dict[str, Any]:
    """Housing New York completions from 2016 on, skipping projects with no affordable units."""
    bands: Counter[str] = Counter({band: 0 for band in INCOME_BANDS})
    yearly: dict[int, Counter[str]] = {}
    programs: Counter[str] = Counter()
    total_units = total_projects = 0

    for record in records:
        completed = parse_date(record.get("project_completion_date"))
        if completed is None or completed.year < AFFORDABLE_START_YEAR:
            continue
        units = {band: parse_int(record.get(field)) for band, field in INCOME_BANDS.items()}
        affordable = sum(units.values())
        if affordable == 0:
            continue

        bands.update(units)
        bucket = yearly.setdefault(completed.year, Counter())
        bucket["affordable_units"] += affordable
        bucket["projects_completed"] += 1
        programs[text(record, "program_group", "Other")] += affordable
        total_units += affordable
        total_projects += 1

    trend = []
    cumulative = 0
    for year in sorted(yearly):
        cumulative += yearly[year]["affordable_units"]
        trend.append(
            {
                "year": year,
                "affordable_units": yearly[year]["affordable_units"],
                "projects_completed": yearly[year]["projects_completed"],
                "cumulative_units": cumulative,
            }
        )

    return {
        "total_affordable_units": total_units,
        "total_projects": total_projects,
        "units_by_income_level": dict(bands),
        "yearly_trend": trend,
        "program_groups": breakdown(programs, "program_group", value_field="units"),
    }


def aggregate(datasets: Datasets, *, today: date | None = None) -> dict[str, Any]:
    permits = datasets.get("permits", [])
    violations = datasets.get("violations", [])
    affordable = datasets.get("affordable", [])
    return {
        "permit_stats": permit_stats(permits),
        "violation_stats": violation_stats(violations),
        "affordable_housing": affordable_housing_stats(affordable),
        "yearly_trends": yearly_permit_trends(permits),
        "correlation": permit_violation_correlation(permits, violations),
    }
