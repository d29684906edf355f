from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import date
from typing import Any

from ..gateway.soda_client import RawRecord
from ..normalization.categories import Borough, normalize_borough
from ..normalization.parsing import parse_date, parse_int, text
from .common import (
    Datasets,
    breakdown,
    growth,
    percentage,
    safe_ratio,
    tally,
    yearly_counts,
    yearly_series,
    years_ago,
)

GROWTH_START_YEAR = 2015
JOBS_TREND_YEARS = (2012, 2019)  # establishment extract ends Aug 2019
TOP_SECTORS = 10


# ---------------------------------------------------------------------------
# Certified businesses (SBS M/WBE list)
# ---------------------------------------------------------------------------


def certification_stats(businesses: Sequence[RawRecord]) -> dict[str, Any]:
    certs = [text(b, "certification").upper() for b in businesses]
    return {
        "total": len(businesses),
        "mbe": sum(1 for c in certs if "MBE" in c),
        "wbe": sum(1 for c in certs if "WBE" in c),
        "dbe": sum(1 for c in certs if "DBE" in c),
        "mwbe": sum(1 for c in certs if "MBE" in c and "WBE" in c),
    }


def borough_breakdown(businesses: Sequence[RawRecord]) -> list[dict[str, Any]]:
    counts = tally(businesses, lambda b: normalize_borough(b.get("borough")))
    return breakdown(counts, "borough", exclude=[Borough.UNKNOWN])


def yearly_growth(businesses: Sequence[RawRecord], today: date) -> list[dict[str, Any]]:
    counts: Counter[int] = Counter()
    for business in businesses:
        established = parse_date(business.get("date_of_establishment"))
        if established and GROWTH_START_YEAR <= established.year <= today.year:
            counts[established.year] += 1

    series = yearly_counts(counts, GROWTH_START_YEAR, today.year)
    cumulative = 0
    for entry in series:
        cumulative += entry["count"]
        entry["cumulative"] = cumulative
    return series


def growth_rate(series: Sequence[dict[str, Any]]) -> float:
    """Average annual growth of the cumulative count over the last five years."""
    if len(series) < 6:
        return 0.0
    window = series[-6:]
    first, last = window[0]["cumulative"], window[-1]["cumulative"]
    years = len(window) - 1
    return safe_ratio(last - first, first) / years * 100


def borough_view(businesses: Sequence[RawRecord]) -> dict[str, Any]:
    """Borough-only projection served from the process cache."""
    return {"boroughs": borough_breakdown(businesses), "total": len(businesses)}


# ---------------------------------------------------------------------------
# Business acceleration (new establishments and jobs)
# ---------------------------------------------------------------------------


def _opening(record: RawRecord) -> date | None:
    opened = parse_date(record.get("establishment_record_actual_opening_date"))
    return opened.date() if opened else None


def _employees(record: RawRecord) -> int:
    return parse_int(record.get("number_of_employees"))


def acceleration_stats(establishments: Sequence[RawRecord], today: date) -> dict[str, Any]:
    """Rolling 12-month jobs and openings compared with the 12 months before."""
    one_year_ago = years_ago(today, 1)
    two_years_ago = years_ago(today, 2)

    total_jobs = jobs_this_year = jobs_last_year = 0
    opened_this_year = opened_last_year = 0
    for record in establishments:
        employees = _employees(record)
        total_jobs += employees
        opened = _opening(record)
        if opened is None:
            continue
        if one_year_ago <= opened <= today:
            jobs_this_year += employees
            opened_this_year += 1
        elif two_years_ago <= opened < one_year_ago:
            jobs_last_year += employees
            opened_last_year += 1

    jobs_growth, jobs_growth_pct = growth(jobs_this_year, jobs_last_year)
    business_growth, business_growth_pct = growth(opened_this_year, opened_last_year)
    return {
        "jobs_stats": {
            "total_jobs": total_jobs,
            "jobs_this_year": jobs_this_year,
            "jobs_last_year": jobs_last_year,
            "jobs_growth": jobs_growth,
            "jobs_growth_percentage": jobs_growth_pct,
        },
        "new_business_stats": {
            "total_new_businesses": len(establishments),
            "new_businesses_this_year": opened_this_year,
            "new_businesses_last_year": opened_last_year,
            "business_growth": business_growth,
            "business_growth_percentage": business_growth_pct,
        },
    }


def jobs_by_sector(establishments: Sequence[RawRecord], limit: int = TOP_SECTORS) -> list[dict[str, Any]]:
    jobs: Counter[str] = Counter()
    businesses: Counter[str] = Counter()
    for record in establishments:
        sector = text(record, "establishment_record_business_sector", "Unknown")
        jobs[sector] += _employees(record)
        businesses[sector] += 1

    total_jobs = sum(jobs.values())
    return [
        {
            "sector": sector,
            "jobs": count,
            "businesses": businesses[sector],
            "percentage": percentage(count, total_jobs),
        }
        for sector, count in jobs.most_common(limit)
    ]


def yearly_jobs_trend(establishments: Sequence[RawRecord]) -> list[dict[str, Any]]:
    start, end = JOBS_TREND_YEARS
    buckets: dict[int, Counter[str]] = {}
    for record in establishments:
        opened = _opening(record)
        if opened is None or not start <= opened.year <= end:
            continue
        bucket = buckets.setdefault(opened.year, Counter())
        bucket["jobs"] += _employees(record)
        bucket["businesses"] += 1
    return yearly_series(buckets, start, end, ("jobs", "businesses"))


def aggregate(datasets: Datasets, *, today: date | None = None) -> dict[str, Any]:
    today = today or date.today()
    certified = datasets.get("certified", [])
    establishments = datasets.get("establishments", [])

    growth_series = yearly_growth(certified, today)
    stats = certification_stats(certified)
    stats["growth_rate"] = growth_rate(growth_series)

    acceleration = acceleration_stats(establishments, today)
    acceleration["sector_jobs"] = jobs_by_sector(establishments)
    acceleration["yearly_jobs_trend"] = yearly_jobs_trend(establishments)
    acceleration["total_businesses"] = len(establishments)

    return {
        "stats": stats,
        "breakdowns": {
            "boroughs": borough_breakdown(certified),
            "ethnicity": breakdown(tally(certified, lambda b: text(b, "ethnicity", "Unknown")), "ethnicity"),
            "sectors": breakdown(
                tally(certified, lambda b: text(b, "naics_sector", "Unknown")),
                "sector",
                limit=TOP_SECTORS,
                total=len(certified),
            ),
        },
        "growth": growth_series,
        "acceleration": acceleration,
    }
