"""
Education aggregates over the DOE school demographic snapshots.

The source carries one row per (school, school year). Totals use only the
latest row per school; the yearly trend uses every row.
"""
from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Any

import pandas as pd

from ..gateway.soda_client import RawRecord
from ..normalization.categories import borough_from_dbn
from ..normalization.parsing import parse_int, parse_optional_float
from .common import Datasets, breakdown, percentage, safe_ratio

COUNT_COLUMNS = [
    "total_enrollment",
    "students_with_disabilities_1",
    "english_language_learners_1",
    "poverty_1",
    "asian_1",
    "black_1",
    "hispanic_1",
    "white_1",
    "multiple_race_categories_not_represented_1",
]

RACE_COLUMNS = {
    "Asian": "asian_1",
    "Black": "black_1",
    "Hispanic": "hispanic_1",
    "White": "white_1",
    "Other": "multiple_race_categories_not_represented_1",
}


def _economic_need(value: Any) -> float | None:
    if value is None or str(value).strip().lower() in ("", "no data"):
        return None
    return parse_optional_float(value)


def to_frame(records: Sequence[RawRecord]) -> pd.DataFrame:
    """Typed frame: counts as ints (0 when unparsable), ENI as float or NaN."""
    df = pd.DataFrame.from_records(
        list(records), columns=["dbn", "year", *COUNT_COLUMNS, "economic_need_index"]
    )
    df["dbn"] = df["dbn"].fillna("").astype(str)
    df["year"] = df["year"].fillna("").astype(str).str.strip()
    for col in COUNT_COLUMNS:
        df[col] = df[col].apply(parse_int).astype("int64")
    df["economic_need_index"] = pd.to_numeric(
        df["economic_need_index"].apply(_economic_need), errors="coerce"
    )
    return df


def latest_per_school(df: pd.DataFrame) -> pd.DataFrame:
    """One row per DBN, keeping the most recent school year (first seen on ties)."""
    ordered = df.sort_values("year", ascending=False, kind="stable")
    return ordered.drop_duplicates("dbn", keep="first")


def _mean(series: pd.Series) -> float:
    valid = series.dropna()
    return float(valid.mean()) if len(valid) else 0.0


def education_stats(latest: pd.DataFrame) -> dict[str, Any]:
    enrollment = int(latest["total_enrollment"].sum())
    disabilities = int(latest["students_with_disabilities_1"].sum())
    ell = int(latest["english_language_learners_1"].sum())
    poverty = int(latest["poverty_1"].sum())
    return {
        "total_enrollment": enrollment,
        "total_schools": int(len(latest)),
        "students_with_disabilities": disabilities,
        "disabilities_percentage": percentage(disabilities, enrollment),
        "english_language_learners": ell,
        "ell_percentage": percentage(ell, enrollment),
        "students_in_poverty": poverty,
        "poverty_percentage": percentage(poverty, enrollment),
        "average_economic_need_index": _mean(latest["economic_need_index"]),
    }


def demographic_breakdown(latest: pd.DataFrame) -> list[dict[str, Any]]:
    counts = {group: int(latest[col].sum()) for group, col in RACE_COLUMNS.items()}
    return breakdown(counts, "group")


def yearly_trends(df: pd.DataFrame) -> list[dict[str, Any]]:
    dated = df[df["year"] != ""]
    trends = []
    for year, rows in dated.groupby("year", sort=True):
        trends.append(
            {
                "year": str(year),
                "enrollment": int(rows["total_enrollment"].sum()),
                "disabilities": int(rows["students_with_disabilities_1"].sum()),
                "ell": int(rows["english_language_learners_1"].sum()),
                "poverty": int(rows["poverty_1"].sum()),
                "economic_need_index": _mean(rows["economic_need_index"]),
            }
        )
    return trends


def enrollment_by_borough(latest: pd.DataFrame) -> list[dict[str, Any]]:
    boroughs = latest["dbn"].apply(borough_from_dbn)
    grouped = latest.assign(borough=boroughs).groupby("borough", sort=False)
    enrollment = grouped["total_enrollment"].sum()
    schools = grouped.size()
    total = int(enrollment.sum())

    rows = [
        {
            "borough": str(borough),
            "enrollment": int(enrollment[borough]),
            "schools": int(schools[borough]),
            "percentage": percentage(int(enrollment[borough]), total),
        }
        for borough in enrollment.index
    ]
    rows.sort(key=lambda r: r["enrollment"], reverse=True)
    return rows


def borough_view(records: Sequence[RawRecord]) -> dict[str, Any]:
    """Enrollment by borough, served from the process cache."""
    latest = latest_per_school(to_frame(records))
    return {
        "boroughs": enrollment_by_borough(latest),
        "total_enrollment": int(latest["total_enrollment"].sum()),
        "total_schools": int(len(latest)),
    }


def aggregate(datasets: Datasets, *, today: date | None = None) -> dict[str, Any]:
    records = datasets.get("demographics", [])
    df = to_frame(records)
    latest = latest_per_school(df)
    stats = education_stats(latest)
    return {
        "stats": stats,
        "demographic_breakdown": demographic_breakdown(latest),
        "yearly_trends": yearly_trends(df),
        "enrollment_by_borough": enrollment_by_borough(latest),
        "students_per_school": safe_ratio(stats["total_enrollment"], stats["total_schools"]),
        "total_records": len(records),
    }
