from __future__ import annotations

import json
from datetime import date

from civicstats.aggregation import business

TODAY = date(2024, 6, 15)

CERTIFIED = [
    {"borough": "Brooklyn", "certification": "MBE", "ethnicity": "Black", "naics_sector": "Construction",
     "date_of_establishment": "2016-03-01T00:00:00.000"},
    {"borough": "BK", "certification": "WBE", "ethnicity": "Asian", "naics_sector": "Retail",
     "date_of_establishment": "2020-05-20T00:00:00.000"},
    {"borough": "", "certification": "MBE, WBE", "ethnicity": "", "naics_sector": "Construction",
     "date_of_establishment": "garbage"},
    {"borough": "Queens", "certification": "DBE", "ethnicity": "Hispanic", "naics_sector": "Construction",
     "date_of_establishment": "2024-01-10T00:00:00.000"},
]

ESTABLISHMENTS = [
    {"establishment_record_actual_opening_date": "2024-01-01T00:00:00.000", "number_of_employees": "10",
     "establishment_record_business_sector": "Retail"},
    {"establishment_record_actual_opening_date": "2023-01-01T00:00:00.000", "number_of_employees": "4",
     "establishment_record_business_sector": "Retail"},
    {"establishment_record_actual_opening_date": "2015-07-04T00:00:00.000", "number_of_employees": "6",
     "establishment_record_business_sector": "Food"},
    {"establishment_record_actual_opening_date": "", "number_of_employees": "abc"},
]


def test_certification_counts():
    stats = business.certification_stats(CERTIFIED)
    assert stats == {"total": 4, "mbe": 2, "wbe": 2, "dbe": 1, "mwbe": 1}


def test_borough_breakdown_drops_codes_and_blanks():
    rows = business.borough_breakdown(CERTIFIED)
    assert [r["borough"] for r in rows] == ["Brooklyn", "Queens"]
    assert all(r["percentage"] == 50.0 for r in rows)


def test_yearly_growth_is_zero_filled_and_cumulative():
    series = business.yearly_growth(CERTIFIED, TODAY)
    assert [e["year"] for e in series] == list(range(2015, 2025))
    by_year = {e["year"]: e for e in series}
    assert by_year[2015]["count"] == 0
    assert by_year[2016]["count"] == 1
    assert by_year[2024]["cumulative"] == 3


def test_growth_rate_short_series_is_zero():
    assert business.growth_rate([{"cumulative": 1}]) == 0.0


def test_growth_rate_over_last_five_years():
    series = [{"cumulative": c} for c in (1, 2, 3, 4, 5, 6, 11)]
    # window is the last six entries: 2 -> 11 over five years
    assert business.growth_rate(series) == (11 - 2) / 2 / 5 * 100


def test_acceleration_rolling_windows():
    stats = business.acceleration_stats(ESTABLISHMENTS, TODAY)
    jobs = stats["jobs_stats"]
    assert jobs["total_jobs"] == 20
    assert jobs["jobs_this_year"] == 10
    assert jobs["jobs_last_year"] == 4
    assert jobs["jobs_growth"] == 6
    assert jobs["jobs_growth_percentage"] == 150.0
    assert stats["new_business_stats"]["new_businesses_this_year"] == 1


def test_jobs_by_sector():
    rows = business.jobs_by_sector(ESTABLISHMENTS)
    assert rows[0] == {"sector": "Retail", "jobs": 14, "businesses": 2, "percentage": 70.0}
    assert rows[-1]["sector"] == "Unknown"


def test_yearly_jobs_trend_window():
    trend = business.yearly_jobs_trend(ESTABLISHMENTS)
    assert [e["year"] for e in trend] == list(range(2012, 2020))
    assert {e["year"]: e["jobs"] for e in trend if e["jobs"]} == {2015: 6}


def test_aggregate_shape_and_idempotence():
    datasets = {"certified": CERTIFIED, "establishments": ESTABLISHMENTS}
    first = business.aggregate(datasets, today=TODAY)
    second = business.aggregate(datasets, today=TODAY)
    assert json.dumps(first, sort_keys=True) == json.dumps(second, sort_keys=True)
    assert set(first) == {"stats", "breakdowns", "growth", "acceleration"}
    assert first["acceleration"]["total_businesses"] == 4
    assert first["breakdowns"]["sectors"][0] == {"sector": "Construction", "count": 3, "percentage": 75.0}


def test_aggregate_empty_inputs():
    result = business.aggregate({}, today=TODAY)
    assert result["stats"]["total"] == 0
    assert result["breakdowns"]["boroughs"] == []
    assert result["acceleration"]["jobs_stats"]["jobs_growth_percentage"] == 0.0
