from __future__ import annotations

from civicstats.aggregation import housing

PERMITS = [
    {"borough": "BROOKLYN", "job_type": "NB", "issuance_date": "2020-02-01T00:00:00.000"},
    {"borough": "BROOKLYN", "job_type": "A1", "issuance_date": "2021-02-01T00:00:00.000"},
    {"borough": "MANHATTAN", "job_type": "DM", "issuance_date": "2014-12-31T00:00:00.000"},
    {"borough": "BK", "job_type": "SG", "issuance_date": ""},
]

VIOLATIONS = [
    {"boro": "BROOKLYN", "class": "A", "violationstatus": "Open"},
    {"boro": "BROOKLYN", "class": "C", "violationstatus": "Close"},
    {"boro": "QUEENS", "class": "B", "violationstatus": "Open"},
    {"boro": "", "class": "I", "violationstatus": ""},
]

AFFORDABLE = [
    {"project_completion_date": "2019-05-01T00:00:00.000", "low_income_units": "10", "program_group": "New Construction"},
    {"project_completion_date": "2017-05-01T00:00:00.000", "very_low_income": "5", "moderate_income": "5",
     "program_group": "Preservation"},
    {"project_completion_date": "2015-05-01T00:00:00.000", "low_income_units": "99"},
    {"project_completion_date": "2018-05-01T00:00:00.000", "low_income_units": "0"},
    {"project_completion_date": "", "low_income_units": "7"},
]


def test_permit_stats():
    stats = housing.permit_stats(PERMITS)
    assert stats["total_permits"] == 4
    assert (stats["new_building"], stats["alteration"], stats["demolition"]) == (1, 1, 1)
    assert stats["by_borough"][0] == {"borough": "Brooklyn", "count": 2, "percentage": 2 / 3 * 100}


def test_violation_stats():
    stats = housing.violation_stats(VIOLATIONS)
    assert stats["open_violations"] == 2
    assert stats["closed_violations"] == 1
    assert (stats["class_a"], stats["class_b"], stats["class_c"]) == (1, 1, 1)
    assert [r["borough"] for r in stats["by_borough"]] == ["Brooklyn", "Queens"]


def test_yearly_permit_trends_window():
    trends = housing.yearly_permit_trends(PERMITS)
    assert len(trends) == 11
    assert {t["year"]: t["permits"] for t in trends if t["permits"]} == {2020: 1, 2021: 1}


def test_correlation_ratio_safety():
    permits = [{"borough": "Queens"}]
    violations = [{"boro": "Bronx"}, {"boro": "Bronx"}, {"boro": "Queens"}, {"boro": "??"}]
    rows = housing.permit_violation_correlation(permits, violations)
    by_borough = {r["borough"]: r for r in rows}
    assert by_borough["Bronx"] == {"borough": "Bronx", "permits": 0, "violations": 2, "ratio": 0.0}
    assert by_borough["Queens"]["ratio"] == 1.0
    assert "Unknown" not in by_borough
    assert rows[0]["borough"] == "Queens"


def test_affordable_housing_skips_old_and_empty_projects():
    stats = housing.affordable_housing_stats(AFFORDABLE)
    assert stats["total_projects"] == 2
    assert stats["total_affordable_units"] == 20
    assert stats["units_by_income_level"]["low"] == 10
    assert stats["units_by_income_level"]["extremely_low"] == 0


def test_affordable_housing_cumulative_follows_year_order():
    trend = housing.affordable_housing_stats(AFFORDABLE)["yearly_trend"]
    assert [(t["year"], t["cumulative_units"]) for t in trend] == [(2017, 10), (2019, 20)]


def test_affordable_program_groups():
    groups = housing.affordable_housing_stats(AFFORDABLE)["program_groups"]
    assert groups == [
        {"program_group": "New Construction", "units": 10, "percentage": 50.0},
        {"program_group": "Preservation", "units": 10, "percentage": 50.0},
    ]


def test_aggregate_with_missing_dataset():
    result = housing.aggregate({"permits": PERMITS})
    assert result["violation_stats"]["total_violations"] == 0
    assert result["affordable_housing"]["yearly_trend"] == []
    assert {r["borough"] for r in result["correlation"]} == {"Brooklyn", "Manhattan"}
