from __future__ import annotations

from civicstats.aggregation import education

DEMOGRAPHICS = [
    {"dbn": "13K123", "year": "2019-20", "total_enrollment": "100", "poverty_1": "50", "asian_1": "10",
     "black_1": "40", "hispanic_1": "30", "white_1": "20", "economic_need_index": "70%"},
    {"dbn": "13K123", "year": "2020-21", "total_enrollment": "120", "poverty_1": "60", "asian_1": "20",
     "black_1": "40", "hispanic_1": "40", "white_1": "20", "economic_need_index": "80.0%"},
    {"dbn": "02M001", "year": "2020-21", "total_enrollment": "80", "poverty_1": "bad",
     "english_language_learners_1": "8", "economic_need_index": "No Data"},
    {"dbn": "99X999", "year": "2020-21", "total_enrollment": "0"},
]


def test_education_dedupes_to_latest_year():
    result = education.aggregate({"demographics": DEMOGRAPHICS})
    stats = result["stats"]
    assert stats["total_schools"] == 3
    assert stats["total_enrollment"] == 200
    assert stats["students_in_poverty"] == 60
    assert stats["ell_percentage"] == 4.0
    assert stats["average_economic_need_index"] == 80.0
    assert result["students_per_school"] == 200 / 3
    assert result["total_records"] == 4


def test_education_yearly_trends_use_every_row():
    trends = education.aggregate({"demographics": DEMOGRAPHICS})["yearly_trends"]
    assert [t["year"] for t in trends] == ["2019-20", "2020-21"]
    assert trends[0]["enrollment"] == 100
    assert trends[1]["enrollment"] == 200


def test_education_enrollment_by_borough():
    rows = education.borough_view(DEMOGRAPHICS)["boroughs"]
    assert [r["borough"] for r in rows] == ["Brooklyn", "Manhattan", "Other"]
    assert rows[0]["percentage"] == 60.0


def test_education_demographics():
    rows = education.aggregate({"demographics": DEMOGRAPHICS})["demographic_breakdown"]
    assert rows[0] == {"group": "Black", "count": 40, "percentage": 40 / 120 * 100}


def test_education_empty():
    result = education.aggregate({"demographics": []})
    assert result["stats"]["total_enrollment"] == 0
    assert result["stats"]["poverty_percentage"] == 0.0
    assert result["enrollment_by_borough"] == []
    assert result["students_per_school"] == 0.0
