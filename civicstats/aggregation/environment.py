from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import date
from typing import Any

from ..gateway.soda_client import RawRecord
from ..normalization.categories import Borough, Pollutant, normalize_borough, normalize_pollutant
from ..normalization.parsing import extract_year, parse_float, parse_int, parse_optional_float, text
from .common import Datasets, breakdown, percentage, safe_ratio, tally

AIR_QUALITY_YEARS = (2013, 2023)
GHG_BASELINE_YEAR = 2005
GHG_TREND_YEARS = (2015, 2023)
DSNY_YEARS = (2012, 2025)
TOP_SPECIES = 10
NYC_WIDE = "NYC-wide"

_POLLUTANT_KEYS = {Pollutant.PM25: "pm25", Pollutant.NO2: "no2", Pollutant.O3: "ozone"}

DIAMETER_RANGES = (
    (0, 5, '0-5"'),
    (5, 10, '5-10"'),
    (10, 15, '10-15"'),
    (15, 20, '15-20"'),
    (20, 30, '20-30"'),
    (30, None, '30+"'),
)

DSNY_RECYCLED_FIELDS = (
    "papertonscollected",
    "mgptonscollected",
    "resorganicstons",
    "schoolorganictons",
    "leavesorganictons",
    "xmastreetons",
    "otherorganicstons",
)


class _Mean:
    __slots__ = ("total", "count")

    def __init__(self) -> None:
        self.total = 0.0
        self.count = 0

    def add(self, value: float) -> None:
        self.total += value
        self.count += 1

    @property
    def value(self) -> float:
        return safe_ratio(self.total, self.count)


def _pollutant_means() -> dict[str, _Mean]:
    return {key: _Mean() for key in _POLLUTANT_KEYS.values()}


# ---------------------------------------------------------------------------
# Air quality
# ---------------------------------------------------------------------------


def _air_quality_area(record: RawRecord) -> str:
    place = text(record, "geo_place_name")
    borough = normalize_borough(place)
    if borough is not Borough.UNKNOWN:
        return borough.value
    lowered = place.lower()
    if "nyc" in lowered or "new york" in lowered:
        return NYC_WIDE
    return Borough.UNKNOWN.value


def _measurement(record: RawRecord) -> tuple[str, float] | None:
    """(pollutant key, value) for a tracked pollutant with a numeric reading."""
    key = _POLLUTANT_KEYS.get(normalize_pollutant(record.get("name")))
    value = parse_optional_float(record.get("data_value"))
    if key is None or value is None:
        return None
    return key, value


def air_quality_stats(records: Sequence[RawRecord]) -> dict[str, Any]:
    overall = _pollutant_means()
    by_area: dict[str, dict[str, _Mean]] = {}
    for record in records:
        measured = _measurement(record)
        if measured is None:
            continue
        key, value = measured
        overall[key].add(value)
        area = _air_quality_area(record)
        if area != Borough.UNKNOWN.value:
            by_area.setdefault(area, _pollutant_means())[key].add(value)

    return {
        "avg_pm25": overall["pm25"].value,
        "avg_no2": overall["no2"].value,
        "avg_ozone": overall["ozone"].value,
        "pollutants_by_borough": [
            {"borough": area, **{key: mean.value for key, mean in means.items()}}
            for area, means in by_area.items()
        ],
        "total_measurements": len(records),
    }


def yearly_air_quality_trends(records: Sequence[RawRecord]) -> list[dict[str, Any]]:
    start, end = AIR_QUALITY_YEARS
    per_year: dict[int, dict[str, _Mean]] = {}
    for record in records:
        measured = _measurement(record)
        year = extract_year(record.get("time_period"), record.get("start_date"))
        if measured is None or year is None or not start <= year <= end:
            continue
        key, value = measured
        per_year.setdefault(year, _pollutant_means())[key].add(value)

    trends = []
    for year in range(start, end + 1):
        means = per_year.get(year) or _pollutant_means()
        trends.append({"year": year, **{key: mean.value for key, mean in means.items()}})
    return trends


# ---------------------------------------------------------------------------
# Street trees
# ---------------------------------------------------------------------------


def tree_stats(trees: Sequence[RawRecord]) -> dict[str, Any]:
    statuses = Counter(text(t, "status").upper() for t in trees)
    health = Counter(text(t, "health").upper() for t in trees)
    boroughs = tally(trees, lambda t: normalize_borough(t.get("boroname")))
    species = tally(trees, lambda t: text(t, "spc_common", "Unknown"))
    return {
        "total_trees": len(trees),
        "alive_trees": statuses["ALIVE"],
        "dead_trees": statuses["DEAD"],
        "stumps": statuses["STUMP"],
        "good_health": health["GOOD"],
        "fair_health": health["FAIR"],
        "poor_health": health["POOR"],
        "by_borough": breakdown(boroughs, "borough", exclude=[Borough.UNKNOWN]),
        "top_species": breakdown(species, "species", limit=TOP_SPECIES, total=len(trees)),
    }


def tree_diameter_distribution(trees: Sequence[RawRecord]) -> list[dict[str, Any]]:
    """Trunk diameter buckets over trees with a positive measured diameter."""
    counts = Counter({bucket: 0 for _, _, bucket in DIAMETER_RANGES})
    for tree in trees:
        dbh = parse_int(tree.get("tree_dbh"))
        if dbh <= 0:
            continue
        for low, high, bucket in DIAMETER_RANGES:
            if dbh >= low and (high is None or dbh < high):
                counts[bucket] += 1
                break

    measured = sum(counts.values())
    return [
        {"range": bucket, "count": counts[bucket], "percentage": percentage(counts[bucket], measured)}
        for _, _, bucket in DIAMETER_RANGES
    ]


# ---------------------------------------------------------------------------
# Greenhouse gas inventory
# ---------------------------------------------------------------------------


def _is_citywide_total(record: RawRecord) -> bool:
    return all(
        text(record, field).lower() == "total"
        for field in ("inventory_type", "sectors_sector", "category_label")
    )


def _ghg_for_year(record: RawRecord, year: int) -> float:
    # 2005-2009 columns carry a 100-year GWP suffix.
    value = record.get(f"cy_{year}_tco2e_100_yr_gwp") or record.get(f"cy_{year}_tco2e")
    return parse_float(value)


def ghg_emissions_stats(records: Sequence[RawRecord]) -> dict[str, Any]:
    """Citywide totals in thousand tCO2e, from the inventory's all-sector total row."""
    total = next((r for r in records if _is_citywide_total(r)), None)
    start, end = GHG_TREND_YEARS
    if total is None:
        return {
            "total_emissions_latest": 0.0,
            "total_emissions_baseline": 0.0,
            "reduction_tons": 0.0,
            "reduction_percent": 0.0,
            "yearly_trend": [],
        }

    baseline = _ghg_for_year(total, GHG_BASELINE_YEAR)
    latest = _ghg_for_year(total, end)
    reduction = baseline - latest
    return {
        "total_emissions_latest": latest / 1000,
        "total_emissions_baseline": baseline / 1000,
        "reduction_tons": reduction / 1000,
        "reduction_percent": percentage(reduction, baseline),
        "yearly_trend": [
            {"year": year, "emissions": _ghg_for_year(total, year) / 1000}
            for year in range(start, end + 1)
        ],
    }


# ---------------------------------------------------------------------------
# DSNY collection tonnage
# ---------------------------------------------------------------------------


def recycling_diversion_stats(records: Sequence[RawRecord]) -> dict[str, Any]:
    """Share of collected tonnage diverted from refuse, per year, against the first-year baseline."""
    start, end = DSNY_YEARS
    waste: Counter[int] = Counter()
    recycled: Counter[int] = Counter()
    for record in records:
        year = extract_year(record.get("month"))
        if year is None or not start <= year <= end:
            continue
        diverted = sum(parse_float(record.get(field)) for field in DSNY_RECYCLED_FIELDS)
        waste[year] += parse_float(record.get("refusetonscollected")) + diverted
        recycled[year] += diverted

    trend = [
        {
            "year": year,
            "total_waste": waste[year] / 1000,
            "total_recycled": recycled[year] / 1000,
            "diversion_rate": percentage(recycled[year], waste[year]),
        }
        for year in range(start, end + 1)
    ]
    reported = [entry for entry in trend if entry["total_waste"] > 0]
    current = reported[-1] if reported else None
    baseline = trend[0]
    current_rate = current["diversion_rate"] if current else 0.0
    return {
        "current_year": current["year"] if current else None,
        "current_diversion_rate": current_rate,
        "baseline_diversion_rate": baseline["diversion_rate"],
        "improvement_percent": percentage(
            current_rate - baseline["diversion_rate"], baseline["diversion_rate"]
        ),
        "total_waste_collected": current["total_waste"] if current else 0.0,
        "total_recycled": current["total_recycled"] if current else 0.0,
        "yearly_trend": trend,
    }


def aggregate(datasets: Datasets, *, today: date | None = None) -> dict[str, Any]:
    air_quality = datasets.get("air_quality", [])
    trees = datasets.get("trees", [])
    return {
        "air_quality_stats": air_quality_stats(air_quality),
        "air_quality_trends": yearly_air_quality_trends(air_quality),
        "tree_stats": tree_stats(trees),
        "tree_diameter_distribution": tree_diameter_distribution(trees),
        "ghg_emissions": ghg_emissions_stats(datasets.get("ghg", [])),
        "recycling_diversion": recycling_diversion_stats(datasets.get("dsny", [])),
    }
