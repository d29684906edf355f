from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Any

from ..gateway.soda_client import RawRecord
from ..normalization.categories import Borough, PaymentMethod, normalize_payment_method
from ..normalization.parsing import extract_year, parse_date, parse_float, parse_int, text
from ..normalization.taxi_zones import zone_borough, zone_name
from .common import Datasets, breakdown, percentage, safe_ratio, tally

TOP_N = 10
RECENT_TREND_THRESHOLD = 2.0  # percentage points
_MODEL_YEAR = re.compile(r"^\d{4}$")


# ---------------------------------------------------------------------------
# For-hire vehicles
# ---------------------------------------------------------------------------


def fhv_stats(vehicles: Sequence[RawRecord]) -> dict[str, Any]:
    bases: Counter[str] = Counter()
    model_years: Counter[str] = Counter()
    for vehicle in vehicles:
        base = text(vehicle, "base_name") or text(vehicle, "name")
        if base:
            bases[base] += 1
        year = text(vehicle, "vehicle_year")
        if _MODEL_YEAR.match(year):
            model_years[year] += 1

    return {
        "total_vehicles": len(vehicles),
        "active_vehicles": sum(1 for v in vehicles if text(v, "active").upper() == "YES"),
        "wheelchair_accessible": sum(
            1 for v in vehicles if text(v, "wheelchair_accessible").upper() in ("YES", "WAV")
        ),
        "by_base_type": breakdown(tally(vehicles, lambda v: text(v, "base_type", "Unknown")), "base_type"),
        "vehicles_by_year": dict(sorted(model_years.items())),
        "top_bases": [{"name": name, "vehicles": count} for name, count in bases.most_common(TOP_N)],
    }


# ---------------------------------------------------------------------------
# Yellow taxi trips
# ---------------------------------------------------------------------------


def _is_valid_trip(trip: RawRecord) -> bool:
    return parse_float(trip.get("total_amount")) > 0 and parse_float(trip.get("trip_distance")) > 0


def _top_zones(counts: Counter[str]) -> list[dict[str, Any]]:
    return [
        {"zone": zone, "zone_name": zone_name(zone), "trips": trips}
        for zone, trips in counts.most_common(TOP_N)
    ]


def taxi_stats(trips: Sequence[RawRecord]) -> dict[str, Any]:
    """Fare, distance and zone statistics over trips with a positive fare and distance."""
    valid = [t for t in trips if _is_valid_trip(t)]
    n = len(valid)

    revenue = fares = distance = tips = 0.0
    passengers = 0
    short = medium = long_ = 0
    pickups: Counter[str] = Counter()
    dropoffs: Counter[str] = Counter()
    boroughs: Counter[str] = Counter()
    payments = tally(valid, lambda t: normalize_payment_method(t.get("payment_type")))

    for trip in valid:
        miles = parse_float(trip.get("trip_distance"))
        revenue += parse_float(trip.get("total_amount"))
        fares += parse_float(trip.get("fare_amount"))
        distance += miles
        tips += parse_float(trip.get("tip_amount"))
        passengers += parse_int(trip.get("passenger_count"))

        if miles < 1:
            short += 1
        elif miles <= 5:
            medium += 1
        else:
            long_ += 1

        pickup = text(trip, "pulocationid", "Unknown")
        pickups[pickup] += 1
        dropoffs[text(trip, "dolocationid", "Unknown")] += 1
        boroughs[zone_borough(pickup).value] += 1

    return {
        "total_trips": n,
        "total_revenue": revenue,
        "avg_fare": safe_ratio(fares, n),
        "avg_trip_distance": safe_ratio(distance, n),
        "avg_passengers": safe_ratio(passengers, n),
        "total_tips": tips,
        "avg_tip_amount": safe_ratio(tips, n),
        "card_payments": payments[PaymentMethod.CREDIT_CARD.value],
        "cash_payments": payments[PaymentMethod.CASH.value],
        "short_trips": short,
        "medium_trips": medium,
        "long_trips": long_,
        "top_pickup_zones": _top_zones(pickups),
        "top_dropoff_zones": _top_zones(dropoffs),
        "by_borough": breakdown(boroughs, "borough", exclude=[Borough.UNKNOWN]),
    }


def hourly_demand(trips: Sequence[RawRecord]) -> list[dict[str, Any]]:
    """Trips and average metered fare for each pickup hour 0-23."""
    counts = [0] * 24
    fares = [0.0] * 24
    for trip in trips:
        picked_up = parse_date(trip.get("tpep_pickup_datetime"))
        fare = parse_float(trip.get("fare_amount"))
        if picked_up is None or fare <= 0:
            continue
        counts[picked_up.hour] += 1
        fares[picked_up.hour] += fare
    return [
        {"hour": hour, "trips": counts[hour], "avg_fare": safe_ratio(fares[hour], counts[hour])}
        for hour in range(24)
    ]


def payment_methods(trips: Sequence[RawRecord]) -> list[dict[str, Any]]:
    counts = tally(trips, lambda t: normalize_payment_method(t.get("payment_type")))
    ordered = {method.value: counts[method.value] for method in PaymentMethod}
    return [
        {"method": method, "count": count, "percentage": percentage(count, len(trips))}
        for method, count in ordered.items()
        if count > 0
    ]


# ---------------------------------------------------------------------------
# Subway on-time performance
# ---------------------------------------------------------------------------


class _OnTime:
    __slots__ = ("on_time", "scheduled")

    def __init__(self) -> None:
        self.on_time = 0.0
        self.scheduled = 0.0

    @property
    def performance(self) -> float:
        return percentage(self.on_time, self.scheduled)


def _legacy_performance(records: Iterable[RawRecord], yearly: dict[int, _OnTime]) -> None:
    """NYC Transit on-time indicators: ``ytd_actual`` is a 0-1 fraction, last row wins."""
    for record in records:
        if "NYC Transit" not in text(record, "agency_name"):
            continue
        if "on-time" not in text(record, "indicator_name").lower():
            continue
        year = extract_year(record.get("period_year"))
        ytd = parse_float(record.get("ytd_actual"))
        if year is None or not 0 < ytd <= 1:
            continue
        bucket = yearly.setdefault(year, _OnTime())
        bucket.on_time = ytd * 100
        bucket.scheduled = 100


def _terminal_performance(
    records: Iterable[RawRecord],
    yearly: dict[int, _OnTime],
    divisions: dict[str, _OnTime],
    lines: dict[str, _OnTime],
) -> None:
    for record in records:
        year = extract_year(record.get("month"))
        if year is None:
            continue
        on_time = parse_int(record.get("num_on_time_trips"))
        scheduled = parse_int(record.get("num_sched_trips"))
        for bucket in (
            yearly.setdefault(year, _OnTime()),
            divisions.setdefault(text(record, "division", "Unknown"), _OnTime()),
            lines.setdefault(text(record, "line", "Unknown"), _OnTime()),
        ):
            bucket.on_time += on_time
            bucket.scheduled += scheduled


def subway_performance(
    legacy: Sequence[RawRecord],
    recent: Sequence[RawRecord],
    current: Sequence[RawRecord],
) -> dict[str, Any]:
    yearly: dict[int, _OnTime] = {}
    divisions: dict[str, _OnTime] = {}
    lines: dict[str, _OnTime] = {}
    _legacy_performance(legacy, yearly)
    _terminal_performance(recent, yearly, divisions, lines)
    _terminal_performance(current, yearly, divisions, lines)

    trend = [
        {
            "year": year,
            "on_time_performance": yearly[year].performance,
            "total_trips": yearly[year].scheduled,
            "on_time_trips": yearly[year].on_time,
        }
        for year in sorted(yearly)
    ]

    current_perf = trend[-1]["on_time_performance"] if trend else 0.0
    first_perf = trend[0]["on_time_performance"] if trend else 0.0
    by_performance = sorted(trend, key=lambda t: t["on_time_performance"], reverse=True)
    best = by_performance[0] if by_performance else None
    worst = by_performance[-1] if by_performance else None

    recent_trend = "stable"
    window = trend[-3:]
    if len(window) >= 2:
        diff = window[-1]["on_time_performance"] - window[0]["on_time_performance"]
        if diff > RECENT_TREND_THRESHOLD:
            recent_trend = "improving"
        elif diff < -RECENT_TREND_THRESHOLD:
            recent_trend = "declining"

    by_division = [
        {"division": name, "performance": b.performance, "total_trips": b.scheduled}
        for name, b in divisions.items()
    ]
    by_division.sort(key=lambda d: d["performance"], reverse=True)
    by_line = [
        {"line": name, "performance": b.performance, "total_trips": b.scheduled}
        for name, b in lines.items()
    ]
    by_line.sort(key=lambda d: d["total_trips"], reverse=True)

    return {
        "yearly_trend": trend,
        "current_year_performance": current_perf,
        "best_year": {"year": best["year"], "performance": best["on_time_performance"]} if best else None,
        "worst_year": {"year": worst["year"], "performance": worst["on_time_performance"]} if worst else None,
        "performance_improvement": percentage(current_perf - first_perf, first_perf),
        "average_performance": safe_ratio(sum(t["on_time_performance"] for t in trend), len(trend)),
        "performance_by_division": by_division,
        "performance_by_line": by_line[:TOP_N],
        "recent_trend": recent_trend,
    }


def aggregate(datasets: Datasets, *, today: date | None = None) -> dict[str, Any]:
    taxi = datasets.get("taxi", [])
    return {
        "fhv_stats": fhv_stats(datasets.get("fhv", [])),
        "taxi_stats": taxi_stats(taxi),
        "hourly_demand": hourly_demand(taxi),
        "payment_methods": payment_methods(taxi),
        "subway_performance": subway_performance(
            datasets.get("mta_2013_2021", []),
            datasets.get("mta_2023_2024", []),
            datasets.get("mta_2025", []),
        ),
    }
