"""
Shared building blocks for the per-domain aggregation engines.

Conventions used by every engine:
- Division never raises; a zero denominator yields 0.
- Percentages are left unrounded.
- Ranked lists are ordered by count descending with ties kept in the order
  the values were first seen (``Counter.most_common`` is stable).
- Yearly series cover a fixed window and emit explicit zeros for empty years.
"""
from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Hashable, Iterable, Mapping, Sequence
from datetime import date
from typing import Any, TypeVar

from ..gateway.soda_client import RawRecord

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

Datasets = Mapping[str, Sequence[RawRecord]]


def safe_ratio(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    return numerator / denominator


def percentage(part: float, total: float) -> float:
    return safe_ratio(part, total) * 100


def label(value: Any) -> Any:
    """Plain JSON value for enum members, untouched otherwise."""
    return getattr(value, "value", value)


def breakdown(
    counts: Mapping[Any, float],
    dimension: str,
    *,
    exclude: Iterable[Any] = (),
    limit: int | None = None,
    total: float | None = None,
    value_field: str = "count",
) -> list[dict[str, Any]]:
    """
    Turn a tally into ``[{dimension: value, value_field: n, "percentage": p}, ...]``.

    Entries whose key is in ``exclude`` are dropped and do not count towards
    the total, so the remaining percentages still sum to ~100. Pass ``total``
    explicitly when percentages should be relative to something else (for
    example the whole domain when only a top-N slice is shown).
    """
    excluded = {label(e) for e in exclude}
    kept: Counter[Any] = Counter()
    for key, count in counts.items():
        if label(key) in excluded:
            continue
        kept[label(key)] += count

    denominator = sum(kept.values()) if total is None else total
    return [
        {dimension: key, value_field: count, "percentage": percentage(count, denominator)}
        for key, count in kept.most_common(limit)
    ]


def tally(records: Iterable[T], key: Callable[[T], Any]) -> Counter[Any]:
    counter: Counter[Any] = Counter()
    for record in records:
        counter[label(key(record))] += 1
    return counter


def yearly_counts(
    counts: Mapping[int, float],
    start: int,
    end: int,
    field: str = "count",
) -> list[dict[str, Any]]:
    """Zero-filled ``[{"year": y, field: n}]`` for every year in ``start..end`` inclusive."""
    return [{"year": year, field: counts.get(year, 0)} for year in range(start, end + 1)]


def yearly_series(
    buckets: Mapping[int, Mapping[str, float]],
    start: int,
    end: int,
    fields: Sequence[str],
) -> list[dict[str, Any]]:
    series = []
    for year in range(start, end + 1):
        bucket = buckets.get(year, {})
        entry: dict[str, Any] = {"year": year}
        for field in fields:
            entry[field] = bucket.get(field, 0)
        series.append(entry)
    return series


def latest_by(
    records: Iterable[T],
    key: Callable[[T], K],
    order: Callable[[T], Any],
) -> list[T]:
    """
    Keep one record per ``key``: the one with the greatest ``order`` value.

    Ties keep the record seen first. Output follows the first-seen order of keys.
    """
    best: dict[K, tuple[Any, T]] = {}
    for record in records:
        k = key(record)
        rank = order(record)
        current = best.get(k)
        if current is None or rank > current[0]:
            best[k] = (rank, record)
    return [record for _, record in best.values()]


def years_ago(today: date, years: int) -> date:
    """``today`` shifted back by whole years (29 Feb falls back to 28 Feb)."""
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        return today.replace(year=today.year - years, day=28)


def growth(current: float, previous: float) -> tuple[float, float]:
    """Absolute and percentage change from ``previous`` to ``current``."""
    delta = current - previous
    return delta, percentage(delta, previous) if previous > 0 else 0.0
