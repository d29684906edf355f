"""
Total normalizers for the categorical axes found in NYC Open Data records.

Each function maps an arbitrary raw value (including ``None``, empty strings
and garbage) onto a small closed enumeration. Unrecognized input always lands
in the enumeration's Unknown/Other member; nothing here raises.
"""
from __future__ import annotations

from enum import Enum
from typing import Any


class Borough(str, Enum):
    MANHATTAN = "Manhattan"
    BROOKLYN = "Brooklyn"
    QUEENS = "Queens"
    BRONX = "Bronx"
    STATEN_ISLAND = "Staten Island"
    UNKNOWN = "Unknown"


BOROUGHS: tuple[Borough, ...] = (
    Borough.MANHATTAN,
    Borough.BROOKLYN,
    Borough.QUEENS,
    Borough.BRONX,
    Borough.STATEN_ISLAND,
)

NULL_SENTINELS = frozenset({"null", "(null)", "undefined", "none", "nan", "n/a", "na"})

# Borough names matched anywhere in the value ("The Bronx", "BROOKLYN COMMUNITY BOARD 2").
_BOROUGH_NAMES: tuple[tuple[str, Borough], ...] = (
    ("staten island", Borough.STATEN_ISLAND),
    ("manhattan", Borough.MANHATTAN),
    ("brooklyn", Borough.BROOKLYN),
    ("queens", Borough.QUEENS),
    ("bronx", Borough.BRONX),
)

# County names some datasets use in place of the borough name. Whole values
# only: "Kingsbridge" is in the Bronx and "Richmond Hill" is in Queens.
_COUNTY_ALIASES: dict[str, Borough] = {
    "kings": Borough.BROOKLYN,
    "kings county": Borough.BROOKLYN,
    "richmond": Borough.STATEN_ISLAND,
    "richmond county": Borough.STATEN_ISLAND,
    "new york county": Borough.MANHATTAN,
}


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_borough(value: Any) -> Borough:
    raw = _clean(value)
    if len(raw) <= 2:
        return Borough.UNKNOWN
    lowered = " ".join(raw.lower().split())
    if lowered in NULL_SENTINELS:
        return Borough.UNKNOWN
    if lowered in _COUNTY_ALIASES:
        return _COUNTY_ALIASES[lowered]
    for name, borough in _BOROUGH_NAMES:
        if name in lowered:
            return borough
    return Borough.UNKNOWN


def is_valid_borough_name(value: Any) -> bool:
    """
    True when ``value`` reads as a real borough name.

    Null sentinels, two-letter abbreviations (``BK``, ``MN``) and anything two
    characters or shorter are rejected so they never show up as ranking keys.
    """
    return normalize_borough(value) is not Borough.UNKNOWN


# Community school district (first two DBN characters) -> borough.
_DISTRICT_BOROUGHS: dict[str, str] = {}
for _district in range(1, 7):
    _DISTRICT_BOROUGHS[f"{_district:02d}"] = Borough.MANHATTAN.value
for _district in range(7, 13):
    _DISTRICT_BOROUGHS[f"{_district:02d}"] = Borough.BRONX.value
for _district in [*range(13, 24), 32]:
    _DISTRICT_BOROUGHS[f"{_district:02d}"] = Borough.BROOKLYN.value
for _district in range(24, 31):
    _DISTRICT_BOROUGHS[f"{_district:02d}"] = Borough.QUEENS.value
_DISTRICT_BOROUGHS["31"] = Borough.STATEN_ISLAND.value

OTHER = "Other"


def borough_from_dbn(dbn: Any) -> str:
    """Borough for a school DBN such as ``"13K123"``; unmapped districts give ``"Other"``."""
    raw = _clean(dbn)
    return _DISTRICT_BOROUGHS.get(raw[:2], OTHER)


# ── Crime severity ───────────────────────────────────────────────────────


class Severity(str, Enum):
    FELONY = "Felony"
    MISDEMEANOR = "Misdemeanor"
    VIOLATION = "Violation"
    UNKNOWN = "Unknown"


def normalize_severity(value: Any) -> Severity:
    raw = _clean(value).upper()
    if raw in ("FELONY", "F"):
        return Severity.FELONY
    if raw in ("MISDEMEANOR", "M"):
        return Severity.MISDEMEANOR
    if raw in ("VIOLATION", "V"):
        return Severity.VIOLATION
    return Severity.UNKNOWN


# ── Votes ────────────────────────────────────────────────────────────────


class VoteType(str, Enum):
    UP = "UP"
    DOWN = "DOWN"
    UNKNOWN = "UNKNOWN"


def normalize_vote_type(value: Any) -> VoteType:
    raw = _clean(value).upper()
    if raw in ("UP", "UPVOTE", "+1", "1"):
        return VoteType.UP
    if raw in ("DOWN", "DOWNVOTE", "-1"):
        return VoteType.DOWN
    return VoteType.UNKNOWN


# ── Building permits ─────────────────────────────────────────────────────


class JobType(str, Enum):
    NEW_BUILDING = "New Building"
    ALTERATION = "Alteration"
    DEMOLITION = "Demolition"
    OTHER = "Other"


def normalize_job_type(value: Any) -> JobType:
    raw = _clean(value).upper()
    if "NEW BUILDING" in raw or "NB" in raw:
        return JobType.NEW_BUILDING
    if "ALTERATION" in raw or "ALT" in raw or raw in ("A1", "A2", "A3"):
        return JobType.ALTERATION
    if "DEMOLITION" in raw or "DM" in raw:
        return JobType.DEMOLITION
    return JobType.OTHER


# ── Housing violations ───────────────────────────────────────────────────


class ViolationClass(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    OTHER = "Other"


def normalize_violation_class(value: Any) -> ViolationClass:
    raw = _clean(value).upper()
    if raw in ("A", "B", "C"):
        return ViolationClass(raw)
    return ViolationClass.OTHER


class ViolationStatus(str, Enum):
    OPEN = "Open"
    CLOSED = "Closed"
    UNKNOWN = "Unknown"


def normalize_violation_status(value: Any) -> ViolationStatus:
    raw = _clean(value).upper()
    if raw == "OPEN":
        return ViolationStatus.OPEN
    if raw in ("CLOSE", "CLOSED"):
        return ViolationStatus.CLOSED
    return ViolationStatus.UNKNOWN


# ── Restaurant inspections ───────────────────────────────────────────────


class InspectionGrade(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    OTHER = "Other"


def normalize_grade(value: Any) -> InspectionGrade:
    raw = _clean(value).upper()
    if raw in ("A", "B", "C"):
        return InspectionGrade(raw)
    return InspectionGrade.OTHER


# ── Air quality ──────────────────────────────────────────────────────────


class Pollutant(str, Enum):
    PM25 = "PM2.5"
    NO2 = "NO2"
    O3 = "O3"
    OTHER = "Other"


def normalize_pollutant(value: Any) -> Pollutant:
    raw = _clean(value).lower()
    if "pm 2.5" in raw or "pm2.5" in raw or "fine particles" in raw:
        return Pollutant.PM25
    if "no2" in raw or "nitrogen" in raw:
        return Pollutant.NO2
    if "o3" in raw or "ozone" in raw:
        return Pollutant.O3
    return Pollutant.OTHER


# ── Taxi payments ────────────────────────────────────────────────────────


class PaymentMethod(str, Enum):
    CREDIT_CARD = "Credit Card"
    CASH = "Cash"
    NO_CHARGE = "No Charge"
    DISPUTE = "Dispute"
    UNKNOWN = "Unknown"
    VOIDED = "Voided"


_PAYMENT_CODES = {
    "1": PaymentMethod.CREDIT_CARD,
    "2": PaymentMethod.CASH,
    "3": PaymentMethod.NO_CHARGE,
    "4": PaymentMethod.DISPUTE,
    "5": PaymentMethod.UNKNOWN,
    "6": PaymentMethod.VOIDED,
}


def normalize_payment_method(value: Any) -> PaymentMethod:
    return _PAYMENT_CODES.get(_clean(value), PaymentMethod.UNKNOWN)
