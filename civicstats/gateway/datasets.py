from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DatasetSpec:
    """A single SODA resource and the query used to pull it."""

    name: str
    resource_id: str
    limit: int = 10000
    order: str | None = None
    where: str | None = None
    host: str = "city"  # "city" -> data.cityofnewyork.us, "state" -> data.ny.gov


# ── Business ─────────────────────────────────────────────────────────────

CERTIFIED_BUSINESSES = DatasetSpec("certified", "ci93-uc8s.json", limit=50000)
BUSINESS_ESTABLISHMENTS = DatasetSpec("establishments", "9b9u-8989.json", limit=50000)

# ── Education ────────────────────────────────────────────────────────────

SCHOOL_DEMOGRAPHICS = DatasetSpec("demographics", "s52a-8aq6.json", limit=50000)

# ── Housing ──────────────────────────────────────────────────────────────

DOB_PERMITS = DatasetSpec("permits", "ipu4-2q9a.json", order="issuance_date DESC")
HOUSING_VIOLATIONS = DatasetSpec("violations", "wvxf-dwi5.json", order="inspectiondate DESC")
HOUSING_NEW_YORK = DatasetSpec(
    "affordable", "hq68-rnsi.json", limit=50000, order="project_completion_date DESC"
)

# ── Health ───────────────────────────────────────────────────────────────

RESTAURANT_INSPECTIONS = DatasetSpec("inspections", "43nn-pn8j.json", order="inspection_date DESC")
LEADING_CAUSES_OF_DEATH = DatasetSpec("deaths", "jb7j-dtam.json", order="year DESC")
SAFETY_EVENTS = DatasetSpec("safety_events", "3vyj-dkjt.json", limit=50000, order="event_date DESC")

# ── Public safety ────────────────────────────────────────────────────────

NYPD_COMPLAINTS = DatasetSpec("complaints", "qgea-i56i.json", order="cmplnt_fr_dt DESC")
VEHICLE_COLLISIONS = DatasetSpec("collisions", "h9gi-nx95.json", order="crash_date DESC")

# ── Environment ──────────────────────────────────────────────────────────

AIR_QUALITY = DatasetSpec("air_quality", "c3uy-2p5r.json", order="start_date DESC")
STREET_TREES = DatasetSpec("trees", "uvpi-gqnh.json")
GHG_EMISSIONS = DatasetSpec("ghg", "wq7q-htne.json", where="inventory_type='Total'")
DSNY_TONNAGE = DatasetSpec("dsny", "ebb7-mvp5.json", limit=50000, order="month DESC")

# ── Transportation ───────────────────────────────────────────────────────

FHV_ACTIVE = DatasetSpec("fhv", "8wbx-tsch.json")
YELLOW_TAXI_TRIPS = DatasetSpec("taxi", "biws-g3hs.json", limit=50000)
MTA_PERFORMANCE_2013_2021 = DatasetSpec("mta_2013_2021", "cy9b-i9w9.json", limit=50000, host="state")
MTA_PERFORMANCE_2023_2024 = DatasetSpec("mta_2023_2024", "vtvh-gimj.json", limit=50000, host="state")
MTA_PERFORMANCE_2025 = DatasetSpec("mta_2025", "ks33-g5ze.json", limit=50000, host="state")
