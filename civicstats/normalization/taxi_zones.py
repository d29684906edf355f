"""TLC taxi zone id -> (zone name, borough) lookup for the zones that carry most trips."""
from __future__ import annotations

from typing import NamedTuple

from .categories import Borough, normalize_borough


class TaxiZone(NamedTuple):
    name: str
    borough: str


TAXI_ZONES: dict[str, TaxiZone] = {
    "1": TaxiZone("Newark Airport", "EWR"),
    "2": TaxiZone("Jamaica Bay", "Queens"),
    "4": TaxiZone("Alphabet City", "Manhattan"),
    "12": TaxiZone("Annadale-Huguenot-Prince's Bay", "Staten Island"),
    "13": TaxiZone("Arden Heights", "Staten Island"),
    "24": TaxiZone("Battery Park", "Manhattan"),
    "41": TaxiZone("Central Harlem", "Manhattan"),
    "42": TaxiZone("Central Harlem North", "Manhattan"),
    "43": TaxiZone("Central Park", "Manhattan"),
    "45": TaxiZone("Chinatown", "Manhattan"),
    "48": TaxiZone("Clinton East", "Manhattan"),
    "50": TaxiZone("Clinton West", "Manhattan"),
    "68": TaxiZone("East Chelsea", "Manhattan"),
    "74": TaxiZone("East Harlem North", "Manhattan"),
    "75": TaxiZone("East Harlem South", "Manhattan"),
    "79": TaxiZone("East Village", "Manhattan"),
    "87": TaxiZone("Financial District North", "Manhattan"),
    "88": TaxiZone("Financial District South", "Manhattan"),
    "90": TaxiZone("Flatiron", "Manhattan"),
    "100": TaxiZone("Garment District", "Manhattan"),
    "103": TaxiZone("Governors Island", "Manhattan"),
    "104": TaxiZone("Gramercy", "Manhattan"),
    "105": TaxiZone("Gravesend", "Brooklyn"),
    "107": TaxiZone("Greenwich Village North", "Manhattan"),
    "113": TaxiZone("Greenwich Village South", "Manhattan"),
    "114": TaxiZone("Hamilton Heights", "Manhattan"),
    "116": TaxiZone("Highbridge Park", "Manhattan"),
    "120": TaxiZone("Hudson Sq", "Manhattan"),
    "125": TaxiZone("Inwood", "Manhattan"),
    "127": TaxiZone("JFK Airport", "Queens"),
    "128": TaxiZone("Kensington", "Brooklyn"),
    "132": TaxiZone("LaGuardia Airport", "Queens"),
    "137": TaxiZone("Lenox Hill East", "Manhattan"),
    "138": TaxiZone("Lenox Hill West", "Manhattan"),
    "140": TaxiZone("Lincoln Square East", "Manhattan"),
    "141": TaxiZone("Lincoln Square West", "Manhattan"),
    "142": TaxiZone("Little Italy/NoLiTa", "Manhattan"),
    "143": TaxiZone("Long Island City", "Queens"),
    "144": TaxiZone("Lower East Side", "Manhattan"),
    "148": TaxiZone("Manhattanville", "Manhattan"),
    "151": TaxiZone("Marble Hill", "Manhattan"),
    "152": TaxiZone("Marine Park", "Brooklyn"),
    "153": TaxiZone("Meatpacking", "Manhattan"),
    "158": TaxiZone("Midtown Center", "Manhattan"),
    "161": TaxiZone("Midtown East", "Manhattan"),
    "162": TaxiZone("Midtown North", "Manhattan"),
    "163": TaxiZone("Midtown South", "Manhattan"),
    "164": TaxiZone("Midtown West", "Manhattan"),
    "166": TaxiZone("Morningside Heights", "Manhattan"),
    "170": TaxiZone("Murray Hill", "Manhattan"),
    "186": TaxiZone("Penn Station", "Manhattan"),
    "194": TaxiZone("Prospect Heights", "Brooklyn"),
    "202": TaxiZone("Queensboro Hill", "Queens"),
    "209": TaxiZone("Riverdale", "Bronx"),
    "211": TaxiZone("Roosevelt Island", "Manhattan"),
    "224": TaxiZone("Soho", "Manhattan"),
    "229": TaxiZone("Steinway", "Queens"),
    "230": TaxiZone("Stuy Town", "Manhattan"),
    "231": TaxiZone("Sutton Place", "Manhattan"),
    "232": TaxiZone("Times Sq", "Manhattan"),
    "233": TaxiZone("Tribeca", "Manhattan"),
    "234": TaxiZone("Union Sq", "Manhattan"),
    "236": TaxiZone("Upper East Side North", "Manhattan"),
    "237": TaxiZone("Upper East Side South", "Manhattan"),
    "238": TaxiZone("Upper West Side North", "Manhattan"),
    "239": TaxiZone("Upper West Side South", "Manhattan"),
    "243": TaxiZone("Washington Heights North", "Manhattan"),
    "244": TaxiZone("Washington Heights South", "Manhattan"),
    "246": TaxiZone("West Chelsea", "Manhattan"),
    "249": TaxiZone("West Village", "Manhattan"),
    "261": TaxiZone("Williamsburg North", "Brooklyn"),
    "262": TaxiZone("Williamsburg South", "Brooklyn"),
    "263": TaxiZone("Yorkville East", "Manhattan"),
    "264": TaxiZone("Yorkville West", "Manhattan"),
}


def zone_name(zone_id: str | None) -> str:
    zone = TAXI_ZONES.get(str(zone_id or "").strip())
    return zone.name if zone else f"Zone {zone_id}"


def zone_borough(zone_id: str | None) -> Borough:
    """Borough of a zone; Newark (``EWR``) and unlisted zones are ``Unknown``."""
    zone = TAXI_ZONES.get(str(zone_id or "").strip())
    return normalize_borough(zone.borough) if zone else Borough.UNKNOWN


def zone_full_name(zone_id: str | None) -> str:
    zone = TAXI_ZONES.get(str(zone_id or "").strip())
    return f"{zone.name} ({zone.borough})" if zone else f"Zone {zone_id}"
