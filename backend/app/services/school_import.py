"""Mapping of Department of Basic Education master-list rows to School fields."""

import logging
import re

logger = logging.getLogger(__name__)

SCHOOL_COLUMNS = (
    "nat_emis", "province", "institution_name", "status", "sector", "type_doe",
    "phase_ped", "district", "circuit", "quintile", "no_fee_school", "urban_rural",
    "longitude", "latitude", "town_city", "suburb", "township_village",
    "street_address", "postal_address", "telephone", "learners_2024", "educators_2024",
)

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")
_LEADING_FLOAT = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _first(row: dict, *keys):
    for key in keys:
        value = row.get(key)
        if value not in (None, ""):
            return value
    return None


def _number(value) -> float | None:
    if isinstance(value, (int, float)):
        return float(value)
    match = _LEADING_FLOAT.match(_text(value))
    return float(match.group(0)) if match else None


def parse_coordinate(value, limit: float) -> float | None:
    """Coordinate within [-limit, limit], else None."""
    number = _number(value)
    if number is None or number < -limit or number > limit:
        return None
    return number


def parse_count(value) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _LEADING_INT.match(_text(value))
    return int(match.group(0)) if match else 0


def parse_school_row(row: dict) -> dict | None:
    """Map one master-list row. Returns None if the row has no EMIS number."""
    school = {
        "nat_emis": _text(_first(row, "NatEmis", "NATEMIS")),
        "province": _text(row.get("Province")),
        "institution_name": _text(_first(row, "Official_Institution_Name", "Institution_Name")),
        "status": _text(row.get("Status")),
        "sector": _text(row.get("Sector")),
        "type_doe": _text(row.get("Type_DoE")),
        "phase_ped": _text(row.get("Phase_PED")),
        "district": _text(row.get("EIDistrict")),
        "circuit": _text(row.get("EICircuit")),
        "quintile": _text(row.get("Quintile")),
        "no_fee_school": _text(row.get("NoFeeSchool")),
        "urban_rural": _text(row.get("Urban_Rural")),
        "longitude": parse_coordinate(_first(row, "GIS_Longitude", "Longitude"), 180),
        "latitude": parse_coordinate(_first(row, "GIS_Latitude", "Latitude"), 90),
        "town_city": _text(_first(row, "Town_City", "towncity")),
        "suburb": _text(row.get("Suburb")),
        "township_village": _text(row.get("Township_Village")),
        "street_address": _text(row.get("StreetAddress")),
        "postal_address": _text(row.get("PostalAddress")),
        "telephone": _text(row.get("Telephone")),
        "learners_2024": parse_count(row.get("Learners2024")),
        "educators_2024": parse_count(row.get("Educators2024")),
    }
    if not school["nat_emis"]:
        logger.warning(f"Skipping row without NatEmis: {school['institution_name'] or '<unnamed>'}")
        return None
    return school


def batched(items: list, size: int = 100):
    for start in range(0, len(items), size):
        yield items[start:start + size]
