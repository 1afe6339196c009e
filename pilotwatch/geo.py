"""
Airport registry and great-circle range filtering.

Distances are reported in whole units: the haversine distance in meters
is scaled by DISTANCE_SCALE and rounded, so range checks compare integers.

Usage:
    from pilotwatch.geo import filter_by_range

    nearby = filter_by_range(records, 'KSAN', 30)
"""

import math
from typing import Dict, Iterable, List, Tuple

from pilotwatch.errors import UnsupportedAirportError
from pilotwatch.models import FlightRecord

EARTH_RADIUS_M = 6371e3

# Calibration constant from meters to reporting units
DISTANCE_SCALE = 0.00054


# Supported airports (ICAO identifier -> lat, lon)
AIRPORTS: Dict[str, Tuple[float, float]] = {
    'KSAN': (32.7338, -117.1933),
    'KLAX': (33.9416, -118.4085),
    'KSNA': (33.6762, -117.8675),
    'KLAS': (36.084, -115.1537),
}


def _round_half_up(value: float) -> int:
    whole = math.floor(value)
    if value - whole >= 0.5:
        whole += 1
    return int(whole)


def haversine_distance(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate great-circle distance between two points in meters.

    <https://www.movable-type.co.uk/scripts/latlong.html>
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) *
        math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def distance(point_a: Tuple[float, float], point_b: Tuple[float, float]) -> int:
    """
    Distance between two (lat, lon) points in reporting units.

    Halves round up, so 29.5 counts as 30.
    """
    meters = haversine_distance(point_a[0], point_a[1], point_b[0], point_b[1])
    return _round_half_up(meters * DISTANCE_SCALE)


def airport_location(airport: str) -> Tuple[float, float]:
    """Look up an airport's coordinates in the registry."""
    location = AIRPORTS.get(airport)
    if location is None:
        raise UnsupportedAirportError(airport)
    return location


def filter_by_range(
    records: Iterable[FlightRecord],
    airport: str,
    max_distance: float,
) -> List[FlightRecord]:
    """
    Filter records down to those within max_distance of the airport.

    The boundary is inclusive and input order is preserved.
    """
    location = airport_location(airport)
    return [
        record for record in records
        if distance(record.position, location) <= max_distance
    ]
