"""
FlightRecord model - a pilot's live position and identity.

VATSIM pilot object format (v3 data feed, fields we use):
    cid          - Numeric VATSIM member id
    name         - Member name
    callsign     - Callsign the pilot is connected as
    latitude     - WGS84 latitude (degrees)
    longitude    - WGS84 longitude (degrees)
    altitude     - Altitude (feet)
    transponder  - Squawk code
    logon_time   - ISO timestamp of the session start
    flight_plan  - Filed flight plan, or null
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from pilotwatch.errors import MalformedResponseError


REQUIRED_FIELDS = (
    'cid', 'callsign', 'latitude', 'longitude',
    'altitude', 'transponder', 'logon_time',
)


def _aircraft_from_flight_plan(flight_plan: Optional[Dict[str, Any]]) -> Optional[str]:
    """Pick the FAA aircraft code, then the short code, from a flight plan."""
    if not isinstance(flight_plan, dict):
        return None
    for key in ('aircraft_faa', 'aircraft_short'):
        value = flight_plan.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


@dataclass(frozen=True)
class FlightRecord:
    """
    Parsed pilot record from the VATSIM data feed.

    Records are immutable once fetched; a new fetch produces new records.
    """
    cid: int
    callsign: str
    latitude: float
    longitude: float
    altitude: int
    transponder: str
    logon_time: str
    name: Optional[str] = None
    aircraft: Optional[str] = None

    @classmethod
    def from_dict(cls, obj: Dict[str, Any], url: Optional[str] = None) -> 'FlightRecord':
        """
        Parse a VATSIM pilot object into a FlightRecord.

        Raises MalformedResponseError if a required field is missing
        or has the wrong type.
        """
        if not isinstance(obj, dict):
            raise MalformedResponseError('Pilot entry is not an object', url)

        missing = [key for key in REQUIRED_FIELDS if obj.get(key) is None]
        if missing:
            raise MalformedResponseError(
                f'Pilot entry missing fields: {", ".join(missing)}', url
            )

        try:
            return cls(
                cid=int(obj['cid']),
                callsign=str(obj['callsign']),
                latitude=float(obj['latitude']),
                longitude=float(obj['longitude']),
                altitude=int(obj['altitude']),
                transponder=str(obj['transponder']),
                logon_time=str(obj['logon_time']),
                name=obj.get('name'),
                aircraft=_aircraft_from_flight_plan(obj.get('flight_plan')),
            )
        except (TypeError, ValueError) as e:
            raise MalformedResponseError(f'Invalid pilot entry: {e}', url) from e

    @property
    def position(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'cid': self.cid,
            'callsign': self.callsign,
            'name': self.name,
            'aircraft': self.aircraft,
            'position': {
                'latitude': self.latitude,
                'longitude': self.longitude,
            },
            'altitude': self.altitude,
            'transponder': self.transponder,
            'logon_time': self.logon_time,
        }
