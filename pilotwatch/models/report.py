"""
Report models - enriched output of the pilot hours pipeline.

RatingTimes is a member's cumulative time from the ratings endpoint.
A ReportEntry pairs a callsign with cumulative pilot hours (and time
spent controlling, when known). A PilotReport holds the entries for
one run, already sorted for presentation.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from pilotwatch.models.flight_record import FlightRecord


STATS_URL = 'https://stats.vatsim.net/stats/{cid}'


def stats_url(cid: int) -> str:
    """Public VATSIM statistics page for a member."""
    return STATS_URL.format(cid=cid)


@dataclass(frozen=True)
class RatingTimes:
    """Cumulative hours a member has spent piloting and controlling."""
    pilot: float
    atc: float = 0.0


@dataclass(frozen=True)
class ReportEntry:
    """Cumulative hours for one connected pilot."""
    callsign: str
    hours: float
    cid: int
    aircraft: Optional[str] = None
    # Hours spent controlling; None when the lookup only gave pilot hours
    atc_hours: Optional[float] = None

    @property
    def stats_url(self) -> str:
        return stats_url(self.cid)

    def to_dict(self) -> dict:
        return {
            'callsign': self.callsign,
            'hours': self.hours,
            'atc_hours': self.atc_hours,
            'cid': self.cid,
            'aircraft': self.aircraft,
            'stats_url': self.stats_url,
        }


@dataclass
class PilotReport:
    """
    Result of one pipeline run around an airport.

    Entries are sorted ascending by hours.
    """
    airport: str
    max_distance: float
    alert_hours: float
    pilots_in_range: List[FlightRecord]
    entries: List[ReportEntry]
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def low_time_entries(self) -> List[ReportEntry]:
        """Entries for pilots below the alert threshold."""
        return [e for e in self.entries if e.hours < self.alert_hours]

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        low_time = {e.cid for e in self.low_time_entries()}
        return {
            'airport': self.airport,
            'max_distance': self.max_distance,
            'alert_hours': self.alert_hours,
            'pilots_in_range': [p.callsign for p in self.pilots_in_range],
            'entries': [
                dict(e.to_dict(), low_time=e.cid in low_time)
                for e in self.entries
            ],
            'count': len(self.entries),
            'generated_at': self.generated_at.isoformat(),
        }
