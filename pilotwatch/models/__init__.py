"""
Data models for PilotWatch.

Plain dataclasses, no persistence:
1. FlightRecord - one pilot's live snapshot from the VATSIM data feed
2. RatingTimes - a member's cumulative piloting and controlling hours
3. ReportEntry - a callsign paired with cumulative pilot hours
4. PilotReport - the sorted result of one pipeline run
"""

from pilotwatch.models.flight_record import FlightRecord
from pilotwatch.models.report import RatingTimes, ReportEntry, PilotReport, stats_url

__all__ = [
    'FlightRecord',
    'RatingTimes',
    'ReportEntry',
    'PilotReport',
    'stats_url',
]
