"""
Report pipeline - orchestrates data flow from VATSIM to a pilot report.

Pipeline stages:
1. Discover: Pick a v3 data feed from the status manifest
2. Fetch: Download every connected pilot
3. Filter: Keep pilots within range of the airport
4. Enrich: Resolve cumulative hours, using the hours cache
5. Sort: Order entries ascending by hours

The hours cache belongs to the pipeline instance, so repeated runs
reuse hours already fetched.
"""

import logging
import threading
import time
from typing import Optional

from pilotwatch.cache import HoursCache
from pilotwatch.config import config
from pilotwatch.geo import airport_location, filter_by_range
from pilotwatch.ingestion.vatsim_client import VatsimClient
from pilotwatch.models import PilotReport
from pilotwatch.services.pilot_hours import enrich, sort_report

logger = logging.getLogger(__name__)


class PilotHoursPipeline:
    """
    Runs the report pipeline for an airport.

    Coordinates the VATSIM client, range filtering and hours enrichment.
    Any failure is raised to the caller; no partial report is produced.
    """

    def __init__(
        self,
        client: Optional[VatsimClient] = None,
        cache: Optional[HoursCache] = None,
        max_distance: Optional[float] = None,
        alert_hours: Optional[float] = None,
        max_workers: Optional[int] = None,
        fail_fast: Optional[bool] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            client: VATSIM API client (created from config if None)
            cache: Hours cache shared by every run (new if None)
            max_distance: Default radius around the airport
            alert_hours: Entries below this many hours are flagged
            max_workers: Cap on concurrent hours lookups
            fail_fast: Abort the run on the first failed lookup
        """
        self.client = client or VatsimClient.from_config()
        self.cache = cache if cache is not None else HoursCache()
        self.max_distance = config.pipeline.max_distance if max_distance is None else max_distance
        self.alert_hours = config.pipeline.alert_hours if alert_hours is None else alert_hours
        self.max_workers = config.pipeline.max_workers if max_workers is None else max_workers
        self.fail_fast = config.pipeline.fail_fast if fail_fast is None else fail_fast

        # State tracking, shared by concurrent runs
        self._lock = threading.Lock()
        self._last_run_time: float = 0
        self._run_count: int = 0
        self._error_count: int = 0

    def run(self, airport: str, max_distance: Optional[float] = None) -> PilotReport:
        """
        Execute one pipeline run.

        Returns a PilotReport with entries sorted ascending by hours.

        Raises:
            UnsupportedAirportError before any network traffic
            UpstreamStatusError, MalformedResponseError from the client
        """
        max_distance = self.max_distance if max_distance is None else max_distance

        # Validate up front so a bad airport costs no requests
        airport_location(airport)

        try:
            # Stage 1-2: Discover and fetch
            url = self.client.discover_endpoint()
            records = self.client.fetch_online_records(url)

            # Stage 3: Filter
            in_range = filter_by_range(records, airport, max_distance)
            logger.info(
                f'{len(in_range)} of {len(records)} pilots within {max_distance} of {airport}'
            )

            # Stage 4: Enrich
            entries = enrich(
                in_range,
                self.cache,
                self.client.fetch_rating_times,
                max_workers=self.max_workers,
                fail_fast=self.fail_fast,
            )
        except Exception as e:
            with self._lock:
                self._error_count += 1
            logger.error(f'Pipeline run for {airport} failed: {e}')
            raise

        with self._lock:
            self._run_count += 1
            self._last_run_time = time.time()

        # Stage 5: Sort
        return PilotReport(
            airport=airport,
            max_distance=max_distance,
            alert_hours=self.alert_hours,
            pilots_in_range=in_range,
            entries=sort_report(entries),
        )

    @property
    def stats(self) -> dict:
        """Get pipeline statistics."""
        with self._lock:
            counters = {
                'run_count': self._run_count,
                'error_count': self._error_count,
                'last_run_time': self._last_run_time,
            }
        return {
            **counters,
            'cache': self.cache.stats,
            'requests': self.client.stats,
        }
