"""
VATSIM network API client.

Handles communication with the three VATSIM endpoints used by the report:
- Status manifest: lists candidate v3 data feed URLs
- v3 data feed: every pilot currently connected
- Ratings: a member's cumulative time per rating

Status manifest format:
    {"data": {"v3": ["https://data.vatsim.net/v3/vatsim-data.json", ...]}}

Ratings format (fields we use):
    {"pilot": 1234.5, "atc": 0.0, ...}

Every non-200 response raises UpstreamStatusError. There are no retries.
"""

import logging
import random
import threading
from collections import Counter
from typing import Any, List, Optional, Sequence

import requests

from pilotwatch.config import config
from pilotwatch.errors import MalformedResponseError, UpstreamStatusError
from pilotwatch.models import FlightRecord, RatingTimes

logger = logging.getLogger(__name__)


def choose_endpoint(urls: Sequence[str], rng: Optional[random.Random] = None) -> str:
    """
    Pick one data feed URL uniformly at random.

    Raises MalformedResponseError if there is nothing to choose from.
    """
    if not urls:
        raise MalformedResponseError('No v3 URLs returned')
    return (rng or random).choice(list(urls))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def sort_by_callsign(records: List[FlightRecord]) -> List[FlightRecord]:
    """Sort records by lowercased callsign; equal callsigns keep their order."""
    return sorted(records, key=lambda r: r.callsign.lower())


class VatsimClient:
    """
    Client for the VATSIM status, data and ratings APIs.

    Handles:
    - Random selection of a data feed from the status manifest
    - Parsing of the pilot list into FlightRecords
    - Per-member hours lookups
    """

    def __init__(
        self,
        status_url: str = 'https://status.vatsim.net/status.json',
        ratings_url: str = 'https://api.vatsim.net/api/ratings/{cid}/rating_times',
        user_agent: str = 'github.com/pilotwatch/pilotwatch',
        timeout: float = 30.0,
        data_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the client.

        Args:
            status_url: Status manifest URL
            ratings_url: Ratings endpoint template with a {cid} placeholder
            user_agent: User-Agent header sent with every request
            timeout: Per-request timeout in seconds
            data_url: Fixed data feed URL; skips the status manifest
            session: HTTP session (a new requests.Session if None)
            rng: Random source for endpoint selection
        """
        self.status_url = status_url
        self.ratings_url = ratings_url
        self.timeout = timeout
        self.data_url = data_url
        self.rng = rng

        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': user_agent})

        self._requests = Counter()
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls) -> 'VatsimClient':
        """Create client from application configuration."""
        return cls(
            status_url=config.vatsim.status_url,
            ratings_url=config.vatsim.ratings_url,
            user_agent=config.vatsim.user_agent,
            timeout=config.vatsim.timeout_seconds,
            data_url=config.vatsim.data_url,
        )

    def _get_json(self, url: str, kind: str) -> Any:
        """
        GET a URL and decode its JSON body.

        Raises:
            UpstreamStatusError on any non-200 status
            MalformedResponseError if the body is not JSON
            requests.RequestException on network errors
        """
        logger.debug(f'Fetching {kind}: {url}')
        with self._lock:
            self._requests[kind] += 1

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout:
            logger.error(f'VATSIM {kind} request timed out: {url}')
            raise
        except requests.exceptions.RequestException as e:
            logger.error(f'VATSIM {kind} request failed: {e}')
            raise

        if response.status_code != 200:
            if response.status_code == 429:
                logger.warning(f'VATSIM rate limit exceeded on {kind} endpoint')
            else:
                logger.error(f'VATSIM {kind} endpoint returned {response.status_code}')
            raise UpstreamStatusError(response.status_code, url)

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f'Invalid JSON from {kind} endpoint', url) from e

    def discover_endpoint(self) -> str:
        """
        Get a v3 data feed URL.

        Returns the fixed data_url if one was configured, otherwise picks
        one of the manifest's v3 URLs at random.
        """
        if self.data_url:
            return self.data_url

        data = self._get_json(self.status_url, 'status')

        manifest = data.get('data') if isinstance(data, dict) else None
        urls = manifest.get('v3') if isinstance(manifest, dict) else None
        if not isinstance(urls, list):
            raise MalformedResponseError('Status manifest has no v3 URL list', self.status_url)
        if not all(isinstance(u, str) and u.strip() for u in urls):
            raise MalformedResponseError('Status manifest has an invalid v3 URL', self.status_url)

        try:
            url = choose_endpoint(urls, self.rng)
        except MalformedResponseError:
            raise MalformedResponseError('No v3 URLs returned', self.status_url) from None

        logger.info(f'Using v3 endpoint {url}')
        return url

    def fetch_online_records(self, url: str) -> List[FlightRecord]:
        """
        Fetch every connected pilot from a v3 data feed.

        Returns records sorted by callsign, case-insensitively.
        """
        data = self._get_json(url, 'data')

        pilots = data.get('pilots') if isinstance(data, dict) else None
        if not isinstance(pilots, list):
            raise MalformedResponseError('Data feed has no pilot list', url)

        records = [FlightRecord.from_dict(obj, url) for obj in pilots]
        logger.info(f'Received {len(records)} pilots from VATSIM')

        return sort_by_callsign(records)

    def fetch_rating_times(self, cid: int) -> RatingTimes:
        """
        Get the total time a member has spent piloting and controlling.

        The pilot field is required. A missing atc field counts as zero
        hours controlling; a non-numeric one is malformed.
        """
        url = self.ratings_url.format(cid=cid)
        data = self._get_json(url, 'ratings')

        if not isinstance(data, dict) or not _is_number(data.get('pilot')):
            raise MalformedResponseError(f'No pilot hours for cid {cid}', url)

        atc = data.get('atc', 0.0)
        if not _is_number(atc):
            raise MalformedResponseError(f'Invalid controlling hours for cid {cid}', url)

        return RatingTimes(pilot=data['pilot'], atc=atc)

    def fetch_cumulative_hours(self, cid: int) -> float:
        """Get the total time a member has spent piloting on the network."""
        return self.fetch_rating_times(cid).pilot

    @property
    def stats(self) -> dict:
        """Request counts per endpoint."""
        with self._lock:
            return dict(self._requests)
