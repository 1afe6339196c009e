"""Shared fixtures: a fake HTTP session standing in for requests.Session."""

import threading
from typing import Any, Callable, Dict, List, Optional, Union

import pytest

from pilotwatch.ingestion import VatsimClient

STATUS_URL = 'https://status.test/status.json'
DATA_URL = 'https://data.test/v3/vatsim-data.json'
RATINGS_URL = 'https://api.test/ratings/{cid}/rating_times'


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self._payload = payload
        self._text = text

    def json(self) -> Any:
        if self._text is not None:
            raise ValueError('No JSON object could be decoded')
        return self._payload


Route = Union[FakeResponse, Callable[[], FakeResponse], Exception]


class FakeSession:
    """Routes GET requests by URL and records every call."""

    def __init__(self, routes: Optional[Dict[str, Route]] = None):
        self.routes: Dict[str, Route] = dict(routes or {})
        self.headers: Dict[str, str] = {}
        self.calls: List[str] = []
        self.timeouts: List[float] = []
        self._lock = threading.Lock()

    def get(self, url: str, timeout: Optional[float] = None) -> FakeResponse:
        with self._lock:
            self.calls.append(url)
            self.timeouts.append(timeout)
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(404, {'detail': 'Not found'})
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route()
        return route

    def count(self, url: str) -> int:
        with self._lock:
            return self.calls.count(url)


def pilot(cid: int, callsign: str, latitude: float = 32.7338, longitude: float = -117.1933,
          **extra: Any) -> dict:
    """A VATSIM v3 pilot object."""
    obj = {
        'cid': cid,
        'name': f'Pilot {cid}',
        'callsign': callsign,
        'latitude': latitude,
        'longitude': longitude,
        'altitude': 3500,
        'transponder': '1200',
        'logon_time': '2024-01-01T12:00:00.0000000Z',
        'flight_plan': None,
    }
    obj.update(extra)
    return obj


def ratings_url(cid: int) -> str:
    return RATINGS_URL.format(cid=cid)


def ratings(hours: float, atc: float = 0.0) -> FakeResponse:
    return FakeResponse(200, {'id': '1', 'atc': atc, 'pilot': hours})


@pytest.fixture
def session() -> FakeSession:
    return FakeSession({
        STATUS_URL: FakeResponse(200, {'data': {'v3': [DATA_URL]}}),
    })


@pytest.fixture
def client(session: FakeSession) -> VatsimClient:
    return VatsimClient(
        status_url=STATUS_URL,
        ratings_url=RATINGS_URL,
        user_agent='pilotwatch-tests',
        timeout=5.0,
        session=session,
    )
