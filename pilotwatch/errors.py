"""
PilotWatch exception hierarchy.

Every failure the pipeline surfaces to its caller derives from
PilotWatchError, so entry points can handle them in one place.
"""

from typing import Optional


class PilotWatchError(Exception):
    """Base exception for all PilotWatch failures."""


class ConfigError(PilotWatchError):
    """Raised for invalid configuration values."""


class UpstreamStatusError(PilotWatchError):
    """Raised when a VATSIM endpoint answers with a non-200 status."""

    def __init__(self, status: int, url: str):
        self.status = status
        self.url = url
        super().__init__(f'Got status {status} from {url}')


class UnsupportedAirportError(PilotWatchError):
    """Raised for airports missing from the registry."""

    def __init__(self, airport: str):
        self.airport = airport
        super().__init__(f'Unsupported airport "{airport}"')


class MalformedResponseError(PilotWatchError):
    """Raised when a response body lacks the expected fields."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        if url:
            message = f'{message} (from {url})'
        super().__init__(message)
