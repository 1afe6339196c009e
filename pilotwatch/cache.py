"""
In-memory cache of cumulative pilot hours.

Maps a VATSIM member id (cid) to total hours on the network: either
plain pilot hours or the RatingTimes pair of piloting and controlling
hours, stored together as one value.

One cache lives for one run: it starts empty, fills lazily on the first
lookup of each cid and is never evicted. Callers may reuse it across
repeated pipeline invocations within the run.

Concurrent lookups are safe:
- Reads and writes are guarded by a lock
- A value is stored before any later read of the same cid sees a miss
- Concurrent misses for one cid share a single in-flight fetch
"""

import logging
import threading
from concurrent.futures import Future
from typing import Callable, Dict, Optional, Union

from pilotwatch.models import RatingTimes

logger = logging.getLogger(__name__)

Hours = Union[float, RatingTimes]


class HoursCache:
    """
    Thread-safe pilot hours cache with single-flight fetching.

    Writes are keyed by cid and idempotent; storing the same value twice
    is harmless.
    """

    def __init__(self, initial: Optional[Dict[int, Hours]] = None):
        self._hours: Dict[int, Hours] = dict(initial or {})
        self._pending: Dict[int, Future] = {}
        self._lock = threading.RLock()

        # Statistics
        self._hits = 0
        self._misses = 0
        self._fetches = 0

    def get(self, cid: int) -> Optional[Hours]:
        """Return cached hours for cid, or None if not cached."""
        with self._lock:
            if cid in self._hours:
                self._hits += 1
                return self._hours[cid]
            self._misses += 1
            return None

    def set(self, cid: int, hours: Hours) -> None:
        with self._lock:
            self._hours[cid] = hours

    def get_or_fetch(self, cid: int, fetch: Callable[[int], Hours]) -> Hours:
        """
        Return cached hours for cid, fetching and storing them on a miss.

        Hit and miss counters are left to get(); this only counts fetches.

        If another thread is already fetching the same cid, wait for its
        result instead of issuing a second fetch. A failed fetch is not
        cached; the error is raised to every waiter.
        """
        with self._lock:
            if cid in self._hours:
                return self._hours[cid]

            future = self._pending.get(cid)
            owner = future is None
            if owner:
                future = Future()
                self._pending[cid] = future

        if not owner:
            logger.debug(f'Waiting on in-flight fetch for cid {cid}')
            return future.result()

        try:
            hours = fetch(cid)
        except Exception as e:
            with self._lock:
                self._pending.pop(cid, None)
            future.set_exception(e)
            raise

        with self._lock:
            self._hours[cid] = hours
            self._fetches += 1
            self._pending.pop(cid, None)
        future.set_result(hours)

        logger.debug(f'Cached {hours} hours for cid {cid}')
        return hours

    def __contains__(self, cid: int) -> bool:
        with self._lock:
            return cid in self._hours

    def __len__(self) -> int:
        with self._lock:
            return len(self._hours)

    def snapshot(self) -> Dict[int, Hours]:
        """Copy of the cached values."""
        with self._lock:
            return dict(self._hours)

    def clear(self) -> None:
        """Clear entire cache."""
        with self._lock:
            self._hours.clear()

    @property
    def stats(self) -> dict:
        """Get cache statistics."""
        with self._lock:
            lookups = self._hits + self._misses
            return {
                'entries': len(self._hours),
                'hits': self._hits,
                'misses': self._misses,
                'fetches': self._fetches,
                'in_flight': len(self._pending),
                'hit_rate': self._hits / lookups if lookups > 0 else 0,
            }
