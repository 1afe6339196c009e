"""
Pilot hours service - enriches flight records with cumulative hours.

Cache hits are answered immediately. Misses are fanned out over a thread
pool, one worker per distinct missing cid unless capped, and joined
before the entries are returned.

Failure policy is fail-fast by default: the first failed lookup cancels
outstanding work and is raised to the caller. With fail_fast=False,
failed pilots are logged and left out of the result.
"""

import logging
from concurrent.futures import ALL_COMPLETED, FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Callable, Dict, Iterable, List, Optional

from pilotwatch.cache import Hours, HoursCache
from pilotwatch.models import FlightRecord, RatingTimes, ReportEntry

logger = logging.getLogger(__name__)


def enrich(
    records: Iterable[FlightRecord],
    cache: HoursCache,
    fetch_hours: Callable[[int], Hours],
    max_workers: Optional[int] = None,
    fail_fast: bool = True,
) -> List[ReportEntry]:
    """
    Resolve cumulative hours for each record.

    Args:
        records: Pilots to look up
        cache: Hours cache shared by the run; updated in place
        fetch_hours: Lookup for one cid, called only on cache misses.
            Returns pilot hours, or RatingTimes to also carry
            controlling hours into the entry.
        max_workers: Cap on concurrent lookups (None or 0 = one per miss)
        fail_fast: Raise on the first failed lookup

    Returns:
        One ReportEntry per record that resolved, in input order.
        Ordering for presentation is sort_report's job.
    """
    records = list(records)
    resolved: Dict[int, Hours] = {}
    missing: List[int] = []

    for record in records:
        if record.cid in resolved or record.cid in missing:
            continue
        hours = cache.get(record.cid)
        if hours is None:
            missing.append(record.cid)
        else:
            logger.debug(f'Hours cache hit for {record.callsign} ({record.cid})')
            resolved[record.cid] = hours

    if missing:
        logger.info(f'Fetching hours for {len(missing)} pilots')
        resolved.update(_fetch_missing(missing, cache, fetch_hours, max_workers, fail_fast))

    return [_entry(record, resolved[record.cid]) for record in records if record.cid in resolved]


def _entry(record: FlightRecord, hours: Hours) -> ReportEntry:
    if isinstance(hours, RatingTimes):
        return ReportEntry(
            callsign=record.callsign,
            hours=hours.pilot,
            cid=record.cid,
            aircraft=record.aircraft,
            atc_hours=hours.atc,
        )
    return ReportEntry(
        callsign=record.callsign,
        hours=hours,
        cid=record.cid,
        aircraft=record.aircraft,
    )


def _fetch_missing(
    cids: List[int],
    cache: HoursCache,
    fetch_hours: Callable[[int], Hours],
    max_workers: Optional[int],
    fail_fast: bool,
) -> Dict[int, Hours]:
    """Fetch hours for cache misses concurrently and join the results."""
    workers = min(max_workers, len(cids)) if max_workers else len(cids)
    resolved: Dict[int, Hours] = {}

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='pilot-hours') as pool:
        futures = {
            pool.submit(cache.get_or_fetch, cid, fetch_hours): cid
            for cid in cids
        }
        done, not_done = wait(
            futures,
            return_when=FIRST_EXCEPTION if fail_fast else ALL_COMPLETED,
        )

        if fail_fast:
            for future in done:
                error = future.exception()
                if error is not None:
                    for pending in not_done:
                        pending.cancel()
                    logger.error(f'Hours lookup failed for cid {futures[future]}: {error}')
                    raise error

        for future in futures:
            if future.cancelled():
                continue
            cid = futures[future]
            error = future.exception()
            if error is not None:
                logger.warning(f'Skipping cid {cid}, hours lookup failed: {error}')
                continue
            resolved[cid] = future.result()

    return resolved


def sort_report(entries: Iterable[ReportEntry]) -> List[ReportEntry]:
    """Sort entries ascending by hours; ties keep their order."""
    return sorted(entries, key=lambda e: e.hours)
