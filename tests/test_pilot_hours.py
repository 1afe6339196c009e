"""Tests for hours enrichment and report sorting."""

import threading
import time

import pytest

from pilotwatch.cache import HoursCache
from pilotwatch.errors import UpstreamStatusError
from pilotwatch.models import FlightRecord, RatingTimes, ReportEntry
from pilotwatch.services import enrich, sort_report

from conftest import pilot


class CountingFetch:
    """Hours lookup that records every call."""

    def __init__(self, hours=None, fail=()):
        self.hours = hours or {}
        self.fail = set(fail)
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, cid):
        with self._lock:
            self.calls.append(cid)
        if cid in self.fail:
            raise UpstreamStatusError(500, f'https://api.test/ratings/{cid}/rating_times')
        return self.hours.get(cid, float(cid))


def records(*pairs):
    return [FlightRecord.from_dict(pilot(cid, callsign)) for cid, callsign in pairs]


def test_enrich_fetches_only_cache_misses():
    cache = HoursCache({100: 5.0})
    fetch = CountingFetch({200: 1234.5})

    entries = enrich(records((100, 'AAL100'), (200, 'DAL200')), cache, fetch)

    assert fetch.calls == [200]
    assert [(e.callsign, e.hours) for e in entries] == [('AAL100', 5.0), ('DAL200', 1234.5)]
    assert cache.get(200) == 1234.5


def test_enrich_twice_over_same_cache_fetches_nothing_new():
    cache = HoursCache()
    fetch = CountingFetch()
    batch = records((1, 'A1'), (2, 'B2'), (3, 'C3'))

    first = enrich(batch, cache, fetch)
    calls_after_first = len(fetch.calls)
    second = enrich(batch, cache, fetch)

    assert calls_after_first == 3
    assert len(fetch.calls) == 3
    assert first == second


def test_enrich_duplicate_cid_in_batch_fetches_once():
    cache = HoursCache()
    fetch = CountingFetch({42: 10.0})

    entries = enrich(records((42, 'N42A'), (42, 'N42B')), cache, fetch)

    assert fetch.calls == [42]
    assert [(e.callsign, e.hours) for e in entries] == [('N42A', 10.0), ('N42B', 10.0)]


def test_enrich_concurrent_batches_with_same_cid_fetch_once():
    cache = HoursCache()
    release = threading.Event()
    calls = []

    def slow_fetch(cid):
        calls.append(cid)
        release.wait(timeout=5)
        return 7.0

    results = []
    batch = records((500, 'N500'))
    threads = [
        threading.Thread(target=lambda: results.append(enrich(batch, cache, slow_fetch)))
        for _ in range(4)
    ]
    for thread in threads:
        thread.start()
    time.sleep(0.05)
    release.set()
    for thread in threads:
        thread.join(timeout=5)

    assert calls == [500]
    assert len(results) == 4
    assert all(r == [ReportEntry('N500', 7.0, 500)] for r in results)


def test_enrich_issues_misses_concurrently():
    barrier = threading.Barrier(4, timeout=5)

    def fetch(cid):
        # Only completes if all four lookups are outstanding together
        barrier.wait()
        return float(cid)

    entries = enrich(records((1, 'A'), (2, 'B'), (3, 'C'), (4, 'D')), HoursCache(), fetch)

    assert [e.hours for e in entries] == [1.0, 2.0, 3.0, 4.0]


def test_enrich_respects_max_workers():
    active = []
    peak = []
    lock = threading.Lock()

    def fetch(cid):
        with lock:
            active.append(cid)
            peak.append(len(active))
        time.sleep(0.02)
        with lock:
            active.remove(cid)
        return 1.0

    batch = records(*[(cid, f'N{cid}') for cid in range(8)])
    entries = enrich(batch, HoursCache(), fetch, max_workers=2)

    assert len(entries) == 8
    assert max(peak) <= 2


def test_enrich_fail_fast_raises_first_failure():
    cache = HoursCache()
    fetch = CountingFetch(fail={2})

    with pytest.raises(UpstreamStatusError) as excinfo:
        enrich(records((1, 'A1'), (2, 'B2'), (3, 'C3')), cache, fetch)

    assert excinfo.value.status == 500
    assert 2 not in cache


def test_enrich_keep_going_omits_failed_pilots():
    cache = HoursCache()
    fetch = CountingFetch(fail={2})

    entries = enrich(records((1, 'A1'), (2, 'B2'), (3, 'C3')), cache, fetch, fail_fast=False)

    assert [e.cid for e in entries] == [1, 3]
    assert 2 not in cache


def test_enrich_empty_batch():
    fetch = CountingFetch()
    assert enrich([], HoursCache(), fetch) == []
    assert fetch.calls == []


def test_enrich_carries_aircraft():
    record = FlightRecord.from_dict(pilot(9, 'N9', flight_plan={'aircraft_faa': '', 'aircraft_short': 'C172'}))

    (entry,) = enrich([record], HoursCache({9: 2.0}), CountingFetch())

    assert entry.aircraft == 'C172'
    assert entry.stats_url == 'https://stats.vatsim.net/stats/9'


def test_sort_report_ascending_by_hours():
    entries = [
        ReportEntry('B', 300.0, 2),
        ReportEntry('A', 5.0, 1),
        ReportEntry('C', 12.5, 3),
    ]
    assert [e.callsign for e in sort_report(entries)] == ['A', 'C', 'B']


def test_sort_report_is_stable():
    entries = [ReportEntry('X', 1.0, 1), ReportEntry('Y', 1.0, 2), ReportEntry('Z', 0.5, 3)]
    assert [e.callsign for e in sort_report(entries)] == ['Z', 'X', 'Y']


def test_enrich_carries_controlling_hours_and_sorts_on_pilot_hours():
    cache = HoursCache({1: RatingTimes(pilot=50.0, atc=0.0)})
    fetch = CountingFetch({2: RatingTimes(pilot=10.0, atc=900.0)})

    entries = sort_report(enrich(records((1, 'A1'), (2, 'B2')), cache, fetch))

    assert entries == [
        ReportEntry('B2', 10.0, 2, atc_hours=900.0),
        ReportEntry('A1', 50.0, 1, atc_hours=0.0),
    ]
    assert cache.get(2) == RatingTimes(pilot=10.0, atc=900.0)
