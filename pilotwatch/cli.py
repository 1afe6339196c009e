"""
PilotWatch command line interface.

Prints the cumulative hours of pilots connected near an airport,
lowest first.

Usage:
    pilotwatch KSAN
    pilotwatch KLAX --radius 50
    pilotwatch --show-airports
"""

import argparse
import logging
import math
import sys
from typing import Optional, Sequence, TextIO

import requests

from pilotwatch import __version__
from pilotwatch.config import config
from pilotwatch.errors import PilotWatchError, UnsupportedAirportError
from pilotwatch.geo import AIRPORTS
from pilotwatch.ingestion import PilotHoursPipeline
from pilotwatch.models import PilotReport

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    parser = argparse.ArgumentParser(
        prog='pilotwatch',
        description='Show the VATSIM flight hours of pilots near an airport',
    )
    parser.add_argument(
        'airport',
        nargs='?',
        help=f'Airport to monitor the area around ({", ".join(AIRPORTS)})',
    )
    parser.add_argument(
        '--radius',
        type=float,
        default=None,
        help=f'Maximum distance from the airport (default {config.pipeline.max_distance:g})',
    )
    parser.add_argument(
        '--keep-going',
        action='store_true',
        help='Leave out pilots whose hours lookup fails instead of aborting',
    )
    parser.add_argument(
        '--show-airports',
        action='store_true',
        help='Show supported airports and exit',
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging',
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}',
    )
    return parser


def render_report(report: PilotReport, out: TextIO) -> None:
    """Write a report as a plain text table."""
    radius = f'{report.max_distance:g}'
    if not report.pilots_in_range:
        out.write(f'No pilots within {radius} of {report.airport}\n')
        return

    callsigns = ', '.join(p.callsign for p in report.pilots_in_range)
    out.write(f'Pilots within {radius} of {report.airport}: {callsigns}\n\n')

    low_time = {e.cid for e in report.low_time_entries()}
    width = max([len('CALLSIGN')] + [len(e.callsign) for e in report.entries])
    out.write(f'{"CALLSIGN":<{width}}  {"AIRCRAFT":<8}  {"ATC":>8}  {"HOURS":>10}\n')
    for entry in report.entries:
        marker = ' *' if entry.cid in low_time else ''
        atc = '-' if entry.atc_hours is None else f'{round(entry.atc_hours):,}'
        out.write(
            f'{entry.callsign:<{width}}  {entry.aircraft or "???":<8}  {atc:>8}  '
            f'{round(entry.hours):>10,}{marker}\n'
        )

    if low_time:
        out.write(f'\n* below {report.alert_hours:g} hours\n')


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run the PilotWatch CLI.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if (args.debug or config.debug) else logging.WARNING,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    if args.show_airports:
        for code, (lat, lon) in AIRPORTS.items():
            print(f'{code}  {lat:.4f}, {lon:.4f}')
        return 0

    if not args.airport:
        print('No specified airport', file=sys.stderr)
        return 1

    if args.radius is not None and not (math.isfinite(args.radius) and args.radius >= 0):
        print('Radius must be a non-negative number', file=sys.stderr)
        return 1

    airport = args.airport.upper()
    pipeline = PilotHoursPipeline(fail_fast=False if args.keep_going else None)

    try:
        report = pipeline.run(airport, max_distance=args.radius)
    except UnsupportedAirportError as e:
        print(f'{e}; supported airports: {", ".join(AIRPORTS)}', file=sys.stderr)
        return 1
    except PilotWatchError as e:
        print(f'Could not build report: {e}', file=sys.stderr)
        return 1
    except requests.RequestException as e:
        print(f'Could not reach VATSIM: {e}', file=sys.stderr)
        return 1

    render_report(report, sys.stdout)
    return 0
