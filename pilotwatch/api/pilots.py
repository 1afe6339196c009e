"""
Pilot report API endpoints.

Provides endpoints for:
- GET /api/pilots/airports - List supported airports
- GET /api/pilots/<airport> - Pilot hours report around an airport
"""

import logging
import math
import time
from datetime import datetime, timezone

import requests
from flask import Blueprint, current_app, jsonify, request

from pilotwatch.errors import (
    MalformedResponseError,
    UnsupportedAirportError,
    UpstreamStatusError,
)
from pilotwatch.geo import AIRPORTS

logger = logging.getLogger(__name__)

pilots_bp = Blueprint('pilots', __name__, url_prefix='/api/pilots')


@pilots_bp.route('/airports', methods=['GET'])
def list_airports():
    """List the airports reports can be generated for."""
    return jsonify({
        'airports': [
            {'identifier': code, 'latitude': lat, 'longitude': lon}
            for code, (lat, lon) in AIRPORTS.items()
        ],
        'count': len(AIRPORTS),
    })


@pilots_bp.route('/<airport>', methods=['GET'])
def get_report(airport: str):
    """
    Get the pilot hours report around an airport.

    Query parameters:
    - radius: number, maximum distance from the airport (default from config)

    Hours are served from the app's cache where possible, so refreshing
    a report only looks up pilots that were not seen before.
    """
    start_time = time.perf_counter()
    airport = airport.upper()

    radius = request.args.get('radius')
    if radius is not None:
        try:
            radius = float(radius)
        except ValueError:
            return jsonify({'error': 'radius must be a number'}), 400
        if not math.isfinite(radius):
            return jsonify({'error': 'radius must be a finite number'}), 400
        if radius < 0:
            return jsonify({'error': 'radius must not be negative'}), 400

    pipeline = current_app.config['PILOT_PIPELINE']

    try:
        report = pipeline.run(airport, max_distance=radius)
    except UnsupportedAirportError as e:
        return jsonify({'error': str(e)}), 404
    except (UpstreamStatusError, MalformedResponseError) as e:
        return jsonify({'error': str(e)}), 502
    except requests.RequestException as e:
        logger.error(f'VATSIM unreachable: {e}')
        return jsonify({'error': 'VATSIM API unreachable'}), 502

    query_time_ms = (time.perf_counter() - start_time) * 1000

    result = report.to_dict()
    result['timestamp'] = datetime.now(timezone.utc).isoformat()
    result['query_time_ms'] = round(query_time_ms, 2)
    return jsonify(result)
