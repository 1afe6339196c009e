"""
Metrics API endpoints.

Provides endpoints for:
- GET /api/metrics/status - Pipeline, cache and configuration status
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

logger = logging.getLogger(__name__)

metrics_bp = Blueprint('metrics', __name__, url_prefix='/api/metrics')


@metrics_bp.route('/status', methods=['GET'])
def get_system_status():
    """
    Get service status information.

    Returns:
    - Pipeline run and error counts
    - Hours cache statistics
    - Request counts per VATSIM endpoint
    - Pipeline settings
    """
    start_time = time.perf_counter()

    pipeline = current_app.config['PILOT_PIPELINE']
    stats = pipeline.stats

    query_time_ms = (time.perf_counter() - start_time) * 1000

    return jsonify({
        'status': 'healthy' if stats['error_count'] == 0 else 'degraded',
        'pipeline': {
            'run_count': stats['run_count'],
            'error_count': stats['error_count'],
            'last_run_time': stats['last_run_time'],
        },
        'cache': stats['cache'],
        'requests': stats['requests'],
        'config': {
            'max_distance': pipeline.max_distance,
            'alert_hours': pipeline.alert_hours,
            'max_workers': pipeline.max_workers,
            'fail_fast': pipeline.fail_fast,
        },
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'query_time_ms': round(query_time_ms, 2),
    })
