"""
API module for PilotWatch.

Provides REST endpoints for:
- Pilot hours reports around supported airports
- Service status and cache metrics
"""

from pilotwatch.api.pilots import pilots_bp
from pilotwatch.api.metrics import metrics_bp

__all__ = ['pilots_bp', 'metrics_bp']
