"""
PilotWatch Flask Application.

Serves pilot hours reports as JSON. One pipeline, and so one hours
cache, lives for the lifetime of the app: refreshing a report only looks
up pilots that were not seen before.

Usage:
    python -m pilotwatch.app

Or with gunicorn:
    gunicorn 'pilotwatch.app:create_app()'
"""

import logging
from typing import Optional

from flask import Flask
from flask_cors import CORS

from pilotwatch.api import metrics_bp, pilots_bp
from pilotwatch.config import config
from pilotwatch.ingestion import PilotHoursPipeline

logger = logging.getLogger(__name__)


def create_app(pipeline: Optional[PilotHoursPipeline] = None) -> Flask:
    """
    Application factory for Flask.

    Args:
        pipeline: Report pipeline to serve from.
                  Created from config if None; pass one in for testing.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = config.secret_key

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': '*'}})

    # Register API blueprints
    app.register_blueprint(pilots_bp)
    app.register_blueprint(metrics_bp)

    app.config['PILOT_PIPELINE'] = pipeline or PilotHoursPipeline()

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'Not found'}, 404

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'error': 'Internal server error'}, 500

    return app


def run_development_server():
    """Run the development server."""
    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    app = create_app()

    logger.info(f'Starting PilotWatch on http://localhost:{config.port}')
    logger.info(f'Example report: http://localhost:{config.port}/api/pilots/KSAN')

    app.run(
        host='0.0.0.0',
        port=config.port,
        debug=config.debug,
        use_reloader=False,  # Reloader would start a second pipeline with its own cache
    )


if __name__ == '__main__':
    run_development_server()
