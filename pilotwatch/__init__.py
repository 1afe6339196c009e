"""
PilotWatch Package.

Reports the cumulative flight hours of VATSIM pilots flying near an airport.

Modules:
    api/         Flask blueprints for pilot reports and service status
    models/      Dataclasses for flight records and report entries
    ingestion/   VATSIM API client and the report pipeline
    services/    Per-pilot hours enrichment with concurrent lookups
    geo.py       Airport registry and great-circle range filtering
    cache.py     Thread-safe pilot hours cache shared within a run
    config.py    Centralized configuration from environment variables
    cli.py       Command line entry point
"""

__version__ = '1.0.0'
