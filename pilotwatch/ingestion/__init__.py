"""
Data ingestion module for PilotWatch.

Handles the VATSIM API and the pipeline that turns its data into
pilot hours reports.
"""

from pilotwatch.ingestion.vatsim_client import VatsimClient
from pilotwatch.ingestion.pipeline import PilotHoursPipeline

__all__ = ['VatsimClient', 'PilotHoursPipeline']
