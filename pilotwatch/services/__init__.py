"""
Enrichment services.

Resolves per-pilot data from external lookups, reusing cached values
and fanning out the lookups that miss.
"""

from pilotwatch.services.pilot_hours import enrich, sort_report

__all__ = ['enrich', 'sort_report']
