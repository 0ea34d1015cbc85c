"""
Reporting Module.

Responsible for writing search histories, summaries, settings tables
and the committed model.
"""

from .reporting_engine import ReportingEngine

__all__ = [
    'ReportingEngine'
]
