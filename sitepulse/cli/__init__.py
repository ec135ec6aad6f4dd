"""CLI module for SitePulse.

This package provides the command-line interface for running popularity
analyses and formatting their reports.
"""

from .main import app, ExitCode
from .summary import ReportFormatter, OUTPUT_FORMATS

__all__ = [
    'app',
    'ExitCode',
    'ReportFormatter',
    'OUTPUT_FORMATS',
]
