"""
Core services for the application.

This package contains the main service implementations: the entry repository,
view formatting, chart rendering, the form controller and notes analysis.
"""

from .formatter import ChartSeries, TableRow
from .repository import EntryRepository
from .charts import ChartRenderer, TerminalChartRenderer
from .notes_analysis import NotesAnalysis, NotesAnalyzer
from .form_controller import FormController

__all__ = [
    "ChartSeries",
    "TableRow",
    "EntryRepository",
    "ChartRenderer",
    "TerminalChartRenderer",
    "NotesAnalysis",
    "NotesAnalyzer",
    "FormController",
]
