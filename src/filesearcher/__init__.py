"""
File Searcher - Core Package

A concurrent filesystem search engine that matches entry names against a
query, looks inside zip archives, and reports progress while it runs.
"""

from .core.search_session import SearchSession
from .models.config import SearcherConfig
from .models.search_query import SearchQuery
from .models.search_results import (
    ArchiveHit,
    FilesystemHit,
    ProgressState,
    SearchPhase,
    SearchStats,
)
from .tools.archive_inspector import ArchiveError, ExtractionError
from .tools.matcher import matches

__version__ = "0.1.0"
__author__ = "File Searcher Team"

__all__ = [
    'SearchSession',
    'SearcherConfig',
    'SearchQuery',
    'ArchiveHit',
    'FilesystemHit',
    'ProgressState',
    'SearchPhase',
    'SearchStats',
    'ArchiveError',
    'ExtractionError',
    'matches',
]
