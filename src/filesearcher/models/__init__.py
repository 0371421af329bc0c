"""
Data models for the File Searcher.

This module contains all the core data structures used throughout the system.
"""

from .search_query import SearchQuery
from .search_results import (
    ArchiveHit,
    FilesystemHit,
    Hit,
    HitType,
    ProgressState,
    SearchPhase,
    SearchStats,
)
from .config import SearcherConfig

__all__ = [
    'SearchQuery',
    'ArchiveHit',
    'FilesystemHit',
    'Hit',
    'HitType',
    'ProgressState',
    'SearchPhase',
    'SearchStats',
    'SearcherConfig',
]
