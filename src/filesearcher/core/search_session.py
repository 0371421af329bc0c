"""
Search session orchestration for the File Searcher.

A session runs one search at a time: a counting pass to fix the progress
denominator, then a matching pass that collects hits. Callers start a search,
poll progress and results while it runs, and read the statistics once it ends.
"""

import threading
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union
import logging

from ..models.config import SearcherConfig
from ..models.search_query import SearchQuery
from ..models.search_results import Hit, ProgressState, SearchStats
from ..tools.archive_inspector import ArchiveInspector
from ..tools.fs_walker import FSWalker
from .hit_collection import HitCollection
from .progress import ProgressTracker


logger = logging.getLogger(__name__)


class SearchSession:
    """
    Runs searches and exposes their progress, hits and statistics.

    Only one search runs at a time. Starting another while one is active is
    a no-op that leaves the running search untouched.
    """

    def __init__(self, config: Optional[SearcherConfig] = None):
        """
        Initialize the search session.

        Args:
            config: Configuration (defaults are used if None)
        """
        self.config = config or SearcherConfig()
        self._inspector = ArchiveInspector(self.config.archives)
        self._walker = FSWalker(self.config, self._inspector)
        self._tracker = ProgressTracker(self.config.traversal.status_interval)
        self._hits = HitCollection()

        self._state_lock = threading.Lock()
        self._searching = False
        self._stats: Optional[SearchStats] = None
        self._query: Optional[SearchQuery] = None
        self._cancel_event = threading.Event()
        self._finished = threading.Event()
        self._finished.set()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_searching(self) -> bool:
        with self._state_lock:
            return self._searching

    @property
    def query(self) -> Optional[SearchQuery]:
        """Query of the current or most recent search."""
        return self._query

    def start_search(self, root: str, query: str) -> bool:
        """
        Start a search on a background thread.

        Args:
            root: Directory to search (the configured default root if empty)
            query: Text to look for in entry names

        Returns:
            True if the search was started, False if one is already running
        """
        search_query = self._begin(root, query)
        if search_query is None:
            return False

        self._thread = threading.Thread(
            target=self._execute,
            args=(search_query,),
            name="filesearcher-session",
            daemon=True
        )
        self._thread.start()
        return True

    def run(self, root: str, query: str) -> Optional[SearchStats]:
        """
        Run a search in the calling thread.

        Args:
            root: Directory to search (the configured default root if empty)
            query: Text to look for in entry names

        Returns:
            Statistics of the finished search, or None if another search is running
        """
        search_query = self._begin(root, query)
        if search_query is None:
            return None
        return self._execute(search_query)

    def _begin(self, root: str, query: str) -> Optional[SearchQuery]:
        """Claim the session and reset shared state, or return None if busy."""
        search_query = SearchQuery(text=query, root=self.config.resolve_root(root))

        with self._state_lock:
            if self._searching:
                logger.info("Search already in progress, ignoring new request")
                return None
            self._searching = True
            self._finished.clear()

        self._query = search_query
        self._cancel_event.clear()
        self._hits.clear()
        self._walker.reset_stats()
        self._tracker.begin_counting(search_query.root)
        return search_query

    def _execute(self, search_query: SearchQuery) -> SearchStats:
        """Run both passes and record the outcome."""
        logger.info(f"Starting search: {search_query}")
        start_time = time.perf_counter()
        stats = None

        try:
            total, errors = self._run_passes(search_query)

            cancelled = self._cancel_event.is_set()
            stats = SearchStats.from_hits(
                self._hits.snapshot(),
                root=search_query.root,
                query=search_query.text,
                total_files=total,
                errors=errors,
                elapsed_seconds=time.perf_counter() - start_time,
                cancelled=cancelled
            )

            if cancelled:
                self._tracker.cancel()
            else:
                self._tracker.finish()
        finally:
            if not self._tracker.phase.is_terminal:
                self._tracker.cancel()
            with self._state_lock:
                self._stats = stats
                self._searching = False
            self._finished.set()

        logger.info(f"Search completed with {stats.matched_files} results found.")
        return stats

    def _run_passes(self, search_query: SearchQuery) -> Tuple[int, int]:
        """
        Run the counting and matching passes.

        Both passes walk the same tree, so a directory that cannot be listed
        fails in each of them. The count pass errors are only reported when
        the matching pass does not run.

        Returns:
            Tuple of (total entries, errors)
        """
        total = 0
        errors = 0

        try:
            self._walker.count(search_query.root, self._tracker, self._cancel_event)
            total = self._tracker.total_entries
            errors = self._walker.get_stats()['errors']

            if not self._cancel_event.is_set():
                self._walker.reset_stats()
                self._tracker.begin_processing()
                self._walker.search(search_query.root, search_query.text, self._tracker,
                                    self._hits, self._cancel_event)
                walker_stats = self._walker.get_stats()
                errors = walker_stats['errors'] + walker_stats['archive_errors']
        except Exception as e:
            logger.error(f"Search failed for {search_query}: {e}")
            errors += 1

        return total, errors

    def cancel(self) -> bool:
        """
        Ask the running search to stop between entries.

        Returns:
            True if a search was running
        """
        with self._state_lock:
            if not self._searching:
                return False
        self._cancel_event.set()
        logger.info("Search cancellation requested")
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the running search to finish.

        Returns:
            True if no search is running when this returns
        """
        return self._finished.wait(timeout)

    def poll_progress(self) -> ProgressState:
        return self._tracker.snapshot()

    def poll_results(self) -> List[Hit]:
        return self._hits.snapshot()

    def poll_stats(self) -> Optional[SearchStats]:
        """Statistics of the most recent finished search, if any."""
        with self._state_lock:
            if self._searching:
                return None
            return self._stats

    def extract_archive_entry(self, archive_path: Union[str, Path], internal_name: str) -> Path:
        """
        Extract one archive member to a temporary file.

        Raises:
            ExtractionError: If the member cannot be extracted
        """
        return self._inspector.extract(archive_path, internal_name)

    def get_walker_stats(self) -> Dict[str, int]:
        """Walker statistics for the most recent pass."""
        return self._walker.get_stats()
