"""
Filesystem walker for the File Searcher.

This module traverses a directory tree, following symbolic links, and hands
every entry to a pool of worker threads. In counting mode the workers only
tally entries; in search mode they match entry names against the query and
look inside zip archives.
"""

import os
import threading
from concurrent.futures import ThreadPoolExecutor, Future, wait, FIRST_COMPLETED
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, Optional, Set, Tuple, Union
import logging

from ..core.hit_collection import HitCollection
from ..core.progress import ProgressTracker
from ..models.config import SearcherConfig
from ..models.search_results import FilesystemHit
from .archive_inspector import ArchiveError, ArchiveInspector
from .matcher import QueryMatcher


logger = logging.getLogger(__name__)


class WalkMode(Enum):
    """What a traversal does with each entry."""
    COUNT = "count"
    SEARCH = "search"


@dataclass(frozen=True)
class Entry:
    """
    A filesystem node visited during traversal.

    Attributes:
        path: Path of the entry below the search root
        name: Final path component
        is_zip_candidate: Whether the entry is a regular file with an archive extension
    """
    path: Path
    name: str
    is_zip_candidate: bool = False


class FSWalker:
    """
    Filesystem walker that visits every entry below a root directory.

    This class provides:
    - Traversal that follows symbolic links without looping on cycles
    - Parallel processing of entries on a thread pool
    - Name matching and zip archive inspection in search mode
    - Progress updates through a shared ProgressTracker
    """

    def __init__(self, config: Optional[SearcherConfig] = None,
                 inspector: Optional[ArchiveInspector] = None):
        """
        Initialize the filesystem walker.

        Args:
            config: Configuration object containing traversal and archive settings
            inspector: Archive inspector to use (built from the config if None)
        """
        self.config = config or SearcherConfig()
        self.inspector = inspector or ArchiveInspector(self.config.archives)
        self._stats_lock = threading.Lock()
        self._stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            'entries_seen': 0,
            'directories_traversed': 0,
            'archives_inspected': 0,
            'archive_errors': 0,
            'cycles_skipped': 0,
            'errors': 0
        }

    def _bump(self, key: str, amount: int = 1) -> None:
        with self._stats_lock:
            self._stats[key] += amount

    def iter_entries(self, root: Union[str, Path]) -> Iterator[Entry]:
        """
        Yield every entry below a root directory.

        The root itself is not yielded. A directory reachable through several
        links is walked once per path; a directory is only skipped when it is
        one of its own ancestors, so symlink cycles terminate.

        Args:
            root: Directory to traverse

        Yields:
            Entry objects for directories and files, parents before children
        """
        root_path = Path(root)
        if not root_path.exists():
            logger.warning(f"Root directory does not exist: {root_path}")
            return
        if not root_path.is_dir():
            logger.warning(f"Root path is not a directory: {root_path}")
            return

        follow_symlinks = self.config.traversal.follow_symlinks
        root_key = self._dir_key(root_path)
        # Keys of each pending directory and all of its ancestors
        ancestors: Dict[Path, FrozenSet[Tuple[int, int]]] = {
            root_path: frozenset([root_key]) if root_key is not None else frozenset()
        }

        for current_dir, subdirs, files in os.walk(root_path, followlinks=follow_symlinks,
                                                   onerror=self._on_walk_error):
            current_path = Path(current_dir)
            chain = ancestors.pop(current_path, frozenset())
            self._bump('directories_traversed')

            descend = []
            for dirname in subdirs:
                dir_path = current_path / dirname
                yield Entry(path=dir_path, name=dirname)
                if not follow_symlinks and dir_path.is_symlink():
                    continue

                key = self._dir_key(dir_path)
                if key is None:
                    continue
                if key in chain:
                    logger.debug(f"Not descending into ancestor directory: {dir_path}")
                    self._bump('cycles_skipped')
                    continue

                ancestors[dir_path] = chain | {key}
                descend.append(dirname)
            subdirs[:] = descend

            for filename in files:
                file_path = current_path / filename
                yield Entry(
                    path=file_path,
                    name=filename,
                    is_zip_candidate=self._is_zip_candidate(file_path)
                )

    def _dir_key(self, dir_path: Path) -> Optional[Tuple[int, int]]:
        """Device and inode of a directory, or None if it cannot be read."""
        try:
            stat_result = dir_path.stat()
        except OSError as e:
            logger.debug(f"Cannot stat directory {dir_path}: {e}")
            return None
        return stat_result.st_dev, stat_result.st_ino

    def _is_zip_candidate(self, file_path: Path) -> bool:
        if not self.config.archives.enabled or not self.inspector.is_archive(file_path):
            return False
        try:
            return file_path.is_file()
        except OSError:
            return False

    def _on_walk_error(self, error: OSError) -> None:
        logger.warning(f"Cannot list directory {error.filename}: {error}")
        self._bump('errors')

    def walk(self, root: Union[str, Path], mode: WalkMode, query: str = "",
             tracker: Optional[ProgressTracker] = None,
             results: Optional[HitCollection] = None,
             cancel_event: Optional[threading.Event] = None) -> int:
        """
        Traverse a directory tree and process every entry on the worker pool.

        Args:
            root: Directory to traverse
            mode: COUNT to only tally entries, SEARCH to match them
            query: Text to look for (SEARCH mode)
            tracker: Progress tracker to update
            results: Collection receiving hits (SEARCH mode)
            cancel_event: Event that stops the traversal between entries when set

        Returns:
            Number of entries handed to the workers
        """
        tracker = tracker or ProgressTracker(self.config.traversal.status_interval)

        if mode is WalkMode.COUNT:
            visit = self._count_visitor(tracker)
        else:
            if results is None:
                results = HitCollection()
            visit = self._search_visitor(QueryMatcher(query), tracker, results)

        logger.info(f"Walking directory tree ({mode.value}): {root}")
        submitted = self._run_pool(self.iter_entries(root), visit, cancel_event)
        logger.info(f"Finished {mode.value} pass over {root}: {submitted} entries")
        return submitted

    def count(self, root: Union[str, Path], tracker: ProgressTracker,
              cancel_event: Optional[threading.Event] = None) -> int:
        """Run the counting pass; returns the number of entries seen."""
        return self.walk(root, WalkMode.COUNT, tracker=tracker, cancel_event=cancel_event)

    def search(self, root: Union[str, Path], query: str, tracker: ProgressTracker,
               results: HitCollection, cancel_event: Optional[threading.Event] = None) -> int:
        """Run the matching pass; returns the number of entries processed."""
        return self.walk(root, WalkMode.SEARCH, query=query, tracker=tracker,
                         results=results, cancel_event=cancel_event)

    def _count_visitor(self, tracker: ProgressTracker) -> Callable[[Entry], None]:
        def visit(entry: Entry) -> None:
            tracker.record_entry()

        return visit

    def _search_visitor(self, matcher: QueryMatcher, tracker: ProgressTracker,
                        results: HitCollection) -> Callable[[Entry], None]:
        def visit(entry: Entry) -> None:
            try:
                if entry.is_zip_candidate:
                    self._inspect_archive(entry, matcher.query, results)

                if matcher(entry.name):
                    results.add(FilesystemHit(display_path=str(entry.path)))
            except Exception as e:
                logger.warning(f"Error processing entry {entry.path}: {e}")
                self._bump('errors')
            finally:
                tracker.advance()

        return visit

    def _inspect_archive(self, entry: Entry, query: str, results: HitCollection) -> None:
        self._bump('archives_inspected')
        try:
            results.extend(self.inspector.inspect(entry.path, query))
        except ArchiveError as e:
            logger.warning(str(e))
            self._bump('archive_errors')

    def _run_pool(self, entries: Iterable[Entry], visit: Callable[[Entry], None],
                  cancel_event: Optional[threading.Event]) -> int:
        """
        Feed entries to the worker pool with a bounded number in flight.

        Returns:
            Number of entries submitted
        """
        traversal = self.config.traversal
        submitted = 0
        pending: Set[Future] = set()

        with ThreadPoolExecutor(max_workers=traversal.max_workers,
                                thread_name_prefix="filesearcher") as executor:
            for entry in entries:
                if cancel_event is not None and cancel_event.is_set():
                    logger.info(f"Traversal cancelled after {submitted} entries")
                    break

                pending.add(executor.submit(visit, entry))
                submitted += 1
                self._bump('entries_seen')

                if len(pending) >= traversal.max_pending:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    self._collect(done)

            done, _ = wait(pending)
            self._collect(done)

        return submitted

    def _collect(self, done: Iterable[Future]) -> None:
        for future in done:
            error = future.exception()
            if error is not None:
                logger.error(f"Worker failed: {error}")
                self._bump('errors')

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the filesystem walking operation.

        Returns:
            Dictionary containing operation statistics
        """
        with self._stats_lock:
            return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        with self._stats_lock:
            self._stats = self._empty_stats()
