"""Progress tracking shared between traversal workers and pollers."""

import threading
import logging

from ..models.search_results import ProgressState, SearchPhase


logger = logging.getLogger(__name__)


class ProgressTracker:
    """
    Thread-safe counters and status text for one search at a time.

    The counting pass fixes ``total_entries``; the processing pass then
    advances ``processed_entries`` up to that total. Counters only move in
    the phase they belong to, so late updates from draining workers after a
    cancel are ignored.
    """

    def __init__(self, status_interval: int = 1000):
        self._status_interval = status_interval
        self._lock = threading.Lock()
        self._phase = SearchPhase.IDLE
        self._total = 0
        self._processed = 0
        self._overflow = 0
        self._status_text = "Ready"

    def reset(self) -> None:
        """Reset the tracker to idle."""
        with self._lock:
            self._phase = SearchPhase.IDLE
            self._total = 0
            self._processed = 0
            self._overflow = 0
            self._status_text = "Ready"

    def begin_counting(self, root: str) -> None:
        with self._lock:
            self._phase = SearchPhase.COUNTING
            self._total = 0
            self._processed = 0
            self._overflow = 0
            self._status_text = f"Counting items in {root}..."

    def record_entry(self) -> int:
        """Count one entry during the counting pass."""
        with self._lock:
            if self._phase is SearchPhase.COUNTING:
                self._total += 1
            return self._total

    def begin_processing(self) -> None:
        with self._lock:
            self._phase = SearchPhase.PROCESSING
            self._processed = 0
            self._status_text = "Processing items..."

    def advance(self) -> int:
        """
        Count one processed entry during the processing pass.

        Entries that appeared after the counting pass are not added beyond
        the counted total.

        Returns:
            The processed count after this update
        """
        with self._lock:
            if self._phase is not SearchPhase.PROCESSING:
                return self._processed
            if self._processed >= self._total:
                self._overflow += 1
                return self._processed

            self._processed += 1
            if self._processed % self._status_interval == 0:
                self._status_text = (
                    f"Processing items: {self._processed}/{self._total} processed. Please wait..."
                )
            return self._processed

    def finish(self) -> None:
        """Mark the search as completed."""
        with self._lock:
            self._phase = SearchPhase.DONE
            self._status_text = "Search completed."
            overflow = self._overflow
        if overflow:
            logger.debug(f"{overflow} entries appeared after counting and were not added to progress")

    def cancel(self) -> None:
        """Mark the search as cancelled."""
        with self._lock:
            self._phase = SearchPhase.CANCELLED
            self._status_text = "Search cancelled."

    @property
    def phase(self) -> SearchPhase:
        with self._lock:
            return self._phase

    @property
    def total_entries(self) -> int:
        with self._lock:
            return self._total

    @property
    def processed_entries(self) -> int:
        with self._lock:
            return self._processed

    @property
    def status_text(self) -> str:
        with self._lock:
            return self._status_text

    def snapshot(self) -> ProgressState:
        """Take a consistent copy of the current progress."""
        with self._lock:
            if self._phase is SearchPhase.DONE:
                fraction = 1.0
            elif self._total:
                fraction = self._processed / self._total
            else:
                fraction = 0.0

            return ProgressState(
                phase=self._phase,
                total_entries=self._total,
                processed_entries=self._processed,
                status_text=self._status_text,
                fraction=fraction
            )
