"""Thread-safe collection of search hits."""

import threading
from typing import Iterable, List

from ..models.search_results import Hit, HitType


class HitCollection:
    """
    Growing list of hits owned by a search session.

    Workers only append; readers get copies so they can iterate while the
    search keeps adding hits.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._hits: List[Hit] = []

    def add(self, hit: Hit) -> None:
        with self._lock:
            self._hits.append(hit)

    def extend(self, hits: Iterable[Hit]) -> None:
        hits = list(hits)
        if not hits:
            return
        with self._lock:
            self._hits.extend(hits)

    def clear(self) -> None:
        with self._lock:
            self._hits.clear()

    def snapshot(self) -> List[Hit]:
        """Copy of the hits collected so far."""
        with self._lock:
            return list(self._hits)

    def count_by_type(self, hit_type: HitType) -> int:
        with self._lock:
            return sum(1 for hit in self._hits if hit.hit_type is hit_type)

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)
