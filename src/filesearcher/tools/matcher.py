"""
Name matching for the File Searcher.

Matching is a plain case-insensitive substring test: both the name and the
query are lower-cased and the query must occur somewhere in the name.
"""


def matches(name: str, query: str) -> bool:
    """
    Check if a name contains the query, ignoring case.

    Args:
        name: Entry or archive member name
        query: Text to look for

    Returns:
        True if the lower-cased query occurs in the lower-cased name.
        An empty query matches every name.
    """
    return query.lower() in name.lower()


class QueryMatcher:
    """Callable form of :func:`matches` with the query lower-cased once."""

    def __init__(self, query: str):
        self.query = query
        self._needle = query.lower()

    def __call__(self, name: str) -> bool:
        return self._needle in name.lower()

    def __repr__(self) -> str:
        return f"QueryMatcher({self.query!r})"
