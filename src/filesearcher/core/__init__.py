"""
Search orchestration for the File Searcher.

This package holds the state shared between traversal workers and callers
(progress and collected hits) and the session that drives a search.
"""
