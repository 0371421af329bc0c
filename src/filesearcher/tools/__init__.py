"""
Search tools and utilities for the File Searcher.

This module contains the components that do the actual searching:
name matching, zip archive inspection, and filesystem walking.
"""
