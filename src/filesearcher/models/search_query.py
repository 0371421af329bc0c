"""
Search query data model for the File Searcher.

This module defines the immutable value describing one search invocation:
the text to look for and the directory to start from.
"""

import os
from typing import Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchQuery(BaseModel):
    """
    Represents a single search request.

    The query text is matched case-insensitively as a plain substring of
    entry names. An empty text matches every entry.

    Attributes:
        text: Text to look for in entry names (compared after lower-casing)
        root: Directory the traversal starts from
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field("", description="Text to look for in entry names")
    root: str = Field("", description="Directory the traversal starts from")

    @field_validator('root')
    @classmethod
    def validate_root(cls, v: str) -> str:
        """Make the root absolute without resolving symlinks."""
        if not v or not v.strip():
            return ""
        return os.path.abspath(os.path.expanduser(v.strip()))

    def has_root(self) -> bool:
        """Check if a root directory was supplied."""
        return bool(self.root)

    def matches_everything(self) -> bool:
        """Check if this query matches every entry."""
        return self.text == ""

    def with_root(self, root: str) -> 'SearchQuery':
        """Return a copy of this query rooted at another directory."""
        return SearchQuery(text=self.text, root=root)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the search query to a dictionary representation."""
        return self.model_dump()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SearchQuery':
        """Create a SearchQuery instance from a dictionary."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        """String representation of the search query."""
        return f"Query: '{self.text}' | Root: {self.root or '<default root>'}"
