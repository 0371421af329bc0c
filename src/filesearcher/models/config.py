"""
Configuration data models for the File Searcher.

This module defines the data structures for managing application configuration,
including the default search root, traversal concurrency, archive handling,
and logging options.
"""

import os
import logging
from typing import Dict, List, Any
from pathlib import Path
from pydantic import BaseModel, Field, field_validator


def _default_max_workers() -> int:
    """Default worker pool size, matching ThreadPoolExecutor's own default."""
    return min(32, (os.cpu_count() or 1) + 4)


def _default_root() -> str:
    """Filesystem root of the drive holding the current directory."""
    return Path.cwd().anchor or os.sep


class TraversalConfig(BaseModel):
    """
    Configuration for directory traversal.

    Attributes:
        follow_symlinks: Whether symbolic links to directories are descended into
        max_workers: Number of worker threads processing entries
        status_interval: Processed entries between status text refreshes
        max_pending: Maximum number of entries queued to the worker pool at once
    """

    follow_symlinks: bool = Field(True, description="Descend into symlinked directories")
    max_workers: int = Field(default_factory=_default_max_workers, gt=0, le=256, description="Worker threads")
    status_interval: int = Field(1000, gt=0, description="Processed entries between status refreshes")
    max_pending: int = Field(1024, gt=0, description="Maximum entries queued to the worker pool")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class ArchiveConfig(BaseModel):
    """
    Configuration for zip archive inspection and extraction.

    Attributes:
        enabled: Whether archive members are searched
        extensions: File extensions treated as zip archives
        temp_prefix: Prefix for temporary extraction directories
    """

    enabled: bool = Field(True, description="Search inside zip archives")
    extensions: List[str] = Field(default_factory=lambda: ['.zip'], description="Zip archive extensions")
    temp_prefix: str = Field("filesearcher-", description="Prefix for temporary extraction directories")

    @field_validator('extensions', mode='before')
    @classmethod
    def validate_extensions(cls, v) -> List[str]:
        """Normalize extensions to lower case with a leading dot."""
        if isinstance(v, str):
            v = [v]

        normalized_exts = []
        for ext in v:
            if not ext or not str(ext).strip():
                continue
            ext = str(ext).strip().lower()
            if not ext.startswith('.'):
                ext = '.' + ext
            if ext not in normalized_exts:
                normalized_exts.append(ext)

        return normalized_exts

    def is_archive_name(self, name: str) -> bool:
        """Check if a file name carries one of the archive extensions."""
        return Path(name).suffix.lower() in self.extensions

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class LoggingConfig(BaseModel):
    """
    Configuration for log output.

    Attributes:
        level: Name of the log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Format string passed to the logging module
    """

    level: str = Field("INFO", description="Log level name")
    format: str = Field(
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log record format"
    )

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate the log level name."""
        level = v.strip().upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f"Invalid log level: {v}")
        return level

    def get_level(self) -> int:
        """Get the numeric log level."""
        return getattr(logging, self.level)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class SearcherConfig(BaseModel):
    """
    Main configuration class for the File Searcher.

    Attributes:
        default_root: Directory searched when the caller supplies no root
        traversal: Directory traversal settings
        archives: Zip archive settings
        logging: Log output settings
    """

    default_root: str = Field(default_factory=_default_root, description="Directory searched by default")
    traversal: TraversalConfig = Field(default_factory=TraversalConfig, description="Traversal settings")
    archives: ArchiveConfig = Field(default_factory=ArchiveConfig, description="Zip archive settings")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Log output settings")

    @field_validator('default_root')
    @classmethod
    def validate_default_root(cls, v: str) -> str:
        """Expand and normalize the default root."""
        if not v or not v.strip():
            return _default_root()
        return os.path.abspath(os.path.expanduser(v.strip()))

    def resolve_root(self, root: str) -> str:
        """Return the root to search, falling back to the default root."""
        if not root or not root.strip():
            return self.default_root
        return root

    def validate_configuration(self) -> List[str]:
        """
        Check the configuration for settings that are valid but suspicious.

        Returns:
            List of warning messages
        """
        warnings = []

        root_path = Path(self.default_root)
        if not root_path.exists():
            warnings.append(f"Default root does not exist: {self.default_root}")
        elif not root_path.is_dir():
            warnings.append(f"Default root is not a directory: {self.default_root}")

        if self.archives.enabled and not self.archives.extensions:
            warnings.append("Archive search is enabled but no archive extensions are configured")

        if self.traversal.max_workers > 4 * (os.cpu_count() or 1) + 4:
            warnings.append(f"Large worker pool ({self.traversal.max_workers}) may slow down traversal")

        if self.traversal.max_pending < self.traversal.max_workers:
            warnings.append("max_pending is lower than max_workers; some workers will stay idle")

        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary representation."""
        return {
            'default_root': self.default_root,
            'traversal': self.traversal.to_dict(),
            'archives': self.archives.to_dict(),
            'logging': self.logging.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SearcherConfig':
        """Create configuration from dictionary representation."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        """String representation of the configuration."""
        parts = [f"Default root: {self.default_root}"]
        parts.append(f"Workers: {self.traversal.max_workers}")
        parts.append(f"Follow symlinks: {self.traversal.follow_symlinks}")
        parts.append(f"Archives: {', '.join(self.archives.extensions) if self.archives.enabled else 'disabled'}")

        return " | ".join(parts)
