"""
Search results data models for the File Searcher.

This module defines the values produced while a search runs: hits for
filesystem entries and for members of zip archives, progress snapshots,
and the statistics recorded once a search finishes.
"""

from typing import Dict, List, Any, Union
from datetime import datetime, timedelta
from pathlib import Path
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class HitType(Enum):
    """Enumeration of the kinds of search hits."""
    FILESYSTEM = "filesystem"
    ARCHIVE = "archive"


class SearchPhase(Enum):
    """Lifecycle phases of a search session."""
    IDLE = "idle"
    COUNTING = "counting"
    PROCESSING = "processing"
    DONE = "done"
    CANCELLED = "cancelled"

    @property
    def is_active(self) -> bool:
        """Whether a search is running in this phase."""
        return self in (SearchPhase.COUNTING, SearchPhase.PROCESSING)

    @property
    def is_terminal(self) -> bool:
        """Whether this phase ends a search."""
        return self in (SearchPhase.DONE, SearchPhase.CANCELLED)


class FilesystemHit(BaseModel):
    """
    A filesystem entry whose name matched the query.

    Attributes:
        display_path: Path of the matched entry as found during traversal
    """

    model_config = ConfigDict(frozen=True)

    hit_type: HitType = Field(HitType.FILESYSTEM, description="Kind of hit")
    display_path: str = Field(..., min_length=1, description="Path of the matched entry")

    @field_validator('hit_type')
    @classmethod
    def validate_hit_type(cls, v: HitType) -> HitType:
        if v is not HitType.FILESYSTEM:
            raise ValueError(f"Invalid hit type for filesystem hit: {v}")
        return v

    @property
    def label(self) -> str:
        """Text shown for this hit."""
        return self.display_path

    def get_filename(self) -> str:
        """Get just the entry name without directory path."""
        return Path(self.display_path).name

    def get_directory(self) -> str:
        """Get the directory containing this entry."""
        return str(Path(self.display_path).parent)

    def to_dict(self) -> Dict[str, Any]:
        """Convert hit to dictionary representation."""
        data = self.model_dump()
        data['hit_type'] = self.hit_type.value
        data['label'] = self.label
        return data

    def __str__(self) -> str:
        return self.label


class ArchiveHit(BaseModel):
    """
    A member of a zip archive whose internal path matched the query.

    The archive path and the internal name are kept as a structured pair so
    that the member can be located again for extraction without parsing the
    display label.

    Attributes:
        archive_path: Path of the archive on disk
        internal_name: Member name inside the archive, with '/' separators
    """

    model_config = ConfigDict(frozen=True)

    hit_type: HitType = Field(HitType.ARCHIVE, description="Kind of hit")
    archive_path: str = Field(..., min_length=1, description="Path of the archive on disk")
    internal_name: str = Field(..., min_length=1, description="Member name inside the archive")

    @field_validator('hit_type')
    @classmethod
    def validate_hit_type(cls, v: HitType) -> HitType:
        if v is not HitType.ARCHIVE:
            raise ValueError(f"Invalid hit type for archive hit: {v}")
        return v

    @field_validator('internal_name')
    @classmethod
    def validate_internal_name(cls, v: str) -> str:
        """Store member names with forward slashes only."""
        return v.replace("\\", "/")

    @property
    def display_label(self) -> str:
        """Label in the form 'archive_path: internal_name'."""
        return f"{self.archive_path}: {self.internal_name}"

    @property
    def label(self) -> str:
        """Text shown for this hit."""
        return self.display_label

    @property
    def display_path(self) -> str:
        """Location on disk that contains this hit."""
        return self.archive_path

    def get_member_basename(self) -> str:
        """Get the last path segment of the member name."""
        return self.internal_name.rstrip("/").rsplit("/", 1)[-1]

    def to_dict(self) -> Dict[str, Any]:
        """Convert hit to dictionary representation."""
        data = self.model_dump()
        data['hit_type'] = self.hit_type.value
        data['label'] = self.label
        return data

    def __str__(self) -> str:
        return self.label


Hit = Union[FilesystemHit, ArchiveHit]


class ProgressState(BaseModel):
    """
    Snapshot of search progress for a poller.

    Attributes:
        phase: Current lifecycle phase
        total_entries: Entries found by the counting pass
        processed_entries: Entries handled by the processing pass
        status_text: Human-readable status line
        fraction: Progress between 0.0 and 1.0
    """

    model_config = ConfigDict(frozen=True)

    phase: SearchPhase = Field(SearchPhase.IDLE, description="Current lifecycle phase")
    total_entries: int = Field(0, ge=0, description="Entries found by the counting pass")
    processed_entries: int = Field(0, ge=0, description="Entries handled by the processing pass")
    status_text: str = Field("", description="Human-readable status line")
    fraction: float = Field(0.0, ge=0.0, le=1.0, description="Progress between 0.0 and 1.0")

    @model_validator(mode='after')
    def validate_counts(self):
        """Validate that processed entries stay within the counted total."""
        if self.processed_entries > self.total_entries:
            raise ValueError("Processed entries cannot exceed total entries")
        return self

    @property
    def is_active(self) -> bool:
        return self.phase.is_active

    def get_percentage(self) -> float:
        """Get progress as a percentage."""
        return self.fraction * 100.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert progress to dictionary representation."""
        data = self.model_dump()
        data['phase'] = self.phase.value
        data['percentage'] = self.get_percentage()
        return data

    def __str__(self) -> str:
        return f"{self.status_text} ({self.get_percentage():.2f}%)"


class SearchStats(BaseModel):
    """
    Aggregate statistics for one completed search.

    Attributes:
        root: Directory that was searched
        query: Query text that was searched for
        total_files: Entries found by the counting pass
        matched_files: Number of hits collected
        filesystem_matches: Hits for filesystem entries
        archive_matches: Hits for archive members
        errors: Per-entry errors that were skipped
        elapsed_seconds: Wall-clock duration of the search
        cancelled: Whether the search was cancelled before finishing
        finished_at: When the search finished
    """

    model_config = ConfigDict(frozen=True)

    root: str = Field("", description="Directory that was searched")
    query: str = Field("", description="Query text that was searched for")
    total_files: int = Field(0, ge=0, description="Entries found by the counting pass")
    matched_files: int = Field(0, ge=0, description="Number of hits collected")
    filesystem_matches: int = Field(0, ge=0, description="Hits for filesystem entries")
    archive_matches: int = Field(0, ge=0, description="Hits for archive members")
    errors: int = Field(0, ge=0, description="Per-entry errors that were skipped")
    elapsed_seconds: float = Field(0.0, ge=0.0, description="Wall-clock duration of the search")
    cancelled: bool = Field(False, description="Whether the search was cancelled")
    finished_at: datetime = Field(default_factory=datetime.now, description="When the search finished")

    @classmethod
    def from_hits(cls, hits: List[Hit], **kwargs: Any) -> 'SearchStats':
        """Build statistics, deriving match counts from a list of hits."""
        archive_matches = sum(1 for hit in hits if hit.hit_type is HitType.ARCHIVE)
        return cls(
            matched_files=len(hits),
            filesystem_matches=len(hits) - archive_matches,
            archive_matches=archive_matches,
            **kwargs
        )

    @property
    def elapsed(self) -> timedelta:
        """Duration of the search."""
        return timedelta(seconds=self.elapsed_seconds)

    def get_files_per_second(self) -> float:
        """Get scanning throughput."""
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.total_files / self.elapsed_seconds

    def format_summary(self) -> str:
        """Render the statistics as a short multi-line report."""
        lines = [
            f"Total files scanned: {self.total_files}",
            f"Files matching the query: {self.matched_files}",
            f"Total time taken: {self.elapsed_seconds:.2f}s",
            f"Files processed per second: {self.get_files_per_second():.2f}",
        ]
        if self.cancelled:
            lines.append("Search was cancelled before completion")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert statistics to dictionary representation."""
        data = self.model_dump()
        data['finished_at'] = self.finished_at.isoformat()
        data['files_per_second'] = self.get_files_per_second()
        return data

    def __str__(self) -> str:
        parts = [f"Found {self.matched_files} matches"]
        parts.append(f"Scanned {self.total_files} files")
        parts.append(f"Took {self.elapsed_seconds:.2f}s")

        if self.errors:
            parts.append(f"Errors: {self.errors}")
        if self.cancelled:
            parts.append("Cancelled")

        return " | ".join(parts)


def hit_from_dict(data: Dict[str, Any]) -> Hit:
    """Rebuild a hit from its dictionary representation."""
    hit_type = HitType(data.get('hit_type', HitType.FILESYSTEM.value))
    fields = {k: v for k, v in data.items() if k not in ('hit_type', 'label')}
    if hit_type is HitType.ARCHIVE:
        return ArchiveHit(**fields)
    return FilesystemHit(**fields)
