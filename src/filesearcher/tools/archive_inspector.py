"""
Zip archive inspection for the File Searcher.

This module lists the members of zip archives so their names can be searched
like regular filesystem entries, and extracts a single member on request.
Member names are normalized to '/' separators because archives written on
different platforms may use either separator.
"""

import shutil
import tempfile
import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import List, Optional, Union
import logging

from ..models.config import ArchiveConfig
from ..models.search_results import ArchiveHit
from .matcher import QueryMatcher


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Errors zipfile can raise while reading or decompressing a member
_READ_ERRORS = (OSError, zipfile.BadZipFile, zlib.error, EOFError, RuntimeError, NotImplementedError)


class ArchiveError(Exception):
    """Raised when an archive cannot be opened or read."""
    pass


class ExtractionError(ArchiveError):
    """Raised when a member cannot be extracted from an archive."""
    pass


def normalize_member_name(name: str) -> str:
    """Replace backslash separators in an archive member name with '/'."""
    return name.replace("\\", "/")


class ArchiveInspector:
    """
    Lists and extracts members of zip archives.

    Inspection only reads the archive's central directory; member contents
    are never decompressed until :meth:`extract` is called.
    """

    def __init__(self, config: Optional[ArchiveConfig] = None):
        """
        Initialize the archive inspector.

        Args:
            config: Archive settings (extensions, temporary directory prefix)
        """
        self.config = config or ArchiveConfig()

    def is_archive(self, path: PathLike) -> bool:
        """Check if a path has one of the configured archive extensions."""
        return self.config.is_archive_name(Path(path).name)

    def list_members(self, archive_path: PathLike) -> List[str]:
        """
        List member names in the order the archive stores them.

        Args:
            archive_path: Path of the zip archive

        Returns:
            Normalized member names

        Raises:
            ArchiveError: If the file is not a valid zip archive or cannot be read
        """
        try:
            with zipfile.ZipFile(archive_path) as archive:
                return [normalize_member_name(info.filename) for info in archive.infolist()]
        except zipfile.BadZipFile as e:
            raise ArchiveError(f"Failed to read zip archive {archive_path}: {e}") from e
        except (OSError, ValueError) as e:
            raise ArchiveError(f"Failed to open zip file {archive_path}: {e}") from e

    def inspect(self, archive_path: PathLike, query: str) -> List[ArchiveHit]:
        """
        Find archive members whose internal path contains the query.

        The full normalized internal path is matched, which is also the name
        used to locate the member again in :meth:`extract`.

        Args:
            archive_path: Path of the zip archive
            query: Text to look for

        Returns:
            ArchiveHit for every matching member, in archive order

        Raises:
            ArchiveError: If the archive cannot be opened
        """
        matcher = QueryMatcher(query)
        hits = []

        for member_name in self.list_members(archive_path):
            logger.debug(f"Checking zip entry: {member_name}")
            if matcher(member_name):
                hits.append(ArchiveHit(archive_path=str(archive_path), internal_name=member_name))
                logger.debug(f"Found match in zip: {member_name}")

        return hits

    def extract(self, archive_path: PathLike, internal_name: str,
                destination_dir: Optional[PathLike] = None) -> Path:
        """
        Extract a single member into a fresh temporary directory.

        Args:
            archive_path: Path of the zip archive
            internal_name: Member name; compared exactly after separator normalization
            destination_dir: Parent directory for the temporary directory (system default if None)

        Returns:
            Path of the extracted file

        Raises:
            ExtractionError: If the archive cannot be read, the member is missing,
                or the output cannot be written
        """
        target_name = normalize_member_name(internal_name)

        try:
            archive = zipfile.ZipFile(archive_path)
        except zipfile.BadZipFile as e:
            raise ExtractionError(f"Failed to read zip archive {archive_path}: {e}") from e
        except (OSError, ValueError) as e:
            raise ExtractionError(f"Failed to open zip file {archive_path}: {e}") from e

        with archive:
            member = self._find_member(archive, target_name)
            if member is None:
                raise ExtractionError(f"File not found in archive {archive_path}: {target_name}")
            if member.is_dir():
                raise ExtractionError(f"Archive entry is a directory: {archive_path}: {target_name}")

            try:
                temp_dir = Path(tempfile.mkdtemp(prefix=self.config.temp_prefix, dir=destination_dir))
            except OSError as e:
                raise ExtractionError(f"Failed to create temporary directory: {e}") from e

            output_path = temp_dir / PurePosixPath(target_name).name
            try:
                with archive.open(member) as source, open(output_path, 'wb') as sink:
                    shutil.copyfileobj(source, sink)
            except _READ_ERRORS as e:
                shutil.rmtree(temp_dir, ignore_errors=True)
                raise ExtractionError(f"Failed to extract {target_name} from {archive_path}: {e}") from e

        logger.info(f"Extracted file to: {output_path}")
        return output_path

    def _find_member(self, archive: zipfile.ZipFile, target_name: str) -> Optional[zipfile.ZipInfo]:
        """Find the first member whose normalized name equals the target."""
        for info in archive.infolist():
            if normalize_member_name(info.filename) == target_name:
                return info
        return None
