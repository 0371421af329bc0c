"""
Unit tests for the search session.

Covers the end-to-end scenarios, the one-search-at-a-time guard,
cancellation, statistics and archive extraction through the session.
"""

import os
import shutil
import tempfile
import threading
import zipfile
from pathlib import Path
from unittest.mock import patch

import pytest

from filesearcher.core.search_session import SearchSession
from filesearcher.models.config import SearcherConfig
from filesearcher.models.search_results import ArchiveHit, FilesystemHit, SearchPhase
from filesearcher.tools.archive_inspector import ExtractionError


class TestSearchSession:
    """Test cases for the SearchSession class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_root = Path(self.temp_dir)
        self.config = SearcherConfig(
            default_root=str(self.test_root),
            traversal={'max_workers': 4}
        )
        self.session = SearchSession(self.config)

    def teardown_method(self):
        """Clean up test fixtures."""
        self.session.cancel()
        self.session.wait(timeout=10)
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _write_files(self, *names):
        for name in names:
            path = self.test_root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(f"Content of {name}")

    def test_initial_state(self):
        """Test a new session before any search."""
        assert not self.session.is_searching
        assert self.session.poll_stats() is None
        assert self.session.poll_results() == []
        assert self.session.poll_progress().phase is SearchPhase.IDLE

    def test_scenario_plain_files(self):
        """Test matching plain filenames case-insensitively."""
        self._write_files("report.txt", "Report_final.txt", "notes.md")

        stats = self.session.run(str(self.test_root), "report")

        hits = self.session.poll_results()
        assert len(hits) == 2
        assert all(isinstance(hit, FilesystemHit) for hit in hits)
        assert sorted(hit.get_filename() for hit in hits) == ["Report_final.txt", "report.txt"]
        assert stats.total_files == 3
        assert stats.matched_files == 2
        assert stats.archive_matches == 0
        assert stats.filesystem_matches == 2
        assert self.session.poll_stats() == stats

    def test_scenario_zip_members(self):
        """Test that archive members are reported with an archive label."""
        archive_path = self.test_root / "data.zip"
        with zipfile.ZipFile(archive_path, 'w') as archive:
            archive.writestr("config.yaml", "key: value")
            archive.writestr("readme.txt", "hello")

        stats = self.session.run(str(self.test_root), "readme")

        hits = self.session.poll_results()
        assert len(hits) == 1
        assert isinstance(hits[0], ArchiveHit)
        assert hits[0].display_label == f"{archive_path}: readme.txt"
        assert stats.archive_matches == 1
        assert stats.total_files == 1

    def test_archive_round_trip_through_session(self):
        """Test that an archive hit can be extracted through the session."""
        archive_path = self.test_root / "bundle.zip"
        with zipfile.ZipFile(archive_path, 'w') as archive:
            archive.writestr("a/b.txt", b"original bytes\x00\x01")

        self.session.run(str(self.test_root), "B.TXT")
        hit = self.session.poll_results()[0]

        extracted = self.session.extract_archive_entry(hit.archive_path, hit.internal_name)
        try:
            assert extracted.read_bytes() == b"original bytes\x00\x01"
        finally:
            shutil.rmtree(extracted.parent, ignore_errors=True)

    def test_extract_missing_member(self):
        """Test that extraction errors reach the caller."""
        archive_path = self.test_root / "bundle.zip"
        with zipfile.ZipFile(archive_path, 'w') as archive:
            archive.writestr("a/b.txt", b"x")

        with pytest.raises(ExtractionError, match="not found"):
            self.session.extract_archive_entry(archive_path, "a/c.txt")

    def test_idempotent(self):
        """Test that repeating a search gives the same match count."""
        self._write_files("a/report.txt", "b/report.md", "c/other.txt", "report/x.txt")

        first = self.session.run(str(self.test_root), "report")
        first_hits = sorted(hit.label for hit in self.session.poll_results())
        second = self.session.run(str(self.test_root), "report")
        second_hits = sorted(hit.label for hit in self.session.poll_results())

        assert first.matched_files == second.matched_files == 3
        assert first_hits == second_hits

    def test_progress_after_completion(self):
        """Test the final progress state."""
        self._write_files(*[f"dir{i}/file{j}.txt" for i in range(3) for j in range(5)])

        stats = self.session.run(str(self.test_root), "file")

        progress = self.session.poll_progress()
        assert progress.phase is SearchPhase.DONE
        assert progress.fraction == 1.0
        assert progress.status_text == "Search completed."
        assert progress.total_entries == stats.total_files == 18
        assert progress.processed_entries == progress.total_entries

    def test_empty_query_matches_everything(self):
        """Test that an empty query returns every entry."""
        self._write_files("x/y.txt", "z.md")
        stats = self.session.run(str(self.test_root), "")
        assert stats.matched_files == stats.total_files == 3

    def test_empty_root_uses_default_root(self):
        """Test that an empty root falls back to the configured default root."""
        self._write_files("report.txt")

        stats = self.session.run("", "report")

        assert stats.root == str(self.test_root)
        assert stats.matched_files == 1

    def test_missing_root_completes(self):
        """Test that a missing root still ends in the done phase."""
        stats = self.session.run(str(self.test_root / "missing"), "x")
        assert stats.total_files == 0
        assert stats.matched_files == 0
        assert self.session.poll_progress().phase is SearchPhase.DONE

    def test_corrupt_archive_reported_in_stats(self):
        """Test that a broken archive does not stop the search."""
        self._write_files("broken.zip", "report.txt")

        stats = self.session.run(str(self.test_root), "report")

        assert stats.matched_files == 1
        assert stats.errors == 1
        assert self.session.get_walker_stats()['archive_errors'] == 1

    def test_background_search(self):
        """Test starting a search in the background and waiting for it."""
        self._write_files("report.txt", "other.txt")

        assert self.session.start_search(str(self.test_root), "report") is True
        assert self.session.wait(timeout=10)

        stats = self.session.poll_stats()
        assert stats is not None
        assert stats.matched_files == 1
        assert not self.session.is_searching

    def test_concurrent_session_guard(self):
        """Test that a second start while searching is a no-op."""
        self._write_files("report.txt", "other.txt")
        gate = threading.Event()
        original_count = self.session._walker.count

        def blocked_count(*args, **kwargs):
            gate.wait(timeout=10)
            return original_count(*args, **kwargs)

        with patch.object(self.session._walker, 'count', side_effect=blocked_count):
            assert self.session.start_search(str(self.test_root), "report") is True
            before = self.session.poll_progress()

            assert self.session.start_search(str(self.test_root / "elsewhere"), "other") is False
            assert self.session.run(str(self.test_root), "other") is None

            after = self.session.poll_progress()
            assert self.session.is_searching
            assert self.session.poll_stats() is None
            assert after == before
            assert after.phase is SearchPhase.COUNTING
            assert after.status_text == f"Counting items in {self.test_root}..."

            gate.set()
            assert self.session.wait(timeout=10)

        stats = self.session.poll_stats()
        assert stats.query == "report"
        assert stats.root == str(self.test_root)
        assert stats.matched_files == 1

    def test_new_search_replaces_previous_results(self):
        """Test that each search starts from an empty hit collection."""
        self._write_files("report.txt", "notes.md")

        self.session.run(str(self.test_root), "report")
        self.session.run(str(self.test_root), "notes")

        labels = [hit.label for hit in self.session.poll_results()]
        assert labels == [str(self.test_root / "notes.md")]
        assert self.session.poll_stats().query == "notes"

    def test_cancel(self):
        """Test cancelling a running search keeps partial results."""
        self._write_files("report.txt", "other.txt")
        gate = threading.Event()
        original_count = self.session._walker.count

        def blocked_count(*args, **kwargs):
            gate.wait(timeout=10)
            return original_count(*args, **kwargs)

        with patch.object(self.session._walker, 'count', side_effect=blocked_count):
            assert self.session.start_search(str(self.test_root), "report")
            assert self.session.cancel() is True
            gate.set()
            assert self.session.wait(timeout=10)

        stats = self.session.poll_stats()
        assert stats.cancelled is True
        assert stats.total_files == 0
        progress = self.session.poll_progress()
        assert progress.phase is SearchPhase.CANCELLED
        assert progress.status_text == "Search cancelled."

    def test_cancel_when_idle(self):
        """Test that cancelling without a running search does nothing."""
        assert self.session.cancel() is False

    def test_unexpected_failure_still_finishes(self):
        """Test that an internal error does not leave the session stuck."""
        self._write_files("report.txt")

        with patch.object(self.session._walker, 'search', side_effect=RuntimeError("boom")):
            stats = self.session.run(str(self.test_root), "report")

        assert stats.errors == 1
        assert not self.session.is_searching
        assert self.session.poll_progress().phase is SearchPhase.DONE

    def test_stats_summary(self):
        """Test the human-readable statistics summary."""
        self._write_files("report.txt")
        stats = self.session.run(str(self.test_root), "report")

        summary = stats.format_summary()
        assert "Total files scanned: 1" in summary
        assert "Files matching the query: 1" in summary
        assert "Files processed per second:" in summary

    def test_finalization_failure_releases_session(self):
        """Test that a failure while recording the outcome still frees the session."""
        self._write_files("report.txt")

        with patch.object(self.session._tracker, 'finish', side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError, match="boom"):
                self.session.run(str(self.test_root), "report")

        assert not self.session.is_searching
        assert self.session.wait(timeout=0)
        assert self.session.poll_progress().phase is SearchPhase.CANCELLED

        stats = self.session.run(str(self.test_root), "report")
        assert stats is not None
        assert stats.matched_files == 1
        assert self.session.poll_progress().phase is SearchPhase.DONE

    @pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0,
                        reason="Needs a non-root POSIX user to make a directory unreadable")
    def test_unreadable_directory_counted_once(self):
        """Test that a directory failing in both passes is one error."""
        self._write_files("report.txt", "locked/secret.txt")
        locked = self.test_root / "locked"
        locked.chmod(0)
        try:
            stats = self.session.run(str(self.test_root), "report")
        finally:
            locked.chmod(0o755)

        assert stats.errors == 1
        assert stats.matched_files == 1
        assert stats.total_files == 2
