"""Tests for hunkstage.parser.status module."""

import pytest

from hunkstage.exceptions import MalformedRecordError
from hunkstage.models import FileStatus
from hunkstage.parser.status import map_status_code, parse_status


def _records(*records: str) -> str:
    """Join records the way ``git status -z`` terminates them."""
    return "".join(f"{record}\0" for record in records)


class TestMapStatusCode:
    """Tests for map_status_code function."""

    @pytest.mark.parametrize(
        "code,expected",
        [
            ("A ", FileStatus.NEW),
            ("??", FileStatus.NEW),
            ("AM", FileStatus.NEW),
            ("M ", FileStatus.MODIFIED),
            (" M", FileStatus.MODIFIED),
            ("MM", FileStatus.MODIFIED),
            (" T", FileStatus.MODIFIED),
            ("D ", FileStatus.DELETED),
            (" D", FileStatus.DELETED),
            ("R ", FileStatus.RENAMED),
            ("RM", FileStatus.RENAMED),
            ("C ", FileStatus.COPIED),
        ],
    )
    def test_known_codes(self, code, expected):
        """Test mapping of recognized codes."""
        assert map_status_code(code) is expected

    @pytest.mark.parametrize("code", ["UU", "AA", "DD", "AU", "UA", "DU", "UD"])
    def test_unmerged_codes_are_conflicted(self, code):
        """Test that unmerged pairs are reported as conflicted."""
        assert map_status_code(code) is FileStatus.CONFLICTED

    @pytest.mark.parametrize("code", ["X ", " Z", "!!"])
    def test_unrecognized_codes_are_conflicted(self, code):
        """Test that unknown codes fall back to conflicted."""
        assert map_status_code(code) is FileStatus.CONFLICTED


class TestParseStatus:
    """Tests for parse_status function."""

    def test_empty_output(self):
        """Test that a clean working directory yields no files."""
        status = parse_status("")

        assert status.files == ()
        assert status.incomplete is False

    def test_preserves_report_order(self):
        """Test that records come back in input order."""
        raw = _records("M  b.txt", "?? a.txt", " D c.txt")

        status = parse_status(raw)

        assert [f.path for f in status.files] == ["b.txt", "a.txt", "c.txt"]
        assert [f.status for f in status.files] == [
            FileStatus.MODIFIED,
            FileStatus.NEW,
            FileStatus.DELETED,
        ]
        assert status.incomplete is False

    def test_untracked_file(self):
        """Test a single untracked file."""
        status = parse_status(_records("?? X.txt"))

        assert len(status.files) == 1
        assert status.files[0].path == "X.txt"
        assert status.files[0].status is FileStatus.NEW
        assert status.files[0].old_path is None

    def test_rename_reads_source_field(self):
        """Test that a rename consumes the following field as its old path."""
        raw = _records("R  new name.txt", "old name.txt", "M  other.txt")

        status = parse_status(raw)

        assert len(status.files) == 2
        renamed = status.files[0]
        assert renamed.status is FileStatus.RENAMED
        assert renamed.path == "new name.txt"
        assert renamed.old_path == "old name.txt"
        assert status.files[1].path == "other.txt"

    def test_copy_reads_source_field(self):
        """Test that a copy keeps its source path."""
        status = parse_status(_records("C  copy.txt", "orig.txt"))

        assert status.files[0].status is FileStatus.COPIED
        assert status.files[0].old_path == "orig.txt"

    def test_paths_with_special_characters(self):
        """Test that spaces, arrows and newlines in paths survive."""
        raw = _records("?? dir/with space.txt", "?? a -> b.txt", "?? line\nbreak.txt")

        status = parse_status(raw)

        assert [f.path for f in status.files] == [
            "dir/with space.txt",
            "a -> b.txt",
            "line\nbreak.txt",
        ]

    def test_unrecognized_code_is_kept(self):
        """Test that unknown codes are never dropped."""
        status = parse_status(_records("UU merge.txt", "X? odd.txt"))

        assert [f.status for f in status.files] == [
            FileStatus.CONFLICTED,
            FileStatus.CONFLICTED,
        ]

    def test_malformed_record_raises(self):
        """Test that a record without the XY<space>path shape fails."""
        with pytest.raises(MalformedRecordError) as exc_info:
            parse_status(_records("M  ok.txt", "garbage"))

        assert "garbage" in str(exc_info.value)

    def test_record_without_separator_raises(self):
        """Test that a missing space after the code fails."""
        with pytest.raises(MalformedRecordError):
            parse_status(_records("MMfile.txt"))

    def test_rename_without_source_raises(self):
        """Test that a rename at the end of the output needs its source."""
        with pytest.raises(MalformedRecordError) as exc_info:
            parse_status("R  new.txt\0")

        assert "source path" in str(exc_info.value)


class TestParseStatusLimit:
    """Tests for the limit argument of parse_status."""

    def test_limit_keeps_first_records(self):
        """Test that truncation keeps the first records in order."""
        raw = _records(*(f"?? file{i}.txt" for i in range(10)))

        status = parse_status(raw, limit=3)

        assert [f.path for f in status.files] == ["file0.txt", "file1.txt", "file2.txt"]
        assert status.incomplete is True

    def test_limit_equal_to_count_is_complete(self):
        """Test that a limit matching the record count is not truncation."""
        raw = _records(*(f"?? file{i}.txt" for i in range(3)))

        status = parse_status(raw, limit=3)

        assert len(status.files) == 3
        assert status.incomplete is False

    def test_limit_above_count_is_complete(self):
        """Test a limit larger than the listing."""
        status = parse_status(_records("?? a.txt"), limit=500)

        assert len(status.files) == 1
        assert status.incomplete is False

    def test_rename_counts_as_one_record(self):
        """Test that a rename's source field is not counted against the limit."""
        raw = _records("R  new.txt", "old.txt", "?? a.txt", "?? b.txt")

        status = parse_status(raw, limit=2)

        assert [f.path for f in status.files] == ["new.txt", "a.txt"]
        assert status.incomplete is True

    def test_records_after_limit_are_not_validated(self):
        """Test that parsing stops at the limit."""
        raw = _records("?? a.txt", "garbage")

        status = parse_status(raw, limit=1)

        assert len(status.files) == 1
        assert status.incomplete is True

    def test_large_listing(self):
        """Test truncating a listing with more than 10,000 records."""
        raw = _records(*(f"?? tmp/file{i}.txt" for i in range(10_500)))

        status = parse_status(raw, limit=500)

        assert len(status.files) == 500
        assert status.files[-1].path == "tmp/file499.txt"
        assert status.incomplete is True

    def test_zero_limit(self):
        """Test that a zero limit reports nothing but marks truncation."""
        status = parse_status(_records("?? a.txt"), limit=0)

        assert status.files == ()
        assert status.incomplete is True

    def test_negative_limit_raises(self):
        """Test that a negative limit is rejected."""
        with pytest.raises(ValueError):
            parse_status("", limit=-1)


class TestParseBranchHeader:
    """Tests for the ## branch record."""

    def test_branch_with_upstream_and_tracking(self):
        """Test a branch that is ahead and behind its upstream."""
        raw = _records("## main...origin/main [ahead 2, behind 1]", "M  a.txt")

        status = parse_status(raw)

        assert status.branch.name == "main"
        assert status.branch.upstream == "origin/main"
        assert status.branch.ahead == 2
        assert status.branch.behind == 1
        assert len(status.files) == 1

    def test_branch_without_upstream(self):
        """Test a local-only branch."""
        status = parse_status(_records("## feature/login"))

        assert status.branch.name == "feature/login"
        assert status.branch.upstream is None
        assert status.branch.ahead == 0

    def test_unborn_branch(self):
        """Test a repository without commits."""
        status = parse_status(_records("## No commits yet on main"))

        assert status.branch.name == "main"
        assert status.files == ()

    def test_detached_head(self):
        """Test a detached HEAD."""
        status = parse_status(_records("## HEAD (no branch)"))

        assert status.branch.name is None

    def test_header_not_counted_against_limit(self):
        """Test that the branch record does not use up the limit."""
        raw = _records("## main", "?? a.txt", "?? b.txt")

        status = parse_status(raw, limit=2)

        assert len(status.files) == 2
        assert status.incomplete is False
