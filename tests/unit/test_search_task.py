"""
Unit tests for the SearchTask data model.

Tests validation, immutability and the filename comparison policy.
"""

import pytest
from pydantic import ValidationError

from multifind.models.search_task import SearchTask


class TestSearchTask:
    """Test cases for SearchTask model."""

    def test_basic_creation(self):
        """Test creating a task with defaults."""
        task = SearchTask(root="/tmp/t", filename="a.txt")

        assert task.root == "/tmp/t"
        assert task.filename == "a.txt"
        assert task.recursive is False
        assert task.ignore_case is False

    def test_root_kept_as_supplied(self):
        """The root is not normalized, it is reported back verbatim."""
        task = SearchTask(root="./some/../dir", filename="a.txt")
        assert task.root == "./some/../dir"

    def test_empty_filename_rejected(self):
        with pytest.raises(ValidationError):
            SearchTask(root="/tmp", filename="")

        with pytest.raises(ValidationError, match="Filename cannot be empty"):
            SearchTask(root="/tmp", filename="   ")

    def test_empty_root_rejected(self):
        with pytest.raises(ValidationError):
            SearchTask(root="", filename="a.txt")

        with pytest.raises(ValidationError, match="Search root cannot be empty"):
            SearchTask(root="  ", filename="a.txt")

    def test_frozen(self):
        """Tasks cannot be mutated after creation."""
        task = SearchTask(root="/tmp", filename="a.txt")

        with pytest.raises(ValidationError):
            task.filename = "b.txt"

    def test_with_filename_returns_copy(self):
        """with_filename keeps root and flags and leaves the original untouched."""
        task = SearchTask(root="/tmp", filename="a.txt", recursive=True, ignore_case=True)
        other = task.with_filename("b.txt")

        assert other is not task
        assert other.filename == "b.txt"
        assert other.root == "/tmp"
        assert other.recursive is True
        assert other.ignore_case is True
        assert task.filename == "a.txt"

    def test_with_filename_validates(self):
        task = SearchTask(root="/tmp", filename="a.txt")

        with pytest.raises(ValidationError):
            task.with_filename("")


class TestMatching:
    """Test cases for the filename comparison policy."""

    def test_case_sensitive_by_default(self):
        task = SearchTask(root="/tmp", filename="report.txt")

        assert task.matches("report.txt")
        assert not task.matches("Report.TXT")
        assert not task.matches("report.txt.bak")

    def test_ignore_case(self):
        task = SearchTask(root="/tmp", filename="report.txt", ignore_case=True)

        assert task.matches("Report.TXT")
        assert task.matches("REPORT.txt")
        assert not task.matches("report.text")

    def test_ignore_case_uses_full_fold(self):
        """Case folding is not limited to ASCII."""
        task = SearchTask(root="/tmp", filename="STRASSE.txt", ignore_case=True)
        assert task.matches("straße.txt")

    def test_no_partial_matches(self):
        task = SearchTask(root="/tmp", filename="a.txt", ignore_case=True)

        assert not task.matches("ba.txt")
        assert not task.matches("a.tx")

    def test_str(self):
        task = SearchTask(root="/tmp", filename="a.txt", recursive=True)
        assert str(task) == "'a.txt' in /tmp (recursive)"

        assert str(SearchTask(root="/tmp", filename="a.txt")) == "'a.txt' in /tmp"
