"""Tests for the collaborator read boundary (memory/skill/workflow files)."""

from context_optimizer.core.context_budget import SourceReadError
from context_optimizer.core.context_budget.sources import (
    load_items,
    read_source,
    resolve_path,
    split_items,
)


class TestReadSource:
    """Tests for read_source."""

    def test_reads_relative_to_root(self, project_root):
        result = read_source(".ai/workflows/work.md", project_root)
        assert result.ok
        assert result.content.startswith("# Work Phase")
        assert result.error is None

    def test_missing_file_is_not_raised(self, tmp_path):
        result = read_source("missing.md", tmp_path)
        assert not result.ok
        assert result.content is None
        assert isinstance(result.error, SourceReadError)
        assert "missing.md" in str(result.error)

    def test_directory_is_unreadable(self, tmp_path):
        (tmp_path / "dir.md").mkdir()
        assert read_source("dir.md", tmp_path).ok is False

    def test_absolute_path_ignores_root(self, project_root, tmp_path_factory):
        other_root = tmp_path_factory.mktemp("elsewhere")
        absolute = project_root / ".ai" / "memory" / "lessons.md"
        assert resolve_path(absolute, other_root) == absolute
        assert read_source(absolute, other_root).ok


class TestSplitItems:
    """Tests for splitting memory files into items."""

    def test_bullets_and_numbers(self):
        content = "Header\n- first\n* second\n1. third\n12.  fourth"
        assert split_items(content) == ["Header", "first", "second", "third", "fourth"]

    def test_surrounding_whitespace_stripped(self):
        assert split_items("Header\n\n- kept  \n\n") == ["Header", "kept"]

    def test_continuation_lines_stay_with_item(self):
        assert split_items("- one\n  more about one\n- two") == ["- one\n  more about one", "two"]

    def test_empty(self):
        assert split_items("") == []


class TestLoadItems:
    """Tests for load_items."""

    def test_loads_decisions(self, project_root):
        items = load_items(".ai/memory/decisions.md", project_root)
        assert items == [
            "# Decisions",
            "2026-03-10 Use token estimation instead of a tokenizer",
            "2020-01-01 Store memory notes as markdown",
        ]

    def test_missing_file_yields_empty_list(self, tmp_path):
        assert load_items("nope.md", tmp_path) == []
