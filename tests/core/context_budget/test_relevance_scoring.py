"""Tests for relevance scoring.

Tests cover:
1. Intent keyword matching and its 50-point cap
2. Recency boost from recently touched files
3. Workflow phase relevance
4. Literal date freshness
5. Cross-reference density
6. Overall clamping to [0, 100] and non-raising behaviour
"""

from datetime import datetime

import pytest

from context_optimizer.core.context_budget import (
    RelevanceScorer,
    SessionContext,
    count_cross_references,
    extract_path_from_content,
    freshness_score,
)

NOW = datetime(2026, 3, 15)


class TestIntentMatch:
    """Tests for the intent-match component."""

    def test_matching_categories_are_summed_and_capped(self, scorer):
        content = "This document explains how to implement authentication and security features."
        # implementation 1x1 -> 10, security 2x2 -> 40, total capped at 50
        assert scorer.score_content(content, "implement security authentication") == 50

    def test_category_needs_hits_on_both_sides(self, scorer):
        assert scorer.score_content("Implement the parser", "write the docs") == 0

    def test_empty_intent_contributes_nothing(self, scorer):
        assert scorer.score_content("implement, test, secure", "") == 0

    def test_matching_is_case_insensitive(self, scorer):
        assert scorer.score_content("IMPLEMENT it", "Implement") == 10


class TestRecencyBoost:
    """Tests for the recently-touched-file component."""

    CONTENT = "Location: src/service.py\nHandles request routing."

    def test_most_recent_file_scores_thirty(self, scorer):
        context = {"recentFiles": ["src/service.py", "other.md"]}
        assert scorer.score_content(self.CONTENT, "", context) == 30

    def test_boost_decays_with_position(self, scorer):
        context = {"recentFiles": ["a.md", "src/service.py"]}
        assert scorer.score_content(self.CONTENT, "", context) == 25

    def test_boost_floors_at_zero(self, scorer):
        files = [f"f{i}.md" for i in range(6)] + ["src/service.py"]
        assert scorer.score_content(self.CONTENT, "", {"recentFiles": files}) == 0

    def test_recent_file_beats_empty_recent_list(self, scorer):
        with_recent = scorer.score_content(self.CONTENT, "route", {"recentFiles": ["src/service.py"]})
        without = scorer.score_content(self.CONTENT, "route", {"recentFiles": []})
        assert with_recent > without

    def test_extracted_path_can_be_overridden(self, scorer, monkeypatch):
        monkeypatch.setattr(scorer, "extract_path_from_content", lambda content: "test-file.md")
        context = SessionContext(recent_files=["test-file.md", "other-file.md"])
        boosted = scorer.score_content("Test content for recent usage scoring.", "test content", context)
        base = scorer.score_content("Test content for recent usage scoring.", "test content", {})
        assert boosted > base


class TestExtractPath:
    """Tests for extract_path_from_content."""

    def test_file_prefix(self):
        assert extract_path_from_content("File: docs/guide.md more text") == "docs/guide.md"

    def test_prefix_is_case_insensitive(self):
        assert extract_path_from_content("see path:   a/b.py") == "a/b.py"

    def test_no_prefix(self):
        assert extract_path_from_content("nothing declared here") is None


class TestPhaseRelevance:
    """Tests for the workflow phase component."""

    def test_plan_phase(self, scorer):
        content = "This document contains planning and design information."
        # planning: plan + design, documentation: document -> 3 x 8
        assert scorer.score_content(content, "general task", {"currentPhase": "PLAN"}) == 24

    def test_work_phase(self, scorer):
        content = "This document shows how to implement and build features."
        assert scorer.score_content(content, "general task", {"currentPhase": "WORK"}) == 16

    def test_phase_name_is_case_insensitive(self, scorer):
        content = "This document contains planning and design information."
        assert scorer.score_content(content, "", {"currentPhase": "plan"}) == 24

    def test_unknown_phase_scores_nothing(self, scorer):
        assert scorer.score_content("implement and build", "", {"currentPhase": "SHIP"}) == 0

    def test_phase_component_is_capped(self, scorer):
        content = "test validate verify check audit review security auth secure"
        assert scorer.score_phase_relevance(content, "REVIEW") == 40


class TestFreshness:
    """Tests for literal date freshness."""

    def test_current_month(self):
        assert freshness_score("Updated on 2026-03-02", NOW) == 20

    def test_current_year(self):
        assert freshness_score("2026 roadmap, last touched 2026-01", NOW) == 15

    def test_previous_year(self):
        assert freshness_score("Retro from 2025", NOW) == 10

    def test_old_or_missing_dates(self):
        assert freshness_score("Written in 2019", NOW) == 0
        assert freshness_score("No dates at all", NOW) == 0

    def test_scorer_uses_injected_clock(self, scorer):
        assert scorer.score_content("Updated on 2026-03-02", "") == 20


class TestCrossReferences:
    """Tests for cross-reference density."""

    def test_counts_links_and_file_refs(self):
        assert count_cross_references("[a](b) and [c](d) plus `x.py`") == 3

    def test_unlisted_extensions_are_ignored(self):
        assert count_cross_references("`image.png` and `notes.txt`") == 0

    def test_component_is_two_per_reference(self, scorer):
        assert scorer.score_content("[a](b) and `x.py`", "") == 4

    def test_component_is_capped(self, scorer):
        content = " ".join(f"[l{i}](u{i})" for i in range(8))
        assert scorer.score_content(content, "") == 10


class TestScoreBounds:
    """Tests for the overall [0, 100] bound."""

    def test_total_is_capped_at_100(self, scorer):
        words = (
            "implement security authentication build develop create test validate "
            "verify check audit review performance optimize"
        )
        score = scorer.score_content(f"{words} Updated 2026-03-01", words, {"currentPhase": "REVIEW"})
        assert score == 100

    @pytest.mark.parametrize(
        "content,intent,context",
        [
            ("", "", {}),
            ("x" * 5000, "implement", None),
            ("File: a.md [x](y) 2026-03 test", "test fix bug", {"recentFiles": ["a.md"], "currentPhase": "WORK"}),
            (None, None, {"recentFiles": "not-a-list"}),
            (42, ["intent"], {"currentPhase": 7}),
        ],
    )
    def test_score_is_bounded_and_never_raises(self, scorer, content, intent, context):
        score = scorer.score_content(content, intent, context)
        assert 0 <= score <= 100

    def test_score_item_carries_tokens(self, scorer):
        item = scorer.score_item("x" * 40, "")
        assert item.tokens == 10
        assert item.content == "x" * 40

    def test_default_clock(self):
        assert 0 <= RelevanceScorer().score_content("anything", "anything") <= 100
