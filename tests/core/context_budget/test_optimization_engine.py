"""Tests for ContextOptimizationEngine (the optimization façade)."""

import logging

import pytest

from context_optimizer import ContextOptimizationEngine
from context_optimizer.config import EngineConfig
from context_optimizer.core.context_budget import (
    ContentKind,
    ContextLoadResult,
    MemoryOptimization,
    RecommendationType,
    SessionContext,
    Tier,
    UsageStats,
)

LOW_USAGE = "Low token usage. More context could be loaded if needed."
HIGH_USAGE = "High token usage detected. Consider using more specific queries."


def _load_result(utilization: float) -> ContextLoadResult:
    used = int(8000 * utilization / 100)
    return ContextLoadResult(
        loaded_content=[],
        tier=Tier.EXECUTION,
        budget=8000,
        stats=UsageStats(used=used, budget=8000, remaining=max(8000 - used, 0), utilization=utilization),
        session_context=SessionContext(),
    )


class TestOptimizeContext:
    """Tests for a full optimize_context pass."""

    def test_small_project_pass(self, project_config):
        engine = ContextOptimizationEngine(project_config)
        result = engine.optimize_context("git-worktree", "implement the fix", {"currentPhase": "WORK"})

        assert result.tier == Tier.EXECUTION
        assert len(result.loaded_content) == 4
        assert result.pruned_sources == []
        assert len(result.memory_optimization.decisions) == 3
        assert result.memory_optimization.stats["original_lessons"] == 4
        assert [rec.message for rec in result.recommendations] == [LOW_USAGE]
        assert result.recommendations[0].type == RecommendationType.INFO

    def test_usage_is_reset_per_pass(self, project_config):
        engine = ContextOptimizationEngine(project_config)
        first = engine.optimize_context("git-worktree", "implement the fix")
        second = engine.optimize_context("git-worktree", "implement the fix")
        assert first.stats.used == second.stats.used
        assert engine.get_usage_stats().used == second.stats.used

    def test_pruned_files_warning(self, project_root):
        config = EngineConfig(project_root=project_root, tier_limits={"discovery": 10})
        result = ContextOptimizationEngine(config).optimize_context("git-worktree", "what is this")

        assert result.tier == Tier.DISCOVERY
        assert result.pruned_sources
        messages = [rec.message for rec in result.recommendations]
        assert f"{len(result.pruned_sources)} files were pruned due to size constraints." in messages

    def test_high_usage_warning(self, project_root):
        config = EngineConfig(project_root=project_root, token_budget=50)
        result = ContextOptimizationEngine(config).optimize_context("git-worktree", "implement the fix")

        assert result.stats.utilization > 90
        assert result.recommendations[0].type == RecommendationType.WARNING
        assert result.recommendations[0].message == HIGH_USAGE

    def test_missing_project_files(self, tmp_path):
        engine = ContextOptimizationEngine(EngineConfig(project_root=tmp_path))
        result = engine.optimize_context("nope", "what is this", {"recentFiles": ["missing.py"]})

        assert result.loaded_content == []
        assert result.stats.used == 0
        assert result.memory_optimization.lessons == []
        assert [rec.message for rec in result.recommendations] == [LOW_USAGE]

    def test_pass_summary_is_logged_with_version(self, project_config, caplog):
        engine = ContextOptimizationEngine(project_config)
        with caplog.at_level(logging.INFO, logger="context_optimizer.core.context_budget.engine"):
            engine.optimize_context("git-worktree", "implement the fix")

        summaries = [r.getMessage() for r in caplog.records if r.getMessage().startswith("Context optimized")]
        assert len(summaries) == 1
        assert f"(v{project_config.version})" in summaries[0]

    def test_to_dict(self, project_config):
        data = ContextOptimizationEngine(project_config).optimize_context("git-worktree", "implement").to_dict()
        assert set(data) == {
            "loaded_content",
            "tier",
            "budget",
            "stats",
            "session_context",
            "memory_optimization",
            "recommendations",
        }
        assert data["recommendations"][0] == {
            "type": "info",
            "message": LOW_USAGE,
            "action": "Consider loading additional relevant documentation.",
        }


class TestGenerateRecommendations:
    """Tests for recommendation thresholds."""

    @pytest.mark.parametrize(
        "utilization,expected",
        [
            (95.0, [HIGH_USAGE]),
            (90.0, []),
            (50.0, []),
            (30.0, []),
            (29.9, [LOW_USAGE]),
            (0.0, [LOW_USAGE]),
        ],
    )
    def test_utilization_thresholds(self, utilization, expected):
        engine = ContextOptimizationEngine()
        recs = engine.generate_recommendations(_load_result(utilization), MemoryOptimization())
        assert [rec.message for rec in recs] == expected

    def test_many_pruned_lessons(self):
        engine = ContextOptimizationEngine()
        memory = MemoryOptimization(stats={"pruned_lessons": 11})
        recs = engine.generate_recommendations(_load_result(50.0), memory)
        assert [rec.message for rec in recs] == ["Pruned 11 less relevant lessons."]
        assert recs[0].action == "Consider consolidating similar lessons to reduce memory file size."

    def test_ten_pruned_lessons_is_quiet(self):
        engine = ContextOptimizationEngine()
        memory = MemoryOptimization(stats={"pruned_lessons": 10})
        assert engine.generate_recommendations(_load_result(50.0), memory) == []


class TestFacadeHelpers:
    """Tests for the delegating helpers."""

    def test_estimate_tokens(self):
        engine = ContextOptimizationEngine()
        assert engine.estimate_tokens("x" * 400) == 100
        assert engine.estimate_tokens("x" * 400, ContentKind.CODE) == 120
        assert engine.estimate_tokens(None) == 0

    def test_score_relevance(self):
        engine = ContextOptimizationEngine()
        assert engine.score_relevance("fix the security bug", "fix security") > 0
        assert engine.score_relevance(None, "fix") == 0

    def test_update_session_context(self):
        engine = ContextOptimizationEngine()
        context = engine.update_session_context({"currentPhase": "REVIEW"})
        assert context.current_phase == "REVIEW"
        assert engine.context_manager.session_context.current_phase == "REVIEW"

    def test_default_config(self):
        assert ContextOptimizationEngine().config.token_budget == 8000
