"""Shared fixtures for context budget tests."""

from datetime import datetime
from pathlib import Path

import pytest

from context_optimizer.config import EngineConfig
from context_optimizer.core.context_budget import RelevanceScorer, SmartContextPruner, TokenEstimator

FIXED_NOW = datetime(2026, 3, 15, 12, 0, 0)


@pytest.fixture
def fixed_clock():
    """Clock pinned to 2026-03-15 12:00 so date heuristics are deterministic."""
    return lambda: FIXED_NOW


@pytest.fixture
def scorer(fixed_clock):
    return RelevanceScorer(clock=fixed_clock)


@pytest.fixture
def pruner(scorer, fixed_clock):
    return SmartContextPruner(TokenEstimator(), scorer, clock=fixed_clock)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Project tree with memory, skill and workflow collaborator files."""
    memory = tmp_path / ".ai" / "memory"
    memory.mkdir(parents=True)
    (memory / "lessons.md").write_text(
        "# Lessons\n"
        "- Always validate auth tokens before trusting claims\n"
        "- Test the security permission checks with an audit\n"
        "- Keep the changelog tidy\n",
        encoding="utf-8",
    )
    (memory / "decisions.md").write_text(
        "# Decisions\n"
        "1. 2026-03-10 Use token estimation instead of a tokenizer\n"
        "2. 2020-01-01 Store memory notes as markdown\n",
        encoding="utf-8",
    )

    skill = tmp_path / ".ai" / "skills" / "git-worktree"
    skill.mkdir(parents=True)
    (skill / "SKILL.md").write_text(
        "# Git Worktree\n\nCreate and remove worktrees to implement fixes in isolation.\n",
        encoding="utf-8",
    )

    workflows = tmp_path / ".ai" / "workflows"
    workflows.mkdir(parents=True)
    (workflows / "work.md").write_text(
        "# Work Phase\n\nImplement, test and fix until the build is green.\n",
        encoding="utf-8",
    )
    return tmp_path


@pytest.fixture
def project_config(project_root: Path) -> EngineConfig:
    return EngineConfig(project_root=project_root)
