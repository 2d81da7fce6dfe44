"""Tests for the individual grouping strategies and their discovery."""

from __future__ import annotations

from types import SimpleNamespace
from typing import List

import pytest

from commitsplit import grouping
from commitsplit.analyzers import DependencyDetector, build_dependency_graph
from commitsplit.config import CrossRepoAnalysisConfig
from commitsplit.grouping import (
    DependencyStrategy,
    DirectoryStrategy,
    FileTypeStrategy,
    GroupingContext,
    GroupingStrategy,
    SemanticStrategy,
    discover_strategies,
)
from commitsplit.grouping.dependency import DEPENDENCY_MIN_CONFIDENCE
from commitsplit.models import (
    ChangeType,
    CommitGroup,
    CommitGroupType,
    CrossRepoDiff,
    DependencyRelation,
)
from tests._fixtures.scenarios import build_diff, change


def _context(diff: CrossRepoDiff) -> GroupingContext:
    relations = DependencyDetector().detect(diff)
    return GroupingContext(relations=relations, graph=build_dependency_graph(relations))


def _files(group: CommitGroup) -> dict[str, List[str]]:
    return {commit.repository: commit.paths() for commit in group.commits}


def test_semantic_strategy_groups_by_change_type(scenario_diff: CrossRepoDiff) -> None:
    config = CrossRepoAnalysisConfig()
    groups = SemanticStrategy().build_groups(scenario_diff, _context(scenario_diff), config)

    assert [group.name for group in groups] == [
        "feature changes across repositories",
        "tests changes across repositories",
    ]
    feature, tests = groups
    assert feature.group_type is CommitGroupType.FEATURE
    assert feature.change_type is ChangeType.FEATURE
    assert feature.confidence == pytest.approx(0.85)
    assert _files(feature) == {
        "core-lib": ["src/validators.py"],
        "api-service": ["src/handlers/users.py"],
        "frontend-app": ["src/api/login.js"],
    }
    assert tests.group_type is CommitGroupType.MIXED
    assert _files(tests) == {"core-lib": ["tests/test_validators.py"]}
    assert all(commit.change_type is ChangeType.TESTS for commit in tests.commits)


def test_dependency_strategy_collects_both_ends(scenario_diff: CrossRepoDiff) -> None:
    config = CrossRepoAnalysisConfig()
    groups = DependencyStrategy().build_groups(scenario_diff, _context(scenario_diff), config)

    assert len(groups) == 1
    group = groups[0]
    assert group.name == "api-service => core-lib"
    assert group.group_type is CommitGroupType.DEPENDENCY
    assert group.confidence == pytest.approx(0.9)
    assert _files(group) == {
        "api-service": ["src/handlers/users.py"],
        "core-lib": ["src/validators.py", "tests/test_validators.py"],
    }


def test_dependency_strategy_threshold_ignores_min_confidence(scenario_diff: CrossRepoDiff) -> None:
    config = CrossRepoAnalysisConfig(min_confidence=0.95)
    groups = DependencyStrategy().build_groups(scenario_diff, _context(scenario_diff), config)
    assert [group.name for group in groups] == ["api-service => core-lib"]


def test_dependency_strategy_skips_weak_relations(scenario_diff: CrossRepoDiff) -> None:
    weak = DependencyRelation("api-service", "core-lib", "api", DEPENDENCY_MIN_CONFIDENCE - 0.1)
    context = GroupingContext(relations=[weak], graph={})
    assert DependencyStrategy().build_groups(scenario_diff, context, CrossRepoAnalysisConfig()) == []


def test_file_type_strategy_skips_single_file_buckets(scenario_diff: CrossRepoDiff) -> None:
    config = CrossRepoAnalysisConfig()
    groups = FileTypeStrategy().build_groups(scenario_diff, _context(scenario_diff), config)

    assert [group.name for group in groups] == ["py file updates"]
    assert groups[0].file_count() == 3
    assert groups[0].group_type is CommitGroupType.FILE_TYPE
    assert groups[0].commits[0].message.startswith("feat: update py files")


def test_directory_strategy_matches_directory_names_across_repositories() -> None:
    diff = build_diff(
        {
            "server": [change("server", "app/src/main.py", ["print('x')"])],
            "client": [
                change("client", "src/index.ts", ["console.log('y')"]),
                change("client", "README.md", ["Hello"]),
            ],
        }
    )
    config = CrossRepoAnalysisConfig()
    groups = DirectoryStrategy().build_groups(diff, _context(diff), config)

    assert [group.name for group in groups] == ["src directory changes"]
    assert _files(groups[0]) == {"server": ["app/src/main.py"], "client": ["src/index.ts"]}
    assert groups[0].group_type is CommitGroupType.DIRECTORY


def test_strategies_report_enabled_flags() -> None:
    config = CrossRepoAnalysisConfig(group_by_semantics=False, group_by_directory=False)
    assert not SemanticStrategy().enabled(config)
    assert DependencyStrategy().enabled(config)
    assert FileTypeStrategy().enabled(config)
    assert not DirectoryStrategy().enabled(config)


def test_discover_strategies_keeps_fixed_order(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(grouping, "_iter_entry_points", lambda: [])
    names = [strategy.name for strategy in discover_strategies(CrossRepoAnalysisConfig())]
    assert names == ["semantic", "dependency", "fileType", "directory"]

    config = CrossRepoAnalysisConfig(group_by_file_type=False)
    names = [strategy.name for strategy in discover_strategies(config)]
    assert names == ["semantic", "dependency", "directory"]


class _ExtensionStrategy(GroupingStrategy):
    name = "extension"
    group_type = CommitGroupType.COMPONENT
    confidence = 0.7

    def enabled(self, config: CrossRepoAnalysisConfig) -> bool:
        return True

    def build_groups(self, diff, context, config):  # pragma: no cover - not exercised
        return []


def test_discover_strategies_appends_entry_points(monkeypatch: pytest.MonkeyPatch) -> None:
    entries = [
        SimpleNamespace(name="extension", load=lambda: _ExtensionStrategy),
        SimpleNamespace(name="semantic", load=lambda: _ExtensionStrategy),
    ]
    monkeypatch.setattr(grouping, "_iter_entry_points", lambda: entries)

    names = [strategy.name for strategy in discover_strategies(CrossRepoAnalysisConfig())]
    assert names == ["semantic", "dependency", "fileType", "directory", "extension"]


def test_discover_strategies_rejects_foreign_objects(monkeypatch: pytest.MonkeyPatch) -> None:
    entries = [SimpleNamespace(name="broken", load=lambda: object())]
    monkeypatch.setattr(grouping, "_iter_entry_points", lambda: entries)

    with pytest.raises(TypeError):
        discover_strategies(CrossRepoAnalysisConfig())
