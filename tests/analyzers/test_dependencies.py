"""Tests for cross-repository dependency detection."""

from __future__ import annotations

import pytest

from commitsplit.analyzers.dependencies import (
    DependencyDetector,
    build_dependency_graph,
    semantic_confidence,
)
from commitsplit.models import CrossRepoDiff, DependencyRelation, FileChange, FileChangeKind
from tests._fixtures.scenarios import build_diff, change, git_diff


def test_scenario_detects_import_of_core_lib(scenario_diff: CrossRepoDiff) -> None:
    relations = DependencyDetector().detect(scenario_diff)

    imports = [
        relation
        for relation in relations
        if (relation.source, relation.target, relation.kind) == ("api-service", "core-lib", "import")
    ]
    assert imports
    assert all(relation.confidence >= 0.7 for relation in imports)
    assert imports[0].source_file == "src/handlers/users.py"
    assert imports[0].target_file is None


def test_reference_relation_accompanies_pattern_matches(scenario_diff: CrossRepoDiff) -> None:
    relations = DependencyDetector().scan_references(scenario_diff)
    assert [(relation.kind, relation.confidence) for relation in relations] == [
        ("reference", 0.7),
        ("import", 0.9),
    ]


def test_reference_scan_ignores_self_mentions() -> None:
    diff = build_diff({"alpha": [change("alpha", "src/main.py", ["import alpha.tools"])]})
    assert DependencyDetector().detect(diff) == []


def test_require_pattern_on_line_naming_other_repository() -> None:
    diff = build_diff(
        {
            "web": [change("web", "index.js", ["const api = require('shared-kit');"])],
            "shared-kit": [],
        }
    )
    kinds = {relation.kind for relation in DependencyDetector().scan_references(diff)}
    assert kinds == {"reference", "require"}


def test_file_name_scan_pairs_matching_names_with_same_extension() -> None:
    diff = build_diff(
        {
            "server": [change("server", "src/user.py", ["name = 'x'"])],
            "client": [
                change("client", "models/user.py", ["name = 'y'"]),
                change("client", "models/user.js", ["name = 'z'"]),
            ],
        }
    )
    relations = DependencyDetector().scan_file_names(diff)
    assert relations == [
        DependencyRelation("server", "client", "api", 0.6, "src/user.py", "models/user.py"),
        DependencyRelation("client", "server", "api", 0.6, "models/user.py", "src/user.py"),
    ]


def test_keyword_scan_requires_three_shared_keywords() -> None:
    diff = build_diff(
        {
            "north": [change("north", "notes.txt", ["alpha bravo charlie delta"])],
            "south": [change("south", "docs.md", ["alpha bravo charlie"])],
            "east": [change("east", "todo.rst", ["alpha bravo"])],
        }
    )
    relations = DependencyDetector().scan_keywords(diff)

    pairs = {(relation.source, relation.target) for relation in relations}
    assert pairs == {("north", "south"), ("south", "north")}
    for relation in relations:
        assert relation.kind == "semantic"
        assert relation.confidence == pytest.approx(0.8)
        assert relation.source_file is None and relation.target_file is None


def test_semantic_confidence_is_monotonic_and_capped() -> None:
    scores = [semantic_confidence(count) for count in range(3, 12)]
    assert scores == sorted(scores)
    assert scores[-1] == pytest.approx(0.9)
    assert semantic_confidence(3) == pytest.approx(0.8)


def test_detector_returns_nothing_for_single_repository() -> None:
    diff = build_diff({"solo": [change("solo", "notes.txt", ["add a new feature flag"])]})
    assert DependencyDetector().detect(diff) == []


def test_graph_drops_relations_below_threshold() -> None:
    relations = [
        DependencyRelation("a", "b", "api", 0.6),
        DependencyRelation("a", "c", "semantic", 0.55),
        DependencyRelation("a", "b", "import", 0.9),
        DependencyRelation("d", "a", "reference", 0.7),
    ]
    assert build_dependency_graph(relations) == {"a": {"b"}, "d": {"a"}}


def _without_trailing_newline(repository: str, path: str, line: str) -> FileChange:
    text = git_diff(path, [line]) + "\\ No newline at end of file\n"
    return FileChange(path=path, change_kind=FileChangeKind.MODIFY, diff_text=text, repository=repository)


def test_no_newline_marker_does_not_relate_repositories() -> None:
    diff = build_diff(
        {
            "alpha": [_without_trailing_newline("alpha", "a.cfg", "x = 2")],
            "beta": [_without_trailing_newline("beta", "b.ini", "y = 3")],
        }
    )
    relations = DependencyDetector().detect(diff)

    assert relations == []
    assert build_dependency_graph(relations) == {}
