"""Tests for conventional-commit message generation."""

from __future__ import annotations

from commitsplit.grouping.messages import build_commit_message, commit_scope, message_keywords
from commitsplit.models import ChangeType


def test_message_uses_shared_directory_scope_and_sorted_keywords() -> None:
    message = build_commit_message(
        ChangeType.FEATURE,
        ["src/api/users.py", "src/api/groups.py"],
        {"zeta", "alpha", "gamma", "beta"},
    )
    assert message == "feat(api): update alpha, beta, gamma\n\nTouches 2 files; keywords: alpha, beta, gamma"


def test_summary_takes_precedence_and_is_normalised() -> None:
    message = build_commit_message(ChangeType.BUGFIX, ["main.py"], [], summary="  fix   crash\n on exit ")
    assert message == "fix: fix crash on exit\n\nTouches 1 file; fix issues"


def test_generic_description_when_nothing_else_is_known() -> None:
    message = build_commit_message(ChangeType.PERFORMANCE, ["a/x.c", "b/y.c"], [])
    assert message.splitlines()[0] == "perf: improve performance"


def test_commit_scope_requires_single_non_root_directory() -> None:
    assert commit_scope(["docs/guide.md"]) == "docs"
    assert commit_scope(["README.md"]) is None
    assert commit_scope(["src/a.py", "lib/b.py"]) is None
    assert commit_scope(["pkg/my module/x.py"]) == "my-module"


def test_message_keywords_caps_at_three() -> None:
    assert message_keywords(["d", "c", "b", "a", "a"]) == ["a", "b", "c"]
