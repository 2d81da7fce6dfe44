"""Builders for cross-repository diffs used across the test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Set

from commitsplit.models import CrossRepoDiff, FileChange, FileChangeKind, Repository
from commitsplit.repos import RepositoryManager


def git_diff(
    path: str,
    added: Sequence[str],
    *,
    kind: FileChangeKind = FileChangeKind.MODIFY,
    context: Sequence[str] = (),
) -> str:
    """Return git-format diff text for one file adding ``added`` lines."""
    lines = [f"diff --git a/{path} b/{path}"]
    if kind is FileChangeKind.ADD:
        lines.append("new file mode 100644")
        lines.append("index 0000000..1111111")
        lines.append("--- /dev/null")
    elif kind is FileChangeKind.DELETE:
        lines.append("deleted file mode 100644")
        lines.append("index 1111111..0000000")
        lines.append(f"--- a/{path}")
    else:
        lines.append("index 1111111..2222222 100644")
        lines.append(f"--- a/{path}")
    lines.append("+++ /dev/null" if kind is FileChangeKind.DELETE else f"+++ b/{path}")
    lines.append(f"@@ -1,{len(context)} +1,{len(context) + len(added)} @@")
    lines.extend(f" {line}" for line in context)
    marker = "-" if kind is FileChangeKind.DELETE else "+"
    lines.extend(f"{marker}{line}" for line in added)
    return "\n".join(lines) + "\n"


def change(
    repository: str,
    path: str,
    added: Sequence[str],
    *,
    kind: FileChangeKind = FileChangeKind.MODIFY,
    context: Sequence[str] = (),
) -> FileChange:
    return FileChange(
        path=path,
        change_kind=kind,
        diff_text=git_diff(path, added, kind=kind, context=context),
        repository=repository,
    )


def build_diff(
    changes: Mapping[str, Sequence[FileChange]],
    dependencies: Optional[Mapping[str, Sequence[str]]] = None,
) -> CrossRepoDiff:
    dependencies = dependencies or {}
    repositories = [
        Repository(name=name, path=f"/work/{name}", dependencies=list(dependencies.get(name, [])))
        for name in changes
    ]
    return CrossRepoDiff(
        repositories=repositories,
        changes={name: list(files) for name, files in changes.items()},
    )


THREE_REPO_DEPENDENCIES: Dict[str, List[str]] = {
    "core-lib": [],
    "api-service": ["core-lib"],
    "frontend-app": ["api-service"],
}


def three_repo_changes() -> Dict[str, List[FileChange]]:
    """core-lib gains validateEmail plus a test, api-service imports core-lib, frontend calls the API."""
    return {
        "core-lib": [
            change(
                "core-lib",
                "src/validators.py",
                [
                    "",
                    "def validateEmail(address):",
                    '    """Return True when the address looks like an email."""',
                    '    return re.match(r"[^@]+@[^@]+", address) is not None',
                ],
                context=["import re"],
            ),
            change(
                "core-lib",
                "tests/test_validators.py",
                [
                    "from validators import validateEmail",
                    "",
                    "",
                    "def test_validate_email_accepts_plain_value():",
                    '    assert validateEmail("user@example.com")',
                ],
                kind=FileChangeKind.ADD,
            ),
        ],
        "api-service": [
            change(
                "api-service",
                "src/handlers/users.py",
                ["import core-lib/data/models"],
                context=["def get_user(user_id):", "    return lookup(user_id)"],
            ),
        ],
        "frontend-app": [
            change(
                "frontend-app",
                "src/api/login.js",
                [
                    "export async function login(credentials) {",
                    '  return fetch("/api/login", { method: "POST", body: JSON.stringify(credentials) });',
                    "}",
                ],
            ),
        ],
    }


def three_repo_diff() -> CrossRepoDiff:
    return build_diff(three_repo_changes(), THREE_REPO_DEPENDENCIES)


def three_repo_manager(root: Path) -> RepositoryManager:
    manager = RepositoryManager(root)
    for name, dependencies in THREE_REPO_DEPENDENCIES.items():
        manager.add_repository(name, str(root / name), dependencies)
    return manager


class StaticFetcher:
    """Fetcher double returning canned changes and recording every call."""

    def __init__(
        self,
        changes: Mapping[str, Sequence[FileChange]],
        failing: Optional[Set[str]] = None,
    ) -> None:
        self.changes = {name: list(files) for name, files in changes.items()}
        self.failing = set(failing or ())
        self.calls: List[tuple[str, str]] = []

    def __call__(self, repository: Repository, commit_range: str) -> List[FileChange]:
        self.calls.append((repository.name, commit_range))
        if repository.name in self.failing:
            raise RuntimeError(f"jj diff failed for {repository.name}")
        return list(self.changes.get(repository.name, []))


def all_paths(groups) -> List[tuple[str, str]]:
    """Every ``(repository, path)`` pair across ``groups``, duplicates kept."""
    return [
        (commit.repository, file.path)
        for group in groups
        for commit in group.commits
        for file in commit.changes
    ]


__all__ = [
    "StaticFetcher",
    "THREE_REPO_DEPENDENCIES",
    "all_paths",
    "build_diff",
    "change",
    "git_diff",
    "three_repo_changes",
    "three_repo_diff",
    "three_repo_manager",
]
