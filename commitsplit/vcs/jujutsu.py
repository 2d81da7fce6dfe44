"""Diff ingestion from Jujutsu working copies."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..logging import get_logger
from ..models import FileChange, FileChangeKind, Repository

Runner = Callable[..., str]

_DIFF_HEADER = "diff --git "


class VcsError(RuntimeError):
    """Raised when a repository cannot be read through the jj command line."""


class JujutsuRepository:
    """Thin wrapper over the ``jj`` binary for one working copy."""

    def __init__(self, path: Path | str, runner: Runner | None = None) -> None:
        self.path = Path(path)
        self._runner = runner or self._default_runner
        self.logger = get_logger("vcs")

    def diff(self, commit_range: str, *, repository: str | None = None) -> List[FileChange]:
        """Return the files changed by ``commit_range`` as parsed ``FileChange`` records."""
        if not self.path.is_dir():
            raise VcsError(f"Repository path does not exist: {self.path}")
        if not (self.path / ".jj").is_dir():
            raise VcsError(f"{self.path} is not a Jujutsu repository")

        args = ["jj", "diff", "--git", "-r", commit_range]
        try:
            output = self._runner(args, cwd=self.path, capture_output=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise VcsError(f"jj diff failed in {self.path}: {exc}") from exc
        changes = parse_git_diff(output or "", repository or self.path.name)
        self.logger.debug("jj diff -r %s in %s: %d files", commit_range, self.path, len(changes))
        return changes

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=capture_output,
        )
        return completed.stdout if capture_output else ""


class JujutsuFetcher:
    """Fetches per-repository changes for the orchestrator."""

    def __init__(self, runner: Runner | None = None) -> None:
        self._runner = runner

    def fetch_changes(self, repository: Repository, commit_range: str) -> List[FileChange]:
        return JujutsuRepository(repository.path, runner=self._runner).diff(
            commit_range, repository=repository.name
        )

    __call__ = fetch_changes


def parse_git_diff(text: str, repository: str) -> List[FileChange]:
    """Split git-format diff output into one ``FileChange`` per file section."""
    changes: List[FileChange] = []
    section: List[str] = []
    for line in text.splitlines():
        if line.startswith(_DIFF_HEADER) and section:
            change = _parse_section(section, repository)
            if change is not None:
                changes.append(change)
            section = []
        section.append(line)
    if section:
        change = _parse_section(section, repository)
        if change is not None:
            changes.append(change)
    return changes


def _parse_section(lines: List[str], repository: str) -> Optional[FileChange]:
    header = lines[0]
    if not header.startswith(_DIFF_HEADER):
        return None

    path = _path_from_header(header[len(_DIFF_HEADER):])
    kind = FileChangeKind.MODIFY
    for line in lines[1:]:
        if line.startswith("new file mode") or line == "--- /dev/null":
            kind = FileChangeKind.ADD
        elif line.startswith("deleted file mode") or line == "+++ /dev/null":
            kind = FileChangeKind.DELETE
        elif line.startswith("+++ b/"):
            path = line[len("+++ b/"):]
        elif line.startswith("@@"):
            break

    if not path:
        return None
    return FileChange(
        path=path,
        change_kind=kind,
        diff_text="\n".join(lines) + "\n",
        repository=repository,
    )


def _path_from_header(rest: str) -> str:
    # "a/<path> b/<path>"; the b side wins, which also covers renames.
    marker = rest.rfind(" b/")
    if marker != -1:
        return rest[marker + len(" b/"):]
    if rest.startswith("a/"):
        return rest[len("a/"):]
    return rest


__all__ = ["JujutsuFetcher", "JujutsuRepository", "VcsError", "parse_git_diff"]
