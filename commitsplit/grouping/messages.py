"""Conventional-commit message generation for proposed commits."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence

from ..analyzers.utils import parent_directory
from ..models import COMMIT_TYPE_PREFIX, GENERIC_DESCRIPTIONS, ChangeType

MAX_MESSAGE_KEYWORDS = 3

_SCOPE_INVALID = re.compile(r"[^A-Za-z0-9._/-]+")
_WHITESPACE = re.compile(r"\s+")


def commit_scope(paths: Sequence[str]) -> Optional[str]:
    """Return the shared parent directory name when every path lives in the same one."""
    directories = {parent_directory(path) for path in paths}
    if len(directories) != 1:
        return None
    (directory,) = directories
    if not directory:
        return None
    scope = _SCOPE_INVALID.sub("-", directory.rsplit("/", 1)[-1]).strip("-")
    return scope or None


def message_keywords(keywords: Iterable[str]) -> List[str]:
    return sorted(set(keywords))[:MAX_MESSAGE_KEYWORDS]


def build_commit_message(
    change_type: ChangeType,
    paths: Sequence[str],
    keywords: Iterable[str],
    *,
    summary: str | None = None,
) -> str:
    """Compose ``type(scope): summary`` plus a short body describing the files."""
    prefix = COMMIT_TYPE_PREFIX[change_type]
    scope = commit_scope(paths)
    header = f"{prefix}({scope})" if scope else prefix

    selected = message_keywords(keywords)
    generic = GENERIC_DESCRIPTIONS[change_type]
    if summary and summary.strip():
        description = _WHITESPACE.sub(" ", summary).strip()
    elif selected:
        description = "update " + ", ".join(selected)
    else:
        description = generic

    count = len(paths)
    files_label = f"{count} file" if count == 1 else f"{count} files"
    if selected:
        body = f"Touches {files_label}; keywords: {', '.join(selected)}"
    else:
        body = f"Touches {files_label}; {generic}"
    return f"{header}: {description}\n\n{body}"


__all__ = ["MAX_MESSAGE_KEYWORDS", "build_commit_message", "commit_scope", "message_keywords"]
