"""Shared helpers for reading diff text and file paths."""

from __future__ import annotations

from typing import Iterator

_METADATA_PREFIXES = (
    "diff ",
    "index ",
    "+++",
    "---",
    "@@",
    "new file mode",
    "deleted file mode",
    "old mode",
    "new mode",
    "similarity index",
    "dissimilarity index",
    "rename from",
    "rename to",
    "copy from",
    "copy to",
    "Binary files",
    "\\ ",
)


def is_metadata_line(line: str) -> bool:
    """Return True for unified-diff bookkeeping lines that carry no file content."""
    return line.startswith(_METADATA_PREFIXES)


def content_lines(diff_text: str) -> Iterator[str]:
    """Yield the content of every non-metadata diff line without its marker."""
    if not isinstance(diff_text, str):
        return
    for line in diff_text.splitlines():
        if is_metadata_line(line):
            continue
        if line[:1] in {"+", "-", " "}:
            yield line[1:]
        else:
            yield line


def file_extension(path: str) -> str:
    """Return the extension after the last dot of the file name, or ``none``."""
    name = base_name(path)
    if "." not in name:
        return "none"
    return name.rsplit(".", 1)[1] or "none"


def base_name(path: str) -> str:
    normalized = path.replace("\\", "/")
    return normalized.rsplit("/", 1)[-1]


def parent_directory(path: str) -> str:
    """Return the directory portion of ``path`` or an empty string for top-level files."""
    normalized = path.replace("\\", "/")
    if "/" not in normalized:
        return ""
    return normalized.rsplit("/", 1)[0]


def directory_name(path: str) -> str:
    """Return the immediate parent directory name, ``root`` for top-level files."""
    parent = parent_directory(path)
    if not parent:
        return "root"
    return parent.rsplit("/", 1)[-1]


__all__ = [
    "base_name",
    "content_lines",
    "directory_name",
    "file_extension",
    "is_metadata_line",
    "parent_directory",
]
