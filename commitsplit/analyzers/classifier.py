"""Single-file change classifier.

Labels one file's diff text with a :class:`~commitsplit.models.ChangeType` and
extracts the identifier-like keywords it touches. Everything here is lexical:
weighted substring patterns decide the change type and whitespace-split words
become keywords. The classifier never raises on malformed or binary input; it
falls back to ``chore`` with no keywords instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Sequence

from ..models import ChangeType
from .utils import content_lines


@dataclass(frozen=True)
class ChangePattern:
    """Substring pattern that votes for a change type."""

    description: str
    change_type: ChangeType
    weight: float
    needles: Sequence[str]

    def matches(self, lowered_line: str) -> bool:
        return any(needle in lowered_line for needle in self.needles)


@dataclass(frozen=True)
class Classification:
    """Result of classifying one file's diff."""

    change_type: ChangeType
    keywords: FrozenSet[str] = field(default_factory=frozenset)


DEFAULT_PATTERNS: Sequence[ChangePattern] = (
    ChangePattern(
        "Feature addition",
        ChangeType.FEATURE,
        1.0,
        ("feat", "feature", "add", "implement", "new"),
    ),
    ChangePattern(
        "Bug fix",
        ChangeType.BUGFIX,
        1.0,
        ("fix", "bug", "issue", "error", "crash", "exception", "fault", "correct"),
    ),
    ChangePattern(
        "Code refactoring",
        ChangeType.REFACTOR,
        0.8,
        ("refactor", "clean", "restructure", "reorganize", "simplify", "improve"),
    ),
    ChangePattern(
        "Documentation update",
        ChangeType.DOCS,
        0.7,
        ("doc", "comment", "readme", "explain", "describe"),
    ),
    ChangePattern(
        "Test addition/update",
        ChangeType.TESTS,
        0.7,
        ("test", "spec", "assert", "verify", "validate"),
    ),
    ChangePattern(
        "Style change",
        ChangeType.STYLE,
        0.5,
        ("style", "format", "indent", "whitespace", "align", "lint"),
    ),
    ChangePattern(
        "Performance improvement",
        ChangeType.PERFORMANCE,
        0.9,
        ("performance", "speed", "optimize", "fast", "slow", "memory", "cpu", "latency"),
    ),
    ChangePattern(
        "Definition",
        ChangeType.FEATURE,
        0.9,
        ("def ", "func ", "function ", "proc ", "class ", "struct ", "interface ", "type "),
    ),
    ChangePattern(
        "Exception handling",
        ChangeType.BUGFIX,
        0.8,
        ("try", "except", "catch", "finally", "raise", "throw"),
    ),
)

_STRIP_CHARS = "()[]{},;:.\"'`*<>=!&|"

_LANGUAGE_KEYWORDS = frozenset(
    {
        "and",
        "async",
        "await",
        "break",
        "case",
        "class",
        "const",
        "continue",
        "def",
        "elif",
        "else",
        "except",
        "export",
        "false",
        "for",
        "from",
        "func",
        "function",
        "import",
        "include",
        "let",
        "none",
        "not",
        "null",
        "pass",
        "proc",
        "return",
        "self",
        "this",
        "true",
        "type",
        "var",
        "while",
        "with",
        "yield",
    }
)


class ChangeClassifier:
    """Deterministic, pure classifier over unified-diff text."""

    def __init__(self, patterns: Iterable[ChangePattern] | None = None) -> None:
        self.patterns: List[ChangePattern] = list(patterns or DEFAULT_PATTERNS)

    def classify(self, diff_text: str) -> Classification:
        return Classification(
            change_type=self.detect_change_type(diff_text),
            keywords=frozenset(extract_keywords(diff_text)),
        )

    def detect_change_type(self, diff_text: str) -> ChangeType:
        if not isinstance(diff_text, str) or "\x00" in diff_text:
            return ChangeType.CHORE

        lowered = [line.lower() for line in content_lines(diff_text)]
        scores = {change_type: 0.0 for change_type in ChangeType}
        for pattern in self.patterns:
            hits = sum(1 for line in lowered if pattern.matches(line))
            if hits:
                scores[pattern.change_type] += pattern.weight * hits

        best = ChangeType.CHORE
        best_score = 0.0
        # Iterating in declaration order makes ties resolve to the earlier type.
        for change_type in ChangeType:
            if scores[change_type] > best_score:
                best = change_type
                best_score = scores[change_type]
        return best


def extract_keywords(diff_text: str) -> set[str]:
    """Return lowercase identifier-like words found in the diff's content lines."""
    keywords: set[str] = set()
    if not isinstance(diff_text, str) or "\x00" in diff_text:
        return keywords
    for line in content_lines(diff_text):
        for word in line.split():
            cleaned = word.strip(_STRIP_CHARS)
            if len(cleaned) <= 2 or not cleaned[0].isalpha() or not cleaned.isascii():
                continue
            lowered = cleaned.lower()
            if lowered in _LANGUAGE_KEYWORDS:
                continue
            keywords.add(lowered)
    return keywords


def detect_change_type(diff_text: str) -> ChangeType:
    return _DEFAULT_CLASSIFIER.detect_change_type(diff_text)


def classify(diff_text: str) -> Classification:
    return _DEFAULT_CLASSIFIER.classify(diff_text)


_DEFAULT_CLASSIFIER = ChangeClassifier()


__all__ = [
    "ChangeClassifier",
    "ChangePattern",
    "Classification",
    "DEFAULT_PATTERNS",
    "classify",
    "detect_change_type",
    "extract_keywords",
]
