"""Cross-repository dependency detection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Set

from ..logging import get_logger
from ..models import CrossRepoDiff, DependencyGraph, DependencyRelation
from .classifier import extract_keywords
from .utils import base_name, content_lines, file_extension

GRAPH_MIN_CONFIDENCE = 0.6

_REFERENCE_CONFIDENCE = 0.7
_API_CONFIDENCE = 0.6
_SEMANTIC_MIN_SHARED = 3
_SEMANTIC_CAP = 0.9


@dataclass(frozen=True)
class DependencyPattern:
    """Substring that marks a line as declaring a dependency."""

    needle: str
    kind: str
    confidence: float


DEPENDENCY_PATTERNS: Sequence[DependencyPattern] = (
    DependencyPattern("import ", "import", 0.9),
    DependencyPattern("from ", "import", 0.9),
    DependencyPattern("require", "require", 0.8),
    DependencyPattern("depend", "dependency", 0.7),
    DependencyPattern("include", "include", 0.7),
    DependencyPattern("use ", "import", 0.7),
)


class DependencyDetector:
    """Infers relations between repositories from the changes they share.

    Four independent scans run over the same diff and their results are
    concatenated without de-duplication:

    * direct references to another repository's name in changed lines,
    * dependency keywords (``import``, ``require`` ...) on lines naming another repository,
    * similarly named files with the same extension in different repositories,
    * overlapping keyword vocabularies between repositories.
    """

    def __init__(self, patterns: Iterable[DependencyPattern] | None = None) -> None:
        self.patterns: List[DependencyPattern] = list(patterns or DEPENDENCY_PATTERNS)
        self.logger = get_logger("dependencies")

    def detect(self, diff: CrossRepoDiff) -> List[DependencyRelation]:
        relations: List[DependencyRelation] = []
        relations.extend(self.scan_references(diff))
        relations.extend(self.scan_file_names(diff))
        relations.extend(self.scan_keywords(diff))
        self.logger.debug(
            "Detected %d dependency relations across %d repositories",
            len(relations),
            len(diff.repositories),
        )
        return relations

    def scan_references(self, diff: CrossRepoDiff) -> List[DependencyRelation]:
        """Direct-reference and keyword-pattern scans over changed lines."""
        names = _repository_names(diff)
        relations: List[DependencyRelation] = []
        for source, files in diff.changes.items():
            for file in files:
                for line in content_lines(file.diff_text):
                    for target in names:
                        if not target or target == source or target not in line:
                            continue
                        relations.append(
                            DependencyRelation(
                                source=source,
                                target=target,
                                kind="reference",
                                confidence=_REFERENCE_CONFIDENCE,
                                source_file=file.path,
                            )
                        )
                        for pattern in self.patterns:
                            if pattern.needle in line:
                                relations.append(
                                    DependencyRelation(
                                        source=source,
                                        target=target,
                                        kind=pattern.kind,
                                        confidence=pattern.confidence,
                                        source_file=file.path,
                                    )
                                )
        return relations

    def scan_file_names(self, diff: CrossRepoDiff) -> List[DependencyRelation]:
        """Pair up files with the same extension and overlapping base names."""
        by_extension: Dict[str, Dict[str, List[str]]] = {}
        for repository, files in diff.changes.items():
            for file in files:
                bucket = by_extension.setdefault(file_extension(file.path), {})
                bucket.setdefault(repository, []).append(file.path)

        relations: List[DependencyRelation] = []
        for repo_files in by_extension.values():
            if len(repo_files) < 2:
                continue
            for source, source_paths in repo_files.items():
                for target, target_paths in repo_files.items():
                    if source == target:
                        continue
                    for source_path in source_paths:
                        source_name = base_name(source_path)
                        for target_path in target_paths:
                            target_name = base_name(target_path)
                            if source_name in target_name or target_name in source_name:
                                relations.append(
                                    DependencyRelation(
                                        source=source,
                                        target=target,
                                        kind="api",
                                        confidence=_API_CONFIDENCE,
                                        source_file=source_path,
                                        target_file=target_path,
                                    )
                                )
        return relations

    def scan_keywords(self, diff: CrossRepoDiff) -> List[DependencyRelation]:
        """Relate repositories whose changes share at least three keywords."""
        vocabulary: Dict[str, Set[str]] = {}
        for repository, files in diff.changes.items():
            if not files:
                continue
            keywords: Set[str] = set()
            for file in files:
                keywords.update(extract_keywords(file.diff_text))
            vocabulary[repository] = keywords

        relations: List[DependencyRelation] = []
        for source, source_keywords in vocabulary.items():
            for target, target_keywords in vocabulary.items():
                if source == target:
                    continue
                shared = len(source_keywords & target_keywords)
                if shared < _SEMANTIC_MIN_SHARED:
                    continue
                relations.append(
                    DependencyRelation(
                        source=source,
                        target=target,
                        kind="semantic",
                        confidence=semantic_confidence(shared),
                    )
                )
        return relations


def semantic_confidence(shared_keywords: int) -> float:
    """Monotonic score for a shared-vocabulary relation, capped at 0.9."""
    return min(0.5 + shared_keywords / 10.0, _SEMANTIC_CAP)


def build_dependency_graph(relations: Iterable[DependencyRelation]) -> DependencyGraph:
    """Collapse relations into source -> targets edges, ignoring weak evidence."""
    graph: DependencyGraph = {}
    for relation in relations:
        if relation.confidence < GRAPH_MIN_CONFIDENCE:
            continue
        graph.setdefault(relation.source, set()).add(relation.target)
    return graph


def _repository_names(diff: CrossRepoDiff) -> List[str]:
    names = diff.repository_names()
    for name in diff.changes:
        if name not in names:
            names.append(name)
    return names


__all__ = [
    "DEPENDENCY_PATTERNS",
    "DependencyDetector",
    "DependencyPattern",
    "build_dependency_graph",
    "semantic_confidence",
]
