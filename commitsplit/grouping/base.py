"""Base classes and shared builders for grouping strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from ..analyzers.classifier import ChangeClassifier, Classification
from ..config import CrossRepoAnalysisConfig
from ..models import (
    ChangeType,
    CommitGroup,
    CommitGroupType,
    CommitInfo,
    CrossRepoDiff,
    DependencyGraph,
    DependencyRelation,
    FileChange,
)
from .messages import build_commit_message

FilesByRepository = Mapping[str, Sequence[FileChange]]
KeyFunction = Callable[[FileChange], str]


@dataclass
class GroupingContext:
    """Per-request state shared by every strategy.

    Classifications are memoised per ``(repository, path)`` so a file is only
    classified once no matter how many strategies look at it.
    """

    classifier: ChangeClassifier = field(default_factory=ChangeClassifier)
    relations: List[DependencyRelation] = field(default_factory=list)
    graph: DependencyGraph = field(default_factory=dict)
    _classifications: Dict[Tuple[str, str], Classification] = field(
        default_factory=dict, init=False, repr=False
    )

    def classify(self, change: FileChange) -> Classification:
        key = (change.repository, change.path)
        cached = self._classifications.get(key)
        if cached is None:
            cached = self.classifier.classify(change.diff_text)
            self._classifications[key] = cached
        return cached

    def keywords_for(self, files: Sequence[FileChange]) -> Set[str]:
        keywords: Set[str] = set()
        for change in files:
            keywords.update(self.classify(change).keywords)
        return keywords

    def dominant_change_type(
        self, files: Sequence[FileChange], default: ChangeType = ChangeType.CHORE
    ) -> ChangeType:
        """Majority vote of classified change types; ties go to the earlier type."""
        votes = Counter(self.classify(change).change_type for change in files)
        if not votes:
            return default
        best = default
        best_count = 0
        for change_type in ChangeType:
            if votes[change_type] > best_count:
                best = change_type
                best_count = votes[change_type]
        return best


class GroupingStrategy(ABC):
    """Contract for strategies that partition a cross-repository diff into groups."""

    name: str = ""
    group_type: CommitGroupType = CommitGroupType.MIXED
    confidence: float = 0.0

    @abstractmethod
    def enabled(self, config: CrossRepoAnalysisConfig) -> bool:
        """Return True when the configuration turns this strategy on."""

    @abstractmethod
    def build_groups(
        self,
        diff: CrossRepoDiff,
        context: GroupingContext,
        config: CrossRepoAnalysisConfig,
    ) -> List[CommitGroup]:
        """Produce candidate commit groups; overlaps with other strategies are allowed."""


def build_commit_info(
    repository: str,
    files: Sequence[FileChange],
    change_type: ChangeType,
    context: GroupingContext,
    *,
    summary: str | None = None,
) -> CommitInfo:
    keywords = context.keywords_for(files)
    paths = [change.path for change in files]
    return CommitInfo(
        repository=repository,
        message=build_commit_message(change_type, paths, keywords, summary=summary),
        changes=list(files),
        change_type=change_type,
        keywords=keywords,
        summary=summary,
    )


def build_group(
    context: GroupingContext,
    *,
    name: str,
    description: str,
    files_by_repository: FilesByRepository,
    group_type: CommitGroupType,
    confidence: float,
    summary: str | None = None,
    change_type: Optional[ChangeType] = None,
    default_change_type: ChangeType = ChangeType.CHORE,
) -> Optional[CommitGroup]:
    """Assemble a group with one commit per repository that contributes files.

    With ``change_type`` set every commit carries that type; otherwise each
    repository's commit takes the majority type of its own files. Returns
    ``None`` when no repository contributes a file.
    """
    commits: List[CommitInfo] = []
    all_files: List[FileChange] = []
    for repository, files in files_by_repository.items():
        if not files:
            continue
        commit_type = change_type or context.dominant_change_type(files, default_change_type)
        commits.append(build_commit_info(repository, files, commit_type, context, summary=summary))
        all_files.extend(files)

    if not commits:
        return None

    keywords: Set[str] = set()
    for commit in commits:
        keywords.update(commit.keywords)

    return CommitGroup(
        name=name,
        description=description,
        commits=commits,
        group_type=group_type,
        change_type=change_type or context.dominant_change_type(all_files, default_change_type),
        confidence=confidence,
        keywords=keywords,
    )


def bucket_files(
    diff: CrossRepoDiff, key_for: KeyFunction
) -> Dict[str, Dict[str, List[FileChange]]]:
    """Group every file by ``key_for(file)`` and then by repository, keeping input order."""
    buckets: Dict[str, Dict[str, List[FileChange]]] = {}
    for repository, files in diff.changes.items():
        for change in files:
            bucket = buckets.setdefault(key_for(change), {})
            bucket.setdefault(repository, []).append(change)
    return buckets


def bucket_size(bucket: FilesByRepository) -> int:
    return sum(len(files) for files in bucket.values())


__all__ = [
    "GroupingContext",
    "GroupingStrategy",
    "bucket_files",
    "bucket_size",
    "build_commit_info",
    "build_group",
]
