"""Semantic grouping: one group per classified change type."""

from __future__ import annotations

from typing import Dict, List

from ..config import CrossRepoAnalysisConfig
from ..models import SEMANTIC_GROUP_TYPES, ChangeType, CommitGroup, CommitGroupType, CrossRepoDiff, FileChange
from .base import GroupingContext, GroupingStrategy, build_group


class SemanticStrategy(GroupingStrategy):
    """Buckets every file by the change type the classifier assigns to it."""

    name = "semantic"
    group_type = CommitGroupType.MIXED
    confidence = 0.85

    def enabled(self, config: CrossRepoAnalysisConfig) -> bool:
        return config.group_by_semantics

    def build_groups(
        self,
        diff: CrossRepoDiff,
        context: GroupingContext,
        config: CrossRepoAnalysisConfig,
    ) -> List[CommitGroup]:
        buckets: Dict[ChangeType, Dict[str, List[FileChange]]] = {
            change_type: {} for change_type in ChangeType
        }
        for repository, files in diff.changes.items():
            for change in files:
                change_type = context.classify(change).change_type
                buckets[change_type].setdefault(repository, []).append(change)

        groups: List[CommitGroup] = []
        for change_type, files_by_repository in buckets.items():
            group = build_group(
                context,
                name=f"{change_type.value} changes across repositories",
                description=f"Changes related to {change_type.value} across multiple repositories",
                files_by_repository=files_by_repository,
                group_type=SEMANTIC_GROUP_TYPES[change_type],
                confidence=self.confidence,
                summary=f"{change_type.value} changes",
                change_type=change_type,
            )
            if group is not None:
                groups.append(group)
        return groups
