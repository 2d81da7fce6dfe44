"""Dependency grouping: one group per detected repository relation."""

from __future__ import annotations

from typing import Dict, List, Optional

from ..config import CrossRepoAnalysisConfig
from ..models import ChangeType, CommitGroup, CommitGroupType, CrossRepoDiff, FileChange
from .base import GroupingContext, GroupingStrategy, build_group

DEPENDENCY_MIN_CONFIDENCE = 0.7


class DependencyStrategy(GroupingStrategy):
    """Pulls together the files on both ends of a confident dependency relation."""

    name = "dependency"
    group_type = CommitGroupType.DEPENDENCY
    confidence = 0.9

    def enabled(self, config: CrossRepoAnalysisConfig) -> bool:
        return config.group_by_dependency

    def build_groups(
        self,
        diff: CrossRepoDiff,
        context: GroupingContext,
        config: CrossRepoAnalysisConfig,
    ) -> List[CommitGroup]:
        pairs: Dict[str, Dict[str, List[FileChange]]] = {}
        for relation in context.relations:
            if relation.confidence < DEPENDENCY_MIN_CONFIDENCE:
                continue
            files_by_repository = pairs.setdefault(f"{relation.source} => {relation.target}", {})
            _collect(diff, files_by_repository, relation.source, relation.source_file)
            _collect(diff, files_by_repository, relation.target, relation.target_file)

        groups: List[CommitGroup] = []
        for pair_name, files_by_repository in pairs.items():
            group = build_group(
                context,
                name=pair_name,
                description="Changes involving dependencies between repositories",
                files_by_repository=files_by_repository,
                group_type=self.group_type,
                confidence=self.confidence,
                summary="cross-repository compatibility changes",
                default_change_type=ChangeType.FEATURE,
            )
            if group is not None:
                groups.append(group)
        return groups


def _collect(
    diff: CrossRepoDiff,
    files_by_repository: Dict[str, List[FileChange]],
    repository: str,
    path: Optional[str],
) -> None:
    """Add the repository's files (or just ``path`` when known), skipping ones already present."""
    available = diff.files_for(repository)
    if not available:
        return
    selected = files_by_repository.setdefault(repository, [])
    seen = {change.path for change in selected}
    for change in available:
        if path is not None and change.path != path:
            continue
        if change.path in seen:
            continue
        selected.append(change)
        seen.add(change.path)
