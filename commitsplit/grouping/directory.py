"""Directory grouping: one group per immediate parent directory name."""

from __future__ import annotations

from typing import List

from ..analyzers.utils import directory_name
from ..config import CrossRepoAnalysisConfig
from ..models import CommitGroup, CommitGroupType, CrossRepoDiff
from .base import GroupingContext, GroupingStrategy, bucket_files, bucket_size, build_group


class DirectoryStrategy(GroupingStrategy):
    """Groups files that live in equally named directories across repositories."""

    name = "directory"
    group_type = CommitGroupType.DIRECTORY
    confidence = 0.8

    def enabled(self, config: CrossRepoAnalysisConfig) -> bool:
        return config.group_by_directory

    def build_groups(
        self,
        diff: CrossRepoDiff,
        context: GroupingContext,
        config: CrossRepoAnalysisConfig,
    ) -> List[CommitGroup]:
        groups: List[CommitGroup] = []
        for directory, files_by_repository in bucket_files(
            diff, lambda change: directory_name(change.path)
        ).items():
            if bucket_size(files_by_repository) <= 1:
                continue
            group = build_group(
                context,
                name=f"{directory} directory changes",
                description=f"Changes in {directory} directory across repositories",
                files_by_repository=files_by_repository,
                group_type=self.group_type,
                confidence=self.confidence,
                summary=f"update {directory} module",
            )
            if group is not None:
                groups.append(group)
        return groups
