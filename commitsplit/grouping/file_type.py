"""File-type grouping: one group per shared file extension."""

from __future__ import annotations

from typing import List

from ..analyzers.utils import file_extension
from ..config import CrossRepoAnalysisConfig
from ..models import CommitGroup, CommitGroupType, CrossRepoDiff
from .base import GroupingContext, GroupingStrategy, bucket_files, bucket_size, build_group


class FileTypeStrategy(GroupingStrategy):
    """Groups files with the same extension across repositories."""

    name = "fileType"
    group_type = CommitGroupType.FILE_TYPE
    confidence = 0.75

    def enabled(self, config: CrossRepoAnalysisConfig) -> bool:
        return config.group_by_file_type

    def build_groups(
        self,
        diff: CrossRepoDiff,
        context: GroupingContext,
        config: CrossRepoAnalysisConfig,
    ) -> List[CommitGroup]:
        groups: List[CommitGroup] = []
        for extension, files_by_repository in bucket_files(
            diff, lambda change: file_extension(change.path)
        ).items():
            # A lone file is not worth a dedicated commit.
            if bucket_size(files_by_repository) <= 1:
                continue
            group = build_group(
                context,
                name=f"{extension} file updates",
                description=f"Changes to {extension} files across repositories",
                files_by_repository=files_by_repository,
                group_type=self.group_type,
                confidence=self.confidence,
                summary=f"update {extension} files",
            )
            if group is not None:
                groups.append(group)
        return groups
