"""Merge candidate groups from every strategy into one coordinated proposal."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..config import CrossRepoAnalysisConfig
from ..logging import get_logger
from ..models import (
    GROUP_TYPE_ORDER,
    ChangeType,
    CommitGroup,
    CommitGroupType,
    CommitInfo,
    CrossRepoDiff,
    CrossRepoProposal,
    DependencyGraph,
    FileChange,
    split_commit_range,
)
from .base import GroupingContext, build_commit_info, build_group

CandidateGroups = Sequence[Tuple[str, Sequence[CommitGroup]]]

MISC_GROUP_NAME = "Miscellaneous changes"
MISC_GROUP_CONFIDENCE = 0.6


class ProposalAssembler:
    """Turns overlapping candidate groups into a complete, ordered proposal.

    Candidates are claimed greedily in strategy order: the first group to
    reference a file keeps it and later groups are rebuilt without it. Groups
    below ``min_confidence`` claim nothing. Files nobody claimed end up in a
    catch-all group, so every ingested file lands in exactly one commit.
    """

    def __init__(self) -> None:
        self.logger = get_logger("assembler")

    def assemble(
        self,
        diff: CrossRepoDiff,
        graph: DependencyGraph,
        candidates: CandidateGroups,
        config: CrossRepoAnalysisConfig,
        *,
        context: GroupingContext,
        commit_range: str = "",
    ) -> CrossRepoProposal:
        proposal = CrossRepoProposal()
        base, head = split_commit_range(commit_range)
        for repository in diff.repository_names():
            proposal.original_commit_ids[repository] = base
            proposal.target_commit_ids[repository] = head

        ingested = {
            repository: {change.path for change in files}
            for repository, files in diff.changes.items()
        }
        claimed: Dict[str, Set[str]] = {repository: set() for repository in diff.changes}

        groups: List[CommitGroup] = []
        for strategy_name, strategy_groups in candidates:
            kept = 0
            for group in strategy_groups:
                if group.confidence < config.min_confidence:
                    self.logger.debug(
                        "Dropping %s below minimum confidence (%.2f)", group.name, group.confidence
                    )
                    continue
                resolved = self._claim(group, ingested, claimed, context)
                if resolved is not None:
                    groups.append(resolved)
                    kept += 1
            self.logger.debug(
                "Strategy %s kept %d of %d candidate groups",
                strategy_name,
                kept,
                len(strategy_groups),
            )

        leftovers = self._catch_all(diff, claimed, context)
        if leftovers is not None:
            groups.append(leftovers)

        final: List[CommitGroup] = []
        for group in groups:
            for part in self._split(group, config.max_group_size, context):
                part.commits = order_commits(part.commits, graph)
                final.append(part)

        if final:
            proposal.confidence_score = sum(group.confidence for group in final) / len(final)
        final.sort(key=lambda group: (GROUP_TYPE_ORDER[group.group_type], -group.confidence))
        proposal.commit_groups = final
        return proposal

    # ------------------------------------------------------------------
    # Internals

    def _claim(
        self,
        group: CommitGroup,
        ingested: Dict[str, Set[str]],
        claimed: Dict[str, Set[str]],
        context: GroupingContext,
    ) -> Optional[CommitGroup]:
        commits: List[CommitInfo] = []
        for commit in group.commits:
            known = ingested.get(commit.repository, set())
            taken = claimed.setdefault(commit.repository, set())
            files: List[FileChange] = []
            for change in commit.changes:
                if change.path not in known or change.path in taken:
                    continue
                files.append(change)
                taken.add(change.path)
            if not files:
                continue
            if len(files) == len(commit.changes):
                commits.append(commit)
            else:
                commits.append(_rebuild_commit(commit, files, context))

        if not commits:
            return None
        if len(commits) == len(group.commits) and all(
            new is old for new, old in zip(commits, group.commits)
        ):
            return group
        return _with_commits(group, commits)

    def _catch_all(
        self,
        diff: CrossRepoDiff,
        claimed: Dict[str, Set[str]],
        context: GroupingContext,
    ) -> Optional[CommitGroup]:
        remaining: Dict[str, List[FileChange]] = {}
        for repository, files in diff.changes.items():
            taken = claimed.setdefault(repository, set())
            for change in files:
                if change.path in taken:
                    continue
                remaining.setdefault(repository, []).append(change)
                taken.add(change.path)

        group = build_group(
            context,
            name=MISC_GROUP_NAME,
            description="Other changes not covered in other groups",
            files_by_repository=remaining,
            group_type=CommitGroupType.MIXED,
            confidence=MISC_GROUP_CONFIDENCE,
            default_change_type=ChangeType.CHORE,
        )
        if group is not None:
            self.logger.debug(
                "Catch-all group collects %d unclaimed files", group.file_count()
            )
        return group

    def _split(
        self, group: CommitGroup, max_size: int, context: GroupingContext
    ) -> List[CommitGroup]:
        if group.file_count() <= max_size:
            return [group]

        flattened = [(commit, change) for commit in group.commits for change in commit.changes]
        chunks = [flattened[start : start + max_size] for start in range(0, len(flattened), max_size)]
        parts: List[CommitGroup] = []
        for index, chunk in enumerate(chunks, start=1):
            per_commit: Dict[str, Tuple[CommitInfo, List[FileChange]]] = {}
            for commit, change in chunk:
                per_commit.setdefault(commit.repository, (commit, []))[1].append(change)
            commits = [
                _rebuild_commit(commit, files, context) for commit, files in per_commit.values()
            ]
            part = _with_commits(group, commits)
            part.name = f"{group.name} (part {index}/{len(chunks)})"
            parts.append(part)
        return parts


def order_commits(commits: Sequence[CommitInfo], graph: DependencyGraph) -> List[CommitInfo]:
    """Place commits of depended-upon repositories first; cycles keep input order."""
    by_repository = {commit.repository: commit for commit in commits}
    ordered: List[CommitInfo] = []
    done: Set[str] = set()
    visiting: Set[str] = set()

    def visit(repository: str) -> None:
        if repository in done or repository in visiting:
            return
        visiting.add(repository)
        for dependency in sorted(graph.get(repository, ())):
            if dependency in by_repository:
                visit(dependency)
        visiting.discard(repository)
        done.add(repository)
        ordered.append(by_repository[repository])

    for commit in commits:
        visit(commit.repository)
    return ordered


def _rebuild_commit(
    commit: CommitInfo, files: Sequence[FileChange], context: GroupingContext
) -> CommitInfo:
    change_type = context.dominant_change_type(files, commit.change_type)
    return build_commit_info(
        commit.repository, files, change_type, context, summary=commit.summary
    )


def _with_commits(group: CommitGroup, commits: List[CommitInfo]) -> CommitGroup:
    keywords: Set[str] = set()
    for commit in commits:
        keywords.update(commit.keywords)
    return CommitGroup(
        name=group.name,
        description=group.description,
        commits=commits,
        group_type=group.group_type,
        change_type=group.change_type,
        confidence=group.confidence,
        keywords=keywords,
    )


__all__ = ["MISC_GROUP_NAME", "ProposalAssembler", "order_commits"]
