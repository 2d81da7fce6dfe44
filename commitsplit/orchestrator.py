"""Pipeline orchestration for cross-repository analysis runs."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .analyzers import ChangeClassifier, DependencyDetector, build_dependency_graph
from .analyzers.utils import is_metadata_line
from .config import CrossRepoAnalysisConfig
from .grouping import GroupingContext, ProposalAssembler, discover_strategies
from .logging import get_logger
from .models import CrossRepoDiff, CrossRepoProposal, DependencyRelation, FileChange, Repository
from .repos import RepositoryManager
from .vcs import JujutsuFetcher

Fetcher = Callable[[Repository, str], List[FileChange]]


@dataclass
class RepositoryStats:
    """Line and file counts for one repository's changes."""

    files: int = 0
    additions: int = 0
    deletions: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"files": self.files, "additions": self.additions, "deletions": self.deletions}


@dataclass
class AnalysisSummary:
    """Per-repository statistics plus the relations detected between repositories."""

    commit_range: str
    repositories: Dict[str, RepositoryStats] = field(default_factory=dict)
    relations: List[DependencyRelation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "commitRange": self.commit_range,
            "repositories": {name: stats.to_dict() for name, stats in self.repositories.items()},
            "dependencies": [relation.to_dict() for relation in self.relations],
        }


@dataclass(frozen=True)
class ExecutionStep:
    """One commit to create, in the order it should be applied."""

    group: str
    repository: str
    message: str
    paths: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group": self.group,
            "repository": self.repository,
            "message": self.message,
            "paths": list(self.paths),
        }


class Orchestrator:
    """Coordinates change collection, detection, grouping and assembly."""

    def __init__(
        self,
        fetcher: Fetcher | None = None,
        classifier: ChangeClassifier | None = None,
        detector: DependencyDetector | None = None,
        assembler: ProposalAssembler | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.fetcher: Fetcher = fetcher or JujutsuFetcher()
        self.classifier = classifier or ChangeClassifier()
        self.detector = detector or DependencyDetector()
        self.assembler = assembler or ProposalAssembler()
        self.max_workers = max_workers
        self.logger = get_logger("orchestrator")

    def collect_changes(
        self,
        manager: RepositoryManager,
        names: Sequence[str],
        commit_range: str,
    ) -> CrossRepoDiff:
        """Fetch changes of the named repositories (all when ``names`` is empty)."""
        selected: List[Repository] = []
        for name in names or manager.list_repositories():
            repository = manager.get_repository(name)
            if repository is None:
                self.logger.warning("Skipping unknown repository %s", name)
                continue
            if repository not in selected:
                selected.append(repository)

        diff = CrossRepoDiff(repositories=selected)
        if not selected:
            return diff

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [
                (repository, pool.submit(self.fetcher, repository, commit_range))
                for repository in selected
            ]
            for repository, future in futures:
                try:
                    diff.changes[repository.name] = list(future.result())
                except Exception as exc:
                    self.logger.warning(
                        "Failed to fetch changes for %s: %s", repository.name, exc
                    )
                    diff.changes[repository.name] = []

        self.logger.info(
            "Collected %d changed files from %d repositories",
            diff.total_files(),
            len(selected),
        )
        return diff

    def propose(
        self,
        diff: CrossRepoDiff,
        config: CrossRepoAnalysisConfig | None = None,
        commit_range: str = "",
    ) -> CrossRepoProposal:
        """Build a proposal from an already collected diff."""
        config = config or CrossRepoAnalysisConfig()
        relations = self._detect(diff, config)
        graph = build_dependency_graph(relations)
        context = GroupingContext(classifier=self.classifier, relations=relations, graph=graph)

        candidates = []
        for strategy in discover_strategies(config):
            groups = strategy.build_groups(diff, context, config)
            self.logger.debug("Strategy %s proposed %d groups", strategy.name, len(groups))
            candidates.append((strategy.name, groups))

        proposal = self.assembler.assemble(
            diff, graph, candidates, config, context=context, commit_range=commit_range
        )
        self.logger.info(
            "Proposed %d commit groups (confidence %.2f)",
            len(proposal.commit_groups),
            proposal.confidence_score,
        )
        return proposal

    def analyze(
        self,
        manager: RepositoryManager,
        names: Sequence[str],
        commit_range: str,
        config: CrossRepoAnalysisConfig | None = None,
    ) -> CrossRepoProposal:
        diff = self.collect_changes(manager, names, commit_range)
        return self.propose(diff, config, commit_range)

    def summarize(
        self,
        manager: RepositoryManager,
        names: Sequence[str],
        commit_range: str,
        config: CrossRepoAnalysisConfig | None = None,
    ) -> AnalysisSummary:
        """Per-repository change statistics and the relations between repositories."""
        config = config or CrossRepoAnalysisConfig()
        diff = self.collect_changes(manager, names, commit_range)
        summary = AnalysisSummary(commit_range=commit_range)
        for repository in diff.repository_names():
            stats = RepositoryStats()
            for change in diff.files_for(repository):
                stats.files += 1
                additions, deletions = _count_lines(change.diff_text)
                stats.additions += additions
                stats.deletions += deletions
            summary.repositories[repository] = stats
        summary.relations = self._detect(diff, config)
        return summary

    def plan_execution(
        self, manager: RepositoryManager, proposal: CrossRepoProposal
    ) -> List[ExecutionStep]:
        """Flatten a proposal into commits, each group ordered by declared dependencies.

        Raises ``CyclicDependencyError`` when the declarations contain a cycle.
        """
        rank = {name: index for index, name in enumerate(manager.dependency_order())}
        steps: List[ExecutionStep] = []
        for group in proposal.commit_groups:
            commits = sorted(
                group.commits, key=lambda commit: rank.get(commit.repository, len(rank))
            )
            for commit in commits:
                steps.append(
                    ExecutionStep(
                        group=group.name,
                        repository=commit.repository,
                        message=commit.message,
                        paths=tuple(commit.paths()),
                    )
                )
        return steps

    def _detect(
        self, diff: CrossRepoDiff, config: CrossRepoAnalysisConfig
    ) -> List[DependencyRelation]:
        if not config.dependency_detection:
            self.logger.debug("Dependency detection disabled")
            return []
        return self.detector.detect(diff)


def analyze(
    manager: RepositoryManager,
    names: Sequence[str],
    commit_range: str,
    config: Optional[CrossRepoAnalysisConfig] = None,
    *,
    fetcher: Fetcher | None = None,
) -> CrossRepoProposal:
    """Run a full analysis with default collaborators."""
    return Orchestrator(fetcher=fetcher).analyze(manager, names, commit_range, config)


def _count_lines(diff_text: str) -> Tuple[int, int]:
    additions = deletions = 0
    if not isinstance(diff_text, str):
        return additions, deletions
    for line in diff_text.splitlines():
        if is_metadata_line(line):
            continue
        if line.startswith("+"):
            additions += 1
        elif line.startswith("-"):
            deletions += 1
    return additions, deletions


__all__ = [
    "AnalysisSummary",
    "ExecutionStep",
    "Orchestrator",
    "RepositoryStats",
    "analyze",
]
