"""Core data models shared across commitsplit components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple


class ChangeType(str, Enum):
    """Semantic classification of a change."""

    FEATURE = "feature"
    BUGFIX = "bugfix"
    REFACTOR = "refactor"
    DOCS = "docs"
    TESTS = "tests"
    CHORE = "chore"
    STYLE = "style"
    PERFORMANCE = "performance"


class CommitGroupType(str, Enum):
    """How the files of a commit group were brought together."""

    FEATURE = "feature"
    BUGFIX = "bugfix"
    REFACTOR = "refactor"
    DEPENDENCY = "dependency"
    FILE_TYPE = "fileType"
    DIRECTORY = "directory"
    COMPONENT = "component"
    MIXED = "mixed"


class FileChangeKind(str, Enum):
    """Kind of modification a diff applies to a file."""

    ADD = "add"
    MODIFY = "modify"
    DELETE = "delete"


COMMIT_TYPE_PREFIX: Dict[ChangeType, str] = {
    ChangeType.FEATURE: "feat",
    ChangeType.BUGFIX: "fix",
    ChangeType.REFACTOR: "refactor",
    ChangeType.DOCS: "docs",
    ChangeType.TESTS: "test",
    ChangeType.CHORE: "chore",
    ChangeType.STYLE: "style",
    ChangeType.PERFORMANCE: "perf",
}

GENERIC_DESCRIPTIONS: Dict[ChangeType, str] = {
    ChangeType.FEATURE: "add new functionality",
    ChangeType.BUGFIX: "fix issues",
    ChangeType.REFACTOR: "improve code structure",
    ChangeType.DOCS: "update documentation",
    ChangeType.TESTS: "update tests",
    ChangeType.CHORE: "maintenance updates",
    ChangeType.STYLE: "improve code style",
    ChangeType.PERFORMANCE: "improve performance",
}

# Proposal ordering; most specific groupings first, catch-alls last.
GROUP_TYPE_ORDER: Dict[CommitGroupType, int] = {
    CommitGroupType.FEATURE: 0,
    CommitGroupType.BUGFIX: 1,
    CommitGroupType.REFACTOR: 2,
    CommitGroupType.DEPENDENCY: 3,
    CommitGroupType.FILE_TYPE: 4,
    CommitGroupType.DIRECTORY: 5,
    CommitGroupType.COMPONENT: 6,
    CommitGroupType.MIXED: 7,
}

SEMANTIC_GROUP_TYPES: Dict[ChangeType, CommitGroupType] = {
    ChangeType.FEATURE: CommitGroupType.FEATURE,
    ChangeType.BUGFIX: CommitGroupType.BUGFIX,
    ChangeType.REFACTOR: CommitGroupType.REFACTOR,
    ChangeType.DOCS: CommitGroupType.MIXED,
    ChangeType.TESTS: CommitGroupType.MIXED,
    ChangeType.CHORE: CommitGroupType.MIXED,
    ChangeType.STYLE: CommitGroupType.MIXED,
    ChangeType.PERFORMANCE: CommitGroupType.MIXED,
}


@dataclass(frozen=True)
class FileChange:
    """A single file touched by a commit range in one repository."""

    path: str
    change_kind: FileChangeKind
    diff_text: str
    repository: str

    def to_dict(self, *, include_diff: bool = False) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "path": self.path,
            "changeType": self.change_kind.value,
            "repository": self.repository,
        }
        if include_diff:
            data["diff"] = self.diff_text
        return data


@dataclass
class Repository:
    """Static repository declaration."""

    name: str
    path: str
    dependencies: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "path": self.path, "dependencies": list(self.dependencies)}


@dataclass
class CrossRepoDiff:
    """Changes gathered from several repositories for one commit range."""

    repositories: List[Repository] = field(default_factory=list)
    changes: Dict[str, List[FileChange]] = field(default_factory=dict)

    def files_for(self, repository: str) -> List[FileChange]:
        return self.changes.get(repository, [])

    def repository_names(self) -> List[str]:
        return [repo.name for repo in self.repositories]

    def total_files(self) -> int:
        return sum(len(files) for files in self.changes.values())


@dataclass(frozen=True)
class DependencyRelation:
    """Directed, confidence-scored relationship between two repositories."""

    source: str
    target: str
    kind: str
    confidence: float
    source_file: Optional[str] = None
    target_file: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "sourceFile": self.source_file,
            "targetFile": self.target_file,
            "dependencyType": self.kind,
            "confidence": self.confidence,
        }


DependencyGraph = Dict[str, Set[str]]


@dataclass
class CommitInfo:
    """The slice of a commit group that lands in one repository."""

    repository: str
    message: str
    changes: List[FileChange]
    change_type: ChangeType
    keywords: Set[str] = field(default_factory=set)
    # Strategy-supplied header summary, kept so the message can be regenerated.
    summary: Optional[str] = None

    def paths(self) -> List[str]:
        return [change.path for change in self.changes]

    def to_dict(self, *, include_diff: bool = False) -> Dict[str, Any]:
        return {
            "repository": self.repository,
            "message": self.message,
            "changes": [change.to_dict(include_diff=include_diff) for change in self.changes],
            "changeType": self.change_type.value,
            "keywords": sorted(self.keywords),
        }


@dataclass
class CommitGroup:
    """A proposed future commit spanning one or more repositories."""

    name: str
    description: str
    commits: List[CommitInfo]
    group_type: CommitGroupType
    change_type: ChangeType
    confidence: float
    keywords: Set[str] = field(default_factory=set)

    def file_count(self) -> int:
        return sum(len(commit.changes) for commit in self.commits)

    def repositories(self) -> List[str]:
        return [commit.repository for commit in self.commits]

    def to_dict(self, *, include_diff: bool = False) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "commits": [commit.to_dict(include_diff=include_diff) for commit in self.commits],
            "groupType": self.group_type.value,
            "changeType": self.change_type.value,
            "confidence": self.confidence,
            "keywords": sorted(self.keywords),
        }


@dataclass
class CrossRepoProposal:
    """Coordinated multi-repository commit plan."""

    original_commit_ids: Dict[str, str] = field(default_factory=dict)
    target_commit_ids: Dict[str, str] = field(default_factory=dict)
    commit_groups: List[CommitGroup] = field(default_factory=list)
    confidence_score: float = 0.0

    def to_dict(self, *, include_diff: bool = False) -> Dict[str, Any]:
        return {
            "originalCommitIds": dict(self.original_commit_ids),
            "targetCommitIds": dict(self.target_commit_ids),
            "commitGroups": [group.to_dict(include_diff=include_diff) for group in self.commit_groups],
            "confidenceScore": self.confidence_score,
        }


def split_commit_range(commit_range: str) -> Tuple[str, str]:
    """Return the ``(base, head)`` boundaries of a commit range expression."""
    text = commit_range.strip()
    for separator in ("...", ".."):
        if separator in text:
            base, head = text.split(separator, 1)
            return base.strip(), head.strip()
    return text, text
