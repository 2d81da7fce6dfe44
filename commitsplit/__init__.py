"""Cross-repository semantic analysis and commit division."""

from .config import CrossRepoAnalysisConfig
from .models import (
    ChangeType,
    CommitGroup,
    CommitGroupType,
    CommitInfo,
    CrossRepoDiff,
    CrossRepoProposal,
    DependencyRelation,
    FileChange,
    FileChangeKind,
    Repository,
)
from .orchestrator import Orchestrator, analyze

__version__ = "0.1.0"

__all__ = [
    "ChangeType",
    "CommitGroup",
    "CommitGroupType",
    "CommitInfo",
    "CrossRepoAnalysisConfig",
    "CrossRepoDiff",
    "CrossRepoProposal",
    "DependencyRelation",
    "FileChange",
    "FileChangeKind",
    "Orchestrator",
    "Repository",
    "analyze",
]
