"""Repository declarations, persistence and dependency ordering."""

from .manager import RepositoryManager, load_repository_config
from .ordering import CyclicDependencyError, dependency_order, find_cycle

__all__ = [
    "CyclicDependencyError",
    "RepositoryManager",
    "dependency_order",
    "find_cycle",
    "load_repository_config",
]
