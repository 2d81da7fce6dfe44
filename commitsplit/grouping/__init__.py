"""Grouping strategies, proposal assembly and strategy discovery."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Set

from ..config import CrossRepoAnalysisConfig
from .assembler import MISC_GROUP_NAME, ProposalAssembler, order_commits
from .base import GroupingContext, GroupingStrategy, build_commit_info, build_group
from .dependency import DependencyStrategy
from .directory import DirectoryStrategy
from .file_type import FileTypeStrategy
from .messages import build_commit_message, commit_scope
from .semantic import SemanticStrategy

_ENTRY_POINT_GROUP = "commitsplit.strategies"

# Order matters: earlier strategies claim files first during assembly.
_BUILTIN_FACTORIES: dict[str, Callable[[], GroupingStrategy]] = {
    "semantic": SemanticStrategy,
    "dependency": DependencyStrategy,
    "fileType": FileTypeStrategy,
    "directory": DirectoryStrategy,
}


def discover_strategies(config: CrossRepoAnalysisConfig) -> List[GroupingStrategy]:
    """Return the enabled strategies, built-ins first in their fixed order."""
    strategies: List[GroupingStrategy] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], GroupingStrategy]) -> None:
        key = name.lower()
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, GroupingStrategy):
            raise TypeError(f"Strategy factory for '{name}' did not return a GroupingStrategy")
        seen.add(key)
        if instance.enabled(config):
            strategies.append(instance)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover
            raise RuntimeError(f"Failed to load strategy entry point '{entry.name}': {exc}") from exc

        def _factory(obj: object = loaded) -> GroupingStrategy:
            return _coerce_strategy(obj)

        _add(entry.name, _factory)

    return strategies


def _coerce_strategy(obj: object) -> GroupingStrategy:
    if isinstance(obj, GroupingStrategy):
        return obj
    if isinstance(obj, type) and issubclass(obj, GroupingStrategy):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, GroupingStrategy):
            return instance
    raise TypeError("Strategy entry point must be a GroupingStrategy subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "DependencyStrategy",
    "DirectoryStrategy",
    "FileTypeStrategy",
    "GroupingContext",
    "GroupingStrategy",
    "MISC_GROUP_NAME",
    "ProposalAssembler",
    "SemanticStrategy",
    "build_commit_info",
    "build_commit_message",
    "build_group",
    "commit_scope",
    "discover_strategies",
    "order_commits",
]
