"""Topological ordering over static repository declarations."""

from __future__ import annotations

from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Sequence

from ..models import Repository


class CyclicDependencyError(ValueError):
    """Raised when declared repository dependencies form a cycle."""

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = list(cycle)
        super().__init__(
            "Cyclic dependency detected in repository configuration: " + " -> ".join(self.cycle)
        )


def dependency_order(repositories: Iterable[Repository]) -> List[str]:
    """Return repository names so that every dependency precedes its dependents.

    Dependencies on repositories that are not declared are ignored. Among
    repositories that become ready at the same time, declaration order wins.
    """
    declared: Dict[str, List[str]] = {}
    for repository in repositories:
        if repository.name in repository.dependencies:
            raise CyclicDependencyError([repository.name, repository.name])
        declared[repository.name] = list(repository.dependencies)

    remaining: Dict[str, int] = {}
    dependents: Dict[str, List[str]] = {name: [] for name in declared}
    for name, dependencies in declared.items():
        known = [dep for dep in dict.fromkeys(dependencies) if dep in declared]
        remaining[name] = len(known)
        for dependency in known:
            dependents[dependency].append(name)

    ready: Deque[str] = deque(name for name in declared if remaining[name] == 0)
    ordered: List[str] = []
    while ready:
        name = ready.popleft()
        ordered.append(name)
        for dependent in dependents[name]:
            remaining[dependent] -= 1
            if remaining[dependent] == 0:
                ready.append(dependent)

    if len(ordered) != len(declared):
        blocked = {name: deps for name, deps in declared.items() if name not in set(ordered)}
        raise CyclicDependencyError(find_cycle(blocked) or sorted(blocked))
    return ordered


def find_cycle(graph: Dict[str, List[str]]) -> Optional[List[str]]:
    """Return one cycle in ``graph`` as a closed path, or None when acyclic."""
    visiting: List[str] = []
    done: set[str] = set()

    def visit(node: str) -> Optional[List[str]]:
        if node in visiting:
            start = visiting.index(node)
            return visiting[start:] + [node]
        if node in done:
            return None
        visiting.append(node)
        for dependency in graph.get(node, []):
            if dependency not in graph:
                continue
            cycle = visit(dependency)
            if cycle:
                return cycle
        visiting.pop()
        done.add(node)
        return None

    for node in graph:
        cycle = visit(node)
        if cycle:
            return cycle
    return None


__all__ = ["CyclicDependencyError", "dependency_order", "find_cycle"]
