"""Repository declarations and their persistence."""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from ..config import ConfigError, _as_dict, _as_str, _as_str_list
from ..logging import get_logger
from ..models import Repository
from .ordering import CyclicDependencyError, dependency_order, find_cycle


class RepositoryManager:
    """Manages the repositories of a multi-repo workspace and their relationships."""

    def __init__(self, root_dir: Path | str, config_path: Path | None = None) -> None:
        self.root_dir = Path(root_dir)
        self.config_path = config_path
        self._repos: Dict[str, Repository] = {}
        self.logger = get_logger("repos")

    def add_repository(
        self,
        name: str | Repository,
        path: str | None = None,
        dependencies: Sequence[str] | None = None,
    ) -> Repository:
        if isinstance(name, Repository):
            repository = name
        else:
            if path is None:
                raise ValueError("A path is required when adding a repository by name")
            repository = Repository(name=name, path=path, dependencies=list(dependencies or []))
        self._repos[repository.name] = repository
        return repository

    def get_repository(self, name: str) -> Optional[Repository]:
        return self._repos.get(name)

    def list_repositories(self) -> List[str]:
        return list(self._repos)

    def repositories(self) -> List[Repository]:
        return list(self._repos.values())

    def dependency_graph(self) -> Dict[str, List[str]]:
        return {name: list(repo.dependencies) for name, repo in self._repos.items()}

    def dependency_order(self) -> List[str]:
        """Topological order of the declared repositories; raises CyclicDependencyError."""
        return dependency_order(self._repos.values())

    def validate_dependencies(self) -> List[str]:
        """Return human-readable problems with the declared dependency graph."""
        problems: List[str] = []
        for name, repository in self._repos.items():
            for dependency in repository.dependencies:
                if dependency not in self._repos:
                    problems.append(f"{name} depends on unknown repository {dependency}")
        cycle = find_cycle(self.dependency_graph())
        if cycle:
            problems.append(str(CyclicDependencyError(cycle)))
        return problems

    def validate_repository(self, name: str) -> bool:
        """Return True when the repository path exists and holds a Jujutsu workspace."""
        repository = self.get_repository(name)
        if repository is None:
            return False
        path = Path(repository.path)
        return path.is_dir() and (path / ".jj").is_dir()

    def validate_all(self) -> Dict[str, bool]:
        return {name: self.validate_repository(name) for name in self._repos}

    def save(self, path: Path | None = None) -> Path:
        """Persist declarations as JSON or YAML depending on the file extension."""
        target = path or self.config_path
        if target is None:
            raise ConfigError("No repository configuration path specified")
        payload = {"repositories": [repo.to_dict() for repo in self._repos.values()]}
        target.parent.mkdir(parents=True, exist_ok=True)
        suffix = target.suffix.lower()
        if suffix == ".json":
            target.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        elif suffix in {".yml", ".yaml"}:
            target.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
        else:
            raise ConfigError(f"Unsupported repository configuration format: {target.name}")
        self.logger.debug("Saved %d repositories to %s", len(self._repos), target)
        return target


def load_repository_config(path: Path | str) -> RepositoryManager:
    """Load repository declarations from a JSON, TOML or YAML file.

    A missing file yields an empty manager rooted at the file's directory.
    Relative repository paths resolve against that directory.
    """
    config_path = Path(path).expanduser()
    root_dir = config_path.parent.resolve()
    manager = RepositoryManager(root_dir, config_path=config_path)
    if not config_path.exists():
        return manager

    data = _read_declarations(config_path)
    entries = data.get("repositories", [])
    if not isinstance(entries, list):
        raise ConfigError(f"{config_path.name}: 'repositories' must be a list")

    for index, raw in enumerate(entries):
        entry = _as_dict(raw)
        name = _as_str(entry.get("name"))
        repo_path = _as_str(entry.get("path"))
        if not name or not repo_path:
            raise ConfigError(f"{config_path.name}: repository #{index + 1} needs a name and a path")
        resolved = Path(repo_path).expanduser()
        if not resolved.is_absolute():
            resolved = root_dir / resolved
        manager.add_repository(name, str(resolved), _as_str_list(entry.get("dependencies")))
    return manager


def _read_declarations(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            loaded = json.loads(text)
        elif suffix == ".toml":
            loaded = tomllib.loads(text)
        elif suffix in {".yml", ".yaml"}:
            loaded = yaml.safe_load(text)
        else:
            loaded = _parse_unknown(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _parse_unknown(text: str) -> Any:
    # Unknown extension: TOML first, then JSON.
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError:
        return json.loads(text)


__all__ = ["RepositoryManager", "load_repository_config"]
