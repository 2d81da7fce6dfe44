"""Configuration loading for commitsplit (.commitsplit.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".commitsplit.yml"
DEFAULT_REPOS_FILENAME = "repos.json"


class ConfigError(RuntimeError):
    """Raised when a configuration or repository declaration file cannot be used."""


@dataclass(frozen=True)
class CrossRepoAnalysisConfig:
    """Toggles and thresholds for cross-repository grouping."""

    group_by_semantics: bool = True
    group_by_dependency: bool = True
    group_by_file_type: bool = True
    group_by_directory: bool = True
    max_group_size: int = 20
    min_confidence: float = 0.7
    dependency_detection: bool = True

    def __post_init__(self) -> None:
        if self.max_group_size < 1:
            raise ConfigError("max_group_size must be at least 1")
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ConfigError("min_confidence must lie between 0 and 1")

    def with_overrides(self, overrides: Mapping[str, Any] | None) -> "CrossRepoAnalysisConfig":
        """Return a copy updated from snake_case or camelCase keys."""
        if not overrides:
            return self
        return replace(self, **_analysis_kwargs(overrides))


@dataclass
class ServiceConfig:
    """Bind address and log sink for service mode."""

    host: str = "127.0.0.1"
    port: int = 8000
    log_file: Optional[Path] = None


@dataclass
class CommitSplitConfig:
    """Represents the high-level settings defined in .commitsplit.yml."""

    root: Path
    analysis: CrossRepoAnalysisConfig = field(default_factory=CrossRepoAnalysisConfig)
    repos_config: Optional[Path] = None
    service: ServiceConfig = field(default_factory=ServiceConfig)

    @property
    def repos_config_path(self) -> Path:
        return self.repos_config or (self.root / DEFAULT_REPOS_FILENAME)


_CAMEL_ALIASES: Dict[str, str] = {
    "groupBySemantics": "group_by_semantics",
    "groupByDependency": "group_by_dependency",
    "groupByFileType": "group_by_file_type",
    "groupByDirectory": "group_by_directory",
    "maxGroupSize": "max_group_size",
    "minConfidence": "min_confidence",
    "dependencyDetection": "dependency_detection",
}


def load_config(config_path: Path) -> CommitSplitConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return CommitSplitConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    analysis = CrossRepoAnalysisConfig().with_overrides(_as_dict(data.get("analysis")))

    repos_data = _as_dict(data.get("repositories"))
    repos_config = None
    repos_path = _as_str(repos_data.get("config")) if repos_data else None
    if repos_path:
        candidate = Path(repos_path).expanduser()
        repos_config = candidate if candidate.is_absolute() else root / candidate

    service = ServiceConfig()
    service_data = _as_dict(data.get("service"))
    if service_data:
        service.host = _as_str(service_data.get("host")) or service.host
        port = _as_int(service_data.get("port"))
        if port is not None:
            service.port = port
        log_file = _as_str(service_data.get("log_file"))
        if log_file:
            candidate = Path(log_file).expanduser()
            service.log_file = candidate if candidate.is_absolute() else root / candidate

    return CommitSplitConfig(
        root=root,
        analysis=analysis,
        repos_config=repos_config,
        service=service,
    )


def _analysis_kwargs(data: Mapping[str, Any]) -> Dict[str, Any]:
    known = {item.name for item in fields(CrossRepoAnalysisConfig)}
    kwargs: Dict[str, Any] = {}
    for raw_key, value in data.items():
        key = _CAMEL_ALIASES.get(raw_key, raw_key)
        if key not in known:
            raise ConfigError(f"Unknown analysis option: {raw_key}")
        if key == "max_group_size":
            parsed: Any = _as_int(value)
        elif key == "min_confidence":
            parsed = _as_float(value)
        else:
            parsed = _as_bool(value)
        if parsed is None:
            raise ConfigError(f"Invalid value for analysis option {raw_key}: {value!r}")
        kwargs[key] = parsed
    return kwargs


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1", "on"}:
            return True
        if lowered in {"false", "no", "0", "off"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "CommitSplitConfig",
    "ConfigError",
    "CrossRepoAnalysisConfig",
    "ServiceConfig",
    "load_config",
]
