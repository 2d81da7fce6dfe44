"""Tests for commitsplit.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from commitsplit.config import CommitSplitConfig, ConfigError, CrossRepoAnalysisConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, CommitSplitConfig)
    assert config.root == tmp_path.resolve()
    assert config.analysis == CrossRepoAnalysisConfig()
    assert config.analysis.max_group_size == 20
    assert config.analysis.min_confidence == pytest.approx(0.7)
    assert config.repos_config is None
    assert config.repos_config_path == tmp_path.resolve() / "repos.json"
    assert (config.service.host, config.service.port) == ("127.0.0.1", 8000)
    assert config.service.log_file is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".commitsplit.yml"
    config_file.write_text(
        """
analysis:
  group_by_directory: false
  maxGroupSize: "5"
  min_confidence: 0.8
  dependencyDetection: "off"
repositories:
  config: workspace/repos.toml
service:
  host: 0.0.0.0
  port: 9100
  log_file: logs/service.log
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.analysis.group_by_directory is False
    assert config.analysis.group_by_semantics is True
    assert config.analysis.max_group_size == 5
    assert config.analysis.min_confidence == pytest.approx(0.8)
    assert config.analysis.dependency_detection is False
    assert config.repos_config_path == tmp_path.resolve() / "workspace" / "repos.toml"
    assert (config.service.host, config.service.port) == ("0.0.0.0", 9100)
    assert config.service.log_file == tmp_path.resolve() / "logs" / "service.log"


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".commitsplit.yml").write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".commitsplit.yml").write_text("analysis: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


@pytest.mark.parametrize(
    "overrides",
    [
        {"maxGroupSize": 0},
        {"min_confidence": 1.5},
        {"min_confidence": "high"},
        {"group_by_semantics": "maybe"},
        {"unknownOption": True},
    ],
)
def test_invalid_analysis_overrides_raise(overrides: dict) -> None:
    with pytest.raises(ConfigError):
        CrossRepoAnalysisConfig().with_overrides(overrides)


def test_with_overrides_returns_updated_copy() -> None:
    base = CrossRepoAnalysisConfig()
    updated = base.with_overrides({"groupByFileType": False, "max_group_size": 3})

    assert updated.group_by_file_type is False
    assert updated.max_group_size == 3
    assert base.group_by_file_type is True
    assert base.with_overrides(None) is base
