"""Tests for devassist.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from devassist import run_analysis
from devassist.config import (
    CONFIG_FILENAME,
    AnalysisOptions,
    ConfigError,
    DevAssistConfig,
    load_config,
    write_starter_config,
)
from devassist.constants import DEFAULT_IGNORE_DIRS


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, DevAssistConfig)
    assert config.root == tmp_path.resolve()
    assert config.analysis.max_depth is None
    assert config.rules.disabled == []
    assert config.output_dir == ".devassist"

    options = AnalysisOptions.from_config(config)
    assert options.max_depth == 4
    assert options.ignore_dirs == DEFAULT_IGNORE_DIRS
    assert options.cache is False


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(
        """
analysis:
  max_depth: 6
  max_file_size: 2048
  ignore: [fixtures]
  exclude_paths:
    - "docs/"
  use_gitignore: false
  cache: "yes"
rules:
  disabled: [missing-lockfile]
  oversized_file_lines: 300
output:
  directory: .reports
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)
    options = AnalysisOptions.from_config(config)

    assert options.max_depth == 6
    assert options.max_file_size == 2048
    assert "fixtures" in options.ignore_dirs
    assert "node_modules" in options.ignore_dirs
    assert options.exclude_paths == ("docs/",)
    assert options.use_gitignore is False
    assert options.cache is True
    assert options.disabled_rules == frozenset({"missing-lockfile"})
    assert options.oversized_file_lines == 300
    assert options.output_dir == ".reports"


def test_ignore_override_replaces_default_set(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(
        "analysis:\n  ignore_override: [only_this]\n",
        encoding="utf-8",
    )

    options = AnalysisOptions.from_config(load_config(tmp_path))

    assert options.ignore_dirs == frozenset({"only_this"})


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("analysis: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_non_mapping_root_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_explicit_overrides_win_over_config() -> None:
    options = AnalysisOptions(max_depth=6, cache=False)

    updated = options.with_overrides(max_depth=2, ignore=["extra"], cache=True)

    assert updated.max_depth == 2
    assert "extra" in updated.ignore_dirs
    assert updated.cache is True
    assert options.max_depth == 6

    with pytest.raises(ValueError):
        options.with_overrides(max_depth=0)


def test_write_starter_config_does_not_overwrite(tmp_path: Path) -> None:
    written = write_starter_config(tmp_path)

    assert written == tmp_path / CONFIG_FILENAME
    assert load_config(tmp_path).rules.oversized_file_lines == 500
    assert write_starter_config(tmp_path) is None


def test_out_of_range_config_values_fall_back_to_defaults(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(
        """
analysis:
  max_depth: 0
  max_file_size: -1
  ignore: [vendor]
rules:
  oversized_file_lines: -5
""",
        encoding="utf-8",
    )

    options = AnalysisOptions.from_config(load_config(tmp_path))

    assert options.max_depth == AnalysisOptions().max_depth
    assert options.max_file_size == AnalysisOptions().max_file_size
    assert options.oversized_file_lines == AnalysisOptions().oversized_file_lines
    assert "vendor" in options.ignore_dirs


def test_negative_depth_in_config_does_not_truncate_run(repo_builder) -> None:
    repo_builder.write({".devassist.yml": "analysis:\n  max_depth: -3\n", "pkg/mod.py": "x = 1\n"})

    result = run_analysis(repo_builder.path())

    assert result.metrics.total_files == 1
