"""Configuration loading for devassist (.devassist.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence

import yaml

from .constants import (
    DEFAULT_IGNORE_DIRS,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_OVERSIZED_FILE_LINES,
)
from .logging import get_logger

logger = get_logger("config")

CONFIG_FILENAME = ".devassist.yml"
DEFAULT_OUTPUT_DIR = ".devassist"

STARTER_CONFIG = """\
# devassist configuration
analysis:
  max_depth: 4
  max_file_size: 1048576
  ignore: []
  exclude_paths: []
  use_gitignore: true
rules:
  disabled: []
  oversized_file_lines: 500
output:
  directory: .devassist
"""


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class AnalysisConfig:
    """Traversal and content-scanning settings."""

    max_depth: Optional[int] = None
    max_file_size: Optional[int] = None
    ignore: List[str] = field(default_factory=list)
    ignore_override: Optional[List[str]] = None
    exclude_paths: List[str] = field(default_factory=list)
    use_gitignore: Optional[bool] = None
    cache: Optional[bool] = None


@dataclass
class RulesConfig:
    """Heuristic rule toggles and thresholds."""

    disabled: List[str] = field(default_factory=list)
    oversized_file_lines: Optional[int] = None


@dataclass
class DevAssistConfig:
    """Represents the settings defined in .devassist.yml."""

    root: Path
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    rules: RulesConfig = field(default_factory=RulesConfig)
    output_dir: str = DEFAULT_OUTPUT_DIR


@dataclass(frozen=True)
class AnalysisOptions:
    """Effective options for a single analysis run."""

    max_depth: int = DEFAULT_MAX_DEPTH
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    ignore_dirs: FrozenSet[str] = DEFAULT_IGNORE_DIRS
    exclude_paths: tuple[str, ...] = ()
    use_gitignore: bool = True
    cache: bool = False
    disabled_rules: FrozenSet[str] = frozenset()
    oversized_file_lines: int = DEFAULT_OVERSIZED_FILE_LINES
    output_dir: str = DEFAULT_OUTPUT_DIR

    @classmethod
    def from_config(cls, config: DevAssistConfig) -> "AnalysisOptions":
        """Resolve config values; out-of-range numbers fall back to defaults."""
        analysis = config.analysis
        options = cls(output_dir=config.output_dir)
        if analysis.ignore_override is not None:
            ignore_dirs = frozenset(analysis.ignore_override)
        else:
            ignore_dirs = DEFAULT_IGNORE_DIRS
        ignore_dirs = ignore_dirs.union(analysis.ignore)
        return replace(
            options,
            max_depth=_at_least(1, "analysis.max_depth", analysis.max_depth, options.max_depth),
            max_file_size=_at_least(
                0, "analysis.max_file_size", analysis.max_file_size, options.max_file_size
            ),
            ignore_dirs=ignore_dirs,
            exclude_paths=tuple(analysis.exclude_paths),
            use_gitignore=(
                analysis.use_gitignore if analysis.use_gitignore is not None else True
            ),
            cache=bool(analysis.cache),
            disabled_rules=frozenset(config.rules.disabled),
            oversized_file_lines=_at_least(
                1,
                "rules.oversized_file_lines",
                config.rules.oversized_file_lines,
                options.oversized_file_lines,
            ),
        )

    def with_overrides(
        self,
        *,
        max_depth: Optional[int] = None,
        ignore: Optional[Iterable[str]] = None,
        ignore_override: Optional[Iterable[str]] = None,
        cache: Optional[bool] = None,
    ) -> "AnalysisOptions":
        """Apply explicit caller overrides on top of configured values."""
        updated = self
        if max_depth is not None:
            if max_depth < 1:
                raise ValueError("max_depth must be at least 1")
            updated = replace(updated, max_depth=max_depth)
        if ignore_override is not None:
            updated = replace(updated, ignore_dirs=frozenset(ignore_override))
        if ignore:
            updated = replace(updated, ignore_dirs=updated.ignore_dirs.union(ignore))
        if cache is not None:
            updated = replace(updated, cache=cache)
        return updated


def load_config(config_path: Path) -> DevAssistConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DevAssistConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    analysis_data = _as_dict(data.get("analysis"))
    analysis = AnalysisConfig()
    if analysis_data:
        analysis.max_depth = _as_int(analysis_data.get("max_depth"))
        analysis.max_file_size = _as_int(analysis_data.get("max_file_size"))
        analysis.ignore = _as_str_list(analysis_data.get("ignore"))
        if "ignore_override" in analysis_data:
            analysis.ignore_override = _as_str_list(analysis_data.get("ignore_override"))
        analysis.exclude_paths = _as_str_list(analysis_data.get("exclude_paths"))
        analysis.use_gitignore = _as_bool(analysis_data.get("use_gitignore"))
        analysis.cache = _as_bool(analysis_data.get("cache"))

    rules_data = _as_dict(data.get("rules"))
    rules = RulesConfig()
    if rules_data:
        rules.disabled = _as_str_list(rules_data.get("disabled"))
        rules.oversized_file_lines = _as_int(rules_data.get("oversized_file_lines"))

    output_data = _as_dict(data.get("output"))
    output_dir = _as_str(output_data.get("directory")) if output_data else None

    return DevAssistConfig(
        root=root,
        analysis=analysis,
        rules=rules,
        output_dir=output_dir or DEFAULT_OUTPUT_DIR,
    )


def write_starter_config(root: Path) -> Optional[Path]:
    """Write a commented starter config unless one already exists."""
    target = root / CONFIG_FILENAME
    if target.exists():
        return None
    target.write_text(STARTER_CONFIG, encoding="utf-8")
    return target


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _at_least(minimum: int, key: str, value: Optional[int], default: int) -> int:
    if value is None:
        return default
    if value < minimum:
        logger.warning("Ignoring %s=%d in %s (must be at least %d)", key, value, CONFIG_FILENAME, minimum)
        return default
    return value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


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
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
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
    "AnalysisConfig",
    "AnalysisOptions",
    "CONFIG_FILENAME",
    "ConfigError",
    "DevAssistConfig",
    "RulesConfig",
    "load_config",
    "write_starter_config",
]
