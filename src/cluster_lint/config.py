"""
Configuration handling for cluster-lint.

Run settings can come from a YAML file, a dictionary, or CLI flags. CLI
flags override file values.

Example YAML configuration:
    checks:
      - components
      - "workloads.ray.*"
    category: workload
    output: table
    min_severity: warning
    fail_on_critical: true
    fail_on_warning: false
    timeout: 300
    max_workers: 4
    current_version: "2.16.0"
    target_version: "3.0.0"

Example usage:
    from cluster_lint.config import find_config_file, load_config

    path = find_config_file()
    config = load_config(path) if path else LintConfig()
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from packaging.version import Version

from .check import Category, parse_category, parse_version
from .errors import ConfigError, InvalidPatternError
from .reporter import OUTPUT_FORMATS
from .selector import validate_selectors
from .severity import MinimumSeverity, parse_minimum_severity

CONFIG_FILE_NAMES = (
    "cluster-lint.yaml",
    "cluster-lint.yml",
    ".cluster-lint.yaml",
    ".cluster-lint.yml",
)

DEFAULT_TIMEOUT = 300.0


@dataclass
class LintConfig:
    """
    Settings for one run.

    Attributes:
        selectors: Selector patterns; a check matching any of them runs
        category: Optional category filter
        output: 'table', 'json' or 'yaml'
        min_severity: Display filter
        fail_on_critical: Exit non-zero when any result is critical
        fail_on_warning: Exit non-zero when any result is a warning
        timeout: Run deadline in seconds
        max_workers: Concurrent invocations
        verbose: Verbose table output and debug logging
        show_description: Add the description column to table output
        current_version: Installed platform version
        target_version: Upgrade target version
    """
    selectors: List[str] = field(default_factory=lambda: ["*"])
    category: Optional[Category] = None
    output: str = "table"
    min_severity: MinimumSeverity = MinimumSeverity.ALL
    fail_on_critical: bool = True
    fail_on_warning: bool = False
    timeout: float = DEFAULT_TIMEOUT
    max_workers: int = 1
    verbose: bool = False
    show_description: bool = False
    current_version: Optional[Version] = None
    target_version: Optional[Version] = None

    def __post_init__(self):
        """Validate configuration values."""
        if self.output not in OUTPUT_FORMATS:
            raise ConfigError(
                f"Invalid output format: {self.output}. Must be one of: {', '.join(OUTPUT_FORMATS)}"
            )
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be at least 1, got {self.max_workers}")
        if self.target_version is not None and self.current_version is None:
            raise ConfigError("target_version requires current_version")
        try:
            validate_selectors(self.selectors)
        except InvalidPatternError as e:
            raise ConfigError(str(e)) from e

    @property
    def upgrade_mode(self) -> bool:
        return self.current_version is not None and self.target_version is not None


def _as_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ConfigError(f"checks must be a string or a list of strings, got {value!r}")


def _as_bool(data: Dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false, got {value!r}")
    return value


def config_from_dict(data: Dict[str, Any]) -> LintConfig:
    """
    Create a LintConfig from a dictionary.

    Unknown keys are rejected so typos do not silently fall back to defaults.

    Raises:
        ConfigError: If a key is unknown or a value is invalid
    """
    known = {
        "checks", "category", "output", "min_severity", "fail_on_critical",
        "fail_on_warning", "timeout", "max_workers", "verbose",
        "show_description", "current_version", "target_version",
    }
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    try:
        category = data.get("category")
        return LintConfig(
            selectors=_as_list(data.get("checks", ["*"])),
            category=parse_category(category) if category else None,
            output=data.get("output", "table"),
            min_severity=parse_minimum_severity(data.get("min_severity")),
            fail_on_critical=_as_bool(data, "fail_on_critical", True),
            fail_on_warning=_as_bool(data, "fail_on_warning", False),
            timeout=float(data.get("timeout", DEFAULT_TIMEOUT)),
            max_workers=int(data.get("max_workers", 1)),
            verbose=_as_bool(data, "verbose", False),
            show_description=_as_bool(data, "show_description", False),
            current_version=parse_version(data.get("current_version")),
            target_version=parse_version(data.get("target_version")),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(str(e)) from e


def load_config(source: Union[str, Path, Dict[str, Any]]) -> LintConfig:
    """
    Load configuration from a YAML file path or a dictionary.

    Raises:
        ConfigError: If the file is missing, unparsable, or invalid
    """
    if isinstance(source, dict):
        return config_from_dict(source)

    path = Path(source)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse config file {path}: {e}") from e

    if data is None:
        return LintConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")

    try:
        return config_from_dict(data)
    except ConfigError as e:
        raise ConfigError(f"{path}: {e}") from e


def find_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """Return the first known config file name found in start (default: cwd)."""
    directory = Path(start) if start else Path.cwd()
    for name in CONFIG_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None
