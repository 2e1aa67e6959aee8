"""Configuration loading and validation."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .validation import ValidationError, validate_output_name

CONFIG_FILENAME = ".ignored-export.yaml"

DEFAULT_RULES_FILE = ".gitignore"
DEFAULT_PRIMARY_ROOT = "Assets"
DEFAULT_SIDECAR_SUFFIX = ".meta"
DEFAULT_OUTPUT_NAME = "gitignore"

_STRING_KEYS = ("rules", "primary_root", "sidecar_suffix", "output_parent", "output_name")


class ConfigError(Exception):
    """Raised when config is invalid or not found."""
    pass


@dataclass(frozen=True)
class ExportSettings:
    """Resolved settings for one project."""

    project_root: Path
    rules_file: Path
    primary_root: str = DEFAULT_PRIMARY_ROOT
    extra_roots: tuple[str, ...] = ()
    sidecar_suffix: str = DEFAULT_SIDECAR_SUFFIX
    output_parent: Path | None = None
    output_name: str = DEFAULT_OUTPUT_NAME

    @property
    def primary_root_path(self) -> Path:
        return self.project_root / self.primary_root

    @property
    def export_parent(self) -> Path:
        """Output parent, defaulting to the project root."""
        return self.output_parent if self.output_parent is not None else self.project_root


def find_config(start_dir: Path | None = None) -> Path:
    """Find .ignored-export.yaml by searching upward from start_dir.

    Args:
        start_dir: Directory to start search from. Defaults to cwd.

    Returns:
        Path to the config file.

    Raises:
        ConfigError: If no config file found.
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        config_path = current / CONFIG_FILENAME
        if config_path.exists():
            return config_path

        parent = current.parent
        if parent == current:
            # Reached filesystem root
            raise ConfigError(f"No {CONFIG_FILENAME} found")
        current = parent


def load_config(config_path: Path) -> dict[str, Any]:
    """Load and validate config from YAML file.

    Args:
        config_path: Path to the config file.

    Returns:
        Validated config dict.

    Raises:
        ConfigError: If config is invalid.
    """
    try:
        with open(config_path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid config: {e}")

    if config is None:
        raise ConfigError("Invalid config: empty file")

    return validate_config(config)


def validate_config(config: dict[str, Any]) -> dict[str, Any]:
    """Validate config structure and values.

    Args:
        config: Raw config dict.

    Returns:
        Validated config dict.

    Raises:
        ConfigError: If config is invalid.
    """
    if not isinstance(config, dict):
        raise ConfigError("Invalid config: expected mapping")

    if "version" not in config:
        raise ConfigError("Missing required field: version")

    if config["version"] != 1:
        raise ConfigError(f"Unsupported config version: {config['version']}")

    # The export section is optional - defaults cover every key
    if "export" not in config or config["export"] is None:
        return config

    export = config["export"]
    if not isinstance(export, dict):
        raise ConfigError("Invalid config: export must be a mapping")

    for key in _STRING_KEYS:
        if key in export:
            value = export[key]
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"Invalid config: export.{key} must be a non-empty string")

    if "extra_roots" in export:
        extra_roots = export["extra_roots"]
        if not isinstance(extra_roots, list):
            raise ConfigError("Invalid config: extra_roots must be a list")
        for i, name in enumerate(extra_roots):
            if not isinstance(name, str):
                raise ConfigError(f"Invalid extra_roots[{i}]: must be a string")

    if "primary_root" in export and export["primary_root"].strip("/\\ ") == "":
        raise ConfigError("Invalid config: primary_root cannot be the project root")

    if "output_name" in export:
        try:
            validate_output_name(export["output_name"])
        except ValidationError as e:
            raise ConfigError(f"Invalid config: {e}")

    return config


def default_settings(project_root: Path) -> ExportSettings:
    """Settings used when no config file exists.

    Args:
        project_root: Project root directory

    Returns:
        ExportSettings with every default applied
    """
    project_root = project_root.resolve()
    return ExportSettings(
        project_root=project_root,
        rules_file=project_root / DEFAULT_RULES_FILE,
    )


def settings_from_config(config: dict[str, Any], project_root: Path) -> ExportSettings:
    """Build settings from a validated config dict.

    Relative paths are resolved against the project root.

    Args:
        config: Validated config dict
        project_root: Directory containing the config file

    Returns:
        ExportSettings
    """
    project_root = project_root.resolve()
    export = config.get("export") or {}

    rules_file = project_root / export.get("rules", DEFAULT_RULES_FILE)

    output_parent = None
    if "output_parent" in export:
        output_parent = project_root / export["output_parent"]

    return ExportSettings(
        project_root=project_root,
        rules_file=rules_file,
        primary_root=export.get("primary_root", DEFAULT_PRIMARY_ROOT).strip("/\\ "),
        extra_roots=tuple(export.get("extra_roots", ())),
        sidecar_suffix=export.get("sidecar_suffix", DEFAULT_SIDECAR_SUFFIX),
        output_parent=output_parent,
        output_name=export.get("output_name", DEFAULT_OUTPUT_NAME),
    )


def resolve_settings(start_dir: Path | None = None) -> ExportSettings:
    """Load settings for the project containing start_dir.

    Falls back to defaults rooted at start_dir when no config file is
    found.

    Args:
        start_dir: Directory to start search from. Defaults to cwd.

    Returns:
        ExportSettings

    Raises:
        ConfigError: If a config file exists but is invalid.
    """
    if start_dir is None:
        start_dir = Path.cwd()

    try:
        config_path = find_config(start_dir)
    except ConfigError:
        return default_settings(start_dir)

    config = load_config(config_path)
    return settings_from_config(config, config_path.parent)
