"""Tests for config module."""

import pytest
import yaml

from ignored_export.config import (
    CONFIG_FILENAME,
    ConfigError,
    default_settings,
    find_config,
    load_config,
    resolve_settings,
    settings_from_config,
    validate_config,
)


@pytest.fixture
def sample_config():
    """Config with every export key set."""
    return {
        "version": 1,
        "export": {
            "rules": "config/export.ignore",
            "primary_root": "Assets",
            "extra_roots": ["Packages", "ProjectSettings"],
            "sidecar_suffix": ".meta",
            "output_parent": "exports",
            "output_name": "ignored",
        },
    }


class TestValidateConfig:
    """Tests for validate_config function."""

    def test_valid_config(self, sample_config):
        """Valid config parses correctly."""
        result = validate_config(sample_config)
        assert result == sample_config

    def test_export_section_optional(self):
        """Only version is required."""
        assert validate_config({"version": 1}) == {"version": 1}
        assert validate_config({"version": 1, "export": None})["export"] is None

    def test_not_a_mapping(self):
        """Top level must be a mapping."""
        with pytest.raises(ConfigError, match="expected mapping"):
            validate_config(["version", 1])

    def test_missing_version(self, sample_config):
        """Missing version errors."""
        del sample_config["version"]
        with pytest.raises(ConfigError, match="Missing required field: version"):
            validate_config(sample_config)

    def test_wrong_version(self, sample_config):
        """Wrong version errors."""
        sample_config["version"] = 2
        with pytest.raises(ConfigError, match="Unsupported config version: 2"):
            validate_config(sample_config)

    def test_export_not_a_mapping(self, sample_config):
        """export must be a mapping."""
        sample_config["export"] = ["Assets"]
        with pytest.raises(ConfigError, match="export must be a mapping"):
            validate_config(sample_config)

    def test_empty_string_value(self, sample_config):
        """String keys must not be blank."""
        sample_config["export"]["rules"] = "  "
        with pytest.raises(ConfigError, match="export.rules must be a non-empty string"):
            validate_config(sample_config)

    def test_non_string_value(self, sample_config):
        """String keys must be strings."""
        sample_config["export"]["sidecar_suffix"] = 3
        with pytest.raises(ConfigError, match="export.sidecar_suffix must be a non-empty string"):
            validate_config(sample_config)

    def test_extra_roots_not_a_list(self, sample_config):
        """extra_roots must be a list."""
        sample_config["export"]["extra_roots"] = "Packages"
        with pytest.raises(ConfigError, match="extra_roots must be a list"):
            validate_config(sample_config)

    def test_extra_roots_entry_not_string(self, sample_config):
        """Every extra root must be a string."""
        sample_config["export"]["extra_roots"] = ["Packages", 5]
        with pytest.raises(ConfigError, match="must be a string"):
            validate_config(sample_config)

    def test_primary_root_is_project_root(self, sample_config):
        """primary_root cannot point at the project root."""
        sample_config["export"]["primary_root"] = "/"
        with pytest.raises(ConfigError, match="primary_root cannot be the project root"):
            validate_config(sample_config)

    def test_output_name_with_separator(self, sample_config):
        """output_name must be a single segment."""
        sample_config["export"]["output_name"] = "out/ignored"
        with pytest.raises(ConfigError, match="must be a single segment"):
            validate_config(sample_config)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_valid_yaml(self, tmp_path, sample_config):
        """Valid YAML file loads correctly."""
        config_path = tmp_path / CONFIG_FILENAME
        config_path.write_text(yaml.dump(sample_config))

        result = load_config(config_path)
        assert result["version"] == 1
        assert result["export"]["extra_roots"] == ["Packages", "ProjectSettings"]

    def test_invalid_yaml(self, tmp_path):
        """Invalid YAML errors."""
        config_path = tmp_path / CONFIG_FILENAME
        config_path.write_text("{ invalid yaml [")

        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(config_path)

    def test_empty_file(self, tmp_path):
        """Empty file errors."""
        config_path = tmp_path / CONFIG_FILENAME
        config_path.write_text("")

        with pytest.raises(ConfigError, match="Invalid config: empty file"):
            load_config(config_path)


class TestFindConfig:
    """Tests for find_config function."""

    def test_config_in_current_dir(self, tmp_path):
        """Finds config in current directory."""
        config_path = tmp_path / CONFIG_FILENAME
        config_path.write_text("version: 1")

        assert find_config(tmp_path) == config_path

    def test_config_in_parent_dir(self, tmp_path):
        """Finds config in parent directory."""
        config_path = tmp_path / CONFIG_FILENAME
        config_path.write_text("version: 1")

        subdir = tmp_path / "Assets" / "Scripts"
        subdir.mkdir(parents=True)

        assert find_config(subdir) == config_path

    def test_config_not_found(self, tmp_path):
        """Errors when config not found."""
        subdir = tmp_path / "sub"
        subdir.mkdir()

        with pytest.raises(ConfigError, match=f"No {CONFIG_FILENAME} found"):
            find_config(subdir)


class TestSettings:
    """Tests for settings construction."""

    def test_defaults(self, tmp_path):
        """Defaults follow the usual project layout."""
        settings = default_settings(tmp_path)

        assert settings.project_root == tmp_path.resolve()
        assert settings.rules_file == tmp_path.resolve() / ".gitignore"
        assert settings.primary_root == "Assets"
        assert settings.extra_roots == ()
        assert settings.sidecar_suffix == ".meta"
        assert settings.output_name == "gitignore"
        assert settings.export_parent == tmp_path.resolve()

    def test_from_config(self, tmp_path, sample_config):
        """Config values are resolved against the project root."""
        settings = settings_from_config(sample_config, tmp_path)
        root = tmp_path.resolve()

        assert settings.rules_file == root / "config" / "export.ignore"
        assert settings.extra_roots == ("Packages", "ProjectSettings")
        assert settings.output_parent == root / "exports"
        assert settings.export_parent == root / "exports"
        assert settings.output_name == "ignored"
        assert settings.primary_root_path == root / "Assets"

    def test_absolute_output_parent(self, tmp_path, sample_config):
        """Absolute output_parent is kept as is."""
        target = tmp_path / "elsewhere"
        sample_config["export"]["output_parent"] = str(target)

        settings = settings_from_config(sample_config, tmp_path / "project")
        assert settings.output_parent == target

    def test_primary_root_trimmed(self, tmp_path):
        """Slashes around primary_root are removed."""
        settings = settings_from_config({"version": 1, "export": {"primary_root": "/Content/"}}, tmp_path)
        assert settings.primary_root == "Content"


class TestResolveSettings:
    """Tests for resolve_settings function."""

    def test_with_config(self, tmp_path, sample_config):
        """The config directory becomes the project root."""
        (tmp_path / CONFIG_FILENAME).write_text(yaml.dump(sample_config))
        subdir = tmp_path / "Assets"
        subdir.mkdir()

        settings = resolve_settings(subdir)
        assert settings.project_root == tmp_path.resolve()
        assert settings.output_name == "ignored"

    def test_without_config(self, tmp_path):
        """Defaults are rooted at the start directory."""
        settings = resolve_settings(tmp_path)
        assert settings == default_settings(tmp_path)

    def test_invalid_config_raises(self, tmp_path):
        """A broken config is an error, not a fallback."""
        (tmp_path / CONFIG_FILENAME).write_text("export: {}")
        with pytest.raises(ConfigError, match="Missing required field: version"):
            resolve_settings(tmp_path)
