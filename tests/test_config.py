"""Tests for configuration handling."""

import pytest
from cluster_lint import Category, ConfigError, LintConfig, MinimumSeverity, find_config_file, load_config
from cluster_lint.config import config_from_dict
from packaging.version import Version


class TestLintConfig:
    """Tests for LintConfig defaults and validation."""

    def test_defaults(self):
        """Test default values."""
        config = LintConfig()
        assert config.selectors == ["*"]
        assert config.category is None
        assert config.output == "table"
        assert config.min_severity == MinimumSeverity.ALL
        assert config.fail_on_critical is True
        assert config.fail_on_warning is False
        assert config.timeout == 300
        assert config.max_workers == 1
        assert not config.upgrade_mode

    def test_invalid_output(self):
        with pytest.raises(ConfigError, match="Invalid output format"):
            LintConfig(output="xml")

    def test_invalid_timeout(self):
        with pytest.raises(ConfigError, match="timeout"):
            LintConfig(timeout=0)

    def test_invalid_selector(self):
        """Test that selectors are validated up front."""
        with pytest.raises(ConfigError, match="invalid pattern"):
            LintConfig(selectors=["["])

    def test_empty_selectors(self):
        with pytest.raises(ConfigError, match="at least one selector"):
            LintConfig(selectors=[])

    def test_target_needs_current(self):
        with pytest.raises(ConfigError, match="requires current_version"):
            LintConfig(target_version=Version("3.0"))


class TestConfigFromDict:
    """Tests for config_from_dict."""

    def test_full(self):
        """Test creating a config with all fields."""
        config = config_from_dict({
            "checks": ["components", "workloads.ray.*"],
            "category": "workloads",
            "output": "json",
            "min_severity": "warning",
            "fail_on_critical": False,
            "fail_on_warning": True,
            "timeout": 60,
            "max_workers": 4,
            "verbose": True,
            "current_version": "2.16.0",
            "target_version": "v3.0.0",
        })
        assert config.selectors == ["components", "workloads.ray.*"]
        assert config.category == Category.WORKLOAD
        assert config.output == "json"
        assert config.min_severity == MinimumSeverity.WARNING
        assert config.fail_on_critical is False
        assert config.fail_on_warning is True
        assert config.timeout == 60.0
        assert config.max_workers == 4
        assert config.current_version == Version("2.16.0")
        assert config.target_version == Version("3.0.0")
        assert config.upgrade_mode

    def test_single_selector_string(self):
        assert config_from_dict({"checks": "services"}).selectors == ["services"]

    def test_unknown_key(self):
        """Test that typos are rejected."""
        with pytest.raises(ConfigError, match="Unknown configuration keys: fail_on_critcal"):
            config_from_dict({"fail_on_critcal": True})

    def test_bad_category(self):
        with pytest.raises(ConfigError, match="Invalid category"):
            config_from_dict({"category": "frontend"})

    @pytest.mark.parametrize("key", ["fail_on_critical", "fail_on_warning", "verbose", "show_description"])
    def test_flags_must_be_bool(self, key):
        """Test that a quoted 'false' is rejected instead of read as true."""
        with pytest.raises(ConfigError, match=f"{key} must be true or false"):
            config_from_dict({key: "false"})

    def test_bool_from_yaml(self, tmp_path):
        path = tmp_path / "cluster-lint.yaml"
        path.write_text("fail_on_critical: false\nfail_on_warning: yes\n")
        config = load_config(path)
        assert config.fail_on_critical is False
        assert config.fail_on_warning is True

    def test_bad_version(self):
        with pytest.raises(ConfigError, match="Invalid version"):
            config_from_dict({"current_version": "not-a-version"})


class TestLoadConfig:
    """Tests for load_config and find_config_file."""

    def test_from_dict(self):
        assert load_config({"output": "yaml"}).output == "yaml"

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "cluster-lint.yaml"
        path.write_text("checks:\n  - components\nmax_workers: 2\n")
        config = load_config(path)
        assert config.selectors == ["components"]
        assert config.max_workers == 2

    def test_empty_file(self, tmp_path):
        """Test that an empty file gives defaults."""
        path = tmp_path / "cluster-lint.yaml"
        path.write_text("")
        assert load_config(path) == LintConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "cluster-lint.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_config(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "cluster-lint.yaml"
        path.write_text("checks: [unclosed\n")
        with pytest.raises(ConfigError, match="Cannot parse"):
            load_config(path)

    def test_find_config_file(self, tmp_path):
        """Test the search order of config file names."""
        assert find_config_file(tmp_path) is None
        (tmp_path / ".cluster-lint.yml").write_text("")
        assert find_config_file(tmp_path) == tmp_path / ".cluster-lint.yml"
        (tmp_path / "cluster-lint.yaml").write_text("")
        assert find_config_file(tmp_path) == tmp_path / "cluster-lint.yaml"
