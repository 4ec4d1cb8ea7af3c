"""Tests for the YAML and environment configuration layer."""

import os
from pathlib import Path

import pytest

from pathsuite.config import ConfigError, SuiteConfig
from pathsuite.core.filters import NamePrefixPredicate


class TestSuiteConfigFromFile:
    """Tests for loading YAML configuration files."""

    def test_top_level_section(self, tmp_path):
        config_file = tmp_path / "pathsuite.yaml"
        config_file.write_text(
            "pathsuite:\n"
            "  roots: [src]\n"
            "  prefixes: [myapp.tests]\n"
            "  log_level: DEBUG\n"
        )

        config = SuiteConfig.from_file(config_file)

        assert config.roots == [str((tmp_path / "src").resolve())]
        assert config.prefixes == ["myapp.tests"]
        assert config.log_level == "DEBUG"

    def test_flat_mapping(self, tmp_path):
        config_file = tmp_path / "suite.yml"
        config_file.write_text("type_predicate: myapp.checks:IsFast\nexclude_dirs: build\n")

        config = SuiteConfig.from_file(config_file)

        assert config.type_predicate == "myapp.checks:IsFast"
        assert config.exclude_dirs == ["build"]
        assert config.roots == []

    def test_empty_file(self, tmp_path):
        config_file = tmp_path / "pathsuite.yaml"
        config_file.write_text("")

        assert SuiteConfig.from_file(config_file) == SuiteConfig()

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "pathsuite.yaml"
        config_file.write_text("roots: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            SuiteConfig.from_file(config_file)

    def test_not_a_mapping(self, tmp_path):
        config_file = tmp_path / "pathsuite.yaml"
        config_file.write_text("- just\n- a list\n")

        with pytest.raises(ConfigError, match="mapping"):
            SuiteConfig.from_file(config_file)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Cannot read"):
            SuiteConfig.from_file(tmp_path / "absent.yaml")


class TestSuiteConfigValidation:
    """Tests for SuiteConfig.from_dict validation."""

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="Unknown configuration keys: colour"):
            SuiteConfig.from_dict({"colour": "blue"})

    def test_list_field_type(self):
        with pytest.raises(ConfigError, match="'roots' must be a list"):
            SuiteConfig.from_dict({"roots": [1, 2]})

    def test_string_field_type(self):
        with pytest.raises(ConfigError, match="'name_predicate' must be a string"):
            SuiteConfig.from_dict({"name_predicate": ["a", "b"]})

    def test_none_values_ignored(self):
        assert SuiteConfig.from_dict({"log_level": None}).log_level is None


class TestSuiteConfigFromEnv:
    """Tests for PATHSUITE_* environment variables."""

    def test_reads_variables(self):
        environ = {
            "PATHSUITE_ROOTS": os.pathsep.join(["src", "lib"]),
            "PATHSUITE_TYPE_PREDICATE": "myapp.checks:IsFast",
            "PATHSUITE_LOG_LEVEL": "INFO",
            "UNRELATED": "ignored",
        }

        config = SuiteConfig.from_env(environ)

        assert config.roots == ["src", "lib"]
        assert config.type_predicate == "myapp.checks:IsFast"
        assert config.log_level == "INFO"

    def test_empty_values_ignored(self):
        assert SuiteConfig.from_env({"PATHSUITE_PREFIXES": ""}) == SuiteConfig()

    def test_defaults_to_process_environment(self, monkeypatch):
        monkeypatch.setenv("PATHSUITE_PREFIXES", "myapp")

        assert SuiteConfig.from_env().prefixes == ["myapp"]


class TestSuiteConfigMerge:
    """Tests for layering configuration sources."""

    def test_set_values_win(self):
        base = SuiteConfig(roots=["a"], log_level="INFO", type_predicate="m:T")
        override = SuiteConfig(log_level="DEBUG")

        merged = base.merge(override)

        assert merged.roots == ["a"]
        assert merged.log_level == "DEBUG"
        assert merged.type_predicate == "m:T"

    def test_merge_returns_copy(self):
        base = SuiteConfig(roots=["a"])

        base.merge(SuiteConfig(roots=["b"]))

        assert base.roots == ["a"]

    def test_discover(self, tmp_path):
        assert SuiteConfig.discover(tmp_path) is None

        (tmp_path / ".pathsuite.yaml").write_text("")

        assert SuiteConfig.discover(tmp_path) == tmp_path / ".pathsuite.yaml"


class TestSuiteConfigConversion:
    """Tests for building roots and boundaries from a config."""

    def test_prefixes_become_name_predicate(self):
        root = SuiteConfig(prefixes=["myapp"]).to_root("cli")

        assert root.name == "cli"
        assert isinstance(root.name_predicate, NamePrefixPredicate)
        assert root.name_predicate("myapp.tests.Case")
        assert not root.name_predicate("other.Case")

    def test_predicate_references_pass_through(self):
        root = SuiteConfig(name_predicate="m:N", type_predicate="m:T").to_root()

        assert root.name_predicate == "m:N"
        assert root.type_predicate == "m:T"

    def test_prefixes_conflict_with_name_predicate(self):
        config = SuiteConfig(prefixes=["myapp"], name_predicate="m:N")

        with pytest.raises(ConfigError, match="mutually exclusive"):
            config.to_root()

    def test_boundary_defaults_to_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        boundary = SuiteConfig(exclude_dirs=["build"]).to_boundary()

        assert boundary.roots == [Path(os.getcwd())]
        assert boundary.is_excluded("build")
        assert boundary.is_excluded(".git")

    def test_to_dict(self):
        data = SuiteConfig(roots=["src"]).to_dict()

        assert data["roots"] == ["src"]
        assert set(data) == {
            "roots", "exclude_dirs", "name_predicate",
            "type_predicate", "prefixes", "log_level",
        }
