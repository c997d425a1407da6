"""Tests for configuration loading."""

import pytest

from vuecompose.core.config import ConfigError, MigrationConfig, load_config


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("VUECOMPOSE_CONFIG", "VUECOMPOSE_LOG_LEVEL", "VUECOMPOSE_JOBS"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestDefaults:
    def test_no_file(self):
        config = load_config()
        assert config.jobs == 4
        assert config.auto_import
        assert config.module_for("ref") == "vue"
        assert config.module_for("useQuery") == "@vue/apollo-composable"
        assert config.module_for("nothing") is None

    def test_user_accessor(self):
        accessor = MigrationConfig().reserved_accessors["$user"]
        assert accessor.target == "user"
        assert accessor.key == "$user"
        assert accessor.type_name == "GQLUserPlugin"


class TestYamlFile:
    def test_default_location(self, isolated):
        _write(isolated / "config" / "vuecompose.yaml", "jobs: 2\nignored_options: [mixins]\n")
        config = load_config()
        assert config.jobs == 2
        assert config.ignored_options == ["mixins"]

    def test_accessors_and_helpers(self, isolated):
        path = _write(isolated / "custom.yaml", (
            "reserved_accessors:\n"
            "  $notify:\n"
            "    target: notify\n"
            "    inject_key: notifier\n"
            "helper_modules:\n"
            "  gql: '@apollo/client/core'\n"
            "auto_import: false\n"
        ))
        config = load_config(str(path))
        assert set(config.reserved_accessors) == {"$notify"}
        assert config.reserved_accessors["$notify"].key == "notifier"
        assert config.module_for("gql") == "@apollo/client/core"
        assert config.module_for("ref") == "vue"
        assert not config.auto_import

    def test_explicit_missing_file(self, isolated):
        with pytest.raises(ConfigError):
            load_config(str(isolated / "missing.yaml"))

    def test_invalid_yaml(self, isolated):
        path = _write(isolated / "bad.yaml", "jobs: [1\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_accessor_without_target(self, isolated):
        path = _write(isolated / "bad.yaml", "reserved_accessors:\n  $user: {}\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_non_mapping(self, isolated):
        path = _write(isolated / "list.yaml", "- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(str(path))


class TestEnvironment:
    def test_overrides(self, isolated, monkeypatch):
        _write(isolated / "config" / "vuecompose.yaml", "jobs: 2\nlog_level: info\n")
        monkeypatch.setenv("VUECOMPOSE_JOBS", "8")
        monkeypatch.setenv("VUECOMPOSE_LOG_LEVEL", "debug")
        config = load_config()
        assert config.jobs == 8
        assert config.log_level == "DEBUG"

    def test_config_path_from_env(self, isolated, monkeypatch):
        path = _write(isolated / "env.yaml", "jobs: 3\n")
        monkeypatch.setenv("VUECOMPOSE_CONFIG", str(path))
        assert load_config().jobs == 3

    def test_bad_jobs_ignored(self, monkeypatch):
        monkeypatch.setenv("VUECOMPOSE_JOBS", "many")
        assert load_config().jobs == 4
