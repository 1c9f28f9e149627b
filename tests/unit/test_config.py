"""Tests for configuration loading."""

import dataclasses

import pytest

from kanvas_snapshot.core import config as config_module
from kanvas_snapshot.core.config import (
    Settings,
    get_config_file_path,
    get_config_value,
    load_config,
    load_env_file,
    load_settings,
)
from kanvas_snapshot.core.errors import ConfigError


SAMPLE_CONFIG = """meshery:
  url: https://meshery.example.com
  snapshot_endpoint: /api/custom/import
  offline_fallback: false
defaults:
  snapshot_name: from-config
  timeout_seconds: 12
  notify_on_completion: false
github:
  repo_owner: acme
  workflow: snap.yaml
"""


class TestLoadConfig:
    """Tests for load_config()."""

    def test_missing_file_returns_empty(self, tmp_path):
        assert load_config(str(tmp_path / "missing.yaml")) == {}

    def test_loads_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(SAMPLE_CONFIG)

        config = load_config(str(path))

        assert config["meshery"]["url"] == "https://meshery.example.com"
        assert config["defaults"]["timeout_seconds"] == 12

    def test_empty_file_returns_empty(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_config(str(path)) == {}

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("meshery: [unclosed")

        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_non_mapping_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigError):
            load_config(str(path))


class TestConfigFilePath:
    """Tests for config file lookup order."""

    def test_local_file_wins(self, tmp_path, monkeypatch):
        local = tmp_path / "config" / "config.yaml"
        user = tmp_path / "home" / "config.yaml"
        local.parent.mkdir()
        user.parent.mkdir()
        local.write_text("{}")
        user.write_text("{}")
        monkeypatch.setattr(config_module, "LOCAL_CONFIG_PATH", local)
        monkeypatch.setattr(config_module, "USER_CONFIG_PATH", user)

        assert get_config_file_path() == local

    def test_user_file_used_when_no_local(self, tmp_path, monkeypatch):
        user = tmp_path / "home" / "config.yaml"
        user.parent.mkdir()
        user.write_text("{}")
        monkeypatch.setattr(config_module, "LOCAL_CONFIG_PATH", tmp_path / "config" / "config.yaml")
        monkeypatch.setattr(config_module, "USER_CONFIG_PATH", user)

        assert get_config_file_path() == user


class TestGetConfigValue:
    """Tests for get_config_value()."""

    def test_nested_value(self):
        config = {"meshery": {"url": "http://x"}}
        assert get_config_value(["meshery", "url"], config=config, environ={}) == "http://x"

    def test_env_fallback(self):
        value = get_config_value(["meshery", "url"], config={}, environ={"MESHERY_URL": "http://env"})
        assert value == "http://env"

    def test_default(self):
        assert get_config_value(["meshery", "url"], default="d", config={"meshery": "flat"}, environ={}) == "d"


class TestLoadEnvFile:
    """Tests for .env parsing."""

    def test_parses_values(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text('# comment\n\nMESHERY_TOKEN="abc"\nGITHUB_TOKEN = \'gh\'\nbroken line\n')

        assert load_env_file(str(path)) == {"MESHERY_TOKEN": "abc", "GITHUB_TOKEN": "gh"}

    def test_missing_file(self, tmp_path):
        assert load_env_file(str(tmp_path / ".env")) == {}

    def test_inline_comment_not_part_of_value(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text("MESHERY_TOKEN=abc123 # from my profile\n")

        assert load_env_file(str(path)) == {"MESHERY_TOKEN": "abc123"}

    def test_export_prefix(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text("export GITHUB_TOKEN=gh-token\n")

        assert load_env_file(str(path)) == {"GITHUB_TOKEN": "gh-token"}


class TestLoadSettings:
    """Tests for load_settings()."""

    def test_defaults(self):
        settings = load_settings(config={}, environ={}, env_file=None)

        assert settings.api_base_url == "http://localhost:9081"
        assert settings.snapshot_endpoint == "/api/pattern/import"
        assert settings.payload_format == "file"
        assert settings.timeout_seconds == 30.0
        assert settings.offline_fallback_enabled is True
        assert settings.provider_token == ""
        assert settings.workflow_access_token == ""

    def test_endpoint_follows_payload_format(self):
        config = {"meshery": {"payload_format": "manifest"}}

        settings = load_settings(config=config, environ={}, env_file=None)

        assert settings.snapshot_endpoint == "/api/k8scontext/manifest"

    def test_config_file_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(SAMPLE_CONFIG)

        settings = load_settings(config=load_config(str(path)), environ={}, env_file=None)

        assert settings.api_base_url == "https://meshery.example.com"
        assert settings.snapshot_endpoint == "/api/custom/import"
        assert settings.offline_fallback_enabled is False
        assert settings.snapshot_name == "from-config"
        assert settings.timeout_seconds == 12.0
        assert settings.notify_on_completion is False
        assert settings.repo_owner == "acme"
        assert settings.workflow == "snap.yaml"

    def test_environment_tokens(self):
        environ = {
            "MESHERY_TOKEN": "mesh",
            "GITHUB_TOKEN": "gh",
            "MESHERY_CLOUD_URL": "https://cloud",
            "MESHERY_API_URL": "https://api",
        }

        settings = load_settings(config={"meshery": {"url": "https://cfg"}}, environ=environ, env_file=None)

        assert settings.provider_token == "mesh"
        assert settings.workflow_access_token == "gh"
        assert settings.cloud_api_base_url == "https://cloud"
        assert settings.api_base_url == "https://api"

    def test_env_file_fills_missing_only(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("MESHERY_TOKEN=from-file\nGITHUB_TOKEN=gh-file\nOTHER=ignored\n")

        settings = load_settings(config={}, environ={"GITHUB_TOKEN": "gh-env"}, env_file=str(env_file))

        assert settings.provider_token == "from-file"
        assert settings.workflow_access_token == "gh-env"

    def test_overrides_win(self):
        settings = load_settings(
            config={"meshery": {"url": "https://cfg"}, "github": {"repo_owner": "acme"}},
            environ={"MESHERY_TOKEN": "env"},
            env_file=None,
            overrides={
                "api_base_url": "https://flag",
                "provider_token": "flag-token",
                "repo_owner": "flag-owner",
                "branch": None,
                "strict": True,
            },
        )

        assert settings.api_base_url == "https://flag"
        assert settings.provider_token == "flag-token"
        assert settings.repo_owner == "flag-owner"
        assert settings.branch == ""
        assert settings.offline_fallback_enabled is False

    def test_env_file_shell_syntax(self, tmp_path):
        """Test that tokens from a shell-style .env reach Settings unchanged."""
        env_file = tmp_path / ".env"
        env_file.write_text("MESHERY_TOKEN=abc123 # from my profile\nexport GITHUB_TOKEN=gh-token\n")

        settings = load_settings(config={}, environ={}, env_file=str(env_file))

        assert settings.provider_token == "abc123"
        assert settings.workflow_access_token == "gh-token"

    @pytest.mark.parametrize("timeout", ["thirty", [30], 0])
    def test_bad_timeout_raises_config_error(self, timeout):
        config = {"defaults": {"timeout_seconds": timeout}}

        with pytest.raises(ConfigError) as exc_info:
            load_settings(config=config, environ={}, env_file=None, config_path="config.yaml")

        assert "timeout_seconds" in str(exc_info.value)
        assert exc_info.value.path == "config.yaml"

    def test_bad_timeout_from_environment_raises_config_error(self):
        with pytest.raises(ConfigError):
            load_settings(config={}, environ={"DEFAULTS_TIMEOUT_SECONDS": "soon"}, env_file=None)

    def test_github_runner_variables_ignored(self):
        """Test that GITHUB_WORKFLOW from an Actions runner is not used as the workflow file."""
        settings = load_settings(config={}, environ={"GITHUB_WORKFLOW": "CI"}, env_file=None)

        assert settings.workflow == ""

    def test_settings_are_immutable(self):
        settings = Settings()

        with pytest.raises(dataclasses.FrozenInstanceError):
            settings.provider_token = "x"  # type: ignore
