"""Tests for settings loading and prerequisite checks."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from pondus.config.settings import (
    AA_API_KEY_ENV,
    ConfigError,
    Settings,
    check_keys,
    default_config_path,
    load_settings,
)


@pytest.fixture(autouse=True)
def no_env_key():
    """Keep a developer's real AA_API_KEY (or .env) out of these tests."""
    with patch.dict(os.environ, {AA_API_KEY_ENV: ""}), \
         patch("pondus.config.settings.load_dotenv"):
        yield


class TestLoadSettings:

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "absent.yaml")

        assert settings.cache_ttl_hours == 24
        assert settings.browser == "agent-browser"
        assert settings.max_workers == 4
        assert settings.aa_api_key() is None

    def test_full_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "cache:\n"
            "  ttl_hours: 6\n"
            "  dir: /tmp/pondus-cache\n"
            "alias:\n"
            "  path: /tmp/models.yaml\n"
            "browser: playwright\n"
            "max_workers: 2\n"
            "http_timeout: 10\n"
            "sources:\n"
            "  artificial-analysis:\n"
            "    api_key: \"  cfg-key  \"\n"
            "  seal:\n"
            "    agent_browser_path: /opt/agent-browser\n",
            encoding="utf-8",
        )

        settings = load_settings(path)

        assert settings.cache_ttl_hours == 6.0
        assert settings.cache_dir == Path("/tmp/pondus-cache")
        assert settings.alias_path == Path("/tmp/models.yaml")
        assert settings.browser == "playwright"
        assert settings.max_workers == 2
        assert settings.http_timeout == 10.0
        assert settings.aa_api_key() == "cfg-key"
        assert settings.agent_browser_path() == "/opt/agent-browser"

    def test_env_key_overrides_config(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("sources:\n  artificial-analysis:\n    api_key: cfg-key\n", encoding="utf-8")

        with patch.dict(os.environ, {AA_API_KEY_ENV: "env-key"}):
            settings = load_settings(path)

        assert settings.aa_api_key() == "env-key"

    def test_underscore_source_name_accepted(self):
        settings = Settings.from_dict({"sources": {"artificial_analysis": {"api_key": "k"}}})
        assert settings.aa_api_key() == "k"

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("cache: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_settings(path)

    @pytest.mark.parametrize("data", [
        ["not", "a", "mapping"],
        {"sources": ["seal"]},
        {"sources": {"seal": "path"}},
        {"cache": {"ttl_hours": "soon"}},
        {"cache": {"ttl_hours": -1}},
        {"max_workers": 0},
        {"http_timeout": 0},
        {"browser": "lynx"},
        {"alias": "models.yaml"},
    ])
    def test_bad_values_raise(self, data):
        with pytest.raises(ConfigError):
            Settings.from_dict(data)

    def test_default_config_path_uses_xdg(self, tmp_path):
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            assert default_config_path() == tmp_path / "pondus" / "config.yaml"


class TestCheckKeys:

    @patch("pondus.config.settings.shutil.which", return_value=None)
    def test_all_missing(self, mock_which):
        assert check_keys(Settings()) == {"AA_API_KEY": "MISSING", "agent-browser": "MISSING"}

    @patch("pondus.config.settings.shutil.which", return_value="/usr/bin/agent-browser")
    def test_all_present(self, mock_which):
        status = check_keys(Settings(env_aa_api_key="k"))
        assert status == {"AA_API_KEY": "OK", "agent-browser": "OK"}
