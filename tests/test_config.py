"""Tests for config.py — .env loading and env value parsing."""

import os

from kaiten_cli import config


class TestLoadEnv:
    def test_reads_key_values(self, tmp_path, monkeypatch):
        for key in list(os.environ):
            if key.startswith("KAITEN_"):
                monkeypatch.delenv(key)
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# comment\n"
            "KAITEN_API_TOKEN='abc'\n"
            "KAITEN_API_BASE_URL=https://x.kaiten.ru/api/v1\n"
            "\n"
            "not a pair\n",
            encoding="utf-8",
        )
        env = config.load_env(str(env_file))
        assert env == {
            "KAITEN_API_TOKEN": "abc",
            "KAITEN_API_BASE_URL": "https://x.kaiten.ru/api/v1",
        }

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("KAITEN_API_TOKEN=from-file\n", encoding="utf-8")
        monkeypatch.setenv("KAITEN_API_TOKEN", "from-env")
        assert config.load_env(str(env_file))["KAITEN_API_TOKEN"] == "from-env"

    def test_missing_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("KAITEN_HTTP_LOG", "1")
        env = config.load_env(str(tmp_path / "missing.env"))
        assert env["KAITEN_HTTP_LOG"] == "1"

    def test_ignores_unprefixed_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("UNRELATED_SETTING", "x")
        env = config.load_env(str(tmp_path / "missing.env"))
        assert "UNRELATED_SETTING" not in env


class TestEnvParsing:
    def test_bool_values(self, monkeypatch):
        monkeypatch.setattr(config, "env", {"A": "yes", "B": "0", "C": " TRUE "})
        assert config._env_bool("A") is True
        assert config._env_bool("B") is False
        assert config._env_bool("C") is True
        assert config._env_bool("MISSING", default=True) is True

    def test_int_values(self, monkeypatch):
        monkeypatch.setattr(config, "env", {"A": "12", "B": "abc", "C": ""})
        assert config._env_int("A", 5) == 12
        assert config._env_int("B", 5) == 5
        assert config._env_int("C", 5) == 5
        assert config._env_int("MISSING", 7) == 7
