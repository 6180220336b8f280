"""Tests for config.py: loading and env var expansion."""

import logging

import pytest

from config import Config, NocoDBConfig, expand_env_vars, load_config


class TestExpandEnvVars:
    def test_dollar_brace_syntax(self, monkeypatch):
        monkeypatch.setenv("TEST_VAR", "hello")
        assert expand_env_vars("${TEST_VAR}") == "hello"

    def test_dollar_prefix_syntax(self, monkeypatch):
        monkeypatch.setenv("MY_VAR", "world")
        assert expand_env_vars("$MY_VAR") == "world"

    def test_missing_var_becomes_empty(self, monkeypatch):
        monkeypatch.delenv("NONEXISTENT_VAR", raising=False)
        assert expand_env_vars("${NONEXISTENT_VAR}") == ""

    def test_nested_dict(self, monkeypatch):
        monkeypatch.setenv("TOKEN", "abc123")
        result = expand_env_vars({"nocodb": {"token": "${TOKEN}"}})
        assert result == {"nocodb": {"token": "abc123"}}

    def test_non_string_passthrough(self):
        assert expand_env_vars(42) == 42
        assert expand_env_vars(None) is None


class TestConfigFromYaml:
    def test_load_basic_yaml(self, config_yaml):
        cfg = Config.from_yaml(config_yaml)
        assert cfg.web.port == 8080
        assert cfg.web.password == "hunter2"
        assert cfg.nocodb.token == "abc"
        assert cfg.nocodb.table_id == "m123"
        assert cfg.nocodb.cache_ttl == 60

    def test_trailing_slash_stripped_from_url(self, config_yaml):
        cfg = Config.from_yaml(config_yaml)
        assert cfg.nocodb.url == "https://db.example.com"

    def test_env_var_expansion_in_yaml(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NC_TOKEN", "env_token_val")
        cfg_file = tmp_path / "env_config.yaml"
        cfg_file.write_text("""\
nocodb:
  url: "https://db.example.com"
  token: "${NC_TOKEN}"
""")
        cfg = Config.from_yaml(cfg_file)
        assert cfg.nocodb.token == "env_token_val"
        assert cfg.web.port == 3000

    def test_empty_file_gives_defaults(self, tmp_path):
        cfg_file = tmp_path / "empty.yaml"
        cfg_file.write_text("")
        cfg = Config.from_yaml(cfg_file)
        assert cfg.web.password == ""
        assert cfg.nocodb.table_name == "youtubeTranscripts"


class TestConfigFromEnv:
    def test_defaults(self, monkeypatch):
        for var in ["YTV_WEB_HOST", "YTV_WEB_PORT", "YTV_PASSWORD", "APP_PASSWORD",
                    "NC_URL", "NC_TOKEN", "NOCODB_TABLE_NAME"]:
            monkeypatch.delenv(var, raising=False)
        cfg = Config.from_env()
        assert cfg.web.host == "0.0.0.0"
        assert cfg.web.port == 3000
        assert cfg.web.password == ""
        assert cfg.nocodb.url == ""
        assert cfg.nocodb.table_name == "youtubeTranscripts"

    def test_from_env_vars(self, monkeypatch):
        monkeypatch.setenv("YTV_WEB_PORT", "9090")
        monkeypatch.setenv("NC_URL", "https://nc.local/")
        monkeypatch.setenv("NOCODB_TABLE_ID", "tbl")
        cfg = Config.from_env()
        assert cfg.web.port == 9090
        assert cfg.nocodb.url == "https://nc.local"
        assert cfg.nocodb.table_id == "tbl"

    def test_app_password_fallback(self, monkeypatch):
        monkeypatch.delenv("YTV_PASSWORD", raising=False)
        monkeypatch.setenv("APP_PASSWORD", "legacy")
        assert Config.from_env().web.password == "legacy"


class TestLoadConfig:
    def test_load_from_path(self, config_yaml):
        cfg = load_config(str(config_yaml))
        assert cfg.web.password == "hunter2"

    def test_missing_file_raises(self):
        with pytest.raises(FileNotFoundError):
            load_config("/nonexistent/path/config.yaml")

    def test_fallback_to_env(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)  # No config.yaml present
        cfg = load_config(None)
        assert isinstance(cfg, Config)

    def test_missing_nocodb_credentials_warning(self, tmp_path, caplog):
        cfg_file = tmp_path / "bare.yaml"
        cfg_file.write_text("web:\n  password: x\n")
        with caplog.at_level(logging.WARNING):
            load_config(str(cfg_file))
        assert "nocodb.url" in caplog.text


class TestNocoDBConfig:
    def test_defaults(self):
        cfg = NocoDBConfig()
        assert cfg.timeout == 15
        assert cfg.cache_ttl == 300
