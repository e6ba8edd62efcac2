"""
Tests for configuration loading: YAML defaults, .env and environment overrides.
"""

import pytest

from htmlemailer.core.config import load_config

ENV_VARS = [
    "HTMLEMAILER_PROVIDER_URL",
    "PORT",
    "HTMLEMAILER_PROXY_URL",
    "HTMLEMAILER_DB_PATH",
    "HTMLEMAILER_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run from an empty directory with none of our variables set.

    Each variable is set then deleted so monkeypatch also removes anything a
    .env file loads during the test.
    """
    for var in ENV_VARS:
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)
    monkeypatch.chdir(tmp_path)


class TestLoadConfig:
    def test_defaults_without_yaml(self):
        cfg = load_config()
        assert cfg.provider.base_url == "https://api.resend.com"
        assert cfg.server.port == 3000
        assert cfg.limits.max_template_bytes == 1024 * 1024
        assert cfg.limits.max_files_per_batch == 10
        assert cfg.limits.history_limit == 100
        assert cfg.safety.strict_proxy is False
        assert cfg.log_level == "INFO"

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(
            "server:\n  port: 8080\n"
            "limits:\n  history_limit: 5\n"
            "safety:\n  strict_proxy: true\n"
            "db_path: /tmp/x.db\n"
        )
        cfg = load_config(str(path))
        assert cfg.server.port == 8080
        assert cfg.limits.history_limit == 5
        assert cfg.safety.strict_proxy is True
        assert cfg.db_path == "/tmp/x.db"

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("server:\n  port: 8080\nprovider:\n  base_url: https://yaml.test\n")
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("HTMLEMAILER_PROVIDER_URL", "https://env.test")
        monkeypatch.setenv("HTMLEMAILER_LOG_LEVEL", "debug")

        cfg = load_config(str(path))
        assert cfg.server.port == 9000
        assert cfg.provider.base_url == "https://env.test"
        assert cfg.log_level == "DEBUG"

    def test_dotenv_file_is_read(self, tmp_path):
        (tmp_path / ".env").write_text("HTMLEMAILER_DB_PATH=from-dotenv.db\n")
        assert load_config().db_path == "from-dotenv.db"

    def test_environment_beats_dotenv(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("HTMLEMAILER_DB_PATH=from-dotenv.db\n")
        monkeypatch.setenv("HTMLEMAILER_DB_PATH", "from-env.db")
        assert load_config().db_path == "from-env.db"

    def test_project_config_dir_is_found(self, tmp_path, monkeypatch):
        (tmp_path / "pyproject.toml").write_text("")
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "default.yaml").write_text("server:\n  port: 4000\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        monkeypatch.chdir(nested)
        assert load_config().server.port == 4000
