"""Tests for configuration loading and CLI parsing."""

import pytest

from webhook_receiver.main import build_server, load_config, parse_args


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in (
        "GITHUB_WEBHOOK_SECRET",
        "WEBHOOK_HOST",
        "WEBHOOK_PORT",
        "WEBHOOK_PATH",
        "WEBHOOK_MAX_BODY_BYTES",
        "LOG_LEVEL",
        "LOG_FORMAT",
        "LOG_FILE",
    ):
        monkeypatch.delenv(var, raising=False)


class TestLoadConfig:
    def test_defaults_when_file_missing(self, tmp_path):
        config = load_config(str(tmp_path / "missing.yaml"))

        assert config["server"] == {"host": "0.0.0.0", "port": 8080, "path": "/webhooks/github"}
        assert config["webhook"]["secret"] == ""
        assert config["webhook"]["max_body_bytes"] == 25 * 1024 * 1024
        assert config["logging"]["level"] == "INFO"

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "receiver.yaml"
        path.write_text("server:\n  port: 9000\nwebhook:\n  secret: from-yaml\n")

        config = load_config(str(path))

        assert config["server"]["port"] == 9000
        assert config["server"]["host"] == "0.0.0.0"
        assert config["webhook"]["secret"] == "from-yaml"

    def test_environment_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "receiver.yaml"
        path.write_text("server:\n  port: 9000\nwebhook:\n  secret: from-yaml\n")
        monkeypatch.setenv("GITHUB_WEBHOOK_SECRET", "from-env")
        monkeypatch.setenv("WEBHOOK_PORT", "9100")
        monkeypatch.setenv("WEBHOOK_MAX_BODY_BYTES", "2048")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        config = load_config(str(path))

        assert config["webhook"]["secret"] == "from-env"
        assert config["server"]["port"] == 9100
        assert config["webhook"]["max_body_bytes"] == 2048
        assert config["logging"]["level"] == "DEBUG"

    @pytest.mark.parametrize("env_var,section,key,default", [
        ("WEBHOOK_PORT", "server", "port", 8080),
        ("WEBHOOK_MAX_BODY_BYTES", "webhook", "max_body_bytes", 25 * 1024 * 1024),
    ])
    def test_non_numeric_value_falls_back_to_default(
        self, tmp_path, monkeypatch, env_var, section, key, default
    ):
        monkeypatch.setenv(env_var, "lots")

        config = load_config(str(tmp_path / "missing.yaml"))

        assert config[section][key] == default

    def test_non_numeric_yaml_port_falls_back_to_default(self, tmp_path):
        path = tmp_path / "receiver.yaml"
        path.write_text("server:\n  port: eighty\n")

        assert load_config(str(path))["server"]["port"] == 8080

    def test_invalid_numeric_value_still_builds_server(self, tmp_path, monkeypatch):
        monkeypatch.setenv("WEBHOOK_PORT", "not-a-port")

        server = build_server(load_config(str(tmp_path / "missing.yaml")))

        assert server.port == 8080

    def test_numeric_secret_stays_a_string(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GITHUB_WEBHOOK_SECRET", "123456")

        config = load_config(str(tmp_path / "missing.yaml"))

        assert config["webhook"]["secret"] == "123456"

    def test_null_secret_is_empty(self, tmp_path):
        path = tmp_path / "receiver.yaml"
        path.write_text("webhook:\n  secret: null\n")

        assert load_config(str(path))["webhook"]["secret"] == ""


class TestBuildServer:
    def test_wires_handler_from_config(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GITHUB_WEBHOOK_SECRET", "s3cr3t")
        monkeypatch.setenv("WEBHOOK_PATH", "/hooks")

        server = build_server(load_config(str(tmp_path / "missing.yaml")))

        assert server.path == "/hooks"
        assert server.handler.secret_configured is True
        assert server.handler.metrics is not None


class TestParseArgs:
    def test_defaults(self):
        args = parse_args([])
        assert args.config == "config/receiver.yaml"
        assert args.debug is False

    def test_flags(self):
        args = parse_args(["--config", "other.yaml", "--debug"])
        assert args.config == "other.yaml"
        assert args.debug is True
