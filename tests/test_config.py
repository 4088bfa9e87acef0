"""Tests for the config module."""

import pytest

from logferry.config import ENV_VARS, Config, _parse_bool, load_config


class TestParseBool:
    def test_true_values(self):
        for val in ("true", "True", "TRUE", "1", "yes", "YES", " true ", True):
            assert _parse_bool(val) is True

    def test_false_values(self):
        for val in ("false", "False", "0", "no", "", "random", False):
            assert _parse_bool(val) is False


class TestConfigDefaults:
    def test_defaults(self):
        cfg = Config()
        assert cfg.sink_url == "http://localhost:8080"
        assert cfg.buffer_key == "logger"
        assert cfg.max_buffer_bytes == 1_048_576
        assert cfg.debug is False
        assert cfg.medium == "wifi"

    def test_frozen(self):
        cfg = Config()
        with pytest.raises(AttributeError):
            cfg.debug = True


class TestLoadConfig:
    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch):
        for var in ("CONFIG_PATH", *ENV_VARS.values()):
            monkeypatch.delenv(var, raising=False)

    def test_defaults(self):
        assert load_config([]) == Config()

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("SINK_URL", "http://ingest:9000")
        monkeypatch.setenv("MAX_BUFFER_BYTES", "2048")
        monkeypatch.setenv("DEBUG", "yes")
        monkeypatch.setenv("WATCH_INTERVAL", "0.5")
        cfg = load_config([])
        assert cfg.sink_url == "http://ingest:9000"
        assert cfg.max_buffer_bytes == 2048
        assert cfg.debug is True
        assert cfg.watch_interval == 0.5

    def test_yaml_file(self, tmp_path, monkeypatch):
        path = tmp_path / "logferry.yml"
        path.write_text(
            "sink_url: http://yaml-host:8000\n"
            "medium: cellular\n"
            "cellular_generation: 3g\n"
            "max_buffer_bytes: 4096\n"
            "unknown_key: ignored\n"
        )
        monkeypatch.setenv("CONFIG_PATH", str(path))
        cfg = load_config([])
        assert cfg.sink_url == "http://yaml-host:8000"
        assert cfg.medium == "cellular"
        assert cfg.cellular_generation == "3g"
        assert cfg.max_buffer_bytes == 4096

    def test_env_beats_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "logferry.yml"
        path.write_text("medium: cellular\n")
        monkeypatch.setenv("CONFIG_PATH", str(path))
        monkeypatch.setenv("MEDIUM", "wifi")
        assert load_config([]).medium == "wifi"

    def test_cli_beats_env(self, monkeypatch):
        monkeypatch.setenv("PROBE_PORT", "9000")
        cfg = load_config(["--probe-port", "9100", "--debug", "--sink-url=http://cli:1"])
        assert cfg.probe_port == 9100
        assert cfg.debug is True
        assert cfg.sink_url == "http://cli:1"

    def test_config_flag_selects_yaml(self, tmp_path):
        path = tmp_path / "other.yml"
        path.write_text("buffer_key: offline_logs\n")
        assert load_config(["--config", str(path)]).buffer_key == "offline_logs"

    def test_missing_yaml_is_ignored(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "absent.yml"))
        assert load_config([]) == Config()

    def test_yaml_must_be_mapping(self, tmp_path, monkeypatch):
        path = tmp_path / "bad.yml"
        path.write_text("- just\n- a list\n")
        monkeypatch.setenv("CONFIG_PATH", str(path))
        with pytest.raises(ValueError):
            load_config([])
