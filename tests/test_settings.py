"""Tests for settings and logging setup."""
import logging

from stratus_sim.config.settings import DEFAULT_GEMINI_MODEL, Settings
from stratus_sim.utils.logging_config import (
    get_log_file,
    get_log_level,
    perf_logger,
    timed,
    timed_section_sync,
)


class TestSettings:
    """Tests for Settings loading."""

    def test_defaults(self, monkeypatch):
        for var in ("GEMINI_API_KEY", "API_KEY", "STRATUS_SEED_FILE", "STRATUS_GEMINI_MODEL"):
            monkeypatch.delenv(var, raising=False)
        settings = Settings.from_env()
        assert settings.gemini_api_key is None
        assert settings.gemini_model == DEFAULT_GEMINI_MODEL
        assert settings.telemetry_interval == 1.0
        assert settings.telemetry_window == 60

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "abc")
        monkeypatch.setenv("STRATUS_TELEMETRY_INTERVAL", "0.5")
        monkeypatch.setenv("STRATUS_GEMINI_RETRIES", "5")
        settings = Settings.from_env()
        assert settings.gemini_api_key == "abc"
        assert settings.telemetry_interval == 0.5
        assert settings.gemini_retries == 5

    def test_api_key_fallback(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("API_KEY", "legacy")
        assert Settings.from_env().gemini_api_key == "legacy"

    def test_from_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("gemini_model: gemini-2.5-pro\ntelemetry_window: 30\nbogus: 1\n")
        settings = Settings.from_file(path, base=Settings())
        assert settings.gemini_model == "gemini-2.5-pro"
        assert settings.telemetry_window == 30
        assert not hasattr(settings, "bogus")

    def test_from_missing_file(self, tmp_path):
        base = Settings(gemini_model="x")
        assert Settings.from_file(tmp_path / "nope.yaml", base=base) is base


class TestLoggingConfig:
    """Tests for logging helpers."""

    def test_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("STRATUS_LOG_LEVEL", "debug")
        assert get_log_level() == logging.DEBUG
        monkeypatch.setenv("STRATUS_LOG_LEVEL", "nonsense")
        assert get_log_level() == logging.INFO

    def test_log_file_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STRATUS_LOG_FILE", str(tmp_path / "x.log"))
        assert get_log_file() == tmp_path / "x.log"

    def test_timed_logs_duration(self, caplog, monkeypatch):
        @timed("unit_op", hostname="sw1")
        def work():
            return 42

        monkeypatch.setattr(perf_logger, "propagate", True)
        with caplog.at_level(logging.INFO, logger="stratus_sim.perf"):
            assert work() == 42
        assert any("unit_op" in r.getMessage() and "OK" in r.getMessage() for r in caplog.records)

    def test_timed_section_failure(self, caplog, monkeypatch):
        monkeypatch.setattr(perf_logger, "propagate", True)
        with caplog.at_level(logging.INFO, logger="stratus_sim.perf"):
            try:
                with timed_section_sync("boom", hostname="sw1", lines=3):
                    raise RuntimeError("bad")
            except RuntimeError:
                pass
        assert any("FAIL: bad" in r.getMessage() and "lines=3" in r.getMessage() for r in caplog.records)
