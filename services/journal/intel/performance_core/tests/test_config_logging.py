"""Journal config loader and LogUtil behaviour."""

import io

from shared.config import JOURNAL_ENV_DEFAULTS, load_journal_config
from shared.logutil import LogUtil


class TestLoadJournalConfig:

    def test_defaults(self):
        cfg = load_journal_config(env={})
        assert cfg["service_name"] == "journal"
        for key, default in JOURNAL_ENV_DEFAULTS.items():
            assert cfg[key] == default

    def test_environment_overrides_defaults(self):
        cfg = load_journal_config(env={"JOURNAL_TIMEZONE": "Europe/London", "UNRELATED": "x"})
        assert cfg["JOURNAL_TIMEZONE"] == "Europe/London"
        assert "UNRELATED" not in cfg

    def test_blank_environment_ignored(self):
        cfg = load_journal_config(env={"JOURNAL_ACCOUNT_BALANCE": "   "})
        assert cfg["JOURNAL_ACCOUNT_BALANCE"] == "0"

    def test_overrides_win(self):
        cfg = load_journal_config(
            env={"JOURNAL_ACCOUNT_BALANCE": "100"},
            overrides={"JOURNAL_ACCOUNT_BALANCE": 900.0, "LOG_LEVEL": None},
        )
        assert cfg["JOURNAL_ACCOUNT_BALANCE"] == 900.0
        assert cfg["LOG_LEVEL"] == "INFO"

    def test_logs_debug_line(self):
        stream = io.StringIO()
        logger = LogUtil("cfg", stream=stream)
        logger.configure_from_config({"LOG_LEVEL": "DEBUG"})
        load_journal_config(env={"LOG_LEVEL": "DEBUG"}, logger=logger)
        assert "1 overridden by environment" in stream.getvalue()


class TestLogUtil:

    def _logger(self, monkeypatch, level="INFO"):
        monkeypatch.setenv("LOG_LEVEL", level)
        stream = io.StringIO()
        return LogUtil("journal", stream=stream), stream

    def test_bootstrap_level_from_env(self, monkeypatch):
        logger, stream = self._logger(monkeypatch, "WARN")
        logger.info("hidden")
        logger.warn("shown")
        out = stream.getvalue()
        assert "hidden" not in out
        assert "[journal][WARN]" in out and "shown" in out

    def test_configure_from_config(self, monkeypatch):
        logger, stream = self._logger(monkeypatch, "ERROR")
        logger.configure_from_config({"LOG_LEVEL": "debug"})
        assert logger.debug_enabled
        logger.debug("probe")
        assert "probe" in stream.getvalue()
        assert "[LOG CONFIGURED] level=DEBUG" in stream.getvalue()

    def test_configured_only_once(self, monkeypatch):
        logger, _ = self._logger(monkeypatch)
        logger.configure_from_config({"LOG_LEVEL": "ERROR"})
        logger.configure_from_config({"LOG_LEVEL": "DEBUG"})
        assert not logger.debug_enabled

    def test_unknown_level_falls_back_to_info(self, monkeypatch):
        logger, stream = self._logger(monkeypatch, "CHATTY")
        logger.debug("nope")
        logger.ok("done")
        out = stream.getvalue()
        assert "nope" not in out
        assert "[OK]" in out

    def test_never_raises(self, monkeypatch):
        logger, _ = self._logger(monkeypatch)
        logger.configure_from_config(None)

        class Broken:
            def write(self, _):
                raise OSError("disk full")

        logger._stream = Broken()
        logger.error("still fine")
