from datetime import datetime, UTC
from typing import Dict, Any
import os

STATUS_EMOJI = {
    "INFO": "ℹ️",
    "WARN": "⚠️",
    "ERROR": "❌",
    "DEBUG": "🔍",
    "OK": "✅",
}

# Lower number = more severe
LOG_LEVELS = {
    "ERROR": 0,
    "WARN": 1,
    "WARNING": 1,
    "INFO": 2,
    "OK": 2,
    "DEBUG": 3,
}


def _level_name(level: int) -> str:
    for name, value in LOG_LEVELS.items():
        if value == level and name not in ("WARNING", "OK"):
            return name
    return "INFO"


class LogUtil:
    """
    Two-phase logger for the journal tools:
      - Bootstrap phase: LOG_LEVEL from the environment
      - Configured phase: LOG_LEVEL from the loaded journal config

    Logging must NEVER raise.
    """

    def __init__(self, service_name: str, stream=None):
        self.service_name = service_name
        self._stream = stream

        env_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.log_level = LOG_LEVELS.get(env_level, LOG_LEVELS["INFO"])
        self.debug_enabled = self.log_level >= LOG_LEVELS["DEBUG"]
        self._configured = False

    # -------------------------------------------------
    # Configuration phase
    # -------------------------------------------------

    def configure_from_config(self, config: Dict[str, Any]) -> None:
        if self._configured:
            return

        try:
            cfg_level = str(config.get("LOG_LEVEL", "")).upper()
            if cfg_level and cfg_level in LOG_LEVELS:
                self.log_level = LOG_LEVELS[cfg_level]

            self.debug_enabled = self.log_level >= LOG_LEVELS["DEBUG"]
            self._configured = True

            self.debug(
                f"[LOG CONFIGURED] level={_level_name(self.log_level)}",
                emoji="🧪",
            )
        except Exception:
            # Logging must never break the caller
            pass

    # -------------------------------------------------
    # Internal formatting
    # -------------------------------------------------

    def _stamp(self, level: str, message: str, emoji: str):
        now = datetime.now(UTC).isoformat(timespec="seconds")
        symbol = emoji or STATUS_EMOJI.get(level, "")
        return f"[{now}][{self.service_name}][{level}]{symbol} {message}"

    def _emit(self, level: str, message: str, emoji: str = ""):
        try:
            msg_level = LOG_LEVELS.get(level, LOG_LEVELS["INFO"])
            if msg_level > self.log_level:
                return
            print(self._stamp(level, message, emoji), file=self._stream)
        except Exception:
            pass

    # -------------------------------------------------
    # Public API
    # -------------------------------------------------

    def info(self, message: str, emoji: str = STATUS_EMOJI["INFO"]):
        self._emit("INFO", message, emoji)

    def warn(self, message: str, emoji: str = STATUS_EMOJI["WARN"]):
        self._emit("WARN", message, emoji)

    def warning(self, message: str, emoji: str = STATUS_EMOJI["WARN"]):
        # Alias for compatibility with standard logging APIs
        self.warn(message, emoji)

    def error(self, message: str, emoji: str = STATUS_EMOJI["ERROR"]):
        self._emit("ERROR", message, emoji)

    def debug(self, message: str, emoji: str = STATUS_EMOJI["DEBUG"]):
        self._emit("DEBUG", message, emoji)

    def ok(self, message: str, emoji: str = STATUS_EMOJI["OK"]):
        self._emit("OK", message, emoji)
