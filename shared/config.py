# shared/config.py
from __future__ import annotations
import os
from typing import Any, Dict, Mapping, Optional

# Declared journal env vars and their defaults.
# Shell environment overrides a default only when it is non-blank.
JOURNAL_ENV_DEFAULTS: Dict[str, str] = {
    "JOURNAL_ACCOUNT_BALANCE": "0",
    "JOURNAL_WEEK_STARTS_ON": "0",   # Python weekday, 0 = Monday
    "JOURNAL_TIMEZONE": "UTC",
    "LOG_LEVEL": "INFO",
}


def _env(k, d=None, env: Optional[Mapping[str, str]] = None):
    source = os.environ if env is None else env
    v = source.get(k)
    return v if v and v.strip() else d


def load_journal_config(
    env: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    logger=None,
) -> Dict[str, Any]:
    """
    Returns the flat journal config dict:
      { 'service_name', JOURNAL_* keys, 'LOG_LEVEL' }

    Precedence: explicit overrides > environment > declared defaults.
    """
    cfg: Dict[str, Any] = {"service_name": "journal"}

    overridden = 0
    for key, default_value in JOURNAL_ENV_DEFAULTS.items():
        value = _env(key, None, env)
        if value is not None:
            overridden += 1
            cfg[key] = value
        else:
            cfg[key] = default_value

    for key, value in (overrides or {}).items():
        if value is not None:
            cfg[key] = value

    if logger:
        logger.debug(
            f"loaded {len(JOURNAL_ENV_DEFAULTS)} journal config keys "
            f"({overridden} overridden by environment)",
            emoji="🔧",
        )
    return cfg
