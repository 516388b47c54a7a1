from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_COMPANY_ID,
    DEFAULT_CURRENCY,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PAGE_SIZE,
)

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    api_base_url: str = DEFAULT_API_BASE_URL
    company_id: int = DEFAULT_COMPANY_ID
    currency: str = DEFAULT_CURRENCY
    log_level: str = DEFAULT_LOG_LEVEL
    page_size: int = DEFAULT_PAGE_SIZE


def _int_from_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        return int(raw)
    except ValueError:
        _log.warning("Ignoring %s=%r (not an integer); using %s", name, raw, default)
        return default


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Read settings from environment variables (LEDGER_*).
    Missing or malformed values fall back to defaults; never raises.
    """
    env = os.environ if env is None else env
    base_url = (env.get("LEDGER_API_BASE_URL") or DEFAULT_API_BASE_URL).rstrip("/")
    return Settings(
        api_base_url=base_url,
        company_id=_int_from_env(env, "LEDGER_COMPANY_ID", DEFAULT_COMPANY_ID),
        currency=(env.get("LEDGER_CURRENCY") or DEFAULT_CURRENCY).strip(),
        log_level=(env.get("LEDGER_LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper(),
        page_size=_int_from_env(env, "LEDGER_PAGE_SIZE", DEFAULT_PAGE_SIZE),
    )
