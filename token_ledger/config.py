"""
token_ledger.config - file locations, logging level and account-id policy.

This module centralizes configuration for the token ledger. It has NO
third-party deps and is safe to import very early.

Configuration precedence:
  1) Environment variables (TOKEN_LEDGER_*)
  2) Hardcoded safe defaults below

Key env vars:
  - TOKEN_LEDGER_STATE          (path)  default: token_state.cbor
  - TOKEN_LEDGER_EVENTS         (path)  default: token_events.jsonl
  - TOKEN_LEDGER_LOG_LEVEL      (str)   default: WARNING
  - TOKEN_LEDGER_ADDRESS_BYTES  (int)   default: 0 (any non-empty length)

Usage:
    from token_ledger.config import load_config
    CFG = load_config()
    if CFG.address_bytes: ...
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


# ----------------------------- helpers ---------------------------------------


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_path(name: str, default: str) -> Path:
    raw = os.getenv(name) or default
    return Path(raw).expanduser()


def _env_level(name: str, default: str) -> str:
    raw = (os.getenv(name) or default).strip().upper()
    return raw if raw in LOG_LEVELS else default


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class LedgerConfig:
    state_path: Path
    events_path: Path
    log_level: str
    # 0 = accept any non-empty account id
    address_bytes: int

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "state_path": str(self.state_path),
            "events_path": str(self.events_path),
            "log_level": self.log_level,
            "address_bytes": self.address_bytes,
        }


@lru_cache(maxsize=1)
def load_config() -> LedgerConfig:
    """
    Build and cache a LedgerConfig from environment + safe defaults.
    Call ``load_config.cache_clear()`` after changing the environment.
    """
    return LedgerConfig(
        state_path=_env_path("TOKEN_LEDGER_STATE", "token_state.cbor"),
        events_path=_env_path("TOKEN_LEDGER_EVENTS", "token_events.jsonl"),
        log_level=_env_level("TOKEN_LEDGER_LOG_LEVEL", "WARNING"),
        address_bytes=_env_int("TOKEN_LEDGER_ADDRESS_BYTES", 0, min_v=0, max_v=256),
    )


__all__ = ["LOG_LEVELS", "LedgerConfig", "load_config"]
