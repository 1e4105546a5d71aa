from __future__ import annotations

import getpass
import os
from dataclasses import dataclass
from pathlib import Path

from .aliases import MATCH_EXACT, MATCH_SUBSTRING

DEFAULT_DB_PATH = "punchclock.db"
DEFAULT_ALIAS_NAMESPACE = "Software/TLCS/Alias"


@dataclass(frozen=True, slots=True)
class Config:
    db_path: Path
    alias_namespace: str
    account: str
    system_events_enabled: bool
    log_target: Path | None
    alias_match: str


def _optional_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _bool_env(name: str, default: bool) -> bool:
    value = _optional_env(name)
    if value is None:
        return default

    normalized = value.lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Environment variable {name} must be a boolean")


def _alias_match_from_env(name: str) -> str:
    value = (_optional_env(name) or MATCH_SUBSTRING).lower()
    if value not in {MATCH_SUBSTRING, MATCH_EXACT}:
        raise ValueError(f"Environment variable {name} must be '{MATCH_SUBSTRING}' or '{MATCH_EXACT}'")
    return value


def _namespace_from_env(name: str) -> str:
    value = _optional_env(name) or DEFAULT_ALIAS_NAMESPACE
    normalized = value.replace("\\", "/").strip("/")
    if not normalized:
        raise ValueError(f"Environment variable {name} must name a namespace path")
    return normalized


def load_config() -> Config:
    log_target = _optional_env("PUNCHCLOCK_LOG_TARGET")

    return Config(
        db_path=Path(_optional_env("PUNCHCLOCK_DB_PATH") or DEFAULT_DB_PATH),
        alias_namespace=_namespace_from_env("PUNCHCLOCK_ALIAS_NAMESPACE"),
        account=_optional_env("PUNCHCLOCK_ACCOUNT") or getpass.getuser(),
        system_events_enabled=_bool_env("PUNCHCLOCK_SYSTEM_EVENTS", False),
        log_target=Path(log_target) if log_target else None,
        alias_match=_alias_match_from_env("PUNCHCLOCK_ALIAS_MATCH"),
    )
