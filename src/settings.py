from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    assets_dir: Path = Path("assets")
    log_level: str = "INFO"

    # oracle phase; only used when an oracle is plugged in
    oracle_timeout_sec: float = 20.0
    oracle_max_retries: int = 2
    oracle_max_workers: int = 4


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be > 0, got {raw!r}")
    return value


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an int, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {raw!r}")
    return value


def load_settings(env_file: Path | None = None) -> Settings:
    """Read a .env file (if any) and the process environment."""
    load_dotenv(env_file)

    return Settings(
        assets_dir=Path(os.environ.get("ASSETS_DIR", "").strip() or "assets"),
        log_level=(os.environ.get("LOG_LEVEL", "").strip() or "INFO").upper(),
        oracle_timeout_sec=_env_float("ORACLE_TIMEOUT_SEC", 20.0),
        oracle_max_retries=_env_int("ORACLE_MAX_RETRIES", 2),
        oracle_max_workers=_env_int("ORACLE_MAX_WORKERS", 4, minimum=1),
    )
