"""
Settings for the job store, read from TRAINJOBS_* environment variables.

Call env.load_env() first to pick up a local .env file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_DATABASE_URL = "sqlite:///data/trainjobs.db"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    echo_sql: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    log_level: str = "INFO"
    log_dir: Path = field(default_factory=lambda: Path("logs"))

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("TRAINJOBS_DATABASE_URL") or DEFAULT_DATABASE_URL,
            echo_sql=_env_bool("TRAINJOBS_DB_ECHO", False),
            pool_size=_env_int("TRAINJOBS_DB_POOL_SIZE", 5),
            max_overflow=_env_int("TRAINJOBS_DB_MAX_OVERFLOW", 10),
            pool_timeout=_env_int("TRAINJOBS_DB_POOL_TIMEOUT", 30),
            log_level=os.getenv("TRAINJOBS_LOG_LEVEL") or "INFO",
            log_dir=Path(os.getenv("TRAINJOBS_LOG_DIR") or "logs"),
        )
