# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Runtime configuration, read from the process environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

INSECURE_SECRET = "replace-this-secret"

_TRUE = {"1", "true", "yes", "y"}


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUE


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    reload: bool = False
    secret_key: str = INSECURE_SECRET
    db_path: Path = Path("data/db.sqlite")
    cookie_name: str = "sessiongate_session"
    session_max_age: int = 28800  # 8 hours
    cookie_secure: bool = False
    min_password_length: int = 6
    argon2_time_cost: Optional[int] = None
    argon2_memory_cost: Optional[int] = None
    argon2_parallelism: Optional[int] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        secret = os.getenv("SESSION_SECRET") or os.getenv("SESSIONGATE_SECRET_KEY") or INSECURE_SECRET

        port = os.getenv("PORT") or os.getenv("SESSIONGATE_PORT") or "3000"

        return cls(
            host=os.getenv("SESSIONGATE_HOST", "0.0.0.0"),
            port=int(port),
            reload=_env_bool("SESSIONGATE_RELOAD"),
            secret_key=secret,
            db_path=Path(os.getenv("SESSIONGATE_DB_PATH", "data/db.sqlite")).resolve(),
            cookie_name=os.getenv("SESSIONGATE_COOKIE_NAME", "sessiongate_session"),
            session_max_age=int(os.getenv("SESSIONGATE_SESSION_MAX_AGE", "28800")),
            cookie_secure=_env_bool("SESSIONGATE_COOKIE_SECURE"),
            min_password_length=int(os.getenv("SESSIONGATE_MIN_PASSWORD_LENGTH", "6")),
            argon2_time_cost=_env_int("SESSIONGATE_ARGON2_TIME_COST", None),
            argon2_memory_cost=_env_int("SESSIONGATE_ARGON2_MEMORY_COST", None),
            argon2_parallelism=_env_int("SESSIONGATE_ARGON2_PARALLELISM", None),
            log_level=os.getenv("SESSIONGATE_LOG_LEVEL", "INFO").upper(),
        )
