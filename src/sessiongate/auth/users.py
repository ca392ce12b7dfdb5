# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from starlette.concurrency import run_in_threadpool

from sessiongate.auth.passwords import PasswordService
from sessiongate.errors import AuthError, ValidationError

if TYPE_CHECKING:
    from sessiongate.infra.user_repo import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Account:
    id: int
    email: str
    password_hash: str
    created_at: datetime


def normalize_email(email: str) -> str:
    """Uniqueness/lookup key for an email (trim + lower)."""
    return (email or "").strip().lower()


async def register_account(
    repo: "UserRepository",
    passwords: PasswordService,
    email: str,
    password: str,
    *,
    min_length: int = 6,
) -> int:
    """Validate, hash and store a new account. Returns the new account id.

    The length policy is checked before hashing so invalid input never pays
    for an argon2 round.
    """
    key = normalize_email(email)
    if not key or not password or len(password) < min_length:
        raise ValidationError(
            f"Datos incorrectos. La contraseña debe tener al menos {min_length} caracteres."
        )
    password_hash = await run_in_threadpool(passwords.hash, password)
    account_id = await repo.create_account(key, password_hash, datetime.now(timezone.utc))
    logger.info("Usuario registrado id=%s", account_id)
    return account_id


async def authenticate(
    repo: "UserRepository",
    passwords: PasswordService,
    email: str,
    password: str,
) -> Account:
    """Return the account matching the credentials or raise AuthError.

    Unknown email and wrong password raise the same error after the same
    amount of argon2 work.
    """
    if not normalize_email(email) or not password:
        raise ValidationError("Introduce email y contraseña.")
    account = await repo.find_by_email(email)
    if account is None:
        await run_in_threadpool(lambda: passwords.verify(password, passwords.dummy_hash))
        logger.info("Login fallido")
        raise AuthError()
    ok = await run_in_threadpool(passwords.verify, password, account.password_hash)
    if not ok:
        logger.info("Login fallido")
        raise AuthError()
    logger.info("Login correcto id=%s", account.id)
    return account
