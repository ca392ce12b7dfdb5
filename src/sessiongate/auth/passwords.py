# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import secrets
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError


class PasswordService:
    """argon2id hashing with configurable cost parameters.

    Parameters left as ``None`` fall back to the argon2-cffi defaults.
    """

    def __init__(
        self,
        *,
        time_cost: Optional[int] = None,
        memory_cost: Optional[int] = None,
        parallelism: Optional[int] = None,
    ) -> None:
        kwargs = {}
        if time_cost is not None:
            kwargs["time_cost"] = time_cost
        if memory_cost is not None:
            kwargs["memory_cost"] = memory_cost
        if parallelism is not None:
            kwargs["parallelism"] = parallelism
        self._ph = PasswordHasher(**kwargs)
        self._dummy_hash: Optional[str] = None

    @property
    def dummy_hash(self) -> str:
        """Hash with the current cost parameters that matches no real password.

        Verified against when an email is unknown, so that path costs the same
        argon2 work as a wrong password.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self._ph.hash(secrets.token_urlsafe(16))
        return self._dummy_hash

    def hash(self, plain: str) -> str:
        if not plain:
            raise ValueError("Password vacío")
        return self._ph.hash(plain)

    def verify(self, plain: str, hash_value: str) -> bool:
        if not hash_value or not plain:
            return False
        try:
            return self._ph.verify(hash_value, plain)
        except (VerificationError, InvalidHashError):
            return False
