#!/usr/bin/env python3
from __future__ import annotations

import asyncio
from getpass import getpass

from sessiongate.auth.passwords import PasswordService
from sessiongate.auth.users import register_account
from sessiongate.config import Settings
from sessiongate.errors import AppError
from sessiongate.infra.user_repo import UserRepository


async def _create(settings: Settings, email: str, password: str) -> int:
    repo = UserRepository(settings.db_path)
    await repo.open()
    try:
        passwords = PasswordService(
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
            parallelism=settings.argon2_parallelism,
        )
        return await register_account(
            repo, passwords, email, password, min_length=settings.min_password_length
        )
    finally:
        await repo.close()


def main() -> None:
    settings = Settings.from_env()

    email = input("Email: ").strip()
    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords no coinciden")

    try:
        account_id = asyncio.run(_create(settings, email, pw1))
    except AppError as e:
        raise SystemExit(e.message)
    print(f"OK -> id={account_id} ({settings.db_path})")


if __name__ == "__main__":
    main()
