# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy import Integer, String, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from sessiongate.auth.users import Account, normalize_email
from sessiongate.errors import ConflictError, StorageError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[str] = mapped_column(String, nullable=False)  # ISO-8601


def _to_account(row: UserRow) -> Account:
    return Account(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        created_at=datetime.fromisoformat(row.created_at),
    )


class UserRepository:
    """Single-table account store backed by SQLite.

    The repository owns its engine: ``open()`` at application startup creates
    the engine and the ``users`` table if missing, ``close()`` at shutdown
    disposes it. Only insert and lookups are exposed.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._engine: Optional[AsyncEngine] = None
        self._sessions: Optional[async_sessionmaker] = None

    async def open(self) -> None:
        if self._engine is not None:
            return
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._engine = create_async_engine(f"sqlite+aiosqlite:///{self.db_path}")
        self._sessions = async_sessionmaker(self._engine, expire_on_commit=False)
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            logger.exception("No se pudo inicializar la base de datos %s", self.db_path)
            raise StorageError() from e
        logger.info("Base de datos lista en %s", self.db_path)

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessions = None

    def _session_factory(self) -> async_sessionmaker:
        if self._sessions is None:
            raise StorageError("La base de datos no está abierta.")
        return self._sessions

    async def create_account(self, email: str, password_hash: str, created_at: datetime) -> int:
        """Insert a new account and return its id.

        Raises ConflictError when the normalized email is already taken (the
        unique index rejects the row), StorageError on any other failure.
        """
        sessions = self._session_factory()
        row = UserRow(
            email=normalize_email(email),
            password_hash=password_hash,
            created_at=created_at.isoformat(),
        )
        try:
            async with sessions() as session:
                async with session.begin():
                    session.add(row)
                    await session.flush()
                    new_id = row.id
        except IntegrityError as e:
            raise ConflictError() from e
        except SQLAlchemyError as e:
            logger.exception("Fallo al insertar usuario")
            raise StorageError() from e
        return new_id

    async def find_by_email(self, email: str) -> Optional[Account]:
        sessions = self._session_factory()
        key = normalize_email(email)
        if not key:
            return None
        try:
            async with sessions() as session:
                res = await session.execute(select(UserRow).where(UserRow.email == key))
                row = res.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.exception("Fallo al buscar usuario por email")
            raise StorageError() from e
        return _to_account(row) if row is not None else None

    async def get(self, account_id: int) -> Optional[Account]:
        sessions = self._session_factory()
        try:
            async with sessions() as session:
                row = await session.get(UserRow, account_id)
        except SQLAlchemyError as e:
            logger.exception("Fallo al leer usuario %s", account_id)
            raise StorageError() from e
        return _to_account(row) if row is not None else None
