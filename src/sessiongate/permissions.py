# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Request, status

from sessiongate.auth.passwords import PasswordService
from sessiongate.auth.session import SessionManager
from sessiongate.config import Settings
from sessiongate.infra.user_repo import UserRepository


@dataclass(frozen=True)
class CurrentUser:
    id: int
    email: str


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_users(request: Request) -> UserRepository:
    return request.app.state.users


def get_passwords(request: Request) -> PasswordService:
    return request.app.state.passwords


def get_sessions(request: Request) -> SessionManager:
    return request.app.state.sessions


async def load_user_from_request(request: Request) -> Optional[CurrentUser]:
    sess = getattr(request.state, "session", None)
    if sess is None:
        return None
    account = await get_users(request).get(sess.user_id)
    if account is None:
        return None
    return CurrentUser(id=account.id, email=account.email)


async def current_user_optional(request: Request) -> Optional[CurrentUser]:
    u = getattr(request.state, "user", None)
    if u is not None:
        return u
    u = await load_user_from_request(request)
    request.state.user = u
    return u


async def require_user(request: Request) -> CurrentUser:
    """Gate for protected routes: anonymous browsers are sent to /login."""
    u = await current_user_optional(request)
    if u:
        return u
    raise HTTPException(status_code=status.HTTP_302_FOUND, headers={"Location": "/login"})
