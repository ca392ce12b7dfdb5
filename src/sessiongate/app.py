# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Form, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from sessiongate.auth.passwords import PasswordService
from sessiongate.auth.session import InMemorySessionStore, SessionManager, SessionStore
from sessiongate.auth.users import authenticate, register_account
from sessiongate.config import INSECURE_SECRET, Settings
from sessiongate.core.utils import strip_markup
from sessiongate.errors import AppError, AuthError, ConflictError, ValidationError
from sessiongate.infra.user_repo import UserRepository
from sessiongate.permissions import (
    CurrentUser,
    current_user_optional,
    get_passwords,
    get_sessions,
    get_settings,
    get_users,
    require_user,
)

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

router = APIRouter()


def _render(request: Request, template_name: str, ctx: Optional[dict] = None, status_code: int = 200):
    """TemplateResponse wrapper injecting the current user."""
    base_ctx = {"current_user": getattr(request.state, "user", None)}
    merged = {**base_ctx, **(ctx or {})}
    return templates.TemplateResponse(request, template_name, merged, status_code=status_code)


def _back_link(request: Request, exc: AppError) -> tuple[str, str]:
    if isinstance(exc, ConflictError):
        return "/login", "Entrar"
    if isinstance(exc, AuthError):
        return "/login", "Volver"
    if isinstance(exc, ValidationError):
        return request.url.path, "Volver"
    return "/", "Inicio"


async def _app_error_handler(request: Request, exc: AppError):
    href, label = _back_link(request, exc)
    return _render(
        request,
        "error.html",
        {"message": exc.message, "back_href": href, "back_label": label},
        status_code=exc.status_code,
    )


async def _http_error_handler(request: Request, exc: StarletteHTTPException):
    """Send gate redirects as bare redirects instead of a JSON detail body."""
    location = (exc.headers or {}).get("Location")
    if 300 <= exc.status_code < 400 and location:
        return RedirectResponse(url=location, status_code=exc.status_code)
    return await http_exception_handler(request, exc)


# ------------------ Routes ------------------


@router.get("/")
async def home(user: Optional[CurrentUser] = Depends(current_user_optional)):
    return RedirectResponse(url="/dashboard" if user else "/login", status_code=302)


@router.get("/register", response_class=HTMLResponse)
def register_get(request: Request, settings: Settings = Depends(get_settings)):
    return _render(request, "register.html", {"min_length": settings.min_password_length})


@router.post("/register")
async def register_post(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    settings: Settings = Depends(get_settings),
    users: UserRepository = Depends(get_users),
    passwords: PasswordService = Depends(get_passwords),
    sessions: SessionManager = Depends(get_sessions),
):
    account_id = await register_account(
        users, passwords, email, password, min_length=settings.min_password_length
    )
    resp = RedirectResponse(url="/dashboard", status_code=302)
    sessions.bind(request, resp, account_id)
    return resp


@router.get("/login", response_class=HTMLResponse)
def login_get(request: Request):
    return _render(request, "login.html")


@router.post("/login")
async def login_post(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    users: UserRepository = Depends(get_users),
    passwords: PasswordService = Depends(get_passwords),
    sessions: SessionManager = Depends(get_sessions),
):
    account = await authenticate(users, passwords, email, password)
    resp = RedirectResponse(url="/dashboard", status_code=302)
    sessions.bind(request, resp, account.id)
    return resp


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(request: Request, user: CurrentUser = Depends(require_user)):
    return _render(request, "dashboard.html", {"user": user})


@router.post("/data", response_class=HTMLResponse)
def data_post(
    request: Request,
    text: str = Form("", alias="any"),
    user: CurrentUser = Depends(require_user),
):
    return _render(request, "data.html", {"text": strip_markup(text)})


@router.post("/logout")
def logout_post(
    request: Request,
    user: CurrentUser = Depends(require_user),
    sessions: SessionManager = Depends(get_sessions),
):
    resp = RedirectResponse(url="/login", status_code=302)
    sessions.destroy(request, resp)
    logger.info("Logout id=%s", user.id)
    return resp


# ------------------ Application ------------------


def create_app(settings: Optional[Settings] = None, *, session_store: Optional[SessionStore] = None) -> FastAPI:
    """Build the application with its own store, hasher and session manager.

    Used as a uvicorn factory (``sessiongate.app:create_app``); tests pass
    explicit settings.
    """
    settings = settings or Settings.from_env()
    if settings.secret_key == INSECURE_SECRET:
        logger.warning("SESSION_SECRET no definido; usando secreto inseguro por defecto")
    users = UserRepository(settings.db_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await users.open()
        try:
            yield
        finally:
            await users.close()

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.users = users
    app.state.passwords = PasswordService(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
    )
    app.state.sessions = SessionManager(
        session_store if session_store is not None else InMemorySessionStore(),
        secret_key=settings.secret_key,
        cookie_name=settings.cookie_name,
        max_age=settings.session_max_age,
        secure=settings.cookie_secure,
    )

    @app.middleware("http")
    async def _session_middleware(request: Request, call_next):
        request.state.session = request.app.state.sessions.resolve(request)
        return await call_next(request)

    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")
    app.include_router(router)
    return app
