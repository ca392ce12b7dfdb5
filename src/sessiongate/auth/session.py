# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Server-side sessions referenced by a signed cookie.

The cookie only carries an opaque session id signed with itsdangerous; the
user binding lives in a ``SessionStore``. Deleting the store entry is what
logs a browser out, so a replayed cookie stops working immediately.
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol

from itsdangerous import BadSignature, BadTimeSignature, URLSafeTimedSerializer
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE_SECONDS = 28800  # 8 hours
DEFAULT_SALT = "sessiongate.session.v1"


@dataclass(frozen=True)
class SessionData:
    session_id: str
    user_id: int
    expires_at: float


class SessionStore(Protocol):
    def create(self, user_id: int, *, max_age: int) -> SessionData: ...

    def get(self, session_id: str) -> Optional[SessionData]: ...

    def delete(self, session_id: str) -> None: ...


class InMemorySessionStore:
    """Process-local store; every mutation happens under one lock."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._data: Dict[str, SessionData] = {}

    def create(self, user_id: int, *, max_age: int) -> SessionData:
        sid = secrets.token_urlsafe(32)
        now = self._clock()
        data = SessionData(session_id=sid, user_id=user_id, expires_at=now + max_age)
        with self._lock:
            self._purge_expired(now)
            self._data[sid] = data
        return data

    def _purge_expired(self, now: float) -> None:
        # Caller holds the lock.
        expired = [sid for sid, d in self._data.items() if d.expires_at <= now]
        for sid in expired:
            del self._data[sid]

    def get(self, session_id: str) -> Optional[SessionData]:
        with self._lock:
            data = self._data.get(session_id)
            if data is None:
                return None
            if data.expires_at <= self._clock():
                del self._data[session_id]
                return None
            return data

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._data.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class SessionManager:
    def __init__(
        self,
        store: SessionStore,
        *,
        secret_key: str,
        cookie_name: str = "sessiongate_session",
        max_age: int = DEFAULT_MAX_AGE_SECONDS,
        secure: bool = False,
        salt: str = DEFAULT_SALT,
    ) -> None:
        if not secret_key:
            raise RuntimeError("Falta la clave de firma de sesión")
        self.store = store
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.secure = secure
        self._serializer = URLSafeTimedSerializer(secret_key=secret_key, salt=salt)

    def _session_id_from(self, request: Request) -> Optional[str]:
        token = request.cookies.get(self.cookie_name, "")
        if not token:
            return None
        try:
            data = self._serializer.loads(token, max_age=self.max_age)
        except (BadSignature, BadTimeSignature):
            return None
        sid = str((data or {}).get("sid") or "").strip()
        return sid or None

    def resolve(self, request: Request) -> Optional[SessionData]:
        """Session bound to the request's cookie, or None for anonymous."""
        sid = self._session_id_from(request)
        if not sid:
            return None
        return self.store.get(sid)

    def bind(self, request: Request, response: Response, user_id: int) -> None:
        """Start an authenticated session for ``user_id``.

        A previous session on the same browser is dropped; the new one always
        gets a fresh id.
        """
        old = self._session_id_from(request)
        if old:
            self.store.delete(old)
        data = self.store.create(user_id, max_age=self.max_age)
        token = self._serializer.dumps({"sid": data.session_id})
        response.set_cookie(
            self.cookie_name,
            token,
            max_age=self.max_age,
            httponly=True,
            secure=self.secure,
            samesite=None,
        )

    def destroy(self, request: Request, response: Response) -> None:
        sid = self._session_id_from(request)
        if sid:
            self.store.delete(sid)
        response.delete_cookie(self.cookie_name, httponly=True, secure=self.secure, samesite=None)
