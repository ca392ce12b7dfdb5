# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy shared by the store, the auth helpers and the routes.

Each error carries the HTTP status the route boundary answers with.
"""

from __future__ import annotations


class AppError(Exception):
    status_code = 500
    message = "Error del servidor."

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(AppError):
    status_code = 400
    message = "Datos incorrectos."


class AuthError(AppError):
    status_code = 401
    message = "Credenciales inválidas."


class ConflictError(AppError):
    status_code = 409
    message = "Ya existe un usuario con ese email."


class StorageError(AppError):
    status_code = 500
    message = "Error del servidor."
