"""
Caller-facing service errors.

Every error carries a stable `kind` tag plus the HTTP status the transport
layer maps it to. Handlers match on `kind`; messages are for humans.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    INCORRECT_PASSWORD = "INCORRECT_PASSWORD"
    UNAUTHORIZED = "UNAUTHORIZED"
    TOKEN_REUSE_DETECTED = "TOKEN_REUSE_DETECTED"
    POST_NOT_FOUND = "POST_NOT_FOUND"


class ServiceError(Exception):
    kind: ErrorKind = ErrorKind.UNAUTHORIZED
    # kind and message shown to clients; None means same as kind/message
    public_kind: Optional[ErrorKind] = None
    public_message: Optional[str] = None
    status: int = 400
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None, details: Optional[Any] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class DuplicateEmail(ServiceError):
    kind = ErrorKind.DUPLICATE_EMAIL
    status = 409
    default_message = "Email already exists"


class AccountNotFound(ServiceError):
    kind = ErrorKind.ACCOUNT_NOT_FOUND
    status = 401
    default_message = "Account does not exist"


class IncorrectPassword(ServiceError):
    kind = ErrorKind.INCORRECT_PASSWORD
    status = 422
    default_message = "Incorrect password"

    def __init__(self, message: Optional[str] = None, details: Optional[Any] = None):
        super().__init__(message, details or [{"field": "password", "message": "Incorrect password"}])


class Unauthorized(ServiceError):
    kind = ErrorKind.UNAUTHORIZED
    status = 401
    default_message = "Unauthorized"


class TokenReuseDetected(Unauthorized):
    """A validly signed refresh token that is no longer in the store."""
    kind = ErrorKind.TOKEN_REUSE_DETECTED
    public_kind = ErrorKind.UNAUTHORIZED
    public_message = Unauthorized.default_message
    default_message = "Refresh token has been revoked"


class PostNotFound(ServiceError):
    kind = ErrorKind.POST_NOT_FOUND
    status = 404
    default_message = "Post not found"
