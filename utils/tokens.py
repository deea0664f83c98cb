"""
Token helpers:
- Access and refresh JWTs via PyJWT, each class with its own secret and lifetime
- JTI generation so every issued token string is unique
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

from api.config import AuthSettings


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenInvalid(TokenError):
    pass


class TokenExpired(TokenError):
    pass


@dataclass(frozen=True)
class TokenPayload:
    user_id: str
    iat: int
    exp: int
    jti: str | None = None

    @property
    def issued_at(self) -> datetime:
        return datetime.fromtimestamp(self.iat, tz=timezone.utc)

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.exp, tz=timezone.utc)


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID)."""
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    def __init__(self, settings: AuthSettings):
        self._settings = settings

    def sign_access_token(self, user_id: str) -> str:
        return self._sign(user_id, self._settings.access_token_secret, self._settings.access_token_expires)

    def sign_refresh_token(self, user_id: str) -> str:
        return self._sign(user_id, self._settings.refresh_token_secret, self._settings.refresh_token_expires)

    def verify_access_token(self, token: str) -> TokenPayload:
        return self._verify(token, self._settings.access_token_secret)

    def verify_refresh_token(self, token: str) -> TokenPayload:
        return self._verify(token, self._settings.refresh_token_secret)

    def _sign(self, user_id: str, secret: str, lifetime: timedelta) -> str:
        iat = int(_now().timestamp())
        payload: Dict[str, Any] = {
            "userId": str(user_id),
            "jti": generate_jti(),
            "iat": iat,
            "exp": iat + int(lifetime.total_seconds()),
        }
        return jwt.encode(payload, secret, algorithm=self._settings.algorithm)

    def _verify(self, token: str, secret: str) -> TokenPayload:
        """
        Decode and validate a JWT. Raises TokenExpired past `exp`,
        TokenInvalid on bad signature, algorithm mismatch or missing claims.
        """
        try:
            decoded = jwt.decode(
                token,
                secret,
                algorithms=[self._settings.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpired("Token expired")
        except jwt.InvalidTokenError as exc:
            raise TokenInvalid(f"Invalid token: {exc}")

        user_id = decoded.get("userId")
        if not user_id:
            raise TokenInvalid("Invalid token: missing userId")
        return TokenPayload(
            user_id=str(user_id),
            iat=int(decoded["iat"]),
            exp=int(decoded["exp"]),
            jti=decoded.get("jti"),
        )
