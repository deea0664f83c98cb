"""
Auth service: registration, login, token pair issuance and refresh-token
rotation.

Refresh tokens are single-use. A token is redeemed by deleting its row in one
statement; the caller whose DELETE removed the row gets the new pair, every
other presenter of the same string gets TokenReuseDetected.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from models.db_storage import DBStorage
from models.errors import DuplicateKeyError, RecordNotFoundError, StoreError
from models.user import User
from services.errors import (
    AccountNotFound,
    DuplicateEmail,
    IncorrectPassword,
    TokenReuseDetected,
    Unauthorized,
)
from utils.hashing import HashingService
from utils.tokens import TokenError, TokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class AuthService:
    def __init__(self, storage: DBStorage, hashing: HashingService, tokens: TokenService):
        self.storage = storage
        self.hashing = hashing
        self.tokens = tokens

    def register(self, email: str, password: str, name: str) -> User:
        password_hash = self.hashing.hash(password)
        try:
            return self.storage.create_user(email=email, name=name, password_hash=password_hash)
        except DuplicateKeyError:
            raise DuplicateEmail()

    def login(self, email: str, password: str) -> TokenPair:
        user = self.storage.find_user_by_email(email)
        if not user:
            raise AccountNotFound()
        if not self.hashing.compare(password, user.password_hash):
            raise IncorrectPassword()
        return self.issue_token_pair(user.id)

    def issue_token_pair(self, user_id: str) -> TokenPair:
        try:
            purged = self.storage.purge_expired_refresh_tokens(user_id=user_id)
        except StoreError as exc:
            logger.warning("expired refresh token purge failed: %s", exc)
        else:
            if purged:
                logger.debug("purged %d expired refresh tokens for user %s", purged, user_id)
        access_token = self.tokens.sign_access_token(user_id)
        refresh_token = self.tokens.sign_refresh_token(user_id)
        # store the expiry the token itself carries, so the row and the
        # signature agree on when the token dies
        decoded = self.tokens.verify_refresh_token(refresh_token)
        self.storage.create_refresh_token(
            token=refresh_token,
            user_id=user_id,
            expires_at=decoded.expires_at,
        )
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def refresh(self, refresh_token: str) -> TokenPair:
        try:
            payload = self.tokens.verify_refresh_token(refresh_token)
        except TokenError as exc:
            logger.warning("refresh rejected: %s (%s)", type(exc).__name__, exc)
            raise Unauthorized()

        try:
            redeemed = self.storage.consume_refresh_token(refresh_token)
        except StoreError as exc:
            logger.error("refresh rejected: store failure (%s)", type(exc).__name__)
            raise Unauthorized()

        if not redeemed:
            logger.warning("refresh token reuse detected for user %s", payload.user_id)
            raise TokenReuseDetected()

        return self.issue_token_pair(payload.user_id)

    def logout(self, refresh_token: str) -> None:
        try:
            self.tokens.verify_refresh_token(refresh_token)
        except TokenError as exc:
            logger.warning("logout rejected: %s (%s)", type(exc).__name__, exc)
            raise Unauthorized()

        try:
            self.storage.delete_refresh_token(refresh_token)
        except RecordNotFoundError:
            raise TokenReuseDetected()
        except StoreError as exc:
            logger.error("logout rejected: store failure (%s)", type(exc).__name__)
            raise Unauthorized()
