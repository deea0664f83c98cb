"""
Authentication strategies and their AND/OR composition.

A route declares an AuthPolicy: which strategies it accepts and how they
combine. GuardComposer evaluates them in declaration order.
"""
from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Tuple

from flask import g

from services.errors import ServiceError, Unauthorized
from utils.tokens import TokenError, TokenService

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"


class AuthType(str, Enum):
    BEARER = "Bearer"
    API_KEY = "ApiKey"
    NONE = "None"


class ConditionGuard(str, Enum):
    AND = "and"
    OR = "or"


@dataclass(frozen=True)
class AuthPolicy:
    auth_types: Tuple[AuthType, ...] = (AuthType.NONE,)
    condition: ConditionGuard = ConditionGuard.AND

    def __post_init__(self):
        if not self.auth_types:
            raise ValueError("AuthPolicy needs at least one auth type")
        # accept lists from callers, keep the frozen value hashable
        object.__setattr__(self, "auth_types", tuple(AuthType(t) for t in self.auth_types))
        object.__setattr__(self, "condition", ConditionGuard(self.condition))


DEFAULT_POLICY = AuthPolicy()

Strategy = Callable[[object], bool]


class GuardComposer:
    def __init__(self, tokens: TokenService, api_key: str):
        self._tokens = tokens
        self._api_key = api_key
        self._strategies: Dict[AuthType, Strategy] = {
            AuthType.BEARER: self._bearer,
            AuthType.API_KEY: self._api_key_check,
            AuthType.NONE: lambda request: True,
        }

    def authenticate(self, request, policy: AuthPolicy = DEFAULT_POLICY) -> None:
        """
        Raise the relevant ServiceError if the request does not satisfy the policy.
        AND: stop at the first failure and raise it.
        OR: stop at the first success; if all fail, raise the last failure.
        """
        error: ServiceError = Unauthorized()
        for auth_type in policy.auth_types:
            strategy = self._strategies[auth_type]
            try:
                passed = strategy(request)
            except ServiceError as exc:
                error = exc
                passed = False
            if policy.condition is ConditionGuard.OR and passed:
                return
            if policy.condition is ConditionGuard.AND and not passed:
                raise error
        if policy.condition is ConditionGuard.OR:
            raise error

    def _bearer(self, request) -> bool:
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            raise Unauthorized("Missing or invalid Authorization header")
        token = header.split(" ", 1)[1].strip()
        try:
            payload = self._tokens.verify_access_token(token)
        except TokenError as exc:
            logger.info("bearer rejected: %s", type(exc).__name__)
            raise Unauthorized(str(exc))
        g.token_payload = payload
        g.current_user_id = payload.user_id
        return True

    def _api_key_check(self, request) -> bool:
        supplied = request.headers.get(API_KEY_HEADER)
        if supplied is None or not hmac.compare_digest(supplied.encode(), self._api_key.encode()):
            raise Unauthorized("Invalid API key")
        return True
