from __future__ import annotations

from typing import Dict, Optional

from flask import Blueprint, current_app, g, request

from services.errors import Unauthorized
from utils.guards import DEFAULT_POLICY, AuthPolicy

GUARD_EXTENSION = "guard_composer"


class AuthBlueprint(Blueprint):
    """
    Blueprint whose routes carry an explicit AuthPolicy.

        bp = AuthBlueprint("posts", __name__, auth=AuthPolicy([AuthType.BEARER]))

        @bp.get("/posts/<post_id>", auth=AuthPolicy([AuthType.NONE]))
        def find_one(post_id): ...

    A route-level policy overrides the blueprint default.
    """

    def __init__(self, *args, auth: Optional[AuthPolicy] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.auth_policy = auth or DEFAULT_POLICY
        self.route_policies: Dict[str, AuthPolicy] = {}

    def route(self, rule: str, **options):
        policy = options.pop("auth", None)

        def decorator(f):
            endpoint = options.pop("endpoint", None) or f.__name__
            if policy is not None:
                self.route_policies[endpoint] = policy
            self.add_url_rule(rule, endpoint, f, **options)
            return f

        return decorator

    def policy_for(self, endpoint: str) -> AuthPolicy:
        return self.route_policies.get(endpoint, self.auth_policy)


def resolve_policy(app, endpoint: Optional[str], blueprint: Optional[str]) -> AuthPolicy:
    bp = app.blueprints.get(blueprint) if blueprint else None
    if not isinstance(bp, AuthBlueprint) or not endpoint:
        return DEFAULT_POLICY
    return bp.policy_for(endpoint.rsplit(".", 1)[-1])


def install_guards(app, composer) -> None:
    """Run the guard composer before every view, using the view's declared policy."""
    app.extensions[GUARD_EXTENSION] = composer

    @app.before_request
    def authenticate_request():
        if request.endpoint is None or request.method == "OPTIONS":
            return None  # unmatched URL or CORS preflight
        policy = resolve_policy(current_app, request.endpoint, request.blueprint)
        current_app.extensions[GUARD_EXTENSION].authenticate(request, policy)
        return None


def active_user_id() -> str:
    """User id set by the bearer strategy for the current request."""
    user_id = getattr(g, "current_user_id", None)
    if not user_id:
        raise Unauthorized()
    return user_id
