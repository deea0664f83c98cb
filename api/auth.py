"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh-token
- POST /auth/logout

Business rules live in services.auth.AuthService; these views only parse,
delegate and serialize. Every route here is public (AuthType.NONE).
"""
from __future__ import annotations

from flask import current_app, jsonify, request

from models.schemas.user import (
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
    TokenPairSchema,
    UserOutSchema,
)
from services.auth import AuthService
from utils.decorators import AuthBlueprint

bp = AuthBlueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_token_schema = RefreshTokenSchema()
token_pair_schema = TokenPairSchema()
user_out_schema = UserOutSchema()


def _service() -> AuthService:
    return current_app.extensions["auth_service"]


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [email, password, confirmPassword, name]
          properties:
            email: { type: string }
            password: { type: string, minLength: 6, maxLength: 20 }
            confirmPassword: { type: string }
            name: { type: string }
    responses:
      201:
        description: Created (password omitted)
      409:
        description: Email already exists
      422:
        description: Validation error
    """
    data = register_schema.load(request.get_json(silent=True) or {})
    user = _service().register(data["email"], data["password"], data["name"])
    return jsonify(user_out_schema.dump(user)), 201


@bp.post("/login")
def login():
    """
    Login: return accessToken and refreshToken
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Account does not exist
      422:
        description: Incorrect password or validation error
    """
    data = login_schema.load(request.get_json(silent=True) or {})
    tokens = _service().login(data["email"], data["password"])
    return jsonify(token_pair_schema.dump(tokens)), 200


@bp.post("/refresh-token")
def refresh_token():
    """
    Exchange a refresh token for a new token pair (rotation).
    The presented refresh token is redeemed and cannot be used again.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Invalid, expired or already used refresh token
    """
    data = refresh_token_schema.load(request.get_json(silent=True) or {})
    tokens = _service().refresh(data["refresh_token"])
    return jsonify(token_pair_schema.dump(tokens)), 200


@bp.post("/logout")
def logout():
    """
    Logout: revoke a refresh token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: Logged out
      401:
        description: Invalid or already revoked refresh token
    """
    data = refresh_token_schema.load(request.get_json(silent=True) or {})
    _service().logout(data["refresh_token"])
    return jsonify({"message": "Logout successfully"}), 200
