"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout
- POST /auth/logout-all
- GET  /auth/me

- argon2 password hashing (utils.security)
- short-lived JWT access tokens and opaque refresh tokens stored server-side (utils.tokens)
- refresh tokens are not rotated: a refresh token stays valid until it expires or is revoked
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify

from models.client import Role
from models.schemas.client import (
    ClientRegisterSchema,
    ClientOutSchema,
    LoginSchema,
    RefreshTokenSchema,
)
from api.errors import auth_error_response
from utils.decorators import enforce, login_required, require_role
from utils.login import get_login_service
from utils.middleware import current_security_context

bp = Blueprint("auth", __name__)

register_schema = ClientRegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
client_out_schema = ClientOutSchema()


def _expires_in(expires_at, now) -> int:
    return max(0, int((expires_at - now).total_seconds()))


@bp.post("/register")
def register():
    """
    Register a new client.
    Requesting role ADMIN requires an authenticated administrator.
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
          properties:
            name: { type: string }
            email: { type: string }
            password: { type: string }
            role: { type: string, enum: [ADMIN, NORMAL_USER] }
    responses:
      201:
        description: Created
      401:
        description: Role ADMIN requested without authentication
      403:
        description: Only administrators can create administrators
      409:
        description: Email already registered
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = register_schema.load(payload)

    role = data.get("role") or Role.NORMAL_USER
    if role is Role.ADMIN:
        enforce(require_role(current_security_context(), Role.ADMIN))

    result = get_login_service().register(data["name"], data["email"], data["password"], role)
    if not result.ok:
        return auth_error_response(result.error)

    return jsonify({"data": client_out_schema.dump(result.value)}), 201


@bp.post("/login")
def login():
    """
    Login: return access_token and refresh_token
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
        description: Invalid credentials
    """
    payload = request.get_json(silent=True) or {}
    data = login_schema.load(payload)

    service = get_login_service()
    result = service.login(data["email"], data["password"])
    if not result.ok:
        return auth_error_response(result.error)

    outcome = result.value
    principal = outcome.principal
    return jsonify(
        {
            "access_token": outcome.access_token.token,
            "refresh_token": outcome.refresh_token.token,
            "token_type": "bearer",
            "expires_in": _expires_in(outcome.access_token.expires_at, service.tokens.now()),
            "email": principal.email,
            "role": Role(principal.role).value,
            "principal_id": principal.id,
        }
    ), 200


@bp.post("/refresh")
def refresh():
    """
    Exchange a refresh token for a new access token.
    The refresh token itself is returned unchanged to the caller's keeping.
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
             refresh_token: { type: string }
    responses:
      200:
        description: OK (returns a new access token)
      401:
        description: Unknown, revoked or expired refresh token
      422:
        description: refresh_token is required
    """
    payload = request.get_json(silent=True) or {}
    data = refresh_schema.load(payload)

    service = get_login_service()
    result = service.refresh(data["refresh_token"])
    if not result.ok:
        return auth_error_response(result.error)

    _, access_token = result.value
    return jsonify(
        {
            "access_token": access_token.token,
            "token_type": "bearer",
            "expires_in": _expires_in(access_token.expires_at, service.tokens.now()),
        }
    ), 200


@bp.post("/logout")
def logout():
    """
    Logout: revokes the given refresh token. Always 204.
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
             refresh_token: { type: string }
    responses:
      204:
        description: ""
    """
    payload = request.get_json(silent=True) or {}
    refresh_token = payload.get("refresh_token")
    if isinstance(refresh_token, str) and refresh_token:
        get_login_service().logout(refresh_token)
    return ("", 204)


@bp.post("/logout-all")
@login_required()
def logout_all(security_context):
    """
    Revoke every refresh token of the current client.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      204:
        description: ""
      401:
        description: Unauthorized
    """
    get_login_service().logout_everywhere(security_context.principal)
    return ("", 204)


@bp.get("/me")
@login_required()
def me(security_context):
    """
    Get current client info.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify({"data": client_out_schema.dump(security_context.principal)}), 200
