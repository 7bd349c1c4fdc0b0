"""
Authentication blueprint:
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout

The implementation:
- Uses argon2 for password checks (via utils.security)
- Issues 72h access tokens (JWTs signed with HS256 and AUTH0_CLIENT_SECRET)
- Stores opaque refresh tokens in the DB (RefreshToken model) so logout can revoke them
"""
from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify
from sqlalchemy.exc import SQLAlchemyError

from models import User
from models.schemas.auth import UserLoginSchema, RefreshTokenSchema
from pickem.db import get_session
from utils import tokens
from utils.exceptions import AuthenticationError, StoreError
from utils.security import verify_password, burn_password_check

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__, url_prefix="/auth")

user_login_schema = UserLoginSchema()
refresh_token_schema = RefreshTokenSchema()


@bp.post("/login")
def login():
    """
    Login: return jwt and refreshToken
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
           required: [username, password]
           properties:
             username: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
        schema:
          type: object
          properties:
            jwt: { type: string }
            refreshToken: { type: string }
      400:
        description: Validation error
      403:
        description: Bad credentials (empty body)
      500:
        description: Token could not be issued (empty body)
    """
    payload = user_login_schema.load(request.get_json(silent=True) or {})
    username = payload["username"]

    session = get_session()
    try:
        user: User = session.query(User).filter(User.username == username).first()
    except SQLAlchemyError as exc:
        raise StoreError() from exc
    if user is None:
        burn_password_check(payload["password"])
        logger.info("Login failed: unknown username")
        raise AuthenticationError()
    if not verify_password(payload["password"], user.password_hash):
        logger.info("Login failed: password mismatch for user %s", user.id)
        raise AuthenticationError()

    # Past this point a failure is a broken session, reported as 500
    jwt_token = tokens.issue(user)
    refresh_token = tokens.generate_refresh_token()
    tokens.persist_refresh_token(session, user.id, refresh_token)

    return jsonify(
        {
            "jwt": jwt_token,
            "refreshToken": refresh_token,
        }
    ), 200


@bp.post("/refresh")
def refresh():
    """
    Exchange a refresh token for a new access token. The refresh token stays valid.
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
           required: [refreshToken]
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: OK
        schema:
          type: object
          properties:
            jwt: { type: string }
      404:
        description: Unknown refresh token (empty body)
    """
    payload = refresh_token_schema.load(request.get_json(silent=True) or {})

    session = get_session()
    profile = tokens.redeem_refresh_token(session, payload["refresh_token"])

    return jsonify({"jwt": tokens.issue(profile)}), 200


@bp.post("/logout")
def logout():
    """
    logout: revokes the refresh token. Clients should discard their jwt too.
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
           required: [refreshToken]
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: Revoked
      404:
        description: Refresh token not found
      500:
        description: Store failure
    """
    payload = refresh_token_schema.load(request.get_json(silent=True) or {})

    session = get_session()
    tokens.revoke_refresh_token(session, payload["refresh_token"])

    return ("", 200)
