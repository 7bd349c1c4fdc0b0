"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT
- refresh token values from the OS CSPRNG
"""
from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, Mapping

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from flask import current_app
from marshmallow import ValidationError as SchemaValidationError

from models.schemas.auth import AccessClaims, AccessClaimsSchema
from models.schemas.user import UserOutSchema
from utils.exceptions import EntropySourceError, InvalidTokenError, SigningError

logger = logging.getLogger(__name__)

ph = PasswordHasher()

# Verified against when the username is unknown so both login failures cost the same
_DUMMY_HASH = ph.hash("pickem-dummy-password")

_profile_schema = UserOutSchema()
_claims_schema = AccessClaimsSchema()


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a plaintext password using argon2.

    Mismatches and unreadable hashes are both just False.
    """
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def burn_password_check(password: str) -> None:
    """Spend one verification on a throwaway hash (unknown-username path)."""
    verify_password(password, _DUMMY_HASH)


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def sanitize_profile(user) -> Dict[str, Any]:
    """Public profile for a User row or a profile mapping; never includes the hash.

    Mappings are read in wire format (firstName/lastName) and anything not in
    UserOutSchema is dropped, so sanitizing twice gives the same result.
    """
    if isinstance(user, Mapping):
        user = _profile_schema.load(user)
    return _profile_schema.dump(user)


def create_jwt_token(profile: Dict[str, Any]) -> str:
    """Sign {user, exp} with the configured secret.

    Raises SigningError when the secret is missing or PyJWT refuses to sign.
    """
    secret = current_app.config.get("JWT_SECRET")
    if not secret:
        raise SigningError()
    exp = _now() + current_app.config["JWT_TOKEN_EXPIRES"]
    payload = {
        "user": sanitize_profile(profile),
        "exp": int(exp.timestamp()),
    }
    try:
        return jwt.encode(payload, secret, algorithm=current_app.config["JWT_ALGORITHM"])
    except (jwt.PyJWTError, TypeError, ValueError, NotImplementedError) as exc:
        raise SigningError() from exc


def decode_token(token: str) -> AccessClaims:
    """
    Decode and validate a JWT into AccessClaims.
    Raises InvalidTokenError on bad signature, expiry or malformed claims.
    """
    secret = current_app.config.get("JWT_SECRET")
    if not secret:
        raise SigningError()
    try:
        decoded = jwt.decode(
            token,
            secret,
            algorithms=[current_app.config["JWT_ALGORITHM"]],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise InvalidTokenError("Token expired")
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError("Invalid token") from exc

    try:
        return _claims_schema.load(decoded)
    except SchemaValidationError as exc:
        raise InvalidTokenError("Invalid token: malformed claims") from exc


def generate_refresh_token() -> str:
    """64 random bytes, URL-safe base64 without padding (86 chars)."""
    size = current_app.config.get("REFRESH_TOKEN_BYTES", 64)
    try:
        return secrets.token_urlsafe(size)
    except (OSError, NotImplementedError) as exc:
        logger.error("Random source failed while creating a refresh token: %s", exc)
        raise EntropySourceError() from exc
