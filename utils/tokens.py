"""
Token service: access-token issuance and the refresh-token lifecycle.

Access tokens are stateless JWTs (see utils.security). Refresh tokens are
opaque values stored in ``refresh_tokens``; presenting one yields a new
access token and leaves the record in place until it is revoked.

Every function that touches the store takes the request's SQLAlchemy
session as its first argument.
"""
from __future__ import annotations

import logging
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError

from models import RefreshToken, User, save
from utils.exceptions import NotFoundError, StoreError
from utils.security import create_jwt_token, generate_refresh_token, sanitize_profile

logger = logging.getLogger(__name__)

__all__ = [
    "issue",
    "generate_refresh_token",
    "persist_refresh_token",
    "redeem_refresh_token",
    "revoke_refresh_token",
    "revoke_user_refresh_tokens",
]


def issue(user_profile) -> str:
    """Signed access token for a User row or profile mapping (hash stripped)."""
    return create_jwt_token(user_profile)


def persist_refresh_token(session, user_id: str, value: str) -> RefreshToken:
    """Store a refresh token for an existing user."""
    try:
        if session.get(User, user_id) is None:
            raise NotFoundError("User not found")
        record = RefreshToken(user_id=user_id, token=value)
        session.add(record)
        save(session)
    except SQLAlchemyError as exc:
        logger.error("Failed to persist refresh token for user %s", user_id)
        raise StoreError() from exc
    return record


def redeem_refresh_token(session, value: str) -> Dict[str, Any]:
    """Resolve a refresh token to its owner's sanitized profile.

    Read only: the record is neither rotated nor deleted.
    """
    try:
        record = session.query(RefreshToken).filter(RefreshToken.token == value).first()
        if record is None:
            raise NotFoundError()
        user = session.get(User, record.user_id)
    except SQLAlchemyError as exc:
        raise StoreError() from exc
    if user is None:
        logger.warning("Refresh token %s points at missing user %s", record.id, record.user_id)
        raise NotFoundError()
    return sanitize_profile(user)


def revoke_refresh_token(session, value: str) -> None:
    """Delete the refresh token matching value in one statement."""
    try:
        deleted = (
            session.query(RefreshToken)
            .filter(RefreshToken.token == value)
            .delete(synchronize_session=False)
        )
        save(session)
    except SQLAlchemyError as exc:
        raise StoreError("Unable to remove refresh token") from exc
    if not deleted:
        raise NotFoundError("Unable to find and remove refresh token")


def revoke_user_refresh_tokens(session, user_id: str) -> int:
    """Delete every refresh token a user owns. Does not commit."""
    return (
        session.query(RefreshToken)
        .filter(RefreshToken.user_id == user_id)
        .delete(synchronize_session=False)
    )
