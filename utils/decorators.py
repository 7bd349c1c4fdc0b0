from __future__ import annotations
from functools import wraps
from flask import request, g
from utils.security import decode_token
from utils.exceptions import InvalidTokenError, PermissionDeniedError


def jwt_required():
    """
    Require a valid bearer access token.

    The token is trusted on signature and expiry alone, there is no store
    lookup. The embedded profile lands on g.current_user.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth = request.headers.get("Authorization", "")
            if not auth.startswith("Bearer "):
                raise InvalidTokenError("Required authorization token not found")
            token = auth.split(" ", 1)[1].strip()
            claims = decode_token(token)

            g.current_user = claims.user
            g.token_claims = claims
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def self_only(action: str):
    """
    Allow the call only when the <username> in the route is the caller's own.
    Must sit below jwt_required().
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if g.current_user.get("username") != kwargs.get("username"):
                raise PermissionDeniedError(f"Not allowed to {action} other users")
            return fn(*args, **kwargs)

        return wrapper

    return decorator
