"""
Error taxonomy shared by the token service and the HTTP layer.

Every error carries the HTTP status it maps to and an optional message that is
safe to show to the client. Internal detail belongs on ``__cause__`` (raise
``... from exc``) so it reaches the logs and never the response body.
"""
from __future__ import annotations


class PickemError(Exception):
    status_code = 500

    def __init__(self, message: str | None = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message


class ValidationError(PickemError):
    """Malformed or missing input."""
    status_code = 400


class InvalidTokenError(PickemError):
    """Bearer access token missing, malformed, badly signed or expired."""
    status_code = 401


class AuthenticationError(PickemError):
    """Bad credentials. Never carries a message so responses stay uninformative."""
    status_code = 403

    def __init__(self):
        super().__init__(None)


class PermissionDeniedError(PickemError):
    status_code = 403


class NotFoundError(PickemError):
    status_code = 404


class StoreError(PickemError):
    """The credential store failed to read or write."""
    status_code = 500


class SigningError(PickemError):
    """The signing secret is unavailable or the JWT library refused to sign."""
    status_code = 500


class EntropySourceError(PickemError):
    """The OS random source could not supply bytes for a refresh token."""
    status_code = 500
