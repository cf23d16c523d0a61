"""
auth/errors.py -- Exception taxonomy for the auth package.

Everything that can go wrong on the way from a credential or a bearer token to
an Account is one of these. The HTTP layer maps them to status codes:

  Unauthorized         -> 401, one generic message whatever the reason
  DuplicateIdentifier  -> 409
  PasswordTooLong      -> 422 (the request model rejects it first)
  RevocationError      -> 503

TokenError subclasses never leave auth/: SessionService converts them into
Unauthorized before they reach a route.
"""

from __future__ import annotations

from enum import Enum


class AuthFailureReason(str, Enum):
    """Why a request was refused. Logged, never sent to the client."""

    MISSING_TOKEN = "missing_token"
    BAD_CREDENTIALS = "bad_credentials"
    MALFORMED_TOKEN = "malformed_token"
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"
    REVOKED = "revoked"
    UNKNOWN_SUBJECT = "unknown_subject"


class AuthError(Exception):
    """Base class for all auth-domain errors."""


class Unauthorized(AuthError):
    def __init__(self, reason: AuthFailureReason) -> None:
        super().__init__(reason.value)
        self.reason = reason


class DuplicateIdentifier(AuthError):
    def __init__(self, identifier: str) -> None:
        super().__init__("identifier already registered")
        self.identifier = identifier


class PasswordTooLong(AuthError):
    """The password is longer than bcrypt can hash without truncating it."""

    def __init__(self, max_bytes: int) -> None:
        super().__init__(f"password exceeds {max_bytes} bytes")
        self.max_bytes = max_bytes


class TokenError(AuthError):
    """Raised by TokenCodec.decode when a token cannot be trusted."""

    reason: AuthFailureReason = AuthFailureReason.MALFORMED_TOKEN


class MalformedToken(TokenError):
    reason = AuthFailureReason.MALFORMED_TOKEN


class InvalidSignature(TokenError):
    reason = AuthFailureReason.INVALID_SIGNATURE


class RevocationError(AuthError):
    """The denylist write failed. The token stays valid until it expires."""

    def __init__(self, jti: str) -> None:
        super().__init__("could not record token revocation")
        self.jti = jti
