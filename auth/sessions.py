"""
auth/sessions.py -- Session orchestration over stateless tokens.

SessionService is the only place that combines the verifier, the codec, the
account store and the denylist. Routes call it; it never sees a Request.

Per-request flows:

  register:     hash secret -> create account -> issue token
  login:        verify credentials -> issue token
  authenticate: decode -> exp in the future -> jti not revoked -> account exists
  logout:       authenticate (token must still be valid) -> revoke jti until exp

Every refusal is Unauthorized(reason). The reason is logged here at INFO and
dropped by the HTTP layer, so a client cannot tell a bad signature from a
revoked token from a deleted account.

Logout deliberately requires a live token. An expired token is already
rejected everywhere by the exp check, so there is nothing left to revoke.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from auth.denylist import DenylistStore
from auth.errors import AuthFailureReason, TokenError, Unauthorized
from auth.models import Account, Claims, IssuedToken
from auth.passwords import CredentialVerifier
from auth.store import AccountStore
from auth.tokens import TokenCodec

logger = logging.getLogger("tokenauth.sessions")

_BEARER_PREFIX = "bearer "


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def extract_bearer(header: str | None) -> str | None:
    """Return the token from an "Authorization: Bearer <token>" header value.

    The scheme is matched case-insensitively. Returns None for a missing
    header, another scheme, or an empty token.
    """
    if not header or header[: len(_BEARER_PREFIX)].lower() != _BEARER_PREFIX:
        return None
    token = header[len(_BEARER_PREFIX) :].strip()
    return token or None


class SessionService:
    """Register, log in, authenticate and log out accounts.

    Usage:
        sessions = SessionService(accounts, verifier, codec, denylist)
        issued = sessions.login("a@x.com", "pw123456")
        account = sessions.authenticate(issued.token)
        sessions.logout(issued.token)
    """

    def __init__(
        self,
        accounts: AccountStore,
        verifier: CredentialVerifier,
        codec: TokenCodec,
        denylist: DenylistStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._accounts = accounts
        self._verifier = verifier
        self._codec = codec
        self._denylist = denylist
        self._clock = clock

    # ------------------------------------------------------------------
    # Credential flows
    # ------------------------------------------------------------------

    def register(self, identifier: str, secret: str) -> tuple[Account, IssuedToken]:
        """Create an account and sign it in.

        Raises DuplicateIdentifier if the identifier is taken.
        """
        account = Account(identifier=identifier, hashed_password=self._verifier.hash_secret(secret))
        account.id = self._accounts.create_account(account)
        created = self._accounts.get_by_id(account.id) or account
        logger.info("Account registered (id=%s)", created.id)
        return created, self._codec.issue(created)

    def login(self, identifier: str, secret: str) -> tuple[Account, IssuedToken]:
        """Verify credentials and issue a token. Raises Unauthorized on failure."""
        account = self._verifier.verify(identifier, secret)
        if account is None:
            self._refuse(AuthFailureReason.BAD_CREDENTIALS)
        logger.info("Login succeeded (id=%s)", account.id)
        return account, self._codec.issue(account)

    # ------------------------------------------------------------------
    # Token flows
    # ------------------------------------------------------------------

    def validate(self, token: str | None) -> tuple[Account, Claims]:
        """Run every check on a presented token and return its account and claims."""
        if not token:
            self._refuse(AuthFailureReason.MISSING_TOKEN)
        try:
            claims = self._codec.decode(token)
        except TokenError as exc:
            self._refuse(exc.reason)
        if int(self._clock().timestamp()) >= claims.expires_at:
            self._refuse(AuthFailureReason.EXPIRED)
        if self._denylist.is_revoked(claims.jti):
            self._refuse(AuthFailureReason.REVOKED)
        account = self._accounts.get_by_identifier(claims.subject)
        if account is None:
            self._refuse(AuthFailureReason.UNKNOWN_SUBJECT)
        return account, claims

    def authenticate(self, token: str | None) -> Account:
        account, _claims = self.validate(token)
        return account

    def logout(self, token: str | None) -> Claims:
        """Revoke a currently valid token.

        Raises Unauthorized if the token would not authenticate, and lets
        RevocationError propagate if the denylist write fails.
        """
        _account, claims = self.validate(token)
        self._denylist.revoke(claims.jti, claims.expires_at)
        logger.info("Token revoked (expires_at=%d)", claims.expires_at)
        return claims

    @staticmethod
    def _refuse(reason: AuthFailureReason) -> None:
        logger.info("Authentication refused: %s", reason.value)
        raise Unauthorized(reason)
