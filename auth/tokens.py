"""
auth/tokens.py -- JWT issuance and decoding.

Security design decisions:
  JWT: python-jose, HS256 by default. Each token carries sub (the account
       identifier), jti (random, 128 bits by default), iat and exp as integer
       Unix seconds, and is signed with SECRET_KEY.

  decode() is the cryptographic check only. It does not look at exp and does
       not consult the denylist -- SessionService applies those rules, because
       which rules apply depends on the operation.

  Failures are split in two so callers can log the right reason:
       MalformedToken   -- not a JWT, or claims missing / wrongly typed
       InvalidSignature -- parses fine but does not verify against the key
       Both end up as the same 401 at the HTTP layer.

The codec is constructed with its key and lifetime rather than reading
settings at import time, so tests can build codecs with different keys and
clocks side by side.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import secrets
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import jwt
from jose.exceptions import JWTClaimsError, JWTError

from auth.errors import InvalidSignature, MalformedToken
from auth.models import Account, Claims, IssuedToken

_REQUIRED_CLAIMS = ("sub", "jti", "iat", "exp")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenCodec:
    """Encode and decode signed, self-contained access tokens.

    Args:
        secret_key:       HMAC signing key. Never logged.
        lifetime_seconds: Seconds between iat and exp.
        algorithm:        JWS algorithm; only this one is accepted on decode.
        jti_bytes:        Random bytes per jti (hex-encoded, so 2x characters).
        clock:            Returns the current aware datetime. Injected in tests.
    """

    def __init__(
        self,
        secret_key: str,
        lifetime_seconds: int,
        algorithm: str = "HS256",
        jti_bytes: int = 16,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._secret_key = secret_key
        self._lifetime = timedelta(seconds=lifetime_seconds)
        self._algorithm = algorithm
        self._jti_bytes = jti_bytes
        self._clock = clock

    @property
    def lifetime_seconds(self) -> int:
        return int(self._lifetime.total_seconds())

    def issue(self, account: Account) -> IssuedToken:
        """Mint a new token for account with a fresh jti."""
        now = self._clock()
        claims = Claims(
            subject=account.identifier,
            jti=secrets.token_hex(self._jti_bytes),
            issued_at=int(now.timestamp()),
            expires_at=int((now + self._lifetime).timestamp()),
        )
        payload = {
            "sub": claims.subject,
            "jti": claims.jti,
            "iat": claims.issued_at,
            "exp": claims.expires_at,
        }
        token = jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
        return IssuedToken(token=token, claims=claims)

    def decode(self, token: str) -> Claims:
        """Verify the signature and return the claims.

        Raises MalformedToken or InvalidSignature. Expiry is not checked here.
        """
        try:
            jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise MalformedToken(str(exc)) from exc

        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTClaimsError as exc:
            raise MalformedToken(str(exc)) from exc
        except JWTError as exc:
            raise InvalidSignature(str(exc)) from exc

        return _claims_from_payload(payload)


def _claims_from_payload(payload: dict) -> Claims:
    missing = [name for name in _REQUIRED_CLAIMS if name not in payload]
    if missing:
        raise MalformedToken(f"missing claims: {', '.join(missing)}")
    sub, jti, iat, exp = (payload[name] for name in _REQUIRED_CLAIMS)
    if not isinstance(sub, str) or not isinstance(jti, str) or not sub or not jti:
        raise MalformedToken("sub and jti must be non-empty strings")
    # bool is an int subclass; a JSON true is not a timestamp.
    if any(isinstance(v, bool) or not isinstance(v, int) for v in (iat, exp)):
        raise MalformedToken("iat and exp must be integer timestamps")
    return Claims(subject=sub, jti=jti, issued_at=iat, expires_at=exp)
