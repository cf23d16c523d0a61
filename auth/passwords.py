"""
auth/passwords.py -- Password hashing and the credential verifier.

Passwords: bcrypt used directly (no passlib wrapper). passlib's wrap-bug
detection builds a password longer than 72 bytes, which bcrypt 4.x rejects,
so the direct API is simpler and has no compatibility shim. The cost factor
and salt live inside the hash string, so verification always uses the
parameters the hash was created with.

Timing equalization: CredentialVerifier computes a dummy hash once at
construction and runs bcrypt against it when the identifier is unknown.
"No such account" and "wrong password" then cost the same and return the
same None, so response time does not reveal which identifiers exist.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging

import bcrypt

from auth.errors import PasswordTooLong
from auth.models import Account
from auth.store import AccountStore

logger = logging.getLogger("tokenauth.passwords")

_DEFAULT_ROUNDS = 12

# bcrypt only reads the first 72 bytes; bcrypt 5 refuses anything longer.
MAX_PASSWORD_BYTES = 72


def password_too_long(plain: str) -> bool:
    return len(plain.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(plain: str, rounds: int = _DEFAULT_ROUNDS) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    The limit is in UTF-8 bytes, not characters: 72 accented characters
    are 144 bytes. Raises PasswordTooLong rather than truncating.
    """
    if password_too_long(plain):
        raise PasswordTooLong(MAX_PASSWORD_BYTES)
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    bcrypt.checkpw compares in constant time. A password over the byte limit
    can never have been hashed, so it is a mismatch. A corrupt stored hash
    raises ValueError inside bcrypt and is treated as a mismatch too.
    """
    if password_too_long(plain):
        logger.info("Presented password exceeds %d bytes", MAX_PASSWORD_BYTES)
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash could not be parsed")
        return False


class CredentialVerifier:
    """Check an identifier/secret pair against stored password hashes."""

    def __init__(self, store: AccountStore, rounds: int = _DEFAULT_ROUNDS) -> None:
        self._store = store
        self._rounds = rounds
        self._dummy_hash = hash_password("tokenauth_timing_dummy", rounds)

    def hash_secret(self, secret: str) -> str:
        return hash_password(secret, self._rounds)

    def verify(self, identifier: str, secret: str) -> Account | None:
        """Return the Account on success, None on any failure.

        Always runs bcrypt, whether or not the identifier exists. Do not add
        an early return before the verify_password() call.
        """
        account = self._store.get_by_identifier(identifier)
        if account is None:
            verify_password(secret, self._dummy_hash)
            return None
        if not verify_password(secret, account.hashed_password):
            return None
        return account
