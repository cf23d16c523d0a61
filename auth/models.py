"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores, the codec and
the session service do the work; these only own the shape.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Account:
    """A registered identity.

    identifier is the login name (an email address in practice) and is unique
    at the storage layer. It is also the JWT subject, so tokens resolve back
    to an account without carrying the numeric id.
    """

    identifier: str
    hashed_password: str
    id: int | None = None
    created_at: str | None = None  # ISO 8601, set by store on insert


@dataclass(frozen=True)
class Claims:
    """Decoded token claims. Times are integer Unix seconds."""

    subject: str
    jti: str
    issued_at: int
    expires_at: int


@dataclass(frozen=True)
class IssuedToken:
    """A freshly minted token: the opaque string plus the claims it carries."""

    token: str
    claims: Claims


@dataclass
class RevokedToken:
    """A denylist row.

    expires_at is copied from the token so the row can be purged once the
    token would have expired anyway.
    """

    jti: str
    expires_at: int
    id: int | None = None
    revoked_at: str | None = None
