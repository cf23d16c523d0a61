"""
auth/denylist.py -- Revocation store for logged-out tokens.

A JWT is self-verifying, so the only way to end one before its exp is to
remember its jti and refuse it. This module owns that memory: one row per
revoked jti, carrying the token's original expiry so the row can be dropped
once the token would be rejected by the expiry check anyway.

Concurrency:
  jti is UNIQUE. Two logouts racing on the same token both INSERT; one wins,
  the other hits IntegrityError, which means "already revoked" and is not an
  error. Once revoke() has committed, every later is_revoked() sees the row.

  purge_expired() is a single DELETE bounded by expires_at < now. It can only
  remove rows for tokens that are already expired, so a concurrent
  is_revoked() for a live token is never affected.

Failure policy:
  Any storage failure other than the UNIQUE violation raises RevocationError.
  A swallowed failure here would leave a logged-out token usable until exp.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.errors import RevocationError
from auth.models import RevokedToken
from auth.store import make_engine

logger = logging.getLogger("tokenauth.denylist")

_metadata = MetaData()

_revoked_tokens = Table(
    "revoked_tokens",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("jti", String(64), nullable=False, unique=True, index=True),
    Column("expires_at", Integer, nullable=False, index=True),  # Unix seconds, from the token's exp
    Column("revoked_at", String(32), nullable=False),
)


class DenylistStore:
    """Repository for RevokedToken rows.

    Usage:
        denylist = DenylistStore("sqlite:///tokenauth.db")
        denylist.revoke(claims.jti, claims.expires_at)
        denylist.is_revoked(claims.jti)   # True
        denylist.purge_expired()          # call periodically
    """

    def __init__(self, db_url: str) -> None:
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    def revoke(self, jti: str, expires_at: int) -> bool:
        """Add jti to the denylist. Idempotent.

        Returns True if a row was written, False if the jti was already there.
        Raises RevocationError on any other storage failure.
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(
                    _revoked_tokens.insert().values(
                        jti=jti,
                        expires_at=int(expires_at),
                        revoked_at=datetime.now(timezone.utc).isoformat(),
                    )
                )
                conn.commit()
        except IntegrityError:
            logger.debug("jti already revoked")
            return False
        except SQLAlchemyError as exc:
            logger.error("Failed to record token revocation: %s", exc.__class__.__name__)
            raise RevocationError(jti) from exc
        return True

    def is_revoked(self, jti: str) -> bool:
        with self.engine.connect() as conn:
            row = conn.execute(select(_revoked_tokens.c.id).where(_revoked_tokens.c.jti == jti)).fetchone()
        return row is not None

    def get(self, jti: str) -> RevokedToken | None:
        with self.engine.connect() as conn:
            row = conn.execute(_revoked_tokens.select().where(_revoked_tokens.c.jti == jti)).fetchone()
        return _row_to_revoked(row) if row is not None else None

    def purge_expired(self, now: datetime | None = None) -> int:
        """Delete rows whose token has already expired. Returns number of rows removed."""
        cutoff = int((now or datetime.now(timezone.utc)).timestamp())
        with self.engine.connect() as conn:
            result = conn.execute(_revoked_tokens.delete().where(_revoked_tokens.c.expires_at < cutoff))
            conn.commit()
        if result.rowcount:
            logger.info("Purged %d expired denylist entries", result.rowcount)
        return result.rowcount

    def count(self) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_revoked_tokens)).scalar()
        return result or 0

    def close(self) -> None:
        self.engine.dispose()


def _row_to_revoked(row) -> RevokedToken:
    return RevokedToken(
        id=row.id,
        jti=row.jti,
        expires_at=row.expires_at,
        revoked_at=row.revoked_at,
    )
