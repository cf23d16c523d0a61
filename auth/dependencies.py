"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

The chain runs before any protected handler:

  get_bearer_token()     -- pulls the token out of "Authorization: Bearer ..."
  get_current_account()  -- hands it to SessionService.authenticate(); 401 on refusal

Handlers declare what they need and FastAPI resolves the chain; nothing is
patched onto the request at runtime. The SessionService lives on
app.state.sessions, put there by the lifespan.

Every refusal produces the same 401 body. The reason was already logged by
SessionService and stays server-side.

Layer rule: no imports from api/ or core/.
  auth/dependencies.py may import from fastapi (for Depends/HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from auth.errors import Unauthorized
from auth.models import Account
from auth.sessions import SessionService, extract_bearer

UNAUTHORIZED_DETAIL = {"code": "unauthorized", "message": "Authentication required."}


def get_sessions(request: Request) -> SessionService:
    return request.app.state.sessions


def get_bearer_token(request: Request) -> str | None:
    """Return the bearer token from the Authorization header, or None."""
    return extract_bearer(request.headers.get("Authorization"))


def get_current_account(
    token: str | None = Depends(get_bearer_token),
    sessions: SessionService = Depends(get_sessions),
) -> Account:
    """Require a valid, unrevoked token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(account: Account = Depends(get_current_account)): ...
    """
    try:
        return sessions.authenticate(token)
    except Unauthorized as exc:
        raise HTTPException(
            status_code=401,
            detail=UNAUTHORIZED_DETAIL,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
