"""
api/routes/v1/auth.py -- Account and session REST endpoints.

Routes:
  POST   /api/v1/auth/signup   -- create account; token in Authorization header
  POST   /api/v1/auth/login    -- password login; token in Authorization header
  DELETE /api/v1/auth/logout   -- revoke the presented token
  GET    /api/v1/auth/me       -- current account (requires auth)

Security:
  Same generic 401 for unknown email and wrong password; SessionService
  logs the real reason.
  Cache-Control: no-store on every response that issues or revokes a token.
  Handlers are sync so bcrypt and SQLite calls run in the thread pool, not on
  the event loop.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from api.models import AccountResponse, CredentialsRequest, MessageResponse, SessionResponse
from auth.dependencies import UNAUTHORIZED_DETAIL, get_bearer_token, get_current_account, get_sessions
from auth.errors import DuplicateIdentifier, PasswordTooLong, RevocationError, Unauthorized
from auth.models import Account, IssuedToken
from auth.sessions import SessionService

logger = logging.getLogger("tokenauth.api.auth")

# Auth policy:
# - POST   /api/v1/auth/signup:  public
# - POST   /api/v1/auth/login:   public
# - DELETE /api/v1/auth/logout:  requires a valid token, checked in the handler so
#                                the failure message can differ from a plain 401
# - GET    /api/v1/auth/me:      requires auth (get_current_account)
router = APIRouter()


def _session_response(status_code: int, message: str, account: Account, issued: IssuedToken) -> JSONResponse:
    resp = JSONResponse(
        status_code=status_code,
        content=SessionResponse(message=message, data=AccountResponse.from_account(account)).model_dump(),
    )
    resp.headers["Authorization"] = f"Bearer {issued.token}"
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/signup", response_model=SessionResponse, status_code=201)
def signup(body: CredentialsRequest, sessions: SessionService = Depends(get_sessions)) -> JSONResponse:
    """Register a new account and sign it in."""
    try:
        account, issued = sessions.register(body.email, body.password)
    except DuplicateIdentifier as exc:
        raise HTTPException(
            status_code=409,
            detail={"code": "conflict", "message": "An account with that email already exists."},
        ) from exc
    except PasswordTooLong as exc:
        raise HTTPException(
            status_code=422,
            detail={"code": "validation_error", "message": str(exc)},
        ) from exc
    return _session_response(201, "Signed up successfully.", account, issued)


@router.post("/auth/login", response_model=SessionResponse)
def login(body: CredentialsRequest, sessions: SessionService = Depends(get_sessions)) -> JSONResponse:
    """Authenticate with email and password; return a fresh token.

    Wrong email and wrong password produce the same 401.
    """
    try:
        account, issued = sessions.login(body.email, body.password)
    except Unauthorized as exc:
        raise HTTPException(
            status_code=401,
            detail=UNAUTHORIZED_DETAIL,
            headers={"WWW-Authenticate": "Bearer", "Cache-Control": "no-store"},
        ) from exc
    return _session_response(200, "Logged in successfully.", account, issued)


@router.delete("/auth/logout", response_model=MessageResponse)
def logout(
    token: str | None = Depends(get_bearer_token),
    sessions: SessionService = Depends(get_sessions),
) -> JSONResponse:
    """Revoke the presented token until its natural expiry.

    The token must still be valid. Without one there is nothing to revoke and
    the client gets a distinct "no active session" error.
    """
    try:
        sessions.logout(token)
    except Unauthorized as exc:
        raise HTTPException(
            status_code=401,
            detail={"code": "no_active_session", "message": "Couldn't find an active session."},
        ) from exc
    except RevocationError as exc:
        logger.error("Logout failed: token could not be revoked")
        raise HTTPException(
            status_code=503,
            detail={"code": "revocation_failed", "message": "Logout could not be completed. Try again."},
        ) from exc
    resp = JSONResponse(content=MessageResponse(message="Logged out successfully.").model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/auth/me", response_model=AccountResponse)
def me(current_account: Account = Depends(get_current_account)) -> AccountResponse:
    """Return the account the presented token belongs to."""
    return AccountResponse.from_account(current_account)
