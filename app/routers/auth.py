"""Admin sign-in / sign-out through Supabase Auth."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from app.db.supabase import create_session_client, get_supabase

logger = logging.getLogger(__name__)

router = APIRouter()

_bearer = HTTPBearer()


class LoginRequest(BaseModel):
    """Admin credentials."""
    email: str
    password: str


class LoginResponse(BaseModel):
    """Session tokens returned on successful sign-in."""
    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None
    token_type: str = "bearer"


def _sign_in(email: str, password: str) -> LoginResponse:
    client = create_session_client()
    result = client.auth.sign_in_with_password({"email": email, "password": password})
    session = result.session
    if session is None:
        raise ValueError("Sign-in returned no session")
    return LoginResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
    )


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest) -> LoginResponse:
    """Exchange admin credentials for a Supabase access token."""
    try:
        return await run_in_threadpool(_sign_in, body.email, body.password)
    except Exception as exc:
        logger.warning("admin_login_failed", extra={"error_message": str(exc)})
        raise HTTPException(status_code=401, detail="Invalid email or password") from exc


@router.post("/logout", status_code=204)
async def logout(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer),
) -> Response:
    """Revoke the caller's session (best-effort)."""
    try:
        await run_in_threadpool(
            get_supabase().auth.admin.sign_out, credentials.credentials
        )
    except Exception as exc:
        logger.warning("admin_logout_failed", extra={"error_message": str(exc)})
    return Response(status_code=204)
