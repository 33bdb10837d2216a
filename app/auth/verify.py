"""JWT verification for admin routes.

Admins sign in through Supabase Auth; the dashboard sends the access
token as a bearer token.  Tokens are verified against the project's JWKS
(keys fetched and cached by ``PyJWKClient``).  ``auth_dependency`` guards
every dashboard and candidate-management route.
"""

import logging

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient

from app.core.config import settings

logger = logging.getLogger(__name__)

SUPABASE_AUDIENCE = "authenticated"

_jwk_client = PyJWKClient(settings.jwks_url())
_security = HTTPBearer()


def verify_jwt(token: str) -> dict:
    """Decode and verify a Supabase access token, raising 401 on failure."""
    try:
        signing_key = _jwk_client.get_signing_key_from_jwt(token)
        return jwt.decode(
            token,
            signing_key.key,
            algorithms=["ES256", "RS256"],
            audience=SUPABASE_AUDIENCE,
            options={"verify_exp": True},
        )
    except jwt.PyJWTError as exc:
        logger.info("jwt_rejected", extra={"error_message": str(exc)})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication token: {exc}",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def auth_dependency(
    credentials: HTTPAuthorizationCredentials = Depends(_security),
) -> dict:
    return verify_jwt(credentials.credentials)
