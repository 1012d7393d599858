"""
verify.py
---------
Purpose:
    JWT verification using Supabase JWKS (ES256).

Notes:
    - Fetches JWKS from Supabase and caches keys.
    - Provides `auth_dependency` for protected routes.
    - With the local data backend a development identity is accepted instead
      of a token: the `X-Dev-User` header, falling back to DEV_USER_ID.
"""

from functools import lru_cache

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient

from wsp.config import settings
from wsp.infrastructure.observability.logging import get_logger

SUPABASE_AUDIENCE = "authenticated"
DEV_USER_HEADER = "X-Dev-User"

logger = get_logger(__name__)
_security = HTTPBearer(auto_error=False)


@lru_cache(maxsize=1)
def _jwk_client() -> PyJWKClient:
    return PyJWKClient(settings.jwks_url())


def verify_jwt(token: str) -> dict:
    try:
        signing_key = _jwk_client().get_signing_key_from_jwt(token)
        decoded = jwt.decode(
            token,
            signing_key.key,
            algorithms=["ES256"],
            audience=SUPABASE_AUDIENCE,
            options={"verify_exp": True},
        )
        return decoded
    except (jwt.PyJWTError, RuntimeError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication token: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def _dev_claims(request: Request) -> dict | None:
    user_id = request.headers.get(DEV_USER_HEADER) or settings.DEV_USER_ID
    if not user_id:
        return None
    return {"sub": user_id, "role": SUPABASE_AUDIENCE, "aud": SUPABASE_AUDIENCE, "dev": True}


def auth_dependency(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
) -> dict:
    if credentials is not None:
        return verify_jwt(credentials.credentials)

    if settings.dev_mode:
        claims = _dev_claims(request)
        if claims:
            logger.debug("Using development identity", user_id=claims["sub"])
            return claims

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )
