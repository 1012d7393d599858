"""
protected.py
------------
Purpose:
    `/me`: the caller's planner profile plus the JWT metadata it was
    resolved from.

Usage:
    Call `/me` with:
        Authorization: Bearer <access_token>
    where <access_token> is from Supabase Auth sign-in. With the local
    backend the `X-Dev-User` header selects a seeded profile instead.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from wsp.auth.verify import auth_dependency
from wsp.db.client import DataClient, get_data_client
from wsp.db.helpers import DatabaseError
from wsp.infrastructure.observability.logging import get_logger
from wsp.models.api.planner_response import AuthMeta, MeResponse
from wsp.routes.common import raise_http_error, require_user_id
from wsp.services.directory_service import get_profile

router = APIRouter()
logger = get_logger(__name__)


@router.get("/me", response_model=MeResponse)
async def me(claims: dict = Depends(auth_dependency), client: DataClient = Depends(get_data_client)):
    user_id = require_user_id(claims)

    try:
        profile = await get_profile(client, user_id)
    except DatabaseError as e:
        raise_http_error(e, user_id, "load_profile")

    if not profile:
        logger.warning("Authenticated identity has no profile", user_id=user_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User profile not found")

    auth = AuthMeta(
        user_id=user_id,
        email=claims.get("email"),
        role=claims.get("role", "authenticated"),
        aud=claims.get("aud"),
        iat=claims.get("iat"),
        exp=claims.get("exp"),
    )
    return MeResponse(profile=profile, auth=auth)
