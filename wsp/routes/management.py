"""
Management endpoints (superadmin only): companies, accounts and the
user-list export.
"""

from fastapi import APIRouter, Depends, Query, Request, Response, status

from wsp.auth.verify import auth_dependency
from wsp.db.client import DataClient, get_data_client
from wsp.db.helpers import DatabaseError
from wsp.infrastructure.observability.logging import get_logger
from wsp.models.api.planner_request import CompanyCreateRequest, ProfileUpdateRequest, UserCreateRequest
from wsp.models.api.planner_response import DeleteUserResponse
from wsp.models.domain.planner_domain import Company, Profile
from wsp.routes.common import raise_http_error, request_id, require_user_id
from wsp.routes.view_state import get_state_store
from wsp.services import management_service
from wsp.services.errors import WSPServiceError
from wsp.services.export_service import user_list_csv, user_list_filename
from wsp.services.view_state_service import StateStore

logger = get_logger(__name__)

router = APIRouter(prefix="/management", tags=["management"])


# =================================================================
# Companies
# =================================================================


@router.get("/companies", response_model=list[Company])
async def list_companies(claims: dict = Depends(auth_dependency), client: DataClient = Depends(get_data_client)):
    user_id = require_user_id(claims)
    try:
        return await management_service.list_companies(client, user_id)
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "list_companies")


@router.post("/companies", response_model=Company, status_code=status.HTTP_201_CREATED)
async def create_company(
    body: CompanyCreateRequest,
    request: Request,
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
):
    user_id = require_user_id(claims)
    try:
        return await management_service.add_company(
            client, user_id, body.name, body.calendar_start_month, request_id=request_id(request)
        )
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "add_company")


@router.delete("/companies/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_company(
    company_id: str,
    request: Request,
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
):
    user_id = require_user_id(claims)
    try:
        await management_service.delete_company(client, user_id, company_id, request_id=request_id(request))
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "delete_company")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =================================================================
# Users
# =================================================================


@router.get("/users", response_model=list[Profile])
async def list_users(claims: dict = Depends(auth_dependency), client: DataClient = Depends(get_data_client)):
    user_id = require_user_id(claims)
    try:
        return await management_service.list_users(client, user_id)
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "list_users")


@router.post("/users", response_model=Profile, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreateRequest,
    request: Request,
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
):
    user_id = require_user_id(claims)
    try:
        return await management_service.create_user(
            client,
            user_id,
            name=body.name,
            email=body.email,
            password=body.password,
            role=body.role,
            company_id=body.company_id,
            request_id=request_id(request),
        )
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "create_user")


@router.patch("/users/{profile_id}", response_model=Profile)
async def update_user(
    profile_id: str,
    body: ProfileUpdateRequest,
    request: Request,
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
):
    user_id = require_user_id(claims)
    try:
        return await management_service.update_profile(
            client,
            user_id,
            profile_id,
            role=body.role,
            company_id=body.company_id,
            clear_company=body.clear_company,
            request_id=request_id(request),
        )
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "update_user")


@router.delete("/users/{profile_id}", response_model=DeleteUserResponse)
async def remove_user(
    profile_id: str,
    request: Request,
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
    viewing_user_id: str | None = Query(None, description="Board currently open in the client"),
    store: StateStore | None = Depends(get_state_store),
):
    user_id = require_user_id(claims)
    try:
        deleted = await management_service.delete_user(
            client,
            user_id,
            profile_id,
            viewing_user_id=viewing_user_id,
            request_id=request_id(request),
            state_store=store,
        )
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "delete_user")

    return DeleteUserResponse(
        deleted_user_id=deleted.user_id, next_viewing_user_id=deleted.next_viewing_user_id
    )


@router.get("/users.csv")
async def export_user_list(claims: dict = Depends(auth_dependency), client: DataClient = Depends(get_data_client)):
    """All non-superadmin accounts grouped by company."""
    user_id = require_user_id(claims)
    try:
        companies = await management_service.list_companies(client, user_id)
        users = await management_service.list_users(client, user_id)
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "export_user_list")

    return Response(
        content=user_list_csv(users, companies),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{user_list_filename()}"'},
    )
