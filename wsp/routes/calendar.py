"""
Fiscal calendar endpoints.

Without an explicit `start_month` the caller's company calendar is used
(April for profiles outside any company).
"""

from datetime import date

from fastapi import APIRouter, Depends, Query

from wsp.auth.verify import auth_dependency
from wsp.core.calendar import calendar_context, fiscal_year_details, fiscal_year_weeks
from wsp.db.client import DataClient, get_data_client
from wsp.db.helpers import DatabaseError
from wsp.infrastructure.observability.logging import get_logger
from wsp.models.api.planner_response import CalendarResponse, WeekSpanResponse, WeeksResponse
from wsp.models.domain.planner_domain import CalendarStartMonth
from wsp.routes.common import raise_http_error, require_user_id
from wsp.services.errors import WSPServiceError
from wsp.services.workspace_service import calendar_for, resolve_actor

logger = get_logger(__name__)

router = APIRouter(prefix="/calendar", tags=["calendar"])


async def _start_month(
    client: DataClient, user_id: str, requested: CalendarStartMonth | None
) -> CalendarStartMonth:
    if requested is not None:
        return requested
    actor, directory = await resolve_actor(client, user_id)
    return calendar_for(directory, actor, date.today()).start_month


@router.get("/fiscal-year", response_model=CalendarResponse)
async def get_fiscal_year(
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
    start_month: CalendarStartMonth | None = Query(None, description="January or April"),
    on: date | None = Query(None, description="Date to resolve (default: today)"),
):
    """Fiscal year and week number containing `on`."""
    user_id = require_user_id(claims)
    try:
        month = await _start_month(client, user_id, start_month)
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "resolve_calendar")

    return CalendarResponse.from_context(calendar_context(on or date.today(), month))


@router.get("/weeks", response_model=WeeksResponse)
async def get_weeks(
    claims: dict = Depends(auth_dependency),
    client: DataClient = Depends(get_data_client),
    start_month: CalendarStartMonth | None = Query(None, description="January or April"),
    on: date | None = Query(None, description="Any date inside the fiscal year"),
):
    """The 52 Monday-Sunday week spans of the fiscal year containing `on`."""
    user_id = require_user_id(claims)
    try:
        month = await _start_month(client, user_id, start_month)
    except (WSPServiceError, DatabaseError) as e:
        raise_http_error(e, user_id, "resolve_calendar")

    fiscal_year = fiscal_year_details(on or date.today(), month)
    return WeeksResponse(
        fiscal_year_label=fiscal_year.label,
        start_month=month,
        weeks=[WeekSpanResponse.from_span(span) for span in fiscal_year_weeks(fiscal_year.start)],
    )
