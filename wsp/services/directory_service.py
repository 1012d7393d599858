"""
Directory reads: profiles and companies.

Every request works from a fresh snapshot of both tables; the access rules
in wsp.core.access are evaluated against that snapshot.
"""

from dataclasses import dataclass

from wsp.db.client import DataClient
from wsp.infrastructure.observability.logging import get_logger
from wsp.models.domain.planner_domain import CalendarStartMonth, Company, Profile
from wsp.services.errors import NotFoundError

logger = get_logger(__name__)


@dataclass
class Directory:
    profiles: list[Profile]
    companies: list[Company]

    def profile(self, profile_id: str | None) -> Profile | None:
        if profile_id is None:
            return None
        return next((p for p in self.profiles if p.id == profile_id), None)

    def company(self, company_id: str | None) -> Company | None:
        if company_id is None:
            return None
        return next((c for c in self.companies if c.id == company_id), None)

    def start_month_for(self, profile: Profile | None) -> CalendarStartMonth | None:
        """Fiscal start month of the profile's company, None when unaffiliated."""
        company = self.company(profile.company_id) if profile else None
        return company.calendar_start_month if company else None


async def load_directory(client: DataClient) -> Directory:
    company_rows = await client.table("companies").select().order("name").execute()
    profile_rows = await client.table("profiles").select().order("name").execute()
    return Directory(
        profiles=[Profile.model_validate(row) for row in profile_rows],
        companies=[Company.model_validate(row) for row in company_rows],
    )


async def get_profile(client: DataClient, profile_id: str) -> Profile | None:
    row = await client.table("profiles").select().eq("id", profile_id).maybe_single()
    return Profile.model_validate(row) if row else None


async def require_profile(client: DataClient, profile_id: str) -> Profile:
    profile = await get_profile(client, profile_id)
    if profile is None:
        logger.info("Profile not found", user_id=profile_id)
        raise NotFoundError("Profile not found", user_id=profile_id)
    return profile
