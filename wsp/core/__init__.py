"""
Pure planner logic: fiscal calendar, access rules and multi-step writes.
"""

from wsp.core.access import (
    Permissions,
    can_view_profile,
    compute_permissions,
    default_viewing_profile,
    viewable_profiles,
)
from wsp.core.calendar import (
    TOTAL_WEEKS,
    calendar_context,
    fiscal_year_details,
    fiscal_year_start,
    week_number,
)
from wsp.core.pending import MutationState, PendingMutation

__all__ = [
    "TOTAL_WEEKS",
    "MutationState",
    "PendingMutation",
    "Permissions",
    "calendar_context",
    "can_view_profile",
    "compute_permissions",
    "default_viewing_profile",
    "fiscal_year_details",
    "fiscal_year_start",
    "viewable_profiles",
    "week_number",
]
