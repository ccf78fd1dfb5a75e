"""
Role-specific dashboard read models.

Example:
    from ablelink.dashboard import DashboardViewModel

    vm = DashboardViewModel(repository)
    view = await vm.refresh(signed_in_user)
"""

from ablelink.dashboard.viewmodel import (
    DashboardViewModel,
    EndUserView,
    CareTeamView,
    RecipientSummary,
    ActivityEntry,
    AlertEntry,
    humanize_since,
    status_line,
)

__all__ = [
    "DashboardViewModel",
    "EndUserView",
    "CareTeamView",
    "RecipientSummary",
    "ActivityEntry",
    "AlertEntry",
    "humanize_since",
    "status_line",
]
