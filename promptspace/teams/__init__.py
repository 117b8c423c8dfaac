"""Teams and the membership directory."""

from .models import Team, TeamMember
from .roles import TeamRole, role_at_least, role_rank
from .schemas import TeamCreate, TeamUpdate, MemberRoleUpdate
from .crud import TeamCRUD, MembershipDirectory

__all__ = [
    "Team",
    "TeamMember",
    "TeamRole",
    "role_at_least",
    "role_rank",
    "TeamCreate",
    "TeamUpdate",
    "MemberRoleUpdate",
    "TeamCRUD",
    "MembershipDirectory",
]
