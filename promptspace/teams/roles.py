"""Team roles and their ordering.

Every permission check that compares roles goes through ``role_at_least``.
"""

import enum
from typing import Optional


class TeamRole(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


ROLE_HIERARCHY: dict[TeamRole, int] = {
    TeamRole.VIEWER: 0,
    TeamRole.EDITOR: 1,
    TeamRole.ADMIN: 2,
    TeamRole.OWNER: 3,
}


def role_rank(role: Optional[TeamRole | str]) -> int:
    """Rank of ``role``; no role ranks below every real one."""
    if role is None:
        return -1
    return ROLE_HIERARCHY[TeamRole(role)]


def role_at_least(role: Optional[TeamRole | str], min_role: TeamRole | str) -> bool:
    """Check if ``role`` is ``min_role`` or higher."""
    return role_rank(role) >= role_rank(min_role)


def can_manage_members(role: Optional[TeamRole | str]) -> bool:
    return role_at_least(role, TeamRole.ADMIN)
