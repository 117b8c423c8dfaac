"""CRUD operations for teams and team members.

Membership rows are only written through ``MembershipDirectory``.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from promptspace.core import messages
from promptspace.core.config import settings
from promptspace.core.database import atomic
from promptspace.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    conflict_from_integrity,
    parse_payload,
)
from .models import Team, TeamMember
from .roles import TeamRole, can_manage_members, role_at_least
from .schemas import MemberRoleUpdate, TeamCreate, TeamUpdate


logger = logging.getLogger("promptspace.teams.crud")


def _parse_role(role: TeamRole | str) -> TeamRole:
    return parse_payload(MemberRoleUpdate, {"role": role}).role


class TeamCRUD:
    """CRUD operations for teams."""

    @staticmethod
    def get_by_id(db: Session, team_id: uuid.UUID) -> Optional[Team]:
        """Get active team by ID."""
        return (
            db.query(Team)
            .filter(
                Team.id == team_id,
                Team.is_active.is_(True),
            )
            .first()
        )

    @staticmethod
    def get_or_404(db: Session, team_id: uuid.UUID) -> Team:
        team = TeamCRUD.get_by_id(db, team_id)
        if not team:
            raise NotFoundError(messages.TEAM_NOT_FOUND)
        return team

    @staticmethod
    def list_for_user(db: Session, user_id: uuid.UUID) -> List[Team]:
        """Get all teams where user is an active member."""
        return (
            db.query(Team)
            .join(TeamMember, TeamMember.team_id == Team.id)
            .filter(
                TeamMember.user_id == user_id,
                TeamMember.is_active.is_(True),
                Team.is_active.is_(True),
            )
            .order_by(Team.created_at.desc())
            .all()
        )

    @staticmethod
    def create(db: Session, owner_id: uuid.UUID, payload) -> Team:
        """Create a new team; the creator becomes its owner."""
        data = parse_payload(TeamCreate, payload)

        with atomic(db):
            team = Team(
                name=data.name,
                description=(data.description or "").strip(),
                owner_id=owner_id,
            )
            db.add(team)
            db.flush()
            MembershipDirectory._add_member(db, team.id, owner_id, TeamRole.OWNER)

        db.refresh(team)
        logger.info("Team created: team_id=%s, owner_id=%s", team.id, owner_id)
        return team

    @staticmethod
    def update(db: Session, team_id: uuid.UUID, executor_id: uuid.UUID, payload) -> Team:
        """Update team (requires admin or owner role)."""
        data = parse_payload(TeamUpdate, payload)
        team = TeamCRUD.get_or_404(db, team_id)
        MembershipDirectory.require_role(db, team_id, executor_id, TeamRole.ADMIN)

        with atomic(db):
            if data.name is not None:
                team.name = data.name
            if "description" in data.model_fields_set:
                team.description = (data.description or "").strip()
            db.add(team)

        db.refresh(team)
        return team

    @staticmethod
    def delete(db: Session, team_id: uuid.UUID, executor_id: uuid.UUID) -> None:
        """Soft delete team and deactivate every membership (owner only)."""
        team = TeamCRUD.get_or_404(db, team_id)
        if team.owner_id != executor_id:
            logger.warning(
                "User %s attempted to delete team %s owned by %s",
                executor_id,
                team_id,
                team.owner_id,
            )
            raise ForbiddenError(messages.TEAM_DELETE_OWNER_ONLY)

        with atomic(db):
            team.soft_delete(executor_id)
            db.add(team)
            for membership in MembershipDirectory.members(db, team_id):
                membership.soft_delete(executor_id)
                db.add(membership)

        logger.info("Team deleted: team_id=%s, deleted_by=%s", team_id, executor_id)


class MembershipDirectory:
    """Source of truth for (team, user) role pairs."""

    @staticmethod
    def get_membership(
        db: Session,
        team_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Optional[TeamMember]:
        """Get user's active membership in a team."""
        return (
            db.query(TeamMember)
            .filter(
                TeamMember.team_id == team_id,
                TeamMember.user_id == user_id,
                TeamMember.is_active.is_(True),
            )
            .first()
        )

    @staticmethod
    def role_of(db: Session, team_id: uuid.UUID, user_id: uuid.UUID) -> Optional[TeamRole]:
        """Active role of the user in the team, or None."""
        membership = MembershipDirectory.get_membership(db, team_id, user_id)
        return membership.team_role if membership else None

    @staticmethod
    def members(db: Session, team_id: uuid.UUID) -> List[TeamMember]:
        """Get all active members of a team."""
        return (
            db.query(TeamMember)
            .filter(
                TeamMember.team_id == team_id,
                TeamMember.is_active.is_(True),
            )
            .order_by(TeamMember.joined_at)
            .all()
        )

    @staticmethod
    def team_ids_for(db: Session, user_id: uuid.UUID) -> List[uuid.UUID]:
        """IDs of every team the user actively belongs to."""
        rows = (
            db.query(TeamMember.team_id)
            .filter(
                TeamMember.user_id == user_id,
                TeamMember.is_active.is_(True),
            )
            .all()
        )
        return [row.team_id for row in rows]

    @staticmethod
    def require_role(
        db: Session,
        team_id: uuid.UUID,
        user_id: uuid.UUID,
        min_role: TeamRole = TeamRole.VIEWER,
    ) -> TeamMember:
        """Ensure user is an active member of the team with required role."""
        membership = MembershipDirectory.get_membership(db, team_id, user_id)
        if not membership:
            logger.warning(
                "User %s attempted to access team %s without membership",
                user_id,
                team_id,
            )
            raise ForbiddenError(messages.TEAM_ACCESS_DENIED)

        if not role_at_least(membership.role, min_role):
            logger.warning(
                "User %s (role: %s) attempted an action in team %s requiring %s",
                user_id,
                membership.role,
                team_id,
                min_role.value,
            )
            raise ForbiddenError(messages.TEAM_INSUFFICIENT_PERMISSIONS)

        return membership

    @staticmethod
    def _add_member(
        db: Session,
        team_id: uuid.UUID,
        user_id: uuid.UUID,
        role: TeamRole,
        invited_by: Optional[uuid.UUID] = None,
    ) -> TeamMember:
        if MembershipDirectory.get_membership(db, team_id, user_id):
            raise ConflictError(messages.MEMBER_ALREADY_EXISTS)

        membership = TeamMember(
            team_id=team_id,
            user_id=user_id,
            role=role.value,
            invited_by=invited_by,
        )
        db.add(membership)
        try:
            db.flush()
        except IntegrityError as exc:
            raise conflict_from_integrity(exc, messages.MEMBER_ALREADY_EXISTS)
        return membership

    @staticmethod
    def register(
        db: Session,
        team_id: uuid.UUID,
        user_id: uuid.UUID,
        role: TeamRole | str,
        invited_by: Optional[uuid.UUID] = None,
    ) -> TeamMember:
        """Create an active membership; CONFLICT if one already exists."""
        team_role = _parse_role(role)
        TeamCRUD.get_or_404(db, team_id)

        with atomic(db):
            membership = MembershipDirectory._add_member(
                db, team_id, user_id, team_role, invited_by=invited_by
            )

        db.refresh(membership)
        logger.info(
            "Member registered: team_id=%s, user_id=%s, role=%s",
            team_id,
            user_id,
            team_role.value,
        )
        return membership

    @staticmethod
    def invite(
        db: Session,
        team_id: uuid.UUID,
        executor_id: uuid.UUID,
        user_id: uuid.UUID,
        role: TeamRole | str = TeamRole.VIEWER,
    ) -> TeamMember:
        """Add a user to a team (requires admin or owner role)."""
        team_role = _parse_role(role)
        TeamCRUD.get_or_404(db, team_id)
        executor = MembershipDirectory.require_role(db, team_id, executor_id, TeamRole.ADMIN)
        if team_role is TeamRole.OWNER and executor.team_role is not TeamRole.OWNER:
            raise ForbiddenError(messages.MEMBER_ONLY_OWNER_ASSIGNS_OWNER)
        return MembershipDirectory.register(db, team_id, user_id, team_role, invited_by=executor_id)

    @staticmethod
    def set_role(
        db: Session,
        team_id: uuid.UUID,
        executor_id: uuid.UUID,
        target_id: uuid.UUID,
        new_role: TeamRole | str,
    ) -> TeamMember:
        """Change a member's role (requires admin or owner role)."""
        team_role = _parse_role(new_role)

        executor = MembershipDirectory.get_membership(db, team_id, executor_id)
        if not executor or not can_manage_members(executor.role):
            raise ForbiddenError(messages.TEAM_INSUFFICIENT_PERMISSIONS)

        target = MembershipDirectory.get_membership(db, team_id, target_id)
        if not target:
            raise NotFoundError(messages.MEMBER_NOT_FOUND)

        if target.team_role is TeamRole.OWNER and team_role is not TeamRole.OWNER:
            raise ForbiddenError(messages.MEMBER_CANNOT_CHANGE_OWNER_ROLE)

        if team_role is TeamRole.OWNER and executor.team_role is not TeamRole.OWNER:
            raise ForbiddenError(messages.MEMBER_ONLY_OWNER_ASSIGNS_OWNER)

        with atomic(db):
            target.role = team_role.value
            db.add(target)

        db.refresh(target)
        logger.info(
            "Member role updated: team_id=%s, user_id=%s, role=%s, by=%s",
            team_id,
            target_id,
            team_role.value,
            executor_id,
        )
        return target

    @staticmethod
    def deactivate(
        db: Session,
        team_id: uuid.UUID,
        executor_id: uuid.UUID,
        target_id: uuid.UUID,
    ) -> TeamMember:
        """Remove a member, or leave the team when executor is the target."""
        executor = MembershipDirectory.get_membership(db, team_id, executor_id)
        if not executor:
            raise NotFoundError(messages.TEAM_NOT_FOUND)

        target = MembershipDirectory.get_membership(db, team_id, target_id)
        if not target:
            raise NotFoundError(messages.MEMBER_NOT_FOUND)

        leaving = executor_id == target_id
        other_owners: List[TeamMember] = []

        if leaving:
            if target.team_role is TeamRole.OWNER:
                other_owners = [
                    m for m in MembershipDirectory.members(db, team_id)
                    if m.team_role is TeamRole.OWNER and m.user_id != target_id
                ]
                if not other_owners and not settings.ALLOW_OWNER_SELF_DEPARTURE:
                    raise ForbiddenError(messages.MEMBER_LAST_OWNER_CANNOT_LEAVE)
                if not other_owners:
                    logger.warning(
                        "Last owner %s left team %s; team has no active owner",
                        target_id,
                        team_id,
                    )
        else:
            if not can_manage_members(executor.role):
                raise ForbiddenError(messages.TEAM_INSUFFICIENT_PERMISSIONS)
            if target.team_role is TeamRole.OWNER:
                raise ForbiddenError(messages.MEMBER_CANNOT_REMOVE_OWNER)

        with atomic(db):
            target.soft_delete(executor_id)
            db.add(target)
            if other_owners:
                team = TeamCRUD.get_by_id(db, team_id)
                if team and team.owner_id == target_id:
                    team.owner_id = other_owners[0].user_id
                    db.add(team)

        logger.info(
            "Member deactivated: team_id=%s, user_id=%s, by=%s",
            team_id,
            target_id,
            executor_id,
        )
        return target
