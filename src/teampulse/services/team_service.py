"""Teams and their memberships."""

from __future__ import annotations

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teampulse.errors import ConflictError, NotFoundError
from teampulse.models import Team, TeamMember, TeamRole, User
from teampulse.services.pagination import Page, PageParams, paginate


class TeamService:
    """Teams and their memberships."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, team_id: UUID) -> Team:
        result = await self.session.execute(
            select(Team).where(Team.id == team_id).execution_options(populate_existing=True)
        )
        team = result.scalar_one_or_none()
        if team is None:
            raise NotFoundError("Team not found")
        return team

    async def _require_user(self, user_id: UUID) -> User:
        user = await self.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def create(self, name: str, member_ids: Sequence[UUID] | None = None) -> Team:
        team = Team(name=name)
        self.session.add(team)
        await self.session.flush()
        for user_id in dict.fromkeys(member_ids or []):
            await self._require_user(user_id)
            self.session.add(TeamMember(team_id=team.id, user_id=user_id, role=TeamRole.MEMBER.value))
        await self.session.flush()
        return await self.get(team.id)

    async def list(self, params: PageParams) -> Page[Team]:
        return await paginate(self.session, select(Team), params, Team.name, Team.id)

    async def update(self, team_id: UUID, name: str) -> Team:
        team = await self.get(team_id)
        team.name = name
        await self.session.flush()
        return team

    async def add_member(self, team_id: UUID, user_id: UUID, role: TeamRole = TeamRole.MEMBER) -> TeamMember:
        team = await self.get(team_id)
        await self._require_user(user_id)
        if any(member.user_id == user_id for member in team.members):
            raise ConflictError("User is already a member of this team")

        member = TeamMember(team_id=team.id, user_id=user_id, role=TeamRole(role).value)
        self.session.add(member)
        await self.session.flush()
        await self.session.refresh(member, ["user"])
        return member

    async def remove_member(self, team_id: UUID, user_id: UUID) -> None:
        member = await self.session.scalar(
            select(TeamMember).where(TeamMember.team_id == team_id, TeamMember.user_id == user_id)
        )
        if member is None:
            raise NotFoundError("Member not found in team")
        await self.session.delete(member)
        await self.session.flush()

    async def delete(self, team_id: UUID) -> None:
        team = await self.get(team_id)
        await self.session.delete(team)
        await self.session.flush()
