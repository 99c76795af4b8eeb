"""User lookups. Identities are provisioned elsewhere, so this side only reads."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User


class UserRepository:
    """Read access to the users table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Any user, active or not (owner lookups for projections)."""
        return await self.session.get(User, user_id)

    async def get_active(self, user_id: UUID) -> Optional[User]:
        """The user a bearer token resolves to, None when unknown or deactivated."""
        stmt = select(User).where(User.id == user_id, User.is_active.is_(True))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
