"""Authentication middleware - turns a bearer token into a Requester."""

from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.logging import get_logger
from ..core.policy import Requester
from ..core.repositories.user_repository import UserRepository
from ..database import get_db_session
from ..security import get_user_id_from_token

logger = get_logger("auth")


class JWTBearer(HTTPBearer):
    """JWT Bearer token authentication.

    With ``auto_error=False`` a missing (or non-Bearer) Authorization header
    yields ``None`` so anonymous callers can reach public notes and share
    links. A bearer token that does not verify is always rejected.
    """

    def __init__(self, auto_error: bool = True):
        super(JWTBearer, self).__init__(auto_error=False)
        self.required = auto_error

    async def __call__(self, request: Request) -> Optional[UUID]:
        credentials: Optional[HTTPAuthorizationCredentials] = await super().__call__(request)
        if not credentials:
            if self.required:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Not authenticated"
                )
            return None

        user_id = await get_user_id_from_token(credentials.credentials)
        if not user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid token or expired token"
            )

        return user_id


async def _load_requester(session: AsyncSession, user_id: UUID) -> Requester:
    user = await UserRepository(session).get_active(user_id)
    if not user:
        logger.warning(f"Token for unknown or inactive user {user_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid token or expired token"
        )
    return Requester(user_id=user.id, is_admin=user.is_admin)


async def get_current_requester(
    user_id: UUID = Depends(JWTBearer()),
    session: AsyncSession = Depends(get_db_session),
) -> Requester:
    """Authenticated caller, resolved against the users table."""
    return await _load_requester(session, user_id)


async def get_optional_requester(
    user_id: Optional[UUID] = Depends(JWTBearer(auto_error=False)),
    session: AsyncSession = Depends(get_db_session),
) -> Optional[Requester]:
    """Caller if a bearer token was sent, otherwise None (anonymous)."""
    if user_id is None:
        return None
    return await _load_requester(session, user_id)
