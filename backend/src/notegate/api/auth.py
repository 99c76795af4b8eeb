"""Identity endpoints. Tokens are issued elsewhere; these only read or revoke them."""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.policy import Requester
from ..core.repositories.user_repository import UserRepository
from ..core.schemas.auth import UserResponse
from ..database import get_db_session
from ..middleware.auth import get_current_requester
from ..security import blacklist_token

router = APIRouter(prefix="/auth", tags=["authentication"])

_bearer = HTTPBearer(auto_error=False)


@router.get("/me", response_model=UserResponse)
async def get_current_user(
    requester: Requester = Depends(get_current_requester),
    session: AsyncSession = Depends(get_db_session),
):
    """Get the user behind the bearer token."""
    user = await UserRepository(session).get_by_id(requester.user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.model_validate(user)


@router.post("/logout", status_code=status.HTTP_200_OK)
async def logout(
    requester: Requester = Depends(get_current_requester),
    credentials: HTTPAuthorizationCredentials = Depends(_bearer),
):
    """Revoke the presented access token."""
    if credentials and await blacklist_token(credentials.credentials):
        return {"message": "Logged out successfully"}
    return {"message": "Token could not be revoked"}
