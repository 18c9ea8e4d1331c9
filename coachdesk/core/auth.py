# coachdesk/core/auth.py
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from coachdesk.database import get_db
from coachdesk.models.user import User
from coachdesk.core.policy import Action, is_allowed
from coachdesk.core.security import ACCESS_TOKEN_TYPE, decode_token

reusable_oauth2 = HTTPBearer()


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: HTTPAuthorizationCredentials = Depends(reusable_oauth2)
):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(token.credentials)
        user_id = payload.get("sub")
        if user_id is None or payload.get("type") != ACCESS_TOKEN_TYPE:
            raise credentials_exception
        user_id = int(user_id)
    except (JWTError, ValueError):
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise credentials_exception
    return user


async def get_current_admin(
    current_user = Depends(get_current_user)
):
    if not is_allowed(current_user, Action.ADMINISTER):
        raise HTTPException(403, "Admin access required")
    return current_user


def ensure_allowed(actor, action: Action, target=None) -> None:
    if not is_allowed(actor, action, target):
        raise HTTPException(403, "You do not have permission to perform this action")
