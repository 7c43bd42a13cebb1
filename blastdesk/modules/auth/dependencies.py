from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from blastdesk.core.database import get_db
from blastdesk.core.exceptions import AuthenticationError, AuthorizationError, InvalidTokenError
from blastdesk.core.logging_config import set_user_id
from blastdesk.core.security import decode_token
from blastdesk.models.user import User

# auto_error=False so a missing header is answered with our own 401 body
security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    if not credentials:
        raise AuthenticationError("Not authenticated")

    payload = decode_token(credentials.credentials)

    if payload.get("type") != "access":
        raise InvalidTokenError("Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise InvalidTokenError("Invalid token payload")

    user = await db.get(User, str(user_id))
    if not user:
        raise InvalidTokenError("User not found")

    request.state.user_id = user.id
    set_user_id(user.id)
    return user


async def get_current_super_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Get current user, requiring the SuperAdmin role"""
    if not current_user.is_super_admin:
        raise AuthorizationError("Forbidden: Only Super Admins can perform this action.")
    return current_user
