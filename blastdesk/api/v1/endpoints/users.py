from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List

from blastdesk.core.database import get_db
from blastdesk.core.exceptions import UserNotFoundError, ValidationError
from blastdesk.core.logging_config import logger
from blastdesk.models.user import User
from blastdesk.modules.auth.dependencies import get_current_user, get_current_super_admin
from blastdesk.schemas.auth import UserResponse
from blastdesk.services.activity_log_service import log_activity

router = APIRouter()


def to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role.value,
        created_at=user.created_at,
        last_login=user.last_login,
    )


@router.get("", response_model=List[UserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List users (password hashes are never returned)"""
    result = await db.execute(select(User).order_by(User.username))
    return [to_response(user) for user in result.scalars().all()]


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_super_admin)
):
    """Delete a user (SuperAdmin only)"""
    if user_id == current_user.id:
        raise ValidationError("You cannot delete your own account", field="id")

    user = await db.get(User, user_id)
    if not user:
        raise UserNotFoundError(user_id)

    await db.delete(user)
    log_activity(db, current_user.username, "User Deletion", f"User {user.username} deleted")
    logger.info(f"[Users] {current_user.username} deleted user {user.username}")

    return {"deletedID": user_id}
