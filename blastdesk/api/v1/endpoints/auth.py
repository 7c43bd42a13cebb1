from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime
import re

from blastdesk.core.database import get_db
from blastdesk.core.exceptions import (
    AuthenticationError,
    ConflictError,
    UserNotFoundError,
    ValidationError,
)
from blastdesk.core.logging_config import logger, set_user_id
from blastdesk.core.rate_limiter import limiter, LOGIN_LIMIT, REGISTER_LIMIT
from blastdesk.core.security import create_access_token, get_password_hash, verify_password
from blastdesk.models.user import User, UserRole
from blastdesk.modules.auth.dependencies import get_current_user
from blastdesk.schemas.auth import (
    LoginResponse,
    RegisteredUser,
    UserLogin,
    UserRegister,
    UserResponse,
)
from blastdesk.services.activity_log_service import log_activity

router = APIRouter()

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def build_token(user: User) -> str:
    return create_access_token({
        "sub": str(user.id),
        "username": user.username,
        "role": user.role.value,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
    })


@router.post("/register", response_model=RegisteredUser)
@limiter.limit(REGISTER_LIMIT)
async def register(
    request: Request,
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """Register new user (rate limited: 3/min)"""
    client_ip = request.client.host if request.client else "unknown"

    fields = [
        user_data.username, user_data.password, user_data.email,
        user_data.first_name, user_data.last_name, user_data.confirm_password,
    ]
    if not all(fields):
        raise ValidationError("All fields are required")

    if user_data.password != user_data.confirm_password:
        raise ValidationError("Passwords do not match", field="confirmPassword")

    if not EMAIL_RE.match(user_data.email):
        raise ValidationError("Invalid email format", field="email")

    result = await db.execute(select(User).where(User.username == user_data.username))
    if result.scalar_one_or_none():
        logger.log_auth_event(
            event="register",
            success=False,
            username=user_data.username,
            reason="Username already exists",
            client_ip=client_ip
        )
        raise ConflictError("Username already exists", field="username")

    result = await db.execute(select(User).where(User.email == user_data.email))
    if result.scalar_one_or_none():
        logger.log_auth_event(
            event="register",
            success=False,
            username=user_data.username,
            reason="Email already exists",
            client_ip=client_ip
        )
        raise ConflictError("Email already exists", field="email")

    user = User(
        username=user_data.username,
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        role=UserRole.USER,
    )
    db.add(user)
    log_activity(db, None, "User Registration", f"User {user.username} created")
    await db.flush()

    logger.log_auth_event(
        event="register",
        success=True,
        username=user.username,
        client_ip=client_ip
    )

    return user


@router.post("/login", response_model=LoginResponse)
@limiter.limit(LOGIN_LIMIT)
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Login user (rate limited: 5/min)"""
    client_ip = request.client.host if request.client else "unknown"

    result = await db.execute(select(User).where(User.username == credentials.username))
    user = result.scalar_one_or_none()

    if not user:
        logger.log_auth_event(
            event="login",
            success=False,
            username=credentials.username,
            reason="Unknown username",
            client_ip=client_ip
        )
        raise UserNotFoundError(credentials.username)

    if not verify_password(credentials.password, user.hashed_password):
        logger.log_auth_event(
            event="login",
            success=False,
            username=credentials.username,
            reason="Invalid password",
            client_ip=client_ip
        )
        raise AuthenticationError("Invalid password")

    user.last_login = datetime.utcnow()
    log_activity(db, user.username, "User Login", f"User {user.username} logged in")

    set_user_id(str(user.id))

    logger.log_auth_event(
        event="login",
        success=True,
        username=user.username,
        client_ip=client_ip,
        user_role=user.role.value
    )

    return {
        "auth": True,
        "token": build_token(user),
        "user": UserResponse(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role.value,
            created_at=user.created_at,
            last_login=user.last_login,
        ),
    }


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user info"""
    return UserResponse(
        id=current_user.id,
        username=current_user.username,
        email=current_user.email,
        first_name=current_user.first_name,
        last_name=current_user.last_name,
        role=current_user.role.value,
        created_at=current_user.created_at,
        last_login=current_user.last_login,
    )
