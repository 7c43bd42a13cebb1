from pydantic import Field
from typing import Optional
from datetime import datetime

from blastdesk.schemas.base import CamelModel


class UserRegister(CamelModel):
    # Presence and format are checked by the endpoint so each failure gets its own message
    username: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class UserLogin(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisteredUser(CamelModel):
    id: str
    username: str
    email: str
    first_name: str
    last_name: str


class UserResponse(RegisteredUser):
    role: str
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class LoginResponse(CamelModel):
    auth: bool = True
    token: str
    user: UserResponse