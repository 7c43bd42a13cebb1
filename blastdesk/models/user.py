from sqlalchemy import Column, String, DateTime, Enum as SQLEnum
from datetime import datetime
import enum

from blastdesk.core.database import Base
from blastdesk.core.types import GUID, generate_uuid


class UserRole(str, enum.Enum):
    """User roles"""
    USER = "User"
    SUPER_ADMIN = "SuperAdmin"


class User(Base):
    """Dashboard account"""
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)

    role = Column(SQLEnum(UserRole), default=UserRole.USER, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_login = Column(DateTime, nullable=True)

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN

    def __repr__(self):
        return f"<User {self.username}>"
