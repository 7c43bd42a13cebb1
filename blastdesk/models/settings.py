from sqlalchemy import Column, String, Text, Integer, DateTime
from datetime import datetime

from blastdesk.core.database import Base
from blastdesk.core.types import GUID


GLOBAL_SETTINGS_ID = 1


class UserSettings(Base):
    """Per-user header and footer wrapped around blast bodies"""
    __tablename__ = "user_settings"

    user_id = Column(GUID, primary_key=True)
    global_header = Column(Text, nullable=False, default="")
    global_footer = Column(Text, nullable=False, default="")
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<UserSettings {self.user_id}>"


class GlobalSettings(Base):
    """Organisation-wide header and footer, a single row with id 1"""
    __tablename__ = "global_settings"

    id = Column(Integer, primary_key=True, default=GLOBAL_SETTINGS_ID)
    global_header = Column(Text, nullable=False, default="")
    global_footer = Column(Text, nullable=False, default="")
    updated_by = Column(String(100), nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return "<GlobalSettings>"
