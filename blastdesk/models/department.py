from sqlalchemy import Column, String

from blastdesk.core.database import Base
from blastdesk.core.types import generate_uuid


class Department(Base):
    """Group of participants a blast can be addressed to"""
    __tablename__ = "departments"

    # Dashboard clients may supply their own ids, so this is a free-form string
    id = Column(String(64), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False, index=True)

    def __repr__(self):
        return f"<Department {self.name}>"
