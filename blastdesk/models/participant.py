from sqlalchemy import Column, String

from blastdesk.core.database import Base
from blastdesk.core.types import generate_uuid


class Participant(Base):
    """Blast recipient"""
    __tablename__ = "participants"

    id = Column(String(64), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True, index=True)
    role = Column(String(255), nullable=True)
    # Plain reference; removing a department leaves its participants in place
    department_id = Column(String(64), nullable=False, index=True)
    pa_email = Column(String(255), nullable=True)  # personal assistant

    def __repr__(self):
        return f"<Participant {self.email}>"
