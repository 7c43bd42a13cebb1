from sqlalchemy import Column, String, Text, Integer

from blastdesk.core.database import Base
from blastdesk.core.types import generate_uuid


class EmailTemplate(Base):
    """Reusable email with optional e-card layout"""
    __tablename__ = "templates"

    id = Column(String(64), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    subject = Column(String(500), nullable=False, default="")
    body = Column(Text, nullable=False, default="")
    category = Column(String(100), nullable=True)

    # E-card layout. Coordinates are pixels from the top-left corner of the backdrop.
    ecard_backdrop_path = Column(String(500), nullable=True)
    name_x = Column(Integer, nullable=True)
    name_y = Column(Integer, nullable=True)
    name_font_size = Column(Integer, nullable=True)
    name_color = Column(String(7), nullable=True)
    role_x = Column(Integer, nullable=True)
    role_y = Column(Integer, nullable=True)
    role_font_size = Column(Integer, nullable=True)
    role_color = Column(String(7), nullable=True)

    def __repr__(self):
        return f"<EmailTemplate {self.name}>"
