from sqlalchemy import Column, String, DateTime
from datetime import datetime

from blastdesk.core.database import Base


class UnsubscribedEmail(Base):
    """Address that opted out of blasts"""
    __tablename__ = "unsubscribed_emails"

    email = Column(String(255), primary_key=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<UnsubscribedEmail {self.email}>"
