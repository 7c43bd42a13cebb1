from sqlalchemy import Column, String, DateTime

from blastdesk.core.database import Base


class VerificationCode(Base):
    """Pending sender-email verification; one per address"""
    __tablename__ = "verification_codes"

    email = Column(String(255), primary_key=True)
    code = Column(String(6), nullable=False)
    expires_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<VerificationCode {self.email}>"
