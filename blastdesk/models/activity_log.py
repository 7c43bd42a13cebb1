from sqlalchemy import Column, String, Text, Integer

from blastdesk.core.database import Base


class ActivityLog(Base):
    """
    Audit trail of dashboard actions.

    `user` is a username, or "System" for actions without an account.
    `timestamp` is an ISO-8601 string so ordering works on any backend.
    """
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user = Column(String(100), nullable=False, index=True)
    action = Column(String(100), nullable=False, index=True)
    details = Column(Text, nullable=True)
    timestamp = Column(String(40), nullable=False, index=True)

    def __repr__(self):
        return f"<ActivityLog {self.action} by {self.user}>"
