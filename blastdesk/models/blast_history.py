from sqlalchemy import Column, String, Text, Integer, Float, DateTime
import enum

from blastdesk.core.database import Base
from blastdesk.core.types import JSONList


class BlastStatus(str, enum.Enum):
    COMPLETED = "Completed"
    FAILED = "Failed"
    SCHEDULED = "Scheduled"


class RecipientStatus(str, enum.Enum):
    SENT = "Sent"
    OPENED = "Opened"
    CLICKED = "Clicked"
    BOUNCED = "Bounced"
    UNSUBSCRIBED = "Unsubscribed"


class BlastHistory(Base):
    """One email blast, sent or scheduled"""
    __tablename__ = "blast_history"

    id = Column(String(64), primary_key=True)  # hist_<epoch millis>
    template_id = Column(String(64), nullable=True)
    template_name = Column(String(255), nullable=True)
    subject = Column(String(500), nullable=True)
    recipient_group = Column(String(255), nullable=True)
    recipient_count = Column(Integer, nullable=False, default=0)
    sender_name = Column(String(255), nullable=True)

    # Status values come from BlastStatus; stored as text so unknown values still load
    status = Column(String(20), nullable=False, default=BlastStatus.COMPLETED.value, index=True)
    sent_date = Column(DateTime, nullable=True, index=True)
    scheduled_date = Column(DateTime, nullable=True)

    delivery_rate = Column(Float, nullable=False, default=0.0)
    open_rate = Column(Float, nullable=False, default=0.0)
    click_rate = Column(Float, nullable=False, default=0.0)
    unsubscribe_rate = Column(Float, nullable=False, default=0.0)

    body = Column(Text, nullable=True)
    recipient_ids = Column(JSONList, nullable=False, default=list)
    detailed_recipient_activity = Column(JSONList, nullable=False, default=list)

    @property
    def order_date(self):
        """Date the list view sorts on"""
        if self.status == BlastStatus.SCHEDULED.value:
            return self.scheduled_date or self.sent_date
        return self.sent_date or self.scheduled_date

    def __repr__(self):
        return f"<BlastHistory {self.id} {self.status}>"
