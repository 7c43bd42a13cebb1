from typing import List, Optional
from datetime import datetime

from blastdesk.schemas.base import CamelModel


class RecipientActivity(CamelModel):
    participant_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    status: str


class BlastHistoryResponse(CamelModel):
    id: str
    template_id: Optional[str] = None
    template_name: Optional[str] = None
    subject: Optional[str] = None
    recipient_group: Optional[str] = None
    recipient_count: int = 0
    sender_name: Optional[str] = None
    sent_date: Optional[datetime] = None
    status: str
    scheduled_date: Optional[datetime] = None
    delivery_rate: float = 0.0
    open_rate: float = 0.0
    click_rate: float = 0.0
    unsubscribe_rate: float = 0.0
    body: Optional[str] = None
    recipient_ids: List[str] = []
    detailed_recipient_activity: List[RecipientActivity] = []


class CampaignSummary(CamelModel):
    id: str
    template_name: Optional[str] = None
    recipient_count: int = 0
    sent_date: Optional[datetime] = None


class AnalyticsResponse(CamelModel):
    total_campaigns: int
    total_emails_sent: int
    top_campaigns: List[CampaignSummary]


class DashboardResponse(CamelModel):
    participants: int
    departments: int
    templates: int
    completed_campaigns: int
    scheduled_campaigns: int
    recent_history: List[BlastHistoryResponse]
