from pydantic import Field
from typing import List, Optional
from datetime import datetime

from blastdesk.schemas.base import CamelModel
from blastdesk.schemas.history import BlastHistoryResponse


class SenderProfile(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    verified: bool = False


class BlastDetails(CamelModel):
    template_name: Optional[str] = None
    subject: Optional[str] = None
    department_name: Optional[str] = None
    count: Optional[int] = None


class BlastRequest(CamelModel):
    # Required-ness is enforced in the endpoint to keep the combined error message
    template_id: Optional[str] = None
    recipient_ids: Optional[List[str]] = None
    sender_profile: Optional[SenderProfile] = None
    blast_details: Optional[BlastDetails] = None
    global_header: Optional[str] = None
    global_footer: Optional[str] = None
    scheduled_date: Optional[datetime] = None


class BlastResponse(CamelModel):
    message: str
    history: BlastHistoryResponse


class UnsubscribeRequest(CamelModel):
    email: Optional[str] = Field(None, max_length=255)
