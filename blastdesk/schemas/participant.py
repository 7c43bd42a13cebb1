from pydantic import Field, field_validator
from typing import List, Optional

from blastdesk.schemas.base import CamelModel


class ParticipantBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    role: Optional[str] = Field(None, max_length=255)
    department_id: str = Field(..., min_length=1, max_length=64)
    pa_email: Optional[str] = Field(None, max_length=255)

    @field_validator("email", "pa_email")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class ParticipantCreate(ParticipantBase):
    id: Optional[str] = Field(None, max_length=64)


class ParticipantUpdate(ParticipantBase):
    pass


class ParticipantResponse(CamelModel):
    id: str
    name: str
    email: Optional[str] = None
    role: Optional[str] = None
    department_id: str
    pa_email: Optional[str] = None


class ParticipantImportResponse(CamelModel):
    imported: int
    skipped: int
    message: str
    participants: List[ParticipantResponse]
