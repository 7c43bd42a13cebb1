from pydantic import Field
from typing import Optional

from blastdesk.schemas.base import CamelModel


HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"


class EcardLayoutFields(CamelModel):
    """Text placement over the e-card backdrop, in pixels from the top-left corner"""
    ecard_backdrop_path: Optional[str] = Field(None, max_length=500)
    name_x: Optional[int] = None
    name_y: Optional[int] = None
    name_font_size: Optional[int] = Field(None, gt=0, le=1000)
    name_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    role_x: Optional[int] = None
    role_y: Optional[int] = None
    role_font_size: Optional[int] = Field(None, gt=0, le=1000)
    role_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)


class TemplateBase(EcardLayoutFields):
    name: str = Field(..., min_length=1, max_length=255)
    subject: str = Field("", max_length=500)
    body: str = ""
    category: Optional[str] = Field(None, max_length=100)


class TemplateCreate(TemplateBase):
    id: Optional[str] = Field(None, max_length=64)


class TemplateUpdate(TemplateBase):
    pass


class TemplateResponse(CamelModel):
    # Stored rows are returned as-is, without the input constraints
    id: str
    name: str
    subject: str = ""
    body: str = ""
    category: Optional[str] = None
    ecard_backdrop_path: Optional[str] = None
    name_x: Optional[int] = None
    name_y: Optional[int] = None
    name_font_size: Optional[int] = None
    name_color: Optional[str] = None
    role_x: Optional[int] = None
    role_y: Optional[int] = None
    role_font_size: Optional[int] = None
    role_color: Optional[str] = None


class EcardPreviewRequest(EcardLayoutFields):
    template_id: Optional[str] = None
    name: str = "Participant Name"
    role: str = "Participant Role"
    format: str = Field("pdf", pattern=r"^(pdf|png)$")
