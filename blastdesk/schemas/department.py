from pydantic import Field
from typing import Optional

from blastdesk.schemas.base import CamelModel


class DepartmentCreate(CamelModel):
    id: Optional[str] = Field(None, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)


class DepartmentUpdate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)


class DepartmentResponse(CamelModel):
    id: str
    name: str
