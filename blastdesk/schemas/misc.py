from typing import List, Optional

from blastdesk.schemas.base import CamelModel


class BackdropUploadResponse(CamelModel):
    file_path: str


class BackdropListing(CamelModel):
    files: List[str]
    folders: List[str]


class FolderCreate(CamelModel):
    folder_name: Optional[str] = None


class ActivityLogResponse(CamelModel):
    id: int
    user: str
    action: str
    details: Optional[str] = None
    timestamp: str
