from typing import Optional

from blastdesk.schemas.base import CamelModel


class GlobalSettingsPayload(CamelModel):
    global_header: Optional[str] = None
    global_footer: Optional[str] = None


class GlobalSettingsResponse(CamelModel):
    global_header: str = ""
    global_footer: str = ""


class UserSettingsResponse(GlobalSettingsResponse):
    user_id: str
