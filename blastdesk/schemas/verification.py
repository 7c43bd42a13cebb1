from typing import Optional

from blastdesk.schemas.base import CamelModel


class SendVerificationCodeRequest(CamelModel):
    email: Optional[str] = None


class VerifyCodeRequest(CamelModel):
    email: Optional[str] = None
    code: Optional[str] = None
