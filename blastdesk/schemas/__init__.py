# Pydantic schemas
from blastdesk.schemas.base import CamelModel, MessageResponse
from blastdesk.schemas.auth import (
    UserRegister,
    UserLogin,
    RegisteredUser,
    UserResponse,
    LoginResponse,
)
from blastdesk.schemas.verification import SendVerificationCodeRequest, VerifyCodeRequest
from blastdesk.schemas.department import DepartmentCreate, DepartmentUpdate, DepartmentResponse
from blastdesk.schemas.participant import (
    ParticipantCreate,
    ParticipantUpdate,
    ParticipantResponse,
    ParticipantImportResponse,
)
from blastdesk.schemas.template import (
    EcardLayoutFields,
    TemplateCreate,
    TemplateUpdate,
    TemplateResponse,
    EcardPreviewRequest,
)
from blastdesk.schemas.history import (
    RecipientActivity,
    BlastHistoryResponse,
    CampaignSummary,
    AnalyticsResponse,
    DashboardResponse,
)
from blastdesk.schemas.blast import (
    SenderProfile,
    BlastDetails,
    BlastRequest,
    BlastResponse,
    UnsubscribeRequest,
)
from blastdesk.schemas.settings import (
    GlobalSettingsPayload,
    GlobalSettingsResponse,
    UserSettingsResponse,
)
from blastdesk.schemas.misc import (
    BackdropUploadResponse,
    BackdropListing,
    FolderCreate,
    ActivityLogResponse,
)
