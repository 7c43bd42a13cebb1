# Re-export all models for convenient imports
from blastdesk.models.user import User, UserRole
from blastdesk.models.department import Department
from blastdesk.models.participant import Participant
from blastdesk.models.template import EmailTemplate
from blastdesk.models.blast_history import BlastHistory, BlastStatus, RecipientStatus
from blastdesk.models.settings import UserSettings, GlobalSettings, GLOBAL_SETTINGS_ID
from blastdesk.models.unsubscribe import UnsubscribedEmail
from blastdesk.models.activity_log import ActivityLog
from blastdesk.models.verification_code import VerificationCode

__all__ = [
    # User
    "User",
    "UserRole",
    # Directory
    "Department",
    "Participant",
    # Templates & blasts
    "EmailTemplate",
    "BlastHistory",
    "BlastStatus",
    "RecipientStatus",
    # Settings
    "UserSettings",
    "GlobalSettings",
    "GLOBAL_SETTINGS_ID",
    # Opt-out & audit
    "UnsubscribedEmail",
    "ActivityLog",
    "VerificationCode",
]
