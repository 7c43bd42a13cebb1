"""
Custom Exceptions for BlastDesk
===============================

Raise these from services and endpoints instead of bare HTTPException so the
API layer can render a consistent error body:

    {"error": "<message>", "code": "<CODE>", "details": {...}}

Usage:
    from blastdesk.core.exceptions import TemplateNotFoundError

    if not template:
        raise TemplateNotFoundError(template_id)
"""

from typing import Optional, Any, Dict


class BlastDeskError(Exception):
    """Base exception for all BlastDesk errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(BlastDeskError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class InvalidTokenError(AuthenticationError):
    """JWT token is invalid or expired"""

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message)
        self.code = "INVALID_TOKEN"


class AuthorizationError(BlastDeskError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(BlastDeskError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class DepartmentNotFoundError(ResourceNotFoundError):
    def __init__(self, department_id: str):
        super().__init__("Department", department_id)


class ParticipantNotFoundError(ResourceNotFoundError):
    def __init__(self, participant_id: str):
        super().__init__("Participant", participant_id)


class TemplateNotFoundError(ResourceNotFoundError):
    def __init__(self, template_id: str):
        super().__init__("Template", template_id, message="Template not found")


class HistoryNotFoundError(ResourceNotFoundError):
    def __init__(self, history_id: str):
        super().__init__("History", history_id)


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_ref: str):
        super().__init__("User", user_ref, message="User not found")


class FileNotFoundInStorageError(ResourceNotFoundError):
    """Uploaded file not found under the upload directory"""

    def __init__(self, file_path: str):
        super().__init__("File", file_path, message="File not found")


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(BlastDeskError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class ConflictError(ValidationError):
    """Unique value already taken (username, email, id)"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, field=field)
        self.code = "ALREADY_EXISTS"


class BlastAlreadyDispatchedError(ValidationError):
    """Scheduled blast was claimed by another dispatch or cancelled"""

    def __init__(self, history_id: str):
        super().__init__("Only scheduled blasts can be dispatched", field="status")
        self.code = "ALREADY_DISPATCHED"
        self.details["history_id"] = history_id


class InvalidFileTypeError(ValidationError):
    """File type not allowed"""

    def __init__(self, file_type: str, allowed_types: list):
        super().__init__(
            f"File type '{file_type}' not allowed. Allowed: {', '.join(allowed_types)}"
        )
        self.code = "INVALID_FILE_TYPE"
        self.details = {"file_type": file_type, "allowed_types": allowed_types}


class FileTooLargeError(BlastDeskError):
    """Uploaded file exceeds the configured size"""

    status_code = 413

    def __init__(self, size: int, max_size: int):
        super().__init__(
            f"File too large. Maximum size is {max_size // 1024 // 1024}MB",
            code="FILE_TOO_LARGE",
            details={"size": size, "max_size": max_size}
        )


# ============================================
# Delivery / Generation Errors
# ============================================

class EmailDeliveryError(BlastDeskError):
    """Email could not be handed to the SMTP server"""

    def __init__(self, message: str = "Failed to send email", recipient: Optional[str] = None):
        super().__init__(message, code="EMAIL_DELIVERY_FAILED")
        if recipient:
            self.details["recipient"] = recipient


class EcardGenerationError(BlastDeskError):
    """E-card composition failed"""

    def __init__(self, message: str = "Failed to generate e-card PDF."):
        super().__init__(message, code="ECARD_GENERATION_FAILED")


class ReportGenerationError(BlastDeskError):
    """Campaign report could not be rendered"""

    def __init__(self, message: str = "Failed to generate campaign report."):
        super().__init__(message, code="REPORT_GENERATION_FAILED")


class StorageError(BlastDeskError):
    """Storage operation failed"""

    def __init__(self, message: str):
        super().__init__(message, code="STORAGE_ERROR")


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: BlastDeskError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "error": error.message,
        "code": error.code,
        "details": error.details
    }
