"""
Custom Exceptions for PhD Hub
=============================

Every handler failure is one of these. The API layer renders them as
``{"error": message, "code": code}`` with the matching HTTP status.

Usage:
    from phdhub.core.exceptions import InvalidRequestError, NotFoundError

    if not community_id:
        raise InvalidRequestError("communityId is required", field="communityId")
"""

from typing import Optional, Any, Dict


class PhdHubError(Exception):
    """Base exception for all PhD Hub errors"""

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
        body: Dict[str, Any] = {
            "error": self.message,
            "code": self.code,
        }
        if self.details:
            body["details"] = self.details
        return body


# ============================================
# Request Errors (400)
# ============================================

class InvalidRequestError(PhdHubError):
    """Missing or malformed required field"""

    status_code = 400

    def __init__(self, message: str = "Invalid request", field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="INVALID_REQUEST", details=details)


# ============================================
# Authentication Errors (401)
# ============================================

class UnauthorizedError(PhdHubError):
    """No valid caller identity"""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, code="UNAUTHORIZED")


# ============================================
# Resource Errors (404)
# ============================================

class NotFoundError(PhdHubError):
    """Resource does not exist"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str = ""):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class NotFoundOrUnauthorizedError(PhdHubError):
    """
    Resource missing or caller not allowed to touch it.

    The two cases share one message so callers cannot probe for existence.
    """

    status_code = 404

    def __init__(self, resource_type: str = "Resource"):
        super().__init__(
            f"{resource_type} not found or unauthorized",
            code="NOT_FOUND_OR_UNAUTHORIZED",
        )


# ============================================
# Server Errors (500)
# ============================================

class InternalError(PhdHubError):
    """Persistence or collaborator failure"""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, code="INTERNAL_ERROR")


class StorageError(InternalError):
    """Object storage operation failed"""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.code = "STORAGE_ERROR"
        if key:
            self.details["key"] = key


class IdentityServiceError(InternalError):
    """Identity provider lookup failed"""

    def __init__(self, message: str = "Identity provider unavailable"):
        super().__init__(message)
        self.code = "IDENTITY_SERVICE_ERROR"


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: PhdHubError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return error.to_dict()
