"""
Project Library Backend - Custom Exception Hierarchy
=====================================================

What:  Application-specific exceptions, one per failure class the API reports.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) map them to the
       `{"data": null, "error": {...}}` envelope with the right status code.
Who:   Raised by services, dependencies and middleware; caught by global handlers.

Exception Hierarchy:
    ProjectLibraryError (base)
    ├── ValidationError          → 400 BAD_REQUEST (client can fix)
    │   └── DuplicateError       → 400 BAD_REQUEST (unique rule violated)
    ├── UnauthorizedError        → 401 UNAUTHORIZED (no or invalid session)
    ├── ForbiddenError           → 403 FORBIDDEN (authenticated, not permitted)
    ├── NotFoundError            → 404 NOT_FOUND
    ├── RateLimitExceededError   → 429 RATE_LIMITED
    └── DatabaseError            → 500 SERVER_ERROR
"""

from typing import Any, Dict, Optional


class ProjectLibraryError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; only some handlers return it)
        code:     Machine-readable error code used in the response envelope
    """

    code = "SERVER_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ProjectLibraryError):
    """
    Raised when client input fails validation.

    When:    Missing or malformed fields, self-follow, self-message, empty
             message content, out-of-range profile fields.
    HTTP:    400 Bad Request

    Example response:
        {
            "data": null,
            "error": {
                "code": "BAD_REQUEST",
                "message": "Cannot follow yourself",
                "details": {"field": "following_owner_id"},
                "request_id": "a1b2c3d4"
            }
        }
    """

    code = "BAD_REQUEST"
    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DuplicateError(ValidationError):
    """
    Raised when a write would violate a uniqueness rule.

    When:    Following the same owner twice, reusing an org slug, a username
             or an email, adding an existing org member.
    HTTP:    400 Bad Request (same envelope as ValidationError)
    """


class UnauthorizedError(ProjectLibraryError):
    """
    Raised when the request carries no valid session.

    When:    Missing cookie/bearer token, bad signature, expired token,
             token for a user that no longer exists, wrong login credentials.
    HTTP:    401 Unauthorized
    """

    code = "UNAUTHORIZED"
    status_code = 401

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(ProjectLibraryError):
    """
    Raised when an authenticated caller is not permitted to act.

    When:    Switching to an owner the user may not act as, marking someone
             else's message read, editing content of another owner, managing
             an org without an OWNER/ADMIN role.
    HTTP:    403 Forbidden
    """

    code = "FORBIDDEN"
    status_code = 403

    def __init__(
        self,
        message: str = "Access denied",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(ProjectLibraryError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; services convert that into
    NotFoundError so the handler can answer 404.
    """

    code = "NOT_FOUND"
    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(ProjectLibraryError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. Query text and
        constraint names are logged server-side only.
    """

    code = "SERVER_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(ProjectLibraryError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests, with a Retry-After header.
    """

    code = "RATE_LIMITED"
    status_code = 429

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
