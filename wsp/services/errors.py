"""
Service-layer exceptions. Routes translate these to HTTP status codes.
"""


class WSPServiceError(Exception):
    """Base exception for planner service operations."""

    status_code = 400

    def __init__(self, message: str, user_id: str | None = None, recoverable: bool = True):
        super().__init__(message)
        self.user_id = user_id
        self.recoverable = recoverable


class ValidationError(WSPServiceError):
    status_code = 400


class PermissionDeniedError(WSPServiceError):
    status_code = 403


class NotFoundError(WSPServiceError):
    status_code = 404


class ConflictError(WSPServiceError):
    status_code = 409


class IdentityProviderError(WSPServiceError):
    """The auth identity could not be created or removed."""

    status_code = 502
