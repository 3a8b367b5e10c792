"""Domain errors raised by the store's service layer and mapped to HTTP responses in main."""

from typing import Optional

from fastapi import status


class BlogError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None, errors: Optional[list[dict]] = None):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)


class NotFoundError(BlogError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class UnauthorizedError(BlogError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class ForbiddenError(BlogError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class ValidationError(BlogError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid data"


class ConflictError(BlogError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class ExternalSourceError(BlogError):
    """Network or parse failure talking to the external post provider.

    Never leaves external_source: its public functions turn it into an empty result.
    """

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "External source unavailable"
