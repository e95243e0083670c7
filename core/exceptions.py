from typing import Optional

from starlette import status


class AwardsError(Exception):
    """Base class for errors surfaced to API callers as ``{"detail": ...}``."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Unexpected error"

    def __init__(self, detail: Optional[str] = None, headers: Optional[dict[str, str]] = None):
        self.detail = detail or self.default_detail
        self.headers = headers
        super().__init__(self.detail)


class Unauthorized(AwardsError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Could not validate credentials"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(AwardsError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You don't have permission to perform this action"


class NotFound(AwardsError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ValidationError(AwardsError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class StorageError(AwardsError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "The request could not be saved. Please try again."
