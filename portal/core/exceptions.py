import functools
import logging
from typing import Optional

from fastapi import HTTPException, status

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """Base for every classified error raised by the services.

    The status code is fixed per subclass; the message is what the caller
    sees as ``detail``.
    """

    status_code_class = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, headers: Optional[dict] = None):
        super().__init__(status_code=self.status_code_class, detail=message, headers=headers)

    @property
    def message(self) -> str:
        return self.detail


class BadRequestError(ApiError):
    status_code_class = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(ApiError):
    status_code_class = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class NotFoundError(ApiError):
    status_code_class = status.HTTP_404_NOT_FOUND


class ConflictError(ApiError):
    status_code_class = status.HTTP_409_CONFLICT


class InternalError(ApiError):
    status_code_class = status.HTTP_500_INTERNAL_SERVER_ERROR


class AccountAlreadyExistsException(ConflictError):
    def __init__(self):
        super().__init__("User already exists")


class InvalidCredentialsException(UnauthorizedError):
    def __init__(self):
        super().__init__("Invalid email or password.")


class TokenExpiredException(UnauthorizedError):
    def __init__(self):
        super().__init__("Token has expired.")


class TokenInvalidException(UnauthorizedError):
    def __init__(self):
        super().__init__("Token is invalid.")


def unexpected(action: str, error: Exception) -> InternalError:
    return InternalError(f"An unexpected error occurred while {action}: {error}")


def wraps_unexpected(action: str):
    """Let classified errors through; log and wrap anything else as INTERNAL."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except ApiError:
                raise
            except Exception as e:
                logger.exception("Unexpected failure while %s", action)
                raise unexpected(action, e) from e

        return wrapper

    return decorator
