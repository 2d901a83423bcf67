# spareflow/shared/exceptions.py
from typing import Any, Optional

from fastapi import HTTPException, status


class BaseHTTPException(HTTPException):
    """
    Base class for domain exceptions.

    Subclasses declare ``status_code`` and a default ``message``; callers may
    override the message or pass a structured ``detail`` payload instead.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, detail: Any = None) -> None:
        super().__init__(
            status_code=type(self).status_code,
            detail=detail if detail is not None else (message or type(self).message),
        )


# Authentication & Authorization Exceptions
class InvalidTokenError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing or invalid token"
        )


class InactiveUserError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN, detail="User account is not active"
        )


class NotAuthorizedError(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")


# Resource Not Found Exceptions
class UserNotFoundError(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


class PartNotFoundError(HTTPException):
    def __init__(self, part_id: Optional[str] = None) -> None:
        detail = f"Part not found: {part_id}" if part_id else "Part not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


# Validation / Request Exceptions
class InvalidDataError(HTTPException):
    def __init__(self, message: str = "Invalid request data") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)

