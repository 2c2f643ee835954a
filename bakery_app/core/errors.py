"""Error taxonomy shared by repositories, services and the HTTP layer."""

from typing import Any, Optional

from fastapi import status


class AppError(Exception):
    """Business or infrastructure failure carrying an HTTP status code."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(AppError):
    """Data that does not match its schema or a business rule."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, status.HTTP_400_BAD_REQUEST)
        self.details = details


class DatabaseError(AppError):
    """A query or connection failure."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.details = details


class NotFoundError(AppError):
    """A requested entity does not exist."""

    def __init__(self, entity: str, identifier: Any):
        super().__init__(f"{entity} with identifier {identifier} not found", status.HTTP_404_NOT_FOUND)
        self.entity = entity
        self.identifier = identifier


class ConflictError(AppError):
    """A uniqueness rule would be violated."""

    def __init__(self, message: str):
        super().__init__(message, status.HTTP_409_CONFLICT)
