"""Shared FastAPI dependencies."""

from fastapi import Request, status

from bakery_app.container import Container
from bakery_app.core.errors import AppError
from bakery_app.core.security import TokenPayload


def get_container(request: Request) -> Container:
    """Container built at startup and stored on the application state."""
    return request.app.state.container


def is_admin(user: TokenPayload) -> bool:
    return user.role == "admin"


def ensure_self_or_admin(user: TokenPayload, owner_id: int) -> None:
    """Customers may only act on their own records."""
    if not is_admin(user) and user.sub != owner_id:
        raise AppError("You do not have access to this resource", status.HTTP_403_FORBIDDEN)
