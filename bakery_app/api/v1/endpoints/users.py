"""User management endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from bakery_app.api.deps import ensure_self_or_admin, get_container, is_admin
from bakery_app.container import Container
from bakery_app.core.security import TokenPayload, require_admin, require_authenticated
from bakery_app.schemas.common import Envelope, Message
from bakery_app.schemas.user import PublicUser, Role, UserPage, UserStatus, UserUpdate

router = APIRouter()


@router.get("", response_model=Envelope[UserPage], dependencies=[Depends(require_admin)])
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: Optional[Role] = Query(None),
    container: Container = Depends(get_container),
):
    return Envelope(data=container.users.paginate(page, limit, role))


@router.get("/email/{email}", response_model=Envelope[PublicUser], dependencies=[Depends(require_admin)])
def get_user_by_email(email: str, container: Container = Depends(get_container)):
    return Envelope(data=container.users.get_by_email(email))


@router.get("/{user_id}", response_model=Envelope[PublicUser])
def get_user(
    user_id: int,
    user: TokenPayload = Depends(require_authenticated),
    container: Container = Depends(get_container),
):
    ensure_self_or_admin(user, user_id)
    return Envelope(data=container.users.get(user_id))


@router.get("/{user_id}/status", response_model=Envelope[UserStatus])
def get_user_status(
    user_id: int,
    user: TokenPayload = Depends(require_authenticated),
    container: Container = Depends(get_container),
):
    """Online when the user was seen within the last five minutes."""
    ensure_self_or_admin(user, user_id)
    return Envelope(data=container.users.online_status(user_id))


@router.put("/{user_id}", response_model=Envelope[PublicUser])
def update_user(
    user_id: int,
    data: UserUpdate,
    user: TokenPayload = Depends(require_authenticated),
    container: Container = Depends(get_container),
):
    ensure_self_or_admin(user, user_id)
    updated = container.users.update(user_id, data, allow_role=is_admin(user))
    return Envelope(data=updated, message="User updated")


@router.delete("/{user_id}", response_model=Message, dependencies=[Depends(require_admin)])
def deactivate_user(user_id: int, container: Container = Depends(get_container)):
    container.users.deactivate(user_id)
    return Message(message="User deactivated")
