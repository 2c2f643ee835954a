"""Registration, login and the current-user endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from bakery_app.api.deps import get_container, is_admin
from bakery_app.container import Container
from bakery_app.core.security import TokenPayload, get_optional_user, require_authenticated
from bakery_app.schemas.common import Envelope
from bakery_app.schemas.user import LoginRequest, LoginResponse, PublicUser, UserRegister

router = APIRouter()


@router.post("/register", response_model=Envelope[PublicUser], status_code=status.HTTP_201_CREATED)
def register(
    data: UserRegister,
    caller: Optional[TokenPayload] = Depends(get_optional_user),
    container: Container = Depends(get_container),
):
    """
    Create an account.

    Anyone may register as a customer; only an authenticated admin can
    create another admin.
    """
    allow_role = caller is not None and is_admin(caller)
    return Envelope(data=container.users.register(data, allow_role=allow_role), message="User registered")


@router.post("/login", response_model=Envelope[LoginResponse])
def login(data: LoginRequest, container: Container = Depends(get_container)):
    return Envelope(data=container.users.login(data), message="Login successful")


@router.get("/me", response_model=Envelope[PublicUser])
def me(
    user: TokenPayload = Depends(require_authenticated),
    container: Container = Depends(get_container),
):
    return Envelope(data=container.users.get(user.sub))
