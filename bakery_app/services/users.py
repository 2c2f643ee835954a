"""User accounts and authentication."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import status

from bakery_app.core.errors import AppError, ConflictError, NotFoundError
from bakery_app.core.logging import logger
from bakery_app.core.security import create_access_token, get_password_hash, verify_password
from bakery_app.repositories.users import UserRepository
from bakery_app.schemas.user import (
    LoginRequest,
    LoginResponse,
    PublicUser,
    Role,
    UserPage,
    UserRegister,
    UserStatus,
    UserUpdate,
)
from bakery_app.services.base import clean_text, require_text, service_operation

ONLINE_WINDOW = timedelta(minutes=5)

_INVALID_CREDENTIALS = "Invalid email or password"


class UserService:
    def __init__(self, repository: UserRepository):
        self.repository = repository

    @service_operation("Failed to register user")
    def register(self, data: UserRegister, allow_role: bool = False) -> PublicUser:
        """Create an account. The requested role is kept only when ``allow_role`` is set."""
        email = data.email.strip().lower()
        if self.repository.find_by_email(email) is not None:
            raise ConflictError("Email is already registered")

        role: Role = data.role if allow_role else "customer"
        user = self.repository.create(
            first_name=require_text(data.first_name, "First name"),
            last_name=require_text(data.last_name, "Last name"),
            email=email,
            phone_number=clean_text(data.phone_number),
            password_hash=get_password_hash(data.password),
            role=role,
        )
        return user.to_public()

    @service_operation("Failed to log in")
    def login(self, data: LoginRequest) -> LoginResponse:
        user = self.repository.find_by_email(data.email.strip())
        if user is None or not verify_password(data.password, user.password_hash):
            logger.warning("Failed login attempt")
            raise AppError(_INVALID_CREDENTIALS, status.HTTP_401_UNAUTHORIZED)
        if not user.is_active:
            raise AppError("User account is inactive", status.HTTP_401_UNAUTHORIZED)

        self.repository.touch_last_seen(user.id)
        token = create_access_token(user.id, f"{user.first_name} {user.last_name}", user.role)
        logger.info("User logged in", extra={"user_id": user.id})
        refreshed = self.repository.find_by_id(user.id) or user
        return LoginResponse(user=refreshed.to_public(), token=token)

    @service_operation("Failed to fetch user")
    def get(self, user_id: int) -> PublicUser:
        user = self.repository.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user.to_public()

    @service_operation("Failed to fetch user")
    def get_by_email(self, email: str) -> PublicUser:
        user = self.repository.find_by_email(email.strip())
        if user is None:
            raise NotFoundError("User", email)
        return user.to_public()

    @service_operation("Failed to fetch users")
    def paginate(self, page: int = 1, limit: int = 10, role: Optional[Role] = None) -> UserPage:
        users = self.repository.find_page(page, limit, role)
        return UserPage(
            users=[u.to_public() for u in users],
            total=self.repository.count(role),
            page=page,
            limit=limit,
        )

    @service_operation("Failed to update user")
    def update(self, user_id: int, data: UserUpdate, allow_role: bool = False) -> PublicUser:
        if self.repository.find_by_id(user_id) is None:
            raise NotFoundError("User", user_id)

        changes = data.model_dump(exclude_unset=True)
        if not allow_role:
            changes.pop("role", None)
        for field in ("first_name", "last_name"):
            if changes.get(field) is not None:
                changes[field] = require_text(changes[field], field.replace("_", " ").capitalize())
        if "phone_number" in changes:
            changes["phone_number"] = clean_text(changes["phone_number"])
        if changes.get("email") is not None:
            email = changes["email"].strip().lower()
            duplicate = self.repository.find_by_email(email)
            if duplicate is not None and duplicate.id != user_id:
                raise ConflictError("Email is already registered")
            changes["email"] = email
        password = changes.pop("password", None)
        if password is not None:
            changes["password_hash"] = get_password_hash(password)

        user = self.repository.update(user_id, changes)
        if user is None:
            raise NotFoundError("User", user_id)
        return user.to_public()

    @service_operation("Failed to delete user")
    def deactivate(self, user_id: int) -> None:
        if not self.repository.soft_delete(user_id):
            raise NotFoundError("User", user_id)
        logger.info("User deactivated", extra={"user_id": user_id})

    @service_operation("Failed to fetch user status")
    def online_status(self, user_id: int, now: Optional[datetime] = None) -> UserStatus:
        user = self.repository.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)

        now = now or datetime.now(timezone.utc).replace(tzinfo=None)
        last_seen = user.last_seen
        if last_seen is not None and last_seen.tzinfo is not None:
            last_seen = last_seen.astimezone(timezone.utc).replace(tzinfo=None)
        is_online = last_seen is not None and now - last_seen <= ONLINE_WINDOW
        return UserStatus(
            id=user.id,
            email=user.email,
            is_online=is_online,
            last_seen=user.last_seen,
            status="online" if is_online else "offline",
        )
