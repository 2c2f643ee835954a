"""User and authentication schemas."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

Role = Literal["customer", "admin"]


class UserRegister(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone_number: Optional[str] = Field(None, max_length=50)
    password: str = Field(..., min_length=6, max_length=72)
    role: Role = "customer"


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, max_length=50)
    password: Optional[str] = Field(None, min_length=6, max_length=72)
    role: Optional[Role] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)


class PublicUser(BaseModel):
    """User as exposed over the API (no password hash)."""

    id: int
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None
    role: Role
    is_active: bool = True
    last_seen: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class User(PublicUser):
    """Full user row, including the password hash."""

    password_hash: str

    def to_public(self) -> PublicUser:
        return PublicUser.model_validate(self.model_dump(exclude={"password_hash"}))


class LoginResponse(BaseModel):
    user: PublicUser
    token: str
    token_type: str = "bearer"


class UserPage(BaseModel):
    users: List[PublicUser]
    total: int
    page: int
    limit: int


class UserStatus(BaseModel):
    id: int
    email: str
    is_online: bool
    last_seen: Optional[datetime] = None
    status: Literal["online", "offline"]
