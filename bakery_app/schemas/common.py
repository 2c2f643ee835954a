"""Response envelopes shared by every endpoint."""

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """``{"success": true, "data": ...}`` wrapper for successful responses."""

    success: bool = True
    data: T
    message: Optional[str] = None


class Message(BaseModel):
    success: bool = True
    message: str


class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    limit: int
