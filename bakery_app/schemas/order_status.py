"""Order status schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OrderStatusCreate(BaseModel):
    status_name: str = Field(..., min_length=1, max_length=100)


class OrderStatusUpdate(BaseModel):
    status_name: Optional[str] = Field(None, min_length=1, max_length=100)


class OrderStatus(OrderStatusCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)
