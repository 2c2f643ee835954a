"""Order and order item schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class OrderItem(BaseModel):
    """Persisted order line."""

    id: int
    order_id: int
    product_id: int
    quantity: int = Field(..., gt=0)
    price_per_unit: float = Field(..., ge=0)

    model_config = ConfigDict(from_attributes=True)


class OrderItemRequest(BaseModel):
    """Requested line of a new order. The price is never taken from the client."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)


class OrderItemCreate(OrderItemRequest):
    """Add a line to an existing order."""

    order_id: int = Field(..., gt=0)


class OrderItemUpdate(BaseModel):
    quantity: int = Field(..., gt=0)


class OrderCreate(BaseModel):
    """Schema for creating an order from its items."""

    user_id: Optional[int] = Field(None, description="Ignored for customers; taken from the token")
    status_id: int
    items: List[OrderItemRequest] = Field(
        default_factory=list,
        description="Ordered products; must not be empty",
    )
    special_instructions: Optional[str] = Field(None, max_length=1000)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status_id": 1,
                "items": [
                    {"product_id": 5, "quantity": 2},
                    {"product_id": 7, "quantity": 1},
                ],
                "special_instructions": "Sin nueces",
            }
        }
    )


class OrderUpdate(BaseModel):
    """Mutable order fields. Totals and completion have dedicated paths."""

    status_id: Optional[int] = None
    special_instructions: Optional[str] = Field(None, max_length=1000)


class Order(BaseModel):
    """Schema for order response."""

    id: int
    user_id: int
    status_id: int
    order_date: datetime
    total_amount: float = Field(..., ge=0)
    special_instructions: Optional[str] = None
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class OrderWithItems(Order):
    items: List[OrderItem] = Field(default_factory=list)


class NewOrderLine(BaseModel):
    """Validated line ready to persist."""

    product_id: int
    quantity: int
    price_per_unit: float


class UserOrderStatistics(BaseModel):
    total_orders: int
    total_spent: float
    completed_orders: int
    average_order_value: float
    last_order_date: Optional[datetime] = None
