"""Product schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductBase(BaseModel):
    """Base product schema."""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    sku: Optional[str] = Field(None, max_length=100)
    price: float = Field(..., ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    is_available: bool = True
    cost_price: float = Field(0.0, ge=0)
    stock_quantity: float = Field(0.0, ge=0)
    category_id: int = Field(..., gt=0)


class ProductCreate(ProductBase):
    """Schema for creating a product."""
    pass


class ProductUpdate(BaseModel):
    """Schema for updating a product. Only provided fields change."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    sku: Optional[str] = Field(None, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    is_available: Optional[bool] = None
    cost_price: Optional[float] = Field(None, ge=0)
    stock_quantity: Optional[float] = Field(None, ge=0)
    category_id: Optional[int] = Field(None, gt=0)


class Product(ProductBase):
    """Schema for product response."""

    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProductFilters(BaseModel):
    """Optional filters for product listing."""

    category_id: Optional[int] = None
    is_available: Optional[bool] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    has_stock: Optional[bool] = None
    name_contains: Optional[str] = None

    def is_empty(self) -> bool:
        return all(value is None for value in self.model_dump().values())
