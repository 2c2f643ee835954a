"""Ingredient schemas."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Unit = Literal["g", "kg", "ml", "l", "unit"]


class IngredientBase(BaseModel):
    """Base ingredient schema."""

    name: str = Field(..., min_length=1, max_length=255)
    stock_quantity: float = Field(0.0, ge=0)
    unit: Unit


class IngredientCreate(IngredientBase):
    """Schema for creating an ingredient."""
    pass


class IngredientUpdate(BaseModel):
    """Schema for updating an ingredient."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    stock_quantity: Optional[float] = Field(None, ge=0)
    unit: Optional[Unit] = None


class Ingredient(IngredientBase):
    """Schema for ingredient response."""

    id: int

    model_config = ConfigDict(from_attributes=True)
