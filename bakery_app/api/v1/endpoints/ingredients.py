"""Ingredient inventory endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status

from bakery_app.api.deps import get_container
from bakery_app.container import Container
from bakery_app.core.security import require_admin
from bakery_app.schemas.common import Envelope, Message
from bakery_app.schemas.ingredient import Ingredient, IngredientCreate, IngredientUpdate

router = APIRouter()


@router.get("", response_model=Envelope[List[Ingredient]])
def list_ingredients(container: Container = Depends(get_container)):
    return Envelope(data=container.ingredients.list_all())


@router.get("/{ingredient_id}", response_model=Envelope[Ingredient], dependencies=[Depends(require_admin)])
def get_ingredient(ingredient_id: int, container: Container = Depends(get_container)):
    return Envelope(data=container.ingredients.get(ingredient_id))


@router.post(
    "",
    response_model=Envelope[Ingredient],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_ingredient(data: IngredientCreate, container: Container = Depends(get_container)):
    return Envelope(data=container.ingredients.create(data), message="Ingredient created")


@router.put("/{ingredient_id}", response_model=Envelope[Ingredient], dependencies=[Depends(require_admin)])
def update_ingredient(
    ingredient_id: int,
    data: IngredientUpdate,
    container: Container = Depends(get_container),
):
    return Envelope(data=container.ingredients.update(ingredient_id, data), message="Ingredient updated")


@router.delete("/{ingredient_id}", response_model=Message, dependencies=[Depends(require_admin)])
def delete_ingredient(ingredient_id: int, container: Container = Depends(get_container)):
    container.ingredients.delete(ingredient_id)
    return Message(message="Ingredient deleted")
