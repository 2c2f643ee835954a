"""Ingredient business rules."""

from typing import List, Optional

from bakery_app.core.errors import ConflictError, NotFoundError
from bakery_app.repositories.ingredients import IngredientRepository
from bakery_app.schemas.ingredient import Ingredient, IngredientCreate, IngredientUpdate
from bakery_app.services.base import require_text, service_operation


class IngredientService:
    def __init__(self, repository: IngredientRepository):
        self.repository = repository

    def _ensure_unique_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        duplicate = self.repository.find_by_exact_name(name)
        if duplicate is not None and duplicate.id != exclude_id:
            raise ConflictError(f"Ingredient '{name}' already exists")

    @service_operation("Failed to create ingredient")
    def create(self, data: IngredientCreate) -> Ingredient:
        name = require_text(data.name, "Ingredient name")
        self._ensure_unique_name(name)
        return self.repository.create(data.model_copy(update={"name": name}))

    @service_operation("Failed to fetch ingredients")
    def list_all(self) -> List[Ingredient]:
        return self.repository.find_all()

    @service_operation("Failed to fetch ingredient")
    def get(self, ingredient_id: int) -> Ingredient:
        ingredient = self.repository.find_by_id(ingredient_id)
        if ingredient is None:
            raise NotFoundError("Ingredient", ingredient_id)
        return ingredient

    @service_operation("Failed to update ingredient")
    def update(self, ingredient_id: int, data: IngredientUpdate) -> Ingredient:
        if self.repository.find_by_id(ingredient_id) is None:
            raise NotFoundError("Ingredient", ingredient_id)

        changes = data.model_dump(exclude_unset=True)
        if "name" in changes:
            changes["name"] = require_text(changes["name"], "Ingredient name")
            self._ensure_unique_name(changes["name"], exclude_id=ingredient_id)

        ingredient = self.repository.update(ingredient_id, IngredientUpdate(**changes))
        if ingredient is None:
            raise NotFoundError("Ingredient", ingredient_id)
        return ingredient

    @service_operation("Failed to delete ingredient")
    def delete(self, ingredient_id: int) -> None:
        if not self.repository.delete(ingredient_id):
            raise NotFoundError("Ingredient", ingredient_id)
