"""Ingredient persistence."""

from typing import List, Optional

from bakery_app.cache.base import CacheStrategy
from bakery_app.core.errors import DatabaseError
from bakery_app.core.logging import logger
from bakery_app.db.session import Database, Query
from bakery_app.repositories.base import CacheAside, merge_update
from bakery_app.schemas.ingredient import Ingredient, IngredientCreate, IngredientUpdate

CACHE_TTL = 300
_REQUIRED = ("name", "stock_quantity", "unit")


class IngredientRepository:
    def __init__(self, db: Database, cache: CacheStrategy):
        self.store = CacheAside(db, cache, Ingredient, table_name="ingredients", cache_prefix="ingredients")

    def create(self, data: IngredientCreate) -> Ingredient:
        query = Query(
            "INSERT INTO ingredients (name, stock_quantity, unit) "
            "VALUES (:name, :stock_quantity, :unit) RETURNING *",
            data.model_dump(),
        )
        ingredient = self.store.fetch_one(query, "ingredient creation")
        if ingredient is None:
            raise DatabaseError("No data returned after ingredient creation")
        self.store.invalidate_all()
        logger.info("Ingredient created successfully", extra={"ingredient_id": ingredient.id})
        return ingredient

    def find_all(self) -> List[Ingredient]:
        query = Query("SELECT * FROM ingredients ORDER BY name ASC")
        return self.store.get_list(self.store.key("all"), query, CACHE_TTL, "fetch all ingredients")

    def find_by_id(self, ingredient_id: int) -> Optional[Ingredient]:
        query = Query("SELECT * FROM ingredients WHERE id = :id", {"id": ingredient_id})
        return self.store.get_one(
            self.store.key(f"id:{ingredient_id}"), query, CACHE_TTL, f"find ingredient by ID: {ingredient_id}"
        )

    def find_by_exact_name(self, name: str) -> Optional[Ingredient]:
        query = Query("SELECT * FROM ingredients WHERE LOWER(name) = LOWER(:name)", {"name": name})
        return self.store.fetch_one(query, f"find ingredient by exact name: {name}")

    def update(self, ingredient_id: int, data: IngredientUpdate) -> Optional[Ingredient]:
        existing = self.find_by_id(ingredient_id)
        if existing is None:
            return None

        merged = merge_update(existing, data.model_dump(exclude_unset=True), required=_REQUIRED)
        query = Query(
            "UPDATE ingredients SET name = :name, stock_quantity = :stock_quantity, unit = :unit "
            "WHERE id = :id RETURNING *",
            {
                "name": merged["name"],
                "stock_quantity": merged["stock_quantity"],
                "unit": merged["unit"],
                "id": ingredient_id,
            },
        )
        ingredient = self.store.fetch_one(query, f"ingredient update for ID: {ingredient_id}")
        if ingredient is None:
            raise DatabaseError("No data returned after ingredient update")
        self.store.invalidate_all()
        logger.info("Ingredient updated successfully", extra={"ingredient_id": ingredient_id})
        return ingredient

    def delete(self, ingredient_id: int) -> bool:
        result = self.store.execute(
            Query("DELETE FROM ingredients WHERE id = :id", {"id": ingredient_id}), "delete ingredient"
        )
        deleted = result.rowcount > 0
        if deleted:
            self.store.invalidate_all()
            logger.info("Ingredient deleted successfully", extra={"ingredient_id": ingredient_id})
        return deleted
