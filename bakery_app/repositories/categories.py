"""Category persistence."""

from typing import List, Optional, Tuple

from bakery_app.cache.base import CacheStrategy
from bakery_app.core.errors import DatabaseError
from bakery_app.core.logging import logger
from bakery_app.db.session import Database, Query
from bakery_app.repositories.base import CacheAside, merge_update
from bakery_app.schemas.category import Category, CategoryCreate, CategoryUpdate

CACHE_TTL_LIST = 600
CACHE_TTL_SINGLE = 600
_REQUIRED = ("name",)


class CategoryRepository:
    """CRUD and lookups for categories."""

    def __init__(self, db: Database, cache: CacheStrategy):
        self.store = CacheAside(db, cache, Category, table_name="categories", cache_prefix="categories")

    def create(self, data: CategoryCreate) -> Category:
        query = Query(
            "INSERT INTO categories (name, description) VALUES (:name, :description) RETURNING *",
            {"name": data.name, "description": data.description},
        )
        category = self.store.fetch_one(query, "category creation")
        if category is None:
            raise DatabaseError("No data returned after category creation")

        self.store.invalidate_all()
        logger.info("Category created successfully", extra={"category_id": category.id})
        return category

    def find_all(self) -> List[Category]:
        query = Query("SELECT * FROM categories ORDER BY name ASC")
        return self.store.get_list(self.store.key("all"), query, CACHE_TTL_LIST, "fetch all categories")

    def find_by_id(self, category_id: int) -> Optional[Category]:
        query = Query("SELECT * FROM categories WHERE id = :id", {"id": category_id})
        return self.store.get_one(
            self.store.key(f"id:{category_id}"), query, CACHE_TTL_SINGLE, f"find category by ID: {category_id}"
        )

    def find_by_exact_name(self, name: str) -> Optional[Category]:
        """Case-insensitive exact match, uncached so uniqueness checks see fresh data."""
        query = Query("SELECT * FROM categories WHERE LOWER(name) = LOWER(:name)", {"name": name})
        return self.store.fetch_one(query, f"find category by exact name: {name}")

    def find_by_name(self, term: str) -> List[Category]:
        query = Query(
            "SELECT * FROM categories WHERE LOWER(name) LIKE LOWER(:pattern) ORDER BY name ASC",
            {"pattern": f"%{term}%"},
        )
        return self.store.fetch_list(query, f"search categories: {term}")

    def find_page(self, page: int = 1, limit: int = 10) -> Tuple[List[Category], int]:
        query = Query(
            "SELECT * FROM categories ORDER BY name ASC LIMIT :limit OFFSET :offset",
            {"limit": limit, "offset": (page - 1) * limit},
        )
        categories = self.store.fetch_list(query, "paginated categories")
        return categories, self.count()

    def count(self) -> int:
        total = self.store.scalar(Query("SELECT COUNT(*) AS total FROM categories"), "count categories")
        return int(total or 0)

    def update(self, category_id: int, data: CategoryUpdate) -> Optional[Category]:
        existing = self.find_by_id(category_id)
        if existing is None:
            logger.debug("Category not found for update", extra={"category_id": category_id})
            return None

        merged = merge_update(existing, data.model_dump(exclude_unset=True), required=_REQUIRED)
        query = Query(
            "UPDATE categories SET name = :name, description = :description WHERE id = :id RETURNING *",
            {"name": merged["name"], "description": merged["description"], "id": category_id},
        )
        category = self.store.fetch_one(query, f"category update for ID: {category_id}")
        if category is None:
            raise DatabaseError("No data returned after category update")

        self.store.invalidate_all()
        logger.info("Category updated successfully", extra={"category_id": category_id})
        return category

    def delete(self, category_id: int) -> bool:
        result = self.store.execute(
            Query("DELETE FROM categories WHERE id = :id", {"id": category_id}), "delete category"
        )
        deleted = result.rowcount > 0
        if deleted:
            self.store.invalidate_all()
            logger.info("Category deleted successfully", extra={"category_id": category_id})
        return deleted

    def exists(self, category_id: int) -> bool:
        return self.find_by_id(category_id) is not None

    def has_products(self, category_id: int) -> bool:
        query = Query("SELECT COUNT(*) AS total FROM products WHERE category_id = :id", {"id": category_id})
        return int(self.store.scalar(query, "count products for category") or 0) > 0
