"""Category business rules."""

from typing import List, Optional, Tuple

from bakery_app.core.errors import ConflictError, NotFoundError
from bakery_app.core.logging import logger
from bakery_app.repositories.categories import CategoryRepository
from bakery_app.schemas.category import Category, CategoryCreate, CategoryUpdate
from bakery_app.services.base import clean_text, require_text, service_operation


class CategoryService:
    def __init__(self, repository: CategoryRepository):
        self.repository = repository

    def _ensure_unique_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        duplicate = self.repository.find_by_exact_name(name)
        if duplicate is not None and duplicate.id != exclude_id:
            logger.warning("Duplicate category name rejected", extra={"category_name": name})
            raise ConflictError(f"Category '{name}' already exists")

    @service_operation("Failed to create category")
    def create(self, data: CategoryCreate) -> Category:
        name = require_text(data.name, "Category name")
        self._ensure_unique_name(name)
        return self.repository.create(
            CategoryCreate(name=name, description=clean_text(data.description))
        )

    @service_operation("Failed to fetch categories")
    def list_all(self) -> List[Category]:
        return self.repository.find_all()

    @service_operation("Failed to fetch category")
    def get(self, category_id: int) -> Category:
        category = self.repository.find_by_id(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    @service_operation("Failed to search categories")
    def search(self, term: str) -> List[Category]:
        return self.repository.find_by_name(require_text(term, "Search term"))

    @service_operation("Failed to fetch categories")
    def paginate(self, page: int = 1, limit: int = 10) -> Tuple[List[Category], int]:
        return self.repository.find_page(page, limit)

    @service_operation("Failed to update category")
    def update(self, category_id: int, data: CategoryUpdate) -> Category:
        if self.repository.find_by_id(category_id) is None:
            raise NotFoundError("Category", category_id)

        changes = data.model_dump(exclude_unset=True)
        if "name" in changes:
            changes["name"] = require_text(changes["name"], "Category name")
            self._ensure_unique_name(changes["name"], exclude_id=category_id)
        if "description" in changes:
            changes["description"] = clean_text(changes["description"])

        category = self.repository.update(category_id, CategoryUpdate(**changes))
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    @service_operation("Failed to delete category")
    def delete(self, category_id: int) -> None:
        if self.repository.find_by_id(category_id) is None:
            raise NotFoundError("Category", category_id)
        if self.repository.has_products(category_id):
            raise ConflictError("Category has products and cannot be deleted")
        if not self.repository.delete(category_id):
            raise NotFoundError("Category", category_id)
