"""Product business rules."""

from typing import List, Optional, Tuple

from bakery_app.core.errors import ConflictError, NotFoundError, ValidationError
from bakery_app.core.logging import logger
from bakery_app.repositories.categories import CategoryRepository
from bakery_app.repositories.products import ProductRepository
from bakery_app.schemas.product import Product, ProductCreate, ProductFilters, ProductUpdate
from bakery_app.services.base import clean_text, require_text, service_operation


class ProductService:
    """Catalog management. A product always belongs to an existing category."""

    def __init__(self, repository: ProductRepository, category_repository: CategoryRepository):
        self.repository = repository
        self.category_repository = category_repository

    def _ensure_category(self, category_id: int) -> None:
        if not self.category_repository.exists(category_id):
            raise ValidationError(f"Category {category_id} does not exist")

    def _ensure_unique_sku(self, sku: Optional[str], exclude_id: Optional[int] = None) -> None:
        if sku is None:
            return
        duplicate = self.repository.find_by_sku(sku)
        if duplicate is not None and duplicate.id != exclude_id:
            raise ConflictError(f"Product with SKU '{sku}' already exists")

    @service_operation("Failed to create product")
    def create(self, data: ProductCreate) -> Product:
        name = require_text(data.name, "Product name")
        sku = clean_text(data.sku)
        self._ensure_category(data.category_id)
        self._ensure_unique_sku(sku)

        cleaned = data.model_copy(
            update={
                "name": name,
                "description": clean_text(data.description),
                "sku": sku,
                "image_url": clean_text(data.image_url),
            }
        )
        return self.repository.create(cleaned)

    @service_operation("Failed to fetch products")
    def list(
        self,
        filters: Optional[ProductFilters] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Tuple[List[Product], int]:
        """Products matching ``filters`` plus the total count before pagination."""
        if filters is not None and filters.min_price is not None and filters.max_price is not None:
            if filters.min_price > filters.max_price:
                raise ValidationError("min_price must not exceed max_price")

        offset = None
        if limit is not None:
            offset = ((page or 1) - 1) * limit
        products = self.repository.find_all(filters, limit=limit, offset=offset)
        if limit is None:
            return products, len(products)
        return products, self.repository.count(filters)

    @service_operation("Failed to fetch product")
    def get(self, product_id: int) -> Product:
        product = self.repository.find_by_id(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    @service_operation("Failed to search products")
    def search(self, term: str, page: int = 1, limit: int = 20) -> Tuple[List[Product], int]:
        term = require_text(term, "Search term")
        products = self.repository.search(term, limit=limit, offset=(page - 1) * limit)
        logger.info(f"Product search '{term}' returned {len(products)} results")
        return products, self.repository.count(search=term)

    @service_operation("Failed to count products")
    def count(self, filters: Optional[ProductFilters] = None) -> int:
        return self.repository.count(filters)

    @service_operation("Failed to update product")
    def update(self, product_id: int, data: ProductUpdate) -> Product:
        if self.repository.find_by_id(product_id) is None:
            raise NotFoundError("Product", product_id)

        changes = data.model_dump(exclude_unset=True)
        if "name" in changes and changes["name"] is not None:
            changes["name"] = require_text(changes["name"], "Product name")
        for field in ("description", "sku", "image_url"):
            if field in changes:
                changes[field] = clean_text(changes[field])
        if changes.get("category_id") is not None:
            self._ensure_category(changes["category_id"])
        self._ensure_unique_sku(changes.get("sku"), exclude_id=product_id)

        product = self.repository.update(product_id, ProductUpdate(**changes))
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    @service_operation("Failed to delete product")
    def delete(self, product_id: int) -> None:
        if self.repository.find_by_id(product_id) is None:
            raise NotFoundError("Product", product_id)
        if self.repository.is_referenced_by_orders(product_id):
            raise ConflictError("Product is referenced by existing orders and cannot be deleted")
        self.repository.delete(product_id)
