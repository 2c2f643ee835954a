"""Product persistence."""

from typing import Any, Dict, List, Optional, Tuple

from bakery_app.cache.base import CacheStrategy
from bakery_app.core.errors import DatabaseError
from bakery_app.core.logging import logger
from bakery_app.db.session import Database, Query
from bakery_app.repositories.base import CacheAside, merge_update
from bakery_app.schemas.product import Product, ProductCreate, ProductFilters, ProductUpdate

CACHE_TTL_LIST = 180
CACHE_TTL_SINGLE = 300

_COLUMNS = (
    "name", "description", "sku", "price", "image_url",
    "is_available", "cost_price", "stock_quantity", "category_id",
)
_REQUIRED = ("name", "price", "is_available", "cost_price", "stock_quantity", "category_id")


def build_filters_sql(filters: Optional[ProductFilters]) -> Tuple[str, Dict[str, Any]]:
    """WHERE clause and parameters for the given filters."""
    if filters is None:
        return "", {}

    conditions: List[str] = []
    params: Dict[str, Any] = {}
    if filters.category_id is not None:
        conditions.append("category_id = :category_id")
        params["category_id"] = filters.category_id
    if filters.is_available is not None:
        conditions.append("is_available = :is_available")
        params["is_available"] = filters.is_available
    if filters.min_price is not None:
        conditions.append("price >= :min_price")
        params["min_price"] = filters.min_price
    if filters.max_price is not None:
        conditions.append("price <= :max_price")
        params["max_price"] = filters.max_price
    if filters.has_stock is not None:
        conditions.append("stock_quantity > 0" if filters.has_stock else "stock_quantity <= 0")
    if filters.name_contains and filters.name_contains.strip():
        conditions.append("LOWER(name) LIKE :name_pattern")
        params["name_pattern"] = f"%{filters.name_contains.strip().lower()}%"

    where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
    return where, params


class ProductRepository:
    def __init__(self, db: Database, cache: CacheStrategy):
        self.store = CacheAside(db, cache, Product, table_name="products", cache_prefix="products")

    def create(self, data: ProductCreate) -> Product:
        query = Query(
            f"INSERT INTO products ({', '.join(_COLUMNS)}) "
            f"VALUES ({', '.join(':' + c for c in _COLUMNS)}) RETURNING *",
            data.model_dump(include=set(_COLUMNS)),
        )
        product = self.store.fetch_one(query, "product creation")
        if product is None:
            raise DatabaseError("No data returned after product creation")

        self.store.invalidate_all()
        logger.info("Product created successfully", extra={"product_id": product.id, "product_name": product.name})
        return product

    def find_all(
        self,
        filters: Optional[ProductFilters] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Product]:
        """All products, newest first. Only the unfiltered, unpaginated list is cached."""
        if (filters is None or filters.is_empty()) and limit is None and offset is None:
            query = Query("SELECT * FROM products ORDER BY id DESC")
            return self.store.get_list(self.store.key("all"), query, CACHE_TTL_LIST, "fetch all products")

        where, params = build_filters_sql(filters)
        sql = f"SELECT * FROM products {where} ORDER BY id DESC"
        if limit is not None:
            sql += " LIMIT :limit OFFSET :offset"
            params.update(limit=limit, offset=offset or 0)
        return self.store.fetch_list(Query(sql, params), "products list with filters")

    def find_by_id(self, product_id: int) -> Optional[Product]:
        query = Query("SELECT * FROM products WHERE id = :id", {"id": product_id})
        return self.store.get_one(
            self.store.key(f"id:{product_id}"), query, CACHE_TTL_SINGLE, f"find product by ID: {product_id}"
        )

    def find_by_sku(self, sku: str) -> Optional[Product]:
        query = Query("SELECT * FROM products WHERE sku = :sku", {"sku": sku})
        return self.store.fetch_one(query, f"find product by SKU: {sku}")

    def search(self, term: str, limit: Optional[int] = None, offset: Optional[int] = None) -> List[Product]:
        pattern = f"%{term.lower()}%"
        sql = (
            "SELECT * FROM products WHERE LOWER(name) LIKE :pattern "
            "OR LOWER(COALESCE(description, '')) LIKE :pattern ORDER BY id DESC"
        )
        params: Dict[str, Any] = {"pattern": pattern}
        if limit is not None:
            sql += " LIMIT :limit OFFSET :offset"
            params.update(limit=limit, offset=offset or 0)
        return self.store.fetch_list(Query(sql, params), "search products")

    def count(self, filters: Optional[ProductFilters] = None, search: Optional[str] = None) -> int:
        if search is not None:
            query = Query(
                "SELECT COUNT(1) AS total FROM products WHERE LOWER(name) LIKE :pattern "
                "OR LOWER(COALESCE(description, '')) LIKE :pattern",
                {"pattern": f"%{search.lower()}%"},
            )
            return int(self.store.scalar(query, "count products by search") or 0)

        where, params = build_filters_sql(filters)
        query = Query(f"SELECT COUNT(1) AS total FROM products {where}", params)
        return int(self.store.scalar(query, "count products by filters") or 0)

    def update(self, product_id: int, data: ProductUpdate) -> Optional[Product]:
        existing = self.find_by_id(product_id)
        if existing is None:
            logger.debug("Product not found for update", extra={"product_id": product_id})
            return None

        merged = merge_update(existing, data.model_dump(exclude_unset=True), required=_REQUIRED)
        assignments = ", ".join(f"{c} = :{c}" for c in _COLUMNS)
        params = {c: merged[c] for c in _COLUMNS}
        params["id"] = product_id
        query = Query(
            f"UPDATE products SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = :id RETURNING *",
            params,
        )
        product = self.store.fetch_one(query, f"product update for ID: {product_id}")
        if product is None:
            raise DatabaseError("No data returned after product update")

        self.store.invalidate_all()
        logger.info("Product updated successfully", extra={"product_id": product_id, "product_name": product.name})
        return product

    def delete(self, product_id: int) -> bool:
        result = self.store.execute(
            Query("DELETE FROM products WHERE id = :id", {"id": product_id}), "delete product"
        )
        deleted = result.rowcount > 0
        if deleted:
            self.store.invalidate_all()
            logger.info("Product deleted successfully", extra={"product_id": product_id})
        else:
            logger.warning("Product not found for deletion", extra={"product_id": product_id})
        return deleted

    def is_referenced_by_orders(self, product_id: int) -> bool:
        query = Query("SELECT COUNT(1) AS total FROM order_items WHERE product_id = :id", {"id": product_id})
        return int(self.store.scalar(query, "count order items for product") or 0) > 0
