"""Order status persistence."""

from typing import List, Optional

from bakery_app.cache.base import CacheStrategy
from bakery_app.core.errors import DatabaseError
from bakery_app.core.logging import logger
from bakery_app.db.session import Database, Query
from bakery_app.repositories.base import CacheAside
from bakery_app.schemas.order_status import OrderStatus, OrderStatusCreate, OrderStatusUpdate

CACHE_TTL = 600


class OrderStatusRepository:
    def __init__(self, db: Database, cache: CacheStrategy):
        self.store = CacheAside(db, cache, OrderStatus, table_name="order_statuses", cache_prefix="order_statuses")

    def create(self, data: OrderStatusCreate) -> OrderStatus:
        query = Query(
            "INSERT INTO order_statuses (status_name) VALUES (:status_name) RETURNING *",
            {"status_name": data.status_name},
        )
        status = self.store.fetch_one(query, "order status creation")
        if status is None:
            raise DatabaseError("No data returned after order status creation")
        self.store.invalidate_all()
        logger.info("Order status created successfully", extra={"status_id": status.id})
        return status

    def find_all(self) -> List[OrderStatus]:
        query = Query("SELECT * FROM order_statuses ORDER BY status_name")
        return self.store.get_list(self.store.key("all"), query, CACHE_TTL, "fetch all order statuses")

    def find_by_id(self, status_id: int) -> Optional[OrderStatus]:
        query = Query("SELECT * FROM order_statuses WHERE id = :id", {"id": status_id})
        return self.store.get_one(
            self.store.key(f"id:{status_id}"), query, CACHE_TTL, f"find order status by ID: {status_id}"
        )

    def find_by_name(self, term: str) -> List[OrderStatus]:
        query = Query(
            "SELECT * FROM order_statuses WHERE LOWER(status_name) LIKE LOWER(:pattern) ORDER BY status_name",
            {"pattern": f"%{term}%"},
        )
        return self.store.fetch_list(query, f"search order statuses: {term}")

    def find_by_exact_name(self, name: str) -> Optional[OrderStatus]:
        query = Query(
            "SELECT * FROM order_statuses WHERE LOWER(status_name) = LOWER(:name)", {"name": name}
        )
        return self.store.fetch_one(query, f"find order status by exact name: {name}")

    def update(self, status_id: int, data: OrderStatusUpdate) -> Optional[OrderStatus]:
        existing = self.find_by_id(status_id)
        if existing is None:
            return None
        query = Query(
            "UPDATE order_statuses SET status_name = :status_name WHERE id = :id RETURNING *",
            {"status_name": data.status_name or existing.status_name, "id": status_id},
        )
        status = self.store.fetch_one(query, f"order status update for ID: {status_id}")
        if status is None:
            raise DatabaseError("No data returned after order status update")
        self.store.invalidate_all()
        logger.info("Order status updated successfully", extra={"status_id": status_id})
        return status

    def delete(self, status_id: int) -> bool:
        result = self.store.execute(
            Query("DELETE FROM order_statuses WHERE id = :id", {"id": status_id}), "delete order status"
        )
        deleted = result.rowcount > 0
        if deleted:
            self.store.invalidate_all()
            logger.info("Order status deleted successfully", extra={"status_id": status_id})
        return deleted

    def exists(self, status_id: int) -> bool:
        return self.find_by_id(status_id) is not None

    def is_in_use(self, status_id: int) -> bool:
        query = Query("SELECT COUNT(*) AS total FROM orders WHERE status_id = :id", {"id": status_id})
        return int(self.store.scalar(query, "count orders for status") or 0) > 0
