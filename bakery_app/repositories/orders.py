"""Order persistence."""

from datetime import datetime, timezone
from typing import ContextManager, List, Optional

from bakery_app.cache.base import CacheStrategy
from bakery_app.core.errors import DatabaseError
from bakery_app.core.logging import logger
from bakery_app.db.session import Database, Query, Transaction
from bakery_app.repositories.base import CacheAside, merge_update
from bakery_app.schemas.order import Order, OrderUpdate

CACHE_TTL_LIST = 180
CACHE_TTL_SINGLE = 300
CACHE_TTL_USER = 240
CACHE_TTL_STATUS = 300

_SQL_DATETIME = "%Y-%m-%d %H:%M:%S"


def _sql_timestamp(value: datetime) -> str:
    """UTC timestamp in the format CURRENT_TIMESTAMP produces."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(_SQL_DATETIME)


class OrderRepository:
    def __init__(self, db: Database, cache: CacheStrategy):
        self.store = CacheAside(db, cache, Order, table_name="orders", cache_prefix="orders")

    def transaction(self) -> ContextManager[Transaction]:
        """Open a transaction spanning several repository writes."""
        return self.store.db.transaction()

    def _invalidate(self, order_id: Optional[int], user_ids=(), status_ids=()) -> None:
        keys = [self.store.key("all")]
        if order_id is not None:
            keys.append(self.store.key(f"id:{order_id}"))
        keys.extend(self.store.key(f"user:{uid}") for uid in set(user_ids) if uid is not None)
        keys.extend(self.store.key(f"status:{sid}") for sid in set(status_ids) if sid is not None)
        self.store.invalidate(*keys)

    def insert(
        self,
        user_id: int,
        status_id: int,
        total_amount: float,
        special_instructions: Optional[str],
        tx: Optional[Transaction] = None,
    ) -> Order:
        """Insert the order row. Callers creating items pass the shared transaction."""
        query = Query(
            "INSERT INTO orders (user_id, status_id, total_amount, special_instructions) "
            "VALUES (:user_id, :status_id, :total_amount, :special_instructions) RETURNING *",
            {
                "user_id": user_id,
                "status_id": status_id,
                "total_amount": total_amount,
                "special_instructions": special_instructions,
            },
        )
        order = self.store.fetch_one(query, "order creation", tx)
        if order is None:
            raise DatabaseError("No data returned after order creation")
        return order

    def after_create(self, order: Order) -> None:
        """Invalidate caches once a new order is committed."""
        self._invalidate(None, user_ids=[order.user_id], status_ids=[order.status_id])
        logger.info(
            "Order created successfully",
            extra={"order_id": order.id, "user_id": order.user_id, "total_amount": order.total_amount},
        )

    def find_all(self) -> List[Order]:
        query = Query("SELECT * FROM orders ORDER BY order_date DESC, id DESC")
        return self.store.get_list(self.store.key("all"), query, CACHE_TTL_LIST, "fetch all orders")

    def find_by_id(self, order_id: int) -> Optional[Order]:
        query = Query("SELECT * FROM orders WHERE id = :id", {"id": order_id})
        return self.store.get_one(
            self.store.key(f"id:{order_id}"), query, CACHE_TTL_SINGLE, f"find order by ID: {order_id}"
        )

    def find_by_user(self, user_id: int) -> List[Order]:
        query = Query(
            "SELECT * FROM orders WHERE user_id = :user_id ORDER BY order_date DESC, id DESC",
            {"user_id": user_id},
        )
        return self.store.get_list(
            self.store.key(f"user:{user_id}"), query, CACHE_TTL_USER, f"find orders by user ID: {user_id}"
        )

    def find_by_status(self, status_id: int) -> List[Order]:
        query = Query(
            "SELECT * FROM orders WHERE status_id = :status_id ORDER BY order_date DESC, id DESC",
            {"status_id": status_id},
        )
        return self.store.get_list(
            self.store.key(f"status:{status_id}"), query, CACHE_TTL_STATUS, f"find orders by status ID: {status_id}"
        )

    def find_by_date_range(self, start: datetime, end: datetime) -> List[Order]:
        """Orders placed between two instants. Not cached."""
        query = Query(
            "SELECT * FROM orders WHERE order_date BETWEEN :start AND :end ORDER BY order_date DESC, id DESC",
            {"start": _sql_timestamp(start), "end": _sql_timestamp(end)},
        )
        return self.store.fetch_list(query, f"date range order retrieval: {start} to {end}")

    def update(self, order_id: int, data: OrderUpdate) -> Optional[Order]:
        existing = self.find_by_id(order_id)
        if existing is None:
            logger.debug("Order not found for update", extra={"order_id": order_id})
            return None

        changes = data.model_dump(exclude_unset=True)
        merged = merge_update(existing, changes, required=("status_id",))
        status_id = merged["status_id"]
        query = Query(
            "UPDATE orders SET status_id = :status_id, special_instructions = :special_instructions "
            "WHERE id = :id RETURNING *",
            {"status_id": status_id, "special_instructions": merged["special_instructions"], "id": order_id},
        )
        order = self.store.fetch_one(query, f"order update for ID: {order_id}")
        if order is None:
            raise DatabaseError("No data returned after order update")

        self._invalidate(order_id, user_ids=[existing.user_id], status_ids=[existing.status_id, status_id])
        logger.info("Order updated successfully", extra={"order_id": order_id, "changed_fields": list(changes)})
        return order

    def set_total(self, order_id: int, total_amount: float, tx: Optional[Transaction] = None) -> Optional[Order]:
        """Store a recomputed total. Caches are left to ``invalidate_order`` after commit."""
        query = Query(
            "UPDATE orders SET total_amount = :total_amount WHERE id = :id RETURNING *",
            {"total_amount": total_amount, "id": order_id},
        )
        return self.store.fetch_one(query, f"order total update for ID: {order_id}", tx)

    def invalidate_order(self, order: Order) -> None:
        self._invalidate(order.id, user_ids=[order.user_id], status_ids=[order.status_id])

    def delete(self, order_id: int) -> bool:
        existing = self.find_by_id(order_id)
        if existing is None:
            logger.warning("Order not found for deletion", extra={"order_id": order_id})
            return False

        result = self.store.execute(Query("DELETE FROM orders WHERE id = :id", {"id": order_id}), "delete order")
        deleted = result.rowcount > 0
        if deleted:
            self._invalidate(order_id, user_ids=[existing.user_id], status_ids=[existing.status_id])
            logger.info("Order deleted successfully", extra={"order_id": order_id})
        return deleted

    def mark_completed(self, order_id: int) -> Optional[Order]:
        """Set ``completed_at`` if it is still empty. Returns None when nothing changed."""
        query = Query(
            "UPDATE orders SET completed_at = CURRENT_TIMESTAMP "
            "WHERE id = :id AND completed_at IS NULL RETURNING *",
            {"id": order_id},
        )
        order = self.store.fetch_one(query, f"order completion for ID: {order_id}")
        if order is None:
            logger.debug("Order not found or already completed", extra={"order_id": order_id})
            return None

        self._invalidate(order_id, user_ids=[order.user_id], status_ids=[order.status_id])
        logger.info("Order marked as completed", extra={"order_id": order_id})
        return order

    def total_amount_by_user(self, user_id: int) -> float:
        query = Query(
            "SELECT COALESCE(SUM(total_amount), 0) AS total FROM orders WHERE user_id = :user_id",
            {"user_id": user_id},
        )
        return float(self.store.scalar(query, "calculate user total amount") or 0)

    def exists(self, order_id: int) -> bool:
        return self.find_by_id(order_id) is not None
