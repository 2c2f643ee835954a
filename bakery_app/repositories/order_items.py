"""Order item persistence.

Writes accept an optional transaction and never touch the cache; callers
invalidate with ``invalidate_order`` once their transaction has committed.
"""

from typing import Iterable, List, Optional

from bakery_app.cache.base import CacheStrategy
from bakery_app.core.errors import DatabaseError
from bakery_app.core.logging import logger
from bakery_app.db.session import Database, Query, Transaction
from bakery_app.repositories.base import CacheAside
from bakery_app.schemas.order import NewOrderLine, OrderItem

CACHE_TTL = 300

_INSERT_SQL = (
    "INSERT INTO order_items (order_id, product_id, quantity, price_per_unit) "
    "VALUES (:order_id, :product_id, :quantity, :price_per_unit) RETURNING *"
)


class OrderItemRepository:
    def __init__(self, db: Database, cache: CacheStrategy):
        self.store = CacheAside(db, cache, OrderItem, table_name="order_items", cache_prefix="order_items")

    def _order_key(self, order_id: int) -> str:
        return self.store.key(f"order:{order_id}")

    def insert_many(
        self, order_id: int, lines: Iterable[NewOrderLine], tx: Optional[Transaction] = None
    ) -> List[OrderItem]:
        """Insert several lines of one order, inside ``tx`` when given."""
        items = []
        for line in lines:
            query = Query(_INSERT_SQL, {"order_id": order_id, **line.model_dump()})
            item = self.store.fetch_one(query, f"order item creation for order {order_id}", tx)
            if item is None:
                raise DatabaseError("No data returned after order item creation")
            items.append(item)
        return items

    def find_by_order(self, order_id: int) -> List[OrderItem]:
        query = Query("SELECT * FROM order_items WHERE order_id = :order_id ORDER BY id", {"order_id": order_id})
        return self.store.get_list(self._order_key(order_id), query, CACHE_TTL, f"find items by order ID: {order_id}")

    def lines_of_order(self, order_id: int, tx: Transaction) -> List[OrderItem]:
        """Uncached read of an order's lines as seen by ``tx``."""
        query = Query("SELECT * FROM order_items WHERE order_id = :order_id ORDER BY id", {"order_id": order_id})
        return self.store.fetch_list(query, f"order lines for total of order {order_id}", tx)

    def find_by_id(self, item_id: int) -> Optional[OrderItem]:
        query = Query("SELECT * FROM order_items WHERE id = :id", {"id": item_id})
        return self.store.fetch_one(query, f"find order item by ID: {item_id}")

    def update_quantity(self, item_id: int, quantity: int, tx: Optional[Transaction] = None) -> Optional[OrderItem]:
        query = Query(
            "UPDATE order_items SET quantity = :quantity WHERE id = :id RETURNING *",
            {"quantity": quantity, "id": item_id},
        )
        item = self.store.fetch_one(query, f"order item update for ID: {item_id}", tx)
        if item is not None:
            logger.info("Order item updated", extra={"item_id": item_id, "quantity": quantity})
        return item

    def delete(self, item_id: int, tx: Optional[Transaction] = None) -> Optional[OrderItem]:
        """Delete an item, returning the removed row (None when it did not exist)."""
        query = Query("DELETE FROM order_items WHERE id = :id RETURNING *", {"id": item_id})
        removed = self.store.fetch_one(query, f"delete order item {item_id}", tx)
        if removed is not None:
            logger.info("Order item deleted", extra={"item_id": item_id, "order_id": removed.order_id})
        return removed

    def invalidate_order(self, order_id: int) -> None:
        self.store.invalidate(self._order_key(order_id))
