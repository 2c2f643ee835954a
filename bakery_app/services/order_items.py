"""Order item business rules."""

from typing import Callable, List, Optional

from bakery_app.core.errors import NotFoundError, ValidationError
from bakery_app.core.logging import logger
from bakery_app.db.session import Transaction
from bakery_app.repositories.order_items import OrderItemRepository
from bakery_app.repositories.orders import OrderRepository
from bakery_app.repositories.products import ProductRepository
from bakery_app.schemas.order import NewOrderLine, OrderItem, OrderItemCreate
from bakery_app.services.base import order_total, service_operation


class OrderItemService:
    """
    Line-level edits on existing orders.

    Prices come from the product at the time the line is added. Each edit and
    the recomputed order total are written in one transaction, so a failed
    total update also discards the line change.
    """

    def __init__(
        self,
        repository: OrderItemRepository,
        order_repository: OrderRepository,
        product_repository: ProductRepository,
    ):
        self.repository = repository
        self.order_repository = order_repository
        self.product_repository = product_repository

    def _edit_with_total(
        self, order_id: int, write: Callable[[Transaction], Optional[OrderItem]]
    ) -> Optional[OrderItem]:
        """Run ``write`` and the total update on one transaction, then invalidate caches."""
        with self.order_repository.transaction() as tx:
            item = write(tx)
            if item is None:
                return None
            total = order_total(self.repository.lines_of_order(order_id, tx))
            order = self.order_repository.set_total(order_id, total, tx=tx)
            if order is None:
                raise NotFoundError("Order", order_id)

        self.repository.invalidate_order(order_id)
        self.order_repository.invalidate_order(order)
        logger.debug("Order total recalculated", extra={"order_id": order_id, "total_amount": total})
        return item

    @service_operation("Failed to add order item")
    def add(self, data: OrderItemCreate) -> OrderItem:
        if not self.order_repository.exists(data.order_id):
            raise NotFoundError("Order", data.order_id)

        product = self.product_repository.find_by_id(data.product_id)
        if product is None:
            raise ValidationError(f"Product {data.product_id} does not exist")
        if not product.is_available:
            raise ValidationError(f"Product '{product.name}' is not available")

        line = NewOrderLine(product_id=product.id, quantity=data.quantity, price_per_unit=product.price)
        item = self._edit_with_total(
            data.order_id, lambda tx: self.repository.insert_many(data.order_id, [line], tx)[0]
        )
        logger.info("Order item created", extra={"order_id": data.order_id, "item_id": item.id})
        return item

    @service_operation("Failed to fetch order items")
    def list_by_order(self, order_id: int) -> List[OrderItem]:
        if not self.order_repository.exists(order_id):
            raise NotFoundError("Order", order_id)
        return self.repository.find_by_order(order_id)

    @service_operation("Failed to fetch order item")
    def get(self, item_id: int) -> OrderItem:
        item = self.repository.find_by_id(item_id)
        if item is None:
            raise NotFoundError("Order item", item_id)
        return item

    @service_operation("Failed to update order item")
    def update_quantity(self, item_id: int, quantity: int) -> OrderItem:
        if quantity <= 0:
            raise ValidationError("Quantity must be greater than zero")
        existing = self.get(item_id)
        item = self._edit_with_total(
            existing.order_id, lambda tx: self.repository.update_quantity(item_id, quantity, tx)
        )
        if item is None:
            raise NotFoundError("Order item", item_id)
        return item

    @service_operation("Failed to delete order item")
    def delete(self, item_id: int) -> None:
        existing = self.get(item_id)
        removed = self._edit_with_total(existing.order_id, lambda tx: self.repository.delete(item_id, tx))
        if removed is None:
            raise NotFoundError("Order item", item_id)
