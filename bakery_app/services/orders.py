"""Order workflow and order queries."""

from datetime import datetime
from typing import List

from bakery_app.core.errors import AppError, ConflictError, DatabaseError, NotFoundError, ValidationError
from bakery_app.core.logging import logger
from bakery_app.repositories.order_items import OrderItemRepository
from bakery_app.repositories.order_statuses import OrderStatusRepository
from bakery_app.repositories.orders import OrderRepository
from bakery_app.repositories.products import ProductRepository
from bakery_app.repositories.users import UserRepository
from bakery_app.schemas.order import (
    NewOrderLine,
    Order,
    OrderCreate,
    OrderUpdate,
    OrderWithItems,
    UserOrderStatistics,
)
from bakery_app.services.base import clean_text, order_total, require_positive_id, service_operation, to_money


class OrderService:
    """Creates orders with server-side pricing and serves order queries."""

    def __init__(
        self,
        repository: OrderRepository,
        item_repository: OrderItemRepository,
        product_repository: ProductRepository,
        status_repository: OrderStatusRepository,
        user_repository: UserRepository,
    ):
        self.repository = repository
        self.item_repository = item_repository
        self.product_repository = product_repository
        self.status_repository = status_repository
        self.user_repository = user_repository

    def _price_lines(self, data: OrderCreate) -> List[NewOrderLine]:
        """Resolve each requested item to a priced line, in input order."""
        lines = []
        for item in data.items:
            product = self.product_repository.find_by_id(item.product_id)
            if product is None:
                raise ValidationError(f"Product {item.product_id} does not exist")
            if not product.is_available:
                raise ValidationError(f"Product '{product.name}' is not available")
            lines.append(
                NewOrderLine(product_id=product.id, quantity=item.quantity, price_per_unit=product.price)
            )
        return lines

    @service_operation("Failed to create order")
    def create_order(self, data: OrderCreate, user_id: int) -> OrderWithItems:
        """
        Create an order from its requested items.

        Args:
            data: Status, items and instructions. Any client-side price or
                total is ignored.
            user_id: Owner of the order.

        Returns:
            The persisted order with its items.

        Every check runs before the first write; the order row and its
        items are then written in one transaction.
        """
        if not data.items:
            raise ValidationError("Order must contain at least one item")
        require_positive_id(user_id, "user_id")
        if self.user_repository.find_by_id(user_id) is None:
            raise ValidationError(f"User {user_id} does not exist")
        if not self.status_repository.exists(data.status_id):
            raise ValidationError(f"Order status {data.status_id} does not exist")

        lines = self._price_lines(data)
        total = order_total(lines)
        instructions = clean_text(data.special_instructions)

        try:
            with self.repository.transaction() as tx:
                order = self.repository.insert(user_id, data.status_id, total, instructions, tx=tx)
                items = self.item_repository.insert_many(order.id, lines, tx=tx)
        except DatabaseError as e:
            logger.error(
                "Order persistence failed",
                extra={"user_id": user_id, "status_id": data.status_id, "item_count": len(lines), "error": e.message},
            )
            raise AppError("Failed to create order") from e

        self.repository.after_create(order)
        self.item_repository.invalidate_order(order.id)
        return OrderWithItems(**order.model_dump(), items=items)

    @service_operation("Failed to fetch orders")
    def list_all(self) -> List[Order]:
        return self.repository.find_all()

    @service_operation("Failed to fetch order")
    def get(self, order_id: int) -> Order:
        order = self.repository.find_by_id(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    @service_operation("Failed to fetch order")
    def get_with_items(self, order_id: int) -> OrderWithItems:
        order = self.get(order_id)
        items = self.item_repository.find_by_order(order_id)
        return OrderWithItems(**order.model_dump(), items=items)

    @service_operation("Failed to fetch user orders")
    def list_by_user(self, user_id: int) -> List[Order]:
        require_positive_id(user_id, "user_id")
        return self.repository.find_by_user(user_id)

    @service_operation("Failed to fetch orders by status")
    def list_by_status(self, status_id: int) -> List[Order]:
        if not self.status_repository.exists(status_id):
            raise NotFoundError("Order status", status_id)
        return self.repository.find_by_status(status_id)

    @service_operation("Failed to fetch orders by date range")
    def list_by_date_range(self, start: datetime, end: datetime) -> List[Order]:
        if start > end:
            raise ValidationError("Start date must be before end date")
        return self.repository.find_by_date_range(start, end)

    @service_operation("Failed to fetch recent orders")
    def recent(self, limit: int = 10) -> List[Order]:
        return self.repository.find_all()[:limit]

    @service_operation("Failed to update order")
    def update(self, order_id: int, data: OrderUpdate) -> Order:
        if self.repository.find_by_id(order_id) is None:
            raise NotFoundError("Order", order_id)
        if data.status_id is not None and not self.status_repository.exists(data.status_id):
            raise ValidationError(f"Order status {data.status_id} does not exist")

        changes = data.model_dump(exclude_unset=True)
        if "special_instructions" in changes:
            changes["special_instructions"] = clean_text(changes["special_instructions"])

        order = self.repository.update(order_id, OrderUpdate(**changes))
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    @service_operation("Failed to delete order")
    def delete(self, order_id: int) -> None:
        if not self.repository.delete(order_id):
            raise NotFoundError("Order", order_id)
        self.item_repository.invalidate_order(order_id)

    @service_operation("Failed to complete order")
    def complete(self, order_id: int) -> Order:
        if self.repository.find_by_id(order_id) is None:
            raise NotFoundError("Order", order_id)
        order = self.repository.mark_completed(order_id)
        if order is None:
            raise ConflictError(f"Order {order_id} is already completed")
        return order

    @service_operation("Failed to calculate user total")
    def user_total_spent(self, user_id: int) -> float:
        require_positive_id(user_id, "user_id")
        return float(to_money(self.repository.total_amount_by_user(user_id)))

    @service_operation("Failed to calculate user statistics")
    def user_statistics(self, user_id: int) -> UserOrderStatistics:
        require_positive_id(user_id, "user_id")
        orders = self.repository.find_by_user(user_id)
        total_spent = sum((to_money(o.total_amount) for o in orders), to_money(0))
        average = total_spent / len(orders) if orders else to_money(0)
        return UserOrderStatistics(
            total_orders=len(orders),
            total_spent=float(total_spent),
            completed_orders=sum(1 for o in orders if o.completed_at is not None),
            average_order_value=float(to_money(average)),
            last_order_date=max((o.order_date for o in orders), default=None),
        )
