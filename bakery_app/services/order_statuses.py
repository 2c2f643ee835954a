"""Order status business rules."""

from typing import List, Optional

from bakery_app.core.errors import ConflictError, NotFoundError
from bakery_app.repositories.order_statuses import OrderStatusRepository
from bakery_app.schemas.order_status import OrderStatus, OrderStatusCreate, OrderStatusUpdate
from bakery_app.services.base import require_text, service_operation


class OrderStatusService:
    def __init__(self, repository: OrderStatusRepository):
        self.repository = repository

    def _ensure_unique_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        duplicate = self.repository.find_by_exact_name(name)
        if duplicate is not None and duplicate.id != exclude_id:
            raise ConflictError(f"Order status '{name}' already exists")

    @service_operation("Failed to create order status")
    def create(self, data: OrderStatusCreate) -> OrderStatus:
        name = require_text(data.status_name, "Status name")
        self._ensure_unique_name(name)
        return self.repository.create(OrderStatusCreate(status_name=name))

    @service_operation("Failed to fetch order statuses")
    def list_all(self) -> List[OrderStatus]:
        return self.repository.find_all()

    @service_operation("Failed to fetch order status")
    def get(self, status_id: int) -> OrderStatus:
        status = self.repository.find_by_id(status_id)
        if status is None:
            raise NotFoundError("Order status", status_id)
        return status

    @service_operation("Failed to search order statuses")
    def search(self, term: str) -> List[OrderStatus]:
        return self.repository.find_by_name(require_text(term, "Search term"))

    @service_operation("Failed to update order status")
    def update(self, status_id: int, data: OrderStatusUpdate) -> OrderStatus:
        if self.repository.find_by_id(status_id) is None:
            raise NotFoundError("Order status", status_id)

        name = data.status_name
        if name is not None:
            name = require_text(name, "Status name")
            self._ensure_unique_name(name, exclude_id=status_id)

        status = self.repository.update(status_id, OrderStatusUpdate(status_name=name))
        if status is None:
            raise NotFoundError("Order status", status_id)
        return status

    @service_operation("Failed to delete order status")
    def delete(self, status_id: int) -> None:
        if self.repository.find_by_id(status_id) is None:
            raise NotFoundError("Order status", status_id)
        if self.repository.is_in_use(status_id):
            raise ConflictError("Order status is used by existing orders and cannot be deleted")
        self.repository.delete(status_id)

    @service_operation("Failed to check order status")
    def exists(self, status_id: int) -> bool:
        return self.repository.exists(status_id)
