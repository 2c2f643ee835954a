"""Business services, one per resource."""

from bakery_app.services.categories import CategoryService
from bakery_app.services.ingredients import IngredientService
from bakery_app.services.order_items import OrderItemService
from bakery_app.services.order_statuses import OrderStatusService
from bakery_app.services.orders import OrderService
from bakery_app.services.products import ProductService
from bakery_app.services.users import UserService

__all__ = [
    "CategoryService",
    "IngredientService",
    "OrderItemService",
    "OrderStatusService",
    "OrderService",
    "ProductService",
    "UserService",
]
