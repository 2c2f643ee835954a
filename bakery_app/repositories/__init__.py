"""Entity repositories built on the cache-aside executor."""

from bakery_app.repositories.base import CacheAside
from bakery_app.repositories.categories import CategoryRepository
from bakery_app.repositories.ingredients import IngredientRepository
from bakery_app.repositories.order_items import OrderItemRepository
from bakery_app.repositories.order_statuses import OrderStatusRepository
from bakery_app.repositories.orders import OrderRepository
from bakery_app.repositories.products import ProductRepository
from bakery_app.repositories.users import UserRepository

__all__ = [
    "CacheAside",
    "CategoryRepository",
    "IngredientRepository",
    "OrderItemRepository",
    "OrderStatusRepository",
    "OrderRepository",
    "ProductRepository",
    "UserRepository",
]
