"""Explicit wiring of the database, cache, repositories and services."""

from typing import Optional

from sqlalchemy.engine import Engine

from bakery_app.cache import CacheStrategy, create_cache_strategy
from bakery_app.core.config import Settings
from bakery_app.core.logging import logger
from bakery_app.db.session import Database, create_db_engine, init_db
from bakery_app.repositories import (
    CategoryRepository,
    IngredientRepository,
    OrderItemRepository,
    OrderRepository,
    OrderStatusRepository,
    ProductRepository,
    UserRepository,
)
from bakery_app.services import (
    CategoryService,
    IngredientService,
    OrderItemService,
    OrderService,
    OrderStatusService,
    ProductService,
    UserService,
)


class Container:
    """Holds the process-wide resources and every service built on them."""

    def __init__(self, db: Database, cache: CacheStrategy):
        self.db = db
        self.cache = cache

        self.category_repository = CategoryRepository(db, cache)
        self.ingredient_repository = IngredientRepository(db, cache)
        self.order_status_repository = OrderStatusRepository(db, cache)
        self.product_repository = ProductRepository(db, cache)
        self.order_repository = OrderRepository(db, cache)
        self.order_item_repository = OrderItemRepository(db, cache)
        self.user_repository = UserRepository(db, cache)

        self.categories = CategoryService(self.category_repository)
        self.ingredients = IngredientService(self.ingredient_repository)
        self.order_statuses = OrderStatusService(self.order_status_repository)
        self.products = ProductService(self.product_repository, self.category_repository)
        self.orders = OrderService(
            self.order_repository,
            self.order_item_repository,
            self.product_repository,
            self.order_status_repository,
            self.user_repository,
        )
        self.order_items = OrderItemService(
            self.order_item_repository, self.order_repository, self.product_repository
        )
        self.users = UserService(self.user_repository)

    @classmethod
    def from_settings(cls, settings: Settings, engine: Optional[Engine] = None) -> "Container":
        engine = engine or create_db_engine(settings)
        init_db(engine)
        return cls(Database(engine), create_cache_strategy(settings))

    def health(self) -> dict:
        return {"database": self.db.ping(), "cache": self.cache.is_available()}

    def close(self) -> None:
        logger.info("Releasing database and cache resources")
        self.cache.close()
        self.db.dispose()
