"""Shared fixtures: in-memory SQLite, in-process cache, wired container."""

import os

# Settings are read at import time by the logging module.
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest
from fastapi.testclient import TestClient

from bakery_app.cache import MemoryCacheStrategy
from bakery_app.container import Container
from bakery_app.core.config import Settings
from bakery_app.core.security import create_access_token
from bakery_app.db.session import Database, create_db_engine, init_db
from bakery_app.main import create_app
from bakery_app.schemas.category import CategoryCreate
from bakery_app.schemas.order_status import OrderStatusCreate
from bakery_app.schemas.product import ProductCreate
from bakery_app.schemas.user import UserRegister


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        secret_key="test-secret-key",
        database_url="sqlite://",
        rate_limit_requests=1000,
        request_timeout_seconds=30,
    )


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    return Database(engine)


@pytest.fixture
def cache():
    return MemoryCacheStrategy(max_entries=1000, default_ttl=300)


@pytest.fixture
def container(db, cache):
    return Container(db, cache)


@pytest.fixture
def client(settings, container):
    app = create_app(settings, container)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin(container):
    return container.users.register(
        UserRegister(
            first_name="Ana",
            last_name="Admin",
            email="admin@panaderia.com",
            password="admin-pass",
            role="admin",
        ),
        allow_role=True,
    )


@pytest.fixture
def customer(container):
    return container.users.register(
        UserRegister(first_name="Carlos", last_name="Cliente", email="carlos@panaderia.com", password="secret-pass")
    )


@pytest.fixture
def admin_headers(admin):
    token = create_access_token(admin.id, f"{admin.first_name} {admin.last_name}", "admin")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers(customer):
    token = create_access_token(customer.id, f"{customer.first_name} {customer.last_name}", "customer")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def catalog(container):
    """A category, a pending status and three products (one unavailable)."""
    category = container.categories.create(CategoryCreate(name="Pasteles", description="Tortas y pasteles"))
    pending = container.order_statuses.create(OrderStatusCreate(status_name="pending"))
    cake = container.products.create(
        ProductCreate(name="Chocolate cake", price=10.00, category_id=category.id, stock_quantity=5)
    )
    cookie = container.products.create(
        ProductCreate(name="Butter cookie", price=3.50, category_id=category.id, stock_quantity=40)
    )
    retired = container.products.create(
        ProductCreate(name="Seasonal tart", price=7.25, category_id=category.id, is_available=False)
    )
    return {"category": category, "status": pending, "cake": cake, "cookie": cookie, "retired": retired}
