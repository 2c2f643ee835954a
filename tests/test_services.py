"""Tests for the entity services."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError as PydanticValidationError

from bakery_app.core.errors import AppError, ConflictError, NotFoundError, ValidationError
from bakery_app.schemas.category import CategoryCreate, CategoryUpdate
from bakery_app.schemas.ingredient import IngredientCreate, IngredientUpdate
from bakery_app.schemas.order import OrderCreate, OrderItemRequest
from bakery_app.schemas.order_status import OrderStatusCreate, OrderStatusUpdate
from bakery_app.schemas.product import ProductCreate, ProductFilters, ProductUpdate
from bakery_app.schemas.user import LoginRequest, UserRegister, UserUpdate
from bakery_app.services import CategoryService


class TestCategories:
    def test_duplicate_name_is_case_insensitive(self, container):
        container.categories.create(CategoryCreate(name="Pasteles"))
        with pytest.raises(ConflictError) as exc_info:
            container.categories.create(CategoryCreate(name="pasteles"))
        assert exc_info.value.status_code == 409

    def test_names_are_trimmed(self, container):
        category = container.categories.create(CategoryCreate(name="  Panes  ", description="  Integral "))
        assert category.name == "Panes"
        assert category.description == "Integral"

    def test_blank_name_rejected(self, container):
        with pytest.raises(ValidationError):
            container.categories.create(CategoryCreate(name="   "))

    def test_rename_to_own_name_is_allowed(self, container):
        category = container.categories.create(CategoryCreate(name="Panes"))
        assert container.categories.update(category.id, CategoryUpdate(name="PANES")).name == "PANES"

    def test_rename_onto_another_category_conflicts(self, container):
        container.categories.create(CategoryCreate(name="Panes"))
        other = container.categories.create(CategoryCreate(name="Tortas"))
        with pytest.raises(ConflictError):
            container.categories.update(other.id, CategoryUpdate(name="panes"))

    def test_explicit_none_clears_description(self, container):
        category = container.categories.create(CategoryCreate(name="Panes", description="old"))

        updated = container.categories.update(category.id, CategoryUpdate(description=None))

        assert updated.description is None
        assert updated.name == "Panes"
        assert container.categories.get(category.id).description is None

    def test_blank_description_clears_it(self, container):
        category = container.categories.create(CategoryCreate(name="Panes", description="old"))
        assert container.categories.update(category.id, CategoryUpdate(description="   ")).description is None

    def test_name_cannot_be_cleared(self, container):
        category = container.categories.create(CategoryCreate(name="Panes"))
        with pytest.raises(ValidationError):
            container.categories.update(category.id, CategoryUpdate(name=None))
        assert container.categories.get(category.id).name == "Panes"

    def test_update_missing_is_not_found_without_write(self):
        repository = MagicMock()
        repository.find_by_id.return_value = None
        service = CategoryService(repository)

        with pytest.raises(NotFoundError) as exc_info:
            service.update(7, CategoryUpdate(name="Nada"))

        assert exc_info.value.status_code == 404
        repository.update.assert_not_called()

    def test_update_is_visible_through_the_cache(self, container):
        category = container.categories.create(CategoryCreate(name="Panes"))
        assert [c.name for c in container.categories.list_all()] == ["Panes"]

        container.categories.update(category.id, CategoryUpdate(name="Panadería"))

        assert [c.name for c in container.categories.list_all()] == ["Panadería"]
        assert container.categories.get(category.id).name == "Panadería"

    def test_search_and_pagination(self, container):
        for name in ("Galletas", "Pasteles", "Panes"):
            container.categories.create(CategoryCreate(name=name))

        assert [c.name for c in container.categories.search("pa")] == ["Panes", "Pasteles"]
        page, total = container.categories.paginate(page=2, limit=2)
        assert total == 3
        assert [c.name for c in page] == ["Pasteles"]

    def test_category_with_products_cannot_be_deleted(self, container, catalog):
        with pytest.raises(ConflictError):
            container.categories.delete(catalog["category"].id)

    def test_delete(self, container):
        category = container.categories.create(CategoryCreate(name="Panes"))
        container.categories.delete(category.id)
        with pytest.raises(NotFoundError):
            container.categories.get(category.id)

    def test_unexpected_failure_becomes_generic_error(self):
        repository = MagicMock()
        repository.find_all.side_effect = RuntimeError("boom")

        with pytest.raises(AppError) as exc_info:
            CategoryService(repository).list_all()

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Failed to fetch categories"


class TestIngredients:
    def test_create_and_update(self, container):
        flour = container.ingredients.create(IngredientCreate(name=" Harina ", stock_quantity=25, unit="kg"))
        assert flour.name == "Harina"

        updated = container.ingredients.update(flour.id, IngredientUpdate(stock_quantity=20.5))
        assert updated.stock_quantity == 20.5
        assert updated.unit == "kg"

    def test_duplicate_name_conflicts(self, container):
        container.ingredients.create(IngredientCreate(name="Azúcar", unit="kg"))
        with pytest.raises(ConflictError):
            container.ingredients.create(IngredientCreate(name="azúcar", unit="g"))

    def test_negative_stock_rejected_by_schema(self):
        with pytest.raises(PydanticValidationError):
            IngredientCreate(name="Leche", stock_quantity=-1, unit="l")

    def test_unit_cannot_be_cleared(self, container):
        flour = container.ingredients.create(IngredientCreate(name="Harina", stock_quantity=25, unit="kg"))
        with pytest.raises(ValidationError):
            container.ingredients.update(flour.id, IngredientUpdate(unit=None))
        assert container.ingredients.get(flour.id).unit == "kg"

    def test_delete_missing_is_not_found(self, container):
        with pytest.raises(NotFoundError):
            container.ingredients.delete(12)


class TestOrderStatuses:
    def test_create_search_and_exists(self, container):
        status = container.order_statuses.create(OrderStatusCreate(status_name=" baking "))
        assert status.status_name == "baking"
        assert container.order_statuses.exists(status.id)
        assert not container.order_statuses.exists(999)
        assert [s.status_name for s in container.order_statuses.search("bak")] == ["baking"]

    def test_duplicate_conflicts(self, container):
        container.order_statuses.create(OrderStatusCreate(status_name="ready"))
        with pytest.raises(ConflictError):
            container.order_statuses.create(OrderStatusCreate(status_name="READY"))

    def test_update(self, container):
        status = container.order_statuses.create(OrderStatusCreate(status_name="ready"))
        updated = container.order_statuses.update(status.id, OrderStatusUpdate(status_name="picked up"))
        assert updated.status_name == "picked up"


class TestProducts:
    def test_unknown_category_rejected(self, container):
        with pytest.raises(ValidationError) as exc_info:
            container.products.create(ProductCreate(name="Brownie", price=2.0, category_id=99))
        assert exc_info.value.status_code == 400

    def test_duplicate_sku_conflicts(self, container, catalog):
        category_id = catalog["category"].id
        container.products.create(ProductCreate(name="Brownie", price=2.0, sku="BR-1", category_id=category_id))
        with pytest.raises(ConflictError):
            container.products.create(ProductCreate(name="Blondie", price=2.0, sku="BR-1", category_id=category_id))

    def test_filters(self, container, catalog):
        cheap, total = container.products.list(ProductFilters(max_price=5))
        assert [p.name for p in cheap] == ["Butter cookie"]
        assert total == 1

        in_stock, _ = container.products.list(ProductFilters(has_stock=True, is_available=True))
        assert {p.name for p in in_stock} == {"Chocolate cake", "Butter cookie"}

        named, _ = container.products.list(ProductFilters(name_contains="CAKE"))
        assert [p.name for p in named] == ["Chocolate cake"]

    def test_inverted_price_range_rejected(self, container):
        with pytest.raises(ValidationError):
            container.products.list(ProductFilters(min_price=10, max_price=1))

    def test_pagination_reports_total(self, container, catalog):
        page, total = container.products.list(page=2, limit=2)
        assert total == 3
        assert len(page) == 1

    def test_search_matches_description(self, container, catalog):
        container.products.create(
            ProductCreate(
                name="Rosca",
                description="Con chocolate amargo",
                price=6.0,
                category_id=catalog["category"].id,
            )
        )
        found, total = container.products.search("chocolate")
        assert {p.name for p in found} == {"Chocolate cake", "Rosca"}
        assert total == 2

    def test_update_keeps_unset_fields(self, container, catalog):
        cake = catalog["cake"]
        updated = container.products.update(cake.id, ProductUpdate(price=12.5))
        assert updated.price == 12.5
        assert updated.name == cake.name
        assert updated.stock_quantity == cake.stock_quantity
        assert container.products.get(cake.id).price == 12.5

    def test_optional_fields_can_be_cleared(self, container, catalog):
        cake = container.products.update(
            catalog["cake"].id,
            ProductUpdate(sku="CAKE-1", description="Tres capas", image_url="https://cdn.panaderia.com/cake.png"),
        )
        assert cake.sku == "CAKE-1"

        cleared = container.products.update(cake.id, ProductUpdate(sku="   ", description=None, image_url=None))

        assert (cleared.sku, cleared.description, cleared.image_url) == (None, None, None)
        assert cleared.price == cake.price

    def test_required_fields_cannot_be_cleared(self, container, catalog):
        with pytest.raises(ValidationError, match="price"):
            container.products.update(catalog["cake"].id, ProductUpdate(price=None))
        with pytest.raises(ValidationError, match="category_id"):
            container.products.update(catalog["cake"].id, ProductUpdate(category_id=None))
        assert container.products.get(catalog["cake"].id).price == 10.00

    def test_update_to_unknown_category_rejected(self, container, catalog):
        with pytest.raises(ValidationError):
            container.products.update(catalog["cake"].id, ProductUpdate(category_id=99))

    def test_product_in_an_order_cannot_be_deleted(self, container, catalog, customer):
        container.orders.create_order(
            OrderCreate(
                status_id=catalog["status"].id,
                items=[OrderItemRequest(product_id=catalog["cake"].id, quantity=1)],
            ),
            customer.id,
        )
        with pytest.raises(ConflictError):
            container.products.delete(catalog["cake"].id)

    def test_count(self, container, catalog):
        assert container.products.count() == 3
        assert container.products.count(ProductFilters(is_available=False)) == 1


class TestUsers:
    def test_public_registration_is_always_customer(self, container):
        user = container.users.register(
            UserRegister(first_name="Eva", last_name="X", email="eva@panaderia.com", password="pass123", role="admin")
        )
        assert user.role == "customer"
        assert not hasattr(user, "password_hash")

    def test_duplicate_email_conflicts(self, container, customer):
        with pytest.raises(ConflictError):
            container.users.register(
                UserRegister(first_name="Otro", last_name="Y", email="CARLOS@panaderia.com", password="pass123")
            )

    def test_login_returns_token_and_touches_last_seen(self, container, customer):
        response = container.users.login(LoginRequest(email="carlos@panaderia.com", password="secret-pass"))
        assert response.token
        assert response.user.id == customer.id
        assert response.user.last_seen is not None

    def test_wrong_password_is_unauthorized(self, container, customer):
        with pytest.raises(AppError) as exc_info:
            container.users.login(LoginRequest(email="carlos@panaderia.com", password="wrong-pass"))
        assert exc_info.value.status_code == 401

    def test_inactive_user_cannot_log_in(self, container, customer):
        container.users.deactivate(customer.id)
        with pytest.raises(AppError) as exc_info:
            container.users.login(LoginRequest(email="carlos@panaderia.com", password="secret-pass"))
        assert exc_info.value.status_code == 401

    def test_update_rehashes_password_and_ignores_role(self, container, customer):
        container.users.update(customer.id, UserUpdate(password="new-secret", role="admin"))

        assert container.users.get(customer.id).role == "customer"
        container.users.login(LoginRequest(email="carlos@panaderia.com", password="new-secret"))

    def test_phone_number_can_be_cleared(self, container):
        user = container.users.register(
            UserRegister(
                first_name="Eva", last_name="X", email="eva@panaderia.com", password="pass123", phone_number="555-0101"
            )
        )
        assert user.phone_number == "555-0101"

        assert container.users.update(user.id, UserUpdate(phone_number=None)).phone_number is None

    def test_required_user_fields_cannot_be_cleared(self, container, customer):
        with pytest.raises(ValidationError):
            container.users.update(customer.id, UserUpdate(last_name=None))
        assert container.users.get(customer.id).last_name == "Cliente"

    def test_pagination_by_role(self, container, admin, customer):
        page = container.users.paginate(page=1, limit=10, role="customer")
        assert page.total == 1
        assert [u.email for u in page.users] == ["carlos@panaderia.com"]

    def test_online_status(self, container, customer):
        assert container.users.online_status(customer.id).status == "offline"

        container.users.login(LoginRequest(email="carlos@panaderia.com", password="secret-pass"))
        last_seen = container.users.get(customer.id).last_seen

        assert container.users.online_status(customer.id, now=last_seen + timedelta(minutes=4)).is_online
        assert not container.users.online_status(customer.id, now=last_seen + timedelta(minutes=6)).is_online
