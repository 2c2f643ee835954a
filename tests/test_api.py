"""HTTP tests through the FastAPI test client."""

import asyncio
import time
from datetime import timedelta

import httpx
from fastapi.testclient import TestClient

from bakery_app.core.security import create_access_token
from bakery_app.main import create_app
from bakery_app.schemas.order import OrderCreate, OrderItemRequest
from bakery_app.schemas.product import ProductUpdate


def _order_payload(catalog, *lines):
    return {
        "status_id": catalog["status"].id,
        "items": [{"product_id": p.id, "quantity": q} for p, q in lines],
    }


def test_root_and_health(client):
    assert client.get("/").json()["graphql"] == "/graphql"

    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["checks"] == {"database": True, "cache": True}


def test_metrics_are_exposed(client):
    assert client.get("/metrics/").status_code == 200


def test_register_login_and_me(client):
    response = client.post(
        "/auth/register",
        json={
            "first_name": "Lucia",
            "last_name": "Pan",
            "email": "lucia@panaderia.com",
            "password": "pass1234",
            "role": "admin",
        },
    )
    assert response.status_code == 201
    assert response.json()["data"]["role"] == "customer"
    assert "password_hash" not in response.json()["data"]

    login = client.post("/auth/login", json={"email": "lucia@panaderia.com", "password": "pass1234"})
    assert login.status_code == 200
    token = login.json()["data"]["token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["data"]["email"] == "lucia@panaderia.com"


def test_admin_can_register_admin(client, admin_headers):
    response = client.post(
        "/auth/register",
        headers=admin_headers,
        json={"first_name": "Rosa", "last_name": "Jefa", "email": "rosa@panaderia.com", "password": "pass1234", "role": "admin"},
    )
    assert response.json()["data"]["role"] == "admin"


def test_bad_login_is_unauthorized(client, customer):
    response = client.post("/auth/login", json={"email": "carlos@panaderia.com", "password": "nope-nope"})
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Invalid email or password"}


def test_missing_token_is_401_and_bad_token_is_403(client):
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"}).status_code == 403


def test_customer_cannot_write_catalog(client, customer_headers):
    response = client.post("/api/v1/categories", json={"name": "Panes"}, headers=customer_headers)
    assert response.status_code == 403
    assert response.json()["success"] is False


def test_category_crud_and_conflict(client, admin_headers):
    created = client.post("/api/v1/categories", json={"name": "Pasteles"}, headers=admin_headers)
    assert created.status_code == 201
    category_id = created.json()["data"]["id"]

    duplicate = client.post("/api/v1/categories", json={"name": "pasteles"}, headers=admin_headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["success"] is False

    assert client.get(f"/api/v1/categories/{category_id}").json()["data"]["name"] == "Pasteles"
    assert client.get("/api/v1/categories/search", params={"q": "past"}).json()["data"][0]["id"] == category_id

    renamed = client.put(f"/api/v1/categories/{category_id}", json={"name": "Tortas"}, headers=admin_headers)
    assert renamed.json()["data"]["name"] == "Tortas"

    assert client.delete(f"/api/v1/categories/{category_id}", headers=admin_headers).status_code == 200
    missing = client.get(f"/api/v1/categories/{category_id}")
    assert missing.status_code == 404
    assert missing.json()["message"] == f"Category with identifier {category_id} not found"


def test_invalid_body_is_422(client, admin_headers):
    response = client.post("/api/v1/products", json={"name": "Pan"}, headers=admin_headers)
    assert response.status_code == 422
    assert response.json()["success"] is False
    assert response.json()["errors"]


def test_product_listing_with_filters(client, catalog):
    response = client.get("/api/v1/products", params={"is_available": "true"})
    body = response.json()["data"]
    assert body["total"] == 2
    assert {p["name"] for p in body["items"]} == {"Chocolate cake", "Butter cookie"}

    paged = client.get("/api/v1/products", params={"limit": 1, "page": 3}).json()["data"]
    assert paged["total"] == 3
    assert len(paged["items"]) == 1

    assert client.get("/api/v1/products/count").json()["data"] == 3


def test_customer_order_flow(client, catalog, customer, customer_headers, admin_headers):
    payload = _order_payload(catalog, (catalog["cake"], 2), (catalog["cookie"], 1))
    payload["user_id"] = 9999
    payload["total_amount"] = 1

    created = client.post("/api/v1/orders", json=payload, headers=customer_headers)
    assert created.status_code == 201
    order = created.json()["data"]
    assert order["total_amount"] == 23.50
    assert order["user_id"] == customer.id
    assert len(order["items"]) == 2

    mine = client.get(f"/api/v1/orders/user/{customer.id}", headers=customer_headers).json()["data"]
    assert [o["id"] for o in mine] == [order["id"]]

    fetched = client.get(f"/api/v1/orders/{order['id']}", headers=customer_headers).json()["data"]
    assert fetched["total_amount"] == 23.50

    assert client.get("/api/v1/orders", headers=customer_headers).status_code == 403
    assert client.patch(f"/api/v1/orders/{order['id']}/complete", headers=customer_headers).status_code == 403

    completed = client.patch(f"/api/v1/orders/{order['id']}/complete", headers=admin_headers)
    assert completed.json()["data"]["completed_at"] is not None
    again = client.patch(f"/api/v1/orders/{order['id']}/complete", headers=admin_headers)
    assert again.status_code == 409


def test_customer_cannot_read_other_orders(client, container, catalog, admin, customer_headers):
    other = container.orders.create_order(
        OrderCreate(
            status_id=catalog["status"].id,
            items=[OrderItemRequest(product_id=catalog["cookie"].id, quantity=1)],
        ),
        admin.id,
    )
    assert client.get(f"/api/v1/orders/{other.id}", headers=customer_headers).status_code == 403
    assert client.get(f"/api/v1/orders/user/{admin.id}", headers=customer_headers).status_code == 403


def test_order_with_unavailable_product_is_400(client, catalog, customer_headers):
    payload = _order_payload(catalog, (catalog["retired"], 1))
    response = client.post("/api/v1/orders", json=payload, headers=customer_headers)
    assert response.status_code == 400
    assert "Seasonal tart" in response.json()["message"]


def test_empty_order_is_400(client, catalog, customer_headers):
    response = client.post("/api/v1/orders", json=_order_payload(catalog), headers=customer_headers)
    assert response.status_code == 400


def test_admin_edits_order_items(client, container, catalog, customer, admin_headers):
    order = container.orders.create_order(
        OrderCreate(
            status_id=catalog["status"].id,
            items=[OrderItemRequest(product_id=catalog["cake"].id, quantity=1)],
        ),
        customer.id,
    )
    added = client.post(
        "/api/v1/order-items",
        json={"order_id": order.id, "product_id": catalog["cookie"].id, "quantity": 2},
        headers=admin_headers,
    )
    assert added.status_code == 201

    items = client.get(f"/api/v1/orders/{order.id}/items", headers=admin_headers).json()["data"]
    assert len(items) == 2
    assert client.get(f"/api/v1/orders/{order.id}", headers=admin_headers).json()["data"]["total_amount"] == 17.00


def test_rate_limit_returns_429(settings, container):
    limited = settings.model_copy(update={"rate_limit_requests": 2})
    with TestClient(create_app(limited, container)) as client:
        assert client.get("/api/v1/categories").status_code == 200
        assert client.get("/api/v1/categories").status_code == 200
        response = client.get("/api/v1/categories")
        assert response.status_code == 429
        assert response.json()["success"] is False
        assert client.get("/health").status_code == 200


def test_graphql_products(client, catalog, admin_headers, customer_headers):
    query = "{ products { id name price isAvailable } }"
    data = client.post("/graphql", json={"query": query}).json()["data"]
    assert {p["name"] for p in data["products"]} == {"Chocolate cake", "Butter cookie", "Seasonal tart"}

    single = client.post(
        "/graphql", json={"query": f"{{ product(id: {catalog['cake'].id}) {{ name price }} }}"}
    ).json()["data"]
    assert single["product"] == {"name": "Chocolate cake", "price": 10.0}

    mutation = (
        "mutation { createProduct(input: {name: \"Brioche\", price: 4.5, categoryId: %d}) { id name } }"
        % catalog["category"].id
    )
    denied = client.post("/graphql", json={"query": mutation}, headers=customer_headers).json()
    assert denied["errors"][0]["message"] == "Admin role required"

    created = client.post("/graphql", json={"query": mutation}, headers=admin_headers).json()
    assert created["data"]["createProduct"]["name"] == "Brioche"


def _create_product_mutation(catalog, price):
    return (
        "mutation { createProduct(input: {name: \"Brioche\", price: %s, categoryId: %d}) { id name } }"
        % (price, catalog["category"].id)
    )


def test_graphql_mutation_with_expired_admin_token_is_denied(client, container, catalog, admin):
    token = create_access_token(admin.id, "Ana Admin", "admin", expires_delta=timedelta(minutes=-1))

    response = client.post(
        "/graphql",
        json={"query": _create_product_mutation(catalog, 4.5)},
        headers={"Authorization": f"Bearer {token}"},
    ).json()

    assert response["errors"][0]["message"] == "Admin role required"
    assert container.products.count() == 3


def test_graphql_mutations_are_denied_to_customers(client, container, catalog, customer_headers):
    mutation = "mutation { deleteProduct(id: %d) }" % catalog["cookie"].id

    response = client.post("/graphql", json={"query": mutation}, headers=customer_headers).json()

    assert response["errors"][0]["message"] == "Admin role required"
    assert container.products.get(catalog["cookie"].id).name == "Butter cookie"


def test_graphql_negative_price_is_rejected(client, container, catalog, admin_headers):
    response = client.post(
        "/graphql", json={"query": _create_product_mutation(catalog, -1)}, headers=admin_headers
    ).json()

    assert response["data"] is None
    assert response["errors"][0]["message"] == "Invalid product data: price"
    assert container.products.count() == 3


def test_graphql_update_clears_optional_field(client, container, catalog, admin_headers):
    container.products.update(catalog["cake"].id, ProductUpdate(sku="CAKE-1"))
    mutation = "mutation { updateProduct(id: %d, input: {sku: null}) { sku price } }" % catalog["cake"].id

    response = client.post("/graphql", json={"query": mutation}, headers=admin_headers).json()

    assert response["data"]["updateProduct"] == {"sku": None, "price": 10.0}


def test_health_answers_while_graphql_query_is_running(settings, container, catalog, monkeypatch):
    list_products = container.products.list

    def slow_list(*args, **kwargs):
        time.sleep(0.5)
        return list_products(*args, **kwargs)

    monkeypatch.setattr(container.products, "list", slow_list)
    app = create_app(settings, container)

    async def concurrent_requests():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            graphql = asyncio.create_task(client.post("/graphql", json={"query": "{ products { id } }"}))
            await asyncio.sleep(0.05)
            started = time.perf_counter()
            health = await client.get("/health")
            elapsed = time.perf_counter() - started
            products = (await graphql).json()["data"]["products"]
        return health, elapsed, products

    health, elapsed, products = asyncio.run(concurrent_requests())

    assert health.status_code == 200
    assert elapsed < 0.3
    assert len(products) == 3


def test_request_id_is_echoed(client):
    assert client.get("/", headers={"X-Request-ID": "abc123"}).headers["X-Request-ID"] == "abc123"
    assert len(client.get("/").headers["X-Request-ID"]) == 32
