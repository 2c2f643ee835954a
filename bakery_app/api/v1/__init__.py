"""API v1 package."""

from fastapi import APIRouter

from bakery_app.api.v1.endpoints import (
    categories,
    ingredients,
    order_items,
    order_statuses,
    orders,
    products,
    users,
)

api_router = APIRouter()

api_router.include_router(categories.router, prefix="/categories", tags=["Categories"])
api_router.include_router(ingredients.router, prefix="/ingredients", tags=["Ingredients"])
api_router.include_router(products.router, prefix="/products", tags=["Products"])
api_router.include_router(order_statuses.router, prefix="/order-statuses", tags=["Order Statuses"])
api_router.include_router(orders.router, prefix="/orders", tags=["Orders"])
api_router.include_router(order_items.router, prefix="/order-items", tags=["Order Items"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
