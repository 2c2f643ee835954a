"""Order endpoints."""

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query, status

from bakery_app.api.deps import ensure_self_or_admin, get_container, is_admin
from bakery_app.container import Container
from bakery_app.core.logging import logger
from bakery_app.core.security import TokenPayload, require_admin, require_authenticated
from bakery_app.schemas.common import Envelope, Message
from bakery_app.schemas.order import (
    Order,
    OrderCreate,
    OrderItem,
    OrderUpdate,
    OrderWithItems,
    UserOrderStatistics,
)

router = APIRouter()


@router.post("", response_model=Envelope[OrderWithItems], status_code=status.HTTP_201_CREATED)
def create_order(
    data: OrderCreate,
    user: TokenPayload = Depends(require_authenticated),
    container: Container = Depends(get_container),
):
    """
    Place an order.

    Prices come from the catalog; the total is computed server side.
    Customers always order for themselves; admins may pass ``user_id``.
    """
    owner_id = data.user_id if is_admin(user) and data.user_id is not None else user.sub
    order = container.orders.create_order(data, owner_id)
    logger.info(f"Order {order.id} placed", extra={"user_id": owner_id, "item_count": len(order.items)})
    return Envelope(data=order, message="Order created")


@router.get("", response_model=Envelope[List[Order]], dependencies=[Depends(require_admin)])
def list_orders(container: Container = Depends(get_container)):
    return Envelope(data=container.orders.list_all())


@router.get("/recent", response_model=Envelope[List[Order]], dependencies=[Depends(require_admin)])
def recent_orders(
    limit: int = Query(10, ge=1, le=100),
    container: Container = Depends(get_container),
):
    return Envelope(data=container.orders.recent(limit))


@router.get("/date-range", response_model=Envelope[List[Order]], dependencies=[Depends(require_admin)])
def orders_by_date_range(
    start: datetime = Query(..., description="Inclusive lower bound"),
    end: datetime = Query(..., description="Inclusive upper bound"),
    container: Container = Depends(get_container),
):
    return Envelope(data=container.orders.list_by_date_range(start, end))


@router.get("/status/{status_id}", response_model=Envelope[List[Order]], dependencies=[Depends(require_admin)])
def orders_by_status(status_id: int, container: Container = Depends(get_container)):
    return Envelope(data=container.orders.list_by_status(status_id))


@router.get("/user/{user_id}", response_model=Envelope[List[Order]])
def orders_by_user(
    user_id: int,
    user: TokenPayload = Depends(require_authenticated),
    container: Container = Depends(get_container),
):
    ensure_self_or_admin(user, user_id)
    return Envelope(data=container.orders.list_by_user(user_id))


@router.get("/user/{user_id}/total", response_model=Envelope[float])
def user_total_spent(
    user_id: int,
    user: TokenPayload = Depends(require_authenticated),
    container: Container = Depends(get_container),
):
    ensure_self_or_admin(user, user_id)
    return Envelope(data=container.orders.user_total_spent(user_id))


@router.get("/user/{user_id}/statistics", response_model=Envelope[UserOrderStatistics])
def user_statistics(
    user_id: int,
    user: TokenPayload = Depends(require_authenticated),
    container: Container = Depends(get_container),
):
    ensure_self_or_admin(user, user_id)
    return Envelope(data=container.orders.user_statistics(user_id))


@router.get("/{order_id}", response_model=Envelope[OrderWithItems])
def get_order(
    order_id: int,
    user: TokenPayload = Depends(require_authenticated),
    container: Container = Depends(get_container),
):
    order = container.orders.get_with_items(order_id)
    ensure_self_or_admin(user, order.user_id)
    return Envelope(data=order)


@router.get("/{order_id}/items", response_model=Envelope[List[OrderItem]])
def get_order_items(
    order_id: int,
    user: TokenPayload = Depends(require_authenticated),
    container: Container = Depends(get_container),
):
    ensure_self_or_admin(user, container.orders.get(order_id).user_id)
    return Envelope(data=container.order_items.list_by_order(order_id))


@router.put("/{order_id}", response_model=Envelope[Order])
def update_order(
    order_id: int,
    data: OrderUpdate,
    user: TokenPayload = Depends(require_authenticated),
    container: Container = Depends(get_container),
):
    ensure_self_or_admin(user, container.orders.get(order_id).user_id)
    return Envelope(data=container.orders.update(order_id, data), message="Order updated")


@router.delete("/{order_id}", response_model=Message)
def delete_order(
    order_id: int,
    user: TokenPayload = Depends(require_authenticated),
    container: Container = Depends(get_container),
):
    ensure_self_or_admin(user, container.orders.get(order_id).user_id)
    container.orders.delete(order_id)
    return Message(message="Order deleted")


@router.patch("/{order_id}/complete", response_model=Envelope[Order], dependencies=[Depends(require_admin)])
def complete_order(order_id: int, container: Container = Depends(get_container)):
    return Envelope(data=container.orders.complete(order_id), message="Order completed")
