"""Order status endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Query, status

from bakery_app.api.deps import get_container
from bakery_app.container import Container
from bakery_app.core.security import require_admin
from bakery_app.schemas.common import Envelope, Message
from bakery_app.schemas.order_status import OrderStatus, OrderStatusCreate, OrderStatusUpdate

router = APIRouter()


@router.get("", response_model=Envelope[List[OrderStatus]])
def list_order_statuses(container: Container = Depends(get_container)):
    return Envelope(data=container.order_statuses.list_all())


@router.get("/search", response_model=Envelope[List[OrderStatus]])
def search_order_statuses(q: str = Query(..., min_length=1), container: Container = Depends(get_container)):
    return Envelope(data=container.order_statuses.search(q))


@router.get("/{status_id}", response_model=Envelope[OrderStatus])
def get_order_status(status_id: int, container: Container = Depends(get_container)):
    return Envelope(data=container.order_statuses.get(status_id))


@router.post(
    "",
    response_model=Envelope[OrderStatus],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_order_status(data: OrderStatusCreate, container: Container = Depends(get_container)):
    return Envelope(data=container.order_statuses.create(data), message="Order status created")


@router.put("/{status_id}", response_model=Envelope[OrderStatus], dependencies=[Depends(require_admin)])
def update_order_status(
    status_id: int,
    data: OrderStatusUpdate,
    container: Container = Depends(get_container),
):
    return Envelope(data=container.order_statuses.update(status_id, data), message="Order status updated")


@router.delete("/{status_id}", response_model=Message, dependencies=[Depends(require_admin)])
def delete_order_status(status_id: int, container: Container = Depends(get_container)):
    container.order_statuses.delete(status_id)
    return Message(message="Order status deleted")
