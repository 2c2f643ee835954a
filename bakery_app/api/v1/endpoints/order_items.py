"""Order item endpoints. Editing lines is an admin task."""

from fastapi import APIRouter, Depends, status

from bakery_app.api.deps import ensure_self_or_admin, get_container
from bakery_app.container import Container
from bakery_app.core.security import TokenPayload, require_admin, require_authenticated
from bakery_app.schemas.common import Envelope, Message
from bakery_app.schemas.order import OrderItem, OrderItemCreate, OrderItemUpdate

router = APIRouter()


@router.post(
    "",
    response_model=Envelope[OrderItem],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def add_order_item(data: OrderItemCreate, container: Container = Depends(get_container)):
    return Envelope(data=container.order_items.add(data), message="Order item added")


@router.get("/{item_id}", response_model=Envelope[OrderItem])
def get_order_item(
    item_id: int,
    user: TokenPayload = Depends(require_authenticated),
    container: Container = Depends(get_container),
):
    item = container.order_items.get(item_id)
    ensure_self_or_admin(user, container.orders.get(item.order_id).user_id)
    return Envelope(data=item)


@router.put("/{item_id}", response_model=Envelope[OrderItem], dependencies=[Depends(require_admin)])
def update_order_item(
    item_id: int,
    data: OrderItemUpdate,
    container: Container = Depends(get_container),
):
    return Envelope(data=container.order_items.update_quantity(item_id, data.quantity), message="Order item updated")


@router.delete("/{item_id}", response_model=Message, dependencies=[Depends(require_admin)])
def delete_order_item(item_id: int, container: Container = Depends(get_container)):
    container.order_items.delete(item_id)
    return Message(message="Order item deleted")
