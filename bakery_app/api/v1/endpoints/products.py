"""Product catalog endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from bakery_app.api.deps import get_container
from bakery_app.container import Container
from bakery_app.core.security import require_admin
from bakery_app.schemas.common import Envelope, Message, Page
from bakery_app.schemas.product import Product, ProductCreate, ProductFilters, ProductUpdate

router = APIRouter()


def product_filters(
    category_id: Optional[int] = Query(None, gt=0),
    is_available: Optional[bool] = Query(None),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    has_stock: Optional[bool] = Query(None),
    name: Optional[str] = Query(None, description="Case-insensitive name fragment"),
) -> ProductFilters:
    return ProductFilters(
        category_id=category_id,
        is_available=is_available,
        min_price=min_price,
        max_price=max_price,
        has_stock=has_stock,
        name_contains=name,
    )


@router.get("", response_model=Envelope[Page[Product]])
def list_products(
    filters: ProductFilters = Depends(product_filters),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100, description="Omit to list every product"),
    container: Container = Depends(get_container),
):
    """
    List products, newest first.

    Filters combine with AND. Without ``limit`` every matching product is
    returned on a single page.
    """
    items, total = container.products.list(filters, page=page, limit=limit)
    return Envelope(data=Page(items=items, total=total, page=page, limit=limit or max(total, 1)))


@router.get("/search", response_model=Envelope[Page[Product]])
def search_products(
    q: str = Query(..., min_length=1, description="Matches name or description"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    container: Container = Depends(get_container),
):
    items, total = container.products.search(q, page=page, limit=limit)
    return Envelope(data=Page(items=items, total=total, page=page, limit=limit))


@router.get("/count", response_model=Envelope[int])
def count_products(
    filters: ProductFilters = Depends(product_filters),
    container: Container = Depends(get_container),
):
    return Envelope(data=container.products.count(filters))


@router.get("/{product_id}", response_model=Envelope[Product])
def get_product(product_id: int, container: Container = Depends(get_container)):
    return Envelope(data=container.products.get(product_id))


@router.post(
    "",
    response_model=Envelope[Product],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(data: ProductCreate, container: Container = Depends(get_container)):
    return Envelope(data=container.products.create(data), message="Product created")


@router.put("/{product_id}", response_model=Envelope[Product], dependencies=[Depends(require_admin)])
def update_product(
    product_id: int,
    data: ProductUpdate,
    container: Container = Depends(get_container),
):
    return Envelope(data=container.products.update(product_id, data), message="Product updated")


@router.delete("/{product_id}", response_model=Message, dependencies=[Depends(require_admin)])
def delete_product(product_id: int, container: Container = Depends(get_container)):
    container.products.delete(product_id)
    return Message(message="Product deleted")
