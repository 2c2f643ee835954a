"""Category endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Query, status

from bakery_app.api.deps import get_container
from bakery_app.container import Container
from bakery_app.core.security import require_admin
from bakery_app.schemas.category import Category, CategoryCreate, CategoryUpdate
from bakery_app.schemas.common import Envelope, Message, Page

router = APIRouter()


@router.get("", response_model=Envelope[List[Category]])
def list_categories(container: Container = Depends(get_container)):
    """List every category, alphabetically."""
    return Envelope(data=container.categories.list_all())


@router.get("/page", response_model=Envelope[Page[Category]])
def paginate_categories(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    container: Container = Depends(get_container),
):
    items, total = container.categories.paginate(page, limit)
    return Envelope(data=Page(items=items, total=total, page=page, limit=limit))


@router.get("/search", response_model=Envelope[List[Category]])
def search_categories(
    q: str = Query(..., min_length=1, description="Name fragment"),
    container: Container = Depends(get_container),
):
    return Envelope(data=container.categories.search(q))


@router.get("/{category_id}", response_model=Envelope[Category])
def get_category(category_id: int, container: Container = Depends(get_container)):
    return Envelope(data=container.categories.get(category_id))


@router.post(
    "",
    response_model=Envelope[Category],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_category(data: CategoryCreate, container: Container = Depends(get_container)):
    return Envelope(data=container.categories.create(data), message="Category created")


@router.put("/{category_id}", response_model=Envelope[Category], dependencies=[Depends(require_admin)])
def update_category(
    category_id: int,
    data: CategoryUpdate,
    container: Container = Depends(get_container),
):
    return Envelope(data=container.categories.update(category_id, data), message="Category updated")


@router.delete("/{category_id}", response_model=Message, dependencies=[Depends(require_admin)])
def delete_category(category_id: int, container: Container = Depends(get_container)):
    container.categories.delete(category_id)
    return Message(message="Category deleted")
