"""
Strawberry schema exposing products.

Queries are public; mutations need an admin bearer token. Resolvers go
through ``ProductService`` so GraphQL and REST share the same rules. Service
calls block, so the async resolvers run them in the threadpool the way
FastAPI runs plain ``def`` endpoints.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Type, TypeVar

import strawberry
from fastapi import Request
from pydantic import BaseModel, ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool
from strawberry.fastapi import GraphQLRouter
from strawberry.permission import BasePermission
from strawberry.types import Info

from bakery_app.core.errors import NotFoundError, ValidationError
from bakery_app.core.logging import logger
from bakery_app.core.security import decode_access_token
from bakery_app.schemas.product import Product as ProductModel, ProductCreate, ProductUpdate

BEARER_PREFIX = "Bearer "

ModelT = TypeVar("ModelT", bound=BaseModel)


@strawberry.type
class Product:
    id: int
    name: str
    description: Optional[str]
    sku: Optional[str]
    price: float
    image_url: Optional[str]
    is_available: bool
    cost_price: float
    stock_quantity: float
    category_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, product: ProductModel) -> "Product":
        return cls(**product.model_dump())


@strawberry.input
class ProductInput:
    name: str
    price: float
    category_id: int
    description: Optional[str] = None
    sku: Optional[str] = None
    image_url: Optional[str] = None
    is_available: bool = True
    cost_price: float = 0.0
    stock_quantity: float = 0.0


@strawberry.input
class ProductUpdateInput:
    name: Optional[str] = strawberry.UNSET
    description: Optional[str] = strawberry.UNSET
    sku: Optional[str] = strawberry.UNSET
    price: Optional[float] = strawberry.UNSET
    image_url: Optional[str] = strawberry.UNSET
    is_available: Optional[bool] = strawberry.UNSET
    cost_price: Optional[float] = strawberry.UNSET
    stock_quantity: Optional[float] = strawberry.UNSET
    category_id: Optional[int] = strawberry.UNSET


def _provided(data: Any) -> Dict[str, Any]:
    """Fields the client actually sent."""
    return {k: v for k, v in vars(data).items() if v is not strawberry.UNSET}


class IsAdmin(BasePermission):
    message = "Admin role required"

    def has_permission(self, source: Any, info: Info, **kwargs: Any) -> bool:
        user = info.context.get("user")
        return user is not None and user.role == "admin"


def _products(info: Info):
    return info.context["container"].products


def _validated(model: Type[ModelT], data: Dict[str, Any]) -> ModelT:
    """Build a request model, reporting bad input as a 400-class ``ValidationError``."""
    try:
        return model(**data)
    except PydanticValidationError as e:
        fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in e.errors())
        raise ValidationError(f"Invalid product data: {fields}") from e


@strawberry.type
class Query:
    @strawberry.field
    async def products(self, info: Info) -> List[Product]:
        items, _ = await run_in_threadpool(_products(info).list)
        return [Product.from_model(p) for p in items]

    @strawberry.field
    async def product(self, info: Info, id: int) -> Optional[Product]:
        try:
            return Product.from_model(await run_in_threadpool(_products(info).get, id))
        except NotFoundError:
            return None


@strawberry.type
class Mutation:
    @strawberry.mutation(permission_classes=[IsAdmin])
    async def create_product(self, info: Info, input: ProductInput) -> Product:
        data = _validated(ProductCreate, vars(input))
        product = await run_in_threadpool(_products(info).create, data)
        logger.info("Product created through GraphQL", extra={"product_id": product.id})
        return Product.from_model(product)

    @strawberry.mutation(permission_classes=[IsAdmin])
    async def update_product(self, info: Info, id: int, input: ProductUpdateInput) -> Product:
        data = _validated(ProductUpdate, _provided(input))
        return Product.from_model(await run_in_threadpool(_products(info).update, id, data))

    @strawberry.mutation(permission_classes=[IsAdmin])
    async def delete_product(self, info: Info, id: int) -> bool:
        await run_in_threadpool(_products(info).delete, id)
        return True


schema = strawberry.Schema(query=Query, mutation=Mutation)


async def get_context(request: Request) -> Dict[str, Any]:
    raw = request.headers.get("Authorization", "").strip()
    token = raw[len(BEARER_PREFIX):].strip() if raw.startswith(BEARER_PREFIX) else ""
    return {
        "request": request,
        "container": request.app.state.container,
        "user": decode_access_token(token) if token else None,
    }


def graphql_router() -> GraphQLRouter:
    return GraphQLRouter(schema, context_getter=get_context)
