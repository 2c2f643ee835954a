"""GraphQL API for the product catalog."""

from bakery_app.graphql.schema import graphql_router, schema

__all__ = ["graphql_router", "schema"]
