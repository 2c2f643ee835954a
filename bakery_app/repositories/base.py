"""
Cache-aside executor shared by every entity repository.

Repositories are composed with a ``CacheAside`` instead of inheriting from a
base class. The executor owns the three pieces every repository needs:

* row validation through the entity's pydantic model,
* SQL execution with error wrapping (arguments never reach the logs),
* cache-aside reads and cache invalidation under ``{prefix}:...`` keys.

A row is cached only after the query succeeded and the row validated.
"""

from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError

from bakery_app.cache.base import CacheStrategy
from bakery_app.core.errors import DatabaseError, ValidationError
from bakery_app.core.logging import logger
from bakery_app.db.session import Database, Query, QueryResult, Transaction

ModelT = TypeVar("ModelT", bound=BaseModel)

SENSITIVE_COLUMNS = frozenset({"password_hash"})


def _loggable(raw: Any) -> Any:
    """The row as logged: secret columns masked."""
    if not isinstance(raw, dict):
        return raw
    return {k: "[REDACTED]" if k in SENSITIVE_COLUMNS else v for k, v in raw.items()}


class CacheAside(Generic[ModelT]):
    """Validation, query execution and cache-aside reads for one table."""

    def __init__(
        self,
        db: Database,
        cache: CacheStrategy,
        model: Type[ModelT],
        table_name: str,
        cache_prefix: str,
    ):
        self.db = db
        self.cache = cache
        self.model = model
        self.table_name = table_name
        self.cache_prefix = cache_prefix

    def key(self, suffix: Union[str, int]) -> str:
        """Build a namespaced cache key."""
        return f"{self.cache_prefix}:{suffix}"

    def validate(self, raw: Any, context: str) -> ModelT:
        """Validate a raw row, raising ``ValidationError`` when it does not fit the schema."""
        try:
            return self.model.model_validate(raw)
        except PydanticValidationError as e:
            message = f"Invalid {self.table_name} data during {context}"
            errors = e.errors(include_input=False, include_url=False)
            logger.error(
                message,
                extra={"table": self.table_name, "context": context, "raw_row": _loggable(raw), "errors": errors},
            )
            raise ValidationError(message, details=errors) from e

    def validate_rows(self, rows: Iterable[Any], context: str) -> List[ModelT]:
        """Validate many rows; invalid ones are skipped with a warning."""
        validated: List[ModelT] = []
        for row in rows:
            try:
                validated.append(self.validate(row, context))
            except ValidationError as e:
                logger.warning(
                    f"Skipping invalid {self.table_name} row",
                    extra={"table": self.table_name, "context": context, "errors": e.details},
                )
        return validated

    def execute(self, query: Query, operation: str, tx: Optional[Transaction] = None) -> QueryResult:
        """Run a statement, wrapping any failure in ``DatabaseError``."""
        logger.debug(f"Executing database query: {operation}", extra={"table": self.table_name})
        try:
            if tx is not None:
                return tx.execute(query)
            return self.db.execute(query)
        except Exception as e:
            message = f"Database operation failed: {operation}"
            logger.error(
                message,
                extra={
                    "table": self.table_name,
                    "operation": operation,
                    "query": query.redacted(),
                    "error": type(e).__name__,
                },
            )
            raise DatabaseError(message, details=e) from e

    def get_one(self, cache_key: str, query: Query, ttl: int, context: str) -> Optional[ModelT]:
        """Cache-aside read of a single entity. Returns None when no row matches."""
        cached = self.cache.get(cache_key)
        if cached is not None:
            try:
                entity = self.model.model_validate(cached)
                logger.debug(f"{self.table_name} retrieved from cache", extra={"cache_key": cache_key})
                return entity
            except PydanticValidationError:
                logger.warning(f"Discarding malformed cache entry {cache_key}")
                self.cache.delete(cache_key)

        result = self.execute(query, context)
        row = result.first()
        if row is None:
            logger.debug(f"{self.table_name} not found", extra={"context": context})
            return None

        entity = self.validate(row, context)
        self.cache.set(cache_key, entity.model_dump(mode="json"), ttl)
        logger.debug(f"{self.table_name} retrieved from database and cached", extra={"cache_key": cache_key})
        return entity

    def get_list(self, cache_key: str, query: Query, ttl: int, context: str) -> List[ModelT]:
        """Cache-aside read of a list of entities."""
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            try:
                entities = [self.model.model_validate(item) for item in cached]
                logger.debug(f"{self.table_name} list retrieved from cache", extra={"cache_key": cache_key})
                return entities
            except PydanticValidationError:
                logger.warning(f"Discarding malformed cache entry {cache_key}")
                self.cache.delete(cache_key)

        result = self.execute(query, context)
        entities = self.validate_rows(result.rows, context)
        self.cache.set(cache_key, [entity.model_dump(mode="json") for entity in entities], ttl)
        logger.info(
            f"{self.table_name} list retrieved from database",
            extra={"count": len(entities), "context": context},
        )
        return entities

    def fetch_one(self, query: Query, context: str, tx: Optional[Transaction] = None) -> Optional[ModelT]:
        """Uncached single-row read (or write with RETURNING)."""
        row = self.execute(query, context, tx).first()
        return self.validate(row, context) if row is not None else None

    def fetch_list(self, query: Query, context: str, tx: Optional[Transaction] = None) -> List[ModelT]:
        """Uncached list read."""
        return self.validate_rows(self.execute(query, context, tx).rows, context)

    def scalar(self, query: Query, context: str, column: str = "total", tx: Optional[Transaction] = None) -> Any:
        row = self.execute(query, context, tx).first() or {}
        return row.get(column)

    def invalidate(self, *cache_keys: str) -> None:
        for cache_key in cache_keys:
            self.cache.delete(cache_key)
            logger.debug("Cache invalidated", extra={"cache_key": cache_key})

    def invalidate_all(self) -> None:
        """Drop every cache entry under this repository's prefix."""
        removed = self.cache.delete_pattern(f"{self.cache_prefix}:*")
        logger.debug("All cache invalidated", extra={"cache_prefix": self.cache_prefix, "removed": removed})


def reject_nulls(changes: Dict[str, Any], required: Iterable[str]) -> None:
    """Raise ``ValidationError`` when a NOT NULL column is explicitly set to None."""
    cleared = [field for field in required if field in changes and changes[field] is None]
    if cleared:
        raise ValidationError(f"Fields cannot be cleared: {', '.join(cleared)}", details=cleared)


def merge_update(existing: BaseModel, changes: Dict[str, Any], required: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Existing values overlaid with ``changes`` exactly as provided.

    Callers pass ``model_dump(exclude_unset=True)``, so an explicit None clears
    a nullable column while omitted fields keep their stored value.
    """
    reject_nulls(changes, required)
    merged = existing.model_dump()
    merged.update(changes)
    return merged
