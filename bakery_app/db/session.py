"""Database engine and the SQL execution interface used by repositories."""

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.pool import StaticPool

from bakery_app.core.config import Settings
from bakery_app.core.logging import logger
from bakery_app.db.models import Base


@dataclass(frozen=True)
class Query:
    """Parameterized SQL statement (named ``:param`` placeholders)."""

    sql: str
    params: Mapping[str, Any] = field(default_factory=dict)

    def redacted(self) -> Dict[str, Any]:
        """Loggable form of the query with argument values stripped."""
        return {
            "sql": " ".join(self.sql.split()),
            "params": "[REDACTED]" if self.params else None,
        }


@dataclass
class QueryResult:
    """Rows as plain dicts plus the affected row count."""

    rows: List[Dict[str, Any]]
    rowcount: int = 0

    def first(self) -> Optional[Dict[str, Any]]:
        return self.rows[0] if self.rows else None


def _run(conn: Connection, query: Query) -> QueryResult:
    result = conn.execute(text(query.sql), dict(query.params))
    rows = [dict(row) for row in result.mappings().all()] if result.returns_rows else []
    return QueryResult(rows=rows, rowcount=result.rowcount)


class Transaction:
    """Executor bound to one open transaction."""

    def __init__(self, conn: Connection):
        self._conn = conn

    def execute(self, query: Query) -> QueryResult:
        return _run(self._conn, query)


class Database:
    """
    Thin SQL executor over a SQLAlchemy engine.

    ``execute`` runs each statement in its own transaction; ``transaction()``
    groups several statements so they commit or roll back together.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def execute(self, query: Query) -> QueryResult:
        with self.engine.begin() as conn:
            return _run(conn, query)

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        with self.engine.begin() as conn:
            yield Transaction(conn)

    def ping(self) -> bool:
        """Connectivity check used by the health endpoint."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database connectivity check failed: {e}")
            return False

    def dispose(self) -> None:
        self.engine.dispose()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(settings: Settings) -> Engine:
    """Create the process-wide engine from settings."""
    url = settings.database_url
    kwargs: Dict[str, Any] = {"echo": settings.database_echo, "pool_pre_ping": True}
    connect_args: Dict[str, Any] = {}

    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
    if settings.database_auth_token:
        # libSQL / Turso remote databases
        connect_args["auth_token"] = settings.database_auth_token
    if connect_args:
        kwargs["connect_args"] = connect_args

    engine = create_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    logger.info(f"Database engine created for dialect {engine.dialect.name}")
    return engine


def init_db(engine: Engine) -> None:
    """Initialize database tables."""
    logger.info("Initializing database...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized successfully")
