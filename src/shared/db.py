"""Database access: engine factory, schema setup and the Transaction value.

Repositories never open connections themselves. Every method takes the
``Transaction`` it must run in, and only the owner of the transaction (the
order workflow, or an API route for single-statement admin writes) decides
when it commits.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

import structlog
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError, IntegrityError

from shared.errors import TransientError
from shared.schema import metadata

logger = structlog.get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Normalise timestamps read back from SQLite, which drops the offset."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for ``database_url``.

    SQLite only takes its write lock on the first write, so two transactions
    that both read before writing deadlock instead of queueing. Issuing
    ``BEGIN IMMEDIATE`` makes writers wait for each other the way row locks
    do on PostgreSQL.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    engine = create_engine(
        database_url,
        echo=echo,
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, _record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin_immediate(connection):
        connection.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def setup_db(engine: Engine) -> None:
    """Create all tables."""
    metadata.create_all(engine)


def drop_db(engine: Engine) -> None:
    """Drop all tables."""
    metadata.drop_all(engine)


class Transaction:
    """One unit of work on one connection.

    Used as a context manager: a clean exit commits, any exception rolls
    back. ``commit()`` and ``rollback()`` are idempotent so the context
    manager's exit is the only place the outcome is decided.
    """

    def __init__(self, connection: Connection) -> None:
        self.connection = connection
        self._transaction = connection.begin()
        self._closed = False

    def execute(self, statement, parameters=None):
        return self.connection.execute(statement, parameters)

    def commit(self) -> None:
        if self._closed:
            return
        try:
            self._transaction.commit()
        finally:
            self._close()

    def rollback(self) -> None:
        if self._closed:
            return
        try:
            self._transaction.rollback()
        finally:
            self._close()

    def _close(self) -> None:
        self._closed = True
        self.connection.close()

    def __enter__(self) -> "Transaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
        return False


class Database:
    """Hands out transactions. Built once at process start."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def begin(self) -> Transaction:
        try:
            connection = self.engine.connect()
        except DBAPIError as exc:
            logger.error("Could not connect to database", error=str(exc))
            raise TransientError("Database unavailable") from exc
        try:
            return Transaction(connection)
        except DBAPIError as exc:
            connection.close()
            logger.error("Could not open database transaction", error=str(exc))
            raise TransientError("Database busy, please try again") from exc

    @contextmanager
    def unit_of_work(self) -> Iterator[Transaction]:
        """Open a transaction and translate driver failures to TransientError.

        Domain errors raised inside the block propagate unchanged, after the
        rollback. A constraint violation no repository handled means a
        concurrent writer got there first, and is retryable.
        """
        tx = self.begin()
        try:
            with tx:
                yield tx
        except IntegrityError as exc:
            logger.warning("Unit of work lost a concurrent write", error=str(exc.orig or exc))
            raise TransientError("Conflicting concurrent update, please try again") from exc
        except DBAPIError as exc:
            logger.error("Unit of work failed", error=str(exc.orig or exc))
            raise TransientError("Temporary storage failure, please try again") from exc
