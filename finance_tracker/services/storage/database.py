"""
Relational Database Access

Two things live here:
1. The table definitions the SQL backend reads and writes
2. Database - the connection collaborator that owns the SQLAlchemy engine

This module contains no record logic. SqlStorage builds its statements
against the tables defined here and runs them through Database.engine.

Usage:
    db = Database(DatabaseSettings(url="postgresql+psycopg://..."))
    db.connect()          # verify connectivity (retried)
    db.create_schema()    # create missing tables
    storage = SqlStorage(db)
"""

import math
from typing import Any, Optional

import structlog
from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    text,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.pool import StaticPool
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finance_tracker.config import DatabaseSettings, get_settings
from finance_tracker.services.storage.interface import ConnectionError, StorageError


metadata = MetaData()


salaries = Table(
    "salaries",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("amount", Float, nullable=False),
    Column("month", String(20), nullable=False, default=""),
    Column("year", Integer, nullable=False),
    Column("notes", Text, nullable=False, default=""),
    Column("date", DateTime(timezone=True), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Index("ix_salaries_created_at", "created_at"),
)


expenses = Table(
    "expenses",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("amount", Float, nullable=False),
    Column("category", String(100), nullable=False),
    Column("description", Text, nullable=False, default=""),
    Column("date", DateTime(timezone=True), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Index("ix_expenses_created_at", "created_at"),
)


class Database:
    """
    Owns the SQLAlchemy engine for one database.

    The engine is created lazily on first use, so constructing a
    Database never touches the network.
    """

    def __init__(
        self,
        settings: Optional[DatabaseSettings] = None,
        engine: Optional[Engine] = None,
    ):
        self._settings = settings or get_settings().database
        self._engine = engine
        self._logger = structlog.get_logger(__name__)

    @property
    def settings(self) -> DatabaseSettings:
        return self._settings

    @property
    def safe_url(self) -> str:
        """The database URL with any password masked."""
        return make_url(self._settings.url).render_as_string(hide_password=True)

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = create_engine(self._settings.url, **self._engine_options())
        return self._engine

    def _engine_options(self) -> dict[str, Any]:
        settings = self._settings
        options: dict[str, Any] = {"echo": settings.echo}

        if settings.is_in_memory:
            # One shared connection, otherwise every checkout sees an empty database
            options["poolclass"] = StaticPool
            options["connect_args"] = {"check_same_thread": False}
        elif settings.is_sqlite:
            options["connect_args"] = {"timeout": settings.pool_timeout_seconds}
        else:
            options.update(
                pool_size=settings.pool_size,
                max_overflow=0,
                pool_timeout=settings.pool_timeout_seconds,
                pool_recycle=settings.pool_recycle_seconds,
                pool_pre_ping=True,
            )
            if settings.is_postgres:
                connect_args: dict[str, Any] = {
                    "connect_timeout": int(math.ceil(settings.pool_timeout_seconds)),
                }
                if settings.statement_timeout_ms:
                    connect_args["options"] = (
                        f"-c statement_timeout={settings.statement_timeout_ms}"
                    )
                options["connect_args"] = connect_args

        return options

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        self._logger.warning(
            "database_connect_retry",
            url=self.safe_url,
            attempt=retry_state.attempt_number,
            error=str(error),
        )

    def connect(self) -> Engine:
        """
        Verify the database is reachable.

        Retries transient OperationalErrors with exponential backoff.

        Raises:
            ConnectionError: If the database is still unreachable
                after the configured number of attempts
        """
        settings = self._settings
        retrying = Retrying(
            stop=stop_after_attempt(settings.connect_attempts),
            wait=wait_exponential(
                multiplier=1,
                min=settings.connect_backoff_min_seconds,
                max=settings.connect_backoff_max_seconds,
            ),
            retry=retry_if_exception_type(OperationalError),
            before_sleep=self._log_retry,
            reraise=True,
        )

        try:
            for attempt in retrying:
                with attempt:
                    with self.engine.connect() as conn:
                        conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            self._logger.error("database_connect_failed", url=self.safe_url, error=str(e))
            raise ConnectionError(
                f"Could not connect to database at {self.safe_url}: {e}"
            ) from e

        self._logger.info("database_connected", url=self.safe_url)
        return self.engine

    def create_schema(self) -> None:
        """Create any missing tables. Existing tables are left alone."""
        try:
            metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not create tables at {self.safe_url}: {e}") from e
        self._logger.info("database_schema_ready", tables=sorted(metadata.tables))

    def dispose(self) -> None:
        """Close pooled connections. Safe to call more than once."""
        if self._engine is not None:
            self._engine.dispose()
            self._logger.info("database_disposed", url=self.safe_url)
