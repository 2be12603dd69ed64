"""Database session configuration."""

from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from forum_stage.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


def enable_sqlite_savepoints(engine: Engine) -> None:
    """Let SQLAlchemy, not pysqlite, control transactions so SAVEPOINT works."""

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record) -> None:  # pragma: no cover
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn) -> None:  # pragma: no cover
        conn.exec_driver_sql("BEGIN")


# Ensure model modules are imported so that metadata is populated when create_all runs.
import forum_stage.models  # noqa: E402,F401

engine = create_engine(
    settings.effective_database_url,
    pool_pre_ping=True,
    echo=settings.sql_debug,
)
if engine.dialect.name == "sqlite":
    enable_sqlite_savepoints(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def drop_tables() -> None:
    """Drop all database tables."""
    Base.metadata.drop_all(bind=engine)
