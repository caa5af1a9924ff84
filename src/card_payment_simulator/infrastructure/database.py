"""Database connection and session management for Card Payment Simulator."""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from card_payment_simulator.config import settings

# Base class for all ORM models
Base = declarative_base()


def create_db_engine(database_url: str | None = None) -> Engine:
    """
    Create a SQLAlchemy engine for the configured database.

    SQLite gets foreign key enforcement switched on, and in-memory SQLite
    shares one connection across threads so every session sees the same
    database. Other backends get a pre-pinged connection pool.

    Args:
        database_url: Database URL. If None, uses settings.database_url

    Returns:
        Configured SQLAlchemy engine
    """
    url = make_url(database_url or settings.database_url)

    if url.get_backend_name() != "sqlite":
        return create_engine(
            url,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,  # Verify connections before using
            pool_recycle=3600,
            echo=settings.debug,
        )

    engine_kwargs: dict = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        engine_kwargs["poolclass"] = StaticPool

    engine = create_engine(url, echo=settings.debug, **engine_kwargs)

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):  # type: ignore
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


# Global engine and session factory
engine = create_db_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Usage:
        with get_db_session() as session:
            CardRepository(session).list_all()

    Automatically commits on success, rolls back on exception.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine | None = None) -> None:
    """
    Initialize database schema (create all missing tables).

    In production, use the Alembic migrations instead.

    Args:
        engine: Optional engine to use. If None, uses global engine.
    """
    from card_payment_simulator.infrastructure import models  # noqa: F401

    target_engine = engine or globals()["engine"]
    Base.metadata.create_all(bind=target_engine)


def drop_all_tables(engine: Engine | None = None) -> None:
    """
    Drop all tables in the database.

    WARNING: This is destructive and should only be used for testing.
    """
    target_engine = engine or globals()["engine"]
    Base.metadata.drop_all(bind=target_engine)


def reset_db(engine: Engine | None = None) -> None:
    """
    Reset database (drop all tables and recreate them).

    WARNING: This is destructive and should only be used for testing.
    """
    drop_all_tables(engine)
    init_db(engine)
