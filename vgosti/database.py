# vgosti/database.py
"""
Database engine, session factory and schema initialization.
SQLite by default, PostgreSQL through DATABASE_URL.
"""

from typing import Generator
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from vgosti.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    """Create a bounded, self-managed connection pool for the given URL."""
    if database_url.startswith("sqlite"):
        sqlite_engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=False,
        )

        @event.listens_for(sqlite_engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            # pysqlite must not open transactions itself, or CREATE TABLE escapes rollback
            dbapi_conn.isolation_level = None
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(sqlite_engine, "begin")
        def do_begin(conn):
            conn.exec_driver_sql("BEGIN")

        return sqlite_engine

    return create_engine(
        database_url,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_timeout=settings.DATABASE_POOL_TIMEOUT,
        pool_recycle=settings.DATABASE_POOL_RECYCLE,
        pool_pre_ping=True,
        echo=False,
    )


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; the connection goes back to the pool on every path."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = None) -> None:
    """
    Create tables and indexes and seed default rows, all in one transaction.
    Any failure rolls back the whole run and is re-raised so startup aborts.
    """
    from vgosti import models, seed  # noqa: F401  (registers the tables on Base)

    bind = bind or engine
    logger.info("Initializing database schema...")
    session = Session(bind=bind, autoflush=False)
    try:
        with session.begin():
            Base.metadata.create_all(bind=session.connection(), checkfirst=True)
            seed.seed_defaults(session)
    except Exception:
        logger.error("Database initialization failed, rolled back", exc_info=True)
        raise
    finally:
        session.close()
    logger.info("Database schema initialized")
