"""Engine, session factory and unit-of-work helpers."""
from __future__ import annotations

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.config import get_settings
from app.models.base import Base

logger = logging.getLogger(__name__)

engine: Engine | None = None
SessionLocal: sessionmaker[Session] | None = None

# Appliqués à chaque connexion SQLite: FK actives, attente sur verrou d'écriture.
SQLITE_PRAGMAS = ("PRAGMA foreign_keys=ON", "PRAGMA busy_timeout=5000")


def _sqlite_driver_transactions_off(dbapi_connection, connection_record) -> None:
    # pysqlite n'ouvre pas de transaction sur un SELECT: on laisse SQLAlchemy émettre BEGIN.
    dbapi_connection.isolation_level = None


def _sqlite_begin_immediate(conn) -> None:
    # Verrou d'écriture dès le début: la lecture du solde et son écriture sont sérialisées.
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def _build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        sqlite_engine = create_engine(url, future=True, connect_args={"check_same_thread": False})
        event.listen(sqlite_engine, "connect", _sqlite_driver_transactions_off)
        event.listen(sqlite_engine, "begin", _sqlite_begin_immediate)
        return sqlite_engine
    # Postgres/MySQL: la ligne caisse_balance est verrouillée (FOR UPDATE), on recycle les connexions mortes.
    return create_engine(url, future=True, pool_pre_ping=True)


def init_engine() -> Engine:
    """Create the engine and session factory once; later calls return the same engine."""

    global engine, SessionLocal
    if engine is None:
        url = get_settings().database_url
        engine = _build_engine(url)
        SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)
        logger.info("Database engine ready", extra={"dialect": engine.dialect.name})
    return engine


def get_engine() -> Engine:
    return engine if engine is not None else init_engine()


def get_sessionmaker() -> sessionmaker[Session]:
    if SessionLocal is None:
        init_engine()
    assert SessionLocal is not None  # for type-checkers
    return SessionLocal


@event.listens_for(Engine, "connect")
def _sqlite_on_connect(dbapi_connection, connection_record) -> None:  # pragma: no cover - sqlite only
    if not type(dbapi_connection).__module__.startswith("sqlite3"):
        return
    cursor = dbapi_connection.cursor()
    for pragma in SQLITE_PRAGMAS:
        cursor.execute(pragma)
    cursor.close()


def create_all() -> None:
    """Create the caisse tables directly (dev only; production uses Alembic)."""

    Base.metadata.create_all(bind=get_engine())


def close_engine() -> None:
    global engine, SessionLocal
    if engine is not None:
        engine.dispose()
    engine = None
    SessionLocal = None


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """Commit the block as one unit of work; any exception rolls everything back and propagates."""

    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request."""

    session = get_sessionmaker()()
    try:
        yield session
    finally:
        session.close()


__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "atomic",
    "create_all",
    "get_db",
    "get_engine",
    "get_sessionmaker",
    "init_engine",
    "close_engine",
]
