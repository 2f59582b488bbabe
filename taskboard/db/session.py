import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import create_engine, Session, SQLModel

from ..core.config import Settings

logger = logging.getLogger(__name__)


# Helper function to ensure URL format is correct
def get_db_url(settings: Settings) -> str:
    url = settings.DATABASE_URL
    if not url:
        return "sqlite:///./taskboard.db"
    # Heroku/Neon style URLs
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    # The API runs on sync sessions, so strip async drivers
    return url.replace("+asyncpg", "").replace("+aiosqlite", "")


def _enable_sqlite_transactions(engine: Engine) -> None:
    # pysqlite defers BEGIN on its own and breaks SAVEPOINT; take over BEGIN
    # and turn on foreign key enforcement so cascades match PostgreSQL.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_db_engine(settings: Settings, **kwargs) -> Engine:
    db_url = get_db_url(settings)

    # --- CONFIGURATION FOR SQLITE ---
    if db_url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        engine = create_engine(
            db_url,
            echo=settings.SQL_ECHO,
            connect_args=connect_args,
            **kwargs,
        )
        _enable_sqlite_transactions(engine)
        return engine

    # --- CONFIGURATION FOR POSTGRESQL ---
    return create_engine(
        db_url,
        echo=settings.SQL_ECHO,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        **kwargs,
    )


def create_db_and_tables(engine: Engine) -> None:
    # Import models so they register on the metadata
    from .. import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables are ready: %s", ", ".join(sorted(SQLModel.metadata.tables)))


# Dependency: one session per request, bound to the app's engine
def get_session(request: Request) -> Iterator[Session]:
    with Session(request.app.state.engine) as session:
        yield session
