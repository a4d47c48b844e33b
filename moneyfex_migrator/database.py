"""
Database engines for the legacy (source) and canonical (target) stores
"""
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import declarative_base

# Base class for canonical models
Base = declarative_base()


def _get_async_url(url: str) -> str:
    """Convert database URL to async variant"""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://")
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///")
    if url.startswith("mssql+pyodbc://"):
        return url.replace("mssql+pyodbc://", "mssql+aioodbc://")
    if url.startswith("mssql://"):
        return url.replace("mssql://", "mssql+aioodbc://")
    return url


def is_sqlite_url(url: str) -> bool:
    return _get_async_url(url).startswith("sqlite")


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """
    pysqlite/aiosqlite defer BEGIN until the first DML statement, which breaks
    SAVEPOINT. Take over transaction control so begin_nested() works.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_engine_for(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for either store"""
    database_url = _get_async_url(url)
    is_sqlite = database_url.startswith("sqlite")

    engine_kwargs = {
        "echo": echo,
    }

    # SQLite doesn't support pool_size
    if not is_sqlite:
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 5
        engine_kwargs["pool_pre_ping"] = True

    engine = create_async_engine(database_url, **engine_kwargs)
    if is_sqlite:
        _enable_sqlite_savepoints(engine)
    return engine


def create_source_engine(settings) -> AsyncEngine:
    return create_engine_for(settings.SOURCE_DATABASE_URL, echo=settings.DEBUG)


def create_target_engine(settings) -> AsyncEngine:
    return create_engine_for(settings.TARGET_DATABASE_URL, echo=settings.DEBUG)
