"""
Database compatibility helpers for SQLite and PostgreSQL.
"""
from typing import Any, Dict, Iterable, Optional, Sequence

from sqlalchemy import Table, inspect
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncConnection


def _insert_for(dialect_name: str):
    if dialect_name == "postgresql":
        return postgresql.insert
    if dialect_name == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"Upsert is not supported on dialect: {dialect_name}")


def upsert(
    conn: AsyncConnection,
    table: Table,
    values: Dict[str, Any],
    index_elements: Sequence[str],
    update_exclude: Iterable[str] = ("created_at",),
    returning=None,
):
    """
    Build INSERT ... ON CONFLICT (<index_elements>) DO UPDATE for the
    connection's dialect. Every inserted column except the conflict key and
    `update_exclude` is overwritten from EXCLUDED.
    """
    insert = _insert_for(conn.dialect.name)
    stmt = insert(table).values(**values)

    skip = set(index_elements) | set(update_exclude)
    update_set = {name: stmt.excluded[name] for name in values if name not in skip}

    if update_set:
        stmt = stmt.on_conflict_do_update(index_elements=list(index_elements), set_=update_set)
    else:
        stmt = stmt.on_conflict_do_nothing(index_elements=list(index_elements))

    if returning is not None:
        stmt = stmt.returning(returning)
    return stmt


async def table_columns(conn: AsyncConnection, table_name: str) -> Optional[set]:
    """Lower-cased column names of a table, or None when the table is absent"""

    def _probe(sync_conn):
        inspector = inspect(sync_conn)
        if not inspector.has_table(table_name):
            return None
        return {col["name"].lower() for col in inspector.get_columns(table_name)}

    return await conn.run_sync(_probe)


async def execute_script(conn: AsyncConnection, script: str) -> None:
    """
    Execute a multi-statement SQL script as one batch on the raw driver
    connection (asyncpg execute() / sqlite executescript()).
    """
    raw = await conn.get_raw_connection()
    driver_conn = raw.driver_connection

    if conn.dialect.name == "sqlite":
        await driver_conn.executescript(script)
    elif conn.dialect.name == "postgresql":
        await driver_conn.execute(script)
    else:
        # Drivers without a script API get the whole text in one round trip
        await conn.exec_driver_sql(script)
