"""
Schema bootstrapper: runs the DDL script against the target store
"""
from pathlib import Path
from typing import Optional, Union

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine

from moneyfex_migrator.config import get_settings
from moneyfex_migrator.errors import SchemaBootstrapError
from moneyfex_migrator.utils.db_compat import execute_script
from moneyfex_migrator.utils.logger import get_logger

logger = get_logger(__name__)

# duplicate_table, duplicate_object
ALREADY_EXISTS_SQLSTATES = {"42P07", "42710"}


def _sqlstate(error: BaseException) -> Optional[str]:
    for candidate in (error, getattr(error, "orig", None), getattr(error, "__cause__", None)):
        if candidate is None:
            continue
        state = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if state:
            return state
    return None


def is_already_exists(error: BaseException) -> bool:
    if _sqlstate(error) in ALREADY_EXISTS_SQLSTATES:
        return True
    return "already exists" in str(error).lower()


async def bootstrap_schema(engine: AsyncEngine, path: Optional[Union[str, Path]] = None) -> bool:
    """
    Execute the DDL script as one batch.

    The shipped script only uses IF NOT EXISTS statements, so a re-run
    completes a partly-created target. Returns True when the script ran,
    False when a non-idempotent statement hit an object that already existed.
    Any other database error is raised as SchemaBootstrapError.
    """
    path = Path(path or get_settings().SCHEMA_PATH)
    if not path.is_file():
        raise FileNotFoundError(f"Schema file not found: {path}")

    script = path.read_text(encoding="utf-8")
    logger.info(f"Creating target schema from {path}")

    try:
        async with engine.begin() as conn:
            await execute_script(conn, script)
    except Exception as e:
        if is_already_exists(e):
            logger.warning(f"Schema objects already exist, continuing: {e}")
            return False
        if isinstance(e, DBAPIError) or _sqlstate(e):
            raise SchemaBootstrapError(f"Schema creation failed: {e}") from e
        raise

    logger.info("Target schema created")
    return True
