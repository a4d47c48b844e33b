"""Create the canonical tables on the target database from the ORM models (SQLite trial runs)"""
import asyncio

from moneyfex_migrator.config import get_settings
from moneyfex_migrator.database import Base, create_target_engine
from moneyfex_migrator.models import *  # noqa: F401,F403 - Import all models to register them


async def init():
    engine = create_target_engine(get_settings())
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    print("Canonical tables created successfully.")


if __name__ == "__main__":
    asyncio.run(init())
