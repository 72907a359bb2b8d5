from __future__ import annotations

from sqlmodel import SQLModel

from orchestra.core.config import get_settings
from orchestra.core.logging import get_logger
from orchestra.db import models  # noqa: F401  registers the tables on SQLModel.metadata
from orchestra.db.engine import create_engine_from_url, ensure_database_parent_dir

logger = get_logger("orchestra.db.bootstrap")


async def initialize_database(database_url: str | None = None) -> None:
    """Create every missing table of the schema."""
    target_url = database_url or get_settings().database_url
    ensure_database_parent_dir(target_url)

    engine = create_engine_from_url(target_url)
    try:
        async with engine.begin() as connection:
            await connection.run_sync(SQLModel.metadata.create_all)
    finally:
        await engine.dispose()
    logger.info("database.initialized", tables=sorted(SQLModel.metadata.tables))
