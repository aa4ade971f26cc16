"""Load the benchmark fixture into the store.

The fixture script is shipped as package data (init_data.sql) so that the
same file can be mounted into the Postgres container's init directory.
"""

from __future__ import annotations

import logging
import re
from importlib import resources

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

from workmem.persistence.db import Database
from workmem.persistence.tables import Base

logger = logging.getLogger(__name__)

FIXTURE = "init_data.sql"

# The script appends rows, so it only runs against an empty players table
FIXTURE_TABLE_EXISTS = text("SELECT to_regclass('players') IS NOT NULL")
FIXTURE_HAS_ROWS = text("SELECT EXISTS (SELECT 1 FROM players)")

_COMMENT_RE = re.compile(r"--[^\n]*")


def load_fixture_sql() -> str:
    return resources.files("workmem.persistence").joinpath(FIXTURE).read_text(encoding="utf-8")


def split_statements(script: str) -> list[str]:
    """Split a plain SQL script into statements.

    The fixture has no function bodies or string literals containing ';',
    so splitting on the terminator after dropping line comments is enough.
    """
    script = _COMMENT_RE.sub("", script)
    return [stmt.strip() for stmt in script.split(";") if stmt.strip()]


async def fixture_loaded(conn: AsyncConnection) -> bool:
    """True when the players table exists and has rows."""
    if not (await conn.execute(FIXTURE_TABLE_EXISTS)).scalar_one():
        return False
    return bool((await conn.execute(FIXTURE_HAS_ROWS)).scalar_one())


async def seed(database: Database, reset: bool = False) -> int:
    """Create and populate the fixture tables in a single transaction.

    Without reset, an already loaded fixture is left alone so row counts
    stay at 10,000 / 1,000 / 100,000.

    Args:
        database: Store to seed
        reset: Drop the fixture tables first

    Returns:
        Number of fixture statements executed, 0 if the fixture was
        already loaded
    """
    statements = split_statements(load_fixture_sql())

    async with database.connect() as conn:
        async with conn.begin():
            if reset:
                await conn.run_sync(Base.metadata.drop_all)
                logger.info("Dropped fixture tables")
            elif await fixture_loaded(conn):
                logger.warning("Fixture already loaded, skipping (use reset to reload)")
                return 0
            for statement in statements:
                await conn.execute(text(statement))

    logger.info(f"Seeded fixture with {len(statements)} statements")
    return len(statements)
