"""Database migration utilities"""
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

# Tables created before ledgers were scoped per user.
LEDGER_TABLES = ("works", "distribution_records", "events")


async def add_user_id_columns_if_missing(engine: AsyncEngine) -> list[str]:
    """
    Add user_id to ledger tables created by the older user-less schema.

    Rows without an owner cannot be attributed to anyone, so they are removed
    before the column is made NOT NULL (use scripts/import_local_storage.py to
    bring such data back under a specific account). PostgreSQL only.
    Returns the tables that were migrated.
    """
    if engine.dialect.name != "postgresql":
        logger.info("Skipping user_id migration on %s", engine.dialect.name)
        return []

    migrated: list[str] = []
    async with engine.begin() as conn:
        for table in LEDGER_TABLES:
            result = await conn.execute(
                text("""
                    SELECT column_name
                    FROM information_schema.columns
                    WHERE table_name = :table
                    AND column_name = 'user_id'
                """),
                {"table": table},
            )
            if result.scalar() is not None:
                logger.debug("user_id column already exists in %s", table)
                continue

            logger.info("Adding user_id column to %s table...", table)
            await conn.execute(text(f"ALTER TABLE {table} ADD COLUMN user_id UUID"))
            await conn.execute(text(f"DELETE FROM {table} WHERE user_id IS NULL"))

            constraint = f"fk_{table}_user_id"
            fk_result = await conn.execute(
                text("""
                    SELECT constraint_name
                    FROM information_schema.table_constraints
                    WHERE table_name = :table
                    AND constraint_name = :constraint
                """),
                {"table": table, "constraint": constraint},
            )
            if fk_result.scalar() is None:
                await conn.execute(
                    text(f"""
                        ALTER TABLE {table}
                        ADD CONSTRAINT {constraint}
                        FOREIGN KEY (user_id)
                        REFERENCES users(id)
                        ON DELETE CASCADE
                    """)
                )

            await conn.execute(text(f"ALTER TABLE {table} ALTER COLUMN user_id SET NOT NULL"))
            logger.info("Successfully added user_id column to %s table", table)
            migrated.append(table)
    return migrated
