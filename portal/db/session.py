import json
import logging
from typing import AsyncGenerator

import asyncpg
from asyncpg import Connection
from asyncpg.pool import Pool

from portal.core.config import settings

logger = logging.getLogger(__name__)

db_pool: Pool | None = None


async def _init_connection(conn: Connection):
    # address and exam records travel as plain dicts
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )


async def get_pool() -> Pool:
    global db_pool
    if db_pool is None:
        await connect_db_pool()
    return db_pool


async def connect_db_pool():
    global db_pool
    if db_pool is None:
        try:
            db_pool = await asyncpg.create_pool(
                dsn=settings.asyncpg_url,
                min_size=5,
                max_size=20,
                timeout=30,
                init=_init_connection,
            )
            logger.info("AsyncPG connection pool created.")
        except Exception as e:
            logger.error(f"Error connecting to database: {e}")
            raise


async def close_db_pool():
    global db_pool
    if db_pool:
        await db_pool.close()
        db_pool = None
        logger.info("AsyncPG connection pool closed.")


async def get_db_connection() -> AsyncGenerator[Connection, None]:
    if db_pool is None:
        raise Exception("Database pool is not initialized.")
    async with db_pool.acquire() as connection:
        yield connection
