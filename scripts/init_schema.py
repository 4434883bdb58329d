#!/usr/bin/env python3
"""Create the catalog schema (tables, extensions, indexes) in the listing store."""

import asyncio
import asyncpg
import os
import sys

from dotenv import load_dotenv
load_dotenv()

from listd.db import create_tables


async def init_schema():
    database_url = os.getenv('NEON_LISTD_DATABASE_URL')
    if not database_url:
        print('Error: NEON_LISTD_DATABASE_URL is not set')
        sys.exit(1)

    try:
        conn = await asyncpg.connect(database_url)
    except (asyncpg.PostgresError, OSError) as e:
        print(f'Error: {e}')
        sys.exit(1)

    try:
        await create_tables(conn)
        print('Schema created successfully!')
    except asyncpg.PostgresError as e:
        print(f'Error: {e}')
        sys.exit(1)
    finally:
        await conn.close()

if __name__ == '__main__':
    asyncio.run(init_schema())
