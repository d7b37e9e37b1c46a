#!/usr/bin/env python3
"""Create the SQLite schema at the configured database path."""

import asyncio

from pms.core import db_client
from pms.core.config import settings


async def main() -> None:
    await db_client.init_db(db_path=settings.sqlite_db_path)
    await db_client.close_connection(db_path=settings.sqlite_db_path)


if __name__ == "__main__":
    asyncio.run(main())
