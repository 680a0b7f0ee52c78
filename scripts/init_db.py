"""
Create the shopping list tables for the configured DATABASE_URL
Run: python scripts/init_db.py
"""

import asyncio

from voicecart.config.settings import settings
from voicecart.db.database import engine, init_models


async def main():
    await init_models()
    await engine.dispose()
    print(f"DB initialized: {settings.DATABASE_URL}")


if __name__ == "__main__":
    asyncio.run(main())
