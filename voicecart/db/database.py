"""
Database Configuration
Async SQLAlchemy (SQLite via aiosqlite by default, PostgreSQL via asyncpg)
"""

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from voicecart.config.settings import settings

# Convert sync URL to async
DATABASE_URL = settings.DATABASE_URL.replace(
    "postgresql://", "postgresql+asyncpg://"
)

engine_options = {"echo": settings.DEBUG, "pool_pre_ping": True}
if not DATABASE_URL.startswith("sqlite"):
    engine_options.update(pool_size=10, max_overflow=20)

# Create async engine
engine = create_async_engine(DATABASE_URL, **engine_options)

# Session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# Base class for models
Base = declarative_base()


async def init_models(bind=None):
    """Create tables for all models"""
    from voicecart.db import models  # noqa: F401  registers tables on Base

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

