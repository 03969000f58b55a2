"""
Database initialization script.

Creates the schema and seeds the default enterprise, roles and permission
matrix. Run this to initialize a fresh database:

    python -m rbac_portal.app.core.init_db          # create + seed
    python -m rbac_portal.app.core.init_db --drop   # drop everything
"""

import asyncio

from sqlalchemy.ext.asyncio import AsyncEngine

from rbac_portal.app.core.config import get_settings
from rbac_portal.app.core.database import Base, engine, get_db_context
from rbac_portal.app import models  # noqa: F401  registers tables with Base
from rbac_portal.app.services.bootstrap import seed_defaults

settings = get_settings()


async def create_tables(bind: AsyncEngine = engine):
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_database(seed: bool = True):
    """Create all tables and, unless told otherwise, seed the defaults."""
    print(f"📡 Initializing database at {settings.database_url}...")
    await create_tables()
    print("📦 Tables created")

    if seed:
        async with get_db_context() as session:
            await seed_defaults(session, settings)
        print("🌱 Defaults seeded")

    await engine.dispose()
    print("✅ Database initialized successfully!")


async def drop_all_tables():
    """Drop all tables (use with caution!)."""
    async with engine.begin() as conn:
        print("⚠️ Dropping all tables...")
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()
    print("✅ All tables dropped.")


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1 and sys.argv[1] == "--drop":
        print("⚠️ WARNING: This will drop all tables!")
        confirm = input("Type 'yes' to confirm: ")
        if confirm == "yes":
            asyncio.run(drop_all_tables())
        else:
            print("Aborted.")
    else:
        asyncio.run(init_database(seed="--no-seed" not in sys.argv))
