# init_db.py
"""
Recreate the database schema from the ORM models (local development only).
Use Alembic (infra/migrations) for anything that holds real data.
"""
import asyncio

from kaga_health.db.sql import engine, init_db


async def init_models():
    await init_db(drop=True)
    await engine.dispose()
    print("Database schema recreated successfully!")


if __name__ == "__main__":
    asyncio.run(init_models())
