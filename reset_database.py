# reset_database.py
import asyncio
import logging

from config import DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_PASSWORD
from database import database, engine, Base
import models  # noqa: F401  registers the tables on Base.metadata
import crud

logger = logging.getLogger(__name__)

async def reset_database():
    logger.info("🧨 RESETTING DATABASE...")

    logger.info("🗑️ Dropping all tables...")
    Base.metadata.drop_all(bind=engine)

    logger.info("🔨 Creating tables...")
    Base.metadata.create_all(bind=engine)

    await database.connect()
    try:
        await crud.seed_database(database, DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_PASSWORD)
    finally:
        await database.disconnect()

    logger.info("🎉 DATABASE RESET COMPLETE! Admin login: %s", DEFAULT_ADMIN_EMAIL)

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    asyncio.run(reset_database())
