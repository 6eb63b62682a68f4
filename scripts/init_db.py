"""
Database initialization script

Creates the unique email/username indexes on the users collection.
Run once before first start (the server also ensures them on startup):
    python scripts/init_db.py
"""

import asyncio
import sys
from pathlib import Path
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

from regserver.core.config import settings, validate_settings
from regserver.core.logging import setup_logging, get_logger
from regserver.db.mongo import connect_to_mongo, close_mongo_connection, get_users_collection
from regserver.db.indexes import create_indexes

setup_logging()
logger = get_logger("scripts.init_db")


async def main():
    """Main initialization"""
    logger.info("=" * 60)
    logger.info("  Registration Database Setup")
    logger.info("=" * 60)

    validate_settings()
    await connect_to_mongo()

    try:
        await create_indexes()

        users = get_users_collection()
        count = await users.count_documents({})
        logger.info(f"📊 {settings.MONGODB_DB_NAME}.{settings.MONGODB_COLLECTION}: {count} users")
    finally:
        await close_mongo_connection()

    logger.info("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
