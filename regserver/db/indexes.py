"""
regserver/db/indexes.py

Purpose: Database index management

- Unique indexes on email and username make the store the authority
  on user uniqueness (concurrent registrations cannot both insert)
"""

from pymongo import ASCENDING

from regserver.db.mongo import get_users_collection
from regserver.core.logging import get_logger

logger = get_logger(__name__)

EMAIL_INDEX = "email_unique"
USERNAME_INDEX = "username_unique"


async def create_indexes(users=None):
    """
    Creates the unique indexes on the users collection.
    This function is idempotent - safe to run multiple times.

    Args:
        users: Collection to index (defaults to the configured users collection)
    """
    try:
        if users is None:
            users = get_users_collection()

        logger.info("Creating database indexes...")

        await users.create_index([("email", ASCENDING)], unique=True, name=EMAIL_INDEX)
        logger.debug("Created unique index on users.email")

        await users.create_index([("username", ASCENDING)], unique=True, name=USERNAME_INDEX)
        logger.debug("Created unique index on users.username")

        user_indexes = await users.index_information()
        logger.info(f"✅ Database indexes ready (users={len(user_indexes)})")

    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise

