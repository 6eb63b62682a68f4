"""
regserver/services/registration_service.py

Purpose: User registration and listing

- Registers a user once per email/username
- Lists registered users without password material
- Maps store failures and timeouts to StoreError

The service is stateless per call; the collection it talks to is injected.
Uniqueness is ultimately enforced by the unique indexes created in
regserver.db.indexes: the existence check only produces a friendly error
early, a DuplicateKeyError from the insert is the authoritative signal.
"""

import asyncio
from typing import Callable, List, Optional

from bson.errors import BSONError
from pydantic import ValidationError as PydanticValidationError
from pymongo.errors import DuplicateKeyError, PyMongoError

from regserver.core.config import settings
from regserver.core.exceptions import StoreError, UserAlreadyExistsError
from regserver.core.logging import get_logger, LogContext
from regserver.models.user import PUBLIC_PROJECTION, UserCreate, UserDocument, UserPublic
from regserver.services.security import hash_password

logger = get_logger(__name__)

STORE_ERRORS = (PyMongoError, BSONError)


def _conflicting_fields(existing: dict, candidate: UserCreate) -> List[str]:
    fields = []
    if existing.get("email") == candidate.email:
        fields.append("email")
    if existing.get("username") == candidate.username:
        fields.append("username")
    return fields


def _duplicate_key_fields(error: DuplicateKeyError) -> List[str]:
    details = error.details or {}
    key_pattern = details.get("keyPattern") or details.get("keyValue") or {}
    return sorted(key_pattern)


class RegistrationService:
    """
    Registers and lists users against a document collection.

    Args:
        collection: Motor collection (or anything exposing find_one, find
            and insert_one with the same semantics)
        timeout: Upper bound in seconds for each operation
        hasher: Turns a plaintext password into the hash that is stored
    """

    def __init__(
        self,
        collection,
        timeout: Optional[float] = None,
        hasher: Callable[[str], str] = hash_password,
    ):
        self.collection = collection
        self.timeout = timeout if timeout is not None else settings.STORE_TIMEOUT_SECONDS
        self.hasher = hasher

    async def register(self, candidate: UserCreate) -> str:
        """
        Registers a new user.

        Args:
            candidate: Validated registration data (plaintext password)

        Returns:
            The store-assigned id of the new user, as a string

        Raises:
            UserAlreadyExistsError: email or username is already taken
            StoreError: the store failed or the operation timed out
        """
        with LogContext(username=candidate.username, email=candidate.email):
            try:
                user_id = await asyncio.wait_for(self._register(candidate), timeout=self.timeout)
            except asyncio.TimeoutError as e:
                logger.error(f"Registration timed out after {self.timeout}s")
                raise StoreError(f"Registration timed out after {self.timeout} seconds") from e

            logger.info("User creation successful", extra={"user_id": user_id})
            return user_id

    async def _register(self, candidate: UserCreate) -> str:
        query = {"$or": [{"email": candidate.email}, {"username": candidate.username}]}

        try:
            existing = await self.collection.find_one(query, projection={"email": 1, "username": 1})
        except STORE_ERRORS as e:
            logger.error(f"Existence check failed: {e}")
            raise StoreError(f"DB error: {e}") from e

        if existing is not None:
            fields = _conflicting_fields(existing, candidate)
            logger.info(f"Registration rejected, {'/'.join(fields) or 'user'} already taken")
            raise UserAlreadyExistsError(details={"fields": fields})

        password_hash = await asyncio.to_thread(self.hasher, candidate.password)
        document = UserDocument(
            name=candidate.name,
            email=candidate.email,
            username=candidate.username,
            password_hash=password_hash,
        ).to_document()

        try:
            result = await self.collection.insert_one(document)
        except DuplicateKeyError as e:
            # Lost a race against a concurrent registration
            fields = _duplicate_key_fields(e)
            logger.warning(f"Duplicate key on insert: {fields}")
            raise UserAlreadyExistsError(details={"fields": fields}) from e
        except STORE_ERRORS as e:
            logger.error(f"Insert failed: {e}")
            raise StoreError(f"DB insert failed: {e}") from e

        return str(result.inserted_id)

    async def list_all(self) -> List[UserPublic]:
        """
        Returns every registered user (name, email, username).

        Order is whatever the store returns. Either every document is
        decoded or StoreError is raised; partial results are never returned.

        Raises:
            StoreError: the store failed, timed out, or held an undecodable document
        """
        try:
            users = await asyncio.wait_for(self._list_all(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Listing users timed out after {self.timeout}s")
            raise StoreError(f"Listing users timed out after {self.timeout} seconds") from e

        logger.debug(f"Listed {len(users)} registered users")
        return users

    async def _list_all(self) -> List[UserPublic]:
        try:
            cursor = self.collection.find({}, projection=PUBLIC_PROJECTION)
            documents = await cursor.to_list(length=None)
        except STORE_ERRORS as e:
            logger.error(f"Failed to fetch users: {e}")
            raise StoreError(f"Failed to retrieve registered users: {e}") from e

        try:
            return [UserPublic.model_validate(doc) for doc in documents]
        except PydanticValidationError as e:
            logger.error(f"Failed to decode user document: {e}")
            raise StoreError("Stored user document could not be decoded") from e
