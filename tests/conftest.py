"""
Shared fixtures: an in-memory stand-in for the Motor users collection.

It understands the small query surface the registration service uses
(equality and $or filters, inclusion projections) and enforces the
unique email/username indexes by raising pymongo's DuplicateKeyError.
"""

import asyncio
from types import SimpleNamespace

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError

from regserver.api.deps import get_registration_service
from regserver.main import app
from regserver.services.registration_service import RegistrationService
from regserver.services.security import hash_password


def _matches(document, query):
    for key, value in query.items():
        if key == "$or":
            if not any(_matches(document, clause) for clause in value):
                return False
        elif document.get(key) != value:
            return False
    return True


def _project(document, projection):
    if projection is None:
        return dict(document)
    result = {k: v for k, v in document.items() if projection.get(k)}
    if projection.get("_id", 1) and "_id" in document:
        result["_id"] = document["_id"]
    return result


class FakeCursor:
    def __init__(self, documents):
        self._documents = documents

    async def to_list(self, length=None):
        if length is None:
            return list(self._documents)
        return self._documents[:length]


class FakeCollection:
    def __init__(self, unique_fields=("email", "username")):
        self.documents = []
        self.unique_fields = list(unique_fields)
        self.indexes = {"_id_": {"key": [("_id", 1)]}}
        self.find_one_calls = 0
        self.insert_calls = 0

    async def find_one(self, query, projection=None):
        self.find_one_calls += 1
        for document in self.documents:
            if _matches(document, query):
                return _project(document, projection)
        return None

    def find(self, query=None, projection=None):
        query = query or {}
        return FakeCursor([_project(d, projection) for d in self.documents if _matches(d, query)])

    async def insert_one(self, document):
        self.insert_calls += 1
        for field in self.unique_fields:
            if any(d.get(field) == document.get(field) for d in self.documents):
                raise DuplicateKeyError(
                    f"E11000 duplicate key error collection: Goserver.users index: {field}_unique",
                    11000,
                    {"keyPattern": {field: 1}, "keyValue": {field: document.get(field)}},
                )
        document.setdefault("_id", ObjectId())
        self.documents.append(dict(document))
        return SimpleNamespace(inserted_id=document["_id"], acknowledged=True)

    async def create_index(self, keys, unique=False, name=None):
        field = keys[0][0]
        self.indexes[name] = {"key": keys, "unique": unique}
        if unique and field not in self.unique_fields:
            self.unique_fields.append(field)
        return name

    async def index_information(self):
        return dict(self.indexes)


class BrokenCollection(FakeCollection):
    """Every operation fails the way an unreachable server does."""

    def __init__(self, error):
        super().__init__()
        self.error = error

    async def find_one(self, query, projection=None):
        self.find_one_calls += 1
        raise self.error

    def find(self, query=None, projection=None):
        raise self.error


class SlowCollection(FakeCollection):
    """Hangs on every round trip."""

    async def find_one(self, query, projection=None):
        await asyncio.sleep(10)

    def find(self, query=None, projection=None):
        collection = self

        class _SlowCursor:
            async def to_list(self, length=None):
                await asyncio.sleep(10)
                return list(collection.documents)

        return _SlowCursor()


def fast_hash(password):
    return hash_password(password, rounds=4)


@pytest.fixture
def users_collection():
    return FakeCollection()


@pytest.fixture
def service(users_collection):
    return RegistrationService(users_collection, timeout=5, hasher=fast_hash)


@pytest.fixture
def client(users_collection):
    app.dependency_overrides[get_registration_service] = lambda: RegistrationService(
        users_collection, timeout=5, hasher=fast_hash
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def client_for():
    """Builds a client whose service talks to the given collection."""
    def _build(collection):
        app.dependency_overrides[get_registration_service] = lambda: RegistrationService(
            collection, timeout=0.2, hasher=fast_hash
        )
        return TestClient(app)

    yield _build
    app.dependency_overrides.clear()
