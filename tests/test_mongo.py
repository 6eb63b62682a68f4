import pytest
from pymongo.errors import ServerSelectionTimeoutError

from regserver.db import mongo


class FakeAdmin:
    def __init__(self, client):
        self.client = client

    async def command(self, name):
        self.client.pings += 1
        if self.client.fail:
            raise ServerSelectionTimeoutError("no servers available")
        return {"ok": 1}


class FakeMotorClient:
    instances = []
    fail = True

    def __init__(self, uri, **kwargs):
        self.uri = uri
        self.kwargs = kwargs
        self.pings = 0
        self.closed = False
        self.admin = FakeAdmin(self)
        FakeMotorClient.instances.append(self)

    def __getitem__(self, name):
        return {"name": name}

    def close(self):
        self.closed = True


@pytest.fixture
def fake_motor(monkeypatch):
    FakeMotorClient.instances = []
    FakeMotorClient.fail = True
    monkeypatch.setattr(mongo, "AsyncIOMotorClient", FakeMotorClient)
    monkeypatch.setattr(mongo.settings, "MONGODB_URI", "mongodb://db.invalid:27017")
    yield FakeMotorClient
    mongo._client = None
    mongo._database = None


@pytest.mark.asyncio
async def test_connect_retries_then_gives_up(fake_motor):
    with pytest.raises(ConnectionError) as exc_info:
        await mongo.connect_to_mongo(max_retries=3, retry_delay=0)

    assert isinstance(exc_info.value.__cause__, ServerSelectionTimeoutError)
    assert len(fake_motor.instances) == 3
    assert all(client.closed for client in fake_motor.instances)
    assert mongo._client is None

    with pytest.raises(RuntimeError):
        mongo.get_users_collection()


@pytest.mark.asyncio
async def test_connect_success_and_close(fake_motor):
    fake_motor.fail = False

    await mongo.connect_to_mongo(max_retries=3, retry_delay=0)

    assert len(fake_motor.instances) == 1
    assert fake_motor.instances[0].uri == "mongodb://db.invalid:27017"
    assert mongo.get_database() == {"name": mongo.settings.MONGODB_DB_NAME}
    assert await mongo.check_database_health() is True

    client = fake_motor.instances[0]
    await mongo.close_mongo_connection()
    assert client.closed
    assert await mongo.check_database_health() is False
