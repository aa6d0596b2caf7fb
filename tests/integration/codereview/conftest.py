import os
import uuid

import pytest
import pytest_asyncio
from beanie import init_beanie
from mongomock_motor import AsyncMongoMockClient
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import ServerSelectionTimeoutError

from codereview.models.documents import DOCUMENT_MODELS

# Point at a disposable MongoDB to run against a real server; otherwise the suite uses
# an in-process mongomock database.
TEST_MONGO_URI = os.environ.get("CODEREVIEW_TEST_MONGO_URI")


async def _client():
    if not TEST_MONGO_URI:
        return AsyncMongoMockClient(tz_aware=True)

    client = AsyncIOMotorClient(TEST_MONGO_URI, serverSelectionTimeoutMS=5000, tz_aware=True)
    try:
        await client.server_info()
    except ServerSelectionTimeoutError:
        client.close()
        pytest.skip(f"MongoDB not reachable at {TEST_MONGO_URI}")
    return client


@pytest_asyncio.fixture
async def database():
    """A fresh database with Beanie initialised and every index created."""
    client = await _client()
    name = f"codereview_test_{uuid.uuid4().hex[:8]}"
    db = client[name]
    await init_beanie(database=db, document_models=DOCUMENT_MODELS)
    yield db
    await client.drop_database(name)
