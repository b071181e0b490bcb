"""Shared fixtures: settings, a fake Mongo client factory, and a test app."""

import asyncio
from typing import List, Optional
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pymongo.errors import ServerSelectionTimeoutError

from app.core.config import Settings
from app.db.mongodb import MongoConnectionManager
from app.main import create_app


class FakeDatabase:
    def __init__(self, name: str, collections: List[str]):
        self.name = name
        self._collections = collections

    async def list_collection_names(self) -> List[str]:
        return list(self._collections)

    async def command(self, name: str) -> dict:
        assert name == "dbstats"
        return {
            "db": self.name,
            "collections": len(self._collections),
            "objects": 3,
            "dataSize": 1024,
            "storageSize": 4096,
            "indexes": 2,
            "indexSize": 512,
            "ok": 1.0,
        }


class FakeAdmin:
    def __init__(self, client: "FakeMongoClient"):
        self._client = client

    async def command(self, name: str) -> dict:
        factory = self._client.factory
        if factory.delay:
            await asyncio.sleep(factory.delay)
        if factory.error is not None:
            raise factory.error
        return {"ok": 1.0}


class FakeMongoClient:
    def __init__(self, factory: "FakeClientFactory", uri: str, **options):
        self.factory = factory
        self.uri = uri
        self.options = options
        self.closed = False
        self.admin = FakeAdmin(self)
        self.topology_description = MagicMock()
        self.topology_description.server_descriptions.return_value = {("localhost", 27017): object()}

    def get_default_database(self, default: Optional[str] = None) -> FakeDatabase:
        return FakeDatabase(default, self.factory.collections)

    async def close(self) -> None:
        self.closed = True


class FakeClientFactory:
    """Stands in for AsyncMongoClient; records every client it builds."""

    def __init__(self):
        self.clients: List[FakeMongoClient] = []
        self.error: Optional[BaseException] = None
        self.delay: float = 0
        self.collections = ["users", "jobs", "referrals"]

    def __call__(self, uri: str, **options) -> FakeMongoClient:
        client = FakeMongoClient(self, uri, **options)
        self.clients.append(client)
        return client


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        mongodb_uri="mongodb://localhost:27017/campus_recruitment",
        environment="test",
        deployment_mode="serverless",
        upload_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def client_factory():
    return FakeClientFactory()


@pytest.fixture
def manager(settings, client_factory):
    return MongoConnectionManager(settings, client_factory=client_factory)


@pytest.fixture
def app(settings, manager):
    return create_app(settings, manager)


@pytest_asyncio.fixture
async def http_client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def refused():
    """What the driver raises when nothing listens on the configured port."""
    return ServerSelectionTimeoutError(
        "localhost:27017: [Errno 111] Connection refused (configured timeouts: connectTimeoutMS: 10000.0ms)"
    )
