import asyncio
from collections import defaultdict
from types import SimpleNamespace

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError
from sqlalchemy.pool import StaticPool

from catalog.config import Settings
from catalog.database import Base, RelationalDatabase
from catalog.main import create_app
from catalog.mongo import DocumentStore


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def make_relational_db(pool_size: int = 1, queue_limit: int = 0) -> RelationalDatabase:
    """In-memory SQLite store; a single shared connection, so one query at a time."""
    return RelationalDatabase.from_url(
        SQLALCHEMY_DATABASE_URL,
        pool_size=pool_size,
        queue_limit=queue_limit,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


async def create_tables(db: RelationalDatabase) -> None:
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


class FakeCursor:
    def __init__(self, collection, documents):
        self._collection = collection
        self._documents = list(documents)

    def limit(self, count):
        return FakeCursor(self._collection, self._documents[:count])

    async def to_list(self, length=None):
        self._collection.server.ensure_available()
        return [dict(document) for document in self._documents]


class FakeCollection:
    def __init__(self, server):
        self.server = server
        self.documents = []

    def find(self, query=None):
        return FakeCursor(self, self.documents)

    async def insert_one(self, document):
        self.server.ensure_available()
        # pymongo adds _id to the caller's dict
        document.setdefault("_id", ObjectId())
        self.documents.append(dict(document))
        return SimpleNamespace(inserted_id=document["_id"])

    async def count_documents(self, query):
        self.server.ensure_available()
        return len(self.documents)


class FakeAdmin:
    def __init__(self, server):
        self.server = server

    async def command(self, name):
        self.server.pings += 1
        await asyncio.sleep(self.server.ping_delay)
        self.server.ensure_available()
        return {"ok": 1.0}


class FakeMongoClient:
    def __init__(self, server, url, **options):
        self.server = server
        self.url = url
        self.options = options
        self.closed = False
        self.admin = FakeAdmin(server)

    def __getitem__(self, name):
        return self.server.databases[name]

    async def close(self):
        self.closed = True


class FakeMongoServer:
    """In-memory stand-in for a MongoDB deployment, shared by every client it creates."""

    def __init__(self, available: bool = True, ping_delay: float = 0):
        self.available = available
        self.ping_delay = ping_delay
        self.pings = 0
        self.clients = []
        self.databases = defaultdict(lambda: defaultdict(lambda: FakeCollection(self)))

    def ensure_available(self):
        if not self.available:
            raise ServerSelectionTimeoutError("localhost:27017: [Errno 111] Connection refused")

    def client_factory(self, url, **options):
        client = FakeMongoClient(self, url, **options)
        self.clients.append(client)
        return client

    def collection(self, database="test_catalog", name="products") -> FakeCollection:
        return self.databases[database][name]


@pytest.fixture(scope="function")
def settings():
    """Test settings (development mode, so error details are exposed)."""
    return Settings(
        environment="development",
        mongo_url="mongodb://fake-mongo:27017",
        mongo_db="test_catalog",
        db_pool_size=1,
        db_queue_limit=0,
    )


@pytest.fixture(scope="function")
def mongo_server():
    return FakeMongoServer()


@pytest.fixture(scope="function")
def document_store(settings, mongo_server):
    return DocumentStore(
        settings.mongo_url,
        settings.mongo_db,
        client_factory=mongo_server.client_factory,
    )


@pytest.fixture(scope="function")
def relational_db():
    return make_relational_db()


@pytest.fixture(scope="function")
def app(settings, relational_db, document_store):
    return create_app(
        settings=settings,
        relational_db=relational_db,
        document_store=document_store,
    )


@pytest.fixture(scope="function")
def client(app, relational_db):
    """Create test client with a fresh database for each test."""
    with TestClient(app) as test_client:
        test_client.portal.call(create_tables, relational_db)
        yield test_client


@pytest.fixture(scope="function")
def empty_client(app):
    """Test client whose relational store has no products table."""
    with TestClient(app) as test_client:
        yield test_client
