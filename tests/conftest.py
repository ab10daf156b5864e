"""
Notes API: Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   A mongomock-motor collection stands in for MongoDB; the FastAPI app is
       driven through httpx's ASGITransport without starting a server.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── notes_collection: In-memory collection with the unique title index
    ├── note_service:     NoteService bound to notes_collection
    ├── sample_note_body: Create-shape payload
    └── test_client:      HTTPX AsyncClient talking to the app
"""

import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

# Set BEFORE any notes_api import: main.py builds the app at import time
os.environ.setdefault("DATABASE_URL", "mongodb://localhost:27017")
os.environ.setdefault("MONGO_INITDB_DATABASE", "notes_test")
os.environ.setdefault("MONGODB_NOTE_COLLECTION", "notes")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from notes_api.database import ensure_title_index  # noqa: E402
from notes_api.services.note_service import NoteService  # noqa: E402


@pytest_asyncio.fixture
async def notes_collection():
    """
    Provides an empty in-memory notes collection.

    Each test gets its own database, with the same unique index on ``title``
    that MongoDatabase.connect creates in production.
    """
    client = AsyncMongoMockClient()
    collection = client[f"notes_test_{uuid.uuid4().hex[:8]}"]["notes"]
    await ensure_title_index(collection)
    return collection


@pytest.fixture
def note_service(notes_collection):
    return NoteService(notes_collection)


@pytest.fixture
def sample_note_body():
    return {
        "title": "Shopping list",
        "content": "Milk, eggs, bread",
        "category": "personal",
        "published": True,
    }


@pytest_asyncio.fixture
async def test_client(note_service):
    """
    Provides an async HTTP client for endpoint testing.

    The lifespan (which would connect to a real MongoDB) is not run;
    the NoteService is placed on ``app.state`` directly instead.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/api/healthchecker")
            assert response.status_code == 200
    """
    from notes_api.main import create_app

    app = create_app()
    app.state.note_service = note_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
