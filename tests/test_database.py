"""
Notes API: Store Connection Tests
====================================

What:  Tests for MongoDatabase.connect and the service dependency.
How:   AsyncIOMotorClient is patched with a MagicMock; nothing touches the network.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from notes_api.database import TITLE_INDEX_NAME, MongoDatabase, get_note_service
from notes_api.exceptions import StoreConnectionError


def fake_client(collection=None, ping_error=None):
    client = MagicMock()
    client.admin.command = AsyncMock(side_effect=ping_error)
    collection = collection or MagicMock()
    collection.create_index = AsyncMock(return_value=TITLE_INDEX_NAME)
    client.__getitem__.return_value.__getitem__.return_value = collection
    return client, collection


class TestConnect:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "uri, database, collection",
        [("", "db", "notes"), ("mongodb://h", "", "notes"), ("mongodb://h", "db", "")],
    )
    async def test_missing_configuration(self, uri, database, collection):
        with patch("notes_api.database.AsyncIOMotorClient") as client_cls:
            with pytest.raises(StoreConnectionError):
                await MongoDatabase.connect(uri, database, collection)
        client_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_connect_ensures_unique_title_index(self):
        client, collection = fake_client()

        with patch("notes_api.database.AsyncIOMotorClient", return_value=client) as client_cls:
            database = await MongoDatabase.connect("mongodb://h:27017", "notes_db", "notes")

        assert database.collection is collection
        client_cls.assert_called_once_with("mongodb://h:27017", appname="notes_db", tz_aware=True)
        client.admin.command.assert_awaited_once_with("ping")
        collection.create_index.assert_awaited_once_with(
            [("title", 1)], unique=True, name=TITLE_INDEX_NAME
        )

    @pytest.mark.asyncio
    async def test_unreachable_store(self):
        client, collection = fake_client(ping_error=ServerSelectionTimeoutError("timed out"))

        with patch("notes_api.database.AsyncIOMotorClient", return_value=client):
            with pytest.raises(StoreConnectionError) as exc_info:
                await MongoDatabase.connect("mongodb://h:27017", "notes_db", "notes")

        assert isinstance(exc_info.value.cause, ServerSelectionTimeoutError)
        client.close.assert_called_once()
        collection.create_index.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_uri(self):
        with pytest.raises(StoreConnectionError):
            await MongoDatabase.connect("mongodb://localhost:notaport", "notes_db", "notes")


def test_get_note_service_reads_app_state():
    service = object()
    request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(note_service=service)))
    assert get_note_service(request) is service
