"""
Notes API: Document Store Connection Management
==================================================

What:  Owns the motor client and the notes collection handle.
How:   ``MongoDatabase.connect()`` builds the client, verifies the server with
       a ``ping`` and makes sure the unique index on ``title`` exists before
       any request can insert. The instance lives on ``app.state`` and is
       shared by every request.
Who:   Created in the application lifespan (main.py); the collection is
       handed to NoteService.
When:  Once at startup; closed at shutdown.

Connection pooling is done by the driver itself. The handle is safe to share
across concurrent requests, so no locking happens here.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ASCENDING
from pymongo.errors import ConfigurationError, PyMongoError

from notes_api.exceptions import StoreConnectionError
from notes_api.services.note_service import NoteService

logger = logging.getLogger(__name__)

TITLE_INDEX_NAME = "title_1"


async def ensure_title_index(collection: AsyncIOMotorCollection) -> str:
    """
    Create the unique ascending index on ``title`` if it does not exist.

    ``create_index`` is idempotent, so this is safe on every startup.
    """
    return await collection.create_index(
        [("title", ASCENDING)],
        unique=True,
        name=TITLE_INDEX_NAME,
    )


class MongoDatabase:
    """
    Established handle to the notes collection.

    Attributes:
        client:      Shared motor client (owns the connection pool)
        collection:  The notes collection
    """

    def __init__(self, client: AsyncIOMotorClient, collection: AsyncIOMotorCollection):
        self.client = client
        self.collection = collection

    @classmethod
    async def connect(
        cls,
        uri: str,
        database_name: str,
        collection_name: str,
        client_options: Optional[Dict[str, Any]] = None,
    ) -> "MongoDatabase":
        """
        Connect to the store and prepare the notes collection.

        Args:
            uri:              MongoDB connection string
            database_name:    Database to use (also sent as the client app name)
            collection_name:  Collection holding note documents
            client_options:   Extra keyword arguments for AsyncIOMotorClient

        Raises:
            StoreConnectionError: a setting is empty, the URI is malformed,
                                  or the server does not answer
        """
        missing = [
            name
            for name, value in (
                ("uri", uri),
                ("database_name", database_name),
                ("collection_name", collection_name),
            )
            if not value
        ]
        if missing:
            raise StoreConnectionError(
                message="Document store is not configured",
                context={"missing": missing},
            )

        options = {"appname": database_name, "tz_aware": True}
        options.update(client_options or {})

        try:
            client = AsyncIOMotorClient(uri, **options)
        except (ConfigurationError, ValueError, TypeError) as e:
            raise StoreConnectionError(message="Invalid document store URI", cause=e) from e

        database = cls(client, client[database_name][collection_name])
        try:
            await database.ping()
            await ensure_title_index(database.collection)
        except PyMongoError as e:
            client.close()
            raise StoreConnectionError(
                cause=e,
                context={"database": database_name, "collection": collection_name},
            ) from e

        logger.info(
            "Database connected successfully (database=%s, collection=%s)",
            database_name,
            collection_name,
        )
        return database

    async def ping(self) -> None:
        """Round-trip a ``ping`` command; raises the driver error on failure."""
        await self.client.admin.command("ping")

    def close(self) -> None:
        """Close every pooled connection."""
        self.client.close()
        logger.info("Database connection closed")


# ── Service Dependency ────────────────────────────────────────────────────
def get_note_service(request: Request) -> NoteService:
    """
    FastAPI dependency returning the NoteService bound to the app's store.

    The service is created in the lifespan and stored on ``app.state``;
    tests replace it with one built on a substitute collection.
    """
    return request.app.state.note_service
