"""
Notes API: Note Service (Data-Access Layer)
==============================================

What:  Create, read, list, update and delete operations over note documents.
How:   Translates typed requests into MongoDB queries on the collection it was
       given and converts results back into NoteRecord instances.
Who:   Called by route handlers through the ``get_note_service`` dependency.

Result contract:
    create / list        → value, or raise
    get / update / delete → Found(value) | NOT_FOUND, or raise

Error Handling Strategy:
    Every driver call is wrapped by ``_store_call``. Driver exceptions are
    classified there (see exceptions.classify_store_error), logged with their
    cause, and re-raised as DataAccessError subclasses. Driver errors are not
    retried; update_note only repeats its compare-and-set when another writer
    got there first.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument

from notes_api.exceptions import (
    DataAccessError,
    InvalidIdError,
    QueryError,
    classify_store_error,
)
from notes_api.models import note as note_model
from notes_api.models.note import NoteRecord
from notes_api.schemas.note import CreateNoteSchema, UpdateNoteSchema
from notes_api.services.results import NOT_FOUND, Found, Lookup

logger = logging.getLogger(__name__)

UPDATE_ATTEMPTS = 5


def parse_object_id(note_id: str) -> ObjectId:
    """
    Parse a path id into an ObjectId.

    Raises:
        InvalidIdError: ``note_id`` is not a 24-character hex string
    """
    try:
        return ObjectId(note_id)
    except (InvalidId, TypeError) as e:
        raise InvalidIdError(note_id, cause=e) from e


@asynccontextmanager
async def _store_call(operation: str, **context: Any) -> AsyncIterator[None]:
    """Classify and log any driver exception raised inside the block."""
    try:
        yield
    except DataAccessError:
        raise
    except Exception as e:
        error = classify_store_error(e, context={"operation": operation, **context})
        logger.error(
            "%s failed during %s: %s",
            type(error).__name__,
            operation,
            e,
            extra=error.context,
        )
        raise error from e


class NoteService:
    """
    Data-access operations for notes.

    The collection handle is injected, which keeps the service usable with a
    substitute store in tests. The service holds no other state.
    """

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def list_notes(self, limit: int = 10, page: int = 1) -> List[NoteRecord]:
        """
        Return one page of notes in the store's default order.

        Skips ``(page - 1) * limit`` documents and returns at most ``limit``.
        A page past the end of the data yields an empty list.

        Raises:
            QueryError: the query failed
            DataAccessViolation: a stored document is malformed
        """
        if limit < 1 or page < 1:
            raise ValueError("limit and page must be positive")
        skip = (page - 1) * limit

        async with _store_call("list", limit=limit, page=page):
            cursor = self.collection.find({}, skip=skip, limit=limit)
            documents = await cursor.to_list(length=limit)

        return [NoteRecord.from_document(doc) for doc in documents]

    async def create_note(self, body: CreateNoteSchema) -> NoteRecord:
        """
        Insert a new note and return it with its generated id and timestamps.

        Raises:
            DuplicateKeyError: a note with the same title exists
            SerializationError: the body cannot be encoded as BSON
            QueryError: any other store failure
        """
        now = note_model.utcnow()
        document: Dict[str, Any] = {
            "title": body.title,
            "content": body.content,
            "category": body.category if body.category is not None else "",
            "published": body.published if body.published is not None else False,
            "createdAt": now,
            "updatedAt": now,
        }

        async with _store_call("create", title=body.title):
            result = await self.collection.insert_one(document)

        logger.info("Note created: %s", result.inserted_id)
        return NoteRecord.from_document({**document, "_id": result.inserted_id})

    async def get_note(self, note_id: str) -> Lookup[NoteRecord]:
        """
        Fetch a note by id.

        Raises:
            InvalidIdError: ``note_id`` is not a valid ObjectId
            QueryError: the query failed
        """
        oid = parse_object_id(note_id)

        async with _store_call("get", note_id=note_id):
            document = await self.collection.find_one({"_id": oid})

        if document is None:
            return NOT_FOUND
        return Found(NoteRecord.from_document(document))

    async def update_note(self, note_id: str, body: UpdateNoteSchema) -> Lookup[NoteRecord]:
        """
        Merge the given fields into a note and return it after the update.

        Only fields carried by ``body`` are written; ``updatedAt`` is always
        moved forward, at least one millisecond past its stored value. The
        write is a compare-and-set on the stored ``updatedAt``: if another
        writer got there first, the new timestamp is recomputed and the
        write retried.

        Raises:
            InvalidIdError: ``note_id`` is not a valid ObjectId
            DuplicateKeyError: the new title belongs to another note
            SerializationError: the body cannot be encoded as BSON
            QueryError: any other store failure, or the note kept changing
                under us for UPDATE_ATTEMPTS rounds
        """
        oid = parse_object_id(note_id)
        changes = body.changes()

        async with _store_call("update", note_id=note_id, fields=sorted(changes)):
            for _ in range(UPDATE_ATTEMPTS):
                current = await self.collection.find_one({"_id": oid}, {"updatedAt": 1})
                if current is None:
                    return NOT_FOUND

                previous = current.get("updatedAt")
                changes["updatedAt"] = note_model.next_update_time(previous)
                document = await self.collection.find_one_and_update(
                    {"_id": oid, "updatedAt": previous},
                    {"$set": changes},
                    return_document=ReturnDocument.AFTER,
                )
                if document is not None:
                    break
            else:
                raise QueryError(
                    "Note was modified concurrently",
                    context={"note_id": note_id, "attempts": UPDATE_ATTEMPTS},
                )

        logger.info("Note updated: %s", note_id)
        return Found(NoteRecord.from_document(document))

    async def delete_note(self, note_id: str) -> Lookup[str]:
        """
        Delete a note by id.

        Zero documents deleted is reported as NOT_FOUND, not as an error.

        Raises:
            InvalidIdError: ``note_id`` is not a valid ObjectId
            QueryError: the delete failed
        """
        oid = parse_object_id(note_id)

        async with _store_call("delete", note_id=note_id):
            result = await self.collection.delete_one({"_id": oid})

        if result.deleted_count == 0:
            return NOT_FOUND
        logger.info("Note deleted: %s", note_id)
        return Found(note_id)
