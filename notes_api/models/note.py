"""
Notes API: Note Record (stored document model)
=================================================

What:  The canonical in-process representation of one stored note.
How:   ``NoteRecord.from_document`` validates a raw MongoDB document and
       converts ``_id`` to its hex string form. Any missing or mistyped
       field raises DataAccessViolation.
Who:   Built only by the data-access layer (services/note_service.py).

Document layout (one per note, unique ascending index on ``title``):
    {
        "_id":       ObjectId,
        "title":     str,
        "content":   str,
        "category":  str,
        "published": bool,
        "createdAt": datetime (UTC),
        "updatedAt": datetime (UTC)
    }
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from notes_api.exceptions import DataAccessViolation


def utcnow() -> datetime:
    """
    Current UTC time truncated to milliseconds.

    BSON datetimes only keep milliseconds; truncating up front means a note
    returned from create matches the same note read back later.
    """
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def next_update_time(previous: Any) -> datetime:
    """
    Timestamp for an update of a note last stamped ``previous``.

    At least one millisecond after ``previous``, so ``updatedAt`` strictly
    increases even when two writes land in the same millisecond.
    """
    now = utcnow()
    if not isinstance(previous, datetime):
        return now
    if previous.tzinfo is None:
        previous = previous.replace(tzinfo=timezone.utc)
    return max(now, previous + timedelta(milliseconds=1))


class NoteRecord(BaseModel):
    """A note as persisted in the collection."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    title: str
    content: str
    category: str
    published: bool
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # Clients without tz_aware=True hand back naive UTC datetimes
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "NoteRecord":
        """
        Hydrate a record from a raw store document.

        Raises:
            DataAccessViolation: ``_id`` is missing or any field is absent/mistyped
        """
        try:
            oid = document["_id"]
            if not isinstance(oid, ObjectId):
                raise TypeError(f"_id is {type(oid).__name__}, expected ObjectId")
            data = {key: value for key, value in document.items() if key != "_id"}
            return cls.model_validate({**data, "id": str(oid)})
        except (KeyError, TypeError, ValidationError) as e:
            raise DataAccessViolation(
                cause=e,
                context={"document_id": str(document.get("_id", ""))},
            ) from e
