"""
Notes API: Pydantic Request/Response Schemas
===============================================

What:  Pydantic models defining the API contract.
How:   FastAPI uses these models to validate request bodies and query strings,
       serialize responses, and generate the OpenAPI document.
Who:   Request shapes are consumed by the data-access layer; envelopes are
       built by route handlers.

Every response is wrapped in an envelope carrying ``status``:
    "success"  the operation did what was asked
    "fail"     the client asked for something that cannot be done
    "error"    the server failed
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from notes_api.models.note import NoteRecord

Status = Literal["success", "fail", "error"]


# ══════════════════════════════════════════════════════════════════════════
# Request Models: What the client sends
# ══════════════════════════════════════════════════════════════════════════


class CreateNoteSchema(BaseModel):
    """
    Body of POST /api/notes.

    ``category`` and ``published`` are optional; the data-access layer fills
    in ``""`` and ``False`` when they are omitted.
    """
    title: str = Field(min_length=1, description="Unique note title")
    content: str = Field(description="Note body")
    category: Optional[str] = Field(default=None, description="Free-form category")
    published: Optional[bool] = Field(default=None, description="Publication flag")


class UpdateNoteSchema(BaseModel):
    """
    Body of PATCH /api/notes/{id}.

    Merge semantics: only fields that carry a value are written. Absent
    fields and explicit nulls leave the stored value untouched.
    """
    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None
    category: Optional[str] = None
    published: Optional[bool] = None

    def changes(self) -> dict:
        """The fields to ``$set`` on the stored document."""
        return self.model_dump(exclude_none=True)


# Keeps limit and the derived skip, (page - 1) * limit, well inside BSON int64
MAX_PAGE = 1_000_000_000
MAX_LIMIT = 1000


class FilterOptions(BaseModel):
    """Query parameters of GET /api/notes (offset pagination)."""
    page: int = Field(default=1, ge=1, le=MAX_PAGE, description="1-based page number")
    limit: int = Field(default=10, ge=1, le=MAX_LIMIT, description="Items per page")


# ══════════════════════════════════════════════════════════════════════════
# Response Models: What the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """
    What:  Public view of a note.
    How:   Timestamps are exposed in camelCase (``createdAt``/``updatedAt``).
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="24-character hex ObjectId")
    title: str
    content: str
    category: str
    published: bool
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @classmethod
    def from_record(cls, record: NoteRecord) -> "NoteResponse":
        return cls(
            id=record.id,
            title=record.title,
            content=record.content,
            category=record.category,
            published=record.published,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class NoteData(BaseModel):
    note: NoteResponse


class SingleNoteResponse(BaseModel):
    """Envelope for create/get/update: ``{status, data: {note}}``."""
    status: Status = "success"
    data: NoteData

    @classmethod
    def of(cls, record: NoteRecord) -> "SingleNoteResponse":
        return cls(data=NoteData(note=NoteResponse.from_record(record)))


class NoteListResponse(BaseModel):
    """Envelope for list: ``{status, results, notes}``."""
    status: Status = "success"
    results: int = Field(description="Number of notes in this page")
    notes: List[NoteResponse]

    @classmethod
    def of(cls, records: List[NoteRecord]) -> "NoteListResponse":
        notes = [NoteResponse.from_record(record) for record in records]
        return cls(results=len(notes), notes=notes)


class GenericResponse(BaseModel):
    """
    Status + message envelope.

    Used by the health checker, the not-found branch of handlers, and every
    error response produced by the exception handlers.
    """
    status: Status
    message: str
