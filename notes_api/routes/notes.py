"""
Notes API: Notes Route Handlers
==================================

What:  CRUD endpoints under /api/notes.
How:   Each handler receives an already-validated request shape, calls one
       NoteService operation and maps the outcome:
           value      → success envelope (201 for create, 200 otherwise,
                        204 with an empty body for delete)
           NOT_FOUND  → {"status": "fail", "message": "Note with ID: ... not found"} + 404
           raised     → left to the global exception handlers in main.py
Who:   Mounted by the application factory.
"""

import logging

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse

from notes_api.database import get_note_service
from notes_api.schemas.note import (
    MAX_LIMIT,
    MAX_PAGE,
    CreateNoteSchema,
    FilterOptions,
    GenericResponse,
    NoteListResponse,
    SingleNoteResponse,
    UpdateNoteSchema,
)
from notes_api.services.note_service import NoteService
from notes_api.services.results import Found

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])

ERROR_RESPONSES = {
    400: {"description": "Invalid body or id", "model": GenericResponse},
    500: {"description": "Server error", "model": GenericResponse},
}


def note_not_found(note_id: str) -> JSONResponse:
    body = GenericResponse(status="fail", message=f"Note with ID: {note_id} not found")
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=body.model_dump())


def get_filter_options(
    page: int = Query(default=1, ge=1, le=MAX_PAGE, description="1-based page number"),
    limit: int = Query(default=10, ge=1, le=MAX_LIMIT, description="Items per page"),
) -> FilterOptions:
    return FilterOptions(page=page, limit=limit)


@router.get(
    "/notes",
    response_model=NoteListResponse,
    responses=ERROR_RESPONSES,
    summary="List notes with offset pagination",
)
async def list_notes(
    opts: FilterOptions = Depends(get_filter_options),
    service: NoteService = Depends(get_note_service),
) -> NoteListResponse:
    """
    Return one page of notes.

    Example:
        GET /api/notes?page=2&limit=10  → notes 11-20
    """
    records = await service.list_notes(limit=opts.limit, page=opts.page)
    return NoteListResponse.of(records)


@router.post(
    "/notes",
    response_model=SingleNoteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **ERROR_RESPONSES,
        409: {"description": "Title already taken", "model": GenericResponse},
    },
    summary="Create a note",
)
async def create_note(
    body: CreateNoteSchema,
    service: NoteService = Depends(get_note_service),
) -> SingleNoteResponse:
    record = await service.create_note(body)
    return SingleNoteResponse.of(record)


@router.get(
    "/notes/{note_id}",
    response_model=SingleNoteResponse,
    responses={
        **ERROR_RESPONSES,
        404: {"description": "Note not found", "model": GenericResponse},
    },
    summary="Get a single note by ID",
)
async def get_note(
    note_id: str,
    service: NoteService = Depends(get_note_service),
):
    result = await service.get_note(note_id)
    if not isinstance(result, Found):
        return note_not_found(note_id)
    return SingleNoteResponse.of(result.value)


@router.patch(
    "/notes/{note_id}",
    response_model=SingleNoteResponse,
    responses={
        **ERROR_RESPONSES,
        404: {"description": "Note not found", "model": GenericResponse},
        409: {"description": "Title already taken", "model": GenericResponse},
    },
    summary="Update some fields of a note",
)
async def edit_note(
    note_id: str,
    body: UpdateNoteSchema,
    service: NoteService = Depends(get_note_service),
):
    """
    Merge the fields present in the body into the note.

    Fields that are absent (or null) keep their stored value; ``updatedAt``
    is refreshed on every successful call.
    """
    result = await service.update_note(note_id, body)
    if not isinstance(result, Found):
        return note_not_found(note_id)
    return SingleNoteResponse.of(result.value)


@router.delete(
    "/notes/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        **ERROR_RESPONSES,
        404: {"description": "Note not found", "model": GenericResponse},
    },
    summary="Delete a note",
)
async def delete_note(
    note_id: str,
    service: NoteService = Depends(get_note_service),
) -> Response:
    result = await service.delete_note(note_id)
    if not isinstance(result, Found):
        return note_not_found(note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
