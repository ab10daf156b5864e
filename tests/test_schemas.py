"""
Notes API: Schema Tests
==========================

What:  Request shape validation and envelope serialization.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from bson import ObjectId
from pydantic import ValidationError

from notes_api.exceptions import DataAccessViolation
from notes_api.models.note import NoteRecord, next_update_time, utcnow
from notes_api.schemas.note import (
    CreateNoteSchema,
    NoteListResponse,
    SingleNoteResponse,
    UpdateNoteSchema,
)

CREATED = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def stored_document(**overrides):
    document = {
        "_id": ObjectId("65a5123456789abcdef01234"),
        "title": "t1",
        "content": "c1",
        "category": "",
        "published": False,
        "createdAt": CREATED,
        "updatedAt": CREATED,
    }
    document.update(overrides)
    return document


class TestCreateNoteSchema:

    def test_optionals_default_to_none(self):
        body = CreateNoteSchema(title="t1", content="c1")
        assert body.category is None
        assert body.published is None

    @pytest.mark.parametrize("payload", [{"content": "c"}, {"title": "t"}, {"title": "", "content": "c"}])
    def test_rejects_invalid(self, payload):
        with pytest.raises(ValidationError):
            CreateNoteSchema.model_validate(payload)


class TestUpdateNoteSchema:

    def test_changes_only_include_given_fields(self):
        body = UpdateNoteSchema.model_validate({"category": "b", "title": None})
        assert body.changes() == {"category": "b"}

    def test_empty_update_has_no_changes(self):
        assert UpdateNoteSchema().changes() == {}

    def test_published_false_is_a_change(self):
        assert UpdateNoteSchema(published=False).changes() == {"published": False}


class TestNoteRecord:

    def test_from_document(self):
        record = NoteRecord.from_document(stored_document())
        assert record.id == "65a5123456789abcdef01234"
        assert record.created_at == CREATED

    def test_naive_timestamps_are_utc(self):
        naive = CREATED.replace(tzinfo=None)
        record = NoteRecord.from_document(stored_document(createdAt=naive, updatedAt=naive))
        assert record.created_at == CREATED

    @pytest.mark.parametrize(
        "document",
        [
            {"title": "t1"},
            stored_document(_id="not-an-object-id"),
            stored_document(published="sometimes"),
            {k: v for k, v in stored_document().items() if k != "content"},
        ],
    )
    def test_malformed_document_raises(self, document):
        with pytest.raises(DataAccessViolation):
            NoteRecord.from_document(document)

    def test_utcnow_has_millisecond_precision(self):
        now = utcnow()
        assert now.tzinfo is not None
        assert now.microsecond % 1000 == 0


class TestEnvelopes:

    def test_single_note_envelope_uses_camel_case(self):
        record = NoteRecord.from_document(stored_document())

        body = SingleNoteResponse.of(record).model_dump(by_alias=True, mode="json")

        assert body["status"] == "success"
        note = body["data"]["note"]
        assert note["id"] == record.id
        assert "createdAt" in note and "updatedAt" in note

    def test_list_envelope_counts_results(self):
        records = [
            NoteRecord.from_document(stored_document(_id=ObjectId(), title=f"t{i}"))
            for i in range(3)
        ]

        body = NoteListResponse.of(records)

        assert body.results == 3
        assert [note.title for note in body.notes] == ["t0", "t1", "t2"]


class TestNextUpdateTime:

    def test_clock_ahead_of_previous_wins(self):
        later = CREATED + timedelta(seconds=5)
        with patch("notes_api.models.note.utcnow", return_value=later):
            assert next_update_time(CREATED) == later

    def test_same_millisecond_moves_one_millisecond_forward(self):
        with patch("notes_api.models.note.utcnow", return_value=CREATED):
            assert next_update_time(CREATED) == CREATED + timedelta(milliseconds=1)
            assert next_update_time(CREATED.replace(tzinfo=None)) == CREATED + timedelta(milliseconds=1)

    def test_missing_previous_uses_clock(self):
        with patch("notes_api.models.note.utcnow", return_value=CREATED):
            assert next_update_time(None) == CREATED
