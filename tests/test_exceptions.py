"""
Notes API: Error Classifier Tests
====================================

What:  Tests for classify_store_error and duplicate-key detection.
How:   Driver exceptions are constructed directly; no store needed.
"""

import pytest
from bson.errors import InvalidDocument
from pymongo.errors import (
    AutoReconnect,
    DuplicateKeyError as MongoDuplicateKeyError,
    OperationFailure,
    WriteError,
)

from notes_api.exceptions import (
    DataAccessError,
    DuplicateKeyError,
    InvalidIdError,
    QueryError,
    SerializationError,
    classify_store_error,
    is_duplicate_key,
)

DUP_MESSAGE = "E11000 duplicate key error collection: notes.notes index: title_1 dup key"


class TestDuplicateKeyDetection:
    """Structured error codes first, message matching as fallback."""

    def test_driver_duplicate_key_type(self):
        assert is_duplicate_key(MongoDuplicateKeyError(DUP_MESSAGE, code=11000))

    def test_code_on_generic_error(self):
        assert is_duplicate_key(WriteError("write failed", code=11000))
        assert is_duplicate_key(OperationFailure("legacy", code=11001))

    def test_code_in_details(self):
        exc = OperationFailure("command failed", details={"code": 11000})
        assert is_duplicate_key(exc)

    def test_message_fallback(self):
        assert is_duplicate_key(Exception(DUP_MESSAGE))

    def test_other_errors_are_not_duplicates(self):
        assert not is_duplicate_key(OperationFailure("unauthorized", code=13))
        assert not is_duplicate_key(AutoReconnect("connection reset"))


class TestClassifyStoreError:

    def test_duplicate(self):
        cause = MongoDuplicateKeyError(DUP_MESSAGE, code=11000)
        error = classify_store_error(cause, context={"operation": "create"})

        assert isinstance(error, DuplicateKeyError)
        assert error.cause is cause
        assert error.context == {"operation": "create"}
        # Driver message stays server-side
        assert "E11000" not in error.message

    def test_bson_error_is_serialization(self):
        assert isinstance(classify_store_error(InvalidDocument("bad key")), SerializationError)

    @pytest.mark.parametrize(
        "cause",
        [AutoReconnect("reset"), OperationFailure("unauthorized", code=13), RuntimeError("x")],
    )
    def test_everything_else_is_query_error(self, cause):
        error = classify_store_error(cause)
        assert isinstance(error, QueryError)
        assert error.cause is cause

    def test_already_classified_passes_through(self):
        error = InvalidIdError("abc")
        assert classify_store_error(error) is error


def test_invalid_id_message_echoes_id():
    error = InvalidIdError("not-an-id")
    assert isinstance(error, DataAccessError)
    assert error.message == "Invalid ID: not-an-id"
    assert error.context == {"note_id": "not-an-id"}
