"""
Notes API: Custom Exception Hierarchy
========================================

What:  Application exceptions and the classifier that turns raw driver
       errors into them.
How:   Each exception carries a message and an optional context dict.
       Data-access errors additionally carry the underlying ``cause``.
       Global exception handlers (registered in main.py) catch these and
       return JSON envelopes with the matching HTTP status code.
Who:   Raised by the data-access layer; caught by global handlers.

Exception Hierarchy:
    NotesError (base)
    └── DataAccessError
        ├── StoreConnectionError  → 500 (store unreachable / misconfigured)
        ├── QueryError            → 500 (transport or query failure)
        ├── DuplicateKeyError     → 409 (title already taken)
        ├── SerializationError    → 500 (input not encodable to BSON)
        ├── InvalidIdError        → 400 (id is not an ObjectId)
        └── DataAccessViolation   → 500 (stored document is malformed)

Classification:
    The driver raises a handful of generic exception types. They are
    classified once, at the boundary where they are first observed
    (see ``classify_store_error``), and only the resulting kind travels
    further up. The underlying driver message is kept in ``cause`` for the
    server-side log and never reaches the client.
"""

from typing import Any, Dict, Optional

from bson.errors import BSONError
from pymongo import errors as mongo_errors

# Server codes MongoDB uses for unique index violations
DUPLICATE_KEY_CODES = frozenset({11000, 11001})
DUPLICATE_KEY_SIGNATURE = "E11000 duplicate key"


class NotesError(Exception):
    """
    Base exception for all Notes API application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class DataAccessError(NotesError):
    """
    Base class for every failure produced by the data-access layer.

    What:    Groups the closed set of store failure kinds.
    How:     Keeps the originating exception in ``cause`` so the handler can
             log it; ``message`` stays generic.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.cause = cause


class StoreConnectionError(DataAccessError):
    """
    Raised when the document store cannot be reached or is not configured.

    When:    During initialization only: empty connection settings, a bad URI,
             or a failed ``ping``.
    HTTP:    500 Internal Server Error (startup normally aborts first)
    """

    def __init__(
        self,
        message: str = "Could not connect to the document store",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, cause=cause, context=context)


class QueryError(DataAccessError):
    """
    Raised when a store operation fails for a reason other than the ones below.

    When:    Network errors, server selection timeouts, rejected operations.
    HTTP:    500 Internal Server Error

    No retry is attempted; the failure surfaces to the caller as-is.
    """

    def __init__(
        self,
        message: str = "Error during database query",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, cause=cause, context=context)


class DuplicateKeyError(DataAccessError):
    """
    Raised when a write violates the unique index on ``title``.

    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "Note with that title already exists",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, cause=cause, context=context)


class SerializationError(DataAccessError):
    """
    Raised when input cannot be encoded into a BSON document.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Could not serialize data",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, cause=cause, context=context)


class InvalidIdError(DataAccessError):
    """
    Raised when a path id is not a syntactically valid ObjectId.

    HTTP:    400 Bad Request; the message echoes the offending id.
    """

    def __init__(
        self,
        note_id: str,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(
            message=f"Invalid ID: {note_id}",
            cause=cause,
            context={"note_id": note_id},
        )
        self.note_id = note_id


class DataAccessViolation(DataAccessError):
    """
    Raised when a document read back from the store is missing a field or
    holds a value of the wrong type.

    What:    A data integrity bug, not something the client can fix.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Could not access field in document",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, cause=cause, context=context)


def is_duplicate_key(exc: BaseException) -> bool:
    """
    Recognise a unique-index violation.

    The structured error type and server code are checked first; matching
    the ``E11000`` message is only a fallback for drivers or proxies that
    strip the code.
    """
    if isinstance(exc, mongo_errors.DuplicateKeyError):
        return True
    if getattr(exc, "code", None) in DUPLICATE_KEY_CODES:
        return True
    # Bulk and command errors keep the code in their details payload
    details = getattr(exc, "details", None)
    if isinstance(details, dict) and details.get("code") in DUPLICATE_KEY_CODES:
        return True
    return DUPLICATE_KEY_SIGNATURE.lower() in str(exc).lower()


def classify_store_error(
    exc: BaseException,
    context: Optional[Dict[str, Any]] = None,
) -> DataAccessError:
    """
    Convert a raw driver exception into the most specific DataAccessError.

    Args:
        exc:      Exception raised by motor/pymongo/bson
        context:  Extra debug info attached to the classified error

    Returns:
        The classified error (not raised; callers use ``raise ... from exc``)
    """
    if isinstance(exc, DataAccessError):
        return exc
    if is_duplicate_key(exc):
        return DuplicateKeyError(cause=exc, context=context)
    if isinstance(exc, BSONError):
        return SerializationError(cause=exc, context=context)
    return QueryError(cause=exc, context=context)
