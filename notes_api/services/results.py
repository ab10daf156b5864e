"""
Lookup results returned by the data-access layer.

get/update/delete can legitimately find nothing. That outcome is returned as
``NOT_FOUND`` instead of being raised, so callers branch on it explicitly;
real failures are still raised as DataAccessError subclasses.

    result = await service.get_note(note_id)
    if isinstance(result, Found):
        ...  # result.value is the NoteRecord
    else:
        ...  # NOT_FOUND
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Found(Generic[T]):
    value: T


@dataclass(frozen=True)
class NotFound:
    pass


NOT_FOUND = NotFound()

Lookup = Union[Found[T], NotFound]
