"""Object-graph access helpers built on :mod:`pypdf.generic`.

The decoders never parse PDF syntax themselves.  They walk dictionaries that
pypdf already produced, resolving indirect references lazily through an
:class:`ObjectGraph`.  Every helper in this module turns resolution failures
into ``None`` so that a broken reference behaves like an absent entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from pypdf.errors import PyPdfError
from pypdf.generic import (
    ArrayObject,
    DictionaryObject,
    IndirectObject,
    NameObject,
    NullObject,
    StreamObject,
    TextStringObject,
)

__all__ = [
    "ObjectGraph",
    "PypdfObjectGraph",
    "Reference",
    "as_reference",
    "reference_id",
    "resolve",
    "get",
    "get_raw",
    "has",
    "get_inheritable",
    "is_dictionary",
    "to_python",
]

LOGGER = logging.getLogger(__name__)

Reference = tuple[int, int]

_RESOLUTION_ERRORS = (PyPdfError, ValueError, KeyError, TypeError, AttributeError, OSError)


@runtime_checkable
class ObjectGraph(Protocol):
    """Source of resolved PDF objects for a document."""

    def resolve(self, reference: Any) -> Any | None:
        """Return the object behind ``reference`` or ``None``."""


@dataclass(slots=True)
class PypdfObjectGraph:
    """Resolve references against a :class:`pypdf.PdfReader` or ``PdfWriter``."""

    pdf: Any

    def resolve(self, reference: Any) -> Any | None:
        if isinstance(reference, tuple) and len(reference) == 2:
            idnum, generation = reference
            reference = IndirectObject(idnum, generation, self.pdf)
        return resolve(reference)


def as_reference(value: Any) -> Reference | None:
    """Return the ``(number, generation)`` identity of an indirect object."""

    if isinstance(value, IndirectObject):
        return (value.idnum, value.generation)
    if isinstance(value, tuple) and len(value) == 2:
        return (int(value[0]), int(value[1]))
    indirect = getattr(value, "indirect_reference", None)
    if isinstance(indirect, IndirectObject):
        return (indirect.idnum, indirect.generation)
    return None


def reference_id(value: Any) -> str | None:
    """Canonical string form of a reference: ``12R`` or ``12R3``."""

    ref = as_reference(value)
    if ref is None:
        return None
    idnum, generation = ref
    if generation == 0:
        return f"{idnum}R"
    return f"{idnum}R{generation}"


def resolve(value: Any) -> Any | None:
    if isinstance(value, IndirectObject):
        try:
            value = value.get_object()
        except _RESOLUTION_ERRORS as exc:
            LOGGER.debug("Unable to resolve %s: %s", value, exc)
            return None
    if isinstance(value, NullObject):
        return None
    return value


def is_dictionary(value: Any) -> bool:
    """Dictionaries that are not streams."""

    return isinstance(value, DictionaryObject) and not isinstance(value, StreamObject)


def has(dictionary: Any, key: str) -> bool:
    if not isinstance(dictionary, DictionaryObject):
        return False
    return NameObject(key) in dictionary


def get_raw(dictionary: Any, key: str) -> Any | None:
    """Return the entry for ``key`` without dereferencing it."""

    if not has(dictionary, key):
        return None
    return dictionary.raw_get(NameObject(key))


def get(dictionary: Any, key: str) -> Any | None:
    """Return the dereferenced entry for ``key``."""

    return resolve(get_raw(dictionary, key))


def get_inheritable(dictionary: Any, key: str) -> Any | None:
    """Look ``key`` up on ``dictionary`` and then on each ``/Parent``."""

    visited: set[int] = set()
    current = dictionary
    while isinstance(current, DictionaryObject):
        obj_id = id(current)
        if obj_id in visited:
            break
        visited.add(obj_id)
        if has(current, key):
            return get(current, key)
        current = get(current, "/Parent")
    return None


def to_python(obj: Any) -> Any:
    """Convert a pypdf object into plain Python values.

    Indirect references are kept as their canonical id strings so that the
    result stays finite for cyclic graphs.
    """

    if isinstance(obj, IndirectObject):
        return reference_id(obj)
    if isinstance(obj, DictionaryObject):
        return {str(key): to_python(obj.raw_get(key)) for key in obj.keys()}
    if isinstance(obj, ArrayObject):
        return [to_python(item) for item in obj]
    if isinstance(obj, TextStringObject):
        return str(obj)
    if isinstance(obj, NameObject):
        return str(obj)
    if isinstance(obj, (int, float, bool)):
        return obj
    if obj is None or isinstance(obj, NullObject):
        return None
    value = getattr(obj, "value", None)
    if isinstance(value, bool):
        return value
    if isinstance(obj, (bytes, bytearray)):
        return bytes(obj).decode("latin-1")
    return str(obj)
