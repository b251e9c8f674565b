"""Fully qualified AcroForm field names."""

from __future__ import annotations

from typing import Any

from pypdf.generic import ArrayObject, DictionaryObject

from .objects import as_reference, get, get_raw
from .utils import pdf_text

__all__ = ["ANONYMOUS_MARKER", "resolve_full_name", "kid_index", "corrected_id"]

ANONYMOUS_MARKER = "`"


def kid_index(parent: Any, reference: Any) -> int | None:
    """
    Position of ``reference`` in ``parent``'s ``/Kids`` array.

    Kids are matched on ``(number, generation)`` rather than object identity.
    When no kid matches, the length of the array is returned, mirroring a
    scan that runs off the end.
    """

    kids = get(parent, "/Kids")
    if not isinstance(kids, ArrayObject):
        return None
    target = as_reference(reference)
    for index, kid in enumerate(kids):
        if target is not None and as_reference(kid) == target:
            return index
    return len(kids)


def resolve_full_name(field: Any, reference: Any = None) -> str:
    """
    Build the dot-joined name of ``field`` from its ``/Parent`` chain.

    Nodes without a ``/T`` entry get a synthetic ```<index>`` segment taken
    from their position in the parent's ``/Kids`` array, so anonymous kids
    still receive distinct names.
    """

    parts: list[str] = []
    visited: set[int] = set()
    named_item = field
    ref = reference
    while isinstance(named_item, DictionaryObject) and id(named_item) not in visited:
        visited.add(id(named_item))
        parent = get(named_item, "/Parent")
        parent_ref = get_raw(named_item, "/Parent")
        name = get(named_item, "/T")
        text = pdf_text(name) if name is not None else ""
        if text:
            parts.insert(0, text)
        elif isinstance(parent, DictionaryObject) and ref is not None:
            index = kid_index(parent, ref)
            if index is not None:
                parts.insert(0, f"{ANONYMOUS_MARKER}{index}")
        named_item = parent
        ref = parent_ref
    return ".".join(parts)


def corrected_id(full_name: str) -> str:
    """Strip the first anonymous-kid segment and everything after it."""

    marker = f".{ANONYMOUS_MARKER}"
    position = full_name.find(marker)
    if position == -1:
        return full_name
    return full_name[:position]
