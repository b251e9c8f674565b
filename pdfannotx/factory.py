"""Annotation dispatch and the per-page decode pass."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from pypdf.errors import PyPdfError
from pypdf.generic import ArrayObject

from . import widgets  # noqa: F401  registers the Widget builders
from .annotations import build_base, registry
from .config import DecodeContext
from .objects import get_inheritable, is_dictionary, reference_id, resolve
from .scripting import ScriptBindings
from .types import AnnotationRecord, AnnotationType
from .utils import name_value

__all__ = ["AnnotationFactory", "DecodeResult", "decode_annotations"]

LOGGER = logging.getLogger(__name__)

_DECODE_ERRORS = (PyPdfError, ValueError, TypeError, KeyError, IndexError, AttributeError, OSError)


class AnnotationFactory:
    """Create :class:`AnnotationRecord` objects from annotation references."""

    def __init__(self, context: DecodeContext | None = None) -> None:
        self.context = context or DecodeContext()

    def _resolve(self, reference: Any) -> Any:
        graph = self.context.graph
        if graph is not None and not is_dictionary(reference):
            return graph.resolve(reference)
        return resolve(reference)

    def create(self, reference: Any) -> AnnotationRecord | None:
        """
        Decode the annotation behind ``reference``.

        Returns ``None`` when the reference does not lead to a dictionary;
        stale references are common in real files.
        """

        dictionary = self._resolve(reference)
        if not is_dictionary(dictionary):
            return None

        record = build_base(dictionary, reference, self.context)
        field_type = None
        if record.subtype is AnnotationType.WIDGET:
            field_type = name_value(get_inheritable(dictionary, "/FT"))

        builder = registry.get(record.subtype, field_type)
        if builder is None:
            LOGGER.warning(
                'Unimplemented annotation type "%s", falling back to base annotation',
                record.subtype_name,
            )
            return record
        return builder(dictionary, reference, record, self.context)


@dataclass(frozen=True, slots=True)
class DecodeResult:
    """Records of one page, in ``/Annots`` order, with their script bindings."""

    records: tuple[AnnotationRecord, ...] = ()
    scripts: ScriptBindings = field(default_factory=ScriptBindings)

    @property
    def fields(self) -> tuple[AnnotationRecord, ...]:
        return tuple(record for record in self.records if record.form_field is not None)


def decode_annotations(
    annotations: Iterable[Any] | None,
    context: DecodeContext | None = None,
    scripts: ScriptBindings | None = None,
) -> DecodeResult:
    """
    Decode every entry of a page's ``/Annots`` array.

    Args:
        annotations: The ``/Annots`` array (references or dictionaries)
        context: Decode context shared by the builders
        scripts: Bindings collected on earlier pages

    Returns:
        A :class:`DecodeResult`; broken entries are skipped and never abort
        the pass
    """

    factory = AnnotationFactory(context)
    bindings = scripts or ScriptBindings()
    annotations = resolve(annotations)
    if annotations is None:
        return DecodeResult(scripts=bindings)
    if not isinstance(annotations, (ArrayObject, list, tuple)):
        LOGGER.debug("Ignoring /Annots entry that is not an array")
        return DecodeResult(scripts=bindings)

    records: list[AnnotationRecord] = []
    for reference in annotations:
        try:
            record = factory.create(reference)
        except _DECODE_ERRORS as exc:
            LOGGER.warning("Skipping annotation %s: %s", reference_id(reference) or reference, exc)
            continue
        if record is None:
            continue
        records.append(record)
        bindings = bindings.collect(record)
    return DecodeResult(records=tuple(records), scripts=bindings)
