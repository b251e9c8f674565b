"""
Operator lists for annotation appearance streams.

Painting is delegated to an :class:`AppearanceEvaluator`.  This module only
positions the appearance: it maps the stream's bounding box (under its
``/Matrix``) onto the annotation rectangle and brackets the evaluated
operators with ``beginAnnotation``/``endAnnotation`` markers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, Protocol, Sequence, runtime_checkable

from pypdf.errors import PyPdfError
from pypdf.generic import ArrayObject, ContentStream, DecodedStreamObject

from .config import INTENTS
from .objects import get, resolve, to_python
from .types import AnnotationRecord
from .utils import is_number

__all__ = [
    "OPS",
    "OperatorList",
    "AppearanceEvaluator",
    "ContentStreamEvaluator",
    "get_transform_matrix",
    "get_operator_list",
    "append_to_operator_list",
]

LOGGER = logging.getLogger(__name__)

IDENTITY_MATRIX = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)
DEFAULT_BBOX = (0.0, 0.0, 1.0, 1.0)

_EVALUATOR_ERRORS = (PyPdfError, ValueError, TypeError, KeyError, IndexError, OSError)


class OPS(str, Enum):
    """Markers added around annotation content."""

    BEGIN_ANNOTATIONS = "beginAnnotations"
    END_ANNOTATIONS = "endAnnotations"
    BEGIN_ANNOTATION = "beginAnnotation"
    END_ANNOTATION = "endAnnotation"


@dataclass(slots=True)
class OperatorList:
    """Parallel lists of operators and their arguments."""

    fn_array: list[Any] = field(default_factory=list)
    args_array: list[list[Any]] = field(default_factory=list)

    def add_op(self, fn: Any, args: Sequence[Any] | None = None) -> None:
        self.fn_array.append(fn)
        self.args_array.append(list(args or []))

    def add_op_list(self, other: "OperatorList") -> None:
        self.fn_array.extend(other.fn_array)
        self.args_array.extend(other.args_array)

    def __len__(self) -> int:
        return len(self.fn_array)

    def __iter__(self) -> Iterator[tuple[Any, list[Any]]]:
        return iter(zip(self.fn_array, self.args_array))


@runtime_checkable
class AppearanceEvaluator(Protocol):
    """Paints a content stream into an operator list."""

    def get_operator_list(self, stream: Any, resources: Any, op_list: OperatorList) -> None:
        ...


class ContentStreamEvaluator:
    """Evaluator that lists the raw operators of a content stream using pypdf."""

    def __init__(self, pdf: Any = None) -> None:
        self.pdf = pdf

    def get_operator_list(self, stream: Any, resources: Any, op_list: OperatorList) -> None:
        content = ContentStream(stream, self.pdf)
        for operands, operator in content.operations:
            name = operator.decode("latin-1") if isinstance(operator, bytes) else str(operator)
            if isinstance(operands, list):
                args = [to_python(operand) for operand in operands]
            else:
                # Inline images carry their settings and data as a mapping.
                args = [operands]
            op_list.add_op(name, args)


def _axial_aligned_bbox(bbox: Sequence[float], matrix: Sequence[float]) -> tuple[float, float, float, float]:
    a, b, c, d, e, f = matrix
    corners = (
        (bbox[0], bbox[1]),
        (bbox[0], bbox[3]),
        (bbox[2], bbox[1]),
        (bbox[2], bbox[3]),
    )
    xs = [a * x + c * y + e for x, y in corners]
    ys = [b * x + d * y + f for x, y in corners]
    return (min(xs), min(ys), max(xs), max(ys))


def get_transform_matrix(
    rect: Sequence[float],
    bbox: Sequence[float],
    matrix: Sequence[float],
) -> tuple[float, float, float, float, float, float]:
    """
    Map the transformed bounding box onto ``rect`` (PDF 32000-1:2008, 12.5.5).

    A degenerate box (zero width or height after transformation) only
    translates to the rectangle's origin.
    """

    min_x, min_y, max_x, max_y = _axial_aligned_bbox(bbox, matrix)
    if min_x == max_x or min_y == max_y:
        return (1, 0, 0, 1, rect[0], rect[1])

    x_ratio = (rect[2] - rect[0]) / (max_x - min_x)
    y_ratio = (rect[3] - rect[1]) / (max_y - min_y)
    return (
        x_ratio,
        0,
        0,
        y_ratio,
        rect[0] - min_x * x_ratio,
        rect[1] - min_y * y_ratio,
    )


def _numbers(value: Any, count: int) -> tuple[float, ...] | None:
    if not isinstance(value, ArrayObject) or len(value) != count:
        return None
    items = [resolve(item) for item in value]
    if not all(is_number(item) for item in items):
        return None
    return tuple(float(item) for item in items)


def _default_appearance_stream(default_appearance: str) -> DecodedStreamObject:
    stream = DecodedStreamObject()
    stream.set_data(default_appearance.encode("latin-1", errors="replace"))
    return stream


def get_operator_list(record: AnnotationRecord, evaluator: AppearanceEvaluator) -> OperatorList:
    """
    Paint a single annotation.

    Text widgets without an appearance stream paint their ``/DA`` string
    with the field resources instead, and are not bracketed.
    """

    op_list = OperatorList()
    stream = record.appearance
    if stream is None:
        descriptor = record.form_field
        if descriptor is not None and descriptor.field_type == "Tx" and descriptor.default_appearance:
            evaluator.get_operator_list(
                _default_appearance_stream(descriptor.default_appearance),
                descriptor.field_resources,
                op_list,
            )
        return op_list

    bbox = _numbers(get(stream, "/BBox"), 4) or DEFAULT_BBOX
    matrix = _numbers(get(stream, "/Matrix"), 6) or IDENTITY_MATRIX
    transform = get_transform_matrix(record.rect, bbox, matrix)

    op_list.add_op(OPS.BEGIN_ANNOTATION, [record.rect, transform, matrix])
    evaluator.get_operator_list(stream, get(stream, "/Resources"), op_list)
    op_list.add_op(OPS.END_ANNOTATION, [])
    return op_list


def append_to_operator_list(
    records: Iterable[AnnotationRecord],
    op_list: OperatorList,
    evaluator: AppearanceEvaluator,
    intent: str = "display",
) -> OperatorList:
    """
    Append the operators of every record visible for ``intent``.

    Annotations whose evaluation fails are logged and left out.
    """

    if intent not in INTENTS:
        raise ValueError(f"intent must be one of {', '.join(INTENTS)}, got {intent!r}")

    operator_lists = []
    for record in records:
        if (intent == "display" and record.viewable) or (intent == "print" and record.printable):
            try:
                operator_lists.append(get_operator_list(record, evaluator))
            except _EVALUATOR_ERRORS as exc:
                LOGGER.warning("Unable to paint annotation %s: %s", record.id, exc)

    op_list.add_op(OPS.BEGIN_ANNOTATIONS, [])
    for annotation_ops in operator_lists:
        op_list.add_op_list(annotation_ops)
    op_list.add_op(OPS.END_ANNOTATIONS, [])
    return op_list
