from __future__ import annotations

import logging

import pytest

from pdfannotx.appearance import (
    OPS,
    ContentStreamEvaluator,
    OperatorList,
    append_to_operator_list,
    get_operator_list,
    get_transform_matrix,
)
from pdfannotx.types import AnnotationRecord, AnnotationType, FieldDescriptor, FormElementType

from conftest import pdf_stream

IDENTITY = (1, 0, 0, 1, 0, 0)


class RecordingEvaluator:
    """Adds a single ``paint`` operator carrying the stream's data."""

    def __init__(self, failing: bytes | None = None) -> None:
        self.failing = failing
        self.resources = []

    def get_operator_list(self, stream, resources, op_list) -> None:
        data = stream.get_data()
        if data == self.failing:
            raise ValueError("cannot paint")
        self.resources.append(resources)
        op_list.add_op("paint", [data])


def make_record(data=b"paint", flags=4, rect=(0, 0, 20, 20), **stream_entries) -> AnnotationRecord:
    stream = pdf_stream(data, **stream_entries) if data is not None else None
    return AnnotationRecord(
        id=data.decode() if data else "none",
        subtype=AnnotationType.LINK,
        subtype_name="Link",
        annotation_flags=flags,
        rect=rect,
        appearance=stream,
    )


class TestTransformMatrix:
    def test_scales_bbox_onto_rect(self) -> None:
        assert get_transform_matrix((10, 20, 110, 70), (0, 0, 50, 25), IDENTITY) == (2, 0, 0, 2, 10, 20)

    def test_offset_bbox(self) -> None:
        assert get_transform_matrix((10, 20, 110, 70), (10, 10, 60, 35), IDENTITY) == (2, 0, 0, 2, -10, 0)

    def test_rotated_matrix(self) -> None:
        assert get_transform_matrix((0, 0, 25, 50), (0, 0, 50, 25), (0, 1, -1, 0, 0, 0)) == (1, 0, 0, 1, 25, 0)

    @pytest.mark.parametrize("bbox", [(0, 0, 0, 10), (0, 5, 10, 5)])
    def test_degenerate_bbox_only_translates(self, bbox) -> None:
        assert get_transform_matrix((10, 20, 30, 40), bbox, IDENTITY) == (1, 0, 0, 1, 10, 20)


class TestSingleAnnotation:
    def test_appearance_is_bracketed(self) -> None:
        record = make_record(BBox=[0, 0, 10, 10], Resources={"/Font": {}})
        evaluator = RecordingEvaluator()
        op_list = get_operator_list(record, evaluator)

        assert op_list.fn_array == [OPS.BEGIN_ANNOTATION, "paint", OPS.END_ANNOTATION]
        rect, transform, matrix = op_list.args_array[0]
        assert rect == (0, 0, 20, 20)
        assert transform == (2, 0, 0, 2, 0, 0)
        assert matrix == IDENTITY
        assert evaluator.resources == [{"/Font": {}}]

    def test_missing_bbox_and_matrix_use_defaults(self) -> None:
        op_list = get_operator_list(make_record(rect=(5, 5, 6, 6)), RecordingEvaluator())
        _, transform, matrix = op_list.args_array[0]
        assert transform == (1, 0, 0, 1, 5, 5)
        assert matrix == IDENTITY

    def test_stream_matrix_is_applied(self) -> None:
        record = make_record(BBox=[0, 0, 10, 10], Matrix=[1, 0, 0, 1, 5, 5])
        _, transform, matrix = get_operator_list(record, RecordingEvaluator()).args_array[0]
        assert matrix == (1, 0, 0, 1, 5, 5)
        assert transform == (2, 0, 0, 2, -10, -10)

    def test_no_appearance_paints_nothing(self) -> None:
        assert len(get_operator_list(make_record(data=None), RecordingEvaluator())) == 0

    def test_text_field_paints_default_appearance(self) -> None:
        descriptor = FieldDescriptor(
            field_type="Tx",
            form_element_type=FormElementType.TEXT,
            field_flags=0,
            full_name="name",
            default_appearance="/Helv 12 Tf 0 g",
            field_resources="resources",
        )
        record = AnnotationRecord(
            id="1R",
            subtype=AnnotationType.WIDGET,
            subtype_name="Widget",
            payload=descriptor,
        )
        evaluator = RecordingEvaluator()
        op_list = get_operator_list(record, evaluator)

        assert list(op_list) == [("paint", [b"/Helv 12 Tf 0 g"])]
        assert evaluator.resources == ["resources"]


class TestOperatorListAssembly:
    def records(self):
        return [
            make_record(b"printable", flags=4),
            make_record(b"print-only", flags=0x24),
            make_record(b"screen-only", flags=0),
            make_record(b"hidden", flags=2),
        ]

    def painted(self, op_list):
        return [args[0] for fn, args in op_list if fn == "paint"]

    def test_display_intent(self) -> None:
        op_list = append_to_operator_list(self.records(), OperatorList(), RecordingEvaluator())
        assert self.painted(op_list) == [b"printable", b"screen-only"]
        assert op_list.fn_array[0] is OPS.BEGIN_ANNOTATIONS
        assert op_list.fn_array[-1] is OPS.END_ANNOTATIONS

    def test_print_intent(self) -> None:
        op_list = append_to_operator_list(self.records(), OperatorList(), RecordingEvaluator(), "print")
        assert self.painted(op_list) == [b"printable", b"print-only"]

    def test_existing_operators_are_kept(self) -> None:
        op_list = OperatorList()
        op_list.add_op("page", [1])
        append_to_operator_list([], op_list, RecordingEvaluator())
        assert op_list.fn_array == ["page", OPS.BEGIN_ANNOTATIONS, OPS.END_ANNOTATIONS]

    def test_unknown_intent(self) -> None:
        with pytest.raises(ValueError):
            append_to_operator_list([], OperatorList(), RecordingEvaluator(), "screen")

    def test_failed_annotation_is_skipped(self, caplog) -> None:
        records = [make_record(b"bad"), make_record(b"good")]
        with caplog.at_level(logging.WARNING, logger="pdfannotx"):
            op_list = append_to_operator_list(records, OperatorList(), RecordingEvaluator(failing=b"bad"))
        assert self.painted(op_list) == [b"good"]
        assert "Unable to paint annotation bad" in caplog.text


def test_content_stream_evaluator_lists_operators() -> None:
    stream = pdf_stream(b"q 1 0 0 1 5 5 cm BT /F1 12 Tf (Hi) Tj ET Q")
    op_list = OperatorList()
    ContentStreamEvaluator().get_operator_list(stream, None, op_list)

    assert op_list.fn_array == ["q", "cm", "BT", "Tf", "Tj", "ET", "Q"]
    assert op_list.args_array[1] == [1, 0, 0, 1, 5, 5]
    assert op_list.args_array[3] == ["/F1", 12]
    assert op_list.args_array[4] == ["Hi"]
