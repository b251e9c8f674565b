from __future__ import annotations

from pathlib import Path

import pytest
from pypdf import PdfWriter

from pdfannotx import AnnotationDocument, DecodeOptions, apply_field_values, open_reader
from pdfannotx.appearance import OPS
from pdfannotx.exceptions import EncryptedPDFError, InvalidPDFError, PageOutOfBoundsError
from pdfannotx.types import AnnotationType, FormElementType


@pytest.mark.parametrize(
    ("error", "text"),
    [
        (InvalidPDFError, "not a readable PDF"),
        (EncryptedPDFError, "without its password"),
        (PageOutOfBoundsError, "No such page"),
    ],
)
def test_default_error_messages(error, text) -> None:
    exc = error()
    assert text in str(exc)
    assert exc.message == str(exc)
    assert str(error("custom")) == "custom"


def test_open_reader_missing_file(tmp_path: Path) -> None:
    with pytest.raises(InvalidPDFError, match="not found"):
        open_reader(tmp_path / "missing.pdf")


def test_open_reader_corrupted_file(tmp_path: Path) -> None:
    corrupted = tmp_path / "corrupted.pdf"
    corrupted.write_bytes(b"this is not a pdf")
    with pytest.raises(InvalidPDFError):
        open_reader(corrupted)


def test_open_reader_encrypted_file(pdf_factory) -> None:
    def build(writer: PdfWriter) -> None:
        writer.add_blank_page(width=72, height=72)
        writer.encrypt("secret")

    encrypted = pdf_factory("encrypted.pdf", build)
    with pytest.raises(EncryptedPDFError):
        open_reader(encrypted)
    with pytest.raises(EncryptedPDFError):
        open_reader(encrypted, password="wrong")
    assert len(open_reader(encrypted, password="secret").pages) == 1


def test_decode_page_records_in_order(form_pdf: Path) -> None:
    document = AnnotationDocument(form_pdf)
    result = document.decode_page(0)

    assert document.num_pages == 2
    assert [record.subtype for record in result.records] == [
        AnnotationType.LINK,
        AnnotationType.WIDGET,
        AnnotationType.WIDGET,
    ]
    assert result.records[0].payload.url == "http://www.example.com"
    assert document.decode_page(0) is result


def test_fields_are_classified(form_pdf: Path) -> None:
    fields = {record.form_field.full_name: record.form_field for record in AnnotationDocument(form_pdf).fields()}

    assert list(fields) == ["Name", "Agree", "Submit"]
    name = fields["Name"]
    assert name.form_element_type is FormElementType.TEXT
    assert name.field_value == "Ada"
    assert name.required
    assert (name.font_name, name.font_size) == ("Helv", 12.0)

    agree = fields["Agree"]
    assert agree.form_element_type is FormElementType.CHECK_BOX
    assert agree.properties.options == ("Off", "Yes")
    assert agree.properties.selected

    submit = fields["Submit"]
    assert submit.form_element_type is FormElementType.PUSH_BUTTON
    assert submit.properties.label == "Send"


def test_page_selection(form_pdf: Path) -> None:
    document = AnnotationDocument(form_pdf, options=DecodeOptions(page_numbers=[1, 1]))
    assert list(document.decode_all()) == [1]
    assert [record.form_field.full_name for record in document.fields()] == ["Submit"]


def test_page_out_of_bounds(form_pdf: Path) -> None:
    document = AnnotationDocument(form_pdf)
    with pytest.raises(PageOutOfBoundsError, match="Page 6 is out of bounds"):
        document.decode_page(5)
    with pytest.raises(PageOutOfBoundsError):
        document.decode_page(-1)


def test_scripts_are_merged_across_pages(form_pdf: Path) -> None:
    bindings = AnnotationDocument(form_pdf).scripts()
    assert list(bindings.scripts) == ["Submit"]
    assert 'window.alert("Sent");' in bindings.scripts["Submit"]


def test_page_without_annotations(blank_pdf: Path) -> None:
    document = AnnotationDocument(blank_pdf)
    assert document.records() == ()
    assert document.fields() == ()
    assert document.scripts().render() == ""


def test_operator_list_for_page(form_pdf: Path) -> None:
    op_list = AnnotationDocument(form_pdf).operator_list(0)

    assert op_list.fn_array == [
        OPS.BEGIN_ANNOTATIONS,
        "Tf",
        "g",
        OPS.BEGIN_ANNOTATION,
        OPS.END_ANNOTATION,
        OPS.END_ANNOTATIONS,
    ]
    assert op_list.args_array[1] == ["/Helv", 12]
    rect, transform, _ = op_list.args_array[3]
    assert rect == (10, 130, 22, 142)
    assert transform == (1, 0, 0, 1, 10, 130)


def test_field_values_override_decoded_fields(form_pdf: Path) -> None:
    records = AnnotationDocument(form_pdf).fields()
    updated = apply_field_values(records, {"Name": "Grace", "Agree": False})

    assert updated[0].form_field.field_value == "Grace"
    assert not updated[1].form_field.properties.selected
    assert records[0].form_field.field_value == "Ada"
