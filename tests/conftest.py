from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable
import sys

import pytest
from pypdf import PdfWriter
from pypdf.generic import (
    ArrayObject,
    BooleanObject,
    ByteStringObject,
    DecodedStreamObject,
    DictionaryObject,
    FloatObject,
    IndirectObject,
    NameObject,
    NullObject,
    NumberObject,
    PdfObject,
    TextStringObject,
)

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pdfannotx.config import DecodeContext, DecodeOptions  # noqa: E402
from pdfannotx.objects import PypdfObjectGraph  # noqa: E402


def pdf_object(value: Any) -> PdfObject:
    """Build pypdf objects from plain values; ``"/Name"`` strings become names."""

    if isinstance(value, PdfObject):
        return value
    if value is None:
        return NullObject()
    if isinstance(value, bool):
        return BooleanObject(value)
    if isinstance(value, int):
        return NumberObject(value)
    if isinstance(value, float):
        return FloatObject(value)
    if isinstance(value, str):
        return NameObject(value) if value.startswith("/") else TextStringObject(value)
    if isinstance(value, bytes):
        return ByteStringObject(value)
    if isinstance(value, (list, tuple)):
        return ArrayObject([pdf_object(item) for item in value])
    if isinstance(value, dict):
        return DictionaryObject({NameObject(key): pdf_object(item) for key, item in value.items()})
    raise TypeError(f"Unsupported value: {value!r}")


def pdf_string(value: str) -> TextStringObject:
    """Build a PDF text string even when ``value`` starts with a slash."""

    return TextStringObject(value)


def pdf_stream(data: bytes = b"", **entries: Any) -> DecodedStreamObject:
    stream = DecodedStreamObject()
    stream.set_data(data)
    for key, value in entries.items():
        stream[NameObject(f"/{key}")] = pdf_object(value)
    return stream


class ObjectBuilder:
    """Adds objects to an in-memory :class:`PdfWriter`."""

    def __init__(self, writer: PdfWriter) -> None:
        self.writer = writer

    def add(self, value: Any) -> IndirectObject:
        return self.writer._add_object(pdf_object(value))

    def dict(self, reference: IndirectObject) -> DictionaryObject:
        return reference.get_object()

    def link(self, parent: IndirectObject, *kids: IndirectObject) -> None:
        """Attach ``kids`` to ``parent`` through /Kids and /Parent."""

        parent_dict = parent.get_object()
        parent_dict[NameObject("/Kids")] = ArrayObject(kids)
        for kid in kids:
            kid.get_object()[NameObject("/Parent")] = parent


@pytest.fixture()
def writer() -> PdfWriter:
    return PdfWriter()


@pytest.fixture()
def objects(writer: PdfWriter) -> ObjectBuilder:
    return ObjectBuilder(writer)


@pytest.fixture()
def context(writer: PdfWriter) -> DecodeContext:
    return DecodeContext(graph=PypdfObjectGraph(writer), options=DecodeOptions())


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("pdfannotx")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture()
def form_pdf(tmp_path: Path) -> Path:
    """Two-page PDF with a link, a text field, a checkbox and a scripted button."""

    pdf_path = tmp_path / "form.pdf"
    writer = PdfWriter()
    first = writer.add_blank_page(width=200, height=200)
    second = writer.add_blank_page(width=200, height=200)
    builder = ObjectBuilder(writer)

    link = builder.add(
        {
            "/Type": "/Annot",
            "/Subtype": "/Link",
            "/Rect": [10, 10, 60, 30],
            "/F": 4,
            "/A": {"/S": "/URI", "/URI": "www.example.com"},
        }
    )
    text_field = builder.add(
        {
            "/Type": "/Annot",
            "/Subtype": "/Widget",
            "/FT": "/Tx",
            "/T": "Name",
            "/V": "Ada",
            "/Ff": 2,
            "/DA": pdf_string("/Helv 12 Tf 0 g"),
            "/Rect": [10, 100, 150, 120],
            "/F": 4,
        }
    )
    on_state = builder.add(pdf_stream(b"", BBox=[0, 0, 12, 12]))
    off_state = builder.add(pdf_stream(b"", BBox=[0, 0, 12, 12]))
    checkbox = builder.add(
        {
            "/Type": "/Annot",
            "/Subtype": "/Widget",
            "/FT": "/Btn",
            "/T": "Agree",
            "/V": "/Yes",
            "/AS": "/Yes",
            "/Rect": [10, 130, 22, 142],
            "/F": 4,
            "/AP": {"/N": {"/Yes": on_state, "/Off": off_state}},
        }
    )
    button = builder.add(
        {
            "/Type": "/Annot",
            "/Subtype": "/Widget",
            "/FT": "/Btn",
            "/Ff": 65536,
            "/T": "Submit",
            "/MK": {"/CA": "Send"},
            "/Rect": [10, 10, 80, 30],
            "/F": 4,
            "/A": {"/S": "/JavaScript", "/JS": 'app.alert("Sent");'},
        }
    )
    first[NameObject("/Annots")] = ArrayObject([link, text_field, checkbox])
    second[NameObject("/Annots")] = ArrayObject([button])

    with pdf_path.open("wb") as handle:
        writer.write(handle)
    return pdf_path


@pytest.fixture()
def blank_pdf(tmp_path: Path) -> Path:
    pdf_path = tmp_path / "blank.pdf"
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    with pdf_path.open("wb") as handle:
        writer.write(handle)
    return pdf_path


@pytest.fixture()
def pdf_factory(tmp_path: Path) -> Callable[[str, Callable[[PdfWriter], None]], Path]:
    def _create(filename: str, build: Callable[[PdfWriter], None]) -> Path:
        path = tmp_path / filename
        writer = PdfWriter()
        build(writer)
        with path.open("wb") as handle:
            writer.write(handle)
        return path

    return _create
