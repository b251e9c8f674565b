"""Document loading and the high level decoding facade."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from .appearance import AppearanceEvaluator, ContentStreamEvaluator, OperatorList, append_to_operator_list
from .config import DecodeContext, DecodeOptions
from .exceptions import EncryptedPDFError, InvalidPDFError, PageOutOfBoundsError
from .factory import DecodeResult, decode_annotations
from .objects import PypdfObjectGraph, get_raw
from .scripting import ScriptBindings
from .types import AnnotationRecord

__all__ = ["open_reader", "AnnotationDocument"]

LOGGER = logging.getLogger(__name__)


def open_reader(pdf_path: str | Path, password: Optional[str] = None) -> PdfReader:
    """
    Load a PDF with pypdf.

    Raises:
        InvalidPDFError: If the file is missing, unreadable or corrupted
        EncryptedPDFError: If the file is encrypted and cannot be decrypted
    """

    path = Path(pdf_path)
    if not path.exists() or not path.is_file():
        raise InvalidPDFError(f"PDF file not found: {pdf_path}")

    try:
        raw_bytes = path.read_bytes()
    except OSError as exc:
        raise InvalidPDFError(f"Unable to read PDF file: {pdf_path}. Error: {exc}") from exc

    try:
        reader = PdfReader(io.BytesIO(raw_bytes))
    except PdfReadError as exc:
        raise InvalidPDFError(f"Corrupted or invalid PDF file: {pdf_path}. Error: {exc}") from exc
    except Exception as exc:
        raise InvalidPDFError(f"Unexpected error reading PDF: {pdf_path}. Error: {exc}") from exc

    if reader.is_encrypted:
        if password:
            if reader.decrypt(password) == 0:
                raise EncryptedPDFError("Failed to decrypt PDF with supplied password.")
        else:
            raise EncryptedPDFError("PDF is encrypted. Supply a password to process this file.")

    return reader


class AnnotationDocument:
    """Decode the annotations and form fields of a PDF file page by page."""

    def __init__(
        self,
        pdf_path: str | Path,
        password: Optional[str] = None,
        *,
        options: Optional[DecodeOptions] = None,
    ) -> None:
        self.path = Path(pdf_path)
        self.options = options or DecodeOptions()
        self.reader = open_reader(pdf_path, password)
        self.context = DecodeContext(graph=PypdfObjectGraph(self.reader), options=self.options)
        self._results: Dict[int, DecodeResult] = {}

    @property
    def num_pages(self) -> int:
        return len(self.reader.pages)

    def page_indexes(self) -> Iterable[int]:
        if self.options.page_numbers is None:
            return range(self.num_pages)
        return list(self.options.page_numbers)

    def _check_page(self, page_index: int) -> None:
        if page_index < 0 or page_index >= self.num_pages:
            raise PageOutOfBoundsError(
                f"Page {page_index + 1} is out of bounds (document has {self.num_pages} pages)"
            )

    def decode_page(self, page_index: int) -> DecodeResult:
        """Decode the ``/Annots`` array of one page (0-indexed)."""

        self._check_page(page_index)
        if page_index not in self._results:
            page = self.reader.pages[page_index]
            annotations = get_raw(page, "/Annots")
            LOGGER.debug("Decoding annotations of page %d", page_index + 1)
            self._results[page_index] = decode_annotations(annotations, self.context)
        return self._results[page_index]

    def decode_all(self) -> Dict[int, DecodeResult]:
        return {index: self.decode_page(index) for index in self.page_indexes()}

    def records(self) -> tuple[AnnotationRecord, ...]:
        return tuple(record for result in self.decode_all().values() for record in result.records)

    def fields(self) -> tuple[AnnotationRecord, ...]:
        """Widget records of the selected pages, in page order."""

        return tuple(record for result in self.decode_all().values() for record in result.fields)

    def scripts(self) -> ScriptBindings:
        bindings = ScriptBindings()
        for result in self.decode_all().values():
            bindings = bindings.merge(result.scripts)
        return bindings

    def operator_list(
        self,
        page_index: int,
        evaluator: Optional[AppearanceEvaluator] = None,
        intent: Optional[str] = None,
    ) -> OperatorList:
        result = self.decode_page(page_index)
        return append_to_operator_list(
            result.records,
            OperatorList(),
            evaluator or ContentStreamEvaluator(self.reader),
            intent or self.options.intent,
        )
