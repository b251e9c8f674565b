"""
Custom exceptions for pdfannotx.

The annotation decode core never raises these for malformed annotation data;
they are reserved for loading documents and for the command line surface.
"""


class PDFAnnotXException(Exception):
    """Base exception for all pdfannotx errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "Annotation decoding failed."


class InvalidPDFError(PDFAnnotXException):
    """The document could not be opened, so no page annotations can be read."""

    @property
    def default_message(self) -> str:
        return "Cannot read annotations: the document is not a readable PDF."


class EncryptedPDFError(PDFAnnotXException):
    """The document is encrypted and no usable password was supplied."""

    @property
    def default_message(self) -> str:
        return "Cannot read annotations of an encrypted PDF without its password."


class PageOutOfBoundsError(PDFAnnotXException):
    """A page index outside the document was requested."""

    @property
    def default_message(self) -> str:
        return "No such page to decode annotations from."
