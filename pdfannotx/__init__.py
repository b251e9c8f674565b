"""
pdfannotx - Decode PDF annotations and AcroForm fields.

This library turns the annotation and form-field dictionaries of a PDF,
as parsed by pypdf, into immutable, strongly typed records: border styles,
colors, actions with browser-ready scripts, and fully classified form
fields with their selection state.

Quick Start:
    >>> from pdfannotx import AnnotationDocument
    >>> document = AnnotationDocument('form.pdf')
    >>> for record in document.fields():
    ...     print(record.form_field.full_name, record.form_field.field_value)

Main Classes:
    - AnnotationDocument: Decode the annotations of a PDF file page by page
    - AnnotationFactory: Decode a single annotation reference

Data Classes:
    - AnnotationRecord: Decoded annotation
    - FieldDescriptor: AcroForm field attached to a Widget annotation
    - DecodeOptions: Options for a decode pass

Exceptions:
    - PDFAnnotXException: Base exception
    - InvalidPDFError: Invalid or corrupted PDF
    - EncryptedPDFError: Encrypted PDF
    - PageOutOfBoundsError: Page number out of bounds

Functions:
    - decode_annotations: Decode a page's /Annots array
    - apply_field_values: Override decoded form values
    - translate_script: Rewrite Acrobat JavaScript for the browser

For CLI usage, use the 'pdfannotx' command after installation.
"""

# Core classes
from pdfannotx.document import AnnotationDocument, open_reader
from pdfannotx.factory import AnnotationFactory, DecodeResult, decode_annotations

# Configuration
from pdfannotx.config import DecodeContext, DecodeOptions
from pdfannotx.objects import ObjectGraph, PypdfObjectGraph

# Data types
from pdfannotx.types import (
    AnnotationBorderStyle,
    AnnotationFlag,
    AnnotationRecord,
    AnnotationType,
    BorderStyleType,
    FieldDescriptor,
    FormElementType,
)

# Exceptions
from pdfannotx.exceptions import (
    PDFAnnotXException,
    InvalidPDFError,
    EncryptedPDFError,
    PageOutOfBoundsError,
)

# Functions
from pdfannotx.forms import apply_field_values
from pdfannotx.scripting import ScriptBindings, translate_script
from pdfannotx.appearance import ContentStreamEvaluator, OperatorList, append_to_operator_list

__version__ = "1.0.0"
__author__ = "pdfannotx Contributors"
__license__ = "MIT"

__all__ = [
    # Main classes
    "AnnotationDocument",
    "AnnotationFactory",
    "DecodeResult",
    "open_reader",
    "decode_annotations",
    # Configuration
    "DecodeContext",
    "DecodeOptions",
    "ObjectGraph",
    "PypdfObjectGraph",
    # Data types
    "AnnotationBorderStyle",
    "AnnotationFlag",
    "AnnotationRecord",
    "AnnotationType",
    "BorderStyleType",
    "FieldDescriptor",
    "FormElementType",
    # Exceptions
    "PDFAnnotXException",
    "InvalidPDFError",
    "EncryptedPDFError",
    "PageOutOfBoundsError",
    # Functions
    "apply_field_values",
    "translate_script",
    "ScriptBindings",
    "ContentStreamEvaluator",
    "OperatorList",
    "append_to_operator_list",
    # Version info
    "__version__",
]
