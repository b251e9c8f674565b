"""Utilities shared by the pdfannotx decoders."""

from __future__ import annotations

import base64
import logging
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any, Mapping

from pypdf.generic import (
    ByteStringObject,
    NameObject,
    TextStringObject,
    create_string_object,
)


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
    return logger


def is_integer(value: Any) -> bool:
    """Return ``True`` for integral numbers, including ``2.0``-style floats."""

    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return value.is_integer()
    return False


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def name_value(value: Any) -> str | None:
    """Return the bare name of a PDF name object (``/Tx`` -> ``Tx``)."""

    if isinstance(value, NameObject):
        raw = str(value)
        return raw[1:] if raw.startswith("/") else raw
    return None


def pdf_text(value: Any) -> str:
    """Decode a PDF text string to ``str``; anything unusable becomes ``""``."""

    if value is None:
        return ""
    if isinstance(value, TextStringObject):
        return str(value)
    if isinstance(value, NameObject):
        return name_value(value) or ""
    if isinstance(value, (ByteStringObject, bytes, bytearray)):
        decoded = create_string_object(bytes(value))
        if isinstance(decoded, TextStringObject):
            return str(decoded)
        return bytes(value).decode("latin-1")
    if isinstance(value, str):
        return value
    if is_number(value):
        return str(value)
    return ""


def normalize_rect(values: Any) -> tuple[float, float, float, float]:
    left, bottom, right, top = (float(values[i]) for i in range(4))
    return (
        min(left, right),
        min(bottom, top),
        max(left, right),
        max(bottom, top),
    )


def to_jsonable(value: Any) -> Any:
    """Convert records and their nested values to JSON-compatible data.

    Dataclass fields excluded from comparison (raw pypdf objects) are skipped.
    """

    if is_dataclass(value) and not isinstance(value, type):
        return {item.name: to_jsonable(getattr(value, item.name)) for item in fields(value) if item.compare}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    return value
