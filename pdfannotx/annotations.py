"""
Annotation builders.

:func:`build_base` extracts the fields every annotation shares.  Subtype
specific builders are plain functions registered with
:func:`register_builder`; each receives the annotation dictionary, its
reference, the base record and the decode context, and returns a new record
carrying the subtype payload.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable

from pypdf.generic import ArrayObject, ByteStringObject, NameObject, StreamObject, TextStringObject

from .borders import resolve_border_style, set_width
from .colors import resolve_color
from .config import DecodeContext
from .objects import get, get_raw, has, is_dictionary, reference_id, resolve, to_python
from .scripting import extract_action, extract_additional_actions
from .types import (
    AnnotationRecord,
    AnnotationType,
    FileAttachmentPayload,
    FileSpec,
    LinkPayload,
    MarkupPayload,
    PopupPayload,
    TextPayload,
)
from .utils import is_integer, is_number, name_value, normalize_rect, pdf_text

__all__ = [
    "AnnotationBuilder",
    "BuilderRegistry",
    "registry",
    "register_builder",
    "build_base",
    "select_appearance",
    "prepare_popup",
    "is_valid_url",
    "add_default_protocol",
    "file_spec",
]

LOGGER = logging.getLogger(__name__)

AnnotationBuilder = Callable[[Any, Any, AnnotationRecord, DecodeContext], AnnotationRecord]

DEFAULT_ICON_SIZE = 22

_URL_PROTOCOLS = ("http", "https", "ftp", "mailto", "tel")
_PROTOCOL_PATTERN = re.compile(r"^[a-z][a-z0-9+\-.]*(?=:)", re.IGNORECASE)
_FILENAME_KEYS = ("/UF", "/F", "/Unix", "/Mac", "/DOS")


class BuilderRegistry:
    """Registry mapping annotation subtypes (and widget field types) to builders."""

    def __init__(self) -> None:
        self._builders: Dict[tuple[AnnotationType, str | None], AnnotationBuilder] = {}

    def register(
        self,
        subtype: AnnotationType,
        builder: AnnotationBuilder,
        field_type: str | None = None,
    ) -> None:
        key = (subtype, field_type)
        if key in self._builders:
            raise ValueError(f"Builder for '{subtype.value}' is already registered")
        self._builders[key] = builder

    def get(self, subtype: AnnotationType, field_type: str | None = None) -> AnnotationBuilder | None:
        if field_type is not None and (subtype, field_type) in self._builders:
            return self._builders[(subtype, field_type)]
        return self._builders.get((subtype, None))

    def names(self) -> Iterable[str]:
        return sorted({subtype.value for subtype, _ in self._builders})


registry = BuilderRegistry()


def register_builder(*subtypes: AnnotationType, field_type: str | None = None):
    def decorator(builder: AnnotationBuilder) -> AnnotationBuilder:
        for subtype in subtypes:
            registry.register(subtype, builder, field_type)
        return builder

    return decorator


def select_appearance(annotation: Any) -> tuple[StreamObject | None, Any]:
    """
    Pick the normal appearance stream of ``annotation``.

    When ``/AP`` -> ``/N`` is a dictionary of states, the entry named by
    ``/AS`` is used.  Returns the stream and its raw (possibly indirect)
    entry, or ``(None, None)``.
    """

    appearance_dict = get(annotation, "/AP")
    if not is_dictionary(appearance_dict):
        return None, None

    raw = get_raw(appearance_dict, "/N")
    appearance = resolve(raw)
    if is_dictionary(appearance):
        state = name_value(get(annotation, "/AS"))
        if state is None or not has(appearance, f"/{state}"):
            return None, None
        raw = get_raw(appearance, f"/{state}")
        appearance = resolve(raw)
    if not isinstance(appearance, StreamObject):
        return None, None
    return appearance, raw


def _flags(value: Any) -> int:
    return int(value) if is_integer(value) else 0


def _rectangle(value: Any) -> tuple[float, float, float, float]:
    if isinstance(value, ArrayObject) and len(value) == 4:
        items = [resolve(item) for item in value]
        if all(is_number(item) for item in items):
            return normalize_rect(items)
    return (0.0, 0.0, 0.0, 0.0)


def build_base(dictionary: Any, reference: Any, context: DecodeContext) -> AnnotationRecord:
    """Decode the subtype-independent part of an annotation dictionary."""

    annotation_id = reference_id(reference) or reference_id(dictionary) or ""
    appearance, appearance_raw = select_appearance(dictionary)
    subtype_name = name_value(get(dictionary, "/Subtype")) or ""
    translate = context.options.translate_scripts

    return AnnotationRecord(
        id=annotation_id,
        subtype=AnnotationType.from_name(subtype_name),
        subtype_name=subtype_name,
        annotation_flags=_flags(get(dictionary, "/F")),
        rect=_rectangle(get(dictionary, "/Rect")),
        color=resolve_color(get(dictionary, "/C")),
        border_style=resolve_border_style(dictionary),
        appearance_ref=reference_id(appearance_raw),
        action=extract_action(get(dictionary, "/A"), annotation_id, translate=translate),
        additional_actions=extract_additional_actions(
            get(dictionary, "/AA"), annotation_id, translate=translate
        ),
        appearance=appearance,
    )


def prepare_popup(dictionary: Any, record: AnnotationRecord, payload_type: type, **extra: Any) -> AnnotationRecord:
    """
    Attach a popup-capable payload to ``record``.

    A missing ``/C`` means the viewer default color, not black.
    """

    color = record.color if has(dictionary, "/C") else None
    payload = payload_type(
        has_popup=has(dictionary, "/Popup"),
        title=pdf_text(get(dictionary, "/T")),
        contents=pdf_text(get(dictionary, "/Contents")),
        **extra,
    )
    return replace(record, color=color, payload=payload)


def is_valid_url(url: Any, allow_relative: bool = False) -> bool:
    if not isinstance(url, str) or not url:
        return False
    match = _PROTOCOL_PATTERN.match(url)
    if match is None:
        return allow_relative
    return match.group(0).lower() in _URL_PROTOCOLS


def add_default_protocol(url: str) -> str:
    if url.startswith("www."):
        return "http://" + url
    return url


def _utf8_url(url: str) -> str:
    # Some writers store UTF-8 bytes where 7-bit ASCII is required.
    try:
        return url.encode("latin-1").decode("utf-8")
    except (UnicodeEncodeError, UnicodeDecodeError):
        return url


def _destination(value: Any) -> Any:
    if isinstance(value, NameObject):
        return name_value(value)
    if isinstance(value, (TextStringObject, ByteStringObject)):
        return pdf_text(value)
    return to_python(value)


def _uri_action(action: Any) -> LinkPayload:
    url = get(action, "/URI")
    if isinstance(url, NameObject):
        # Relative URLs written without parentheses.
        url = "/" + (name_value(url) or "")
    elif url is not None:
        url = add_default_protocol(pdf_text(url))
    if not is_valid_url(url):
        url = ""
    return LinkPayload(url=_utf8_url(url))


def _remote_goto_action(action: Any) -> LinkPayload:
    url = None
    file_dict = get(action, "/F")
    if is_dictionary(file_dict):
        url = pdf_text(get(file_dict, "/F"))
    if not is_valid_url(url):
        url = ""
    return LinkPayload(url=url, dest=_destination(get(action, "/D")))


@register_builder(AnnotationType.LINK)
def build_link(dictionary: Any, reference: Any, record: AnnotationRecord, context: DecodeContext) -> AnnotationRecord:
    action = get(dictionary, "/A")
    if is_dictionary(action):
        link_type = name_value(get(action, "/S"))
        if link_type == "URI":
            payload = _uri_action(action)
        elif link_type == "GoTo":
            payload = LinkPayload(dest=_destination(get(action, "/D")))
        elif link_type == "GoToR":
            payload = _remote_goto_action(action)
        elif link_type == "Named":
            payload = LinkPayload(action=name_value(get(action, "/N")))
        else:
            LOGGER.warning("unrecognized link type: %s", link_type)
            payload = LinkPayload()
    elif has(dictionary, "/Dest"):
        payload = LinkPayload(dest=_destination(get(dictionary, "/Dest")))
    else:
        payload = LinkPayload()
    return replace(record, payload=payload)


@register_builder(AnnotationType.TEXT)
def build_text(dictionary: Any, reference: Any, record: AnnotationRecord, context: DecodeContext) -> AnnotationRecord:
    if record.has_appearance:
        name = "NoIcon"
    else:
        left, _, _, top = record.rect
        record = replace(
            record,
            rect=(left, top - DEFAULT_ICON_SIZE, left + DEFAULT_ICON_SIZE, top),
        )
        name = name_value(get(dictionary, "/Name")) or "Note"
    return prepare_popup(dictionary, record, TextPayload, name=name)


@register_builder(AnnotationType.POPUP)
def build_popup(dictionary: Any, reference: Any, record: AnnotationRecord, context: DecodeContext) -> AnnotationRecord:
    parent = get(dictionary, "/Parent")
    if not is_dictionary(parent):
        LOGGER.warning("Popup annotation has a missing or invalid parent annotation.")
        return record

    color = resolve_color(get(parent, "/C")) if has(parent, "/C") else None
    payload = PopupPayload(
        parent_id=reference_id(get_raw(dictionary, "/Parent")),
        title=pdf_text(get(parent, "/T")),
        contents=pdf_text(get(parent, "/Contents")),
    )
    return replace(record, color=color, payload=payload)


@register_builder(
    AnnotationType.HIGHLIGHT,
    AnnotationType.UNDERLINE,
    AnnotationType.SQUIGGLY,
    AnnotationType.STRIKEOUT,
)
def build_text_markup(
    dictionary: Any, reference: Any, record: AnnotationRecord, context: DecodeContext
) -> AnnotationRecord:
    record = prepare_popup(dictionary, record, MarkupPayload)
    # Viewers ignore border styles on text markup.
    return replace(record, border_style=set_width(record.border_style, 0))


def _normalize_filename(filename: str) -> str:
    return filename.replace("\\\\", "\\").replace("\\/", "/").replace("\\", "/")


def file_spec(value: Any) -> FileSpec | None:
    """
    Decode a file specification (a string or a ``/Filespec`` dictionary).

    The file name is taken from ``/UF``, ``/F``, ``/Unix``, ``/Mac`` or
    ``/DOS``, in that order; the content from the matching ``/EF`` stream.
    """

    spec = resolve(value)
    if isinstance(spec, (TextStringObject, ByteStringObject)):
        return FileSpec(filename=_normalize_filename(pdf_text(spec)))
    if not is_dictionary(spec):
        return None

    filename = ""
    for key in _FILENAME_KEYS:
        filename = pdf_text(get(spec, key))
        if filename:
            break

    content = None
    embedded = get(spec, "/EF")
    if is_dictionary(embedded):
        for key in _FILENAME_KEYS:
            stream = get(embedded, key)
            if isinstance(stream, StreamObject):
                content = stream.get_data()
                break
        else:
            LOGGER.debug("Embedded file specification points to non-existing/invalid content")
    return FileSpec(filename=_normalize_filename(filename), content=content)


@register_builder(AnnotationType.FILEATTACHMENT)
def build_file_attachment(
    dictionary: Any, reference: Any, record: AnnotationRecord, context: DecodeContext
) -> AnnotationRecord:
    return prepare_popup(
        dictionary,
        record,
        FileAttachmentPayload,
        file=file_spec(get_raw(dictionary, "/FS")),
    )
