"""
AcroForm field classification for Widget annotations.

The form control category is derived from the inheritable ``/FT`` and
``/Ff`` entries.  Each category then has its own extractor; extractors fall
back through explicit tiers instead of relying on exceptions, and a
malformed field only degrades its own properties.
"""

from __future__ import annotations

import logging
import random
import re
from dataclasses import replace
from typing import Any

from pypdf.errors import PyPdfError
from pypdf.generic import ArrayObject, NameObject, StreamObject

from .annotations import register_builder
from .config import DecodeContext, DecodeOptions
from .naming import resolve_full_name
from .objects import get, get_inheritable, has, is_dictionary, reference_id, resolve
from .types import (
    AnnotationFlag,
    AnnotationRecord,
    AnnotationType,
    ButtonFieldProperties,
    ChoiceFieldProperties,
    ChoiceOption,
    FieldDescriptor,
    FieldProperties,
    FormElementType,
    PushButtonProperties,
    SignatureFieldProperties,
    SignatureLock,
    TextFieldProperties,
)
from .utils import is_integer, is_number, name_value, pdf_text

__all__ = [
    "classify_field",
    "parse_default_appearance",
    "field_value",
    "appearance_states",
    "checkbox_properties",
    "radio_properties",
    "fallback_export_value",
    "field_properties",
    "choice_properties",
    "text_properties",
    "push_button_properties",
    "signature_properties",
    "describe_field",
]

LOGGER = logging.getLogger(__name__)

# Field flag bit values (PDF 32000-1:2008, tables 226, 228 and 230).
FLAG_MULTILINE = 4096
FLAG_PASSWORD = 8192
# Radio (bit 16) or NoToggleToOff (bit 15).
FLAGS_RADIO = 49152
FLAG_PUSH_BUTTON = 65536
FLAG_FILE_SELECT = 1048576
FLAGS_COMBO_EDIT = 393216
FLAGS_MULTI_SELECT = 2097152

OFF_STATE = "Off"

_FONT_PATTERN = re.compile(r"/(\w+) (\d+(\.\d+)?) Tf", re.ASCII)

_FIELD_ERRORS = (PyPdfError, ValueError, TypeError, KeyError, IndexError, AttributeError)


def classify_field(field_type: str, field_flags: int, paper_meta_data: bool = False) -> FormElementType | None:
    """Map ``/FT`` and ``/Ff`` to a form control category."""

    if field_type == "Tx":
        if paper_meta_data:
            # Bar code payloads are not interactive.
            return None
        return FormElementType.TEXT
    if field_type == "Btn":
        if field_flags & FLAGS_RADIO:
            return FormElementType.RADIO_BUTTON
        if field_flags & FLAG_PUSH_BUTTON:
            return FormElementType.PUSH_BUTTON
        return FormElementType.CHECK_BOX
    if field_type == "Ch":
        return FormElementType.DROP_DOWN
    if field_type == "Sig":
        return FormElementType.SIGNATURE
    return None


def parse_default_appearance(default_appearance: str) -> tuple[str | None, float | None]:
    """
    Recover the font resource name and size from a ``/DA`` string.

    Returns ``(None, None)`` when there is no ``Tf`` operator or the size is
    not positive.
    """

    match = _FONT_PATTERN.search(default_appearance or "")
    if match is None:
        return None, None
    size = float(match.group(2))
    if size <= 0:
        return None, None
    return match.group(1), size


def _text_or_stream(value: Any) -> str:
    value = resolve(value)
    if isinstance(value, StreamObject):
        return value.get_data().decode("latin-1")
    return pdf_text(value)


def _state_name(value: Any) -> str | None:
    value = resolve(value)
    if isinstance(value, NameObject):
        return name_value(value)
    if value is None:
        return None
    return pdf_text(value) or None


def field_value(dictionary: Any) -> str:
    value = get_inheritable(dictionary, "/V")
    if isinstance(value, ArrayObject):
        return ",".join(pdf_text(resolve(item)) for item in value)
    return _text_or_stream(value)


def appearance_states(dictionary: Any) -> list[str] | None:
    """Names of the ``/AP`` -> ``/N`` states, or ``None`` without a state dictionary."""

    appearance_dict = get(dictionary, "/AP")
    if not is_dictionary(appearance_dict):
        return None
    normal = get(appearance_dict, "/N")
    if not is_dictionary(normal):
        return None
    return [name_value(NameObject(key)) or "" for key in normal.keys()]


def _state_options(states: list[str] | None) -> tuple[str, ...] | None:
    on_states = [state for state in states or () if state != OFF_STATE]
    if not on_states:
        return None
    return (OFF_STATE, *on_states)


def checkbox_properties(dictionary: Any) -> ButtonFieldProperties:
    """
    Resolve the options and selection of a checkbox.

    1. The appearance states give the export value; selected when ``/V``
       equals it.
    2. Otherwise a non-Off ``/AS`` is the export value.
    3. Otherwise assume ``Yes`` and treat any ``/V`` but ``Off`` as selected.
    """

    value = _state_name(get_inheritable(dictionary, "/V")) or OFF_STATE

    options = _state_options(appearance_states(dictionary))
    if options is not None:
        return ButtonFieldProperties(options=options, selected=value == options[1])

    state = _state_name(get(dictionary, "/AS"))
    if state and state != OFF_STATE:
        return ButtonFieldProperties(options=(OFF_STATE, state), selected=value == state)

    return ButtonFieldProperties(options=(OFF_STATE, "Yes"), selected=value != OFF_STATE)


def fallback_export_value(reference: Any, deterministic: bool = True) -> str:
    """
    Synthetic export value for a radio button without appearance states.

    The deterministic form derives the suffix from the widget reference, so
    two independently broken groups never share a value.
    """

    if deterministic:
        identity = reference_id(reference)
        if identity:
            return f"Yes_{identity}"
    return f"Yes_{random.randint(0, 1000)}"


def radio_properties(dictionary: Any, reference: Any, deterministic: bool = True) -> ButtonFieldProperties:
    state = _state_name(get(dictionary, "/AS")) or OFF_STATE
    options = _state_options(appearance_states(dictionary))
    if options is not None:
        return ButtonFieldProperties(options=options, selected=state == options[1])
    return ButtonFieldProperties(
        options=(OFF_STATE, fallback_export_value(reference, deterministic)),
        selected=False,
    )


def _choice_options(dictionary: Any) -> list[ChoiceOption] | None:
    entries = get(dictionary, "/Opt")
    if entries is None:
        return []
    if not isinstance(entries, ArrayObject):
        return None

    options = []
    for entry in entries:
        entry = resolve(entry)
        if isinstance(entry, ArrayObject):
            if len(entry) < 2:
                return None
            value, text = pdf_text(resolve(entry[0])), pdf_text(resolve(entry[1]))
        else:
            value = text = pdf_text(entry)
        options.append(ChoiceOption(value=value, text=text))
    return options


def _selected_indexes(dictionary: Any, count: int) -> set[int] | None:
    indexes = get(dictionary, "/I")
    if indexes is None:
        return set()
    if not isinstance(indexes, ArrayObject):
        return None
    selected = set()
    for index in indexes:
        index = resolve(index)
        if not is_integer(index) or not 0 <= index < count:
            return None
        selected.add(int(index))
    return selected


def choice_properties(dictionary: Any, field_flags: int) -> ChoiceFieldProperties:
    """
    Build the option list of a choice field.

    A malformed ``/Opt`` or ``/I`` leaves ``options`` as ``None``.
    """

    allow_text_entry = field_flags == FLAGS_COMBO_EDIT
    multi_select = field_flags == FLAGS_MULTI_SELECT

    options = _choice_options(dictionary)
    selected = _selected_indexes(dictionary, len(options)) if options is not None else None
    if options is None or selected is None:
        return ChoiceFieldProperties(
            options=None,
            allow_text_entry=allow_text_entry,
            multi_select=multi_select,
        )
    return ChoiceFieldProperties(
        options=tuple(
            replace(option, selected=True) if index in selected else option
            for index, option in enumerate(options)
        ),
        allow_text_entry=allow_text_entry,
        multi_select=multi_select,
    )


def text_properties(dictionary: Any, field_flags: int) -> TextFieldProperties:
    max_length = get_inheritable(dictionary, "/MaxLen")
    return TextFieldProperties(
        multi_line=bool(field_flags & FLAG_MULTILINE),
        password=bool(field_flags & FLAG_PASSWORD),
        file_upload=bool(field_flags & FLAG_FILE_SELECT),
        rich_text=_text_or_stream(get_inheritable(dictionary, "/RV")),
        max_length=int(max_length) if is_integer(max_length) else None,
    )


def push_button_properties(dictionary: Any) -> PushButtonProperties:
    characteristics = get(dictionary, "/MK")
    if not is_dictionary(characteristics):
        return PushButtonProperties()
    return PushButtonProperties(label=pdf_text(get(characteristics, "/CA")))


def signature_properties(dictionary: Any) -> SignatureFieldProperties:
    lock = get_inheritable(dictionary, "/Lock")
    if not is_dictionary(lock):
        return SignatureFieldProperties()
    action = name_value(get(lock, "/Action"))
    if action is None:
        return SignatureFieldProperties()

    lock_type = name_value(get(lock, "/Type")) if has(lock, "/Type") else None
    fields = None
    if action != "All":
        names = get(lock, "/Fields")
        if isinstance(names, ArrayObject):
            fields = tuple(pdf_text(resolve(name)) for name in names)
    return SignatureFieldProperties(lock=SignatureLock(action=action, type=lock_type, fields=fields))


def _default_properties(form_element_type: FormElementType, reference: Any, options: DecodeOptions) -> FieldProperties:
    if form_element_type is FormElementType.RADIO_BUTTON:
        return ButtonFieldProperties(
            options=(OFF_STATE, fallback_export_value(reference, options.deterministic_radio_fallback)),
        )
    if form_element_type is FormElementType.CHECK_BOX:
        return ButtonFieldProperties()
    if form_element_type is FormElementType.DROP_DOWN:
        return ChoiceFieldProperties(options=None)
    if form_element_type is FormElementType.PUSH_BUTTON:
        return PushButtonProperties()
    if form_element_type is FormElementType.SIGNATURE:
        return SignatureFieldProperties()
    return TextFieldProperties()


def _category_properties(
    form_element_type: FormElementType,
    dictionary: Any,
    reference: Any,
    field_flags: int,
    options: DecodeOptions,
) -> FieldProperties:
    if form_element_type is FormElementType.TEXT:
        return text_properties(dictionary, field_flags)
    if form_element_type is FormElementType.CHECK_BOX:
        return checkbox_properties(dictionary)
    if form_element_type is FormElementType.RADIO_BUTTON:
        return radio_properties(dictionary, reference, options.deterministic_radio_fallback)
    if form_element_type is FormElementType.PUSH_BUTTON:
        return push_button_properties(dictionary)
    if form_element_type is FormElementType.DROP_DOWN:
        return choice_properties(dictionary, field_flags)
    return signature_properties(dictionary)


def field_properties(
    form_element_type: FormElementType,
    dictionary: Any,
    reference: Any,
    field_flags: int,
    options: DecodeOptions,
) -> FieldProperties:
    """Extract category properties, degrading to safe defaults on malformed input."""

    try:
        return _category_properties(form_element_type, dictionary, reference, field_flags, options)
    except _FIELD_ERRORS as exc:
        LOGGER.debug(
            "Failed to extract %s properties of %s: %s",
            form_element_type.value,
            reference_id(reference),
            exc,
        )
        return _default_properties(form_element_type, reference, options)


def describe_field(
    dictionary: Any,
    reference: Any,
    record: AnnotationRecord,
    options: DecodeOptions,
) -> FieldDescriptor:
    """Build the :class:`FieldDescriptor` of a Widget annotation."""

    field_type = name_value(get_inheritable(dictionary, "/FT")) or ""
    flags = get_inheritable(dictionary, "/Ff")
    field_flags = int(flags) if is_integer(flags) else 0
    default_appearance = pdf_text(get_inheritable(dictionary, "/DA"))
    font_name, font_size = parse_default_appearance(default_appearance)
    paper_meta_data = field_type == "Tx" and get_inheritable(dictionary, "/PMD") is not None

    form_element_type = classify_field(field_type, field_flags, paper_meta_data)
    properties = None
    if form_element_type is not None:
        properties = field_properties(form_element_type, dictionary, reference, field_flags, options)

    return FieldDescriptor(
        field_type=field_type,
        form_element_type=form_element_type,
        field_flags=field_flags,
        full_name=resolve_full_name(dictionary, reference),
        original_name=pdf_text(get(dictionary, "/T")),
        field_value=field_value(dictionary),
        alternative_text=pdf_text(get(dictionary, "/TU")),
        default_appearance=default_appearance,
        font_name=font_name,
        font_size=font_size,
        paper_meta_data=paper_meta_data,
        hidden_for_forms=form_element_type is not None and not record.has_flag(AnnotationFlag.HIDDEN),
        properties=properties,
        field_resources=get_inheritable(dictionary, "/DR"),
    )


@register_builder(AnnotationType.WIDGET)
def build_widget(dictionary: Any, reference: Any, record: AnnotationRecord, context: DecodeContext) -> AnnotationRecord:
    return replace(record, payload=describe_field(dictionary, reference, record, context.options))


@register_builder(AnnotationType.WIDGET, field_type="Tx")
def build_text_widget(
    dictionary: Any, reference: Any, record: AnnotationRecord, context: DecodeContext
) -> AnnotationRecord:
    record = build_widget(dictionary, reference, record, context)
    alignment = get_inheritable(dictionary, "/Q")
    if not is_number(alignment):
        return record
    return replace(record, payload=replace(record.payload, text_alignment=int(alignment)))
