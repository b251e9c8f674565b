"""
Type definitions and dataclasses for pdfannotx.

Every record produced by the decoders is a frozen dataclass.  Consumers that
need a different view of a record (for example after applying form values)
derive a copy with :func:`dataclasses.replace` instead of mutating it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntFlag
from types import MappingProxyType
from typing import Any, Mapping, Union

from .naming import corrected_id

__all__ = [
    "AnnotationType",
    "AnnotationFlag",
    "BorderStyleType",
    "FormElementType",
    "AnnotationBorderStyle",
    "ActionScript",
    "FileSpec",
    "LinkPayload",
    "TextPayload",
    "MarkupPayload",
    "FileAttachmentPayload",
    "PopupPayload",
    "ChoiceOption",
    "SignatureLock",
    "TextFieldProperties",
    "ChoiceFieldProperties",
    "ButtonFieldProperties",
    "PushButtonProperties",
    "SignatureFieldProperties",
    "FieldDescriptor",
    "AnnotationRecord",
    "AnnotationPayload",
    "FieldProperties",
]


class AnnotationType(str, Enum):
    """Annotation subtypes the decoders understand."""

    LINK = "Link"
    TEXT = "Text"
    WIDGET = "Widget"
    POPUP = "Popup"
    HIGHLIGHT = "Highlight"
    UNDERLINE = "Underline"
    SQUIGGLY = "Squiggly"
    STRIKEOUT = "StrikeOut"
    FILEATTACHMENT = "FileAttachment"
    UNKNOWN = "Unknown"

    @classmethod
    def from_name(cls, name: str) -> "AnnotationType":
        for member in cls:
            if member.value == name and member is not cls.UNKNOWN:
                return member
        return cls.UNKNOWN


class AnnotationFlag(IntFlag):
    """Annotation flags (PDF 32000-1:2008, table 165)."""

    INVISIBLE = 0x01
    HIDDEN = 0x02
    PRINT = 0x04
    NOZOOM = 0x08
    NOROTATE = 0x10
    NOVIEW = 0x20
    READONLY = 0x40
    LOCKED = 0x80
    TOGGLENOVIEW = 0x100
    LOCKEDCONTENTS = 0x200


class BorderStyleType(Enum):
    SOLID = 1
    DASHED = 2
    BEVELED = 3
    INSET = 4
    UNDERLINE = 5


class FormElementType(str, Enum):
    TEXT = "TEXT"
    CHECK_BOX = "CHECK_BOX"
    RADIO_BUTTON = "RADIO_BUTTON"
    PUSH_BUTTON = "PUSH_BUTTON"
    DROP_DOWN = "DROP_DOWN"
    SIGNATURE = "SIGNATURE"


@dataclass(frozen=True, slots=True)
class AnnotationBorderStyle:
    """
    Border style of an annotation.

    Attributes:
        width: Border width in points; 0 disables drawing
        style: Border style
        dash_array: Dash pattern, only meaningful for dashed borders
        horizontal_corner_radius: Horizontal corner radius (legacy /Border)
        vertical_corner_radius: Vertical corner radius (legacy /Border)
    """

    width: int = 1
    style: BorderStyleType = BorderStyleType.SOLID
    dash_array: tuple[float, ...] = (3,)
    horizontal_corner_radius: int = 0
    vertical_corner_radius: int = 0


@dataclass(frozen=True, slots=True)
class ActionScript:
    """
    An action attached to an annotation.

    Attributes:
        kind: Action type name taken from ``/S`` (``JavaScript``, ``URI``...)
        target: ``/T`` target as plain Python data (reference ids for indirect targets)
        script: Translated, browser-executable script text, if any
    """

    kind: str
    target: Any = None
    script: str | None = None


@dataclass(frozen=True, slots=True)
class FileSpec:
    filename: str
    content: bytes | None = None


@dataclass(frozen=True, slots=True)
class LinkPayload:
    url: str | None = None
    dest: Any = None
    action: str | None = None


@dataclass(frozen=True, slots=True)
class TextPayload:
    name: str
    has_popup: bool = False
    title: str = ""
    contents: str = ""


@dataclass(frozen=True, slots=True)
class MarkupPayload:
    """Popup-capable text markup (Highlight, Underline, Squiggly, StrikeOut)."""

    has_popup: bool = False
    title: str = ""
    contents: str = ""


@dataclass(frozen=True, slots=True)
class FileAttachmentPayload:
    file: FileSpec | None
    has_popup: bool = False
    title: str = ""
    contents: str = ""


@dataclass(frozen=True, slots=True)
class PopupPayload:
    parent_id: str | None
    title: str = ""
    contents: str = ""


@dataclass(frozen=True, slots=True)
class ChoiceOption:
    value: str
    text: str
    selected: bool = False


@dataclass(frozen=True, slots=True)
class SignatureLock:
    action: str
    type: str | None = None
    fields: tuple[str, ...] | None = None


@dataclass(frozen=True, slots=True)
class TextFieldProperties:
    multi_line: bool = False
    password: bool = False
    file_upload: bool = False
    rich_text: str = ""
    max_length: int | None = None


@dataclass(frozen=True, slots=True)
class ChoiceFieldProperties:
    """
    Choice field payload.

    ``options`` is ``None`` when the option list could not be decoded.
    """

    options: tuple[ChoiceOption, ...] | None = ()
    allow_text_entry: bool = False
    multi_select: bool = False


@dataclass(frozen=True, slots=True)
class ButtonFieldProperties:
    """Checkbox and radio payload; ``options[0]`` is always ``"Off"``."""

    options: tuple[str, ...] = ("Off", "Yes")
    selected: bool = False

    @property
    def export_value(self) -> str:
        return self.options[1] if len(self.options) > 1 else self.options[0]


@dataclass(frozen=True, slots=True)
class PushButtonProperties:
    label: str = ""


@dataclass(frozen=True, slots=True)
class SignatureFieldProperties:
    lock: SignatureLock | None = None


FieldProperties = Union[
    TextFieldProperties,
    ChoiceFieldProperties,
    ButtonFieldProperties,
    PushButtonProperties,
    SignatureFieldProperties,
]


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """
    AcroForm field information attached to a Widget annotation.

    Attributes:
        field_type: Inheritable ``/FT`` name (``Tx``, ``Btn``, ``Ch``, ``Sig``)
        form_element_type: Form control category, ``None`` when unclassified
        field_flags: Raw inheritable ``/Ff`` bitmask
        full_name: Dot-joined name from the root field down to this node
        original_name: This node's own ``/T``
        field_value: Inheritable ``/V`` as text
        properties: Category specific payload
    """

    field_type: str
    form_element_type: FormElementType | None
    field_flags: int
    full_name: str
    original_name: str = ""
    field_value: str = ""
    alternative_text: str = ""
    default_appearance: str = ""
    font_name: str | None = None
    font_size: float | None = None
    text_alignment: int | None = None
    paper_meta_data: bool = False
    hidden_for_forms: bool = False
    properties: FieldProperties | None = None
    field_resources: Any = field(default=None, compare=False, repr=False)

    @property
    def read_only(self) -> bool:
        return bool(self.field_flags & 1)

    @property
    def required(self) -> bool:
        return bool(self.field_flags & 2)

    @property
    def no_export(self) -> bool:
        return bool(self.field_flags & 4)

    @property
    def corrected_id(self) -> str:
        return corrected_id(self.full_name)

    @property
    def is_group_member(self) -> bool:
        return self.corrected_id != self.full_name


AnnotationPayload = Union[
    LinkPayload,
    TextPayload,
    MarkupPayload,
    FileAttachmentPayload,
    PopupPayload,
    FieldDescriptor,
    None,
]


@dataclass(frozen=True, slots=True)
class AnnotationRecord:
    """
    Decoded, read-only view of a single annotation dictionary.

    Attributes:
        id: Canonical reference string of the annotation dictionary
        subtype: Decoded subtype tag
        subtype_name: Raw ``/Subtype`` name, ``""`` when absent
        annotation_flags: Raw ``/F`` bitmask
        rect: Normalized rectangle ``(x1, y1, x2, y2)``
        color: RGB triple, ``None`` for transparent or viewer default
        border_style: Resolved border style
        action: Primary ``/A`` action
        additional_actions: ``/AA`` triggers keyed by ``Fo``/``Bl``/``K``/``V``/``C``
        payload: Subtype specific payload
        appearance: Selected normal appearance stream (not compared)
    """

    id: str
    subtype: AnnotationType
    subtype_name: str
    annotation_flags: int = 0
    rect: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    color: tuple[int, int, int] | None = (0, 0, 0)
    border_style: AnnotationBorderStyle = field(default_factory=AnnotationBorderStyle)
    appearance_ref: str | None = None
    action: ActionScript | None = None
    additional_actions: Mapping[str, ActionScript] = field(
        default_factory=lambda: MappingProxyType({})
    )
    payload: AnnotationPayload = None
    appearance: Any = field(default=None, compare=False, repr=False)

    @property
    def has_appearance(self) -> bool:
        return self.appearance is not None

    def has_flag(self, flag: int) -> bool:
        if self.annotation_flags:
            return (self.annotation_flags & flag) > 0
        return False

    @property
    def viewable(self) -> bool:
        if self.annotation_flags:
            return not (
                self.has_flag(AnnotationFlag.INVISIBLE)
                or self.has_flag(AnnotationFlag.HIDDEN)
                or self.has_flag(AnnotationFlag.NOVIEW)
            )
        return True

    @property
    def printable(self) -> bool:
        if self.annotation_flags:
            return (
                self.has_flag(AnnotationFlag.PRINT)
                and not self.has_flag(AnnotationFlag.INVISIBLE)
                and not self.has_flag(AnnotationFlag.HIDDEN)
            )
        return False

    @property
    def form_field(self) -> FieldDescriptor | None:
        return self.payload if isinstance(self.payload, FieldDescriptor) else None

    def __str__(self) -> str:
        return f"AnnotationRecord(id={self.id!r}, subtype={self.subtype.value})"
