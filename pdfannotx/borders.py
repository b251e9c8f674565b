"""Border style resolution from ``/BS`` dictionaries and legacy ``/Border`` arrays."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from pypdf.generic import ArrayObject

from .objects import get, has, is_dictionary, resolve
from .types import AnnotationBorderStyle, BorderStyleType
from .utils import is_integer, is_number, name_value

__all__ = [
    "resolve_border_style",
    "set_width",
    "set_style",
    "set_dash_array",
    "set_horizontal_corner_radius",
    "set_vertical_corner_radius",
]

_STYLE_NAMES = {
    "S": BorderStyleType.SOLID,
    "D": BorderStyleType.DASHED,
    "B": BorderStyleType.BEVELED,
    "I": BorderStyleType.INSET,
    "U": BorderStyleType.UNDERLINE,
}


def _plain_number(value: Any) -> int | float:
    return int(value) if isinstance(value, int) else float(value)


def set_width(border: AnnotationBorderStyle, width: Any) -> AnnotationBorderStyle:
    width = resolve(width)
    if is_integer(width):
        return replace(border, width=int(width))
    return border


def set_style(border: AnnotationBorderStyle, style: Any) -> AnnotationBorderStyle:
    style_type = _STYLE_NAMES.get(name_value(resolve(style)) or "")
    if style_type is None:
        return border
    return replace(border, style=style_type)


def set_dash_array(border: AnnotationBorderStyle, dash_array: Any) -> AnnotationBorderStyle:
    """
    Validate and apply a dash array.

    Elements must be non-negative numbers and not all zero; anything else
    disables the border (width 0), which is how Adobe Reader treats it.
    """

    dash_array = resolve(dash_array)
    if isinstance(dash_array, (ArrayObject, list, tuple)) and len(dash_array) > 0:
        elements = [resolve(item) for item in dash_array]
        is_valid = all(is_number(element) and element >= 0 for element in elements)
        all_zeros = not any(is_number(element) and element > 0 for element in elements)
        if is_valid and not all_zeros:
            return replace(border, dash_array=tuple(_plain_number(element) for element in elements))
        return replace(border, width=0)
    if dash_array is None or dash_array == 0 or dash_array == "":
        return border
    return replace(border, width=0)


def set_horizontal_corner_radius(border: AnnotationBorderStyle, radius: Any) -> AnnotationBorderStyle:
    radius = resolve(radius)
    if is_integer(radius):
        return replace(border, horizontal_corner_radius=int(radius))
    return border


def set_vertical_corner_radius(border: AnnotationBorderStyle, radius: Any) -> AnnotationBorderStyle:
    radius = resolve(radius)
    if is_integer(radius):
        return replace(border, vertical_corner_radius=int(radius))
    return border


def resolve_border_style(annotation: Any) -> AnnotationBorderStyle:
    """Derive the border style of an annotation dictionary."""

    border = AnnotationBorderStyle()
    if not is_dictionary(annotation):
        return border

    if has(annotation, "/BS"):
        style_dict = get(annotation, "/BS")
        if not is_dictionary(style_dict):
            return border
        if not has(style_dict, "/Type") or name_value(get(style_dict, "/Type")) == "Border":
            border = set_width(border, get(style_dict, "/W"))
            border = set_style(border, get(style_dict, "/S"))
            border = set_dash_array(border, get(style_dict, "/D"))
        return border

    if has(annotation, "/Border"):
        array = get(annotation, "/Border")
        if isinstance(array, ArrayObject) and len(array) >= 3:
            border = set_horizontal_corner_radius(border, array[0])
            border = set_vertical_corner_radius(border, array[1])
            border = set_width(border, array[2])
            if len(array) == 4:
                border = set_dash_array(border, array[3])
        return border

    # Without /BS or /Border nothing is drawn, matching Adobe Reader.
    return replace(border, width=0)
