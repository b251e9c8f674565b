"""Apply caller supplied form values to decoded widget records."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable, Mapping

from .types import AnnotationRecord, ButtonFieldProperties, FieldDescriptor, FormElementType

__all__ = ["apply_field_values", "override_field"]


def _selected(properties: ButtonFieldProperties, value: Any) -> bool:
    # The second option is the checked state.
    return value in properties.options and properties.options.index(value) > 0


def _text_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return str(value)


def override_field(descriptor: FieldDescriptor, values: Mapping[str, Any]) -> FieldDescriptor:
    """
    Return ``descriptor`` with the matching override from ``values`` applied.

    Text and choice fields are keyed by full name, checkboxes by full name
    (an export value string or a boolean) and radio buttons by their
    corrected id, so every widget of a group reads the same entry.
    """

    element_type = descriptor.form_element_type
    properties = descriptor.properties

    if element_type in (FormElementType.TEXT, FormElementType.DROP_DOWN):
        if descriptor.full_name in values:
            return replace(descriptor, field_value=_text_value(values[descriptor.full_name]))
        return descriptor

    if not isinstance(properties, ButtonFieldProperties):
        return descriptor

    if element_type is FormElementType.CHECK_BOX:
        value = values.get(descriptor.full_name)
        if isinstance(value, bool):
            return replace(descriptor, properties=replace(properties, selected=value))
        if isinstance(value, str):
            return replace(descriptor, properties=replace(properties, selected=_selected(properties, value)))
        return descriptor

    if element_type is FormElementType.RADIO_BUTTON and descriptor.corrected_id in values:
        value = values[descriptor.corrected_id]
        return replace(descriptor, properties=replace(properties, selected=_selected(properties, value)))

    return descriptor


def apply_field_values(
    records: Iterable[AnnotationRecord],
    values: Mapping[str, Any],
) -> tuple[AnnotationRecord, ...]:
    """Return copies of ``records`` with form values overridden; inputs are untouched."""

    updated = []
    for record in records:
        descriptor = record.form_field
        if descriptor is None or not values:
            updated.append(record)
            continue
        overridden = override_field(descriptor, values)
        updated.append(record if overridden is descriptor else replace(record, payload=overridden))
    return tuple(updated)
