from __future__ import annotations

from pdfannotx.forms import apply_field_values, override_field
from pdfannotx.types import (
    AnnotationRecord,
    AnnotationType,
    ButtonFieldProperties,
    ChoiceFieldProperties,
    FieldDescriptor,
    FormElementType,
    PushButtonProperties,
)


def descriptor(element_type, full_name, properties=None, value="", field_type="Tx"):
    return FieldDescriptor(
        field_type=field_type,
        form_element_type=element_type,
        field_flags=0,
        full_name=full_name,
        field_value=value,
        properties=properties,
    )


def widget(payload, record_id="1R"):
    return AnnotationRecord(id=record_id, subtype=AnnotationType.WIDGET, subtype_name="Widget", payload=payload)


def test_text_value_by_full_name() -> None:
    field = descriptor(FormElementType.TEXT, "person.name", value="old")
    assert override_field(field, {"person.name": "Ada"}).field_value == "Ada"
    assert override_field(field, {"name": "Ada"}) is field


def test_choice_list_value_is_joined() -> None:
    field = descriptor(FormElementType.DROP_DOWN, "colors", ChoiceFieldProperties(), field_type="Ch")
    assert override_field(field, {"colors": ["red", "blue"]}).field_value == "red,blue"


def test_checkbox_accepts_booleans_and_export_values() -> None:
    field = descriptor(
        FormElementType.CHECK_BOX,
        "agree",
        ButtonFieldProperties(options=("Off", "On"), selected=False),
        field_type="Btn",
    )
    assert override_field(field, {"agree": True}).properties.selected
    assert override_field(field, {"agree": "On"}).properties.selected
    checked = override_field(field, {"agree": True})
    assert not override_field(checked, {"agree": "Off"}).properties.selected
    assert not override_field(checked, {"agree": "Other"}).properties.selected
    assert override_field(field, {"agree": 1}) is field


def test_radio_group_uses_corrected_id() -> None:
    small = descriptor(
        FormElementType.RADIO_BUTTON,
        "size.`0",
        ButtonFieldProperties(options=("Off", "S")),
        field_type="Btn",
    )
    large = descriptor(
        FormElementType.RADIO_BUTTON,
        "size.`1",
        ButtonFieldProperties(options=("Off", "L")),
        field_type="Btn",
    )
    values = {"size": "L"}
    assert not override_field(small, values).properties.selected
    assert override_field(large, values).properties.selected
    assert override_field(large, {"size.`1": "L"}) is large


def test_other_fields_are_untouched() -> None:
    button = descriptor(FormElementType.PUSH_BUTTON, "submit", PushButtonProperties("Go"), field_type="Btn")
    unknown = descriptor(None, "barcode")
    assert override_field(button, {"submit": "x"}) is button
    assert override_field(unknown, {"barcode": "x"}) is unknown


def test_apply_returns_new_records() -> None:
    name = widget(descriptor(FormElementType.TEXT, "name", value="old"), "1R")
    link = AnnotationRecord(id="2R", subtype=AnnotationType.LINK, subtype_name="Link")
    untouched = widget(descriptor(FormElementType.TEXT, "other", value="same"), "3R")

    updated = apply_field_values([name, link, untouched], {"name": "new"})

    assert updated[0].form_field.field_value == "new"
    assert updated[1] is link
    assert updated[2] is untouched
    assert name.form_field.field_value == "old"


def test_apply_without_values() -> None:
    name = widget(descriptor(FormElementType.TEXT, "name"))
    assert apply_field_values([name], {}) == (name,)
