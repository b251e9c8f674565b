"""
Translation of embedded Acrobat JavaScript into browser-executable script.

Only a small, pattern-matched subset of the Acrobat API is rewritten.  Each
rule is a plain regular-expression substitution; the rules match disjoint
constructs, so the order in which they are applied does not change the
result.  Translated bodies are wrapped in a ``try``/``catch`` envelope so a
script that fails at runtime only logs a message tagged with the owning
annotation id.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from pypdf.generic import IndirectObject, StreamObject

from .objects import get, get_raw, has, is_dictionary, resolve, to_python
from .types import ActionScript, AnnotationRecord
from .utils import name_value, pdf_text

__all__ = [
    "RewriteRule",
    "RULES",
    "COMMON_SCRIPT",
    "ADDITIONAL_ACTION_TRIGGERS",
    "translate_script",
    "script_source",
    "extract_action",
    "extract_additional_actions",
    "ScriptBindings",
]

LOGGER = logging.getLogger(__name__)

ADDITIONAL_ACTION_TRIGGERS = ("Fo", "Bl", "K", "V", "C")


@dataclass(frozen=True, slots=True)
class RewriteRule:
    """
    A single textual rewrite.

    Attributes:
        name: Identifier used in diagnostics and tests
        pattern: Compiled expression matching the Acrobat construct
        replacement: Callable building the browser equivalent from a match
    """

    name: str
    pattern: re.Pattern[str]
    replacement: Callable[[re.Match[str]], str]

    def apply(self, source: str) -> str:
        return self.pattern.sub(self.replacement, source)


RULES: tuple[RewriteRule, ...] = (
    RewriteRule(
        "get_field",
        re.compile(r'(getField\("|this\.getField\(")([A-Za-z0-9_\-\.\s]*)("\))'),
        lambda match: "document.querySelector(\"[name='" + match.group(2).strip() + "']\")",
    ),
    RewriteRule(
        "text_size",
        re.compile(r"(\.textSize\s=\s)([0-9]*)"),
        lambda match: '.setAttribute("maxlength", ' + match.group(2) + ")",
    ),
    RewriteRule(
        "value_yes",
        re.compile(r'\.value\s*==\s*"Yes"'),
        lambda match: ".checked === true",
    ),
    RewriteRule(
        "value_no",
        re.compile(r'\.value\s*==\s*"No"'),
        lambda match: ".checked === false",
    ),
    RewriteRule(
        "display_hidden",
        re.compile(r"\.display\s*=\s*display\.hidden"),
        lambda match: '.style.display = "none"',
    ),
    RewriteRule(
        "display_visible",
        re.compile(r"\.display\s*=\s*display\.visible"),
        lambda match: '.style.display = "block"',
    ),
    RewriteRule(
        "alert",
        re.compile(r"app\.alert"),
        lambda match: "window.alert",
    ),
    RewriteRule(
        "fill_color_rgb",
        re.compile(r"(fillColor\s*=\s*\[')(RGB)',\s*([0-9\.]+),\s*([0-9\.]+),\s*([0-9\.]+)\]"),
        lambda match: 'style["background-color"] = rgb('
        + ", ".join(match.group(3, 4, 5))
        + ")",
    ),
    RewriteRule(
        "fill_color_transparent",
        re.compile(r"fillColor\s*=\s*\['T'\]"),
        lambda match: 'style["background-color"] = rgba(0,0,0,0)',
    ),
    RewriteRule(
        "required",
        re.compile(r"\.required\s*=\s*(true|false)"),
        lambda match: '.setAttribute("required", ' + match.group(1) + ")",
    ),
    RewriteRule(
        "set_focus",
        re.compile(r"\.setFocus\(\)"),
        lambda match: ".focus()",
    ),
)

COMMON_SCRIPT = (
    "window.getField = function(el){return document.getElementById(el);}; "
    "window.onStyleChanged = function(){ "
    "var inputs = document.querySelectorAll('input[type=\"text\"]'); "
    "for(var i=0; i< inputs.length; i++){ "
    "var input = inputs[i]; if(!input.parentElement) continue; "
    "input.parentElement.style.backgroundColor = "
    "(input.style.display == 'none') ? '#ffffff' : 'transparent'; } ; };"
)


def translate_script(source: str, annotation_id: str, rules: Iterable[RewriteRule] = RULES) -> str:
    """
    Rewrite ``source`` and wrap it in the runtime fault envelope.

    Args:
        source: Acrobat JavaScript text
        annotation_id: Id reported when the script fails at runtime
        rules: Rewrite rules to apply, in order

    Returns:
        Browser-executable script text
    """

    body = source
    for rule in rules:
        body = rule.apply(body)
    return (
        "try {"
        + body
        + '} catch(ex) {console.log("Error executing javascript annotation for '
        + annotation_id
        + '"); console.log("Error message: " + ex)}'
    )


def script_source(value: Any) -> str | None:
    """Return the text of a ``/JS`` entry, which is either a string or a stream."""

    value = resolve(value)
    if isinstance(value, StreamObject):
        return value.get_data().decode("latin-1")
    if value is None:
        return None
    return pdf_text(value)


def _action_target(action: Any) -> Any:
    raw = get_raw(action, "/T")
    if isinstance(raw, IndirectObject):
        return to_python(raw)
    return to_python(resolve(raw))


def extract_action(action: Any, annotation_id: str, *, translate: bool = True) -> ActionScript | None:
    """
    Capture an action dictionary as an :class:`ActionScript`.

    Dictionaries without a ``/S`` name are ignored.  When ``translate`` is
    false the ``/JS`` text is kept verbatim.
    """

    if not is_dictionary(action):
        return None
    kind = name_value(get(action, "/S"))
    if kind is None:
        LOGGER.debug("Ignoring action without a type on %s", annotation_id)
        return None

    target = _action_target(action) if has(action, "/T") else None
    script = None
    if has(action, "/JS"):
        source = script_source(get_raw(action, "/JS"))
        if source:
            script = translate_script(source, annotation_id) if translate else source
    return ActionScript(kind=kind, target=target, script=script)


def extract_additional_actions(
    additional_actions: Any,
    annotation_id: str,
    *,
    translate: bool = True,
) -> Mapping[str, ActionScript]:
    """Capture the ``/AA`` triggers Fo, Bl, K, V and C."""

    actions: dict[str, ActionScript] = {}
    if not is_dictionary(additional_actions):
        return MappingProxyType(actions)
    for trigger in ADDITIONAL_ACTION_TRIGGERS:
        if not has(additional_actions, f"/{trigger}"):
            continue
        action = extract_action(
            get(additional_actions, f"/{trigger}"),
            annotation_id,
            translate=translate,
        )
        if action is not None:
            actions[trigger] = action
    return MappingProxyType(actions)


_EVENT_BINDINGS = (("A", "click"), ("Fo", "focus"), ("Bl", "blur"), ("V", "change"))


def _binding(element_id: str, event: str, script: str) -> str:
    return (
        f"document.querySelector(\"[id='{element_id}']\")"
        f".addEventListener('{event}', function(){{ {script}; onStyleChanged()}}, false);"
    )


@dataclass(frozen=True, slots=True)
class ScriptBindings:
    """
    Event-listener scripts collected during a decode pass.

    The accumulator is immutable: :meth:`collect` returns a new instance.
    Scripts are keyed by the id of the element they bind to, which is the
    field's full name for widgets and the annotation id otherwise.
    """

    scripts: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @staticmethod
    def element_id(record: AnnotationRecord) -> str:
        descriptor = record.form_field
        if descriptor is not None and descriptor.full_name:
            return descriptor.full_name
        return record.id

    def collect(self, record: AnnotationRecord) -> "ScriptBindings":
        element_id = self.element_id(record)
        text = ""
        for trigger, event in _EVENT_BINDINGS:
            action = record.action if trigger == "A" else record.additional_actions.get(trigger)
            if action is not None and action.script:
                text += _binding(element_id, event, action.script)
        if not text:
            return self
        scripts = dict(self.scripts)
        scripts[element_id] = scripts.get(element_id, "") + text
        return ScriptBindings(MappingProxyType(scripts))

    def merge(self, other: "ScriptBindings") -> "ScriptBindings":
        if not other.scripts:
            return self
        scripts = dict(self.scripts)
        for element_id, text in other.scripts.items():
            scripts[element_id] = scripts.get(element_id, "") + text
        return ScriptBindings(MappingProxyType(scripts))

    @staticmethod
    def script_id(element_id: str) -> str:
        return f"{element_id}_js"

    def render(self) -> str:
        """Return the common prelude followed by every binding block."""

        if not self.scripts:
            return ""
        return COMMON_SCRIPT + "".join(self.scripts.values())
