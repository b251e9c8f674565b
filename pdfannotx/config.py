"""Options and shared state for an annotation decode pass."""

from __future__ import annotations

from dataclasses import dataclass, field

from .objects import ObjectGraph

__all__ = ["DecodeOptions", "DecodeContext", "INTENTS"]

INTENTS = ("display", "print")


@dataclass(slots=True)
class DecodeOptions:
    """
    Options controlling how annotations are decoded.

    Attributes:
        page_numbers: 0-indexed pages to decode, ``None`` for every page
        intent: Render intent used to filter operator lists
        translate_scripts: Rewrite ``/JS`` text for the browser, or keep it verbatim
        deterministic_radio_fallback: Derive the synthetic radio export value
            from the widget's reference instead of a random number
    """

    page_numbers: list[int] | None = None
    intent: str = "display"
    translate_scripts: bool = True
    deterministic_radio_fallback: bool = True

    def __post_init__(self) -> None:
        if self.intent not in INTENTS:
            raise ValueError(f"intent must be one of {', '.join(INTENTS)}, got {self.intent!r}")
        if self.page_numbers is not None:
            self.page_numbers = sorted(set(self.page_numbers))


@dataclass
class DecodeContext:
    """Holds the object graph and options shared by every builder in a pass."""

    graph: ObjectGraph | None = None
    options: DecodeOptions = field(default_factory=DecodeOptions)

    def with_updates(
        self,
        *,
        graph: ObjectGraph | None = None,
        options: DecodeOptions | None = None,
    ) -> "DecodeContext":
        return DecodeContext(
            graph=graph or self.graph,
            options=options or self.options,
        )
