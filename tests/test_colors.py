from __future__ import annotations

import pytest
from pypdf.generic import NameObject

from pdfannotx.colors import BLACK, cmyk_to_rgb, resolve_color

from conftest import pdf_object


def test_empty_color_array_is_transparent() -> None:
    assert resolve_color(pdf_object([])) is None


@pytest.mark.parametrize(
    ("components", "expected"),
    [
        ([0], (0, 0, 0)),
        ([1], (255, 255, 255)),
        ([0.5], (127, 127, 127)),
        ([1, 0, 0], (255, 0, 0)),
        ([0, 0.5, 1], (0, 127, 255)),
    ],
)
def test_gray_and_rgb_components(components, expected) -> None:
    assert resolve_color(pdf_object(components)) == expected


def test_rgb_components_are_clamped() -> None:
    assert resolve_color(pdf_object([2, -1, 0.25])) == (255, 0, 63)


def test_cmyk_white_and_black() -> None:
    assert resolve_color(pdf_object([0, 0, 0, 0])) == (255, 255, 255)
    red, green, blue = resolve_color(pdf_object([0, 0, 0, 1]))
    assert max(red, green, blue) < 60


def test_cmyk_is_deterministic() -> None:
    first = cmyk_to_rgb([0.1, 0.7, 0.2, 0.05])
    second = resolve_color(pdf_object([0.1, 0.7, 0.2, 0.05]))
    assert first == second
    assert all(0 <= channel <= 255 for channel in first)


@pytest.mark.parametrize("components", [[0, 0], [0, 0, 0, 0, 0], [1, 1, 1, 1, 1, 1]])
def test_unsupported_lengths_fall_back_to_black(components) -> None:
    assert resolve_color(pdf_object(components)) == BLACK


def test_non_array_values_are_black() -> None:
    assert resolve_color(None) == BLACK
    assert resolve_color(NameObject("/Red")) == BLACK
