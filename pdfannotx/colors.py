"""Conversion of annotation color arrays to 8-bit RGB."""

from __future__ import annotations

from typing import Any, Sequence

from pypdf.generic import ArrayObject

from .objects import resolve
from .utils import is_number

__all__ = ["BLACK", "resolve_color", "gray_to_rgb", "rgb_to_rgb", "cmyk_to_rgb"]

BLACK: tuple[int, int, int] = (0, 0, 0)


def _clamp(value: float) -> int:
    # Truncate towards zero first, the same way a Uint8 store of ``x | 0`` does.
    truncated = int(value)
    if truncated < 0:
        return 0
    if truncated > 255:
        return 255
    return truncated


def _components(color: Sequence[Any]) -> list[float]:
    values: list[float] = []
    for item in color:
        item = resolve(item)
        values.append(float(item) if is_number(item) else 0.0)
    return values


def gray_to_rgb(components: Sequence[float]) -> tuple[int, int, int]:
    level = _clamp(components[0] * 255)
    return (level, level, level)


def rgb_to_rgb(components: Sequence[float]) -> tuple[int, int, int]:
    return (
        _clamp(components[0] * 255),
        _clamp(components[1] * 255),
        _clamp(components[2] * 255),
    )


def cmyk_to_rgb(components: Sequence[float]) -> tuple[int, int, int]:
    """Polynomial DeviceCMYK approximation of a US Web Coated (SWOP) profile."""

    c, m, y, k = components[0], components[1], components[2], components[3]
    r = (
        c * (-4.387332384609988 * c + 54.48615194189176 * m
             + 18.82290502165302 * y + 212.25662451639585 * k - 285.2331026137004)
        + m * (1.7149763477362134 * m - 5.6096736904047315 * y
               - 17.873870861415444 * k - 5.497006427196366)
        + y * (-2.5217340131683033 * y - 21.248923337353073 * k + 17.5119270841813)
        + k * (-21.86122147463605 * k - 189.48180835922747)
        + 255
    )
    g = (
        c * (8.841041422036149 * c + 60.118027045597366 * m
             + 6.871425592049007 * y + 31.159100130055922 * k - 79.2970844816548)
        + m * (-15.310361306967817 * m + 17.575251261109482 * y
               + 131.35250912493976 * k - 190.9453302588951)
        + y * (4.444339102852739 * y + 9.8632861493405 * k - 24.86741582555878)
        + k * (-20.737325471181034 * k - 187.80453709719578)
        + 255
    )
    b = (
        c * (0.8842522430003296 * c + 8.078677503112928 * m
             + 30.89978309703729 * y - 0.23883238689178934 * k - 14.183576799673286)
        + m * (10.49593273432072 * m + 63.02378494754052 * y
               + 50.606957656360734 * k - 112.23884253719248)
        + y * (0.03296041114873217 * y + 115.60384449646641 * k - 193.58209356861505)
        + k * (-22.33816807309886 * k - 180.12613974708367)
        + 255
    )
    return (_clamp(r), _clamp(g), _clamp(b))


def resolve_color(color: Any) -> tuple[int, int, int] | None:
    """
    Resolve a ``/C`` style color array.

    Args:
        color: Color array with 0 (transparent), 1 (gray), 3 (RGB) or
            4 (CMYK) components

    Returns:
        RGB triple, ``None`` for an empty (transparent) array, black for
        anything that is not an array or has an unsupported length
    """

    color = resolve(color)
    if not isinstance(color, (ArrayObject, list, tuple)):
        return BLACK

    length = len(color)
    if length == 0:
        return None
    if length == 1:
        return gray_to_rgb(_components(color))
    if length == 3:
        return rgb_to_rgb(_components(color))
    if length == 4:
        return cmyk_to_rgb(_components(color))
    return BLACK
