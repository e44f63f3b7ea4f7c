# -*- coding: utf-8 -*-
"""
Tint: The arithmetic of color between devices and tristimulus space
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Standard Illuminant White Points
================================
Tristimulus (Y = 1) and chromaticity values of the CIE standard illuminants
for the 2° (CIE 1931) and 10° (CIE 1964) standard observers.

These are plain constant tables, not computed.

References:
    - Lindbloom, B. "Chromatic Adaptation / Illuminants", www.brucelindbloom.com
    - CIE 15:2004 "Colorimetry"
"""

from dataclasses import dataclass
from typing import Dict, Final, Sequence, Tuple, Union

from tint_color import XyY, Xyz

__all__ = [
    "WhitePoint",
    "WHITE_POINTS_2DEG",
    "WHITE_POINTS_10DEG",
    "OBSERVERS",
    "get_white_point",
    "list_white_points",
    "WhitePointLike",
    "white_point_xyz",
    "A",
    "D50",
    "D65",
    "E",
]


@dataclass(slots=True, frozen=True)
class WhitePoint:
    """One named illuminant as seen by one standard observer."""
    name:          str
    xyz:           Tuple[float, float, float]
    chromaticity:  Tuple[float, float]
    description:   str
    observer:      int = 2

    def to_xyz(self) -> Xyz:
        return Xyz(*self.xyz)

    def to_xyy(self) -> XyY:
        """Chromaticity with unit luminance."""
        return XyY(self.chromaticity[0], self.chromaticity[1], 1.0)

    def __str__(self) -> str:
        return f"{self.name} ({self.observer}°): {self.description}"


# ---------------------------------------------------------------------------
# Raw tables: name -> (X, Y, Z, x, y)
# ---------------------------------------------------------------------------
_DESCRIPTIONS: Final[Dict[str, str]] = {
    "A":   "Incandescent / Tungsten",
    "B":   "{obsolete} Direct sunlight at noon",
    "C":   "{obsolete} Average / North sky Daylight",
    "D50": "Horizon Light. ICC profile PCS",
    "D55": "Mid-morning / Mid-afternoon Daylight",
    "D65": "Noon Daylight: Television, sRGB color space",
    "D75": "North sky Daylight",
    "E":   "Equal energy",
    "F1":  "Daylight Fluorescent",
    "F2":  "Cool White Fluorescent",
    "F3":  "White Fluorescent",
    "F4":  "Warm White Fluorescent",
    "F5":  "Daylight Fluorescent",
    "F6":  "Lite White Fluorescent",
    "F7":  "D65 simulator, Daylight simulator",
    "F8":  "D50 simulator, Sylvania F40 Design 50",
    "F9":  "Cool White Deluxe Fluorescent",
    "F10": "Philips TL85, Ultralume 50",
    "F11": "Philips TL84, Ultralume 40",
    "F12": "Philips TL83, Ultralume 30",
}

_TABLE_2DEG: Final[Dict[str, Tuple[float, float, float, float, float]]] = {
    "A":   (1.09850,  1.0, 0.35585,  0.44757, 0.40745),
    "B":   (0.99072,  1.0, 0.85223,  0.34842, 0.35161),
    "C":   (0.98074,  1.0, 1.18232,  0.31006, 0.31616),
    "D50": (0.96422,  1.0, 0.82521,  0.34567, 0.3585),
    "D55": (0.95682,  1.0, 0.92149,  0.33242, 0.34743),
    "D65": (0.95047,  1.0, 1.08883,  0.31271, 0.32902),
    "D75": (0.94972,  1.0, 1.22638,  0.29902, 0.31485),
    "E":   (1.0,      1.0, 1.000030, 1.0 / 3.0, 1.0 / 3.0),
    "F1":  (0.928336, 1.0, 1.036647, 0.3131,  0.33727),
    "F2":  (0.99186,  1.0, 0.67393,  0.37208, 0.37529),
    "F3":  (1.037535, 1.0, 0.498605, 0.4091,  0.3943),
    "F4":  (1.091473, 1.0, 0.388133, 0.44018, 0.40329),
    "F5":  (0.908720, 1.0, 0.987229, 0.31379, 0.34531),
    "F6":  (0.973091, 1.0, 0.601905, 0.3779,  0.38835),
    "F7":  (0.95041,  1.0, 1.08747,  0.31292, 0.32933),
    "F8":  (0.964125, 1.0, 0.823331, 0.34588, 0.35875),
    "F9":  (1.003648, 1.0, 0.678684, 0.37417, 0.37281),
    "F10": (0.961735, 1.0, 0.817123, 0.34609, 0.35986),
    "F11": (1.00962,  1.0, 0.64350,  0.38052, 0.37713),
    "F12": (1.080463, 1.0, 0.392275, 0.43695, 0.40441),
}

_TABLE_10DEG: Final[Dict[str, Tuple[float, float, float, float, float]]] = {
    "A":   (1.111420, 1.0, 0.351998, 0.45117, 0.40594),
    "B":   (0.991778, 1.0, 0.843493, 0.3498,  0.3527),
    "C":   (0.972857, 1.0, 1.161448, 0.31039, 0.31905),
    "D50": (0.967206, 1.0, 0.814280, 0.34773, 0.35952),
    "D55": (0.957967, 1.0, 0.909253, 0.33411, 0.34877),
    "D65": (0.948097, 1.0, 1.073051, 0.31382, 0.331),
    "D75": (0.944171, 1.0, 1.206427, 0.29968, 0.3174),
    "E":   (1.0,      1.0, 1.000030, 0.33333, 0.33333),
    "F1":  (0.947913, 1.0, 1.031914, 0.31811, 0.33559),
    "F2":  (1.032450, 1.0, 0.689897, 0.37925, 0.36733),
    "F3":  (1.089683, 1.0, 0.519648, 0.41761, 0.38324),
    "F4":  (1.149614, 1.0, 0.409633, 0.4492,  0.39074),
    "F5":  (0.933686, 1.0, 0.986363, 0.31975, 0.34246),
    "F6":  (1.021481, 1.0, 0.620736, 0.3866,  0.37847),
    "F7":  (0.957797, 1.0, 1.076183, 0.31569, 0.3296),
    "F8":  (0.971146, 1.0, 0.811347, 0.34902, 0.35939),
    "F9":  (1.021163, 1.0, 0.678256, 0.37829, 0.37045),
    "F10": (0.990012, 1.0, 0.831340, 0.3509,  0.35444),
    "F11": (1.038197, 1.0, 0.655550, 0.38541, 0.37123),
    "F12": (1.114284, 1.0, 0.403530, 0.44256, 0.39717),
}


def _build(table: Dict[str, Tuple[float, float, float, float, float]],
           observer: int) -> Dict[str, WhitePoint]:
    return {
        name: WhitePoint(name, (X, Y, Z), (x, y), _DESCRIPTIONS[name], observer)
        for name, (X, Y, Z, x, y) in table.items()
    }


WHITE_POINTS_2DEG: Final[Dict[str, WhitePoint]] = _build(_TABLE_2DEG, 2)
WHITE_POINTS_10DEG: Final[Dict[str, WhitePoint]] = _build(_TABLE_10DEG, 10)

OBSERVERS: Final[Dict[int, Dict[str, WhitePoint]]] = {
    2: WHITE_POINTS_2DEG,
    10: WHITE_POINTS_10DEG,
}


def get_white_point(name: str, observer: int = 2) -> WhitePoint:
    """
    Look up a standard illuminant.

    Args:
        name: Illuminant name, case-insensitive (``"D65"``, ``"f11"``, ...).
        observer: 2 (CIE 1931) or 10 (CIE 1964).

    Raises:
        ValueError: For an unsupported observer.
        KeyError: For an unknown illuminant.
    """
    try:
        table = OBSERVERS[observer]
    except KeyError:
        raise ValueError(f"Unknown observer {observer}°; expected one of {sorted(OBSERVERS)}") from None
    key = name.upper()
    if key not in table:
        raise KeyError(f"Unknown illuminant '{name}'. Available: {', '.join(table)}")
    return table[key]


def list_white_points() -> Tuple[str, ...]:
    return tuple(_TABLE_2DEG)


# Shortcuts (2° observer)
A: Final[WhitePoint] = WHITE_POINTS_2DEG["A"]
D50: Final[WhitePoint] = WHITE_POINTS_2DEG["D50"]
D65: Final[WhitePoint] = WHITE_POINTS_2DEG["D65"]
E: Final[WhitePoint] = WHITE_POINTS_2DEG["E"]


WhitePointLike = Union[WhitePoint, Xyz, Sequence[float]]


def white_point_xyz(white_point: WhitePointLike) -> Tuple[float, float, float]:
    """
    Tristimulus triple of a ``WhitePoint``, a single ``Xyz`` sample or any
    3-sequence.

    Raises:
        ValueError: For a batch of samples or a sequence of the wrong length.
    """
    if isinstance(white_point, WhitePoint):
        return tuple(float(v) for v in white_point.xyz)  # type: ignore[return-value]
    if isinstance(white_point, Xyz):
        if white_point.is_batch:
            raise ValueError("White point must be a single XYZ sample")
        return tuple(float(v) for v in white_point.to_tuple())  # type: ignore[return-value]
    values = tuple(float(v) for v in white_point)
    if len(values) != 3:
        raise ValueError(f"White point must have 3 components, got {len(values)}")
    return values  # type: ignore[return-value]
