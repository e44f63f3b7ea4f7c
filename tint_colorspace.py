# -*- coding: utf-8 -*-
"""
Tint: The arithmetic of color between devices and tristimulus space
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

RGB Color Spaces
================
Builds RGB <-> XYZ transforms from three chromaticity primaries and a white
point, and composes them with the encoding curves of ``tint_encoding``.

Derivation (forward matrix M, RGB -> XYZ):
    1. Each primary (x, y) becomes the column (x/y, 1, (1 - x - y)/y).
    2. The three columns form the primary matrix P.
    3. S = P^-1 · W, with W the white point XYZ.
    4. M is P with column j scaled by S[j]; the inverse transform is M^-1.

By construction M · (1, 1, 1) = W, and each pure primary maps onto its own
chromaticity scaled to the white balance.

Singularity is tested exactly (determinant == 0), so only truly degenerate
primaries are rejected. A primary matrix that is merely close to singular is
accepted but raises an ``IllConditionedWarning``, since its transforms may
carry large errors.

Both matrices are computed once per color space and cached on the (immutable)
``ColorSpace`` value. ``ColorSpace.new_with_transforms`` takes precomputed
matrices as given; their correctness is the caller's responsibility.
"""

import dataclasses
import functools
import re
import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, Final, Optional, Tuple, Union

import numpy as np

from tint_cast import ChannelFormat, intermediate_float
from tint_color import Rgb, Rgba, Xyz, Xyza
from tint_encoding import (
    LINEAR,
    SRGB,
    ColorEncoding,
    EncodedColor,
    GammaEncoding,
)
from tint_matrix import Matrix3, SingularMatrixError
from tint_whitepoint import D50, D65, E, WhitePointLike, white_point_xyz

__all__ = [
    # --- Errors & warnings ---
    "ColorSpaceMismatchError",
    "IllConditionedWarning",

    # --- Builder ---
    "RgbPrimary",
    "build_transform",
    "ColorSpace",
    "SpacedColor",

    # --- Presets ---
    "SRGB_SPACE",
    "ADOBE_RGB",
    "APPLE_RGB",
    "PROPHOTO_RGB",
    "CIE_RGB",
    "get_color_space",
    "list_color_spaces",
]

PrimaryLike = Union["RgbPrimary", Tuple[float, float]]

# Condition number of the primary matrix above which a warning is issued.
_ILL_CONDITIONED_LIMIT: Final[float] = 1e12

# Tristimulus counterpart of each RGB model, and back.
_XYZ_MODEL_FOR: Final[Dict[type, type]] = {Rgb: Xyz, Rgba: Xyza}
_RGB_MODEL_FOR: Final[Dict[type, type]] = {Xyz: Rgb, Xyza: Rgba}


class ColorSpaceMismatchError(ValueError):
    """Two colors were combined although they live in different color spaces."""


class IllConditionedWarning(RuntimeWarning):
    """The primaries are invertible but numerically close to degenerate."""


# =============================================================================
# 1. PRIMARIES & BUILDER
# =============================================================================

@dataclass(slots=True, frozen=True)
class RgbPrimary:
    """A primary's chromaticity coordinates."""
    x: float
    y: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))
        if not (np.isfinite(self.x) and np.isfinite(self.y)):
            raise ValueError(f"Primary coordinates must be finite, got ({self.x}, {self.y})")
        if self.y == 0.0:
            raise ValueError(f"Primary y coordinate must be non-zero, got ({self.x}, {self.y})")

    @classmethod
    def coerce(cls, value: PrimaryLike) -> "RgbPrimary":
        if isinstance(value, RgbPrimary):
            return value
        x, y = value
        return cls(x, y)

    def to_tuple(self) -> Tuple[float, float]:
        return self.x, self.y

    def homogeneous(self) -> Tuple[float, float, float]:
        """The tristimulus vector of this chromaticity at unit luminance."""
        return self.x / self.y, 1.0, (1.0 - self.x - self.y) / self.y


@functools.lru_cache(maxsize=32)
def _cached_transform(red: Tuple[float, float], green: Tuple[float, float],
                      blue: Tuple[float, float], white: Tuple[float, float, float],
                      dtype_str: str) -> Tuple[Matrix3, Matrix3, float]:
    """
    Cached worker deriving the forward and inverse matrices, plus the
    condition number of the primary matrix.
    """
    dtype = np.dtype(dtype_str)
    columns = [RgbPrimary(*p).homogeneous() for p in (red, green, blue)]
    primaries = Matrix3.from_columns(*columns, dtype=dtype)

    primaries_inv = primaries.inverse()
    if primaries_inv is None:
        raise SingularMatrixError(
            f"Primaries {red}, {green}, {blue} are not linearly independent"
        )
    cond = float(np.linalg.cond(primaries.to_array().astype(np.float64)))

    scales = primaries_inv.transform_vector(np.asarray(white, dtype=dtype))
    forward = primaries.scale_columns(scales)
    inverse = forward.inverse()
    if inverse is None:
        raise SingularMatrixError(f"RGB -> XYZ matrix is singular for white point {white}")
    return forward, inverse, cond


def _derive_transform(red: RgbPrimary, green: RgbPrimary, blue: RgbPrimary,
                      white: Tuple[float, float, float],
                      dtype: object) -> Tuple[Matrix3, Matrix3]:
    # The warning is issued here, outside the cache, so every build reports it.
    forward, inverse, cond = _cached_transform(
        red.to_tuple(), green.to_tuple(), blue.to_tuple(), white,
        ChannelFormat.of(dtype).dtype.str,
    )
    if cond > _ILL_CONDITIONED_LIMIT:
        warnings.warn(
            f"Primaries {red.to_tuple()}, {green.to_tuple()}, {blue.to_tuple()} give a "
            f"nearly singular primary matrix (condition number {cond:.3g}); "
            f"transforms may be inaccurate.",
            IllConditionedWarning,
            stacklevel=3,
        )
    return forward, inverse


def build_transform(red: PrimaryLike, green: PrimaryLike, blue: PrimaryLike,
                    white_point: WhitePointLike, dtype: object = np.float64) -> Matrix3:
    """
    Derive the RGB -> XYZ matrix for the given primaries and white point.

    Raises:
        SingularMatrixError: If the primaries (or the resulting matrix) are singular.

    Warns:
        IllConditionedWarning: If the primary matrix is nearly singular.
    """
    forward, _ = _derive_transform(
        RgbPrimary.coerce(red), RgbPrimary.coerce(green), RgbPrimary.coerce(blue),
        white_point_xyz(white_point), dtype,
    )
    return forward


# =============================================================================
# 2. COLOR SPACE
# =============================================================================

@dataclass(slots=True, frozen=True)
class ColorSpace:
    """
    An RGB color space: primaries, white point, encoding, and its two
    cached transform matrices.

    Use ``ColorSpace.new`` to derive the matrices or
    ``ColorSpace.new_with_transforms`` to supply them.
    """
    red:         RgbPrimary
    green:       RgbPrimary
    blue:        RgbPrimary
    white_point: Tuple[float, float, float]
    encoding:    ColorEncoding
    forward:     Matrix3
    inverse:     Matrix3
    name:        str = field(default="", compare=False)

    # --- Construction ---

    @classmethod
    def new(cls, red: PrimaryLike, green: PrimaryLike, blue: PrimaryLike,
            white_point: WhitePointLike, encoding: ColorEncoding = LINEAR,
            name: str = "", dtype: object = np.float64) -> "ColorSpace":
        """
        Build a color space, deriving both transform matrices.

        Args:
            red, green, blue: Primary chromaticities, ``RgbPrimary`` or (x, y).
            white_point: XYZ triple, ``Xyz`` sample or ``WhitePoint``.
            encoding: Transfer curve of the space's RGB values.
            name: Display name.
            dtype: Matrix precision (float32 or float64).

        Raises:
            SingularMatrixError: If the configuration has no inverse.

        Warns:
            IllConditionedWarning: On every build from nearly singular primaries.
        """
        r, g, b = (RgbPrimary.coerce(p) for p in (red, green, blue))
        white = white_point_xyz(white_point)
        forward, inverse = _derive_transform(r, g, b, white, dtype)
        return cls(r, g, b, white, encoding, forward, inverse, name)

    @classmethod
    def new_with_transforms(cls, red: PrimaryLike, green: PrimaryLike, blue: PrimaryLike,
                            white_point: WhitePointLike, encoding: ColorEncoding,
                            forward: Matrix3, inverse: Matrix3,
                            name: str = "") -> "ColorSpace":
        """Build a color space from precomputed matrices. Nothing is verified."""
        r, g, b = (RgbPrimary.coerce(p) for p in (red, green, blue))
        return cls(r, g, b, white_point_xyz(white_point), encoding, forward, inverse, name)

    def with_encoding(self, encoding: ColorEncoding) -> "ColorSpace":
        """Same primaries and matrices, different transfer curve."""
        return dataclasses.replace(self, encoding=encoding)

    # --- Accessors ---

    @property
    def primaries(self) -> Tuple[RgbPrimary, RgbPrimary, RgbPrimary]:
        return self.red, self.green, self.blue

    def white_point_xyz(self) -> Xyz:
        return Xyz(*self.white_point)

    def build_transform(self) -> Matrix3:
        """Re-derive the forward matrix from the primaries and white point."""
        return build_transform(self.red, self.green, self.blue, self.white_point,
                               self.forward.dtype)

    def apply_transform(self, vec: Any) -> np.ndarray:
        """Forward-transform raw linear RGB vectors of shape (..., 3)."""
        return self.forward.transform_vector(vec)

    # --- Facade ---

    def convert_to_xyz(self, color: EncodedColor) -> Union[Xyz, Xyza]:
        """
        Decode an encoded RGB color and map it to XYZ.

        Integer channels are channel-cast to float64 first; float channels keep
        their precision. Alpha is carried through unchanged.
        """
        if not isinstance(color, EncodedColor):
            raise TypeError(
                f"convert_to_xyz expects an EncodedColor, got {type(color).__name__}; "
                f"tag it with .encoded_as(...) first"
            )
        rgb = color.color
        model = _XYZ_MODEL_FOR.get(type(rgb))
        if model is None:
            raise TypeError(f"Cannot convert {type(rgb).__name__} to XYZ")

        fmt = intermediate_float(rgb.format)
        if fmt is not rgb.format:
            rgb = rgb.color_cast(fmt)
        linear = EncodedColor(rgb, color.encoding).decode().color.channels

        xyz = self.forward.transform_vector(linear[..., :3], out=fmt)
        return model._wrap(np.concatenate([xyz, linear[..., 3:]], axis=-1))

    def convert_from_xyz_raw(self, xyz: Union[Xyz, Xyza]) -> Union[Rgb, Rgba]:
        """Map XYZ to linear RGB without attaching an encoding."""
        model = _RGB_MODEL_FOR.get(type(xyz))
        if model is None:
            raise TypeError(f"Cannot convert {type(xyz).__name__} to RGB")
        channels = xyz.channels
        rgb = self.inverse.transform_vector(channels[..., :3], out=xyz.format)
        return model._wrap(np.concatenate([rgb, channels[..., 3:]], axis=-1))

    def convert_from_xyz_linear(self, xyz: Union[Xyz, Xyza]) -> EncodedColor:
        """Map XYZ to RGB tagged Linear, ignoring the space's own encoding."""
        return EncodedColor(self.convert_from_xyz_raw(xyz), LINEAR)

    def convert_from_xyz(self, xyz: Union[Xyz, Xyza]) -> EncodedColor:
        """Map XYZ to RGB encoded with the space's encoding."""
        return self.convert_from_xyz_linear(xyz).encode(self.encoding)

    def __str__(self) -> str:
        if self.name:
            return self.name
        return (f"ColorSpace(r={self.red.to_tuple()}, g={self.green.to_tuple()}, "
                f"b={self.blue.to_tuple()}, white={self.white_point}, {self.encoding})")


# =============================================================================
# 3. SPACED COLOR
# =============================================================================

@dataclass(slots=True, frozen=True)
class SpacedColor:
    """An encoded color together with the color space it is expressed in."""
    color: EncodedColor
    space: ColorSpace

    def __post_init__(self) -> None:
        if not isinstance(self.color, EncodedColor):
            raise TypeError(f"SpacedColor wraps an EncodedColor, got {type(self.color).__name__}")
        if not isinstance(self.space, ColorSpace):
            raise TypeError(f"Expected a ColorSpace, got {type(self.space).__name__}")

    # --- Construction ---

    @classmethod
    def from_tuple(cls, values: Tuple[Any, ...], encoding: ColorEncoding, space: ColorSpace,
                   model: type = Rgb, fmt: Optional[object] = None) -> "SpacedColor":
        return cls(EncodedColor.from_tuple(values, encoding, model, fmt), space)

    @classmethod
    def broadcast(cls, value: Any, encoding: ColorEncoding, space: ColorSpace,
                  model: type = Rgb, fmt: Optional[object] = None) -> "SpacedColor":
        return cls(EncodedColor.broadcast(value, encoding, model, fmt), space)

    @classmethod
    def from_xyz(cls, xyz: Union[Xyz, Xyza], space: ColorSpace) -> "SpacedColor":
        """RGB in ``space``, encoded with the space's own encoding."""
        return cls(space.convert_from_xyz(xyz), space)

    # --- Accessors ---

    def decompose(self) -> Tuple[EncodedColor, ColorSpace]:
        return self.color, self.space

    def strip_space(self) -> EncodedColor:
        return self.color

    def strip(self) -> Any:
        """The bare color sample, dropping both encoding and space."""
        return self.color.color

    @property
    def encoding(self) -> ColorEncoding:
        return self.color.encoding

    @property
    def channels(self) -> np.ndarray:
        return self.color.channels

    def to_tuple(self) -> Tuple[Any, ...]:
        return self.color.to_tuple()

    def to_xyz(self) -> Union[Xyz, Xyza]:
        return self.space.convert_to_xyz(self.color)

    # --- Delegated capabilities ---

    def lerp(self, other: "SpacedColor", pos: float) -> "SpacedColor":
        """
        Interpolate two colors of the same color space.

        Raises:
            ColorSpaceMismatchError: If the spaces differ.
        """
        if self.space != other.space:
            raise ColorSpaceMismatchError(
                f"Tried to interpolate between two different color spaces: "
                f"{self.space} and {other.space}"
            )
        return SpacedColor(self.color.lerp(other.color, pos), self.space)

    def invert(self) -> "SpacedColor":
        return SpacedColor(self.color.invert(), self.space)

    def normalize(self) -> "SpacedColor":
        return SpacedColor(self.color.normalize(), self.space)

    def is_normalized(self) -> bool:
        return self.color.is_normalized()

    def is_close(self, other: "SpacedColor", atol: float = 1e-8, rtol: float = 0.0) -> bool:
        return self.space == other.space and self.color.is_close(other.color, atol, rtol)

    def __str__(self) -> str:
        return f"{self.color} in {self.space}"


# =============================================================================
# 4. NAMED PRESETS
# =============================================================================
# sRGB ships the published reference matrices (IEC 61966-2-1); the others are
# derived from their primaries at import.

SRGB_SPACE: Final[ColorSpace] = ColorSpace.new_with_transforms(
    (0.6400, 0.3300), (0.300, 0.600), (0.150, 0.060),
    D65,
    SRGB,
    Matrix3([
        0.41245643908969226, 0.3575760776439089, 0.1804374832663989,
        0.21267285140562256, 0.7151521552878178, 0.07217499330655956,
        0.019333895582329303, 0.11919202588130294, 0.9503040785363677,
    ]),
    Matrix3([
        3.2404541621141036, -1.537138512797716, -0.49853140955601594,
        -0.9692660305051867, 1.8760108454466942, 0.04155601753034982,
        0.05564343095911471, -0.20402591351675378, 1.0572251882231791,
    ]),
    name="sRGB",
)

# Adobe RGB (1998) specifies gamma 563/256.
ADOBE_RGB: Final[ColorSpace] = ColorSpace.new(
    (0.6400, 0.3300), (0.2100, 0.7100), (0.1500, 0.0600),
    D65, GammaEncoding(563.0 / 256.0), name="Adobe RGB (1998)",
)

APPLE_RGB: Final[ColorSpace] = ColorSpace.new(
    (0.6250, 0.3400), (0.2800, 0.5950), (0.1550, 0.0700),
    D65, GammaEncoding(1.8), name="Apple RGB",
)

PROPHOTO_RGB: Final[ColorSpace] = ColorSpace.new(
    (0.7347, 0.2653), (0.1596, 0.8404), (0.0366, 0.0001),
    D50, GammaEncoding(1.8), name="ProPhoto RGB",
)

CIE_RGB: Final[ColorSpace] = ColorSpace.new(
    (0.7350, 0.2650), (0.2740, 0.7170), (0.1670, 0.0090),
    E, GammaEncoding(2.2), name="CIE RGB",
)

_NAMED_SPACES: Final[Dict[str, ColorSpace]] = {
    "srgb": SRGB_SPACE,
    "adobergb": ADOBE_RGB,
    "adobergb1998": ADOBE_RGB,
    "applergb": APPLE_RGB,
    "prophotorgb": PROPHOTO_RGB,
    "ciergb": CIE_RGB,
}


def _space_key(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "", name.lower())


def get_color_space(name: str) -> ColorSpace:
    """
    Look up a named preset. Case, spaces and punctuation are ignored, so
    ``"Adobe RGB (1998)"``, ``"adobe_rgb"`` and ``"AdobeRGB"`` all match.

    Raises:
        KeyError: For an unknown name.
    """
    try:
        return _NAMED_SPACES[_space_key(name)]
    except KeyError:
        raise KeyError(
            f"Unknown color space '{name}'. Available: {', '.join(list_color_spaces())}"
        ) from None


def list_color_spaces() -> Tuple[str, ...]:
    """Display names of the presets, without aliases."""
    seen: Dict[int, str] = {}
    for space in _NAMED_SPACES.values():
        seen.setdefault(id(space), space.name)
    return tuple(seen.values())
