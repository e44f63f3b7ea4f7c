# -*- coding: utf-8 -*-
"""
Tint: The arithmetic of color between devices and tristimulus space
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Encoding Layer
==============
Per-channel transfer curves between linear light and encoded values, and the
``EncodedColor`` wrapper that tags a color sample with the curve its channels
are expressed in.

Curves:
    - Linear: identity both ways.
    - Gamma(γ): encode ``v**(1/γ)``, decode ``v**γ``.
    - sRGB (IEC 61966-2-1): a linear toe joined to a 2.4 power segment.
      Decode switches at 0.04045, encode at 0.0031308. The thresholds differ
      because each is the image of the other under the curve.

Every curve is extended to negative input by odd symmetry,
``f(-v) = -f(v)``, so out-of-gamut values survive a round trip.

Encoding a color casts its three color channels to float64, applies the
curve, and casts back to the original channel format. An alpha channel, if
present, is never touched.

``decode()`` always yields a Linear-tagged color, and ``encode()`` is only
defined on Linear colors. Going from one nonlinear curve to another is
``transcode()``, which is ``decode().encode(new)``.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Final, Optional, Tuple

import numpy as np
from numba import njit

from tint_cast import ChannelFormat, ChannelValue, cast

__all__ = [
    # --- Constants ---
    "SRGB_DECODE_THRESHOLD",
    "SRGB_ENCODE_THRESHOLD",
    "DEFAULT_GAMMA",

    # --- Configuration ---
    "set_strict_ieee",
    "is_strict_ieee",

    # --- Errors ---
    "EncodingMismatchError",

    # --- Encodings ---
    "ColorEncoding",
    "LinearEncoding",
    "SrgbEncoding",
    "GammaEncoding",
    "LINEAR",
    "SRGB",

    # --- Colors ---
    "Encodable",
    "EncodedColor",
]

# --- Constants ---
SRGB_DECODE_THRESHOLD: Final[float] = 0.04045
SRGB_ENCODE_THRESHOLD: Final[float] = 0.0031308
_SRGB_SLOPE: Final[float] = 12.92
_SRGB_OFFSET: Final[float] = 0.055
_SRGB_SCALE: Final[float] = 1.055
_SRGB_EXPONENT: Final[float] = 2.4
DEFAULT_GAMMA: Final[float] = 2.2

# Number of leading channels a curve applies to; anything after is alpha.
_COLOR_CHANNELS: Final[int] = 3


# --- Runtime Configuration ---
# When True, the curve kernels run their fastmath=False twins, which keep
# strict IEEE 754 semantics (inf / NaN propagation, no FP reassociation).
#
# Toggle at runtime via:
#     import tint_encoding
#     tint_encoding.set_strict_ieee(True)   # strict mode
#     tint_encoding.set_strict_ieee(False)  # back to fast mode (default)
_STRICT_IEEE: bool = False


def set_strict_ieee(enabled: bool = True) -> None:
    """
    Toggle between fast (default) and strict IEEE 754 Numba kernels.

    Args:
        enabled: If True, use strict IEEE mode for every transfer curve.
    """
    global _STRICT_IEEE
    _STRICT_IEEE = bool(enabled)


def is_strict_ieee() -> bool:
    return _STRICT_IEEE


class EncodingMismatchError(ValueError):
    """An operation needed a particular encoding (or two equal ones) and did not get it."""


# =============================================================================
# 1. CURVE KERNELS (Numba Optimized)
# =============================================================================
# Kernels take a C-contiguous float64 array of any shape and return a new one.

@njit(cache=True, fastmath=True)
def _srgb_encode_kernel(linear: np.ndarray) -> np.ndarray:
    """sRGB OETF, odd-symmetric."""
    out = np.empty_like(linear)
    linear_flat = linear.ravel()
    out_flat = out.ravel()
    for i in range(linear.size):
        v = linear_flat[i]
        a = abs(v)
        if a < SRGB_ENCODE_THRESHOLD:
            out_flat[i] = _SRGB_SLOPE * v
        else:
            out_flat[i] = math.copysign(_SRGB_SCALE * a ** (1.0 / _SRGB_EXPONENT) - _SRGB_OFFSET, v)
    return out


@njit(cache=True, fastmath=True)
def _srgb_decode_kernel(encoded: np.ndarray) -> np.ndarray:
    """sRGB EOTF, odd-symmetric."""
    out = np.empty_like(encoded)
    encoded_flat = encoded.ravel()
    out_flat = out.ravel()
    for i in range(encoded.size):
        v = encoded_flat[i]
        a = abs(v)
        if a < SRGB_DECODE_THRESHOLD:
            out_flat[i] = v / _SRGB_SLOPE
        else:
            out_flat[i] = math.copysign(((a + _SRGB_OFFSET) / _SRGB_SCALE) ** _SRGB_EXPONENT, v)
    return out


@njit(cache=True, fastmath=True)
def _power_kernel(values: np.ndarray, exponent: float) -> np.ndarray:
    """Odd-symmetric power law ``sign(v) * |v|**exponent``."""
    out = np.empty_like(values)
    values_flat = values.ravel()
    out_flat = out.ravel()
    for i in range(values.size):
        v = values_flat[i]
        out_flat[i] = math.copysign(abs(v) ** exponent, v)
    return out


# --- Strict IEEE 754 kernel variants (fastmath=False) ---

@njit(cache=True, fastmath=False)
def _srgb_encode_kernel_strict(linear: np.ndarray) -> np.ndarray:
    """sRGB OETF, strict IEEE 754 variant."""
    out = np.empty_like(linear)
    linear_flat = linear.ravel()
    out_flat = out.ravel()
    for i in range(linear.size):
        v = linear_flat[i]
        a = abs(v)
        if a < SRGB_ENCODE_THRESHOLD:
            out_flat[i] = _SRGB_SLOPE * v
        else:
            out_flat[i] = math.copysign(_SRGB_SCALE * a ** (1.0 / _SRGB_EXPONENT) - _SRGB_OFFSET, v)
    return out


@njit(cache=True, fastmath=False)
def _srgb_decode_kernel_strict(encoded: np.ndarray) -> np.ndarray:
    """sRGB EOTF, strict IEEE 754 variant."""
    out = np.empty_like(encoded)
    encoded_flat = encoded.ravel()
    out_flat = out.ravel()
    for i in range(encoded.size):
        v = encoded_flat[i]
        a = abs(v)
        if a < SRGB_DECODE_THRESHOLD:
            out_flat[i] = v / _SRGB_SLOPE
        else:
            out_flat[i] = math.copysign(((a + _SRGB_OFFSET) / _SRGB_SCALE) ** _SRGB_EXPONENT, v)
    return out


@njit(cache=True, fastmath=False)
def _power_kernel_strict(values: np.ndarray, exponent: float) -> np.ndarray:
    """Odd-symmetric power law, strict IEEE 754 variant."""
    out = np.empty_like(values)
    values_flat = values.ravel()
    out_flat = out.ravel()
    for i in range(values.size):
        v = values_flat[i]
        out_flat[i] = math.copysign(abs(v) ** exponent, v)
    return out


# --- Kernel dispatchers ---

def _srgb_encode(linear: np.ndarray) -> np.ndarray:
    if _STRICT_IEEE:
        return _srgb_encode_kernel_strict(linear)
    return _srgb_encode_kernel(linear)


def _srgb_decode(encoded: np.ndarray) -> np.ndarray:
    if _STRICT_IEEE:
        return _srgb_decode_kernel_strict(encoded)
    return _srgb_decode_kernel(encoded)


def _power(values: np.ndarray, exponent: float) -> np.ndarray:
    if _STRICT_IEEE:
        return _power_kernel_strict(values, exponent)
    return _power_kernel(values, exponent)


def _apply_curve(kernel: Callable[..., np.ndarray], values: ChannelValue, *args: Any) -> ChannelValue:
    """Run a curve kernel over a scalar or an array of any shape in float64."""
    arr = np.asarray(values, dtype=np.float64)
    flat = np.ascontiguousarray(arr.reshape(-1))
    out = kernel(flat, *args).reshape(arr.shape)
    return out[()] if arr.ndim == 0 else out


# =============================================================================
# 2. ENCODINGS
# =============================================================================

class ColorEncoding(ABC):
    """A pair of per-channel transfer functions over floating values."""

    __slots__ = ()

    @abstractmethod
    def encode_channel(self, values: ChannelValue) -> ChannelValue:
        """Linear -> encoded."""

    @abstractmethod
    def decode_channel(self, values: ChannelValue) -> ChannelValue:
        """Encoded -> linear."""

    @property
    def is_linear(self) -> bool:
        return False


@dataclass(slots=True, frozen=True)
class LinearEncoding(ColorEncoding):
    """Identity curve: the channels already hold linear light."""

    def encode_channel(self, values: ChannelValue) -> ChannelValue:
        return _apply_curve(np.copy, values)

    def decode_channel(self, values: ChannelValue) -> ChannelValue:
        return _apply_curve(np.copy, values)

    @property
    def is_linear(self) -> bool:
        return True

    def __str__(self) -> str:
        return "Linear"


@dataclass(slots=True, frozen=True)
class SrgbEncoding(ColorEncoding):
    """The IEC 61966-2-1 piecewise curve."""

    def encode_channel(self, values: ChannelValue) -> ChannelValue:
        return _apply_curve(_srgb_encode, values)

    def decode_channel(self, values: ChannelValue) -> ChannelValue:
        return _apply_curve(_srgb_decode, values)

    def __str__(self) -> str:
        return "sRgb"


@dataclass(slots=True, frozen=True)
class GammaEncoding(ColorEncoding):
    """Pure power-law curve with decode exponent ``exponent``."""
    exponent: float = DEFAULT_GAMMA

    def __post_init__(self) -> None:
        if not (math.isfinite(self.exponent) and self.exponent > 0.0):
            raise ValueError(f"Gamma exponent must be a positive finite number, got {self.exponent}")

    def encode_channel(self, values: ChannelValue) -> ChannelValue:
        return _apply_curve(_power, values, 1.0 / self.exponent)

    def decode_channel(self, values: ChannelValue) -> ChannelValue:
        return _apply_curve(_power, values, float(self.exponent))

    def __str__(self) -> str:
        return f"γ={self.exponent}"


LINEAR: Final[LinearEncoding] = LinearEncoding()
SRGB: Final[SrgbEncoding] = SrgbEncoding()


# =============================================================================
# 3. ENCODABLE CAPABILITY
# =============================================================================

class Encodable:
    """
    Mixin for color models whose channels can carry a transfer curve.

    The host class provides ``channels``, ``format`` and ``_with_channels``.
    """

    __slots__ = ()

    def _map_color_channels(self, curve: Callable[[np.ndarray], np.ndarray]) -> Any:
        fmt: ChannelFormat = self.format  # type: ignore[attr-defined]
        channels: np.ndarray = self.channels  # type: ignore[attr-defined]
        color = cast(channels[..., :_COLOR_CHANNELS], ChannelFormat.F64)
        mapped = cast(curve(color), fmt)
        out = np.concatenate([mapped, channels[..., _COLOR_CHANNELS:]], axis=-1)
        return self._with_channels(out)  # type: ignore[attr-defined]

    def encode_color(self, encoding: ColorEncoding) -> Any:
        """Apply ``encoding``'s encode curve to the color channels."""
        return self._map_color_channels(encoding.encode_channel)

    def decode_color(self, encoding: ColorEncoding) -> Any:
        """Apply ``encoding``'s decode curve to the color channels."""
        return self._map_color_channels(encoding.decode_channel)

    def encoded_as(self, encoding: ColorEncoding) -> "EncodedColor":
        """Tag the channels as already expressed in ``encoding`` (no math)."""
        return EncodedColor(self, encoding)

    def linear(self) -> "EncodedColor":
        return EncodedColor(self, LINEAR)

    def srgb_encoded(self) -> "EncodedColor":
        return EncodedColor(self, SRGB)

    def gamma_encoded(self, exponent: float = DEFAULT_GAMMA) -> "EncodedColor":
        return EncodedColor(self, GammaEncoding(exponent))


# =============================================================================
# 4. ENCODED COLOR
# =============================================================================

@dataclass(slots=True, frozen=True)
class EncodedColor:
    """A color sample paired with the encoding its channels are stored in."""
    color: Any
    encoding: ColorEncoding

    def __post_init__(self) -> None:
        if not isinstance(self.color, Encodable):
            raise TypeError(f"{type(self.color).__name__} does not support encodings")
        if not isinstance(self.encoding, ColorEncoding):
            raise TypeError(f"Expected a ColorEncoding, got {type(self.encoding).__name__}")

    # --- Construction ---

    @classmethod
    def from_tuple(cls, values: Tuple[Any, ...], encoding: ColorEncoding,
                   model: type, fmt: Optional[object] = None) -> "EncodedColor":
        return cls(model.from_tuple(values, fmt), encoding)

    @classmethod
    def broadcast(cls, value: Any, encoding: ColorEncoding,
                  model: type, fmt: Optional[object] = None) -> "EncodedColor":
        return cls(model.broadcast(value, fmt), encoding)

    # --- Accessors ---

    def decompose(self) -> Tuple[Any, ColorEncoding]:
        return self.color, self.encoding

    def strip_encoding(self) -> Any:
        return self.color

    @property
    def channels(self) -> np.ndarray:
        return self.color.channels

    def to_tuple(self) -> Tuple[Any, ...]:
        return self.color.to_tuple()

    # --- Curves ---

    def decode(self) -> "EncodedColor":
        """Return the linear-light color, tagged Linear."""
        return EncodedColor(self.color.decode_color(self.encoding), LINEAR)

    def encode(self, encoding: ColorEncoding) -> "EncodedColor":
        """
        Encode a Linear color with ``encoding``.

        Raises:
            EncodingMismatchError: If this color is not Linear.
        """
        if not self.encoding.is_linear:
            raise EncodingMismatchError(
                f"encode() is only defined on Linear colors, this one is {self.encoding}; "
                f"use transcode()"
            )
        return EncodedColor(self.color.encode_color(encoding), encoding)

    def transcode(self, encoding: ColorEncoding) -> "EncodedColor":
        return self.decode().encode(encoding)

    # --- Delegated capabilities ---

    def lerp(self, other: "EncodedColor", pos: float) -> "EncodedColor":
        """
        Interpolate the stored (encoded) channel values.

        Raises:
            EncodingMismatchError: If the two encodings differ.
        """
        if self.encoding != other.encoding:
            raise EncodingMismatchError(
                f"Tried to interpolate between two different encodings: "
                f"{self.encoding} and {other.encoding}"
            )
        return EncodedColor(self.color.lerp(other.color, pos), self.encoding)

    def invert(self) -> "EncodedColor":
        return EncodedColor(self.color.invert(), self.encoding)

    def normalize(self) -> "EncodedColor":
        return EncodedColor(self.color.normalize(), self.encoding)

    def is_normalized(self) -> bool:
        return self.color.is_normalized()

    def is_close(self, other: "EncodedColor", atol: float = 1e-8, rtol: float = 0.0) -> bool:
        return self.encoding == other.encoding and self.color.is_close(other.color, atol, rtol)

    def with_color_space(self, space: Any) -> Any:
        """Attach a color space, giving a ``SpacedColor``."""
        from tint_colorspace import SpacedColor
        return SpacedColor(self, space)

    def __str__(self) -> str:
        return f"{self.color} [{self.encoding}]"
