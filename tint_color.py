# -*- coding: utf-8 -*-
"""
Tint: The arithmetic of color between devices and tristimulus space
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Color Models
============
Fixed-arity color samples built on the channel rules of ``tint_channel``.

A color holds one numpy array whose last axis is the channel axis. A single
sample has shape ``(arity,)``; a batch of N samples has shape ``(N, arity)``
(or any ``(..., arity)``). Every operation works on both, and every operation
returns a new color: the stored array is read-only.

Capabilities are small, separate interfaces (``Bounded``, ``Lerp``,
``Invert``, ``Flatten``, ``Broadcast``). A model opts into each one through a
mixin; there is no deep hierarchy. External collaborators should test
capabilities with ``isinstance(color, Invert)`` rather than by model type.

Models:
    Rgb    device RGB, bounded [0, 1] channels, any of the six formats, encodable
    Rgba   Rgb plus a bounded alpha channel
    Xyz    CIE XYZ tristimulus, non-negative free float channels
    Xyza   Xyz plus a bounded alpha channel
    XyY    CIE xyY: bounded chromaticity (x, y) plus free luminance Y
"""

from typing import Any, ClassVar, Optional, Protocol, Tuple, runtime_checkable

import numpy as np

from tint_cast import ChannelFormat, cast, default_channel_dtype
from tint_channel import (
    ChannelDomain,
    check_domain_format,
    invert_values,
    is_normalized_values,
    lerp_values,
    normalize_values,
)
from tint_encoding import Encodable

__all__ = [
    # --- Capability interfaces ---
    "Bounded",
    "Lerp",
    "Invert",
    "Flatten",
    "Broadcast",

    # --- Models ---
    "Color",
    "Rgb",
    "Rgba",
    "Xyz",
    "Xyza",
    "XyY",

    # --- Conversions ---
    "xyz_to_xyy",
    "xyy_to_xyz",
]

_PN = ChannelDomain.POS_NORMAL
_PF = ChannelDomain.POS_FREE


# =============================================================================
# 1. CAPABILITY INTERFACES
# =============================================================================

@runtime_checkable
class Bounded(Protocol):
    def normalize(self) -> Any: ...
    def is_normalized(self) -> bool: ...


@runtime_checkable
class Lerp(Protocol):
    def lerp(self, other: Any, pos: float) -> Any: ...


@runtime_checkable
class Invert(Protocol):
    def invert(self) -> Any: ...


@runtime_checkable
class Flatten(Protocol):
    def to_array(self) -> np.ndarray: ...

    @classmethod
    def from_array(cls, values: Any) -> Any: ...


@runtime_checkable
class Broadcast(Protocol):
    @classmethod
    def broadcast(cls, value: Any, fmt: Optional[object] = None) -> Any: ...


# =============================================================================
# 2. BASE STORAGE
# =============================================================================

def _channel_property(index: int, name: str) -> property:
    def getter(self: "Color") -> Any:
        return self._channels[..., index][()]
    getter.__name__ = name
    getter.__doc__ = f"The {name} channel (scalar, or array for a batch)."
    return property(getter)


class Color:
    """
    Shared storage and structural behavior of all color models.

    Subclasses declare ``CHANNEL_NAMES``, one ``ChannelDomain`` per channel
    in ``DOMAINS``, and a display ``LABEL``.
    """

    __slots__ = ("_channels",)

    CHANNEL_NAMES: ClassVar[Tuple[str, ...]] = ()
    DOMAINS: ClassVar[Tuple[ChannelDomain, ...]] = ()
    LABEL: ClassVar[str] = ""

    _channels: np.ndarray

    def __init__(self, *values: Any, fmt: Optional[object] = None) -> None:
        """
        Args:
            *values: One scalar or array per channel; arrays broadcast.
            fmt: Storage format. Without it the values' own dtype is used,
                except that plain Python ints (and any signed integer or
                boolean input) are stored as float64. Integer storage needs
                an explicit ``fmt``, e.g. ``Rgb(255, 128, 0, fmt=ChannelFormat.U8)``.
        """
        if len(values) != len(self.CHANNEL_NAMES):
            raise TypeError(
                f"{type(self).__name__} takes {len(self.CHANNEL_NAMES)} channels "
                f"({', '.join(self.CHANNEL_NAMES)}), got {len(values)}"
            )
        dtype = None if fmt is None else ChannelFormat.of(fmt).dtype
        arrays = [np.asarray(v, dtype=dtype) for v in values]
        if dtype is None:
            dtype = default_channel_dtype(np.result_type(*arrays))
        stacked = np.stack(np.broadcast_arrays(*arrays), axis=-1).astype(dtype)
        self._set(stacked)

    def _set(self, channels: np.ndarray) -> None:
        if channels.ndim == 0 or channels.shape[-1] != len(self.CHANNEL_NAMES):
            raise ValueError(
                f"{type(self).__name__} expects last dimension {len(self.CHANNEL_NAMES)}, "
                f"got shape {channels.shape}"
            )
        fmt = ChannelFormat.of(channels.dtype)
        for domain in set(self.DOMAINS):
            check_domain_format(domain, fmt)
        channels = np.ascontiguousarray(channels)
        channels.setflags(write=False)
        self._channels = channels

    @classmethod
    def _wrap(cls, channels: np.ndarray) -> Any:
        obj = object.__new__(cls)
        obj._set(channels)
        return obj

    def _with_channels(self, channels: np.ndarray) -> Any:
        return type(self)._wrap(channels)

    # --- Construction (Flatten / Broadcast / FromTuple) ---

    @classmethod
    def num_channels(cls) -> int:
        return len(cls.CHANNEL_NAMES)

    @classmethod
    def from_tuple(cls, values: Tuple[Any, ...], fmt: Optional[object] = None) -> Any:
        return cls._wrap_values(values, fmt)

    @classmethod
    def _wrap_values(cls, values: Tuple[Any, ...], fmt: Optional[object]) -> Any:
        obj = object.__new__(cls)
        Color.__init__(obj, *values, fmt=fmt)
        return obj

    @classmethod
    def broadcast(cls, value: Any, fmt: Optional[object] = None) -> Any:
        """Every channel set to ``value``."""
        return cls._wrap_values((value,) * cls.num_channels(), fmt)

    @classmethod
    def from_array(cls, values: Any) -> Any:
        """Copy a (..., arity) array into a new color. Signed integers become float64."""
        arr = np.array(values)
        return cls._wrap(arr.astype(default_channel_dtype(arr.dtype), copy=False))

    def to_array(self) -> np.ndarray:
        """Writable copy of the channel array."""
        return self._channels.copy()

    # --- Accessors ---

    @property
    def channels(self) -> np.ndarray:
        """Read-only channel array of shape (..., arity)."""
        return self._channels

    @property
    def format(self) -> ChannelFormat:
        return ChannelFormat.of(self._channels.dtype)

    @property
    def shape(self) -> Tuple[int, ...]:
        """Batch shape; ``()`` for a single sample."""
        return self._channels.shape[:-1]

    @property
    def is_batch(self) -> bool:
        return self._channels.ndim > 1

    def to_tuple(self) -> Tuple[Any, ...]:
        return tuple(self._channels[..., k][()] for k in range(self.num_channels()))

    def __getitem__(self, index: Any) -> Any:
        if not self.is_batch:
            raise TypeError(f"A single {type(self).__name__} sample is not indexable")
        return self._with_channels(self._channels[index])

    def __len__(self) -> int:
        if not self.is_batch:
            raise TypeError(f"A single {type(self).__name__} sample has no length")
        return self._channels.shape[0]

    # --- Homogeneous operations ---

    def color_cast(self, to: object) -> Any:
        """Channel-cast every channel to another format."""
        return self._with_channels(cast(self._channels, to))

    def clamp(self, low: Any, high: Any) -> Any:
        dtype = self._channels.dtype
        return self._with_channels(
            np.clip(self._channels, np.asarray(low, dtype=dtype), np.asarray(high, dtype=dtype))
        )

    # --- Comparison & display ---

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return (self._channels.dtype == other._channels.dtype
                and bool(np.array_equal(self._channels, other._channels)))

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._channels.dtype.str,
                     self._channels.shape, self._channels.tobytes()))

    def is_close(self, other: Any, atol: float = 1e-8, rtol: float = 0.0) -> bool:
        """Approximate channelwise equality between two colors of the same model."""
        if type(other) is not type(self):
            return False
        return bool(np.allclose(self._channels, other._channels, atol=atol, rtol=rtol))

    def __repr__(self) -> str:
        if self.is_batch:
            return f"<{type(self).__name__} batch shape={self.shape} format={self.format}>"
        values = ", ".join(repr(v) for v in self._channels.tolist())
        return f"{type(self).__name__}({values}, fmt=ChannelFormat.{self.format.name})"

    def __str__(self) -> str:
        if self.is_batch:
            return f"{self.LABEL}[{'x'.join(str(n) for n in self.shape)}]({self.format})"
        return f"{self.LABEL}({', '.join(str(v) for v in self.to_tuple())})"


# =============================================================================
# 3. CAPABILITY MIXINS
# =============================================================================

class _BoundedChannels:
    __slots__ = ()

    def normalize(self) -> Any:
        """Clamp every channel into its domain."""
        return self._with_channels(normalize_values(self._channels, self.DOMAINS))  # type: ignore[attr-defined]

    def is_normalized(self) -> bool:
        return is_normalized_values(self._channels, self.DOMAINS)  # type: ignore[attr-defined]


class _LerpChannels:
    __slots__ = ()

    def lerp(self, other: Any, pos: float) -> Any:
        """Channelwise ``self * (1 - pos) + other * pos``."""
        if type(other) is not type(self):
            raise TypeError(f"Cannot interpolate {type(self).__name__} with {type(other).__name__}")
        if other.format is not self.format:  # type: ignore[attr-defined]
            raise TypeError(f"Cannot interpolate {self.format} with {other.format}")  # type: ignore[attr-defined]
        return self._with_channels(lerp_values(self._channels, other._channels, pos))  # type: ignore[attr-defined]


class _InvertChannels:
    __slots__ = ()

    def invert(self) -> Any:
        """Reflect every channel about the center of its range."""
        return self._with_channels(invert_values(self._channels, self.DOMAINS))  # type: ignore[attr-defined]


# =============================================================================
# 4. MODELS
# =============================================================================

class Rgb(Color, _BoundedChannels, _LerpChannels, _InvertChannels, Encodable):
    """Device RGB with channels in [0, 1] (floats) or [0, max] (integers)."""

    __slots__ = ()
    CHANNEL_NAMES = ("red", "green", "blue")
    DOMAINS = (_PN, _PN, _PN)
    LABEL = "Rgb"

    def __init__(self, red: Any, green: Any, blue: Any, fmt: Optional[object] = None) -> None:
        super().__init__(red, green, blue, fmt=fmt)

    red = _channel_property(0, "red")
    green = _channel_property(1, "green")
    blue = _channel_property(2, "blue")


class Rgba(Color, _BoundedChannels, _LerpChannels, _InvertChannels, Encodable):
    """Rgb with a trailing alpha channel. Encodings leave alpha untouched."""

    __slots__ = ()
    CHANNEL_NAMES = ("red", "green", "blue", "alpha")
    DOMAINS = (_PN, _PN, _PN, _PN)
    LABEL = "Rgba"

    def __init__(self, red: Any, green: Any, blue: Any, alpha: Any,
                 fmt: Optional[object] = None) -> None:
        super().__init__(red, green, blue, alpha, fmt=fmt)

    red = _channel_property(0, "red")
    green = _channel_property(1, "green")
    blue = _channel_property(2, "blue")
    alpha = _channel_property(3, "alpha")

    @classmethod
    def from_color(cls, color: Rgb, alpha: Any) -> "Rgba":
        a = np.broadcast_to(np.asarray(alpha, dtype=color.channels.dtype), color.shape)
        return cls._wrap(np.concatenate([color.channels, a[..., np.newaxis]], axis=-1))

    @property
    def color(self) -> Rgb:
        return Rgb._wrap(self._channels[..., :3])

    def decompose(self) -> Tuple[Rgb, Any]:
        return self.color, self.alpha


class Xyz(Color, _BoundedChannels, _LerpChannels):
    """CIE XYZ tristimulus values; channels are floats >= 0 when normalized."""

    __slots__ = ()
    CHANNEL_NAMES = ("x", "y", "z")
    DOMAINS = (_PF, _PF, _PF)
    LABEL = "XYZ"

    def __init__(self, x: Any, y: Any, z: Any, fmt: Optional[object] = None) -> None:
        super().__init__(x, y, z, fmt=fmt)

    x = _channel_property(0, "x")
    y = _channel_property(1, "y")
    z = _channel_property(2, "z")


class Xyza(Color, _BoundedChannels, _LerpChannels):
    """Xyz with a trailing alpha channel in [0, 1]."""

    __slots__ = ()
    CHANNEL_NAMES = ("x", "y", "z", "alpha")
    DOMAINS = (_PF, _PF, _PF, _PN)
    LABEL = "XYZa"

    def __init__(self, x: Any, y: Any, z: Any, alpha: Any,
                 fmt: Optional[object] = None) -> None:
        super().__init__(x, y, z, alpha, fmt=fmt)

    x = _channel_property(0, "x")
    y = _channel_property(1, "y")
    z = _channel_property(2, "z")
    alpha = _channel_property(3, "alpha")

    @classmethod
    def from_color(cls, color: Xyz, alpha: Any) -> "Xyza":
        a = np.broadcast_to(np.asarray(alpha, dtype=color.channels.dtype), color.shape)
        return cls._wrap(np.concatenate([color.channels, a[..., np.newaxis]], axis=-1))

    @property
    def color(self) -> Xyz:
        return Xyz._wrap(self._channels[..., :3])

    def decompose(self) -> Tuple[Xyz, Any]:
        return self.color, self.alpha


class XyY(Color, _BoundedChannels, _LerpChannels):
    """CIE xyY: chromaticity ``(x, y)`` in [0, 1] and luminance ``Y`` >= 0."""

    __slots__ = ()
    CHANNEL_NAMES = ("x", "y", "Y")
    DOMAINS = (_PN, _PN, _PF)
    LABEL = "xyY"

    def __init__(self, x: Any, y: Any, Y: Any, fmt: Optional[object] = None) -> None:
        super().__init__(x, y, Y, fmt=fmt)

    x = _channel_property(0, "x")
    y = _channel_property(1, "y")
    Y = _channel_property(2, "Y")

    @classmethod
    def from_xyz(cls, xyz: Xyz) -> "XyY":
        return xyz_to_xyy(xyz)

    def to_xyz(self) -> Xyz:
        return xyy_to_xyz(self)


# =============================================================================
# 5. XYZ <-> xyY
# =============================================================================

def xyz_to_xyy(xyz: Xyz) -> XyY:
    """
    Project XYZ onto chromaticity plus luminance.

    Black (``X + Y + Z == 0``) maps to ``(0, 0, 0)``.

    Raises:
        ValueError: If any channel is negative.
    """
    c = xyz.channels
    if np.any(c < 0):
        raise ValueError("Cannot convert an XYZ color with negative channels to xyY")
    total = c.sum(axis=-1)
    black = total == 0
    safe = np.where(black, 1, total)
    x = np.where(black, 0, c[..., 0] / safe)
    y = np.where(black, 0, c[..., 1] / safe)
    out = np.stack([x, y, c[..., 1]], axis=-1).astype(c.dtype)
    return XyY._wrap(out)


def xyy_to_xyz(xyy: XyY) -> Xyz:
    """Inverse of ``xyz_to_xyy``; a zero ``y`` maps to black."""
    c = xyy.channels
    x, y, lum = c[..., 0], c[..., 1], c[..., 2]
    dark = y == 0
    ratio = np.where(dark, 0, lum / np.where(dark, 1, y))
    out = np.stack([ratio * x, np.where(dark, 0, lum), ratio * (1 - x - y)], axis=-1)
    return Xyz._wrap(out.astype(c.dtype))
