# -*- coding: utf-8 -*-
"""
Tint: The arithmetic of color between devices and tristimulus space
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Channel Values
==============
A channel is one numeric component of a color sample: a value stored in one
of the ``ChannelFormat`` kinds, plus the semantic domain it lives in.

Domains:
    POS_NORMAL  floats in [0, 1], integers in [0, max]
    NORMAL      floats in [-1, 1]
    POS_FREE    floats >= 0, unbounded above
    FREE        any float

The vectorised helpers at the bottom of this module carry the domain rules
for whole arrays. Color models use them with one domain per channel, so a
model like xyY can mix bounded chromaticity with free luminance.
"""

import enum
from dataclasses import dataclass
from typing import Final, Sequence, Tuple

import numpy as np

from tint_cast import (
    ChannelFormat,
    ChannelValue,
    cast,
    cast_with_rescale,
    saturating_truncate,
)

__all__ = [
    "ChannelDomain",
    "Channel",
    "domain_bounds",
    "check_domain_format",
    "normalize_values",
    "is_normalized_values",
    "invert_values",
    "lerp_values",
]


class ChannelDomain(enum.Enum):
    """Semantic range of a channel."""

    POS_NORMAL = "pos_normal"
    NORMAL = "normal"
    POS_FREE = "pos_free"
    FREE = "free"

    @property
    def is_bounded(self) -> bool:
        return self in (ChannelDomain.POS_NORMAL, ChannelDomain.NORMAL)


_FLOAT_BOUNDS: Final[dict] = {
    ChannelDomain.POS_NORMAL: (0.0, 1.0),
    ChannelDomain.NORMAL: (-1.0, 1.0),
    ChannelDomain.POS_FREE: (0.0, np.inf),
    ChannelDomain.FREE: (-np.inf, np.inf),
}


def check_domain_format(domain: ChannelDomain, fmt: ChannelFormat) -> None:
    """Raise ``TypeError`` if ``fmt`` cannot store values of ``domain``."""
    if not fmt.is_float and domain is not ChannelDomain.POS_NORMAL:
        raise TypeError(
            f"Domain {domain.name} requires a floating-point format, got {fmt}"
        )


def domain_bounds(domain: ChannelDomain, fmt: ChannelFormat) -> Tuple[float, float]:
    """Nominal ``(min, max)`` of ``domain`` when stored as ``fmt``."""
    check_domain_format(domain, fmt)
    if not fmt.is_float:
        return 0, fmt.max_value
    return _FLOAT_BOUNDS[domain]


def _bounds_arrays(
    domains: Sequence[ChannelDomain], fmt: ChannelFormat
) -> Tuple[np.ndarray, np.ndarray]:
    pairs = [domain_bounds(d, fmt) for d in domains]
    lo = np.array([p[0] for p in pairs], dtype=fmt.dtype)
    hi = np.array([p[1] for p in pairs], dtype=fmt.dtype)
    return lo, hi


# =============================================================================
# 1. VECTORISED DOMAIN RULES
# =============================================================================
# ``values`` has shape (..., len(domains)); the last axis is the channel axis.

def normalize_values(values: np.ndarray, domains: Sequence[ChannelDomain]) -> np.ndarray:
    """Clamp every channel into its domain. Integer channels are always in range."""
    fmt = ChannelFormat.of(values.dtype)
    if not fmt.is_float:
        return values.copy()
    lo, hi = _bounds_arrays(domains, fmt)
    return np.clip(values, lo, hi)


def is_normalized_values(values: np.ndarray, domains: Sequence[ChannelDomain]) -> bool:
    fmt = ChannelFormat.of(values.dtype)
    if not fmt.is_float:
        return True
    lo, hi = _bounds_arrays(domains, fmt)
    return bool(np.all((values >= lo) & (values <= hi)))


def invert_values(values: np.ndarray, domains: Sequence[ChannelDomain]) -> np.ndarray:
    """Reflect every channel about the center of its range (``min + max - v``)."""
    unbounded = [d.name for d in domains if not d.is_bounded]
    if unbounded:
        raise TypeError(f"Cannot invert unbounded channel domains: {', '.join(unbounded)}")
    fmt = ChannelFormat.of(values.dtype)
    lo, hi = _bounds_arrays(domains, fmt)
    return (lo + hi) - values


def lerp_values(left: np.ndarray, right: np.ndarray, pos: float) -> np.ndarray:
    """
    Linear interpolation ``left * (1 - pos) + right * pos``.

    Float channels interpolate in their own precision. Integer channels
    interpolate in float64 and truncate back toward zero.
    """
    fmt = ChannelFormat.of(left.dtype)
    if fmt.is_float:
        p = fmt.dtype.type(pos)
        one = fmt.dtype.type(1.0)
        return left * (one - p) + right * p
    mixed = left.astype(np.float64) * (1.0 - pos) + right.astype(np.float64) * pos
    return saturating_truncate(mixed, fmt)


# =============================================================================
# 2. CHANNEL VALUE
# =============================================================================

@dataclass(slots=True, frozen=True)
class Channel:
    """One immutable channel value tagged with its domain."""
    value: np.generic
    domain: ChannelDomain = ChannelDomain.POS_NORMAL

    def __post_init__(self) -> None:
        scalar = np.asarray(self.value)
        if scalar.ndim != 0:
            raise ValueError(f"Channel holds a single scalar, got shape {scalar.shape}")
        check_domain_format(self.domain, ChannelFormat.of(scalar.dtype))
        object.__setattr__(self, "value", scalar[()])

    @property
    def format(self) -> ChannelFormat:
        return ChannelFormat.of(self.value)

    @property
    def bounds(self) -> Tuple[float, float]:
        return domain_bounds(self.domain, self.format)

    def _with(self, values: ChannelValue) -> "Channel":
        return Channel(np.asarray(values)[..., 0][()], self.domain)

    def normalize(self) -> "Channel":
        return self._with(normalize_values(np.asarray([self.value]), (self.domain,)))

    def is_normalized(self) -> bool:
        return is_normalized_values(np.asarray([self.value]), (self.domain,))

    def invert(self) -> "Channel":
        return self._with(invert_values(np.asarray([self.value]), (self.domain,)))

    def lerp(self, other: "Channel", pos: float) -> "Channel":
        if other.format is not self.format:
            raise TypeError(f"Cannot interpolate {self.format} with {other.format}")
        return self._with(lerp_values(np.asarray([self.value]), np.asarray([other.value]), pos))

    def _cast_domain(self, to: object) -> ChannelDomain:
        # Integer storage only exists for the positive normalized range.
        return self.domain if ChannelFormat.of(to).is_float else ChannelDomain.POS_NORMAL

    def cast(self, to: object) -> "Channel":
        return Channel(cast(self.value, to), self._cast_domain(to))

    def cast_with_rescale(self, to: object, low: float = 0.0, high: float = 1.0) -> "Channel":
        """Cast, remapping ``[low, high]`` onto the integer range (or back)."""
        return Channel(cast_with_rescale(self.value, to, low, high), self._cast_domain(to))

    def __float__(self) -> float:
        return float(self.value)

    def __str__(self) -> str:
        return str(self.value)
