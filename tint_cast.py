# -*- coding: utf-8 -*-
"""
Tint: The arithmetic of color between devices and tristimulus space
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Channel Cast Engine
===================
Deterministic, bit-exact conversion of channel values between the six
supported storage formats (8/16/32/64-bit unsigned integers and 32/64-bit
floating point).

Every ordered pair of formats owns one kernel in ``CAST_TABLE``. The kernels
are vectorised: a cast of a single numpy scalar and a cast of a million-pixel
buffer go through the same code.

Rules:
    - Same format: identity.
    - Integer widening replicates the narrow bit pattern across the wide width
      (u8 -> u16 multiplies by 0x0101), so ``max_from`` maps to ``max_to``.
    - Integer narrowing keeps the top bits (right shift, truncating).
    - Integer -> float divides by the integer maximum in the target float type.
    - Float -> u8 is ``floor(v * 255.99)``. The bias lets values a hair below
      1.0 still land on 255.
    - Float -> u16/u32/u64 is ``v * max`` truncated toward zero.
    - Float -> float is a plain numeric conversion.

Casting never raises and never clamps in-range values. Float -> integer
conversions saturate (NaN and negatives become 0, overflow becomes the
maximum) because an unsigned integer cannot hold anything else. Clamping into
a channel's nominal range is the separate ``normalize`` operation.
"""

import enum
import functools
from typing import Callable, Dict, Final, Optional, Tuple, TypeAlias, Union

import numpy as np

__all__ = [
    # --- Type Aliases ---
    "ChannelValue",
    "CastKernel",

    # --- Formats ---
    "ChannelFormat",
    "INTEGER_FORMATS",
    "FLOAT_FORMATS",

    # --- Cast Engine ---
    "CAST_TABLE",
    "cast",
    "cast_with_rescale",
    "saturating_truncate",
    "intermediate_float",
    "default_channel_dtype",
]

# --- Type Aliases ---
ChannelValue: TypeAlias = Union[np.ndarray, np.generic, float]
CastKernel: TypeAlias = Callable[[np.ndarray], np.ndarray]


# =============================================================================
# 1. CHANNEL FORMATS
# =============================================================================

class ChannelFormat(enum.Enum):
    """Closed set of numeric storage formats a channel may use."""

    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    F32 = "f32"
    F64 = "f64"

    @property
    def dtype(self) -> np.dtype:
        return _DTYPES[self]

    @property
    def bits(self) -> int:
        return self.dtype.itemsize * 8

    @property
    def is_float(self) -> bool:
        return self.dtype.kind == "f"

    @property
    def max_value(self) -> Union[int, float]:
        """Largest in-range value: ``2**bits - 1`` for integers, 1.0 for floats."""
        if self.is_float:
            return 1.0
        return (1 << self.bits) - 1

    @classmethod
    def of(cls, value: object) -> "ChannelFormat":
        """
        Resolve the format of a value, array, dtype or format.

        Args:
            value: A ``ChannelFormat``, a numpy dtype (or anything
                ``np.dtype`` accepts), a numpy scalar/array or a Python float.

        Returns:
            The matching ``ChannelFormat``.

        Raises:
            TypeError: If the dtype is not one of the six supported formats.
        """
        if isinstance(value, ChannelFormat):
            return value
        # "u8" is a format name here, not numpy's 8-byte unsigned code.
        if isinstance(value, str) and value in _BY_NAME:
            return _BY_NAME[value]
        if isinstance(value, (np.dtype, type, str)):
            dtype = np.dtype(value)
        else:
            dtype = np.asarray(value).dtype
        try:
            return _BY_DTYPE[dtype]
        except KeyError:
            raise TypeError(
                f"Unsupported channel dtype {dtype}; expected one of "
                f"{', '.join(str(d) for d in _BY_DTYPE)}"
            ) from None

    def __str__(self) -> str:
        return self.value


_DTYPES: Final[Dict[ChannelFormat, np.dtype]] = {
    ChannelFormat.U8: np.dtype(np.uint8),
    ChannelFormat.U16: np.dtype(np.uint16),
    ChannelFormat.U32: np.dtype(np.uint32),
    ChannelFormat.U64: np.dtype(np.uint64),
    ChannelFormat.F32: np.dtype(np.float32),
    ChannelFormat.F64: np.dtype(np.float64),
}
_BY_DTYPE: Final[Dict[np.dtype, ChannelFormat]] = {v: k for k, v in _DTYPES.items()}
_BY_NAME: Final[Dict[str, ChannelFormat]] = {f.value: f for f in ChannelFormat}

INTEGER_FORMATS: Final[Tuple[ChannelFormat, ...]] = (
    ChannelFormat.U8, ChannelFormat.U16, ChannelFormat.U32, ChannelFormat.U64,
)
FLOAT_FORMATS: Final[Tuple[ChannelFormat, ...]] = (ChannelFormat.F32, ChannelFormat.F64)

# Bias for the float -> u8 path.
_U8_BIAS: Final[float] = 255.99

# Bit-replication constants, keyed by (narrow, wide).
_WIDEN_MULTIPLIERS: Final[Dict[Tuple[ChannelFormat, ChannelFormat], int]] = {
    (ChannelFormat.U8, ChannelFormat.U16): 0x0101,
    (ChannelFormat.U8, ChannelFormat.U32): 0x01010101,
    (ChannelFormat.U8, ChannelFormat.U64): 0x0101010101010101,
    (ChannelFormat.U16, ChannelFormat.U32): 0x00010001,
    (ChannelFormat.U16, ChannelFormat.U64): 0x0001000100010001,
    (ChannelFormat.U32, ChannelFormat.U64): 0x0000000100000001,
}


def intermediate_float(fmt: ChannelFormat) -> ChannelFormat:
    """Float format used when a computation needs real arithmetic on ``fmt``."""
    return fmt if fmt.is_float else ChannelFormat.F64


def default_channel_dtype(dtype: np.dtype) -> np.dtype:
    """
    Storage dtype for values whose format was not given explicitly.

    Plain Python ints arrive as numpy's signed ``int64``, which is not a
    channel format. Signed integers and booleans are read as float64, so
    ``Rgb(0, 0, 0)`` builds like ``Rgb(0.0, 0.0, 0.0)``. Unsigned integers and
    floats keep their own dtype. Pass an explicit format to store integers.
    """
    if dtype.kind in "bi":
        return np.dtype(np.float64)
    return dtype


# =============================================================================
# 2. CAST KERNELS
# =============================================================================

def saturating_truncate(values: ChannelValue, target: ChannelFormat) -> np.ndarray:
    """
    Truncate floats toward zero into an unsigned integer format.

    NaN and negative inputs give 0; anything at or above ``2**bits`` gives the
    format maximum. The comparison runs in float64, which holds every float32
    value and every power of two exactly.
    """
    flt = np.trunc(np.asarray(values, dtype=np.float64))
    upper = float(1 << target.bits)
    invalid = np.isnan(flt) | (flt < 0.0)
    over = flt >= upper
    safe = np.where(invalid | over, 0.0, flt).astype(target.dtype)
    return np.where(over, target.dtype.type(target.max_value), safe)


def _identity(values: np.ndarray) -> np.ndarray:
    return values.copy()


def _widen(values: np.ndarray, *, target: ChannelFormat, multiplier: int) -> np.ndarray:
    return values.astype(target.dtype) * target.dtype.type(multiplier)


def _narrow(values: np.ndarray, *, target: ChannelFormat, shift: int) -> np.ndarray:
    return (values >> values.dtype.type(shift)).astype(target.dtype)


def _int_to_float(values: np.ndarray, *, source: ChannelFormat, target: ChannelFormat) -> np.ndarray:
    ftype = target.dtype.type
    return values.astype(target.dtype) / ftype(source.max_value)


def _float_to_u8(values: np.ndarray, *, source: ChannelFormat, target: ChannelFormat) -> np.ndarray:
    scaled = np.floor(values * source.dtype.type(_U8_BIAS))
    return saturating_truncate(scaled, target)


def _float_to_uint(values: np.ndarray, *, source: ChannelFormat, target: ChannelFormat) -> np.ndarray:
    scaled = values * source.dtype.type(target.max_value)
    return saturating_truncate(scaled, target)


def _float_to_float(values: np.ndarray, *, target: ChannelFormat) -> np.ndarray:
    return values.astype(target.dtype)


def _select_kernel(source: ChannelFormat, target: ChannelFormat) -> CastKernel:
    if source is target:
        return _identity
    if source.is_float and target.is_float:
        return functools.partial(_float_to_float, target=target)
    if not source.is_float and not target.is_float:
        if target.bits > source.bits:
            return functools.partial(
                _widen, target=target, multiplier=_WIDEN_MULTIPLIERS[(source, target)]
            )
        return functools.partial(_narrow, target=target, shift=source.bits - target.bits)
    if not source.is_float:
        return functools.partial(_int_to_float, source=source, target=target)
    if target is ChannelFormat.U8:
        return functools.partial(_float_to_u8, source=source, target=target)
    return functools.partial(_float_to_uint, source=source, target=target)


# One kernel per ordered (from, to) pair, 36 in total.
CAST_TABLE: Final[Dict[Tuple[ChannelFormat, ChannelFormat], CastKernel]] = {
    (src, dst): _select_kernel(src, dst)
    for src in ChannelFormat
    for dst in ChannelFormat
}


# =============================================================================
# 3. PUBLIC API
# =============================================================================

def _prepare(value: ChannelValue, source: Optional[object]) -> Tuple[np.ndarray, ChannelFormat]:
    if source is None:
        arr = np.asarray(value)
        arr = arr.astype(default_channel_dtype(arr.dtype), copy=False)
        return arr, ChannelFormat.of(arr.dtype)
    fmt = ChannelFormat.of(source)
    return np.asarray(value, dtype=fmt.dtype), fmt


def _finish(out: ChannelValue, ndim: int) -> ChannelValue:
    out = np.asarray(out)
    return out[()] if ndim == 0 else out


def cast(value: ChannelValue, to: object, *, source: Optional[object] = None) -> ChannelValue:
    """
    Convert channel values to another format.

    Args:
        value: Scalar or array of channel values.
        to: Target ``ChannelFormat`` (or a dtype naming one).
        source: Format to interpret ``value`` in. Defaults to the dtype of
            ``value`` itself. Python floats are float64, and Python ints
            (signed integers) are read as float64 too, so ``cast(255, U16)``
            saturates to the maximum instead of failing.

    Returns:
        A numpy scalar for scalar input, otherwise an array of the same shape.
    """
    target = ChannelFormat.of(to)
    arr, src = _prepare(value, source)
    with np.errstate(over="ignore", invalid="ignore"):
        out = CAST_TABLE[(src, target)](arr)
    return _finish(out, arr.ndim)


def cast_with_rescale(
    value: ChannelValue,
    to: object,
    low: float = 0.0,
    high: float = 1.0,
    *,
    source: Optional[object] = None,
) -> ChannelValue:
    """
    Cast with a linear remap of the floating range ``[low, high]``.

    Float -> integer first maps ``[low, high]`` onto ``[0, 1]`` and then
    casts. Integer -> float casts and then maps ``[0, 1]`` onto
    ``[low, high]``. Every other pair is a plain ``cast``.
    """
    target = ChannelFormat.of(to)
    arr, src = _prepare(value, source)
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        if src.is_float and not target.is_float:
            ftype = src.dtype.type
            scaled = (arr - ftype(low)) / (ftype(high) - ftype(low))
            out = CAST_TABLE[(src, target)](np.asarray(scaled, dtype=src.dtype))
        elif not src.is_float and target.is_float:
            ftype = target.dtype.type
            out = CAST_TABLE[(src, target)](arr)
            out = out * (ftype(high) - ftype(low)) + ftype(low)
        else:
            out = CAST_TABLE[(src, target)](arr)
    return _finish(out, arr.ndim)
