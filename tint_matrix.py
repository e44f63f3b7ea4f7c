# -*- coding: utf-8 -*-
"""
Tint: The arithmetic of color between devices and tristimulus space
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Linear Algebra Kernel (Matrix3)
===============================
An immutable 3x3 matrix stored row-major as a flat 9-cell array
``[a b c; d e f; g h i]`` (cell ``i*3 + j`` is row ``i``, column ``j``).

Determinant and inverse use the explicit cofactor formulas rather than a
general LU routine, so results are reproducible across platforms and the
singularity test is an exact comparison against zero:

    det = a*e*i + b*f*g + c*d*h - c*e*g - b*d*i - a*f*h

``inverse()`` returns ``None`` when ``det`` is exactly 0.0. No tolerance is
applied, so a nearly singular matrix is inverted and may carry large errors.
Callers that cannot continue without an inverse use ``inverse_or_raise()``.

Vector transforms accept one 3-vector or any batch shaped ``(..., 3)``; the
rows are pushed through a Numba kernel at the matrix precision and then cast
to the caller's output type.
"""

import functools
from typing import Any, Callable, Iterator, Optional, Sequence, Tuple, Union

import numpy as np
from numba import njit, prange

from tint_cast import ChannelFormat, saturating_truncate

__all__ = [
    "SingularMatrixError",
    "handle_shapes",
    "Matrix3",
]


class SingularMatrixError(ValueError):
    """Raised when an inverse is required but the determinant is exactly zero."""


# =============================================================================
# 1. SHAPE HANDLING
# =============================================================================

def handle_shapes(func: Callable[..., np.ndarray]) -> Callable[..., np.ndarray]:
    """
    Decorator to normalize inputs to (N, 3) and restore the caller's shape.

    Args:
        func: Function taking a C-contiguous (N, 3) array as first argument.

    Returns:
        The wrapped function.
        - If input is (3,), returns (3,)
        - If input is (..., 3), returns (..., 3)
    """
    @functools.wraps(func)
    def wrapper(arr: np.ndarray, *args: Any, **kwargs: Any) -> np.ndarray:
        arr = np.asarray(arr)
        if arr.ndim == 0 or arr.shape[-1] != 3:
            raise ValueError(f"Expected last dimension size 3, got shape {arr.shape}")

        rows = np.ascontiguousarray(arr.reshape(-1, 3))
        res = func(rows, *args, **kwargs)
        return res.reshape(arr.shape)
    return wrapper


# =============================================================================
# 2. KERNELS
# =============================================================================
# fastmath stays off: the batch path must agree bit for bit with the
# scalar formula documented on Matrix3.transform_vector.

@njit(cache=True, fastmath=False, parallel=True)
def _transform_rows_kernel(cells: np.ndarray, rows: np.ndarray) -> np.ndarray:
    """Row-major matrix times each row vector."""
    n = rows.shape[0]
    out = np.empty_like(rows)
    for k in prange(n):
        v0 = rows[k, 0]
        v1 = rows[k, 1]
        v2 = rows[k, 2]
        out[k, 0] = cells[0] * v0 + cells[1] * v1 + cells[2] * v2
        out[k, 1] = cells[3] * v0 + cells[4] * v1 + cells[5] * v2
        out[k, 2] = cells[6] * v0 + cells[7] * v1 + cells[8] * v2
    return out


@handle_shapes
def _transform_rows(rows: np.ndarray, cells: np.ndarray) -> np.ndarray:
    return _transform_rows_kernel(cells, rows.astype(cells.dtype, copy=False))


def _resolve_float_dtype(dtype: object) -> np.dtype:
    fmt = ChannelFormat.of(dtype)
    if not fmt.is_float:
        raise TypeError(f"Matrix3 cells must be floating point, got {fmt}")
    return fmt.dtype


# =============================================================================
# 3. MATRIX3
# =============================================================================

class Matrix3:
    """
    Immutable 3x3 matrix of floats.

    Every operation returns a new matrix. Operators:

        ``m1 @ m2``   matrix product (apply ``m2`` first, then ``m1``)
        ``m * s``     elementwise scale by a scalar (also ``s * m``)
        ``m / s``     elementwise divide by a scalar
        ``m1 + m2``   elementwise sum
        ``m1 - m2``   elementwise difference
    """

    __slots__ = ("_cells",)

    # Keep numpy scalars from treating a Matrix3 as a 9-element sequence.
    __array_ufunc__ = None

    def __init__(self, cells: Union[Sequence[float], Sequence[Sequence[float]], np.ndarray],
                 dtype: object = np.float64) -> None:
        arr = np.array(cells, dtype=_resolve_float_dtype(dtype))
        if arr.shape == (3, 3):
            arr = arr.reshape(9)
        if arr.shape != (9,):
            raise ValueError(f"Matrix3 expects 9 cells or a 3x3 array, got shape {arr.shape}")
        arr.setflags(write=False)
        self._cells = arr

    @classmethod
    def _from_cells(cls, cells: np.ndarray) -> "Matrix3":
        obj = object.__new__(cls)
        cells = np.ascontiguousarray(cells).reshape(9)
        cells.setflags(write=False)
        obj._cells = cells
        return obj

    # --- Constructors ---

    @classmethod
    def identity(cls, dtype: object = np.float64) -> "Matrix3":
        return cls(np.eye(3), dtype)

    @classmethod
    def zero(cls, dtype: object = np.float64) -> "Matrix3":
        return cls(np.zeros(9), dtype)

    @classmethod
    def broadcast(cls, value: float, dtype: object = np.float64) -> "Matrix3":
        return cls(np.full(9, value), dtype)

    @classmethod
    def from_columns(cls, c0: Sequence[float], c1: Sequence[float], c2: Sequence[float],
                     dtype: object = np.float64) -> "Matrix3":
        """Build a matrix whose columns are the three given vectors."""
        return cls(np.column_stack([c0, c1, c2]), dtype)

    # --- Accessors ---

    @property
    def dtype(self) -> np.dtype:
        return self._cells.dtype

    @property
    def cells(self) -> np.ndarray:
        """Read-only flat view of the 9 cells."""
        return self._cells

    def to_tuple(self) -> Tuple[float, ...]:
        return tuple(self._cells.tolist())

    def to_array(self) -> np.ndarray:
        """Writable 3x3 copy."""
        return self._cells.reshape(3, 3).copy()

    def __getitem__(self, index: Union[int, Tuple[int, int]]) -> np.generic:
        if isinstance(index, tuple):
            row, col = index
            if not (0 <= row < 3 and 0 <= col < 3):
                raise IndexError(f"Matrix3 index {index} out of range")
            return self._cells[row * 3 + col]
        return self._cells[index]

    def __iter__(self) -> Iterator[np.generic]:
        return iter(self._cells)

    def __len__(self) -> int:
        return 9

    # --- Linear algebra ---

    def determinant(self) -> np.generic:
        a, b, c, d, e, f, g, h, i = self._cells
        return a * e * i + b * f * g + c * d * h - c * e * g - b * d * i - a * f * h

    def inverse(self) -> Optional["Matrix3"]:
        """
        Adjugate-based inverse.

        Returns:
            The inverse, or ``None`` if the determinant is exactly zero.
        """
        det = self.determinant()
        if det == 0:
            return None

        a, b, c, d, e, f, g, h, i = self._cells
        ca = e * i - f * h
        cb = f * g - d * i
        cc = d * h - e * g
        cd = c * h - b * i
        ce = a * i - c * g
        cf = b * g - a * h
        cg = b * f - c * e
        ch = c * d - a * f
        ci = a * e - b * d

        # Transpose of the cofactor matrix.
        adjugate = np.array([ca, cd, cg, cb, ce, ch, cc, cf, ci], dtype=self.dtype)
        return Matrix3._from_cells(adjugate * (self.dtype.type(1.0) / det))

    def inverse_or_raise(self) -> "Matrix3":
        inv = self.inverse()
        if inv is None:
            raise SingularMatrixError(f"Matrix has no inverse (determinant is 0):\n{self}")
        return inv

    def transpose(self) -> "Matrix3":
        return Matrix3._from_cells(self._cells.reshape(3, 3).T)

    def transform_vector(self, vec: Union[Sequence[float], np.ndarray],
                         out: Optional[object] = None) -> np.ndarray:
        """
        Row-major product ``(a*v1 + b*v2 + c*v3, d*v1 + e*v2 + f*v3, g*v1 + h*v2 + i*v3)``.

        The product runs at the matrix precision; each output component is
        then numerically cast to the requested type.

        Args:
            vec: One 3-vector or a batch of shape (..., 3).
            out: Output ``ChannelFormat`` or dtype. Defaults to the input's
                float type, or the matrix dtype for non-float input.

        Returns:
            Array with the same shape as ``vec``.
        """
        arr = np.asarray(vec)
        if out is None:
            out_fmt = ChannelFormat.of(arr.dtype if arr.dtype.kind == "f" else self.dtype)
        else:
            out_fmt = ChannelFormat.of(out)

        res = _transform_rows(arr, self._cells)
        if out_fmt.is_float:
            return res.astype(out_fmt.dtype, copy=False)
        return saturating_truncate(res, out_fmt)

    def scale_columns(self, scales: Sequence[float]) -> "Matrix3":
        """Multiply column ``j`` by ``scales[j]``."""
        s = np.asarray(scales, dtype=self.dtype)
        return Matrix3._from_cells(self._cells.reshape(3, 3) * s[np.newaxis, :])

    # --- Arithmetic ---

    def __matmul__(self, other: "Matrix3") -> "Matrix3":
        if not isinstance(other, Matrix3):
            return NotImplemented
        return Matrix3._from_cells(self._cells.reshape(3, 3) @ other._cells.reshape(3, 3))

    def __mul__(self, scalar: float) -> "Matrix3":
        if isinstance(scalar, Matrix3) or np.ndim(scalar) != 0:
            return NotImplemented
        return Matrix3._from_cells(self._cells * self.dtype.type(scalar))

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> "Matrix3":
        if isinstance(scalar, Matrix3) or np.ndim(scalar) != 0:
            return NotImplemented
        return Matrix3._from_cells(self._cells / self.dtype.type(scalar))

    def __add__(self, other: "Matrix3") -> "Matrix3":
        if not isinstance(other, Matrix3):
            return NotImplemented
        return Matrix3._from_cells(self._cells + other._cells)

    def __sub__(self, other: "Matrix3") -> "Matrix3":
        if not isinstance(other, Matrix3):
            return NotImplemented
        return Matrix3._from_cells(self._cells - other._cells)

    def __neg__(self) -> "Matrix3":
        return Matrix3._from_cells(-self._cells)

    # --- Comparison & display ---

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix3):
            return NotImplemented
        return self.dtype == other.dtype and bool(np.array_equal(self._cells, other._cells))

    def __hash__(self) -> int:
        return hash((self.dtype.str, self._cells.tobytes()))

    def is_close(self, other: "Matrix3", atol: float = 1e-8, rtol: float = 0.0) -> bool:
        """Approximate cellwise equality."""
        return bool(np.allclose(self._cells, other._cells, atol=atol, rtol=rtol))

    def __repr__(self) -> str:
        return f"Matrix3({self._cells.tolist()}, dtype={self.dtype.name})"

    def __str__(self) -> str:
        rows = self._cells.reshape(3, 3)
        return "\n".join("|" + " ".join(str(v) for v in row) + "|" for row in rows)
