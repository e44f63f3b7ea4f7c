# -*- coding: utf-8 -*-
"""
Tint: The arithmetic of color between devices and tristimulus space
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Tests for the Matrix3 linear algebra kernel.
"""

import numpy as np
import pytest

from tint_cast import ChannelFormat
from tint_matrix import Matrix3, SingularMatrixError, handle_shapes


@pytest.fixture
def sample_matrix():
    """Integer-valued matrix with determinant 1."""
    return Matrix3([1, 2, 1, 4, 2, 3, 1, 3, 1])


class TestConstruction:
    """Constructors, layout and immutability."""

    def test_flat_and_nested_agree(self):
        flat = Matrix3([1, 2, 3, 4, 5, 6, 7, 8, 9])
        nested = Matrix3([[1, 2, 3], [4, 5, 6], [7, 8, 9]])
        assert flat == nested

    def test_row_major_indexing(self):
        m = Matrix3([1, 2, 3, 4, 5, 6, 7, 8, 9])
        assert m[5] == 6
        assert m[1, 2] == 6
        assert m[2, 0] == 7
        with pytest.raises(IndexError):
            m[3, 0]

    def test_canonical_constructors(self):
        assert Matrix3.identity().to_tuple() == (1, 0, 0, 0, 1, 0, 0, 0, 1)
        assert Matrix3.zero().to_tuple() == (0,) * 9
        assert Matrix3.broadcast(2.5).to_tuple() == (2.5,) * 9

    def test_from_columns(self):
        m = Matrix3.from_columns((1, 4, 7), (2, 5, 8), (3, 6, 9))
        assert m == Matrix3([1, 2, 3, 4, 5, 6, 7, 8, 9])

    def test_bad_shape(self):
        with pytest.raises(ValueError):
            Matrix3([1, 2, 3])

    def test_integer_dtype_rejected(self):
        with pytest.raises(TypeError):
            Matrix3([0] * 9, dtype=np.uint8)

    def test_cells_are_read_only(self, sample_matrix):
        with pytest.raises(ValueError):
            sample_matrix.cells[0] = 5.0
        copy = sample_matrix.to_array()
        copy[0, 0] = 5.0
        assert sample_matrix[0] == 1.0

    def test_float32_matrix(self):
        m = Matrix3.identity(np.float32)
        assert m.dtype == np.float32
        assert m.inverse().dtype == np.float32


class TestDeterminantAndInverse:
    """Cofactor determinant and adjugate inverse."""

    def test_determinant(self, sample_matrix):
        assert sample_matrix.determinant() == 1.0
        assert Matrix3([2, 0, 0, 0, 3, 0, 0, 0, 4]).determinant() == 24.0

    def test_inverse(self, sample_matrix):
        inv = sample_matrix.inverse()
        assert inv == Matrix3([-7, 1, 4, -1, 0, 1, 10, -1, -6])

    def test_inverse_times_matrix_is_identity(self):
        m = Matrix3([0.3, -1.2, 4.0, 2.2, 0.1, 0.7, -0.5, 1.9, 3.3])
        assert (m @ m.inverse()).is_close(Matrix3.identity(), atol=1e-10)
        assert (m.inverse() @ m).is_close(Matrix3.identity(), atol=1e-10)

    @pytest.mark.parametrize("cells", [
        [1, 2, 3, 1, 2, 3, 4, 5, 6],
        [1, 2, 3, 4, 5, 6, 1, 2, 3],
        [0] * 9,
    ])
    def test_singular_has_no_inverse(self, cells):
        m = Matrix3(cells)
        assert m.determinant() == 0
        assert m.inverse() is None
        with pytest.raises(SingularMatrixError):
            m.inverse_or_raise()

    def test_singular_error_is_value_error(self):
        assert issubclass(SingularMatrixError, ValueError)

    def test_transpose(self):
        m = Matrix3([1, 2, 3, 4, 5, 6, 7, 8, 9])
        assert m.transpose() == Matrix3([1, 4, 7, 2, 5, 8, 3, 6, 9])
        assert m.transpose().transpose() == m


class TestTransformVector:
    """Row-major vector product for single vectors and batches."""

    def test_single_vector(self, sample_matrix):
        out = sample_matrix.transform_vector((1.0, 2.0, 3.0))
        np.testing.assert_array_equal(out, [8.0, 17.0, 10.0])

    def test_batch_matches_single(self, sample_matrix):
        rng = np.random.default_rng(3)
        batch = rng.random((4, 5, 3))
        out = sample_matrix.transform_vector(batch)
        assert out.shape == (4, 5, 3)
        expected = batch @ sample_matrix.to_array().T
        np.testing.assert_allclose(out, expected, atol=1e-12)
        np.testing.assert_array_equal(out[2, 3], sample_matrix.transform_vector(batch[2, 3]))

    def test_output_cast(self, sample_matrix):
        out = sample_matrix.transform_vector((1.0, 2.0, 3.0), out=ChannelFormat.F32)
        assert out.dtype == np.float32

    def test_float32_input_keeps_precision(self):
        vec = np.array([0.5, 0.25, 1.0], dtype=np.float32)
        out = Matrix3.identity().transform_vector(vec)
        assert out.dtype == np.float32
        np.testing.assert_array_equal(out, vec)

    def test_integer_output_saturates(self):
        m = Matrix3([1, 0, 0, 0, -1, 0, 0, 0, 1000])
        out = m.transform_vector((200.0, 5.0, 1.0), out=np.uint8)
        np.testing.assert_array_equal(out, [200, 0, 255])

    def test_wrong_last_dimension(self, sample_matrix):
        with pytest.raises(ValueError):
            sample_matrix.transform_vector([1.0, 2.0])

    def test_handle_shapes_restores_shape(self):
        @handle_shapes
        def double(rows):
            assert rows.ndim == 2
            return rows * 2

        np.testing.assert_array_equal(double(np.ones(3)), [2, 2, 2])
        assert double(np.ones((2, 2, 3))).shape == (2, 2, 3)


class TestArithmetic:
    """Operators return new matrices."""

    def test_matmul_composes(self, sample_matrix):
        a = Matrix3([2, 0, 0, 0, 3, 0, 0, 0, 4])
        vec = np.array([1.0, -1.0, 0.5])
        composed = (a @ sample_matrix).transform_vector(vec)
        stepwise = a.transform_vector(sample_matrix.transform_vector(vec))
        np.testing.assert_allclose(composed, stepwise)

    def test_scalar_ops(self, sample_matrix):
        assert (sample_matrix * 2).to_tuple() == (2, 4, 2, 8, 4, 6, 2, 6, 2)
        assert 2 * sample_matrix == sample_matrix * 2
        assert (sample_matrix / 2)[0] == 0.5

    def test_add_sub_neg(self, sample_matrix):
        assert sample_matrix + sample_matrix == sample_matrix * 2
        assert sample_matrix - sample_matrix == Matrix3.zero()
        assert -sample_matrix == sample_matrix * -1

    def test_scale_columns(self, sample_matrix):
        scaled = sample_matrix.scale_columns((1.0, 0.5, 2.0))
        assert scaled == Matrix3([1, 1, 2, 4, 1, 6, 1, 1.5, 2])

    def test_matrix_times_matrix_is_not_elementwise(self, sample_matrix):
        with pytest.raises(TypeError):
            sample_matrix * sample_matrix


class TestComparisonAndDisplay:
    """Equality, hashing and string forms."""

    def test_equality_requires_same_dtype(self):
        assert Matrix3.identity() != Matrix3.identity(np.float32)

    def test_hash(self, sample_matrix):
        assert hash(sample_matrix) == hash(Matrix3([1, 2, 1, 4, 2, 3, 1, 3, 1]))
        assert len({sample_matrix, Matrix3([1, 2, 1, 4, 2, 3, 1, 3, 1])}) == 1

    def test_is_close(self, sample_matrix):
        nudged = sample_matrix + Matrix3.broadcast(1e-10)
        assert nudged != sample_matrix
        assert nudged.is_close(sample_matrix)

    def test_str(self):
        m = Matrix3([1, 2, 3, 4, 5, 6, 7, 8, 9])
        assert str(m) == "|1.0 2.0 3.0|\n|4.0 5.0 6.0|\n|7.0 8.0 9.0|"

    def test_len_and_iter(self, sample_matrix):
        assert len(sample_matrix) == 9
        assert list(sample_matrix)[3] == 4.0
