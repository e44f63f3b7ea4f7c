# -*- coding: utf-8 -*-
"""
Tint: The arithmetic of color between devices and tristimulus space
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Tests for the channel cast engine.

Covers the integer bit-replication rules, the biased float -> u8 path,
saturation, and the range-rescaling variant.
"""

import numpy as np
import pytest

from tint_cast import (
    CAST_TABLE,
    FLOAT_FORMATS,
    INTEGER_FORMATS,
    ChannelFormat,
    cast,
    cast_with_rescale,
)

U8, U16, U32, U64 = ChannelFormat.U8, ChannelFormat.U16, ChannelFormat.U32, ChannelFormat.U64
F32, F64 = ChannelFormat.F32, ChannelFormat.F64


class TestChannelFormat:
    """Format metadata and resolution."""

    def test_table_is_complete(self):
        assert len(CAST_TABLE) == 36
        for src in ChannelFormat:
            for dst in ChannelFormat:
                assert (src, dst) in CAST_TABLE

    @pytest.mark.parametrize("fmt,bits,maximum", [
        (U8, 8, 255),
        (U16, 16, 65535),
        (U32, 32, 0xFFFFFFFF),
        (U64, 64, 0xFFFFFFFFFFFFFFFF),
    ])
    def test_integer_metadata(self, fmt, bits, maximum):
        assert fmt.bits == bits
        assert fmt.max_value == maximum
        assert not fmt.is_float

    def test_float_metadata(self):
        assert F32.is_float and F64.is_float
        assert F32.max_value == 1.0

    def test_of_resolves_values_and_dtypes(self):
        assert ChannelFormat.of(np.uint8(3)) is U8
        assert ChannelFormat.of(np.zeros(4, dtype=np.uint32)) is U32
        assert ChannelFormat.of(np.float32) is F32
        assert ChannelFormat.of(0.5) is F64
        assert ChannelFormat.of(U16) is U16

    def test_of_resolves_format_names(self):
        assert ChannelFormat.of("u8") is U8
        assert ChannelFormat.of("f32") is F32
        assert str(U64) == "u64"

    def test_of_rejects_unsupported(self):
        with pytest.raises(TypeError):
            ChannelFormat.of(np.int64(3))
        with pytest.raises(TypeError):
            ChannelFormat.of(np.zeros(2, dtype=np.float16))


class TestIntegerCasts:
    """Widening replicates bits; narrowing keeps the top bits."""

    @pytest.mark.parametrize("value,to,expected", [
        (np.uint8(0xFF), U16, 0xFFFF),
        (np.uint8(0xFF), U32, 0xFFFFFFFF),
        (np.uint8(0xFF), U64, 0xFFFFFFFFFFFFFFFF),
        (np.uint8(0x12), U16, 0x1212),
        (np.uint8(0x12), U64, 0x1212121212121212),
        (np.uint16(0xABCD), U32, 0xABCDABCD),
        (np.uint16(0xABCD), U64, 0xABCDABCDABCDABCD),
        (np.uint32(0xDEADBEEF), U64, 0xDEADBEEFDEADBEEF),
        (np.uint8(0), U64, 0),
    ])
    def test_widening(self, value, to, expected):
        out = cast(value, to)
        assert out.dtype == to.dtype
        assert int(out) == expected

    @pytest.mark.parametrize("value,to,expected", [
        (np.uint16(0x1234), U8, 0x12),
        (np.uint16(0x12FF), U8, 0x12),
        (np.uint32(0x12345678), U16, 0x1234),
        (np.uint32(0x12345678), U8, 0x12),
        (np.uint64(0xFEDCBA9876543210), U32, 0xFEDCBA98),
        (np.uint64(0xFEDCBA9876543210), U8, 0xFE),
    ])
    def test_narrowing_truncates(self, value, to, expected):
        assert int(cast(value, to)) == expected

    @pytest.mark.parametrize("wide", [U16, U32, U64])
    def test_u8_roundtrip_is_lossless(self, wide):
        values = np.arange(256, dtype=np.uint8)
        back = cast(cast(values, wide), U8)
        np.testing.assert_array_equal(back, values)

    def test_u16_roundtrip_through_u64(self):
        values = np.arange(0, 65536, 257, dtype=np.uint16)
        np.testing.assert_array_equal(cast(cast(values, U64), U16), values)

    def test_identity_returns_copy(self):
        values = np.array([1, 2, 3], dtype=np.uint16)
        out = cast(values, U16)
        out[0] = 99
        assert values[0] == 1


class TestFloatCasts:
    """Integer <-> float scaling and the float -> u8 bias."""

    @pytest.mark.parametrize("src", INTEGER_FORMATS)
    @pytest.mark.parametrize("dst", FLOAT_FORMATS)
    def test_int_max_maps_to_one(self, src, dst):
        out = cast(src.dtype.type(src.max_value), dst)
        assert out.dtype == dst.dtype
        assert out == 1.0

    def test_int_to_float_scale(self):
        assert cast(np.uint8(0), F64) == 0.0
        assert cast(np.uint16(32768), F64) == pytest.approx(32768 / 65535)

    @pytest.mark.parametrize("value,expected", [
        (1.0, 255),
        (0.999, 255),
        (0.99, 253),
        (0.5, 127),
        (0.0, 0),
    ])
    def test_float_to_u8_bias(self, value, expected):
        assert int(cast(value, U8)) == expected

    def test_float_to_u16_truncates(self):
        assert int(cast(1.0, U16)) == 65535
        assert int(cast(0.5, U16)) == 32767

    def test_float32_source(self):
        out = cast(np.float32(1.0), U32)
        assert out.dtype == np.uint32
        assert int(out) == 0xFFFFFFFF

    @pytest.mark.parametrize("value,expected", [
        (2.0, 255),
        (-0.5, 0),
        (float("nan"), 0),
        (float("inf"), 255),
    ])
    def test_float_to_int_saturates(self, value, expected):
        assert int(cast(value, U8)) == expected

    def test_one_to_u64_saturates_at_max(self):
        assert int(cast(1.0, U64)) == 0xFFFFFFFFFFFFFFFF

    @pytest.mark.parametrize("src", INTEGER_FORMATS)
    def test_int_float_int_roundtrip(self, src):
        rng = np.random.default_rng(7)
        values = rng.integers(0, min(src.max_value, 2**53), size=64, dtype=np.uint64).astype(src.dtype)
        values[0] = 0
        values[1] = src.max_value
        back = cast(cast(values, F64), src)
        diff = np.abs(back.astype(np.float64) - values.astype(np.float64))
        assert back.dtype == src.dtype
        assert diff.max() <= max(1.0, src.max_value * 2.0**-52)

    def test_float_to_float(self):
        assert cast(0.1, F32) == np.float32(0.1)
        assert cast(np.float32(0.25), F64) == 0.25

    def test_no_clamping_between_floats(self):
        assert cast(1.5, F32) == np.float32(1.5)
        assert cast(np.float32(-0.25), F64) == -0.25


class TestCastShapes:
    """Scalars stay scalars, arrays keep their shape."""

    def test_scalar_in_scalar_out(self):
        out = cast(np.uint8(255), F32)
        assert isinstance(out, np.float32)

    def test_array_shape_preserved(self):
        values = np.linspace(0.0, 1.0, 24).reshape(2, 4, 3)
        out = cast(values, U16)
        assert out.shape == (2, 4, 3)
        assert out.dtype == np.uint16

    def test_python_ints_read_as_float64(self):
        assert int(cast(0, U8)) == 0
        assert int(cast(255, U16)) == 65535
        assert cast(1, F32) == np.float32(1.0)
        np.testing.assert_array_equal(cast([0, 1], U8), [0, 255])

    def test_source_override(self):
        out = cast(0.5, U8, source=F32)
        assert int(out) == 127


class TestCastWithRescale:
    """Linear remap of a custom floating range."""

    def test_float_to_int_rescales_first(self):
        assert int(cast_with_rescale(0.0, U8, -1.0, 1.0)) == 127
        assert int(cast_with_rescale(1.0, U8, -1.0, 1.0)) == 255
        assert int(cast_with_rescale(-1.0, U8, -1.0, 1.0)) == 0

    def test_int_to_float_rescales_after(self):
        assert cast_with_rescale(np.uint8(255), F64, -1.0, 1.0) == 1.0
        assert cast_with_rescale(np.uint8(0), F64, -1.0, 1.0) == -1.0
        assert cast_with_rescale(np.uint16(65535), F32, 0.0, 100.0) == pytest.approx(100.0)

    def test_default_range_matches_cast(self):
        values = np.linspace(0.0, 1.0, 11)
        np.testing.assert_array_equal(cast_with_rescale(values, U16), cast(values, U16))

    def test_other_pairs_are_plain_casts(self):
        assert int(cast_with_rescale(np.uint8(0x12), U16, -5.0, 5.0)) == 0x1212
        assert cast_with_rescale(0.75, F32, -5.0, 5.0) == np.float32(0.75)
