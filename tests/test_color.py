# -*- coding: utf-8 -*-
"""
Tint: The arithmetic of color between devices and tristimulus space
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Tests for the color models and their capability interfaces.
"""

import numpy as np
import pytest

from tint_cast import ChannelFormat
from tint_color import (
    Bounded,
    Broadcast,
    Flatten,
    Invert,
    Lerp,
    Rgb,
    Rgba,
    XyY,
    Xyz,
    Xyza,
    xyy_to_xyz,
    xyz_to_xyy,
)


class TestCapabilities:
    """Models opt into capabilities individually."""

    @pytest.mark.parametrize("color", [
        Rgb(0.1, 0.2, 0.3),
        Rgba(0.1, 0.2, 0.3, 1.0),
        Xyz(0.1, 0.2, 0.3),
        Xyza(0.1, 0.2, 0.3, 1.0),
        XyY(0.3, 0.3, 1.0),
    ])
    def test_common_capabilities(self, color):
        assert isinstance(color, Bounded)
        assert isinstance(color, Lerp)
        assert isinstance(color, Flatten)
        assert isinstance(color, Broadcast)

    def test_only_rgb_models_invert(self):
        assert isinstance(Rgb(0.1, 0.2, 0.3), Invert)
        assert isinstance(Rgba(0.1, 0.2, 0.3, 1.0), Invert)
        assert not isinstance(Xyz(0.1, 0.2, 0.3), Invert)
        assert not isinstance(XyY(0.3, 0.3, 1.0), Invert)


class TestConstruction:
    """Storage, formats and conversions to and from arrays."""

    def test_channel_access(self):
        c = Rgb(0.1, 0.2, 0.3)
        assert (c.red, c.green, c.blue) == (0.1, 0.2, 0.3)
        assert c.format is ChannelFormat.F64
        assert Rgb.num_channels() == 3
        assert Rgba.num_channels() == 4

    def test_explicit_format(self):
        c = Rgb(10, 20, 30, fmt=ChannelFormat.U16)
        assert c.format is ChannelFormat.U16
        assert c.to_tuple() == (10, 20, 30)

    def test_python_ints_default_to_float64(self):
        black = Rgb(0, 0, 0)
        assert black.format is ChannelFormat.F64
        assert black.to_tuple() == (0.0, 0.0, 0.0)
        assert Rgb(1.0, 0, 0).format is ChannelFormat.F64
        assert Xyz.broadcast(0).format is ChannelFormat.F64
        assert Rgb.from_array([0, 1, 0]).to_tuple() == (0.0, 1.0, 0.0)

    def test_python_ints_keep_value_without_format(self):
        c = Rgb(255, 128, 0)
        assert c.format is ChannelFormat.F64
        assert c.to_tuple() == (255.0, 128.0, 0.0)
        assert not c.is_normalized()

    def test_wrong_arity(self):
        with pytest.raises(TypeError):
            Rgb.from_tuple((0.1, 0.2))
        with pytest.raises(ValueError):
            Rgb.from_array([0.1, 0.2, 0.3, 0.4])

    def test_integer_xyz_is_rejected(self):
        with pytest.raises(TypeError):
            Xyz(1, 2, 3, fmt=ChannelFormat.U8)

    def test_from_array_copies(self):
        values = np.array([0.1, 0.2, 0.3])
        c = Rgb.from_array(values)
        values[0] = 0.9
        assert c.red == 0.1
        out = c.to_array()
        out[1] = 0.9
        assert c.green == 0.2

    def test_channels_are_read_only(self):
        with pytest.raises(ValueError):
            Rgb(0.1, 0.2, 0.3).channels[0] = 1.0

    def test_broadcast(self):
        assert Rgb.broadcast(0.5) == Rgb(0.5, 0.5, 0.5)
        assert Xyz.broadcast(2.0, ChannelFormat.F32).format is ChannelFormat.F32

    def test_color_cast(self):
        c = Rgb(1.0, 0.5, 0.0).color_cast(ChannelFormat.U8)
        assert c.to_tuple() == (255, 127, 0)
        assert c.color_cast(ChannelFormat.U16).to_tuple() == (65535, 127 * 257, 0)

    def test_clamp(self):
        c = Xyz(0.2, 1.5, 3.0).clamp(0.5, 2.0)
        assert c.to_tuple() == (0.5, 1.5, 2.0)

    def test_rgba_from_color(self):
        c = Rgba.from_color(Rgb(0.1, 0.2, 0.3), 0.5)
        assert c.to_tuple() == (0.1, 0.2, 0.3, 0.5)
        rgb, alpha = c.decompose()
        assert rgb == Rgb(0.1, 0.2, 0.3)
        assert alpha == 0.5


class TestBatches:
    """A color may hold any number of samples."""

    def test_batch_shape(self):
        batch = Rgb.from_array(np.zeros((4, 5, 3)))
        assert batch.is_batch
        assert batch.shape == (4, 5)
        assert len(batch) == 4
        assert batch[1].shape == (5,)

    def test_single_sample_is_not_indexable(self):
        with pytest.raises(TypeError):
            Rgb(0.1, 0.2, 0.3)[0]

    def test_channel_property_on_batch(self):
        batch = Rgb.from_array([[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]])
        np.testing.assert_array_equal(batch.green, [0.2, 0.5])

    def test_broadcast_channel_arrays(self):
        c = Rgb(np.array([0.1, 0.2]), 0.5, 0.0)
        assert c.shape == (2,)
        np.testing.assert_array_equal(c.channels[:, 1], [0.5, 0.5])


class TestBoundedLerpInvert:
    """Channelwise normalize, lerp and invert."""

    def test_xyz_lerp(self):
        a = Xyz(0.8, 0.2, 1.5)
        b = Xyz(0.1, 0.7, 0.3)
        np.testing.assert_allclose(a.lerp(b, 0.5).to_tuple(), (0.45, 0.45, 0.9))
        np.testing.assert_allclose(a.lerp(b, 0.25).to_tuple(), (0.625, 0.325, 1.2))

    def test_lerp_model_mismatch(self):
        with pytest.raises(TypeError):
            Xyz(0.1, 0.2, 0.3).lerp(Rgb(0.1, 0.2, 0.3), 0.5)

    def test_lerp_format_mismatch(self):
        with pytest.raises(TypeError):
            Rgb(0.1, 0.2, 0.3).lerp(Rgb(0.1, 0.2, 0.3, fmt=ChannelFormat.F32), 0.5)

    def test_integer_lerp(self):
        a = Rgb(0, 100, 255, fmt=ChannelFormat.U8)
        b = Rgb(255, 200, 0, fmt=ChannelFormat.U8)
        assert a.lerp(b, 0.5).to_tuple() == (127, 150, 127)

    def test_xyz_normalize(self):
        c = Xyz(1e6, -2e7, 8e-5).normalize()
        assert c.to_tuple() == (1e6, 0.0, 8e-5)

    def test_xyy_normalize_mixes_domains(self):
        c = XyY(1.5, -0.2, 7.0).normalize()
        assert c.to_tuple() == (1.0, 0.0, 7.0)

    @pytest.mark.parametrize("color", [
        Rgb(1.5, -0.5, 0.5),
        Xyz(-1.0, 3.0, 0.0),
        Rgba(0.2, 0.2, 2.0, -1.0),
    ])
    def test_normalize_is_idempotent(self, color):
        once = color.normalize()
        assert once.normalize() == once
        assert once.is_normalized()

    def test_rgb_invert(self):
        assert Rgb(0.25, 0.0, 1.0).invert() == Rgb(0.75, 1.0, 0.0)
        inverted = Rgb(0, 55, 255, fmt=ChannelFormat.U8).invert()
        assert inverted.to_tuple() == (255, 200, 0)

    def test_rgba_invert_includes_alpha(self):
        assert Rgba(0.25, 0.0, 1.0, 0.75).invert().alpha == 0.25


class TestComparisonAndDisplay:
    """Structural equality, hashing and string forms."""

    def test_equality_is_structural(self):
        assert Rgb(0.1, 0.2, 0.3) == Rgb(0.1, 0.2, 0.3)
        assert Rgb(0.1, 0.2, 0.3) != Xyz(0.1, 0.2, 0.3)
        assert Rgb(0.5, 0.5, 0.5) != Rgb(0.5, 0.5, 0.5, fmt=ChannelFormat.F32)

    def test_hash(self):
        assert len({Rgb(0.1, 0.2, 0.3), Rgb(0.1, 0.2, 0.3), Xyz(0.1, 0.2, 0.3)}) == 2

    def test_is_close(self):
        assert Rgb(0.1, 0.2, 0.3).is_close(Rgb(0.1 + 1e-10, 0.2, 0.3))
        assert not Rgb(0.1, 0.2, 0.3).is_close(Xyz(0.1, 0.2, 0.3))

    def test_str(self):
        assert str(Xyz(0.5, 0.25, 1.0)) == "XYZ(0.5, 0.25, 1.0)"
        assert str(Rgb(1, 2, 3, fmt=ChannelFormat.U8)) == "Rgb(1, 2, 3)"
        assert str(Rgb.from_array(np.zeros((2, 3)))) == "Rgb[2](f64)"

    def test_repr(self):
        assert repr(Rgb(0.5, 0.25, 1.0)) == "Rgb(0.5, 0.25, 1.0, fmt=ChannelFormat.F64)"


class TestXyY:
    """Projection between XYZ and xyY."""

    def test_xyz_to_xyy(self):
        xyy = xyz_to_xyy(Xyz(0.8, 0.1, 0.5))
        np.testing.assert_allclose(xyy.to_tuple(), (0.571429, 0.071429, 0.1), atol=1e-6)

    def test_xyy_to_xyz(self):
        xyz = xyy_to_xyz(XyY(0.285, 0.4194, 0.583))
        np.testing.assert_allclose(xyz.to_tuple(), (0.396173, 0.583, 0.410908), atol=1e-6)

    def test_round_trip(self):
        xyz = Xyz(0.3, 0.6, 0.15)
        assert XyY.from_xyz(xyz).to_xyz().is_close(xyz, atol=1e-12)

    def test_black(self):
        assert xyz_to_xyy(Xyz(0.0, 0.0, 0.0)).to_tuple() == (0.0, 0.0, 0.0)
        assert xyy_to_xyz(XyY(0.3, 0.0, 0.5)).to_tuple() == (0.0, 0.0, 0.0)

    def test_negative_xyz(self):
        with pytest.raises(ValueError):
            xyz_to_xyy(Xyz(-0.1, 0.5, 0.5))

    def test_batch(self):
        xyz = Xyz.from_array([[0.8, 0.1, 0.5], [0.0, 0.0, 0.0]])
        xyy = xyz_to_xyy(xyz)
        assert xyy.shape == (2,)
        np.testing.assert_array_equal(xyy.channels[1], [0.0, 0.0, 0.0])

    def test_keeps_float32(self):
        xyy = xyz_to_xyy(Xyz(0.8, 0.1, 0.5, fmt=ChannelFormat.F32))
        assert xyy.format is ChannelFormat.F32
