# -*- coding: utf-8 -*-
"""
Tint: The arithmetic of color between devices and tristimulus space
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

LMS Cone Response
=================
LMS approximates the responses of the long, medium and short wavelength cones
of the human eye. There is no single LMS space: each model is a 3x3 matrix
``M`` with ``lms = M · xyz``, and its inverse maps back to XYZ.

Models:
    BRADFORD     the "sharpened" Bradford transform used for chromatic adaptation
    CIECAM97S    the transform of the CIECAM97s appearance model
    CIECAM2002   the CAT02 transform of CIECAM02

Each model gets its own color class (``LmsBradford``, ``LmsCam97s``,
``LmsCam2002``), so samples of different models never mix in ``lerp`` or
equality. LMS channels are free floats: negative responses are valid.

Chromatic adaptation (von Kries in the model's cone space):
    A = M^-1 · diag(lms_dst / lms_src) · M
maps XYZ seen under a source white onto the corresponding XYZ under a target
white. The composite matrix is cached per (source, target, model).
"""

import functools
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Final, Optional, Tuple, Union

import numpy as np

from tint_channel import ChannelDomain
from tint_color import Color, Xyz, Xyza, _BoundedChannels, _channel_property, _LerpChannels
from tint_matrix import Matrix3
from tint_whitepoint import WhitePointLike, white_point_xyz

__all__ = [
    # --- Models ---
    "LmsModel",
    "BRADFORD",
    "CIECAM97S",
    "CIECAM2002",
    "get_lms_model",

    # --- Colors ---
    "Lms",
    "LmsBradford",
    "LmsCam97s",
    "LmsCam2002",
    "xyz_to_lms",
    "lms_to_xyz",

    # --- Chromatic adaptation ---
    "adaptation_matrix",
    "adapt",
]

_FREE = ChannelDomain.FREE


# =============================================================================
# 1. TRANSFORM MODELS
# =============================================================================

@dataclass(slots=True, frozen=True)
class LmsModel:
    """A named XYZ -> LMS matrix and its inverse."""
    name:    str
    forward: Matrix3
    inverse: Matrix3 = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "inverse", self.forward.inverse_or_raise())

    def __str__(self) -> str:
        return self.name


BRADFORD: Final[LmsModel] = LmsModel("Bradford", Matrix3([
     0.8951,  0.2664, -0.1614,
    -0.7502,  1.7135,  0.0367,
     0.0389, -0.0685,  1.0296,
]))

CIECAM97S: Final[LmsModel] = LmsModel("CIECAM97s", Matrix3([
     0.8562,  0.3372, -0.1934,
    -0.8360,  1.8327,  0.0033,
     0.0357, -0.0469,  1.0112,
]))

CIECAM2002: Final[LmsModel] = LmsModel("CIECAM02", Matrix3([
     0.7328,  0.4296, -0.1624,
    -0.7036,  1.6975,  0.0061,
     0.0030,  0.0136,  0.9834,
]))

_MODELS: Final[Dict[str, LmsModel]] = {
    "bradford": BRADFORD,
    "ciecam97s": CIECAM97S,
    "cam97s": CIECAM97S,
    "ciecam02": CIECAM2002,
    "ciecam2002": CIECAM2002,
    "cam2002": CIECAM2002,
    "cat02": CIECAM2002,
}


def get_lms_model(name: str) -> LmsModel:
    """
    Look up a model by name (case-insensitive; "cat02" is an alias of CIECAM02).

    Raises:
        KeyError: For an unknown name.
    """
    try:
        return _MODELS[name.lower()]
    except KeyError:
        raise KeyError(f"Unknown LMS model '{name}'. Available: {', '.join(_MODELS)}") from None


# =============================================================================
# 2. LMS COLORS
# =============================================================================

class Lms(Color, _BoundedChannels, _LerpChannels):
    """
    LMS cone response of one model. Use the per-model subclasses; the base
    class carries no model and cannot convert.
    """

    __slots__ = ()
    CHANNEL_NAMES = ("l", "m", "s")
    DOMAINS = (_FREE, _FREE, _FREE)
    LABEL = "LMS"
    MODEL: ClassVar[Optional[LmsModel]] = None

    def __init__(self, l: Any, m: Any, s: Any, fmt: Optional[object] = None) -> None:
        super().__init__(l, m, s, fmt=fmt)

    l = _channel_property(0, "l")
    m = _channel_property(1, "m")
    s = _channel_property(2, "s")

    @classmethod
    def model(cls) -> LmsModel:
        if cls.MODEL is None:
            raise TypeError(f"{cls.__name__} has no LMS model; use LmsBradford, LmsCam97s or LmsCam2002")
        return cls.MODEL

    @classmethod
    def from_xyz(cls, xyz: Union[Xyz, Xyza]) -> "Lms":
        """Forward-transform XYZ (alpha, if any, is dropped)."""
        return cls._wrap(cls.model().forward.transform_vector(xyz.channels[..., :3]))

    def to_xyz(self) -> Xyz:
        return Xyz._wrap(self.model().inverse.transform_vector(self._channels))


class LmsBradford(Lms):
    __slots__ = ()
    MODEL = BRADFORD


class LmsCam97s(Lms):
    __slots__ = ()
    MODEL = CIECAM97S


class LmsCam2002(Lms):
    __slots__ = ()
    MODEL = CIECAM2002


_LMS_CLASS_FOR: Final[Dict[LmsModel, type]] = {
    BRADFORD: LmsBradford,
    CIECAM97S: LmsCam97s,
    CIECAM2002: LmsCam2002,
}


def xyz_to_lms(xyz: Union[Xyz, Xyza], model: Union[LmsModel, str] = BRADFORD) -> Lms:
    """XYZ to the LMS color class of ``model``."""
    if isinstance(model, str):
        model = get_lms_model(model)
    return _LMS_CLASS_FOR[model].from_xyz(xyz)


def lms_to_xyz(lms: Lms) -> Xyz:
    return lms.to_xyz()


# =============================================================================
# 3. CHROMATIC ADAPTATION
# =============================================================================

@functools.lru_cache(maxsize=16)
def _cached_adaptation(source: Tuple[float, float, float], target: Tuple[float, float, float],
                       model: LmsModel) -> Matrix3:
    """Cached worker for the von Kries composite matrix."""
    src_lms = model.forward.transform_vector(np.asarray(source, dtype=np.float64))
    dst_lms = model.forward.transform_vector(np.asarray(target, dtype=np.float64))
    if np.any(src_lms == 0.0):
        raise ValueError(f"Source white {source} has a zero cone response under {model}")
    gains = Matrix3.identity().scale_columns(dst_lms / src_lms)
    return model.inverse @ gains @ model.forward


def adaptation_matrix(source_white: WhitePointLike, target_white: WhitePointLike,
                      model: Union[LmsModel, str] = BRADFORD) -> Matrix3:
    """
    XYZ -> XYZ matrix adapting colors seen under ``source_white`` to
    ``target_white``.

    Args:
        source_white: ``WhitePoint``, ``Xyz`` sample or XYZ triple.
        target_white: Same forms as ``source_white``.
        model: Cone space the gains are applied in.

    Raises:
        ValueError: If the source white has a zero cone response.
    """
    if isinstance(model, str):
        model = get_lms_model(model)
    return _cached_adaptation(white_point_xyz(source_white), white_point_xyz(target_white), model)


def adapt(xyz: Union[Xyz, Xyza], source_white: WhitePointLike, target_white: WhitePointLike,
          model: Union[LmsModel, str] = BRADFORD) -> Union[Xyz, Xyza]:
    """Chromatically adapt XYZ colors; alpha is carried through unchanged."""
    matrix = adaptation_matrix(source_white, target_white, model)
    channels = xyz.channels
    adapted = matrix.transform_vector(channels[..., :3])
    return type(xyz)._wrap(np.concatenate([adapted, channels[..., 3:]], axis=-1))
