"""Looming stimulus: a disc centred on the pole that expands frame by frame.

Two approach profiles are supported:

* ``constant_velocity``: the angular radius grows linearly from
  ``initial_size`` to ``final_size``.
* ``exponential``: the radius follows an object on a collision course,
  ``theta(tau) = 2 * atan(l_over_v / (2 * tau))`` where ``tau`` is the time
  to collision; ``tau`` is spaced linearly, so the disc grows slowly at first
  and explodes near the end.

References:
    Gabbiani, F., Krapp, H. G., & Laurent, G. (1999). Computation of object
    approach by a wide-field, motion-sensitive neuron. J. Neurosci.
"""

from __future__ import annotations

import logging
import math
import warnings
from typing import Tuple

import torch

from patternforge.arena.geometry import ArenaGeometry
from patternforge.stimuli.base import BasePatternGenerator, SynthesisResult, round_half_up
from patternforge.stimuli.params import LoomingParams
from patternforge.stimuli.sampling import fractional_membership

logger = logging.getLogger(__name__)

MIN_TIME_TO_COLLISION = 1e-3  # seconds
DEFAULT_EXPONENTIAL_FRAMES = 60


def time_to_collision(size: float, l_over_v: float) -> float:
    """``tau = l_over_v / (2 * tan(size / 2))`` for angular radius ``size``."""
    return l_over_v / (2 * math.tan(size / 2))


def constant_velocity_sizes(params: LoomingParams) -> Tuple[torch.Tensor, float]:
    """Linearly spaced angular radii and the resulting per-frame step."""
    span = params.final_size - params.initial_size
    if params.step_size is not None:
        num_frames = max(2, round_half_up(span / params.step_size))
    else:
        num_frames = max(2, round_half_up(math.degrees(span)))
    sizes = torch.linspace(params.initial_size, params.final_size, num_frames, dtype=torch.float64)
    return sizes, span / (num_frames - 1)


def exponential_sizes(params: LoomingParams) -> Tuple[torch.Tensor, float]:
    """Angular radii for a collision-course approach.

    Time to collision is spaced linearly between its values at the initial
    and final sizes, either at ``1 / frame_rate`` intervals or over
    :data:`DEFAULT_EXPONENTIAL_FRAMES` frames. The final ``tau`` is clamped to
    :data:`MIN_TIME_TO_COLLISION`. The returned step is the mean size change
    per frame.
    """
    tau_initial = time_to_collision(params.initial_size, params.l_over_v)
    tau_final = max(time_to_collision(params.final_size, params.l_over_v), MIN_TIME_TO_COLLISION)
    interval = tau_initial - tau_final

    if params.frame_rate is not None:
        num_frames = max(2, math.ceil(interval * params.frame_rate))
    else:
        num_frames = DEFAULT_EXPONENTIAL_FRAMES

    tau = torch.linspace(tau_initial, tau_final, num_frames, dtype=torch.float64)
    sizes = 2 * torch.atan(params.l_over_v / (2 * tau))
    return sizes, (params.final_size - params.initial_size) / (num_frames - 1)


class LoomingGenerator(BasePatternGenerator):
    """Expanding disc at ``pole_coord`` drawn at ``levels[0]`` on ``levels[1]``.

    Each frame's value is the anti-aliased fraction of the pixel lying inside
    the current disc, blended between object and background level.

    Warns (``UserWarning``) when ``final_size`` exceeds ``pi / 2``, i.e. when
    the disc grows past a hemisphere.

    Example:
        >>> gen = LoomingGenerator(initial_size=math.radians(5),
        ...                        final_size=math.radians(90),
        ...                        step_size=math.radians(5))
        >>> gen(cylindrical_arena(2, 12)).num_frames
        17
    """

    stimulus_type = "looming"
    params_class = LoomingParams

    def angular_sizes(self) -> Tuple[torch.Tensor, float]:
        """Disc radius for every frame, and the nominal step between frames."""
        if self.params.loom_profile == "exponential":
            return exponential_sizes(self.params)
        return constant_velocity_sizes(self.params)

    def forward(self, geometry: ArenaGeometry) -> SynthesisResult:
        p = self.params
        if p.final_size > math.pi / 2:
            warnings.warn(
                f"looming final_size {math.degrees(p.final_size):.1f} deg exceeds 90 deg; "
                "the disc will cover more than a hemisphere",
                UserWarning,
                stacklevel=2,
            )

        sizes, true_step = self.angular_sizes()
        num_frames = len(sizes)

        _, colatitude = geometry.spherical(self.pole_rotation())
        theta_samples = self.sampler(geometry).sample(colatitude)

        values = torch.empty(geometry.shape + (num_frames,), dtype=torch.float64, device=geometry.device)
        for k, radius in enumerate(sizes.tolist()):
            inside = fractional_membership(theta_samples < radius)
            values[..., k] = inside * p.bright + (1 - inside) * p.dark

        logger.debug(
            "looming (%s): %d frames, %.3f -> %.3f rad",
            p.loom_profile, num_frames, sizes[0].item(), sizes[-1].item(),
        )
        return SynthesisResult(self.finalize(values, geometry), num_frames, true_step)


__all__ = [
    "LoomingGenerator",
    "time_to_collision",
    "constant_velocity_sizes",
    "exponential_sizes",
    "MIN_TIME_TO_COLLISION",
]
