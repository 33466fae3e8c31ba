"""Drifting gratings and sweeping edges.

Both are periodic in the selected motion channel with wavelength
``spat_freq``. A grating keeps its profile and shifts by one step per frame;
an edge keeps its phase and widens its bright part from 0% to 100% of the
cycle.
"""

from __future__ import annotations

import logging
import math

import torch

from patternforge.arena.geometry import ArenaGeometry
from patternforge.stimuli.base import BasePatternGenerator, SynthesisResult, round_half_up, square_wave
from patternforge.stimuli.params import EdgeParams, GratingParams

logger = logging.getLogger(__name__)


def grating_profile(phase: torch.Tensor, grat_type: str = "square", duty_cycle: float = 50.0) -> torch.Tensor:
    """Fraction of bright per pixel, averaged over the trailing sample axis.

    Args:
        phase: Sampled phase in radians, shape ``(..., samples)``.
        grat_type: ``"square"`` or ``"sine"``.
        duty_cycle: Square-wave duty cycle in percent.

    Returns:
        Tensor in ``[0, 1]`` without the sample axis.
    """
    if grat_type == "sine":
        return ((1 + torch.sin(phase)) / 2).mean(dim=-1)
    return (square_wave(phase, duty_cycle).mean(dim=-1) + 1) / 2


class GratingGenerator(BasePatternGenerator):
    """Square or sine grating drifting along the motion channel.

    ``num_frames = max(1, round(spat_freq / step_size))`` and the step is
    adjusted to ``spat_freq / num_frames`` so the last frame wraps cleanly
    into the first.
    """

    stimulus_type = "grating"
    params_class = GratingParams

    def forward(self, geometry: ArenaGeometry) -> SynthesisResult:
        p = self.params
        num_frames = max(1, round_half_up(p.spat_freq / p.step_size))
        true_step = p.spat_freq / num_frames

        coord = self.sampler(geometry).sample(self.channel(geometry, p.motion_type))
        values = torch.empty(geometry.shape + (num_frames,), dtype=torch.float64, device=geometry.device)
        for k in range(num_frames):
            phase = (coord + p.phase_shift - k * true_step) * 2 * math.pi / p.spat_freq
            raw = grating_profile(phase, p.grat_type, p.duty_cycle)
            values[..., k] = raw * (p.bright - p.dark) + p.dark

        logger.debug("grating: %d frames, step %.6f rad", num_frames, true_step)
        return SynthesisResult(self.finalize(values, geometry), num_frames, true_step)


class EdgeGenerator(BasePatternGenerator):
    """Stationary square grating whose duty cycle grows from 0 to 100%.

    ``num_frames = max(2, round(spat_freq / step_size) + 1)``; frame ``k``
    uses duty cycle ``100 * k / (num_frames - 1)``, so the first frame is
    all dark and the last all bright.
    """

    stimulus_type = "edge"
    params_class = EdgeParams

    def forward(self, geometry: ArenaGeometry) -> SynthesisResult:
        p = self.params
        num_frames = max(2, round_half_up(p.spat_freq / p.step_size) + 1)
        true_step = p.spat_freq / (num_frames - 1)

        coord = self.sampler(geometry).sample(self.channel(geometry, p.motion_type))
        phase = (coord + p.phase_shift) * 2 * math.pi / p.spat_freq
        values = torch.empty(geometry.shape + (num_frames,), dtype=torch.float64, device=geometry.device)
        for k in range(num_frames):
            raw = grating_profile(phase, "square", 100.0 * k / (num_frames - 1))
            values[..., k] = raw * (p.bright - p.dark) + p.dark

        logger.debug("edge: %d frames, step %.6f rad", num_frames, true_step)
        return SynthesisResult(self.finalize(values, geometry), num_frames, true_step)


__all__ = ["GratingGenerator", "EdgeGenerator", "grating_profile"]
