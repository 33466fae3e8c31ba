"""Reverse-phi motion: a drifting 50% square grating whose contrast flips every frame.

Pairing a spatial displacement with a contrast inversion makes the grating
appear to move against its physical displacement. The per-frame step is
renormalised to ``spat_freq / num_frames`` so a whole number of steps spans
one wavelength; the step actually used is reported as
``SynthesisResult.true_step_size``.
"""

from __future__ import annotations

import logging
import math

import torch

from patternforge.arena.geometry import ArenaGeometry
from patternforge.stimuli.base import (
    BasePatternGenerator,
    SynthesisResult,
    motion_channel,
    round_half_up,
    square_wave,
)
from patternforge.stimuli.params import ReversePhiParams
from patternforge.stimuli.sampling import fractional_membership, samples_by_diff

logger = logging.getLogger(__name__)


def contrast_for_frame(grating: torch.Tensor, frame_index: int, bright: float, dark: float) -> torch.Tensor:
    """Map raw grating values in ``[0, 1]`` to intensities for one frame.

    Frames ``0, 2, 4, ...`` map onto ``[dark, bright]``; frames ``1, 3, ...``
    onto the swapped range ``[bright, dark]``.
    """
    if frame_index % 2 == 0:
        return grating * (bright - dark) + dark
    return grating * (dark - bright) + bright


def pole_threshold(p_rad: torch.Tensor, spat_freq: float, motion_type: str) -> torch.Tensor:
    """Angular distance from the pole inside which the grating is unresolvable.

    For rotation the threshold is ``p_rad / (spat_freq / 2)``. For
    translation it is ``pi/2 - atan(d1) - p_rad/2`` with
    ``d1 = -d2/2 + sqrt(d2**2/4 + d2/tan(p_rad) - 1)`` and ``d2 = spat_freq/2``;
    a negative radicand is clamped to zero.
    """
    half_wavelength = spat_freq / 2
    if motion_type == "rotation":
        return p_rad / half_wavelength
    radicand = half_wavelength ** 2 / 4 + half_wavelength / torch.tan(p_rad) - 1
    d1 = -half_wavelength / 2 + torch.sqrt(torch.clamp(radicand, min=0.0))
    return math.pi / 2 - torch.atan(d1) - p_rad / 2


class ReversePhiGenerator(BasePatternGenerator):
    """Square grating with per-frame contrast inversion.

    ``num_frames = max(1, round(spat_freq / step_size))``. With ``aa_poles``
    enabled (and motion other than expansion-contraction), pixels near the
    two projection poles are blended toward the mid level
    ``(bright + dark) / 2`` by their anti-aliased membership in the
    unresolvable cap.
    """

    stimulus_type = "reverse_phi"
    params_class = ReversePhiParams

    def forward(self, geometry: ArenaGeometry) -> SynthesisResult:
        p = self.params
        num_frames = max(1, round_half_up(p.spat_freq / p.step_size))
        true_step = p.spat_freq / num_frames
        if not math.isclose(true_step, p.step_size):
            logger.debug(
                "reverse_phi: step %.6f rad adjusted to %.6f rad (%d frames per cycle)",
                p.step_size, true_step, num_frames,
            )

        azimuth, colatitude = geometry.spherical(self.stimulus_rotation(p.motion_type))
        coord = self.sampler(geometry).sample(motion_channel(azimuth, colatitude, p.motion_type))

        pole_mix = None
        if p.aa_poles and p.motion_type != "expansion-contraction":
            threshold = pole_threshold(geometry.p_rad_tensor(), p.spat_freq, p.motion_type)
            theta = samples_by_diff(colatitude, p.aa_samples)
            if threshold.ndim:
                threshold = threshold.unsqueeze(-1)
            pole_mix = fractional_membership((theta < threshold) | (theta > math.pi - threshold))
        mid = (p.bright + p.dark) / 2

        values = torch.empty(geometry.shape + (num_frames,), dtype=torch.float64, device=geometry.device)
        for k in range(num_frames):
            phase = (coord + p.phase_shift - k * true_step) * 2 * math.pi / p.spat_freq
            grating = (square_wave(phase, 50.0).mean(dim=-1) + 1) / 2
            frame = contrast_for_frame(grating, k, p.bright, p.dark)
            if pole_mix is not None:
                frame = pole_mix * mid + (1 - pole_mix) * frame
            values[..., k] = frame

        return SynthesisResult(self.finalize(values, geometry), num_frames, true_step)


__all__ = ["ReversePhiGenerator", "contrast_for_frame", "pole_threshold"]
