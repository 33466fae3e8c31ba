"""Starfield: randomly placed discs drifting through the arena.

Dots are scattered uniformly over the sphere in the stimulus frame (after
the pole or mask rotation) and move by ``step_size`` per frame along the
motion channel:

* rotation: azimuth advances, wrapping around the pole;
* expansion-contraction: colatitude advances, wrapping from one pole to the
  other;
* translation: the translation coordinate ``tan(colatitude - pi/2)``
  advances and wraps within ``+-tan(pi/2 - dot_radius)``.

Placement and per-dot levels come from a seeded ``torch.Generator``, so a
given parameter set always yields the same pattern.
"""

from __future__ import annotations

import logging
import math
from typing import Tuple

import torch

from patternforge.arena.geometry import ArenaGeometry
from patternforge.stimuli.base import BasePatternGenerator, SynthesisResult, round_half_up
from patternforge.stimuli.params import StarfieldParams
from patternforge.stimuli.sampling import fractional_membership

logger = logging.getLogger(__name__)


def _wrap(values: torch.Tensor, low: float, high: float) -> torch.Tensor:
    return torch.remainder(values - low, high - low) + low


class StarfieldGenerator(BasePatternGenerator):
    """Anti-aliased dots with configurable occlusion and level distribution.

    Overlapping dots combine by ``max`` (strongest contrast wins), ``sum``
    (contrasts add, clipped to the legal range) or ``mean`` (average contrast
    of the dots covering the pixel).
    """

    stimulus_type = "starfield"
    params_class = StarfieldParams

    def frame_count(self) -> int:
        p = self.params
        if p.num_frames is not None:
            return int(p.num_frames)
        span = 2 * math.pi if p.motion_type == "rotation" else math.pi
        return max(1, round_half_up(span / p.step_size))

    def dot_layout(self) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        """Seeded ``(azimuth, colatitude, level)`` of every dot."""
        p = self.params
        rng = torch.Generator().manual_seed(int(p.seed))
        azimuth = (torch.rand(p.dot_count, generator=rng, dtype=torch.float64) * 2 - 1) * math.pi
        colatitude = torch.acos(1 - 2 * torch.rand(p.dot_count, generator=rng, dtype=torch.float64))

        low, high = sorted((p.bright, p.dark))
        if p.dot_level == "random-spread":
            levels = torch.randint(low, high + 1, (p.dot_count,), generator=rng).to(torch.float64)
        elif p.dot_level == "random-binary":
            pick = torch.rand(p.dot_count, generator=rng) < 0.5
            levels = torch.where(
                pick,
                torch.full((p.dot_count,), float(p.bright), dtype=torch.float64),
                torch.full((p.dot_count,), float(p.dark), dtype=torch.float64),
            )
        else:
            levels = torch.full((p.dot_count,), float(p.bright), dtype=torch.float64)
        return azimuth, colatitude, levels

    def move(self, azimuth: torch.Tensor, colatitude: torch.Tensor, shift: float) -> Tuple[torch.Tensor, torch.Tensor]:
        """Dot positions displaced by ``shift`` along the motion channel."""
        p = self.params
        if p.motion_type == "rotation":
            return _wrap(azimuth + shift, -math.pi, math.pi), colatitude
        if p.motion_type == "expansion-contraction":
            return azimuth, _wrap(colatitude + shift, 0.0, math.pi)
        bound = math.tan(math.pi / 2 - p.dot_radius)
        position = _wrap(torch.tan(colatitude - math.pi / 2) + shift, -bound, bound)
        return azimuth, torch.atan(position) + math.pi / 2

    def forward(self, geometry: ArenaGeometry) -> SynthesisResult:
        p = self.params
        num_frames = self.frame_count()
        dot_az, dot_col, dot_levels = self.dot_layout()
        contrast = (dot_levels - p.dark).tolist()

        x, y, z = geometry.rotated(self.stimulus_rotation(p.motion_type))
        p_rad = geometry.p_rad_tensor()
        sampler = self.sampler(geometry)
        low, high = min(p.levels[:2]), max(p.levels[:2])

        values = torch.empty(geometry.shape + (num_frames,), dtype=torch.float64, device=geometry.device)
        for k in range(num_frames):
            az, col = self.move(dot_az, dot_col, k * p.step_size)
            dx = (torch.sin(col) * torch.cos(az)).tolist()
            dy = (torch.sin(col) * torch.sin(az)).tolist()
            dz = torch.cos(col).tolist()

            strongest = torch.zeros(geometry.shape, dtype=torch.float64, device=geometry.device)
            total = torch.zeros_like(strongest)
            covering = torch.zeros_like(strongest)
            for i in range(p.dot_count):
                cosine = torch.clamp(x * dx[i] + y * dy[i] + z * dz[i], -1.0, 1.0)
                distance = torch.acos(cosine)
                # Pixels farther than one footprint from the dot cannot be touched.
                if not bool((distance - p_rad < p.dot_radius).any()):
                    continue
                inside = fractional_membership(sampler.sample(distance) < p.dot_radius)
                c = inside * contrast[i]
                strongest = torch.where(c.abs() > strongest.abs(), c, strongest)
                total = total + c
                covering = covering + (inside > 0).to(torch.float64)

            if p.dot_occlusion == "max":
                frame = p.dark + strongest
            elif p.dot_occlusion == "sum":
                frame = torch.clamp(p.dark + total, low, high)
            else:
                frame = p.dark + total / torch.clamp(covering, min=1.0)
            values[..., k] = frame

        logger.debug("starfield: %d dots, %d frames", p.dot_count, num_frames)
        return SynthesisResult(self.finalize(values, geometry), num_frames, p.step_size)


__all__ = ["StarfieldGenerator"]
