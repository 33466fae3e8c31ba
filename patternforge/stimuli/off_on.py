"""Off/on pattern: one uniform dark frame, then one uniform bright frame."""

from __future__ import annotations

import torch

from patternforge.arena.geometry import ArenaGeometry
from patternforge.stimuli.base import BasePatternGenerator, SynthesisResult
from patternforge.stimuli.params import OffOnParams


class OffOnGenerator(BasePatternGenerator):
    """Two frames: ``levels[1]`` everywhere, then ``levels[0]`` everywhere."""

    stimulus_type = "off_on"
    params_class = OffOnParams

    def forward(self, geometry: ArenaGeometry) -> SynthesisResult:
        values = torch.empty(geometry.shape + (2,), dtype=torch.float64, device=geometry.device)
        values[..., 0] = self.params.dark
        values[..., 1] = self.params.bright
        return SynthesisResult(self.finalize(values, geometry), 2)


__all__ = ["OffOnGenerator"]
