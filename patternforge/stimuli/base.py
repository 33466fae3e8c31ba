"""Abstract base class for pattern generators in PatternForge.

All stimulus types (grating, edge, starfield, looming, reverse-phi, off/on)
inherit from :class:`BasePatternGenerator`, which fixes the synthesis
contract:

1. parameters are validated when the generator is built;
2. arena coordinates are rotated so the stimulus' reference direction sits
   at a canonical position (the pole at +z for full-field patterns, the mask
   centre straight ahead for local ones);
3. rotated coordinates are converted to spherical form and the channel the
   stimulus varies along is selected;
4. the channel is anti-alias sampled and each frame blends intensity levels
   by fractional membership;
5. values are rounded half away from zero to the legal levels.

``forward(geometry)`` returns a :class:`SynthesisResult`; ``generate`` wraps
the same frames in a :class:`~patternforge.patterns.PatternContainer`.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Type

import torch
import torch.nn as nn

from patternforge.arena.geometry import ArenaGeometry, direction_vector
from patternforge.patterns.container import PatternContainer
from patternforge.stimuli.params import StimulusParams
from patternforge.stimuli.sampling import AntiAliasingSampler, fractional_membership, samples_by_p_rad

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class SynthesisResult:
    """Frames produced by one synthesis call.

    Attributes:
        frames: ``uint8`` tensor of shape ``(rows, cols, num_frames)``.
        num_frames: Number of frames.
        true_step_size: Per-frame step actually used (radians), which may
            differ from the requested step; ``None`` when not applicable.
    """

    frames: torch.Tensor
    num_frames: int
    true_step_size: Optional[float] = None


def round_half_up(value: float) -> int:
    """Round a non-negative scalar to the nearest integer, halves upward."""
    return int(math.floor(value + 0.5))


def quantize(values: torch.Tensor, gs_val: int) -> torch.Tensor:
    """Round intensities to the nearest level (halves upward) and clip to ``[0, gs_val - 1]``."""
    rounded = torch.floor(values + 0.5)
    return torch.clamp(rounded, 0, gs_val - 1).to(torch.uint8)


def square_wave(phase: torch.Tensor, duty_cycle: float = 50.0) -> torch.Tensor:
    """Square wave of period ``2*pi``: +1 for the first ``duty_cycle`` percent, else -1."""
    if duty_cycle >= 100:
        return torch.ones_like(phase)
    high = torch.remainder(phase, 2 * math.pi) < 2 * math.pi * duty_cycle / 100
    return torch.where(high, torch.ones_like(phase), -torch.ones_like(phase))


def motion_channel(
    azimuth: torch.Tensor,
    colatitude: torch.Tensor,
    motion_type: str,
) -> torch.Tensor:
    """Select the scalar coordinate a stimulus moves along.

    Rotation moves along azimuth, expansion-contraction along colatitude, and
    translation along ``tan(colatitude - pi/2)``.
    """
    if motion_type == "rotation":
        return azimuth
    if motion_type == "expansion-contraction":
        return colatitude
    if motion_type == "translation":
        return torch.tan(colatitude - math.pi / 2)
    raise ValueError(f"Unknown motion type: {motion_type}")


class BasePatternGenerator(nn.Module, ABC):
    """Abstract base class for pattern generators.

    Subclasses set ``stimulus_type`` and ``params_class`` and implement
    :meth:`forward`. A generator holds only its validated parameters, so the
    same instance can synthesize for any number of arenas.

    Example:
        >>> generator = LoomingGenerator(initial_size=0.1, final_size=1.0)
        >>> result = generator(cylindrical_arena(2, 12))
        >>> result.frames.shape[-1] == result.num_frames
        True
    """

    stimulus_type: str = ""
    params_class: Type[StimulusParams] = StimulusParams

    def __init__(self, params: Optional[StimulusParams] = None, **kwargs: Any) -> None:
        super().__init__()
        if params is None:
            params = self.params_class(**kwargs)
        elif kwargs:
            raise TypeError("pass either a params object or keyword parameters, not both")
        if not isinstance(params, self.params_class):
            raise TypeError(
                f"{type(self).__name__} expects {self.params_class.__name__}, "
                f"got {type(params).__name__}"
            )
        self.params = params

    @abstractmethod
    def forward(self, geometry: ArenaGeometry) -> SynthesisResult:
        """Synthesize all frames for ``geometry``.

        Args:
            geometry: Arena pixel directions; read, never modified.

        Returns:
            :class:`SynthesisResult` with quantized frames.
        """
        ...

    def generate(self, geometry: ArenaGeometry) -> PatternContainer:
        """Synthesize and package the frames as a :class:`PatternContainer`."""
        result = self(geometry)
        metadata = {"stimulus": self.to_dict()}
        if result.true_step_size is not None:
            metadata["true_step_size"] = result.true_step_size
        return PatternContainer(
            frames=result.frames.cpu().numpy(),
            stretch=self.params.stretch,
            gs_val=self.params.gs_val,
            generation=geometry.generation,
            arena_id=geometry.arena_id,
            metadata=metadata,
        )

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "BasePatternGenerator":
        """Construct a generator from a configuration dictionary.

        Args:
            config: Stimulus parameters (typically from YAML); ``_deg`` keys
                are converted to radians.

        Returns:
            Initialised generator.
        """
        return cls(cls.params_class.from_dict(config))

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the generator's parameters to a dictionary."""
        return self.params.to_dict()

    # ------------------------------------------------------------------
    # Shared synthesis steps
    # ------------------------------------------------------------------

    def pole_rotation(self) -> Tuple[float, float, float]:
        """Euler angles that bring ``pole_coord`` to +z."""
        azimuth, elevation = self.params.pole_coord
        return (-azimuth, elevation - math.pi / 2, 0.0)

    def stimulus_rotation(self, motion_type: str = "rotation") -> Tuple[float, float, float]:
        """Euler angles for the current field of view and motion type.

        Local patterns put the mask centre straight ahead and turn the
        motion direction by ``motion_angle``; translation and expansion get
        an extra quarter turn so motion is rightward by default.
        """
        if self.params.pattern_fov == "full-field":
            return self.pole_rotation()
        azimuth, elevation = self.params.sa_mask[0], self.params.sa_mask[1]
        roll = -self.params.motion_angle
        if motion_type != "rotation":
            roll -= math.pi / 2
        return (-azimuth, elevation, roll)

    def sampler(self, geometry: ArenaGeometry) -> AntiAliasingSampler:
        return AntiAliasingSampler(self.params.aa_samples, geometry.p_rad_tensor())

    def channel(self, geometry: ArenaGeometry, motion_type: str) -> torch.Tensor:
        """Rotated, spherically projected coordinate channel for ``motion_type``."""
        azimuth, colatitude = geometry.spherical(self.stimulus_rotation(motion_type))
        return motion_channel(azimuth, colatitude, motion_type)

    def solid_angle_membership(self, geometry: ArenaGeometry) -> torch.Tensor:
        """Anti-aliased fraction of each pixel that lies in the visible region.

        Only local patterns are masked; full-field patterns are visible
        everywhere.
        """
        if self.params.pattern_fov != "local":
            return torch.ones(geometry.shape, dtype=torch.float64, device=geometry.device)
        azimuth, elevation, radius, invert = self.params.sa_mask
        cx, cy, cz = direction_vector(azimuth, elevation)
        cosine = torch.clamp(geometry.x * cx + geometry.y * cy + geometry.z * cz, -1.0, 1.0)
        distance = torch.acos(cosine)
        samples = samples_by_p_rad(distance, self.params.aa_samples, geometry.p_rad_tensor())
        inside = fractional_membership(samples < radius)
        return 1 - inside if invert else inside

    def finalize(self, values: torch.Tensor, geometry: ArenaGeometry) -> torch.Tensor:
        """Apply the solid-angle mask to float frames and quantize them."""
        visible = self.solid_angle_membership(geometry).unsqueeze(-1)
        blended = visible * values + (1 - visible) * self.params.mask_level
        return quantize(blended, self.params.gs_val)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.params!r})"


__all__ = [
    "BasePatternGenerator",
    "SynthesisResult",
    "motion_channel",
    "quantize",
    "round_half_up",
    "square_wave",
]
