"""Stimulus synthesis: parameters, anti-aliasing, and pattern generators.

Generators:
    GratingGenerator: Square/sine grating drifting along the motion channel
    EdgeGenerator: Edge sweeping across one wavelength
    StarfieldGenerator: Seeded field of anti-aliased dots
    LoomingGenerator: Expanding disc (constant velocity or collision course)
    ReversePhiGenerator: Grating with per-frame contrast inversion
    OffOnGenerator: Uniform dark frame then bright frame

Example:
    >>> from patternforge.arena import cylindrical_arena
    >>> from patternforge.stimuli import LoomingGenerator
    >>> arena = cylindrical_arena(panel_rows=2, panel_cols=12)
    >>> pattern = LoomingGenerator(initial_size=0.1, final_size=1.0).generate(arena)
"""

from patternforge.stimuli.base import BasePatternGenerator, SynthesisResult
from patternforge.stimuli.grating import EdgeGenerator, GratingGenerator
from patternforge.stimuli.looming import LoomingGenerator
from patternforge.stimuli.off_on import OffOnGenerator
from patternforge.stimuli.params import (
    EdgeParams,
    GratingParams,
    LoomingParams,
    OffOnParams,
    ReversePhiParams,
    StarfieldParams,
    StimulusParams,
)
from patternforge.stimuli.reverse_phi import ReversePhiGenerator
from patternforge.stimuli.sampling import AntiAliasingSampler
from patternforge.stimuli.starfield import StarfieldGenerator

__all__ = [
    "BasePatternGenerator",
    "SynthesisResult",
    "GratingGenerator",
    "EdgeGenerator",
    "StarfieldGenerator",
    "LoomingGenerator",
    "ReversePhiGenerator",
    "OffOnGenerator",
    "StimulusParams",
    "GratingParams",
    "EdgeParams",
    "StarfieldParams",
    "LoomingParams",
    "ReversePhiParams",
    "OffOnParams",
    "AntiAliasingSampler",
]
