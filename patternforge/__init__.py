"""PatternForge: stimulus synthesis and binary pattern codecs for LED arenas.

Typical use::

    from patternforge.arena import cylindrical_arena
    from patternforge.stimuli import LoomingGenerator
    from patternforge.patterns import PatternRepository

    arena = cylindrical_arena(panel_rows=2, panel_cols=12, generation="G4")
    pattern = LoomingGenerator(initial_size=0.1, final_size=1.0).generate(arena)
    PatternRepository("patterns").save(pattern, "loom")
"""

from patternforge.arena import ArenaGeometry, cylindrical_arena
from patternforge.errors import (
    CodecError,
    CorruptPatternError,
    ParameterError,
    PatternForgeError,
    PixelRangeError,
)
from patternforge.patterns import (
    PatternContainer,
    PatternRepository,
    decode_pattern,
    encode_pattern,
)
from patternforge.register_components import build_codec_registry, build_generator_registry
from patternforge.registry import ComponentRegistry

__version__ = "0.1.0"

__all__ = [
    "ArenaGeometry",
    "cylindrical_arena",
    "PatternContainer",
    "PatternRepository",
    "encode_pattern",
    "decode_pattern",
    "ComponentRegistry",
    "build_generator_registry",
    "build_codec_registry",
    "PatternForgeError",
    "ParameterError",
    "CodecError",
    "PixelRangeError",
    "CorruptPatternError",
]
