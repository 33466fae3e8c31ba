"""Pattern containers, binary codecs, and the pattern file repository."""

from patternforge.patterns.container import PatternContainer
from patternforge.patterns.codec import (
    G4Codec,
    G6Codec,
    PatternCodec,
    decode_pattern,
    encode_pattern,
)
from patternforge.patterns.repository import (
    PatternFileEntry,
    PatternRepository,
    parse_pattern_filename,
    pattern_filename,
)

__all__ = [
    "PatternContainer",
    "PatternCodec",
    "G4Codec",
    "G6Codec",
    "encode_pattern",
    "decode_pattern",
    "PatternRepository",
    "PatternFileEntry",
    "pattern_filename",
    "parse_pattern_filename",
]
