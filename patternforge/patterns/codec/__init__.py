"""Generation-aware ``.pat`` codecs.

- PatternCodec: Abstract encode/decode/sniff interface
- G4Codec: G3, G4 and G4.1 layout
- G6Codec: G6 panel-block layout

Codecs are resolved through a registry built by
:func:`patternforge.register_components.build_codec_registry`; the helpers
below build one on demand when none is passed.

Example:
    >>> data = encode_pattern(pattern, "G4")
    >>> decode_pattern(data) == pattern
    True
"""

from __future__ import annotations

from typing import Optional

from patternforge.arena.generations import normalize_generation
from patternforge.errors import CorruptPatternError
from patternforge.patterns.codec.base import PatternCodec
from patternforge.patterns.codec.g4 import G4Codec
from patternforge.patterns.codec.g6 import G6Codec
from patternforge.patterns.container import PatternContainer
from patternforge.registry import ComponentRegistry


def _codecs(codecs: Optional[ComponentRegistry]) -> ComponentRegistry:
    if codecs is not None:
        return codecs
    from patternforge.register_components import build_codec_registry

    return build_codec_registry()


def encode_pattern(
    container: PatternContainer,
    generation: Optional[str] = None,
    codecs: Optional[ComponentRegistry] = None,
) -> bytes:
    """Encode ``container`` with the codec registered for ``generation``.

    Args:
        container: Pattern to encode.
        generation: Target generation; defaults to ``container.generation``.
        codecs: Codec registry; a default one is built when omitted.
    """
    generation = normalize_generation(generation or container.generation)
    codec = _codecs(codecs).create(generation)
    return codec.encode(container)


def decode_pattern(data: bytes, codecs: Optional[ComponentRegistry] = None) -> PatternContainer:
    """Decode ``data`` with the first registered codec that recognises it.

    Raises:
        CorruptPatternError: If no codec recognises the data.
    """
    registry = _codecs(codecs)
    for name in registry.list_registered():
        codec = registry.create(name)
        if codec.sniff(data):
            return codec.decode(data)
    raise CorruptPatternError("data does not match any registered pattern format")


__all__ = [
    "PatternCodec",
    "G4Codec",
    "G6Codec",
    "encode_pattern",
    "decode_pattern",
]
