"""Factories for the PatternForge component registries.

Each call builds a fresh :class:`~patternforge.registry.ComponentRegistry`
populated with the built-in components; callers keep the registry and pass
it to whatever needs to resolve a tag.

Example:
    >>> from patternforge.register_components import build_codec_registry
    >>> codecs = build_codec_registry()
    >>> codecs.create("G4.1").generation
    'G4.1'
"""

from patternforge.arena.generations import get_generation_spec, list_generations
from patternforge.patterns.codec import G4Codec, G6Codec
from patternforge.registry import ComponentRegistry
from patternforge.stimuli import (
    EdgeGenerator,
    GratingGenerator,
    LoomingGenerator,
    OffOnGenerator,
    ReversePhiGenerator,
    StarfieldGenerator,
)

GENERATOR_CLASSES = (
    GratingGenerator,
    EdgeGenerator,
    StarfieldGenerator,
    LoomingGenerator,
    ReversePhiGenerator,
    OffOnGenerator,
)

_CODEC_FAMILIES = {"g4": G4Codec, "g6": G6Codec}


def build_generator_registry() -> ComponentRegistry:
    """Registry mapping stimulus ``type`` tags to generator classes.

    ``reverse-phi`` and ``off-on`` are accepted as aliases of the
    underscore spellings.
    """
    registry = ComponentRegistry("GENERATORS")
    for cls in GENERATOR_CLASSES:
        registry.register(cls.stimulus_type, cls)
    registry.register("reverse-phi", ReversePhiGenerator)
    registry.register("off-on", OffOnGenerator)
    return registry


def build_codec_registry() -> ComponentRegistry:
    """Registry mapping generation names to codec factories.

    ``create("G4.1")`` returns a ``G4Codec`` that writes generation ID 3.
    """
    registry = ComponentRegistry("CODECS")
    for name in list_generations():
        codec_cls = _CODEC_FAMILIES[get_generation_spec(name).codec_family]
        registry.register(name, codec_cls, lambda name=name, cls=codec_cls, **kw: cls(name, **kw))
    return registry


__all__ = ["build_generator_registry", "build_codec_registry", "GENERATOR_CLASSES"]
