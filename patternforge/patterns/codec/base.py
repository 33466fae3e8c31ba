"""Abstract interface for binary pattern codecs.

A codec turns a :class:`~patternforge.patterns.PatternContainer` into the
exact byte sequence a controller generation expects, and back. Encoding is a
pure function of the container; decoding recovers every dimension from the
bytes alone.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from patternforge.arena.generations import GenerationSpec, get_generation_spec
from patternforge.errors import CodecError
from patternforge.patterns.container import PatternContainer


class PatternCodec(ABC):
    """Abstract base class for generation-specific ``.pat`` codecs.

    Subclasses set ``family`` to the layout family they implement (see
    :mod:`patternforge.arena.generations`) and implement :meth:`encode`,
    :meth:`decode` and :meth:`sniff`.

    Attributes:
        generation: Canonical generation name written into headers.
        spec: :class:`GenerationSpec` for ``generation``.
    """

    family: str = ""

    def __init__(self, generation: str) -> None:
        self.spec: GenerationSpec = get_generation_spec(generation)
        if self.spec.codec_family != self.family:
            raise ValueError(
                f"{type(self).__name__} cannot encode {self.spec.name} patterns"
            )
        self.generation = self.spec.name

    @abstractmethod
    def encode(self, container: PatternContainer) -> bytes:
        """Serialize ``container``.

        Raises:
            PixelRangeError: If a pixel exceeds the container's bit depth.
            CodecError: If the container does not fit this format.
        """
        ...

    @abstractmethod
    def decode(self, data: bytes) -> PatternContainer:
        """Reconstruct a container from ``data``.

        Raises:
            CorruptPatternError: If the data is truncated or inconsistent.
        """
        ...

    @abstractmethod
    def sniff(self, data: bytes) -> bool:
        """Return True if ``data`` looks like this codec's format."""
        ...

    def check_panel_size(self, container: PatternContainer) -> None:
        if container.pixels_per_panel != self.spec.pixels_per_panel:
            raise CodecError(
                f"{self.generation} panels are {self.spec.pixels_per_panel} pixels, "
                f"but the pattern was built for {container.generation} "
                f"({container.pixels_per_panel}-pixel panels)"
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.generation!r})"


__all__ = ["PatternCodec"]
