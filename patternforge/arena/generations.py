"""Hardware generation facts shared by geometry, codecs, and file naming.

Each arena generation uses its own panel size and binary pattern format:

=========  ================  =============  ===========  ============
Name       Pixels per panel  Header ID      File suffix  Codec family
=========  ================  =============  ===========  ============
G3         8                 1              G3           g4
G4         16                2              G4           g4
G4.1       16                3              G4           g4
G6         20                4              G6           g6
=========  ================  =============  ===========  ============

Header ID 0 means "unspecified" (legacy V1 headers) and 5-7 are reserved.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class GenerationSpec:
    """Static description of one arena generation.

    Attributes:
        name: Canonical generation name ("G3", "G4", "G4.1", "G6").
        generation_id: 3-bit ID stored in V2 pattern headers.
        pixels_per_panel: Panel edge length in pixels (panels are square).
        file_suffix: Suffix used in pattern file names.
        codec_family: Binary layout family ("g4" or "g6").
    """

    name: str
    generation_id: int
    pixels_per_panel: int
    file_suffix: str
    codec_family: str


_SPECS: Dict[str, GenerationSpec] = {
    "G3": GenerationSpec("G3", 1, 8, "G3", "g4"),
    "G4": GenerationSpec("G4", 2, 16, "G4", "g4"),
    "G4.1": GenerationSpec("G4.1", 3, 16, "G4", "g4"),
    "G6": GenerationSpec("G6", 4, 20, "G6", "g6"),
}

_NAMES_BY_ID = {spec.generation_id: spec.name for spec in _SPECS.values()}


def normalize_generation(generation: str) -> str:
    """Return the canonical spelling of a generation name.

    Accepts case variations and the dotless ``"G41"`` spelling.

    Raises:
        ValueError: If the generation is unknown. G5 is rejected explicitly
            because it was retired in favour of G6.
    """
    key = str(generation).strip().upper()
    if key == "G41":
        key = "G4.1"
    if key == "G5":
        raise ValueError("G5 panels are no longer supported; use G6 for 20x20 panels")
    if key not in _SPECS:
        raise ValueError(
            f"Unknown generation: {generation}. Valid generations: {', '.join(_SPECS)}"
        )
    return key


def get_generation_spec(generation: str) -> GenerationSpec:
    """Look up the :class:`GenerationSpec` for a generation name."""
    return _SPECS[normalize_generation(generation)]


def generation_name(generation_id: int) -> str:
    """Map a header generation ID back to its name.

    Returns ``"unspecified"`` for 0 and ``"reserved"`` for 5-7.

    Raises:
        ValueError: If the ID does not fit in 3 bits.
    """
    if generation_id == 0:
        return "unspecified"
    if generation_id in _NAMES_BY_ID:
        return _NAMES_BY_ID[generation_id]
    if 5 <= generation_id <= 7:
        return "reserved"
    raise ValueError(f"Invalid generation ID: {generation_id} (must be 0-7)")


def list_generations() -> List[str]:
    """Names of all supported generations."""
    return list(_SPECS)


__all__ = [
    "GenerationSpec",
    "normalize_generation",
    "get_generation_spec",
    "generation_name",
    "list_generations",
]
