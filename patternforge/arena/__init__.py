"""Arena description: generations, pixel geometry, and projections."""

from patternforge.arena.generations import (
    GenerationSpec,
    generation_name,
    get_generation_spec,
    list_generations,
    normalize_generation,
)
from patternforge.arena.geometry import (
    ArenaGeometry,
    cart_to_sphere,
    cylindrical_arena,
    direction_vector,
    rotate_coordinates,
)
from patternforge.arena.projection import mollweide, mollweide_auxiliary_angle

__all__ = [
    "GenerationSpec",
    "generation_name",
    "get_generation_spec",
    "list_generations",
    "normalize_generation",
    "ArenaGeometry",
    "cart_to_sphere",
    "cylindrical_arena",
    "direction_vector",
    "rotate_coordinates",
    "mollweide",
    "mollweide_auxiliary_angle",
]
