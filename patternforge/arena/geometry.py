"""Arena geometry: per-pixel viewing directions and the primitives that act on them.

The mesh tool that turns a panel layout into Cartesian pixel positions lives
outside this package. Its output (three arrays of unit-vector components plus
the pixel angular radius ``p_rad``) is loaded into an immutable
:class:`ArenaGeometry` that every stimulus generator reads but never modifies.
:func:`cylindrical_arena` builds the simplest such geometry (an evenly
tiled cylinder seen from its centre) for tests and quick command-line use.

Conventions:
    * ``x`` points straight ahead (azimuth 0), ``y`` to the left (azimuth
      +pi/2), ``z`` up.
    * Row 0 of every array is the top pixel row of the arena.
    * Rotations are given as ``(yaw, pitch, roll)`` and applied in that
      order: yaw about z, pitch about y, roll about x.

Example:
    >>> arena = cylindrical_arena(panel_rows=2, panel_cols=12, generation="G4")
    >>> arena.shape
    (32, 192)
    >>> phi, theta = arena.spherical()
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import numpy as np
import torch

from patternforge.arena.generations import get_generation_spec, normalize_generation

PRad = Union[float, torch.Tensor]


def rotate_coordinates(
    x: torch.Tensor,
    y: torch.Tensor,
    z: torch.Tensor,
    rotations: Sequence[float],
) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
    """Rigidly rotate a set of Cartesian points by three Euler angles.

    Args:
        x, y, z: Coordinate tensors of identical shape.
        rotations: ``(yaw, pitch, roll)`` in radians, applied as a rotation
            about z, then y, then x.

    Returns:
        Rotated ``(x, y, z)`` tensors with the input shape.
    """
    if len(rotations) != 3:
        raise ValueError(f"rotations must have 3 elements, got {len(rotations)}")
    yaw, pitch, roll = (float(angle) for angle in rotations)

    cy, sy = math.cos(yaw), math.sin(yaw)
    x1 = x * cy - y * sy
    y1 = x * sy + y * cy
    z1 = z

    cp, sp = math.cos(pitch), math.sin(pitch)
    x2 = x1 * cp + z1 * sp
    z2 = -x1 * sp + z1 * cp
    y2 = y1

    cr, sr = math.cos(roll), math.sin(roll)
    y3 = y2 * cr - z2 * sr
    z3 = y2 * sr + z2 * cr

    return x2, y3, z3


def cart_to_sphere(
    x: torch.Tensor,
    y: torch.Tensor,
    z: torch.Tensor,
) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
    """Convert Cartesian coordinates to ``(azimuth, colatitude, radius)``.

    Azimuth lies in ``(-pi, pi]`` measured from +x towards +y; colatitude in
    ``[0, pi]`` measured from +z.
    """
    radius = torch.sqrt(x ** 2 + y ** 2 + z ** 2)
    azimuth = torch.atan2(y, x)
    safe_radius = torch.where(radius > 0, radius, torch.ones_like(radius))
    colatitude = torch.acos(torch.clamp(z / safe_radius, -1.0, 1.0))
    return azimuth, colatitude, radius


def direction_vector(azimuth: float, elevation: float) -> Tuple[float, float, float]:
    """Unit vector pointing at ``(azimuth, elevation)``."""
    return (
        math.cos(elevation) * math.cos(azimuth),
        math.cos(elevation) * math.sin(azimuth),
        math.sin(elevation),
    )


@dataclass(frozen=True, eq=False)
class ArenaGeometry:
    """Immutable per-pixel viewing directions for one arena configuration.

    Attributes:
        x, y, z: Unit-vector components, ``float64`` tensors of shape
            ``(rows, cols)``.
        p_rad: Pixel angular radius in radians; a scalar or a per-pixel
            tensor of shape ``(rows, cols)``.
        generation: Canonical generation name.
        panel_rows: Number of panel rows.
        panel_cols: Number of panel columns.
        arena_id: Arena configuration ID recorded in pattern headers (0 when
            unspecified).
    """

    x: torch.Tensor
    y: torch.Tensor
    z: torch.Tensor
    p_rad: PRad
    generation: str = "G4"
    panel_rows: int = 0
    panel_cols: int = 0
    arena_id: int = 0

    def __post_init__(self) -> None:
        if not (self.x.shape == self.y.shape == self.z.shape) or self.x.ndim != 2:
            raise ValueError(
                "x, y and z must be 2-D tensors of identical shape, got "
                f"{tuple(self.x.shape)}, {tuple(self.y.shape)}, {tuple(self.z.shape)}"
            )
        object.__setattr__(self, "generation", normalize_generation(self.generation))
        ppp = get_generation_spec(self.generation).pixels_per_panel
        rows, cols = self.x.shape
        if rows % ppp or cols % ppp:
            raise ValueError(
                f"arena of {rows}x{cols} pixels is not a whole number of "
                f"{ppp}x{ppp} {self.generation} panels"
            )
        if not self.panel_rows:
            object.__setattr__(self, "panel_rows", rows // ppp)
        if not self.panel_cols:
            object.__setattr__(self, "panel_cols", cols // ppp)
        if (self.panel_rows * ppp, self.panel_cols * ppp) != (rows, cols):
            raise ValueError(
                f"panel grid {self.panel_rows}x{self.panel_cols} does not match "
                f"{rows}x{cols} pixels for {self.generation}"
            )
        if isinstance(self.p_rad, torch.Tensor):
            if self.p_rad.ndim and tuple(self.p_rad.shape) != (rows, cols):
                raise ValueError(
                    f"p_rad must be scalar or shape {(rows, cols)}, "
                    f"got {tuple(self.p_rad.shape)}"
                )
        elif self.p_rad <= 0:
            raise ValueError(f"p_rad must be positive, got {self.p_rad}")

    @property
    def shape(self) -> Tuple[int, int]:
        """Pixel dimensions ``(rows, cols)``."""
        return tuple(self.x.shape)  # type: ignore[return-value]

    @property
    def rows(self) -> int:
        return self.x.shape[0]

    @property
    def cols(self) -> int:
        return self.x.shape[1]

    @property
    def device(self) -> torch.device:
        return self.x.device

    def p_rad_tensor(self) -> torch.Tensor:
        """``p_rad`` as a tensor on the geometry's device and dtype."""
        return torch.as_tensor(self.p_rad, dtype=self.x.dtype, device=self.device)

    def rotated(self, rotations: Sequence[float]) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        """Pixel directions after :func:`rotate_coordinates`."""
        return rotate_coordinates(self.x, self.y, self.z, rotations)

    def spherical(
        self, rotations: Optional[Sequence[float]] = None
    ) -> Tuple[torch.Tensor, torch.Tensor]:
        """``(azimuth, colatitude)`` of every pixel, optionally after rotation."""
        x, y, z = self.rotated(rotations) if rotations is not None else (self.x, self.y, self.z)
        azimuth, colatitude, _ = cart_to_sphere(x, y, z)
        return azimuth, colatitude

    def mollweide(self) -> Tuple[torch.Tensor, torch.Tensor]:
        """Planar Mollweide coordinates of every pixel (see :mod:`.projection`)."""
        from patternforge.arena.projection import mollweide

        azimuth, colatitude = self.spherical()
        return mollweide(azimuth, math.pi / 2 - colatitude)

    def to(self, device: Union[torch.device, str]) -> "ArenaGeometry":
        """Copy of this geometry with tensors moved to ``device``."""
        p_rad = self.p_rad.to(device) if isinstance(self.p_rad, torch.Tensor) else self.p_rad
        return ArenaGeometry(
            self.x.to(device), self.y.to(device), self.z.to(device), p_rad,
            self.generation, self.panel_rows, self.panel_cols, self.arena_id,
        )

    @classmethod
    def from_arrays(
        cls,
        x: np.ndarray,
        y: np.ndarray,
        z: np.ndarray,
        p_rad: Union[float, np.ndarray],
        generation: str = "G4",
        arena_id: int = 0,
        device: Union[torch.device, str] = "cpu",
    ) -> "ArenaGeometry":
        """Build a geometry from array-likes, normalising to unit vectors."""
        xt = torch.as_tensor(np.asarray(x), dtype=torch.float64, device=device)
        yt = torch.as_tensor(np.asarray(y), dtype=torch.float64, device=device)
        zt = torch.as_tensor(np.asarray(z), dtype=torch.float64, device=device)
        norm = torch.sqrt(xt ** 2 + yt ** 2 + zt ** 2)
        if bool((norm == 0).any()):
            raise ValueError("pixel coordinates must not contain the origin")
        p = np.asarray(p_rad, dtype=np.float64)
        p_value: PRad = float(p) if p.ndim == 0 else torch.as_tensor(p, device=device)
        return cls(xt / norm, yt / norm, zt / norm, p_value, generation, arena_id=arena_id)

    @classmethod
    def from_npz(
        cls,
        path: Union[str, Path],
        generation: Optional[str] = None,
        arena_id: int = 0,
        device: Union[torch.device, str] = "cpu",
    ) -> "ArenaGeometry":
        """Load geometry exported by the arena mesh tool.

        The archive must contain ``arena_x``, ``arena_y``, ``arena_z`` and
        ``p_rad``; an optional ``generation`` entry is used when the
        ``generation`` argument is omitted.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Arena geometry file not found: {path}")
        with np.load(path) as data:
            missing = {"arena_x", "arena_y", "arena_z", "p_rad"} - set(data.files)
            if missing:
                raise ValueError(f"{path} is missing arrays: {', '.join(sorted(missing))}")
            if generation is None:
                generation = str(data["generation"]) if "generation" in data.files else "G4"
            return cls.from_arrays(
                data["arena_x"], data["arena_y"], data["arena_z"], data["p_rad"],
                generation=generation, arena_id=arena_id, device=device,
            )


def cylindrical_arena(
    panel_rows: int,
    panel_cols: int,
    generation: str = "G4",
    panels_in_circle: Optional[int] = None,
    arena_id: int = 0,
    device: Union[torch.device, str] = "cpu",
) -> ArenaGeometry:
    """Pixel directions of a cylindrical arena viewed from its axis.

    Panels tile the cylinder wall without gaps; ``panels_in_circle`` panels
    would close the full circle, of which ``panel_cols`` are installed,
    centred on azimuth 0. Pixel pitch is equal horizontally and vertically.

    Args:
        panel_rows: Installed panel rows.
        panel_cols: Installed panel columns.
        generation: Arena generation (sets pixels per panel).
        panels_in_circle: Panels needed for a full circle; defaults to
            ``panel_cols``.
        arena_id: Arena configuration ID for pattern headers.
        device: Torch device for the coordinate tensors.

    Returns:
        An :class:`ArenaGeometry` with scalar ``p_rad`` equal to half the
        angular pixel pitch.
    """
    if panel_rows < 1 or panel_cols < 1:
        raise ValueError(f"panel grid must be at least 1x1, got {panel_rows}x{panel_cols}")
    panels_in_circle = panel_cols if panels_in_circle is None else panels_in_circle
    if panels_in_circle < panel_cols:
        raise ValueError(
            f"panels_in_circle ({panels_in_circle}) must be >= panel_cols ({panel_cols})"
        )
    generation = normalize_generation(generation)
    ppp = get_generation_spec(generation).pixels_per_panel
    rows, cols = panel_rows * ppp, panel_cols * ppp
    pitch = 2 * math.pi / (panels_in_circle * ppp)

    az = (torch.arange(cols, dtype=torch.float64, device=device) - (cols - 1) / 2) * pitch
    height = ((rows - 1) / 2 - torch.arange(rows, dtype=torch.float64, device=device)) * pitch
    hh, aa = torch.meshgrid(height, az, indexing="ij")
    norm = torch.sqrt(1 + hh ** 2)

    return ArenaGeometry(
        x=torch.cos(aa) / norm,
        y=torch.sin(aa) / norm,
        z=hh / norm,
        p_rad=pitch / 2,
        generation=generation,
        panel_rows=panel_rows,
        panel_cols=panel_cols,
        arena_id=arena_id,
    )


__all__ = [
    "ArenaGeometry",
    "cylindrical_arena",
    "rotate_coordinates",
    "cart_to_sphere",
    "direction_vector",
]
