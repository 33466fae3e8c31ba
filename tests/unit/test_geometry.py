"""Unit tests for arena geometry, rotation and spherical primitives."""

import dataclasses
import math

import numpy as np
import pytest
import torch

from patternforge.arena.generations import (
    generation_name,
    get_generation_spec,
    normalize_generation,
)
from patternforge.arena.geometry import (
    ArenaGeometry,
    cart_to_sphere,
    cylindrical_arena,
    direction_vector,
    rotate_coordinates,
)


def _point(azimuth, elevation):
    return tuple(torch.tensor([c], dtype=torch.float64) for c in direction_vector(azimuth, elevation))


class TestGenerations:
    """Test the generation table."""

    def test_pixels_per_panel(self):
        assert [get_generation_spec(g).pixels_per_panel for g in ("G3", "G4", "G4.1", "G6")] == [8, 16, 16, 20]

    def test_g41_uses_g4_suffix(self):
        assert get_generation_spec("G4.1").file_suffix == "G4"
        assert get_generation_spec("G4.1").generation_id == 3

    def test_normalize_spellings(self):
        assert normalize_generation("g41") == "G4.1"
        assert normalize_generation(" g6 ") == "G6"

    def test_g5_rejected(self):
        with pytest.raises(ValueError, match="G5"):
            normalize_generation("G5")

    def test_generation_names_by_id(self):
        assert generation_name(0) == "unspecified"
        assert generation_name(4) == "G6"
        assert generation_name(6) == "reserved"
        with pytest.raises(ValueError):
            generation_name(8)


class TestRotation:
    """Test rotate_coordinates and cart_to_sphere."""

    def test_zero_rotation_is_identity(self):
        x, y, z = _point(0.3, 0.2)
        rx, ry, rz = rotate_coordinates(x, y, z, (0.0, 0.0, 0.0))
        assert torch.equal(rx, x) and torch.equal(ry, y) and torch.equal(rz, z)

    def test_yaw_turns_x_into_y(self):
        x, y, z = _point(0.0, 0.0)
        rx, ry, rz = rotate_coordinates(x, y, z, (math.pi / 2, 0.0, 0.0))
        assert torch.allclose(torch.cat([rx, ry, rz]), torch.tensor([0.0, 1.0, 0.0], dtype=torch.float64), atol=1e-12)

    def test_pole_rotation_moves_pole_to_z(self):
        azimuth, elevation = 0.7, -0.4
        x, y, z = _point(azimuth, elevation)
        rx, ry, rz = rotate_coordinates(x, y, z, (-azimuth, elevation - math.pi / 2, 0.0))
        assert torch.allclose(torch.cat([rx, ry, rz]), torch.tensor([0.0, 0.0, 1.0], dtype=torch.float64), atol=1e-12)

    def test_mask_rotation_moves_centre_forward(self):
        azimuth, elevation = -1.1, 0.5
        x, y, z = _point(azimuth, elevation)
        rx, ry, rz = rotate_coordinates(x, y, z, (-azimuth, elevation, 0.8))
        assert torch.allclose(torch.cat([rx, ry, rz]), torch.tensor([1.0, 0.0, 0.0], dtype=torch.float64), atol=1e-12)

    def test_rotation_preserves_length(self, g4_arena):
        x, y, z = g4_arena.rotated((0.3, -1.2, 2.0))
        assert torch.allclose(x ** 2 + y ** 2 + z ** 2, torch.ones_like(x))

    def test_rotation_requires_three_angles(self):
        x, y, z = _point(0.0, 0.0)
        with pytest.raises(ValueError):
            rotate_coordinates(x, y, z, (0.0, 0.0))

    def test_cart_to_sphere(self):
        x = torch.tensor([0.0, 0.0, -2.0], dtype=torch.float64)
        y = torch.tensor([0.0, 1.0, 0.0], dtype=torch.float64)
        z = torch.tensor([1.0, 0.0, 0.0], dtype=torch.float64)
        azimuth, colatitude, radius = cart_to_sphere(x, y, z)
        assert colatitude[0].item() == pytest.approx(0.0)
        assert azimuth[1].item() == pytest.approx(math.pi / 2)
        assert colatitude[1].item() == pytest.approx(math.pi / 2)
        assert azimuth[2].item() == pytest.approx(math.pi)
        assert radius.tolist() == pytest.approx([1.0, 1.0, 2.0])


class TestCylindricalArena:
    """Test the cylindrical geometry provider."""

    def test_shape_and_panels(self, g4_arena):
        assert g4_arena.shape == (32, 192)
        assert (g4_arena.panel_rows, g4_arena.panel_cols) == (2, 12)
        assert g4_arena.x.dtype == torch.float64

    def test_unit_vectors(self, g4_arena):
        norm = g4_arena.x ** 2 + g4_arena.y ** 2 + g4_arena.z ** 2
        assert torch.allclose(norm, torch.ones_like(norm))

    def test_pixel_radius_is_half_pitch(self, g4_arena):
        assert g4_arena.p_rad == pytest.approx(math.pi / 192)

    def test_columns_centred_and_evenly_spaced(self, g4_arena):
        azimuth, _ = g4_arena.spherical()
        steps = torch.diff(azimuth[0])
        assert torch.allclose(steps, torch.full_like(steps, 2 * math.pi / 192))
        assert azimuth[0, 0].item() == pytest.approx(-azimuth[0, -1].item())

    def test_row_zero_is_top(self, g4_arena):
        assert g4_arena.z[0, 0] > 0 > g4_arena.z[-1, 0]

    def test_partial_arena(self, small_arena):
        azimuth, _ = small_arena.spherical()
        span = azimuth[0, -1] - azimuth[0, 0]
        assert span.item() == pytest.approx(63 * 2 * math.pi / (12 * 16))

    def test_g6_arena(self, g6_arena):
        assert g6_arena.shape == (40, 60)
        assert g6_arena.generation == "G6"

    def test_circle_smaller_than_installed(self):
        with pytest.raises(ValueError):
            cylindrical_arena(2, 12, panels_in_circle=10)

    def test_geometry_is_frozen(self, g4_arena):
        with pytest.raises(dataclasses.FrozenInstanceError):
            g4_arena.p_rad = 1.0


class TestArenaGeometry:
    """Test validation and loading of external geometry."""

    def test_mismatched_shapes(self):
        x = torch.ones(16, 16, dtype=torch.float64)
        with pytest.raises(ValueError):
            ArenaGeometry(x, x, torch.ones(16, 32, dtype=torch.float64), 0.01)

    def test_not_whole_panels(self):
        x = torch.ones(10, 16, dtype=torch.float64)
        with pytest.raises(ValueError, match="panels"):
            ArenaGeometry(x, x, x, 0.01, generation="G4")

    def test_non_positive_radius(self):
        x = torch.ones(16, 16, dtype=torch.float64)
        with pytest.raises(ValueError):
            ArenaGeometry(x, x, x, 0.0)

    def test_from_arrays_normalises(self):
        data = np.full((8, 8), 2.0)
        geometry = ArenaGeometry.from_arrays(data, np.zeros((8, 8)), np.zeros((8, 8)), 0.02, generation="G3")
        assert torch.allclose(geometry.x, torch.ones(8, 8, dtype=torch.float64))
        assert (geometry.panel_rows, geometry.panel_cols) == (1, 1)

    def test_from_npz(self, tmp_path, small_arena):
        path = tmp_path / "arena.npz"
        np.savez(
            path,
            arena_x=small_arena.x.numpy(),
            arena_y=small_arena.y.numpy(),
            arena_z=small_arena.z.numpy(),
            p_rad=np.float64(small_arena.p_rad),
            generation="G4",
        )
        loaded = ArenaGeometry.from_npz(path, arena_id=7)
        assert loaded.shape == small_arena.shape
        assert torch.allclose(loaded.x, small_arena.x)
        assert loaded.p_rad == pytest.approx(small_arena.p_rad)
        assert loaded.arena_id == 7

    def test_from_npz_missing_arrays(self, tmp_path):
        path = tmp_path / "bad.npz"
        np.savez(path, arena_x=np.ones((16, 16)))
        with pytest.raises(ValueError, match="missing"):
            ArenaGeometry.from_npz(path)

    def test_from_npz_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ArenaGeometry.from_npz(tmp_path / "nope.npz")

    def test_mollweide_projection(self, g4_arena):
        mx, my = g4_arena.mollweide()
        assert mx.shape == g4_arena.shape
        assert torch.isfinite(mx).all() and torch.isfinite(my).all()
        assert mx.abs().max() <= 2 * math.sqrt(2) + 1e-9
        assert my[0, 0] > 0 > my[-1, 0]
