"""Unit tests for grating and edge synthesis."""

import math

import numpy as np
import pytest
import torch

from patternforge.stimuli import EdgeGenerator, GratingGenerator
from patternforge.stimuli.grating import grating_profile

SF = math.radians(30)
ZENITH = [0.0, math.pi / 2]


class TestGratingProfile:
    """Test the per-pixel grating fraction."""

    def test_square_profile_fraction(self):
        phase = torch.tensor([[0.5, 1.0, 4.0, 5.0]], dtype=torch.float64)
        assert grating_profile(phase).item() == pytest.approx(0.5)

    def test_sine_profile_range(self):
        phase = torch.tensor([[math.pi / 2], [-math.pi / 2], [0.0]], dtype=torch.float64)
        assert grating_profile(phase, "sine").tolist() == pytest.approx([1.0, 0.0, 0.5])


class TestGratingGenerator:
    """Test drifting gratings."""

    def test_frame_count_and_step(self, small_arena):
        result = GratingGenerator(spat_freq=SF, step_size=math.radians(3))(small_arena)
        assert result.num_frames == 10
        assert result.frames.shape == (16, 64, 10)
        assert result.true_step_size == pytest.approx(math.radians(3))

    def test_step_adjusted_to_whole_cycle(self, small_arena):
        result = GratingGenerator(spat_freq=SF, step_size=math.radians(7))(small_arena)
        assert result.num_frames == 4
        assert result.true_step_size == pytest.approx(math.radians(7.5))

    def test_values_between_levels(self, small_arena):
        result = GratingGenerator(spat_freq=SF, step_size=math.radians(5), levels=[12, 3])(small_arena)
        frames = result.frames
        assert frames.dtype == torch.uint8
        assert int(frames.min()) == 3 and int(frames.max()) == 12

    def test_rotation_about_zenith_shifts_columns(self, g4_arena):
        """One pixel step per frame moves the whole pattern one column."""
        generator = GratingGenerator(
            spat_freq=SF, step_size=2 * math.pi / 192, pole_coord=ZENITH, aa_samples=15
        )
        frames = generator(g4_arena).frames.numpy()
        assert frames.shape[-1] == 16
        for k in range(15):
            np.testing.assert_array_equal(frames[..., k + 1], np.roll(frames[..., k], 1, axis=1))

    def test_pixel_aligned_square_grating_is_binary(self, g4_arena):
        generator = GratingGenerator(spat_freq=SF, step_size=SF / 4, pole_coord=ZENITH)
        frames = generator(g4_arena).frames
        assert set(torch.unique(frames).tolist()) == {0, 15}
        assert (frames == 15).double().mean().item() == pytest.approx(0.5)

    def test_duty_cycle(self, g4_arena):
        generator = GratingGenerator(spat_freq=SF, step_size=SF, pole_coord=ZENITH, duty_cycle=25)
        frames = generator(g4_arena).frames
        assert (frames == 15).double().mean().item() == pytest.approx(0.25)

    def test_sine_grating_has_intermediate_levels(self, small_arena):
        generator = GratingGenerator(spat_freq=SF, step_size=SF, grat_type="sine")
        values = set(torch.unique(generator(small_arena).frames).tolist())
        assert len(values) > 2
        assert values <= set(range(16))

    def test_phase_shift_of_full_cycle_is_identity(self, small_arena):
        base = GratingGenerator(spat_freq=SF, step_size=math.radians(10))(small_arena).frames
        shifted = GratingGenerator(spat_freq=SF, step_size=math.radians(10), phase_shift=SF)(small_arena).frames
        assert (base.int() - shifted.int()).abs().max().item() <= 1

    @pytest.mark.parametrize("motion_type", ["translation", "expansion-contraction"])
    def test_other_motion_types(self, small_arena, motion_type):
        result = GratingGenerator(spat_freq=SF, step_size=math.radians(5), motion_type=motion_type)(small_arena)
        assert result.num_frames == 6
        assert int(result.frames.max()) <= 15


class TestEdgeGenerator:
    """Test sweeping edges."""

    def test_frame_count(self, small_arena):
        result = EdgeGenerator(spat_freq=SF, step_size=math.radians(3))(small_arena)
        assert result.num_frames == 11
        assert result.true_step_size == pytest.approx(math.radians(3))

    def test_minimum_two_frames(self, small_arena):
        result = EdgeGenerator(spat_freq=SF, step_size=math.radians(200))(small_arena)
        assert result.num_frames == 2

    def test_dark_to_bright(self, small_arena):
        frames = EdgeGenerator(spat_freq=SF, step_size=math.radians(3), levels=[14, 2])(small_arena).frames
        assert torch.all(frames[..., 0] == 2)
        assert torch.all(frames[..., -1] == 14)

    def test_bright_area_never_shrinks(self, g4_arena):
        frames = EdgeGenerator(spat_freq=SF, step_size=math.radians(3))(g4_arena).frames
        totals = frames.double().sum(dim=(0, 1)).tolist()
        assert all(later >= earlier for earlier, later in zip(totals, totals[1:]))
