"""Unit tests for the looming stimulus."""

import math
import warnings

import pytest
import torch

from patternforge.errors import ParameterError
from patternforge.stimuli import LoomingGenerator, LoomingParams
from patternforge.stimuli.looming import (
    DEFAULT_EXPONENTIAL_FRAMES,
    MIN_TIME_TO_COLLISION,
    constant_velocity_sizes,
    exponential_sizes,
    time_to_collision,
)

POLE_PIXELS = [(15, 95), (15, 96), (16, 95), (16, 96)]


def _deg(value):
    return math.radians(value)


class TestSizeProfiles:
    """Test per-frame angular radii."""

    def test_constant_velocity(self):
        params = LoomingParams(initial_size=_deg(5), final_size=_deg(90), step_size=_deg(5))
        sizes, step = constant_velocity_sizes(params)
        assert len(sizes) == 17
        assert sizes[0].item() == pytest.approx(_deg(5))
        assert sizes[-1].item() == pytest.approx(_deg(90))
        assert step == pytest.approx(_deg(85) / 16)

    def test_constant_velocity_default_step_is_one_degree(self):
        params = LoomingParams(initial_size=_deg(10), final_size=_deg(40))
        sizes, _ = constant_velocity_sizes(params)
        assert len(sizes) == 30

    def test_time_to_collision(self):
        assert time_to_collision(math.pi / 2, 0.04) == pytest.approx(0.02)

    def test_exponential_with_frame_rate(self):
        params = LoomingParams(
            loom_profile="exponential", initial_size=_deg(5), final_size=_deg(90),
            l_over_v=0.04, frame_rate=100,
        )
        sizes, _ = exponential_sizes(params)
        interval = time_to_collision(_deg(5), 0.04) - time_to_collision(_deg(90), 0.04)
        assert len(sizes) == math.ceil(interval * 100)
        assert sizes[0].item() == pytest.approx(_deg(5))
        assert sizes[-1].item() == pytest.approx(_deg(90))
        assert torch.all(torch.diff(sizes) > 0)

    def test_exponential_accelerates(self):
        params = LoomingParams(
            loom_profile="exponential", initial_size=_deg(5), final_size=_deg(90), l_over_v=0.04,
        )
        sizes, _ = exponential_sizes(params)
        growth = torch.diff(sizes)
        assert len(sizes) == DEFAULT_EXPONENTIAL_FRAMES
        assert growth[-1] > growth[0]

    def test_exponential_clamps_time_to_collision(self):
        params = LoomingParams(
            loom_profile="exponential", initial_size=_deg(5), final_size=_deg(179.99), l_over_v=0.04,
        )
        sizes, _ = exponential_sizes(params)
        expected = 2 * math.atan(0.04 / (2 * MIN_TIME_TO_COLLISION))
        assert sizes[-1].item() == pytest.approx(expected)

    def test_exponential_from_zero_size_rejected(self):
        with pytest.raises(ParameterError, match="initial_size"):
            LoomingGenerator(
                loom_profile="exponential", initial_size=0.0, final_size=_deg(60), l_over_v=0.04,
            )


class TestLoomingGenerator:
    """Test looming synthesis on a full arena."""

    def test_frame_count(self, g4_arena):
        generator = LoomingGenerator(initial_size=_deg(5), final_size=_deg(60), step_size=_deg(5))
        result = generator(g4_arena)
        assert result.num_frames == 11
        assert result.frames.shape == (32, 192, 11)

    def test_pole_pixels_covered_from_start(self, g4_arena):
        generator = LoomingGenerator(initial_size=_deg(5), final_size=_deg(60), step_size=_deg(5))
        frames = generator(g4_arena).frames
        for row, col in POLE_PIXELS:
            assert torch.all(frames[row, col] == 15)

    def test_disc_grows(self, g4_arena):
        generator = LoomingGenerator(initial_size=_deg(5), final_size=_deg(60), step_size=_deg(5))
        totals = generator(g4_arena).frames.double().sum(dim=(0, 1)).tolist()
        assert all(later > earlier for earlier, later in zip(totals, totals[1:]))

    def test_rear_pixels_stay_background(self, g4_arena):
        generator = LoomingGenerator(
            initial_size=_deg(5), final_size=_deg(60), step_size=_deg(5), levels=[0, 15]
        )
        frames = generator(g4_arena).frames
        assert torch.all(frames[:, 0] == 15)
        assert torch.all(frames[15, 95] == 0)

    def test_no_warning_up_to_hemisphere(self, g4_arena):
        generator = LoomingGenerator(initial_size=_deg(5), final_size=_deg(80), step_size=_deg(25))
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            generator(g4_arena)

    def test_warns_beyond_hemisphere(self, small_arena):
        generator = LoomingGenerator(initial_size=_deg(5), final_size=_deg(120), step_size=_deg(25))
        with pytest.warns(UserWarning, match="hemisphere"):
            result = generator(small_arena)
        assert result.num_frames == 5

    def test_pole_coord_moves_disc(self, g4_arena):
        generator = LoomingGenerator(
            initial_size=_deg(5), final_size=_deg(10), step_size=_deg(5),
            pole_coord=[math.pi / 2, 0.0],
        )
        frames = generator(g4_arena).frames
        assert torch.all(frames[15, 95] == 0)
        assert int(frames[15:17, 143:145, 0].min()) == 15
