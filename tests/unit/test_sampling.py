"""Unit tests for the angular anti-aliasing sampler."""

import math

import pytest
import torch

from patternforge.stimuli.sampling import (
    AntiAliasingSampler,
    fractional_membership,
    local_spacing,
    sample_offsets,
    samples_by_diff,
    samples_by_p_rad,
)


class TestSampleOffsets:
    """Test the unit offset pattern."""

    def test_single_sample_is_centre(self):
        assert sample_offsets(1).tolist() == [0.0]

    def test_offsets_are_symmetric_midpoints(self):
        offsets = sample_offsets(4)
        assert torch.allclose(offsets, torch.tensor([-0.75, -0.25, 0.25, 0.75], dtype=torch.float64))

    def test_odd_count_has_exact_zero(self):
        assert sample_offsets(9)[4].item() == 0.0

    def test_rejects_zero_samples(self):
        with pytest.raises(ValueError):
            sample_offsets(0)


class TestSamplesByPRad:
    """Test coordinate expansion."""

    def test_adds_trailing_axis(self):
        coord = torch.zeros(3, 5, dtype=torch.float64)
        assert samples_by_p_rad(coord, 7, 0.01).shape == (3, 5, 7)

    def test_samples_stay_inside_footprint(self):
        coord = torch.linspace(0, 1, 12, dtype=torch.float64).reshape(3, 4)
        samples = samples_by_p_rad(coord, 15, 0.02)
        assert torch.all((samples - coord.unsqueeze(-1)).abs() < 0.02)
        assert torch.allclose(samples.mean(dim=-1), coord)

    def test_per_pixel_radius(self):
        coord = torch.zeros(1, 2, dtype=torch.float64)
        p_rad = torch.tensor([[0.1, 0.2]], dtype=torch.float64)
        samples = samples_by_p_rad(coord, 2, p_rad)
        assert torch.allclose(samples[0, 0], torch.tensor([-0.05, 0.05], dtype=torch.float64))
        assert torch.allclose(samples[0, 1], torch.tensor([-0.1, 0.1], dtype=torch.float64))


class TestSamplesByDiff:
    """Test spacing-derived sampling."""

    def test_linear_ramp_has_unit_spacing(self):
        coord = torch.arange(10, dtype=torch.float64).reshape(1, 10)
        assert torch.allclose(local_spacing(coord), torch.ones(1, 10, dtype=torch.float64))

    def test_radius_is_half_spacing(self):
        coord = torch.arange(10, dtype=torch.float64).reshape(1, 10) * 0.2
        samples = samples_by_diff(coord, 3)
        offsets = samples - coord.unsqueeze(-1)
        assert torch.allclose(offsets[0, 5], torch.tensor([-1 / 15, 0, 1 / 15], dtype=torch.float64))

    def test_single_pixel_has_no_spread(self):
        coord = torch.ones(1, 1, dtype=torch.float64)
        assert torch.equal(samples_by_diff(coord, 5), torch.ones(1, 1, 5, dtype=torch.float64))


class TestFractionalMembership:
    """Test membership averaging and convergence."""

    def test_average_of_boolean_mask(self):
        mask = torch.tensor([[[True, False, True, True]]])
        assert fractional_membership(mask).item() == pytest.approx(0.75)

    def test_half_covered_pixel_error_decreases(self):
        """A disc edge through a pixel centre covers exactly half its footprint."""
        radius = math.radians(10)
        distance = torch.full((1, 1), radius, dtype=torch.float64)
        errors = []
        for n in (1, 3, 9, 27, 81):
            inside = fractional_membership(samples_by_p_rad(distance, n, 0.01) < radius)
            errors.append(abs(inside.item() - 0.5))
        assert all(later < earlier for earlier, later in zip(errors, errors[1:]))
        assert errors[-1] < 0.01

    def test_sampler_bundles_radius(self):
        sampler = AntiAliasingSampler(5, 0.01)
        coord = torch.zeros(2, 2, dtype=torch.float64)
        assert torch.equal(sampler.sample(coord), samples_by_p_rad(coord, 5, 0.01))
        assert sampler.membership(sampler.sample(coord) < 0).allclose(
            torch.full((2, 2), 0.4, dtype=torch.float64)
        )

    def test_sampler_rejects_bad_count(self):
        with pytest.raises(ValueError):
            AntiAliasingSampler(0, 0.01)
