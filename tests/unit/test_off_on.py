"""Unit tests for the off/on stimulus and solid-angle masking."""

import math

import torch

from patternforge.stimuli import OffOnGenerator

CENTRE = (15, 95)
REAR = (15, 0)
MASK = [0.0, 0.0, math.radians(30), 0]


class TestOffOnGenerator:
    """Test uniform dark/bright frames."""

    def test_two_uniform_frames(self, small_arena):
        result = OffOnGenerator(levels=[13, 4])(small_arena)
        assert result.num_frames == 2
        assert result.true_step_size is None
        assert torch.all(result.frames[..., 0] == 4)
        assert torch.all(result.frames[..., 1] == 13)

    def test_binary(self, g6_arena):
        frames = OffOnGenerator(gs_val=2, levels=[1, 0])(g6_arena).frames
        assert frames.shape == (40, 60, 2)
        assert torch.all(frames[..., 0] == 0) and torch.all(frames[..., 1] == 1)


class TestSolidAngleMask:
    """Test local patterns restricted to a solid-angle mask."""

    def test_outside_mask_uses_mask_level(self, g4_arena):
        frames = OffOnGenerator(levels=[15, 0, 7], pattern_fov="local", sa_mask=MASK)(g4_arena).frames
        assert frames[CENTRE][0] == 0 and frames[CENTRE][1] == 15
        assert frames[REAR][0] == 7 and frames[REAR][1] == 7

    def test_inverted_mask(self, g4_arena):
        mask = MASK[:3] + [1]
        frames = OffOnGenerator(levels=[15, 0, 7], pattern_fov="local", sa_mask=mask)(g4_arena).frames
        assert frames[CENTRE][1] == 7
        assert frames[REAR][1] == 15

    def test_mask_edge_is_anti_aliased(self, g4_arena):
        frames = OffOnGenerator(levels=[15, 0, 0], pattern_fov="local", sa_mask=MASK)(g4_arena).frames
        values = set(torch.unique(frames[..., 1]).tolist())
        assert {0, 15} < values

    def test_full_field_ignores_mask(self, g4_arena):
        frames = OffOnGenerator(levels=[15, 0, 7], sa_mask=MASK)(g4_arena).frames
        assert torch.all(frames[..., 1] == 15)
