"""Unit tests for the shared generator contract and its helpers."""

import math

import numpy as np
import pytest
import torch

from patternforge.patterns.container import PatternContainer
from patternforge.stimuli import (
    GratingGenerator,
    LoomingGenerator,
    OffOnGenerator,
    OffOnParams,
)
from patternforge.stimuli.base import motion_channel, quantize, round_half_up, square_wave


class TestHelpers:
    """Test rounding and waveform helpers."""

    @pytest.mark.parametrize("value, expected", [(0.49, 0), (0.5, 1), (2.5, 3), (3.2, 3)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_quantize_rounds_and_clips(self):
        values = torch.tensor([-1.0, 0.5, 7.49, 7.5, 20.0], dtype=torch.float64)
        result = quantize(values, 16)
        assert result.dtype == torch.uint8
        assert result.tolist() == [0, 1, 7, 8, 15]

    def test_quantize_binary(self):
        assert quantize(torch.tensor([0.4, 0.6, 3.0]), 2).tolist() == [0, 1, 1]

    def test_square_wave_duty(self):
        phase = (torch.arange(100, dtype=torch.float64) + 0.5) * 2 * math.pi / 100
        assert (square_wave(phase, 25.0) > 0).sum().item() == 25
        assert torch.all(square_wave(phase, 100.0) == 1)
        assert torch.all(square_wave(phase, 0.0) == -1)

    def test_motion_channel(self):
        azimuth = torch.tensor([0.3], dtype=torch.float64)
        colatitude = torch.tensor([math.pi / 4], dtype=torch.float64)
        assert motion_channel(azimuth, colatitude, "rotation").item() == pytest.approx(0.3)
        assert motion_channel(azimuth, colatitude, "expansion-contraction").item() == pytest.approx(math.pi / 4)
        assert motion_channel(azimuth, colatitude, "translation").item() == pytest.approx(-1.0)
        with pytest.raises(ValueError):
            motion_channel(azimuth, colatitude, "spiral")


class TestGeneratorConstruction:
    """Test how generators accept parameters."""

    def test_keyword_parameters(self):
        generator = OffOnGenerator(levels=[9, 1])
        assert generator.params.levels == [9, 1, 0]

    def test_params_object(self):
        params = OffOnParams(levels=[3, 2])
        assert OffOnGenerator(params).params is params

    def test_params_and_kwargs_rejected(self):
        with pytest.raises(TypeError):
            OffOnGenerator(OffOnParams(), levels=[1, 0])

    def test_wrong_params_type(self):
        with pytest.raises(TypeError):
            GratingGenerator(OffOnParams())

    def test_from_config(self):
        generator = LoomingGenerator.from_config(
            {"type": "looming", "initial_size_deg": 5, "final_size_deg": 45, "step_size_deg": 5}
        )
        assert generator.params.final_size == pytest.approx(math.pi / 4)
        assert generator.to_dict()["type"] == "looming"

    def test_is_torch_module(self):
        assert isinstance(OffOnGenerator(), torch.nn.Module)


class TestGenerate:
    """Test packaging of synthesized frames."""

    def test_generate_returns_container(self, small_arena):
        container = OffOnGenerator(levels=[12, 3], stretch=40).generate(small_arena)
        assert isinstance(container, PatternContainer)
        assert container.frames.shape == (16, 64, 2)
        assert container.frames.dtype == np.uint8
        assert container.stretch.tolist() == [40, 40]
        assert container.generation == "G4"
        assert container.metadata["stimulus"]["type"] == "off_on"
        assert "true_step_size" not in container.metadata

    def test_generate_records_step(self, small_arena):
        generator = GratingGenerator(spat_freq=math.radians(30), step_size=math.radians(7))
        container = generator.generate(small_arena)
        assert container.metadata["true_step_size"] == pytest.approx(math.radians(7.5))

    def test_generate_carries_arena_id(self):
        from patternforge.arena import cylindrical_arena

        arena = cylindrical_arena(1, 2, generation="G6", panels_in_circle=10, arena_id=5)
        container = OffOnGenerator(gs_val=2, levels=[1, 0]).generate(arena)
        assert container.arena_id == 5
        assert container.gs_val == 2
        assert container.generation == "G6"
