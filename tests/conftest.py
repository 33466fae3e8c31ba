"""
Test configuration and fixtures for PatternForge.
"""
import os
import sys
from pathlib import Path

import pytest
import numpy as np
import torch

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("OMP_NUM_THREADS", "1")
os.environ.setdefault("MKL_NUM_THREADS", "1")

torch.set_num_threads(1)

from patternforge.arena.geometry import cylindrical_arena  # noqa: E402
from patternforge.patterns.container import PatternContainer  # noqa: E402


@pytest.fixture
def g4_arena():
    """Full 2 x 12 G4 arena (32 x 192 pixels, closed circle)."""
    return cylindrical_arena(panel_rows=2, panel_cols=12, generation="G4")


@pytest.fixture
def small_arena():
    """Partial 1 x 4 G4 arena out of a 12-panel circle (16 x 64 pixels)."""
    return cylindrical_arena(panel_rows=1, panel_cols=4, generation="G4", panels_in_circle=12)


@pytest.fixture
def g6_arena():
    """2 x 3 G6 arena out of a 10-panel circle (40 x 60 pixels)."""
    return cylindrical_arena(panel_rows=2, panel_cols=3, generation="G6", panels_in_circle=10)


@pytest.fixture
def make_pattern():
    """Factory for seeded random patterns."""

    def _make(panel_rows=2, panel_cols=3, num_frames=4, gs_val=16,
              generation="G4", seed=0, **kwargs):
        ppp = {"G3": 8, "G4": 16, "G4.1": 16, "G6": 20}[generation]
        rng = np.random.default_rng(seed)
        frames = rng.integers(
            0, gs_val, size=(panel_rows * ppp, panel_cols * ppp, num_frames), dtype=np.uint8
        )
        stretch = kwargs.pop("stretch", rng.integers(0, 256, size=num_frames))
        return PatternContainer(
            frames=frames, stretch=stretch, gs_val=gs_val, generation=generation, **kwargs
        )

    return _make
