"""In-memory pattern: frames, per-frame stretch, bit depth and arena dimensions.

Frames are stored as a ``numpy.uint8`` array of shape
``(rows, cols, num_frames)`` in display orientation (row 0 is the top pixel
row). The frame count is conceptually a ``num_x`` by ``num_y`` grid
(controllers can index patterns in two dimensions) flattened to one axis,
``x`` varying fastest.

Construction checks structure (shapes, stretch length, panel alignment);
:meth:`PatternContainer.validate` additionally checks that every pixel fits
the bit depth, and codecs call it before encoding.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import numpy as np

from patternforge.arena.generations import get_generation_spec, normalize_generation
from patternforge.errors import PixelRangeError

GS_ALIASES = {1: 2, 2: 2, 4: 16, 16: 16}


def normalize_gs_val(gs_val: Any) -> int:
    """Map a bit-depth tag (2/16, or the 1/4 bits-per-pixel aliases) to 2 or 16.

    Raises:
        ValueError: For any other value.
    """
    try:
        return GS_ALIASES[int(gs_val)]
    except (KeyError, TypeError, ValueError):
        raise ValueError(
            f"gs_val must be 2 (binary) or 16 (grayscale), got {gs_val!r}"
        ) from None


@dataclass(eq=False)
class PatternContainer:
    """Frame series plus the metadata needed to encode it.

    Attributes:
        frames: ``uint8`` array ``(rows, cols, num_frames)``; a 2-D array is
            taken as a single frame.
        stretch: Per-frame stretch values; a scalar is broadcast.
        gs_val: 2 (binary) or 16 (grayscale).
        generation: Arena generation the pattern targets.
        num_x: Frame-grid width; defaults to ``num_frames``.
        num_y: Frame-grid height; defaults to 1.
        arena_id: Arena configuration ID (0 = unspecified).
        observer_id: Observer position ID, G6 only (0 = unspecified).
        metadata: Free-form information (stimulus parameters, file name);
            not compared by ``==``.
    """

    frames: np.ndarray
    stretch: Union[int, np.ndarray] = 1
    gs_val: int = 16
    generation: str = "G4"
    num_x: Optional[int] = None
    num_y: Optional[int] = None
    arena_id: int = 0
    observer_id: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frames = np.asarray(self.frames)
        if frames.ndim == 2:
            frames = frames[:, :, np.newaxis]
        if frames.ndim != 3 or frames.shape[2] == 0:
            raise ValueError(
                f"frames must have shape (rows, cols, num_frames), got {frames.shape}"
            )
        if frames.dtype == np.bool_:
            frames = frames.astype(np.uint8)
        elif frames.dtype != np.uint8:
            if not np.issubdtype(frames.dtype, np.number) or (
                frames.size and (frames.min() < 0 or frames.max() > 255
                                 or not np.array_equal(frames, np.round(frames)))
            ):
                raise PixelRangeError("frame values must be integers in [0, 255]")
            frames = frames.astype(np.uint8)
        self.frames = frames

        num_frames = frames.shape[2]
        stretch = np.asarray(self.stretch)
        if stretch.ndim == 0:
            stretch = np.full(num_frames, stretch)
        if stretch.shape != (num_frames,):
            raise ValueError(
                f"stretch must have one value per frame ({num_frames}), got {stretch.shape[0]}"
            )
        if stretch.size and (stretch.min() < 0 or stretch.max() > 255):
            raise ValueError("stretch values must be in [0, 255]")
        self.stretch = stretch.astype(np.uint8)

        self.gs_val = normalize_gs_val(self.gs_val)
        self.generation = normalize_generation(self.generation)

        if self.num_x is None and self.num_y is None:
            self.num_x, self.num_y = num_frames, 1
        elif self.num_x is None:
            self.num_x = num_frames // self.num_y
        elif self.num_y is None:
            self.num_y = num_frames // self.num_x
        if self.num_x * self.num_y != num_frames:
            raise ValueError(
                f"num_x * num_y ({self.num_x} * {self.num_y}) must equal the "
                f"frame count ({num_frames})"
            )

        ppp = self.pixels_per_panel
        if self.rows % ppp or self.cols % ppp:
            raise ValueError(
                f"{self.rows}x{self.cols} pixels is not a whole number of "
                f"{ppp}x{ppp} {self.generation} panels"
            )

    @property
    def rows(self) -> int:
        return self.frames.shape[0]

    @property
    def cols(self) -> int:
        return self.frames.shape[1]

    @property
    def num_frames(self) -> int:
        return self.frames.shape[2]

    @property
    def pixels_per_panel(self) -> int:
        return get_generation_spec(self.generation).pixels_per_panel

    @property
    def panel_rows(self) -> int:
        return self.rows // self.pixels_per_panel

    @property
    def panel_cols(self) -> int:
        return self.cols // self.pixels_per_panel

    @property
    def bits_per_pixel(self) -> int:
        return 1 if self.gs_val == 2 else 4

    def validate(self) -> None:
        """Check that every pixel is a legal level for ``gs_val``.

        Raises:
            PixelRangeError: If any value exceeds ``gs_val - 1``.
        """
        peak = int(self.frames.max())
        if peak > self.gs_val - 1:
            frame = int(np.argwhere(self.frames > self.gs_val - 1)[0][2])
            raise PixelRangeError(
                f"pixel value {peak} exceeds the {self.bits_per_pixel}-bit range "
                f"[0, {self.gs_val - 1}] (first offending frame: {frame})"
            )

    def frame(self, index: int) -> np.ndarray:
        """One frame as a read-only ``(rows, cols)`` view."""
        view = self.frames[:, :, index]
        view.flags.writeable = False
        return view

    def summary(self) -> Dict[str, Any]:
        """Header-level description used by the CLI ``inspect`` command."""
        return {
            "generation": self.generation,
            "gs_val": self.gs_val,
            "rows": self.rows,
            "cols": self.cols,
            "panel_rows": self.panel_rows,
            "panel_cols": self.panel_cols,
            "num_frames": self.num_frames,
            "num_x": self.num_x,
            "num_y": self.num_y,
            "arena_id": self.arena_id,
            "observer_id": self.observer_id,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PatternContainer):
            return NotImplemented
        return (
            self.gs_val == other.gs_val
            and (self.num_x, self.num_y) == (other.num_x, other.num_y)
            and self.frames.shape == other.frames.shape
            and np.array_equal(self.frames, other.frames)
            and np.array_equal(self.stretch, other.stretch)
        )

    def __repr__(self) -> str:
        return (
            f"PatternContainer({self.rows}x{self.cols}, frames={self.num_frames}, "
            f"gs_val={self.gs_val}, generation={self.generation!r})"
        )


__all__ = ["PatternContainer"]
