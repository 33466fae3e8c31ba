"""Binary ``.pat`` codec shared by the G3, G4 and G4.1 generations.

Layout (all multi-byte integers little-endian)::

    header   7 bytes
      0-1    num_x                               u16
      2-3    V1: num_y                           u16 (< 0x8000)
             V2: [1 GGG 0000] [arena_id]         generation ID, arena ID
      4      gs_val                              2 or 16
      5      panel rows                          u8
      6      panel cols                          u8
    frames   num_x * num_y records of
             ceil(rows * cols * bits / 8) bytes  pixels, row-major
             1 byte                              stretch

Pixels are packed least-significant-first: bit ``i % 8`` of byte ``i // 8``
at 1 bit per pixel, or the low nibble for even pixels and the high nibble for
odd pixels at 4 bits per pixel. V2 headers imply ``num_y == 1``; readers tell
the versions apart by the top bit of byte 2.
"""

from __future__ import annotations

import logging
import math
import struct
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from patternforge.arena.generations import generation_name, get_generation_spec
from patternforge.errors import CodecError, CorruptPatternError
from patternforge.patterns.codec.base import PatternCodec
from patternforge.patterns.container import PatternContainer

logger = logging.getLogger(__name__)

HEADER_SIZE = 7
V2_FLAG = 0x80
MAX_NUM_Y_V1 = 0x7FFF


@dataclass(frozen=True)
class G4Header:
    """Decoded G4-family header.

    Attributes:
        num_x, num_y: Frame grid dimensions.
        gs_val: 2 or 16.
        panel_rows, panel_cols: Panel grid.
        version: 1 or 2.
        generation_id: 3-bit generation ID (V2 only, else 0).
        arena_id: Arena configuration ID (V2 only, else 0).
    """

    num_x: int
    num_y: int
    gs_val: int
    panel_rows: int
    panel_cols: int
    version: int = 1
    generation_id: int = 0
    arena_id: int = 0

    @property
    def num_frames(self) -> int:
        return self.num_x * self.num_y


def read_header(data: bytes) -> G4Header:
    """Parse the 7-byte header at the start of ``data``.

    Raises:
        CorruptPatternError: If ``data`` is shorter than the header or the
            bit-depth byte is not 2 or 16.
    """
    if len(data) < HEADER_SIZE:
        raise CorruptPatternError(
            f"pattern data is {len(data)} bytes, shorter than the {HEADER_SIZE}-byte header"
        )
    (num_x,) = struct.unpack_from("<H", data, 0)
    if data[2] & V2_FLAG:
        version, num_y = 2, 1
        generation_id, arena_id = (data[2] >> 4) & 0x07, data[3]
    else:
        version, generation_id, arena_id = 1, 0, 0
        (num_y,) = struct.unpack_from("<H", data, 2)
    gs_val, panel_rows, panel_cols = data[4], data[5], data[6]
    if gs_val not in (2, 16):
        raise CorruptPatternError(f"invalid bit depth byte {gs_val} (expected 2 or 16)")
    return G4Header(num_x, num_y, gs_val, panel_rows, panel_cols, version, generation_id, arena_id)


def frame_record_size(rows: int, cols: int, gs_val: int) -> int:
    """Bytes per frame record, including the stretch byte."""
    bits = 1 if gs_val == 2 else 4
    return math.ceil(rows * cols * bits / 8) + 1


def pack_frames(frames: np.ndarray, gs_val: int) -> np.ndarray:
    """Pack ``(num_frames, pixels)`` values into ``(num_frames, bytes)``."""
    if gs_val == 2:
        return np.packbits(frames, axis=1, bitorder="little")
    if frames.shape[1] % 2:
        frames = np.pad(frames, ((0, 0), (0, 1)))
    return (frames[:, 0::2] | (frames[:, 1::2] << 4)).astype(np.uint8)


def unpack_frames(packed: np.ndarray, gs_val: int, num_pixels: int) -> np.ndarray:
    """Inverse of :func:`pack_frames`."""
    if gs_val == 2:
        return np.unpackbits(packed, axis=1, bitorder="little")[:, :num_pixels]
    nibbles = np.stack([packed & 0x0F, packed >> 4], axis=-1)
    return nibbles.reshape(packed.shape[0], -1)[:, :num_pixels]


class G4Codec(PatternCodec):
    """Codec for the G3/G4/G4.1 layout.

    Args:
        generation: Generation written into V2 headers.
        header_version: Force header version 1 or 2; by default V2 is used
            whenever ``num_y == 1``.

    Example:
        >>> codec = G4Codec("G4")
        >>> data = codec.encode(pattern)
        >>> codec.decode(data) == pattern
        True
    """

    family = "g4"

    def __init__(self, generation: str = "G4", header_version: Optional[int] = None) -> None:
        super().__init__(generation)
        if header_version not in (None, 1, 2):
            raise ValueError(f"header_version must be 1 or 2, got {header_version}")
        self.header_version = header_version

    def sniff(self, data: bytes) -> bool:
        return len(data) >= HEADER_SIZE and not data.startswith(b"G6PT") and data[4] in (2, 16)

    def encode_header(self, container: PatternContainer) -> bytes:
        if not 0 < container.num_x <= 0xFFFF:
            raise CodecError(f"num_x {container.num_x} does not fit in 16 bits")
        if container.panel_rows > 255 or container.panel_cols > 255:
            raise CodecError(
                f"panel grid {container.panel_rows}x{container.panel_cols} exceeds 255"
            )
        version = self.header_version or (2 if container.num_y == 1 else 1)
        if version == 2:
            if container.num_y != 1:
                raise CodecError(f"V2 headers require num_y == 1, got {container.num_y}")
            if not 0 <= container.arena_id <= 255:
                raise CodecError(f"arena_id {container.arena_id} does not fit in one byte")
            dims = bytes([V2_FLAG | (self.spec.generation_id << 4), container.arena_id])
        else:
            if container.num_y > MAX_NUM_Y_V1:
                raise CodecError(
                    f"num_y {container.num_y} collides with the V2 flag (max {MAX_NUM_Y_V1})"
                )
            dims = struct.pack("<H", container.num_y)
        return (
            struct.pack("<H", container.num_x)
            + dims
            + bytes([container.gs_val, container.panel_rows, container.panel_cols])
        )

    def encode(self, container: PatternContainer) -> bytes:
        container.validate()
        self.check_panel_size(container)
        header = self.encode_header(container)

        pixels = container.frames.transpose(2, 0, 1).reshape(container.num_frames, -1)
        records = np.concatenate(
            [pack_frames(pixels, container.gs_val), container.stretch[:, np.newaxis]],
            axis=1,
        )
        logger.debug(
            "%s encode: %d frames of %d bytes", self.generation, container.num_frames, records.shape[1]
        )
        return header + records.tobytes()

    def _resolve_layout(self, header: G4Header, body_size: int) -> Tuple[str, int]:
        """Pick the generation and record size consistent with the header and payload."""
        name = generation_name(header.generation_id) if header.version == 2 else "unspecified"
        if name in ("unspecified", "reserved"):
            candidates = ["G4", "G3"]
        elif get_generation_spec(name).codec_family != self.family:
            raise CorruptPatternError(f"header declares {name}, which does not use this layout")
        else:
            candidates = [name]

        for candidate in candidates:
            ppp = get_generation_spec(candidate).pixels_per_panel
            record = frame_record_size(header.panel_rows * ppp, header.panel_cols * ppp, header.gs_val)
            if record * header.num_frames == body_size:
                return candidate, ppp
        raise CorruptPatternError(
            f"header declares {header.num_frames} frames of "
            f"{header.panel_rows}x{header.panel_cols} panels, but the payload has "
            f"{body_size} bytes"
        )

    def decode(self, data: bytes) -> PatternContainer:
        header = read_header(data)
        if header.num_frames == 0:
            raise CorruptPatternError("header declares zero frames")
        if header.panel_rows == 0 or header.panel_cols == 0:
            raise CorruptPatternError("header declares an empty panel grid")
        body = np.frombuffer(data, dtype=np.uint8, offset=HEADER_SIZE)
        generation, ppp = self._resolve_layout(header, body.size)

        rows, cols = header.panel_rows * ppp, header.panel_cols * ppp
        records = body.reshape(header.num_frames, -1)
        pixels = unpack_frames(records[:, :-1], header.gs_val, rows * cols)
        frames = pixels.reshape(header.num_frames, rows, cols).transpose(1, 2, 0)

        logger.debug("decoded %s pattern: %dx%d, %d frames", generation, rows, cols, header.num_frames)
        return PatternContainer(
            frames=np.ascontiguousarray(frames),
            stretch=records[:, -1].copy(),
            gs_val=header.gs_val,
            generation=generation,
            num_x=header.num_x,
            num_y=header.num_y,
            arena_id=header.arena_id,
            metadata={"header_version": header.version},
        )


__all__ = [
    "G4Codec",
    "G4Header",
    "read_header",
    "frame_record_size",
    "pack_frames",
    "unpack_frames",
    "HEADER_SIZE",
]
