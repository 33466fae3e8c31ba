"""Binary ``.pat`` codec for G6 arenas (20x20-pixel panels).

File layout::

    header, V1 (17 bytes)            V2 (18 bytes)
      0-3   "G6PT"                     "G6PT"
      4     version = 1                [0010 AAAA]  version 2, arena ID bits 5-2
      5     gs mode (1=GS2, 2=GS16)    [AA OOOOOO]  arena ID bits 1-0, observer ID
      6-7   num_frames (u16 LE)        num_frames (u16 LE)
      8     panel rows                 panel rows
      9     panel cols                 panel cols
      10    checksum                   gs mode
      11-16 panel mask                 panel mask
      17    -                          checksum

    frames, each:
      "FR", frame index (u16 LE), then one block per panel in panel-row-major
      order: [header][command][data][stretch]

Block header is version 1 with bit 7 set when the rest of the block holds an
odd number of 1 bits. The command is 0x10 (GS2, 50 data bytes, MSB-first) or
0x30 (GS16, 200 data bytes, even pixel in the high nibble). Within a panel,
pixel ``(r, c)`` is number ``(19 - r) * 20 + c``. The checksum is the XOR of
every byte of the frame section; bit ``i`` of the panel mask marks panel
``i`` as present.

Every block of a frame repeats that frame's stretch byte, and decoding
requires them to agree. The header has no room for a ``num_x`` x ``num_y``
frame grid, so only patterns with ``num_y == 1`` can be encoded.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass

import numpy as np

from patternforge.errors import CodecError, CorruptPatternError
from patternforge.patterns.codec.base import PatternCodec
from patternforge.patterns.container import PatternContainer

logger = logging.getLogger(__name__)

MAGIC = b"G6PT"
FRAME_MARKER = b"FR"
HEADER_SIZE_V1 = 17
HEADER_SIZE_V2 = 18
PANEL_SIZE = 20
MAX_PANELS = 48
BLOCK_VERSION = 0x01
PARITY_BIT = 0x80

# gs_val -> (header gs mode, block command, data bytes per panel)
_GS_LAYOUT = {2: (1, 0x10, 50), 16: (2, 0x30, 200)}
_GS_FROM_MODE = {mode: gs for gs, (mode, _, _) in _GS_LAYOUT.items()}


@dataclass(frozen=True)
class G6Header:
    """Decoded G6 header fields."""

    version: int
    gs_val: int
    num_frames: int
    panel_rows: int
    panel_cols: int
    checksum: int
    panel_mask: bytes
    arena_id: int = 0
    observer_id: int = 0

    @property
    def size(self) -> int:
        return HEADER_SIZE_V1 if self.version == 1 else HEADER_SIZE_V2


def panel_mask(panel_rows: int, panel_cols: int) -> bytes:
    """6-byte presence mask with every panel of the grid present."""
    bits = np.zeros(MAX_PANELS, dtype=np.uint8)
    bits[: panel_rows * panel_cols] = 1
    return np.packbits(bits, bitorder="little").tobytes()


def read_header(data: bytes) -> G6Header:
    """Parse a V1 or V2 G6 header.

    Raises:
        CorruptPatternError: On bad magic, unknown version or gs mode, or a
            short buffer.
    """
    if len(data) < HEADER_SIZE_V1 or not data.startswith(MAGIC):
        raise CorruptPatternError("not a G6 pattern (missing 'G6PT' magic or short header)")
    version_byte = data[4]
    if version_byte < 16:
        if version_byte != 1:
            raise CorruptPatternError(f"unsupported G6 header version {version_byte}")
        (num_frames,) = struct.unpack_from("<H", data, 6)
        gs_mode, checksum, mask = data[5], data[10], bytes(data[11:17])
        arena_id = observer_id = 0
        version = 1
    else:
        if version_byte >> 4 != 2:
            raise CorruptPatternError(f"unsupported G6 header version {version_byte >> 4}")
        if len(data) < HEADER_SIZE_V2:
            raise CorruptPatternError("truncated G6 V2 header")
        arena_id = ((version_byte & 0x0F) << 2) | (data[5] >> 6)
        observer_id = data[5] & 0x3F
        (num_frames,) = struct.unpack_from("<H", data, 6)
        gs_mode, mask, checksum = data[10], bytes(data[11:17]), data[17]
        version = 2
    if gs_mode not in _GS_FROM_MODE:
        raise CorruptPatternError(f"invalid G6 gs mode {gs_mode} (expected 1 or 2)")
    return G6Header(
        version, _GS_FROM_MODE[gs_mode], num_frames, data[8], data[9],
        checksum, mask, arena_id, observer_id,
    )


def _block_parity(blocks: np.ndarray) -> np.ndarray:
    """Odd-parity flag (0 or 1) of each row of ``blocks``."""
    return (np.unpackbits(blocks, axis=1).sum(axis=1) % 2).astype(np.uint8)


class G6Codec(PatternCodec):
    """Codec for the G6 panel-block layout.

    V2 headers are written only when the container carries an arena or
    observer ID; otherwise the 17-byte V1 header is used.
    """

    family = "g6"

    def __init__(self, generation: str = "G6") -> None:
        super().__init__(generation)

    def sniff(self, data: bytes) -> bool:
        return data.startswith(MAGIC)

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode_panels(self, frame: np.ndarray, stretch: int, gs_val: int) -> np.ndarray:
        """Encode one ``(rows, cols)`` frame into ``(num_panels, block_size)`` blocks."""
        _, command, _ = _GS_LAYOUT[gs_val]
        rows, cols = frame.shape
        pr, pc = rows // PANEL_SIZE, cols // PANEL_SIZE
        panels = frame.reshape(pr, PANEL_SIZE, pc, PANEL_SIZE).transpose(0, 2, 1, 3)
        ordered = panels[:, :, ::-1, :].reshape(pr * pc, PANEL_SIZE * PANEL_SIZE)

        if gs_val == 2:
            data = np.packbits(ordered, axis=1, bitorder="big")
        else:
            data = ((ordered[:, 0::2] << 4) | ordered[:, 1::2]).astype(np.uint8)

        count = pr * pc
        body = np.concatenate(
            [
                np.full((count, 1), command, dtype=np.uint8),
                data,
                np.full((count, 1), stretch, dtype=np.uint8),
            ],
            axis=1,
        )
        header = (BLOCK_VERSION | (_block_parity(body) << 7)).astype(np.uint8)
        return np.concatenate([header[:, np.newaxis], body], axis=1)

    def encode_header(self, container: PatternContainer, checksum: int) -> bytes:
        gs_mode = _GS_LAYOUT[container.gs_val][0]
        counts = struct.pack("<H", container.num_frames)
        grid = bytes([container.panel_rows, container.panel_cols])
        mask = panel_mask(container.panel_rows, container.panel_cols)
        if container.arena_id or container.observer_id:
            arena, observer = container.arena_id, container.observer_id
            ids = bytes([(2 << 4) | (arena >> 2), ((arena & 0x03) << 6) | observer])
            return MAGIC + ids + counts + grid + bytes([gs_mode]) + mask + bytes([checksum])
        return MAGIC + bytes([1, gs_mode]) + counts + grid + bytes([checksum]) + mask

    def encode(self, container: PatternContainer) -> bytes:
        container.validate()
        self.check_panel_size(container)
        if container.panel_rows * container.panel_cols > MAX_PANELS:
            raise CodecError(
                f"G6 patterns address at most {MAX_PANELS} panels, got "
                f"{container.panel_rows}x{container.panel_cols}"
            )
        if container.num_y != 1:
            raise CodecError(
                f"G6 headers cannot store a frame grid, got num_y={container.num_y}"
            )
        if container.num_frames > 0xFFFF:
            raise CodecError(f"{container.num_frames} frames do not fit in 16 bits")
        if not 0 <= container.arena_id <= 63 or not 0 <= container.observer_id <= 63:
            raise CodecError(
                f"G6 arena_id and observer_id must be 0-63, got "
                f"{container.arena_id} and {container.observer_id}"
            )

        sections = []
        for k in range(container.num_frames):
            blocks = self.encode_panels(
                container.frames[:, :, k], int(container.stretch[k]), container.gs_val
            )
            sections.append(FRAME_MARKER + struct.pack("<H", k) + blocks.tobytes())
        frames = b"".join(sections)
        checksum = int(np.bitwise_xor.reduce(np.frombuffer(frames, dtype=np.uint8)))

        logger.debug("G6 encode: %d frames, %d bytes", container.num_frames, len(frames))
        return self.encode_header(container, checksum) + frames

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def decode(self, data: bytes) -> PatternContainer:
        header = read_header(data)
        if header.num_frames == 0:
            raise CorruptPatternError("header declares zero frames")
        pr, pc = header.panel_rows, header.panel_cols
        if pr == 0 or pc == 0:
            raise CorruptPatternError("header declares an empty panel grid")
        _, command, data_size = _GS_LAYOUT[header.gs_val]
        block_size = data_size + 3
        frame_size = len(FRAME_MARKER) + 2 + pr * pc * block_size

        body = np.frombuffer(data, dtype=np.uint8, offset=header.size)
        if body.size != header.num_frames * frame_size:
            raise CorruptPatternError(
                f"header declares {header.num_frames} frames of {pr}x{pc} panels "
                f"({header.num_frames * frame_size} bytes), but the payload has {body.size}"
            )
        if int(np.bitwise_xor.reduce(body)) != header.checksum:
            raise CorruptPatternError("G6 checksum mismatch")

        records = body.reshape(header.num_frames, frame_size)
        if not np.all(records[:, :2] == np.frombuffer(FRAME_MARKER, dtype=np.uint8)):
            raise CorruptPatternError("missing 'FR' frame marker")
        indices = records[:, 2].astype(np.int64) | (records[:, 3].astype(np.int64) << 8)
        if not np.array_equal(indices, np.arange(header.num_frames)):
            raise CorruptPatternError("frame indices are out of sequence")

        blocks = records[:, 4:].reshape(header.num_frames * pr * pc, block_size)
        if np.any(blocks[:, 0] & 0x7F != BLOCK_VERSION) or np.any(blocks[:, 1] != command):
            raise CorruptPatternError("unexpected panel block header or command byte")
        if np.any((blocks[:, 0] >> 7) != _block_parity(blocks[:, 1:])):
            raise CorruptPatternError("panel block parity error")

        payload = blocks[:, 2:-1]
        if header.gs_val == 2:
            ordered = np.unpackbits(payload, axis=1, bitorder="big")[:, : PANEL_SIZE * PANEL_SIZE]
        else:
            ordered = np.stack([payload >> 4, payload & 0x0F], axis=-1).reshape(payload.shape[0], -1)
        panels = ordered.reshape(header.num_frames, pr, pc, PANEL_SIZE, PANEL_SIZE)[:, :, :, ::-1, :]
        frames = panels.transpose(1, 3, 2, 4, 0).reshape(pr * PANEL_SIZE, pc * PANEL_SIZE, header.num_frames)
        panel_stretch = blocks[:, -1].reshape(header.num_frames, pr * pc)
        if np.any(panel_stretch != panel_stretch[:, :1]):
            raise CorruptPatternError("panels disagree on the stretch value of a frame")
        stretch = panel_stretch[:, 0]

        logger.debug("decoded G6 pattern: %dx%d panels, %d frames", pr, pc, header.num_frames)
        return PatternContainer(
            frames=np.ascontiguousarray(frames),
            stretch=stretch.copy(),
            gs_val=header.gs_val,
            generation="G6",
            arena_id=header.arena_id,
            observer_id=header.observer_id,
            metadata={"header_version": header.version, "panel_mask": header.panel_mask.hex()},
        )


__all__ = ["G6Codec", "G6Header", "read_header", "panel_mask"]
