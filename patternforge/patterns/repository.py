"""Pattern file naming and directory bookkeeping.

Pattern files are named ``pat<id>_<name>_<suffix>.pat``: a zero-padded
four-digit ID, a name made of letters, digits, ``-`` and ``.``, and the
generation's file suffix (``G3``, ``G4`` or ``G6``; G4.1 patterns use
``G4``). Controllers address patterns by ID, so IDs are unique within a
directory.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from patternforge.arena.generations import get_generation_spec
from patternforge.patterns.codec import decode_pattern, encode_pattern
from patternforge.patterns.container import PatternContainer
from patternforge.registry import ComponentRegistry

logger = logging.getLogger(__name__)

MAX_PATTERN_ID = 9999
_NAME_RE = re.compile(r"^[A-Za-z0-9.\-]+$")
_FILE_RE = re.compile(r"^pat(?P<id>\d{4})_(?P<name>[A-Za-z0-9.\-]+)_(?P<suffix>G\d)\.pat$")


@dataclass(frozen=True)
class PatternFileEntry:
    """A pattern file found in a repository directory."""

    pattern_id: int
    name: str
    suffix: str
    path: Path


def pattern_filename(pattern_id: int, name: str, generation: str) -> str:
    """Build the conventional file name for a pattern.

    Raises:
        ValueError: If the ID is outside 1-9999 or the name contains
            characters other than letters, digits, ``-`` and ``.``.
    """
    if not 1 <= pattern_id <= MAX_PATTERN_ID:
        raise ValueError(f"pattern_id must be in 1-{MAX_PATTERN_ID}, got {pattern_id}")
    if not _NAME_RE.match(name):
        raise ValueError(
            f"pattern name {name!r} may only contain letters, digits, '-' and '.'"
        )
    suffix = get_generation_spec(generation).file_suffix
    return f"pat{pattern_id:04d}_{name}_{suffix}.pat"


def parse_pattern_filename(filename: Union[str, Path]) -> Optional[PatternFileEntry]:
    """Parse a conventional pattern file name; returns None if it does not match."""
    path = Path(filename)
    match = _FILE_RE.match(path.name)
    if match is None:
        return None
    return PatternFileEntry(int(match["id"]), match["name"], match["suffix"], path)


class PatternRepository:
    """Directory of ``.pat`` files following the naming convention.

    Args:
        directory: Directory holding the patterns; created on first save.
        codecs: Codec registry used to encode and decode; a default one is
            built when omitted.
    """

    def __init__(self, directory: Union[str, Path], codecs: Optional[ComponentRegistry] = None):
        self.directory = Path(directory)
        self.codecs = codecs

    def list_patterns(self) -> List[PatternFileEntry]:
        """Conventionally named pattern files, sorted by ID."""
        if not self.directory.is_dir():
            return []
        entries = [parse_pattern_filename(p) for p in self.directory.glob("pat*.pat")]
        return sorted((e for e in entries if e is not None), key=lambda e: e.pattern_id)

    def next_available_id(self) -> int:
        """One more than the highest ID in the directory (1 when empty)."""
        entries = self.list_patterns()
        next_id = entries[-1].pattern_id + 1 if entries else 1
        if next_id > MAX_PATTERN_ID:
            raise ValueError(f"{self.directory} already holds pattern ID {MAX_PATTERN_ID}")
        return next_id

    def path_for(self, pattern_id: int, name: str, generation: str) -> Path:
        return self.directory / pattern_filename(pattern_id, name, generation)

    def save(
        self,
        container: PatternContainer,
        name: str,
        pattern_id: Optional[int] = None,
        overwrite: bool = False,
    ) -> Path:
        """Encode ``container`` and write it under the next free (or given) ID.

        Raises:
            FileExistsError: If the target file, or another file with the same
                ID, exists and ``overwrite`` is False.
        """
        if pattern_id is None:
            pattern_id = self.next_available_id()
        path = self.path_for(pattern_id, name, container.generation)
        clashes = [e.path for e in self.list_patterns() if e.pattern_id == pattern_id]
        if clashes and not overwrite:
            raise FileExistsError(f"Pattern ID {pattern_id} already used by {clashes[0]}")

        data = encode_pattern(container, codecs=self.codecs)
        self.directory.mkdir(parents=True, exist_ok=True)
        for clash in clashes:
            if clash != path:
                clash.unlink()
        path.write_bytes(data)
        logger.info("Wrote %s (%d bytes)", path, len(data))
        return path

    def load(self, path: Union[str, Path]) -> PatternContainer:
        """Read and decode a pattern file; relative paths resolve against the directory."""
        path = Path(path)
        if not path.is_absolute() and not path.exists():
            path = self.directory / path
        container = decode_pattern(path.read_bytes(), self.codecs)
        container.metadata["path"] = str(path)
        entry = parse_pattern_filename(path)
        if entry is not None:
            container.metadata.update(pattern_id=entry.pattern_id, name=entry.name)
        logger.debug("Loaded %s", path)
        return container

    def __repr__(self) -> str:
        return f"PatternRepository({str(self.directory)!r})"


__all__ = [
    "PatternRepository",
    "PatternFileEntry",
    "pattern_filename",
    "parse_pattern_filename",
    "MAX_PATTERN_ID",
]
