"""Exception types raised by PatternForge.

Parameter problems and codec problems are both ``ValueError`` subclasses so
callers that only care about "bad input" can catch a single type, while the
CLI and tests can tell them apart.
"""

from __future__ import annotations

from typing import Optional


class PatternForgeError(Exception):
    """Root of all PatternForge-specific errors."""


class ParameterError(PatternForgeError, ValueError):
    """Invalid or missing stimulus parameter.

    Attributes:
        field: Name of the offending parameter, if known.
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class CodecError(PatternForgeError, ValueError):
    """A pattern could not be encoded or decoded."""


class PixelRangeError(CodecError):
    """Pixel values exceed the legal range of the declared bit depth."""


class CorruptPatternError(CodecError):
    """Binary pattern data is truncated, inconsistent, or fails a checksum."""


__all__ = [
    "PatternForgeError",
    "ParameterError",
    "CodecError",
    "PixelRangeError",
    "CorruptPatternError",
]
