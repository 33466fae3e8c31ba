"""Utility helpers for PatternForge."""

from patternforge.utils.logging import get_logger, setup_logging

__all__ = ["setup_logging", "get_logger"]
