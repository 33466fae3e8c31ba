"""YAML job configuration for PatternForge."""

from patternforge.config.schema import (
    ArenaConfig,
    OutputConfig,
    PatternForgeConfig,
    PatternJobConfig,
)
from patternforge.config.yaml_utils import UniqueKeyLoader, load_yaml, load_yaml_file

__all__ = [
    "ArenaConfig",
    "OutputConfig",
    "PatternForgeConfig",
    "PatternJobConfig",
    "UniqueKeyLoader",
    "load_yaml",
    "load_yaml_file",
]
