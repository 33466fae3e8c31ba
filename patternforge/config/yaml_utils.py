"""YAML helpers for pattern job files.

Job files are hand-written, so a repeated key (two ``step_size`` entries in
one stimulus, say) is an error rather than a silent last-one-wins.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, TextIO, Union

import yaml


class UniqueKeyLoader(yaml.SafeLoader):
    """Safe YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.MappingNode, deep: bool = False) -> dict:
    loader.flatten_mapping(node)
    mapping = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            line = key_node.start_mark.line + 1
            raise ValueError(f"Duplicate key '{key}' in YAML (line {line})")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


def load_yaml(stream: Union[str, TextIO]) -> Any:
    """Parse YAML text or a file-like object with duplicate-key validation.

    Raises:
        ValueError: If a mapping repeats a key.
    """
    return yaml.load(stream, Loader=UniqueKeyLoader)


def load_yaml_file(path: Union[str, Path]) -> Any:
    """Read and parse a YAML file (see :func:`load_yaml`)."""
    with open(path, "r", encoding="utf-8") as handle:
        return load_yaml(handle)


def dump_yaml(data: Any) -> str:
    """Serialise ``data`` as block-style YAML, preserving key order."""
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
