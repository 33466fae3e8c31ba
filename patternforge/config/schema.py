"""Configuration schema for PatternForge pattern jobs.

A job file describes one arena and any number of patterns to synthesize for
it, plus where to write them:

.. code-block:: yaml

    arena:
      generation: G4
      panel_rows: 2
      panel_cols: 12
    patterns:
      - name: loom-5-90
        stimulus:
          type: looming
          initial_size_deg: 5
          final_size_deg: 90
          step_size_deg: 5
    output:
      directory: patterns

Stimulus mappings are passed to the generator registry unchanged, so any
parameter of the stimulus type may appear, in radians or with a ``_deg``
suffix.

Example:
    >>> from patternforge.config.schema import PatternForgeConfig
    >>> config = PatternForgeConfig.from_yaml(yaml_str)
    >>> config2 = PatternForgeConfig.from_yaml(config.to_yaml())
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from patternforge.arena.geometry import ArenaGeometry, cylindrical_arena
from patternforge.arena.generations import normalize_generation
from patternforge.config.yaml_utils import dump_yaml, load_yaml
from patternforge.registry import ComponentRegistry


def _pick_fields(cls: type, data: Dict[str, Any]) -> Dict[str, Any]:
    unknown = sorted(set(data) - set(cls.__dataclass_fields__))
    if unknown:
        raise ValueError(f"{cls.__name__}: unknown key(s) {', '.join(unknown)}")
    return dict(data)


@dataclass
class ArenaConfig:
    """Arena the patterns are generated for.

    Attributes:
        generation: Arena generation (G3, G4, G4.1, G6).
        panel_rows: Installed panel rows.
        panel_cols: Installed panel columns.
        panels_in_circle: Panels that would close the full circle
            (cylindrical arenas); defaults to ``panel_cols``.
        arena_id: Arena configuration ID written to pattern headers.
        geometry_file: Optional ``.npz`` from the arena mesh tool; when set
            it replaces the cylindrical model.
    """

    generation: str = "G4"
    panel_rows: int = 2
    panel_cols: int = 12
    panels_in_circle: Optional[int] = None
    arena_id: int = 0
    geometry_file: Optional[str] = None

    def __post_init__(self) -> None:
        self.generation = normalize_generation(self.generation)

    def build_geometry(self) -> ArenaGeometry:
        """Load or construct the arena geometry this config describes."""
        if self.geometry_file:
            return ArenaGeometry.from_npz(
                self.geometry_file, generation=self.generation, arena_id=self.arena_id
            )
        return cylindrical_arena(
            self.panel_rows,
            self.panel_cols,
            generation=self.generation,
            panels_in_circle=self.panels_in_circle,
            arena_id=self.arena_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain dict for YAML serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ArenaConfig:
        """Create from dict (e.g., from YAML)."""
        return cls(**_pick_fields(cls, data))


@dataclass
class PatternJobConfig:
    """One pattern to synthesize.

    Attributes:
        name: Name used in the pattern file name.
        stimulus: Stimulus parameters including the ``type`` tag.
        pattern_id: Fixed pattern ID; the next free ID is used when omitted.
    """

    name: str
    stimulus: Dict[str, Any] = field(default_factory=dict)
    pattern_id: Optional[int] = None

    @property
    def stimulus_type(self) -> str:
        return self.stimulus["type"]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain dict for YAML serialization."""
        data = {"name": self.name, "stimulus": dict(self.stimulus)}
        if self.pattern_id is not None:
            data["pattern_id"] = self.pattern_id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PatternJobConfig:
        """Create from dict (e.g., from YAML).

        Raises:
            ValueError: If ``name`` or ``stimulus.type`` is missing.
        """
        data = _pick_fields(cls, data)
        if "name" not in data:
            raise ValueError("pattern entry is missing 'name'")
        stimulus = data.get("stimulus") or {}
        if "type" not in stimulus:
            raise ValueError(f"pattern '{data['name']}' is missing 'stimulus.type'")
        return cls(name=str(data["name"]), stimulus=dict(stimulus), pattern_id=data.get("pattern_id"))


@dataclass
class OutputConfig:
    """Where generated patterns go.

    Attributes:
        directory: Output directory for ``.pat`` files.
        overwrite: Replace existing files with the same pattern ID.
    """

    directory: str = "patterns"
    overwrite: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain dict for YAML serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> OutputConfig:
        """Create from dict (e.g., from YAML)."""
        return cls(**_pick_fields(cls, data))


@dataclass
class PatternForgeConfig:
    """Top-level pattern job configuration.

    Attributes:
        arena: Arena description.
        patterns: Patterns to generate, in order.
        output: Output settings.
        metadata: Optional free-form metadata (author, notes, ...).
    """

    arena: ArenaConfig = field(default_factory=ArenaConfig)
    patterns: List[PatternJobConfig] = field(default_factory=list)
    output: OutputConfig = field(default_factory=OutputConfig)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def build_generators(self, registry: ComponentRegistry) -> List[Tuple[PatternJobConfig, Any]]:
        """Instantiate (and so validate) every pattern's generator.

        Args:
            registry: Generator registry from
                :func:`patternforge.register_components.build_generator_registry`.

        Raises:
            KeyError: Unknown stimulus type.
            ParameterError: Invalid stimulus parameters.
        """
        jobs = []
        for job in self.patterns:
            params = {k: v for k, v in job.stimulus.items() if k != "type"}
            generator = registry.create(job.stimulus_type, config=params)
            jobs.append((job, generator))
        return jobs

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain dict for YAML serialization."""
        data = {
            "arena": self.arena.to_dict(),
            "patterns": [p.to_dict() for p in self.patterns],
            "output": self.output.to_dict(),
        }
        if self.metadata:
            data["metadata"] = self.metadata
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PatternForgeConfig:
        """Create from dict (e.g., from YAML)."""
        _pick_fields(cls, data)
        return cls(
            arena=ArenaConfig.from_dict(data.get("arena") or {}),
            patterns=[PatternJobConfig.from_dict(p) for p in data.get("patterns") or []],
            output=OutputConfig.from_dict(data.get("output") or {}),
            metadata=data.get("metadata") or {},
        )

    def to_yaml(self) -> str:
        """Serialize to YAML string."""
        return dump_yaml(self.to_dict())

    @classmethod
    def from_yaml(cls, yaml_str: str) -> PatternForgeConfig:
        """Load from YAML string, rejecting duplicate keys."""
        data = load_yaml(yaml_str)
        if not isinstance(data, dict):
            raise ValueError("YAML did not produce a mapping")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> PatternForgeConfig:
        """Load a job file; relative paths inside it resolve against its directory."""
        path = Path(path)
        config = cls.from_yaml(path.read_text(encoding="utf-8"))
        base = path.resolve().parent
        if config.arena.geometry_file and not Path(config.arena.geometry_file).is_absolute():
            config.arena.geometry_file = str(base / config.arena.geometry_file)
        if not Path(config.output.directory).is_absolute():
            config.output.directory = str(base / config.output.directory)
        return config
