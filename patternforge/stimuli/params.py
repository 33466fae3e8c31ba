"""Validated parameter sets, one dataclass per stimulus type.

Every variant shares the common fields of :class:`StimulusParams` (levels,
bit depth, anti-aliasing, field of view, pole and mask geometry) and adds its
own. Validation runs on construction; any violation raises
:class:`~patternforge.errors.ParameterError` naming the offending field.

All angles are radians. :meth:`StimulusParams.from_dict` additionally accepts
degree-valued keys with a ``_deg`` suffix (``initial_size_deg: 5``), which is
how angles are usually written in YAML job files.

Example:
    >>> params = LoomingParams.from_dict({
    ...     "initial_size_deg": 5, "final_size_deg": 90, "step_size_deg": 5,
    ... })
    >>> round(math.degrees(params.final_size))
    90
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from patternforge.errors import ParameterError
from patternforge.patterns.container import normalize_gs_val

PATTERN_FOVS = ("full-field", "local")
MOTION_TYPES = ("rotation", "translation", "expansion-contraction")


def radians_from_degree_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``data`` with ``<name>_deg`` keys converted to ``<name>``.

    List values are converted elementwise, except the trailing invert flag of
    ``sa_mask_deg`` which is passed through unchanged.

    Raises:
        ParameterError: If both ``<name>`` and ``<name>_deg`` are given.
    """
    result = {}
    for key, value in data.items():
        if not key.endswith("_deg"):
            result[key] = value
            continue
        name = key[: -len("_deg")]
        if name in data:
            raise ParameterError(f"both '{name}' and '{key}' given", field=name)
        if isinstance(value, (list, tuple)):
            angles = [math.radians(v) for v in value]
            if name == "sa_mask" and len(value) == 4:
                angles[3] = value[3]
            result[name] = angles
        else:
            result[name] = math.radians(value)
    return result


def _require(params: Any, *names: str) -> None:
    for name in names:
        if getattr(params, name) is None:
            raise ParameterError(
                f"{params.stimulus_type}: missing required field '{name}'", field=name
            )


def _positive(params: Any, name: str) -> None:
    value = getattr(params, name)
    if value is not None and not value > 0:
        raise ParameterError(
            f"{params.stimulus_type}: {name} must be positive, got {value}", field=name
        )


def _choice(params: Any, name: str, options: Tuple[str, ...]) -> None:
    value = getattr(params, name)
    if value not in options:
        raise ParameterError(
            f"{params.stimulus_type}: {name} must be one of {', '.join(options)}; "
            f"got {value!r}",
            field=name,
        )


@dataclass
class StimulusParams:
    """Fields shared by every stimulus type.

    Attributes:
        levels: ``[bright/object, dark/background, mask_background]``.
        gs_val: Bit depth tag, 2 (binary) or 16 (grayscale).
        aa_samples: Anti-aliasing samples per pixel.
        stretch: Per-frame stretch value written into the pattern.
        pattern_fov: ``"full-field"`` (organised around ``pole_coord``) or
            ``"local"`` (organised around the ``sa_mask`` centre).
        pole_coord: ``[azimuth, elevation]`` of the pattern pole.
        sa_mask: ``[azimuth, elevation, radius, invert]`` solid-angle mask,
            applied for local patterns.
        motion_angle: Direction of motion for local patterns.
    """

    stimulus_type: ClassVar[str] = ""

    levels: List[float] = field(default_factory=lambda: [15, 0, 0])
    gs_val: int = 16
    aa_samples: int = 15
    stretch: int = 1
    pattern_fov: str = "full-field"
    pole_coord: List[float] = field(default_factory=lambda: [0.0, 0.0])
    sa_mask: List[float] = field(default_factory=lambda: [0.0, 0.0, math.pi, 0])
    motion_angle: float = 0.0

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check the common fields, normalising ``gs_val`` and ``levels``.

        Raises:
            ParameterError: On the first invalid field.
        """
        try:
            self.gs_val = normalize_gs_val(self.gs_val)
        except ValueError as exc:
            raise ParameterError(str(exc), field="gs_val") from None
        levels = list(self.levels)
        if len(levels) == 2:
            levels.append(0)
        if len(levels) != 3:
            raise ParameterError(
                f"levels must have 2 or 3 entries, got {len(levels)}", field="levels"
            )
        for level in levels:
            if not float(level).is_integer() or not 0 <= level <= self.gs_val - 1:
                raise ParameterError(
                    f"levels must be integers in [0, {self.gs_val - 1}] for "
                    f"gs_val={self.gs_val}, got {self.levels}",
                    field="levels",
                )
        self.levels = [int(level) for level in levels]

        if int(self.aa_samples) != self.aa_samples or self.aa_samples < 1:
            raise ParameterError(
                f"aa_samples must be a positive integer, got {self.aa_samples}",
                field="aa_samples",
            )
        self.aa_samples = int(self.aa_samples)
        if not 0 <= self.stretch <= 255:
            raise ParameterError(
                f"stretch must be in [0, 255], got {self.stretch}", field="stretch"
            )
        _choice(self, "pattern_fov", PATTERN_FOVS)
        if len(self.pole_coord) != 2:
            raise ParameterError(
                "pole_coord must be [azimuth, elevation]", field="pole_coord"
            )
        if len(self.sa_mask) != 4:
            raise ParameterError(
                "sa_mask must be [azimuth, elevation, radius, invert]", field="sa_mask"
            )
        if not self.sa_mask[2] > 0:
            raise ParameterError(
                f"sa_mask radius must be positive, got {self.sa_mask[2]}", field="sa_mask"
            )

    @property
    def bright(self) -> int:
        return self.levels[0]

    @property
    def dark(self) -> int:
        return self.levels[1]

    @property
    def mask_level(self) -> int:
        return self.levels[2]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StimulusParams":
        """Create from a config dictionary.

        A ``type`` key, if present, must match this variant. Unknown keys are
        rejected so misspelled parameters do not silently fall back to
        defaults.
        """
        data = radians_from_degree_keys(dict(data))
        stim_type = data.pop("type", cls.stimulus_type)
        if stim_type != cls.stimulus_type:
            raise ParameterError(
                f"{cls.__name__} cannot be built from type '{stim_type}'", field="type"
            )
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ParameterError(
                f"{cls.stimulus_type}: unknown parameter(s) {', '.join(unknown)}",
                field=unknown[0],
            )
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dict (radians) including the ``type`` tag."""
        data = asdict(self)
        data["type"] = self.stimulus_type
        return data


@dataclass
class _MotionParams(StimulusParams):
    """Fields shared by the periodic motion stimuli."""

    spat_freq: Optional[float] = None
    step_size: Optional[float] = None
    motion_type: str = "rotation"
    phase_shift: float = 0.0

    def validate(self) -> None:
        super().validate()
        _require(self, "spat_freq", "step_size")
        _positive(self, "spat_freq")
        _positive(self, "step_size")
        _choice(self, "motion_type", MOTION_TYPES)


@dataclass
class GratingParams(_MotionParams):
    """Square or sine grating drifting along the motion channel.

    Attributes:
        spat_freq: Spatial wavelength (radians per cycle).
        step_size: Phase advance per frame (radians).
        duty_cycle: Percentage of each square-wave cycle at ``bright``.
        grat_type: ``"square"`` or ``"sine"``.
    """

    stimulus_type: ClassVar[str] = "grating"

    duty_cycle: float = 50.0
    grat_type: str = "square"

    def validate(self) -> None:
        super().validate()
        _choice(self, "grat_type", ("square", "sine"))
        if not 0 <= self.duty_cycle <= 100:
            raise ParameterError(
                f"duty_cycle must be in [0, 100], got {self.duty_cycle}",
                field="duty_cycle",
            )


@dataclass
class EdgeParams(_MotionParams):
    """Stationary edge that sweeps across one wavelength, dark to bright."""

    stimulus_type: ClassVar[str] = "edge"


@dataclass
class ReversePhiParams(_MotionParams):
    """50% duty square grating whose contrast inverts on every frame.

    Attributes:
        aa_poles: Blend pixels near the projection pole, where the grating
            cannot be resolved, to mid-gray.
    """

    stimulus_type: ClassVar[str] = "reverse_phi"

    aa_poles: bool = True


@dataclass
class StarfieldParams(StimulusParams):
    """Randomly placed discs drifting along the motion channel.

    Attributes:
        dot_count: Number of dots.
        dot_radius: Angular radius of each dot.
        dot_occlusion: How overlapping dots combine: ``max``, ``sum``, ``mean``.
        dot_level: ``fixed`` (all at ``bright``), ``random-spread`` (uniform
            between dark and bright) or ``random-binary``.
        step_size: Displacement per frame.
        num_frames: Frame count; derived from ``step_size`` when omitted.
        seed: Seed for dot placement and levels.
    """

    stimulus_type: ClassVar[str] = "starfield"

    dot_count: int = 100
    dot_radius: float = math.radians(3)
    dot_occlusion: str = "max"
    dot_level: str = "fixed"
    step_size: Optional[float] = None
    motion_type: str = "rotation"
    num_frames: Optional[int] = None
    seed: int = 0

    def validate(self) -> None:
        super().validate()
        _require(self, "step_size")
        _positive(self, "step_size")
        _positive(self, "dot_radius")
        if self.dot_radius >= math.pi / 2:
            raise ParameterError(
                f"dot_radius must be less than pi/2, got {self.dot_radius}",
                field="dot_radius",
            )
        if int(self.dot_count) != self.dot_count or self.dot_count < 1:
            raise ParameterError(
                f"dot_count must be a positive integer, got {self.dot_count}",
                field="dot_count",
            )
        if self.num_frames is not None and self.num_frames < 1:
            raise ParameterError(
                f"num_frames must be at least 1, got {self.num_frames}",
                field="num_frames",
            )
        _choice(self, "dot_occlusion", ("max", "sum", "mean"))
        _choice(self, "dot_level", ("fixed", "random-spread", "random-binary"))
        _choice(self, "motion_type", MOTION_TYPES)


@dataclass
class LoomingParams(StimulusParams):
    """Expanding disc centred on the pole.

    Attributes:
        loom_profile: ``constant_velocity`` or ``exponential``.
        initial_size: Starting angular radius.
        final_size: Final angular radius; must exceed ``initial_size``.
        step_size: Size increment per frame (constant velocity only).
        l_over_v: Half-size to approach-speed ratio in seconds
            (exponential only).
        frame_rate: Display rate in Hz used to time the exponential profile.
    """

    stimulus_type: ClassVar[str] = "looming"

    loom_profile: str = "constant_velocity"
    initial_size: Optional[float] = None
    final_size: Optional[float] = None
    step_size: Optional[float] = None
    l_over_v: Optional[float] = None
    frame_rate: Optional[float] = None

    def validate(self) -> None:
        super().validate()
        _choice(self, "loom_profile", ("constant_velocity", "exponential"))
        _require(self, "initial_size", "final_size")
        if self.initial_size < 0:
            raise ParameterError(
                f"initial_size must be non-negative, got {self.initial_size}",
                field="initial_size",
            )
        if self.initial_size >= self.final_size:
            raise ParameterError(
                f"initial_size ({self.initial_size}) must be less than "
                f"final_size ({self.final_size})",
                field="initial_size",
            )
        _positive(self, "step_size")
        _positive(self, "frame_rate")
        if self.loom_profile == "exponential":
            if self.l_over_v is None or not self.l_over_v > 0:
                raise ParameterError(
                    "l_over_v (positive value in seconds) is required for the "
                    f"exponential profile, got {self.l_over_v}",
                    field="l_over_v",
                )
            if not self.initial_size > 0:
                raise ParameterError(
                    "initial_size must be positive for the exponential profile, "
                    f"got {self.initial_size}",
                    field="initial_size",
                )


@dataclass
class OffOnParams(StimulusParams):
    """Uniform dark frame followed by a uniform bright frame."""

    stimulus_type: ClassVar[str] = "off_on"


__all__ = [
    "StimulusParams",
    "GratingParams",
    "EdgeParams",
    "ReversePhiParams",
    "StarfieldParams",
    "LoomingParams",
    "OffOnParams",
    "radians_from_degree_keys",
    "MOTION_TYPES",
    "PATTERN_FOVS",
]
