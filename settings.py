# settings.py
"""
Typed configuration for the particle ring.

The `simulation` section of `config.json` is validated into a tree of
pydantic models. Numeric fields declare their valid range with
`Field(ge=..., le=...)`, and min/max pairs are checked by model
validators, so the running simulation never sees an out-of-range
parameter.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, StrictBool, model_validator

from colors import COLOR_SCHEMES

# --- Data Contracts ---
#
# Settings.from_dict(data: Dict[str, Any]) -> Settings:
#   - Inputs: the "simulation" section of config.json. Missing keys take
#     their defaults; unknown keys are logged and ignored.
#   - Outputs: a validated Settings tree.
#   - Raises: pydantic.ValidationError (a ValueError) for wrong types,
#     out-of-range values, or inconsistent pairs (e.g. min_size > max_size).
#
# Settings.check_value(path: str, value: Any) -> Any:
#   - Inputs: dotted field path such as "particles.spring.strength".
#   - Outputs: the value as it would be stored, after validating the whole
#     tree with the change applied. The live tree is not modified.
#   - Raises: KeyError for unknown or section paths, ValueError otherwise.
#
# Settings.set_value(path: str, value: Any) -> Any:
#   - Same checks as check_value, then stores the value.
#   - Outputs: the previous value.


class ConfigSection(BaseModel):
    """Base for every configuration section."""

    @model_validator(mode="before")
    @classmethod
    def _log_unknown_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            for key in data:
                if key not in cls.model_fields:
                    logging.warning(f"Ignoring unknown configuration key '{key}' in {cls.__name__}.")
        return data


def _check_order(low_name: str, low: float, high_name: str, high: float) -> None:
    if low > high:
        raise ValueError(f"{low_name} ({low}) is greater than {high_name} ({high})")


class ValueRange(ConfigSection):
    min: float = 0.0
    max: float = 0.0

    @model_validator(mode="after")
    def _min_not_above_max(self) -> "ValueRange":
        _check_order("min", self.min, "max", self.max)
        return self


class SpringSettings(ConfigSection):
    strength: float = Field(0.05, ge=0.01, le=0.2)
    damping: float = Field(0.8, ge=0.0, le=1.0)


class MotionSettings(ConfigSection):
    rotation_speed: float = Field(0.0006, ge=-0.03, le=0.03)
    oscillation_amount: float = Field(3.0, ge=0.0, le=50.0)
    oscillation_speed: float = Field(0.042, ge=0.0, le=0.1)


class ParticleSettings(ConfigSection):
    count: int = Field(100, ge=1, le=300)
    radius: float = Field(240.0, ge=50.0, le=400.0)
    min_size: float = Field(4.0, ge=1.0, le=50.0)
    max_size: float = Field(8.0, ge=1.0, le=50.0)
    opacity: float = Field(0.85, ge=0.0, le=1.0)
    spring: SpringSettings = Field(default_factory=SpringSettings)
    motion: MotionSettings = Field(default_factory=MotionSettings)

    @model_validator(mode="after")
    def _sizes_ordered(self) -> "ParticleSettings":
        _check_order("min_size", self.min_size, "max_size", self.max_size)
        return self


class MouseSettings(ConfigSection):
    repel_force: float = Field(0.45, ge=0.0, le=0.5)
    repel_radius: float = Field(150.0, ge=0.0, le=500.0)
    proximity_scale: float = Field(8.7, ge=0.0, le=10.0)
    # None follows repel_radius.
    influence_radius: Optional[float] = Field(None, ge=1.0, le=500.0)

    @property
    def effective_influence_radius(self) -> float:
        if self.influence_radius is None:
            return self.repel_radius
        return self.influence_radius


class RadiusIntervalSettings(ConfigSection):
    enabled: StrictBool = True
    time: float = Field(3000.0, ge=0.0, le=10000.0)
    small_range: ValueRange = Field(default_factory=lambda: ValueRange(min=50.0, max=120.0))
    large_range: ValueRange = Field(default_factory=lambda: ValueRange(min=240.0, max=300.0))


class HighlightIntervalSettings(ConfigSection):
    enabled: StrictBool = False
    time: float = Field(500.0, ge=0.0, le=3000.0)
    duration: float = Field(750.0, ge=1.0, le=5000.0)
    scale: float = Field(5.0, ge=1.0, le=10.0)


class ParticleCountIntervalSettings(ConfigSection):
    enabled: StrictBool = True
    time: float = Field(1000.0, ge=0.0, le=3000.0)
    step: int = Field(10, ge=1, le=20)
    min: int = Field(10, ge=1, le=300)
    max: int = Field(300, ge=1, le=300)

    @model_validator(mode="after")
    def _min_not_above_max(self) -> "ParticleCountIntervalSettings":
        _check_order("min", self.min, "max", self.max)
        return self


class WaveAmplitudeIntervalSettings(ConfigSection):
    enabled: StrictBool = False
    time: float = Field(2000.0, ge=0.0, le=10000.0)
    min_value: float = Field(0.0, ge=0.0, le=50.0)
    max_range: ValueRange = Field(default_factory=lambda: ValueRange(min=5.0, max=30.0))


class IntervalSettings(ConfigSection):
    radius: RadiusIntervalSettings = Field(default_factory=RadiusIntervalSettings)
    highlight: HighlightIntervalSettings = Field(default_factory=HighlightIntervalSettings)
    particle_count: ParticleCountIntervalSettings = Field(
        default_factory=ParticleCountIntervalSettings
    )
    wave_amplitude: WaveAmplitudeIntervalSettings = Field(
        default_factory=WaveAmplitudeIntervalSettings
    )


class FocusPointSettings(ConfigSection):
    enabled: StrictBool = True
    orbit_radius: float = Field(250.0, ge=50.0, le=400.0)
    speed: float = Field(0.01, ge=0.0, le=0.2)
    angle: float = 0.0
    size_influence: float = Field(5.0, ge=0.0, le=10.0)
    spring_multiplier: float = Field(0.7, ge=0.0, le=1.0)
    show_indicators: StrictBool = False
    clockwise: StrictBool = True
    # Index into constants.AUTO_FOCUS_COLORS.
    color: int = Field(2, ge=0, le=5)


class AutoFocusSettings(ConfigSection):
    points: List[FocusPointSettings] = Field(default_factory=lambda: [FocusPointSettings()])


class Settings(ConfigSection):
    seed: Optional[int] = None
    particles: ParticleSettings = Field(default_factory=ParticleSettings)
    mouse: MouseSettings = Field(default_factory=MouseSettings)
    intervals: IntervalSettings = Field(default_factory=IntervalSettings)
    auto_focus: AutoFocusSettings = Field(default_factory=AutoFocusSettings)
    color_scheme: int = Field(0, ge=0, le=len(COLOR_SCHEMES) - 1)
    show_lines: StrictBool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Settings":
        settings = cls.model_validate(data or {})
        logging.info("Simulation settings loaded and validated.")
        return settings

    def revalidated(self) -> "Settings":
        """A validated deep copy; catches fields assigned without validation."""
        return type(self).model_validate(self.model_dump())

    def _resolve(self, path: str) -> Tuple[BaseModel, str]:
        """Returns the section holding the leaf field named by `path`."""
        parts = path.split(".")
        owner: Any = self
        for part in parts:
            if not isinstance(owner, BaseModel) or part not in type(owner).model_fields:
                raise KeyError(f"Unknown configuration path '{path}'.")
            parent, owner = owner, getattr(owner, part)
        if isinstance(owner, (BaseModel, list)):
            raise KeyError(f"Configuration path '{path}' is a section, not a value.")
        return parent, parts[-1]

    def check_value(self, path: str, value: Any) -> Any:
        self._resolve(path)
        data = self.model_dump()
        parts = path.split(".")
        node = data
        for part in parts[:-1]:
            node = node[part]
        node[parts[-1]] = value

        candidate: Any = type(self).model_validate(data)
        for part in parts:
            candidate = getattr(candidate, part)
        return candidate

    def set_value(self, path: str, value: Any) -> Any:
        """Sets a leaf field by dotted path and returns the old value."""
        new_value = self.check_value(path, value)
        owner, name = self._resolve(path)
        old_value = getattr(owner, name)
        setattr(owner, name, new_value)
        logging.debug(f"Setting '{path}' changed from {old_value} to {new_value}.")
        return old_value

    def flatten(self) -> Dict[str, Any]:
        """Dotted path -> value for every scalar field, for display."""
        return dict(_walk(self, ""))


def validate_field(model: type, name: str, value: Any) -> Any:
    """Validates one field of a section on its own, with the other fields at their defaults."""
    if name not in model.model_fields:
        raise KeyError(f"Unknown field '{name}' in {model.__name__}.")
    return getattr(model.model_validate({name: value}), name)


def _walk(model: BaseModel, prefix: str):
    for name in type(model).model_fields:
        value = getattr(model, name)
        path = f"{prefix}{name}"
        if isinstance(value, BaseModel):
            yield from _walk(value, path + ".")
        elif isinstance(value, list):
            for i, item in enumerate(value):
                yield from _walk(item, f"{path}[{i}].")
        else:
            yield path, value
