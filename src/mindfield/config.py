from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


class ConfigError(ValueError):
    """Structural configuration problem detected before a simulation starts."""


class KernelType(str, Enum):
    GAUSSIAN = "gaussian"
    INVERSE_DISTANCE = "inverse_distance"

    @classmethod
    def parse(cls, value: "KernelType | str") -> "KernelType":
        if isinstance(value, KernelType):
            return value
        normalized = str(value).strip()
        aliases = {"Gaussian": cls.GAUSSIAN, "InverseDistance": cls.INVERSE_DISTANCE}
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized.lower())
        except ValueError as exc:
            raise ConfigError(f"Unknown kernel type: {value}") from exc


@dataclass
class MetadataConfig:
    name: str = "Default 2D Synthetic Consciousness"
    description: str = "Default 2D simulation with 10 entities"
    version: str = "1.0.0"


@dataclass
class GeometryConfig:
    dimension: int = 2
    bounds: List[float] = field(default_factory=lambda: [10.0, 10.0])
    periodic: bool = True


@dataclass
class AttractionConfig:
    kernel: KernelType = KernelType.GAUSSIAN
    sigma: float = 1.0
    # Softmax temperature; serialized as ``lambda``.
    lambda_: float = 0.5
    analytic_gradient: bool = False

    def __post_init__(self) -> None:
        self.kernel = KernelType.parse(self.kernel)


@dataclass
class StateConfig:
    memory_dim: int = 100
    context_dim: int = 20
    decay_alpha: float = 0.95
    beta_attention: float = 0.5
    gamma_memory: float = 0.3


@dataclass
class DynamicsConfig:
    dt: float = 0.01
    min_speed: float = 0.05
    damping: float = 0.99
    max_acceleration: float = 10.0


@dataclass
class EssenceConfig:
    baseline: float = 5.0
    decay: float = 0.1
    experience_scale: float = 1.0


@dataclass
class MemoryConfig:
    cluster_threshold: float = 0.7
    decay: float = 0.95


@dataclass
class StimulusConfig:
    amplitude: float = 1.0
    dimension: Optional[int] = None


@dataclass
class SimulationParams:
    num_entities: int = 10
    num_steps: int = 1000
    seed: int = 42


@dataclass
class SimulationConfig:
    metadata: MetadataConfig = field(default_factory=MetadataConfig)
    geometry: GeometryConfig = field(default_factory=GeometryConfig)
    attraction: AttractionConfig = field(default_factory=AttractionConfig)
    state: StateConfig = field(default_factory=StateConfig)
    dynamics: DynamicsConfig = field(default_factory=DynamicsConfig)
    essence: EssenceConfig = field(default_factory=EssenceConfig)
    memory: MemoryConfig = field(default_factory=MemoryConfig)
    stimulus: StimulusConfig = field(default_factory=StimulusConfig)
    simulation: SimulationParams = field(default_factory=SimulationParams)

    @staticmethod
    def default_2d() -> "SimulationConfig":
        return SimulationConfig()

    @staticmethod
    def default_3d() -> "SimulationConfig":
        config = SimulationConfig()
        config.geometry.dimension = 3
        config.geometry.bounds = [10.0, 10.0, 10.0]
        config.metadata.name = "Default 3D Synthetic Consciousness"
        config.metadata.description = "Default 3D simulation with 10 entities"
        return config

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        attraction = data["attraction"]
        attraction["kernel"] = self.attraction.kernel.value
        attraction["lambda"] = attraction.pop("lambda_")
        return data

    def to_yaml(self, path: Path) -> None:
        Path(path).write_text(yaml.safe_dump(self.to_dict(), sort_keys=False))

    @property
    def stimulus_dimension(self) -> int:
        if self.stimulus.dimension is None:
            return self.geometry.dimension
        return self.stimulus.dimension

    def validate(self) -> None:
        geometry = self.geometry
        if geometry.dimension not in (2, 3):
            raise ConfigError(f"World dimension must be 2 or 3, got {geometry.dimension}")
        if len(geometry.bounds) != geometry.dimension:
            raise ConfigError(
                f"Bounds length {len(geometry.bounds)} does not match dimension {geometry.dimension}"
            )
        if any(bound <= 0.0 for bound in geometry.bounds):
            raise ConfigError(f"Bounds must be positive, got {geometry.bounds}")
        if self.state.memory_dim <= 0 or self.state.context_dim <= 0:
            raise ConfigError("State dimensions must be positive")
        if self.dynamics.dt <= 0.0:
            raise ConfigError(f"Time step must be positive, got {self.dynamics.dt}")
        if self.dynamics.min_speed < 0.0:
            raise ConfigError(f"Minimum speed must be non-negative, got {self.dynamics.min_speed}")
        if self.attraction.kernel is KernelType.GAUSSIAN and self.attraction.sigma <= 0.0:
            raise ConfigError(f"Gaussian kernel needs a positive sigma, got {self.attraction.sigma}")
        if self.stimulus.dimension is not None and self.stimulus.dimension <= 0:
            raise ConfigError(f"Stimulus dimension must be positive, got {self.stimulus.dimension}")
        if self.simulation.num_entities < 0:
            raise ConfigError(f"Entity count must be non-negative, got {self.simulation.num_entities}")


def load_config(raw: dict) -> SimulationConfig:
    attraction_raw = dict(raw.get("attraction", {}))
    if "lambda" in attraction_raw:
        attraction_raw["lambda_"] = attraction_raw.pop("lambda")
    geometry_raw = dict(raw.get("geometry", {}))
    if "bounds" in geometry_raw:
        geometry_raw["bounds"] = [float(bound) for bound in geometry_raw["bounds"]]
    # Older files keep dt next to the run parameters; dynamics owns it.
    simulation_raw = dict(raw.get("simulation", {}))
    dynamics_raw = dict(raw.get("dynamics", {}))
    legacy_dt = simulation_raw.pop("dt", None)
    if legacy_dt is not None:
        dynamics_raw.setdefault("dt", legacy_dt)

    return SimulationConfig(
        metadata=MetadataConfig(**raw.get("metadata", {})),
        geometry=GeometryConfig(**geometry_raw),
        attraction=AttractionConfig(**attraction_raw),
        state=StateConfig(**raw.get("state", {})),
        dynamics=DynamicsConfig(**dynamics_raw),
        essence=EssenceConfig(**raw.get("essence", {})),
        memory=MemoryConfig(**raw.get("memory", {})),
        stimulus=StimulusConfig(**raw.get("stimulus", {})),
        simulation=SimulationParams(**simulation_raw),
    )
