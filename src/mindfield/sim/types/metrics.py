from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict

METRIC_FIELDS = (
    "attention_entropy",
    "memory_diversity",
    "velocity_stability",
    "identity_coherence",
    "cluster_stability",
    "affective_strength",
    "essence_trajectory",
    "average_essence",
)


@dataclass(frozen=True, slots=True)
class Metrics:
    timestamp: int
    attention_entropy: float
    memory_diversity: float
    velocity_stability: float
    identity_coherence: float
    cluster_stability: float
    affective_strength: float
    essence_trajectory: float
    average_essence: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)
