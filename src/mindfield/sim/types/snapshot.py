from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from .metrics import Metrics


@dataclass(slots=True)
class Snapshot:
    timestamp: int
    metrics: Metrics
    entities: List[Dict[str, Any]]
    world: "SnapshotWorld"
    metadata: "SnapshotMetadata"
    # (lower id, higher id, 1 / (1 + distance)) for every pair above the record floor
    attractions: List[Tuple[int, int, float]] = field(default_factory=list)


@dataclass(slots=True)
class SnapshotWorld:
    dimension: int
    bounds: List[float]
    periodic: bool


@dataclass(slots=True)
class SnapshotMetadata:
    name: str
    sim_dt: float
    seed: int
    num_entities: int
    config_version: str
