from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from ..systems.dynamics import integrate_motion
from ..utils.vecmath import Vector, to_list
from .essence import EssenceIndex
from .geometry import Pose
from .memory import MemoryGraph
from .state import StateVector

EntityId = int

DEFAULT_DRIVES: Tuple[float, float] = (0.5, 0.5)


@dataclass(slots=True)
class Entity:
    id: EntityId
    pose: Pose
    velocity: Vector
    state: StateVector
    memory_graph: MemoryGraph
    essence: EssenceIndex
    # (self-preservation, curiosity)
    baseline_drives: Tuple[float, float] = DEFAULT_DRIVES
    attention: List[float] = field(default_factory=list)
    attention_gradient: List[float] = field(default_factory=list)
    potential: float = 0.0
    acceleration: List[float] = field(default_factory=list)

    @property
    def position(self) -> Vector:
        return self.pose.position

    @property
    def dimension(self) -> int:
        return len(self.pose.position)

    @property
    def speed(self) -> float:
        return self.velocity.length()

    def sense(self, stimulus: Sequence[float], timestamp: int, tau: float) -> int:
        index = self.memory_graph.add_node(stimulus, timestamp)
        self.memory_graph.cluster_event(stimulus, index, tau)
        return index

    def update_state(self) -> None:
        self.state.update(self.attention_gradient, self.memory_graph.recall())

    def refresh_affect(self) -> None:
        self.memory_graph.update_affective_signals()

    def update_essence(self) -> float:
        return self.essence.update(self.memory_graph.affective_signals())

    def decide(self) -> List[float]:
        preservation, curiosity = self.baseline_drives
        scale = (preservation + curiosity) * self.essence.influence_factor()
        return [value * scale for value in self.state.memory[: self.dimension]]

    def act(self, acceleration: Sequence[float]) -> None:
        self.acceleration = [float(value) for value in acceleration]

    def integrate(self, acceleration: Sequence[float], dt: float, min_speed: float, damping: float) -> None:
        integrate_motion(self.pose.position, self.velocity, acceleration, dt, min_speed, damping)

    def cluster_summaries(self) -> List[Dict[str, float]]:
        return [
            {"id": cluster.id, "affective_signal": cluster.affective_signal, "size": cluster.size}
            for cluster in self.memory_graph.ordered_clusters()
        ]


class EntityPool:
    def __init__(self) -> None:
        self._entities: Dict[EntityId, Entity] = {}
        self._next_id: EntityId = 1

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.all())

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def add(self, entity: Entity) -> EntityId:
        entity_id = self._next_id
        entity.id = entity_id
        self._entities[entity_id] = entity
        self._next_id += 1
        return entity_id

    def get(self, entity_id: EntityId) -> Optional[Entity]:
        return self._entities.get(entity_id)

    def ids(self) -> List[EntityId]:
        return sorted(self._entities)

    def all(self) -> List[Entity]:
        return [self._entities[entity_id] for entity_id in sorted(self._entities)]

    def positions(self) -> Dict[EntityId, List[float]]:
        return {entity.id: to_list(entity.pose.position) for entity in self.all()}

    def clear(self) -> None:
        self._entities.clear()
        self._next_id = 1
