from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ...config import SimulationConfig
from ...rng import DeterministicRng
from ..systems import attraction, dynamics, evaluation as evaluation_system, metrics as metrics_system
from ..types.metrics import Metrics
from ..types.snapshot import Snapshot, SnapshotMetadata, SnapshotWorld
from ..utils.vecmath import make_vector, to_list, zero_vector
from .entity import Entity, EntityPool
from .essence import EssenceIndex
from .geometry import Pose
from .memory import MemoryGraph
from .state import StateVector

logger = logging.getLogger("mindfield.simulation")


class Simulation:
    """Fixed population of entities advanced through a ten-phase step.

    Phases run strictly one after another over the whole population:
    sense, attention, state, affective, essence, decision, integration,
    boundary, memory decay, metrics.
    """

    def __init__(self, config: SimulationConfig):
        config.validate()
        self._config = config
        self._rng = DeterministicRng(config.simulation.seed)
        self._entities = EntityPool()
        self._timestamp = 0
        self._metrics_history: List[Metrics] = []
        self._bootstrap_population()
        logger.info(
            "Simulation %r created: %d entities in %dD, seed=%d",
            config.metadata.name,
            len(self._entities),
            config.geometry.dimension,
            config.simulation.seed,
        )

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def entities(self) -> EntityPool:
        return self._entities

    @property
    def timestamp(self) -> int:
        return self._timestamp

    @property
    def metrics_history(self) -> List[Metrics]:
        return self._metrics_history

    @property
    def metrics(self) -> Optional[Metrics]:
        return self._metrics_history[-1] if self._metrics_history else None

    def reset(self) -> None:
        self._rng.reset()
        self._entities.clear()
        self._timestamp = 0
        self._metrics_history.clear()
        self._bootstrap_population()
        logger.info("Simulation %r reset", self._config.metadata.name)

    def step(self) -> Metrics:
        self._sense_phase()
        attraction.run_attention_phase(self)
        self._state_phase()
        self._affective_phase()
        self._essence_phase()
        dynamics.run_decision_phase(self)
        dynamics.run_integration_phase(self)
        dynamics.run_boundary_phase(self)
        self._memory_decay_phase()
        metrics = self.current_metrics()
        self._metrics_history.append(metrics)
        self._timestamp += 1
        logger.debug(
            "step %d: entropy=%.4f affective=%.4f essence=%.4f",
            metrics.timestamp,
            metrics.attention_entropy,
            metrics.affective_strength,
            metrics.average_essence,
        )
        return metrics

    def run(self, steps: Optional[int] = None) -> List[Metrics]:
        total = self._config.simulation.num_steps if steps is None else steps
        for _ in range(total):
            self.step()
        logger.info("Simulation %r finished at step %d", self._config.metadata.name, self._timestamp)
        return self._metrics_history

    def current_metrics(self) -> Metrics:
        return metrics_system.compute_metrics(
            self._entities, self._timestamp, default_essence=self._config.essence.baseline
        )

    def evaluate(self) -> evaluation_system.Evaluation:
        metrics = self.metrics if self.metrics is not None else self.current_metrics()
        return evaluation_system.evaluate(metrics)

    def snapshot(self) -> Snapshot:
        metrics = self.metrics if self.metrics is not None else self.current_metrics()
        config = self._config
        return Snapshot(
            timestamp=self._timestamp,
            metrics=metrics,
            entities=[self._entity_snapshot(entity) for entity in self._entities],
            world=SnapshotWorld(
                dimension=config.geometry.dimension,
                bounds=list(config.geometry.bounds),
                periodic=config.geometry.periodic,
            ),
            metadata=SnapshotMetadata(
                name=config.metadata.name,
                sim_dt=config.dynamics.dt,
                seed=config.simulation.seed,
                num_entities=len(self._entities),
                config_version=config.metadata.version,
            ),
            attractions=attraction.pairwise_attractions(self._entities.positions()),
        )

    def _bootstrap_population(self) -> None:
        config = self._config
        dimension = config.geometry.dimension
        for _ in range(config.simulation.num_entities):
            position = make_vector(self._rng.next_position(config.geometry.bounds))
            orientation = (1.0, self._rng.next_range(-1.0, 1.0), 0.0, 0.0)
            entity = Entity(
                id=0,
                pose=Pose(position=position, orientation=orientation),
                velocity=zero_vector(dimension),
                state=StateVector(config.state),
                memory_graph=MemoryGraph(),
                essence=EssenceIndex.from_config(config.essence),
            )
            self._entities.add(entity)

    def _sense_phase(self) -> None:
        width = self._config.stimulus_dimension
        amplitude = self._config.stimulus.amplitude
        tau = self._config.memory.cluster_threshold
        for entity in self._entities:
            stimulus = self._rng.next_vector(width, amplitude)
            entity.sense(stimulus, self._timestamp, tau)

    def _state_phase(self) -> None:
        for entity in self._entities:
            entity.update_state()

    def _affective_phase(self) -> None:
        for entity in self._entities:
            entity.refresh_affect()

    def _essence_phase(self) -> None:
        for entity in self._entities:
            entity.update_essence()

    def _memory_decay_phase(self) -> None:
        factor = self._config.memory.decay
        for entity in self._entities:
            entity.memory_graph.decay(factor)

    @staticmethod
    def _entity_snapshot(entity: Entity) -> Dict[str, Any]:
        return {
            "id": entity.id,
            "position": to_list(entity.pose.position),
            "velocity": to_list(entity.velocity),
            "orientation": list(entity.pose.orientation),
            "speed": entity.speed,
            "essence": entity.essence.value,
            "potential": entity.potential,
            "memory_nodes": len(entity.memory_graph),
            "activations": entity.memory_graph.activations(),
            "attention": list(entity.attention),
            "clusters": entity.cluster_summaries(),
        }
