from __future__ import annotations

import math

from pygame.math import Vector2
from pytest import approx

from mindfield.config import EssenceConfig, SimulationConfig, StateConfig
from mindfield.sim.core.entity import Entity, EntityPool
from mindfield.sim.core.essence import EssenceIndex
from mindfield.sim.core.geometry import Pose
from mindfield.sim.core.memory import MemoryGraph
from mindfield.sim.core.simulation import Simulation
from mindfield.sim.core.state import StateVector
from mindfield.sim.systems.metrics import (
    attention_entropy,
    compute_metrics,
    identity_coherence,
    memory_diversity,
    shannon_entropy,
    velocity_stability,
)


def _entity(vx: float = 0.0, vy: float = 0.0) -> Entity:
    return Entity(
        id=0,
        pose=Pose(position=Vector2(0.0, 0.0)),
        velocity=Vector2(vx, vy),
        state=StateVector(StateConfig(memory_dim=3, context_dim=1)),
        memory_graph=MemoryGraph(),
        essence=EssenceIndex.from_config(EssenceConfig()),
    )


def test_initial_population_metrics():
    simulation = Simulation(SimulationConfig())
    metrics = simulation.current_metrics()

    assert metrics.timestamp == 0
    assert metrics.attention_entropy == 0.0
    assert metrics.memory_diversity == 0.0
    assert metrics.velocity_stability == 1.0
    assert metrics.identity_coherence == 0.0
    assert metrics.cluster_stability == 0.0
    assert metrics.affective_strength == 0.0
    assert metrics.average_essence == approx(5.0)
    assert metrics.essence_trajectory == metrics.average_essence


def test_metrics_are_pure():
    simulation = Simulation(SimulationConfig())
    simulation.run(5)

    assert simulation.current_metrics() == simulation.current_metrics()


def test_empty_pool_uses_defaults():
    metrics = compute_metrics(EntityPool(), 3, default_essence=4.0)

    assert metrics.timestamp == 3
    assert metrics.velocity_stability == 1.0
    assert metrics.identity_coherence == 0.0
    assert metrics.average_essence == 4.0


def test_shannon_entropy_of_uniform_activations():
    assert shannon_entropy([1.0] * 4) == approx(math.log(4))
    assert shannon_entropy([0.2, 0.2]) == approx(math.log(2))
    assert shannon_entropy([]) == 0.0
    assert shannon_entropy([1e-9, 1e-9]) == 0.0
    assert shannon_entropy([1.0, 0.0]) == 0.0


def test_attention_entropy_skips_entities_without_memory():
    empty = _entity()
    remembering = _entity()
    remembering.memory_graph.add_node([1.0], 0)
    remembering.memory_graph.add_node([0.5], 1)

    assert attention_entropy([empty, remembering]) == approx(math.log(2))


def test_memory_diversity_skips_entities_with_one_cluster():
    single = _entity()
    single.memory_graph.add_node([0.9], 0)
    single.memory_graph.cluster_event([0.9], 0, 0.7)

    split = _entity()
    for index, event in enumerate(([0.9, 0.0], [-0.9, 0.0])):
        split.memory_graph.add_node(event, index)
        split.memory_graph.cluster_event(event, index, 0.7)
    for entity in (single, split):
        entity.memory_graph.update_affective_signals()

    # Signals +1 and -1 have a population standard deviation of 1.
    assert memory_diversity([single, split]) == approx(1.0)
    assert memory_diversity([single]) == 0.0


def test_velocity_stability_drops_with_spread():
    same = [_entity(1.0, 0.0), _entity(0.0, 1.0)]
    mixed = [_entity(1.0, 0.0), _entity(3.0, 0.0)]

    assert velocity_stability(same) == approx(1.0)
    assert velocity_stability(mixed) == approx(1.0 / 1.5)


def test_identity_coherence_uses_state_norms():
    a = _entity()
    b = _entity()
    a.state.memory = [1.0, 0.0, 0.0]
    b.state.memory = [0.0, 3.0, 0.0]

    assert identity_coherence([a, b]) == approx(1.0 / 1.5)
