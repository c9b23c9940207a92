from __future__ import annotations

import math
from typing import Iterable, List

from ..core.entity import Entity, EntityPool
from ..types.metrics import Metrics
from ..utils.vecmath import mean, std_dev

NEAR_ZERO = 1e-6
CLUSTER_NORMALIZATION = 10.0


def compute_metrics(entities: EntityPool, timestamp: int, default_essence: float = 5.0) -> Metrics:
    population = entities.all()
    average_essence = _average_essence(population, default_essence)
    return Metrics(
        timestamp=timestamp,
        attention_entropy=attention_entropy(population),
        memory_diversity=memory_diversity(population),
        velocity_stability=velocity_stability(population),
        identity_coherence=identity_coherence(population),
        cluster_stability=cluster_stability(population),
        affective_strength=affective_strength(population),
        essence_trajectory=average_essence,
        average_essence=average_essence,
    )


def shannon_entropy(activations: Iterable[float]) -> float:
    values = list(activations)
    total = sum(values)
    if total <= NEAR_ZERO:
        return 0.0
    entropy = 0.0
    for value in values:
        p = value / total
        if p > NEAR_ZERO:
            entropy -= p * math.log(p)
    return entropy


def attention_entropy(population: List[Entity]) -> float:
    # Entities that have not stored anything yet are left out of the mean.
    entropies = [
        shannon_entropy(entity.memory_graph.activations())
        for entity in population
        if entity.memory_graph.nodes
    ]
    return mean(entropies)


def memory_diversity(population: List[Entity]) -> float:
    spreads = []
    for entity in population:
        signals = entity.memory_graph.affective_signals()
        if len(signals) < 2:
            continue
        spreads.append(std_dev(signals))
    return mean(spreads)


def velocity_stability(population: List[Entity]) -> float:
    if not population:
        return 1.0
    speeds = [entity.speed for entity in population]
    average = mean(speeds)
    if average <= NEAR_ZERO:
        return 1.0
    return 1.0 / (1.0 + std_dev(speeds) / average)


def identity_coherence(population: List[Entity]) -> float:
    if not population:
        return 0.0
    norms = [entity.state.norm() for entity in population]
    average = mean(norms)
    if average <= NEAR_ZERO:
        return 0.0
    return 1.0 / (1.0 + std_dev(norms) / average)


def cluster_stability(population: List[Entity]) -> float:
    if not population:
        return 0.0
    return mean([float(len(entity.memory_graph.clusters)) for entity in population]) / CLUSTER_NORMALIZATION


def affective_strength(population: List[Entity]) -> float:
    magnitudes = [
        abs(cluster.affective_signal)
        for entity in population
        for cluster in entity.memory_graph.ordered_clusters()
    ]
    return mean(magnitudes)


def _average_essence(population: List[Entity], default_essence: float) -> float:
    if not population:
        return default_essence
    return mean([entity.essence.value for entity in population])
