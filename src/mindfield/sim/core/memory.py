from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..utils.vecmath import padded

ACTIVATION_FLOOR = 0.01
VALENCE_THRESHOLD = 0.5


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    if not a or not b:
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a > 0.0 and norm_b > 0.0:
        return dot / (norm_a * norm_b)
    return 0.0


@dataclass(slots=True)
class MemoryNode:
    event: Tuple[float, ...]
    timestamp: int
    activation: float = 1.0
    cluster_id: Optional[int] = None

    def valence(self) -> float:
        if not self.event:
            return 0.0
        lead = self.event[0]
        if lead > VALENCE_THRESHOLD:
            return 1.0
        if lead < -VALENCE_THRESHOLD:
            return -1.0
        return 0.0


@dataclass(slots=True)
class BeliefCluster:
    id: int
    node_indices: List[int] = field(default_factory=list)
    affective_signal: float = 0.0
    weight: float = 1.0

    @property
    def size(self) -> int:
        return len(self.node_indices)


class MemoryGraph:
    def __init__(self) -> None:
        self.nodes: List[MemoryNode] = []
        self.edges: List[Tuple[int, int]] = []
        self.clusters: Dict[int, BeliefCluster] = {}
        self._next_cluster_id = 0

    def __len__(self) -> int:
        return len(self.nodes)

    def add_node(self, event: Sequence[float], timestamp: int) -> int:
        index = len(self.nodes)
        self.nodes.append(MemoryNode(event=tuple(float(v) for v in event), timestamp=timestamp))
        return index

    def add_edge(self, src: int, dst: int) -> bool:
        if 0 <= src < len(self.nodes) and 0 <= dst < len(self.nodes):
            self.edges.append((src, dst))
            return True
        return False

    def ordered_clusters(self) -> List[BeliefCluster]:
        return [self.clusters[cluster_id] for cluster_id in sorted(self.clusters)]

    def cluster_event(self, event: Sequence[float], node_index: int, tau: float) -> Optional[int]:
        """Attach a node to the most similar belief cluster, or open a new one.

        A cluster's score is the mean cosine similarity between ``event`` and
        each of its members. Only a score strictly above ``tau`` can win, and
        clusters are scanned by ascending id so ties go to the oldest cluster.
        Returns the chosen cluster id, or None for an unknown node index.
        """
        if not 0 <= node_index < len(self.nodes):
            return None

        best_cluster_id: Optional[int] = None
        best_similarity = tau
        for cluster in self.ordered_clusters():
            if not cluster.node_indices:
                continue
            total = 0.0
            for member in cluster.node_indices:
                if member < len(self.nodes):
                    total += cosine_similarity(event, self.nodes[member].event)
            similarity = total / len(cluster.node_indices)
            if similarity > best_similarity:
                best_similarity = similarity
                best_cluster_id = cluster.id

        if best_cluster_id is None:
            best_cluster_id = self._next_cluster_id
            self._next_cluster_id += 1
            self.clusters[best_cluster_id] = BeliefCluster(id=best_cluster_id)

        self.clusters[best_cluster_id].node_indices.append(node_index)
        self.nodes[node_index].cluster_id = best_cluster_id
        return best_cluster_id

    def decay(self, factor: float) -> None:
        for node in self.nodes:
            node.activation *= factor

    def update_affective_signals(self) -> None:
        for cluster in self.clusters.values():
            signal = 0.0
            count = 0
            for index in cluster.node_indices:
                if index >= len(self.nodes):
                    continue
                node = self.nodes[index]
                if node.activation > ACTIVATION_FLOOR:
                    signal += node.activation * node.valence()
                    count += 1
            cluster.affective_signal = signal / count if count > 0 else 0.0

    def affective_signals(self) -> List[float]:
        return [cluster.affective_signal for cluster in self.ordered_clusters()]

    def activations(self) -> List[float]:
        return [node.activation for node in self.nodes]

    def recall(self, width: Optional[int] = None) -> List[float]:
        if width is None:
            width = max((len(node.event) for node in self.nodes), default=0)
        totals = [0.0] * width
        total_activation = 0.0
        for node in self.nodes:
            if node.activation <= 0.0:
                continue
            total_activation += node.activation
            for axis, value in enumerate(padded(node.event, width)):
                totals[axis] += node.activation * value
        if total_activation <= 0.0:
            return totals
        return [value / total_activation for value in totals]

    def check_integrity(self) -> bool:
        node_count = len(self.nodes)
        for node in self.nodes:
            if node.cluster_id is not None and node.cluster_id not in self.clusters:
                return False
        for cluster_id, cluster in self.clusters.items():
            if cluster.id != cluster_id:
                return False
            if any(not 0 <= index < node_count for index in cluster.node_indices):
                return False
        return all(0 <= src < node_count and 0 <= dst < node_count for src, dst in self.edges)
