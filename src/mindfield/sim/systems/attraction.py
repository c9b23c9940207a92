from __future__ import annotations

import math
from typing import Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING

from ...config import AttractionConfig, KernelType
from ..utils.vecmath import distance, norm
from .dynamics import compute_baseline_drives

if TYPE_CHECKING:
    from ..core.simulation import Simulation

FINITE_DIFFERENCE_STEP = 1e-5
INVERSE_DISTANCE_EPSILON = 1e-6
_MAX_EXPONENT = 709.0
ATTRACTION_RECORD_FLOOR = 0.01


def gaussian_kernel(distance: float, sigma: float) -> float:
    if sigma <= 0.0:
        return 1.0 if distance == 0.0 else 0.0
    return math.exp(-(distance * distance) / (2.0 * sigma * sigma))


def inverse_distance_kernel(distance: float, sigma: float = 0.0) -> float:
    return 1.0 / (distance + INVERSE_DISTANCE_EPSILON)


def compute_kernel(kernel: KernelType, distance: float, sigma: float) -> float:
    if kernel is KernelType.INVERSE_DISTANCE:
        return inverse_distance_kernel(distance, sigma)
    return gaussian_kernel(distance, sigma)


def _weight(weights: Optional[Sequence[float]], index: int) -> float:
    if weights is None or index >= len(weights):
        return 1.0
    return weights[index]


def attraction_potential(
    position: Sequence[float],
    others: Sequence[Sequence[float]],
    weights: Optional[Sequence[float]],
    config: AttractionConfig,
) -> float:
    potential = 0.0
    for index, other in enumerate(others):
        kernel_value = compute_kernel(config.kernel, distance(position, other), config.sigma)
        potential += _weight(weights, index) * kernel_value
    return potential


def attention_gradient(
    position: Sequence[float],
    others: Sequence[Sequence[float]],
    weights: Optional[Sequence[float]],
    config: AttractionConfig,
) -> List[float]:
    h = FINITE_DIFFERENCE_STEP
    gradient = [0.0] * len(position)
    for axis in range(len(position)):
        forward = [float(value) for value in position]
        forward[axis] += h
        backward = [float(value) for value in position]
        backward[axis] -= h
        phi_plus = attraction_potential(forward, others, weights, config)
        phi_minus = attraction_potential(backward, others, weights, config)
        gradient[axis] = -(phi_plus - phi_minus) / (2.0 * h)
    return gradient


def analytic_gradient(
    position: Sequence[float],
    others: Sequence[Sequence[float]],
    weights: Optional[Sequence[float]],
    config: AttractionConfig,
) -> List[float]:
    """Closed-form counterpart of :func:`attention_gradient` (same sign)."""
    gradient = [0.0] * len(position)
    sigma = config.sigma
    for index, other in enumerate(others):
        weight = _weight(weights, index)
        d = distance(position, other)
        if config.kernel is KernelType.INVERSE_DISTANCE:
            if d <= 0.0:
                continue
            radial = -1.0 / ((d + INVERSE_DISTANCE_EPSILON) ** 2 * d)
        else:
            if sigma <= 0.0:
                continue
            radial = -gaussian_kernel(d, sigma) / (sigma * sigma)
        for axis in range(min(len(position), len(other))):
            # d(phi)/dx = w * radial * (x - o); the field direction is its negation.
            gradient[axis] -= weight * radial * (position[axis] - other[axis])
    return gradient


def softmax_attention(scores: Sequence[float], temperature: float) -> List[float]:
    if not scores:
        return []
    max_score = max(scores)
    exp_scores = [math.exp(min((score - max_score) * temperature, _MAX_EXPONENT)) for score in scores]
    total = sum(exp_scores)
    if total > 0.0:
        return [value / total for value in exp_scores]
    return [0.0] * len(scores)


def pairwise_attractions(positions: Dict[int, Sequence[float]]) -> List[Tuple[int, int, float]]:
    ids = sorted(positions)
    pairs = []
    for i, first in enumerate(ids):
        for second in ids[i + 1 :]:
            strength = 1.0 / (1.0 + distance(positions[first], positions[second]))
            if strength > ATTRACTION_RECORD_FLOOR:
                pairs.append((first, second, strength))
    return pairs


def run_attention_phase(sim: Simulation) -> None:
    config = sim.config.attraction
    field_gradient = analytic_gradient if config.analytic_gradient else attention_gradient
    # Every entity sees the positions as they stood when the phase began.
    positions = sim.entities.positions()
    for entity in sim.entities:
        own = positions[entity.id]
        others = [pos for other_id, pos in positions.items() if other_id != entity.id]
        distances = [distance(own, other) for other in others]
        scores = [compute_kernel(config.kernel, d, config.sigma) for d in distances]
        weights = softmax_attention(scores, config.lambda_)
        gradient = field_gradient(own, others, weights, config)

        entity.attention = weights
        entity.attention_gradient = gradient
        entity.potential = attraction_potential(own, others, weights, config)
        entity.baseline_drives = compute_baseline_drives(min(distances, default=0.0), norm(gradient))
