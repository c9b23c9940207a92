from __future__ import annotations

import math
from typing import List, MutableSequence, Sequence, Tuple, TYPE_CHECKING

from ..core.geometry import apply_bounds
from ..utils.vecmath import clamp_length

if TYPE_CHECKING:
    from ..core.simulation import Simulation

STILLNESS_EPSILON = 1e-6
GRADIENT_ACCELERATION_GAIN = 0.1


def integrate_motion(
    position: MutableSequence[float],
    velocity: MutableSequence[float],
    acceleration: Sequence[float],
    dt: float,
    min_speed: float,
    damping: float,
) -> None:
    for i in range(len(velocity)):
        acc = acceleration[i] if i < len(acceleration) else 0.0
        velocity[i] = (velocity[i] + dt * acc) * damping

    speed = math.sqrt(sum(v * v for v in velocity))
    if STILLNESS_EPSILON < speed < min_speed:
        scale = min_speed / speed
        for i in range(len(velocity)):
            velocity[i] *= scale
    elif speed <= STILLNESS_EPSILON and len(velocity) > 0:
        # Fixed kick along the first axis rather than a random heading.
        velocity[0] = min_speed

    for i in range(min(len(position), len(velocity))):
        position[i] += dt * velocity[i]


def compute_acceleration_from_gradient(gradient: Sequence[float]) -> List[float]:
    return [g * GRADIENT_ACCELERATION_GAIN for g in gradient]


def compute_baseline_drives(min_distance_to_others: float, attention_magnitude: float) -> Tuple[float, float]:
    if min_distance_to_others > STILLNESS_EPSILON:
        preservation = 1.0 / min_distance_to_others
    else:
        preservation = 1.0
    return preservation, attention_magnitude


def run_decision_phase(sim: Simulation) -> None:
    max_acceleration = sim.config.dynamics.max_acceleration
    for entity in sim.entities:
        action = entity.decide()
        drift = compute_acceleration_from_gradient(entity.attention_gradient)
        combined = []
        for axis in range(entity.dimension):
            value = action[axis] if axis < len(action) else 0.0
            if axis < len(drift):
                value += drift[axis]
            combined.append(value)
        entity.act(clamp_length(combined, max_acceleration))


def run_integration_phase(sim: Simulation) -> None:
    dynamics = sim.config.dynamics
    for entity in sim.entities:
        entity.integrate(entity.acceleration, dynamics.dt, dynamics.min_speed, dynamics.damping)


def run_boundary_phase(sim: Simulation) -> None:
    geometry = sim.config.geometry
    for entity in sim.entities:
        apply_bounds(entity.pose.position, entity.velocity, geometry)
