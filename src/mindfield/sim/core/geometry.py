from __future__ import annotations

from dataclasses import dataclass
from typing import MutableSequence, Sequence, Tuple

from ...config import GeometryConfig
from ..utils.vecmath import Vector, distance, zero_vector

Quaternion = Tuple[float, float, float, float]

IDENTITY_ORIENTATION: Quaternion = (1.0, 0.0, 0.0, 0.0)


@dataclass(slots=True)
class Pose:
    position: Vector
    # (w, x, y, z); carried along but never read by the physics.
    orientation: Quaternion = IDENTITY_ORIENTATION

    @classmethod
    def at_origin(cls, dimension: int) -> "Pose":
        return cls(position=zero_vector(dimension))

    @property
    def dimension(self) -> int:
        return len(self.position)

    def distance_to(self, other: "Pose") -> float:
        return distance(self.position, other.position)


def wrap_position(position: MutableSequence[float], bounds: Sequence[float]) -> None:
    for axis in range(min(len(position), len(bounds))):
        bound = bounds[axis]
        if bound <= 0.0:
            continue
        wrapped = position[axis] % bound
        # Float modulo of a tiny negative value can round up to the bound itself.
        if wrapped >= bound:
            wrapped = 0.0
        position[axis] = wrapped


def reflect_position(
    position: MutableSequence[float], velocity: MutableSequence[float], bounds: Sequence[float]
) -> None:
    for axis in range(min(len(position), len(bounds))):
        bound = bounds[axis]
        if bound <= 0.0:
            continue
        x = position[axis]
        flips = 0
        while True:
            if x < 0.0:
                x = -x
                flips += 1
            elif x > bound:
                x = 2.0 * bound - x
                flips += 1
            else:
                break
        position[axis] = x
        if flips % 2 == 1 and axis < len(velocity):
            velocity[axis] = -velocity[axis]


def apply_bounds(
    position: MutableSequence[float], velocity: MutableSequence[float], geometry: GeometryConfig
) -> None:
    if geometry.periodic:
        wrap_position(position, geometry.bounds)
    else:
        reflect_position(position, velocity, geometry.bounds)
