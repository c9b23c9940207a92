from __future__ import annotations

import math
from typing import List, Sequence, Union

from pygame.math import Vector2, Vector3

Vector = Union[Vector2, Vector3]


def make_vector(values: Sequence[float]) -> Vector:
    if len(values) == 2:
        return Vector2(float(values[0]), float(values[1]))
    if len(values) == 3:
        return Vector3(float(values[0]), float(values[1]), float(values[2]))
    raise ValueError(f"Unsupported vector dimension: {len(values)}")


def zero_vector(dimension: int) -> Vector:
    return make_vector([0.0] * dimension)


def to_list(values: Sequence[float]) -> List[float]:
    return [float(value) for value in values]


def norm(values: Sequence[float]) -> float:
    return math.sqrt(sum(value * value for value in values))


def dot(a: Sequence[float], b: Sequence[float]) -> float:
    return sum(x * y for x, y in zip(a, b))


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    total = 0.0
    for x, y in zip(a, b):
        delta = x - y
        total += delta * delta
    return math.sqrt(total)


def padded(values: Sequence[float], length: int) -> List[float]:
    result = [float(value) for value in values[:length]]
    if len(result) < length:
        result.extend([0.0] * (length - len(result)))
    return result


def clamp_length(values: Sequence[float], max_length: float) -> List[float]:
    result = [float(value) for value in values]
    if max_length <= 0.0:
        return result
    magnitude_sq = sum(value * value for value in result)
    if magnitude_sq <= max_length * max_length:
        return result
    scale = max_length / math.sqrt(magnitude_sq)
    return [value * scale for value in result]


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def std_dev(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    center = mean(values)
    variance = sum((value - center) ** 2 for value in values) / len(values)
    return math.sqrt(variance)


def clamp_value(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))
