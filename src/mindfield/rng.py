from __future__ import annotations

import random
from typing import List, Sequence


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    @property
    def seed(self) -> int:
        return self._seed

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_range(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def next_vector(self, length: int, amplitude: float) -> List[float]:
        return [self._random.uniform(-amplitude, amplitude) for _ in range(length)]

    def next_position(self, bounds: Sequence[float]) -> List[float]:
        # random() is half-open, so every coordinate lands in [0, bound).
        return [self._random.random() * bound for bound in bounds]
