from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ...config import EssenceConfig
from ..utils.vecmath import clamp_value

ESSENCE_MIN = 0.0
ESSENCE_MAX = 10.0
SIGNAL_LIMIT = 5.0


@dataclass(slots=True)
class EssenceIndex:
    """Bounded well-being scalar pulled back toward a homeostatic baseline.

    Each update first relaxes the value toward ``baseline`` by ``decay``, then
    adds the clamped mean affective signal scaled by ``experience_scale``, and
    clamps the sum once to [0, 10].
    """

    value: float
    baseline: float = 5.0
    decay: float = 0.1
    experience_scale: float = 1.0

    @classmethod
    def from_config(cls, config: EssenceConfig) -> "EssenceIndex":
        return cls(
            value=config.baseline,
            baseline=config.baseline,
            decay=config.decay,
            experience_scale=config.experience_scale,
        )

    def update(self, signals: Sequence[float]) -> float:
        average = sum(signals) / len(signals) if signals else 0.0
        bounded = clamp_value(average, -SIGNAL_LIMIT, SIGNAL_LIMIT)
        delta = bounded * self.experience_scale
        updated = self.value + (self.baseline - self.value) * self.decay + delta
        self.value = clamp_value(updated, ESSENCE_MIN, ESSENCE_MAX)
        return self.value

    def extremity(self) -> float:
        return abs(self.value - self.baseline)

    def influence_factor(self) -> float:
        return 2.0 * self.extremity()
