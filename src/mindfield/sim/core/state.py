from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

from ...config import StateConfig
from ..utils.vecmath import dot, norm

TRAIT_COUNT = 10


@dataclass(slots=True)
class StateVector:
    config: StateConfig
    memory: List[float] = field(default_factory=list)
    context: List[float] = field(default_factory=list)
    traits: List[float] = field(default_factory=lambda: [0.0] * TRAIT_COUNT)

    def __post_init__(self) -> None:
        if not self.memory:
            self.memory = [0.0] * self.config.memory_dim
        if not self.context:
            self.context = [0.0] * self.config.context_dim

    def update(self, attention_force: Sequence[float], memory_input: Sequence[float]) -> None:
        alpha = self.config.decay_alpha
        beta = self.config.beta_attention
        gamma = self.config.gamma_memory
        memory = self.memory
        for i in range(len(memory)):
            attention = attention_force[i] if i < len(attention_force) else 0.0
            recalled = memory_input[i] if i < len(memory_input) else 0.0
            memory[i] = alpha * memory[i] + beta * attention + gamma * recalled

        context = self.context
        for i in range(min(len(context), len(memory))):
            context[i] = 0.5 * context[i] + 0.5 * memory[i]

    def norm(self) -> float:
        return norm(self.memory)

    def dot(self, other: "StateVector") -> float:
        return dot(self.memory, other.memory)
