from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from ..types.metrics import Metrics

METRIC_LABELS: Dict[str, str] = {
    "attention_entropy": "Attention Entropy",
    "memory_diversity": "Memory Diversity",
    "velocity_stability": "Velocity Stability",
    "identity_coherence": "Identity Coherence",
    "cluster_stability": "Cluster Stability",
    "affective_strength": "Affective Strength",
}

DEFAULT_THRESHOLDS: Dict[str, float] = {
    "attention_entropy": 2.0,
    "memory_diversity": 0.1,
    "velocity_stability": 0.8,
    "identity_coherence": 0.7,
    "cluster_stability": 0.5,
    "affective_strength": 0.01,
}


@dataclass(slots=True)
class Evaluation:
    thresholds: Dict[str, float] = field(default_factory=dict)
    values: Dict[str, float] = field(default_factory=dict)
    passed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    score: float = 0.0
    achieved: bool = False
    reasoning: str = ""

    def to_dict(self) -> Dict[str, object]:
        return {
            "thresholds": dict(self.thresholds),
            "values": dict(self.values),
            "passed": list(self.passed),
            "failed": list(self.failed),
            "score": self.score,
            "achieved": self.achieved,
            "reasoning": self.reasoning,
        }


def evaluate(metrics: Optional[Metrics], thresholds: Mapping[str, float] = DEFAULT_THRESHOLDS) -> Evaluation:
    """Score the final metrics against inclusive lower thresholds.

    Every threshold has to be met for ``achieved`` to be set; the score is the
    fraction that were.
    """
    evaluation = Evaluation(thresholds=dict(thresholds))
    if metrics is None:
        evaluation.reasoning = "No steps recorded: the simulation did not run."
        return evaluation

    for name, threshold in thresholds.items():
        value = float(getattr(metrics, name))
        label = METRIC_LABELS.get(name, name)
        evaluation.values[name] = value
        if value >= threshold:
            evaluation.passed.append(label)
        else:
            evaluation.failed.append(f"{label}: {value:.4f} < {threshold}")

    total = len(thresholds)
    evaluation.score = len(evaluation.passed) / total if total else 0.0
    evaluation.achieved = total > 0 and not evaluation.failed
    evaluation.reasoning = _reasoning(evaluation)
    return evaluation


def _reasoning(evaluation: Evaluation) -> str:
    total = len(evaluation.passed) + len(evaluation.failed)
    lines = [
        f"{len(evaluation.passed)} of {total} criteria passed ({evaluation.score * 100.0:.1f}% score).",
        "All criteria must pass.",
    ]
    if evaluation.achieved:
        lines.append("Every threshold was met.")
        for name, value in evaluation.values.items():
            lines.append(f"  + {METRIC_LABELS.get(name, name)}: {value:.4f}")
    else:
        lines.append("Missing or insufficient criteria:")
        for failure in evaluation.failed:
            lines.append(f"  - {failure}")
    return "\n".join(lines)
