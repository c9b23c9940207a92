from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Dict, List, Optional

from ..config import SimulationConfig
from ..sim.core.simulation import Simulation
from ..sim.systems.attraction import pairwise_attractions
from ..sim.types.metrics import METRIC_FIELDS, Metrics

logger = logging.getLogger("mindfield.headless")

_HEADER = ["timestamp", *METRIC_FIELDS]


def _format_row(metrics: Metrics) -> List[object]:
    return [metrics.timestamp] + [f"{getattr(metrics, name):.6f}" for name in METRIC_FIELDS]


def _percentile(sorted_values: List[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: List[float]) -> Dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
    }


def _metric_series(history: List[Metrics]) -> Dict[str, List[float]]:
    return {name: [float(getattr(metrics, name)) for metrics in history] for name in METRIC_FIELDS}


def run_headless(
    steps: Optional[int],
    seed: Optional[int],
    log_path: Optional[Path],
    config_path: Optional[Path] = None,
    summary_path: Optional[Path] = None,
    summary_window: int = 100,
) -> Simulation:
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.simulation.seed = seed
    if steps is not None:
        config.simulation.num_steps = steps
    simulation = Simulation(config)
    total_steps = config.simulation.num_steps

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    total_attractions = 0
    try:
        for _ in range(total_steps):
            metrics = simulation.step()
            total_attractions += len(pairwise_attractions(simulation.entities.positions()))
            if writer:
                writer.writerow(_format_row(metrics))
    finally:
        if csv_file:
            csv_file.close()

    logger.info("Ran %d steps with seed %d", total_steps, config.simulation.seed)
    if log_path:
        logger.info("Metrics written to %s", log_path)

    if summary_path:
        history = simulation.metrics_history
        window = max(1, int(summary_window))
        tail = history[max(0, len(history) - window):]
        series = _metric_series(history)
        tail_series = _metric_series(tail)
        final = simulation.metrics
        summary = {
            "steps": total_steps,
            "seed": config.simulation.seed,
            "name": config.metadata.name,
            "dimension": config.geometry.dimension,
            "num_entities": config.simulation.num_entities,
            "total_attractions": total_attractions,
            "metrics": {name: _summary_stats(values) for name, values in series.items()},
            "tail_window": {
                "window": window,
                "metrics": {name: _summary_stats(values) for name, values in tail_series.items()},
            },
            "final": final.to_dict() if final is not None else None,
            "evaluation": simulation.evaluate().to_dict(),
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
        logger.info("Summary written to %s", summary_path)

    return simulation


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless entity simulation")
    parser.add_argument("--steps", type=int, default=None, help="Override the configured step count.")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats and the threshold evaluation.",
    )
    parser.add_argument(
        "--summary-window",
        type=int,
        default=100,
        help="Tail window size (steps) for summary stats.",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...)")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    simulation = run_headless(
        args.steps,
        args.seed,
        args.log,
        config_path=args.config,
        summary_path=args.summary,
        summary_window=args.summary_window,
    )
    result = simulation.evaluate()
    logger.info("Score %.1f%% (%s)", result.score * 100.0, "achieved" if result.achieved else "not achieved")


if __name__ == "__main__":
    main()
