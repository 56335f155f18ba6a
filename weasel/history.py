#!/usr/bin/env python3
"""
Evolution history: per-generation statistics of the weasel loop.

Each generation's batch of scored children is summarised (best, mean, worst,
spread of fitness) so a run can be exported to CSV/JSON or plotted.
"""

import csv
import json
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import List, Dict, Any, Optional, Sequence, Tuple

import numpy as np


@dataclass
class GenerationStats:
    """Summary of one generation's batch of children."""
    generation: int
    best_fitness: int
    mean_fitness: float
    worst_fitness: int
    std_fitness: float
    best_candidate: str
    improved: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EvolutionHistory:
    """Collects GenerationStats over a run."""

    def __init__(self, target: str = ""):
        self.target = target
        self.generations: List[GenerationStats] = []

    def __len__(self) -> int:
        return len(self.generations)

    def record(self, generation: int, scored: Sequence[Tuple[str, int]], improved: bool) -> GenerationStats:
        """Summarise a scored batch. `scored` must be non-empty."""
        values = np.array([f for _, f in scored], dtype=float)
        best_idx = int(np.argmin(values))  # first minimum, i.e. generation order on ties
        stats = GenerationStats(
            generation=generation,
            best_fitness=int(values[best_idx]),
            mean_fitness=float(np.mean(values)),
            worst_fitness=int(np.max(values)),
            std_fitness=float(np.std(values)),
            best_candidate=scored[best_idx][0],
            improved=improved,
        )
        self.generations.append(stats)
        return stats

    @property
    def best(self) -> Optional[GenerationStats]:
        if not self.generations:
            return None
        return min(self.generations, key=lambda s: s.best_fitness)

    def best_fitness_curve(self) -> np.ndarray:
        return np.array([s.best_fitness for s in self.generations], dtype=int)

    def mean_fitness_curve(self) -> np.ndarray:
        return np.array([s.mean_fitness for s in self.generations], dtype=float)

    def improvements(self) -> List[GenerationStats]:
        return [s for s in self.generations if s.improved]

    def to_csv(self, path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", newline="") as f:
            w = csv.DictWriter(f, fieldnames=[fl.name for fl in fields(GenerationStats)])
            w.writeheader()
            w.writerows(s.to_dict() for s in self.generations)
        return path

    def to_json(self, path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "target": self.target,
            "total_generations": len(self.generations),
            "generations": [s.to_dict() for s in self.generations],
        }
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
        return path
