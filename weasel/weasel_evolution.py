#!/usr/bin/env python3
"""
Weasel Evolution: cumulative selection toward a target phrase.
A population-based evolutionary loop (mutation + uniform crossover) that
converges from random strings onto a target string.

The single-parent weasel of the original illustration is the special case
num_parents=1 without recombination (see EvolutionConfig.simple).
"""

import numbers
import random
import time
from datetime import datetime
from enum import Enum
from functools import partial
from multiprocessing import Pool
from typing import List, Dict, Any, Optional, Callable
from dataclasses import dataclass, fields

from weasel.core.alphabet import validate_target
from weasel.core.evo import initial_population, make_child
from weasel.core.eval_utils import EvalConfig, ScoredCandidate, evaluate_population, select_best
from weasel.core.fitness import score_candidate
from weasel.history import EvolutionHistory

DEFAULT_TARGET = "METHINKS IT IS LIKE A WEASEL"


class EvolutionState(Enum):
    INITIALIZING = "initializing"
    EVALUATING = "evaluating"
    SELECTING = "selecting"
    TERMINATED = "terminated"
    EXHAUSTED = "exhausted"  # optional generation cap reached before a match


@dataclass
class EvolutionConfig:
    """Configuration parameters for the evolution process."""
    target: str = DEFAULT_TARGET
    nb_copy: int = 400  # children per generation
    mutation_rate: float = 0.05
    num_parents: int = 3
    recombination: bool = True
    keep_parent_on_stall: bool = False  # keep old parents when a generation does not improve
    seed: Optional[int] = None
    max_generations: Optional[int] = None  # None: run until an exact match
    parallel_eval: bool = False
    verbose: bool = False

    def __post_init__(self):
        if not isinstance(self.target, str):
            raise ValueError(f"target must be a string, got {type(self.target).__name__}")
        validate_target(self.target)
        for name in ("nb_copy", "num_parents", "max_generations"):
            value = getattr(self, name)
            if value is None and name == "max_generations":
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        if isinstance(self.mutation_rate, bool) or not isinstance(self.mutation_rate, numbers.Real):
            raise ValueError(f"mutation_rate must be a number, got {self.mutation_rate!r}")
        if self.num_parents < 1:
            raise ValueError("num_parents must be at least 1")
        if self.nb_copy < self.num_parents:
            raise ValueError(f"nb_copy ({self.nb_copy}) must be >= num_parents ({self.num_parents})")
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ValueError(f"mutation_rate must be in [0, 1], got {self.mutation_rate}")
        if self.max_generations is not None and self.max_generations < 0:
            raise ValueError("max_generations must be >= 0")

    @classmethod
    def simple(cls, target: str = DEFAULT_TARGET, **kwargs) -> 'EvolutionConfig':
        """Single parent, mutation only, parent kept until a child beats it."""
        params = dict(num_parents=1, recombination=False, keep_parent_on_stall=True)
        params.update(kwargs)
        return cls(target=target, **params)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EvolutionConfig':
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)


def print_progress(candidate: str, generation: int) -> None:
    print(f"{candidate} : {generation}")


def print_start(candidate: str) -> None:
    print(candidate)


class EvolutionEngine:
    """Generational loop: INITIALIZING -> EVALUATING -> SELECTING -> (TERMINATED | EVALUATING)."""

    def __init__(self, config: EvolutionConfig = None, rng: Optional[random.Random] = None,
                 on_progress: Optional[Callable[[str, int], None]] = None,
                 on_start: Optional[Callable[[str], None]] = None):
        self.config = config or EvolutionConfig()
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        self.on_progress = on_progress or print_progress
        self.on_start = on_start or print_start
        self.eval_config = EvalConfig(parallel=self.config.parallel_eval)
        self.pool = None  # scoring pool, only while run() is active
        self._score = partial(score_candidate, self.config.target)
        self.state = EvolutionState.INITIALIZING
        self.parents: List[str] = []
        self.generation = 0
        self.best_candidate: Optional[str] = None
        self.best_fitness: Optional[int] = None
        self.history = EvolutionHistory(self.config.target)
        self.evolution_log: List[str] = []

    @property
    def finished(self) -> bool:
        return self.state in (EvolutionState.TERMINATED, EvolutionState.EXHAUSTED)

    def initialize_population(self) -> None:
        """Build the random parent set and report the best starting candidate."""
        self.parents = initial_population(self.config.num_parents, len(self.config.target), self.rng)
        scored, _ = evaluate_population(self.parents, self._score, cfg=self.eval_config)
        self.best_candidate, self.best_fitness = select_best(scored, 1)[0]
        self.generation = 0
        self.history = EvolutionHistory(self.config.target)
        self.log(f"Population initialized: {len(self.parents)} random parent(s), "
                 f"best fitness {self.best_fitness}")
        self.on_start(self.best_candidate)
        if self.best_fitness == 0:
            self.state = EvolutionState.TERMINATED
        else:
            self.state = EvolutionState.EVALUATING

    def evaluate_generation(self) -> List[ScoredCandidate]:
        """Produce and score a batch of nb_copy children from the current parents."""
        self._require(EvolutionState.EVALUATING)
        self.generation += 1
        children = [
            make_child(self.parents, self.config.mutation_rate, self.rng, self.config.recombination)
            for _ in range(self.config.nb_copy)
        ]
        scored, _ = evaluate_population(children, self._score, cfg=self.eval_config, pool=self.pool)
        self.state = EvolutionState.SELECTING
        return scored

    def select_generation(self, scored: List[ScoredCandidate]) -> bool:
        """Pick the num_parents best children as next parents. Returns True on improvement."""
        self._require(EvolutionState.SELECTING)
        top = select_best(scored, self.config.num_parents)
        best_child, best_child_fitness = top[0]
        improved = best_child_fitness < self.best_fitness

        if improved:
            self.best_candidate, self.best_fitness = best_child, best_child_fitness
            self.on_progress(best_child, self.generation)
        if improved or not self.config.keep_parent_on_stall:
            self.parents = [c for c, _ in top]

        self.history.record(self.generation, scored, improved)

        if self.best_fitness == 0:
            self.log(f"PERFECT MATCH FOUND at generation {self.generation}: {self.best_candidate}")
            self.state = EvolutionState.TERMINATED
        else:
            self.state = EvolutionState.EVALUATING
        return improved

    def evolve_generation(self) -> str:
        """Evolve one generation and return status."""
        scored = self.evaluate_generation()
        self.select_generation(scored)
        return 'PERFECT' if self.state is EvolutionState.TERMINATED else 'CONTINUE'

    def run(self, max_generations: Optional[int] = None) -> EvolutionState:
        """Initialize if needed, then loop until TERMINATED.
        With max_generations set, stops as EXHAUSTED once that many generations ran.
        The scoring pool (parallel_eval) lives for the whole loop.
        """
        if self.state is EvolutionState.INITIALIZING:
            self.initialize_population()
        if self.eval_config.parallel and self.eval_config.processes > 1 and not self.finished:
            self.pool = Pool(processes=self.eval_config.processes)
        try:
            while not self.finished:
                if max_generations is not None and self.generation >= max_generations:
                    self.state = EvolutionState.EXHAUSTED
                    self.log(f"Generation cap {max_generations} reached without a match")
                    break
                self.evolve_generation()
        finally:
            if self.pool is not None:
                self.pool.terminate()
                self.pool.join()
                self.pool = None
        return self.state

    def get_stats(self) -> Dict[str, Any]:
        """Get current run statistics."""
        last = self.history.generations[-1] if self.history.generations else None
        return {
            'generation': self.generation,
            'state': self.state.value,
            'best_fitness': self.best_fitness,
            'best_candidate': self.best_candidate,
            'parents': list(self.parents),
            'last_mean_fitness': last.mean_fitness if last else None,
            'improvements': len(self.history.improvements()),
        }

    def _require(self, state: EvolutionState) -> None:
        if self.state is not state:
            raise RuntimeError(f"Engine is {self.state.value}, expected {state.value}")

    def log(self, message: str) -> None:
        """Add a message to the evolution log."""
        timestamp = datetime.now().strftime("%H:%M:%S")
        log_entry = f"[{timestamp}] {message}"
        self.evolution_log.append(log_entry)
        if self.config.verbose:
            print(log_entry)


class EvolutionRunner:
    """High-level runner for the evolution process."""

    def __init__(self, config: EvolutionConfig = None, rng: Optional[random.Random] = None,
                 on_progress: Optional[Callable[[str, int], None]] = None,
                 on_start: Optional[Callable[[str], None]] = None):
        self.config = config or EvolutionConfig()
        self.engine = EvolutionEngine(self.config, rng=rng, on_progress=on_progress, on_start=on_start)

    def run_evolution(self) -> Dict[str, Any]:
        """Run the complete evolution process."""
        self.engine.log(f"🧬 Starting Weasel Evolution: '{self.config.target}'")
        self.engine.log(f"Children per generation: {self.config.nb_copy}, "
                        f"Mutation Rate: {self.config.mutation_rate}, "
                        f"Parents: {self.config.num_parents}, "
                        f"Recombination: {self.config.recombination}")

        start_time = time.time()
        interrupted = False

        try:
            self.engine.run(self.config.max_generations)
        except KeyboardInterrupt:
            interrupted = True
            self.engine.log("Evolution interrupted by user")

        duration = time.time() - start_time
        success = self.engine.best_fitness == 0
        self.engine.log(f"Evolution completed in {duration:.2f} seconds")
        self.engine.log(f"Final generation: {self.engine.generation}")
        self.engine.log(f"Best fitness achieved: {self.engine.best_fitness}")
        if success:
            self.engine.log("🏆 Exact match found!")

        return {
            'success': success,
            'interrupted': interrupted,
            'target': self.config.target,
            'generations': self.engine.generation,
            'duration': duration,
            'best_fitness': self.engine.best_fitness,
            'best_candidate': self.engine.best_candidate,
            'final_stats': self.engine.get_stats(),
        }
