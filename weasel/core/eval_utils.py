from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Tuple, Dict, List
from multiprocessing import Pool, cpu_count

# Batch scoring for the generational loop: caching and parallel eval

ScoredCandidate = Tuple[str, int]


@dataclass
class EvalConfig:
    parallel: bool = False
    processes: int = max(1, cpu_count() - 1)
    # below this many unscored candidates a pool costs more than it saves
    min_parallel_batch: int = 64


def evaluate_population(
    candidates: List[str],
    eval_fn: Callable[[str], int],
    cache: Dict[str, int] | None = None,
    cfg: EvalConfig = EvalConfig(),
    pool=None,
) -> Tuple[List[ScoredCandidate], Dict[str, int]]:
    """Score a list of candidates with caching and optional parallelism.
    Returns (scored, updated_cache) where scored is a list of (candidate, fitness)
    in the same order as `candidates`, duplicates included.
    Note: eval_fn must be a top-level function or functools.partial of one for spawn.
    Scoring draws no randomness, so a parallel run scores exactly like a serial one.
    Pass a long-lived `pool` to reuse workers across calls; otherwise one is
    created per call.
    """
    if cache is None:
        cache = {}

    # unique, order preserving
    to_eval: List[str] = list(dict.fromkeys(c for c in candidates if c not in cache))

    if to_eval:
        if cfg.parallel and len(to_eval) >= cfg.min_parallel_batch and cfg.processes > 1:
            if pool is not None:
                scores = pool.map(eval_fn, to_eval)
            else:
                with Pool(processes=cfg.processes) as p:
                    scores = p.map(eval_fn, to_eval)
        else:
            scores = [eval_fn(c) for c in to_eval]
        for c, s in zip(to_eval, scores):
            cache[c] = s

    scored = [(c, cache[c]) for c in candidates]
    return scored, cache


def select_best(scored: List[ScoredCandidate], n: int) -> List[ScoredCandidate]:
    """The n lowest-fitness entries. sorted() is stable, so ties keep generation order."""
    return sorted(scored, key=lambda x: x[1])[:n]
