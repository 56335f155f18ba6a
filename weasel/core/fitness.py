from weasel.core.alphabet import InternalInvariantViolation


def fitness(candidate: str, target: str) -> int:
    """Mismatch count: number of positions where candidate and target differ.
    Lower is better, 0 is an exact match.
    """
    if len(candidate) != len(target):
        raise InternalInvariantViolation(
            f"candidate length {len(candidate)} != target length {len(target)}"
        )
    return sum(1 for c, t in zip(candidate, target) if c != t)


def is_match(candidate: str, target: str) -> bool:
    return fitness(candidate, target) == 0


def score_candidate(target: str, candidate: str) -> int:
    """Top-level scorer with the target first, so functools.partial(score_candidate, target)
    stays picklable for process pools.
    """
    return fitness(candidate, target)
