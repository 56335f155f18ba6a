import random
from typing import List, Sequence

from weasel.core.alphabet import ALPHABET, InternalInvariantViolation


def random_char(rng: random.Random, alphabet: str = ALPHABET) -> str:
    return alphabet[rng.randrange(len(alphabet))]


def random_candidate(length: int, rng: random.Random, alphabet: str = ALPHABET) -> str:
    """Random string of the given length, each character drawn uniformly from the alphabet."""
    return ''.join(random_char(rng, alphabet) for _ in range(length))


def initial_population(size: int, length: int, rng: random.Random, alphabet: str = ALPHABET) -> List[str]:
    """Seed parent set of `size` independent random candidates."""
    return [random_candidate(length, rng, alphabet) for _ in range(size)]


def mutate(s: str, rate: float, rng: random.Random, alphabet: str = ALPHABET) -> str:
    """Point mutations: each position is redrawn from the alphabet with probability `rate`."""
    if not 0.0 <= rate <= 1.0:
        raise ValueError(f"mutation rate must be in [0, 1], got {rate}")
    out = []
    for c in s:
        # one draw per position keeps the stream aligned whatever the outcome
        if rng.random() < rate:
            out.append(random_char(rng, alphabet))
        else:
            out.append(c)
    return ''.join(out)


def recombine(parents: Sequence[str], rng: random.Random) -> str:
    """Uniform crossover between two parents picked with replacement.
    Picking the same parent twice yields a plain copy of it.
    """
    if not parents:
        raise ValueError("Cannot recombine an empty parent set")
    a = parents[rng.randrange(len(parents))]
    b = parents[rng.randrange(len(parents))]
    if len(a) != len(b):
        raise InternalInvariantViolation(f"parent lengths differ: {len(a)} != {len(b)}")
    return ''.join(x if rng.random() < 0.5 else y for x, y in zip(a, b))


def make_child(parents: Sequence[str], rate: float, rng: random.Random, use_recombination: bool = True) -> str:
    """child = mutate(recombine(parents)). Without recombination a single parent is
    picked uniformly (no draw when there is only one) and mutated.
    """
    if use_recombination:
        base = recombine(parents, rng)
    elif len(parents) == 1:
        base = parents[0]
    else:
        base = parents[rng.randrange(len(parents))]
    return mutate(base, rate, rng)
