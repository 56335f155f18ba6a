"""Weasel program: cumulative selection of random strings toward a target phrase."""

from weasel.core.alphabet import ALPHABET, InvalidCharacter, InternalInvariantViolation
from weasel.weasel_evolution import DEFAULT_TARGET, EvolutionConfig, EvolutionEngine, EvolutionRunner, EvolutionState

__version__ = "0.1.0"
