"""Alphabet of the weasel program and validation of target strings."""

import string

# 26 uppercase letters followed by space
ALPHABET = string.ascii_uppercase + " "
ALPHABET_SET = frozenset(ALPHABET)


class InvalidCharacter(ValueError):
    """Target contains a character outside the alphabet."""

    def __init__(self, character: str, alphabet: str = ALPHABET):
        self.character = character
        self.alphabet = alphabet
        super().__init__(f"Bad character: {character}, permissable characters: {alphabet}")


class InternalInvariantViolation(RuntimeError):
    """Candidate and target lengths diverged. Unreachable for well-formed runs."""


def validate_target(target: str) -> str:
    """Return target unchanged, or raise InvalidCharacter on the first bad character."""
    for ch in target:
        if ch not in ALPHABET_SET:
            raise InvalidCharacter(ch)
    return target
