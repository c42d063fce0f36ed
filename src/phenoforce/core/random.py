"""
Deterministic uniform random numbers with explicit seed state.

Park, S.K. & Miller, K.W. (1988) Random number generators: good ones are
hard to find. Communications of the ACM 31: 1192-1201.
"""
from typing import Tuple

MODULUS = 2147483647
MULTIPLIER = 16807
SCHRAGE_Q = 127773
SCHRAGE_R = 2836


def randfrac(seed: int) -> Tuple[float, int]:
    """
    Draw one value in (0, 1) and return it with the advanced seed.

    Any positive integer is a valid seed; the same seed always yields the
    same sequence.

    Args:
        seed: Current generator state

    Returns:
        Tuple of (value, new_seed)
    """
    # Schrage's method; C-style truncating division keeps the sequence
    # identical for negative states
    quotient = abs(seed) // SCHRAGE_Q
    if seed < 0:
        quotient = -quotient
    remainder = seed - quotient * SCHRAGE_Q
    seed = MULTIPLIER * remainder - SCHRAGE_R * quotient

    if seed == 0:
        seed = 1
    elif seed < 0:
        seed += MODULUS

    return seed / float(MODULUS), seed


class RandomStream:
    """Mutable seed holder threaded through the stochastic generators"""

    def __init__(self, seed: int = 12345678):
        self.seed = int(seed)
        self.draws = 0

    def randfrac(self) -> float:
        value, self.seed = randfrac(self.seed)
        self.draws += 1
        return value

    def __repr__(self) -> str:
        return f"RandomStream(seed={self.seed}, draws={self.draws})"
