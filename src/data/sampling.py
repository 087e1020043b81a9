"""
Seeded voter sampling for the finite-population simulations.

The generator is a plain linear-congruential recurrence expressed as pure
functions of the seed. Every purpose (voter positions, sincere-voter
designation, per-step adoption) derives its own seed and never shares a
cursor with another purpose.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

logger = logging.getLogger(__name__)

LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
LCG_MODULUS = 2**32

SINCERE_SEED_STRIDE = 10000
ADOPTION_STEP_STRIDE = 1000


def lcg_draws(seed: int, count: int) -> List[float]:
    """
    Draw ``count`` values in [0, 1) from a fresh generator seeded with ``seed``.

    Args:
        seed: Initial state of the generator
        count: Number of values to draw

    Returns:
        List of draws in generation order
    """
    state = int(seed) % LCG_MODULUS
    draws = []
    for _ in range(count):
        state = (state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        draws.append(state / LCG_MODULUS)
    return draws


def lcg_draw(seed: int) -> float:
    """Single draw of a fresh generator seeded with ``seed``."""
    return lcg_draws(seed, 1)[0]


def lcg_first_draws(base_seed: int, count: int) -> np.ndarray:
    """
    First draw of ``count`` fresh generators seeded ``base_seed + i``.

    Same values as ``[lcg_draw(base_seed + i) for i in range(count)]``.
    States stay below 2**32, so the uint64 products cannot overflow.
    """
    modulus = np.uint64(LCG_MODULUS)
    states = np.arange(count, dtype=np.uint64) + np.uint64(int(base_seed) % LCG_MODULUS)
    states %= modulus
    states = (states * np.uint64(LCG_MULTIPLIER) + np.uint64(LCG_INCREMENT)) % modulus
    return states.astype(float) / LCG_MODULUS


def sincere_seed(seed: int, voter_index: int) -> int:
    return seed * SINCERE_SEED_STRIDE + voter_index


def adoption_seed(seed: int, step: int, voter_index: int) -> int:
    return seed + step * ADOPTION_STEP_STRIDE + voter_index


def is_sincere(seed: int, voter_index: int, sincere_proportion: float) -> bool:
    """Whether a voter is permanently sincere for this population seed."""
    return lcg_draw(sincere_seed(seed, voter_index)) < sincere_proportion


def adopts_update(seed: int, step: int, voter_index: int, rate: float) -> bool:
    """Whether a strategic voter adopts its proposed threshold at ``step``."""
    return lcg_draw(adoption_seed(seed, step, voter_index)) < rate


def sincere_mask(seed: int, count: int, sincere_proportion: float) -> np.ndarray:
    """``is_sincere`` for voters 0..count-1 as a boolean array."""
    return lcg_first_draws(sincere_seed(seed, 0), count) < sincere_proportion


def adoption_mask(seed: int, step: int, count: int, rate: float) -> np.ndarray:
    """``adopts_update`` for voters 0..count-1 as a boolean array."""
    return lcg_first_draws(adoption_seed(seed, step, 0), count) < rate


@dataclass(frozen=True)
class VoterPopulation:
    """
    A fixed sample of voter positions for one seed.

    The population persists across simulator runs until it is
    redistributed, which advances the seed by one.
    """

    seed: int
    positions: Tuple[float, ...] = field(repr=False)

    @classmethod
    def sample(cls, seed: int, size: int) -> "VoterPopulation":
        if size < 1:
            raise ValueError(f"Voter count must be at least 1, got {size}")
        logger.debug(f"Sampling {size} voters with seed {seed}")
        return cls(seed=seed, positions=tuple(lcg_draws(seed, size)))

    def redistribute(self) -> "VoterPopulation":
        return VoterPopulation.sample(self.seed + 1, len(self.positions))

    def sincere_flags(self, sincere_proportion: float) -> List[bool]:
        return self.sincere_mask(sincere_proportion).tolist()

    def sincere_mask(self, sincere_proportion: float) -> np.ndarray:
        return sincere_mask(self.seed, len(self.positions), sincere_proportion)

    def as_array(self) -> np.ndarray:
        return np.asarray(self.positions, dtype=float)

    def __len__(self) -> int:
        return len(self.positions)
