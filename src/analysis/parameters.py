"""
Engine constants and simulation parameter sets.
"""

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict

# Preference distribution
SEGMENT_FLOOR = 1e-4

# Ranked-choice tabulation
RCV_TIE_TOLERANCE = 1e-4
MAJORITY = 0.5

# Pairwise comparisons
PAIRWISE_TIE_TOLERANCE = 1e-9

# Threshold equilibrium
STEP_CAP = 50
STEP_EPSILON = 1e-3
VIABILITY_MARGIN = 0.03

# Monte Carlo
GAUSSIAN_MEAN = 0.5
GAUSSIAN_SD = 0.2
DISTRIBUTION_KINDS = ("uniform", "gaussian")


@dataclass(frozen=True)
class MonteCarloParameters:
    """Parameters of the stochastic approval simulation."""

    trials: int = 1000
    distribution: str = "uniform"

    def __post_init__(self):
        if self.trials < 0:
            raise ValueError(f"Trial count must be non-negative, got {self.trials}")
        if self.distribution not in DISTRIBUTION_KINDS:
            raise ValueError(
                f"Unknown distribution '{self.distribution}', "
                f"expected one of {DISTRIBUTION_KINDS}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class EquilibriumParameters:
    """
    Parameters of the iterative threshold equilibrium simulation.

    Attributes:
        voters: Number of sampled voters (N)
        threshold: Initial sincere approval radius (tau0)
        basic: Always approve the nearest and never the farthest candidate
        rate: Probability a strategic voter adopts its new threshold each step
        sincere: Proportion of voters who never update
        seed: Population seed
    """

    voters: int = 1000
    threshold: float = 0.3
    basic: bool = True
    rate: float = 1.0
    sincere: float = 0.0
    seed: int = 1

    def __post_init__(self):
        if self.voters < 1:
            raise ValueError(f"Voter count must be at least 1, got {self.voters}")
        if math.isnan(self.threshold) or self.threshold < 0:
            raise ValueError(f"Threshold must be non-negative, got {self.threshold}")
        if not 0.1 <= self.rate <= 1.0:
            raise ValueError(f"Update rate must lie in [0.1, 1.0], got {self.rate}")
        if not 0.0 <= self.sincere <= 1.0:
            raise ValueError(
                f"Sincere proportion must lie in [0, 1], got {self.sincere}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
