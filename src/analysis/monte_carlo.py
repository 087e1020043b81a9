"""
Stochastic approval simulation over the preference distribution.

Each trial, every voter segment approves its top choice, never its last,
and approves each middle candidate with a freshly drawn probability. The
trial winner is the candidate with the most approval weight.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np
import pandas as pd

from .distribution import PreferenceDistribution
from .parameters import GAUSSIAN_MEAN, GAUSSIAN_SD, MonteCarloParameters

logger = logging.getLogger(__name__)


@dataclass
class MonteCarloResult:
    """Win counts over all trials; counts sum to ``trials``."""

    trials: int
    distribution: str
    wins: Dict[str, int]

    @property
    def win_rates(self) -> Dict[str, float]:
        if self.trials == 0:
            return {c: 0.0 for c in self.wins}
        return {c: n / self.trials for c, n in self.wins.items()}

    def to_dict(self) -> Dict:
        return {
            "trials": self.trials,
            "distribution": self.distribution,
            "wins": dict(self.wins),
            "win_rates": self.win_rates,
        }

    def to_frame(self) -> pd.DataFrame:
        rates = self.win_rates
        return pd.DataFrame(
            [
                {"candidate_id": c, "wins": n, "win_rate": rates[c]}
                for c, n in self.wins.items()
            ]
        )


def box_muller_probability(rng: np.random.Generator) -> float:
    """Approval probability from a clamped normal(0.5, 0.2) draw."""
    u1 = 1.0 - rng.random()  # (0, 1], keeps log finite
    u2 = rng.random()
    z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
    return min(1.0, max(0.0, GAUSSIAN_MEAN + GAUSSIAN_SD * z))


class MonteCarloApprovalSimulator:
    """
    Repeated stochastic approval trials.

    Unseeded by default, so repeated runs differ. Pass ``rng`` to make a
    run reproducible.
    """

    def __init__(
        self,
        distribution: PreferenceDistribution,
        params: Optional[MonteCarloParameters] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.distribution = distribution
        self.params = params or MonteCarloParameters()
        self.rng = rng if rng is not None else np.random.default_rng()

    def _draw_probability(self) -> float:
        if self.params.distribution == "gaussian":
            return box_muller_probability(self.rng)
        return float(self.rng.random())

    def run_trial(self) -> str:
        """Run one trial and return its winner."""
        candidate_ids = self.distribution.candidate_ids
        approvals = {c: 0.0 for c in candidate_ids}
        for segment in self.distribution:
            ranks = segment.ranking
            approvals[ranks[0]] += segment.proportion
            for candidate_id in ranks[1:-1]:
                approvals[candidate_id] += segment.proportion * self._draw_probability()
        return max(candidate_ids, key=lambda c: approvals[c])

    def run(self) -> MonteCarloResult:
        logger.info(
            f"Running {self.params.trials} approval trials "
            f"({self.params.distribution} probabilities)"
        )
        wins = {c: 0 for c in self.distribution.candidate_ids}
        for _ in range(self.params.trials):
            wins[self.run_trial()] += 1

        result = MonteCarloResult(
            trials=self.params.trials,
            distribution=self.params.distribution,
            wins=wins,
        )
        logger.info(f"Monte Carlo win counts: {wins}")
        return result
