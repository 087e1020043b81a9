"""
Iterative strategic approval simulation over a sampled voter population.

Every voter holds an approval radius. After each step, strategic voters
look at which candidates were viable in the previous step and propose a
new radius; a seeded draw decides whether each of them adopts it this
step. The run stops once the multiset of ballots stops changing, or at the
step cap.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .parameters import (
    STEP_CAP,
    STEP_EPSILON,
    VIABILITY_MARGIN,
    EquilibriumParameters,
)

try:
    from ..data.positions import PositionSet
    from ..data.sampling import VoterPopulation, adoption_mask
except ImportError:
    from data.positions import PositionSet
    from data.sampling import VoterPopulation, adoption_mask

logger = logging.getLogger(__name__)

Ballot = Tuple[str, ...]


@dataclass
class SimulationStep:
    """State of the electorate after one step."""

    step: int
    approval_counts: Dict[str, int]
    winner: str
    viable_candidates: Tuple[str, ...]
    ballot_counts: Dict[Ballot, int]
    mean_ballot_size: float
    thresholds: Tuple[float, ...] = field(repr=False)

    def same_ballots(self, other: "SimulationStep") -> bool:
        """Identical ballot keys with identical counts."""
        return self.ballot_counts == other.ballot_counts

    def to_dict(self, include_thresholds: bool = False) -> Dict:
        data = {
            "step": self.step,
            "approval_counts": dict(self.approval_counts),
            "winner": self.winner,
            "viable_candidates": list(self.viable_candidates),
            "ballot_counts": {
                ">".join(ballot): count for ballot, count in self.ballot_counts.items()
            },
            "mean_ballot_size": self.mean_ballot_size,
        }
        if include_thresholds:
            data["thresholds"] = list(self.thresholds)
        return data


@dataclass
class EquilibriumResult:
    params: EquilibriumParameters
    steps: List[SimulationStep]
    converged: bool

    @property
    def final_step(self) -> SimulationStep:
        return self.steps[-1]

    @property
    def winner(self) -> str:
        return self.final_step.winner

    def to_frame(self) -> pd.DataFrame:
        """One row per step with approval counts per candidate."""
        rows = []
        for step in self.steps:
            row = {
                "step": step.step,
                "winner": step.winner,
                "viable": ",".join(step.viable_candidates),
                "distinct_ballots": len(step.ballot_counts),
                "mean_ballot_size": step.mean_ballot_size,
            }
            row.update(step.approval_counts)
            rows.append(row)
        return pd.DataFrame(rows)

    def to_dict(self, include_thresholds: bool = False) -> Dict:
        return {
            "params": self.params.to_dict(),
            "converged": self.converged,
            "winner": self.winner,
            "steps": [s.to_dict(include_thresholds) for s in self.steps],
        }


class ThresholdEquilibriumSimulator:
    """
    Deterministic strategic approval dynamics for a fixed voter sample.

    The population's seed drives every seeded draw, so identical positions,
    parameters and population always give identical step sequences.
    """

    def __init__(
        self,
        positions: PositionSet,
        params: Optional[EquilibriumParameters] = None,
        population: Optional[VoterPopulation] = None,
    ):
        self.positions = positions
        params = params or EquilibriumParameters()
        if population is None:
            population = VoterPopulation.sample(params.seed, params.voters)
        elif (population.seed, len(population)) != (params.seed, params.voters):
            # Results report the population that actually ran
            logger.info(
                f"Using injected population (seed {population.seed}, "
                f"{len(population)} voters) over seed {params.seed}, "
                f"{params.voters} voters"
            )
            params = replace(params, seed=population.seed, voters=len(population))
        self.params = params
        self.population = population
        self.candidate_ids = positions.ids

        voters = self.population.as_array()
        centers = np.array([positions.position(c) for c in self.candidate_ids])
        # distances[i, j]: voter i to candidate j (original order)
        self.distances = np.abs(voters[:, None] - centers[None, :])
        # Stable sort keeps original order between equidistant candidates
        self.order = np.argsort(self.distances, axis=1, kind="stable")
        self.sorted_distances = np.take_along_axis(self.distances, self.order, axis=1)
        self.sincere = self.population.sincere_mask(self.params.sincere)
        # Ballot codes are base-(n+1) digits of 1-based candidate indices
        n = len(self.candidate_ids)
        self._code_base = n + 1
        self._digit_weights = self._code_base ** np.arange(n, dtype=np.int64)

    @property
    def voter_count(self) -> int:
        return len(self.population)

    def approval_mask(self, thresholds: np.ndarray) -> np.ndarray:
        """Approvals in each voter's nearest-first order, shape (voters, candidates)."""
        within = self.sorted_distances <= thresholds[:, None]
        if self.params.basic:
            within[:, 0] = True
            within[:, -1] = False
        return within

    def ballot_codes(self, mask: np.ndarray) -> np.ndarray:
        """
        Encode every voter's ballot as one integer, 0 for an empty ballot.

        The k-th approved candidate (nearest first) contributes
        ``(index + 1) * base**k``, so equal codes mean equal ordered ballots.
        """
        slots = np.cumsum(mask, axis=1) - 1
        digits = np.where(mask, self.order + 1, 0)
        weights = self._digit_weights[np.clip(slots, 0, None)]
        return (digits * weights).sum(axis=1)

    def decode_ballot(self, code: int) -> Ballot:
        ballot = []
        while code:
            code, digit = divmod(code, self._code_base)
            ballot.append(self.candidate_ids[digit - 1])
        return tuple(ballot)

    def ballot_multiset(self, mask: np.ndarray) -> Dict[Ballot, int]:
        """Non-empty ballots and their counts, in first-seen voter order."""
        codes = self.ballot_codes(mask)
        unique, first_seen, counts = np.unique(
            codes, return_index=True, return_counts=True
        )
        ballots = {}
        for i in np.argsort(first_seen, kind="stable"):
            if unique[i] != 0:
                ballots[self.decode_ballot(int(unique[i]))] = int(counts[i])
        return ballots

    def compute_step(self, step: int, thresholds: np.ndarray) -> SimulationStep:
        mask = self.approval_mask(thresholds)
        ballots = self.ballot_multiset(mask)

        approved = np.zeros_like(mask)
        np.put_along_axis(approved, self.order, mask, axis=1)
        totals = approved.sum(axis=0)
        counts = {c: int(totals[j]) for j, c in enumerate(self.candidate_ids)}

        winner = max(self.candidate_ids, key=lambda c: counts[c])
        floor = counts[winner] * (1 - VIABILITY_MARGIN)
        viable = tuple(c for c in self.candidate_ids if counts[c] >= floor)

        return SimulationStep(
            step=step,
            approval_counts=counts,
            winner=winner,
            viable_candidates=viable,
            ballot_counts=dict(ballots),
            mean_ballot_size=float(mask.sum()) / self.voter_count,
            thresholds=tuple(thresholds.tolist()),
        )

    def propose_thresholds(self, viable: Tuple[str, ...]) -> np.ndarray:
        """Strategic radius every voter would like to use next step."""
        tau0 = self.params.threshold
        d_far = self.sorted_distances[:, -1]
        viable_idx = [self.candidate_ids.index(c) for c in viable]

        if len(viable_idx) == 1:
            f = viable_idx[0]
            d_f = self.distances[:, f]
            nearest_is_f = self.order[:, 0] == f
            # Bullet vote on the frontrunner is not clamped against the farthest
            return np.where(
                nearest_is_f,
                d_f + STEP_EPSILON,
                np.where(
                    d_f <= tau0,
                    np.minimum(d_f + STEP_EPSILON, d_far - STEP_EPSILON),
                    np.minimum(d_f - STEP_EPSILON, d_far - STEP_EPSILON),
                ),
            )

        d_nearest_viable = self.distances[:, viable_idx].min(axis=1)
        return np.minimum(d_nearest_viable + STEP_EPSILON, d_far - STEP_EPSILON)

    def next_thresholds(
        self, step: int, previous: np.ndarray, proposed: np.ndarray
    ) -> np.ndarray:
        adopt = adoption_mask(
            self.population.seed, step, self.voter_count, self.params.rate
        )
        thresholds = np.where(adopt, proposed, previous)
        thresholds[self.sincere] = self.params.threshold
        return thresholds

    def run(self) -> EquilibriumResult:
        """
        Run the simulation to equilibrium or to the step cap.

        Returns:
            EquilibriumResult holding every computed step, step 0 first
        """
        logger.info(
            f"Starting threshold equilibrium: {self.voter_count} voters, "
            f"seed {self.population.seed}, {len(self.candidate_ids)} candidates"
        )
        thresholds = np.full(self.voter_count, self.params.threshold, dtype=float)
        steps = [self.compute_step(0, thresholds)]

        if self.sincere.all():
            logger.info("All voters are sincere; equilibrium reached at step 0")
            return EquilibriumResult(self.params, steps, converged=True)

        converged = False
        for step in range(1, STEP_CAP + 1):
            previous = steps[-1]
            proposed = self.propose_thresholds(previous.viable_candidates)
            thresholds = self.next_thresholds(step, thresholds, proposed)
            current = self.compute_step(step, thresholds)
            steps.append(current)
            logger.debug(
                f"Step {step}: winner {current.winner}, "
                f"viable {current.viable_candidates}, "
                f"{len(current.ballot_counts)} distinct ballots"
            )

            if current.same_ballots(previous):
                converged = True
                logger.info(f"Equilibrium reached at step {step}")
                break
        else:
            logger.warning(f"No equilibrium after {STEP_CAP} steps")

        return EquilibriumResult(self.params, steps, converged=converged)
