"""
Pairwise majority comparisons and Condorcet resolution.
"""

import logging
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, List, Optional

import pandas as pd

from .distribution import PreferenceDistribution
from .parameters import MAJORITY, PAIRWISE_TIE_TOLERANCE

logger = logging.getLogger(__name__)

NO_WINNER = "None"


@dataclass
class PairwiseResult:
    """Head-to-head result of candidates ``a`` and ``b`` (original order)."""

    a: str
    b: str
    share_a: float
    winner: str

    @property
    def share_b(self) -> float:
        return 1.0 - self.share_a

    @property
    def winner_share(self) -> float:
        return max(self.share_a, self.share_b)

    @property
    def score(self) -> str:
        """Winner's share as a percentage with one decimal, e.g. ``65.0%``."""
        return f"{self.winner_share * 100:.1f}%"

    @property
    def matchup(self) -> str:
        return f"{self.a} vs {self.b}"

    def involves(self, candidate_id: str) -> bool:
        return candidate_id in (self.a, self.b)

    def to_dict(self) -> Dict:
        return {
            "matchup": self.matchup,
            "a": self.a,
            "b": self.b,
            "share_a": self.share_a,
            "winner": self.winner,
            "score": self.score,
        }


@dataclass
class CondorcetInfo:
    """Win counts per candidate and the Condorcet winner, if any."""

    wins: Dict[str, int]
    winner: str = NO_WINNER

    @property
    def has_winner(self) -> bool:
        return self.winner != NO_WINNER

    def to_dict(self) -> Dict:
        return {"wins": dict(self.wins), "winner": self.winner}


@dataclass
class MatchupGroup:
    """One candidate's matchups, for the per-candidate pairwise listing."""

    candidate: str
    wins: int
    matchups: List[PairwiseResult] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "candidate": self.candidate,
            "wins": self.wins,
            "matchups": [m.to_dict() for m in self.matchups],
        }


class PairwiseAnalyzer:
    """All two-candidate majority comparisons over a preference distribution."""

    def __init__(self, distribution: PreferenceDistribution):
        self.distribution = distribution
        self._results: Optional[List[PairwiseResult]] = None

    def share(self, a: str, b: str) -> float:
        """Share of voters ranking ``a`` above ``b``."""
        return sum(s.proportion for s in self.distribution if s.prefers(a, b))

    def compare(self, a: str, b: str) -> PairwiseResult:
        share_a = self.share(a, b)
        if abs(share_a - MAJORITY) <= PAIRWISE_TIE_TOLERANCE:
            # Exact tie: the originally-first candidate takes it
            winner = a
        else:
            winner = a if share_a > MAJORITY else b
        return PairwiseResult(a=a, b=b, share_a=share_a, winner=winner)

    def results(self) -> List[PairwiseResult]:
        if self._results is None:
            self._results = [
                self.compare(a, b)
                for a, b in combinations(self.distribution.candidate_ids, 2)
            ]
        return self._results

    def result_for(self, a: str, b: str) -> PairwiseResult:
        for result in self.results():
            if {result.a, result.b} == {a, b}:
                return result
        raise KeyError(f"No matchup between {a} and {b}")

    def grouped_matchups(self) -> List[MatchupGroup]:
        """Each candidate's matchups, strongest candidate first."""
        info = CondorcetResolver(self).resolve()
        ordered = sorted(
            self.distribution.candidate_ids, key=lambda c: -info.wins[c]
        )
        return [
            MatchupGroup(
                candidate=c,
                wins=info.wins[c],
                matchups=[r for r in self.results() if r.involves(c)],
            )
            for c in ordered
        ]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([r.to_dict() for r in self.results()])


class CondorcetResolver:
    """Finds the candidate who beats every other candidate head-to-head."""

    def __init__(self, analyzer: PairwiseAnalyzer):
        self.analyzer = analyzer

    def resolve(self) -> CondorcetInfo:
        candidate_ids = self.analyzer.distribution.candidate_ids
        wins = {c: 0 for c in candidate_ids}
        for result in self.analyzer.results():
            wins[result.winner] += 1

        winner = next(
            (c for c in candidate_ids if wins[c] == len(candidate_ids) - 1),
            NO_WINNER,
        )
        logger.debug(f"Condorcet wins: {wins}, winner: {winner}")
        return CondorcetInfo(wins=wins, winner=winner)
