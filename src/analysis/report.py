"""
Full analysis of one candidate configuration.

Bundles the closed-form evaluations of a PositionSet so the web API, the
CLI and the verifier share one recomputation entry point.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List

from .approval import ApprovalCriticalProfiler, ApprovalProfile
from .borda import BordaScorer
from .distribution import PreferenceDistribution
from .pairwise import CondorcetInfo, CondorcetResolver, PairwiseAnalyzer, PairwiseResult
from .rcv import RCVResolver, RCVRound

try:
    from ..data.positions import PositionSet
except ImportError:
    from data.positions import PositionSet

logger = logging.getLogger(__name__)


@dataclass
class SpatialAnalysis:
    positions: PositionSet
    distribution: PreferenceDistribution
    pairwise: List[PairwiseResult]
    condorcet: CondorcetInfo
    borda_scores: Dict[str, float]
    borda_winner: str
    rcv_rounds: List[RCVRound]
    rcv_winner: str
    approval_profiles: List[ApprovalProfile]

    def to_dict(self) -> Dict:
        return {
            "positions": self.positions.to_dict(),
            "segments": [s.to_dict() for s in self.distribution],
            "regions": [r.to_dict() for r in self.distribution.ranking_regions()],
            "pairwise": [r.to_dict() for r in self.pairwise],
            "condorcet": self.condorcet.to_dict(),
            "borda": {"scores": dict(self.borda_scores), "winner": self.borda_winner},
            "rcv": {
                "rounds": [r.to_dict() for r in self.rcv_rounds],
                "winner": self.rcv_winner,
            },
            "approval": {p.target: p.to_dict() for p in self.approval_profiles},
        }


def analyze_positions(positions: PositionSet) -> SpatialAnalysis:
    """Recompute every closed-form result for a candidate configuration."""
    logger.info(f"Analyzing {positions}")
    distribution = PreferenceDistribution(positions)

    analyzer = PairwiseAnalyzer(distribution)
    borda = BordaScorer(distribution)
    rcv = RCVResolver(distribution)
    rounds = rcv.run_rcv_tabulation()

    return SpatialAnalysis(
        positions=positions,
        distribution=distribution,
        pairwise=analyzer.results(),
        condorcet=CondorcetResolver(analyzer).resolve(),
        borda_scores=borda.scores(),
        borda_winner=borda.winner(),
        rcv_rounds=rounds,
        rcv_winner=rcv.winner,
        approval_profiles=ApprovalCriticalProfiler(distribution).profiles(),
    )
