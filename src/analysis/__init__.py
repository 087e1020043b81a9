"""
Analysis module for single-peaked spatial electorates.

This module derives exact voter preference distributions from candidate
positions and evaluates voting rules and simulations on them:
- PreferenceDistribution: exact ranking segments of the unit interval
- PairwiseAnalyzer / CondorcetResolver: head-to-head majorities
- BordaScorer: reverse Borda scores (elimination tie-break)
- RCVResolver: instant-runoff elimination
- ApprovalCriticalProfiler: approval profiles with the cutoff at each candidate
- MonteCarloApprovalSimulator: stochastic approval trials
- ThresholdEquilibriumSimulator: seeded strategic approval dynamics
"""

from .approval import ApprovalCriticalProfiler, ApprovalProfile
from .borda import BordaScorer
from .distribution import PreferenceDistribution, PreferenceSegment, RankingRegion
from .equilibrium import (
    EquilibriumResult,
    SimulationStep,
    ThresholdEquilibriumSimulator,
)
from .monte_carlo import MonteCarloApprovalSimulator, MonteCarloResult
from .pairwise import (
    NO_WINNER,
    CondorcetInfo,
    CondorcetResolver,
    PairwiseAnalyzer,
    PairwiseResult,
)
from .parameters import EquilibriumParameters, MonteCarloParameters
from .rcv import RCVResolver, RCVRound
from .report import SpatialAnalysis, analyze_positions
from .verification import ResultsVerifier

__all__ = [
    "PreferenceDistribution",
    "PreferenceSegment",
    "RankingRegion",
    "PairwiseAnalyzer",
    "PairwiseResult",
    "CondorcetResolver",
    "CondorcetInfo",
    "NO_WINNER",
    "BordaScorer",
    "RCVResolver",
    "RCVRound",
    "ApprovalCriticalProfiler",
    "ApprovalProfile",
    "MonteCarloApprovalSimulator",
    "MonteCarloResult",
    "MonteCarloParameters",
    "ThresholdEquilibriumSimulator",
    "EquilibriumParameters",
    "EquilibriumResult",
    "SimulationStep",
    "SpatialAnalysis",
    "analyze_positions",
    "ResultsVerifier",
]
