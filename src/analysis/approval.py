"""
Approval voting critical profiles.

A critical profile fixes every voter's approval cutoff at one target
candidate: voters approve from their top choice down through the target,
unless the target is their last choice, in which case they approve only
their top choice.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List

import pandas as pd

from .distribution import PreferenceDistribution

logger = logging.getLogger(__name__)


@dataclass
class ApprovalProfile:
    """Approval measure of every candidate with the cutoff at ``target``."""

    target: str
    approvals: Dict[str, float]
    winner: str

    def to_dict(self) -> Dict:
        return {
            "target": self.target,
            "approvals": dict(self.approvals),
            "winner": self.winner,
        }


class ApprovalCriticalProfiler:
    def __init__(self, distribution: PreferenceDistribution):
        self.distribution = distribution

    def profile(self, target: str) -> ApprovalProfile:
        candidate_ids = self.distribution.candidate_ids
        approvals = {c: 0.0 for c in candidate_ids}

        for segment in self.distribution:
            ranks = segment.ranking
            idx = ranks.index(target)
            if idx == len(ranks) - 1:
                approvals[ranks[0]] += segment.proportion
            else:
                for candidate_id in ranks[: idx + 1]:
                    approvals[candidate_id] += segment.proportion

        winner = max(candidate_ids, key=lambda c: approvals[c])
        return ApprovalProfile(target=target, approvals=approvals, winner=winner)

    def profiles(self) -> List[ApprovalProfile]:
        return [self.profile(c) for c in self.distribution.candidate_ids]

    def to_frame(self) -> pd.DataFrame:
        """One row per (target, candidate) pair."""
        rows = [
            {
                "target": p.target,
                "candidate_id": c,
                "approval": value,
                "is_winner": c == p.winner,
            }
            for p in self.profiles()
            for c, value in p.approvals.items()
        ]
        return pd.DataFrame(rows)

    def to_dict(self) -> Dict:
        return {p.target: p.to_dict() for p in self.profiles()}
