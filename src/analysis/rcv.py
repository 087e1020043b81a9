import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

from .borda import BordaScorer
from .distribution import PreferenceDistribution, PreferenceSegment
from .parameters import MAJORITY, RCV_TIE_TOLERANCE

logger = logging.getLogger(__name__)


@dataclass
class RCVRound:
    """
    One round of ranked-choice tabulation.

    A terminal round carries only ``winner``; the decisive round before it
    carries the full tally with ``eliminated`` set to None.
    """

    round_number: int
    vote_totals: Dict[str, float] = field(default_factory=dict)
    eliminated: Optional[str] = None
    winner: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.winner is not None

    def to_dict(self) -> Dict:
        if self.is_terminal:
            return {"round": self.round_number, "winner": self.winner}
        return {
            "round": self.round_number,
            "votes": dict(self.vote_totals),
            "eliminated": self.eliminated,
        }


class RCVResolver:
    """
    Single-winner instant-runoff tabulation over a preference distribution.

    Ties for last place are broken by the reverse Borda score of the
    unrestricted distribution: the worst-ranked (highest score) goes first.
    """

    def __init__(self, distribution: PreferenceDistribution):
        self.distribution = distribution
        self.borda_scores = BordaScorer(distribution).scores()
        self.rounds: List[RCVRound] = []
        self.eliminated: List[str] = []
        self.winner: Optional[str] = None

    def tally(
        self, segments: List[PreferenceSegment], remaining: List[str]
    ) -> Dict[str, float]:
        """First-choice share of every remaining candidate."""
        votes = {c: 0.0 for c in remaining}
        for segment in segments:
            if segment.ranking:
                votes[segment.ranking[0]] += segment.proportion
        return votes

    def select_elimination(self, votes: Dict[str, float]) -> str:
        min_votes = min(votes.values())
        tied_for_last = [
            c for c, v in votes.items() if abs(v - min_votes) < RCV_TIE_TOLERANCE
        ]
        if len(tied_for_last) == 1:
            return tied_for_last[0]

        max_borda = max(self.borda_scores[c] for c in tied_for_last)
        eliminated = next(c for c in tied_for_last if self.borda_scores[c] == max_borda)
        logger.info(
            f"Tie for last between {tied_for_last}, "
            f"eliminating {eliminated} by reverse Borda score {max_borda:.4f}"
        )
        return eliminated

    def run_rcv_tabulation(self) -> List[RCVRound]:
        """
        Run the complete elimination sequence.

        Returns:
            List of RCVRound objects, the last one recording the winner
        """
        self.rounds = []
        self.eliminated = []
        self.winner = None

        remaining = list(self.distribution.candidate_ids)
        segments = [
            PreferenceSegment(s.ranking, s.proportion) for s in self.distribution
        ]
        round_num = 1

        logger.info(f"Starting RCV tabulation with {len(remaining)} candidates")

        while len(remaining) > 1:
            votes = self.tally(segments, remaining)
            leader = max(remaining, key=lambda c: votes[c])

            if votes[leader] > MAJORITY:
                logger.info(
                    f"Round {round_num}: {leader} wins with {votes[leader]:.4f}"
                )
                self.rounds.append(RCVRound(round_num, votes, eliminated=None))
                self.rounds.append(RCVRound(round_num + 1, winner=leader))
                self.winner = leader
                break

            eliminated = self.select_elimination(votes)
            logger.info(
                f"Round {round_num}: eliminating {eliminated} with {votes[eliminated]:.4f}"
            )
            self.rounds.append(RCVRound(round_num, votes, eliminated=eliminated))
            self.eliminated.append(eliminated)

            remaining = [c for c in remaining if c != eliminated]
            segments = [
                PreferenceSegment(
                    tuple(c for c in s.ranking if c != eliminated), s.proportion
                )
                for s in segments
            ]
            round_num += 1

        if self.winner is None:
            self.winner = remaining[0]
            self.rounds.append(RCVRound(round_num, winner=self.winner))
            logger.info(f"{self.winner} is the sole remaining candidate")

        logger.info(
            f"RCV tabulation complete: winner {self.winner}, "
            f"{len(self.rounds)} rounds recorded"
        )
        return self.rounds

    def get_round_summary(self) -> pd.DataFrame:
        """
        Get summary of all tally rounds as a DataFrame.

        Returns:
            DataFrame with one row per candidate per round
        """
        if not self.rounds:
            return pd.DataFrame()

        summary_data = []
        for round_obj in self.rounds:
            if round_obj.is_terminal:
                continue
            for candidate_id, votes in round_obj.vote_totals.items():
                summary_data.append(
                    {
                        "round": round_obj.round_number,
                        "candidate_id": candidate_id,
                        "votes": votes,
                        "status": self._get_candidate_status(candidate_id, round_obj),
                    }
                )

        return pd.DataFrame(summary_data)

    def _get_candidate_status(self, candidate_id: str, round_obj: RCVRound) -> str:
        """Get the status of a candidate in a given round."""
        if candidate_id == round_obj.eliminated:
            return "eliminated"
        elif round_obj.eliminated is None and candidate_id == self.winner:
            return "elected"
        else:
            return "continuing"

    def to_dict(self) -> Dict:
        if not self.rounds:
            self.run_rcv_tabulation()
        return {
            "rounds": [r.to_dict() for r in self.rounds],
            "winner": self.winner,
            "eliminated": list(self.eliminated),
        }
