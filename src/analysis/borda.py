"""
Reverse Borda scoring (1 point for 1st, 2 for 2nd, ...; lower is better).

Used as the elimination tie-break in ranked-choice tabulation.
"""

from typing import Dict

from .distribution import PreferenceDistribution


class BordaScorer:
    def __init__(self, distribution: PreferenceDistribution):
        self.distribution = distribution
        self._scores = None

    def scores(self) -> Dict[str, float]:
        if self._scores is None:
            scores = {c: 0.0 for c in self.distribution.candidate_ids}
            for segment in self.distribution:
                for rank, candidate_id in enumerate(segment.ranking, 1):
                    scores[candidate_id] += rank * segment.proportion
            self._scores = scores
        return dict(self._scores)

    def winner(self) -> str:
        """Lowest score; ties go to the originally-first candidate."""
        scores = self.scores()
        return min(self.distribution.candidate_ids, key=lambda c: scores[c])

    def to_dict(self) -> Dict:
        return {"scores": self.scores(), "winner": self.winner()}
