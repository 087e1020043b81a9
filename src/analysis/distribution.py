"""
Exact voter preference distribution for candidates on the unit interval.

Voters are spread uniformly over [0, 1] and rank candidates by distance.
Rankings only change at candidate positions and at pairwise midpoints, so
partitioning [0, 1] at those breakpoints yields the exact measure of every
ranking.
"""

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import Dict, List, Tuple

import pandas as pd

from .parameters import SEGMENT_FLOOR

try:
    from ..data.positions import PositionSet
except ImportError:
    from data.positions import PositionSet

logger = logging.getLogger(__name__)

Ranking = Tuple[str, ...]


def format_ranking(ranking: Ranking) -> str:
    return ">".join(ranking)


@dataclass
class PreferenceSegment:
    """A strict ranking (nearest first) and the share of voters holding it."""

    ranking: Ranking
    proportion: float

    @property
    def top(self) -> str:
        return self.ranking[0]

    @property
    def last(self) -> str:
        return self.ranking[-1]

    def prefers(self, a: str, b: str) -> bool:
        return self.ranking.index(a) < self.ranking.index(b)

    def to_dict(self) -> Dict:
        return {"ranking": list(self.ranking), "proportion": self.proportion}


@dataclass
class RankingRegion:
    """Contiguous sub-interval of the axis sharing one ranking."""

    start: float
    end: float
    ranking: Ranking

    def to_dict(self) -> Dict:
        return {"start": self.start, "end": self.end, "ranking": list(self.ranking)}


def breakpoints(positions: PositionSet) -> List[float]:
    """Sorted, deduplicated points where some voter ranking may change."""
    points = {0.0, 1.0}
    values = [positions.position(c) for c in positions.ids]
    points.update(values)
    for p_i, p_j in combinations(values, 2):
        points.add((p_i + p_j) / 2)
    return sorted(points)


class PreferenceDistribution:
    """
    Partition of [0, 1] into maximal ranking classes with their measure.

    Segments sharing a ranking are merged even when their intervals are not
    adjacent; merged segments at or below the numeric floor are dropped.
    """

    def __init__(self, positions: PositionSet):
        self.positions = positions
        self._points = breakpoints(positions)
        self.segments: List[PreferenceSegment] = self._build_segments()

    def _intervals(self):
        for start, end in zip(self._points, self._points[1:]):
            yield start, end, self.positions.rank_by_distance((start + end) / 2)

    def _build_segments(self) -> List[PreferenceSegment]:
        # Insertion order keeps the first-seen order of rankings along the axis
        merged: Dict[Ranking, float] = {}
        for start, end, ranking in self._intervals():
            merged[ranking] = merged.get(ranking, 0.0) + (end - start)

        segments = [
            PreferenceSegment(ranking, proportion)
            for ranking, proportion in merged.items()
            if proportion > SEGMENT_FLOOR
        ]
        logger.debug(
            f"{len(segments)} preference segments from {len(self._points) - 1} intervals"
        )
        return segments

    @property
    def candidate_ids(self) -> Tuple[str, ...]:
        return self.positions.ids

    def ranking_regions(self) -> List[RankingRegion]:
        """Axis regions in left-to-right order; only adjacent intervals are joined."""
        regions: List[RankingRegion] = []
        for start, end, ranking in self._intervals():
            if end <= start:
                continue
            if regions and regions[-1].ranking == ranking:
                regions[-1].end = end
            else:
                regions.append(RankingRegion(start, end, ranking))
        return regions

    def total_proportion(self) -> float:
        return sum(s.proportion for s in self.segments)

    def first_choice_shares(self) -> Dict[str, float]:
        shares = {c: 0.0 for c in self.candidate_ids}
        for segment in self.segments:
            shares[segment.top] += segment.proportion
        return shares

    def to_frame(self) -> pd.DataFrame:
        """Segments as a DataFrame sorted by proportion, largest first."""
        if not self.segments:
            return pd.DataFrame(columns=["ranking", "proportion"])
        frame = pd.DataFrame(
            [
                {"ranking": format_ranking(s.ranking), "proportion": s.proportion}
                for s in self.segments
            ]
        )
        return frame.sort_values("proportion", ascending=False, kind="stable")

    def to_dict(self) -> Dict:
        return {
            "positions": self.positions.to_dict(),
            "segments": [s.to_dict() for s in self.segments],
            "regions": [r.to_dict() for r in self.ranking_regions()],
        }

    def __iter__(self):
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)
