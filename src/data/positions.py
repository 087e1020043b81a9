"""
Candidate positions on the unit ideological axis.

A PositionSet is the only input the analysis engine needs: an explicit
ordered list of candidate ids paired with a keyed position lookup. The
order of the ids is the "original candidate order" used for every
deterministic tie-break downstream.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

MIN_CANDIDATES = 2
MAX_CANDIDATES = 4

# Bounds used by collaborators when clamping raw user input
CLAMP_LOWER = 0.01
CLAMP_UPPER = 0.99

DEFAULT_CANDIDATE_IDS = ("C1", "C2", "C3", "C4")


@dataclass(frozen=True)
class Candidate:
    """A candidate identifier and its position on [0, 1]."""

    candidate_id: str
    position: float


class PositionSet:
    """
    Ordered set of 2-4 candidates with positions strictly inside (0, 1).

    Positions do not need to be sorted or distinct. Invalid input is a
    programming error of the caller and raises ValueError.
    """

    def __init__(self, candidates: Iterable[Tuple[str, float]]):
        """
        Initialize a position set.

        Args:
            candidates: (candidate_id, position) pairs in original order
        """
        ordered: List[str] = []
        lookup: Dict[str, float] = {}
        for candidate_id, position in candidates:
            candidate_id = str(candidate_id)
            if candidate_id in lookup:
                raise ValueError(f"Duplicate candidate id: {candidate_id}")
            position = float(position)
            if math.isnan(position) or not 0.0 < position < 1.0:
                raise ValueError(
                    f"Position of {candidate_id} must lie in (0, 1), got {position}"
                )
            ordered.append(candidate_id)
            lookup[candidate_id] = position

        if not MIN_CANDIDATES <= len(ordered) <= MAX_CANDIDATES:
            raise ValueError(
                f"Between {MIN_CANDIDATES} and {MAX_CANDIDATES} candidates required, "
                f"got {len(ordered)}"
            )

        self._ids: Tuple[str, ...] = tuple(ordered)
        self._positions: Dict[str, float] = lookup

    @classmethod
    def from_positions(
        cls, positions: Sequence[float], ids: Optional[Sequence[str]] = None
    ) -> "PositionSet":
        """Build a set from bare positions, naming candidates C1..C4 by default."""
        if ids is None:
            ids = DEFAULT_CANDIDATE_IDS[: len(positions)]
        if len(ids) != len(positions):
            raise ValueError("Number of ids and positions must match")
        return cls(zip(ids, positions))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, float]) -> "PositionSet":
        """Build a set from an id -> position mapping, keeping its order."""
        return cls(mapping.items())

    @property
    def ids(self) -> Tuple[str, ...]:
        return self._ids

    @property
    def candidates(self) -> List[Candidate]:
        return [Candidate(c, self._positions[c]) for c in self._ids]

    def position(self, candidate_id: str) -> float:
        return self._positions[candidate_id]

    def index(self, candidate_id: str) -> int:
        """Original order of a candidate, used as the tie-break key."""
        return self._ids.index(candidate_id)

    def rank_by_distance(self, point: float) -> Tuple[str, ...]:
        """
        Rank candidates by distance from a point, nearest first.

        Equidistant candidates keep their original order (stable sort).
        """
        return tuple(sorted(self._ids, key=lambda c: abs(point - self._positions[c])))

    def to_dict(self) -> Dict[str, float]:
        return {c: self._positions[c] for c in self._ids}

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self):
        return iter(self._ids)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PositionSet):
            return NotImplemented
        return self.to_dict() == other.to_dict() and self._ids == other._ids

    def __hash__(self) -> int:
        return hash(tuple((c, self._positions[c]) for c in self._ids))

    def __repr__(self) -> str:
        inner = ", ".join(f"{c}={self._positions[c]:.3f}" for c in self._ids)
        return f"PositionSet({inner})"


def clamp_position(value: Optional[float]) -> Optional[float]:
    """
    Clamp a raw position supplied by a collaborator.

    Rounds to 2 decimals within [0.01, 0.99]. Missing or NaN values
    return None so the caller can keep its previous value.
    """
    if value is None:
        return None
    value = float(value)
    if math.isnan(value):
        return None
    # Halves round up: 0.125 -> 0.13
    return math.floor(max(CLAMP_LOWER, min(CLAMP_UPPER, value)) * 100 + 0.5) / 100


def positions_from_params(values: Sequence[Optional[float]]) -> PositionSet:
    """
    Build a PositionSet from raw per-slot values (c1..c4), skipping blanks.

    Args:
        values: Raw values in slot order; None marks an unused slot

    Returns:
        PositionSet of the clamped, present values
    """
    pairs = []
    for candidate_id, raw in zip(DEFAULT_CANDIDATE_IDS, values):
        clamped = clamp_position(raw)
        if clamped is not None:
            pairs.append((candidate_id, clamped))
    logger.debug(f"Parsed positions: {pairs}")
    return PositionSet(pairs)
