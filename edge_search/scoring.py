"""
Best-match selection and ranking over gallery distances.

Selection is an ordered scan with a running minimum: the first gallery
entry reaching the minimum distance wins, so ties always resolve to the
lowest index. An empty gallery yields no match (None) rather than an
error.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    """A gallery entry and its distance to the query."""

    index: int
    identifier: str
    distance: float

    @property
    def number(self) -> int:
        """1-based gallery position, as reported to users."""
        return self.index + 1


def select_best_match(distances: Sequence[float],
                      identifiers: Sequence[str]) -> Optional[MatchResult]:
    """
    Pick the minimum-distance gallery entry.

    Args:
        distances: One distance per gallery entry, in gallery order.
        identifiers: Gallery identifiers, same order and length.

    Returns:
        MatchResult for the first entry with the smallest distance,
        or None if the gallery is empty.
    """
    if len(distances) != len(identifiers):
        raise ValueError(
            f"{len(distances)} distances for {len(identifiers)} identifiers"
        )

    best_index = None
    min_distance = float("inf")

    for i, distance in enumerate(distances):
        if best_index is None or distance < min_distance:
            min_distance = float(distance)
            best_index = i

    if best_index is None:
        return None
    return MatchResult(best_index, identifiers[best_index], min_distance)


def rank_results(distances: Sequence[float],
                 identifiers: Sequence[str],
                 top_k: int = None) -> List[MatchResult]:
    """
    Sort every gallery entry by distance (ascending), then by index.

    Args:
        distances: One distance per gallery entry, in gallery order.
        identifiers: Gallery identifiers, same order and length.
        top_k: Keep only the first top_k entries (all if None).

    Returns:
        List of MatchResult, closest first.
    """
    results = [
        MatchResult(i, identifier, float(distance))
        for i, (identifier, distance) in enumerate(zip(identifiers, distances))
    ]
    results.sort(key=lambda r: (r.distance, r.index))
    if top_k is not None:
        results = results[:top_k]
    return results


def format_match(result: Optional[MatchResult]) -> str:
    """One-line human readable report for a match result."""
    if result is None:
        return "No match found: the gallery is empty"
    return (
        f"Query matches image #{result.number} ({result.identifier}), "
        f"distance {result.distance:.4f}"
    )
