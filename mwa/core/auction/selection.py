"""
Selection - Deterministic top-N winner selection for MWA.

This module turns an auction's bid history into its ordered winners:
- Collapse: one candidate per participant, their latest accepted bid
- Ranking: amount descending, then acceptance order ascending
- Selection: the first min(num_winners, candidates) ranked entries

Ties in amount are broken by sequence index (earlier acceptance wins),
never by participant identity, so no identifier space is favoured and
repeated runs over the same history give the same answer.

Everything here is pure: no state, no I/O beyond debug logging.
"""

import heapq
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from mwa.core.errors import InvalidArgument
from mwa.utils.logger import get_logger

logger = get_logger("selection")


# =============================================================================
# Data Structures
# =============================================================================


@dataclass(frozen=True)
class BidRecord:
    """
    An accepted bid.

    sequence is the bid's position in the auction history and is the
    tie-break key.
    """
    participant: Any
    amount: int
    sequence: int

    def rank_key(self) -> Tuple[int, int]:
        """Sort key: higher amount first, then earlier sequence."""
        return (-self.amount, self.sequence)


@dataclass(frozen=True)
class RankedBid:
    """A candidate with its rank position (0 = best)."""
    rank: int
    bid: BidRecord


# =============================================================================
# Candidate Pool
# =============================================================================


def collapse_latest(history: Iterable[BidRecord]) -> List[BidRecord]:
    """
    Reduce a history to each participant's latest record.

    A repeat bid supersedes the participant's earlier one; amounts are
    never summed. The result is in first-appearance order of the
    participants.
    """
    latest: Dict[Any, BidRecord] = {}
    for record in history:
        latest[record.participant] = record
    return list(latest.values())


# =============================================================================
# Comparison
# =============================================================================


def compare_bids(bid_a: BidRecord, bid_b: BidRecord) -> int:
    """
    Compare two candidates.

    Uses lexicographic ordering: (amount, -sequence)

    Returns:
        -1 if bid_a ranks below bid_b (bid_b wins)
         0 if they are the same candidate position
        +1 if bid_a ranks above bid_b (bid_a wins)
    """
    if bid_a.amount > bid_b.amount:
        return 1
    if bid_a.amount < bid_b.amount:
        return -1

    # Equal amounts: earlier acceptance wins
    if bid_a.sequence < bid_b.sequence:
        return 1
    if bid_a.sequence > bid_b.sequence:
        return -1

    return 0


# =============================================================================
# Ranking & Selection
# =============================================================================


def rank_bids(history: Iterable[BidRecord]) -> List[RankedBid]:
    """
    Rank all candidates from best to worst.

    Returns:
        RankedBid list, rank 0 first
    """
    candidates = sorted(collapse_latest(history), key=BidRecord.rank_key)
    return [RankedBid(rank=i, bid=bid) for i, bid in enumerate(candidates)]


def select_winners(history: Iterable[BidRecord], num_winners: int) -> List[BidRecord]:
    """
    Select the ordered winners of an auction.

    Args:
        history: Accepted bids in acceptance order
        num_winners: Maximum number of winners (> 0)

    Returns:
        Up to num_winners records, highest bid first. Empty if nobody bid.

    Raises:
        InvalidArgument: if num_winners is not positive
    """
    if isinstance(num_winners, bool) or not isinstance(num_winners, int) or num_winners <= 0:
        raise InvalidArgument(f"num_winners must be a positive int, got {num_winners!r}")

    candidates = collapse_latest(history)
    if not candidates:
        logger.debug("No bids to select winners from")
        return []

    # nsmallest falls back to a full sort when num_winners >= len(candidates)
    winners = heapq.nsmallest(num_winners, candidates, key=BidRecord.rank_key)

    logger.debug(
        f"Selected {len(winners)} of {len(candidates)} candidates, "
        f"top amount {winners[0].amount}"
    )
    return winners


def verify_winners(
    claimed: Sequence[Any],
    history: Iterable[BidRecord],
    num_winners: int,
) -> bool:
    """
    Check that claimed is exactly the ordered winners list.

    Args:
        claimed: Participants in claimed rank order
        history: The auction's bid history
        num_winners: Winner cap used at close

    Returns:
        True if claimed matches select_winners() position by position
    """
    expected = [bid.participant for bid in select_winners(history, num_winners)]
    return list(claimed) == expected


__all__ = [
    "BidRecord",
    "RankedBid",
    "collapse_latest",
    "compare_bids",
    "rank_bids",
    "select_winners",
    "verify_winners",
]
