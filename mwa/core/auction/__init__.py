"""
MWA Auction Module.

This module provides the auction core:
- Auction state machine (open -> closed, owner-gated)
- Bid validation with overflow-checked increments
- Deterministic top-N winner selection
- Auction events and sinks
"""

from mwa.core.auction.selection import (
    BidRecord,
    RankedBid,
    collapse_latest,
    compare_bids,
    rank_bids,
    select_winners,
    verify_winners,
)

from mwa.core.auction.events import (
    AuctionEvent,
    BidPlaced,
    AuctionEnded,
    DurationIncreased,
    FundsWithdrawn,
    EventSink,
    EventLog,
    LoggingEventSink,
)

from mwa.core.auction.engine import (
    Auction,
    AuctionPhase,
)

__all__ = [
    # Selection
    "BidRecord",
    "RankedBid",
    "collapse_latest",
    "compare_bids",
    "rank_bids",
    "select_winners",
    "verify_winners",
    # Events
    "AuctionEvent",
    "BidPlaced",
    "AuctionEnded",
    "DurationIncreased",
    "FundsWithdrawn",
    "EventSink",
    "EventLog",
    "LoggingEventSink",
    # Engine
    "Auction",
    "AuctionPhase",
]
