"""
Auction House - Registry of independent auctions.

Manages many auctions side by side:
- Creation with deterministic ids
- Routing of bids and owner operations, stamped by the house clock
- Aggregate statistics

Auctions share no state with each other; each one serializes its own
operations. The house lock only protects the registry itself.
"""

import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from mwa.core.auction import Auction, BidRecord, EventSink
from mwa.core.clock import Clock, SystemClock
from mwa.core.config import AuctionConfig
from mwa.core.errors import AuctionNotFound, InvalidArgument
from mwa.core.ledger import EscrowLedger, Ledger
from mwa.crypto import bytes_to_hex
from mwa.utils.logger import get_logger

logger = get_logger("house")


class AuctionHouse:
    """
    Manages all auctions.

    Handles auction creation, lookup and call routing.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        ledger_factory: Callable[[], Ledger] = EscrowLedger,
        sink: Optional[EventSink] = None,
    ):
        self.clock = clock or SystemClock()
        self.ledger_factory = ledger_factory
        self.sink = sink

        # auction_id -> Auction
        self.auctions: Dict[bytes, Auction] = {}

        self._nonce = 0
        self._lock = threading.Lock()

    # =========================================================================
    # Registry
    # =========================================================================

    def create_auction(
        self,
        owner: Any,
        config: Optional[AuctionConfig] = None,
        ledger: Optional[Ledger] = None,
    ) -> Auction:
        """
        Open a new auction at the current clock time.

        Args:
            owner: Seller identifier
            config: Auction parameters
            ledger: Escrow for this auction (defaults to ledger_factory())

        Returns:
            The new Auction
        """
        with self._lock:
            auction = Auction(
                owner=owner,
                config=config,
                opened_at=self.clock.now(),
                ledger=ledger if ledger is not None else self.ledger_factory(),
                sink=self.sink,
                nonce=self._nonce,
            )
            if auction.auction_id in self.auctions:
                raise InvalidArgument(f"Auction {auction.short_id} already exists")

            self._nonce += 1
            self.auctions[auction.auction_id] = auction

        return auction

    def get(self, auction_id: bytes) -> Auction:
        """Look up an auction by id."""
        auction = self.auctions.get(auction_id)
        if auction is None:
            raise AuctionNotFound(f"Auction {bytes_to_hex(auction_id)[:10]} not found")
        return auction

    def __contains__(self, auction_id: bytes) -> bool:
        return auction_id in self.auctions

    def __len__(self) -> int:
        return len(self.auctions)

    def open_auctions(self) -> List[Auction]:
        """Auctions still open and not yet expired."""
        now = self.clock.now()
        return [a for a in self._snapshot() if a.is_open and not a.is_expired(now)]

    def _snapshot(self) -> List[Auction]:
        with self._lock:
            return list(self.auctions.values())

    # =========================================================================
    # Routing
    # =========================================================================

    def place_bid(self, auction_id: bytes, participant: Any, amount: int) -> BidRecord:
        return self.get(auction_id).place_bid(participant, amount, self.clock.now())

    def end_auction(self, auction_id: bytes, caller: Any) -> Tuple[Any, ...]:
        return self.get(auction_id).end_auction(caller, self.clock.now())

    def increase_duration(self, auction_id: bytes, caller: Any, extra_seconds: int) -> int:
        return self.get(auction_id).increase_duration(caller, self.clock.now(), extra_seconds)

    def withdraw(self, auction_id: bytes, caller: Any) -> int:
        return self.get(auction_id).withdraw(caller)

    # =========================================================================
    # Stats
    # =========================================================================

    def stats(self) -> dict:
        """Get house statistics."""
        auctions = self._snapshot()
        now = self.clock.now()
        return {
            "auctions": len(auctions),
            "open_auctions": sum(1 for a in auctions if a.is_open and not a.is_expired(now)),
            "closed_auctions": sum(1 for a in auctions if not a.is_open),
            "total_bids": sum(len(a.bid_history) for a in auctions),
            "total_escrowed": sum(a.ledger.current_balance() for a in auctions),
        }
