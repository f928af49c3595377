"""
Auction Engine - Owner-controlled, multi-winner ascending auction.

This module implements the auction state machine:
1. Open Phase: bidders raise the highest bid by more than the increment
2. Close: the owner ends the auction before expiry; winners are selected
3. Withdraw: the owner collects the escrowed value at any time

Every operation runs under the auction's own lock and checks all of its
preconditions before touching state, so a rejected call changes nothing.
Bids are escrowed on the ledger inside the same critical section: the
bid is recorded only once the hold succeeded.
"""

import threading
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple

from mwa.core.auction.events import (
    AuctionEnded,
    AuctionEvent,
    BidPlaced,
    DurationIncreased,
    EventSink,
    FundsWithdrawn,
    LoggingEventSink,
)
from mwa.core.auction.selection import BidRecord, select_winners
from mwa.core.config import AuctionConfig
from mwa.core.errors import (
    AlreadyEnded,
    AuctionClosed,
    AuctionExpired,
    BidTooLow,
    EscrowFailed,
    InvalidArgument,
    NotOwner,
)
from mwa.core.ledger import EscrowLedger, Ledger
from mwa.crypto import bytes_to_hex, derive_auction_id
from mwa.utils.logger import get_logger
from mwa.utils.validation import (
    MAX_AMOUNT,
    MAX_TIMESTAMP,
    checked_add,
    require,
    validate_amount,
    validate_integer,
    validate_participant,
    validate_timestamp,
)

logger = get_logger("auction")


class AuctionPhase(IntEnum):
    """Lifecycle phase. OPEN -> CLOSED only."""
    OPEN = 0
    CLOSED = 1


class Auction:
    """
    A single multi-winner auction.

    Attributes (read-only):
        auction_id: 32-byte deterministic id
        owner: participant allowed to close, extend and withdraw
        phase: current AuctionPhase
        highest_bid: best accepted amount so far (0 if none)
        expiry: first instant at which the auction no longer accepts calls
        winners / winning_amounts: set once, at close
    """

    def __init__(
        self,
        owner: Any,
        config: Optional[AuctionConfig] = None,
        opened_at: int = 0,
        ledger: Optional[Ledger] = None,
        sink: Optional[EventSink] = None,
        nonce: int = 0,
    ):
        """
        Args:
            owner: Seller identifier
            config: Fixed auction parameters (defaults to AuctionConfig())
            opened_at: Creation time in seconds
            ledger: Escrow collaborator (defaults to a fresh EscrowLedger)
            sink: Event sink (defaults to LoggingEventSink)
            nonce: Disambiguates otherwise identical auctions in the id

        Raises:
            InvalidArgument: bad owner or opened_at
            ArithmeticOverflow: opened_at + duration overflows
        """
        require(validate_participant(owner, "owner"))
        require(validate_timestamp(opened_at, "opened_at"))

        self.config = config or AuctionConfig()
        self.ledger = ledger if ledger is not None else EscrowLedger()
        self.sink = sink if sink is not None else LoggingEventSink()

        self._owner = owner
        self._opened_at = opened_at
        self._expiry = checked_add(opened_at, self.config.duration, MAX_TIMESTAMP, "expiry")
        self._phase = AuctionPhase.OPEN

        self._highest_bid = 0
        self._bids_by_participant: Dict[Any, int] = {}
        self._bid_history: List[BidRecord] = []
        self._winners: Optional[Tuple[BidRecord, ...]] = None

        self._lock = threading.RLock()

        self.auction_id = derive_auction_id(
            owner=owner,
            opened_at=opened_at,
            duration=self.config.duration,
            num_winners=self.config.num_winners,
            bid_increment=self.config.bid_increment,
            nonce=nonce,
        )

        logger.info(
            f"Auction {self.short_id} opened by {owner}: expiry={self._expiry}, "
            f"num_winners={self.num_winners}, bid_increment={self.bid_increment}"
        )

    # =========================================================================
    # Read Surface
    # =========================================================================

    @property
    def short_id(self) -> str:
        return bytes_to_hex(self.auction_id)[:10]

    @property
    def owner(self) -> Any:
        return self._owner

    @property
    def opened_at(self) -> int:
        return self._opened_at

    @property
    def expiry(self) -> int:
        return self._expiry

    @property
    def duration(self) -> int:
        """Current span between opening and expiry (grows with extensions)."""
        return self._expiry - self._opened_at

    @property
    def num_winners(self) -> int:
        return self.config.num_winners

    @property
    def bid_increment(self) -> int:
        return self.config.bid_increment

    @property
    def phase(self) -> AuctionPhase:
        return self._phase

    @property
    def is_open(self) -> bool:
        return self._phase == AuctionPhase.OPEN

    @property
    def highest_bid(self) -> int:
        return self._highest_bid

    @property
    def bids_by_participant(self) -> Dict[Any, int]:
        with self._lock:
            return dict(self._bids_by_participant)

    @property
    def bid_history(self) -> Tuple[BidRecord, ...]:
        with self._lock:
            return tuple(self._bid_history)

    @property
    def winners(self) -> Tuple[Any, ...]:
        """Winning participants, best first. Empty before close."""
        return tuple(bid.participant for bid in self._winners or ())

    @property
    def winning_amounts(self) -> Tuple[int, ...]:
        """Amounts matching winners position by position."""
        return tuple(bid.amount for bid in self._winners or ())

    def bid_of(self, participant: Any) -> int:
        """Latest accepted amount for a participant (0 if none)."""
        return self._bids_by_participant.get(participant, 0)

    def results(self) -> List[Tuple[Any, int]]:
        """(participant, amount) pairs of the winners, best first."""
        return list(zip(self.winners, self.winning_amounts))

    def is_expired(self, now: int) -> bool:
        return now >= self._expiry

    # =========================================================================
    # Guards
    # =========================================================================

    def _require_owner(self, caller: Any, operation: str) -> None:
        if caller != self._owner:
            logger.warning(f"Auction {self.short_id}: {operation} rejected for non-owner {caller}")
            raise NotOwner(caller, operation)

    def _require_open(self) -> None:
        if self._phase != AuctionPhase.OPEN:
            raise AuctionClosed(f"Auction {self.short_id} is closed")

    def _require_not_expired(self, now: int) -> None:
        if now >= self._expiry:
            raise AuctionExpired(now, self._expiry)

    def _emit(self, event: AuctionEvent) -> None:
        # Called under the lock so sinks see events in commit order.
        # State is already committed; a failing sink must not undo it
        try:
            self.sink.emit(event)
        except Exception:
            logger.exception(f"Auction {self.short_id}: event sink failed on {event.name}")

    # =========================================================================
    # Bidding
    # =========================================================================

    def place_bid(self, participant: Any, amount: int, now: int) -> BidRecord:
        """
        Place a bid.

        The amount must strictly exceed highest_bid + bid_increment. Its
        value is held on the ledger before the bid is recorded.

        A closed or expired auction rejects the bid before the amount is
        even looked at.

        Args:
            participant: Bidder identifier
            amount: Bid amount (uint256)
            now: Current time in seconds

        Returns:
            The accepted BidRecord

        Raises:
            InvalidArgument: malformed participant, amount or now
            AuctionClosed: auction already ended
            AuctionExpired: now >= expiry
            ArithmeticOverflow: highest_bid + bid_increment overflows
            BidTooLow: amount <= highest_bid + bid_increment
            EscrowFailed: the ledger refused to hold the value
        """
        require(validate_participant(participant))
        require(validate_timestamp(now))

        with self._lock:
            self._require_open()
            self._require_not_expired(now)
            require(validate_amount(amount))

            minimum = checked_add(self._highest_bid, self.bid_increment, MAX_AMOUNT, "bid increment")
            if amount <= minimum:
                logger.debug(f"Auction {self.short_id}: bid {amount} from {participant} too low (needs > {minimum})")
                raise BidTooLow(amount, minimum)

            try:
                held = self.ledger.hold_value(participant, amount)
            except Exception as exc:
                logger.warning(f"Auction {self.short_id}: escrow error for {participant}: {exc}")
                raise EscrowFailed(f"Could not hold {amount} for {participant}: {exc}") from exc
            if not held:
                logger.warning(f"Auction {self.short_id}: escrow refused {amount} for {participant}")
                raise EscrowFailed(f"Could not hold {amount} for {participant}")

            record = BidRecord(participant=participant, amount=amount, sequence=len(self._bid_history))
            self._highest_bid = amount
            self._bids_by_participant[participant] = amount
            self._bid_history.append(record)

            logger.debug(f"Auction {self.short_id}: bid #{record.sequence} {amount} from {participant}")
            self._emit(BidPlaced(auction_id=self.auction_id, participant=participant, amount=amount))
        return record

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def end_auction(self, caller: Any, now: int) -> Tuple[Any, ...]:
        """
        Close the auction and select the winners.

        Only the owner may end, and only before expiry.

        Returns:
            Winning participants, best first

        Raises:
            NotOwner: caller is not the owner
            AlreadyEnded: winners were already decided
            AuctionExpired: now >= expiry
        """
        require(validate_timestamp(now))

        with self._lock:
            self._require_owner(caller, "end_auction")
            if self._winners is not None or self._phase != AuctionPhase.OPEN:
                raise AlreadyEnded(f"Auction {self.short_id} has already ended")
            self._require_not_expired(now)

            self._winners = tuple(select_winners(self._bid_history, self.num_winners))
            self._phase = AuctionPhase.CLOSED
            winners, amounts = self.winners, self.winning_amounts

            logger.info(
                f"Auction {self.short_id} ended at {now}: "
                f"{len(winners)} winner(s) from {len(self._bids_by_participant)} bidder(s)"
            )
            self._emit(AuctionEnded(auction_id=self.auction_id, winners=winners, winning_amounts=amounts))
        return winners

    def increase_duration(self, caller: Any, now: int, extra_seconds: int) -> int:
        """
        Push the expiry out by extra_seconds.

        Returns:
            The new expiry

        Raises:
            NotOwner: caller is not the owner
            AuctionClosed: auction already ended
            AuctionExpired: now >= expiry
            InvalidArgument: extra_seconds is negative or not an int
            ArithmeticOverflow: expiry + extra_seconds overflows
        """
        require(validate_timestamp(now))

        with self._lock:
            self._require_owner(caller, "increase_duration")
            self._require_open()
            self._require_not_expired(now)
            require(validate_integer(extra_seconds, "extra_seconds", 0, MAX_TIMESTAMP))

            old_expiry = self._expiry
            self._expiry = checked_add(old_expiry, extra_seconds, MAX_TIMESTAMP, "expiry")
            new_expiry = self._expiry

            logger.info(f"Auction {self.short_id}: expiry {old_expiry} -> {new_expiry}")
            self._emit(DurationIncreased(auction_id=self.auction_id, old_expiry=old_expiry, new_expiry=new_expiry))
        return new_expiry

    def withdraw(self, caller: Any) -> int:
        """
        Move everything held in escrow to the owner.

        Allowed in any phase. A repeat call moves whatever arrived since
        (usually 0).

        Returns:
            Amount transferred

        Raises:
            NotOwner: caller is not the owner
            TransferFailed: propagated from the ledger
        """
        with self._lock:
            self._require_owner(caller, "withdraw")
            amount = self.ledger.transfer_all(self._owner)

            logger.info(f"Auction {self.short_id}: owner withdrew {amount}")
            self._emit(FundsWithdrawn(auction_id=self.auction_id, owner=self._owner, amount=amount))
        return amount

    # =========================================================================
    # Utility
    # =========================================================================

    def __repr__(self) -> str:
        return (
            f"Auction(id={self.short_id}, phase={self._phase.name}, "
            f"highest_bid={self._highest_bid}, bids={len(self._bid_history)})"
        )

    def stats(self) -> dict:
        """Get auction statistics."""
        with self._lock:
            return {
                "auction_id": bytes_to_hex(self.auction_id),
                "phase": self._phase.name,
                "expiry": self._expiry,
                "num_winners": self.num_winners,
                "bid_increment": self.bid_increment,
                "highest_bid": self._highest_bid,
                "bid_count": len(self._bid_history),
                "bidder_count": len(self._bids_by_participant),
                "escrow_balance": self.ledger.current_balance(),
                "winners": list(self.winners),
                "winning_amounts": list(self.winning_amounts),
            }
