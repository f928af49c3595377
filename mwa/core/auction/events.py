"""
Events - Notifications emitted by the auction state machine.

Delivery is fire-and-forget: the engine hands each event to its sink
after the state change is committed and does not wait for, or depend
on, any acknowledgement.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple, Type, runtime_checkable

from mwa.crypto import bytes_to_hex
from mwa.utils.logger import get_logger

logger = get_logger("events")


# =============================================================================
# Event Types
# =============================================================================


@dataclass(frozen=True)
class AuctionEvent:
    """Base for all auction notifications."""
    auction_id: bytes

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        """Plain representation for logs and JSON output."""
        data = {"event": self.name, "auction_id": bytes_to_hex(self.auction_id)}
        for key, value in self.__dict__.items():
            if key == "auction_id":
                continue
            data[key] = list(value) if isinstance(value, tuple) else value
        return data


@dataclass(frozen=True)
class BidPlaced(AuctionEvent):
    """A bid was accepted."""
    participant: Any
    amount: int


@dataclass(frozen=True)
class AuctionEnded(AuctionEvent):
    """
    The owner closed the auction.

    winners and winning_amounts have the same length and order
    (index 0 is the highest bid). Both are empty when nobody bid.
    """
    winners: Tuple[Any, ...] = field(default_factory=tuple)
    winning_amounts: Tuple[int, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DurationIncreased(AuctionEvent):
    """The owner pushed the expiry out."""
    old_expiry: int
    new_expiry: int


@dataclass(frozen=True)
class FundsWithdrawn(AuctionEvent):
    """The owner withdrew the escrow balance."""
    owner: Any
    amount: int


# =============================================================================
# Sinks
# =============================================================================


@runtime_checkable
class EventSink(Protocol):
    """Receives auction events."""

    def emit(self, event: AuctionEvent) -> None:
        ...


class LoggingEventSink:
    """Default sink: writes each event to the log."""

    def emit(self, event: AuctionEvent) -> None:
        logger.info(f"{event.name} {event.to_dict()}")


class EventLog:
    """
    Sink that records every event in order.

    Optionally forwards to another sink, so recording and logging can
    be combined.
    """

    def __init__(self, forward: Optional[EventSink] = None):
        self.events: List[AuctionEvent] = []
        self.forward = forward

    def emit(self, event: AuctionEvent) -> None:
        self.events.append(event)
        if self.forward is not None:
            self.forward.emit(event)

    def of_type(self, event_type: Type[AuctionEvent]) -> List[AuctionEvent]:
        """Recorded events of one type, in emission order."""
        return [e for e in self.events if isinstance(e, event_type)]

    def last(self) -> Optional[AuctionEvent]:
        return self.events[-1] if self.events else None

    def clear(self) -> None:
        self.events.clear()

    def __len__(self) -> int:
        return len(self.events)
