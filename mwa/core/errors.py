"""
Errors - Rejection taxonomy for auction operations.

Every error is raised before any state is touched: a rejected call
leaves the auction exactly as it found it. Nothing here is retried
by the engine; callers decide what to do next.
"""

from typing import Any


class AuctionError(Exception):
    """Base class for all auction rejections."""


class NotOwner(AuctionError):
    """Caller lacks authority for an owner-only operation."""

    def __init__(self, caller: Any, operation: str):
        self.caller = caller
        self.operation = operation
        super().__init__(f"{operation} is restricted to the auction owner")


class AuctionExpired(AuctionError):
    """Operation attempted at or after the auction expiry."""

    def __init__(self, now: int, expiry: int):
        self.now = now
        self.expiry = expiry
        super().__init__(f"Auction expired at {expiry} (now={now})")


class AuctionClosed(AuctionError):
    """Open-phase operation attempted after the auction was closed."""


class AlreadyEnded(AuctionClosed):
    """end_auction called on an auction whose winners are already decided."""


class BidTooLow(AuctionError):
    """Bid does not exceed highest_bid + bid_increment."""

    def __init__(self, amount: int, minimum: int):
        self.amount = amount
        self.minimum = minimum
        super().__init__(f"Bid {amount} must exceed {minimum}")


class ArithmeticOverflow(AuctionError):
    """Addition would overflow the 256-bit amount or time type."""


class TransferFailed(AuctionError):
    """Ledger could not move the held value."""


class EscrowFailed(AuctionError):
    """Ledger could not hold the value attached to a bid."""


class InvalidArgument(AuctionError, ValueError):
    """Malformed input: negative amount, out-of-range time, bad count."""


class AuctionNotFound(AuctionError, KeyError):
    """No auction registered under the requested id."""

    def __str__(self) -> str:
        return Exception.__str__(self)


__all__ = [
    "AuctionError",
    "NotOwner",
    "AuctionExpired",
    "AuctionClosed",
    "AlreadyEnded",
    "BidTooLow",
    "ArithmeticOverflow",
    "TransferFailed",
    "EscrowFailed",
    "InvalidArgument",
    "AuctionNotFound",
]
