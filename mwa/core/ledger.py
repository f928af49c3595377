"""
Ledger - Value custody for auction escrow.

Conceptual Background:
---------------------
The engine never moves value itself. It calls a ledger collaborator:

1. **hold_value**: take a bid's value out of the bidder's account and
   keep it in escrow. Runs inside the auction's critical section, before
   the bid is recorded; a refusal aborts the bid.
2. **transfer_all**: move everything in escrow to a recipient (the owner
   on withdraw). Failure surfaces as TransferFailed.
3. **current_balance**: value currently held in escrow.

EscrowLedger is an in-memory reference implementation with funded
participant accounts. Any object with the same three methods can be
plugged in instead.
"""

import threading
from collections import defaultdict
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from mwa.core.errors import InvalidArgument, TransferFailed
from mwa.utils.logger import get_logger
from mwa.utils.validation import MAX_AMOUNT, checked_add, require, validate_amount

logger = get_logger("ledger")


@runtime_checkable
class Ledger(Protocol):
    """Protocol for escrow collaborators."""

    def hold_value(self, participant: Any, amount: int) -> bool:
        ...

    def transfer_all(self, to: Any) -> int:
        ...

    def current_balance(self) -> int:
        ...


class EscrowLedger:
    """
    In-memory escrow with participant accounts.

    Attributes:
        accounts: participant -> spendable balance
        held: value currently in escrow
        frozen: when set, transfers out of escrow are refused
    """

    def __init__(self, accounts: Optional[Dict[Any, int]] = None):
        self.accounts: Dict[Any, int] = defaultdict(int)
        self.held: int = 0
        self.frozen: bool = False
        self.total_transferred: int = 0
        self._lock = threading.Lock()

        for participant, amount in (accounts or {}).items():
            self.deposit(participant, amount)

    # =========================================================================
    # Accounts
    # =========================================================================

    def deposit(self, participant: Any, amount: int) -> None:
        """Credit a participant's spendable balance."""
        require(validate_amount(amount))
        with self._lock:
            self.accounts[participant] = checked_add(
                self.accounts[participant], amount, MAX_AMOUNT, "balance"
            )
        logger.debug(f"Deposit: participant={participant}, amount={amount}")

    def balance_of(self, participant: Any) -> int:
        """Spendable balance of a participant (escrow excluded)."""
        return self.accounts.get(participant, 0)

    def freeze(self) -> None:
        """Refuse all transfers out of escrow until unfreeze()."""
        self.frozen = True

    def unfreeze(self) -> None:
        self.frozen = False

    # =========================================================================
    # Escrow
    # =========================================================================

    def hold_value(self, participant: Any, amount: int) -> bool:
        """
        Move amount from the participant's account into escrow.

        Returns:
            True if held, False if the participant cannot cover it
        """
        if amount < 0:
            raise InvalidArgument(f"amount must be >= 0, got {amount}")

        with self._lock:
            available = self.accounts.get(participant, 0)
            if available < amount:
                logger.debug(f"Hold refused: participant={participant} has {available}, needs {amount}")
                return False
            if self.held + amount > MAX_AMOUNT:
                return False

            self.accounts[participant] = available - amount
            self.held += amount

        return True

    def transfer_all(self, to: Any) -> int:
        """
        Move the whole escrow balance to a recipient.

        Returns:
            Amount moved (0 when escrow is empty)

        Raises:
            TransferFailed: if the ledger is frozen or the recipient
                balance would overflow
        """
        with self._lock:
            if self.frozen:
                raise TransferFailed("Ledger is frozen")

            amount = self.held
            if self.accounts.get(to, 0) + amount > MAX_AMOUNT:
                raise TransferFailed(f"Recipient balance overflow for {to}")

            self.accounts[to] += amount
            self.held = 0
            self.total_transferred += amount

        if amount:
            logger.info(f"Transferred {amount} from escrow to {to}")
        return amount

    def current_balance(self) -> int:
        """Value currently held in escrow."""
        return self.held

    # =========================================================================
    # Utility
    # =========================================================================

    def __repr__(self) -> str:
        return f"EscrowLedger(held={self.held}, accounts={len(self.accounts)})"

    def stats(self) -> dict:
        """Get ledger statistics."""
        return {
            "held": self.held,
            "accounts": len(self.accounts),
            "total_spendable": sum(self.accounts.values()),
            "total_transferred": self.total_transferred,
            "frozen": self.frozen,
        }
