"""
Input Validation - Bounds checking for amounts, timestamps and participants.

Amounts and timestamps are modelled as unsigned 256-bit integers. Python
integers never wrap, so the bounds are enforced here explicitly:
- Out-of-range inputs are rejected as invalid arguments
- Additions that leave the range are rejected as overflows
"""

from collections.abc import Hashable
from typing import Any, Tuple

from mwa.core.errors import ArithmeticOverflow, InvalidArgument

# =============================================================================
# Constants
# =============================================================================

UINT256_MAX = 2**256 - 1

MIN_AMOUNT = 0
MAX_AMOUNT = UINT256_MAX
MIN_TIMESTAMP = 0
MAX_TIMESTAMP = UINT256_MAX


# =============================================================================
# Validation Functions
# =============================================================================


def validate_integer(
    value: Any,
    name: str,
    min_val: int = MIN_AMOUNT,
    max_val: int = MAX_AMOUNT,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        (is_valid, error_message)
    """
    # bool is an int subclass but never a meaningful amount
    if not isinstance(value, int) or isinstance(value, bool):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_amount(value: Any, name: str = "amount") -> Tuple[bool, str]:
    """Validate a uint256 amount."""
    return validate_integer(value, name, MIN_AMOUNT, MAX_AMOUNT)


def validate_timestamp(value: Any, name: str = "now") -> Tuple[bool, str]:
    """Validate a uint256 timestamp (seconds)."""
    return validate_integer(value, name, MIN_TIMESTAMP, MAX_TIMESTAMP)


def validate_participant(value: Any, name: str = "participant") -> Tuple[bool, str]:
    """
    Validate a participant identifier.

    Participants are only ever compared for equality and used as mapping
    keys, so any hashable non-None value is accepted.
    """
    if value is None:
        return False, f"{name} must not be None"

    if not isinstance(value, Hashable):
        return False, f"{name} must be hashable, got {type(value).__name__}"

    return True, ""


def require(result: Tuple[bool, str]) -> None:
    """Raise InvalidArgument if a validation result failed."""
    is_valid, error = result
    if not is_valid:
        raise InvalidArgument(error)


# =============================================================================
# Checked Arithmetic
# =============================================================================


def checked_add(a: int, b: int, limit: int = UINT256_MAX, what: str = "value") -> int:
    """
    Add two non-negative integers, rejecting results above limit.

    Unlike saturating arithmetic this never clamps: an overflow is an error
    the caller must surface.

    Raises:
        ArithmeticOverflow: if a + b > limit
    """
    result = a + b
    if result > limit:
        raise ArithmeticOverflow(f"{what} overflow: {a} + {b} exceeds {limit}")
    return result
