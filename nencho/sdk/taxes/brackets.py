"""Shared helpers for bracket-based tax tables.

A bracket table is an ordered list of (upper_bound, formula) pairs. The
upper bound is inclusive and the last entry uses float('inf'). Tables are
scanned low-to-high and the first bracket whose bound covers the amount
supplies the formula.

All amounts are whole yen. Formulas use integer arithmetic so the floor
operations in the published tables are exact.
"""

from typing import Callable, List, Tuple, Union

Formula = Callable[[int], int]
BracketTable = List[Tuple[Union[int, float], Formula]]


class UnimplementedCalculationError(NotImplementedError):
    """Raised when an amount falls in a range this library does not compute.

    These ranges are deliberate scope limits, not approximations waiting to
    happen. Callers should surface the error rather than guess a value.
    """

    def __init__(self, message: str, amount: int = None):
        self.amount = amount
        super().__init__(message)


def floor_to(amount: int, unit: int) -> int:
    """Truncate down to a multiple of unit (e.g. 1000 or 100 yen).

    Example: floor_to(1234567, 1000) -> 1234000
    """
    return amount // unit * unit


def find_formula(table: BracketTable, amount: int) -> Formula:
    """Return the formula of the first bracket whose upper bound covers amount."""
    for upper_bound, formula in table:
        if amount <= upper_bound:
            return formula
    raise ValueError(f"No bracket covers amount {amount}")


def apply_table(table: BracketTable, amount: int) -> int:
    """Evaluate a bracket table for amount."""
    return find_formula(table, amount)(amount)


def unimplemented(description: str) -> Formula:
    """Build a formula that always raises UnimplementedCalculationError."""

    def _raise(amount: int) -> int:
        raise UnimplementedCalculationError(
            f"Calculation for {amount:,} yen is not implemented ({description})",
            amount=amount,
        )

    return _raise


def require_non_negative(amount: int, name: str) -> None:
    """Reject negative amounts for inputs that can never be negative."""
    if amount < 0:
        raise ValueError(f"{name} must be non-negative, got {amount}")
