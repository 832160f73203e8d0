"""Deduction calculations for year-end adjustment.

- Employment income after the standard employment-income deduction
  (給与所得控除後の金額), 2020+ table.
  https://tax.mykomon.com/tool-nen2020.html
- Life insurance deduction for new-style policies (新生命保険料).
  https://www.nta.go.jp/taxes/shiraberu/taxanswer/shotoku/1140.htm
- Total of income deductions (basic + social insurance + life insurance).
"""

from typing import Optional

from .brackets import (
    BracketTable,
    UnimplementedCalculationError,
    apply_table,
    require_non_negative,
)


# Basic deduction (基礎控除) for total income up to 24,000,000 yen.
BASIC_DEDUCTION = 480000
BASIC_DEDUCTION_INCOME_LIMIT = 24000000

LIFE_INSURANCE_DEDUCTION_CAP = 40000


def _per_4000(payment: int) -> int:
    """Round payment down to a 4,000 yen step and quarter it.

    The table divides by 4, truncates to 1,000 yen, then multiplies back up
    by a rate of 2.4 / 2.8 / 3.2.
    """
    return payment // 4000 * 1000


# Format: (payment upper bound inclusive, formula)
EMPLOYMENT_INCOME_TABLE: BracketTable = [
    (550999, lambda p: 0),
    (1618999, lambda p: p - 550000),
    (1619999, lambda p: 1069000),
    (1621999, lambda p: 1070000),
    (1623999, lambda p: 1072000),
    (1627999, lambda p: 1074000),
    (1799999, lambda p: _per_4000(p) * 24 // 10 + 100000),
    (3599999, lambda p: _per_4000(p) * 28 // 10 - 80000),
    (6599999, lambda p: _per_4000(p) * 32 // 10 - 440000),
    (8499999, lambda p: p * 9 // 10 - 1100000),
    (float('inf'), lambda p: p - 1950000),
]

# Format: (premium upper bound inclusive, formula)
LIFE_INSURANCE_TABLE: BracketTable = [
    (20000, lambda p: p),
    (40000, lambda p: p // 2 + 10000),
    (80000, lambda p: p // 4 + 20000),
    (float('inf'), lambda p: LIFE_INSURANCE_DEDUCTION_CAP),
]


def calc_income_after_deduction(payment_amount: int) -> int:
    """Calculate employment income after the standard deduction.

    Args:
        payment_amount: Gross annual payment (支払金額), yen

    Returns:
        Income after the employment-income deduction (給与所得控除後の金額)

    Example:
        calc_income_after_deduction(3000000)  # -> 2020000
    """
    require_non_negative(payment_amount, "payment_amount")
    return apply_table(EMPLOYMENT_INCOME_TABLE, payment_amount)


def calc_life_insurance_deduction(premium_amount: int) -> int:
    """Calculate the life insurance deduction from new-style premiums paid.

    Saturates at 40,000 yen for premiums above 80,000 yen.
    """
    require_non_negative(premium_amount, "premium_amount")
    return apply_table(LIFE_INSURANCE_TABLE, premium_amount)


def check_basic_deduction_limit(payment_amount: Optional[int]) -> None:
    """Raise if payment_amount is above the basic deduction income limit."""
    if payment_amount is not None and payment_amount > BASIC_DEDUCTION_INCOME_LIMIT:
        raise UnimplementedCalculationError(
            f"Total deduction for payments above {BASIC_DEDUCTION_INCOME_LIMIT:,} yen "
            f"is not implemented (got {payment_amount:,})",
            amount=payment_amount,
        )


def calc_total_deduction(
    social_insurance_amount: int,
    life_insurance_deduction_amount: Optional[int] = None,
    payment_amount: Optional[int] = None,
) -> int:
    """Calculate the total of income deductions (所得控除後の額の合計額).

    Only the basic deduction for incomes up to 24,000,000 yen is supported.
    The basic deduction shrinks above that limit, which is not implemented.

    Args:
        social_insurance_amount: Social insurance premiums (社会保険料等の金額)
        life_insurance_deduction_amount: Life insurance deduction, if any
        payment_amount: Gross payment, used only to enforce the income limit

    Raises:
        UnimplementedCalculationError: payment_amount exceeds 24,000,000
    """
    check_basic_deduction_limit(payment_amount)
    return BASIC_DEDUCTION + social_insurance_amount + (life_insurance_deduction_amount or 0)
