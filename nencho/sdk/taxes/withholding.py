"""Income tax withholding calculations for year-end adjustment.

Two schedules:
- Standard (甲欄): national income tax brackets applied to taxable income
  (income after the employment deduction minus total income deductions).
  https://www.nta.go.jp/taxes/shiraberu/taxanswer/shotoku/2260.htm
- Column B (乙欄): applied directly to the gross payment when no dependent
  exemption declaration was filed. Only part of that table is implemented.
  https://www.nta.go.jp/publication/pamph/gensen/zeigakuhyo2022/data/denshi_11.pdf

The withheld amount for the year is the bracket tax multiplied by the
surtax factor and truncated to 100 yen.
"""

from .brackets import (
    BracketTable,
    apply_table,
    floor_to,
    require_non_negative,
    unimplemented,
)


# Income tax brackets (Annual)
# Format: (taxable upper bound inclusive, rate percent, subtraction)
INCOME_TAX_RATES = [
    (1949000, 5, 0),
    (3299000, 10, 97500),
    (6949000, 20, 427500),
    (8999000, 23, 636000),
    (17999000, 33, 1536000),
    (39999000, 40, 2796000),
    (float('inf'), 45, 4796000),
]

# Year-end multiplier 1.0102, kept as an exact fraction
SURTAX_NUMERATOR = 10102
SURTAX_DENOMINATOR = 10000

# Year-end tax is truncated to this unit
YEAR_END_ROUNDING_UNIT = 100


def _marginal(rate_percent: int, subtraction: int):
    def formula(amount: int) -> int:
        return amount * rate_percent // 100 - subtraction
    return formula


INCOME_TAX_TABLE: BracketTable = [
    (upper_bound, _marginal(rate, subtraction))
    for upper_bound, rate, subtraction in INCOME_TAX_RATES
]

# Format: (payment upper bound inclusive, formula)
COLUMN_B_TABLE: BracketTable = [
    (87999, lambda p: p * 3063 // 100000),
    (740000, unimplemented("column B, 88,000 to 740,000 yen")),
    (1699999, lambda p: 259800 + (p - 740000) * 4084 // 10000),
    (float('inf'), lambda p: 651900 + (p - 1700000) * 45945 // 100000),
]


def calc_income_tax(taxable_amount: int) -> int:
    """Calculate income tax on taxable income using the bracket table.

    The amount is truncated to 1,000 yen first; the bracket is chosen on the
    truncated amount. A non-positive taxable amount owes no tax.

    Example:
        calc_income_tax(1090000)  # -> 54500
        calc_income_tax(5000000)  # -> 572500
    """
    # Select on the truncated amount so the tax never drops just past a breakpoint
    amount = floor_to(taxable_amount, 1000)
    if amount <= 0:
        return 0
    return apply_table(INCOME_TAX_TABLE, amount)


def calc_year_end_tax(taxable_amount: int) -> int:
    """Calculate the year-end withholding (standard schedule).

    Bracket tax x 1.0102, truncated down to the nearest 100 yen.

    Example:
        calc_year_end_tax(1090000)  # 54500 x 1.0102 = 55055.9 -> 55000
    """
    tax = calc_income_tax(taxable_amount) * SURTAX_NUMERATOR // SURTAX_DENOMINATOR
    return floor_to(tax, YEAR_END_ROUNDING_UNIT)


def calc_income_tax_column_b(payment_amount: int) -> int:
    """Calculate withholding on the column B (乙欄) schedule.

    Applied to the gross payment, not taxable income.

    Raises:
        UnimplementedCalculationError: payment_amount in 88,000..740,000
    """
    require_non_negative(payment_amount, "payment_amount")
    return apply_table(COLUMN_B_TABLE, payment_amount)
