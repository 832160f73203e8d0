"""taxes - Year-end adjustment tax calculations.

Scope:
- Employment-income deduction table (給与所得控除)
- Income deductions total and life insurance deduction
- Standard and column B (乙欄) withholding schedules

Constraints:
- Pure calculation - no records access, no config
- Whole-yen integer arithmetic throughout

Modules:
- brackets: Bracket table lookup and rounding helpers
- deductions: Deduction calculations
- withholding: Income tax and year-end withholding

Usage:
    from nencho.sdk.taxes import calc_income_after_deduction, calc_year_end_tax

    income = calc_income_after_deduction(3000000)
    tax = calc_year_end_tax(income - 930000)
"""

from .brackets import (
    UnimplementedCalculationError,
    floor_to,
)

from .deductions import (
    BASIC_DEDUCTION,
    BASIC_DEDUCTION_INCOME_LIMIT,
    calc_income_after_deduction,
    calc_life_insurance_deduction,
    calc_total_deduction,
    check_basic_deduction_limit,
)

from .withholding import (
    calc_income_tax,
    calc_income_tax_column_b,
    calc_year_end_tax,
)

__all__ = [
    # Helpers
    "UnimplementedCalculationError",
    "floor_to",
    # Deductions
    "BASIC_DEDUCTION",
    "BASIC_DEDUCTION_INCOME_LIMIT",
    "calc_income_after_deduction",
    "calc_life_insurance_deduction",
    "calc_total_deduction",
    "check_basic_deduction_limit",
    # Withholding
    "calc_income_tax",
    "calc_income_tax_column_b",
    "calc_year_end_tax",
]
