"""Verify recorded year-end adjustment amounts against recomputed values.

SDK layer - pure logic over typed records. No file access or presentation.

Four independent checks, each scanning the whole record list:

1. income_after_deduction - 給与所得控除後の金額 from 支払金額
2. total_deduction - 所得控除後の額の合計額 from basic + social + life insurance
3. withholding_tax - 源泉徴収税額 (standard or column B schedule)
4. life_insurance_deduction - 生命保険料の控除額 from 新生命保険料の金額

A check stops at its first mismatch and raises MismatchError. A value in an
unimplemented range raises UnimplementedCalculationError. verify_records()
runs every check regardless of how the others end and collects the
outcomes in a VerificationReport.

Absent fields are never treated as zero. A check skips a record when the
field it verifies is absent; when the field is present but an input needed
to recompute it is absent, that is reported as a mismatch with
expected=None.

Usage:
    from nencho.sdk.validate import verify_records

    report = verify_records(records)
    if not report.ok:
        for result in report.results:
            print(result.name, result.status)
"""

import logging
from typing import Callable, List, NamedTuple, Optional, Sequence

from .schemas import CheckResult, Mismatch, VerificationReport, WithholdingRecord
from .taxes import (
    UnimplementedCalculationError,
    calc_income_after_deduction,
    calc_income_tax_column_b,
    calc_life_insurance_deduction,
    calc_total_deduction,
    calc_year_end_tax,
    check_basic_deduction_limit,
)

logger = logging.getLogger(__name__)


class MismatchError(AssertionError):
    """Raised when a recorded value differs from the recomputed one."""

    def __init__(self, mismatch: Mismatch, checked: int = 0, skipped: int = 0):
        self.mismatch = mismatch
        self.checked = checked
        self.skipped = skipped
        super().__init__(mismatch.message)


# Wire name -> attribute name
_ATTRS = {
    info.alias: name
    for name, info in WithholdingRecord.model_fields.items()
}


class ScanStats(NamedTuple):
    checked: int
    skipped: int


def _scan(
    records: Sequence[WithholdingRecord],
    field: str,
    applies: Callable[[WithholdingRecord], bool],
    expected: Callable[[WithholdingRecord], Optional[int]],
) -> ScanStats:
    """Compare field against expected(record) for every record it applies to."""
    checked = 0
    skipped = 0
    for index, record in enumerate(records, start=1):
        if not applies(record):
            skipped += 1
            continue

        try:
            value = expected(record)
        except UnimplementedCalculationError as e:
            raise UnimplementedCalculationError(f"record {index}: {e}", amount=e.amount) from e
        except ValueError as e:
            raise ValueError(f"record {index}: {e}") from e

        checked += 1
        actual = getattr(record, _ATTRS[field])
        if value is None or value != actual:
            mismatch = Mismatch(record_index=index, field=field, expected=value, actual=actual)
            raise MismatchError(mismatch, checked=checked, skipped=skipped)

    return ScanStats(checked, skipped)


# =============================================================================
# Expected values
# =============================================================================


def expected_income_after_deduction(record: WithholdingRecord) -> Optional[int]:
    if record.payment_amount is None:
        return None
    return calc_income_after_deduction(record.payment_amount)


def expected_total_deduction(record: WithholdingRecord) -> Optional[int]:
    """Basic deduction + social insurance + life insurance deduction.

    Raises:
        UnimplementedCalculationError: paymentAmount above 24,000,000
    """
    check_basic_deduction_limit(record.payment_amount)
    if record.social_insurance_amount is None:
        return None
    return calc_total_deduction(
        record.social_insurance_amount,
        record.life_insurance_deduction_amount,
        payment_amount=record.payment_amount,
    )


def expected_withholding_tax(record: WithholdingRecord) -> Optional[int]:
    """Year-end withholding for the record's schedule.

    Column B records are taxed on the gross payment; everyone else on
    income after deduction minus total deductions.
    """
    if record.is_column_b:
        if record.payment_amount is None:
            return None
        return calc_income_tax_column_b(record.payment_amount)

    if record.income_after_deduction_amount is None or record.total_deduction_amount is None:
        return None
    taxable = record.income_after_deduction_amount - record.total_deduction_amount
    return calc_year_end_tax(taxable)


def expected_life_insurance_deduction(record: WithholdingRecord) -> Optional[int]:
    if record.new_life_insurance_premium_amount is None:
        return None
    return calc_life_insurance_deduction(record.new_life_insurance_premium_amount)


# =============================================================================
# Checks
# =============================================================================


def check_income_after_deduction(records: Sequence[WithholdingRecord]) -> ScanStats:
    """Verify 給与所得控除後の金額 where both it and 支払金額 are recorded."""
    return _scan(
        records,
        "incomeAfterDeductionAmount",
        applies=lambda r: r.payment_amount is not None and r.income_after_deduction_amount is not None,
        expected=expected_income_after_deduction,
    )


def check_total_deduction(records: Sequence[WithholdingRecord]) -> ScanStats:
    """Verify 所得控除後の額の合計額 where it is recorded."""
    return _scan(
        records,
        "totalDeductionAmount",
        applies=lambda r: r.total_deduction_amount is not None,
        expected=expected_total_deduction,
    )


def check_withholding_tax(records: Sequence[WithholdingRecord]) -> ScanStats:
    """Verify 源泉徴収税額 for employees who were year-end adjusted.

    Retired employees (退職) are not adjusted at year end and are skipped.
    """
    return _scan(
        records,
        "withholdingTaxAmount",
        applies=lambda r: r.withholding_tax_amount is not None and not r.is_retired,
        expected=expected_withholding_tax,
    )


def check_life_insurance_deduction(records: Sequence[WithholdingRecord]) -> ScanStats:
    """Verify 生命保険料の控除額 where it is recorded."""
    return _scan(
        records,
        "lifeInsuranceDeductionAmount",
        applies=lambda r: r.life_insurance_deduction_amount is not None,
        expected=expected_life_insurance_deduction,
    )


class Check(NamedTuple):
    name: str
    field: str
    run: Callable[[Sequence[WithholdingRecord]], ScanStats]
    description: str


CHECKS: List[Check] = [
    Check("income_after_deduction", "incomeAfterDeductionAmount",
          check_income_after_deduction, "給与所得控除後の金額"),
    Check("total_deduction", "totalDeductionAmount",
          check_total_deduction, "所得控除後の額の合計額"),
    Check("withholding_tax", "withholdingTaxAmount",
          check_withholding_tax, "源泉徴収税額"),
    Check("life_insurance_deduction", "lifeInsuranceDeductionAmount",
          check_life_insurance_deduction, "生命保険料の控除額"),
]

CHECK_NAMES = [c.name for c in CHECKS]


def run_check(check: Check, records: Sequence[WithholdingRecord]) -> CheckResult:
    """Run one check and turn its outcome into a CheckResult."""
    try:
        stats = check.run(records)
    except MismatchError as e:
        logger.info(f"{check.name}: {e}")
        return CheckResult(
            name=check.name, field=check.field, status="fail",
            checked=e.checked, skipped=e.skipped, mismatch=e.mismatch,
        )
    except (UnimplementedCalculationError, ValueError) as e:
        # Out-of-domain input, e.g. a negative amount in a hand-built record
        logger.info(f"{check.name}: {e}")
        return CheckResult(name=check.name, field=check.field, status="error", error=str(e))

    logger.debug(f"{check.name}: {stats.checked} checked, {stats.skipped} skipped")
    return CheckResult(
        name=check.name, field=check.field, status="pass",
        checked=stats.checked, skipped=stats.skipped,
    )


def verify_records(
    records: Sequence[WithholdingRecord],
    only: Optional[Sequence[str]] = None,
) -> VerificationReport:
    """Run every check (or the named subset) over records.

    Args:
        records: Ordered records; positions in mismatches are 1-based
        only: Optional list of check names to run

    Raises:
        ValueError: only names an unknown check
    """
    checks = CHECKS
    if only:
        unknown = [name for name in only if name not in CHECK_NAMES]
        if unknown:
            raise ValueError(f"Unknown check(s): {', '.join(unknown)}. Known: {', '.join(CHECK_NAMES)}")
        checks = [c for c in CHECKS if c.name in only]

    results = [run_check(check, records) for check in checks]
    return VerificationReport(record_count=len(records), results=results)
