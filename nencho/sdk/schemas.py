"""Pydantic schemas for withholding records and verification results.

Records use camelCase aliases on the wire (JSON files, CSV headers) and
snake_case attributes in Python. Absent fields are None, never 0, so a
check can tell "not provided" apart from a recorded zero.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Record
# =============================================================================


class WithholdingRecord(BaseModel):
    """One employee's year-end adjustment data (源泉徴収票) for a tax year.

    Strict: amounts must already be ints and flags must be True when present.
    Turning CSV text into these types is the normalizer's job (records.py).
    Unknown columns (employee name, number, ...) are kept as extra fields.
    """

    model_config = ConfigDict(
        extra="allow",
        strict=True,
        frozen=True,
        populate_by_name=True,
    )

    payment_amount: Optional[int] = Field(
        default=None, ge=0, alias="paymentAmount",
        description="Gross payment (支払金額)",
    )
    income_after_deduction_amount: Optional[int] = Field(
        default=None, alias="incomeAfterDeductionAmount",
        description="Payment after the employment-income deduction (給与所得控除後の金額)",
    )
    total_deduction_amount: Optional[int] = Field(
        default=None, alias="totalDeductionAmount",
        description="Sum of income deductions (所得控除後の額の合計額)",
    )
    withholding_tax_amount: Optional[int] = Field(
        default=None, alias="withholdingTaxAmount",
        description="Withheld income tax, truncated to 100 yen (源泉徴収税額)",
    )
    social_insurance_amount: Optional[int] = Field(
        default=None, alias="socialInsuranceAmount",
        description="Social insurance premiums (社会保険料等の金額)",
    )
    life_insurance_deduction_amount: Optional[int] = Field(
        default=None, alias="lifeInsuranceDeductionAmount",
        description="Life insurance deduction (生命保険料の控除額)",
    )
    new_life_insurance_premium_amount: Optional[int] = Field(
        default=None, ge=0, alias="newLifeInsurancePremiumAmount",
        description="New-style life insurance premiums paid (新生命保険料の金額)",
    )
    is_retired: Optional[Literal[True]] = Field(
        default=None, alias="isRetired",
        description="Left mid-year (退職); excluded from the withholding check",
    )
    is_column_b: Optional[Literal[True]] = Field(
        default=None, alias="isColumnB",
        description="Column B schedule (乙欄); no dependent exemption declaration",
    )

    def to_wire(self) -> dict:
        """Serialize with camelCase keys, omitting absent fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


# =============================================================================
# Verification results
# =============================================================================


class Mismatch(BaseModel):
    """A recorded value that differs from the recomputed one."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    record_index: int = Field(..., ge=1, description="1-based position in the record list")
    field: str = Field(..., description="Wire name of the mismatching field")
    expected: Optional[int] = Field(
        default=None,
        description="Recomputed value; None when an input needed to compute it is absent",
    )
    actual: int

    @property
    def message(self) -> str:
        if self.expected is None:
            return (
                f"record {self.record_index}: {self.field} cannot be recomputed "
                f"(missing input), got {self.actual}"
            )
        return (
            f"record {self.record_index}: {self.field} expected {self.expected}, "
            f"got {self.actual}"
        )


class CheckResult(BaseModel):
    """Outcome of one check across the whole record list."""

    model_config = ConfigDict(extra="forbid")

    name: str
    field: str
    status: Literal["pass", "fail", "error"]
    checked: int = Field(default=0, ge=0, description="Records evaluated before the check ended")
    skipped: int = Field(default=0, ge=0, description="Records the check did not apply to")
    mismatch: Optional[Mismatch] = None
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.status == "pass"


class VerificationReport(BaseModel):
    """Results of every check over one record list."""

    model_config = ConfigDict(extra="forbid")

    record_count: int = Field(..., ge=0)
    results: List[CheckResult]

    @property
    def ok(self) -> bool:
        """True when every check passed."""
        return all(r.passed for r in self.results)

    @property
    def failed(self) -> List[str]:
        """Names of checks that failed or errored."""
        return [r.name for r in self.results if not r.passed]

    def get(self, name: str) -> CheckResult:
        for result in self.results:
            if result.name == name:
                return result
        raise KeyError(name)

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data["ok"] = self.ok
        return data
