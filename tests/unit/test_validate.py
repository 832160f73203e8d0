"""Tests for record verification (check_* functions and verify_records).

Scenario values:
    payment 3,000,000 -> income after deduction 2,020,000
    social insurance 450,000 -> total deduction 930,000
    taxable 1,090,000 -> income tax 54,500 -> x 1.0102 -> 55,000 withheld
"""

import pytest

from nencho.sdk.schemas import WithholdingRecord
from nencho.sdk.taxes import UnimplementedCalculationError
from nencho.sdk.validate import (
    CHECK_NAMES,
    MismatchError,
    check_income_after_deduction,
    check_life_insurance_deduction,
    check_total_deduction,
    check_withholding_tax,
    verify_records,
)


def make_record(**overrides) -> WithholdingRecord:
    """Build a consistent record in wire format, then apply overrides.

    Pass a value of None to drop a field.
    """
    data = {
        "paymentAmount": 3000000,
        "incomeAfterDeductionAmount": 2020000,
        "socialInsuranceAmount": 450000,
        "totalDeductionAmount": 930000,
        "withholdingTaxAmount": 55000,
    }
    data.update(overrides)
    return WithholdingRecord.model_validate({k: v for k, v in data.items() if v is not None})


def make_column_b_record(payment: int, withholding: int) -> WithholdingRecord:
    return WithholdingRecord.model_validate({
        "paymentAmount": payment,
        "withholdingTaxAmount": withholding,
        "isColumnB": True,
    })


class TestScenario:
    """The reference scenario and its variations."""

    def test_consistent_record_passes_all_checks(self):
        report = verify_records([make_record()])

        assert report.ok
        assert [r.name for r in report.results] == CHECK_NAMES
        assert all(r.status == "pass" for r in report.results)

    def test_withholding_off_by_100_fails_only_withholding(self):
        report = verify_records([make_record(withholdingTaxAmount=55100)])

        assert report.failed == ["withholding_tax"]
        result = report.get("withholding_tax")
        assert result.status == "fail"
        assert result.mismatch.record_index == 1
        assert result.mismatch.field == "withholdingTaxAmount"
        assert result.mismatch.expected == 55000
        assert result.mismatch.actual == 55100

    def test_retired_record_with_wrong_withholding_passes(self):
        report = verify_records([make_record(withholdingTaxAmount=12300, isRetired=True)])

        assert report.ok
        result = report.get("withholding_tax")
        assert result.checked == 0
        assert result.skipped == 1

    def test_life_insurance_flows_into_total_and_tax(self):
        # total 480000 + 450000 + 25000 = 955000; taxable 1065000 -> 53250 -> 53793 -> 53700
        record = make_record(
            lifeInsuranceDeductionAmount=25000,
            newLifeInsurancePremiumAmount=30000,
            totalDeductionAmount=955000,
            withholdingTaxAmount=53700,
        )

        report = verify_records([record])

        assert report.ok
        assert report.get("life_insurance_deduction").checked == 1


class TestIncomeAfterDeductionCheck:
    """Tests for check_income_after_deduction."""

    def test_skips_when_either_field_absent(self):
        records = [
            make_record(paymentAmount=None),
            make_record(incomeAfterDeductionAmount=None),
        ]

        stats = check_income_after_deduction(records)

        assert stats.checked == 0
        assert stats.skipped == 2

    def test_zero_is_checked_not_skipped(self):
        """A recorded 0 is a value, not an absent field."""
        with pytest.raises(MismatchError) as exc_info:
            check_income_after_deduction([make_record(incomeAfterDeductionAmount=0)])

        assert exc_info.value.mismatch.expected == 2020000
        assert exc_info.value.mismatch.actual == 0

    def test_zero_income_for_small_payment_passes(self):
        stats = check_income_after_deduction([make_record(paymentAmount=500000, incomeAfterDeductionAmount=0)])
        assert stats.checked == 1

    def test_reports_first_mismatch_only(self):
        records = [
            make_record(),
            make_record(incomeAfterDeductionAmount=2000000),
            make_record(incomeAfterDeductionAmount=1000000),
        ]

        with pytest.raises(MismatchError) as exc_info:
            check_income_after_deduction(records)

        assert exc_info.value.mismatch.record_index == 2
        assert exc_info.value.checked == 2
        assert "record 2: incomeAfterDeductionAmount expected 2020000, got 2000000" in str(exc_info.value)

    def test_mismatch_error_is_assertion_error(self):
        with pytest.raises(AssertionError):
            check_income_after_deduction([make_record(incomeAfterDeductionAmount=1)])


class TestTotalDeductionCheck:
    """Tests for check_total_deduction."""

    def test_skips_when_total_absent(self):
        stats = check_total_deduction([make_record(totalDeductionAmount=None)])
        assert stats.skipped == 1

    def test_mismatch(self):
        with pytest.raises(MismatchError) as exc_info:
            check_total_deduction([make_record(totalDeductionAmount=900000)])

        assert exc_info.value.mismatch.expected == 930000

    def test_missing_social_insurance_is_mismatch(self):
        with pytest.raises(MismatchError) as exc_info:
            check_total_deduction([make_record(socialInsuranceAmount=None)])

        mismatch = exc_info.value.mismatch
        assert mismatch.expected is None
        assert "missing input" in mismatch.message

    def test_payment_above_limit_is_unimplemented(self):
        records = [make_record(), make_record(paymentAmount=25000000)]

        with pytest.raises(UnimplementedCalculationError, match="record 2"):
            check_total_deduction(records)

    def test_absent_payment_does_not_trigger_limit(self):
        stats = check_total_deduction([make_record(paymentAmount=None)])
        assert stats.checked == 1


class TestWithholdingTaxCheck:
    """Tests for check_withholding_tax."""

    def test_skips_absent_withholding(self):
        stats = check_withholding_tax([make_record(withholdingTaxAmount=None)])
        assert stats.skipped == 1

    def test_zero_withholding_is_checked(self):
        record = make_record(
            paymentAmount=1000000,
            incomeAfterDeductionAmount=450000,
            socialInsuranceAmount=150000,
            totalDeductionAmount=630000,
            withholdingTaxAmount=0,
        )

        stats = check_withholding_tax([record])

        assert stats.checked == 1

    def test_column_b_uses_payment_schedule(self):
        stats = check_withholding_tax([make_column_b_record(2000000, 789735)])
        assert stats.checked == 1

    def test_column_b_mismatch(self):
        with pytest.raises(MismatchError) as exc_info:
            check_withholding_tax([make_column_b_record(2000000, 55000)])

        assert exc_info.value.mismatch.expected == 789735

    def test_column_b_unimplemented_band(self):
        with pytest.raises(UnimplementedCalculationError):
            check_withholding_tax([make_column_b_record(500000, 15000)])

    def test_missing_inputs_is_mismatch(self):
        with pytest.raises(MismatchError) as exc_info:
            check_withholding_tax([make_record(totalDeductionAmount=None)])

        assert exc_info.value.mismatch.expected is None


class TestLifeInsuranceCheck:
    """Tests for check_life_insurance_deduction."""

    def test_skips_when_deduction_absent(self):
        stats = check_life_insurance_deduction([make_record(newLifeInsurancePremiumAmount=100000)])
        assert stats.skipped == 1

    def test_saturated_deduction(self):
        record = make_record(lifeInsuranceDeductionAmount=40000, newLifeInsurancePremiumAmount=120000)
        assert check_life_insurance_deduction([record]).checked == 1

    def test_mismatch(self):
        record = make_record(lifeInsuranceDeductionAmount=40000, newLifeInsurancePremiumAmount=60000)

        with pytest.raises(MismatchError) as exc_info:
            check_life_insurance_deduction([record])

        assert exc_info.value.mismatch.expected == 35000

    def test_missing_premium_is_mismatch(self):
        with pytest.raises(MismatchError) as exc_info:
            check_life_insurance_deduction([make_record(lifeInsuranceDeductionAmount=20000)])

        assert exc_info.value.mismatch.expected is None


class TestVerifyRecords:
    """Tests for the verify_records runner."""

    def test_errors_do_not_stop_other_checks(self):
        records = [
            make_record(),
            make_column_b_record(300000, 9000),
            make_record(incomeAfterDeductionAmount=1),
        ]

        report = verify_records(records)

        assert report.record_count == 3
        assert report.get("withholding_tax").status == "error"
        assert "record 2" in report.get("withholding_tax").error
        assert report.get("income_after_deduction").status == "fail"
        assert report.get("income_after_deduction").mismatch.record_index == 3
        assert report.get("total_deduction").status == "pass"
        assert report.get("life_insurance_deduction").status == "pass"
        assert report.failed == ["income_after_deduction", "withholding_tax"]

    def test_income_limit_is_an_error_status(self):
        report = verify_records([make_record(paymentAmount=25000000)])

        assert report.get("total_deduction").status == "error"

    def test_out_of_domain_input_is_an_error_status(self):
        """A record built without validation can still carry a negative premium."""
        record = WithholdingRecord.model_construct(
            life_insurance_deduction_amount=1000,
            new_life_insurance_premium_amount=-5,
        )

        report = verify_records([record])

        result = report.get("life_insurance_deduction")
        assert result.status == "error"
        assert "record 1" in result.error
        assert [r.status for r in report.results[:3]] == ["pass", "pass", "pass"]
        assert report.failed == ["life_insurance_deduction"]

    def test_only_selected_checks(self):
        report = verify_records([make_record()], only=["withholding_tax"])

        assert [r.name for r in report.results] == ["withholding_tax"]

    def test_unknown_check_name(self):
        with pytest.raises(ValueError, match="Unknown check"):
            verify_records([make_record()], only=["bogus"])

    def test_empty_record_list(self):
        report = verify_records([])

        assert report.ok
        assert report.record_count == 0

    def test_order_independent(self):
        records = [make_record(), make_record(withholdingTaxAmount=100), make_record()]

        forward = verify_records(records)
        backward = verify_records(list(reversed(records)))

        assert forward.failed == backward.failed == ["withholding_tax"]

    def test_to_dict(self):
        data = verify_records([make_record(withholdingTaxAmount=55100)]).to_dict()

        assert data["ok"] is False
        assert data["record_count"] == 1
        withholding = data["results"][2]
        assert withholding["name"] == "withholding_tax"
        assert withholding["mismatch"] == {
            "record_index": 1,
            "field": "withholdingTaxAmount",
            "expected": 55000,
            "actual": 55100,
        }
