"""nencho SDK - Core functionality for year-end withholding checks."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_effective_settings,
    get_setting,
    set_setting,
    unset_setting,
    Settings,
    ConfigError,
)

from .schemas import (
    WithholdingRecord,
    Mismatch,
    CheckResult,
    VerificationReport,
)

from .taxes import (
    UnimplementedCalculationError,
    BASIC_DEDUCTION,
    BASIC_DEDUCTION_INCOME_LIMIT,
    calc_income_after_deduction,
    calc_life_insurance_deduction,
    calc_total_deduction,
    calc_income_tax,
    calc_income_tax_column_b,
    calc_year_end_tax,
)

from .records import (
    RecordFormatError,
    normalize_row,
    read_csv,
    load_records,
    load_any,
    parse_records,
    records_to_json,
    save_records,
)

from .validate import (
    MismatchError,
    CHECKS,
    CHECK_NAMES,
    check_income_after_deduction,
    check_total_deduction,
    check_withholding_tax,
    check_life_insurance_deduction,
    verify_records,
)

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_effective_settings",
    "get_setting",
    "set_setting",
    "unset_setting",
    "Settings",
    "ConfigError",
    # Schemas
    "WithholdingRecord",
    "Mismatch",
    "CheckResult",
    "VerificationReport",
    # Calculations
    "UnimplementedCalculationError",
    "BASIC_DEDUCTION",
    "BASIC_DEDUCTION_INCOME_LIMIT",
    "calc_income_after_deduction",
    "calc_life_insurance_deduction",
    "calc_total_deduction",
    "calc_income_tax",
    "calc_income_tax_column_b",
    "calc_year_end_tax",
    # Records
    "RecordFormatError",
    "normalize_row",
    "read_csv",
    "load_records",
    "load_any",
    "parse_records",
    "records_to_json",
    "save_records",
    # Validation
    "MismatchError",
    "CHECKS",
    "CHECK_NAMES",
    "check_income_after_deduction",
    "check_total_deduction",
    "check_withholding_tax",
    "check_life_insurance_deduction",
    "verify_records",
]
