"""
Record loading for year-end withholding data.

Turns a CSV export of 源泉徴収票 data into typed WithholdingRecord objects
and reads/writes the JSON form of the same records. The validators only
ever see typed records; all string handling stays here.

CSV cast rules
--------------

- Empty cells mean "not provided" and are left out of the record entirely.
- 退職 / 乙欄 only accept the flag value (default "Yes"). Anything else is
  a format error, since a typo like "yes" or "○" would otherwise silently
  flip the withholding check.
- Amount columns must be numerals. A fractional part is truncated.
- Any other column is kept as a string.

Headers may be the Japanese column names of the export or the camelCase
names used in JSON files.

A format error aborts the whole file: a half-loaded record list would make
every downstream check meaningless.
"""

import csv
import json
import logging
import os
import re
from decimal import Decimal
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from .config import get_effective_settings
from .schemas import WithholdingRecord

# Configure logging based on LOG_LEVEL environment variable
_log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, _log_level, logging.INFO),
    format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
    datefmt="%H:%M:%S"
)
logger = logging.getLogger(__name__)


# CSV header -> wire name
AMOUNT_COLUMNS = {
    "支払金額": "paymentAmount",
    "給与所得控除後の金額": "incomeAfterDeductionAmount",
    "所得控除後の額の合計額": "totalDeductionAmount",
    "源泉徴収税額": "withholdingTaxAmount",
    "社会保険料等の金額": "socialInsuranceAmount",
    "生命保険料の控除額": "lifeInsuranceDeductionAmount",
    "新生命保険料の金額": "newLifeInsurancePremiumAmount",
}

FLAG_COLUMNS = {
    "退職": "isRetired",
    "乙欄": "isColumnB",
}

_NUMERAL = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")


class RecordFormatError(ValueError):
    """Raised when input cannot be turned into withholding records."""

    def __init__(self, message: str, column: Optional[str] = None, line: Optional[int] = None):
        self.column = column
        self.line = line
        super().__init__(message)


def _column_map() -> Dict[str, str]:
    """Every accepted header (Japanese or wire name) -> wire name."""
    mapping = {}
    for header, wire in {**AMOUNT_COLUMNS, **FLAG_COLUMNS}.items():
        mapping[header] = wire
        mapping[wire] = wire
    return mapping


COLUMN_MAP = _column_map()
FLAG_FIELDS = set(FLAG_COLUMNS.values())


def parse_amount(value: str, column: str, line: int) -> int:
    """Parse a yen amount, truncating any fractional part toward zero."""
    text = value.strip()
    if not _NUMERAL.match(text):
        raise RecordFormatError(f"Invalid {column} value at row {line}", column=column, line=line)
    return int(Decimal(text))


def parse_flag(value: str, column: str, line: int, flag_value: str) -> bool:
    """Accept only the flag value; anything else is a format error."""
    if value != flag_value:
        raise RecordFormatError(f"Invalid {column} value at row {line}", column=column, line=line)
    return True


def normalize_row(row: Dict[str, str], line: int, flag_value: str = "Yes") -> WithholdingRecord:
    """Convert one CSV row into a WithholdingRecord.

    Args:
        row: Mapping of header -> cell text (as from csv.DictReader)
        line: Line number of the row in the file, for error messages
        flag_value: The string that marks 退職 / 乙欄 as set

    Raises:
        RecordFormatError: A cell cannot be cast to its column's type
    """
    data = {}
    for column, value in row.items():
        if column is None:
            # DictReader puts surplus cells under None
            raise RecordFormatError(f"Too many cells at row {line}", line=line)
        if value is None or value == "":
            continue

        wire = COLUMN_MAP.get(column)
        if wire is None:
            data[column] = value
        elif wire in FLAG_FIELDS:
            data[wire] = parse_flag(value, column, line, flag_value)
        else:
            data[wire] = parse_amount(value, column, line)

    return build_record(data, line=line)


def build_record(data: dict, line: Optional[int] = None, index: Optional[int] = None) -> WithholdingRecord:
    """Validate a wire-format mapping into a WithholdingRecord.

    Raises:
        RecordFormatError: The mapping violates the record schema
    """
    try:
        return WithholdingRecord.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        column = ".".join(str(p) for p in first["loc"]) if first["loc"] else None
        where = f"row {line}" if line is not None else f"record {index}"
        raise RecordFormatError(
            f"Invalid {column or 'record'} value at {where}: {first['msg']}",
            column=column,
            line=line,
        )


def read_csv(
    path: Path,
    encoding: Optional[str] = None,
    flag_value: Optional[str] = None,
) -> List[WithholdingRecord]:
    """Read a CSV export into records.

    Args:
        path: CSV file with a header row
        encoding: File encoding (default: csv_encoding setting)
        flag_value: Flag marker (default: flag_value setting)

    Raises:
        RecordFormatError: On the first malformed cell, or when the file
            cannot be decoded with the encoding
    """
    path = Path(path)
    if encoding is None or flag_value is None:
        settings = get_effective_settings()
        encoding = encoding or settings.csv_encoding
        flag_value = flag_value or settings.flag_value

    records = []
    try:
        with open(path, "r", encoding=encoding, newline="") as f:
            reader = csv.DictReader(f)
            for row in reader:
                records.append(normalize_row(row, reader.line_num, flag_value))
    except (UnicodeDecodeError, LookupError) as e:
        raise RecordFormatError(f"Cannot decode {path.name} as {encoding}: {e}")

    logger.debug(f"{path.name}: read {len(records)} record(s) from CSV")
    return records


def parse_records(items: Iterable[dict]) -> List[WithholdingRecord]:
    """Validate a sequence of wire-format mappings."""
    records = []
    for index, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            raise RecordFormatError(f"Record {index} is not an object")
        records.append(build_record(item, index=index))
    return records


def load_records(path: Path) -> List[WithholdingRecord]:
    """Load records from a JSON array file.

    Raises:
        RecordFormatError: Invalid JSON, non-array top level, or a bad record
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise RecordFormatError(f"Invalid JSON in {path.name}: {e}")
        except UnicodeDecodeError as e:
            raise RecordFormatError(f"Cannot decode {path.name} as utf-8: {e}")

    if not isinstance(data, list):
        raise RecordFormatError(f"{path.name} must contain a JSON array of records")

    records = parse_records(data)
    logger.debug(f"{path.name}: loaded {len(records)} record(s) from JSON")
    return records


def load_any(path: Path) -> List[WithholdingRecord]:
    """Load records from a .csv or .json file based on its suffix."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return read_csv(path)
    if suffix == ".json":
        return load_records(path)
    raise RecordFormatError(f"Unsupported file type '{path.suffix}' (expected .csv or .json)")


def records_to_json(records: Iterable[WithholdingRecord]) -> str:
    """Serialize records as a JSON array (camelCase keys, absent fields omitted)."""
    return json.dumps([r.to_wire() for r in records], indent=2, ensure_ascii=False)


def save_records(records: Iterable[WithholdingRecord], path: Path) -> Path:
    """Write records to a JSON array file.

    Returns:
        Path to the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(records_to_json(records))
        f.write("\n")
    return path
