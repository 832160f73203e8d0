"""nencho CLI - Check year-end withholding (年末調整) records."""

import json
import sys
from pathlib import Path

import click
from rich.console import Console

from nencho import __version__
from nencho.sdk import (
    CHECK_NAMES,
    ConfigError,
    RecordFormatError,
    UnimplementedCalculationError,
    calc_income_after_deduction,
    calc_income_tax,
    calc_income_tax_column_b,
    calc_life_insurance_deduction,
    calc_year_end_tax,
    get_setting,
    load_any,
    read_csv,
    records_to_json,
    save_records,
    verify_records,
)

from .renderers.report_renderer import render_report
from .settings_commands import settings as settings_group


@click.group()
@click.version_option(version=__version__, prog_name="nencho")
def cli():
    """nencho - Year-end withholding record checks.

    Recomputes the employment-income deduction, total deductions,
    withheld income tax and life insurance deduction for each employee
    and reports where the recorded values disagree.

    Settings are loaded from (in order):

    \b
    1. NENCHO_CONFIG_PATH environment variable
    2. ~/.config/nencho/settings.json (XDG default)

    Run 'nencho settings show' to see effective settings.
    """
    pass


cli.add_command(settings_group)


@cli.command("convert")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", "output_path", type=click.Path(dir_okay=False, path_type=Path),
              help="Output JSON file ('-' for stdout, default: INPUT with .json suffix)")
@click.option("--encoding", help="CSV encoding (default: csv_encoding setting)")
def convert(input_path, output_path, encoding):
    """Convert a CSV export into a JSON record file.

    Empty cells are dropped, amounts become integers and 退職 / 乙欄
    become true. The first malformed cell aborts the conversion.

    Examples:
        nencho convert data.csv
        nencho convert data.csv -o records.json
    """
    try:
        records = read_csv(input_path, encoding=encoding)
    except (RecordFormatError, ConfigError) as e:
        raise click.ClickException(str(e))

    if output_path is not None and str(output_path) == "-":
        click.echo(records_to_json(records))
        return

    output_path = output_path or input_path.with_suffix(".json")
    save_records(records, output_path)
    click.echo(f"Wrote {len(records)} record(s) to {output_path}")


@cli.command("verify")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "output_format", type=click.Choice(["text", "json"]),
              help="Output format (default: default_output_format setting)")
@click.option("--check", "only", multiple=True, type=click.Choice(CHECK_NAMES),
              help="Run only this check (repeatable)")
def verify(input_path, output_format, only):
    """Verify the computed amounts in a CSV or JSON record file.

    Each check scans every record and stops at its first mismatch; all
    checks run regardless of the others. Exit status is 1 if any check
    fails or hits an unimplemented range.

    Examples:
        nencho verify data.csv
        nencho verify data.json --format json
        nencho verify data.json --check withholding_tax
    """
    try:
        output_format = output_format or get_setting("default_output_format")
        records = load_any(input_path)
    except (RecordFormatError, ConfigError) as e:
        raise click.ClickException(str(e))

    report = verify_records(records, only=list(only) or None)

    if output_format == "json":
        click.echo(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        render_report(Console(), report, source=input_path.name)

    if not report.ok:
        sys.exit(1)


CALCULATIONS = {
    "deduction": calc_income_after_deduction,
    "income-tax": calc_income_tax,
    "year-end-tax": calc_year_end_tax,
    "column-b": calc_income_tax_column_b,
    "life-insurance": calc_life_insurance_deduction,
}


@cli.command("calc")
@click.argument("kind", type=click.Choice(list(CALCULATIONS)))
@click.argument("amount", type=int)
def calc(kind, amount):
    """Run a single calculation on AMOUNT (yen).

    \b
    deduction       income after employment deduction, from payment
    income-tax      bracket income tax, from taxable income
    year-end-tax    year-end withholding, from taxable income
    column-b        column B (乙欄) withholding, from payment
    life-insurance  life insurance deduction, from new-style premiums

    Examples:
        nencho calc deduction 3000000
        nencho calc year-end-tax 1090000
    """
    try:
        result = CALCULATIONS[kind](amount)
    except (UnimplementedCalculationError, ValueError) as e:
        raise click.ClickException(str(e))

    click.echo(result)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
