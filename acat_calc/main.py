"""Command-line interface for the A-CAT calculator.

This module uses the ``click`` library to implement a multi-command
interface over crop and client ACAT documents stored as JSON. Users can
refresh the Inputs And Activity Costs sub-totals, produce the cash-flow
report in the client's fiscal-year order, create a blank crop template or
price a loan proposal. Results can be printed to the terminal or exported
to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from .aggregator import refresh_client_acat, update_totals
from .cash_flow import build_cash_flow_report
from .config import load_settings, setup_logging
from .errors import ACATError
from .formatter import print_cash_flow_report, print_loan_proposal, print_rollup, report_lines
from .loader import dump_crop_acat, load_client_acat, load_crop_acat
from .loan_proposal import LoanCharge, LoanProduct, build_loan_proposal
from .months import UNSET_MONTH
from .template import build_template


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain floats ("50000") and shorthand with ``k``/``m`` suffixes
    (e.g., "50k" meaning 50_000). Returns a float.
    """
    value = value.strip().lower()
    value = value.replace(",", "")
    factor = 1.0
    if value.endswith("k"):
        factor = 1_000.0
        value = value[:-1]
    elif value.endswith("m"):
        factor = 1_000_000.0
        value = value[:-1]
    try:
        return float(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def parse_charge_strings(values: Tuple[str, ...]) -> List[LoanCharge]:
    """Parse ``ITEM:PERCENT[:FIXED]`` loan charge options."""
    charges: List[LoanCharge] = []
    for raw in values:
        parts = raw.split(":")
        if len(parts) not in (2, 3):
            raise click.BadParameter(
                f"Charge must be in ITEM:PERCENT or ITEM:PERCENT:FIXED format; got {raw}"
            )
        item = parts[0].strip()
        if not item:
            raise click.BadParameter(f"Charge is missing its item name; got {raw}")
        try:
            percent = float(parts[1].rstrip("%"))
        except ValueError:
            raise click.BadParameter(f"Invalid charge percentage: {parts[1]}")
        fixed = parse_amount(parts[2]) if len(parts) == 3 else 0.0
        charges.append(LoanCharge(item=item, percent=percent, fixed_amount=fixed))
    return charges


def read_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"{path} is not valid JSON: {exc}")


def write_json(path: Path, data: Any) -> None:
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_report_to_csv(path: Path, report: Dict[str, Any]) -> None:
    """Export a cash-flow report to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        for line in report_lines(report):
            writer.writerow(line)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Cost, revenue and cash-flow calculations for agricultural loan assessments."""
    try:
        settings = load_settings()
        setup_logging(settings)
    except ValueError as exc:
        raise click.ClickException(str(exc))
    ctx.obj = settings


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "output", type=str, help="Write the updated document to this .json file")
def rollup(document: Path, output: Optional[str]) -> None:
    """Recompute the Inputs And Activity Costs sub-totals of a crop ACAT."""
    try:
        crop = load_crop_acat(read_json(document))
        totals = update_totals(crop)
    except ACATError as exc:
        raise click.ClickException(str(exc))
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Document export must use .json extension")
        write_json(path, dump_crop_acat(crop))
        click.echo(f"Updated document exported to {path}")
    else:
        print_rollup(totals)


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--first-month", "first_month", type=str, help="Override the document's first expense month")
@click.option(
    "--use-default-month",
    "use_default_month",
    is_flag=True,
    help="Fall back to ACAT_DEFAULT_FIRST_EXPENSE_MONTH when the document has no first expense month",
)
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
@click.pass_obj
def cashflow(settings, document: Path, first_month: Optional[str], use_default_month: bool,
             output: Optional[str]) -> None:
    """Print the cash-flow report of a crop ACAT in fiscal-year order."""
    try:
        crop = load_crop_acat(read_json(document))
        if (first_month is None and use_default_month
                and crop.first_expense_month == UNSET_MONTH):
            first_month = settings.default_first_expense_month
        report = build_cash_flow_report(crop, first_month)
    except ACATError as exc:
        raise click.ClickException(str(exc))
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            write_json(path, report)
            click.echo(f"Report exported to {path}")
        elif path.suffix.lower() == ".csv":
            export_report_to_csv(path, report)
            click.echo(f"Report exported to {path}")
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
    else:
        print_cash_flow_report(report, settings.max_report_rows)


@cli.command()
@click.argument("crop")
@click.option("--first-month", "first_month", type=str, help="First expense month of the crop season")
@click.option("--output", "output", type=str, help="Output file path (.json)")
def template(crop: str, first_month: Optional[str], output: Optional[str]) -> None:
    """Create a blank crop ACAT template."""
    try:
        document = dump_crop_acat(build_template(crop, first_month))
    except ACATError as exc:
        raise click.ClickException(str(exc))
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Template export must use .json extension")
        write_json(path, document)
        click.echo(f"Template exported to {path}")
    else:
        click.echo(json.dumps(document, indent=2))


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--product", "product_name", default="Loan product", help="Loan product name")
@click.option("--max-amount", "max_amount", required=True, help="Maximum loan amount of the product")
@click.option("--requested", "requested", required=True, help="Loan amount requested by the client")
@click.option("--proposed", "proposed", help="Loan amount proposed by the officer")
@click.option("--deductible", "deductible", multiple=True, help="Deductible in ITEM:PERCENT[:FIXED] format")
@click.option("--cost-of-loan", "cost_of_loan", multiple=True, help="Cost of loan in ITEM:PERCENT[:FIXED] format")
@click.option("--output", "output", type=str, help="Output file path (.json)")
def proposal(
    document: Path,
    product_name: str,
    max_amount: str,
    requested: str,
    proposed: Optional[str],
    deductible: Tuple[str, ...],
    cost_of_loan: Tuple[str, ...],
    output: Optional[str],
) -> None:
    """Refresh a client ACAT and compute its loan proposal."""
    product = LoanProduct(
        name=product_name,
        maximum_loan_amount=parse_amount(max_amount),
        deductibles=parse_charge_strings(deductible),
        cost_of_loan=parse_charge_strings(cost_of_loan),
    )
    try:
        client = load_client_acat(read_json(document))
        refresh_client_acat(client)
        result = build_loan_proposal(
            client,
            product,
            parse_amount(requested),
            parse_amount(proposed) if proposed else None,
        )
    except ACATError as exc:
        raise click.ClickException(str(exc))
    if output:
        write_json(Path(output), {"proposal": asdict(result)})
        click.echo(f"Proposal exported to {output}")
    else:
        print_loan_proposal(result)


if __name__ == "__main__":
    cli()
