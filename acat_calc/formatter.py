"""Output helpers for the A-CAT calculator.

This module renders rollup totals, cash-flow reports and loan proposals as
plain text tables for the terminal. Cells are tab separated so the output
can be pasted straight into a spreadsheet.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Sequence

from .aggregator import RollupTotals
from .loan_proposal import LoanProposal


def _cell(value: Optional[float]) -> str:
    return "" if value is None else f"{value:.2f}"


def _values(ordered: Sequence[Mapping[str, Any]]) -> List[str]:
    return [_cell(entry.get("value")) for entry in ordered]


def print_rollup(totals: RollupTotals) -> None:
    """Print the result of a sub-total rollup."""
    print("Inputs And Activity Costs")
    print("-" * 72)
    print(f"{'':20s} {'Estimated':>15s} {'Achieved':>15s}")
    print(f"{'Costs':20s} {totals.estimated_cost:15.2f} {totals.achieved_cost:15.2f}")
    print(f"{'Revenue':20s} {totals.estimated_revenue:15.2f} {totals.achieved_revenue:15.2f}")
    print(f"{'Stored sub-total':20s} {totals.estimated:15.2f} {totals.achieved:15.2f}")
    print("-" * 72)


def report_lines(report: Mapping[str, Any]) -> Iterable[List[str]]:
    """Yield the cash-flow report as table rows (header first).

    Each section contributes an estimated and an achieved line, followed by
    the same two lines for each of its cost-list items. The document net and
    cumulative cash flows close the table.
    """
    yield ["Section", "Item", "Figure"] + list(report["months"])
    for row in report["rows"]:
        title = "  " * row.get("depth", 0) + row["title"]
        yield [title, "", "Estimated"] + _values(row["estimated_cash_flow"])
        yield [title, "", "Achieved"] + _values(row["achieved_cash_flow"])
        items = [(item["item"], item) for item in row.get("items", [])]
        for group in row.get("groups", []):
            items.extend((f"{group['title']} / {item['item']}", item) for item in group["items"])
        if "yield_item" in row:
            items.append((row["yield_item"]["item"] or "Yield", row["yield_item"]))
        for name, item in items:
            yield [title, name, "Estimated"] + _values(item["estimated_cash_flow"])
            yield [title, name, "Achieved"] + _values(item["achieved_cash_flow"])
    yield ["Net cash flow", "", "Estimated"] + _values(report["estimated_net_cash_flow"])
    yield ["Net cash flow", "", "Achieved"] + _values(report["achieved_net_cash_flow"])
    yield ["Cumulative cash flow", "", "Estimated"] + _values(report["estimated_cumulative_cash_flow"])
    yield ["Cumulative cash flow", "", "Achieved"] + _values(report["achieved_cumulative_cash_flow"])


def print_cash_flow_report(report: Mapping[str, Any], max_rows: Optional[int] = None) -> None:
    """Print a cash-flow report as a tab separated table.

    Parameters
    ----------
    report: Mapping[str, Any]
        A report built by ``cash_flow.build_cash_flow_report``.
    max_rows: int, optional
        Stop after this many body rows.
    """
    print(f"Cash flow for {report.get('crop') or report['id']} "
          f"(first expense month: {report['first_expense_month']})")
    lines = list(report_lines(report))
    header, body = lines[0], lines[1:]
    print("\t".join(header))
    shown = body if max_rows is None else body[:max_rows]
    for line in shown:
        print("\t".join(line))
    if len(shown) < len(body):
        print(f"... {len(body) - len(shown)} more rows not shown")


def print_loan_proposal(proposal: LoanProposal) -> None:
    """Print the figures of a loan proposal."""
    detail = proposal.loan_detail
    print("Loan proposal")
    print("-" * 72)
    print(f"Total cost         : {proposal.total_cost:.2f}")
    print(f"Total revenue      : {proposal.total_revenue:.2f}")
    print(f"Loan requested     : {proposal.loan_requested:.2f}")
    print(f"Maximum amount     : {detail.max_amount:.2f}")
    print(f"Loan proposed      : {proposal.loan_proposed:.2f}")
    if detail.deductibles:
        print(f"Total deductibles  : {detail.total_deductibles:.2f}")
    print(f"Total cost of loan : {detail.total_cost_of_loan:.2f}")
    print(f"Repayable          : {proposal.repayable:.2f}")
    print("-" * 72)
