"""Cash-flow reordering for crop ACAT reports.

Stored cash flows are month-keyed records. Reports show them as ordered
twelve-month sequences starting at the crop's first expense month. This
module produces those sequences for a single record, a section, the items
of a cost list and the document-level net cash flow, and assembles them into
one report for the spreadsheet renderer.

Every function returns new plain data (lists and dicts). The typed
document passed in is never modified.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .data_models import YIELD_ROLES, CostListItem, CropACAT, ItemFigures, Section, SectionRole
from .errors import StructureError
from .months import Month, get_month, rotate_from

logger = logging.getLogger(__name__)

# Sections every report needs, as (path of roles from the document root, needs a cost list).
REPORT_LAYOUT = (
    ((SectionRole.INPUTS_AND_ACTIVITIES,), False),
    ((SectionRole.INPUTS_AND_ACTIVITIES, SectionRole.INPUT), False),
    ((SectionRole.INPUTS_AND_ACTIVITIES, SectionRole.INPUT, SectionRole.SEED), True),
    ((SectionRole.INPUTS_AND_ACTIVITIES, SectionRole.INPUT, SectionRole.FERTILIZERS), True),
    ((SectionRole.INPUTS_AND_ACTIVITIES, SectionRole.INPUT, SectionRole.CHEMICALS), True),
    ((SectionRole.INPUTS_AND_ACTIVITIES, SectionRole.LABOUR), True),
    ((SectionRole.INPUTS_AND_ACTIVITIES, SectionRole.OTHER_COSTS), True),
    ((SectionRole.REVENUE,), False),
)


def reorder_record(record: Mapping[str, Any], rotation: Sequence[Month]) -> List[Dict[str, Any]]:
    """Return the values of ``record`` in ``rotation`` order.

    Each entry is ``{"month": name, "label": label, "value": value}``. A
    month missing from ``record`` gets ``None`` as its value.
    """
    return [
        {"month": month.name, "label": month.label, "value": record.get(month.name)}
        for month in rotation
    ]


def reorder_section(section: Section, rotation: Sequence[Month]) -> Dict[str, Any]:
    """Return a presentation copy of ``section`` with ordered cash flows."""
    role = section.role
    return {
        "id": section.id,
        "title": section.title,
        "role": role.name if role else None,
        "number": section.number,
        "estimated_sub_total": section.estimated_sub_total,
        "achieved_sub_total": section.achieved_sub_total,
        "estimated_cash_flow": reorder_record(section.estimated_cash_flow, rotation),
        "achieved_cash_flow": reorder_record(section.achieved_cash_flow, rotation),
    }


def _figures(figures: ItemFigures) -> Dict[str, float]:
    return {
        "value": figures.value,
        "unit_price": figures.unit_price,
        "total_price": figures.total_price,
    }


def reorder_cost_list_items(items: Iterable[CostListItem], rotation: Sequence[Month]) -> List[Dict[str, Any]]:
    """Return presentation copies of ``items`` with flattened, ordered cash flows.

    The nested ``estimated.cash_flow`` and ``achieved.cash_flow`` records are
    lifted to ``estimated_cash_flow`` and ``achieved_cash_flow`` on the item.
    Item order and count are preserved.
    """
    return [
        {
            "id": item.id,
            "item": item.item,
            "unit": item.unit,
            "estimated": _figures(item.estimated),
            "achieved": _figures(item.achieved),
            "estimated_cash_flow": reorder_record(item.estimated.cash_flow, rotation),
            "achieved_cash_flow": reorder_record(item.achieved.cash_flow, rotation),
        }
        for item in items
    ]


def reorder_document_net_cash_flow(crop: CropACAT, rotation: Sequence[Month]) -> Dict[str, List[Dict[str, Any]]]:
    """Return the crop's estimated and achieved net cash flow in rotation order."""
    return {
        "estimated_net_cash_flow": reorder_record(crop.estimated.net_cash_flow, rotation),
        "achieved_net_cash_flow": reorder_record(crop.achieved.net_cash_flow, rotation),
    }


def cumulative_cash_flow(ordered: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Return the running total of an ordered cash-flow sequence.

    Missing values (``None``) count as zero.
    """
    running = 0.0
    result = []
    for entry in ordered:
        running += entry.get("value") or 0.0
        result.append({"month": entry["month"], "label": entry["label"], "value": running})
    return result


def _resolve(crop: CropACAT, path: Sequence[SectionRole]) -> Section:
    node: Optional[Section] = crop.section(path[0])
    for role in path[1:]:
        if node is None:
            break
        node = node.find(role)
    if node is None:
        raise StructureError(
            "Crop ACAT %s is missing section %r" % (crop.id, " > ".join(r.value for r in path))
        )
    return node


def _report_row(section: Section, depth: int, rotation: Sequence[Month]) -> Dict[str, Any]:
    row = reorder_section(section, rotation)
    row["depth"] = depth
    if section.cost_list is not None:
        row["items"] = reorder_cost_list_items(section.cost_list.linear, rotation)
        row["groups"] = [
            {"id": group.id, "title": group.title,
             "items": reorder_cost_list_items(group.items, rotation)}
            for group in section.cost_list.grouped
        ]
    if section.role in YIELD_ROLES and section.yield_item is not None:
        row["yield_item"] = reorder_cost_list_items([section.yield_item], rotation)[0]
    return row


def _revenue_rows(section: Section, depth: int, rotation: Sequence[Month]) -> List[Dict[str, Any]]:
    rows = []
    for sub in section.sub_sections:
        rows.append(_report_row(sub, depth, rotation))
        rows.extend(_revenue_rows(sub, depth + 1, rotation))
    return rows


def build_cash_flow_report(crop: CropACAT, first_expense_month: Optional[str] = None) -> Dict[str, Any]:
    """Build the officer-facing cash-flow report of a crop ACAT.

    Parameters
    ----------
    crop: CropACAT
        The crop ACAT document.
    first_expense_month: str, optional
        Overrides the document's own ``first_expense_month``.

    Returns
    -------
    Dict[str, Any]
        ``months`` (labels in report order), ``rows`` (one per section in
        template order with cost-list items and groups), document net cash
        flows and their cumulative sequences.

    Raises
    ------
    PreconditionError
        If the first expense month is unset or unknown.
    StructureError
        If a section or cost list the report depends on is missing.
    """
    start = get_month(first_expense_month if first_expense_month is not None
                      else crop.first_expense_month)
    rotation = rotate_from(start)
    logger.debug("Cash flow report for crop ACAT %s starts at %s", crop.id, start.name)

    rows = []
    for path, needs_cost_list in REPORT_LAYOUT:
        section = _resolve(crop, path)
        if needs_cost_list and section.cost_list is None:
            raise StructureError(
                "Section %r of crop ACAT %s has no cost list" % (section.title, crop.id)
            )
        rows.append(_report_row(section, len(path) - 1, rotation))
        if path[-1] is SectionRole.REVENUE:
            rows.extend(_revenue_rows(section, 1, rotation))

    report: Dict[str, Any] = {
        "id": crop.id,
        "crop": crop.crop,
        "first_expense_month": start.name,
        "months": [month.label for month in rotation],
        "rows": rows,
    }
    report.update(reorder_document_net_cash_flow(crop, rotation))
    report["estimated_cumulative_cash_flow"] = cumulative_cash_flow(report["estimated_net_cash_flow"])
    report["achieved_cumulative_cash_flow"] = cumulative_cash_flow(report["achieved_net_cash_flow"])
    return report
