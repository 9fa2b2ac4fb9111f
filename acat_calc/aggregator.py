"""Sub-total rollup for crop ACAT documents.

Whenever a section of a client's crop ACAT changes, the stored sub-total of
the "Inputs And Activity Costs" section is recomputed from its descendants.
The rules depend on each section's role:

* Labour Cost and Other Costs contribute their own sub-totals.
* Input contributes the sum of its children (Seed, Fertilizers, Chemicals).
* Under Revenue, every grandchild contributes its estimated sub-total, but
  only "Probable Yield" grandchildren contribute an achieved sub-total.
* Any other title is ignored.

Revenue contributions are added to the same running totals as the costs
before the result is written onto the Inputs node. The separate cost and
revenue components are reported in ``RollupTotals`` as well.

The rollup only reads children's stored sub-totals, never their cash-flow
detail, so running it repeatedly on an unchanged document is a no-op.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Tuple

from .data_models import ClientACAT, CropACAT, Section, SectionRole
from .errors import WorkflowError
from .months import MONTH_NAMES, empty_cash_flow

logger = logging.getLogger(__name__)


@dataclass
class RollupTotals:
    """Result of a rollup pass over one crop ACAT.

    ``estimated`` and ``achieved`` are the figures written back onto the
    "Inputs And Activity Costs" section. The ``*_cost`` and ``*_revenue``
    fields split them into the part coming from the Inputs subtree and the
    part coming from the Revenue subtree.
    """

    estimated: float = 0.0
    achieved: float = 0.0
    estimated_cost: float = 0.0
    achieved_cost: float = 0.0
    estimated_revenue: float = 0.0
    achieved_revenue: float = 0.0


def _sum_sub_totals(sections: Iterable[Section]) -> Tuple[float, float]:
    estimated = 0.0
    achieved = 0.0
    for section in sections:
        estimated += section.estimated_sub_total
        achieved += section.achieved_sub_total
    return estimated, achieved


def _input_costs(section: Section) -> Tuple[float, float]:
    estimated = 0.0
    achieved = 0.0
    for sub in section.sub_sections:
        role = sub.role
        if role in (SectionRole.LABOUR, SectionRole.OTHER_COSTS):
            estimated += sub.estimated_sub_total
            achieved += sub.achieved_sub_total
        elif role is SectionRole.INPUT:
            input_estimated, input_achieved = _sum_sub_totals(sub.sub_sections)
            estimated += input_estimated
            achieved += input_achieved
    return estimated, achieved


def _revenue(section: Section) -> Tuple[float, float]:
    estimated = 0.0
    achieved = 0.0
    for group in section.sub_sections:
        for sub in group.sub_sections:
            # Only the probable yield has a meaningful achieved figure
            if sub.role is SectionRole.PROBABLE_YIELD:
                achieved += sub.achieved_sub_total
            estimated += sub.estimated_sub_total
    return estimated, achieved


def compute_totals(crop: CropACAT) -> RollupTotals:
    """Compute the Inputs And Activity Costs rollup without writing it.

    Parameters
    ----------
    crop: CropACAT
        A fully loaded crop ACAT document.

    Returns
    -------
    RollupTotals
        The combined totals and their cost/revenue components.
    """
    totals = RollupTotals()
    for section in crop.sections:
        role = section.role
        if role is SectionRole.INPUTS_AND_ACTIVITIES:
            estimated, achieved = _input_costs(section)
            totals.estimated_cost += estimated
            totals.achieved_cost += achieved
        elif role is SectionRole.REVENUE:
            estimated, achieved = _revenue(section)
            totals.estimated_revenue += estimated
            totals.achieved_revenue += achieved
    totals.estimated = totals.estimated_cost + totals.estimated_revenue
    totals.achieved = totals.achieved_cost + totals.achieved_revenue
    return totals


def update_totals(crop: CropACAT) -> RollupTotals:
    """Recompute and store the Inputs And Activity Costs sub-totals.

    Raises
    ------
    WorkflowError
        If the crop ACAT is in a terminal status and may no longer change.
    """
    if crop.is_locked:
        raise WorkflowError(
            f"Crop ACAT {crop.id} is {crop.status} and can no longer be updated"
        )
    totals = compute_totals(crop)
    inputs = crop.section(SectionRole.INPUTS_AND_ACTIVITIES)
    if inputs is None:
        logger.warning("Crop ACAT %s has no %r section; totals not stored",
                       crop.id, SectionRole.INPUTS_AND_ACTIVITIES.value)
        return totals
    inputs.estimated_sub_total = totals.estimated
    inputs.achieved_sub_total = totals.achieved
    logger.debug("Crop ACAT %s totals: estimated=%s achieved=%s",
                 crop.id, totals.estimated, totals.achieved)
    return totals


def refresh_client_acat(client: ClientACAT) -> Dict[str, RollupTotals]:
    """Run the rollup for every crop of a client and update client totals.

    Locked crops keep their stored sub-totals but still count towards the
    client-wide figures. The client's ``cumulative_cash_flow`` is the running
    sum of its net cash flow in calendar order.

    Returns
    -------
    Dict[str, RollupTotals]
        Rollup results keyed by crop ACAT id.
    """
    results: Dict[str, RollupTotals] = {}
    total_cost = 0.0
    total_revenue = 0.0
    net_cash_flow = empty_cash_flow()
    for crop in client.crop_acats:
        if crop.is_locked:
            results[crop.id] = compute_totals(crop)
        else:
            results[crop.id] = update_totals(crop)
        total_cost += crop.estimated.total_cost
        total_revenue += crop.estimated.total_revenue
        for name in MONTH_NAMES:
            net_cash_flow[name] += crop.estimated.net_cash_flow.get(name, 0.0)

    cumulative = empty_cash_flow()
    running = 0.0
    for name in MONTH_NAMES:
        running += net_cash_flow[name]
        cumulative[name] = running

    client.total_cost = total_cost
    client.total_revenue = total_revenue
    client.net_cash_flow = net_cash_flow
    client.cumulative_cash_flow = cumulative
    logger.debug("Client ACAT %s refreshed over %d crops", client.id, len(results))
    return results
