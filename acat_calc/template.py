"""Crop ACAT templates and their per-client copies.

A loan officer fills in one crop ACAT per crop. Each one starts as a copy
of the crop's template, which always has the same two top-level sections:

    Inputs And Activity Costs
        Input
            Seed, Fertilizers, Chemicals
        Labour Cost
        Other Costs
    Revenue
        Probable Yield, Maximum Yield, Minimum Yield

Leaf cost sections own an empty cost list, and yield sections own a yield
line item with estimated and achieved yield and price figures (the probable
yield also a consumption split). Every cash flow starts at zero.
"""

from __future__ import annotations

import copy
from typing import Optional

from .data_models import (
    STATUS_NEW,
    CostList,
    CostListItem,
    CropACAT,
    Section,
    SectionRole,
    YieldActual,
    YieldConsumption,
    YieldRange,
)
from .months import UNSET_MONTH, get_month
from .utils import new_id

SEED_SOURCES = ("ESE", "Union", "Private")


def _cost_section(role: SectionRole, number: int, **extra) -> Section:
    return Section(title=role.value, number=number, cost_list=CostList(), **extra)


def _inputs_and_activities() -> Section:
    inputs = Section(
        title=SectionRole.INPUT.value,
        number=1,
        sub_sections=[
            _cost_section(SectionRole.SEED, 1, variety="", seed_source=list(SEED_SOURCES)),
            _cost_section(SectionRole.FERTILIZERS, 2),
            _cost_section(SectionRole.CHEMICALS, 3),
        ],
    )
    return Section(
        title=SectionRole.INPUTS_AND_ACTIVITIES.value,
        number=1,
        sub_sections=[
            inputs,
            _cost_section(SectionRole.LABOUR, 2),
            _cost_section(SectionRole.OTHER_COSTS, 3),
        ],
    )


def _yield_section(role: SectionRole, number: int, **extra) -> Section:
    return Section(
        title=role.value,
        number=number,
        yield_item=CostListItem(),
        estimated_yield=YieldRange(),
        estimated_price=YieldRange(),
        achieved_yield=YieldActual(),
        achieved_price=YieldActual(),
        **extra,
    )


def _revenue() -> Section:
    return Section(
        title=SectionRole.REVENUE.value,
        number=2,
        sub_sections=[
            _yield_section(SectionRole.PROBABLE_YIELD, 1, yield_consumption=YieldConsumption()),
            _yield_section(SectionRole.MAXIMUM_YIELD, 2),
            _yield_section(SectionRole.MINIMUM_YIELD, 3),
        ],
    )


def build_template(crop: str, first_expense_month: Optional[str] = None) -> CropACAT:
    """Return a blank crop ACAT template for ``crop``.

    ``first_expense_month`` is validated when given; otherwise the template
    keeps the unset placeholder until an officer picks a month.
    """
    month = UNSET_MONTH
    if first_expense_month and first_expense_month != UNSET_MONTH:
        month = get_month(first_expense_month).name
    return CropACAT(
        crop=crop,
        title=f"{crop} ACAT" if crop else "",
        first_expense_month=month,
        sections=[_inputs_and_activities(), _revenue()],
    )


def _renew(section: Section) -> None:
    section.id = new_id()
    if section.cost_list is not None:
        section.cost_list.id = new_id()
        for group in section.cost_list.grouped:
            group.id = new_id()
        for item in section.cost_list.items():
            item.id = new_id()
    if section.yield_item is not None:
        section.yield_item.id = new_id()
    if section.yield_consumption is not None:
        section.yield_consumption.id = new_id()
    for sub in section.sub_sections:
        _renew(sub)


def clone_for_client(template: CropACAT) -> CropACAT:
    """Return a deep copy of ``template`` with fresh identities throughout.

    The copy starts its own approval workflow, so its status is reset to
    ``new``. The template is left untouched.
    """
    crop = copy.deepcopy(template)
    crop.id = new_id()
    crop.status = STATUS_NEW
    for section in crop.sections:
        _renew(section)
    return crop
