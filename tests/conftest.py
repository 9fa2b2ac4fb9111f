"""
Shared fixtures for the acat_calc tests.

Documents are built from the blank template so every test starts from the
same tree shape the form builder produces.
"""

import json
import logging

import pytest

from acat_calc.data_models import CostListItem, GroupedList, ItemFigures, SectionRole
from acat_calc.loader import dump_crop_acat
from acat_calc.template import build_template
from helpers import cash_flow, set_sub_totals


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers the CLI attaches so they never outlive a test."""
    yield
    logging.getLogger("acat_calc").handlers.clear()


@pytest.fixture
def crop():
    """Blank maize crop ACAT starting in November."""
    return build_template("Maize", first_expense_month="nov")


@pytest.fixture
def filled_crop(crop):
    """Crop ACAT with sub-totals, cash flows and cost-list items filled in."""
    inputs = crop.section(SectionRole.INPUTS_AND_ACTIVITIES)
    input_section = inputs.find(SectionRole.INPUT)
    set_sub_totals(inputs.find(SectionRole.LABOUR), 10, 8)
    set_sub_totals(inputs.find(SectionRole.OTHER_COSTS), 5, 5)
    set_sub_totals(input_section.find(SectionRole.SEED), 20, 15)
    set_sub_totals(input_section.find(SectionRole.FERTILIZERS), 30, 25)
    set_sub_totals(input_section.find(SectionRole.CHEMICALS), 10, 5)

    seed = input_section.find(SectionRole.SEED)
    seed.estimated_cash_flow = cash_flow(nov=20)
    seed.achieved_cash_flow = cash_flow(nov=10, dec=5)
    seed.cost_list.linear = [
        CostListItem(item="Hybrid seed", unit="kg",
                     estimated=ItemFigures(value=10, unit_price=2, total_price=20,
                                           cash_flow=cash_flow(nov=20))),
        CostListItem(item="Local seed", unit="kg"),
    ]

    chemicals = input_section.find(SectionRole.CHEMICALS)
    chemicals.cost_list.grouped = [
        GroupedList(title="Insecticide", items=[
            CostListItem(item="Malathion", unit="l",
                         estimated=ItemFigures(total_price=6, cash_flow=cash_flow(jan=6)))
        ]),
        GroupedList(title="Fungicide", items=[
            CostListItem(item="Mancozeb", unit="kg",
                         estimated=ItemFigures(total_price=4, cash_flow=cash_flow(feb=4)))
        ]),
    ]

    crop.estimated.net_cash_flow = cash_flow(nov=-20, dec=-10, june=100)
    return crop


@pytest.fixture
def crop_file(tmp_path, filled_crop):
    path = tmp_path / "crop.json"
    path.write_text(json.dumps(dump_crop_acat(filled_crop)), encoding="utf-8")
    return path
