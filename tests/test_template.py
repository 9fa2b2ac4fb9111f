"""
Tests for crop ACAT templates and client copies.
"""

import pytest

from acat_calc.aggregator import compute_totals
from acat_calc.data_models import SectionRole
from acat_calc.errors import PreconditionError
from acat_calc.template import SEED_SOURCES, build_template, clone_for_client


def collect_ids(crop):
    ids = [crop.id]

    def walk(section):
        ids.append(section.id)
        if section.cost_list is not None:
            ids.append(section.cost_list.id)
            ids.extend(group.id for group in section.cost_list.grouped)
            ids.extend(item.id for item in section.cost_list.items())
        if section.yield_item is not None:
            ids.append(section.yield_item.id)
        if section.yield_consumption is not None:
            ids.append(section.yield_consumption.id)
        for sub in section.sub_sections:
            walk(sub)

    for section in crop.sections:
        walk(section)
    return ids


class TestBuildTemplate:
    """Test the blank template shape."""

    def test_top_level_sections(self, crop):
        assert [s.title for s in crop.sections] == ["Inputs And Activity Costs", "Revenue"]
        assert crop.title == "Maize ACAT"
        assert crop.status == "new"
        assert crop.first_expense_month == "nov"

    def test_input_costs_subtree(self, crop):
        inputs = crop.section(SectionRole.INPUTS_AND_ACTIVITIES)
        assert [s.title for s in inputs.sub_sections] == ["Input", "Labour Cost", "Other Costs"]
        input_section = inputs.find(SectionRole.INPUT)
        assert [s.title for s in input_section.sub_sections] == ["Seed", "Fertilizers", "Chemicals"]
        assert input_section.cost_list is None
        for leaf in input_section.sub_sections + inputs.sub_sections[1:]:
            assert leaf.cost_list is not None
            assert list(leaf.cost_list.items()) == []

    def test_seed_details(self, crop):
        seed = crop.section(SectionRole.INPUTS_AND_ACTIVITIES).find(SectionRole.INPUT).find(SectionRole.SEED)
        assert seed.seed_source == list(SEED_SOURCES)
        assert seed.variety == ""

    def test_yield_sections(self, crop):
        revenue = crop.section(SectionRole.REVENUE)
        assert [s.number for s in revenue.sub_sections] == [1, 2, 3]
        probable = revenue.find(SectionRole.PROBABLE_YIELD)
        assert probable.yield_consumption is not None
        assert revenue.find(SectionRole.MINIMUM_YIELD).yield_consumption is None
        assert all(s.yield_item is not None for s in revenue.sub_sections)
        for sub in revenue.sub_sections:
            assert sub.estimated_yield.max == 0
            assert sub.achieved_price.amount == 0

    def test_blank_template_totals(self, crop):
        totals = compute_totals(crop)
        assert (totals.estimated, totals.achieved) == (0, 0)
        assert all(v == 0 for v in crop.estimated.net_cash_flow.values())

    def test_month_is_normalised(self):
        assert build_template("Teff", " SEP ").first_expense_month == "sep"

    @pytest.mark.parametrize("month", [None, "None", ""])
    def test_month_may_stay_unset(self, month):
        assert build_template("Teff", month).first_expense_month == "None"

    def test_unknown_month_fails(self):
        with pytest.raises(PreconditionError):
            build_template("Teff", "september")


class TestCloneForClient:
    """Test copying a template for a client."""

    def test_fresh_identities(self, filled_crop):
        clone = clone_for_client(filled_crop)
        original_ids = collect_ids(filled_crop)
        clone_ids = collect_ids(clone)
        assert len(clone_ids) == len(original_ids)
        assert len(set(clone_ids)) == len(clone_ids)
        assert not set(clone_ids) & set(original_ids)

    def test_status_reset_and_content_kept(self, filled_crop):
        filled_crop.status = "approved"
        clone = clone_for_client(filled_crop)
        assert clone.status == "new"
        assert filled_crop.status == "approved"
        seed = clone.section(SectionRole.INPUTS_AND_ACTIVITIES).find(SectionRole.INPUT).find(SectionRole.SEED)
        assert seed.estimated_sub_total == 20
        assert [i.item for i in seed.cost_list.linear] == ["Hybrid seed", "Local seed"]

    def test_clone_is_independent(self, crop):
        clone = clone_for_client(crop)
        clone.section(SectionRole.REVENUE).sub_sections.clear()
        assert len(crop.section(SectionRole.REVENUE).sub_sections) == 3
