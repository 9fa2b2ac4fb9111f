"""
Tests for the sub-total rollup.
"""

import logging

import pytest

from acat_calc.aggregator import compute_totals, refresh_client_acat, update_totals
from acat_calc.data_models import ClientACAT, CropACAT, Section, SectionRole
from acat_calc.errors import WorkflowError
from acat_calc.template import build_template
from helpers import cash_flow, set_sub_totals


def revenue_document(probable, maximum, minimum):
    """Crop ACAT whose Revenue holds one group of the three yield sections."""
    group = Section(title="Crop yield", sub_sections=[
        Section(title="Probable Yield", estimated_sub_total=probable[0], achieved_sub_total=probable[1]),
        Section(title="Maximum Yield", estimated_sub_total=maximum[0], achieved_sub_total=maximum[1]),
        Section(title="Minimum Yield", estimated_sub_total=minimum[0], achieved_sub_total=minimum[1]),
    ])
    return CropACAT(sections=[
        Section(title="Inputs And Activity Costs"),
        Section(title="Revenue", sub_sections=[group]),
    ])


class TestInputCosts:
    """Test rollup of the Inputs And Activity Costs subtree."""

    def test_blank_template_rolls_up_to_zero(self, crop):
        totals = update_totals(crop)
        inputs = crop.section(SectionRole.INPUTS_AND_ACTIVITIES)
        assert totals.estimated == 0
        assert inputs.estimated_sub_total == 0
        assert inputs.achieved_sub_total == 0

    def test_role_dispatch(self, filled_crop):
        totals = update_totals(filled_crop)
        inputs = filled_crop.section(SectionRole.INPUTS_AND_ACTIVITIES)
        assert inputs.estimated_sub_total == 75
        assert inputs.achieved_sub_total == 58
        assert totals.estimated_cost == 75
        assert totals.achieved_cost == 58
        assert totals.estimated_revenue == 0

    def test_idempotent(self, filled_crop):
        first = update_totals(filled_crop)
        second = update_totals(filled_crop)
        inputs = filled_crop.section(SectionRole.INPUTS_AND_ACTIVITIES)
        assert first == second
        assert (inputs.estimated_sub_total, inputs.achieved_sub_total) == (75, 58)

    def test_unrecognized_title_is_ignored(self, filled_crop):
        inputs = filled_crop.section(SectionRole.INPUTS_AND_ACTIVITIES)
        inputs.sub_sections.append(Section(title="Irrigation", estimated_sub_total=99, achieved_sub_total=99))
        totals = update_totals(filled_crop)
        assert (totals.estimated, totals.achieved) == (75, 58)

    def test_ignores_cash_flow_detail(self, filled_crop):
        labour = filled_crop.section(SectionRole.INPUTS_AND_ACTIVITIES).find(SectionRole.LABOUR)
        labour.estimated_cash_flow = cash_flow(jan=1000)
        assert compute_totals(filled_crop).estimated == 75

    def test_compute_totals_does_not_write(self, filled_crop):
        compute_totals(filled_crop)
        assert filled_crop.section(SectionRole.INPUTS_AND_ACTIVITIES).estimated_sub_total == 0


class TestRevenue:
    """Test the Revenue part of the rollup."""

    def test_only_probable_yield_counts_as_achieved(self):
        crop = revenue_document(probable=(100, 80), maximum=(150, 120), minimum=(50, 40))
        totals = update_totals(crop)
        assert totals.estimated_revenue == 300
        assert totals.achieved_revenue == 80
        inputs = crop.section(SectionRole.INPUTS_AND_ACTIVITIES)
        assert inputs.estimated_sub_total == 300
        assert inputs.achieved_sub_total == 80

    def test_revenue_adds_to_cost_totals(self, filled_crop):
        revenue = filled_crop.section(SectionRole.REVENUE)
        revenue.sub_sections = [Section(title="Crop yield", sub_sections=[
            Section(title="Probable Yield", estimated_sub_total=40, achieved_sub_total=30),
        ])]
        totals = update_totals(filled_crop)
        assert (totals.estimated, totals.achieved) == (115, 88)

    def test_template_yield_sections_have_no_children(self, crop):
        revenue = crop.section(SectionRole.REVENUE)
        for sub in revenue.sub_sections:
            set_sub_totals(sub, 10, 10)
        assert compute_totals(crop).estimated_revenue == 0


class TestUpdateTotals:
    """Test write-back rules."""

    def test_locked_crop_is_rejected(self, filled_crop):
        filled_crop.status = "authorized"
        with pytest.raises(WorkflowError):
            update_totals(filled_crop)

    def test_missing_inputs_section_logs_warning(self, caplog):
        crop = CropACAT(sections=[Section(title="Revenue")])
        with caplog.at_level(logging.WARNING, logger="acat_calc"):
            totals = update_totals(crop)
        assert totals.estimated == 0
        assert "Inputs And Activity Costs" in caplog.text


class TestRefreshClientACAT:
    """Test rollup over all crops of a client."""

    def test_refreshes_each_crop_and_sums_client_figures(self, filled_crop):
        beans = build_template("Beans", first_expense_month="mar")
        set_sub_totals(beans.section(SectionRole.INPUTS_AND_ACTIVITIES).find(SectionRole.LABOUR), 7, 6)
        filled_crop.estimated.total_cost = 75
        filled_crop.estimated.total_revenue = 200
        beans.estimated.total_cost = 7
        beans.estimated.total_revenue = 30
        beans.estimated.net_cash_flow = cash_flow(jan=5, june=-3)

        client = ClientACAT(client="client-1", crop_acats=[filled_crop, beans])
        results = refresh_client_acat(client)

        assert results[filled_crop.id].estimated == 75
        assert results[beans.id].estimated == 7
        assert beans.section(SectionRole.INPUTS_AND_ACTIVITIES).estimated_sub_total == 7
        assert client.total_cost == 82
        assert client.total_revenue == 230
        assert client.net_cash_flow["jan"] == 5
        assert client.net_cash_flow["june"] == 97
        assert client.cumulative_cash_flow["jan"] == 5
        assert client.cumulative_cash_flow["dec"] == pytest.approx(5 + 97 - 20 - 10)

    def test_locked_crop_keeps_stored_sub_total(self, filled_crop):
        filled_crop.status = "loan_granted"
        client = ClientACAT(crop_acats=[filled_crop])
        results = refresh_client_acat(client)
        assert results[filled_crop.id].estimated == 75
        assert filled_crop.section(SectionRole.INPUTS_AND_ACTIVITIES).estimated_sub_total == 0
