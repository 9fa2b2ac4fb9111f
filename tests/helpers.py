"""Small builders shared by the test modules."""

from acat_calc.months import empty_cash_flow


def set_sub_totals(section, estimated, achieved):
    section.estimated_sub_total = estimated
    section.achieved_sub_total = achieved


def cash_flow(**values):
    record = empty_cash_flow()
    record.update({k: float(v) for k, v in values.items()})
    return record
