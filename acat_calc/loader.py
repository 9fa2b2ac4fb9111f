"""Conversion between plain nested documents and the typed form tree.

The document loader hands the calculator a fully populated crop ACAT as
nested dicts and lists (decoded JSON). ``load_crop_acat`` validates that
structure once and builds the typed tree, so the calculations can assume a
well-formed shape. ``dump_crop_acat`` goes the other way for persistence
writers and JSON export.

Problems are reported as ``StructureError`` with a dotted path to the
offending field, e.g. ``sections[0].sub_sections[1].estimated_sub_total``.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .data_models import (
    ACATTotals,
    ClientACAT,
    CostList,
    CostListItem,
    CropACAT,
    GroupedList,
    ItemFigures,
    Section,
    SectionRole,
    YieldActual,
    YieldConsumption,
    YieldRange,
)
from .errors import StructureError
from .months import UNSET_MONTH, cash_flow_from_mapping
from .utils import new_id, number_from_value

logger = logging.getLogger(__name__)


def _mapping(data: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise StructureError(f"{path}: expected an object, got {type(data).__name__}")
    return data


def _list(data: Mapping[str, Any], key: str, path: str) -> List[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise StructureError(f"{path}.{key}: expected a list, got {type(value).__name__}")
    return value


def _number(data: Mapping[str, Any], key: str, path: str) -> float:
    try:
        return number_from_value(data.get(key))
    except ValueError as exc:
        raise StructureError(f"{path}.{key}: {exc}") from exc


def _cash_flow(value: Any, path: str) -> Dict[str, float]:
    if value is not None and not isinstance(value, Mapping):
        raise StructureError(f"{path}: expected a month-keyed object")
    try:
        return cash_flow_from_mapping(value)
    except StructureError as exc:
        raise StructureError(f"{path}: {exc}") from exc


def _identity(data: Mapping[str, Any]) -> str:
    return str(data.get("id") or data.get("_id") or new_id())


def _figures(data: Any, path: str, fallback_cash_flow: Any = None) -> ItemFigures:
    data = _mapping(data or {}, path)
    cash_flow = data.get("cash_flow", fallback_cash_flow)
    return ItemFigures(
        value=_number(data, "value", path),
        unit_price=_number(data, "unit_price", path),
        total_price=_number(data, "total_price", path),
        cash_flow=_cash_flow(cash_flow, f"{path}.cash_flow"),
    )


def load_cost_list_item(data: Any, path: str = "item") -> CostListItem:
    data = _mapping(data, path)
    # Older items keep a single cash flow next to the figures; it is the estimate.
    return CostListItem(
        item=str(data.get("item") or ""),
        unit=str(data.get("unit") or ""),
        estimated=_figures(data.get("estimated"), f"{path}.estimated", data.get("cash_flow")),
        achieved=_figures(data.get("achieved"), f"{path}.achieved"),
        id=_identity(data),
    )


def _cost_list(data: Any, path: str) -> CostList:
    data = _mapping(data, path)
    linear = [
        load_cost_list_item(item, f"{path}.linear[{i}]")
        for i, item in enumerate(_list(data, "linear", path))
    ]
    grouped = []
    for i, group in enumerate(_list(data, "grouped", path)):
        group_path = f"{path}.grouped[{i}]"
        group = _mapping(group, group_path)
        grouped.append(
            GroupedList(
                title=str(group.get("title") or ""),
                items=[
                    load_cost_list_item(item, f"{group_path}.items[{j}]")
                    for j, item in enumerate(_list(group, "items", group_path))
                ],
                id=_identity(group),
            )
        )
    return CostList(linear=linear, grouped=grouped, id=_identity(data))


def _yield_consumption(data: Any, path: str) -> YieldConsumption:
    data = _mapping(data, path)
    return YieldConsumption(
        own=_number(data, "own", path),
        seed_reserve=_number(data, "seed_reserve", path),
        for_market=_number(data, "for_market", path),
        id=_identity(data),
    )


def _unit(data: Mapping[str, Any], unit_key: str) -> str:
    return str((data["unit"] if "unit" in data else data.get(unit_key)) or "")


def _yield_range(data: Any, path: str, unit_key: str) -> YieldRange:
    data = _mapping(data, path)
    return YieldRange(
        unit=_unit(data, unit_key),
        max=_number(data, "max", path),
        min=_number(data, "min", path),
        avg=_number(data, "avg", path),
    )


def _yield_actual(data: Any, path: str, unit_key: str, amount_key: str) -> YieldActual:
    data = _mapping(data, path)
    if "amount" in data:
        amount_key = "amount"
    return YieldActual(unit=_unit(data, unit_key), amount=_number(data, amount_key, path))


def _yield_estimates(data: Mapping[str, Any], path: str) -> Tuple[Optional[YieldRange], ...]:
    estimated = data.get("estimated")
    if not isinstance(estimated, Mapping):
        estimated = {}
    found = []
    for kind, unit_key in (("yield", "uofm_for_yield"), ("price", "uofm_for_price")):
        value = data.get(f"estimated_{kind}", estimated.get(kind))
        found.append(
            _yield_range(value, f"{path}.estimated.{kind}", unit_key) if value is not None else None
        )
    return tuple(found)


def _yield_outcomes(data: Mapping[str, Any], path: str) -> Tuple[Optional[YieldActual], ...]:
    # Achieved figures come either flat (uofm_for_yield, yield, ...) or
    # nested per kind ({"yield": {"uofm_for_yield", "max"}}).
    achieved = data.get("achieved")
    if not isinstance(achieved, Mapping):
        achieved = {}
    found = []
    for kind, unit_key in (("yield", "uofm_for_yield"), ("price", "uofm_for_price")):
        stored = data.get(f"achieved_{kind}")
        if stored is not None:
            found.append(_yield_actual(stored, f"{path}.achieved_{kind}", unit_key, "amount"))
        elif isinstance(achieved.get(kind), Mapping):
            found.append(_yield_actual(achieved[kind], f"{path}.achieved.{kind}", unit_key, "max"))
        elif kind in achieved or unit_key in achieved:
            found.append(_yield_actual(achieved, f"{path}.achieved", unit_key, kind))
        else:
            found.append(None)
    return tuple(found)


def load_section(data: Any, path: str = "section") -> Section:
    """Build a ``Section`` (and its subtree) from a plain mapping."""
    data = _mapping(data, path)
    title = data.get("title")
    if not isinstance(title, str):
        raise StructureError(f"{path}.title: expected a string")
    if SectionRole.from_title(title) is None:
        logger.debug("%s: section title %r is outside the template", path, title)

    cost_list = data.get("cost_list")
    yield_item = data.get("yield_item", data.get("yield"))
    yield_consumption = data.get("yield_consumption", data.get("marketable_yield"))
    estimated_yield, estimated_price = _yield_estimates(data, path)
    achieved_yield, achieved_price = _yield_outcomes(data, path)
    # Older sections keep a single cash flow; it is the estimate.
    estimated_cash_flow = data.get("estimated_cash_flow", data.get("cash_flow"))
    seed_source = data.get("seed_source") or []
    if not isinstance(seed_source, list):
        raise StructureError(f"{path}.seed_source: expected a list")
    try:
        number = int(data.get("number", 1) or 1)
    except (TypeError, ValueError) as exc:
        raise StructureError(f"{path}.number: expected an integer") from exc

    return Section(
        title=title,
        estimated_sub_total=_number(data, "estimated_sub_total", path),
        achieved_sub_total=_number(data, "achieved_sub_total", path),
        estimated_cash_flow=_cash_flow(estimated_cash_flow, f"{path}.estimated_cash_flow"),
        achieved_cash_flow=_cash_flow(data.get("achieved_cash_flow"), f"{path}.achieved_cash_flow"),
        cost_list=_cost_list(cost_list, f"{path}.cost_list") if cost_list is not None else None,
        sub_sections=[
            load_section(sub, f"{path}.sub_sections[{i}]")
            for i, sub in enumerate(_list(data, "sub_sections", path))
        ],
        number=number,
        variety=data.get("variety"),
        seed_source=[str(s) for s in seed_source],
        yield_item=load_cost_list_item(yield_item, f"{path}.yield") if yield_item is not None else None,
        yield_consumption=(
            _yield_consumption(yield_consumption, f"{path}.yield_consumption")
            if yield_consumption is not None else None
        ),
        estimated_yield=estimated_yield,
        estimated_price=estimated_price,
        achieved_yield=achieved_yield,
        achieved_price=achieved_price,
        id=_identity(data),
    )


def _monthly(value: Any, path: str) -> Dict[str, float]:
    # Legacy documents store a single number here instead of a monthly record.
    if not isinstance(value, Mapping):
        value = None
    return _cash_flow(value, path)


def _totals(data: Any, path: str) -> ACATTotals:
    data = _mapping(data or {}, path)
    return ACATTotals(
        total_cost=_number(data, "total_cost", path),
        total_revenue=_number(data, "total_revenue", path),
        net_income=_number(data, "net_income", path),
        net_cash_flow=_monthly(data.get("net_cash_flow"), f"{path}.net_cash_flow"),
    )


def load_crop_acat(data: Any) -> CropACAT:
    """Validate a plain crop ACAT document and return the typed tree.

    Parameters
    ----------
    data: Mapping
        Decoded crop ACAT document with all sections, cost lists and items
        resolved (no lazy references).

    Raises
    ------
    StructureError
        If any part of the document has the wrong type.
    """
    data = _mapping(data, "crop_acat")
    first_month = data.get("first_expense_month")
    return CropACAT(
        crop=str(data.get("crop") or ""),
        title=str(data.get("title") or ""),
        status=str(data.get("status") or "new"),
        first_expense_month=str(first_month) if first_month else UNSET_MONTH,
        sections=[
            load_section(section, f"sections[{i}]")
            for i, section in enumerate(_list(data, "sections", "crop_acat"))
        ],
        estimated=_totals(data.get("estimated"), "estimated"),
        achieved=_totals(data.get("achieved"), "achieved"),
        cropping_area_size=str(data.get("cropping_area_size") or ""),
        id=_identity(data),
    )


def load_client_acat(data: Any) -> ClientACAT:
    """Validate a client ACAT document holding its crop ACATs."""
    data = _mapping(data, "client_acat")
    key = "ACATs" if "ACATs" in data else "crop_acats"
    crops = []
    for i, crop in enumerate(_list(data, key, "client_acat")):
        try:
            crops.append(load_crop_acat(crop))
        except StructureError as exc:
            raise StructureError(f"{key}[{i}].{exc}") from exc
    loan_product: Optional[Any] = data.get("loan_product")
    return ClientACAT(
        client=str(data.get("client") or ""),
        crop_acats=crops,
        total_cost=_number(data, "total_cost", "client_acat"),
        total_revenue=_number(data, "total_revenue", "client_acat"),
        net_cash_flow=_monthly(data.get("net_cash_flow"), "client_acat.net_cash_flow"),
        cumulative_cash_flow=_monthly(data.get("cumulative_cash_flow"), "client_acat.cumulative_cash_flow"),
        loan_product=str(loan_product) if loan_product else None,
        id=_identity(data),
    )


def dump_crop_acat(crop: CropACAT) -> Dict[str, Any]:
    """Return ``crop`` as plain data ready for JSON encoding."""
    return asdict(crop)


def dump_client_acat(client: ClientACAT) -> Dict[str, Any]:
    return asdict(client)
