"""Data models for the A-CAT calculator.

This module defines dataclasses for the crop ACAT form tree: sections and
their sub-sections, cost lists with linear and grouped items, yield details
and the document-level totals. The tree has a fixed template shape, so each
section's semantic role is resolved from its title into a ``SectionRole``
and the calculations dispatch on that role instead of on list positions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

from .months import Month, empty_cash_flow
from .utils import new_id

__all__ = [
    "Month",
    "SectionRole",
    "ItemFigures",
    "CostListItem",
    "GroupedList",
    "CostList",
    "YieldConsumption",
    "YieldRange",
    "YieldActual",
    "Section",
    "ACATTotals",
    "CropACAT",
    "ClientACAT",
    "STATUS_NEW",
    "LOCKED_STATUSES",
    "YIELD_ROLES",
]

STATUS_NEW = "new"

# Once a crop ACAT reaches one of these statuses only report reads are allowed.
LOCKED_STATUSES = frozenset({"authorized", "loan_granted"})


class SectionRole(Enum):
    """Semantic role of a section in the crop ACAT template.

    The values are the titles the form builder gives each section.
    """

    INPUTS_AND_ACTIVITIES = "Inputs And Activity Costs"
    INPUT = "Input"
    SEED = "Seed"
    FERTILIZERS = "Fertilizers"
    CHEMICALS = "Chemicals"
    LABOUR = "Labour Cost"
    OTHER_COSTS = "Other Costs"
    REVENUE = "Revenue"
    PROBABLE_YIELD = "Probable Yield"
    MAXIMUM_YIELD = "Maximum Yield"
    MINIMUM_YIELD = "Minimum Yield"

    @classmethod
    def from_title(cls, title: str) -> Optional["SectionRole"]:
        """Return the role for ``title`` or ``None`` for titles outside the template."""
        try:
            return cls(title)
        except ValueError:
            return None


YIELD_ROLES = frozenset(
    {SectionRole.PROBABLE_YIELD, SectionRole.MAXIMUM_YIELD, SectionRole.MINIMUM_YIELD}
)


@dataclass
class ItemFigures:
    """The estimated or achieved block of a cost-list item.

    Attributes
    ----------
    value: float
        Quantity (in the item's unit).
    unit_price: float
        Price per unit.
    total_price: float
        Total price as entered on the form.
    cash_flow: Dict[str, float]
        Month-keyed spending (or income) for this item.
    """

    value: float = 0.0
    unit_price: float = 0.0
    total_price: float = 0.0
    cash_flow: Dict[str, float] = field(default_factory=empty_cash_flow)


@dataclass
class CostListItem:
    """A single expense or revenue line of a cost list."""

    item: str = ""
    unit: str = ""
    estimated: ItemFigures = field(default_factory=ItemFigures)
    achieved: ItemFigures = field(default_factory=ItemFigures)
    id: str = field(default_factory=new_id)


@dataclass
class GroupedList:
    """A named bucket of items inside a cost list, e.g. "Insecticide"."""

    title: str = ""
    items: List[CostListItem] = field(default_factory=list)
    id: str = field(default_factory=new_id)


@dataclass
class CostList:
    """The cost list owned by a section."""

    linear: List[CostListItem] = field(default_factory=list)
    grouped: List[GroupedList] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def items(self) -> Iterator[CostListItem]:
        """Yield linear items first, then the items of every group in order."""
        yield from self.linear
        for group in self.grouped:
            yield from group.items


@dataclass
class YieldConsumption:
    """How the probable yield is split between own use, seed and market."""

    own: float = 0.0
    seed_reserve: float = 0.0
    for_market: float = 0.0
    id: str = field(default_factory=new_id)


@dataclass
class YieldRange:
    """Expected yield or price of a yield section as a max/min/avg range."""

    unit: str = ""
    max: float = 0.0
    min: float = 0.0
    avg: float = 0.0


@dataclass
class YieldActual:
    """Achieved yield or price of a yield section."""

    unit: str = ""
    amount: float = 0.0


@dataclass
class Section:
    """A node of the crop ACAT form tree.

    Only some attributes apply to a given role: ``variety`` and
    ``seed_source`` belong to the Seed section. ``yield_item``,
    ``yield_consumption`` and the estimated/achieved yield and price figures
    belong to the yield sections under Revenue.
    """

    title: str
    estimated_sub_total: float = 0.0
    achieved_sub_total: float = 0.0
    estimated_cash_flow: Dict[str, float] = field(default_factory=empty_cash_flow)
    achieved_cash_flow: Dict[str, float] = field(default_factory=empty_cash_flow)
    cost_list: Optional[CostList] = None
    sub_sections: List["Section"] = field(default_factory=list)
    number: int = 1
    variety: Optional[str] = None
    seed_source: List[str] = field(default_factory=list)
    yield_item: Optional[CostListItem] = None
    yield_consumption: Optional[YieldConsumption] = None
    estimated_yield: Optional[YieldRange] = None
    estimated_price: Optional[YieldRange] = None
    achieved_yield: Optional[YieldActual] = None
    achieved_price: Optional[YieldActual] = None
    id: str = field(default_factory=new_id)

    @property
    def role(self) -> Optional[SectionRole]:
        return SectionRole.from_title(self.title)

    def find(self, role: SectionRole) -> Optional["Section"]:
        """Return the first direct sub-section with ``role``, if any."""
        for sub in self.sub_sections:
            if sub.role is role:
                return sub
        return None


@dataclass
class ACATTotals:
    """Document-level estimated or achieved figures of a crop ACAT."""

    total_cost: float = 0.0
    total_revenue: float = 0.0
    net_income: float = 0.0
    net_cash_flow: Dict[str, float] = field(default_factory=empty_cash_flow)


@dataclass
class CropACAT:
    """The per-crop form instance of a client.

    ``first_expense_month`` is the month the client's cropping season starts
    (one of the twelve month names) or ``"None"`` until it is chosen.
    """

    crop: str = ""
    title: str = ""
    status: str = STATUS_NEW
    first_expense_month: str = "None"
    sections: List[Section] = field(default_factory=list)
    estimated: ACATTotals = field(default_factory=ACATTotals)
    achieved: ACATTotals = field(default_factory=ACATTotals)
    cropping_area_size: str = ""
    id: str = field(default_factory=new_id)

    @property
    def is_locked(self) -> bool:
        return self.status in LOCKED_STATUSES

    def section(self, role: SectionRole) -> Optional[Section]:
        """Return the first top-level section with ``role``, if any."""
        for section in self.sections:
            if section.role is role:
                return section
        return None


@dataclass
class ClientACAT:
    """A client's application: one crop ACAT per crop plus client-wide totals."""

    client: str = ""
    crop_acats: List[CropACAT] = field(default_factory=list)
    total_cost: float = 0.0
    total_revenue: float = 0.0
    net_cash_flow: Dict[str, float] = field(default_factory=empty_cash_flow)
    cumulative_cash_flow: Dict[str, float] = field(default_factory=empty_cash_flow)
    loan_product: Optional[str] = None
    id: str = field(default_factory=new_id)
