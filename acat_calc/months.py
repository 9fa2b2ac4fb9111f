"""The month table and month rotation used by every cash-flow record.

Cash flows are stored keyed by month name (``jan`` ... ``dec``) with no
meaningful order. Reports present them starting at the client's *first
expense month* and wrapping around the calendar, so a client whose season
starts in November sees ``nov, dec, jan, ..., oct``.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

from .errors import PreconditionError, StructureError
from .utils import number_from_value


@dataclass(frozen=True)
class Month:
    """A calendar month as it appears in cash-flow records.

    ``name`` is the key used in stored records, ``label`` the column header
    shown in reports and ``index`` the zero-based calendar position.
    """

    name: str
    label: str
    full_name: str
    index: int


MONTHS = (
    Month("jan", "Jan", "January", 0),
    Month("feb", "Feb", "February", 1),
    Month("mar", "Mar", "March", 2),
    Month("apr", "Apr", "April", 3),
    Month("may", "May", "May", 4),
    Month("june", "June", "June", 5),
    Month("july", "July", "July", 6),
    Month("aug", "Aug", "August", 7),
    Month("sep", "Sep", "September", 8),
    Month("oct", "Oct", "October", 9),
    Month("nov", "Nov", "November", 10),
    Month("dec", "Dec", "December", 11),
)

MONTH_NAMES = tuple(m.name for m in MONTHS)

MONTHS_BY_NAME: Mapping[str, Month] = MappingProxyType({m.name: m for m in MONTHS})

# Placeholder the form builder stores until an officer picks a month.
UNSET_MONTH = "None"


def get_month(name: Union[str, Month, None]) -> Month:
    """Look up a month by its canonical name.

    Parameters
    ----------
    name: str | Month | None
        A month name such as ``"nov"`` (case and surrounding whitespace are
        ignored) or a ``Month`` instance, which is returned as is.

    Raises
    ------
    PreconditionError
        If the month is unset (``None``, ``""`` or ``"None"``) or unknown.
    """
    if isinstance(name, Month):
        return name
    if name is None or not str(name).strip() or str(name).strip() == UNSET_MONTH:
        raise PreconditionError("First expense month is not set")
    key = str(name).strip().lower()
    try:
        return MONTHS_BY_NAME[key]
    except KeyError:
        raise PreconditionError(
            f"Unknown month {name!r}; expected one of {', '.join(MONTH_NAMES)}"
        ) from None


def rotate_from(start: Union[str, Month, None]) -> List[Month]:
    """Return the twelve months in calendar order starting at ``start``.

    The sequence wraps from December back to January and contains every
    month exactly once, e.g. ``rotate_from("nov")`` gives
    ``nov, dec, jan, feb, ..., oct``.
    """
    first = get_month(start)
    return [MONTHS[(first.index + offset) % 12] for offset in range(12)]


def empty_cash_flow() -> Dict[str, float]:
    """Return a cash-flow record with every month at zero."""
    return {name: 0.0 for name in MONTH_NAMES}


def cash_flow_from_mapping(mapping: Optional[Mapping[str, Any]]) -> Dict[str, float]:
    """Build a fully populated cash-flow record from a month-keyed mapping.

    Missing months default to zero and blank values count as zero. Keys that
    are not month names raise ``StructureError``; bookkeeping keys a stored
    record may carry (``_id``, ``last_updated``) are dropped.
    """
    record = empty_cash_flow()
    if not mapping:
        return record
    for key, value in mapping.items():
        if key in ("_id", "id", "last_updated"):
            continue
        if key not in MONTHS_BY_NAME:
            raise StructureError(f"Unknown cash flow month {key!r}")
        try:
            record[key] = number_from_value(value)
        except ValueError as exc:
            raise StructureError(f"Cash flow for {key!r}: {exc}") from exc
    return record
