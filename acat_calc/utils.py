"""Utility functions for the A-CAT calculator.

This module provides helpers for coercing loosely typed form values into
Python numbers and for minting identities for freshly created form nodes.
Form documents often carry amounts as strings (cost-list cash flows default
to ``""``), so every numeric field passes through ``number_from_value``
when a document is loaded.
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4


def number_from_value(value: Any) -> float:
    """Convert a form value into a ``float``.

    Parameters
    ----------
    value: Any
        A number, a numeric string (commas are stripped) or an empty value.
        ``None`` and blank strings count as zero, which is what an untouched
        form field holds.

    Returns
    -------
    float
        The numeric value.

    Raises
    ------
    ValueError
        If the value cannot be interpreted as a number.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        cleaned = value.replace(",", "").strip()
        if not cleaned:
            return 0.0
        try:
            return float(cleaned)
        except ValueError as exc:
            raise ValueError(f"Invalid numeric value: {value!r}") from exc
    raise ValueError(f"Invalid numeric value: {value!r}")


def new_id() -> str:
    """Return a fresh identity for a form node."""
    return uuid4().hex
