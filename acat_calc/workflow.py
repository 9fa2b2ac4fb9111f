"""Approval workflow of a crop ACAT.

A crop ACAT is submitted by the loan officer, reviewed (approved or sent
back for changes), authorized and finally turned into a granted loan.
Authorized and granted documents are locked against further edits.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet

from .data_models import LOCKED_STATUSES, STATUS_NEW, CropACAT
from .errors import WorkflowError

logger = logging.getLogger(__name__)

STATUSES = (
    STATUS_NEW,
    "submitted",
    "resubmitted",
    "declined_for_review",
    "approved",
    "authorized",
    "loan_granted",
)

TRANSITIONS: Dict[str, FrozenSet[str]] = {
    STATUS_NEW: frozenset({"submitted"}),
    "submitted": frozenset({"approved", "declined_for_review"}),
    "resubmitted": frozenset({"approved", "declined_for_review"}),
    "declined_for_review": frozenset({"resubmitted"}),
    "approved": frozenset({"authorized"}),
    "authorized": frozenset({"loan_granted"}),
    "loan_granted": frozenset(),
}


def can_transition(current: str, status: str) -> bool:
    return status in TRANSITIONS.get(current, frozenset())


def transition(crop: CropACAT, status: str) -> CropACAT:
    """Move ``crop`` to ``status``.

    Raises
    ------
    WorkflowError
        If ``status`` is unknown or not reachable from the current status.
    """
    if status not in TRANSITIONS:
        raise WorkflowError(
            f"Unknown status {status!r}; expected one of {', '.join(STATUSES)}"
        )
    if not can_transition(crop.status, status):
        raise WorkflowError(f"Cannot move crop ACAT {crop.id} from {crop.status} to {status}")
    logger.info("Crop ACAT %s: %s -> %s", crop.id, crop.status, status)
    crop.status = status
    if status in LOCKED_STATUSES:
        logger.debug("Crop ACAT %s is now locked", crop.id)
    return crop
