# Overview: Status transition tables for sales orders and purchase orders.

"""
Order / Purchase-Order Lifecycle

Each document kind has an explicit transition table: for every TARGET status,
the set of statuses it may be entered from.

Two tables exist per kind:
- PERMISSIVE (default): any status may be set from any status. This is the
  behavior existing clients rely on, e.g. re-opening a CANCELLED order.
- STRICT: forward-only flows. Enabled with ENFORCE_STATUS_TRANSITIONS=true.

Setting a document to its current status is always allowed (no-op).
Unknown target statuses are always rejected, whichever table is active.
"""

from __future__ import annotations

from flask import current_app

from ..models.sales import ORDER_STATUSES
from ..models.purchasing import PURCHASE_ORDER_STATUSES
from ..validation import ValidationError, require_choice


class LifecycleError(ValidationError):
    """Raised when a status transition is not allowed."""


STATUSES = {
    "order": ORDER_STATUSES,
    "purchase_order": PURCHASE_ORDER_STATUSES,
}

PERMISSIVE_TRANSITIONS = {
    kind: {target: frozenset(statuses) for target in statuses}
    for kind, statuses in STATUSES.items()
}

STRICT_TRANSITIONS = {
    "order": {
        "PENDING": frozenset(),
        "PROCESSING": frozenset({"PENDING"}),
        "COMPLETED": frozenset({"PENDING", "PROCESSING"}),
        "CANCELLED": frozenset({"PENDING", "PROCESSING", "COMPLETED"}),
        "RETURNED": frozenset({"PROCESSING", "COMPLETED"}),
    },
    "purchase_order": {
        "DRAFT": frozenset(),
        "ORDERED": frozenset({"DRAFT"}),
        "RECEIVED": frozenset({"ORDERED"}),
        "CANCELLED": frozenset({"DRAFT", "ORDERED"}),
    },
}


def transition_table(kind: str) -> dict[str, frozenset]:
    if current_app.config.get("ENFORCE_STATUS_TRANSITIONS"):
        return STRICT_TRANSITIONS[kind]
    return PERMISSIVE_TRANSITIONS[kind]


def can_transition(kind: str, from_status: str, to_status: str) -> bool:
    if from_status == to_status:
        return True
    return from_status in transition_table(kind).get(to_status, frozenset())


def require_transition(kind: str, from_status: str, to_status) -> str:
    """
    Validate the target status and the move into it.

    Raises:
        ValidationError: unknown target status
        LifecycleError: transition not allowed by the active table
    """
    require_choice(to_status, STATUSES[kind], "status")
    if not can_transition(kind, from_status, to_status):
        raise LifecycleError(f"Cannot change status from {from_status} to {to_status}")
    return to_status
