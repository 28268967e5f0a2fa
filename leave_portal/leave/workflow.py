"""Leave request lifecycle.

    pending ──approve──▶ approved
    pending ──reject───▶ rejected
    pending ──cancel───▶ (row deleted)

``approved`` and ``rejected`` are terminal.
"""

from __future__ import annotations

import enum
import uuid
from typing import Optional

from leave_portal.common.constants import LeaveStatus
from leave_portal.common.exceptions import AlreadyProcessed


class LeaveAction(str, enum.Enum):
    approve = "approve"
    reject = "reject"
    cancel = "cancel"


# None means the request is removed rather than moved to a new status
TRANSITIONS: dict[LeaveStatus, dict[LeaveAction, Optional[LeaveStatus]]] = {
    LeaveStatus.pending: {
        LeaveAction.approve: LeaveStatus.approved,
        LeaveAction.reject: LeaveStatus.rejected,
        LeaveAction.cancel: None,
    },
    LeaveStatus.approved: {},
    LeaveStatus.rejected: {},
}

_DECISIONS = {
    LeaveStatus.approved: LeaveAction.approve,
    LeaveStatus.rejected: LeaveAction.reject,
}


def target_status(action: LeaveAction) -> Optional[LeaveStatus]:
    """Status a pending request lands in after *action*."""
    return TRANSITIONS[LeaveStatus.pending][action]


def action_for(decision: LeaveStatus) -> LeaveAction:
    """Map an approver's requested status onto its action."""
    try:
        return _DECISIONS[decision]
    except KeyError:
        raise ValueError(f"'{decision.value}' is not a decision status.") from None


def ensure_transition(
    current: LeaveStatus,
    action: LeaveAction,
    request_id: Optional[uuid.UUID] = None,
) -> Optional[LeaveStatus]:
    """Return the next status, or raise ``AlreadyProcessed`` when *current*
    has no outgoing edge for *action*."""
    allowed = TRANSITIONS.get(current, {})
    if action not in allowed:
        raise AlreadyProcessed(request_id, status=current.value)
    return allowed[action]
