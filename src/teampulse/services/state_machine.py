"""Kudos approval state machine with transition validation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from teampulse.errors import InvalidStateError
from teampulse.models.enums import KudosStatus, UserRole

if TYPE_CHECKING:
    from teampulse.models import Kudos


class InvalidTransitionError(InvalidStateError):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        super().__init__(reason or f"Invalid transition from '{from_status}' to '{to_status}'")


def requires_approval(sender_role: str, recipient_role: str) -> bool:
    """Whether kudos between these roles must wait for manager approval.

    Only ADMIN -> USER kudos are gated. The direction is unusual (a
    subordinate's kudos would normally be the reviewed one) but it is the
    product rule as shipped; change it only with product sign-off.
    """
    return sender_role == UserRole.ADMIN.value and recipient_role == UserRole.USER.value


def initial_status(sender_role: str, recipient_role: str) -> KudosStatus:
    """Status a newly created kudos starts in."""
    if requires_approval(sender_role, recipient_role):
        return KudosStatus.PENDING
    return KudosStatus.APPROVED


class KudosStateMachine:
    """State machine for kudos status transitions.

    Allowed transitions:
    - PENDING → APPROVED
    - PENDING → REJECTED

    APPROVED and REJECTED are terminal.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        KudosStatus.PENDING.value: [KudosStatus.APPROVED.value, KudosStatus.REJECTED.value],
        KudosStatus.APPROVED.value: [],
        KudosStatus.REJECTED.value: [],
    }

    # Statuses that count towards sent/received totals
    COUNTED = {KudosStatus.APPROVED.value}

    def __init__(self, kudos: Kudos):
        self.kudos = kudos

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        return to_status in cls.VALID_TRANSITIONS.get(from_status, [])

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            reason = None
            if from_status != KudosStatus.PENDING.value:
                reason = "Kudos is not pending approval"
            raise InvalidTransitionError(from_status, to_status, reason)

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return not cls.VALID_TRANSITIONS.get(status)

    @classmethod
    def is_counted(cls, status: str) -> bool:
        """Whether a kudos in this status is reflected in user counters."""
        return status in cls.COUNTED

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])

    def transition_to(self, to_status: KudosStatus | str, reason: str | None = None) -> None:
        """Move the wrapped kudos to ``to_status``, recording the reason."""
        target = KudosStatus(to_status).value
        self.validate_transition(self.kudos.status, target)
        self.kudos.status = target
        self.kudos.approval_reason = reason
