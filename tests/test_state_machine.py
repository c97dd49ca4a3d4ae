"""Tests for the kudos approval state machine."""

from types import SimpleNamespace

import pytest

from teampulse.models import KudosStatus, UserRole
from teampulse.services.state_machine import (
    InvalidTransitionError,
    KudosStateMachine,
    initial_status,
    requires_approval,
)


class TestRequiresApproval:
    """Approval gating by sender/recipient role."""

    def test_admin_to_user_requires_approval(self):
        assert requires_approval(UserRole.ADMIN.value, UserRole.USER.value) is True

    @pytest.mark.parametrize(
        "sender,recipient",
        [
            (sender.value, recipient.value)
            for sender in UserRole
            for recipient in UserRole
            if not (sender is UserRole.ADMIN and recipient is UserRole.USER)
        ],
    )
    def test_other_pairs_do_not(self, sender, recipient):
        assert requires_approval(sender, recipient) is False

    def test_initial_status(self):
        assert initial_status("ADMIN", "USER") is KudosStatus.PENDING
        assert initial_status("USER", "ADMIN") is KudosStatus.APPROVED
        assert initial_status("MANAGER", "USER") is KudosStatus.APPROVED


class TestKudosStateMachine:
    """Test state machine transitions."""

    def test_valid_transitions(self):
        assert KudosStateMachine.can_transition("PENDING", "APPROVED") is True
        assert KudosStateMachine.can_transition("PENDING", "REJECTED") is True

    def test_terminal_states(self):
        """Approved and rejected kudos never move again."""
        for status in ("APPROVED", "REJECTED"):
            assert KudosStateMachine.is_terminal(status)
            assert KudosStateMachine.get_next_statuses(status) == []
            for target in ("PENDING", "APPROVED", "REJECTED"):
                assert KudosStateMachine.can_transition(status, target) is False
        assert not KudosStateMachine.is_terminal("PENDING")

    def test_validate_transition_raises(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            KudosStateMachine.validate_transition("APPROVED", "REJECTED")

        assert exc_info.value.from_status == "APPROVED"
        assert exc_info.value.to_status == "REJECTED"
        assert exc_info.value.message == "Kudos is not pending approval"
        assert exc_info.value.status_code == 400

    def test_only_approved_is_counted(self):
        assert KudosStateMachine.is_counted("APPROVED")
        assert not KudosStateMachine.is_counted("PENDING")
        assert not KudosStateMachine.is_counted("REJECTED")

    def test_transition_to_records_reason(self):
        kudos = SimpleNamespace(status="PENDING", approval_reason=None)
        KudosStateMachine(kudos).transition_to(KudosStatus.APPROVED, "verified")

        assert kudos.status == "APPROVED"
        assert kudos.approval_reason == "verified"

    def test_transition_from_terminal_leaves_kudos_untouched(self):
        kudos = SimpleNamespace(status="REJECTED", approval_reason="spam")
        with pytest.raises(InvalidTransitionError):
            KudosStateMachine(kudos).transition_to("APPROVED", "changed my mind")

        assert kudos.status == "REJECTED"
        assert kudos.approval_reason == "spam"
