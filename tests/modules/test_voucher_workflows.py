"""
Workflow Transition Tests.

Both lifecycle workflows must have:
1. An initial state that exists in states
2. All transition from/to states exist in states
3. No orphan states (unreachable states), except the legacy payment_closed
4. Terminal states with no outgoing transitions
"""

import pytest

from zoompay_kernel.domain.values import Designation
from zoompay_kernel.domain.workflow import allowed_from, required_role
from zoompay_modules.vouchers.models import ReceiptStatus, VoucherStatus
from zoompay_modules.vouchers.workflows import (
    COMMENT_REQUIRED,
    PROOF_UPLOADED,
    REASON_REQUIRED,
    RECEIPT_WORKFLOW,
    VOUCHER_COMMENT_ROLES,
    VOUCHER_WORKFLOW,
)

ALL_WORKFLOWS = [
    ("Receipt", RECEIPT_WORKFLOW),
    ("Voucher", VOUCHER_WORKFLOW),
]


def _reachable(workflow) -> set[str]:
    reachable = {workflow.initial_state}
    changed = True
    while changed:
        changed = False
        for transition in workflow.transitions:
            if transition.from_state in reachable and transition.to_state not in reachable:
                reachable.add(transition.to_state)
                changed = True
    return reachable


class TestWorkflowStates:

    @pytest.mark.parametrize("name,workflow", ALL_WORKFLOWS)
    def test_initial_state_exists(self, name, workflow):
        assert workflow.initial_state in workflow.states

    @pytest.mark.parametrize("name,workflow", ALL_WORKFLOWS)
    def test_transition_states_exist(self, name, workflow):
        for transition in workflow.transitions:
            assert transition.from_state in workflow.states
            assert transition.to_state in workflow.states

    def test_receipt_states_match_enum(self):
        assert set(RECEIPT_WORKFLOW.states) == {s.value for s in ReceiptStatus}

    def test_voucher_states_match_enum(self):
        assert set(VOUCHER_WORKFLOW.states) == {s.value for s in VoucherStatus}


class TestWorkflowReachability:

    def test_receipt_states_all_reachable(self):
        assert _reachable(RECEIPT_WORKFLOW) == set(RECEIPT_WORKFLOW.states)

    def test_only_legacy_voucher_state_unreachable(self):
        unreachable = set(VOUCHER_WORKFLOW.states) - _reachable(VOUCHER_WORKFLOW)
        assert unreachable == {VoucherStatus.PAYMENT_CLOSED.value}


class TestWorkflowTerminalStates:

    @pytest.mark.parametrize("name,workflow", ALL_WORKFLOWS)
    def test_terminal_states_have_no_outgoing(self, name, workflow):
        states_with_outgoing = {t.from_state for t in workflow.transitions}
        assert not states_with_outgoing & set(workflow.terminal_states)

    def test_voucher_terminal_states(self):
        assert set(VOUCHER_WORKFLOW.terminal_states) == {
            "payment_completed", "rejected", "payment_closed",
        }

    def test_receipt_terminal_states(self):
        assert set(RECEIPT_WORKFLOW.terminal_states) == {"rejected", "voucher_created"}


class TestRoleTable:
    """Who may take each action, and from where."""

    @pytest.mark.parametrize(
        "workflow,action,role,from_states",
        [
            (RECEIPT_WORKFLOW, "approve", Designation.FINANCE, ("pending",)),
            (RECEIPT_WORKFLOW, "reject", Designation.FINANCE, ("pending",)),
            (RECEIPT_WORKFLOW, "create_voucher", Designation.VOUCHER, ("approved",)),
            (VOUCHER_WORKFLOW, "check", Designation.CHECKER, ("voucher_created",)),
            (VOUCHER_WORKFLOW, "reject_at_check", Designation.CHECKER, ("voucher_created",)),
            (VOUCHER_WORKFLOW, "initiate", Designation.INITIATOR, ("checked",)),
            (VOUCHER_WORKFLOW, "release", Designation.PAYMENT, ("initiated",)),
            (VOUCHER_WORKFLOW, "reject_at_release", Designation.PAYMENT, ("initiated",)),
            (VOUCHER_WORKFLOW, "upload_proof", Designation.INITIATOR, ("payment_released",)),
        ],
    )
    def test_action_role_and_source(self, workflow, action, role, from_states):
        assert required_role(workflow, action) == role.value
        assert allowed_from(workflow, action) == from_states

    def test_anyone_approved_may_submit(self):
        assert required_role(RECEIPT_WORKFLOW, "submit") is None

    def test_voucher_creation_role(self):
        assert required_role(VOUCHER_WORKFLOW, "create") == Designation.VOUCHER.value

    def test_guards(self):
        guards = {t.action: t.guard for t in VOUCHER_WORKFLOW.transitions}
        assert guards["check"] is COMMENT_REQUIRED
        assert guards["reject_at_release"] is REASON_REQUIRED
        assert guards["upload_proof"] is PROOF_UPLOADED
        assert guards["initiate"] is None

    def test_comment_roles_exclude_admin_and_finance(self):
        assert "admin" not in VOUCHER_COMMENT_ROLES
        assert "finance" not in VOUCHER_COMMENT_ROLES
        assert "checker" in VOUCHER_COMMENT_ROLES
