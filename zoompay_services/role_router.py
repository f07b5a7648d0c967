"""
zoompay_services.role_router -- Designation to operations, queries and screens.

Responsibility:
    Given a user's designation, say which lifecycle operations a client may
    offer, which work-list queries it may issue, and which screen it lands
    on after sign-in.  Operation grants are derived from the workflow
    tables, so a role can never be offered a transition the engine would
    refuse for role reasons.

Architecture position:
    Services layer.  Reads RECEIPT_WORKFLOW/VOUCHER_WORKFLOW from
    zoompay_modules.vouchers.workflows.  Not a security boundary: the
    lifecycle service re-validates the actor's role on every call.

Invariants:
    - Unknown or missing designations get no operations, no queries and
      the ``home`` screen.
    - ``superuser`` gets no lifecycle operations (administration only).
"""

from __future__ import annotations

from enum import Enum

from zoompay_kernel.domain.values import Designation
from zoompay_kernel.domain.workflow import Workflow, outgoing, required_role
from zoompay_modules.vouchers.workflows import (
    RECEIPT_WORKFLOW,
    VOUCHER_COMMENT_ROLES,
    VOUCHER_WORKFLOW,
)


class Operation(str, Enum):
    SUBMIT_RECEIPT = "submit_receipt"
    DELETE_RECEIPT = "delete_receipt"
    COMMENT_RECEIPT = "add_receipt_comment"
    APPROVE_RECEIPT = "approve_receipt"
    REJECT_RECEIPT = "reject_receipt"
    CREATE_VOUCHER = "create_voucher"
    CHECK_VOUCHER = "check_voucher"
    REJECT_VOUCHER = "reject_voucher"
    INITIATE_PAYMENT = "initiate_payment"
    RELEASE_PAYMENT = "release_payment"
    REJECT_PAYMENT = "reject_payment"
    UPLOAD_PROOF = "upload_proof_of_payment"
    COMMENT_VOUCHER = "add_voucher_comment"


class Query(str, Enum):
    """Work lists, named after the ``VoucherSelector`` methods serving them."""
    MY_RECEIPTS = "receipts_created_by"
    FINANCE_QUEUE = "finance_queue"
    APPROVED_RECEIPTS = "approved_receipts"
    CHECKER_QUEUE = "checker_queue"
    TO_INITIATE = "to_initiate"
    AWAITING_PROOF = "awaiting_proof"
    PAYMENT_QUEUE = "payment_queue"
    MY_VOUCHERS = "vouchers_created_by"


# (workflow_name, action) -> service operation
WORKFLOW_ACTION_TO_OPERATION: dict[tuple[str, str], Operation] = {
    ("receipt", "approve"): Operation.APPROVE_RECEIPT,
    ("receipt", "reject"): Operation.REJECT_RECEIPT,
    ("receipt", "create_voucher"): Operation.CREATE_VOUCHER,
    ("voucher", "check"): Operation.CHECK_VOUCHER,
    ("voucher", "reject_at_check"): Operation.REJECT_VOUCHER,
    ("voucher", "initiate"): Operation.INITIATE_PAYMENT,
    ("voucher", "release"): Operation.RELEASE_PAYMENT,
    ("voucher", "reject_at_release"): Operation.REJECT_PAYMENT,
    ("voucher", "upload_proof"): Operation.UPLOAD_PROOF,
}

LANDING_SCREENS: dict[Designation, str] = {
    Designation.SUPERUSER: "super_user",
    Designation.ADMIN: "admin",
    Designation.FINANCE: "finance",
    Designation.VOUCHER: "voucher",
    Designation.CHECKER: "checker",
    Designation.INITIATOR: "initiator",
    Designation.PAYMENT: "payment_releaser",
}
DEFAULT_SCREEN = "home"

_EXTRA_OPERATIONS: dict[Designation, frozenset[Operation]] = {
    Designation.ADMIN: frozenset({
        Operation.SUBMIT_RECEIPT,
        Operation.DELETE_RECEIPT,
        Operation.COMMENT_RECEIPT,
    }),
    Designation.FINANCE: frozenset({Operation.COMMENT_RECEIPT}),
}

_QUERIES: dict[Designation, frozenset[Query]] = {
    Designation.ADMIN: frozenset({Query.MY_RECEIPTS}),
    Designation.FINANCE: frozenset({Query.FINANCE_QUEUE}),
    Designation.VOUCHER: frozenset({Query.APPROVED_RECEIPTS, Query.MY_VOUCHERS}),
    Designation.CHECKER: frozenset({Query.CHECKER_QUEUE}),
    Designation.INITIATOR: frozenset({Query.TO_INITIATE, Query.AWAITING_PROOF}),
    Designation.PAYMENT: frozenset({Query.PAYMENT_QUEUE}),
    Designation.SUPERUSER: frozenset(),
}

_WORKFLOWS: tuple[Workflow, ...] = (RECEIPT_WORKFLOW, VOUCHER_WORKFLOW)


def _designation(value: Designation | str | None) -> Designation | None:
    if value is None:
        return None
    try:
        return Designation(value)
    except ValueError:
        return None


def _workflow_operations(designation: Designation) -> frozenset[Operation]:
    granted = set()
    for workflow in _WORKFLOWS:
        for action in workflow.actions:
            if required_role(workflow, action) == designation.value:
                granted.add(WORKFLOW_ACTION_TO_OPERATION[(workflow.name, action)])
    return frozenset(granted)


def permitted_operations(designation: Designation | str | None) -> frozenset[Operation]:
    """Lifecycle operations a client may offer to ``designation``."""
    role = _designation(designation)
    if role is None or role == Designation.SUPERUSER:
        return frozenset()
    granted = set(_workflow_operations(role)) | _EXTRA_OPERATIONS.get(role, frozenset())
    if role.value in VOUCHER_COMMENT_ROLES:
        granted.add(Operation.COMMENT_VOUCHER)
    return frozenset(granted)


def permitted_queries(designation: Designation | str | None) -> frozenset[Query]:
    role = _designation(designation)
    if role is None:
        return frozenset()
    return _QUERIES[role]


def can_perform(designation: Designation | str | None, operation: Operation) -> bool:
    return operation in permitted_operations(designation)


def landing_screen(designation: Designation | str | None) -> str:
    role = _designation(designation)
    if role is None:
        return DEFAULT_SCREEN
    return LANDING_SCREENS.get(role, DEFAULT_SCREEN)


def available_operations(
    designation: Designation | str | None, workflow: Workflow, state: str
) -> tuple[Operation, ...]:
    """Transitions out of ``state`` that ``designation`` may take, table order."""
    role = _designation(designation)
    if role is None:
        return ()
    return tuple(
        WORKFLOW_ACTION_TO_OPERATION[(workflow.name, t.action)]
        for t in outgoing(workflow, state)
        if t.required_role == role.value
    )
