"""
Voucher Lifecycle Workflows (``zoompay_modules.vouchers.workflows``).

Responsibility
--------------
Declares the state machines for the receipt lifecycle and the voucher
lifecycle: which role may take which action from which state, and which
payload guard must hold first.  ``VoucherLifecycleService`` resolves every
operation against these tables; nothing else in the codebase compares
status literals to decide what is allowed.

Architecture position
---------------------
**Modules layer** -- declarative workflow definitions.  Imports canonical
Guard, Transition, Workflow from ``zoompay_kernel.domain.workflow``.

Invariants enforced
-------------------
* All ``Workflow``, ``Transition`` and ``Guard`` instances are
  ``frozen=True`` -- immutable after module load.
* ``payment_completed``, ``rejected`` and the legacy ``payment_closed``
  are terminal: no transition leaves them.
* State names are the values of ``ReceiptStatus``/``VoucherStatus``.

Audit relevance
---------------
Workflow definitions logged at module-load time with state counts and
transition counts.
"""

from zoompay_kernel.domain.values import Designation
from zoompay_kernel.domain.workflow import Guard, Transition, Workflow
from zoompay_kernel.logging_config import get_logger
from zoompay_modules.vouchers.models import ReceiptStatus, VoucherStatus

logger = get_logger("modules.vouchers.workflows")


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

COMMENT_REQUIRED = Guard(
    name="comment_required",
    description="Comment text must be non-empty after trimming",
)

REASON_REQUIRED = Guard(
    name="reason_required",
    description="Rejection reason must be non-empty after trimming",
)

VOUCHER_DETAILS_VALID = Guard(
    name="voucher_details_valid",
    description="Bank fields and description present, amount a finite number > 0, "
    "voucher document uploaded",
)

PROOF_UPLOADED = Guard(
    name="proof_uploaded",
    description="Proof of payment document is present and non-empty",
)

logger.info(
    "voucher_workflow_guards_defined",
    extra={
        "guards": [
            COMMENT_REQUIRED.name,
            REASON_REQUIRED.name,
            VOUCHER_DETAILS_VALID.name,
            PROOF_UPLOADED.name,
        ],
    },
)


# -----------------------------------------------------------------------------
# Receipt Workflow
# -----------------------------------------------------------------------------

_R = ReceiptStatus

RECEIPT_WORKFLOW = Workflow(
    name="receipt",
    description="Expense receipt approval by a finance officer",
    initial_state=_R.PENDING.value,
    states=tuple(s.value for s in ReceiptStatus),
    terminal_states=(_R.REJECTED.value, _R.VOUCHER_CREATED.value),
    initial_action="submit",
    initial_role=None,
    transitions=(
        Transition(_R.PENDING.value, _R.APPROVED.value, action="approve",
                   required_role=Designation.FINANCE.value),
        Transition(_R.PENDING.value, _R.REJECTED.value, action="reject",
                   required_role=Designation.FINANCE.value, guard=REASON_REQUIRED),
        Transition(_R.APPROVED.value, _R.VOUCHER_CREATED.value, action="create_voucher",
                   required_role=Designation.VOUCHER.value, guard=VOUCHER_DETAILS_VALID),
    ),
)

logger.info(
    "receipt_workflow_registered",
    extra={
        "workflow_name": RECEIPT_WORKFLOW.name,
        "state_count": len(RECEIPT_WORKFLOW.states),
        "transition_count": len(RECEIPT_WORKFLOW.transitions),
    },
)


# -----------------------------------------------------------------------------
# Voucher Workflow
# -----------------------------------------------------------------------------

_V = VoucherStatus

VOUCHER_WORKFLOW = Workflow(
    name="voucher",
    description="Payment voucher review, initiation, release and proof of payment",
    initial_state=_V.VOUCHER_CREATED.value,
    states=tuple(s.value for s in VoucherStatus),
    terminal_states=(
        _V.PAYMENT_COMPLETED.value,
        _V.REJECTED.value,
        _V.PAYMENT_CLOSED.value,
    ),
    initial_action="create",
    initial_role=Designation.VOUCHER.value,
    transitions=(
        Transition(_V.VOUCHER_CREATED.value, _V.CHECKED.value, action="check",
                   required_role=Designation.CHECKER.value, guard=COMMENT_REQUIRED),
        Transition(_V.VOUCHER_CREATED.value, _V.REJECTED.value, action="reject_at_check",
                   required_role=Designation.CHECKER.value, guard=REASON_REQUIRED),
        Transition(_V.CHECKED.value, _V.INITIATED.value, action="initiate",
                   required_role=Designation.INITIATOR.value),
        Transition(_V.INITIATED.value, _V.PAYMENT_RELEASED.value, action="release",
                   required_role=Designation.PAYMENT.value, guard=COMMENT_REQUIRED),
        Transition(_V.INITIATED.value, _V.REJECTED.value, action="reject_at_release",
                   required_role=Designation.PAYMENT.value, guard=REASON_REQUIRED),
        Transition(_V.PAYMENT_RELEASED.value, _V.PAYMENT_COMPLETED.value,
                   action="upload_proof",
                   required_role=Designation.INITIATOR.value, guard=PROOF_UPLOADED),
    ),
)

logger.info(
    "voucher_workflow_registered",
    extra={
        "workflow_name": VOUCHER_WORKFLOW.name,
        "state_count": len(VOUCHER_WORKFLOW.states),
        "transition_count": len(VOUCHER_WORKFLOW.transitions),
    },
)


# Roles that may comment on a voucher without changing its status.
VOUCHER_COMMENT_ROLES: frozenset[str] = frozenset({
    Designation.VOUCHER.value,
    Designation.CHECKER.value,
    Designation.INITIATOR.value,
    Designation.PAYMENT.value,
})
