"""
Voucher Domain Models (``zoompay_modules.vouchers.models``).

Responsibility
--------------
Frozen value objects for the two documents of the disbursement flow:
``Receipt`` (a submitted expense awaiting finance approval) and
``Voucher`` (the payment instruction derived from an approved receipt),
their closed status vocabularies, and the single canonical status
label/tone table every presentation concern derives from.

Architecture position
---------------------
**Modules layer** -- pure data definitions.  No I/O, no database.  Records
read from the store become these objects via ``codec.py``; ``service.py``
returns them as immutable snapshots.

Invariants enforced
-------------------
* All monetary fields use ``Decimal`` (never ``float``).
* All dataclasses are ``frozen=True`` -- immutable after construction.
* ``Voucher.__post_init__`` rejects a non-positive amount.
* ``Receipt.__post_init__`` enforces ``voucher_id`` set iff the status is
  ``voucher_created``.

Failure modes
-------------
* ``ValueError`` raised in ``__post_init__`` when a constraint is violated.
  The codec converts it into ``RecordDecodeError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from zoompay_kernel.domain.values import Comment


class ReceiptStatus(str, Enum):
    """Receipt workflow states.  Must align with ``workflows.RECEIPT_WORKFLOW.states``."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    VOUCHER_CREATED = "voucher_created"


class VoucherStatus(str, Enum):
    """Voucher workflow states.  Must align with ``workflows.VOUCHER_WORKFLOW.states``.

    ``PAYMENT_CLOSED`` is a legacy terminal state: no operation produces it,
    but old records carry it and the payment releaser queue lists them.
    """
    VOUCHER_CREATED = "voucher_created"
    CHECKED = "checked"
    INITIATED = "initiated"
    PAYMENT_RELEASED = "payment_released"
    PAYMENT_COMPLETED = "payment_completed"
    REJECTED = "rejected"
    PAYMENT_CLOSED = "payment_closed"


class StatusTone(str, Enum):
    WARNING = "warning"
    INFO = "info"
    PRIMARY = "primary"
    SUCCESS = "success"
    ERROR = "error"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class StatusView:
    """Display projection of a status: raw value, human label, colour tone."""
    status: str
    label: str
    tone: StatusTone


# One table for receipts and vouchers; the shared values (``rejected``,
# ``voucher_created``) mean the same thing to a reader in both collections.
STATUS_VIEWS: dict[str, StatusView] = {
    view.status: view
    for view in (
        StatusView("pending", "Pending", StatusTone.WARNING),
        StatusView("approved", "Approved", StatusTone.SUCCESS),
        StatusView("rejected", "Rejected", StatusTone.ERROR),
        StatusView("voucher_created", "Voucher Created", StatusTone.INFO),
        StatusView("checked", "Checked", StatusTone.PRIMARY),
        StatusView("initiated", "Payment Initiated", StatusTone.PRIMARY),
        StatusView("payment_released", "Payment Released", StatusTone.SUCCESS),
        StatusView("payment_completed", "Payment Completed", StatusTone.SUCCESS),
        StatusView("payment_closed", "Payment Closed", StatusTone.NEUTRAL),
    )
}


def status_view(status: ReceiptStatus | VoucherStatus | str) -> StatusView:
    """Canonical view for a status value.

    Raises:
        KeyError: for a value outside both vocabularies.
    """
    value = status.value if isinstance(status, Enum) else status
    return STATUS_VIEWS[value]


@dataclass(frozen=True)
class Receipt:
    """A submitted expense receipt.

    Contract: frozen snapshot of the stored record.
    Guarantees: ``voucher_id`` is set iff ``status`` is ``VOUCHER_CREATED``.
    Non-goals: does not load the linked voucher (see ``combined_status``).
    """
    id: UUID
    image_url: str
    status: ReceiptStatus
    created_at: datetime
    created_by: str
    user_name: str
    user_email: str | None = None
    company: str | None = None
    approved_by: str | None = None
    approved_by_name: str | None = None
    approved_at: datetime | None = None
    rejected_reason: str | None = None
    rejected_by: str | None = None
    rejected_by_name: str | None = None
    rejected_at: datetime | None = None
    processed_by: str | None = None
    processed_by_name: str | None = None
    processed_at: datetime | None = None
    voucher_id: UUID | None = None
    comments: tuple[Comment, ...] = ()

    def __post_init__(self) -> None:
        linked = self.voucher_id is not None
        if linked != (self.status == ReceiptStatus.VOUCHER_CREATED):
            raise ValueError(
                f"Receipt {self.id}: voucher_id must be set exactly when "
                f"status is voucher_created (status={self.status.value})"
            )


@dataclass(frozen=True)
class Voucher:
    """A payment voucher derived from an approved receipt.

    Contract: frozen snapshot of the stored record.
    Guarantees: ``amount > 0``.
    """
    id: UUID
    receipt_id: UUID
    image_url: str
    voucher_url: str
    status: VoucherStatus
    bank_name: str
    account_title: str
    account_number: str
    amount: Decimal
    description: str
    ticket_number: str
    created_by: str
    created_by_name: str
    created_at: datetime
    company: str | None = None
    checked_by: str | None = None
    checked_by_name: str | None = None
    checked_at: datetime | None = None
    initiated_by: str | None = None
    initiated_by_name: str | None = None
    initiated_at: datetime | None = None
    released_by: str | None = None
    released_by_name: str | None = None
    released_at: datetime | None = None
    proof_of_payment_url: str | None = None
    proof_of_payment_uploaded_by: str | None = None
    proof_of_payment_uploaded_by_name: str | None = None
    proof_of_payment_uploaded_at: datetime | None = None
    rejected_by: str | None = None
    rejected_by_name: str | None = None
    rejected_at: datetime | None = None
    rejected_reason: str | None = None
    comments: tuple[Comment, ...] = ()

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError(f"Voucher {self.id}: amount must be positive, got {self.amount}")


@dataclass(frozen=True)
class ReceiptOverview:
    """One row of a submitter's receipt list."""
    receipt: Receipt
    voucher: Voucher | None
    view: StatusView


@dataclass(frozen=True)
class ReceiptCounts:
    pending: int = 0
    approved: int = 0
    rejected: int = 0

    @property
    def total(self) -> int:
        return self.pending + self.approved + self.rejected


@dataclass(frozen=True)
class VoucherDraft:
    """Banking details entered by the voucher creator, as typed.

    ``amount`` is the raw user input; ``helpers.voucher_draft_errors``
    validates it and the service parses it into a ``Decimal``.
    """
    bank_name: str | None
    account_title: str | None
    account_number: str | None
    amount: Any
    description: str | None
