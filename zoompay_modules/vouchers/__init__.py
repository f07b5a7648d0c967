"""
Vouchers Module (``zoompay_modules.vouchers``).

Responsibility
--------------
The expense-to-payment cycle: a submitter uploads a receipt, a finance
officer approves or rejects it, a voucher creator turns an approved receipt
into a payment voucher, a checker reviews it, an initiator starts the
payment, a payment releaser disburses it, and the initiator closes the loop
with proof of payment.

Architecture position
---------------------
**Modules layer** -- frozen models, workflow tables, record decoders, read
selectors and the ``VoucherLifecycleService`` facade.  Persistence goes
through ``zoompay_kernel.db.document_store``; uploads through
``zoompay_kernel.storage``.

Failure modes
-------------
* Typed ``ZoompayError`` subclasses for refused operations.
* Store exceptions propagate after rollback.
"""

from zoompay_modules.vouchers.config import VoucherConfig
from zoompay_modules.vouchers.helpers import combined_status, generate_ticket_number
from zoompay_modules.vouchers.models import (
    Receipt,
    ReceiptCounts,
    ReceiptOverview,
    ReceiptStatus,
    StatusTone,
    StatusView,
    Voucher,
    VoucherDraft,
    VoucherStatus,
    status_view,
)
from zoompay_modules.vouchers.selectors import VoucherSelector
from zoompay_modules.vouchers.service import VoucherLifecycleService
from zoompay_modules.vouchers.workflows import RECEIPT_WORKFLOW, VOUCHER_WORKFLOW

__all__ = [
    "Receipt",
    "ReceiptCounts",
    "ReceiptOverview",
    "ReceiptStatus",
    "StatusTone",
    "StatusView",
    "Voucher",
    "VoucherDraft",
    "VoucherStatus",
    "status_view",
    "combined_status",
    "generate_ticket_number",
    "VoucherConfig",
    "VoucherSelector",
    "VoucherLifecycleService",
    "RECEIPT_WORKFLOW",
    "VOUCHER_WORKFLOW",
]
