"""
Read-side queries of the voucher lifecycle (``zoompay_modules.vouchers.selectors``).

Responsibility
--------------
Every list a role works from, as a store query plus decode.  Lists are
always recomputed from the store; nothing here caches or splices.

Architecture position
---------------------
**Modules layer** -- read-only.  Depends on the ``DocumentStore`` protocol
and ``codec.py``.
"""

from __future__ import annotations

from zoompay_kernel.db.document_store import DocumentStore, Filter, OrderBy
from zoompay_modules.vouchers.codec import (
    RECEIPTS,
    VOUCHERS,
    decode_receipt,
    decode_voucher,
)
from zoompay_modules.vouchers.models import (
    Receipt,
    ReceiptCounts,
    ReceiptStatus,
    Voucher,
    VoucherStatus,
)

CHECKER_QUEUE_STATUSES = (
    VoucherStatus.VOUCHER_CREATED,
    VoucherStatus.CHECKED,
    VoucherStatus.REJECTED,
)

PAYMENT_QUEUE_STATUSES = (
    VoucherStatus.INITIATED,
    VoucherStatus.PAYMENT_RELEASED,
    VoucherStatus.REJECTED,
    VoucherStatus.PAYMENT_CLOSED,
)


class VoucherSelector:
    """Queries backing each role's work list."""

    def __init__(self, store: DocumentStore):
        self._store = store

    def _receipts(self, filters, order_field: str) -> list[Receipt]:
        rows = self._store.query(RECEIPTS, filters, OrderBy(order_field))
        return [decode_receipt(r) for r in rows]

    def _vouchers(self, filters, order_field: str) -> list[Voucher]:
        rows = self._store.query(VOUCHERS, filters, OrderBy(order_field))
        return [decode_voucher(r) for r in rows]

    # -- receipts ------------------------------------------------------------

    def receipts_created_by(self, actor_id: str) -> list[Receipt]:
        return self._receipts([Filter("created_by", "==", actor_id)], "created_at")

    def finance_queue(
        self, company: str | None, status: ReceiptStatus | None = None
    ) -> list[Receipt]:
        """Receipts of ``company``, optionally narrowed to one status."""
        filters = [Filter("company", "==", company)]
        if status is not None:
            filters.append(Filter("status", "==", ReceiptStatus(status).value))
        return self._receipts(filters, "created_at")

    def approved_receipts(self) -> list[Receipt]:
        return self._receipts(
            [Filter("status", "==", ReceiptStatus.APPROVED.value)], "approved_at"
        )

    def receipt_counts(self, actor_id: str) -> ReceiptCounts:
        """Per-status counts of one submitter's receipts.

        ``voucher_created`` receipts count as approved, deliberately: every
        one of them was approved before a voucher was raised, and counting
        only ``approved`` would make the submitter's approved total shrink
        each time finance turns a receipt into a voucher.
        """
        counts = {"pending": 0, "approved": 0, "rejected": 0}
        for receipt in self.receipts_created_by(actor_id):
            if receipt.status == ReceiptStatus.PENDING:
                counts["pending"] += 1
            elif receipt.status == ReceiptStatus.REJECTED:
                counts["rejected"] += 1
            else:
                counts["approved"] += 1
        return ReceiptCounts(**counts)

    # -- vouchers ------------------------------------------------------------

    def checker_queue(self) -> list[Voucher]:
        return self._vouchers(
            [Filter("status", "in", [s.value for s in CHECKER_QUEUE_STATUSES])],
            "created_at",
        )

    def to_initiate(self) -> list[Voucher]:
        return self._vouchers(
            [Filter("status", "==", VoucherStatus.CHECKED.value)], "checked_at"
        )

    def awaiting_proof(self) -> list[Voucher]:
        return self._vouchers(
            [Filter("status", "==", VoucherStatus.PAYMENT_RELEASED.value)],
            "released_at",
        )

    def payment_queue(self) -> list[Voucher]:
        return self._vouchers(
            [Filter("status", "in", [s.value for s in PAYMENT_QUEUE_STATUSES])],
            "created_at",
        )

    def vouchers_created_by(self, actor_id: str) -> list[Voucher]:
        return self._vouchers([Filter("created_by", "==", actor_id)], "created_at")

    def vouchers_for_receipts(self, receipt_ids) -> dict:
        """Vouchers keyed by ``receipt_id`` for the given receipts."""
        ids = list(receipt_ids)
        if not ids:
            return {}
        rows = self._store.query(VOUCHERS, [Filter("receipt_id", "in", ids)])
        vouchers = [decode_voucher(r) for r in rows]
        return {v.receipt_id: v for v in vouchers}
