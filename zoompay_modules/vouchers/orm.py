"""
Voucher ORM Models (``zoompay_modules.vouchers.orm``).

Responsibility
--------------
SQLAlchemy persistence models for the ``receipts`` and ``vouchers``
collections.  Rows are read and written as flat records through
``SqlDocumentStore``; ``codec.py`` turns those records into the frozen
dataclasses of ``models.py``.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``zoompay_kernel.db.base``.
MUST NOT be imported by ``zoompay_kernel``.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from zoompay_kernel.db.base import TrackedBase


# ---------------------------------------------------------------------------
# 1. ReceiptModel
# ---------------------------------------------------------------------------


class ReceiptModel(TrackedBase):
    """
    ORM model for submitted receipts.

    Guarantees:
        - status stored as string enum value.
        - comments stored as a JSON list of comment records, append-only.
        - voucher_id carries no FK: the voucher row is created in the same
          transaction and references the receipt instead.
    """

    __tablename__ = "receipts"

    __table_args__ = (
        Index("idx_receipt_created_by", "created_by", "created_at"),
        Index("idx_receipt_company_status", "company", "status"),
        Index("idx_receipt_status", "status"),
    )

    image_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending")
    created_by: Mapped[str] = mapped_column(String(128), nullable=False)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    user_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    approved_by_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    rejected_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejected_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    rejected_by_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(nullable=True)
    processed_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    processed_by_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    processed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    voucher_id: Mapped[UUID | None] = mapped_column(nullable=True)
    comments: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<ReceiptModel {self.id} [{self.status}]>"


# ---------------------------------------------------------------------------
# 2. VoucherModel
# ---------------------------------------------------------------------------


class VoucherModel(TrackedBase):
    """
    ORM model for payment vouchers.

    Guarantees:
        - receipt_id FK to receipts.id, unique (one voucher per receipt).
        - amount stored as Numeric(38, 9).
        - comments stored as a JSON list of comment records, append-only.
    """

    __tablename__ = "vouchers"

    __table_args__ = (
        UniqueConstraint("receipt_id", name="uq_voucher_receipt"),
        Index("idx_voucher_status", "status"),
        Index("idx_voucher_created_by", "created_by", "created_at"),
    )

    receipt_id: Mapped[UUID] = mapped_column(ForeignKey("receipts.id"), nullable=False)
    image_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    voucher_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="voucher_created"
    )
    bank_name: Mapped[str] = mapped_column(String(255), nullable=False)
    account_title: Mapped[str] = mapped_column(String(255), nullable=False)
    account_number: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    ticket_number: Mapped[str] = mapped_column(String(32), nullable=False)
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_by: Mapped[str] = mapped_column(String(128), nullable=False)
    created_by_name: Mapped[str] = mapped_column(String(255), nullable=False)
    checked_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    checked_by_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    checked_at: Mapped[datetime | None] = mapped_column(nullable=True)
    initiated_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    initiated_by_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    initiated_at: Mapped[datetime | None] = mapped_column(nullable=True)
    released_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    released_by_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    released_at: Mapped[datetime | None] = mapped_column(nullable=True)
    proof_of_payment_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    proof_of_payment_uploaded_by: Mapped[str | None] = mapped_column(
        String(128), nullable=True
    )
    proof_of_payment_uploaded_by_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    proof_of_payment_uploaded_at: Mapped[datetime | None] = mapped_column(nullable=True)
    rejected_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    rejected_by_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(nullable=True)
    rejected_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    comments: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<VoucherModel {self.ticket_number} [{self.status}]>"
