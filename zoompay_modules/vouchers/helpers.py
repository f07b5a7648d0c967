"""
Pure helpers for the voucher lifecycle (``zoompay_modules.vouchers.helpers``).

Ticket numbers, blob paths for the three upload categories, comment
construction and the receipt/voucher combined status projection.  No I/O.
"""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from zoompay_kernel.domain.values import Actor, Comment, Upload, amount_error
from zoompay_kernel.storage.blob_store import BlobCategory, build_blob_path
from zoompay_modules.vouchers.models import (
    Receipt,
    StatusView,
    Voucher,
    VoucherDraft,
    status_view,
)


def generate_ticket_number(millis: int, prefix: str = "VOC", digits: int = 6) -> str:
    """``VOC`` + the last ``digits`` digits of a millisecond timestamp.

    A display label, not a key: two vouchers created in the same
    millisecond (or ``10**digits`` ms apart) share a number.
    """
    return f"{prefix}{str(millis)[-digits:].zfill(digits)}"


def receipt_blob_path(millis: int, upload: Upload, default_ext: str) -> str:
    return build_blob_path(
        BlobCategory.RECEIPTS, millis, uuid4().hex[:8], upload.extension(default_ext)
    )


def voucher_blob_path(millis: int, actor: Actor, upload: Upload, default_ext: str) -> str:
    return build_blob_path(
        BlobCategory.VOUCHERS, millis, actor.actor_id, upload.extension(default_ext)
    )


def proof_blob_path(millis: int, voucher_id, upload: Upload, default_ext: str) -> str:
    return build_blob_path(
        BlobCategory.PAYMENT_PROOFS, millis, str(voucher_id), upload.extension(default_ext)
    )


def voucher_comment(actor: Actor, text: str, now: datetime) -> Comment:
    """Voucher comments carry the author's id, name and acting role."""
    return Comment(
        text=text,
        created_at=now,
        created_by=actor.actor_id,
        created_by_name=actor.name,
        role=actor.role_value,
    )


def receipt_comment(actor: Actor, text: str, now: datetime) -> Comment:
    return Comment(
        text=text,
        created_at=now,
        created_by=actor.actor_id,
        author=actor.name,
    )


def combined_status(receipt: Receipt, voucher: Voucher | None = None) -> StatusView:
    """Status to show for a receipt: its voucher's status once one exists.

    The receipt's own status freezes at ``voucher_created``; everything
    after that happens on the voucher.
    """
    if voucher is not None:
        if voucher.receipt_id != receipt.id:
            raise ValueError(
                f"Voucher {voucher.id} does not belong to receipt {receipt.id}"
            )
        return status_view(voucher.status)
    return status_view(receipt.status)


_REQUIRED_DRAFT_FIELDS = (
    ("bank_name", "Bank name is required"),
    ("account_title", "Account title is required"),
    ("account_number", "Account number is required"),
    ("description", "Description is required"),
)


def voucher_draft_errors(draft: VoucherDraft, document: Upload | None) -> dict[str, str]:
    """Every problem with a voucher form, keyed by field name (empty when valid)."""
    errors: dict[str, str] = {}
    for name, message in _REQUIRED_DRAFT_FIELDS:
        value = getattr(draft, name)
        if value is None or not str(value).strip():
            errors[name] = message
    amount_message = amount_error(draft.amount)
    if amount_message is not None:
        errors["amount"] = amount_message
    if document is None or not document.content:
        errors["voucher_file"] = "Voucher document is required"
    return errors
