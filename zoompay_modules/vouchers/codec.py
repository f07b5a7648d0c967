"""
Record decoders for the voucher collections (``zoompay_modules.vouchers.codec``).

Responsibility
--------------
Turn raw store records (flat dicts) into the frozen dataclasses of
``models.py``, and comments into their JSON-safe record form.  Every
record read by the lifecycle engine passes through here, so a malformed
document fails fast with ``RecordDecodeError`` naming the collection, id
and problem instead of leaking ``None`` into business logic.

Architecture position
---------------------
**Modules layer** -- pure functions.  No I/O.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from zoompay_kernel.domain.values import Comment
from zoompay_kernel.exceptions import RecordDecodeError
from zoompay_modules.vouchers.models import (
    Receipt,
    ReceiptStatus,
    Voucher,
    VoucherStatus,
)

RECEIPTS = "receipts"
VOUCHERS = "vouchers"
USERS = "users"

_RECEIPT_REQUIRED = ("id", "image_url", "status", "created_at", "created_by", "user_name")
_VOUCHER_REQUIRED = (
    "id",
    "receipt_id",
    "image_url",
    "voucher_url",
    "status",
    "bank_name",
    "account_title",
    "account_number",
    "amount",
    "description",
    "ticket_number",
    "created_by",
    "created_by_name",
    "created_at",
)
_RECEIPT_TIMESTAMPS = ("approved_at", "rejected_at", "processed_at")
_VOUCHER_TIMESTAMPS = (
    "checked_at",
    "initiated_at",
    "released_at",
    "proof_of_payment_uploaded_at",
    "rejected_at",
)


class _Decoder:
    """Collects field conversions for one record and reports the first failure."""

    def __init__(self, collection: str, record: Mapping[str, Any]):
        self.collection = collection
        self.record = record
        raw_id = record.get("id")
        self.record_id = str(raw_id) if raw_id is not None else None

    def fail(self, reason: str) -> RecordDecodeError:
        return RecordDecodeError(self.collection, self.record_id, reason)

    def require(self, names) -> None:
        missing = [n for n in names if self.record.get(n) in (None, "")]
        if missing:
            raise self.fail(f"missing required field(s): {', '.join(missing)}")

    def uuid(self, name: str) -> UUID | None:
        value = self.record.get(name)
        if value is None or isinstance(value, UUID):
            return value
        try:
            return UUID(str(value))
        except ValueError:
            raise self.fail(f"{name} is not a UUID: {value!r}") from None

    def timestamp(self, name: str) -> datetime | None:
        return _to_datetime(self.record.get(name), lambda msg: self.fail(f"{name}: {msg}"))

    def decimal(self, name: str) -> Decimal:
        value = self.record.get(name)
        try:
            result = value if isinstance(value, Decimal) else Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise self.fail(f"{name} is not numeric: {value!r}") from None
        if not result.is_finite():
            raise self.fail(f"{name} is not finite: {value!r}")
        return result

    def enum(self, name: str, enum_cls):
        value = self.record.get(name)
        try:
            return enum_cls(value)
        except ValueError:
            raise self.fail(f"unknown {name} {value!r}") from None

    def comments(self) -> tuple[Comment, ...]:
        raw = self.record.get("comments") or []
        if not isinstance(raw, list):
            raise self.fail("comments is not a list")
        return tuple(decode_comment(item, self.fail) for item in raw)

    def optional(self, names) -> dict[str, Any]:
        return {n: self.record.get(n) for n in names}


def _to_datetime(value: Any, fail) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            raise fail(f"not an ISO timestamp: {value!r}") from None
    if not isinstance(value, datetime):
        raise fail(f"not a timestamp: {value!r}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def decode_comment(item: Any, fail) -> Comment:
    """Decode one stored comment.  ``fail(reason)`` builds the error to raise."""
    if not isinstance(item, Mapping):
        raise fail(f"comment is not an object: {item!r}")
    text = item.get("text")
    if not isinstance(text, str):
        raise fail("comment without text")
    created_at = _to_datetime(item.get("created_at"), lambda msg: fail(f"comment created_at: {msg}"))
    if created_at is None:
        raise fail("comment without created_at")
    return Comment(
        text=text,
        created_at=created_at,
        created_by=item.get("created_by"),
        created_by_name=item.get("created_by_name"),
        role=item.get("role"),
        author=item.get("author"),
    )


def encode_comments(comments) -> list[dict[str, Any]]:
    return [c.to_record() for c in comments]


def decode_receipt(record: Mapping[str, Any]) -> Receipt:
    """Decode a ``receipts`` record.

    Raises:
        RecordDecodeError: on a missing required field, an unknown status,
            a malformed value or a broken status/voucher_id link.
    """
    d = _Decoder(RECEIPTS, record)
    d.require(_RECEIPT_REQUIRED)
    timestamps = {name: d.timestamp(name) for name in _RECEIPT_TIMESTAMPS}
    try:
        return Receipt(
            id=d.uuid("id"),
            image_url=record["image_url"],
            status=d.enum("status", ReceiptStatus),
            created_at=d.timestamp("created_at"),
            created_by=record["created_by"],
            user_name=record["user_name"],
            user_email=record.get("user_email"),
            company=record.get("company"),
            voucher_id=d.uuid("voucher_id"),
            **timestamps,
            comments=d.comments(),
            **d.optional((
                "approved_by",
                "approved_by_name",
                "rejected_reason",
                "rejected_by",
                "rejected_by_name",
                "processed_by",
                "processed_by_name",
            )),
        )
    except ValueError as exc:
        raise d.fail(str(exc)) from exc


def decode_voucher(record: Mapping[str, Any]) -> Voucher:
    """Decode a ``vouchers`` record.

    Raises:
        RecordDecodeError: on a missing required field, an unknown status,
            a malformed value or a non-positive amount.
    """
    d = _Decoder(VOUCHERS, record)
    d.require(_VOUCHER_REQUIRED)
    timestamps = {name: d.timestamp(name) for name in _VOUCHER_TIMESTAMPS}
    try:
        return Voucher(
            id=d.uuid("id"),
            receipt_id=d.uuid("receipt_id"),
            status=d.enum("status", VoucherStatus),
            amount=d.decimal("amount"),
            created_at=d.timestamp("created_at"),
            comments=d.comments(),
            **timestamps,
            **d.optional((
                "image_url",
                "voucher_url",
                "bank_name",
                "account_title",
                "account_number",
                "description",
                "ticket_number",
                "company",
                "created_by",
                "created_by_name",
                "checked_by",
                "checked_by_name",
                "initiated_by",
                "initiated_by_name",
                "released_by",
                "released_by_name",
                "proof_of_payment_url",
                "proof_of_payment_uploaded_by",
                "proof_of_payment_uploaded_by_name",
                "rejected_by",
                "rejected_by_name",
                "rejected_reason",
            )),
        )
    except ValueError as exc:
        raise d.fail(str(exc)) from exc
