"""
Value objects shared by every lifecycle (``zoompay_kernel.domain.values``).

Responsibility
--------------
* ``Designation`` -- the closed role vocabulary assigned by a super-user.
* ``Actor`` -- the explicit "who is acting" parameter of every lifecycle
  operation (id, display name, role, company, authentication flag).
* ``Comment`` -- one entry of a record's append-only comment log.
* ``Upload`` -- bytes plus file name for a document to be stored.
* ``parse_amount`` / ``require_text`` -- payload validators that raise
  ``ValidationError`` keyed by field name.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from zoompay_kernel.exceptions import ValidationError


class Designation(str, Enum):
    """Roles a super-user can assign to an approved user."""

    ADMIN = "admin"
    FINANCE = "finance"
    VOUCHER = "voucher"
    CHECKER = "checker"
    INITIATOR = "initiator"
    PAYMENT = "payment"
    SUPERUSER = "superuser"


DESIGNATION_LABELS: dict[Designation, str] = {
    Designation.ADMIN: "Admin",
    Designation.FINANCE: "Finance Manager",
    Designation.VOUCHER: "Voucher Creator",
    Designation.CHECKER: "Checker",
    Designation.INITIATOR: "Initiator",
    Designation.PAYMENT: "Payment Releaser",
    Designation.SUPERUSER: "Super User",
}


@dataclass(frozen=True)
class Actor:
    """The user performing an operation.

    Passed explicitly into every lifecycle operation; nothing in the
    engine reads an ambient session.
    """

    actor_id: str
    name: str
    role: Designation | None
    email: str | None = None
    company: str | None = None
    bank: str | None = None
    is_authenticated: bool = True

    @property
    def role_value(self) -> str | None:
        return self.role.value if self.role is not None else None

    def signed_out(self) -> Actor:
        return replace(self, is_authenticated=False)


@dataclass(frozen=True)
class Comment:
    """One append-only comment.

    Receipt comments historically carry ``author`` (display name); voucher
    comments carry ``created_by``/``created_by_name``/``role``.  Both
    shapes decode into this type.
    """

    text: str
    created_at: datetime
    created_by: str | None = None
    created_by_name: str | None = None
    role: str | None = None
    author: str | None = None

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "text": self.text,
            "created_at": self.created_at.isoformat(),
        }
        for key in ("created_by", "created_by_name", "role", "author"):
            value = getattr(self, key)
            if value is not None:
                record[key] = value
        return record


@dataclass(frozen=True)
class Upload:
    """A document chosen for upload."""

    content: bytes
    filename: str = ""
    content_type: str | None = None

    def extension(self, default: str) -> str:
        """File extension taken from ``filename``, lower-cased, without the dot."""
        name = self.filename.rsplit("/", 1)[-1]
        if "." in name:
            ext = name.rsplit(".", 1)[-1].strip().lower()
            if ext.isalnum():
                return ext
        return default


def require_text(value: str | None, field_name: str, message: str) -> str:
    """Return ``value`` stripped, or raise ValidationError if it is blank."""
    if value is None or not str(value).strip():
        raise ValidationError({field_name: message})
    return str(value).strip()


# Amounts are stored as Numeric(38, 9): 29 integer digits, 9 decimal places.
AMOUNT_SCALE = 9
AMOUNT_INTEGER_DIGITS = 29


def _decimal_places(amount: Decimal) -> int:
    """Significant digits after the point; trailing zeros do not count."""
    _, digits, exponent = amount.as_tuple()
    digits = list(digits)
    while exponent < 0 and len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exponent += 1
    return max(0, -exponent)


def amount_error(raw: Any) -> str | None:
    """Message describing why ``raw`` is not a valid amount, or None."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return "Amount is required"
    if isinstance(raw, bool):
        return "Amount must be a valid number greater than zero"
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return "Amount must be a valid number greater than zero"
    if not amount.is_finite() or amount <= 0:
        return "Amount must be a valid number greater than zero"
    if amount.adjusted() >= AMOUNT_INTEGER_DIGITS:
        return f"Amount cannot exceed {AMOUNT_INTEGER_DIGITS} digits before the decimal point"
    if _decimal_places(amount) > AMOUNT_SCALE:
        return f"Amount cannot have more than {AMOUNT_SCALE} decimal places"
    return None


def parse_amount(raw: Any, field_name: str = "amount") -> Decimal:
    """Parse a user-entered amount into a positive, finite Decimal.

    ``"1500.50"`` -> ``Decimal("1500.50")``; ``""``, ``"0"``, ``"-5"``,
    ``"abc"``, ``"NaN"`` and ``"Infinity"`` are rejected.
    """
    error = amount_error(raw)
    if error is not None:
        raise ValidationError({field_name: error})
    return Decimal(str(raw).strip())
