"""
Voucher Lifecycle Configuration Schema (``zoompay_modules.vouchers.config``).

Responsibility
--------------
Defines the tunables of the receipt/voucher lifecycle: ticket number
format, default file extensions per upload category, the fixed comment
appended when proof of payment is uploaded, and whether finance officers
are restricted to receipts of their own company.

Architecture position
---------------------
**Modules layer** -- configuration schema only.  Built from the
``workflow`` section of ``zoompay_config.get_active_config()``; no
component reads config files or environment variables directly.

Failure modes
-------------
* ``ValueError`` at construction if any constraint is violated.
"""

from dataclasses import dataclass
from typing import Self

from zoompay_kernel.logging_config import get_logger

logger = get_logger("modules.vouchers.config")


@dataclass
class VoucherConfig:
    """
    Configuration schema for the voucher lifecycle.

        config = VoucherConfig(ticket_prefix="ZP", ticket_digits=8)
    """

    # Ticket number: prefix + last N digits of the creation instant (ms)
    ticket_prefix: str = "VOC"
    ticket_digits: int = 6

    # Extension used when an upload's file name carries none
    receipt_extension: str = "jpg"
    voucher_extension: str = "pdf"
    proof_extension: str = "jpg"

    proof_comment_text: str = "Proof of payment uploaded"

    # Finance officers only decide receipts of their own company
    enforce_company_scope: bool = True

    def __post_init__(self):
        if not self.ticket_prefix or not self.ticket_prefix.strip():
            raise ValueError("ticket_prefix cannot be empty")
        if not 1 <= self.ticket_digits <= 13:
            raise ValueError(
                f"ticket_digits must be between 1 and 13, got {self.ticket_digits}"
            )
        for name in ("receipt_extension", "voucher_extension", "proof_extension"):
            value = getattr(self, name)
            if not value or not value.isalnum():
                raise ValueError(f"{name} must be a non-empty alphanumeric extension")
        if not self.proof_comment_text.strip():
            raise ValueError("proof_comment_text cannot be empty")

        logger.info(
            "voucher_config_initialized",
            extra={
                "ticket_prefix": self.ticket_prefix,
                "ticket_digits": self.ticket_digits,
                "enforce_company_scope": self.enforce_company_scope,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        logger.info("voucher_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from a dictionary (e.g. the YAML ``workflow`` section).

        Raises:
            ValueError: on unknown keys, or if validation fails.
        """
        logger.info(
            "voucher_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown voucher config keys: {sorted(unknown)}")
        return cls(**data)
