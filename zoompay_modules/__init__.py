"""
Zoompay Modules.

Lifecycle orchestration over the Zoompay Kernel.  Each module contains:
- Domain models (the nouns)
- ORM models and record decoders
- Workflows (state machines)
- Configuration schema
- A service facade owning the transaction boundary

Modules:
- Vouchers: receipts, finance approval, payment vouchers, disbursement
"""

from zoompay_modules import vouchers

__all__ = ["vouchers"]
