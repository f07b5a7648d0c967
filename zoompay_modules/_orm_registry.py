"""
Module ORM Registry (``zoompay_modules._orm_registry``).

Responsibility
--------------
Ensure all SQLAlchemy ORM models are imported so that ``Base.metadata``
contains their table definitions before tables are created, and name the
model behind each document-store collection.

Architecture position
---------------------
**Modules layer** -- utility.  Imports from sibling ``zoompay_modules``
packages and from ``zoompay_kernel`` (allowed: modules -> kernel).  The
kernel reaches it only lazily, from ``create_tables()``.

Usage
-----
Entrypoints and ``tests/conftest.py`` call ``create_all_tables()`` and
build stores with ``make_document_store(session)``.
"""

from sqlalchemy.orm import Session


def import_all_orm_models() -> None:
    """Import kernel models and every ``zoompay_modules.*.orm`` module.

    Idempotent -- repeated calls are harmless.
    """
    import zoompay_kernel.models  # noqa: F401
    import zoompay_modules.vouchers.orm  # noqa: F401


def document_collections() -> dict:
    """Collection name -> ORM model, as served by ``SqlDocumentStore``."""
    from zoompay_kernel.models.user import UserModel
    from zoompay_modules.vouchers.orm import ReceiptModel, VoucherModel

    return {
        "receipts": ReceiptModel,
        "vouchers": VoucherModel,
        "users": UserModel,
    }


def make_document_store(session: Session):
    """A ``SqlDocumentStore`` over ``session`` with every collection registered."""
    from zoompay_kernel.db.document_store import SqlDocumentStore

    return SqlDocumentStore(session, document_collections())


def create_all_tables() -> None:
    """Register all ORM models, then create every table."""
    from zoompay_kernel.db.engine import create_tables

    import_all_orm_models()
    create_tables()
