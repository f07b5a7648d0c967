"""
Pytest fixtures for the zoompay test suite.

Provides:
- A database engine and per-test sessions (in-memory SQLite by default)
- A document store, a temp-dir blob store and a deterministic clock
- One actor per designation
- Factories that walk a receipt/voucher to any lifecycle state

Environment Variables:
- ZOOMPAY_TEST_DATABASE_URL: database URL for the suite.  Defaults to
  in-memory SQLite; point it at PostgreSQL to run the suite against the
  production backend.
"""

import json
import logging
import os
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from tests.factories import make_actor
from zoompay_kernel.db.base import Base
from zoompay_kernel.db.engine import drop_tables, get_session, init_engine_from_url, reset_engine
from zoompay_kernel.domain.clock import DeterministicClock
from zoompay_kernel.domain.values import Designation, Upload
from zoompay_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from zoompay_kernel.storage.blob_store import LocalBlobStore
from zoompay_modules._orm_registry import create_all_tables, make_document_store
from zoompay_modules.vouchers.config import VoucherConfig
from zoompay_modules.vouchers.models import VoucherDraft
from zoompay_modules.vouchers.service import VoucherLifecycleService

DEFAULT_TEST_DATABASE_URL = "sqlite://"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture zoompay logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, service):
            ...
            logs = captured_logs()
            assert any(r["message"] == "voucher_checked" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("zoompay")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


def get_database_url() -> str:
    return os.environ.get("ZOOMPAY_TEST_DATABASE_URL", DEFAULT_TEST_DATABASE_URL)


@pytest.fixture(scope="session")
def db_engine():
    """Single engine for the entire test session; tables created once."""
    eng = init_engine_from_url(get_database_url(), echo=False)
    create_all_tables()
    yield eng
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    """A fresh session per test.  Services commit, so tables are emptied after."""
    sess = get_session()
    yield sess
    sess.rollback()
    sess.close()
    with db_engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def store(session):
    return make_document_store(session)


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(tmp_path / "blobs")


@pytest.fixture
def deterministic_clock():
    return DeterministicClock()


@pytest.fixture
def voucher_config():
    return VoucherConfig.with_defaults()


@pytest.fixture
def service(store, blob_store, deterministic_clock, voucher_config):
    return VoucherLifecycleService(
        store, blob_store, clock=deterministic_clock, config=voucher_config
    )


# =============================================================================
# Actors
# =============================================================================


@pytest.fixture
def submitter():
    return make_actor(Designation.ADMIN, name="Sam Submitter")


@pytest.fixture
def finance_officer():
    return make_actor(Designation.FINANCE, name="Fiona Finance")


@pytest.fixture
def voucher_creator():
    return make_actor(Designation.VOUCHER, name="Victor Voucher", company=None)


@pytest.fixture
def checker():
    return make_actor(Designation.CHECKER, name="Chen Checker", company=None)


@pytest.fixture
def initiator():
    return make_actor(Designation.INITIATOR, name="Ines Initiator", company=None)


@pytest.fixture
def payment_releaser():
    return make_actor(Designation.PAYMENT, name="Priya Payment", company=None)


@pytest.fixture
def superuser():
    return make_actor(Designation.SUPERUSER, name="Root", company=None)


# =============================================================================
# Payloads
# =============================================================================


@pytest.fixture
def receipt_image():
    return Upload(b"\xff\xd8\xff receipt image", "lunch.jpg", "image/jpeg")


@pytest.fixture
def voucher_document():
    return Upload(b"%PDF-1.4 voucher", "voucher.pdf", "application/pdf")


@pytest.fixture
def proof_document():
    return Upload(b"\x89PNG proof", "transfer.png", "image/png")


@pytest.fixture
def voucher_draft():
    return VoucherDraft(
        bank_name="First Bank",
        account_title="Acme Trading Ltd",
        account_number="0123456789",
        amount="2500",
        description="Office supplies for March",
    )


# =============================================================================
# Lifecycle factories
# =============================================================================


@pytest.fixture
def pending_receipt(service, submitter, receipt_image):
    return service.submit_receipt(submitter, receipt_image)


@pytest.fixture
def approved_receipt(service, finance_officer, pending_receipt):
    return service.approve_receipt(finance_officer, pending_receipt.id, "ok")


@pytest.fixture
def created_voucher(service, voucher_creator, approved_receipt, voucher_draft, voucher_document):
    return service.create_voucher(
        voucher_creator, approved_receipt.id, voucher_draft, voucher_document
    )


@pytest.fixture
def checked_voucher(service, checker, created_voucher):
    return service.check_voucher(checker, created_voucher.id, "verified")


@pytest.fixture
def initiated_voucher(service, initiator, checked_voucher):
    return service.initiate_payment(initiator, checked_voucher.id)


@pytest.fixture
def released_voucher(service, payment_releaser, initiated_voucher):
    return service.release_payment(payment_releaser, initiated_voucher.id, "sent")


@pytest.fixture
def completed_voucher(service, initiator, released_voucher, proof_document):
    return service.upload_proof_of_payment(initiator, released_voucher.id, proof_document)


@pytest.fixture
def rejected_voucher(service, checker, created_voucher):
    return service.reject_voucher(checker, created_voucher.id, "missing account number")
