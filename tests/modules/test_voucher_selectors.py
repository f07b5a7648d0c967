"""
Tests for the role work lists (zoompay_modules/vouchers/selectors.py).

Lists are always recomputed from the store and ordered newest first by
the field each role cares about.
"""

import pytest

from tests.factories import OTHER_COMPANY, make_actor
from zoompay_kernel.domain.values import Designation
from zoompay_modules.vouchers.models import ReceiptStatus, VoucherStatus


@pytest.fixture
def walk(service, finance_officer, voucher_creator, receipt_image, voucher_draft,
         voucher_document, deterministic_clock):
    """Submit, approve and turn a receipt into a voucher, one second per step."""

    def _walk(submitter):
        receipt = service.submit_receipt(submitter, receipt_image)
        deterministic_clock.advance(1)
        service.approve_receipt(finance_officer, receipt.id)
        deterministic_clock.advance(1)
        voucher = service.create_voucher(voucher_creator, receipt.id, voucher_draft,
                                         voucher_document)
        deterministic_clock.advance(1)
        return voucher

    return _walk


class TestReceiptLists:

    def test_receipts_created_by_newest_first(self, service, submitter, receipt_image,
                                              deterministic_clock):
        first = service.submit_receipt(submitter, receipt_image)
        deterministic_clock.advance(10)
        second = service.submit_receipt(submitter, receipt_image)
        other = make_actor(Designation.ADMIN, actor_id="uid-other")
        service.submit_receipt(other, receipt_image)

        rows = service.queries.receipts_created_by(submitter.actor_id)
        assert [r.id for r in rows] == [second.id, first.id]

    def test_finance_queue_scoped_to_company(self, service, submitter, finance_officer,
                                             receipt_image, deterministic_clock):
        mine = service.submit_receipt(submitter, receipt_image)
        deterministic_clock.advance(1)
        service.submit_receipt(make_actor(Designation.ADMIN, actor_id="uid-g",
                                          company=OTHER_COMPANY), receipt_image)
        deterministic_clock.advance(1)
        approved = service.submit_receipt(submitter, receipt_image)
        service.approve_receipt(finance_officer, approved.id)

        everything = service.queries.finance_queue(finance_officer.company)
        assert [r.id for r in everything] == [approved.id, mine.id]

        pending = service.queries.finance_queue(finance_officer.company, ReceiptStatus.PENDING)
        assert [r.id for r in pending] == [mine.id]

        by_string = service.queries.finance_queue(finance_officer.company, "approved")
        assert [r.id for r in by_string] == [approved.id]

    def test_approved_receipts_by_approval_time(self, service, submitter, finance_officer,
                                                receipt_image, deterministic_clock):
        early = service.submit_receipt(submitter, receipt_image)
        late = service.submit_receipt(submitter, receipt_image)
        deterministic_clock.advance(1)
        service.approve_receipt(finance_officer, late.id)
        deterministic_clock.advance(1)
        service.approve_receipt(finance_officer, early.id)

        rows = service.queries.approved_receipts()
        assert [r.id for r in rows] == [early.id, late.id]

    def test_approved_list_drops_receipts_with_vouchers(self, service, submitter, walk):
        walk(submitter)
        assert service.queries.approved_receipts() == []


class TestVoucherLists:

    def test_checker_queue(self, service, submitter, checker, walk):
        created = walk(submitter)
        checked = walk(submitter)
        rejected = walk(submitter)
        service.check_voucher(checker, checked.id, "verified")
        service.reject_voucher(checker, rejected.id, "wrong bank")

        rows = service.queries.checker_queue()
        assert [v.id for v in rows] == [rejected.id, checked.id, created.id]

    def test_to_initiate_ordered_by_check_time(self, service, submitter, checker, walk,
                                               deterministic_clock):
        a = walk(submitter)
        b = walk(submitter)
        service.check_voucher(checker, b.id, "ok")
        deterministic_clock.advance(1)
        service.check_voucher(checker, a.id, "ok")

        assert [v.id for v in service.queries.to_initiate()] == [a.id, b.id]

    def test_awaiting_proof(self, service, submitter, checker, initiator, payment_releaser,
                            walk):
        voucher = walk(submitter)
        service.check_voucher(checker, voucher.id, "ok")
        service.initiate_payment(initiator, voucher.id)
        assert service.queries.awaiting_proof() == []

        service.release_payment(payment_releaser, voucher.id, "sent")
        rows = service.queries.awaiting_proof()
        assert [v.status for v in rows] == [VoucherStatus.PAYMENT_RELEASED]

    def test_payment_queue_includes_legacy_closed(self, service, store, submitter, walk):
        voucher = walk(submitter)
        store.update("vouchers", voucher.id, {"status": "payment_closed"})
        store.commit()

        rows = service.queries.payment_queue()
        assert [v.status for v in rows] == [VoucherStatus.PAYMENT_CLOSED]

    def test_payment_queue_excludes_unchecked(self, service, submitter, walk):
        walk(submitter)
        assert service.queries.payment_queue() == []

    def test_vouchers_for_receipts(self, service, submitter, walk):
        a = walk(submitter)
        walk(submitter)
        found = service.queries.vouchers_for_receipts([a.receipt_id])
        assert list(found) == [a.receipt_id]
        assert found[a.receipt_id].id == a.id

    def test_vouchers_for_no_receipts(self, service):
        assert service.queries.vouchers_for_receipts([]) == {}

    def test_vouchers_created_by(self, service, submitter, voucher_creator, walk):
        a = walk(submitter)
        b = walk(submitter)
        rows = service.queries.vouchers_created_by(voucher_creator.actor_id)
        assert [v.id for v in rows] == [b.id, a.id]
        assert service.queries.vouchers_created_by("uid-nobody") == []
