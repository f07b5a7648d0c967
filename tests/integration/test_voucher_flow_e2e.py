"""
End-to-end: receipt submission to completed payment, through every role.

Each step runs as the actor of the role that owns it, resolved from a
stored user profile.  Final state is checked on both records and in the
role work lists.
"""

from datetime import datetime, timezone

import pytest

from zoompay_kernel.domain.values import Designation
from zoompay_kernel.exceptions import InvalidTransitionError
from zoompay_modules.vouchers.models import ReceiptStatus, VoucherStatus
from zoompay_services.identity import ActorDirectory
from zoompay_services.role_router import Operation, can_perform, landing_screen

SIGNED_UP = datetime(2023, 12, 1, tzinfo=timezone.utc)

USERS = [
    ("uid-sam", "Sam Submitter", "admin", "Acme Trading"),
    ("uid-fiona", "Fiona Finance", "finance", "Acme Trading"),
    ("uid-victor", "Victor Voucher", "voucher", None),
    ("uid-chen", "Chen Checker", "checker", None),
    ("uid-ines", "Ines Initiator", "initiator", None),
    ("uid-priya", "Priya Payment", "payment", None),
]


@pytest.fixture
def team(store):
    for uid, name, designation, company in USERS:
        store.create("users", {
            "uid": uid,
            "name": name,
            "email": f"{uid}@example.com",
            "designation": designation,
            "company": company,
            "pending": False,
            "approved": True,
            "created_at": SIGNED_UP,
        })
    store.commit()
    directory = ActorDirectory(store)
    return {designation: directory.resolve(uid) for uid, _, designation, _ in USERS}


class TestVoucherFlowEndToEnd:

    def test_receipt_to_completed_payment(
        self, service, team, deterministic_clock, receipt_image, voucher_draft,
        voucher_document, proof_document,
    ):
        sam, fiona = team["admin"], team["finance"]
        victor, chen = team["voucher"], team["checker"]
        ines, priya = team["initiator"], team["payment"]
        assert landing_screen(priya.role) == "payment_releaser"

        receipt = service.submit_receipt(sam, receipt_image)
        deterministic_clock.advance(60)
        assert [r.id for r in service.queries.finance_queue(fiona.company)] == [receipt.id]

        assert can_perform(fiona.role, Operation.APPROVE_RECEIPT)
        service.approve_receipt(fiona, receipt.id, "ok")
        deterministic_clock.advance(60)
        assert [r.id for r in service.queries.approved_receipts()] == [receipt.id]

        voucher = service.create_voucher(victor, receipt.id, voucher_draft, voucher_document)
        deterministic_clock.advance(60)
        assert service.queries.approved_receipts() == []
        assert [v.id for v in service.queries.checker_queue()] == [voucher.id]

        service.check_voucher(chen, voucher.id, "verified")
        deterministic_clock.advance(60)
        assert [v.id for v in service.queries.to_initiate()] == [voucher.id]

        service.initiate_payment(ines, voucher.id)
        deterministic_clock.advance(60)
        assert [v.id for v in service.queries.payment_queue()] == [voucher.id]

        service.release_payment(priya, voucher.id, "sent")
        deterministic_clock.advance(60)
        assert [v.id for v in service.queries.awaiting_proof()] == [voucher.id]

        final = service.upload_proof_of_payment(ines, voucher.id, proof_document)

        assert final.status == VoucherStatus.PAYMENT_COMPLETED
        assert [c.text for c in final.comments] == [
            "verified", "sent", "Proof of payment uploaded",
        ]
        assert [c.role for c in final.comments] == ["checker", "payment", "initiator"]
        assert final.checked_at < final.initiated_at < final.released_at
        assert final.released_at < final.proof_of_payment_uploaded_at

        stored_receipt = service.get_receipt(receipt.id)
        assert stored_receipt.status == ReceiptStatus.VOUCHER_CREATED
        assert stored_receipt.voucher_id == voucher.id
        assert [c.text for c in stored_receipt.comments] == ["ok"]

        overview = service.my_receipts_overview(sam)
        assert overview[0].view.label == "Payment Completed"
        assert service.queries.awaiting_proof() == []
        assert service.queries.payment_queue() == []

        counts = service.receipt_counts(sam)
        assert (counts.pending, counts.approved, counts.rejected) == (0, 1, 0)

    def test_rejection_at_check_ends_the_flow(
        self, service, team, receipt_image, voucher_draft, voucher_document,
    ):
        receipt = service.submit_receipt(team["admin"], receipt_image)
        service.approve_receipt(team["finance"], receipt.id)
        voucher = service.create_voucher(
            team["voucher"], receipt.id, voucher_draft, voucher_document
        )

        rejected = service.reject_voucher(team["checker"], voucher.id, "missing account number")
        assert rejected.status == VoucherStatus.REJECTED

        with pytest.raises(InvalidTransitionError):
            service.initiate_payment(team["initiator"], voucher.id)

        assert [v.status for v in service.queries.checker_queue()] == [VoucherStatus.REJECTED]
        assert service.queries.to_initiate() == []
        assert service.my_receipts_overview(team["admin"])[0].view.label == "Rejected"

    def test_rejection_at_release(
        self, service, team, receipt_image, voucher_draft, voucher_document,
    ):
        receipt = service.submit_receipt(team["admin"], receipt_image)
        service.approve_receipt(team["finance"], receipt.id)
        voucher = service.create_voucher(
            team["voucher"], receipt.id, voucher_draft, voucher_document
        )
        service.check_voucher(team["checker"], voucher.id, "verified")
        service.initiate_payment(team["initiator"], voucher.id, "batch 7")

        final = service.reject_payment(team["payment"], voucher.id, "beneficiary bank offline")
        assert final.status == VoucherStatus.REJECTED
        assert final.rejected_by == "uid-priya"
        assert [c.text for c in final.comments] == [
            "verified", "batch 7", "beneficiary bank offline",
        ]
        assert [v.id for v in service.queries.payment_queue()] == [voucher.id]
        assert team["payment"].role == Designation.PAYMENT
