#!/usr/bin/env python3
"""
Walk one receipt through the full voucher lifecycle against a real database.

Loads the active configuration, creates the schema, seeds one approved user
per designation, then submits a receipt and drives it to a completed
payment (or a rejection), printing each record's state along the way.

Usage:
    python3 scripts/demo_voucher_flow.py
    python3 scripts/demo_voucher_flow.py --config deploy.yaml
    python3 scripts/demo_voucher_flow.py --db-url sqlite:///demo.db --reject-at check
"""

import argparse
import os
import sys
from datetime import UTC, datetime
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from zoompay_config import get_active_config  # noqa: E402
from zoompay_kernel.db.engine import get_session  # noqa: E402
from zoompay_kernel.domain.values import DESIGNATION_LABELS, Designation, Upload  # noqa: E402
from zoompay_kernel.exceptions import RecordNotFoundError, ZoompayError  # noqa: E402
from zoompay_modules._orm_registry import make_document_store  # noqa: E402
from zoompay_modules.vouchers.models import VoucherDraft, status_view  # noqa: E402
from zoompay_services.bootstrap import init_database, make_lifecycle_service  # noqa: E402
from zoompay_services.identity import ActorDirectory  # noqa: E402
from zoompay_services.role_router import landing_screen  # noqa: E402

W = 72

DEMO_USERS = {
    Designation.ADMIN: ("demo-admin", "Sam Submitter", "Acme Trading"),
    Designation.FINANCE: ("demo-finance", "Fiona Finance", "Acme Trading"),
    Designation.VOUCHER: ("demo-voucher", "Victor Voucher", None),
    Designation.CHECKER: ("demo-checker", "Chen Checker", None),
    Designation.INITIATOR: ("demo-initiator", "Ines Initiator", None),
    Designation.PAYMENT: ("demo-payment", "Priya Payment", None),
}


def _banner(title: str) -> None:
    print("=" * W)
    print(f"  {title}".center(W))
    print("=" * W)


def _step(actor, what: str, record) -> None:
    view = status_view(record.status)
    print(f"  {DESIGNATION_LABELS[actor.role]:<18} {what:<28} -> {view.label}")


def _seed_users(store) -> dict:
    directory = ActorDirectory(store)
    now = datetime.now(UTC)
    for designation, (uid, name, company) in DEMO_USERS.items():
        if not _has_user(directory, uid):
            store.create("users", {
                "uid": uid,
                "name": name,
                "email": f"{uid}@example.com",
                "designation": designation.value,
                "company": company,
                "pending": False,
                "approved": True,
                "created_at": now,
            })
    store.commit()
    return {d: directory.resolve(uid) for d, (uid, _, _) in DEMO_USERS.items()}


def _has_user(directory, uid: str) -> bool:
    try:
        directory.profile(uid)
    except RecordNotFoundError:
        return False
    return True


def run(args) -> int:
    environ = dict(os.environ)
    if args.db_url:
        environ["DATABASE_URL"] = args.db_url
    config = get_active_config(args.config, environ=environ)
    init_database(config)

    session = get_session()
    try:
        service = make_lifecycle_service(session, config)
        team = _seed_users(make_document_store(session))

        _banner("ZOOMPAY VOUCHER FLOW")
        for designation, actor in team.items():
            print(f"  {actor.name:<18} lands on '{landing_screen(designation)}'")
        print()

        receipt = service.submit_receipt(
            team[Designation.ADMIN], Upload(b"demo receipt", "lunch.jpg", "image/jpeg")
        )
        _step(team[Designation.ADMIN], "submit receipt", receipt)

        receipt = service.approve_receipt(team[Designation.FINANCE], receipt.id, "ok")
        _step(team[Designation.FINANCE], "approve receipt", receipt)

        voucher = service.create_voucher(
            team[Designation.VOUCHER],
            receipt.id,
            VoucherDraft("First Bank", "Acme Trading Ltd", "0123456789", "2500",
                         "Team lunch with client"),
            Upload(b"%PDF-1.4 demo", "voucher.pdf", "application/pdf"),
        )
        _step(team[Designation.VOUCHER], f"create {voucher.ticket_number}", voucher)

        if args.reject_at == "check":
            voucher = service.reject_voucher(team[Designation.CHECKER], voucher.id,
                                             "Account number does not match")
            _step(team[Designation.CHECKER], "reject voucher", voucher)
        else:
            voucher = service.check_voucher(team[Designation.CHECKER], voucher.id, "verified")
            _step(team[Designation.CHECKER], "check voucher", voucher)

            voucher = service.initiate_payment(team[Designation.INITIATOR], voucher.id)
            _step(team[Designation.INITIATOR], "initiate payment", voucher)

            if args.reject_at == "release":
                voucher = service.reject_payment(team[Designation.PAYMENT], voucher.id,
                                                 "Beneficiary bank offline")
                _step(team[Designation.PAYMENT], "reject payment", voucher)
            else:
                voucher = service.release_payment(team[Designation.PAYMENT], voucher.id, "sent")
                _step(team[Designation.PAYMENT], "release payment", voucher)

                voucher = service.upload_proof_of_payment(
                    team[Designation.INITIATOR], voucher.id,
                    Upload(b"demo transfer slip", "transfer.jpg", "image/jpeg"),
                )
                _step(team[Designation.INITIATOR], "upload proof of payment", voucher)

        print()
        _banner("COMMENTS")
        for comment in voucher.comments:
            print(f"  [{comment.role}] {comment.created_by_name}: {comment.text}")
        print()
    except ZoompayError as exc:
        print(f"  FAILED: {exc.code}: {exc}")
        return 1
    finally:
        session.close()
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Demo the receipt and voucher lifecycle")
    parser.add_argument("--config", help="Deployment YAML merged over the defaults")
    parser.add_argument("--db-url", help="Database URL (overrides configuration)")
    parser.add_argument(
        "--reject-at",
        choices=("check", "release"),
        help="Reject the voucher at this stage instead of completing it",
    )
    return run(parser.parse_args())


if __name__ == "__main__":
    sys.exit(main())
