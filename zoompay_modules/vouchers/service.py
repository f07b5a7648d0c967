"""
Voucher Lifecycle Service (``zoompay_modules.vouchers.service``).

Responsibility
--------------
The sole entry point for changing receipts and vouchers.  One public
method per lifecycle operation: submit, approve and reject receipts;
create a voucher from an approved receipt; check, reject, initiate,
release and reject vouchers; upload proof of payment; plus comments,
receipt deletion and the submitter's read-side views.

Architecture position
---------------------
**Modules layer** -- orchestration.  Depends on the ``DocumentStore`` and
``BlobStore`` protocols, the workflow tables in ``workflows.py`` and the
decoders in ``codec.py``.  Never reads ambient authentication state: the
acting user is the explicit ``actor`` argument of every operation.

Invariants enforced
-------------------
* Checks run in a fixed order: actor role (and company scope), then the
  record's current state against the workflow table, then the payload.
  Nothing is written until all three pass.
* Each public method owns the transaction boundary (``commit`` on success,
  ``rollback`` and re-raise on any exception).
* Status writes are conditional on the status that was read (compare and
  swap); a lost race raises ``InvalidTransitionError``.
* Every timestamp written by one operation is the same ``now``.
* Comments are appended to the list read under the row lock, never
  replaced.
* Voucher creation writes the voucher and the receipt back-link in one
  transaction.
* Every method returns the record as re-read from the store.

Failure modes
-------------
* ``UnauthorizedError`` -- unauthenticated actor, wrong role, other company.
* ``InvalidTransitionError`` -- record not in the transition's from-state.
* ``ValidationError`` -- payload invalid; ``errors`` maps fields to messages.
* ``RecordNotFoundError`` / ``RecordDecodeError`` / ``StoreUnavailableError``
  from the store boundary.
* An upload that succeeds before a failed record write leaves the blob
  orphaned; logged as ``orphaned_blob``, never retried.

Usage::

    service = VoucherLifecycleService(store, blob_store, clock=clock)
    receipt = service.submit_receipt(actor, Upload(image_bytes, "bill.jpg"))
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable
from uuid import UUID

from zoompay_kernel.db.document_store import DocumentStore
from zoompay_kernel.domain.clock import Clock, SystemClock
from zoompay_kernel.domain.values import Actor, Upload, parse_amount, require_text
from zoompay_kernel.domain.workflow import (
    Workflow,
    allowed_from,
    find_transition,
    required_role,
)
from zoompay_kernel.exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    RecordNotFoundError,
    UnauthorizedError,
    ValidationError,
    WorkflowError,
)
from zoompay_kernel.logging_config import LogContext, get_logger
from zoompay_kernel.storage.blob_store import BlobStore
from zoompay_modules.vouchers.codec import (
    RECEIPTS,
    VOUCHERS,
    decode_receipt,
    decode_voucher,
    encode_comments,
)
from zoompay_modules.vouchers.config import VoucherConfig
from zoompay_modules.vouchers.helpers import (
    combined_status,
    generate_ticket_number,
    proof_blob_path,
    receipt_blob_path,
    receipt_comment,
    voucher_blob_path,
    voucher_comment,
    voucher_draft_errors,
)
from zoompay_modules.vouchers.models import (
    Receipt,
    ReceiptCounts,
    ReceiptOverview,
    ReceiptStatus,
    Voucher,
    VoucherDraft,
)
from zoompay_modules.vouchers.selectors import VoucherSelector
from zoompay_modules.vouchers.workflows import (
    RECEIPT_WORKFLOW,
    VOUCHER_COMMENT_ROLES,
    VOUCHER_WORKFLOW,
)

logger = get_logger("modules.vouchers.service")

COMMENT_REQUIRED_MESSAGE = "Comment is required"
REASON_REQUIRED_MESSAGE = "Rejection reason is required"


def _millis(now: datetime) -> int:
    return int(now.timestamp() * 1000)


def _as_uuid(collection: str, record_id: UUID | str) -> UUID:
    if isinstance(record_id, UUID):
        return record_id
    try:
        return UUID(str(record_id))
    except ValueError:
        raise RecordNotFoundError(collection, str(record_id)) from None


class VoucherLifecycleService:
    """
    Receipt and voucher lifecycle operations.

    Contract:
        Every public method takes the acting ``Actor`` explicitly and
        returns the affected record re-read from the store.
    Guarantees:
        A refused operation (any exception) leaves both collections as they
        were; only a blob uploaded before the failure may remain.
    """

    def __init__(
        self,
        store: DocumentStore,
        blob_store: BlobStore,
        clock: Clock | None = None,
        config: VoucherConfig | None = None,
    ):
        self._store = store
        self._blobs = blob_store
        self._clock = clock or SystemClock()
        self._config = config or VoucherConfig.with_defaults()
        self._selector = VoucherSelector(store)

    @property
    def queries(self) -> VoucherSelector:
        return self._selector

    # =========================================================================
    # Plumbing
    # =========================================================================

    @contextmanager
    def _operation(self, action: str, actor: Actor, record_id: Any = None):
        """Log context plus transaction boundary for one public operation."""
        with LogContext.bind(
            actor_id=actor.actor_id,
            actor_role=actor.role_value,
            record_id=record_id,
            action=action,
        ):
            try:
                yield
            except (AuthorizationError, WorkflowError, ValidationError) as exc:
                self._store.rollback()
                logger.warning(
                    "transition_refused",
                    extra={"action": action, "error_code": exc.code, "detail": str(exc)},
                )
                raise
            except Exception:
                self._store.rollback()
                logger.error("operation_failed", extra={"action": action}, exc_info=True)
                raise

    @staticmethod
    def _require_authenticated(actor: Actor, action: str) -> None:
        if not actor.is_authenticated:
            raise UnauthorizedError(
                actor.actor_id, actor.role_value, action, reason="not authenticated"
            )
        if actor.role is None:
            raise UnauthorizedError(
                actor.actor_id, None, action, reason="no designation assigned"
            )

    def _authorize(self, actor: Actor, workflow: Workflow, action: str) -> None:
        self._require_authenticated(actor, action)
        role = required_role(workflow, action)
        if role is not None and actor.role_value != role:
            raise UnauthorizedError(
                actor.actor_id, actor.role_value, action, required_role=role
            )

    def _check_company(self, actor: Actor, receipt: Receipt, action: str) -> None:
        if not self._config.enforce_company_scope or actor.company is None:
            return
        if receipt.company != actor.company:
            raise UnauthorizedError(
                actor.actor_id,
                actor.role_value,
                action,
                reason=f"receipt belongs to company {receipt.company!r}",
            )

    @staticmethod
    def _require_state(
        workflow: Workflow, action: str, entity_type: str, record_id: UUID, current: str
    ):
        transition = find_transition(workflow, action, current)
        if transition is None:
            raise InvalidTransitionError(
                entity_type,
                str(record_id),
                action,
                current,
                allowed_from(workflow, action),
            )
        return transition

    def _load_receipt(self, receipt_id: UUID | str, for_update: bool = False) -> Receipt:
        rid = _as_uuid(RECEIPTS, receipt_id)
        record = self._store.get(RECEIPTS, rid, for_update=for_update)
        if record is None:
            raise RecordNotFoundError(RECEIPTS, str(rid))
        return decode_receipt(record)

    def _load_voucher(self, voucher_id: UUID | str, for_update: bool = False) -> Voucher:
        vid = _as_uuid(VOUCHERS, voucher_id)
        record = self._store.get(VOUCHERS, vid, for_update=for_update)
        if record is None:
            raise RecordNotFoundError(VOUCHERS, str(vid))
        return decode_voucher(record)

    def _write(
        self,
        collection: str,
        entity_type: str,
        record_id: UUID,
        action: str,
        fields: dict[str, Any],
        expected_status: str,
    ) -> None:
        """Conditional write keyed on the status the operation read."""
        applied = self._store.update(
            collection, record_id, fields, expected={"status": expected_status}
        )
        if not applied:
            current = self._store.get(collection, record_id)
            raise InvalidTransitionError(
                entity_type,
                str(record_id),
                action,
                current["status"] if current is not None else "deleted",
                (expected_status,),
            )

    @contextmanager
    def _blob_referenced_by(self, url: str, collection: str, record_id: Any):
        """Log the uploaded blob as orphaned if the record write fails."""
        try:
            yield
        except Exception:
            logger.warning(
                "orphaned_blob",
                extra={
                    "blob_url": url,
                    "collection": collection,
                    "target_record": str(record_id) if record_id else None,
                },
            )
            raise

    @staticmethod
    def _optional_text(text: str | None) -> str | None:
        if text is None or not text.strip():
            return None
        return text.strip()

    # =========================================================================
    # Receipts
    # =========================================================================

    def submit_receipt(self, actor: Actor, image: Upload | None) -> Receipt:
        """
        Store a receipt image and create a ``pending`` receipt.

        Any approved user may submit.  The submitter's name, email and
        company are snapshotted onto the receipt.
        """
        with self._operation("submit", actor):
            self._authorize(actor, RECEIPT_WORKFLOW, RECEIPT_WORKFLOW.initial_action)
            if image is None or not image.content:
                raise ValidationError({"image": "Receipt image is required"})

            now = self._clock.now()
            path = receipt_blob_path(_millis(now), image, self._config.receipt_extension)
            url = self._blobs.put(image.content, path, image.content_type)

            with self._blob_referenced_by(url, RECEIPTS, None):
                receipt_id = self._store.create(RECEIPTS, {
                    "image_url": url,
                    "status": RECEIPT_WORKFLOW.initial_state,
                    "created_at": now,
                    "created_by": actor.actor_id,
                    "user_name": actor.name,
                    "user_email": actor.email,
                    "company": actor.company,
                    "comments": [],
                })
                self._store.commit()

            logger.info(
                "receipt_submitted",
                extra={"receipt_id": str(receipt_id), "company": actor.company},
            )
            return self._load_receipt(receipt_id)

    def approve_receipt(
        self, actor: Actor, receipt_id: UUID | str, comment: str | None = None
    ) -> Receipt:
        """``pending`` -> ``approved`` by a finance officer; comment optional."""
        with self._operation("approve", actor, receipt_id):
            self._authorize(actor, RECEIPT_WORKFLOW, "approve")
            receipt = self._load_receipt(receipt_id, for_update=True)
            self._check_company(actor, receipt, "approve")
            transition = self._require_state(
                RECEIPT_WORKFLOW, "approve", "receipt", receipt.id, receipt.status.value
            )
            note = self._optional_text(comment)

            now = self._clock.now()
            fields: dict[str, Any] = {
                "status": transition.to_state,
                "approved_by": actor.actor_id,
                "approved_by_name": actor.name,
                "approved_at": now,
            }
            if note is not None:
                fields["comments"] = encode_comments(
                    receipt.comments + (receipt_comment(actor, note, now),)
                )
            self._write(RECEIPTS, "receipt", receipt.id, "approve", fields, receipt.status.value)
            self._store.commit()

            logger.info("receipt_approved", extra={"receipt_id": str(receipt.id)})
            return self._load_receipt(receipt.id)

    def reject_receipt(self, actor: Actor, receipt_id: UUID | str, reason: str | None) -> Receipt:
        """``pending`` -> ``rejected`` by a finance officer; reason required.

        Clears any approval fields left on the record.
        """
        with self._operation("reject", actor, receipt_id):
            self._authorize(actor, RECEIPT_WORKFLOW, "reject")
            receipt = self._load_receipt(receipt_id, for_update=True)
            self._check_company(actor, receipt, "reject")
            transition = self._require_state(
                RECEIPT_WORKFLOW, "reject", "receipt", receipt.id, receipt.status.value
            )
            text = require_text(reason, "reason", REASON_REQUIRED_MESSAGE)

            now = self._clock.now()
            fields = {
                "status": transition.to_state,
                "rejected_reason": text,
                "rejected_by": actor.actor_id,
                "rejected_by_name": actor.name,
                "rejected_at": now,
                "approved_by": None,
                "approved_by_name": None,
                "approved_at": None,
                "comments": encode_comments(
                    receipt.comments + (receipt_comment(actor, text, now),)
                ),
            }
            self._write(RECEIPTS, "receipt", receipt.id, "reject", fields, receipt.status.value)
            self._store.commit()

            logger.info("receipt_rejected", extra={"receipt_id": str(receipt.id)})
            return self._load_receipt(receipt.id)

    def add_receipt_comment(self, actor: Actor, receipt_id: UUID | str, text: str | None) -> Receipt:
        """Append a comment without changing status.

        Allowed to finance officers (of the receipt's company) and to the
        receipt's creator.
        """
        with self._operation("comment", actor, receipt_id):
            self._require_authenticated(actor, "comment")
            receipt = self._load_receipt(receipt_id, for_update=True)
            if actor.actor_id != receipt.created_by:
                if actor.role_value != required_role(RECEIPT_WORKFLOW, "approve"):
                    raise UnauthorizedError(
                        actor.actor_id,
                        actor.role_value,
                        "comment",
                        reason="only finance officers or the submitter may comment",
                    )
                self._check_company(actor, receipt, "comment")
            note = require_text(text, "comment", COMMENT_REQUIRED_MESSAGE)

            now = self._clock.now()
            comments = receipt.comments + (receipt_comment(actor, note, now),)
            self._store.update(RECEIPTS, receipt.id, {"comments": encode_comments(comments)})
            self._store.commit()

            logger.info(
                "receipt_comment_added",
                extra={"receipt_id": str(receipt.id), "comment_count": len(comments)},
            )
            return self._load_receipt(receipt.id)

    def delete_receipt(self, actor: Actor, receipt_id: UUID | str) -> None:
        """Delete a ``pending`` receipt.  Only its creator may."""
        with self._operation("delete", actor, receipt_id):
            self._require_authenticated(actor, "delete")
            receipt = self._load_receipt(receipt_id, for_update=True)
            if receipt.created_by != actor.actor_id:
                raise UnauthorizedError(
                    actor.actor_id,
                    actor.role_value,
                    "delete",
                    reason="only the submitter may delete a receipt",
                )
            pending = ReceiptStatus.PENDING.value
            if receipt.status.value != pending:
                raise InvalidTransitionError(
                    "receipt", str(receipt.id), "delete", receipt.status.value, (pending,)
                )
            if not self._store.delete(RECEIPTS, receipt.id, expected={"status": pending}):
                current = self._store.get(RECEIPTS, receipt.id)
                raise InvalidTransitionError(
                    "receipt",
                    str(receipt.id),
                    "delete",
                    current["status"] if current is not None else "deleted",
                    (pending,),
                )
            self._store.commit()

            logger.info(
                "receipt_deleted",
                extra={"receipt_id": str(receipt.id), "image_url": receipt.image_url},
            )

    # =========================================================================
    # Voucher creation
    # =========================================================================

    def create_voucher(
        self,
        actor: Actor,
        receipt_id: UUID | str,
        draft: VoucherDraft,
        document: Upload | None,
    ) -> Voucher:
        """
        Create a voucher from an ``approved`` receipt.

        Postconditions:
            - Voucher in ``voucher_created`` with a ticket number, the
              receipt's image URL and the uploaded voucher document.
            - Receipt in ``voucher_created`` with ``voucher_id`` and the
              ``processed_*`` fields set, in the same transaction.

        Raises:
            ValidationError: with one entry per invalid form field.
        """
        with self._operation("create_voucher", actor, receipt_id):
            self._authorize(actor, RECEIPT_WORKFLOW, "create_voucher")
            receipt = self._load_receipt(receipt_id, for_update=True)
            transition = self._require_state(
                RECEIPT_WORKFLOW, "create_voucher", "receipt", receipt.id, receipt.status.value
            )
            errors = voucher_draft_errors(draft, document)
            if errors:
                raise ValidationError(errors)
            amount = parse_amount(draft.amount)

            now = self._clock.now()
            millis = _millis(now)
            ticket = generate_ticket_number(
                millis, self._config.ticket_prefix, self._config.ticket_digits
            )
            path = voucher_blob_path(millis, actor, document, self._config.voucher_extension)
            url = self._blobs.put(document.content, path, document.content_type)

            with self._blob_referenced_by(url, VOUCHERS, receipt.id):
                voucher_id = self._store.create(VOUCHERS, {
                    "receipt_id": receipt.id,
                    "image_url": receipt.image_url,
                    "voucher_url": url,
                    "status": VOUCHER_WORKFLOW.initial_state,
                    "bank_name": draft.bank_name.strip(),
                    "account_title": draft.account_title.strip(),
                    "account_number": draft.account_number.strip(),
                    "amount": amount,
                    "description": draft.description.strip(),
                    "ticket_number": ticket,
                    "company": receipt.company,
                    "created_by": actor.actor_id,
                    "created_by_name": actor.name,
                    "created_at": now,
                    "comments": [],
                })
                self._write(
                    RECEIPTS,
                    "receipt",
                    receipt.id,
                    "create_voucher",
                    {
                        "status": transition.to_state,
                        "voucher_id": voucher_id,
                        "processed_by": actor.actor_id,
                        "processed_by_name": actor.name,
                        "processed_at": now,
                    },
                    receipt.status.value,
                )
                self._store.commit()

            logger.info(
                "voucher_created",
                extra={
                    "voucher_id": str(voucher_id),
                    "receipt_id": str(receipt.id),
                    "ticket_number": ticket,
                    "amount": str(amount),
                },
            )
            return self._load_voucher(voucher_id)

    # =========================================================================
    # Voucher transitions
    # =========================================================================

    def _voucher_transition(
        self,
        actor: Actor,
        voucher_id: UUID | str,
        action: str,
        event: str,
        text: str | None,
        stamp: Callable[[datetime, str | None], dict[str, Any]],
        text_field: str | None = None,
        text_message: str | None = None,
    ) -> Voucher:
        """Role, state and payload checks, then one conditional write.

        ``text_field`` set means the text is required; otherwise blank text
        is dropped and no comment is appended.
        """
        with self._operation(action, actor, voucher_id):
            self._authorize(actor, VOUCHER_WORKFLOW, action)
            voucher = self._load_voucher(voucher_id, for_update=True)
            transition = self._require_state(
                VOUCHER_WORKFLOW, action, "voucher", voucher.id, voucher.status.value
            )
            if text_field is not None:
                note = require_text(text, text_field, text_message)
            else:
                note = self._optional_text(text)

            now = self._clock.now()
            fields = {"status": transition.to_state, **stamp(now, note)}
            if note is not None:
                fields["comments"] = encode_comments(
                    voucher.comments + (voucher_comment(actor, note, now),)
                )
            self._write(VOUCHERS, "voucher", voucher.id, action, fields, voucher.status.value)
            self._store.commit()

            logger.info(
                event,
                extra={
                    "voucher_id": str(voucher.id),
                    "from_state": transition.from_state,
                    "to_state": transition.to_state,
                },
            )
            return self._load_voucher(voucher.id)

    def _rejection_stamp(self, actor: Actor):
        def stamp(now: datetime, reason: str | None) -> dict[str, Any]:
            return {
                "rejected_by": actor.actor_id,
                "rejected_by_name": actor.name,
                "rejected_at": now,
                "rejected_reason": reason,
            }
        return stamp

    def check_voucher(self, actor: Actor, voucher_id: UUID | str, comment: str | None) -> Voucher:
        """``voucher_created`` -> ``checked`` by a checker; comment required."""
        return self._voucher_transition(
            actor, voucher_id, "check", "voucher_checked", comment,
            lambda now, _: {
                "checked_by": actor.actor_id,
                "checked_by_name": actor.name,
                "checked_at": now,
            },
            text_field="comment",
            text_message=COMMENT_REQUIRED_MESSAGE,
        )

    def reject_voucher(self, actor: Actor, voucher_id: UUID | str, reason: str | None) -> Voucher:
        """``voucher_created`` -> ``rejected`` by a checker; the comment is the reason."""
        return self._voucher_transition(
            actor, voucher_id, "reject_at_check", "voucher_rejected", reason,
            self._rejection_stamp(actor),
            text_field="reason",
            text_message=REASON_REQUIRED_MESSAGE,
        )

    def initiate_payment(
        self, actor: Actor, voucher_id: UUID | str, notes: str | None = None
    ) -> Voucher:
        """``checked`` -> ``initiated`` by an initiator; notes become a comment."""
        return self._voucher_transition(
            actor, voucher_id, "initiate", "payment_initiated", notes,
            lambda now, _: {
                "initiated_by": actor.actor_id,
                "initiated_by_name": actor.name,
                "initiated_at": now,
            },
        )

    def release_payment(self, actor: Actor, voucher_id: UUID | str, comment: str | None) -> Voucher:
        """``initiated`` -> ``payment_released`` by a payment releaser; comment required."""
        return self._voucher_transition(
            actor, voucher_id, "release", "payment_released", comment,
            lambda now, _: {
                "released_by": actor.actor_id,
                "released_by_name": actor.name,
                "released_at": now,
            },
            text_field="comment",
            text_message=COMMENT_REQUIRED_MESSAGE,
        )

    def reject_payment(self, actor: Actor, voucher_id: UUID | str, reason: str | None) -> Voucher:
        """``initiated`` -> ``rejected`` by a payment releaser; the comment is the reason."""
        return self._voucher_transition(
            actor, voucher_id, "reject_at_release", "payment_rejected", reason,
            self._rejection_stamp(actor),
            text_field="reason",
            text_message=REASON_REQUIRED_MESSAGE,
        )

    def upload_proof_of_payment(
        self, actor: Actor, voucher_id: UUID | str, proof: Upload | None
    ) -> Voucher:
        """
        ``payment_released`` -> ``payment_completed`` by an initiator.

        Stores the proof document and appends the fixed proof comment.
        """
        action = "upload_proof"
        with self._operation(action, actor, voucher_id):
            self._authorize(actor, VOUCHER_WORKFLOW, action)
            voucher = self._load_voucher(voucher_id, for_update=True)
            transition = self._require_state(
                VOUCHER_WORKFLOW, action, "voucher", voucher.id, voucher.status.value
            )
            if proof is None or not proof.content:
                raise ValidationError({"proof": "Proof of payment document is required"})

            now = self._clock.now()
            path = proof_blob_path(_millis(now), voucher.id, proof, self._config.proof_extension)
            url = self._blobs.put(proof.content, path, proof.content_type)

            with self._blob_referenced_by(url, VOUCHERS, voucher.id):
                comment = voucher_comment(actor, self._config.proof_comment_text, now)
                self._write(
                    VOUCHERS,
                    "voucher",
                    voucher.id,
                    action,
                    {
                        "status": transition.to_state,
                        "proof_of_payment_url": url,
                        "proof_of_payment_uploaded_by": actor.actor_id,
                        "proof_of_payment_uploaded_by_name": actor.name,
                        "proof_of_payment_uploaded_at": now,
                        "comments": encode_comments(voucher.comments + (comment,)),
                    },
                    voucher.status.value,
                )
                self._store.commit()

            logger.info(
                "proof_of_payment_uploaded",
                extra={"voucher_id": str(voucher.id), "proof_url": url},
            )
            return self._load_voucher(voucher.id)

    def add_voucher_comment(self, actor: Actor, voucher_id: UUID | str, text: str | None) -> Voucher:
        """Append a comment without changing status (any workflow role, any state)."""
        with self._operation("comment", actor, voucher_id):
            self._require_authenticated(actor, "comment")
            if actor.role_value not in VOUCHER_COMMENT_ROLES:
                raise UnauthorizedError(
                    actor.actor_id,
                    actor.role_value,
                    "comment",
                    reason="only voucher workflow roles may comment",
                )
            voucher = self._load_voucher(voucher_id, for_update=True)
            note = require_text(text, "comment", COMMENT_REQUIRED_MESSAGE)

            now = self._clock.now()
            comments = voucher.comments + (voucher_comment(actor, note, now),)
            self._store.update(VOUCHERS, voucher.id, {"comments": encode_comments(comments)})
            self._store.commit()

            logger.info(
                "voucher_comment_added",
                extra={"voucher_id": str(voucher.id), "comment_count": len(comments)},
            )
            return self._load_voucher(voucher.id)

    # =========================================================================
    # Reads
    # =========================================================================

    def get_receipt(self, receipt_id: UUID | str) -> Receipt:
        return self._load_receipt(receipt_id)

    def get_voucher(self, voucher_id: UUID | str) -> Voucher:
        return self._load_voucher(voucher_id)

    def receipt_counts(self, actor: Actor) -> ReceiptCounts:
        self._require_authenticated(actor, "receipt_counts")
        return self._selector.receipt_counts(actor.actor_id)

    def my_receipts_overview(self, actor: Actor) -> list[ReceiptOverview]:
        """The actor's receipts, newest first, each with its combined status."""
        self._require_authenticated(actor, "my_receipts")
        receipts = self._selector.receipts_created_by(actor.actor_id)
        vouchers = self._selector.vouchers_for_receipts(
            r.id for r in receipts if r.voucher_id is not None
        )
        rows = []
        for receipt in receipts:
            voucher = vouchers.get(receipt.id)
            rows.append(ReceiptOverview(receipt, voucher, combined_status(receipt, voucher)))
        return rows
