"""
zoompay_services.identity -- Resolve the acting user from a stored profile.

Responsibility:
    Turn an authenticated identity-provider uid into the ``Actor`` value
    every lifecycle operation takes, enforcing the sign-in gate: a profile
    still pending approval, or without a designation, cannot act.

Architecture position:
    Services layer.  Reads the ``users`` collection through the
    DocumentStore protocol.  Never writes.

Invariants:
    - An unknown designation value is treated like a missing one.
"""

from __future__ import annotations

from typing import Any

from zoompay_kernel.db.document_store import DocumentStore, Filter
from zoompay_kernel.domain.values import Actor, Designation
from zoompay_kernel.exceptions import (
    AccountPendingError,
    RecordDecodeError,
    RecordNotFoundError,
)
from zoompay_kernel.logging_config import get_logger

logger = get_logger("services.identity")

USERS = "users"


def actor_from_profile(profile: dict[str, Any]) -> Actor:
    """Build an ``Actor`` from a ``users`` record.

    Raises:
        RecordDecodeError: if the record has no uid or name.
        AccountPendingError: if the profile is pending or has no
            recognised designation.
    """
    uid = profile.get("uid")
    if not uid or not profile.get("name"):
        raise RecordDecodeError(
            USERS, str(profile.get("id")) if profile.get("id") else None,
            "missing uid or name",
        )
    try:
        designation = Designation(profile.get("designation"))
    except ValueError:
        designation = None
    if profile.get("pending") or designation is None:
        raise AccountPendingError(uid)
    return Actor(
        actor_id=uid,
        name=profile["name"],
        role=designation,
        email=profile.get("email"),
        company=profile.get("company"),
        bank=profile.get("bank"),
    )


class ActorDirectory:
    """Looks up user profiles and resolves them into actors."""

    def __init__(self, store: DocumentStore):
        self._store = store

    def profile(self, uid: str) -> dict[str, Any]:
        rows = self._store.query(USERS, [Filter("uid", "==", uid)], limit=1)
        if not rows:
            raise RecordNotFoundError(USERS, uid)
        return rows[0]

    def resolve(self, uid: str) -> Actor:
        """The actor for ``uid``.

        Raises:
            RecordNotFoundError: no profile for ``uid``.
            AccountPendingError: profile not yet approved.
        """
        try:
            actor = actor_from_profile(self.profile(uid))
        except AccountPendingError:
            logger.info("sign_in_refused_pending", extra={"uid": uid})
            raise
        logger.debug(
            "actor_resolved",
            extra={"uid": uid, "designation": actor.role_value},
        )
        return actor
