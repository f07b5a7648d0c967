"""
User profile ORM model.

Profiles are written at sign-up (pending, no designation) and updated by a
super-user when a role is assigned.  The lifecycle engine only reads them,
through ``zoompay_services.identity.ActorDirectory``.
"""

from sqlalchemy import Boolean, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from zoompay_kernel.db.base import TrackedBase


class UserModel(TrackedBase):
    """
    A registered user.

    Guarantees:
        - ``uid`` (the identity provider's user id) is unique.
        - A user belongs to a company or to a bank, not both.
    """

    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("uid", name="uq_user_uid"),
        Index("idx_user_designation", "designation"),
        Index("idx_user_company", "company"),
    )

    uid: Mapped[str] = mapped_column(String(128), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    designation: Mapped[str | None] = mapped_column(String(32), nullable=True)
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bank: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact: Mapped[str | None] = mapped_column(String(64), nullable=True)
    pending: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<UserModel {self.uid} [{self.designation or 'pending'}]>"
