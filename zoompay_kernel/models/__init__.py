"""Kernel ORM models."""

from zoompay_kernel.models.user import UserModel

__all__ = ["UserModel"]
