"""
Pure domain layer.

Value objects, the injectable clock and workflow types with NO
dependencies on the ORM, the database or blob storage.
"""

from zoompay_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from zoompay_kernel.domain.values import (
    Actor,
    Comment,
    Designation,
    Upload,
    parse_amount,
    require_text,
)
from zoompay_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "Actor",
    "Comment",
    "Designation",
    "Upload",
    "parse_amount",
    "require_text",
    "Guard",
    "Transition",
    "Workflow",
]
