"""
Canonical workflow types (``zoompay_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for record lifecycle state machines, plus the lookups
the lifecycle engine uses to resolve an attempted action against a
workflow: which role may perform it, from which states, and into which
state it leads.  Receipt and voucher lifecycles are both declared with
these types so that the transition tables exist exactly once.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, ``storage/`` or outer layers.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* Terminal states have no outgoing transitions.
* All transitions sharing an ``action`` name require the same role.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Guard:
    """A payload requirement checked before a transition fires.

    Contract: frozen, descriptive only.
    Non-goals: does not evaluate the requirement -- the service does.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow.

    ``required_role`` is the designation an actor must hold; ``None``
    means any approved actor.
    """
    from_state: str
    to_state: str
    action: str
    required_role: str | None = None
    guard: Guard | None = None


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a record lifecycle.

    ``initial_action``/``initial_role`` describe the creation step, which
    has no from-state.  ``terminal_states`` accept no further transitions.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()
    initial_action: str = "create"
    initial_role: str | None = None

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"{self.name}: initial state '{self.initial_state}' not in states"
            )
        roles_by_action: dict[str, str | None] = {}
        for t in self.transitions:
            for state in (t.from_state, t.to_state):
                if state not in self.states:
                    raise ValueError(
                        f"{self.name}: transition '{t.action}' references "
                        f"unknown state '{state}'"
                    )
            if t.from_state in self.terminal_states:
                raise ValueError(
                    f"{self.name}: terminal state '{t.from_state}' has an "
                    f"outgoing transition '{t.action}'"
                )
            if roles_by_action.setdefault(t.action, t.required_role) != t.required_role:
                raise ValueError(
                    f"{self.name}: action '{t.action}' declared with "
                    "conflicting roles"
                )

    @property
    def actions(self) -> tuple[str, ...]:
        """Distinct action names, in declaration order."""
        seen: dict[str, None] = {}
        for t in self.transitions:
            seen.setdefault(t.action, None)
        return tuple(seen)


def transitions_for(workflow: Workflow, action: str) -> tuple[Transition, ...]:
    """All transitions of ``workflow`` named ``action``.

    Raises:
        KeyError: if the workflow declares no such action.
    """
    found = tuple(t for t in workflow.transitions if t.action == action)
    if not found:
        raise KeyError(f"{workflow.name}: unknown action '{action}'")
    return found


def required_role(workflow: Workflow, action: str) -> str | None:
    """Role required to perform ``action`` (``None`` = any approved actor)."""
    if action == workflow.initial_action:
        return workflow.initial_role
    return transitions_for(workflow, action)[0].required_role


def allowed_from(workflow: Workflow, action: str) -> tuple[str, ...]:
    """States from which ``action`` may be taken."""
    return tuple(t.from_state for t in transitions_for(workflow, action))


def find_transition(
    workflow: Workflow, action: str, from_state: str
) -> Transition | None:
    """The transition for ``action`` out of ``from_state``, if the table has one."""
    for t in transitions_for(workflow, action):
        if t.from_state == from_state:
            return t
    return None


def outgoing(workflow: Workflow, state: str) -> tuple[Transition, ...]:
    """Transitions leaving ``state``."""
    return tuple(t for t in workflow.transitions if t.from_state == state)


def is_terminal(workflow: Workflow, state: str) -> bool:
    return state in workflow.terminal_states
