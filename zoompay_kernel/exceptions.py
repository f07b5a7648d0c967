"""
Typed Exception Hierarchy for the Zoompay Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every lifecycle operation either returns the updated record or raises one
of the exceptions below.  Callers (a mobile client, an API layer, a CLI)
decide how to surface the failure by catching on TYPE, never by parsing
the message:

    try:
        service.check_voucher(actor, voucher_id, comment)
    except InvalidTransitionError as e:
        refresh_and_redisplay(e.record_id, e.current_state)
    except ValidationError as e:
        show_inline(e.errors)

Each class carries:
  1. A ``code`` class attribute (machine-readable, API-safe)
  2. Structured attributes describing the failure (record id, states, ...)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ZoompayError (base)
    |
    +-- AuthorizationError
    |   +-- UnauthorizedError
    |   +-- AccountPendingError
    |
    +-- WorkflowError
    |   +-- InvalidTransitionError
    |
    +-- ValidationError
    |
    +-- StoreError
    |   +-- StoreUnavailableError
    |   +-- RecordNotFoundError
    |   +-- RecordDecodeError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                  | When Raised
----------------|-----------------------|-----------------------------------------
Authorization   | UNAUTHORIZED          | Role/company mismatch, unauthenticated
                | ACCOUNT_PENDING       | Profile pending or has no designation
----------------|-----------------------|-----------------------------------------
Workflow        | INVALID_TRANSITION    | Record not in the expected From state
----------------|-----------------------|-----------------------------------------
Validation      | VALIDATION_FAILED     | Empty comment, bad amount, no upload
----------------|-----------------------|-----------------------------------------
Store           | STORE_UNAVAILABLE     | Document or blob adapter failure
                | RECORD_NOT_FOUND      | Record id does not exist
                | RECORD_DECODE_FAILED  | Stored record is malformed
----------------|-----------------------|-----------------------------------------
Configuration   | CONFIGURATION_INVALID | Configuration file rejected

===============================================================================
HANDLING PATTERNS
===============================================================================

1. UnauthorizedError / InvalidTransitionError: blocking message.  The
   record was not touched; refresh and redisplay the current state.

2. ValidationError: inline, next to the offending field.  ``errors`` maps
   field name -> message.

3. StoreUnavailableError: prompt a manual retry.  The engine does not
   retry on its own.  Partial writes (blob uploaded, record update failed)
   are logged as ``orphaned_blob`` for manual reconciliation.

4. RecordNotFoundError: return the user to the list view.
"""


class ZoompayError(Exception):
    """
    Base exception for all zoompay errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "ZOOMPAY_ERROR"


# Authorization-related exceptions


class AuthorizationError(ZoompayError):
    """Base exception for actor authorization errors."""

    code: str = "AUTHORIZATION_ERROR"


class UnauthorizedError(AuthorizationError):
    """Actor may not perform the attempted operation."""

    code: str = "UNAUTHORIZED"

    def __init__(
        self,
        actor_id: str,
        actor_role: str | None,
        action: str,
        required_role: str | None = None,
        reason: str | None = None,
    ):
        self.actor_id = actor_id
        self.actor_role = actor_role
        self.action = action
        self.required_role = required_role
        self.reason = reason
        detail = reason or (
            f"requires role '{required_role}'" if required_role else "not permitted"
        )
        super().__init__(
            f"Actor {actor_id} (role {actor_role!r}) may not {action}: {detail}"
        )


class AccountPendingError(AuthorizationError):
    """
    User profile has not been approved by a super-user yet.

    Raised at actor resolution time when the profile is still pending or
    carries no designation.
    """

    code: str = "ACCOUNT_PENDING"

    def __init__(self, uid: str):
        self.uid = uid
        super().__init__(
            f"Account {uid} is pending approval. "
            "Please wait for a SuperUser to assign you a role."
        )


# Workflow-related exceptions


class WorkflowError(ZoompayError):
    """Base exception for lifecycle state machine errors."""

    code: str = "WORKFLOW_ERROR"


class InvalidTransitionError(WorkflowError):
    """
    Record is not in the state the attempted transition starts from.

    Covers stale reads, double submission, races lost on a conditional
    write, and any operation against a terminal state.
    """

    code: str = "INVALID_TRANSITION"

    def __init__(
        self,
        entity_type: str,
        record_id: str,
        action: str,
        current_state: str,
        expected_states: tuple[str, ...] = (),
    ):
        self.entity_type = entity_type
        self.record_id = record_id
        self.action = action
        self.current_state = current_state
        self.expected_states = expected_states
        expected = ", ".join(expected_states) if expected_states else "none"
        super().__init__(
            f"Cannot {action} {entity_type} {record_id} in state "
            f"'{current_state}' (allowed from: {expected})"
        )


# Validation exceptions


class ValidationError(ZoompayError):
    """
    Required payload missing or invalid.

    ``errors`` maps each offending field to a human-readable message, so
    the presentation layer can surface them next to the field.
    """

    code: str = "VALIDATION_FAILED"

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        summary = "; ".join(f"{k}: {v}" for k, v in sorted(self.errors.items()))
        super().__init__(f"Validation failed: {summary}")


# Store-related exceptions


class StoreError(ZoompayError):
    """Base exception for document and blob store errors."""

    code: str = "STORE_ERROR"


class StoreUnavailableError(StoreError):
    """The document or blob store adapter failed (network, timeout, I/O)."""

    code: str = "STORE_UNAVAILABLE"

    def __init__(self, store: str, operation: str, detail: str):
        self.store = store
        self.operation = operation
        self.detail = detail
        super().__init__(f"{store} store unavailable during {operation}: {detail}")


class RecordNotFoundError(StoreError):
    """Referenced record id does not exist."""

    code: str = "RECORD_NOT_FOUND"

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"{collection} record not found: {record_id}")


class RecordDecodeError(StoreError):
    """A stored record does not match the expected schema."""

    code: str = "RECORD_DECODE_FAILED"

    def __init__(self, collection: str, record_id: str | None, reason: str):
        self.collection = collection
        self.record_id = record_id
        self.reason = reason
        super().__init__(
            f"Malformed {collection} record {record_id or '<unknown>'}: {reason}"
        )


# Configuration exceptions


class ConfigurationError(ZoompayError):
    """Configuration file could not be loaded or failed validation."""

    code: str = "CONFIGURATION_INVALID"

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid configuration ({source}): {reason}")
