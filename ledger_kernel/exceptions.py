"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the posting engine (document modules, API layers, batch jobs) must
be able to tell "the user sent bad lines" apart from "the entry is in the
wrong state" apart from "the entry does not balance" without parsing message
strings.  Every error therefore:

  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes (not just a message string)

Example:
    try:
        service.post(entry_id, company_id, actor_id)
    except BalanceError as e:
        return {"error": e.code, "difference": str(e.difference)}
    except StateError as e:
        return {"error": e.code, "status": e.status}

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from LedgerKernelError:

    LedgerKernelError (base)
    |
    +-- ValidationError
    |   +-- InsufficientLinesError
    |   +-- InvalidLineError
    |   +-- InvalidAccountError
    |   +-- InvalidFieldError
    |   +-- DuplicateEntryNumberError
    |   +-- EntryNotFoundError
    |   +-- LedgerAccountUnresolvedError
    |
    +-- StateError
    |   +-- EntryNotDraftError
    |   +-- EntryNotPostedError
    |   +-- EntryAlreadyVoidedError
    |   +-- ImmutabilityViolationError
    |
    +-- BalanceError
    |
    +-- InfrastructureError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Validation      | INSUFFICIENT_LINES          | Fewer than two lines submitted
                | INVALID_LINE                | Both/neither side positive, negative amount
                | INVALID_ACCOUNT             | Account missing, inactive, other company
                | INVALID_FIELD               | Header field inconsistent (e.g. frequency)
                | DUPLICATE_ENTRY_NUMBER      | Manual entry number already used
                | ENTRY_NOT_FOUND             | Entry ID does not exist for the company
                | ACCOUNT_UNRESOLVED          | Bridge could not resolve an account (strict)
----------------|-----------------------------|-----------------------------------------
State           | ENTRY_NOT_DRAFT             | update/delete/post on a non-draft entry
                | ENTRY_NOT_POSTED            | void/reverse on a non-posted entry
                | ENTRY_ALREADY_VOIDED        | void on a voided entry
                | IMMUTABILITY_VIOLATION      | ORM write to a posted/voided record
----------------|-----------------------------|-----------------------------------------
Balance         | UNBALANCED_ENTRY            | |debits - credits| > tolerance at post
----------------|-----------------------------|-----------------------------------------
Infrastructure  | INFRASTRUCTURE_ERROR        | Database failure while committing

===============================================================================
DESIGN DECISIONS
===============================================================================

1. Exceptions inherit from Exception, not ValueError.  Domain errors are
   caught as a group; programming errors stay distinct.

2. Validation, state and balance errors are raised BEFORE anything is
   flushed.  Callers never see a partially applied entry.

3. No exception in this module triggers a retry.  Retrying is the caller's
   decision.

===============================================================================
"""

from decimal import Decimal


class LedgerKernelError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_KERNEL_ERROR"


# Validation errors


class ValidationError(LedgerKernelError):
    """Base exception for rejected input."""

    code: str = "VALIDATION_ERROR"


class InsufficientLinesError(ValidationError):
    """A journal entry needs at least two lines."""

    code: str = "INSUFFICIENT_LINES"

    def __init__(self, line_count: int):
        self.line_count = line_count
        super().__init__(
            f"Journal entry must have at least 2 lines, got {line_count}"
        )


class InvalidLineError(ValidationError):
    """A line is not exactly one strictly positive side."""

    code: str = "INVALID_LINE"

    def __init__(self, line_index: int, reason: str):
        self.line_index = line_index
        self.reason = reason
        super().__init__(f"Line {line_index + 1}: {reason}")


class InvalidAccountError(ValidationError):
    """Account is missing, inactive, or belongs to another company."""

    code: str = "INVALID_ACCOUNT"

    def __init__(self, account_id: str, reason: str):
        self.account_id = account_id
        self.reason = reason
        super().__init__(f"Invalid account {account_id}: {reason}")


class InvalidFieldError(ValidationError):
    """A header field is missing or inconsistent."""

    code: str = "INVALID_FIELD"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid field '{field}': {reason}")


class DuplicateEntryNumberError(ValidationError):
    """The entry number is already used within the company."""

    code: str = "DUPLICATE_ENTRY_NUMBER"

    def __init__(self, entry_number: str, company_id: str):
        self.entry_number = entry_number
        self.company_id = company_id
        super().__init__(
            f"Entry number {entry_number} already exists for company {company_id}"
        )


class EntryNotFoundError(ValidationError):
    """Journal entry with the given ID was not found for the company."""

    code: str = "ENTRY_NOT_FOUND"

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Journal entry not found: {entry_id}")


class LedgerAccountUnresolvedError(ValidationError):
    """
    The auto-journal bridge could not resolve a line's account.

    Only raised when strict account resolution is enabled; by default the
    bridge logs a warning and skips the entry instead.
    """

    code: str = "ACCOUNT_UNRESOLVED"

    def __init__(self, source_type: str, source_id: str, account_ref: str):
        self.source_type = source_type
        self.source_id = source_id
        self.account_ref = account_ref
        super().__init__(
            f"Could not resolve account '{account_ref}' for "
            f"{source_type} {source_id}"
        )


# State errors


class StateError(LedgerKernelError):
    """Base exception for operations not allowed in the current status."""

    code: str = "INVALID_STATE"


class EntryNotDraftError(StateError):
    """Only DRAFT entries can be updated, deleted or posted."""

    code: str = "ENTRY_NOT_DRAFT"

    def __init__(self, entry_id: str, status: str, operation: str):
        self.entry_id = entry_id
        self.status = status
        self.operation = operation
        super().__init__(
            f"Only DRAFT entries can be {operation}; "
            f"entry {entry_id} is {status}"
        )


class EntryNotPostedError(StateError):
    """Only POSTED entries can be voided or reversed."""

    code: str = "ENTRY_NOT_POSTED"

    def __init__(self, entry_id: str, status: str, operation: str):
        self.entry_id = entry_id
        self.status = status
        self.operation = operation
        super().__init__(
            f"Only POSTED entries can be {operation}; "
            f"entry {entry_id} is {status}"
        )


class EntryAlreadyVoidedError(StateError):
    """The entry has already been voided."""

    code: str = "ENTRY_ALREADY_VOIDED"

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        self.status = "void"
        super().__init__(f"Journal entry {entry_id} is already voided")


class ImmutabilityViolationError(StateError):
    """Attempted write to a record that is frozen by its status."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Cannot modify {entity_type} {entity_id}: {reason}"
        )


# Balance errors


class BalanceError(LedgerKernelError):
    """Journal entry debits do not equal credits within tolerance."""

    code: str = "UNBALANCED_ENTRY"

    def __init__(
        self,
        total_debit: Decimal,
        total_credit: Decimal,
        tolerance: Decimal,
    ):
        self.total_debit = total_debit
        self.total_credit = total_credit
        self.difference = abs(total_debit - total_credit)
        self.tolerance = tolerance
        super().__init__(
            f"Journal entry is not balanced: debits={total_debit}, "
            f"credits={total_credit}, difference={self.difference}"
        )


# Infrastructure errors


class InfrastructureError(LedgerKernelError):
    """The store failed while persisting an operation; nothing was applied."""

    code: str = "INFRASTRUCTURE_ERROR"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")
