# common/exceptions.py

"""
ENGINE ERRORS (TYPED)

Every business-rule failure raised by the invoicing engine is an EngineError.

RULES:
- Callers branch on `kind` / `code`, NEVER on message text
- `details` carries structured context (ids, quantities) for API payloads
- The REST layer maps ErrorKind -> HTTP status in ONE place
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    STATE_CONFLICT = "STATE_CONFLICT"
    RESOURCE = "RESOURCE"
    CONSISTENCY = "CONSISTENCY"


class EngineError(Exception):
    """Base exception for all invoicing engine failures."""

    kind: ErrorKind = ErrorKind.VALIDATION
    code = "ENGINE_ERROR"
    default_message = "Invoicing engine error"

    def __init__(self, message: str | None = None, *, details: dict | None = None):
        self.message = message or self.default_message
        self.details = dict(details or {})
        super().__init__(self.message)

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "detail": self.message,
            "details": self.details,
        }


# ============================================================
# KIND BASES
# ============================================================


class ValidationFailed(EngineError):
    """Missing/out-of-range input. Never retried."""

    kind = ErrorKind.VALIDATION
    code = "VALIDATION_FAILED"


class NotFound(EngineError):
    kind = ErrorKind.NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Not found"


class StateConflict(EngineError):
    """Caller logic error or stale client state."""

    kind = ErrorKind.STATE_CONFLICT
    code = "STATE_CONFLICT"


class ResourceUnavailable(EngineError):
    """Caller may re-check and retry deliberately; the engine never auto-retries."""

    kind = ErrorKind.RESOURCE
    code = "RESOURCE_UNAVAILABLE"


class ConsistencyFailure(EngineError):
    """Transaction aborted and fully rolled back; safe to retry from scratch."""

    kind = ErrorKind.CONSISTENCY
    code = "CONSISTENCY_FAILURE"


# ============================================================
# VALIDATION
# ============================================================


class InvalidDiscount(ValidationFailed):
    code = "INVALID_DISCOUNT"
    default_message = "Discount percentage must be between 0 and 100"


class ClaimAccountInvalid(ValidationFailed):
    code = "CLAIM_ACCOUNT_INVALID"
    default_message = "Claim account cannot receive discount claims"


class ClaimAccountInactive(ValidationFailed):
    code = "CLAIM_ACCOUNT_INACTIVE"
    default_message = "Claim account is inactive"


class InvalidLineItem(ValidationFailed):
    code = "INVALID_LINE_ITEM"
    default_message = "Invalid invoice line"


class InvalidBatchDates(ValidationFailed):
    code = "INVALID_BATCH_DATES"
    default_message = "Expiry date must be after manufacturing date"


class ItemInactive(ValidationFailed):
    code = "ITEM_INACTIVE"
    default_message = "Item is inactive"


class CounterpartyInvalid(ValidationFailed):
    code = "COUNTERPARTY_INVALID"
    default_message = "Counterparty is not valid for this invoice"


class InvalidInvoice(ValidationFailed):
    code = "INVALID_INVOICE"
    default_message = "Invalid invoice"


class InvalidLedgerEntry(ValidationFailed):
    code = "INVALID_LEDGER_ENTRY"
    default_message = "Invalid ledger entry"


class CreditLimitExceeded(ValidationFailed):
    code = "CREDIT_LIMIT_EXCEEDED"
    default_message = "Invoice total exceeds the customer's credit limit"


class ReturnQuantityExceeded(ValidationFailed):
    code = "RETURN_QUANTITY_EXCEEDED"
    default_message = "Returned quantity exceeds the originally invoiced quantity"


# ============================================================
# NOT FOUND
# ============================================================


class ItemNotFound(NotFound):
    code = "ITEM_NOT_FOUND"
    default_message = "Item not found"


class ClaimAccountNotFound(NotFound):
    code = "CLAIM_ACCOUNT_NOT_FOUND"
    default_message = "Claim account not found"


class CounterpartyNotFound(NotFound):
    code = "COUNTERPARTY_NOT_FOUND"
    default_message = "Counterparty not found"


class InvoiceNotFound(NotFound):
    code = "INVOICE_NOT_FOUND"
    default_message = "Invoice not found"


class AccountNotFound(NotFound):
    code = "ACCOUNT_NOT_FOUND"
    default_message = "Account not found"


class LedgerReferenceNotFound(NotFound):
    code = "LEDGER_REFERENCE_NOT_FOUND"
    default_message = "No ledger entries found for reference"


# ============================================================
# STATE CONFLICT
# ============================================================


class InvalidStateTransition(StateConflict):
    code = "INVALID_STATE_TRANSITION"
    default_message = "Invalid invoice state transition"


class CannotModifyConfirmedInvoice(StateConflict):
    code = "CANNOT_MODIFY_CONFIRMED_INVOICE"
    default_message = "Only draft invoices can be modified"


class CannotCancelPaidInvoice(StateConflict):
    code = "CANNOT_CANCEL_PAID_INVOICE"
    default_message = "Paid invoices cannot be cancelled; issue a refund instead"


class AlreadyReversed(StateConflict):
    code = "ALREADY_REVERSED"
    default_message = "Already reversed"


class CannotDeleteInvoice(StateConflict):
    code = "CANNOT_DELETE_INVOICE"
    default_message = "Only draft invoices can be deleted"


# ============================================================
# RESOURCE
# ============================================================


class InsufficientStock(ResourceUnavailable):
    code = "INSUFFICIENT_STOCK"
    default_message = "Insufficient stock"

    def __init__(self, message: str | None = None, *, shortages: list | None = None):
        self.shortages = list(shortages or [])
        super().__init__(message, details={"shortages": self.shortages})


# ============================================================
# CONSISTENCY
# ============================================================


class ConsistencyError(ConsistencyFailure):
    code = "CONSISTENCY_ERROR"
    default_message = "Transaction aborted; nothing was committed. Safe to retry."
