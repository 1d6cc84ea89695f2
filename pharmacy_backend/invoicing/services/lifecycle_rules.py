"""
INVOICE LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Invoice entities.

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
- Single source of truth
"""

from common.exceptions import InvalidStateTransition
from invoicing.models import Invoice

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Invoice.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Invoice.STATUS_DRAFT: {
        Invoice.STATUS_CONFIRMED,
    },
    Invoice.STATUS_CONFIRMED: {
        Invoice.STATUS_CANCELLED,
    },
}

# paymentStatus is independent of status and only moves while confirmed
ALLOWED_PAYMENT_TRANSITIONS = {
    Invoice.PAYMENT_PENDING: {
        Invoice.PAYMENT_PARTIAL,
        Invoice.PAYMENT_PAID,
    },
    Invoice.PAYMENT_PARTIAL: {
        Invoice.PAYMENT_PARTIAL,
        Invoice.PAYMENT_PAID,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, invoice: Invoice, target_status: str):
    if not can_transition(
        from_status=invoice.status,
        to_status=target_status,
    ):
        raise InvalidStateTransition(
            f"Invoice {invoice.invoice_number} cannot transition from "
            f"'{invoice.status}' to '{target_status}'",
            details={
                "invoice_id": str(invoice.id),
                "from": invoice.status,
                "to": target_status,
            },
        )


def can_change_payment(*, invoice: Invoice, to_payment_status: str) -> bool:
    if invoice.status != Invoice.STATUS_CONFIRMED:
        return False

    return to_payment_status in ALLOWED_PAYMENT_TRANSITIONS.get(
        invoice.payment_status, set()
    )


def validate_payment_transition(*, invoice: Invoice, target_payment_status: str):
    if not can_change_payment(invoice=invoice, to_payment_status=target_payment_status):
        raise InvalidStateTransition(
            f"Invoice {invoice.invoice_number} ({invoice.status}/{invoice.payment_status}) "
            f"cannot be marked '{target_payment_status}'",
            details={
                "invoice_id": str(invoice.id),
                "status": invoice.status,
                "payment_status": invoice.payment_status,
                "to": target_payment_status,
            },
        )
