# invoicing/services/invoice_lifecycle.py

"""
INVOICE LIFECYCLE ORCHESTRATOR (APPLICATION SERVICE)

States:
    draft -> confirmed -> cancelled
    confirmed carries payment_status: pending -> partial -> paid

Responsibilities:
- Build / rebuild draft invoices (lines -> totals -> header)
- Confirm: stock apply -> ledger double entry -> status flip
- Cancel:  ledger reversal -> stock reversal -> status flip
- Payment metadata (no stock, no ledger)

HARD RULES:
- confirm / cancel are ONE transaction: all of {movements, on-hand,
  ledger pair, status} or none of it
- The invoice row is locked before any transition is evaluated
- Business-rule errors propagate unchanged; storage failures surface as
  ConsistencyError (nothing committed, safe to retry)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction
from django.db.models import Sum
from django.utils import timezone
from django.utils.dateparse import parse_date

from accounting.services.journal_entry_service import (
    get_ledger_entries_by_reference,
    reverse_entries,
)
from accounting.services.posting_rules import post_invoice
from common.exceptions import (
    AlreadyReversed,
    CannotCancelPaidInvoice,
    CannotDeleteInvoice,
    CannotModifyConfirmedInvoice,
    ConsistencyError,
    CounterpartyInvalid,
    CreditLimitExceeded,
    EngineError,
    InvalidInvoice,
    InvalidStateTransition,
    InvoiceNotFound,
    ReturnQuantityExceeded,
)
from common.money import ZERO, q2, to_decimal
from invoicing.models import Invoice, InvoiceItem
from invoicing.services.directions import DirectionProfile, get_profile
from invoicing.services.line_processor import ProcessedLine, process_lines
from invoicing.services.lifecycle_rules import (
    validate_payment_transition,
    validate_transition,
)
from invoicing.services.sequence import next_number
from invoicing.services.totals import aggregate_totals
from parties.services.directory import get_counterparty
from products.models import StockMovement
from products.services.stock_ledger import (
    apply_movements,
    get_movements_for_reference,
    reverse_movements,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "counterparty_id",
    "lines",
    "invoice_date",
    "due_date",
    "currency",
    "exchange_rate",
    "claim_account_id",
    "notes",
}


def _invoicing_setting(key, default=None):
    return getattr(settings, "INVOICING", {}).get(key, default)


# ============================================================
# LOOKUPS
# ============================================================


def get_invoice(invoice_id) -> Invoice:
    if not invoice_id:
        raise InvoiceNotFound("Invoice id is required")

    try:
        return Invoice.objects.select_related("customer", "supplier").get(pk=invoice_id)
    except (Invoice.DoesNotExist, DjangoValidationError, ValueError) as exc:
        raise InvoiceNotFound(details={"invoice_id": str(invoice_id)}) from exc


def _lock_invoice(invoice_id) -> Invoice:
    try:
        return Invoice.objects.select_for_update().get(pk=invoice_id)
    except (Invoice.DoesNotExist, DjangoValidationError, ValueError) as exc:
        raise InvoiceNotFound(details={"invoice_id": str(invoice_id)}) from exc


def _run_in_transaction(operation: str, invoice_id, func):
    """
    Run func() atomically; storage failures become ConsistencyError.

    EngineErrors raised inside are business failures and pass through as-is.
    """
    try:
        with transaction.atomic():
            return func()
    except EngineError:
        raise
    except DatabaseError as exc:
        logger.exception(
            "Invoice operation aborted by storage failure",
            extra={"operation": operation, "invoice_id": str(invoice_id or "")},
        )
        raise ConsistencyError(
            details={"operation": operation, "invoice_id": str(invoice_id or "")}
        ) from exc


def _save(invoice: Invoice, **kwargs) -> None:
    try:
        invoice.save(**kwargs)
    except DjangoValidationError as exc:
        raise InvalidInvoice(
            "; ".join(exc.messages),
            details={"invoice_id": str(invoice.pk)},
        ) from exc


# ============================================================
# HEADER RESOLUTION
# ============================================================


def _resolve_counterparty(profile: DirectionProfile, counterparty_id):
    counterparty = get_counterparty(
        role=profile.counterparty_role,
        counterparty_id=counterparty_id,
    )
    if not counterparty.is_active:
        raise CounterpartyInvalid(
            f"{profile.counterparty_role.capitalize()} {counterparty.code} is inactive",
            details={"role": profile.counterparty_role, "id": str(counterparty.pk)},
        )
    return counterparty


def _resolve_original(profile: DirectionProfile, original_invoice_id, counterparty):
    if not profile.is_return:
        if original_invoice_id:
            raise InvalidInvoice(
                f"A {profile.label.lower()} cannot reference an original invoice",
                details={"original_invoice_id": str(original_invoice_id)},
            )
        return None

    if not original_invoice_id:
        raise InvalidInvoice(
            f"A {profile.label.lower()} must reference the invoice being returned",
            details={"field": "original_invoice_id"},
        )

    original = get_invoice(original_invoice_id)

    if original.direction != profile.returns_direction:
        raise InvalidInvoice(
            f"A {profile.label.lower()} must reference a {profile.returns_direction} invoice",
            details={
                "original_invoice_id": str(original.pk),
                "original_direction": original.direction,
            },
        )

    if original.status != Invoice.STATUS_CONFIRMED:
        raise InvalidInvoice(
            "Only confirmed invoices can be returned",
            details={"original_invoice_id": str(original.pk), "status": original.status},
        )

    if getattr(original, profile.counterparty_field + "_id") != counterparty.pk:
        raise InvalidInvoice(
            "A return must be issued to the counterparty of the original invoice",
            details={"original_invoice_id": str(original.pk)},
        )

    return original


def _check_return_quantities(*, original: Invoice, lines, exclude_invoice_id=None) -> None:
    """
    Per item: already returned (non-cancelled returns) + requested <= invoiced.
    """
    invoiced = {
        str(row["item_id"]): int(row["qty"] or 0)
        for row in original.items.order_by().values("item_id").annotate(qty=Sum("quantity"))
    }

    returned_qs = InvoiceItem.objects.filter(invoice__original_invoice=original).exclude(
        invoice__status=Invoice.STATUS_CANCELLED
    )
    if exclude_invoice_id:
        returned_qs = returned_qs.exclude(invoice_id=exclude_invoice_id)

    returned = {
        str(row["item_id"]): int(row["qty"] or 0)
        for row in returned_qs.order_by().values("item_id").annotate(qty=Sum("quantity"))
    }

    requested: dict[str, int] = defaultdict(int)
    for line in lines:
        requested[str(line.item.pk)] += int(line.quantity)

    excess = []
    for item_id, qty in requested.items():
        allowed = invoiced.get(item_id, 0) - returned.get(item_id, 0)
        if qty > allowed:
            excess.append(
                {
                    "item_id": item_id,
                    "requested": qty,
                    "invoiced": invoiced.get(item_id, 0),
                    "already_returned": returned.get(item_id, 0),
                }
            )

    if excess:
        raise ReturnQuantityExceeded(
            details={"original_invoice_id": str(original.pk), "lines": excess}
        )


def _check_credit_limit(
    profile: DirectionProfile, counterparty, grand_total: Decimal, exchange_rate: Decimal
) -> None:
    if profile.direction != Invoice.Direction.SALE:
        return
    if not _invoicing_setting("ENFORCE_CREDIT_LIMIT", False):
        return

    limit = Decimal(counterparty.credit_limit or ZERO)
    if limit <= ZERO:
        return

    base_total = q2(Decimal(grand_total) * Decimal(exchange_rate))
    if base_total > limit:
        raise CreditLimitExceeded(
            details={
                "customer_id": str(counterparty.pk),
                "credit_limit": str(limit),
                "invoice_total": str(base_total),
            }
        )


def _to_date(value, *, field: str) -> date | None:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        parsed = parse_date(str(value).strip())
    except ValueError:
        parsed = None
    if parsed is None:
        raise InvalidInvoice(
            f"{field} must be an ISO date (YYYY-MM-DD)",
            details={"field": field, "value": str(value)},
        )
    return parsed


def _resolve_dates(counterparty, invoice_date=None, due_date=None):
    invoice_date = _to_date(invoice_date, field="invoice_date") or timezone.localdate()
    due_date = _to_date(due_date, field="due_date")

    if invoice_date > timezone.localdate():
        raise InvalidInvoice(
            "invoice_date cannot be in the future",
            details={"invoice_date": invoice_date.isoformat()},
        )

    if due_date is None:
        terms = int(counterparty.payment_terms_days or 0) or int(
            _invoicing_setting("DEFAULT_PAYMENT_TERMS_DAYS", 0) or 0
        )
        due_date = invoice_date + timedelta(days=terms)

    if due_date < invoice_date:
        raise InvalidInvoice(
            "due_date cannot be before invoice_date",
            details={
                "invoice_date": invoice_date.isoformat(),
                "due_date": due_date.isoformat(),
            },
        )

    return invoice_date, due_date


def _resolve_currency(currency=None, exchange_rate=None, *, original: Invoice | None = None):
    if not currency:
        currency = original.currency if original else _invoicing_setting("DEFAULT_CURRENCY", "PKR")
        if exchange_rate in (None, "") and original is not None:
            exchange_rate = original.exchange_rate

    currency = str(currency).strip().upper()
    if len(currency) != 3 or not currency.isalpha():
        raise InvalidInvoice(
            "currency must be a 3-letter ISO code",
            details={"currency": currency},
        )

    if exchange_rate in (None, ""):
        exchange_rate = Decimal("1")
    try:
        rate = to_decimal(exchange_rate, field="exchange_rate")
    except ValueError as exc:
        raise InvalidInvoice(str(exc), details={"field": "exchange_rate"}) from exc

    if rate <= ZERO:
        raise InvalidInvoice(
            "exchange_rate must be greater than zero",
            details={"exchange_rate": str(rate)},
        )

    return currency, rate


def _write_lines(invoice: Invoice, lines: list[ProcessedLine]) -> None:
    invoice.items.all().delete()
    for line_no, line in enumerate(lines, start=1):
        item = InvoiceItem(invoice=invoice, line_no=line_no, **line.as_model_fields())
        try:
            item.save()
        except DjangoValidationError as exc:
            raise InvalidInvoice(
                "; ".join(exc.messages),
                details={"line_no": line_no},
            ) from exc


def _apply_totals(invoice: Invoice, lines: list[ProcessedLine]):
    totals = aggregate_totals(lines)
    for field, value in totals.as_model_fields().items():
        setattr(invoice, field, value)
    return totals


def _processed_from_rows(invoice: Invoice) -> list[ProcessedLine]:
    rows = list(invoice.items.select_related("item", "claim_account").order_by("line_no"))
    return [
        ProcessedLine(
            item=row.item,
            quantity=row.quantity,
            unit_price=row.unit_price,
            discount1_percent=row.discount1_percent,
            discount1_amount=row.discount1_amount,
            discount2_percent=row.discount2_percent,
            discount2_amount=row.discount2_amount,
            claim_account=row.claim_account,
            line_subtotal=row.line_subtotal,
            taxable_amount=row.taxable_amount,
            tax_amount=row.tax_amount,
            withholding_amount=row.withholding_amount,
            line_total=row.line_total,
            batch_number=row.batch_number,
            manufacturing_date=row.manufacturing_date,
            expiry_date=row.expiry_date,
        )
        for row in rows
    ]


# ============================================================
# CREATE / UPDATE / DELETE (draft only)
# ============================================================


def create_invoice(
    *,
    direction,
    counterparty_id,
    lines,
    invoice_date=None,
    due_date=None,
    currency=None,
    exchange_rate=None,
    original_invoice_id=None,
    claim_account_id=None,
    notes: str = "",
    user=None,
) -> Invoice:
    """
    Build a draft invoice. Nothing touches stock or the ledger until confirm.

    claim_account_id is the default claim account for lines that use the
    second discount tier without naming one.
    """
    profile = get_profile(direction)
    counterparty = _resolve_counterparty(profile, counterparty_id)
    original = _resolve_original(profile, original_invoice_id, counterparty)
    invoice_date, due_date = _resolve_dates(counterparty, invoice_date, due_date)
    currency, rate = _resolve_currency(currency, exchange_rate, original=original)

    processed = process_lines(lines, default_claim_account_id=claim_account_id)
    totals = aggregate_totals(processed)

    if original is not None:
        _check_return_quantities(original=original, lines=processed)
    _check_credit_limit(profile, counterparty, totals.grand_total, rate)

    def _create():
        invoice = Invoice(
            invoice_number=next_number(series=profile.number_prefix, on_date=invoice_date),
            direction=profile.direction,
            original_invoice=original,
            invoice_date=invoice_date,
            due_date=due_date,
            currency=currency,
            exchange_rate=rate,
            notes=(notes or "").strip(),
            created_by=user,
            **{profile.counterparty_field: counterparty},
            **totals.as_model_fields(),
        )
        _save(invoice)
        _write_lines(invoice, processed)
        return invoice

    invoice = _run_in_transaction("create", None, _create)

    logger.info(
        "Invoice created",
        extra={
            "invoice_id": str(invoice.pk),
            "invoice_number": invoice.invoice_number,
            "direction": invoice.direction,
            "grand_total": str(invoice.grand_total),
        },
    )
    return invoice


def update_invoice(*, invoice_id, user=None, **changes) -> Invoice:
    """
    Edit a draft. When lines change, lines and totals are rebuilt from scratch.
    """
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise InvalidInvoice(
            "Unknown or read-only invoice fields",
            details={"fields": sorted(unknown)},
        )
    # the header claim account is only a default for the lines being sent
    if "claim_account_id" in changes and "lines" not in changes:
        raise InvalidInvoice(
            "claim_account_id can only be changed together with lines",
            details={"fields": ["claim_account_id"]},
        )

    def _update():
        invoice = _lock_invoice(invoice_id)
        if invoice.status != Invoice.STATUS_DRAFT:
            raise CannotModifyConfirmedInvoice(
                details={"invoice_id": str(invoice.pk), "status": invoice.status}
            )

        profile = get_profile(invoice.direction)

        if "counterparty_id" in changes:
            counterparty = _resolve_counterparty(profile, changes["counterparty_id"])
            if profile.is_return and counterparty.pk != getattr(
                invoice.original_invoice, profile.counterparty_field + "_id"
            ):
                raise InvalidInvoice(
                    "A return must be issued to the counterparty of the original invoice",
                    details={"original_invoice_id": str(invoice.original_invoice_id)},
                )
            setattr(invoice, profile.counterparty_field, counterparty)
        else:
            counterparty = invoice.counterparty

        if "invoice_date" in changes or "due_date" in changes:
            # a new invoice_date without a due_date re-derives the due date
            keep_due = None if "invoice_date" in changes else invoice.due_date
            invoice.invoice_date, invoice.due_date = _resolve_dates(
                counterparty,
                changes.get("invoice_date", invoice.invoice_date),
                changes.get("due_date", keep_due),
            )

        if "currency" in changes or "exchange_rate" in changes:
            invoice.currency, invoice.exchange_rate = _resolve_currency(
                changes.get("currency", invoice.currency),
                changes.get("exchange_rate", invoice.exchange_rate),
            )

        if "notes" in changes:
            invoice.notes = (changes["notes"] or "").strip()

        if "lines" in changes:
            processed = process_lines(
                changes["lines"],
                default_claim_account_id=changes.get("claim_account_id"),
            )
        else:
            processed = _processed_from_rows(invoice)

        if invoice.original_invoice_id:
            _check_return_quantities(
                original=invoice.original_invoice,
                lines=processed,
                exclude_invoice_id=invoice.pk,
            )

        totals = _apply_totals(invoice, processed)
        _check_credit_limit(profile, counterparty, totals.grand_total, invoice.exchange_rate)

        _save(invoice)
        if "lines" in changes:
            _write_lines(invoice, processed)
        return invoice

    invoice = _run_in_transaction("update", invoice_id, _update)

    logger.info(
        "Invoice updated",
        extra={
            "invoice_id": str(invoice.pk),
            "fields": sorted(changes),
            "user_id": getattr(user, "pk", None),
        },
    )
    return invoice


def delete_invoice(*, invoice_id, user=None) -> None:
    def _delete():
        invoice = _lock_invoice(invoice_id)
        if invoice.status != Invoice.STATUS_DRAFT:
            raise CannotDeleteInvoice(
                details={"invoice_id": str(invoice.pk), "status": invoice.status}
            )
        number = invoice.invoice_number
        invoice.delete()
        return number

    number = _run_in_transaction("delete", invoice_id, _delete)

    logger.info(
        "Draft invoice deleted",
        extra={
            "invoice_id": str(invoice_id),
            "invoice_number": number,
            "user_id": getattr(user, "pk", None),
        },
    )


# ============================================================
# CONFIRM
# ============================================================


def confirm_invoice(*, invoice_id, user=None) -> Invoice:
    """
    draft -> confirmed.

    Order: validate -> stock apply (outbound lines all checked first)
    -> ledger pair -> status flip. Any failure rolls the whole unit back.
    """

    def _confirm():
        invoice = _lock_invoice(invoice_id)
        validate_transition(invoice=invoice, target_status=Invoice.STATUS_CONFIRMED)

        profile = get_profile(invoice.direction)
        counterparty = _resolve_counterparty(
            profile, getattr(invoice, profile.counterparty_field + "_id")
        )

        processed = _processed_from_rows(invoice)
        if not processed:
            raise InvalidInvoice(
                "Cannot confirm an invoice without lines",
                details={"invoice_id": str(invoice.pk)},
            )

        for line in processed:
            if not line.item.is_active:
                raise InvalidInvoice(
                    f"Item {line.item.sku} is inactive",
                    details={"invoice_id": str(invoice.pk), "item_id": str(line.item.pk)},
                )

        if invoice.original_invoice_id:
            original = Invoice.objects.select_for_update().get(pk=invoice.original_invoice_id)
            if original.status != Invoice.STATUS_CONFIRMED:
                raise InvalidInvoice(
                    "The returned invoice is no longer confirmed",
                    details={
                        "original_invoice_id": str(original.pk),
                        "status": original.status,
                    },
                )
            _check_return_quantities(
                original=original,
                lines=processed,
                exclude_invoice_id=invoice.pk,
            )

        _check_credit_limit(profile, counterparty, invoice.grand_total, invoice.exchange_rate)

        apply_movements(
            reference_type=profile.reference_type,
            reference_id=invoice.pk,
            lines=[line.to_stock_line() for line in processed],
            movement_type=profile.stock_movement,
            user=user,
            notes=f"{profile.label} {invoice.invoice_number}",
        )

        post_invoice(invoice, reference_type=profile.reference_type, user=user)

        invoice.status = Invoice.STATUS_CONFIRMED
        invoice.confirmed_by = user
        invoice.confirmed_at = timezone.now()
        _save(invoice, update_fields=["status", "confirmed_by", "confirmed_at", "updated_at"])
        return invoice

    invoice = _run_in_transaction("confirm", invoice_id, _confirm)

    logger.info(
        "Invoice confirmed",
        extra={
            "invoice_id": str(invoice.pk),
            "invoice_number": invoice.invoice_number,
            "direction": invoice.direction,
            "grand_total": str(invoice.grand_total),
        },
    )
    return invoice


# ============================================================
# CANCEL
# ============================================================


def cancel_invoice(*, invoice_id, reason: str = "", user=None) -> Invoice:
    """
    confirmed -> cancelled.

    Order: ledger reversal (only if something was posted) -> stock reversal
    -> status flip. Paid invoices need a refund path instead.
    """

    def _cancel():
        invoice = _lock_invoice(invoice_id)

        if invoice.status == Invoice.STATUS_CANCELLED:
            raise AlreadyReversed(
                f"Invoice {invoice.invoice_number} is already cancelled",
                details={"invoice_id": str(invoice.pk)},
            )

        if invoice.payment_status == Invoice.PAYMENT_PAID:
            raise CannotCancelPaidInvoice(details={"invoice_id": str(invoice.pk)})

        validate_transition(invoice=invoice, target_status=Invoice.STATUS_CANCELLED)

        # draft returns are re-checked against the original when confirmed
        live_returns = invoice.returns.filter(status=Invoice.STATUS_CONFIRMED)
        if live_returns.exists():
            raise InvalidStateTransition(
                f"Invoice {invoice.invoice_number} has confirmed returns that must be cancelled first",
                details={
                    "invoice_id": str(invoice.pk),
                    "returns": [str(pk) for pk in live_returns.values_list("pk", flat=True)],
                },
            )

        profile = get_profile(invoice.direction)
        narrative = (reason or "").strip()

        if Decimal(invoice.grand_total or ZERO) > ZERO:
            reverse_entries(
                reference_type=profile.reference_type,
                reference_id=invoice.pk,
                description=narrative or f"Cancellation of {invoice.invoice_number}",
                user=user,
            )

        reverse_movements(
            reference_type=profile.reference_type,
            reference_id=invoice.pk,
            reason=narrative or f"Cancellation of {invoice.invoice_number}",
            user=user,
            strict=profile.stock_movement == StockMovement.MovementType.IN,
        )

        invoice.status = Invoice.STATUS_CANCELLED
        invoice.cancelled_by = user
        invoice.cancelled_at = timezone.now()
        invoice.cancellation_reason = narrative
        _save(
            invoice,
            update_fields=[
                "status",
                "cancelled_by",
                "cancelled_at",
                "cancellation_reason",
                "updated_at",
            ],
        )
        return invoice

    invoice = _run_in_transaction("cancel", invoice_id, _cancel)

    logger.info(
        "Invoice cancelled",
        extra={
            "invoice_id": str(invoice.pk),
            "invoice_number": invoice.invoice_number,
            "reason": invoice.cancellation_reason,
        },
    )
    return invoice


# ============================================================
# PAYMENT STATUS (metadata only)
# ============================================================


def _apply_payment_metadata(invoice, *, payment_method, payment_reference, notes, paid_at):
    invoice.paid_at = paid_at or timezone.now()
    if payment_method:
        invoice.payment_method = str(payment_method).strip()[:32]
    if payment_reference:
        invoice.payment_reference = str(payment_reference).strip()[:100]
    if notes:
        invoice.payment_notes = str(notes).strip()


def mark_paid(
    *,
    invoice_id,
    payment_method: str = "",
    payment_reference: str = "",
    notes: str = "",
    paid_at=None,
    user=None,
) -> Invoice:
    """Settle the balance in full. Does not touch stock or the ledger."""

    def _mark():
        invoice = _lock_invoice(invoice_id)
        validate_payment_transition(invoice=invoice, target_payment_status=Invoice.PAYMENT_PAID)

        invoice.payment_status = Invoice.PAYMENT_PAID
        invoice.amount_paid = invoice.grand_total
        _apply_payment_metadata(
            invoice,
            payment_method=payment_method,
            payment_reference=payment_reference,
            notes=notes,
            paid_at=paid_at,
        )
        _save(invoice)
        return invoice

    invoice = _run_in_transaction("mark_paid", invoice_id, _mark)

    logger.info(
        "Invoice marked paid",
        extra={
            "invoice_id": str(invoice.pk),
            "amount_paid": str(invoice.amount_paid),
            "user_id": getattr(user, "pk", None),
        },
    )
    return invoice


def mark_partially_paid(
    *,
    invoice_id,
    amount,
    payment_method: str = "",
    payment_reference: str = "",
    notes: str = "",
    paid_at=None,
    user=None,
) -> Invoice:
    """
    Record a part payment; amounts accumulate in amount_paid.

    A payment that would settle the invoice must go through mark_paid.
    """
    try:
        amount = q2(to_decimal(amount, field="amount"))
    except ValueError as exc:
        raise InvalidInvoice(str(exc), details={"field": "amount"}) from exc

    if amount <= ZERO:
        raise InvalidInvoice(
            "Payment amount must be greater than zero",
            details={"amount": str(amount)},
        )

    def _mark():
        invoice = _lock_invoice(invoice_id)
        validate_payment_transition(
            invoice=invoice, target_payment_status=Invoice.PAYMENT_PARTIAL
        )

        new_total = q2(Decimal(invoice.amount_paid or ZERO) + amount)
        if new_total >= invoice.grand_total:
            raise InvalidInvoice(
                "Payment settles the invoice in full; use mark_paid",
                details={
                    "invoice_id": str(invoice.pk),
                    "amount_paid": str(new_total),
                    "grand_total": str(invoice.grand_total),
                },
            )

        invoice.payment_status = Invoice.PAYMENT_PARTIAL
        invoice.amount_paid = new_total
        _apply_payment_metadata(
            invoice,
            payment_method=payment_method,
            payment_reference=payment_reference,
            notes=notes,
            paid_at=paid_at,
        )
        _save(invoice)
        return invoice

    invoice = _run_in_transaction("mark_partially_paid", invoice_id, _mark)

    logger.info(
        "Invoice partially paid",
        extra={
            "invoice_id": str(invoice.pk),
            "amount": str(amount),
            "amount_paid": str(invoice.amount_paid),
            "user_id": getattr(user, "pk", None),
        },
    )
    return invoice


# ============================================================
# READS
# ============================================================


def get_stock_movements_for_invoice(*, invoice_id):
    invoice = get_invoice(invoice_id)
    profile = get_profile(invoice.direction)
    return get_movements_for_reference(
        reference_type=profile.reference_type,
        reference_id=invoice.pk,
    )


def get_ledger_entries_for_invoice(*, invoice_id):
    invoice = get_invoice(invoice_id)
    profile = get_profile(invoice.direction)
    return get_ledger_entries_by_reference(
        reference_type=profile.reference_type,
        reference_id=invoice.pk,
    )
