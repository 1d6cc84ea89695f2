# accounting/services/journal_entry_service.py

"""
======================================================
PATH: accounting/services/journal_entry_service.py
======================================================
JOURNAL ENTRY SERVICE (FINANCIAL LEDGER)

This module is the ONLY place allowed to:
- Create JournalEntry
- Create LedgerEntry
- Enforce debit == credit (one debit line + one credit line, same base amount)
- Reverse postings (additive: history is never edited)

Everything else (invoices, payments) must pass through here.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry
from common.exceptions import (
    AccountNotFound,
    AlreadyReversed,
    InvalidLedgerEntry,
    LedgerReferenceNotFound,
)
from parties.models import Customer, Supplier

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
MIN_LINE_AMOUNT = Decimal("0.01")


@dataclass(frozen=True)
class AccountRef:
    """Ledger account address: a customer, a supplier or a GL account."""

    kind: str
    account_id: uuid.UUID

    @classmethod
    def customer(cls, customer) -> "AccountRef":
        return cls(kind=LedgerEntry.CUSTOMER, account_id=customer.pk)

    @classmethod
    def supplier(cls, supplier) -> "AccountRef":
        return cls(kind=LedgerEntry.SUPPLIER, account_id=supplier.pk)

    @classmethod
    def gl(cls, account: Account) -> "AccountRef":
        return cls(kind=LedgerEntry.GL, account_id=account.pk)


_ACCOUNT_MODELS = {
    LedgerEntry.CUSTOMER: Customer,
    LedgerEntry.SUPPLIER: Supplier,
    LedgerEntry.GL: Account,
}


def _money(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0.00")

    if isinstance(value, Decimal):
        amt = value
    else:
        try:
            amt = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise InvalidLedgerEntry(f"Invalid money value: {value!r}") from exc

    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _rate(value) -> Decimal:
    try:
        rate = Decimal(str(value if value not in (None, "") else "1"))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvalidLedgerEntry(f"Invalid exchange rate: {value!r}") from exc

    if not rate.is_finite() or rate <= 0:
        raise InvalidLedgerEntry("exchange_rate must be > 0")
    return rate.quantize(Decimal("0.000001"), rounding=ROUND_HALF_UP)


def _require_account(ref: AccountRef) -> None:
    model = _ACCOUNT_MODELS.get(ref.kind)
    if model is None:
        raise InvalidLedgerEntry(f"Invalid account kind: {ref.kind!r}")

    try:
        obj = model.objects.only("pk", "is_active").get(pk=ref.account_id)
    except (model.DoesNotExist, DjangoValidationError, ValueError) as exc:
        raise AccountNotFound(
            f"{ref.kind} account not found",
            details={"account_kind": ref.kind, "account_id": str(ref.account_id)},
        ) from exc

    if ref.kind == LedgerEntry.GL and not obj.is_active:
        raise InvalidLedgerEntry(
            "Cannot post to an inactive GL account",
            details={"account_id": str(ref.account_id)},
        )


def _normalize_reference(reference_type, reference_id) -> tuple[str, str]:
    rt = str(reference_type or "").strip()
    rid = str(reference_id or "").strip()
    if not rt or not rid:
        raise InvalidLedgerEntry("reference_type and reference_id are required")
    return rt, rid


# ============================================================
# DOUBLE ENTRY
# ============================================================


@transaction.atomic
def create_double_entry(
    *,
    debit_account: AccountRef,
    credit_account: AccountRef,
    amount,
    description: str,
    reference_type: str,
    reference_id,
    currency: str | None = None,
    exchange_rate=None,
    transaction_date: date | None = None,
    user=None,
) -> JournalEntry:
    """
    Post one balanced pair: a debit line and a credit line with equal amounts,
    the same reference and the same transaction date.
    """
    amount = _money(amount)
    if amount < MIN_LINE_AMOUNT:
        raise InvalidLedgerEntry(
            "Ledger amount must be > 0",
            details={"amount": str(amount)},
        )

    description = (description or "").strip()
    if not description:
        raise InvalidLedgerEntry("Ledger entry description is required")

    if debit_account == credit_account:
        raise InvalidLedgerEntry("Debit and credit accounts must differ")

    reference_type, reference_id = _normalize_reference(reference_type, reference_id)

    today = timezone.localdate()
    tx_date = transaction_date or today
    if tx_date > today:
        raise InvalidLedgerEntry(
            "Ledger entries cannot be future-dated",
            details={"transaction_date": tx_date.isoformat()},
        )

    rate = _rate(exchange_rate)
    currency = (currency or settings.INVOICING["DEFAULT_CURRENCY"]).strip().upper()
    base_amount = (amount * rate).quantize(TWOPLACES, rounding=ROUND_HALF_UP)

    _require_account(debit_account)
    _require_account(credit_account)

    journal = JournalEntry.objects.create(
        description=description,
        reference_type=reference_type,
        reference_id=reference_id,
        created_by=user,
    )

    for ref, entry_type in (
        (debit_account, LedgerEntry.DEBIT),
        (credit_account, LedgerEntry.CREDIT),
    ):
        LedgerEntry.objects.create(
            journal_entry=journal,
            account_kind=ref.kind,
            account_id=ref.account_id,
            entry_type=entry_type,
            amount=amount,
            currency=currency,
            exchange_rate=rate,
            base_amount=base_amount,
            description=description[:255],
            reference_type=reference_type,
            reference_id=reference_id,
            transaction_date=tx_date,
            created_by=user,
        )

    logger.info(
        "Double entry posted",
        extra={
            "journal_id": str(journal.id),
            "reference_type": reference_type,
            "reference_id": reference_id,
            "amount": str(amount),
            "currency": currency,
        },
    )
    return journal


# ============================================================
# REVERSAL
# ============================================================


@transaction.atomic
def reverse_entries(
    *,
    reference_type: str,
    reference_id,
    description: str = "",
    user=None,
) -> list[JournalEntry]:
    """
    For every not-yet-reversed journal under the reference, post the
    equal-and-opposite journal (debits become credits and vice versa).

    - No journals under the reference: LedgerReferenceNotFound
    - All journals already reversed: AlreadyReversed
    """
    reference_type, reference_id = _normalize_reference(reference_type, reference_id)

    originals = JournalEntry.objects.filter(
        reference_type=reference_type,
        reference_id=reference_id,
        reverses__isnull=True,
    )
    if not originals.exists():
        raise LedgerReferenceNotFound(
            details={"reference_type": reference_type, "reference_id": reference_id}
        )

    pending = list(
        originals.select_for_update(of=("self",))
        .filter(reversed_by__isnull=True)
        .order_by("posted_at", "created_at")
    )
    if not pending:
        raise AlreadyReversed(
            "Ledger entries already reversed",
            details={"reference_type": reference_type, "reference_id": reference_id},
        )

    today = timezone.localdate()
    reversals = []

    for journal in pending:
        narrative = (description or "").strip() or f"Reversal: {journal.description}"
        reversal = JournalEntry.objects.create(
            description=narrative,
            reference_type=reference_type,
            reference_id=reference_id,
            reverses=journal,
            created_by=user,
        )

        for line in journal.ledger_entries.all().order_by("entry_type"):
            LedgerEntry.objects.create(
                journal_entry=reversal,
                account_kind=line.account_kind,
                account_id=line.account_id,
                entry_type=(
                    LedgerEntry.CREDIT
                    if line.entry_type == LedgerEntry.DEBIT
                    else LedgerEntry.DEBIT
                ),
                amount=line.amount,
                currency=line.currency,
                exchange_rate=line.exchange_rate,
                base_amount=line.base_amount,
                description=narrative[:255],
                reference_type=reference_type,
                reference_id=reference_id,
                transaction_date=today,
                created_by=user,
            )

        reversals.append(reversal)

    logger.info(
        "Ledger entries reversed",
        extra={
            "reference_type": reference_type,
            "reference_id": reference_id,
            "journals": len(reversals),
        },
    )
    return reversals


# ============================================================
# READS
# ============================================================


def get_ledger_entries_by_reference(*, reference_type: str, reference_id):
    return (
        LedgerEntry.objects.filter(
            reference_type=reference_type,
            reference_id=str(reference_id),
        )
        .select_related("journal_entry")
        .order_by("created_at", "entry_type")
    )
