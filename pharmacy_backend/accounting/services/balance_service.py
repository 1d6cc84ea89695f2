# accounting/services/balance_service.py

"""
BALANCE SERVICE (AUTHORITATIVE)

Read-only ledger aggregation helpers.

RULES:
- READ-ONLY: no writes, ever
- LedgerEntry is the single source of truth; balances are never stored
- Timeline is LedgerEntry.transaction_date (inclusive "as of")
- Sign convention: debit positive, credit negative, in base currency
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Case, F, Sum, When
from django.db.models.functions import Coalesce

from accounting.models.ledger import LedgerEntry
from common.exceptions import InvalidLedgerEntry

TWOPLACES = Decimal("0.01")


def _q2(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _normalize_kind(account_kind: str) -> str:
    kind = (account_kind or "").strip().upper()
    if kind not in (LedgerEntry.CUSTOMER, LedgerEntry.SUPPLIER, LedgerEntry.GL):
        raise InvalidLedgerEntry(
            f"Invalid account kind: {account_kind!r}",
            details={"account_kind": account_kind},
        )
    return kind


def _ledger_qs_for_account(*, account_kind: str, account_id):
    return LedgerEntry.objects.filter(
        account_kind=_normalize_kind(account_kind),
        account_id=account_id,
    )


def _signed_total(qs) -> Decimal:
    aggregates = qs.aggregate(
        debit_total=Coalesce(
            Sum(Case(When(entry_type=LedgerEntry.DEBIT, then=F("base_amount")))),
            Decimal("0.00"),
        ),
        credit_total=Coalesce(
            Sum(Case(When(entry_type=LedgerEntry.CREDIT, then=F("base_amount")))),
            Decimal("0.00"),
        ),
    )
    return _q2(_q2(aggregates["debit_total"]) - _q2(aggregates["credit_total"]))


def calculate_account_balance(
    *, account_kind: str, account_id, as_of: date | None = None
) -> Decimal:
    """
    Σ signed base amounts for the account up to and including `as_of`
    (all history when omitted).
    """
    qs = _ledger_qs_for_account(account_kind=account_kind, account_id=account_id)
    if as_of is not None:
        qs = qs.filter(transaction_date__lte=as_of)
    return _signed_total(qs)


def get_account_statement(
    *,
    account_kind: str,
    account_id,
    start_date: date | None = None,
    end_date: date | None = None,
) -> dict:
    """
    Opening balance (before start_date), entries in [start_date, end_date]
    with a running balance, closing balance.
    """
    if start_date and end_date and start_date > end_date:
        raise InvalidLedgerEntry("start_date cannot be after end_date")

    base_qs = _ledger_qs_for_account(account_kind=account_kind, account_id=account_id)

    opening = Decimal("0.00")
    period_qs = base_qs
    if start_date is not None:
        opening = _signed_total(
            base_qs.filter(transaction_date__lte=start_date - timedelta(days=1))
        )
        period_qs = period_qs.filter(transaction_date__gte=start_date)
    if end_date is not None:
        period_qs = period_qs.filter(transaction_date__lte=end_date)

    running = opening
    rows = []
    for entry in period_qs.order_by("transaction_date", "created_at"):
        running = _q2(running + entry.signed_amount)
        rows.append(
            {
                "id": entry.id,
                "transaction_date": entry.transaction_date,
                "entry_type": entry.entry_type,
                "amount": _q2(entry.amount),
                "currency": entry.currency,
                "base_amount": _q2(entry.base_amount),
                "description": entry.description,
                "reference_type": entry.reference_type,
                "reference_id": entry.reference_id,
                "balance": running,
            }
        )

    return {
        "account_kind": _normalize_kind(account_kind),
        "account_id": account_id,
        "opening_balance": opening,
        "entries": rows,
        "closing_balance": running,
    }
