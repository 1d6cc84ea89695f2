# accounting/services/posting_rules.py

"""
POSTING RULES: INVOICES (AUTHORITATIVE)

Defines HOW a confirmed invoice maps to accounting intent.

| direction       | debit            | credit           |
|-----------------|------------------|------------------|
| sale            | Customer         | Sales Revenue    |
| purchase        | Inventory        | Supplier         |
| return_sale     | Sales Returns    | Customer         |
| return_purchase | Supplier         | Inventory        |

One balanced pair per invoice, amount = grand total, in the invoice's
currency and exchange rate, dated on the invoice date. Withholding is NOT
posted.

RESPONSIBILITIES:
- Resolve semantic accounts
- Pick debit / credit sides
- Delegate persistence to the journal entry service

THIS MODULE DOES NOT:
- Create JournalEntry / LedgerEntry directly
- Change invoice status
"""

from __future__ import annotations

from decimal import Decimal

from accounting.services.account_resolver import (
    get_inventory_account,
    get_sales_returns_account,
    get_sales_revenue_account,
)
from accounting.services.journal_entry_service import AccountRef, create_double_entry


def _sides(invoice) -> tuple[AccountRef, AccountRef]:
    direction = str(invoice.direction)

    if direction == "sale":
        return AccountRef.customer(invoice.customer), AccountRef.gl(get_sales_revenue_account())
    if direction == "purchase":
        return AccountRef.gl(get_inventory_account()), AccountRef.supplier(invoice.supplier)
    if direction == "return_sale":
        return AccountRef.gl(get_sales_returns_account()), AccountRef.customer(invoice.customer)
    if direction == "return_purchase":
        return AccountRef.supplier(invoice.supplier), AccountRef.gl(get_inventory_account())

    raise ValueError(f"No posting rule for invoice direction {direction!r}")


def post_invoice(invoice, *, reference_type: str, user=None):
    """
    POST CONFIRMED INVOICE → LEDGER

    Returns the JournalEntry, or None when the grand total is zero
    (ledger amounts must be > 0, so there is nothing to post).
    """
    if invoice is None:
        raise ValueError("Invoice object is required")

    amount = Decimal(invoice.grand_total or "0.00")
    if amount <= Decimal("0.00"):
        return None

    debit, credit = _sides(invoice)

    return create_double_entry(
        debit_account=debit,
        credit_account=credit,
        amount=amount,
        description=f"Invoice {invoice.invoice_number} ({invoice.direction})",
        reference_type=reference_type,
        reference_id=str(invoice.id),
        currency=invoice.currency,
        exchange_rate=invoice.exchange_rate,
        transaction_date=invoice.invoice_date,
        user=user,
    )
