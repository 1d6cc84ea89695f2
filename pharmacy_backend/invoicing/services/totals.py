# invoicing/services/totals.py

"""
INVOICE TOTALS AGGREGATOR

Pure fold of processed lines into header totals. No I/O.

    grand_total = subtotal - total_discount + tax_total
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    discount1_total: Decimal
    discount2_total: Decimal
    total_discount: Decimal
    taxable_amount: Decimal
    tax_total: Decimal
    withholding_total: Decimal
    grand_total: Decimal

    def as_model_fields(self) -> dict:
        return asdict(self)


def aggregate_totals(lines) -> InvoiceTotals:
    zero = Decimal("0.00")
    subtotal = d1 = d2 = taxable = tax = wht = zero

    for line in lines:
        subtotal += line.line_subtotal
        d1 += line.discount1_amount
        d2 += line.discount2_amount
        taxable += line.taxable_amount
        tax += line.tax_amount
        wht += line.withholding_amount

    total_discount = d1 + d2

    return InvoiceTotals(
        subtotal=subtotal,
        discount1_total=d1,
        discount2_total=d2,
        total_discount=total_discount,
        taxable_amount=taxable,
        tax_total=tax,
        withholding_total=wht,
        grand_total=subtotal - total_discount + tax,
    )
