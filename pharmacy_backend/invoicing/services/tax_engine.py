# invoicing/services/tax_engine.py

"""
TAX ENGINE

- GST is charged on the post-discount amount and is part of the line total.
- Withholding (WHT) is computed on the same base but only tracked: it reduces
  counterparty settlement, never the invoice total.
- Missing or zero rates yield zero, never an error.
"""

from __future__ import annotations

from decimal import Decimal

from common.money import ZERO, percent_of


def _rate(item, attr: str) -> Decimal:
    value = getattr(item, attr, None)
    if value in (None, ""):
        return ZERO
    return Decimal(str(value))


def calculate_tax(*, item, taxable_amount) -> Decimal:
    rate = _rate(item, "gst_rate")
    if rate <= ZERO:
        return Decimal("0.00")
    return percent_of(taxable_amount, rate)


def calculate_withholding(*, item, taxable_amount) -> Decimal:
    rate = _rate(item, "wht_rate")
    if rate <= ZERO:
        return Decimal("0.00")
    return percent_of(taxable_amount, rate)
