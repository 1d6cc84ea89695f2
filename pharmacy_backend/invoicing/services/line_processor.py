# invoicing/services/line_processor.py

"""
LINE ITEM PROCESSOR

Turns one raw invoice line (dict from a caller / serializer) into a fully
computed ProcessedLine:

    subtotal  = quantity x unit_price
    discounts = DiscountEngine(subtotal, p1, p2, claim account)
    taxable   = subtotal - discount1 - discount2
    tax       = TaxEngine(item, taxable)
    total     = taxable + tax

Validation order: item (exists, active), quantity, unit price, discounts,
batch dates. Errors propagate unchanged.

Backward compatibility: a single legacy `discount` percent is read as tier 1
when neither tier is set.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from accounting.models.account import Account
from common.exceptions import InvalidBatchDates, InvalidLineItem
from common.money import ZERO, q2, to_decimal
from invoicing.services.discount_engine import apply_sequential_discounts
from invoicing.services.tax_engine import calculate_tax, calculate_withholding
from products.models import Item
from products.services.catalog import get_active_item
from products.services.stock_ledger import StockLine


@dataclass(frozen=True)
class ProcessedLine:
    item: Item
    quantity: int
    unit_price: Decimal
    discount1_percent: Decimal
    discount1_amount: Decimal
    discount2_percent: Decimal
    discount2_amount: Decimal
    claim_account: Account | None
    line_subtotal: Decimal
    taxable_amount: Decimal
    tax_amount: Decimal
    withholding_amount: Decimal
    line_total: Decimal
    batch_number: str = ""
    manufacturing_date: date | None = None
    expiry_date: date | None = None

    def to_stock_line(self) -> StockLine:
        return StockLine(
            item_id=self.item.pk,
            quantity=self.quantity,
            batch_number=self.batch_number,
            manufacturing_date=self.manufacturing_date,
            expiry_date=self.expiry_date,
        )

    def as_model_fields(self) -> dict:
        return {
            "item": self.item,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "discount1_percent": self.discount1_percent,
            "discount1_amount": self.discount1_amount,
            "discount2_percent": self.discount2_percent,
            "discount2_amount": self.discount2_amount,
            "claim_account": self.claim_account,
            "line_subtotal": self.line_subtotal,
            "taxable_amount": self.taxable_amount,
            "tax_amount": self.tax_amount,
            "withholding_amount": self.withholding_amount,
            "line_total": self.line_total,
            "batch_number": self.batch_number,
            "manufacturing_date": self.manufacturing_date,
            "expiry_date": self.expiry_date,
        }


def _is_unset(value) -> bool:
    if value is None or value == "":
        return True
    try:
        return to_decimal(value) == ZERO
    except ValueError:
        return False


def _to_quantity(value) -> int:
    if value is None or value == "" or isinstance(value, bool):
        raise InvalidLineItem("quantity is required", details={"field": "quantity"})

    try:
        dec = to_decimal(value, field="quantity")
    except ValueError as exc:
        raise InvalidLineItem(str(exc), details={"field": "quantity"}) from exc

    if dec != dec.to_integral_value():
        raise InvalidLineItem(
            "quantity must be a whole integer unit",
            details={"field": "quantity", "value": str(value)},
        )

    qty = int(dec)
    if qty <= 0:
        raise InvalidLineItem(
            "quantity must be greater than zero",
            details={"field": "quantity", "value": str(value)},
        )
    return qty


def _to_unit_price(value) -> Decimal:
    if value is None or value == "":
        raise InvalidLineItem("unit_price is required", details={"field": "unit_price"})

    try:
        price = to_decimal(value, field="unit_price")
    except ValueError as exc:
        raise InvalidLineItem(str(exc), details={"field": "unit_price"}) from exc

    if price < ZERO:
        raise InvalidLineItem(
            "unit_price cannot be negative",
            details={"field": "unit_price", "value": str(price)},
        )
    return q2(price)


def _to_date(value, *, field: str) -> date | None:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as exc:
        raise InvalidBatchDates(
            f"{field} must be an ISO date (YYYY-MM-DD)",
            details={"field": field, "value": str(value)},
        ) from exc


def process_line(raw: dict, *, default_claim_account_id=None) -> ProcessedLine:
    if not isinstance(raw, dict):
        raise InvalidLineItem("Each line must be an object")

    item = get_active_item(raw.get("item_id") or raw.get("item"))

    quantity = _to_quantity(raw.get("quantity"))
    unit_price = _to_unit_price(raw.get("unit_price"))

    p1 = raw.get("discount1_percent")
    p2 = raw.get("discount2_percent")
    legacy = raw.get("discount")
    if _is_unset(p1) and _is_unset(p2) and not _is_unset(legacy):
        p1 = legacy

    claim_account_id = raw.get("claim_account_id") or default_claim_account_id

    subtotal = q2(Decimal(quantity) * unit_price)
    discounts = apply_sequential_discounts(
        subtotal,
        discount1_percent=p1,
        discount2_percent=p2,
        claim_account_id=claim_account_id,
    )

    manufacturing_date = _to_date(raw.get("manufacturing_date"), field="manufacturing_date")
    expiry_date = _to_date(raw.get("expiry_date"), field="expiry_date")
    if manufacturing_date and expiry_date and expiry_date <= manufacturing_date:
        raise InvalidBatchDates(
            details={
                "item_id": str(item.id),
                "manufacturing_date": manufacturing_date.isoformat(),
                "expiry_date": expiry_date.isoformat(),
            }
        )

    taxable = discounts.final_amount
    tax = calculate_tax(item=item, taxable_amount=taxable)
    withholding = calculate_withholding(item=item, taxable_amount=taxable)

    return ProcessedLine(
        item=item,
        quantity=quantity,
        unit_price=unit_price,
        discount1_percent=discounts.discount1_percent,
        discount1_amount=discounts.discount1_amount,
        discount2_percent=discounts.discount2_percent,
        discount2_amount=discounts.discount2_amount,
        claim_account=discounts.claim_account,
        line_subtotal=subtotal,
        taxable_amount=taxable,
        tax_amount=tax,
        withholding_amount=withholding,
        line_total=taxable + tax,
        batch_number=str(raw.get("batch_number") or "").strip(),
        manufacturing_date=manufacturing_date,
        expiry_date=expiry_date,
    )


def process_lines(raw_lines, *, default_claim_account_id=None) -> list[ProcessedLine]:
    if not raw_lines:
        raise InvalidLineItem("An invoice needs at least one line")

    return [
        process_line(raw, default_claim_account_id=default_claim_account_id)
        for raw in raw_lines
    ]
