# invoicing/services/discount_engine.py

"""
DISCOUNT ENGINE

Sequential (compounding) two-tier discounts:

    discount1 = base x p1 / 100
    discount2 = (base - discount1) x p2 / 100
    final     = base - discount1 - discount2

Each step is rounded to 2dp (ROUND_HALF_UP), so discount1 + discount2 <= base
and final >= 0 for any p1, p2 in [0, 100].

Tier 2 is a claim-backed discount: when p2 > 0 the cost must land on a claim
account (active ADJUSTMENT / CLAIM / EXPENSE). That lookup is the only I/O.
A claim account given for a line without tier 2 is not looked up or kept.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from accounting.models.account import Account
from accounting.services.account_resolver import get_claim_account
from common.exceptions import ClaimAccountInvalid, InvalidDiscount, InvalidLineItem
from common.money import HUNDRED, ZERO, percent_of, q2, to_decimal


@dataclass(frozen=True)
class DiscountResult:
    base_amount: Decimal
    discount1_percent: Decimal
    discount1_amount: Decimal
    amount_after_discount1: Decimal
    discount2_percent: Decimal
    discount2_amount: Decimal
    final_amount: Decimal
    claim_account: Account | None = None

    @property
    def total_discount(self) -> Decimal:
        return self.discount1_amount + self.discount2_amount


def validate_percent(value, *, field: str = "discount") -> Decimal:
    try:
        pct = to_decimal(value, field=field)
    except ValueError as exc:
        raise InvalidDiscount(str(exc), details={"field": field, "value": str(value)}) from exc

    if pct < ZERO or pct > HUNDRED:
        raise InvalidDiscount(
            f"{field} must be between 0 and 100",
            details={"field": field, "value": str(pct)},
        )
    return pct


def apply_sequential_discounts(
    base_amount,
    discount1_percent=None,
    discount2_percent=None,
    claim_account_id=None,
) -> DiscountResult:
    try:
        base = q2(base_amount)
    except ValueError as exc:
        raise InvalidLineItem("Amount must be a number") from exc
    if base < ZERO:
        raise InvalidLineItem("Amount cannot be negative", details={"amount": str(base)})

    p1 = validate_percent(discount1_percent, field="discount1_percent")
    p2 = validate_percent(discount2_percent, field="discount2_percent")

    # a claim account only attaches to a line that carries tier 2
    claim_account = None
    if p2 > ZERO:
        if not claim_account_id:
            raise ClaimAccountInvalid("Claim account is required when applying discount 2")
        claim_account = get_claim_account(claim_account_id)

    d1 = percent_of(base, p1)
    after1 = base - d1
    d2 = percent_of(after1, p2)
    final = after1 - d2

    return DiscountResult(
        base_amount=base,
        discount1_percent=p1,
        discount1_amount=d1,
        amount_after_discount1=after1,
        discount2_percent=p2,
        discount2_amount=d2,
        final_amount=final,
        claim_account=claim_account,
    )
