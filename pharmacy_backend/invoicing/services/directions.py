# invoicing/services/directions.py

"""
INVOICE DIRECTION PROFILES

Every direction-specific rule is resolved ONCE here, so the lifecycle never
branches on the direction string:

| direction       | counterparty | stock on confirm | reference type   | returns   |
|-----------------|--------------|------------------|------------------|-----------|
| sale            | customer     | OUT              | sales_invoice    | -         |
| purchase        | supplier     | IN               | purchase_invoice | -         |
| return_sale     | customer     | IN               | sales_return     | sale      |
| return_purchase | supplier     | OUT              | purchase_return  | purchase  |
"""

from __future__ import annotations

from dataclasses import dataclass

from django.conf import settings

from common.exceptions import InvalidInvoice
from invoicing.models import Invoice
from parties.services.directory import ROLE_CUSTOMER, ROLE_SUPPLIER
from products.models import StockMovement


@dataclass(frozen=True)
class DirectionProfile:
    direction: str
    counterparty_role: str
    stock_movement: str
    reference_type: str
    label: str
    returns_direction: str | None = None

    @property
    def is_return(self) -> bool:
        return self.returns_direction is not None

    @property
    def counterparty_field(self) -> str:
        return "customer" if self.counterparty_role == ROLE_CUSTOMER else "supplier"

    @property
    def number_prefix(self) -> str:
        prefixes = settings.INVOICING.get("NUMBER_PREFIXES", {})
        return prefixes.get(self.direction) or self.direction[:2].upper()


PROFILES = {
    Invoice.Direction.SALE: DirectionProfile(
        direction=Invoice.Direction.SALE,
        counterparty_role=ROLE_CUSTOMER,
        stock_movement=StockMovement.MovementType.OUT,
        reference_type="sales_invoice",
        label="Sales invoice",
    ),
    Invoice.Direction.PURCHASE: DirectionProfile(
        direction=Invoice.Direction.PURCHASE,
        counterparty_role=ROLE_SUPPLIER,
        stock_movement=StockMovement.MovementType.IN,
        reference_type="purchase_invoice",
        label="Purchase invoice",
    ),
    Invoice.Direction.RETURN_SALE: DirectionProfile(
        direction=Invoice.Direction.RETURN_SALE,
        counterparty_role=ROLE_CUSTOMER,
        stock_movement=StockMovement.MovementType.IN,
        reference_type="sales_return",
        label="Sales return",
        returns_direction=Invoice.Direction.SALE,
    ),
    Invoice.Direction.RETURN_PURCHASE: DirectionProfile(
        direction=Invoice.Direction.RETURN_PURCHASE,
        counterparty_role=ROLE_SUPPLIER,
        stock_movement=StockMovement.MovementType.OUT,
        reference_type="purchase_return",
        label="Purchase return",
        returns_direction=Invoice.Direction.PURCHASE,
    ),
}


def get_profile(direction) -> DirectionProfile:
    key = str(direction or "").strip().lower()
    profile = PROFILES.get(key)
    if profile is None:
        raise InvalidInvoice(
            f"Invalid invoice direction: {direction!r}",
            details={"direction": direction, "allowed": [d.value for d in PROFILES]},
        )
    return profile
