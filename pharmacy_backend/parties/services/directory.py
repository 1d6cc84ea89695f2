# parties/services/directory.py

"""
COUNTERPARTY DIRECTORY

Read-only lookup of customers/suppliers for the invoicing engine.
Callers receive the model; `role` is resolved here so invoice code never
branches on model class names.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError

from common.exceptions import CounterpartyNotFound
from parties.models import Customer, Supplier

ROLE_CUSTOMER = Customer.ROLE
ROLE_SUPPLIER = Supplier.ROLE

_MODELS = {
    ROLE_CUSTOMER: Customer,
    ROLE_SUPPLIER: Supplier,
}


def get_counterparty(*, role: str, counterparty_id):
    """
    Fetch a customer or supplier by id.

    Raises CounterpartyNotFound if absent (including malformed ids).
    Inactive counterparties ARE returned; the caller decides what inactive means.
    """
    model = _MODELS.get(role)
    if model is None:
        raise ValueError(f"Unknown counterparty role: {role!r}")

    if not counterparty_id:
        raise CounterpartyNotFound(
            f"{role.capitalize()} id is required",
            details={"role": role},
        )

    try:
        return model.objects.get(pk=counterparty_id)
    except (model.DoesNotExist, DjangoValidationError, ValueError) as exc:
        raise CounterpartyNotFound(
            f"{role.capitalize()} not found",
            details={"role": role, "id": str(counterparty_id)},
        ) from exc


def get_customer(customer_id) -> Customer:
    return get_counterparty(role=ROLE_CUSTOMER, counterparty_id=customer_id)


def get_supplier(supplier_id) -> Supplier:
    return get_counterparty(role=ROLE_SUPPLIER, counterparty_id=supplier_id)
