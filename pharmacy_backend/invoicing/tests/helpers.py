# invoicing/tests/helpers.py

"""
Shared fixtures for invoicing-engine tests.

Items are created with zero stock and receive opening stock through the
stock ledger, so on-hand always reconciles with movements.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.contrib.auth import get_user_model

from accounting.models import Account
from accounting.services.account_resolver import DEFAULT_ACCOUNTS
from parties.models import Customer, Supplier
from products.models import Item
from products.services.stock_ledger import record_opening_stock

User = get_user_model()


def make_user(username: str = "clerk"):
    return User.objects.create_user(username=username, password="password123")


def make_customer(code: str = "C-001", **kwargs) -> Customer:
    kwargs.setdefault("name", f"Customer {code}")
    return Customer.objects.create(code=code, **kwargs)


def make_supplier(code: str = "S-001", **kwargs) -> Supplier:
    kwargs.setdefault("name", f"Supplier {code}")
    return Supplier.objects.create(code=code, **kwargs)


def make_item(sku: str = "PCM-500", *, stock: int = 0, **kwargs) -> Item:
    kwargs.setdefault("name", f"Item {sku}")
    kwargs.setdefault("sale_price", Decimal("100.00"))
    kwargs.setdefault("cost_price", Decimal("60.00"))
    item = Item.objects.create(sku=sku, **kwargs)
    if stock:
        record_opening_stock(item=item, quantity=stock)
        item.refresh_from_db()
    return item


def make_account(code: str, account_type: str, *, name: str | None = None, **kwargs) -> Account:
    return Account.objects.create(
        code=code,
        name=name or f"Account {code}",
        account_type=account_type,
        **kwargs,
    )


def make_claim_account(code: str = "5900", **kwargs) -> Account:
    return make_account(code, Account.CLAIM, name="Supplier Discount Claims", **kwargs)


def seed_posting_accounts() -> dict:
    accounts = {}
    for key, (name, account_type) in DEFAULT_ACCOUNTS.items():
        accounts[key], _ = Account.objects.get_or_create(
            code=settings.POSTING_ACCOUNT_CODES[key],
            defaults={"name": name, "account_type": account_type},
        )
    return accounts


def line(item: Item, quantity, unit_price, **extra) -> dict:
    payload = {"item_id": str(item.pk), "quantity": quantity, "unit_price": unit_price}
    payload.update(extra)
    return payload
