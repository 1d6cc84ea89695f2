# PATH: accounting/services/account_resolver.py

"""
ACCOUNT RESOLVER (AUTHORITATIVE)

This module answers TWO questions:
1) "Which GL account should be used for this purpose?"
   Semantic keys (INVENTORY, SALES_REVENUE, SALES_RETURNS) map to codes via
   settings.POSTING_ACCOUNT_CODES.
2) "May this account absorb a tier-2 discount claim?"
   (ClaimAccountDirectory)

Design goals:
- deterministic
- hard-fail on missing setup (so we don't post to wrong accounts)
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError

from accounting.models.account import Account
from common.exceptions import (
    AccountNotFound,
    ClaimAccountInactive,
    ClaimAccountInvalid,
    ClaimAccountNotFound,
)

logger = logging.getLogger(__name__)

INVENTORY = "INVENTORY"
SALES_REVENUE = "SALES_REVENUE"
SALES_RETURNS = "SALES_RETURNS"

DEFAULT_ACCOUNTS = {
    INVENTORY: ("Inventory", Account.ASSET),
    SALES_REVENUE: ("Sales Revenue", Account.REVENUE),
    SALES_RETURNS: ("Sales Returns", Account.REVENUE),
}


# ------------------------------------------------------------
# POSTING ACCOUNTS
# ------------------------------------------------------------


def _resolve_code(semantic_key: str) -> str:
    semantic_key = (semantic_key or "").strip().upper()
    codes = getattr(settings, "POSTING_ACCOUNT_CODES", {}) or {}
    code = (codes.get(semantic_key) or "").strip()

    if not code:
        raise AccountNotFound(
            f"Missing mapping for semantic key '{semantic_key}'. "
            "Set POSTING_ACCOUNT_CODES in settings.",
            details={"semantic_key": semantic_key},
        )
    return code


def get_account_by_code(code: str) -> Account:
    code = (code or "").strip()
    try:
        return Account.objects.get(code=code, is_active=True)
    except Account.DoesNotExist as exc:
        logger.error(
            "Account resolution failed: account not found",
            extra={"account_code": code},
        )
        raise AccountNotFound(
            f"Account with code={code} not found (or inactive). "
            "Run `manage.py seed_posting_accounts` or add the account manually.",
            details={"account_code": code},
        ) from exc


def get_posting_account(semantic_key: str) -> Account:
    return get_account_by_code(_resolve_code(semantic_key))


def get_inventory_account() -> Account:
    return get_posting_account(INVENTORY)


def get_sales_revenue_account() -> Account:
    return get_posting_account(SALES_REVENUE)


def get_sales_returns_account() -> Account:
    return get_posting_account(SALES_RETURNS)


# ------------------------------------------------------------
# CLAIM ACCOUNT DIRECTORY
# ------------------------------------------------------------


def get_claim_account(account_id) -> Account:
    """
    Resolve an account that must absorb a discount claim.

    - missing -> ClaimAccountNotFound
    - inactive -> ClaimAccountInactive
    - wrong type -> ClaimAccountInvalid
    """
    if not account_id:
        raise ClaimAccountNotFound("claim_account_id is required")

    try:
        account = Account.objects.get(pk=account_id)
    except (Account.DoesNotExist, DjangoValidationError, ValueError) as exc:
        raise ClaimAccountNotFound(
            details={"claim_account_id": str(account_id)}
        ) from exc

    if not account.is_active:
        raise ClaimAccountInactive(
            f"Claim account {account.code} is inactive",
            details={"claim_account_id": str(account.id)},
        )

    if not account.can_receive_claims:
        raise ClaimAccountInvalid(
            f"Account {account.code} ({account.account_type}) cannot receive discount claims",
            details={
                "claim_account_id": str(account.id),
                "account_type": account.account_type,
            },
        )

    return account


def get_claim_accounts():
    return Account.objects.filter(
        is_active=True,
        account_type__in=Account.CLAIM_ACCOUNT_TYPES,
    ).order_by("code")
