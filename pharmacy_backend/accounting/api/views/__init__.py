# accounting/api/views/__init__.py

from accounting.api.views.accounts import ClaimAccountsView
from accounting.api.views.balances import AccountBalanceView, AccountStatementView

__all__ = [
    "ClaimAccountsView",
    "AccountBalanceView",
    "AccountStatementView",
]
