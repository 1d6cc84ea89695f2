# accounting/api/serializers/__init__.py

from accounting.api.serializers.accounts import AccountListSerializer
from accounting.api.serializers.balances import (
    AccountBalanceSerializer,
    AccountStatementSerializer,
)

__all__ = [
    "AccountListSerializer",
    "AccountBalanceSerializer",
    "AccountStatementSerializer",
]
