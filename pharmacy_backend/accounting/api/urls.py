# accounting/api/urls.py

from django.urls import path

from accounting.api.views.accounts import ClaimAccountsView
from accounting.api.views.balances import AccountBalanceView, AccountStatementView

urlpatterns = [
    path(
        "balances/<str:kind>/<uuid:account_id>/",
        AccountBalanceView.as_view(),
        name="account-balance",
    ),
    path(
        "statements/<str:kind>/<uuid:account_id>/",
        AccountStatementView.as_view(),
        name="account-statement",
    ),
    path("claim-accounts/", ClaimAccountsView.as_view(), name="claim-accounts"),
]
