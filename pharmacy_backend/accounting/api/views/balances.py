# accounting/api/views/balances.py

"""
ACCOUNT BALANCE / STATEMENT API (READ-ONLY)

GET /api/accounting/balances/<kind>/<account_id>/?as_of=YYYY-MM-DD
GET /api/accounting/statements/<kind>/<account_id>/?start_date=&end_date=

<kind> is customer, supplier or gl. Balances are derived from ledger history
(debit base - credit base); nothing is stored.
"""

from __future__ import annotations

from django.utils.dateparse import parse_date
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.serializers.balances import (
    AccountBalanceSerializer,
    AccountStatementSerializer,
)
from accounting.services.balance_service import (
    calculate_account_balance,
    get_account_statement,
)
from common.exceptions import InvalidLedgerEntry


def _date_param(request, name):
    raw = (request.query_params.get(name) or "").strip()
    if not raw:
        return None

    try:
        value = parse_date(raw)
    except ValueError:
        value = None

    if value is None:
        raise InvalidLedgerEntry(
            f"{name} must be a date (YYYY-MM-DD)",
            details={"field": name, "value": raw},
        )
    return value


@extend_schema(
    tags=["accounting"],
    parameters=[
        OpenApiParameter(
            name="as_of",
            type=str,
            location=OpenApiParameter.QUERY,
            required=False,
            description="Inclusive cut-off date (YYYY-MM-DD). Omit for all history.",
        ),
    ],
    responses={200: AccountBalanceSerializer},
)
class AccountBalanceView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, kind: str, account_id):
        as_of = _date_param(request, "as_of")
        balance = calculate_account_balance(
            account_kind=kind,
            account_id=account_id,
            as_of=as_of,
        )
        payload = {
            "account_kind": kind.upper(),
            "account_id": str(account_id),
            "as_of": as_of,
            "balance": balance,
        }
        return Response(AccountBalanceSerializer(payload).data)


@extend_schema(
    tags=["accounting"],
    parameters=[
        OpenApiParameter("start_date", str, OpenApiParameter.QUERY, required=False),
        OpenApiParameter("end_date", str, OpenApiParameter.QUERY, required=False),
    ],
    responses={200: AccountStatementSerializer},
)
class AccountStatementView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, kind: str, account_id):
        statement = get_account_statement(
            account_kind=kind,
            account_id=account_id,
            start_date=_date_param(request, "start_date"),
            end_date=_date_param(request, "end_date"),
        )
        return Response(AccountStatementSerializer(statement).data)
