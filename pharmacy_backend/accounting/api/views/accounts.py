# accounting/api/views/accounts.py

"""
CLAIM ACCOUNTS API (READ-ONLY)

GET /api/accounting/claim-accounts/
Active accounts that may absorb a tier-2 discount (ADJUSTMENT / CLAIM / EXPENSE).
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.serializers.accounts import AccountListSerializer
from accounting.services.account_resolver import get_claim_accounts


class ClaimAccountsView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountListSerializer

    @extend_schema(
        tags=["accounting"],
        responses=AccountListSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        qs = get_claim_accounts()
        return Response(AccountListSerializer(qs, many=True).data, status=status.HTTP_200_OK)
