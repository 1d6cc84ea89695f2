# accounting/api/serializers/accounts.py

from rest_framework import serializers

from accounting.models.account import Account


class AccountListSerializer(serializers.ModelSerializer):
    """
    Read-only account listing (claim account pickers need id/code/name/type).
    """

    can_receive_claims = serializers.BooleanField(read_only=True)

    class Meta:
        model = Account
        fields = ("id", "code", "name", "account_type", "is_active", "can_receive_claims")
        read_only_fields = fields
