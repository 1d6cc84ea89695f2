# accounting/api/serializers/balances.py

from rest_framework import serializers


class AccountBalanceSerializer(serializers.Serializer):
    account_kind = serializers.CharField()
    account_id = serializers.CharField()
    as_of = serializers.DateField(allow_null=True)
    balance = serializers.DecimalField(max_digits=16, decimal_places=2)


class StatementLineSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    transaction_date = serializers.DateField()
    entry_type = serializers.CharField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    currency = serializers.CharField()
    base_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    description = serializers.CharField(allow_blank=True)
    reference_type = serializers.CharField()
    reference_id = serializers.CharField()
    balance = serializers.DecimalField(max_digits=16, decimal_places=2)


class AccountStatementSerializer(serializers.Serializer):
    account_kind = serializers.CharField()
    account_id = serializers.CharField()
    opening_balance = serializers.DecimalField(max_digits=16, decimal_places=2)
    entries = StatementLineSerializer(many=True)
    closing_balance = serializers.DecimalField(max_digits=16, decimal_places=2)
