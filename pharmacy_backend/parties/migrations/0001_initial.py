import uuid
from decimal import Decimal

from django.db import migrations, models


def _counterparty_fields():
    return [
        ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ("code", models.CharField(max_length=32, unique=True)),
        ("name", models.CharField(max_length=200)),
        ("phone", models.CharField(blank=True, default="", max_length=50)),
        ("email", models.EmailField(blank=True, default="", max_length=254)),
        ("address", models.TextField(blank=True, default="")),
        ("payment_terms_days", models.PositiveIntegerField(default=0)),
        ("credit_limit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
        ("is_active", models.BooleanField(default=True)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=_counterparty_fields(),
            options={
                "ordering": ["name"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["name"], name="customer_name_idx"),
                    models.Index(fields=["is_active"], name="customer_active_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(credit_limit__gte=Decimal("0.00")),
                        name="customer_credit_limit_nonnegative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Supplier",
            fields=_counterparty_fields(),
            options={
                "ordering": ["name"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["name"], name="supplier_name_idx"),
                    models.Index(fields=["is_active"], name="supplier_active_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(credit_limit__gte=Decimal("0.00")),
                        name="supplier_credit_limit_nonnegative",
                    ),
                ],
            },
        ),
    ]
