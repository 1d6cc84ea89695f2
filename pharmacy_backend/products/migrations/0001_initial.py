import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Item",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("sku", models.CharField(db_index=True, max_length=128, unique=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("cost_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("sale_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                (
                    "gst_rate",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("100")),
                        ],
                    ),
                ),
                (
                    "wht_rate",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Withholding rate. Tracked only; never added to invoice totals.",
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("100")),
                        ],
                    ),
                ),
                ("quantity_on_hand", models.PositiveIntegerField(default=0, editable=False)),
                ("min_stock", models.PositiveIntegerField(default=0)),
                ("max_stock", models.PositiveIntegerField(default=0)),
                ("stock_version", models.PositiveIntegerField(default=0, editable=False)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["sku"], name="item_sku_idx"),
                    models.Index(fields=["name"], name="item_name_idx"),
                    models.Index(fields=["is_active"], name="item_active_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("min_stock__lte", models.F("max_stock"))),
                        name="item_min_stock_lte_max_stock",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("cost_price__gte", Decimal("0.00")), ("sale_price__gte", Decimal("0.00"))),
                        name="item_prices_nonnegative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("movement_type", models.CharField(choices=[("IN", "Stock In"), ("OUT", "Stock Out")], max_length=3)),
                ("quantity", models.PositiveIntegerField()),
                ("reference_type", models.CharField(max_length=32)),
                ("reference_id", models.CharField(max_length=64)),
                ("batch_number", models.CharField(blank=True, default="", max_length=64)),
                ("manufacturing_date", models.DateField(blank=True, null=True)),
                ("expiry_date", models.DateField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                        to="products.item",
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_movements",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "reverses",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reversed_by",
                        to="products.stockmovement",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["created_at"], name="stock_mv_created_idx"),
                    models.Index(fields=["movement_type"], name="stock_mv_type_idx"),
                    models.Index(fields=["item", "created_at"], name="stock_mv_item_created_idx"),
                    models.Index(fields=["reference_type", "reference_id"], name="stock_mv_reference_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="stock_movement_quantity_positive",
                    ),
                ],
            },
        ),
    ]
