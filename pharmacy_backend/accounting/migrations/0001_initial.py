import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code", models.CharField(max_length=10, unique=True)),
                ("name", models.CharField(max_length=150)),
                (
                    "account_type",
                    models.CharField(
                        choices=[
                            ("ASSET", "Asset"),
                            ("LIABILITY", "Liability"),
                            ("EQUITY", "Equity"),
                            ("REVENUE", "Revenue"),
                            ("EXPENSE", "Expense"),
                            ("ADJUSTMENT", "Adjustment"),
                            ("CLAIM", "Claim"),
                        ],
                        max_length=20,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Account",
                "verbose_name_plural": "Accounts",
                "ordering": ["code"],
                "indexes": [
                    models.Index(fields=["account_type"], name="account_type_idx"),
                    models.Index(fields=["is_active"], name="account_active_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("code", ""), _negated=True), name="chk_account_code_not_blank"),
                    models.CheckConstraint(condition=models.Q(("name", ""), _negated=True), name="chk_account_name_not_blank"),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("description", models.TextField(help_text="Narrative description of the journal entry")),
                ("reference_type", models.CharField(max_length=32)),
                ("reference_id", models.CharField(max_length=64)),
                (
                    "posted_at",
                    models.DateTimeField(default=django.utils.timezone.now, help_text="Accounting effective date"),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, help_text="Timestamp when the journal entry was created"),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="journal_entries",
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
                        to="accounting.journalentry",
                    ),
                ),
            ],
            options={
                "verbose_name": "Journal Entry",
                "verbose_name_plural": "Journal Entries",
                "ordering": ["posted_at", "created_at"],
                "indexes": [
                    models.Index(fields=["posted_at"], name="journal_posted_idx"),
                    models.Index(fields=["created_at"], name="journal_created_idx"),
                    models.Index(fields=["reference_type", "reference_id"], name="journal_reference_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "account_kind",
                    models.CharField(
                        choices=[("CUSTOMER", "Customer"), ("SUPPLIER", "Supplier"), ("GL", "General ledger")],
                        max_length=10,
                    ),
                ),
                ("account_id", models.UUIDField()),
                ("entry_type", models.CharField(choices=[("DEBIT", "Debit"), ("CREDIT", "Credit")], max_length=6)),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Positive monetary value in `currency`",
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("currency", models.CharField(max_length=3)),
                ("exchange_rate", models.DecimalField(decimal_places=6, default=Decimal("1"), max_digits=12)),
                (
                    "base_amount",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="amount x exchange_rate (derived when left empty)",
                        max_digits=14,
                    ),
                ),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("reference_type", models.CharField(max_length=32)),
                ("reference_id", models.CharField(max_length=64)),
                ("transaction_date", models.DateField(default=django.utils.timezone.localdate)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="ledger_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "journal_entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="accounting.journalentry",
                    ),
                ),
            ],
            options={
                "verbose_name": "Ledger Entry",
                "verbose_name_plural": "Ledger Entries",
                "ordering": ["transaction_date", "created_at"],
                "indexes": [
                    models.Index(
                        fields=["account_kind", "account_id", "transaction_date"],
                        name="ledger_account_date_idx",
                    ),
                    models.Index(fields=["journal_entry"], name="ledger_journal_idx"),
                    models.Index(fields=["reference_type", "reference_id"], name="ledger_reference_idx"),
                    models.Index(fields=["entry_type"], name="ledger_entry_type_idx"),
                    models.Index(fields=["created_at"], name="ledger_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", Decimal("0"))),
                        name="ledger_entry_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("exchange_rate__gt", Decimal("0"))),
                        name="ledger_entry_exchange_rate_positive",
                    ),
                ],
            },
        ),
    ]
