# accounting/management/commands/seed_posting_accounts.py

"""
Seed the GL accounts invoice posting depends on.

- One account per POSTING_ACCOUNT_CODES entry (Inventory, Sales Revenue,
  Sales Returns), using the codes configured in settings
- One default claim account for tier-2 discounts

Idempotent: existing codes are left alone (re-activated if inactive).
"""

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction

from accounting.models.account import Account
from accounting.services.account_resolver import DEFAULT_ACCOUNTS

DEFAULT_CLAIM_ACCOUNT = ("5900", "Supplier Discount Claims", Account.CLAIM)


class Command(BaseCommand):
    help = "Create the GL accounts used when posting confirmed invoices"

    def add_arguments(self, parser):
        parser.add_argument(
            "--claim-code",
            default=DEFAULT_CLAIM_ACCOUNT[0],
            help="Code of the default claim account (default: %(default)s)",
        )

    def _ensure(self, *, code: str, name: str, account_type: str) -> None:
        account, created = Account.objects.get_or_create(
            code=code,
            defaults={"name": name, "account_type": account_type, "is_active": True},
        )
        if created:
            self.stdout.write(f"Created {account}")
            return

        if not account.is_active:
            account.is_active = True
            account.save(update_fields=["is_active", "updated_at"])
            self.stdout.write(f"Re-activated {account}")
        else:
            self.stdout.write(f"Exists {account}")

    @transaction.atomic
    def handle(self, *args, **options):
        codes = getattr(settings, "POSTING_ACCOUNT_CODES", {}) or {}

        for key, (name, account_type) in DEFAULT_ACCOUNTS.items():
            code = (codes.get(key) or "").strip()
            if not code:
                self.stderr.write(f"POSTING_ACCOUNT_CODES has no code for {key}; skipped")
                continue
            self._ensure(code=code, name=name, account_type=account_type)

        _, claim_name, claim_type = DEFAULT_CLAIM_ACCOUNT
        self._ensure(
            code=options["claim_code"].strip(),
            name=claim_name,
            account_type=claim_type,
        )

        self.stdout.write(self.style.SUCCESS("Posting accounts ready"))
