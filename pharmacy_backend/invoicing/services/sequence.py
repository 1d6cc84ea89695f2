# invoicing/services/sequence.py

"""
SEQUENCE GENERATOR

<prefix><year><6-digit counter>, e.g. SI2026000001.

The counter row is locked (select_for_update) and incremented in SQL, so two
concurrent issuers never get the same number. Must run inside the same
transaction that stores the invoice, so a rolled-back invoice also rolls the
counter back.
"""

from __future__ import annotations

from datetime import date

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from invoicing.models import InvoiceSequence

COUNTER_WIDTH = 6


@transaction.atomic
def next_number(*, series: str, on_date: date | None = None) -> str:
    series = (series or "").strip().upper()
    if not series:
        raise ValueError("series is required")

    year = (on_date or timezone.localdate()).year

    seq, _ = InvoiceSequence.objects.select_for_update().get_or_create(
        series=series,
        year=year,
    )
    InvoiceSequence.objects.filter(pk=seq.pk).update(last_value=F("last_value") + 1)
    seq.refresh_from_db(fields=["last_value"])

    return f"{series}{year}{seq.last_value:0{COUNTER_WIDTH}d}"
