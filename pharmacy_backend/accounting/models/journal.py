# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL ENTRY MODEL

Header of one double entry (exactly one debit line + one credit line).

Guarantees:
- Immutable once created (no updates, no deletes)
- A journal is reversed at most once (`reverses` is one-to-one)
- posted_at is the accounting effective date
"""

from __future__ import annotations

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone


class JournalEntry(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    description = models.TextField(help_text="Narrative description of the journal entry")

    reference_type = models.CharField(max_length=32)
    reference_id = models.CharField(max_length=64)

    posted_at = models.DateTimeField(
        default=timezone.now,
        help_text="Accounting effective date",
    )

    reverses = models.OneToOneField(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reversed_by",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="journal_entries",
    )

    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Timestamp when the journal entry was created",
    )

    class Meta:
        ordering = ["posted_at", "created_at"]
        indexes = [
            models.Index(fields=["posted_at"], name="journal_posted_idx"),
            models.Index(fields=["created_at"], name="journal_created_idx"),
            models.Index(fields=["reference_type", "reference_id"], name="journal_reference_idx"),
        ]
        verbose_name = "Journal Entry"
        verbose_name_plural = "Journal Entries"

    def __str__(self):
        return f"JournalEntry {self.reference_type}:{self.reference_id} – {self.posted_at.date()}"

    def clean(self):
        self.description = (self.description or "").strip()
        if not self.description:
            raise ValidationError("Journal entry description is required")

        self.reference_type = (self.reference_type or "").strip()
        self.reference_id = (self.reference_id or "").strip()
        if not self.reference_type or not self.reference_id:
            raise ValidationError("Journal entry reference is required")

        if self.posted_at and timezone.is_naive(self.posted_at):
            self.posted_at = timezone.make_aware(self.posted_at, timezone.get_current_timezone())

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("JournalEntry records are immutable once created")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("JournalEntry records are immutable and cannot be deleted")
