# invoicing/models/sequence.py

from django.db import models


class InvoiceSequence(models.Model):
    """
    Counter behind human-readable invoice numbers.

    One row per (series, year); incremented under a row lock.
    """

    series = models.CharField(max_length=8)
    year = models.PositiveIntegerField()
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["series", "year"],
                name="uniq_invoice_sequence_series_year",
            ),
        ]

    def __str__(self):
        return f"{self.series}{self.year}: {self.last_value}"
