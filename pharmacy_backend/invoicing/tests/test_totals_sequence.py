# invoicing/tests/test_totals_sequence.py

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase, TestCase

from invoicing.models import InvoiceSequence
from invoicing.services.sequence import next_number
from invoicing.services.totals import aggregate_totals


def _processed(subtotal, d1, d2, tax, wht="0"):
    subtotal, d1, d2, tax = (Decimal(v) for v in (subtotal, d1, d2, tax))
    taxable = subtotal - d1 - d2
    return SimpleNamespace(
        line_subtotal=subtotal,
        discount1_amount=d1,
        discount2_amount=d2,
        taxable_amount=taxable,
        tax_amount=tax,
        withholding_amount=Decimal(wht),
        line_total=taxable + tax,
    )


class AggregateTotalsTests(SimpleTestCase):
    """
    GUARANTEES:
    - header totals are sums of line components
    - grand_total = subtotal - total_discount + tax_total = sum(line_total)
    - withholding is summed but not part of grand_total
    """

    def test_sums_line_components(self):
        lines = [
            _processed("1000.00", "100.00", "45.00", "145.35", "8.55"),
            _processed("200.00", "0.00", "0.00", "0.00"),
            _processed("59.97", "6.00", "2.70", "8.79", "0.51"),
        ]

        totals = aggregate_totals(lines)

        self.assertEqual(totals.subtotal, Decimal("1259.97"))
        self.assertEqual(totals.discount1_total, Decimal("106.00"))
        self.assertEqual(totals.discount2_total, Decimal("47.70"))
        self.assertEqual(totals.total_discount, Decimal("153.70"))
        self.assertEqual(totals.taxable_amount, Decimal("1106.27"))
        self.assertEqual(totals.tax_total, Decimal("154.14"))
        self.assertEqual(totals.withholding_total, Decimal("9.06"))
        self.assertEqual(totals.grand_total, Decimal("1260.41"))
        self.assertEqual(totals.grand_total, sum(line.line_total for line in lines))

    def test_empty_is_all_zero(self):
        totals = aggregate_totals([])

        for value in totals.as_model_fields().values():
            self.assertEqual(value, Decimal("0.00"))

    def test_model_fields_cover_header_columns(self):
        fields = aggregate_totals([_processed("10", "1", "0", "0")]).as_model_fields()

        self.assertEqual(
            set(fields),
            {
                "subtotal",
                "discount1_total",
                "discount2_total",
                "total_discount",
                "taxable_amount",
                "tax_total",
                "withholding_total",
                "grand_total",
            },
        )


class SequenceTests(TestCase):
    """
    GUARANTEES:
    - numbers are <series><year><6 digits>, strictly increasing per series/year
    - series and years count independently
    """

    def test_numbers_increase_within_series(self):
        on = date(2026, 3, 1)

        self.assertEqual(next_number(series="SI", on_date=on), "SI2026000001")
        self.assertEqual(next_number(series="SI", on_date=on), "SI2026000002")
        self.assertEqual(next_number(series="si", on_date=on), "SI2026000003")

    def test_series_and_years_are_independent(self):
        self.assertEqual(next_number(series="SI", on_date=date(2026, 1, 1)), "SI2026000001")
        self.assertEqual(next_number(series="PI", on_date=date(2026, 1, 1)), "PI2026000001")
        self.assertEqual(next_number(series="SI", on_date=date(2027, 1, 1)), "SI2027000001")

        self.assertEqual(InvoiceSequence.objects.count(), 3)

    def test_series_required(self):
        with self.assertRaises(ValueError):
            next_number(series="  ")
