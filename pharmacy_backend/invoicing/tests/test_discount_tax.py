# invoicing/tests/test_discount_tax.py

from decimal import Decimal
from itertools import product
from types import SimpleNamespace

from django.test import SimpleTestCase, TestCase

from accounting.models import Account
from common.exceptions import (
    ClaimAccountInactive,
    ClaimAccountInvalid,
    ClaimAccountNotFound,
    InvalidDiscount,
    InvalidLineItem,
)
from invoicing.services.discount_engine import apply_sequential_discounts
from invoicing.services.tax_engine import calculate_tax, calculate_withholding
from invoicing.tests.helpers import make_account, make_claim_account


class SequentialDiscountTests(TestCase):
    """
    Two-tier discount arithmetic.

    GUARANTEES:
    - discount2 compounds on the amount left after discount1
    - discount1 + discount2 never exceed the base; final never negative
    - tier 2 needs a claim account that can receive claims
    """

    def setUp(self):
        self.claim = make_claim_account()

    def test_claim_backed_second_tier_compounds(self):
        result = apply_sequential_discounts(
            Decimal("1000"),
            discount1_percent=Decimal("10"),
            discount2_percent=Decimal("5"),
            claim_account_id=self.claim.pk,
        )

        self.assertEqual(result.discount1_amount, Decimal("100.00"))
        self.assertEqual(result.discount2_amount, Decimal("45.00"))
        self.assertEqual(result.final_amount, Decimal("855.00"))
        self.assertEqual(result.total_discount, Decimal("145.00"))
        self.assertEqual(result.claim_account, self.claim)

    def test_no_percentages_means_no_discount(self):
        result = apply_sequential_discounts(Decimal("250.50"))

        self.assertEqual(result.discount1_amount, Decimal("0.00"))
        self.assertEqual(result.discount2_amount, Decimal("0.00"))
        self.assertEqual(result.final_amount, Decimal("250.50"))
        self.assertIsNone(result.claim_account)

    def test_claim_account_not_resolved_without_second_tier(self):
        inactive = make_claim_account(code="5901", is_active=False)

        result = apply_sequential_discounts(
            Decimal("100"),
            discount1_percent=Decimal("10"),
            claim_account_id=inactive.pk,
        )

        self.assertIsNone(result.claim_account)
        self.assertEqual(result.final_amount, Decimal("90.00"))

    def test_discounts_bounded_by_base(self):
        bases = [Decimal("0"), Decimal("0.01"), Decimal("99.99"), Decimal("1000"), Decimal("12345.67")]
        percents = [Decimal("0"), Decimal("0.5"), Decimal("12.5"), Decimal("50"), Decimal("100")]

        for base, p1, p2 in product(bases, percents, percents):
            result = apply_sequential_discounts(
                base,
                discount1_percent=p1,
                discount2_percent=p2,
                claim_account_id=self.claim.pk,
            )
            self.assertLessEqual(result.discount1_amount + result.discount2_amount, base)
            self.assertGreaterEqual(result.final_amount, Decimal("0.00"))

    def test_second_tier_is_smaller_than_flat_percentage_when_first_tier_applies(self):
        for p1, p2 in [(Decimal("10"), Decimal("5")), (Decimal("25"), Decimal("20")), (Decimal("1"), Decimal("50"))]:
            base = Decimal("1000")
            result = apply_sequential_discounts(
                base,
                discount1_percent=p1,
                discount2_percent=p2,
                claim_account_id=self.claim.pk,
            )
            self.assertEqual(
                result.discount2_amount,
                ((base - result.discount1_amount) * p2 / 100).quantize(Decimal("0.01")),
            )
            self.assertLess(result.discount2_amount, base * p2 / 100)

    def test_percent_out_of_range_rejected(self):
        with self.assertRaises(InvalidDiscount):
            apply_sequential_discounts(Decimal("100"), discount1_percent=Decimal("100.01"))

        with self.assertRaises(InvalidDiscount):
            apply_sequential_discounts(Decimal("100"), discount1_percent=Decimal("-1"))

        with self.assertRaises(InvalidDiscount):
            apply_sequential_discounts(
                Decimal("100"),
                discount2_percent="abc",
                claim_account_id=self.claim.pk,
            )

    def test_negative_base_rejected(self):
        with self.assertRaises(InvalidLineItem):
            apply_sequential_discounts(Decimal("-1"))

    def test_second_tier_without_claim_account_rejected(self):
        with self.assertRaises(ClaimAccountInvalid):
            apply_sequential_discounts(Decimal("100"), discount2_percent=Decimal("5"))

    def test_unknown_claim_account_is_not_found(self):
        with self.assertRaises(ClaimAccountNotFound):
            apply_sequential_discounts(
                Decimal("100"),
                discount2_percent=Decimal("5"),
                claim_account_id="00000000-0000-0000-0000-000000000000",
            )

    def test_inactive_claim_account_rejected(self):
        inactive = make_claim_account(code="5901", is_active=False)

        with self.assertRaises(ClaimAccountInactive):
            apply_sequential_discounts(
                Decimal("100"),
                discount2_percent=Decimal("5"),
                claim_account_id=inactive.pk,
            )

    def test_revenue_account_cannot_receive_claims(self):
        revenue = make_account("4000", Account.REVENUE)

        with self.assertRaises(ClaimAccountInvalid):
            apply_sequential_discounts(
                Decimal("100"),
                discount2_percent=Decimal("5"),
                claim_account_id=revenue.pk,
            )


class TaxEngineTests(SimpleTestCase):
    """
    GUARANTEES:
    - GST and WHT are percentages of the post-discount amount (2dp)
    - Missing or zero rates give zero, never an error
    """

    def test_gst_on_taxable_amount(self):
        item = SimpleNamespace(gst_rate=Decimal("17.00"), wht_rate=Decimal("0"))
        self.assertEqual(calculate_tax(item=item, taxable_amount=Decimal("855.00")), Decimal("145.35"))

    def test_withholding_on_taxable_amount(self):
        item = SimpleNamespace(gst_rate=Decimal("0"), wht_rate=Decimal("4.5"))
        self.assertEqual(
            calculate_withholding(item=item, taxable_amount=Decimal("200.00")),
            Decimal("9.00"),
        )

    def test_missing_rates_yield_zero(self):
        item = SimpleNamespace()
        self.assertEqual(calculate_tax(item=item, taxable_amount=Decimal("100")), Decimal("0.00"))
        self.assertEqual(
            calculate_withholding(item=item, taxable_amount=Decimal("100")),
            Decimal("0.00"),
        )

    def test_half_up_rounding(self):
        item = SimpleNamespace(gst_rate=Decimal("5"), wht_rate=None)
        # 0.05 x 10.10 = 0.505 -> 0.51
        self.assertEqual(calculate_tax(item=item, taxable_amount=Decimal("10.10")), Decimal("0.51"))
