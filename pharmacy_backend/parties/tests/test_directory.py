# parties/tests/test_directory.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from common.exceptions import CounterpartyNotFound
from parties.models import Customer, Supplier
from parties.services.directory import get_counterparty, get_customer, get_supplier


class CounterpartyDirectoryTests(TestCase):
    def setUp(self):
        self.customer = Customer.objects.create(code=" C-001 ", name=" Shifa Clinic ")
        self.supplier = Supplier.objects.create(code="S-001", name="Getz Pharma", payment_terms_days=45)

    def test_lookup_by_role(self):
        self.assertEqual(get_customer(self.customer.pk), self.customer)
        self.assertEqual(get_supplier(self.supplier.pk), self.supplier)
        self.assertEqual(self.customer.code, "C-001")

    def test_roles_do_not_cross(self):
        with self.assertRaises(CounterpartyNotFound):
            get_customer(self.supplier.pk)

    def test_malformed_and_missing_ids(self):
        for bad in (None, "", "not-a-uuid"):
            with self.subTest(counterparty_id=bad):
                with self.assertRaises(CounterpartyNotFound):
                    get_counterparty(role="customer", counterparty_id=bad)

    def test_inactive_counterparties_are_returned(self):
        self.customer.is_active = False
        self.customer.save()

        self.assertFalse(get_customer(self.customer.pk).is_active)

    def test_unknown_role(self):
        with self.assertRaises(ValueError):
            get_counterparty(role="agent", counterparty_id=self.customer.pk)

    def test_negative_credit_limit_rejected(self):
        with self.assertRaises(ValidationError):
            Customer.objects.create(code="C-NEG", name="Neg", credit_limit=Decimal("-1"))
