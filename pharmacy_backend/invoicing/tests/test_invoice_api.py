# invoicing/tests/test_invoice_api.py

from unittest import mock

from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from common.exceptions import ConsistencyError
from invoicing.models import Invoice
from invoicing.tests.helpers import (
    line,
    make_claim_account,
    make_customer,
    make_item,
    make_user,
    seed_posting_accounts,
)

MISSING_ID = "00000000-0000-0000-0000-000000000000"


class InvoiceApiTests(APITestCase):
    """
    GUARANTEES:
    - endpoints require authentication
    - engine error kinds map to HTTP: validation 400, not found 404,
      state conflict 409, resource 422, consistency 503
    - error bodies are {"code", "detail", "details"}
    """

    def setUp(self):
        seed_posting_accounts()
        self.user = make_user()
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

        self.customer = make_customer()
        self.item = make_item("PCM-500", stock=100)

    def url(self, invoice_id=None, action=None):
        if invoice_id is None:
            return "/api/invoicing/invoices/"
        if action is None:
            return f"/api/invoicing/invoices/{invoice_id}/"
        return f"/api/invoicing/invoices/{invoice_id}/{action}/"

    def create(self, quantity=30, **payload):
        body = {
            "direction": "sale",
            "counterparty_id": str(self.customer.pk),
            "lines": [line(self.item, quantity, "100.00")],
        }
        body.update(payload)
        return self.client.post(self.url(), body, format="json")

    def create_confirmed(self, quantity=30):
        invoice_id = self.create(quantity).data["id"]
        res = self.client.post(self.url(invoice_id, "confirm"), format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        return invoice_id

    def assertEngineError(self, res, http_status, code):
        self.assertEqual(res.status_code, http_status, res.data)
        self.assertEqual(res.data["code"], code)
        self.assertIn("detail", res.data)
        self.assertIn("details", res.data)

    def test_requires_authentication(self):
        anonymous = APIClient()
        res = anonymous.get(self.url())
        self.assertIn(res.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_create_returns_draft_with_lines(self):
        claim = make_claim_account()
        res = self.create(
            lines=[
                line(
                    self.item,
                    10,
                    "100.00",
                    discount1_percent="10.00",
                    discount2_percent="5.00",
                    claim_account_id=str(claim.pk),
                )
            ],
            notes="Counter sale",
        )

        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertEqual(res.data["status"], "draft")
        self.assertEqual(res.data["payment_status"], "pending")
        self.assertEqual(res.data["counterparty_id"], str(self.customer.pk))
        self.assertEqual(res.data["grand_total"], "855.00")
        self.assertEqual(res.data["balance_due"], "855.00")
        self.assertEqual(len(res.data["items"]), 1)
        self.assertEqual(res.data["items"][0]["discount2_amount"], "45.00")
        self.assertEqual(res.data["items"][0]["sku"], "PCM-500")

    def test_malformed_payload_uses_default_error_shape(self):
        res = self.client.post(self.url(), {"counterparty_id": "nope"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("direction", res.data)

    def test_business_validation_is_400(self):
        res = self.create(quantity=0)
        self.assertEngineError(res, status.HTTP_400_BAD_REQUEST, "INVALID_LINE_ITEM")

    def test_unknown_invoice_is_404(self):
        res = self.client.get(self.url(MISSING_ID))
        self.assertEngineError(res, status.HTTP_404_NOT_FOUND, "INVOICE_NOT_FOUND")

        res = self.client.post(self.url(MISSING_ID, "confirm"), format="json")
        self.assertEngineError(res, status.HTTP_404_NOT_FOUND, "INVOICE_NOT_FOUND")

    def test_unknown_counterparty_is_404(self):
        res = self.create(counterparty_id=MISSING_ID)
        self.assertEngineError(res, status.HTTP_404_NOT_FOUND, "COUNTERPARTY_NOT_FOUND")

    def test_confirm_then_read_movements_and_ledger(self):
        invoice_id = self.create_confirmed(quantity=30)

        res = self.client.get(self.url(invoice_id))
        self.assertEqual(res.data["status"], "confirmed")
        self.assertIsNotNone(res.data["confirmed_at"])

        res = self.client.get(self.url(invoice_id, "stock-movements"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data), 1)
        self.assertEqual(res.data[0]["movement_type"], "OUT")
        self.assertEqual(res.data[0]["signed_quantity"], -30)

        res = self.client.get(self.url(invoice_id, "ledger-entries"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(sorted(e["entry_type"] for e in res.data), ["CREDIT", "DEBIT"])
        self.assertEqual({e["amount"] for e in res.data}, {"3000.00"})

        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity_on_hand, 70)

    def test_double_confirm_is_409(self):
        invoice_id = self.create_confirmed()

        res = self.client.post(self.url(invoice_id, "confirm"), format="json")
        self.assertEngineError(res, status.HTTP_409_CONFLICT, "INVALID_STATE_TRANSITION")

    def test_insufficient_stock_is_422(self):
        invoice_id = self.create(quantity=150).data["id"]

        res = self.client.post(self.url(invoice_id, "confirm"), format="json")

        self.assertEngineError(res, status.HTTP_422_UNPROCESSABLE_ENTITY, "INSUFFICIENT_STOCK")
        shortage = res.data["details"]["shortages"][0]
        self.assertEqual(shortage["requested"], 150)
        self.assertEqual(shortage["available"], 100)

    def test_consistency_failure_is_503_with_retry_hint(self):
        invoice_id = self.create().data["id"]

        with mock.patch(
            "invoicing.services.invoice_lifecycle.confirm_invoice",
            side_effect=ConsistencyError(),
        ):
            res = self.client.post(self.url(invoice_id, "confirm"), format="json")

        self.assertEngineError(res, status.HTTP_503_SERVICE_UNAVAILABLE, "CONSISTENCY_ERROR")
        self.assertEqual(res["Retry-After"], "1")

    def test_cancel_flow(self):
        invoice_id = self.create_confirmed()

        res = self.client.post(self.url(invoice_id, "cancel"), {"reason": "Wrong customer"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["status"], "cancelled")
        self.assertEqual(res.data["cancellation_reason"], "Wrong customer")

        res = self.client.post(self.url(invoice_id, "cancel"), {}, format="json")
        self.assertEngineError(res, status.HTTP_409_CONFLICT, "ALREADY_REVERSED")

        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity_on_hand, 100)

    def test_payments_and_paid_cancel_conflict(self):
        invoice_id = self.create_confirmed()

        res = self.client.post(
            self.url(invoice_id, "mark-partially-paid"),
            {"amount": "1000.00", "payment_method": "bank"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["payment_status"], "partial")
        self.assertEqual(res.data["amount_paid"], "1000.00")

        res = self.client.post(self.url(invoice_id, "mark-paid"), {}, format="json")
        self.assertEqual(res.data["payment_status"], "paid")
        self.assertEqual(res.data["balance_due"], "0.00")

        res = self.client.post(self.url(invoice_id, "cancel"), {}, format="json")
        self.assertEngineError(res, status.HTTP_409_CONFLICT, "CANNOT_CANCEL_PAID_INVOICE")

    def test_patch_and_delete_drafts_only(self):
        draft_id = self.create().data["id"]

        res = self.client.patch(self.url(draft_id), {"notes": "call first"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["notes"], "call first")

        res = self.client.delete(self.url(draft_id))
        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Invoice.objects.filter(pk=draft_id).exists())

        confirmed_id = self.create_confirmed()
        res = self.client.patch(self.url(confirmed_id), {"notes": "late"}, format="json")
        self.assertEngineError(res, status.HTTP_409_CONFLICT, "CANNOT_MODIFY_CONFIRMED_INVOICE")

        res = self.client.delete(self.url(confirmed_id))
        self.assertEngineError(res, status.HTTP_409_CONFLICT, "CANNOT_DELETE_INVOICE")

    def test_list_filters(self):
        self.create()
        self.create_confirmed()

        res = self.client.get(self.url(), {"status": "confirmed"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        rows = res.data["results"] if isinstance(res.data, dict) else res.data
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["status"], "confirmed")

        res = self.client.get(self.url(), {"direction": "purchase"})
        rows = res.data["results"] if isinstance(res.data, dict) else res.data
        self.assertEqual(rows, [])


class AccountingApiTests(APITestCase):
    """
    GUARANTEES:
    - balances and statements are derived from ledger history
    - invalid account kinds / dates are validation errors (400)
    """

    def setUp(self):
        seed_posting_accounts()
        self.client.force_authenticate(user=make_user())
        self.customer = make_customer()
        self.item = make_item("PCM-500", stock=100)

        res = self.client.post(
            "/api/invoicing/invoices/",
            {
                "direction": "sale",
                "counterparty_id": str(self.customer.pk),
                "lines": [line(self.item, 30, "100.00")],
            },
            format="json",
        )
        self.client.post(f"/api/invoicing/invoices/{res.data['id']}/confirm/", format="json")

    def test_customer_balance(self):
        res = self.client.get(f"/api/accounting/balances/customer/{self.customer.pk}/")

        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["account_kind"], "CUSTOMER")
        self.assertEqual(res.data["balance"], "3000.00")
        self.assertIsNone(res.data["as_of"])

    def test_balance_before_first_posting_is_zero(self):
        res = self.client.get(
            f"/api/accounting/balances/customer/{self.customer.pk}/",
            {"as_of": "2000-01-01"},
        )
        self.assertEqual(res.data["balance"], "0.00")

    def test_statement_running_balance(self):
        res = self.client.get(f"/api/accounting/statements/customer/{self.customer.pk}/")

        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["opening_balance"], "0.00")
        self.assertEqual(len(res.data["entries"]), 1)
        self.assertEqual(res.data["entries"][0]["balance"], "3000.00")
        self.assertEqual(res.data["closing_balance"], "3000.00")

    def test_invalid_kind_and_date(self):
        res = self.client.get(f"/api/accounting/balances/vendor/{self.customer.pk}/")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["code"], "INVALID_LEDGER_ENTRY")

        res = self.client.get(
            f"/api/accounting/balances/customer/{self.customer.pk}/",
            {"as_of": "yesterday"},
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_claim_accounts_listing(self):
        claim = make_claim_account()

        res = self.client.get("/api/accounting/claim-accounts/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([row["id"] for row in res.data], [str(claim.pk)])
        self.assertTrue(res.data[0]["can_receive_claims"])


class HealthCheckTests(APITestCase):
    def test_health_is_public(self):
        res = self.client.get("/api/health/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["db"], "ok")
