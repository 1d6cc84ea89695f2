# invoicing/api/viewsets.py

"""
INVOICE API (THIN)

Views translate HTTP <-> service calls and nothing else:
- Input shape is checked by serializers
- Every business rule lives in invoicing.services.invoice_lifecycle
- Engine errors are mapped to HTTP by invoicing.api.exception_handler
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from invoicing.api.serializers import (
    CancelInvoiceSerializer,
    InvoiceCreateSerializer,
    InvoiceSerializer,
    InvoiceUpdateSerializer,
    LedgerEntrySerializer,
    MarkPaidSerializer,
    MarkPartiallyPaidSerializer,
    StockMovementSerializer,
)
from invoicing.models import Invoice
from invoicing.services import invoice_lifecycle as lifecycle


def _actor(request):
    user = getattr(request, "user", None)
    return user if user is not None and user.is_authenticated else None


@extend_schema(tags=["invoicing"])
class InvoiceViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    /api/invoicing/invoices/

    list / retrieve / create / partial_update / destroy
    + confirm, cancel, mark-paid, mark-partially-paid
    + stock-movements, ledger-entries (reads)
    """

    queryset = (
        Invoice.objects.select_related("customer", "supplier")
        .prefetch_related("items", "items__item")
        .order_by("-created_at")
    )
    serializer_class = InvoiceSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = super().get_queryset()
        params = self.request.query_params

        for field in ("direction", "status", "payment_status"):
            value = (params.get(field) or "").strip().lower()
            if value:
                qs = qs.filter(**{field: value})

        return qs

    def _respond(self, invoice, http_status=status.HTTP_200_OK):
        invoice = self.queryset.all().get(pk=invoice.pk)
        return Response(InvoiceSerializer(invoice).data, status=http_status)

    @extend_schema(
        parameters=[
            OpenApiParameter("direction", str, required=False),
            OpenApiParameter("status", str, required=False),
            OpenApiParameter("payment_status", str, required=False),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(request=InvoiceCreateSerializer, responses={201: InvoiceSerializer})
    def create(self, request):
        s = InvoiceCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        invoice = lifecycle.create_invoice(user=_actor(request), **s.validated_data)
        return self._respond(invoice, status.HTTP_201_CREATED)

    @extend_schema(request=InvoiceUpdateSerializer, responses={200: InvoiceSerializer})
    def partial_update(self, request, pk=None):
        s = InvoiceUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        invoice = lifecycle.update_invoice(invoice_id=pk, user=_actor(request), **s.validated_data)
        return self._respond(invoice)

    @extend_schema(responses={204: None})
    def destroy(self, request, pk=None):
        lifecycle.delete_invoice(invoice_id=pk, user=_actor(request))
        return Response(status=status.HTTP_204_NO_CONTENT)

    # --------------------------------------------------
    # TRANSITIONS
    # --------------------------------------------------

    @extend_schema(request=None, responses={200: InvoiceSerializer})
    @action(detail=True, methods=["post"], url_path="confirm")
    def confirm(self, request, pk=None):
        invoice = lifecycle.confirm_invoice(invoice_id=pk, user=_actor(request))
        return self._respond(invoice)

    @extend_schema(request=CancelInvoiceSerializer, responses={200: InvoiceSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        s = CancelInvoiceSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        invoice = lifecycle.cancel_invoice(
            invoice_id=pk,
            reason=s.validated_data.get("reason", ""),
            user=_actor(request),
        )
        return self._respond(invoice)

    @extend_schema(request=MarkPaidSerializer, responses={200: InvoiceSerializer})
    @action(detail=True, methods=["post"], url_path="mark-paid")
    def mark_paid(self, request, pk=None):
        s = MarkPaidSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        invoice = lifecycle.mark_paid(invoice_id=pk, user=_actor(request), **s.validated_data)
        return self._respond(invoice)

    @extend_schema(request=MarkPartiallyPaidSerializer, responses={200: InvoiceSerializer})
    @action(detail=True, methods=["post"], url_path="mark-partially-paid")
    def mark_partially_paid(self, request, pk=None):
        s = MarkPartiallyPaidSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        invoice = lifecycle.mark_partially_paid(invoice_id=pk, user=_actor(request), **s.validated_data)
        return self._respond(invoice)

    # --------------------------------------------------
    # READS
    # --------------------------------------------------

    @extend_schema(responses={200: StockMovementSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="stock-movements")
    def stock_movements(self, request, pk=None):
        movements = lifecycle.get_stock_movements_for_invoice(invoice_id=pk)
        return Response(StockMovementSerializer(movements, many=True).data)

    @extend_schema(responses={200: LedgerEntrySerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="ledger-entries")
    def ledger_entries(self, request, pk=None):
        entries = lifecycle.get_ledger_entries_for_invoice(invoice_id=pk)
        return Response(LedgerEntrySerializer(entries, many=True).data)

    def get_object(self):
        # Engine lookup keeps 404 bodies in the same {"code", "detail"} shape
        invoice = lifecycle.get_invoice(self.kwargs.get(self.lookup_field))
        self.check_object_permissions(self.request, invoice)
        return invoice
