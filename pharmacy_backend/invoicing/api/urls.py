# invoicing/api/urls.py

"""
INVOICING API URLS

    /api/invoicing/invoices/
    /api/invoicing/invoices/<uuid>/
    /api/invoicing/invoices/<uuid>/confirm/
    /api/invoicing/invoices/<uuid>/cancel/
    /api/invoicing/invoices/<uuid>/mark-paid/
    /api/invoicing/invoices/<uuid>/mark-partially-paid/
    /api/invoicing/invoices/<uuid>/stock-movements/
    /api/invoicing/invoices/<uuid>/ledger-entries/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from invoicing.api.viewsets import InvoiceViewSet

router = DefaultRouter()
router.register(r"invoices", InvoiceViewSet, basename="invoice")

urlpatterns = [
    path("", include(router.urls)),
]
