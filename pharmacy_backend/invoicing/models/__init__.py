from .invoice import Invoice
from .invoice_item import InvoiceItem
from .sequence import InvoiceSequence

__all__ = [
    "Invoice",
    "InvoiceItem",
    "InvoiceSequence",
]
