"""Document data models."""

from .document import DocumentHeader, DocumentModel, LineItem, Party, Totals
from .verification import fiscal_qr_payload, qr_matrix, verification_code

__all__ = [
    "DocumentHeader",
    "DocumentModel",
    "LineItem",
    "Party",
    "Totals",
    "fiscal_qr_payload",
    "qr_matrix",
    "verification_code",
]
