"""Tamper-evidence code and fiscal QR matrix printed on invoices."""

from __future__ import annotations

import hashlib
from typing import Any, Tuple

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from ..engine.formatting import parse_date, round2

QRMatrix = Tuple[Tuple[bool, ...], ...]


def verification_code(tax_id: Any, reference: Any, issue_date: Any, total: Any) -> str:
    """

    Short verification code: "VF-" plus 8 hex chars of SHA-256.

    The hashed string concatenates the issuer tax id, the document reference,
    the issue date as YYYYMMDD and the total in cents.

    """
    parsed = parse_date(issue_date)
    date_part = parsed.strftime("%Y%m%d") if parsed else ""
    amount_part = f"{round2(total):.2f}".replace(".", "")
    base = f"{tax_id or ''}{reference or ''}{date_part}{amount_part}"
    digest = hashlib.sha256(base.encode("utf-8")).hexdigest()
    return f"VF-{digest[:8].upper()}"


def fiscal_qr_payload(reference: Any, issuer_name: str, total: Any, currency_symbol: str) -> str:
    return f"Invoice {reference} - {issuer_name} - {round2(total):.2f}{currency_symbol}"


def qr_matrix(payload: str) -> QRMatrix:
    """Module matrix of a QR code for payload, True for dark modules."""
    qr = qrcode.QRCode(version=None, error_correction=ERROR_CORRECT_M, border=0)
    qr.add_data(payload)
    qr.make(fit=True)
    return tuple(tuple(bool(cell) for cell in row) for row in qr.get_matrix())
