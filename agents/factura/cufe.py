"""Simulated CUFE (Código Único de Factura Electrónica).

The value only looks like a real CUFE: a SHA-256 hex digest is doubled and
cut to 96 characters, the length of a SHA-384 digest. It carries no integrity
guarantee and must not be "upgraded", since issued invoices store codes
produced by exactly this construction.
"""

from __future__ import annotations

from hashlib import sha256

CUFE_TAG = "SIMULADO"
CUFE_LENGTH = 96


def derive_code(invoice_number: str, tax_id: str, total: str, timestamp: str) -> str:
    data = "|".join((invoice_number, tax_id, total, timestamp, CUFE_TAG))
    digest = sha256(data.encode("utf-8")).hexdigest()
    return (digest + digest)[:CUFE_LENGTH]
