"""Issuer profile (Emisor) of the invoicing business.

Unlike customers, the issuer is not snapshotted into invoices: documents are
rendered with whatever profile is stored at render time.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional


SUPPLIER_NAMES: Dict[str, str] = {
    "ruby_rose": "Ruby Rose",
    "trendy": "Trendy",
}

LEGACY_ISSUER_NAME = "MI EMPRESA S.A.S."


@dataclass(frozen=True, slots=True)
class IssuerProfile:
    name: str
    nit: str
    address: str
    phone: str
    email: str
    resolution: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "nit": self.nit,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "resolution": self.resolution,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IssuerProfile":
        defaults = DEFAULT_ISSUER.to_dict()
        defaults.update({k: v for k, v in data.items() if k in defaults})
        return cls(**defaults)


DEFAULT_ISSUER = IssuerProfile(
    name="Ruby Rose & Trendy",
    nit="900.000.001-0",
    address="Oficina Principal",
    phone="300-000-0000",
    email="facturacion@rubyrosetrendy.com",
    resolution="Res. XXXXXX · Rango: 0001 – 1000 · Vigencia: 2024 – 2026",
)


def resolve_issuer(profile: IssuerProfile, supplier: Optional[str]) -> IssuerProfile:
    """Return the profile to print, with the supplier brand as display name."""

    if supplier in SUPPLIER_NAMES:
        return replace(profile, name=SUPPLIER_NAMES[supplier])
    return profile


def migrate_legacy_issuer(profile: IssuerProfile) -> Optional[IssuerProfile]:
    """Replace the placeholder issuer shipped by early versions, if still stored."""

    if profile.name != LEGACY_ISSUER_NAME:
        return None
    return replace(
        profile,
        name=DEFAULT_ISSUER.name,
        email=DEFAULT_ISSUER.email,
        address=DEFAULT_ISSUER.address,
    )
