"""Sample catalogue (Ruby Rose & Trendy kardex) and sample customer."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional


@dataclass(frozen=True)
class ProductSeed:
    name: str
    sku: Optional[str]
    price_sale: Decimal
    unit: str = "UND"


SAMPLE_CUSTOMER: Dict[str, str] = {
    "company_name": "VelvetGlow",
    "nit": "894577890-4",
    "email": "VelvetGlow@gmail.com",
    "phone": "3155542255",
    "address": "Cra. 35 #52-116, Cabecera del llano",
    "website": "VelvetGlow",
    "legal_representative": "",
    "economic_activity": "",
}


def _seed(name: str, sku: str, price: str) -> ProductSeed:
    return ProductSeed(name=name, sku=sku, price_sale=Decimal(price))


# Prices in COP
SEED_PRODUCTS: List[ProductSeed] = [
    # Ruby Rose
    _seed("POLVO SUELTO MELU", "MEL-120", "14000"),
    _seed("POLVO COMPACTO MELU", "MEL-121", "4900"),
    _seed("ILUMINADOR MARMOLADO MELU", "MEL-122", "14100"),
    _seed("BASE LIQUIDA MELU", "MEL-123", "13900"),
    _seed("BALSAMO LABIAL MELU", "MEL-124", "7000"),
    _seed("GEL DE LIMPIEZA FACIAL RUBY SKIN", "MEL-125", "15900"),
    _seed("CREMA HIDRATANTE FACIAL RUBY SKIN", "MEL-126", "15000"),
    # Trendy
    _seed("CREMA FACIAL REPARADORA NOCTURNA TRENDY", "CAM-2205", "13000"),
    _seed("BASE TRULY MATE L.A COLORS", "CAM-2206", "15000"),
    _seed("BASE MOUSE TRENDY", "CAM-2207", "9000"),
    _seed("CORRECTOR REBEL GIRL TRENDY", "CAM-2208", "10000"),
    _seed("RUBOR EN CREMA STAR", "CAM-2209", "8600"),
    _seed("POLVO DE HADAS TRENDY", "CAM-2210", "9500"),
    _seed("RUBOR LIQUIDO DUO SAFARI", "CAM-2211", "20000"),
    _seed("CONTORNO EN CREMA STAR", "CAM-2212", "13000"),
    _seed("FIJADOR DREAMS 60ML", "CAM-2213", "14500"),
    _seed("LABIAL VELVET DUO", "CAM-2214", "16000"),
    _seed("KIT X5 GARDEN GLOSS", "CAM-2215", "19000"),
    _seed("KIT DE CEJAS BAKERY TRENDY", "CAM-2216", "15000"),
    _seed("DELINEADOR EN PLUMON TRENDY", "CAM-2217", "6000"),
    _seed("PESTAÑINA CAT TRENDY", "CAM-2218", "11000"),
]


def iter_seed_products() -> List[ProductSeed]:
    return list(SEED_PRODUCTS)
