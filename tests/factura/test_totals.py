"""Tests for rounding, line totals and invoice aggregation."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Tuple

import pytest

from agents.factura.dto import js_number_string, round2, to_decimal
from agents.factura.totals import LineTotals, aggregate, compute_line


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("0.005", "0.01"),
        ("0.015", "0.02"),
        ("2.675", "2.68"),
        ("-0.005", "-0.01"),
        ("1.234", "1.23"),
        ("44030", "44030.00"),
    ],
)
def test_round2_half_away_from_zero(raw: str, expected: str) -> None:
    assert round2(raw) == Decimal(expected)


@pytest.mark.parametrize("raw", ["0.005", "1.999", "123.4567", "-8.125", "0"])
def test_round2_is_idempotent_and_two_places(raw: str) -> None:
    once = round2(raw)

    assert round2(once) == once
    assert once.as_tuple().exponent == -2


def test_to_decimal_goes_through_str_for_floats() -> None:
    assert to_decimal(0.1) == Decimal("0.1")
    with pytest.raises(TypeError):
        to_decimal(True)


@dataclass
class LineScenario:
    quantity: str
    unit_price: str
    expected: Tuple[str, str, str]


LINE_SCENARIOS: List[LineScenario] = [
    LineScenario("2", "14000", ("28000.00", "5320.00", "33320.00")),
    LineScenario("1", "9000", ("9000.00", "1710.00", "10710.00")),
    LineScenario("3", "0.35", ("1.05", "0.20", "1.25")),
    LineScenario("1.5", "4900", ("7350.00", "1396.50", "8746.50")),
    LineScenario("1", "0", ("0.00", "0.00", "0.00")),
]


@pytest.mark.parametrize("scenario", LINE_SCENARIOS, ids=lambda s: f"{s.quantity}x{s.unit_price}")
def test_compute_line(scenario: LineScenario) -> None:
    # Act
    line = compute_line(scenario.quantity, scenario.unit_price, "0.19")

    # Assert
    assert (line.subtotal, line.vat, line.total) == tuple(Decimal(v) for v in scenario.expected)
    assert line.total == round2(line.subtotal + line.vat)


def test_vat_is_computed_on_rounded_subtotal() -> None:
    # 0.025 -> 0.03; 0.03 * 0.19 = 0.0057 -> 0.01, whereas 0.025 * 0.19 -> 0.00
    line = compute_line("1", "0.025", "0.19")

    assert line.subtotal == Decimal("0.03")
    assert line.vat == Decimal("0.01")
    assert line.total == Decimal("0.04")


def test_aggregate_two_line_invoice() -> None:
    # Arrange
    lines = [compute_line(2, 14000), compute_line(1, 9000)]

    # Act
    totals = aggregate(lines)

    # Assert
    assert totals.subtotal == Decimal("37000.00")
    assert totals.vat_total == Decimal("7030.00")
    assert totals.total == Decimal("44030.00")
    assert js_number_string(totals.total) == "44030"


def test_aggregate_total_equals_rounded_sum_of_line_totals() -> None:
    lines = [compute_line(q, p) for q, p in [("1", "0.07"), ("3", "0.35"), ("7", "13.33")]]

    totals = aggregate(lines)

    assert totals.total == round2(sum(line.total for line in lines))
    assert totals.subtotal == round2(sum(line.subtotal for line in lines))


def test_aggregate_empty_sequence_is_zero() -> None:
    totals = aggregate([])

    assert (totals.subtotal, totals.vat_total, totals.total) == (Decimal("0.00"),) * 3


def test_aggregate_accepts_line_totals_dataclass() -> None:
    totals = aggregate([LineTotals(Decimal("1.00"), Decimal("0.19"), Decimal("1.19"))])

    assert totals.total == Decimal("1.19")
