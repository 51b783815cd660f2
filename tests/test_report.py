#!/usr/bin/env python3
"""
Unit tests for the settlement report and formatting helpers
"""
import json
from decimal import Decimal

from bill_splitter import compute_settlement
from data_models import ChargeConfig, LineItem, Receipt
from report import breakdown_dataframe, export_to_dict, generate_summary_text
from utils import format_currency, try_parse_decimal, validate_menu_choice


def scenario_receipt():
    return Receipt(
        id="receipt-1",
        items=[
            LineItem(id="1", name="Chicken Rice", price=Decimal("10.00"), assigned_to=["Alice", "Bob"]),
            LineItem(id="2", name="Water", price=Decimal("2.00"), assigned_to=["Alice"]),
        ],
        payer="Alice",
    )


class TestSummaryText:
    """Test the human-readable summary"""

    def test_transfers_payments_and_breakdown(self):
        result = compute_settlement(["Alice", "Bob"], [scenario_receipt()])
        summary = generate_summary_text(result)

        assert "- Bob → Alice: $5.00" in summary
        assert "Alice paid $12.00 for receipt 1" in summary
        assert "Alice: 50% Chicken Rice ($5.00), Water ($2.00) = $7.00" in summary
        assert "Bob: 50% Chicken Rice ($5.00) = $5.00" in summary

    def test_charges_line_and_all_settled(self):
        receipt = Receipt(
            id="receipt-1",
            items=[LineItem(id="1", name="Set Meal", price=Decimal("100.00"), assigned_to=["Alice"])],
            payer="Alice",
            service_charge=ChargeConfig(enabled=True, percent=Decimal("10")),
            gst=ChargeConfig(enabled=True, percent=Decimal("9")),
        )
        summary = generate_summary_text(compute_settlement(["Alice"], [receipt]))

        assert "Everyone is settled up" in summary
        assert "Alice: Set Meal ($100.00), SC+GST ($19.90) = $119.90" in summary

    def test_half_cent_rounds_up_everywhere(self):
        receipt = Receipt(
            id="receipt-1",
            items=[LineItem(id="1", name="Kopi", price=Decimal("4.25"), assigned_to=["Alice", "Bob"])],
            payer="Alice",
        )
        result = compute_settlement(["Alice", "Bob"], [receipt])
        summary = generate_summary_text(result)
        data = export_to_dict(["Alice", "Bob"], [receipt], result)

        assert "- Bob → Alice: $2.13" in summary
        assert "Bob: 50% Kopi ($2.13) = $2.13" in summary
        assert data["settlement"]["transfers"][0]["amount"] == 2.13
        assert list(breakdown_dataframe(result)["total"]) == [2.13, 2.13]

    def test_eight_way_share_percentage(self):
        people = [f"P{n}" for n in range(8)]
        receipt = Receipt(
            id="receipt-1",
            items=[LineItem(id="1", name="Pizza", price=Decimal("16.00"), assigned_to=list(people))],
            payer="P0",
        )
        summary = generate_summary_text(compute_settlement(people, [receipt]))

        assert "P7: 13% Pizza ($2.00) = $2.00" in summary

    def test_people_without_items_are_listed(self):
        receipt = scenario_receipt()
        receipt.items[0].assigned_to = ["Alice"]
        summary = generate_summary_text(compute_settlement(["Alice", "Bob"], [receipt]))

        assert "Bob: no items = $0.00" in summary

    def test_multiple_receipts_are_numbered(self):
        second = Receipt(
            id="receipt-2",
            items=[LineItem(id="3", name="Ice Kacang", price=Decimal("4.00"), assigned_to=["Bob"])],
            payer="Bob",
        )
        summary = generate_summary_text(compute_settlement(["Alice", "Bob"], [scenario_receipt(), second]))

        assert "Receipt 1:" in summary
        assert "Receipt 2:" in summary
        assert "Bob paid $4.00 for receipt 2" in summary


class TestExports:
    """Test tabular and JSON exports"""

    def test_breakdown_dataframe(self):
        frame = breakdown_dataframe(compute_settlement(["Alice", "Bob"], [scenario_receipt()]))

        assert list(frame['person']) == ["Alice", "Bob"]
        assert list(frame['total']) == [7.0, 5.0]
        assert list(frame['paid']) == [12.0, 0.0]

    def test_export_to_dict_is_json_serializable(self):
        receipt = scenario_receipt()
        result = compute_settlement(["Alice", "Bob"], [receipt])
        data = export_to_dict(["Alice", "Bob"], [receipt], result)

        json.dumps(data)
        assert data['receipts'][0]['total'] == 12.0
        assert data['settlement']['net_positions'] == {"Alice": 5.0, "Bob": -5.0}
        assert data['settlement']['transfers'][0]['instruction'] == "Bob pays Alice $5.00"


class TestUtils:
    """Test formatting and parsing helpers"""

    def test_format_currency(self):
        assert format_currency(Decimal("5")) == "$5.00"
        assert format_currency(7.125, symbol="S$") == "S$7.13"
        assert format_currency("x") == "$0.00"

    def test_try_parse_decimal(self):
        assert try_parse_decimal("$12.50") == Decimal("12.50")
        assert try_parse_decimal("3,20") == Decimal("3.20")
        assert try_parse_decimal("abc") is None
        assert try_parse_decimal("nan") is None

    def test_validate_menu_choice(self):
        assert validate_menu_choice(" 2 ", ['1', '2']) == '2'
        assert validate_menu_choice("9", ['1', '2']) is None
