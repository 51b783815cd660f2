#!/usr/bin/env python3
"""
Unit tests for allocation, net positions and settlement
"""
from decimal import Decimal

import pytest

from bill_splitter import (
    BillSplitter,
    compute_net_positions,
    compute_receipt_breakdown,
    compute_settlement,
    net_transfers,
)
from data_models import ChargeConfig, LineItem, Receipt, Transfer
from exceptions import SettlementPreconditionError

D = Decimal
TOLERANCE = D("0.000001")


def make_receipt(receipt_id, payer, items, service_charge=None, gst=None):
    return Receipt(
        id=receipt_id,
        items=[
            LineItem(id=f"{receipt_id}-{i}", name=name, price=D(price), assigned_to=list(people))
            for i, (name, price, people) in enumerate(items)
        ],
        payer=payer,
        service_charge=service_charge or ChargeConfig(),
        gst=gst or ChargeConfig(),
    )


class TestConsumptionAggregator:
    """Test per-receipt totals and per-person shares"""

    def test_equal_split_without_charges(self):
        receipt = make_receipt("r1", "Alice", [
            ("Chicken Rice", "10.00", ["Alice", "Bob"]),
            ("Water", "2.00", ["Alice"]),
        ])
        breakdown = compute_receipt_breakdown(receipt, ["Alice", "Bob"])

        assert breakdown.total == D("12.00")
        assert breakdown.shares["Alice"].total == D("7.00")
        assert breakdown.shares["Bob"].total == D("5.00")

    def test_service_charge_applied_before_gst(self):
        receipt = make_receipt(
            "r1", "Alice", [("Set Meal", "100.00", ["Alice"])],
            service_charge=ChargeConfig(enabled=True, percent=D("10")),
            gst=ChargeConfig(enabled=True, percent=D("9")),
        )
        breakdown = compute_receipt_breakdown(receipt, ["Alice"])

        assert breakdown.subtotal == D("100.00")
        assert breakdown.service_charge_amount == D("10.00")
        assert breakdown.gst_base == D("110.00")
        assert breakdown.gst_amount == D("9.90")
        assert breakdown.total == D("119.90")

    def test_gst_only_uses_subtotal(self):
        receipt = make_receipt(
            "r1", "Alice", [("Set Meal", "100.00", ["Alice"])],
            service_charge=ChargeConfig(enabled=False, percent=D("10")),
            gst=ChargeConfig(enabled=True, percent=D("9")),
        )
        breakdown = compute_receipt_breakdown(receipt, ["Alice"])

        assert breakdown.service_charge_amount == 0
        assert breakdown.gst_base == D("100.00")
        assert breakdown.total == D("109.00")

    def test_item_shares_add_up_to_price(self):
        receipt = make_receipt("r1", "Alice", [("Pizza", "10.00", ["Alice", "Bob", "Cara"])])
        breakdown = compute_receipt_breakdown(receipt, ["Alice", "Bob", "Cara"])

        shares = [share.items[0].amount for share in breakdown.shares.values()]
        assert abs(sum(shares) - D("10.00")) < TOLERANCE
        assert breakdown.shares["Bob"].items[0].percentage == 33

    def test_person_totals_add_up_to_receipt_total(self):
        receipt = make_receipt(
            "r1", "Bob", [
                ("Pizza", "17.30", ["Alice", "Bob", "Cara"]),
                ("Beer", "9.99", ["Bob", "Cara"]),
                ("Salad", "7.45", ["Alice"]),
            ],
            service_charge=ChargeConfig(enabled=True, percent=D("10")),
            gst=ChargeConfig(enabled=True, percent=D("9")),
        )
        breakdown = compute_receipt_breakdown(receipt, ["Alice", "Bob", "Cara"])

        total_of_shares = sum(share.total for share in breakdown.shares.values())
        assert abs(total_of_shares - breakdown.total) < TOLERANCE

    def test_person_without_items_has_zero_share(self):
        receipt = make_receipt("r1", "Alice", [("Water", "2.00", ["Alice"])])
        breakdown = compute_receipt_breakdown(receipt, ["Alice", "Bob"])

        assert breakdown.shares["Bob"].total == 0
        assert breakdown.shares["Bob"].items == []


class TestPreconditions:
    """Settlement fails fast on incomplete receipts"""

    def test_unassigned_item(self):
        receipt = make_receipt("r1", "Alice", [("Water", "2.00", [])])
        with pytest.raises(SettlementPreconditionError):
            compute_receipt_breakdown(receipt, ["Alice"])

    def test_missing_payer(self):
        receipt = make_receipt("r1", None, [("Water", "2.00", ["Alice"])])
        with pytest.raises(SettlementPreconditionError):
            compute_settlement(["Alice"], [receipt])

    def test_unknown_person(self):
        receipt = make_receipt("r1", "Alice", [("Water", "2.00", ["Zed"])])
        with pytest.raises(ValueError):
            compute_settlement(["Alice"], [receipt])


class TestNetPositions:
    """Test paid minus consumed across receipts"""

    def test_two_receipts_different_payers(self):
        people = ["Alice", "Bob", "Cara"]
        first = make_receipt("r1", "Alice", [("Hotpot", "30.00", people)])
        second = make_receipt("r2", "Bob", [("Bubble Tea", "12.00", ["Cara"])])
        breakdowns = [compute_receipt_breakdown(r, people) for r in (first, second)]

        positions = compute_net_positions(people, breakdowns)

        assert positions["paid"] == {"Alice": D("30.00"), "Bob": D("12.00"), "Cara": 0}
        assert positions["consumed"]["Cara"] == D("22.00")
        assert positions["net"] == {"Alice": D("20.00"), "Bob": D("2.00"), "Cara": D("-22.00")}


class TestTransferNetter:
    """Test greedy settlement"""

    def test_scenario_single_receipt(self):
        receipt = make_receipt("r1", "Alice", [
            ("Chicken Rice", "10.00", ["Alice", "Bob"]),
            ("Water", "2.00", ["Alice"]),
        ])
        result = compute_settlement(["Alice", "Bob"], [receipt])

        assert result.net_positions == {"Alice": D("5.00"), "Bob": D("-5.00")}
        assert result.transfers == [Transfer(from_person="Bob", to_person="Alice", amount=D("5.00"))]
        assert not result.is_settled

    def test_one_debtor_pays_two_creditors(self):
        people = ["Alice", "Bob", "Cara"]
        first = make_receipt("r1", "Alice", [("Hotpot", "30.00", people)])
        second = make_receipt("r2", "Bob", [("Bubble Tea", "12.00", ["Cara"])])

        result = compute_settlement(people, [first, second])

        assert result.transfers == [
            Transfer("Cara", "Alice", D("20.00")),
            Transfer("Cara", "Bob", D("2.00")),
        ]

    def test_ties_keep_enumeration_order(self):
        transfers = net_transfers({"Alice": D("5"), "Bob": D("5"), "Cara": D("-10")})
        assert [t.to_person for t in transfers] == ["Alice", "Bob"]

    def test_conservation(self):
        net = {"A": D("10.00"), "B": D("3.50"), "C": D("-7.25"), "D": D("-6.25")}
        transfers = net_transfers(net)

        for person, amount in net.items():
            sent = sum((t.amount for t in transfers if t.from_person == person), D(0))
            received = sum((t.amount for t in transfers if t.to_person == person), D(0))
            assert abs(received - sent - amount) < D("0.01")

        assert transfers == [
            Transfer("C", "A", D("7.25")),
            Transfer("D", "A", D("2.75")),
            Transfer("D", "B", D("3.50")),
        ]

    def test_everyone_within_epsilon_is_settled(self):
        assert net_transfers({"A": D("0.005"), "B": D("-0.005")}) == []

    def test_all_settled_when_everyone_pays_own_share(self):
        people = ["Alice", "Bob"]
        first = make_receipt("r1", "Alice", [("Laksa", "8.00", ["Alice"])])
        second = make_receipt("r2", "Bob", [("Mee Goreng", "8.00", ["Bob"])])

        result = compute_settlement(people, [first, second])

        assert result.transfers == []
        assert result.is_settled

    def test_bill_splitter_keeps_results(self):
        receipt = make_receipt("r1", "Alice", [("Chicken Rice", "10.00", ["Alice", "Bob"])])
        splitter = BillSplitter(["Alice", "Bob"], [receipt])
        splitter.settle()

        assert splitter.balances == {"Alice": D("5.00"), "Bob": D("-5.00")}
        assert len(splitter.settlements) == 1
        assert len(splitter.breakdowns) == 1
