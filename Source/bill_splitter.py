"""
Bill Splitter module for How Much Ah?
Allocates receipt totals to people and works out who pays whom
"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence

from config import SETTLEMENT_EPSILON
from data_models import (
    ItemShare,
    PersonShare,
    Receipt,
    ReceiptBreakdown,
    SettlementResult,
    Transfer,
)
from exceptions import SettlementPreconditionError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _check_receipt(receipt: Receipt, known: set):
    if not receipt.payer:
        raise SettlementPreconditionError(f"Receipt {receipt.id} has no payer")
    if receipt.payer not in known:
        raise SettlementPreconditionError(f"Receipt {receipt.id} payer {receipt.payer!r} is not in the party")

    for item in receipt.items:
        if not item.assigned_to:
            raise SettlementPreconditionError(
                f"Item {item.name or item.id!r} on receipt {receipt.id} is not assigned to anyone"
            )
        unknown = [person for person in item.assigned_to if person not in known]
        if unknown:
            raise SettlementPreconditionError(
                f"Item {item.name or item.id!r} is assigned to unknown people: {', '.join(unknown)}"
            )


def compute_receipt_breakdown(receipt: Receipt, people: Sequence[str]) -> ReceiptBreakdown:
    """Receipt totals and the proportional share of every person.

    Service charge is applied to the subtotal; GST is applied to the
    subtotal plus service charge. Each item is split equally between the
    people assigned to it, and the same percentages are applied to every
    person's subtotal so the shares add up to the receipt total.
    """
    _check_receipt(receipt, set(people))

    subtotal = receipt.subtotal
    service_charge_amount = receipt.service_charge.apply(subtotal)
    gst_base = subtotal + service_charge_amount if receipt.service_charge.enabled else subtotal
    gst_amount = receipt.gst.apply(gst_base)

    shares = {person: PersonShare(person=person) for person in people}
    for item in receipt.items:
        share_count = len(item.assigned_to)
        share_amount = item.price / Decimal(share_count)
        for person in item.assigned_to:
            share = shares[person]
            share.subtotal += share_amount
            share.items.append(ItemShare(name=item.name, amount=share_amount, share_count=share_count))

    for share in shares.values():
        share.service_charge = receipt.service_charge.apply(share.subtotal)
        share.gst = receipt.gst.apply(share.subtotal + share.service_charge)

    return ReceiptBreakdown(
        receipt_id=receipt.id,
        payer=receipt.payer,
        subtotal=subtotal,
        service_charge_amount=service_charge_amount,
        gst_base=gst_base,
        gst_amount=gst_amount,
        shares=shares,
    )


def compute_net_positions(people: Sequence[str],
                          breakdowns: Iterable[ReceiptBreakdown]) -> Dict[str, Dict[str, Decimal]]:
    """Paid, consumed and net (paid - consumed) per person across receipts"""
    paid = {person: ZERO for person in people}
    consumed = {person: ZERO for person in people}

    for breakdown in breakdowns:
        paid[breakdown.payer] += breakdown.total
        for person, share in breakdown.shares.items():
            consumed[person] += share.total

    net = {person: paid[person] - consumed[person] for person in people}
    return {'paid': paid, 'consumed': consumed, 'net': net}


def net_transfers(net_positions: Dict[str, Decimal],
                  epsilon: Decimal = SETTLEMENT_EPSILON) -> List[Transfer]:
    """Greedy settlement: largest debtors pay largest creditors first.

    Produces a valid settlement, not necessarily the one with the fewest
    transfers.
    """
    creditors = []
    debtors = []

    for person, amount in net_positions.items():
        if amount > epsilon:
            creditors.append({'name': person, 'amount': amount})
        elif amount < -epsilon:
            debtors.append({'name': person, 'amount': -amount})

    creditors.sort(key=lambda x: x['amount'], reverse=True)
    debtors.sort(key=lambda x: x['amount'], reverse=True)

    transfers = []
    i, j = 0, 0

    while i < len(creditors) and j < len(debtors):
        amount = min(creditors[i]['amount'], debtors[j]['amount'])

        if amount > ZERO:
            transfers.append(Transfer(
                from_person=debtors[j]['name'],
                to_person=creditors[i]['name'],
                amount=amount,
            ))

        creditors[i]['amount'] -= amount
        debtors[j]['amount'] -= amount

        if creditors[i]['amount'] < epsilon:
            i += 1
        if debtors[j]['amount'] < epsilon:
            j += 1

    return transfers


class BillSplitter:
    """Handles bill splitting across all receipts of a session"""

    def __init__(self, people: Sequence[str], receipts: Sequence[Receipt],
                 epsilon: Decimal = SETTLEMENT_EPSILON):
        self.people = list(people)
        self.receipts = list(receipts)
        self.epsilon = epsilon
        self.breakdowns: List[ReceiptBreakdown] = []
        self.balances: Dict[str, Decimal] = {}
        self.settlements: List[Transfer] = []

    def calculate_breakdowns(self) -> List[ReceiptBreakdown]:
        """Per-receipt totals and shares"""
        self.breakdowns = [compute_receipt_breakdown(receipt, self.people) for receipt in self.receipts]
        return self.breakdowns

    def settle(self) -> SettlementResult:
        """Compute net positions and the transfers that settle them"""
        breakdowns = self.calculate_breakdowns()
        positions = compute_net_positions(self.people, breakdowns)
        self.balances = positions['net']
        self.settlements = net_transfers(self.balances, self.epsilon)

        if self.settlements:
            logger.info("Settlement needs %d transfers", len(self.settlements))
        else:
            logger.info("All settled, no transfers needed")

        return SettlementResult(
            net_positions=self.balances,
            paid=positions['paid'],
            consumed=positions['consumed'],
            transfers=self.settlements,
            breakdowns=breakdowns,
        )


def compute_settlement(people: Sequence[str], receipts: Sequence[Receipt]) -> SettlementResult:
    """Net positions and transfers for the whole party"""
    return BillSplitter(people, receipts).settle()
