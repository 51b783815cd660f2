"""
Settlement report for How Much Ah?
Summary text, JSON export and a tabular per-person breakdown
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, Sequence

import pandas as pd

from data_models import PersonShare, Receipt, SettlementResult
from utils import format_currency, round_money


def _money(amount: Decimal) -> float:
    return float(round_money(amount))


def _share_line(share: PersonShare) -> str:
    parts = []
    for item in share.items:
        if item.percentage:
            parts.append(f"{item.percentage}% {item.name} ({format_currency(item.amount)})")
        else:
            parts.append(f"{item.name} ({format_currency(item.amount)})")

    if not parts:
        parts.append("no items")

    charges = share.service_charge + share.gst
    if charges > 0:
        parts.append(f"SC+GST ({format_currency(charges)})")

    return f"{share.person}: {', '.join(parts)} = {format_currency(share.total)}"


def generate_summary_text(result: SettlementResult) -> str:
    """Human readable summary that can be pasted into a group chat"""
    lines = ['💰 Payment Summary:']

    if result.is_settled:
        lines.append('Everyone is settled up - no transfers needed!')
    for transfer in result.transfers:
        lines.append(f"- {transfer.from_person} → {transfer.to_person}: {format_currency(transfer.amount)}")

    lines.append('')
    lines.append('🧾 Payments:')
    for number, breakdown in enumerate(result.breakdowns, 1):
        lines.append(f"{breakdown.payer} paid {format_currency(breakdown.total)} for receipt {number}")

    lines.append('')
    lines.append('📋 Breakdown:')
    for number, breakdown in enumerate(result.breakdowns, 1):
        if len(result.breakdowns) > 1:
            lines.append(f"Receipt {number}:")
        for share in breakdown.shares.values():
            lines.append(_share_line(share))

    return '\n'.join(lines) + '\n'


def breakdown_dataframe(result: SettlementResult) -> pd.DataFrame:
    """One row per person per receipt with the amounts they consumed and paid"""
    rows = []
    for number, breakdown in enumerate(result.breakdowns, 1):
        for person, share in breakdown.shares.items():
            paid = breakdown.total if person == breakdown.payer else Decimal("0")
            rows.append({
                'receipt': number,
                'person': person,
                'subtotal': _money(share.subtotal),
                'service_charge': _money(share.service_charge),
                'gst': _money(share.gst),
                'total': _money(share.total),
                'paid': _money(paid),
            })

    columns = ['receipt', 'person', 'subtotal', 'service_charge', 'gst', 'total', 'paid']
    return pd.DataFrame(rows, columns=columns)


def export_to_dict(people: Sequence[str], receipts: Sequence[Receipt], result: SettlementResult) -> Dict:
    """Complete session and settlement data, ready for json.dump"""
    return {
        'export_info': {
            'timestamp': datetime.now().isoformat(),
            'version': '1.0',
        },
        'people': list(people),
        'receipts': [
            {
                'id': receipt.id,
                'payer': receipt.payer,
                'service_charge': {
                    'enabled': receipt.service_charge.enabled,
                    'percent': float(receipt.service_charge.percent),
                },
                'gst': {
                    'enabled': receipt.gst.enabled,
                    'percent': float(receipt.gst.percent),
                },
                'items': [
                    {'name': item.name, 'price': _money(item.price), 'assigned_to': list(item.assigned_to)}
                    for item in receipt.items
                ],
                'subtotal': _money(breakdown.subtotal),
                'service_charge_amount': _money(breakdown.service_charge_amount),
                'gst_amount': _money(breakdown.gst_amount),
                'total': _money(breakdown.total),
            }
            for receipt, breakdown in zip(receipts, result.breakdowns)
        ],
        'settlement': {
            'net_positions': {person: _money(amount) for person, amount in result.net_positions.items()},
            'paid': {person: _money(amount) for person, amount in result.paid.items()},
            'consumed': {person: _money(amount) for person, amount in result.consumed.items()},
            'transfers': [
                {
                    'from': transfer.from_person,
                    'to': transfer.to_person,
                    'amount': _money(transfer.amount),
                    'instruction': f"{transfer.from_person} pays {transfer.to_person} {format_currency(transfer.amount)}",
                }
                for transfer in result.transfers
            ],
            'transactions_needed': len(result.transfers),
        },
    }
