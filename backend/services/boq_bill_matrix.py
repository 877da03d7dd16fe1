"""
BOQ Billed Matrix
Pivots bill detail rows into one row per BOQ item with the quantity and
amount billed in every bill plus the cumulative (upto-date) total.
"""
from typing import Dict, Iterable, List

from config.constants import AMOUNT_DECIMALS, BILL_LABEL_DATE_FORMAT, BOQ_QTY_DECIMALS


def bill_label(bill) -> str:
    """'<name or number or Bill id> (dd/mm/yyyy)'"""
    base = (bill.bill_name or '').strip() or (bill.bill_number or '').strip() or f"Bill {bill.boq_bill_id}"
    if bill.bill_date:
        return f"{base} ({bill.bill_date.strftime(BILL_LABEL_DATE_FORMAT)})"
    return base


def _cell(qty: float, amount: float) -> Dict:
    return {'qty': round(qty, 2), 'amount': round(amount, AMOUNT_DECIMALS)}


def summarize_bill_details(bills: Iterable) -> Dict[int, Dict]:
    """
    boq_item_id -> {total_qty, total_amount, by_bill: {bill_id: [qty, amount]}}
    Detail rows with a non-positive item id are ignored.
    """
    by_item = {}
    for bill in bills:
        for detail in bill.details:
            item_id = detail.boq_item_id
            if not item_id or item_id <= 0:
                continue

            qty = float(detail.qty or 0)
            amount = float(detail.amount or 0)

            summary = by_item.setdefault(item_id, {'total_qty': 0.0, 'total_amount': 0.0, 'by_bill': {}})
            summary['total_qty'] += qty
            summary['total_amount'] += amount

            cell = summary['by_bill'].setdefault(bill.boq_bill_id, [0.0, 0.0])
            cell[0] += qty
            cell[1] += amount
    return by_item


def build_billed_matrix(boq, bills: List) -> Dict:
    """
    Build the upto-date billed report for a BOQ.

    bills must be ordered by bill date then id; every bill in the list
    contributes to the upto-date totals.
    """
    bill_meta = [{
        'boq_bill_id': bill.boq_bill_id,
        'bill_number': bill.bill_number,
        'bill_name': bill.bill_name,
        'bill_date': bill.bill_date.isoformat() if bill.bill_date else None,
        'label': bill_label(bill),
        'total_bill_amount': float(bill.total_bill_amount or 0)
    } for bill in bills]

    billed = summarize_bill_details(bills)

    rows = []
    for item in sorted(boq.items, key=lambda i: i.boq_item_id):
        summary = billed.get(item.boq_item_id)
        by_bill = summary['by_bill'] if summary else {}

        rows.append({
            'boq_item_id': item.boq_item_id,
            'description': item.item or '',
            'unit': item.unit.unit_name if item.unit else '',
            'boq_qty': round(float(item.qty or 0), BOQ_QTY_DECIMALS),
            'rate': round(float(item.rate or 0), AMOUNT_DECIMALS),
            'boq_amount': round(float(item.amount or 0), AMOUNT_DECIMALS),
            'total_upto': _cell(summary['total_qty'], summary['total_amount']) if summary else _cell(0, 0),
            'bills': {
                str(meta['boq_bill_id']): _cell(*by_bill.get(meta['boq_bill_id'], (0.0, 0.0)))
                for meta in bill_meta
            },
            'is_group': bool(item.is_group)
        })

    site = boq.site
    return {
        'meta': {
            'boq_id': boq.boq_id,
            'boq_no': boq.boq_no,
            'work_name': boq.work_name,
            'site': {'site_id': site.site_id, 'site': site.site} if site else None
        },
        'bills': bill_meta,
        'rows': rows
    }
