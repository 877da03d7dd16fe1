"""
Site Stock Report
Day-by-day received/issued quantities per item for a short window ending
on a given date, framed by each item's opening and closing stock.
"""
from datetime import date, timedelta
from typing import Dict, Iterable, List

from config.constants import QTY_DECIMALS, SITE_STOCK_REPORT_DAYS


def report_days(end_date: date, days: int = SITE_STOCK_REPORT_DAYS) -> List[date]:
    """The `days` calendar days ending on end_date, oldest first"""
    return [end_date - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def build_site_stock_report(site, site_items: Iterable, ledgers: Iterable, items_by_id: Dict, days: List[date]) -> Dict:
    """
    site_items: the site's SiteItem rows
    ledgers: the site's StockLedger rows inside the window
    items_by_id: Item rows for ledger items that have no SiteItem
    """
    site_items = list(site_items)
    ledgers = list(ledgers)

    positions = {si.item_id: si for si in site_items}
    item_ids = [si.item_id for si in site_items]
    for ledger in ledgers:
        if ledger.item_id not in item_ids:
            item_ids.append(ledger.item_id)

    daily = {}
    for ledger in ledgers:
        key = (ledger.item_id, ledger.transaction_date.date())
        cell = daily.setdefault(key, [0.0, 0.0])
        cell[0] = round(cell[0] + float(ledger.received_qty or 0), QTY_DECIMALS)
        cell[1] = round(cell[1] + float(ledger.issued_qty or 0), QTY_DECIMALS)

    rows = []
    for item_id in item_ids:
        site_item = positions.get(item_id)
        item = site_item.item if site_item else items_by_id.get(item_id)

        per_day = []
        for day in days:
            received, issued = daily.get((item_id, day), (0.0, 0.0))
            per_day.append({'date': day.isoformat(), 'received': received, 'issued': issued})

        rows.append({
            'item_id': item_id,
            'item': item.item if item else f"Item {item_id}",
            'unit': item.unit.unit_name if item and item.unit else None,
            'opening': float(site_item.opening_stock or 0) if site_item else 0.0,
            'per_day': per_day,
            'closing': float(site_item.closing_stock or 0) if site_item else 0.0
        })

    return {
        'site': {'site_id': site.site_id, 'site': site.site},
        'days': [day.isoformat() for day in days],
        'rows': rows
    }
