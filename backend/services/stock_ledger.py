"""
Stock Ledger Calculator
Delta arithmetic for site stock positions (closing stock, closing value
and weighted unit rate). Callers load and persist the rows inside their
own database transaction.
"""
from typing import Dict, Optional

from config.constants import AMOUNT_DECIMALS, QTY_DECIMALS, RATE_DECIMALS, SiteItemLog


class StockLedgerCalculator:
    """Pure calculations over a site item's stock position"""

    @staticmethod
    def position_of(site_item) -> Dict:
        """Current closing position of a site item, zeros when it does not exist yet"""
        if site_item is None:
            return {'closing_stock': 0.0, 'closing_value': 0.0, 'unit_rate': 0.0}
        return {
            'closing_stock': float(site_item.closing_stock or 0),
            'closing_value': float(site_item.closing_value or 0),
            'unit_rate': float(site_item.unit_rate or 0)
        }

    @staticmethod
    def apply_adjustment(position: Dict, received_qty: float, issued_qty: float,
                         rate: float, amount: float, site_has_ledger: bool) -> Dict:
        """
        Apply one stock adjustment line to a position.

        Receive first: on a site with no earlier ledger rows the position is
        replaced by the received qty/amount/rate, otherwise qty and amount
        are added and the rate becomes value / stock (unchanged at zero
        stock). Then issue: qty and amount are subtracted and the rate
        becomes value / stock, or 0 at zero stock.
        """
        stock = position['closing_stock']
        value = position['closing_value']
        unit_rate = position['unit_rate']

        if received_qty > 0:
            if not site_has_ledger:
                stock = round(received_qty, QTY_DECIMALS)
                value = round(amount, AMOUNT_DECIMALS)
                unit_rate = round(rate, RATE_DECIMALS)
            else:
                stock = round(stock + received_qty, QTY_DECIMALS)
                value = round(value + amount, AMOUNT_DECIMALS)
                if stock != 0:
                    unit_rate = round(value / stock, RATE_DECIMALS)

        if issued_qty > 0:
            stock = round(stock - issued_qty, QTY_DECIMALS)
            value = round(value - amount, AMOUNT_DECIMALS)
            unit_rate = round(value / stock, RATE_DECIMALS) if stock != 0 else 0.0

        return {'closing_stock': stock, 'closing_value': value, 'unit_rate': unit_rate}

    @staticmethod
    def adjustment_log_marker(is_new: bool, received_qty: float, issued_qty: float) -> str:
        issue_only = issued_qty > 0 and received_qty == 0
        if is_new:
            return (SiteItemLog.SA_ISSUE_INIT if issue_only else SiteItemLog.SA_INIT).value
        return (SiteItemLog.SA_ISSUE_UPDATE if issue_only else SiteItemLog.SA_UPDATE).value

    @staticmethod
    def closing_from_ledger(site_item, totals: Optional[Dict]) -> Dict:
        """
        Recompute a site item's closing position from its opening fields and
        the aggregate of its ledger rows.

        totals holds received_qty, issued_qty, received_value and
        issued_value; None means the item has no ledger rows, in which
        case the closing position equals the opening one.
        """
        opening_stock = float(site_item.opening_stock or 0)
        opening_value = float(site_item.opening_value or 0)

        if totals is None:
            return {
                'closing_stock': opening_stock,
                'closing_value': opening_value,
                'unit_rate': float(site_item.opening_rate or 0)
            }

        stock = round(
            float(totals['received_qty'] or 0) - float(totals['issued_qty'] or 0) + opening_stock,
            QTY_DECIMALS
        )
        value = round(
            float(totals['received_value'] or 0) - float(totals['issued_value'] or 0) + opening_value,
            AMOUNT_DECIMALS
        )
        unit_rate = round(value / stock, RATE_DECIMALS) if stock != 0 else 0.0

        return {'closing_stock': stock, 'closing_value': value, 'unit_rate': unit_rate}
