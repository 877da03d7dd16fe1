"""
Application Constants and Enums

Document types written to the stock ledger, markers stored in
site_items.log, numeric limits accepted at the API boundary and the
rounding precision used for stored quantities and money.
"""

from enum import Enum


# ==================== STOCK LEDGER ====================

class LedgerDocumentType(str, Enum):
    """Source document of a stock ledger row"""
    STOCK_ADJUSTMENT = 'STOCK ADJUSTMENT'


class SiteItemLog(str, Enum):
    """Last operation that touched a site item row"""
    OPENING_STOCK = 'OPENING_STOCK'
    CLOSING_STOCK_UPDATE = 'CLOSING_STOCK_UPDATE'
    SA_INIT = 'SA Init'
    SA_ISSUE_INIT = 'SA Issue Init'
    SA_UPDATE = 'SA Update'
    SA_ISSUE_UPDATE = 'SA Issue Update'


# ==================== PRECISION ====================

QTY_DECIMALS = 4
RATE_DECIMALS = 4
AMOUNT_DECIMALS = 2
BOQ_QTY_DECIMALS = 4

MAX_STOCK_QTY = 9999999999.9999
MAX_STOCK_AMOUNT = 9999999999.99

MAX_BILL_NUMBER_LENGTH = 100
MAX_BILL_NAME_LENGTH = 200
MAX_REMARKS_LENGTH = 255


# ==================== REPORTS ====================

MONTH_PATTERN = r'^\d{4}-(0[1-9]|1[0-2])$'
SITE_STOCK_REPORT_DAYS = 7
BILL_LABEL_DATE_FORMAT = '%d/%m/%Y'
