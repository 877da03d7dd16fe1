from config.db import db
from models.user import User
from models.site import Site, Unit, Item
from models.manpower import ManpowerSupplier, Manpower, Attendance
from models.boq import Boq, BoqItem, BoqBill, BoqBillDetail
from models.stock import (
    SiteItem, OpeningStock, OpeningStockDetail,
    StockAdjustment, StockAdjustmentDetail, StockLedger
)

__all__ = [
    'db', 'User', 'Site', 'Unit', 'Item',
    'ManpowerSupplier', 'Manpower', 'Attendance',
    'Boq', 'BoqItem', 'BoqBill', 'BoqBillDetail',
    'SiteItem', 'OpeningStock', 'OpeningStockDetail',
    'StockAdjustment', 'StockAdjustmentDetail', 'StockLedger'
]
