"""
Site Stock Models
Per-site running stock (site_items), the documents that move it
(opening stock, stock adjustments) and the append-only stock ledger.
"""
from datetime import datetime
from config.db import db


class SiteItem(db.Model):
    """Running stock position of one item at one site"""
    __tablename__ = "site_items"

    site_item_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    site_id = db.Column(db.Integer, db.ForeignKey("sites.site_id"), nullable=False, index=True)
    item_id = db.Column(db.Integer, db.ForeignKey("items.item_id"), nullable=False, index=True)

    opening_stock = db.Column(db.Float, default=0.0, nullable=False)
    opening_rate = db.Column(db.Float, default=0.0, nullable=False)
    opening_value = db.Column(db.Float, default=0.0, nullable=False)

    closing_stock = db.Column(db.Float, default=0.0, nullable=False)
    closing_value = db.Column(db.Float, default=0.0, nullable=False)
    unit_rate = db.Column(db.Float, default=0.0, nullable=False)

    log = db.Column(db.String(50), nullable=True)  # see SiteItemLog
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    last_modified_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('site_id', 'item_id', name='unique_site_item'),
    )

    item = db.relationship('Item', lazy='joined')

    def __repr__(self):
        return f"<SiteItem site={self.site_id} item={self.item_id} closing={self.closing_stock}>"


class OpeningStock(db.Model):
    __tablename__ = "opening_stocks"

    opening_stock_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    site_id = db.Column(db.Integer, db.ForeignKey("sites.site_id"), nullable=False, index=True)
    created_by_id = db.Column(db.Integer, db.ForeignKey("users.user_id"), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    last_modified_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    details = db.relationship('OpeningStockDetail', backref='document', lazy='select',
                              order_by='OpeningStockDetail.opening_stock_detail_id',
                              cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'opening_stock_id': self.opening_stock_id,
            'site_id': self.site_id,
            'created_by_id': self.created_by_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'details': [d.to_dict() for d in self.details]
        }


class OpeningStockDetail(db.Model):
    __tablename__ = "opening_stock_details"

    opening_stock_detail_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    opening_stock_id = db.Column(db.Integer, db.ForeignKey("opening_stocks.opening_stock_id"), nullable=False, index=True)
    item_id = db.Column(db.Integer, db.ForeignKey("items.item_id"), nullable=False, index=True)
    opening_stock = db.Column(db.Float, default=0.0, nullable=False)
    opening_rate = db.Column(db.Float, default=0.0, nullable=False)
    opening_value = db.Column(db.Float, default=0.0, nullable=False)

    item = db.relationship('Item', lazy='joined')

    def to_dict(self):
        return {
            'opening_stock_detail_id': self.opening_stock_detail_id,
            'item_id': self.item_id,
            'item_code': self.item.item_code if self.item else None,
            'item': self.item.item if self.item else None,
            'opening_stock': float(self.opening_stock or 0),
            'opening_rate': float(self.opening_rate or 0),
            'opening_value': float(self.opening_value or 0)
        }


class StockAdjustment(db.Model):
    """Manual receive/issue correction of site stock"""
    __tablename__ = "stock_adjustments"

    stock_adjustment_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    date = db.Column(db.DateTime, nullable=False, index=True)
    site_id = db.Column(db.Integer, db.ForeignKey("sites.site_id"), nullable=False, index=True)
    remarks = db.Column(db.String(255), nullable=True)
    created_by_id = db.Column(db.Integer, db.ForeignKey("users.user_id"), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    details = db.relationship('StockAdjustmentDetail', backref='stock_adjustment', lazy='select',
                              cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.stock_adjustment_id,
            'site_id': self.site_id,
            'date': self.date.isoformat() if self.date else None,
            'remarks': self.remarks
        }


class StockAdjustmentDetail(db.Model):
    __tablename__ = "stock_adjustment_details"

    stock_adjustment_detail_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    stock_adjustment_id = db.Column(db.Integer, db.ForeignKey("stock_adjustments.stock_adjustment_id"),
                                    nullable=False, index=True)
    item_id = db.Column(db.Integer, db.ForeignKey("items.item_id"), nullable=False, index=True)
    issued_qty = db.Column(db.Float, default=0.0, nullable=False)
    received_qty = db.Column(db.Float, default=0.0, nullable=False)
    rate = db.Column(db.Float, default=0.0, nullable=False)
    amount = db.Column(db.Float, default=0.0, nullable=False)
    remarks = db.Column(db.String(255), nullable=True)


class StockLedger(db.Model):
    """
    Append-only stock movement log. Each row either receives or issues
    quantity of one item at one site; the source document is recorded in
    document_type.
    """
    __tablename__ = "stock_ledgers"

    stock_ledger_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    site_id = db.Column(db.Integer, db.ForeignKey("sites.site_id"), nullable=False, index=True)
    transaction_date = db.Column(db.DateTime, nullable=False, index=True)
    item_id = db.Column(db.Integer, db.ForeignKey("items.item_id"), nullable=False, index=True)
    stock_adjustment_id = db.Column(db.Integer, db.ForeignKey("stock_adjustments.stock_adjustment_id"),
                                    nullable=True, index=True)
    received_qty = db.Column(db.Float, default=0.0, nullable=True)
    issued_qty = db.Column(db.Float, default=0.0, nullable=True)
    unit_rate = db.Column(db.Float, default=0.0, nullable=True)
    document_type = db.Column(db.String(50), nullable=False)  # see LedgerDocumentType
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return (f"<StockLedger {self.stock_ledger_id}: site={self.site_id} item={self.item_id} "
                f"+{self.received_qty} -{self.issued_qty}>")
