from datetime import datetime
from config.db import db


class Boq(db.Model):
    """Bill of Quantities agreed for a site's work order."""
    __tablename__ = "boqs"

    boq_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    boq_no = db.Column(db.String(100), unique=True, nullable=True)
    work_name = db.Column(db.String(500), nullable=True)
    site_id = db.Column(db.Integer, db.ForeignKey("sites.site_id"), nullable=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    site = db.relationship('Site', lazy='joined')
    items = db.relationship('BoqItem', backref='boq', lazy='select', order_by='BoqItem.boq_item_id')

    def __repr__(self):
        return f"<Boq {self.boq_id}: {self.boq_no}>"


class BoqItem(db.Model):
    """
    Line of a BOQ. Group rows (is_group) are headings and carry no
    quantity of their own.
    """
    __tablename__ = "boq_items"

    boq_item_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    boq_id = db.Column(db.Integer, db.ForeignKey("boqs.boq_id"), nullable=False, index=True)
    item = db.Column(db.String(500), nullable=True)
    unit_id = db.Column(db.Integer, db.ForeignKey("units.unit_id"), nullable=True, index=True)
    qty = db.Column(db.Float, nullable=True)
    rate = db.Column(db.Float, nullable=True)
    amount = db.Column(db.Float, nullable=True)
    is_group = db.Column(db.Boolean, default=False, nullable=False)

    unit = db.relationship('Unit', lazy='joined')


class BoqBill(db.Model):
    """Running bill raised against a BOQ"""
    __tablename__ = "boq_bills"

    boq_bill_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    boq_id = db.Column(db.Integer, db.ForeignKey("boqs.boq_id"), nullable=False, index=True)
    bill_number = db.Column(db.String(100), nullable=False)
    bill_name = db.Column(db.String(200), nullable=False)
    bill_date = db.Column(db.Date, nullable=True, index=True)
    remarks = db.Column(db.Text, nullable=True)
    total_bill_amount = db.Column(db.Float, default=0.0, nullable=False)
    created_by_id = db.Column(db.Integer, db.ForeignKey("users.user_id"), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    last_modified_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('boq_id', 'bill_number', name='unique_boq_bill_number'),
    )

    details = db.relationship('BoqBillDetail', backref='bill', lazy='select', cascade='all, delete-orphan')

    def to_dict(self, include_details=False):
        data = {
            'boq_bill_id': self.boq_bill_id,
            'boq_id': self.boq_id,
            'bill_number': self.bill_number,
            'bill_name': self.bill_name,
            'bill_date': self.bill_date.isoformat() if self.bill_date else None,
            'remarks': self.remarks,
            'total_bill_amount': float(self.total_bill_amount or 0),
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
        if include_details:
            data['details'] = [d.to_dict() for d in self.details]
        return data

    def __repr__(self):
        return f"<BoqBill {self.boq_bill_id}: {self.bill_number}>"


class BoqBillDetail(db.Model):
    __tablename__ = "boq_bill_details"

    boq_bill_detail_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    boq_bill_id = db.Column(db.Integer, db.ForeignKey("boq_bills.boq_bill_id"), nullable=False, index=True)
    boq_item_id = db.Column(db.Integer, db.ForeignKey("boq_items.boq_item_id"), nullable=False, index=True)
    qty = db.Column(db.Float, default=0.0, nullable=False)
    amount = db.Column(db.Float, default=0.0, nullable=False)

    def to_dict(self):
        return {
            'boq_bill_detail_id': self.boq_bill_detail_id,
            'boq_item_id': self.boq_item_id,
            'qty': float(self.qty or 0),
            'amount': float(self.amount or 0)
        }
