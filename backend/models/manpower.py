"""
Manpower Models
Labour suppliers, the workers they provide, and daily site attendance.
"""
from datetime import datetime
from config.db import db


class ManpowerSupplier(db.Model):
    __tablename__ = "manpower_suppliers"

    supplier_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    supplier_name = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<ManpowerSupplier {self.supplier_id}: {self.supplier_name}>"


class Manpower(db.Model):
    """
    A worker supplied by a manpower supplier.
    Only assigned manpower (is_assigned with a current site) shows up in
    attendance reports.
    """
    __tablename__ = "manpower"

    manpower_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    first_name = db.Column(db.String(100), nullable=False)
    middle_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=False)
    supplier_id = db.Column(db.Integer, db.ForeignKey("manpower_suppliers.supplier_id"), nullable=False, index=True)
    category = db.Column(db.String(100), nullable=True, index=True)  # skilled, semi-skilled, unskilled
    skill_set = db.Column(db.String(100), nullable=True, index=True)  # Mason, Carpenter, Helper
    wage = db.Column(db.Float, nullable=True)

    # Assignment
    is_assigned = db.Column(db.Boolean, default=False, index=True)
    current_site_id = db.Column(db.Integer, db.ForeignKey("sites.site_id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    supplier = db.relationship('ManpowerSupplier', backref='manpower', lazy='joined')
    current_site = db.relationship('Site', lazy='joined')
    attendances = db.relationship('Attendance', backref='manpower', lazy='select')

    @property
    def full_name(self):
        return " ".join(part for part in (self.first_name, self.middle_name, self.last_name) if part)

    def __repr__(self):
        return f"<Manpower {self.manpower_id}: {self.full_name}>"


class Attendance(db.Model):
    """One attendance mark for a worker at a site on a date."""
    __tablename__ = "attendances"

    attendance_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    date = db.Column(db.Date, nullable=False, index=True)
    site_id = db.Column(db.Integer, db.ForeignKey("sites.site_id"), nullable=False, index=True)
    manpower_id = db.Column(db.Integer, db.ForeignKey("manpower.manpower_id"), nullable=False, index=True)
    is_present = db.Column(db.Boolean, default=False, nullable=False, index=True)
    is_idle = db.Column(db.Boolean, default=False, nullable=False)
    ot = db.Column(db.Float, nullable=True)  # overtime hours
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    last_modified_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('date', 'site_id', 'manpower_id', name='unique_attendance_date_site_manpower'),
    )

    def to_dict(self):
        return {
            'attendance_id': self.attendance_id,
            'date': self.date.isoformat() if self.date else None,
            'site_id': self.site_id,
            'manpower_id': self.manpower_id,
            'is_present': self.is_present,
            'is_idle': self.is_idle,
            'ot': float(self.ot) if self.ot is not None else None
        }

    def __repr__(self):
        return f"<Attendance {self.attendance_id}: Manpower {self.manpower_id} on {self.date}>"
