"""
Master data shared by the stock, BOQ and attendance modules:
sites, units of measure and the item catalogue.
"""
from datetime import datetime
from config.db import db


class Site(db.Model):
    """Construction site. Primary scoping entity for stock and attendance."""
    __tablename__ = "sites"

    site_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    site = db.Column(db.String(255), nullable=False)
    short_name = db.Column(db.String(50), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Site {self.site_id}: {self.site}>"


class Unit(db.Model):
    __tablename__ = "units"

    unit_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    unit_name = db.Column(db.String(50), unique=True, nullable=False)


class Item(db.Model):
    """Catalogue item (material) tracked in site stock."""
    __tablename__ = "items"

    item_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    item_code = db.Column(db.String(50), unique=True, nullable=False)
    item = db.Column(db.String(255), nullable=False)
    unit_id = db.Column(db.Integer, db.ForeignKey("units.unit_id"), nullable=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    unit = db.relationship('Unit', lazy='joined')

    def __repr__(self):
        return f"<Item {self.item_code}: {self.item}>"
