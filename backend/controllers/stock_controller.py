"""
Site Stock Controller
Opening stock entry, stock adjustments (ledger rows plus site item
position update), closing stock recomputation from the ledger, and the
seven-day site stock report.

Every write runs in a single transaction: either all documents, ledger
rows and site item updates are committed, or none are.
"""
from datetime import date, datetime, time, timedelta

from flask import request, jsonify, g
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from config.constants import LedgerDocumentType, SiteItemLog
from config.db import db
from config.logging import get_logger
from models.site import Site, Item
from models.stock import (
    SiteItem,
    OpeningStock,
    OpeningStockDetail,
    StockAdjustment,
    StockAdjustmentDetail,
    StockLedger,
)
from services.site_stock_report import build_site_stock_report, report_days
from services.stock_ledger import StockLedgerCalculator
from utils.validators import (
    ValidationError,
    validate_date,
    validate_opening_stock,
    validate_positive_int,
    validate_stock_adjustment,
    validation_error_response,
)

log = get_logger()


# ==================== HELPERS ====================

def _get_site_or_none(site_id):
    return db.session.get(Site, site_id)


def _unknown_item_ids(item_ids):
    known = {
        row.item_id for row in
        Item.query.filter(Item.item_id.in_(item_ids)).with_entities(Item.item_id).all()
    }
    return sorted(set(item_ids) - known)


def _find_site_item(site_id, item_id):
    return SiteItem.query.filter_by(site_id=site_id, item_id=item_id).first()


# ==================== OPENING STOCK ====================

def create_opening_stock():
    """Record opening stock for a site and set each item's opening position"""
    try:
        current_user = g.user
        data = validate_opening_stock(request.get_json(silent=True))

        if not _get_site_or_none(data['site_id']):
            return jsonify({"error": "Site not found"}), 404

        unknown = _unknown_item_ids([d['item_id'] for d in data['details']])
        if unknown:
            return jsonify({"error": "Unknown items", "field": "details", "details": {"item_ids": unknown}}), 400

        opening_stock = OpeningStock(site_id=data['site_id'], created_by_id=current_user['user_id'])
        db.session.add(opening_stock)

        for detail in data['details']:
            opening_stock.details.append(OpeningStockDetail(
                item_id=detail['item_id'],
                opening_stock=detail['opening_stock'],
                opening_rate=detail['opening_rate'],
                opening_value=detail['opening_value']
            ))

            site_item = _find_site_item(data['site_id'], detail['item_id'])
            if site_item is None:
                site_item = SiteItem(site_id=data['site_id'], item_id=detail['item_id'])
                db.session.add(site_item)

            site_item.opening_stock = detail['opening_stock']
            site_item.opening_rate = detail['opening_rate']
            site_item.opening_value = detail['opening_value']
            site_item.log = SiteItemLog.OPENING_STOCK.value

        db.session.commit()

        log.info(f"Opening stock {opening_stock.opening_stock_id} created for site {data['site_id']} "
                 f"with {len(data['details'])} items by {current_user.get('full_name')}")

        return jsonify({"success": True, "data": opening_stock.to_dict()}), 201

    except ValidationError as e:
        return validation_error_response(e)
    except IntegrityError as e:
        db.session.rollback()
        log.error(f"Opening stock conflict: {str(e)}")
        return jsonify({"error": "Opening stock conflicts with existing data"}), 409
    except Exception as e:
        db.session.rollback()
        log.error(f"Error creating opening stock: {str(e)}")
        return jsonify({"error": "Failed to create opening stock"}), 500


# ==================== STOCK ADJUSTMENTS ====================

def create_stock_adjustment():
    """
    Create a stock adjustment, write its ledger rows and move the site
    item positions.
    """
    try:
        current_user = g.user
        data = validate_stock_adjustment(request.get_json(silent=True))
        site_id = data['site_id']

        if not _get_site_or_none(site_id):
            return jsonify({"error": "Site not found"}), 404

        unknown = _unknown_item_ids([d['item_id'] for d in data['details']])
        if unknown:
            return jsonify({"error": "Unknown items", "field": "details", "details": {"item_ids": unknown}}), 400

        # Adjustment date carries the time of entry
        txn_date = datetime.combine(data['date'], datetime.now().time())

        # Must be read before this adjustment writes its own ledger rows
        site_has_ledger = db.session.query(StockLedger.stock_ledger_id).filter(
            StockLedger.site_id == site_id
        ).first() is not None

        adjustment = StockAdjustment(
            date=txn_date,
            site_id=site_id,
            remarks=data['remarks'],
            created_by_id=current_user['user_id']
        )
        db.session.add(adjustment)
        db.session.flush()

        for detail in data['details']:
            adjustment.details.append(StockAdjustmentDetail(
                item_id=detail['item_id'],
                issued_qty=detail['issued_qty'],
                received_qty=detail['received_qty'],
                rate=detail['rate'],
                amount=detail['amount'],
                remarks=detail['remarks']
            ))

            received_qty = detail['received_qty']
            issued_qty = detail['issued_qty']

            for qty_field, qty in (('received_qty', received_qty), ('issued_qty', issued_qty)):
                if qty > 0:
                    ledger = StockLedger(
                        site_id=site_id,
                        transaction_date=txn_date,
                        item_id=detail['item_id'],
                        stock_adjustment_id=adjustment.stock_adjustment_id,
                        received_qty=0.0,
                        issued_qty=0.0,
                        unit_rate=detail['rate'],
                        document_type=LedgerDocumentType.STOCK_ADJUSTMENT.value
                    )
                    setattr(ledger, qty_field, qty)
                    db.session.add(ledger)

            site_item = _find_site_item(site_id, detail['item_id'])
            is_new = site_item is None

            position = StockLedgerCalculator.apply_adjustment(
                StockLedgerCalculator.position_of(site_item),
                received_qty=received_qty,
                issued_qty=issued_qty,
                rate=detail['rate'],
                amount=detail['amount'],
                site_has_ledger=site_has_ledger
            )

            if is_new:
                site_item = SiteItem(site_id=site_id, item_id=detail['item_id'])
                db.session.add(site_item)

            site_item.closing_stock = position['closing_stock']
            site_item.closing_value = position['closing_value']
            site_item.unit_rate = position['unit_rate']
            site_item.log = StockLedgerCalculator.adjustment_log_marker(is_new, received_qty, issued_qty)

        db.session.commit()

        log.info(f"Stock adjustment {adjustment.stock_adjustment_id} created for site {site_id} "
                 f"by {current_user.get('full_name')}")

        return jsonify({"success": True, "data": adjustment.to_dict()}), 201

    except ValidationError as e:
        return validation_error_response(e)
    except IntegrityError as e:
        db.session.rollback()
        log.error(f"Stock adjustment conflict: {str(e)}")
        return jsonify({"error": "Stock adjustment conflicts with existing data"}), 409
    except Exception as e:
        db.session.rollback()
        log.error(f"Error creating stock adjustment: {str(e)}")
        return jsonify({"error": "Failed to create stock adjustment"}), 500


# ==================== CLOSING STOCK ====================

def update_closing_stock():
    """Recompute every site item's closing position from opening stock plus the ledger"""
    try:
        ledger_totals = db.session.query(
            StockLedger.site_id,
            StockLedger.item_id,
            func.coalesce(func.sum(StockLedger.received_qty), 0).label('received_qty'),
            func.coalesce(func.sum(StockLedger.issued_qty), 0).label('issued_qty'),
            func.coalesce(func.sum(StockLedger.received_qty * StockLedger.unit_rate), 0).label('received_value'),
            func.coalesce(func.sum(StockLedger.issued_qty * StockLedger.unit_rate), 0).label('issued_value'),
        ).group_by(StockLedger.site_id, StockLedger.item_id).all()

        totals_by_key = {(row.site_id, row.item_id): row._asdict() for row in ledger_totals}

        updated = 0
        for site_item in SiteItem.query.order_by(SiteItem.site_item_id.asc()).all():
            position = StockLedgerCalculator.closing_from_ledger(
                site_item,
                totals_by_key.get((site_item.site_id, site_item.item_id))
            )
            site_item.closing_stock = position['closing_stock']
            site_item.closing_value = position['closing_value']
            site_item.unit_rate = position['unit_rate']
            site_item.log = SiteItemLog.CLOSING_STOCK_UPDATE.value
            site_item.last_modified_at = datetime.utcnow()
            updated += 1

        db.session.commit()

        log.info(f"Closing stock updated for {updated} items by {g.user.get('full_name')}")

        return jsonify({
            "success": True,
            "data": {
                "updated": updated,
                "message": f"Closing stock updated for {updated} items"
            }
        }), 200

    except Exception as e:
        db.session.rollback()
        log.error(f"Error updating closing stock: {str(e)}")
        return jsonify({"error": "Failed to update closing stock"}), 500


# ==================== SITE STOCK REPORT ====================

def get_site_stock_report(site_id):
    """Received/issued per day for the last seven days at a site"""
    try:
        end_param = request.args.get('end_date')
        end_date = validate_date(end_param, 'end_date') if end_param else date.today()

        site = _get_site_or_none(validate_positive_int(site_id, 'site_id'))
        if not site:
            return jsonify({"error": "Site not found"}), 404

        days = report_days(end_date)
        window_start = datetime.combine(days[0], time.min)
        window_end = datetime.combine(days[-1] + timedelta(days=1), time.min)

        site_items = SiteItem.query.filter(SiteItem.site_id == site.site_id) \
            .order_by(SiteItem.site_item_id.asc()).all()

        ledgers = StockLedger.query.filter(
            StockLedger.site_id == site.site_id,
            StockLedger.transaction_date >= window_start,
            StockLedger.transaction_date < window_end
        ).order_by(StockLedger.transaction_date.asc(), StockLedger.stock_ledger_id.asc()).all()

        known_item_ids = {si.item_id for si in site_items}
        missing_ids = {l.item_id for l in ledgers} - known_item_ids
        items_by_id = {}
        if missing_ids:
            items_by_id = {item.item_id: item for item in Item.query.filter(Item.item_id.in_(missing_ids)).all()}

        report = build_site_stock_report(site, site_items, ledgers, items_by_id, days)
        return jsonify({"success": True, "data": report}), 200

    except ValidationError as e:
        return validation_error_response(e)
    except Exception as e:
        log.error(f"Error building site stock report: {str(e)}")
        return jsonify({"error": "Failed to fetch stock report"}), 500
