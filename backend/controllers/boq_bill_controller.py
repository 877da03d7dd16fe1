"""
BOQ Bill Controller
Records running bills against a BOQ and serves the upto-date billed
matrix report.
"""
from flask import request, jsonify, g
from sqlalchemy.exc import IntegrityError

from config.constants import AMOUNT_DECIMALS
from config.db import db
from config.logging import get_logger
from models.boq import Boq, BoqItem, BoqBill, BoqBillDetail
from services.boq_bill_matrix import build_billed_matrix
from utils.validators import (
    ValidationError,
    validate_boq_bill,
    validate_date,
    validate_positive_int,
    validation_error_response,
)

log = get_logger()


def create_boq_bill():
    """
    Create a bill with its item quantities.
    Amounts are priced at the BOQ item rate; zero quantity lines are dropped.
    """
    try:
        current_user = g.user
        data = validate_boq_bill(request.get_json(silent=True))

        boq = db.session.get(Boq, data['boq_id'])
        if not boq:
            return jsonify({"error": "BOQ not found"}), 404

        item_ids = sorted({d['boq_item_id'] for d in data['details']})
        rate_by_item = {}
        if item_ids:
            boq_items = BoqItem.query.filter(
                BoqItem.boq_item_id.in_(item_ids),
                BoqItem.boq_id == boq.boq_id
            ).all()
            if len(boq_items) != len(item_ids):
                return jsonify({
                    "error": "One or more BOQ items are invalid for selected BOQ",
                    "field": "details"
                }), 400
            rate_by_item = {item.boq_item_id: float(item.rate or 0) for item in boq_items}

        bill = BoqBill(
            boq_id=boq.boq_id,
            bill_number=data['bill_number'],
            bill_name=data['bill_name'],
            bill_date=data['bill_date'],
            remarks=data['remarks'],
            created_by_id=current_user.get('user_id')
        )

        total_bill_amount = 0.0
        for detail in data['details']:
            if detail['qty'] == 0:
                continue
            amount = round(detail['qty'] * rate_by_item[detail['boq_item_id']], AMOUNT_DECIMALS)
            total_bill_amount += amount
            bill.details.append(BoqBillDetail(
                boq_item_id=detail['boq_item_id'],
                qty=detail['qty'],
                amount=amount
            ))

        bill.total_bill_amount = round(total_bill_amount, AMOUNT_DECIMALS)

        db.session.add(bill)
        db.session.commit()

        log.info(f"BOQ bill {bill.bill_number} created for BOQ {boq.boq_id} by {current_user.get('full_name')}")

        return jsonify({"success": True, "data": bill.to_dict(include_details=True)}), 201

    except ValidationError as e:
        return validation_error_response(e)
    except IntegrityError as e:
        db.session.rollback()
        log.error(f"BOQ bill conflict: {str(e)}")
        return jsonify({"error": "Bill number already exists"}), 409
    except Exception as e:
        db.session.rollback()
        log.error(f"Error creating BOQ bill: {str(e)}")
        return jsonify({"error": "Failed to create boq-bill"}), 500


def get_boq_bills_report():
    """Billed quantity and amount per BOQ item, per bill and upto date"""
    try:
        raw_boq_id = request.args.get('boq_id') or request.args.get('boqId')
        try:
            boq_id = validate_positive_int(raw_boq_id, 'boq_id')
        except ValidationError:
            raise ValidationError("boq_id is required", field='boq_id')

        upto = request.args.get('upto')
        upto_date = validate_date(upto, 'upto') if upto else None

        boq = db.session.get(Boq, boq_id)
        if not boq:
            return jsonify({"error": "BOQ not found"}), 404

        query = BoqBill.query.filter(BoqBill.boq_id == boq.boq_id)
        if upto_date:
            query = query.filter(BoqBill.bill_date <= upto_date)
        bills = query.order_by(BoqBill.bill_date.asc(), BoqBill.boq_bill_id.asc()).all()

        return jsonify({"success": True, "data": build_billed_matrix(boq, bills)}), 200

    except ValidationError as e:
        return validation_error_response(e)
    except Exception as e:
        log.error(f"Error building BOQ bills report: {str(e)}")
        return jsonify({"error": "Failed to fetch BOQ bills report"}), 500
