"""
BOQ Bill Routes
"""
from flask import Blueprint
from controllers.boq_bill_controller import create_boq_bill, get_boq_bills_report
from utils.authentication import jwt_required


boq_bill_routes = Blueprint('boq_bill', __name__, url_prefix='/api')


@boq_bill_routes.route('/boq-bills', methods=['POST'])
@jwt_required
def add_boq_bill():
    return create_boq_bill()


@boq_bill_routes.route('/reports/boq-bills', methods=['GET'])
@jwt_required
def boq_bills_report():
    """Billed matrix for one BOQ"""
    return get_boq_bills_report()
