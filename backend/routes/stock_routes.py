"""
Stock Routes
Opening stock, stock adjustments, closing stock recomputation and the
site stock report.
"""
from flask import Blueprint
from controllers.stock_controller import (
    create_opening_stock,
    create_stock_adjustment,
    update_closing_stock,
    get_site_stock_report,
)
from utils.authentication import jwt_required


stock_routes = Blueprint('stock', __name__, url_prefix='/api')


# ============================================================================
# STOCK DOCUMENTS
# ============================================================================

@stock_routes.route('/stocks', methods=['POST'])
@jwt_required
def add_opening_stock():
    """Record opening stock for a site"""
    return create_opening_stock()


@stock_routes.route('/stock-adjustments', methods=['POST'])
@jwt_required
def add_stock_adjustment():
    """Receive/issue correction of site stock"""
    return create_stock_adjustment()


# ============================================================================
# CLOSING STOCK & REPORTS
# ============================================================================

@stock_routes.route('/stocks/update-closing', methods=['POST'])
@jwt_required
def recompute_closing_stock():
    return update_closing_stock()


@stock_routes.route('/stocks/sites/<int:site_id>', methods=['GET'])
@jwt_required
def site_stock_report(site_id):
    """Last seven days of stock movement at a site"""
    return get_site_stock_report(site_id)
