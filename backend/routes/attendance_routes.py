"""
Attendance Routes
Site attendance marking and monthly manpower attendance reports.
"""
from flask import Blueprint
from controllers.attendance_controller import (
    record_attendance,
    get_attendance_report,
    get_attendance_summary,
)
from utils.authentication import jwt_required


attendance_routes = Blueprint('attendance', __name__, url_prefix='/api')


@attendance_routes.route('/attendances', methods=['POST'])
@jwt_required
def mark_attendance():
    """Mark attendance for a site on one date"""
    return record_attendance()


@attendance_routes.route('/attendance-reports', methods=['GET'])
@jwt_required
def attendance_report():
    """Monthly attendance report with daily marks"""
    return get_attendance_report()


@attendance_routes.route('/attendance-reports/summary', methods=['GET'])
@jwt_required
def attendance_summary():
    """Monthly attendance totals per worker"""
    return get_attendance_summary()
