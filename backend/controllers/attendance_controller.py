"""
Attendance Controller
Handles site attendance marking and the monthly manpower attendance
reports (detailed per-day report and totals-only summary).
"""
from flask import request, jsonify, g
from sqlalchemy.exc import IntegrityError

from config.db import db
from config.logging import get_logger
from models.manpower import Manpower, ManpowerSupplier, Attendance
from models.site import Site
from services.attendance_report import build_attendance_report, month_date_range
from utils.validators import (
    ValidationError,
    parse_id_list,
    validate_attendance_batch,
    validate_month,
    validation_error_response,
)

log = get_logger()


# =============================================================================
# ATTENDANCE MARKING
# =============================================================================

def record_attendance():
    """
    Mark attendance for a site on one date.
    Existing marks for the same (date, site, manpower) are overwritten.
    """
    try:
        current_user = g.user
        data = validate_attendance_batch(request.get_json(silent=True))

        site = db.session.get(Site, data['site_id'])
        if not site:
            return jsonify({"error": "Site not found"}), 404

        manpower_ids = [row['manpower_id'] for row in data['attendances']]
        if manpower_ids:
            known_ids = {
                m.manpower_id for m in
                Manpower.query.filter(Manpower.manpower_id.in_(manpower_ids))
                .with_entities(Manpower.manpower_id).all()
            }
            unknown = sorted(set(manpower_ids) - known_ids)
            if unknown:
                return jsonify({
                    "error": "Unknown manpower",
                    "field": "attendances",
                    "details": {"manpower_ids": unknown}
                }), 400

        existing = {}
        if manpower_ids:
            existing = {
                att.manpower_id: att for att in Attendance.query.filter(
                    Attendance.date == data['date'],
                    Attendance.site_id == data['site_id'],
                    Attendance.manpower_id.in_(manpower_ids)
                ).all()
            }

        saved = []
        for row in data['attendances']:
            # An idle worker is on site, so always counts as present
            is_present = True if row['is_idle'] else row['is_present']

            attendance = existing.get(row['manpower_id'])
            if attendance is None:
                attendance = Attendance(
                    date=data['date'],
                    site_id=data['site_id'],
                    manpower_id=row['manpower_id']
                )
                db.session.add(attendance)

            attendance.is_present = is_present
            attendance.is_idle = row['is_idle']
            attendance.ot = row['ot']
            saved.append(attendance)

        db.session.commit()

        log.info(f"Attendance recorded for site {site.site_id} on {data['date']}: "
                 f"{len(saved)} marks by {current_user.get('full_name')}")

        return jsonify({
            "success": True,
            "data": {
                "count": len(saved),
                "attendances": [att.to_dict() for att in saved]
            }
        }), 201

    except ValidationError as e:
        return validation_error_response(e)
    except IntegrityError as e:
        db.session.rollback()
        log.error(f"Attendance conflict: {str(e)}")
        return jsonify({"error": "Attendance was modified concurrently, please retry"}), 409
    except Exception as e:
        db.session.rollback()
        log.error(f"Error recording attendance: {str(e)}")
        return jsonify({"error": "Failed to record attendance"}), 500


# =============================================================================
# MONTHLY REPORTS
# =============================================================================

def _report_filters():
    """Parse and validate the report query string"""
    site_ids_param = request.args.get('site_ids') or request.args.get('siteIds')
    month = request.args.get('month')

    if not site_ids_param or not month:
        raise ValidationError("Site IDs and month are required")

    site_ids = parse_id_list(site_ids_param)
    if not site_ids:
        raise ValidationError("At least one valid site ID is required", field="site_ids")

    year, month_num = validate_month(month)

    return {
        'site_ids': site_ids,
        'month': month,
        'year': year,
        'month_num': month_num,
        'category': request.args.get('category') or None,
        'skill_set': request.args.get('skill_set') or request.args.get('skillSet') or None
    }


def _build_report(include_daily):
    filters = _report_filters()
    start_date, end_date = month_date_range(filters['year'], filters['month_num'])

    query = Manpower.query.join(
        ManpowerSupplier, Manpower.supplier_id == ManpowerSupplier.supplier_id
    ).filter(
        Manpower.is_assigned == True,
        Manpower.current_site_id.in_(filters['site_ids'])
    )
    if filters['category']:
        query = query.filter(Manpower.category == filters['category'])
    if filters['skill_set']:
        query = query.filter(Manpower.skill_set == filters['skill_set'])

    manpower_list = query.order_by(
        Manpower.current_site_id.asc(),
        ManpowerSupplier.supplier_name.asc(),
        Manpower.first_name.asc(),
        Manpower.manpower_id.asc()
    ).all()

    attendances_by_manpower = {}
    manpower_ids = [m.manpower_id for m in manpower_list]
    if manpower_ids:
        attendances = Attendance.query.filter(
            Attendance.manpower_id.in_(manpower_ids),
            Attendance.site_id.in_(filters['site_ids']),
            Attendance.date >= start_date,
            Attendance.date <= end_date
        ).order_by(Attendance.date.asc(), Attendance.attendance_id.asc()).all()

        for att in attendances:
            attendances_by_manpower.setdefault(att.manpower_id, []).append(att)

    report = build_attendance_report(manpower_list, attendances_by_manpower, include_daily=include_daily)
    report['filters'] = {
        'site_ids': filters['site_ids'],
        'month': filters['month'],
        'category': filters['category'],
        'skill_set': filters['skill_set']
    }
    return report


def get_attendance_report():
    """Monthly attendance with daily marks per worker, grouped by site"""
    try:
        return jsonify({"success": True, "data": _build_report(include_daily=True)}), 200
    except ValidationError as e:
        return validation_error_response(e)
    except Exception as e:
        log.error(f"Error building attendance report: {str(e)}")
        return jsonify({"error": "Failed to fetch attendance report"}), 500


def get_attendance_summary():
    """Monthly attendance totals per worker, grouped by site"""
    try:
        return jsonify({"success": True, "data": _build_report(include_daily=False)}), 200
    except ValidationError as e:
        return validation_error_response(e)
    except Exception as e:
        log.error(f"Error building attendance summary: {str(e)}")
        return jsonify({"error": "Failed to fetch manpower attendance summary"}), 500
