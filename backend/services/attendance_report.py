"""
Attendance Report Service
Builds the monthly manpower attendance report from rows already loaded
from the database. Used by both the detailed report (daily marks per
worker) and the summary report (totals only).
"""
import calendar
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

TOTAL_KEYS = ('total_present', 'total_absent', 'total_ot', 'total_idle')


def month_date_range(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of a month"""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def _empty_totals() -> Dict:
    return {'total_manpower': 0, 'total_present': 0, 'total_absent': 0, 'total_ot': 0.0, 'total_idle': 0}


def collapse_to_days(attendances: Iterable) -> List:
    """
    Keep one mark per calendar day, in date order.
    When a day has several marks the last one (by attendance id) wins.
    """
    by_day = {}
    for att in sorted(attendances, key=lambda a: (a.date, a.attendance_id or 0)):
        by_day[att.date] = att
    return [by_day[day] for day in sorted(by_day)]


def build_worker_record(manpower, attendances: Iterable, include_daily: bool = True) -> Optional[Dict]:
    """
    Totals for one worker over the given attendance marks.

    Present days count toward total_present and add their overtime;
    present and idle days also count toward total_idle; every other mark
    counts toward total_absent. Returns None when the worker has no marks.
    """
    days = collapse_to_days(attendances)
    if not days:
        return None

    daily_attendance = []
    total_present = 0
    total_absent = 0
    total_ot = 0.0
    total_idle = 0

    for att in days:
        ot = float(att.ot) if att.ot else 0.0
        if include_daily:
            daily_attendance.append({
                'date': att.date.isoformat(),
                'is_present': bool(att.is_present),
                'is_idle': bool(att.is_idle),
                'ot': ot
            })

        if att.is_present:
            total_present += 1
            total_ot += ot
            if att.is_idle:
                total_idle += 1
        else:
            total_absent += 1

    site = manpower.current_site
    supplier = manpower.supplier
    record = {
        'manpower_id': manpower.manpower_id,
        'manpower_name': manpower.full_name,
        'supplier_id': supplier.supplier_id if supplier else None,
        'supplier_name': supplier.supplier_name if supplier else None,
        'category': manpower.category,
        'skill_set': manpower.skill_set,
        'site_id': site.site_id if site else manpower.current_site_id,
        'site_name': site.site if site else None,
        'total_present': total_present,
        'total_absent': total_absent,
        'total_ot': round(total_ot, 2),
        'total_idle': total_idle
    }
    if include_daily:
        record['daily_attendance'] = daily_attendance
    return record


def group_by_site(records: List[Dict], records_key: str) -> Tuple[List[Dict], Dict]:
    """
    Group worker records by site in first-seen order.

    Returns (site_groups, grand_totals). Each group carries its records
    under records_key and a site_totals block.
    """
    groups = {}
    grand_totals = _empty_totals()

    for record in records:
        group = groups.get(record['site_id'])
        if group is None:
            group = {
                'site_id': record['site_id'],
                'site_name': record['site_name'],
                records_key: [],
                'site_totals': _empty_totals()
            }
            groups[record['site_id']] = group

        group[records_key].append(record)
        for totals in (group['site_totals'], grand_totals):
            totals['total_manpower'] += 1
            for key in TOTAL_KEYS:
                totals[key] += record[key]

    for totals in [g['site_totals'] for g in groups.values()] + [grand_totals]:
        totals['total_ot'] = round(totals['total_ot'], 2)

    return list(groups.values()), grand_totals


def build_attendance_report(manpower_list: Iterable, attendances_by_manpower: Dict[int, List],
                            include_daily: bool = True) -> Dict:
    """
    Assemble the monthly report.

    manpower_list must already be in report order (site, supplier, first
    name); attendances_by_manpower maps manpower id to that worker's marks
    inside the month and the requested sites.
    """
    records = []
    for manpower in manpower_list:
        record = build_worker_record(
            manpower,
            attendances_by_manpower.get(manpower.manpower_id, []),
            include_daily=include_daily
        )
        if record is not None:
            records.append(record)

    records_key = 'manpower_records' if include_daily else 'manpower_summaries'
    groups, grand_totals = group_by_site(records, records_key)

    return {
        'data': groups,
        'total_records': len(records),
        'grand_totals': grand_totals
    }
