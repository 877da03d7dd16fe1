"""
Unit tests for the monthly attendance report builder.
Rows are plain namespaces so no database is needed.
"""
from datetime import date
from types import SimpleNamespace

from services.attendance_report import (
    build_attendance_report,
    build_worker_record,
    collapse_to_days,
    group_by_site,
    month_date_range,
)


def _site(site_id, name):
    return SimpleNamespace(site_id=site_id, site=name)


def _worker(manpower_id, name, site, category="skilled", skill_set="Mason"):
    return SimpleNamespace(
        manpower_id=manpower_id,
        full_name=name,
        supplier=SimpleNamespace(supplier_id=1, supplier_name="Alpha Labour"),
        category=category,
        skill_set=skill_set,
        current_site=site,
        current_site_id=site.site_id,
    )


def _mark(attendance_id, day, is_present, is_idle=False, ot=None):
    return SimpleNamespace(attendance_id=attendance_id, date=day, is_present=is_present,
                           is_idle=is_idle, ot=ot)


def test_month_date_range_handles_leap_february():
    assert month_date_range(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_date_range(2026, 12) == (date(2026, 12, 1), date(2026, 12, 31))


def test_collapse_to_days_keeps_last_mark_per_day():
    """Two marks on the same day collapse to the one with the higher id"""
    marks = [
        _mark(5, date(2026, 3, 2), False),
        _mark(2, date(2026, 3, 1), True),
        _mark(3, date(2026, 3, 2), True),
        _mark(9, date(2026, 3, 2), True, ot=1),
    ]
    days = collapse_to_days(marks)
    assert [d.attendance_id for d in days] == [2, 9]


def test_worker_record_totals():
    """Present days add overtime, idle days are present, the rest are absent"""
    site = _site(1, "Main Tower")
    worker = _worker(10, "Ravi Kumar", site)
    marks = [
        _mark(1, date(2026, 3, 2), True, ot=2),
        _mark(2, date(2026, 3, 3), True, is_idle=True, ot=1.25),
        _mark(3, date(2026, 3, 4), False, ot=4),
    ]

    record = build_worker_record(worker, marks)

    assert record['total_present'] == 2
    assert record['total_absent'] == 1
    assert record['total_idle'] == 1
    assert record['total_ot'] == 3.25
    assert record['site_name'] == "Main Tower"
    assert [d['date'] for d in record['daily_attendance']] == ['2026-03-02', '2026-03-03', '2026-03-04']


def test_worker_without_marks_is_dropped():
    worker = _worker(10, "Ravi Kumar", _site(1, "Main Tower"))
    assert build_worker_record(worker, []) is None


def test_summary_record_has_no_daily_entries():
    worker = _worker(10, "Ravi Kumar", _site(1, "Main Tower"))
    record = build_worker_record(worker, [_mark(1, date(2026, 3, 2), True)], include_daily=False)
    assert 'daily_attendance' not in record
    assert record['total_present'] == 1


def test_group_by_site_keeps_first_seen_order_and_totals():
    records = [
        {'site_id': 2, 'site_name': 'Annex', 'total_present': 1, 'total_absent': 0, 'total_ot': 0.1, 'total_idle': 0},
        {'site_id': 1, 'site_name': 'Main', 'total_present': 2, 'total_absent': 1, 'total_ot': 0.2, 'total_idle': 1},
        {'site_id': 2, 'site_name': 'Annex', 'total_present': 3, 'total_absent': 2, 'total_ot': 0.0, 'total_idle': 0},
    ]

    groups, grand_totals = group_by_site(records, 'manpower_records')

    assert [g['site_id'] for g in groups] == [2, 1]
    assert groups[0]['site_totals'] == {
        'total_manpower': 2, 'total_present': 4, 'total_absent': 2, 'total_ot': 0.1, 'total_idle': 0
    }
    assert len(groups[0]['manpower_records']) == 2
    assert grand_totals['total_manpower'] == 3
    assert grand_totals['total_ot'] == 0.3


def test_build_attendance_report_counts_only_workers_with_marks():
    main = _site(1, "Main Tower")
    ravi = _worker(10, "Ravi Kumar", main)
    ali = _worker(11, "Ali Khan", main)
    report = build_attendance_report(
        [ravi, ali],
        {10: [_mark(1, date(2026, 3, 2), True, ot=2)]},
        include_daily=False,
    )

    assert report['total_records'] == 1
    assert report['data'][0]['manpower_summaries'][0]['manpower_name'] == "Ravi Kumar"
    assert report['grand_totals']['total_ot'] == 2.0
