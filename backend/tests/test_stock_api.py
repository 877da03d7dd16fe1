"""
HTTP tests for opening stock, stock adjustments, closing stock
recomputation and the site stock report.
"""
from models import SiteItem, StockLedger, OpeningStock, StockAdjustment, StockAdjustmentDetail
from services.stock_ledger import StockLedgerCalculator


def _opening(client, headers, site_id, details):
    return client.post('/api/stocks', headers=headers, json={'site_id': site_id, 'details': details})


def _adjust(client, headers, site_id, day, details, remarks=None):
    return client.post('/api/stock-adjustments', headers=headers,
                       json={'date': day, 'site_id': site_id, 'remarks': remarks, 'details': details})


def _site_item(site_id, item_id):
    return SiteItem.query.filter_by(site_id=site_id, item_id=item_id).one()


def _seed_opening(client, headers, seed):
    return _opening(client, headers, seed.main_site_id, [
        {'item_id': seed.cement_id, 'opening_stock': 100, 'opening_rate': 10, 'opening_value': 1000},
        {'item': str(seed.steel_id), 'opening_stock': 50, 'opening_rate': 20, 'opening_value': 1000},
    ])


# ============================================================================
# OPENING STOCK
# ============================================================================

def test_opening_stock_sets_site_item_opening_fields(client, auth_headers, seed):
    response = _seed_opening(client, auth_headers, seed)

    assert response.status_code == 201
    body = response.get_json()['data']
    assert [d['item_code'] for d in body['details']] == ["CEM-01", "STL-01"]

    cement = _site_item(seed.main_site_id, seed.cement_id)
    assert (cement.opening_stock, cement.opening_rate, cement.opening_value) == (100, 10, 1000)
    assert cement.log == 'OPENING_STOCK'
    assert _site_item(seed.main_site_id, seed.steel_id).opening_value == 1000


def test_opening_stock_updates_existing_site_item(client, auth_headers, seed):
    _seed_opening(client, auth_headers, seed)
    _opening(client, auth_headers, seed.main_site_id, [
        {'item_id': seed.cement_id, 'opening_stock': 80, 'opening_rate': 11, 'opening_value': 880},
    ])

    assert SiteItem.query.filter_by(item_id=seed.cement_id).count() == 1
    assert _site_item(seed.main_site_id, seed.cement_id).opening_stock == 80
    assert OpeningStock.query.count() == 2


def test_opening_stock_validation(client, auth_headers, seed):
    duplicate = _opening(client, auth_headers, seed.main_site_id, [
        {'item_id': seed.cement_id, 'opening_stock': 1, 'opening_rate': 1, 'opening_value': 1},
        {'item_id': seed.cement_id, 'opening_stock': 2, 'opening_rate': 1, 'opening_value': 2},
    ])
    assert duplicate.status_code == 400
    assert duplicate.get_json()['error'] == "Duplicate item entries are not allowed"

    too_large = _opening(client, auth_headers, seed.main_site_id, [
        {'item_id': seed.cement_id, 'opening_stock': 1e11, 'opening_rate': 1, 'opening_value': 1},
    ])
    assert too_large.status_code == 400

    assert _opening(client, auth_headers, seed.main_site_id, []).status_code == 400
    assert SiteItem.query.count() == 0


def test_opening_stock_unknown_site_or_item(client, auth_headers, seed):
    detail = {'item_id': seed.cement_id, 'opening_stock': 1, 'opening_rate': 1, 'opening_value': 1}
    assert _opening(client, auth_headers, 9999, [detail]).status_code == 404

    detail['item_id'] = 9999
    response = _opening(client, auth_headers, seed.main_site_id, [detail])
    assert response.status_code == 400
    assert response.get_json()['details'] == {'item_ids': [9999]}


# ============================================================================
# STOCK ADJUSTMENTS
# ============================================================================

def test_first_adjustment_replaces_position_and_writes_ledger(client, auth_headers, seed):
    _seed_opening(client, auth_headers, seed)

    response = _adjust(client, auth_headers, seed.main_site_id, '2026-03-10', [
        {'item_id': seed.cement_id, 'received_qty': 10, 'rate': 12, 'amount': 120},
    ], remarks="Found in store")

    assert response.status_code == 201
    data = response.get_json()['data']
    assert data['site_id'] == seed.main_site_id
    assert data['date'].startswith('2026-03-10T')

    cement = _site_item(seed.main_site_id, seed.cement_id)
    assert (cement.closing_stock, cement.closing_value, cement.unit_rate) == (10, 120, 12)
    assert cement.log == 'SA Update'

    ledgers = StockLedger.query.all()
    assert len(ledgers) == 1
    assert ledgers[0].document_type == 'STOCK ADJUSTMENT'
    assert ledgers[0].stock_adjustment_id == data['id']
    assert (ledgers[0].received_qty, ledgers[0].issued_qty, ledgers[0].unit_rate) == (10, 0, 12)


def test_later_adjustments_move_position(client, auth_headers, seed):
    _adjust(client, auth_headers, seed.main_site_id, '2026-03-10', [
        {'item_id': seed.cement_id, 'received_qty': 10, 'rate': 12, 'amount': 120},
    ])
    response = _adjust(client, auth_headers, seed.main_site_id, '2026-03-11', [
        {'item_id': seed.cement_id, 'issued_qty': 4, 'rate': 12, 'amount': 48},
        {'item_id': seed.sand_id, 'received_qty': 5, 'rate': 2, 'amount': 10},
    ])

    assert response.status_code == 201

    cement = _site_item(seed.main_site_id, seed.cement_id)
    assert (cement.closing_stock, cement.closing_value, cement.unit_rate) == (6, 72, 12)
    assert cement.log == 'SA Issue Update'

    sand = _site_item(seed.main_site_id, seed.sand_id)
    assert (sand.closing_stock, sand.closing_value, sand.unit_rate) == (5, 10, 2)
    assert sand.log == 'SA Init'

    issued = StockLedger.query.filter(StockLedger.issued_qty > 0).one()
    assert issued.item_id == seed.cement_id
    assert issued.issued_qty == 4


def test_issue_only_adjustment_on_new_item(client, auth_headers, seed):
    _adjust(client, auth_headers, seed.main_site_id, '2026-03-10', [
        {'item_id': seed.steel_id, 'issued_qty': 2, 'rate': 5, 'amount': 10},
    ])
    steel = _site_item(seed.main_site_id, seed.steel_id)
    assert steel.log == 'SA Issue Init'
    assert (steel.closing_stock, steel.closing_value, steel.unit_rate) == (-2, -10, 5)


def test_adjustment_validation_leaves_no_rows(client, auth_headers, seed):
    response = _adjust(client, auth_headers, seed.main_site_id, '2026-03-10', [
        {'item_id': seed.cement_id, 'received_qty': -1},
    ])
    assert response.status_code == 400
    assert response.get_json()['field'] == 'details[0].received_qty'

    response = _adjust(client, auth_headers, seed.main_site_id, '2026-03-10', [
        {'item_id': 9999, 'received_qty': 1},
    ])
    assert response.status_code == 400

    assert _adjust(client, auth_headers, 9999, '2026-03-10', [
        {'item_id': seed.cement_id, 'received_qty': 1},
    ]).status_code == 404
    assert StockLedger.query.count() == 0
    assert SiteItem.query.count() == 0


# ============================================================================
# CLOSING STOCK & REPORT
# ============================================================================

def test_update_closing_recomputes_from_ledger(client, auth_headers, seed):
    _seed_opening(client, auth_headers, seed)
    _adjust(client, auth_headers, seed.main_site_id, '2026-03-10', [
        {'item_id': seed.cement_id, 'received_qty': 10, 'rate': 12, 'amount': 120},
    ])
    _adjust(client, auth_headers, seed.main_site_id, '2026-03-11', [
        {'item_id': seed.cement_id, 'issued_qty': 4, 'rate': 12, 'amount': 48},
    ])

    response = client.post('/api/stocks/update-closing', headers=auth_headers)

    assert response.status_code == 200
    assert response.get_json()['data']['updated'] == 2

    cement = _site_item(seed.main_site_id, seed.cement_id)
    assert (cement.closing_stock, cement.closing_value, cement.unit_rate) == (106, 1072, 10.1132)
    assert cement.log == 'CLOSING_STOCK_UPDATE'

    steel = _site_item(seed.main_site_id, seed.steel_id)
    assert (steel.closing_stock, steel.closing_value, steel.unit_rate) == (50, 1000, 20)


def test_site_stock_report(client, auth_headers, seed):
    _seed_opening(client, auth_headers, seed)
    _adjust(client, auth_headers, seed.main_site_id, '2026-03-10', [
        {'item_id': seed.cement_id, 'received_qty': 10, 'rate': 12, 'amount': 120},
    ])
    _adjust(client, auth_headers, seed.main_site_id, '2026-03-08', [
        {'item_id': seed.cement_id, 'issued_qty': 4, 'rate': 12, 'amount': 48},
    ])

    response = client.get(f'/api/stocks/sites/{seed.main_site_id}?end_date=2026-03-10', headers=auth_headers)

    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['site']['site'] == "Main Tower"
    assert data['days'][0] == '2026-03-04'

    cement, steel = data['rows']
    assert cement['unit'] == "bag"
    assert cement['opening'] == 100.0
    assert cement['closing'] == 6.0
    assert cement['per_day'][6] == {'date': '2026-03-10', 'received': 10.0, 'issued': 0.0}
    assert cement['per_day'][4] == {'date': '2026-03-08', 'received': 0.0, 'issued': 4.0}
    assert steel['unit'] is None
    assert all(day['received'] == 0.0 and day['issued'] == 0.0 for day in steel['per_day'])


def test_site_stock_report_errors(client, auth_headers, seed):
    assert client.get('/api/stocks/sites/9999', headers=auth_headers).status_code == 404
    response = client.get(f'/api/stocks/sites/{seed.main_site_id}?end_date=10-03-2026', headers=auth_headers)
    assert response.status_code == 400
    assert response.get_json()['field'] == 'end_date'


# ============================================================================
# MALFORMED INPUT & ATOMICITY
# ============================================================================

def test_stock_writes_reject_array_body(client, auth_headers, seed):
    for url in ('/api/stocks', '/api/stock-adjustments'):
        response = client.post(url, headers=auth_headers, json=[1])
        assert response.status_code == 400
        assert response.get_json()['error'] == "Invalid request body"


def test_adjustment_quantity_too_large_for_float(client, auth_headers, seed):
    response = _adjust(client, auth_headers, seed.main_site_id, '2026-03-10', [
        {'item_id': seed.cement_id, 'received_qty': 10 ** 400},
    ])
    assert response.status_code == 400
    assert response.get_json()['field'] == 'details[0].received_qty'


def test_multi_line_first_adjustment_replaces_every_line(client, auth_headers, seed):
    """The no-ledger rule is decided once per adjustment, not per line"""
    response = _adjust(client, auth_headers, seed.main_site_id, '2026-03-10', [
        {'item_id': seed.cement_id, 'received_qty': 10, 'rate': 12, 'amount': 120},
        {'item_id': seed.sand_id, 'received_qty': 5, 'rate': 2, 'amount': 10},
        {'item_id': seed.cement_id, 'received_qty': 3, 'rate': 12, 'amount': 36},
    ])

    assert response.status_code == 201
    assert StockLedger.query.count() == 3

    cement = _site_item(seed.main_site_id, seed.cement_id)
    assert (cement.closing_stock, cement.closing_value, cement.unit_rate) == (3, 36, 12)
    assert cement.log == 'SA Update'

    sand = _site_item(seed.main_site_id, seed.sand_id)
    assert (sand.closing_stock, sand.closing_value, sand.unit_rate) == (5, 10, 2)
    assert sand.log == 'SA Init'


def test_failed_adjustment_rolls_back_every_write(client, auth_headers, seed, monkeypatch):
    _seed_opening(client, auth_headers, seed)

    calls = []
    original = StockLedgerCalculator.apply_adjustment

    def fail_on_second_line(*args, **kwargs):
        calls.append(1)
        if len(calls) == 2:
            raise RuntimeError("position update failed")
        return original(*args, **kwargs)

    monkeypatch.setattr(StockLedgerCalculator, 'apply_adjustment', fail_on_second_line)

    response = _adjust(client, auth_headers, seed.main_site_id, '2026-03-10', [
        {'item_id': seed.cement_id, 'received_qty': 10, 'rate': 12, 'amount': 120},
        {'item_id': seed.sand_id, 'received_qty': 5, 'rate': 2, 'amount': 10},
    ])

    assert response.status_code == 500
    assert len(calls) == 2
    assert StockAdjustment.query.count() == 0
    assert StockAdjustmentDetail.query.count() == 0
    assert StockLedger.query.count() == 0
    assert SiteItem.query.count() == 2

    cement = _site_item(seed.main_site_id, seed.cement_id)
    assert (cement.closing_stock, cement.closing_value) == (0, 0)
    assert cement.log == 'OPENING_STOCK'
