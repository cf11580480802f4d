from printflow.extensions import db
from printflow.models import Order
from printflow.constants import OrderStatus

from conftest import DAY, NEXT_DAY


def create_order(client, orderno='5001', order_type='Roland', **extra):
    payload = {'orderno': orderno, 'customer_name': 'Acme Signs', 'type': order_type}
    payload.update(extra)
    resp = client.post('/api/create-order', json=payload)
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()['data'][0]


def timeline(client, day=DAY, **params):
    resp = client.get('/api/timeline', query_string={'date': day.isoformat(), **params})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()['timeline']


def test_timeline_requires_login(client):
    resp = client.get('/api/timeline')
    assert resp.status_code == 401
    assert resp.get_json()['status'] == 'error'


def test_create_order_starts_unplaced(staff_client, designer):
    order = create_order(staff_client, deadline='2024-06-03T12:00:00Z')
    assert order['timeline_position'] is None
    assert order['timeline_date'] is None
    assert order['status'] == OrderStatus.PENDING
    assert order['user_id'] == designer.id
    assert order['deadline'].startswith('2024-06-03T12:00')

    data = timeline(staff_client)
    assert [c['id'] for c in data['queue']] == [order['id']]
    assert data['queue'][0]['title'] == 'Order'
    assert data['queue'][0]['size'] == 'Qty: 1'


def test_create_order_validation(staff_client):
    resp = staff_client.post('/api/create-order', json={'orderno': '1', 'type': 'Roland'})
    assert resp.status_code == 400
    assert 'error' in resp.get_json()

    resp = staff_client.post('/api/create-order', json={'orderno': '1', 'customer_name': 'X', 'type': 'Plasma'})
    assert resp.status_code == 400

    resp = staff_client.post('/api/create-order',
                             json={'orderno': '1', 'customer_name': 'X', 'type': 'Roland', 'deadline': 'soon'})
    assert resp.status_code == 400


def test_move_places_order_on_viewed_day(staff_client):
    order = create_order(staff_client)
    resp = staff_client.post('/api/timeline/move',
                             json={'order_id': order['id'], 'tick_id': 'tick-3', 'date': DAY.isoformat()})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['tickId'] == 'tick-3'
    assert [c['id'] for c in body['timeline']['ticks'][3]['cubes']] == [order['id']]

    stored = db.session.get(Order, order['id'])
    db.session.refresh(stored)
    assert stored.timeline_position == 'tick-3'
    assert stored.timeline_date == DAY

    # Gone from the next day's view
    assert timeline(staff_client, NEXT_DAY)['queue'] == []
    assert all(t['cubes'] == [] for t in timeline(staff_client, NEXT_DAY)['ticks'])


def test_move_rejects_bad_tick_and_foreign_day(staff_client):
    order = create_order(staff_client)
    resp = staff_client.post('/api/timeline/move',
                             json={'order_id': order['id'], 'tick_id': 'tick-24', 'date': DAY.isoformat()})
    assert resp.status_code == 400

    staff_client.post('/api/timeline/move',
                      json={'order_id': order['id'], 'tick_id': 'tick-1', 'date': DAY.isoformat()})
    resp = staff_client.post('/api/timeline/move',
                             json={'order_id': order['id'], 'tick_id': 'tick-2', 'date': NEXT_DAY.isoformat()})
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'Order is not on this timeline.'


def test_invalid_date_is_rejected(staff_client):
    resp = staff_client.get('/api/timeline', query_string={'date': '2024-13-40'})
    assert resp.status_code == 400


def test_place_uses_least_loaded_tick(staff_client):
    first = create_order(staff_client, '1')
    second = create_order(staff_client, '2')
    staff_client.post('/api/timeline/move', json={'order_id': first['id'], 'tick_id': 'tick-0', 'date': DAY.isoformat()})

    resp = staff_client.post('/api/timeline/place', json={'order_id': second['id'], 'date': DAY.isoformat()})
    assert resp.status_code == 200
    assert resp.get_json()['tickId'] == 'tick-1'


def test_complete_order(staff_client):
    order = create_order(staff_client)
    resp = staff_client.post('/api/timeline/complete', json={'order_id': order['id'], 'date': DAY.isoformat()})
    assert resp.status_code == 200
    assert resp.get_json()['timeline']['summary']['completed'] == 1

    stored = db.session.get(Order, order['id'])
    db.session.refresh(stored)
    assert stored.status == OrderStatus.COMPLETED
    assert stored.completed_at is not None


def test_assign_and_unassign(staff_client, operator):
    order = create_order(staff_client)
    resp = staff_client.post('/api/timeline/assign',
                             json={'order_id': order['id'], 'user_id': operator.id, 'date': DAY.isoformat()})
    assert resp.status_code == 200
    assert resp.get_json()['timeline']['assignments'] == {str(order['id']): operator.id}

    resp = staff_client.post('/api/timeline/assign',
                             json={'order_id': order['id'], 'user_id': None, 'date': DAY.isoformat()})
    assert resp.status_code == 200
    assert resp.get_json()['timeline']['assignments'] == {}


def test_assign_unknown_user(staff_client):
    order = create_order(staff_client)
    resp = staff_client.post('/api/timeline/assign',
                             json={'order_id': order['id'], 'user_id': 999, 'date': DAY.isoformat()})
    assert resp.status_code == 404


def test_filter_by_type(staff_client):
    create_order(staff_client, '1', 'Roland')
    create_order(staff_client, '2', 'Laser')
    data = timeline(staff_client, types='Laser')
    assert [c['orderno'] for c in data['queue']] == ['2']
    assert data['types']['Roland'] == 1
    assert data['summary']['total'] == 1

    resp = staff_client.get('/api/timeline', query_string={'types': 'Plasma'})
    assert resp.status_code == 400


def test_search_reports_scroll_offset(staff_client):
    order = create_order(staff_client, '7777')
    staff_client.post('/api/timeline/move', json={'order_id': order['id'], 'tick_id': 'tick-5', 'date': DAY.isoformat()})

    resp = staff_client.get('/api/timeline/search', query_string={'orderno': '7777', 'date': NEXT_DAY.isoformat()})
    body = resp.get_json()
    assert body['state'] == 'placed'
    assert body['date'] == DAY.isoformat()
    assert body['tickIndex'] == 5
    assert body['scrollOffset'] == 750

    resp = staff_client.get('/api/timeline/search', query_string={'orderno': 'nope'})
    assert resp.get_json()['state'] == 'not_found'

    resp = staff_client.get('/api/timeline/search', query_string={'orderno': ''})
    assert resp.status_code == 400


def test_order_detail_and_list(staff_client):
    order = create_order(staff_client)
    resp = staff_client.get(f"/api/orders/{order['id']}")
    assert resp.status_code == 200
    assert resp.get_json()['order']['title'] == 'Order'

    assert staff_client.get('/api/orders/999').status_code == 404

    resp = staff_client.get('/api/orders', query_string={'status': 'completed'})
    assert resp.get_json()['orders'] == []


def test_track_order_is_public(client, app):
    assert client.get('/api/track-order').status_code == 400
    assert client.get('/api/track-order', query_string={'orderno': '42'}).get_json()['state'] == 'not_found'

    order = Order(order_no='42', customer_name='Walk-in', type='Digital', status=OrderStatus.PENDING)
    db.session.add(order)
    db.session.commit()
    assert client.get('/api/track-order', query_string={'orderno': '42'}).get_json()['state'] == 'unplaced'

    order.timeline_position = 'tick-8'
    order.timeline_date = DAY
    db.session.commit()
    body = client.get('/api/track-order', query_string={'orderno': '42'}).get_json()
    assert body['state'] == 'found'
    assert body['order']['slot'] == '9:00'
    assert body['order']['statusLabel'] == 'In Progress'


def test_export_returns_workbook(staff_client):
    order = create_order(staff_client)
    staff_client.post('/api/timeline/move', json={'order_id': order['id'], 'tick_id': 'tick-2', 'date': DAY.isoformat()})
    resp = staff_client.get('/api/timeline/export', query_string={'date': DAY.isoformat()})
    assert resp.status_code == 200
    assert resp.data[:2] == b'PK'
    assert 'timeline_20240601.xlsx' in resp.headers['Content-Disposition']


def test_health(client):
    assert client.get('/health').get_json()['status'] == 'ok'


def test_completed_order_cannot_be_moved(staff_client):
    order = create_order(staff_client)
    staff_client.post('/api/timeline/move', json={'order_id': order['id'], 'tick_id': 'tick-3', 'date': DAY.isoformat()})
    staff_client.post('/api/timeline/complete', json={'order_id': order['id'], 'date': DAY.isoformat()})

    resp = staff_client.post('/api/timeline/move',
                             json={'order_id': order['id'], 'tick_id': 'tick-7', 'date': DAY.isoformat()})
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'Completed orders cannot be moved.'

    resp = staff_client.post('/api/timeline/place', json={'order_id': order['id'], 'date': DAY.isoformat()})
    assert resp.status_code == 400

    stored = db.session.get(Order, order['id'])
    db.session.refresh(stored)
    assert stored.timeline_position == 'tick-3'
    assert stored.timeline_date == DAY
