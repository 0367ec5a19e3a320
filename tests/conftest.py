from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from flask import g

from freightbid.app import create_app
from freightbid.models import db, User, Lane, Bid, ROLE_ADMIN, ROLE_FORWARDER

PASSWORDS = {
    'admin': 'admin123',
    'forwarder': 'forward1',
    'carrier': 'carrier1',
}


class RecordingEmailService:
    """Stands in for the SendGrid-backed service and keeps what would be sent."""

    enabled = True

    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    def send_lane_notification(self, emails, lane):
        if self.fail:
            raise RuntimeError('SMTP relay unavailable')
        self.sent.append((sorted(emails), lane.id))
        return True


@pytest.fixture
def app():
    app = create_app('testing')

    @app.before_request
    def forget_loaded_user():
        # Requests reuse the fixture's app context; load the user from each client's own cookie
        g.pop('_login_user', None)

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def outbox(app):
    service = RecordingEmailService()
    app.extensions['email_service'] = service
    return service


@pytest.fixture
def users(app):
    admin = User(username='admin', password=PASSWORDS['admin'], email='admin@example.com',
                 company_name='Admin Company', role=ROLE_ADMIN)
    forwarder = User(username='forwarder', password=PASSWORDS['forwarder'], email='ops@freightco.example',
                     company_name='Freight Co.', role=ROLE_FORWARDER)
    carrier = User(username='carrier', password=PASSWORDS['carrier'], email='bids@roadrunners.example',
                   company_name='Road Runners', role=ROLE_FORWARDER)
    db.session.add_all([admin, forwarder, carrier])
    db.session.commit()
    return {'admin': admin, 'forwarder': forwarder, 'carrier': carrier}


def login(client, username):
    response = client.post('/api/login', json={'username': username, 'password': PASSWORDS[username]})
    assert response.status_code == 200, response.get_json()
    return client


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app, users):
    return login(app.test_client(), 'admin')


@pytest.fixture
def forwarder_client(app, users):
    return login(app.test_client(), 'forwarder')


@pytest.fixture
def carrier_client(app, users):
    return login(app.test_client(), 'carrier')


@pytest.fixture
def make_lane(users):
    created = []

    def _make(**overrides):
        # Each lane is a minute newer than the previous one
        values = {
            'bid_name': 'Hamburg - Munich weekly',
            'status': 'active',
            'vehicle_type': '40t',
            'loading_location': 'Hamburg',
            'unloading_location': 'Munich',
            'valid_from': datetime(2025, 1, 1),
            'valid_until': datetime(2025, 12, 31),
            'created_at': datetime(2025, 1, 1, 8, 0) + timedelta(minutes=len(created)),
            'created_by': users['admin'].id,
        }
        values.update(overrides)
        lane = Lane(**values)
        db.session.add(lane)
        db.session.commit()
        created.append(lane)
        return lane

    return _make


@pytest.fixture
def make_bid(users):
    created = []

    def _make(lane, user, amount, **overrides):
        values = {
            'lane_id': lane.id,
            'user_id': user.id,
            'amount': Decimal(str(amount)),
            'created_at': datetime(2025, 2, 1, 9, 0) + timedelta(minutes=len(created)),
        }
        values.update(overrides)
        bid = Bid(**values)
        db.session.add(bid)
        db.session.commit()
        created.append(bid)
        return bid

    return _make


@pytest.fixture
def lane_payload():
    return {
        'bidName': 'Bremen - Vienna',
        'status': 'active',
        'vehicleType': '12t',
        'loadingLocation': 'Bremen',
        'unloadingLocation': 'Vienna',
        'validFrom': '2025-03-01T00:00:00.000Z',
        'validUntil': '2025-03-31T00:00:00.000Z',
    }
