from datetime import datetime
from decimal import Decimal

import pytest

from freightbid.services.amounts import parse_amount, amount_to_json, to_decimal
from freightbid.services.date_utils import parse_datetime, format_datetime_for_response, get_timezone
from freightbid.services.email_service import EmailService
from freightbid.services.lane_queries import LaneFilters, get_lanes, get_bid_count_for_lane
from freightbid.services.validation import validate_registration, validate_bid_payload


class FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code


class FakeSendGridClient:
    def __init__(self, status_code=202):
        self.status_code = status_code
        self.messages = []

    def send(self, message):
        self.messages.append(message.get())
        return FakeResponse(self.status_code)


@pytest.mark.parametrize('raw, expected', [
    (100, Decimal('100.00')),
    (99.995, Decimal('100.00')),
    ('1250.5', Decimal('1250.50')),
    (' 42 ', Decimal('42.00')),
    ('0.005', Decimal('0.01')),
    ('99999999.99', Decimal('99999999.99')),
])
def test_parse_amount_accepts(raw, expected):
    assert parse_amount(raw) == (expected, None)


@pytest.mark.parametrize('raw', [None, '', 0, -1, '0.004', 'abc', 'NaN', 'Infinity', True, False,
                                 {'value': 1}, '100000000', '-1e400'])
def test_parse_amount_rejects(raw):
    amount, error = parse_amount(raw)
    assert amount is None
    assert error


def test_amount_to_json():
    assert amount_to_json(None) is None
    assert amount_to_json(Decimal('300')) == 300.0
    assert amount_to_json(12.345) == 12.35
    assert to_decimal(None) is None


def test_parse_datetime_formats():
    assert parse_datetime('2025-03-01T00:00:00.000Z') == datetime(2025, 3, 1)
    assert parse_datetime('2025-03-01') == datetime(2025, 3, 1)
    assert parse_datetime('2025-03-01T10:30:00+02:00') == datetime(2025, 3, 1, 8, 30)
    assert parse_datetime(datetime(2025, 3, 1, 12)) == datetime(2025, 3, 1, 12)


def test_parse_datetime_reads_naive_values_in_configured_zone():
    assert parse_datetime('2025-07-01T12:00:00', 'Europe/Berlin') == datetime(2025, 7, 1, 10)
    assert parse_datetime('2025-07-01T12:00:00', 'Not/AZone') == datetime(2025, 7, 1, 12)


@pytest.mark.parametrize('raw', [None, '', 'tomorrow', '2025-13-01', 20250301,
                                 '0001-01-01T00:00:00+01:00', '9999-12-31T23:30:00-01:00'])
def test_parse_datetime_rejects(raw):
    with pytest.raises(ValueError):
        parse_datetime(raw)


def test_format_datetime_for_response():
    assert format_datetime_for_response(None) is None
    assert format_datetime_for_response(datetime(2025, 3, 1, 8, 30)) == '2025-03-01T08:30:00+00:00'
    assert get_timezone(None).zone == 'UTC'


def test_lane_filters_drop_all_and_blanks():
    filters = LaneFilters.from_args({
        'status': 'all',
        'vehicleType': 'van',
        'loadingLocation': '  ',
        'unloadingLocation': ' Vienna ',
    })

    assert filters == LaneFilters(status=None, vehicle_type='van', loading_location=None,
                                  unloading_location='Vienna')


def test_location_filter_treats_wildcards_literally(app, make_lane):
    make_lane(bid_name='percent', loading_location='Depot 100% full')
    make_lane(bid_name='plain', loading_location='Depot 1000')
    make_lane(bid_name='underscore', loading_location='Gate_7')
    make_lane(bid_name='letter', loading_location='GateX7')

    assert [s.lane.bid_name for s in get_lanes(LaneFilters(loading_location='0%'))] == ['percent']
    assert [s.lane.bid_name for s in get_lanes(LaneFilters(loading_location='e_7'))] == ['underscore']


def test_bid_count_for_lane(app, make_lane, make_bid, users):
    lane = make_lane()
    assert get_bid_count_for_lane(lane.id) == 0

    make_bid(lane, users['forwarder'], 10)
    make_bid(lane, users['carrier'], 20)

    assert get_bid_count_for_lane(lane.id) == 2


def test_validate_registration_trims_and_maps_fields():
    values, error = validate_registration({
        'username': '  newco ',
        'password': 'secret1',
        'email': 'ops@newco.example',
        'companyName': ' NewCo ',
        'role': 'admin',
    })

    assert error is None
    assert values == {
        'username': 'newco',
        'password': 'secret1',
        'email': 'ops@newco.example',
        'company_name': 'NewCo',
    }


def test_validate_bid_payload_comment_handling():
    values, error = validate_bid_payload({'amount': 10, 'comment': '   '})
    assert error is None
    assert values['comment'] is None

    _, error = validate_bid_payload({'amount': 10, 'comment': 'x' * 2001})
    assert error

    _, error = validate_bid_payload({'amount': 10, 'comment': 42})
    assert error

    _, error = validate_bid_payload(None)
    assert error == 'No data provided'


def test_email_service_without_key_is_disabled(app, make_lane):
    service = EmailService(api_key=None, from_email='noreply@example.com')

    assert service.enabled is False
    assert service.send_lane_notification(['ops@freightco.example'], make_lane()) is False


def test_email_service_renders_lane(make_lane):
    service = EmailService(api_key=None, frontend_url='https://tenders.example')
    lane = make_lane(bid_name='Rotterdam <night run>', loading_location='Rotterdam')

    html = service.render_lane_notification(lane)

    assert 'Rotterdam &lt;night run&gt;' in html
    assert '01 Jan 2025 00:00 UTC' in html
    assert 'https://tenders.example' in html


def test_email_service_sends_one_personalization_per_recipient(make_lane):
    service = EmailService(api_key='SG.test-key', from_email='noreply@example.com',
                           from_name='Freight Lane Tenders')
    service.client = FakeSendGridClient()
    lane = make_lane()

    sent = service.send_lane_notification(['a@one.example', 'b@two.example'], lane)

    assert sent is True
    payload = service.client.messages[0]
    assert payload['subject'] == 'New Lane Published: Hamburg - Munich weekly'
    assert sorted(p['to'][0]['email'] for p in payload['personalizations']) == ['a@one.example', 'b@two.example']
    assert payload['from']['email'] == 'noreply@example.com'


def test_email_service_reports_rejected_send(make_lane):
    service = EmailService(api_key='SG.test-key', from_email='noreply@example.com')
    service.client = FakeSendGridClient(status_code=400)

    assert service.send_lane_notification(['a@one.example'], make_lane()) is False


def test_email_service_skips_empty_recipient_list(make_lane):
    service = EmailService(api_key='SG.test-key', from_email='noreply@example.com')
    service.client = FakeSendGridClient()

    assert service.send_lane_notification([], make_lane()) is False
    assert service.client.messages == []
