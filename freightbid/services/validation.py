# freightbid/services/validation.py
"""
Request payload validation.

Every validator returns a ``(values, error_message)`` tuple: ``values`` is
ready to be applied to a model when ``error_message`` is None.
"""
import re
import logging

from ..models import LANE_STATUSES, VEHICLE_TYPES
from .amounts import parse_amount
from .date_utils import parse_datetime

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

# API field name -> Lane column for the free-text fields
LANE_TEXT_FIELDS = {
    'bidName': 'bid_name',
    'loadingLocation': 'loading_location',
    'unloadingLocation': 'unloading_location',
}

FIELD_LABELS = {
    'bidName': 'Bid name',
    'loadingLocation': 'Loading location',
    'unloadingLocation': 'Unloading location',
    'validFrom': 'Valid from',
    'validUntil': 'Valid until',
}

MAX_COMMENT_LENGTH = 2000


def _clean_text(value):
    if not isinstance(value, str):
        return None
    return value.strip()


def validate_registration(data):
    """Validate an admin-submitted account. The role is never read from ``data``."""
    if not isinstance(data, dict):
        return None, "No data provided"

    username = _clean_text(data.get('username'))
    password = data.get('password') if isinstance(data.get('password'), str) else ''
    email = _clean_text(data.get('email'))
    company_name = _clean_text(data.get('companyName'))

    if not username or len(username) < 3:
        return None, "Username must be at least 3 characters"
    if len(username) > 64:
        return None, "Username must be at most 64 characters"
    if len(password) < 6:
        return None, "Password must be at least 6 characters"
    if not email or not EMAIL_PATTERN.match(email):
        return None, "Please enter a valid email address"
    if not company_name:
        return None, "Company name is required"

    return {
        'username': username,
        'password': password,
        'email': email,
        'company_name': company_name,
    }, None


def validate_lane_payload(data, partial=False, tz_name=None):
    """
    Validate lane fields for create (``partial=False``, every field required)
    or update (``partial=True``, only supplied fields are checked).

    Returns:
        tuple: (dict of Lane column values, None) or (None, error_message)
    """
    if not isinstance(data, dict):
        return None, "No data provided"

    values = {}

    for field, column in LANE_TEXT_FIELDS.items():
        if field not in data:
            if not partial:
                return None, f"{FIELD_LABELS[field]} is required"
            continue
        text = _clean_text(data[field])
        if not text:
            return None, f"{FIELD_LABELS[field]} is required"
        if len(text) > 200:
            return None, f"{FIELD_LABELS[field]} must be at most 200 characters"
        values[column] = text

    if 'status' in data:
        if data['status'] not in LANE_STATUSES:
            return None, f"Status must be one of: {', '.join(LANE_STATUSES)}"
        values['status'] = data['status']
    elif not partial:
        values['status'] = 'active'

    if 'vehicleType' in data:
        if data['vehicleType'] not in VEHICLE_TYPES:
            return None, f"Vehicle type must be one of: {', '.join(VEHICLE_TYPES)}"
        values['vehicle_type'] = data['vehicleType']
    elif not partial:
        return None, "Vehicle type is required"

    for field, column in (('validFrom', 'valid_from'), ('validUntil', 'valid_until')):
        if field not in data:
            if not partial:
                return None, f"{FIELD_LABELS[field]} date is required"
            continue
        try:
            values[column] = parse_datetime(data[field], tz_name)
        except ValueError as e:
            logger.info(f"Rejected {field} value {data[field]!r}: {e}")
            return None, f"{FIELD_LABELS[field]} must be a valid date"

    if not partial and values['valid_from'] >= values['valid_until']:
        return None, "Valid until date must be after valid from date"

    return values, None


def check_validity_window(valid_from, valid_until):
    """Validity window check for a lane after an update has been merged."""
    if valid_from >= valid_until:
        return False, "Valid until date must be after valid from date"
    return True, None


def validate_bid_payload(data):
    """
    Returns:
        tuple: ({'amount': Decimal, 'comment': str or None}, None) or (None, error_message)
    """
    if not isinstance(data, dict):
        return None, "No data provided"

    amount, error = parse_amount(data.get('amount'))
    if error:
        return None, error

    comment = data.get('comment')
    if comment is not None:
        if not isinstance(comment, str):
            return None, "Comment must be text"
        comment = comment.strip() or None
        if comment and len(comment) > MAX_COMMENT_LENGTH:
            return None, f"Comment must be at most {MAX_COMMENT_LENGTH} characters"

    return {'amount': amount, 'comment': comment}, None
