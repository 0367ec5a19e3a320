# freightbid/middleware/auth.py

import logging
from functools import wraps

from flask import jsonify, request
from flask_login import current_user

from ..models import ROLE_ADMIN, ROLE_FORWARDER

logger = logging.getLogger(__name__)


def role_required(role, message):
    """
    Build a decorator that lets only users with ``role`` through.
    Place it AFTER @login_required.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                logger.warning(f"Unauthenticated access attempt to {request.endpoint}")
                return jsonify({'error': 'Authentication required'}), 401

            if current_user.role != role:
                logger.warning(
                    f"User '{current_user.username}' (role: {current_user.role}) "
                    f"refused access to {request.endpoint}"
                )
                return jsonify({'error': message}), 403

            return f(*args, **kwargs)
        return decorated_function
    return decorator


# User management, lane administration and the full bid list of a lane
admin_required = role_required(ROLE_ADMIN, 'Admin access required')

# Only freight forwarders bid; admins are refused as well
forwarder_required = role_required(ROLE_FORWARDER, 'Only freight forwarders can submit bids')
