# freightbid/models/__init__.py

from .base import db, utcnow, register_sqlite_functions

# Users first: lanes and bids both reference users.id
from .user import User, ROLES, ROLE_ADMIN, ROLE_FORWARDER
from .lane import Lane, LANE_STATUSES, BIDDABLE_STATUSES, VEHICLE_TYPES
from .bid import Bid

__all__ = [
    'db',
    'utcnow',
    'register_sqlite_functions',
    'User',
    'Lane',
    'Bid',
    'ROLES',
    'ROLE_ADMIN',
    'ROLE_FORWARDER',
    'LANE_STATUSES',
    'BIDDABLE_STATUSES',
    'VEHICLE_TYPES',
]
