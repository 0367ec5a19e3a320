# freightbid/services/seed.py
import logging

from ..models import db, User, ROLE_ADMIN, ROLE_FORWARDER

logger = logging.getLogger(__name__)

DEFAULT_USERS = [
    {
        'username': 'admin',
        'password': 'admin123',
        'email': 'admin@freightbid.local',
        'company_name': 'Admin Company',
        'role': ROLE_ADMIN,
    },
    {
        'username': 'user',
        'password': 'user123',
        'email': 'user@freightbid.local',
        'company_name': 'Freight Co.',
        'role': ROLE_FORWARDER,
    },
]


def seed_default_users():
    """Create one admin and one forwarder when the users table is empty."""
    if User.query.count() > 0:
        return 0

    for values in DEFAULT_USERS:
        db.session.add(User(**values))
    db.session.commit()
    logger.info(f"Seeded {len(DEFAULT_USERS)} default users")
    return len(DEFAULT_USERS)
