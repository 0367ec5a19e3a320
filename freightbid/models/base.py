# freightbid/models/base.py

from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event

db = SQLAlchemy()


def utcnow():
    """Naive UTC timestamp; every DateTime column stores UTC without an offset."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _casefold(value):
    return value.casefold() if value is not None else None


def register_sqlite_functions(engine):
    """
    SQLite's LIKE and lower() fold ASCII letters only, so "münchen" never
    matches "MÜNCHEN". Expose Python's casefold() as SQL ``casefold(text)``
    on every new connection.
    """
    @event.listens_for(engine, 'connect')
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.create_function('casefold', 1, _casefold, deterministic=True)
