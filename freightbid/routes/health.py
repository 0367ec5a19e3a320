from flask import Blueprint, jsonify, current_app
from sqlalchemy import text

from ..models import db, utcnow
from ..services.date_utils import format_datetime_for_response

health_bp = Blueprint('health', __name__)


def _database_type(db_url):
    db_url = (db_url or '').lower()
    if 'sqlite' in db_url:
        return 'SQLite'
    if 'postgres' in db_url:
        return 'PostgreSQL'
    return 'Unknown'


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Service health: database connectivity plus the configuration the
    notification side effect depends on. 503 when the database is down.
    """
    health_status = {
        'status': 'healthy',
        'app': 'Freight Lane Tenders API',
        'timestamp': format_datetime_for_response(utcnow()),
        'checks': {},
    }

    try:
        db.session.execute(text('SELECT 1'))
        health_status['checks']['database'] = {
            'status': 'healthy',
            'type': _database_type(current_app.config.get('SQLALCHEMY_DATABASE_URI')),
            'connected': True,
        }
    except Exception as db_error:
        db.session.rollback()
        current_app.logger.error(f"Database health check failed: {db_error}")
        health_status['checks']['database'] = {
            'status': 'unhealthy',
            'connected': False,
        }
        health_status['status'] = 'unhealthy'

    email_service = current_app.extensions.get('email_service')
    health_status['checks']['mail'] = {
        'configured': bool(email_service and email_service.enabled),
    }

    status_code = 200 if health_status['status'] == 'healthy' else 503
    return jsonify(health_status), status_code
