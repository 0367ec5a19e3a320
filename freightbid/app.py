import os
import logging

from flask import Flask, request, jsonify
from flask_cors import CORS
from flask_login import LoginManager

from . import __version__
from .config import config, get_config_name
from .models import db, User, register_sqlite_functions
from .routes import BLUEPRINTS
from .services.email_service import init_email_service
from .services.seed import seed_default_users


def create_app(config_name=None):
    """
    Application factory: configuration, database, CORS, session login,
    blueprints and JSON error handlers.
    """
    if config_name is None:
        config_name = get_config_name()

    app = Flask(__name__)

    try:
        config_instance = config[config_name]()
        app.config.from_object(config_instance)
    except Exception as config_error:
        app.logger.error(f"Configuration loading failed: {config_error}")
        raise

    _configure_logging(app, config_name)
    app.logger.info(f"Configuration loaded for {config_name} environment")

    db_uri = app.config.get('SQLALCHEMY_DATABASE_URI', '')
    if db_uri.startswith('sqlite:///') and ':memory:' not in db_uri:
        try:
            os.makedirs(os.path.dirname(db_uri[len('sqlite:///'):]), exist_ok=True)
        except OSError as e:
            app.logger.warning(f"Could not create database directory: {e}")

    db.init_app(app)
    with app.app_context():
        if db.engine.dialect.name == 'sqlite':
            register_sqlite_functions(db.engine)

    CORS(app,
         origins=app.config.get('CORS_ORIGINS', []),
         supports_credentials=app.config.get('CORS_SUPPORTS_CREDENTIALS', True),
         methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
         allow_headers=['Content-Type', 'X-Requested-With', 'Accept', 'Origin'])

    login_manager = LoginManager()
    login_manager.init_app(app)
    login_manager.session_protection = 'basic'

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        """JSON 401 instead of a redirect to a login page"""
        app.logger.warning(f"Unauthorized access attempt to {request.path} from {request.remote_addr}")
        return jsonify({'error': 'Authentication required'}), 401

    @login_manager.user_loader
    def load_user(user_id):
        # A session for a user that no longer exists resolves to anonymous
        try:
            return db.session.get(User, int(user_id))
        except (ValueError, TypeError) as e:
            app.logger.warning(f"Invalid user_id in session: {user_id} - {e}")
            return None

    init_email_service(app)

    for blueprint, url_prefix in BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=url_prefix)
        app.logger.debug(f"Registered {blueprint.name} blueprint at {url_prefix}")

    @app.route('/')
    def index():
        return jsonify({
            'message': 'Freight Lane Tenders API',
            'status': 'running',
            'version': __version__,
            'environment': config_name,
            'endpoints': {
                'health': '/api/health',
                'auth': ['/api/login', '/api/logout', '/api/me', '/api/register', '/api/users'],
                'lanes': '/api/lanes',
                'bid_history': '/api/user/bids',
            },
        })

    _register_error_handlers(app)

    with app.app_context():
        db.create_all()
        if app.config.get('SEED_DEFAULT_USERS'):
            seed_default_users()

    app.logger.info(f"Freight Lane Tenders API created ({len(list(app.url_map.iter_rules()))} routes)")
    return app


def _configure_logging(app, config_name):
    if app.debug:
        app.logger.setLevel(logging.DEBUG)
    elif config_name == 'production':
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s %(name)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        root = logging.getLogger()
        root.addHandler(handler)
        root.setLevel(app.config.get('LOG_LEVEL', 'INFO'))
        app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))
    else:
        app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))


def _register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'error': 'Not Found',
            'message': f'The requested endpoint {request.path} does not exist',
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'error': 'Method Not Allowed',
            'message': f'The method {request.method} is not allowed for endpoint {request.path}',
        }), 405

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f"Internal server error: {error}")
        return jsonify({
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred. Please try again later.',
        }), 500
