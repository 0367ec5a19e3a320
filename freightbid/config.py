import os
from datetime import timedelta

from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(os.path.dirname(basedir), '.env'))


def _env_flag(name, default='False'):
    return os.environ.get(name, default).lower() in ('true', '1', 't', 'yes')


def _normalize_database_url(database_url):
    """Heroku-style URLs use postgres://, which SQLAlchemy no longer accepts."""
    if database_url and database_url.startswith('postgres://'):
        return database_url.replace('postgres://', 'postgresql://', 1)
    return database_url


class Config:
    """Base configuration shared by every environment"""

    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    SQLALCHEMY_DATABASE_URI = None  # Set in __init__
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
    }

    # Session cookie
    PERMANENT_SESSION_LIFETIME = timedelta(days=1)
    REMEMBER_COOKIE_DURATION = timedelta(days=1)
    SESSION_COOKIE_NAME = 'freightbid_session'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SECURE = _env_flag('SESSION_COOKIE_SECURE')
    SESSION_COOKIE_SAMESITE = 'Lax'

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get('CORS_ORIGINS', 'http://localhost:5173,http://localhost:3000').split(',')
        if origin.strip()
    ]
    CORS_SUPPORTS_CREDENTIALS = True

    # Lane notifications
    MAIL_ENABLED = _env_flag('MAIL_ENABLED', 'True')
    SENDGRID_API_KEY = os.environ.get('SENDGRID_API_KEY')
    EMAIL_FROM = os.environ.get('EMAIL_FROM', 'noreply@freightbid.local')
    EMAIL_FROM_NAME = os.environ.get('EMAIL_FROM_NAME', 'Freight Lane Tenders')
    FRONTEND_URL = os.environ.get('FRONTEND_URL', 'http://localhost:5173')

    # Validity timestamps without an offset are read in this zone
    TIMEZONE = os.environ.get('TIMEZONE', 'UTC')

    SEED_DEFAULT_USERS = _env_flag('SEED_DEFAULT_USERS', 'True')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    def __init__(self):
        self.SQLALCHEMY_DATABASE_URI = self.get_database_url()

    @staticmethod
    def get_database_url():
        database_url = _normalize_database_url(os.environ.get('DATABASE_URL'))
        if database_url:
            return database_url
        return 'sqlite:///' + os.path.join(os.path.dirname(basedir), 'instance', 'freightbid.db')


class DevelopmentConfig(Config):
    DEBUG = True

    def __init__(self):
        super().__init__()
        dev_database_url = _normalize_database_url(os.environ.get('DEV_DATABASE_URL'))
        if dev_database_url:
            self.SQLALCHEMY_DATABASE_URI = dev_database_url


class ProductionConfig(Config):
    DEBUG = False

    def __init__(self):
        super().__init__()

        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable is required for production")
        self.SECRET_KEY = secret_key

        database_url = _normalize_database_url(os.environ.get('DATABASE_URL'))
        if not database_url:
            raise ValueError("DATABASE_URL environment variable is required for production")
        self.SQLALCHEMY_DATABASE_URI = database_url

        self.SESSION_COOKIE_SECURE = True
        self.SQLALCHEMY_ENGINE_OPTIONS = {
            'pool_recycle': 3600,
            'pool_pre_ping': True,
            'pool_size': 10,
            'max_overflow': 20,
            'pool_timeout': 30,
        }


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    MAIL_ENABLED = False
    SEED_DEFAULT_USERS = False

    def __init__(self):
        super().__init__()
        self.SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
        self.SQLALCHEMY_ENGINE_OPTIONS = {}
        self.CORS_ORIGINS = ['*']


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig,
}


def get_config_name():
    """Detect the environment from FLASK_ENV, falling back on CI markers"""
    flask_env = os.environ.get('FLASK_ENV', '').lower()
    if flask_env in config:
        return flask_env

    if os.environ.get('TESTING') or os.environ.get('CI'):
        return 'testing'

    return 'development'


__all__ = ['config', 'get_config_name']
