# freightbid/routes/auth.py
import logging

from flask import Blueprint, request, jsonify, session
from flask_login import login_user, logout_user, login_required, current_user
from sqlalchemy.exc import IntegrityError

from ..middleware.auth import admin_required
from ..models import db, User, ROLE_FORWARDER
from ..services.validation import validate_registration

auth_bp = Blueprint('auth', __name__)
logger = logging.getLogger(__name__)


@auth_bp.route('/register', methods=['POST'])
@login_required
@admin_required
def register():
    """Create a forwarder account (admin only). Any requested role is ignored."""
    try:
        values, error = validate_registration(request.get_json(silent=True))
        if error:
            logger.info(f"Registration rejected: {error}")
            return jsonify({'error': error}), 400

        if User.query.filter_by(username=values['username']).first():
            return jsonify({'error': 'Username already exists'}), 400
        if User.query.filter_by(email=values['email']).first():
            return jsonify({'error': 'Email already exists'}), 400

        user = User(role=ROLE_FORWARDER, **values)
        db.session.add(user)
        db.session.commit()

        logger.info(f"Admin '{current_user.username}' created forwarder '{user.username}' (ID: {user.id})")
        return jsonify(user.to_dict()), 201

    except IntegrityError:
        # Lost a race with a concurrent registration for the same username/email
        db.session.rollback()
        return jsonify({'error': 'Username or email already exists'}), 400
    except Exception as e:
        db.session.rollback()
        logger.exception(f"Error registering user: {e}")
        return jsonify({'error': 'Failed to register user'}), 500


@auth_bp.route('/login', methods=['POST'])
def login():
    try:
        data = request.get_json(silent=True) or {}
        username = data.get('username')
        password = data.get('password')

        if not isinstance(username, str) or not isinstance(password, str) or not username.strip() or not password:
            return jsonify({'error': 'Username and password are required'}), 400

        user = User.query.filter_by(username=username.strip()).first()
        if not user or not user.check_password(password):
            logger.warning(f"Login failed for username '{username}'")
            return jsonify({'error': 'Invalid credentials'}), 401

        session.permanent = True
        login_user(user)
        logger.info(f"Login successful for user '{user.username}' (ID: {user.id})")
        return jsonify(user.to_dict())

    except Exception as e:
        logger.exception(f"Unexpected login error: {e}")
        return jsonify({'error': 'Login failed due to server error'}), 500


@auth_bp.route('/logout', methods=['POST'])
def logout():
    try:
        if current_user.is_authenticated:
            logger.info(f"Logout for user '{current_user.username}' (ID: {current_user.id})")
        logout_user()
        session.clear()
        return jsonify({'message': 'Logged out successfully'})
    except Exception as e:
        logger.exception(f"Logout error: {e}")
        return jsonify({'error': 'Failed to logout'}), 500


@auth_bp.route('/me', methods=['GET'])
@login_required
def get_current_user():
    return jsonify(current_user.to_dict())


@auth_bp.route('/users', methods=['GET'])
@login_required
@admin_required
def get_users():
    """All accounts, passwords included, for the admin user list."""
    try:
        users = User.query.order_by(User.id).all()
        return jsonify([user.to_dict(include_password=True) for user in users])
    except Exception as e:
        logger.exception(f"Error fetching users: {e}")
        return jsonify({'error': 'Failed to fetch users'}), 500
