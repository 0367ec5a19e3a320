# freightbid/routes/bids.py
import logging

from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from ..services import lane_queries

bids_bp = Blueprint('bids', __name__)
logger = logging.getLogger(__name__)


@bids_bp.route('/bids', methods=['GET'])
@login_required
def get_user_bids():
    """Bid history of the logged-in user, most recent first, with lane snapshots"""
    try:
        history = lane_queries.get_user_bid_history(current_user)
        return jsonify([entry.to_dict() for entry in history])
    except Exception as e:
        logger.exception(f"Error retrieving bid history for user {current_user.id}: {e}")
        return jsonify({'error': 'Failed to retrieve bid history'}), 500
