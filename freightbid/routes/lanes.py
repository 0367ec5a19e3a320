# freightbid/routes/lanes.py
import re
import logging

from flask import Blueprint, current_app, request, jsonify
from flask_login import login_required, current_user

from ..middleware.auth import admin_required, forwarder_required
from ..models import db, Lane, User, ROLE_FORWARDER
from ..services import lane_queries
from ..services.amounts import amount_to_json
from ..services.email_service import get_email_service
from ..services.validation import validate_lane_payload, validate_bid_payload, check_validity_window

lanes_bp = Blueprint('lanes', __name__)
logger = logging.getLogger(__name__)

LANE_ID_PATTERN = re.compile(r'^\d+$')
MAX_LANE_ID = 2 ** 31 - 1


def parse_lane_id(raw):
    """Lane id from the URL, or None when it is not a non-negative integer."""
    if raw is None or not LANE_ID_PATTERN.match(raw):
        return None
    lane_id = int(raw)
    if lane_id > MAX_LANE_ID:
        return None
    return lane_id


def invalid_lane_id():
    return jsonify({'error': 'Invalid lane ID'}), 400


def lane_not_found():
    return jsonify({'error': 'Lane not found'}), 404


def notify_forwarders(lane):
    """Tell every forwarder about a new lane. Failures never reach the caller."""
    try:
        emails = [
            email for (email,) in
            db.session.query(User.email).filter(User.role == ROLE_FORWARDER).all()
        ]
        if emails:
            get_email_service(current_app).send_lane_notification(emails, lane)
    except Exception as e:
        # The lane is already committed; only the notification work is discarded
        db.session.rollback()
        logger.error(f"Failed to send lane {lane.id} notifications: {e}")


@lanes_bp.route('', methods=['GET'])
@login_required
def get_lanes():
    """Lanes matching the query filters with their lowest bid and bid count"""
    try:
        filters = lane_queries.LaneFilters.from_args(request.args)
        lanes = lane_queries.get_lanes(filters)
        return jsonify([summary.to_dict() for summary in lanes])
    except Exception as e:
        logger.exception(f"Error retrieving lanes: {e}")
        return jsonify({'error': 'Failed to retrieve lanes'}), 500


@lanes_bp.route('/<lane_id>', methods=['GET'])
@login_required
def get_lane(lane_id):
    parsed_id = parse_lane_id(lane_id)
    if parsed_id is None:
        return invalid_lane_id()

    try:
        summary = lane_queries.get_lane_summary(parsed_id)
        if summary is None:
            return lane_not_found()
        return jsonify(summary.to_dict())
    except Exception as e:
        logger.exception(f"Error retrieving lane {lane_id}: {e}")
        return jsonify({'error': 'Failed to retrieve lane'}), 500


@lanes_bp.route('', methods=['POST'])
@login_required
@admin_required
def create_lane():
    """Publish a lane and notify forwarders"""
    try:
        values, error = validate_lane_payload(
            request.get_json(silent=True),
            tz_name=current_app.config.get('TIMEZONE'),
        )
        if error:
            logger.info(f"Lane creation rejected: {error}")
            return jsonify({'error': error}), 400

        lane = Lane(created_by=current_user.id, **values)
        db.session.add(lane)
        db.session.commit()
        logger.info(f"Lane {lane.id} '{lane.bid_name}' created by '{current_user.username}'")
    except Exception as e:
        db.session.rollback()
        logger.exception(f"Error creating lane: {e}")
        return jsonify({'error': 'Failed to create lane'}), 500

    notify_forwarders(lane)
    return jsonify(lane.to_dict()), 201


@lanes_bp.route('/<lane_id>', methods=['PUT'])
@login_required
@admin_required
def update_lane(lane_id):
    parsed_id = parse_lane_id(lane_id)
    if parsed_id is None:
        return invalid_lane_id()

    try:
        lane = db.session.get(Lane, parsed_id)
        if lane is None:
            return lane_not_found()

        values, error = validate_lane_payload(
            request.get_json(silent=True),
            partial=True,
            tz_name=current_app.config.get('TIMEZONE'),
        )
        if error:
            return jsonify({'error': error}), 400

        valid, error = check_validity_window(
            values.get('valid_from', lane.valid_from),
            values.get('valid_until', lane.valid_until),
        )
        if not valid:
            return jsonify({'error': error}), 400

        for column, value in values.items():
            setattr(lane, column, value)
        db.session.commit()

        logger.info(f"Lane {lane.id} updated by '{current_user.username}': {sorted(values)}")
        return jsonify(lane.to_dict())
    except Exception as e:
        db.session.rollback()
        logger.exception(f"Error updating lane {lane_id}: {e}")
        return jsonify({'error': 'Failed to update lane'}), 500


@lanes_bp.route('/<lane_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_lane(lane_id):
    """Delete a lane together with every bid placed on it"""
    parsed_id = parse_lane_id(lane_id)
    if parsed_id is None:
        return invalid_lane_id()

    try:
        lane = db.session.get(Lane, parsed_id)
        if lane is None:
            return lane_not_found()

        removed_bids = lane_queries.delete_lane(lane)
        return jsonify({
            'message': 'Lane deleted successfully',
            'deletedBids': removed_bids,
        })
    except Exception as e:
        db.session.rollback()
        logger.exception(f"Error deleting lane {lane_id}: {e}")
        return jsonify({'error': 'Failed to delete lane'}), 500


@lanes_bp.route('/<lane_id>/bids', methods=['GET'])
@login_required
@admin_required
def get_lane_bids(lane_id):
    """All bids on a lane with bidder details, lowest amount first"""
    parsed_id = parse_lane_id(lane_id)
    if parsed_id is None:
        return invalid_lane_id()

    try:
        if db.session.get(Lane, parsed_id) is None:
            return lane_not_found()

        bids = lane_queries.get_bids_for_lane(parsed_id)
        return jsonify([entry.to_dict() for entry in bids])
    except Exception as e:
        logger.exception(f"Error retrieving bids for lane {lane_id}: {e}")
        return jsonify({'error': 'Failed to retrieve bids'}), 500


@lanes_bp.route('/<lane_id>/bids', methods=['POST'])
@login_required
@forwarder_required
def submit_bid(lane_id):
    parsed_id = parse_lane_id(lane_id)
    if parsed_id is None:
        return invalid_lane_id()

    try:
        lane = db.session.get(Lane, parsed_id)
        if lane is None:
            return lane_not_found()

        values, error = validate_bid_payload(request.get_json(silent=True))
        if error:
            logger.info(f"Bid on lane {parsed_id} by '{current_user.username}' rejected: {error}")
            return jsonify({'error': error}), 400

        if not lane.accepts_bids:
            logger.info(f"Bid on lane {parsed_id} rejected: lane is {lane.status}")
            return jsonify({'error': 'Cannot bid on inactive lanes'}), 400

        bid = lane_queries.create_bid(lane, current_user, values['amount'], values['comment'])
        return jsonify(bid.to_dict()), 201
    except Exception as e:
        db.session.rollback()
        logger.exception(f"Error submitting bid on lane {lane_id}: {e}")
        return jsonify({'error': 'Failed to submit bid'}), 500


@lanes_bp.route('/<lane_id>/min-bid', methods=['GET'])
@login_required
def get_min_bid(lane_id):
    parsed_id = parse_lane_id(lane_id)
    if parsed_id is None:
        return invalid_lane_id()

    try:
        if db.session.get(Lane, parsed_id) is None:
            return lane_not_found()

        lowest = lane_queries.get_lowest_bid_for_lane(parsed_id)
        return jsonify({'minBid': amount_to_json(lowest)})
    except Exception as e:
        logger.exception(f"Error retrieving minimum bid for lane {lane_id}: {e}")
        return jsonify({'error': 'Failed to retrieve minimum bid'}), 500
